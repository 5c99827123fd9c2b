# The version must be the same as the one defined in `pyproject.toml`.
__version__: str = "2.0.0"

__all__ = ["__version__"]

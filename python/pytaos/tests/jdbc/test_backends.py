"""Tests for connection openers."""

from __future__ import annotations

import importlib.abc
import importlib.machinery
import importlib.util
import sys
import types

import pytest

from pytaos.jdbc import backends
from pytaos.jdbc.backends import NativeOpener, RestOpener, get_opener
from pytaos.jdbc.backends.base import ConnectionOpener
from pytaos.jdbc.backends.rest import DEFAULT_REST_PORT
from pytaos.jdbc.exceptions import BackendNotAvailableError, ConnectionOpenError
from pytaos.jdbc.jdbc_options import merge_layers

PASSWORD = "taosdata"  # noqa: S105


class FakeError(Exception):
    """Stand-in for the connector's base error."""


def _fake_module(name, connect):
    module = types.ModuleType(name)
    module.__spec__ = importlib.machinery.ModuleSpec(name, None)
    module.connect = connect
    module.Error = FakeError
    return module


@pytest.fixture
def connect_calls():
    return []


@pytest.fixture
def fake_taos(monkeypatch, connect_calls):
    def _connect(**kwargs):
        connect_calls.append(kwargs)
        return "native-session"

    module = _fake_module("taos", _connect)
    monkeypatch.setitem(sys.modules, "taos", module)
    return module


@pytest.fixture
def fake_taosrest(monkeypatch, connect_calls):
    def _connect(**kwargs):
        connect_calls.append(kwargs)
        return "rest-session"

    module = _fake_module("taosrest", _connect)
    monkeypatch.setitem(sys.modules, "taosrest", module)
    return module


class _MissingClientLibraryFinder(importlib.abc.MetaPathFinder, importlib.abc.Loader):
    """Finder whose ``taos`` module fails to import the way taospy does without libtaos."""

    def find_spec(self, fullname, path, target=None):
        if fullname == "taos":
            return importlib.util.spec_from_loader(fullname, self)
        return None

    def create_module(self, spec):
        return None

    def exec_module(self, module):
        msg = "unable to load taos client library: libtaos.so: cannot open shared object file"
        raise FakeError(msg)


@pytest.fixture
def missing_client_library(monkeypatch):
    monkeypatch.delitem(sys.modules, "taos", raising=False)
    monkeypatch.setattr(sys, "meta_path", [_MissingClientLibraryFinder(), *sys.meta_path])


class TestNativeOpener:
    """Test the taospy native opener."""

    def test_open_maps_properties(self, fake_taos, connect_calls):
        """Resolved properties become taos.connect keyword arguments."""
        config = merge_layers(
            {"timezone": "UTC"},
            {"host": "node1", "port": "6030", "dbname": "log", "user": "root", "password": PASSWORD},
            {"cfgdir": "/etc/taos"},
        )

        session = NativeOpener().open(config)

        assert session == "native-session"
        assert connect_calls == [
            {
                "host": "node1",
                "user": "root",
                "password": PASSWORD,
                "database": "log",
                "config": "/etc/taos",
                "timezone": "UTC",
                "port": 6030,
            }
        ]

    def test_absent_fields_not_passed(self, fake_taos, connect_calls):
        """Absent properties are left to the connector's own defaults."""
        NativeOpener().open(merge_layers({}, {}, {"user": "root"}))

        assert connect_calls == [{"user": "root"}]

    def test_non_numeric_port(self, fake_taos):
        """A textual port that is not a number fails at open time."""
        config = merge_layers({}, {"host": "node1", "port": "abc"}, {})

        with pytest.raises(ConnectionOpenError, match="port must be an integer"):
            NativeOpener().open(config)

    def test_connector_error_wrapped(self, fake_taos):
        """Connector errors surface as ConnectionOpenError."""

        def _broken(**kwargs):
            msg = "Unable to establish connection"
            raise FakeError(msg)

        fake_taos.connect = _broken

        with pytest.raises(ConnectionOpenError, match="Unable to establish connection"):
            NativeOpener().open(merge_layers({}, {"host": "node1"}, {}))

    def test_client_library_load_failure(self, missing_client_library):
        """A taos import that fails to load libtaos means the opener is unavailable."""
        with pytest.raises(BackendNotAvailableError, match="cannot load the TDengine client library"):
            NativeOpener()

    def test_name_and_availability(self, fake_taos):
        opener = NativeOpener()

        assert opener.get_name() == "Native"
        assert opener.is_available() is True
        assert isinstance(opener, ConnectionOpener)


class TestRestOpener:
    """Test the taosAdapter REST opener."""

    def test_open_builds_url(self, fake_taosrest, connect_calls):
        """Host and port become the adapter URL."""
        config = merge_layers({}, {"host": "node1", "port": "6041", "dbname": "log", "user": "root"}, {})

        session = RestOpener().open(config)

        assert session == "rest-session"
        assert connect_calls == [{"url": "http://node1:6041", "user": "root", "database": "log"}]

    def test_adapter_port_replaces_config_port(self, fake_taosrest):
        """An explicit adapter port wins over the resolved native port."""
        config = merge_layers({}, {"host": "node1", "port": "6030"}, {})

        assert RestOpener(adapter_port=DEFAULT_REST_PORT).build_url(config) == "http://node1:6041"

    def test_default_host_and_port(self, fake_taosrest):
        """Missing host and port fall back to localhost:6041."""
        assert RestOpener().build_url(merge_layers({}, {}, {})) == "http://localhost:6041"

    def test_connector_error_wrapped(self, fake_taosrest):
        """Connector errors surface as ConnectionOpenError."""

        def _broken(**kwargs):
            msg = "connection refused"
            raise FakeError(msg)

        fake_taosrest.connect = _broken

        with pytest.raises(ConnectionOpenError, match="connection refused"):
            RestOpener().open(merge_layers({}, {}, {}))


class _Unavailable:
    def __init__(self):
        msg = "not installed"
        raise BackendNotAvailableError(msg)


class _Available:
    def get_name(self):
        return "Stub"

    def is_available(self):
        return True


class TestGetOpener:
    """Test opener selection."""

    def test_invalid_engine(self):
        with pytest.raises(ValueError, match="Invalid engine"):
            get_opener("odbc")

    def test_requested_opener_returned(self, monkeypatch):
        monkeypatch.setattr(backends, "NativeOpener", _Available)

        assert isinstance(get_opener("native"), _Available)

    def test_fallback_to_other_opener(self, monkeypatch, caplog):
        monkeypatch.setattr(backends, "NativeOpener", _Unavailable)
        monkeypatch.setattr(backends, "RestOpener", _Available)

        opener = get_opener("NATIVE")

        assert isinstance(opener, _Available)
        assert "not available" in caplog.text

    def test_no_fallback(self, monkeypatch):
        monkeypatch.setattr(backends, "NativeOpener", _Unavailable)
        monkeypatch.setattr(backends, "RestOpener", _Available)

        with pytest.raises(BackendNotAvailableError, match="Tried: _Unavailable"):
            get_opener("native", auto_fallback=False)

    def test_nothing_installed(self, monkeypatch):
        monkeypatch.setattr(backends, "NativeOpener", _Unavailable)
        monkeypatch.setattr(backends, "RestOpener", _Unavailable)

        with pytest.raises(BackendNotAvailableError, match="pip install taospy"):
            get_opener("rest")

    def test_native_falls_back_to_rest_without_client_library(self, missing_client_library, fake_taosrest):
        """A broken native client library falls back to REST on the adapter port."""
        opener = get_opener("native")

        assert isinstance(opener, RestOpener)
        assert opener.adapter_port == DEFAULT_REST_PORT
        config = merge_layers({}, {"host": "node1", "port": "6030"}, {})
        assert opener.build_url(config) == "http://node1:6041"

    def test_requested_rest_keeps_config_port(self, fake_taosrest):
        """Asking for REST directly uses the resolved port as the adapter port."""
        opener = get_opener("rest")

        assert isinstance(opener, RestOpener)
        assert opener.adapter_port is None
        assert opener.build_url(merge_layers({}, {"host": "node1", "port": "7041"}, {})) == "http://node1:7041"

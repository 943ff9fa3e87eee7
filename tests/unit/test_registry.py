"""Tests for the loader registry."""

import pytest

from pgintrospect.config import LoaderConfig
from pgintrospect.exceptions import UnknownBackendError
from pgintrospect.loader import PostgresLoader
from pgintrospect.registry import LoaderRegistry, default_registry


class DummyLoader:
    def __init__(self, conn, config):
        self.conn = conn
        self.config = config


def test_default_registry_has_postgres():
    """Should register the PostgreSQL loader."""
    registry = default_registry()

    assert registry.list_backends() == ["postgres"]
    assert registry.get("postgres") is PostgresLoader


def test_default_registries_are_independent():
    """Should not share registrations between registries."""
    first = default_registry()
    first.register("dummy", DummyLoader)

    assert "dummy" not in default_registry().list_backends()


def test_create_loader(fake_conn):
    """Should build a loader with the given connection and config."""
    config = LoaderConfig(schema_name="sales")

    loader = default_registry().create("postgres", fake_conn, config)

    assert isinstance(loader, PostgresLoader)
    assert loader.conn is fake_conn
    assert loader.schema() == "sales"


def test_create_uses_default_config(fake_conn):
    registry = LoaderRegistry()
    registry.register("dummy", DummyLoader)

    loader = registry.create("dummy", fake_conn)

    assert isinstance(loader.config, LoaderConfig)


def test_duplicate_registration():
    """Should refuse to replace a registered backend."""
    registry = default_registry()

    with pytest.raises(ValueError, match="already registered"):
        registry.register("postgres", DummyLoader)


def test_unknown_backend():
    """Should list the available backends in the error."""
    with pytest.raises(UnknownBackendError, match="Available backends: postgres"):
        default_registry().get("sqlite")

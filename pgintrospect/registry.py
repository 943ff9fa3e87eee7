"""Registry mapping backend names to loader factories.

A generator builds a registry at startup and passes it to whatever needs to
pick a backend; there is no module-level registry to mutate.
"""

from typing import Any, Callable

from psycopg import Connection

from pgintrospect.config import LoaderConfig
from pgintrospect.exceptions import UnknownBackendError
from pgintrospect.loader import PostgresLoader

LoaderFactory = Callable[[Connection, LoaderConfig], Any]


class LoaderRegistry:
    """Registry of loader factories by backend name."""

    def __init__(self):
        self._factories: dict[str, LoaderFactory] = {}

    def register(self, name: str, factory: LoaderFactory) -> None:
        """
        Register a loader factory.

        Args:
            name: Backend name (e.g. "postgres")
            factory: Callable taking (connection, config) and returning a loader

        Raises:
            ValueError: If a loader is already registered under name
        """
        if name in self._factories:
            raise ValueError(f"Loader already registered for backend '{name}'")
        self._factories[name] = factory

    def get(self, name: str) -> LoaderFactory:
        """
        Get loader factory by backend name.

        Raises:
            UnknownBackendError: If no loader is registered under name
        """
        try:
            return self._factories[name]
        except KeyError:
            raise UnknownBackendError(name, self.list_backends()) from None

    def create(self, name: str, conn: Connection, config: LoaderConfig | None = None) -> Any:
        """Create a loader for a backend."""
        return self.get(name)(conn, config or LoaderConfig())

    def list_backends(self) -> list[str]:
        return list(self._factories.keys())


def default_registry() -> LoaderRegistry:
    """Create a registry with the built-in loaders registered."""
    registry = LoaderRegistry()
    registry.register(PostgresLoader.name, PostgresLoader)
    return registry

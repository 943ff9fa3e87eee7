"""
pgintrospect - PostgreSQL schema introspection for code generators

Discovers tables, views, columns, keys, indexes, enums, procedures and ad-hoc
query result shapes, and translates PostgreSQL types into canonical type
descriptors.
"""

from pgintrospect.config import LoaderConfig
from pgintrospect.exceptions import (
    IndexColumnOrderError,
    PgIntrospectError,
    QueryIntrospectionError,
    UnknownBackendError,
)
from pgintrospect.indexes import order_index_columns
from pgintrospect.loader import PostgresLoader
from pgintrospect.models import (
    Column,
    IndexColumn,
    RelationKind,
    Table,
    TypeDescriptor,
    native_code,
)
from pgintrospect.query import strip_query
from pgintrospect.registry import LoaderRegistry, default_registry
from pgintrospect.types import translate

__version__ = "0.1.0"

__all__ = [
    "Column",
    "IndexColumn",
    "IndexColumnOrderError",
    "LoaderConfig",
    "LoaderRegistry",
    "PgIntrospectError",
    "PostgresLoader",
    "QueryIntrospectionError",
    "RelationKind",
    "Table",
    "TypeDescriptor",
    "UnknownBackendError",
    "default_registry",
    "native_code",
    "order_index_columns",
    "strip_query",
    "translate",
]

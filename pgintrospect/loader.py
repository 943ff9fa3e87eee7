"""PostgreSQL loader: the operations a code generator backend consumes."""

import logging

import psycopg
from psycopg import Connection

from pgintrospect import catalog
from pgintrospect.config import LoaderConfig
from pgintrospect.indexes import order_index_columns
from pgintrospect.models import (
    Column,
    Enum,
    EnumValue,
    ForeignKey,
    Index,
    IndexColumn,
    Proc,
    ProcParam,
    RelationKind,
    Table,
    TypeDescriptor,
    native_code,
)
from pgintrospect.query import (
    DescribeStrategy,
    QueryShapeStrategy,
    TemporaryViewStrategy,
    strip_query,
)
from pgintrospect.types import translate

logger = logging.getLogger(__name__)


class PostgresLoader:
    """
    Introspect a PostgreSQL database for code generation.

    Every listing runs against the caller's connection; nothing is cached
    between calls. Concurrent workers must each use their own loader and
    connection.
    """

    name = "postgres"

    def __init__(self, conn: Connection, config: LoaderConfig | None = None):
        """
        Initialize loader.

        Args:
            conn: PostgreSQL connection
            config: Loader configuration (defaults from environment)
        """
        self.conn = conn
        self.config = config or LoaderConfig()
        self.query_strategy = self._make_query_strategy()

    def _make_query_strategy(self) -> QueryShapeStrategy:
        if self.config.query_strategy == "describe":
            return DescribeStrategy(self.conn)
        return TemporaryViewStrategy(
            self.conn,
            lambda schema, table: catalog.list_columns(self.conn, schema, table),
            prefix=self.config.temp_view_prefix,
            drop=self.config.drop_temp_views,
        )

    def schema(self) -> str:
        """Default schema name."""
        return self.config.schema_name

    def relkind(self, kind: RelationKind) -> str:
        return native_code(kind)

    def parse_type(self, data_type: str, nullable: bool) -> TypeDescriptor:
        """Translate a type string using the configured canonical vocabulary."""
        return translate(
            data_type,
            nullable,
            package=self.config.type_package,
            legacy_timezone=self.config.legacy_timezone_mapping,
        )

    def list_tables(self, schema: str, kind: RelationKind) -> list[Table]:
        """
        List tables or views, flagging tables without a sequence.

        A table has a manual primary key unless some sequence in the schema
        belongs to it. Sequence lookup failures are logged and treated as
        "no sequences" so that the listing itself still succeeds.

        Args:
            schema: Schema name
            kind: Relation kind to list

        Returns:
            Tables in catalog order
        """
        tables = catalog.list_relations(self.conn, schema, native_code(kind))

        # savepoint keeps an open transaction usable after a failed lookup
        try:
            with self.conn.transaction():
                sequences = catalog.list_sequences(self.conn, schema)
        except psycopg.Error as e:
            logger.warning(f"Could not list sequences in schema '{schema}': {e}")
            sequences = []

        owners = {seq.table_name for seq in sequences}
        for table in tables:
            table.manual_primary_key = table.name not in owners
        return tables

    def list_columns(self, schema: str, table: str) -> list[Column]:
        """List columns of a relation with type descriptors attached."""
        columns = catalog.list_columns(
            self.conn, schema, table, include_system=self.config.enable_oids
        )
        return self._describe(columns)

    def list_foreign_keys(self, schema: str, table: str) -> list[ForeignKey]:
        return catalog.list_foreign_keys(self.conn, schema, table)

    def list_indexes(self, schema: str, table: str) -> list[Index]:
        return catalog.list_indexes(self.conn, schema, table)

    def list_index_columns(self, schema: str, table: str, index: str) -> list[IndexColumn]:
        """List index columns in the order the index declares them."""
        return order_index_columns(self.conn, schema, table, index)

    def list_enums(self, schema: str) -> list[Enum]:
        """List enum types with their labels."""
        enums = catalog.list_enums(self.conn, schema)
        for enum in enums:
            enum.values = self.list_enum_values(schema, enum.name)
        return enums

    def list_enum_values(self, schema: str, enum: str) -> list[EnumValue]:
        return catalog.list_enum_values(self.conn, schema, enum)

    def list_procs(self, schema: str) -> list[Proc]:
        return catalog.list_procs(self.conn, schema)

    def list_proc_params(self, schema: str, proc: str) -> list[ProcParam]:
        return catalog.list_proc_params(self.conn, schema, proc)

    def strip_query(self, lines: list[str], comments: list[str]) -> None:
        strip_query(lines, comments)

    def discover_query_columns(self, lines: list[str]) -> list[Column]:
        """
        Discover the result columns of an ad-hoc query.

        Raises:
            QueryIntrospectionError: If a discovery step fails
        """
        return self._describe(self.query_strategy.columns(lines))

    def _describe(self, columns: list[Column]) -> list[Column]:
        for column in columns:
            column.descriptor = self.parse_type(column.data_type, column.nullable)
        return columns

"""Ad-hoc query handling: cast stripping and result shape discovery.

Queries embedded by users have no registered result shape, so PostgreSQL is
asked for it. ``TemporaryViewStrategy`` materializes the query as a temporary
view and reads the view's columns from the catalog like any other relation;
``DescribeStrategy`` reads the result metadata of a zero-row execution
instead.
"""

import logging
import random
import re
import string
from abc import ABC, abstractmethod
from typing import Callable

import psycopg
from psycopg import Connection, sql

from pgintrospect.exceptions import QueryIntrospectionError
from pgintrospect.models import Column

logger = logging.getLogger(__name__)

# "::type AS name" casts that pin result column types for introspection
QUERY_STRIP_RE = re.compile(r"::[a-z][a-z0-9_.]+\s+AS\s+[a-z][a-z0-9_.]+", re.IGNORECASE)

TEMP_NAMESPACE_QUERY = """
    SELECT n.nspname
    FROM pg_class c
    JOIN pg_namespace n ON n.oid = c.relnamespace
    WHERE n.nspname LIKE 'pg_temp%%' AND c.relname = %s
"""

ColumnLister = Callable[[str, str], list[Column]]


def strip_query(lines: list[str], comments: list[str]) -> None:
    """
    Remove "::type AS name" casts from query lines, keeping them as comments.

    ``lines`` is modified in place. ``comments[i + 1]`` receives the cast
    removed from ``lines[i]`` (the comment emitted before line i + 1), or ""
    when the line had none.

    Args:
        lines: Query lines
        comments: Per-line comments, at least len(lines) + 1 long

    Example:
        >>> lines = ["SELECT count(*)::integer AS total", "FROM orders"]
        >>> comments = [""] * 3
        >>> strip_query(lines, comments)
        >>> lines
        ['SELECT count(*)', 'FROM orders']
        >>> comments
        ['', '::integer AS total', '']
    """
    if len(comments) < len(lines) + 1:
        raise ValueError(
            f"need {len(lines) + 1} comment slots for {len(lines)} query lines, "
            f"got {len(comments)}"
        )

    for i, line in enumerate(lines):
        match = QUERY_STRIP_RE.search(line)
        if match:
            lines[i] = line[: match.start()] + line[match.end() :]
            comments[i + 1] = match.group(0)
        else:
            comments[i + 1] = ""


def random_suffix(length: int = 16) -> str:
    """Random lowercase alphanumeric suffix for transient relation names."""
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


class QueryShapeStrategy(ABC):
    """Discover the result columns of an unregistered query."""

    @abstractmethod
    def columns(self, lines: list[str]) -> list[Column]:
        """
        Return the result columns of a query.

        Args:
            lines: Query text lines (joined with newlines)

        Returns:
            Columns without type descriptors, in result order
        """
        pass


class TemporaryViewStrategy(QueryShapeStrategy):
    """
    Create the query as a temporary view and list the view's columns.

    The view lives in the session's pg_temp_N schema and disappears with the
    session unless ``drop`` is set.
    """

    def __init__(
        self,
        conn: Connection,
        list_columns: ColumnLister,
        prefix: str = "_xo_",
        drop: bool = False,
    ):
        """
        Initialize strategy.

        Args:
            conn: PostgreSQL connection (its session owns the view)
            list_columns: Column lister taking (schema, relation)
            prefix: Temporary view name prefix
            drop: Drop the view once its columns are read
        """
        self.conn = conn
        self.list_columns = list_columns
        self.prefix = prefix
        self.drop = drop

    def columns(self, lines: list[str]) -> list[Column]:
        view_name = self.prefix + random_suffix()
        try:
            self._create_view(view_name, "\n".join(lines))
            schema = self._temp_schema(view_name)

            try:
                return self.list_columns(schema, view_name)
            except psycopg.Error as e:
                raise QueryIntrospectionError("column listing", view_name, e) from e
        finally:
            if self.drop:
                self._drop_view(view_name)

    def _create_view(self, view_name: str, query: str) -> None:
        statement = sql.SQL("CREATE TEMPORARY VIEW {} AS ({})").format(
            sql.Identifier(view_name), sql.SQL(query)
        )
        logger.debug(f"CREATE TEMPORARY VIEW {view_name} AS ({query})")
        try:
            with self.conn.cursor() as cur:
                cur.execute(statement)
        except psycopg.Error as e:
            raise QueryIntrospectionError("create view", view_name, e) from e

    def _temp_schema(self, view_name: str) -> str:
        logger.debug(f"{' '.join(TEMP_NAMESPACE_QUERY.split())} {(view_name,)!r}")
        try:
            with self.conn.cursor() as cur:
                cur.execute(TEMP_NAMESPACE_QUERY, (view_name,))
                rows = cur.fetchall()
        except psycopg.Error as e:
            raise QueryIntrospectionError("namespace lookup", view_name, e) from e

        if len(rows) != 1:
            raise QueryIntrospectionError(
                "namespace lookup",
                view_name,
                LookupError(f"expected 1 temporary namespace, found {len(rows)}"),
            )
        return rows[0][0]

    def _drop_view(self, view_name: str) -> None:
        statement = sql.SQL("DROP VIEW IF EXISTS {}").format(sql.Identifier(view_name))
        try:
            with self.conn.transaction(), self.conn.cursor() as cur:
                cur.execute(statement)
        except psycopg.Error as e:
            logger.warning(f"Could not drop temporary view '{view_name}': {e}")


class DescribeStrategy(QueryShapeStrategy):
    """
    Read result metadata from a zero-row execution of the query.

    Needs no temporary objects, but the result metadata carries neither
    nullability nor key information: every column is reported nullable and
    not part of a primary key.
    """

    def __init__(self, conn: Connection):
        self.conn = conn

    def columns(self, lines: list[str]) -> list[Column]:
        query = sql.SQL("SELECT * FROM ({}) AS _q LIMIT 0").format(sql.SQL("\n".join(lines)))
        logger.debug(f"SELECT * FROM ({' '.join(lines)}) AS _q LIMIT 0")

        columns = []
        try:
            with self.conn.cursor() as cur:
                cur.execute(query)
                description = list(cur.description or [])

                type_names = []
                for desc in description:
                    cur.execute("SELECT format_type(%s::oid, NULL)", (desc.type_code,))
                    type_names.append(cur.fetchone()[0])
        except psycopg.Error as e:
            raise QueryIntrospectionError("describe", "(result metadata)", e) from e

        for ordinal, (desc, data_type) in enumerate(zip(description, type_names), start=1):
            if desc.precision is not None:
                data_type = f"{data_type}({desc.precision},{desc.scale or 0})"
            columns.append(Column(ordinal=ordinal, name=desc.name, data_type=data_type))

        return columns

"""Pytest configuration and shared fixtures."""

import os
from dataclasses import dataclass, field
from typing import Any

import psycopg
import pytest
from psycopg import Connection, sql


@dataclass
class FakeResult:
    """Rows (and optional cursor description) returned for one execute()."""

    rows: list[tuple] = field(default_factory=list)
    description: list[Any] | None = None


@dataclass
class FakeColumnDescription:
    """Stand-in for psycopg.Column."""

    name: str
    type_code: int
    precision: int | None = None
    scale: int | None = None


def render(query: Any) -> str:
    """Render a query or psycopg.sql composition as plain text."""
    if isinstance(query, str):
        return query
    if isinstance(query, sql.Composed):
        return "".join(render(part) for part in query)
    if isinstance(query, sql.Identifier):
        return ".".join(f'"{name}"' for name in query._obj)
    return query._obj


class FakeCursor:
    def __init__(self, conn: "FakeConnection"):
        self.conn = conn
        self._result = FakeResult()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, query, params=None):
        text = render(query)
        self.conn.executed.append((text, params))
        if self.conn.aborted:
            raise psycopg.errors.InFailedSqlTransaction(
                "current transaction is aborted, commands ignored until end of transaction block"
            )
        if not self.conn.responses:
            raise AssertionError(f"Unexpected query: {text}")
        response = self.conn.responses.pop(0)
        if isinstance(response, Exception):
            if not self.conn.autocommit:
                self.conn.aborted = True
            raise response
        if not isinstance(response, FakeResult):
            response = FakeResult(rows=response)
        self._result = response

    @property
    def description(self):
        return self._result.description

    def fetchall(self):
        return list(self._result.rows)

    def fetchone(self):
        return self._result.rows[0] if self._result.rows else None


class FakeTransaction:
    """Savepoint: rolls the connection back to its state on entry if the block fails."""

    def __init__(self, conn: "FakeConnection"):
        self.conn = conn

    def __enter__(self):
        self.conn.savepoints += 1
        self._aborted = self.conn.aborted
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.conn.aborted = self._aborted
        return False


class FakeConnection:
    """
    Scripted connection: each execute() consumes the next response.

    A response is a list of row tuples, a FakeResult, or an exception to raise.
    Unless autocommit is set, a raised exception aborts the transaction and
    later queries fail until a savepoint (transaction()) rolls it back.
    """

    def __init__(self, responses: list[Any] | None = None, autocommit: bool = False):
        self.responses = list(responses or [])
        self.executed: list[tuple[str, Any]] = []
        self.autocommit = autocommit
        self.aborted = False
        self.savepoints = 0
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def cursor(self):
        return FakeCursor(self)

    def transaction(self):
        return FakeTransaction(self)


@pytest.fixture
def fake_conn() -> FakeConnection:
    """Provide an empty scripted connection (append to .responses)."""
    return FakeConnection()


@pytest.fixture
def db_conn() -> Connection:
    """
    Provide a test database connection.

    Skips unless PGINTROSPECT_TEST_DATABASE_URL points at a database the
    tests may create schemas in.
    """
    url = os.environ.get("PGINTROSPECT_TEST_DATABASE_URL")
    if not url:
        pytest.skip("PGINTROSPECT_TEST_DATABASE_URL not set")

    conn = psycopg.connect(url, autocommit=True)

    yield conn

    conn.close()


@pytest.fixture
def test_schema(db_conn: Connection) -> str:
    """
    Create a test schema with sample tables, a view, an enum and a function.

    Returns the schema name.
    """
    schema_name = "test_pgintrospect"

    with db_conn.cursor() as cur:
        cur.execute(f"DROP SCHEMA IF EXISTS {schema_name} CASCADE")
        cur.execute(f"CREATE SCHEMA {schema_name}")

        cur.execute(f"CREATE TYPE {schema_name}.order_status AS ENUM ('new', 'paid', 'shipped')")

        # natural key, no sequence
        cur.execute(f"""
            CREATE TABLE {schema_name}.orders (
                code TEXT PRIMARY KEY,
                status {schema_name}.order_status NOT NULL DEFAULT 'new',
                total NUMERIC(10,2),
                tags TEXT[],
                placed_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            )
        """)

        # serial key, backed by a sequence
        cur.execute(f"""
            CREATE TABLE {schema_name}.order_items (
                id SERIAL PRIMARY KEY,
                order_code TEXT NOT NULL REFERENCES {schema_name}.orders(code),
                line_no INTEGER NOT NULL,
                sku VARCHAR(32) NOT NULL,
                quantity SMALLINT NOT NULL
            )
        """)
        cur.execute(f"""
            CREATE UNIQUE INDEX order_items_sku_line_idx
            ON {schema_name}.order_items (sku, order_code, line_no)
        """)

        cur.execute(f"""
            CREATE VIEW {schema_name}.order_totals AS
            SELECT order_code, sum(quantity)::bigint AS quantity
            FROM {schema_name}.order_items
            GROUP BY order_code
        """)

        cur.execute(f"""
            CREATE FUNCTION {schema_name}.order_codes(min_total NUMERIC)
            RETURNS SETOF TEXT LANGUAGE sql AS
            $$ SELECT code FROM {schema_name}.orders WHERE total >= min_total $$
        """)

    yield schema_name

    with db_conn.cursor() as cur:
        cur.execute(f"DROP SCHEMA IF EXISTS {schema_name} CASCADE")

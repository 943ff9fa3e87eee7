"""Put index columns in the index's declared column order."""

from psycopg import Connection

from pgintrospect import catalog
from pgintrospect.exceptions import IndexColumnOrderError
from pgintrospect.models import IndexColumn


def order_columns(
    columns: list[IndexColumn],
    column_order: str,
    schema: str,
    table: str,
    index: str,
) -> list[IndexColumn]:
    """
    Reorder index columns by a space-separated list of column ids.

    Args:
        columns: Index columns in any order
        column_order: Column ids in declared index order, e.g. "2 1 3"
        schema: Schema name (used in errors)
        table: Table name (used in errors)
        index: Index name (used in errors)

    Returns:
        One IndexColumn per column id, in column_order order

    Raises:
        IndexColumnOrderError: If a column id is not an integer or has no
            matching column
    """
    ordered = []
    for token in column_order.split():
        try:
            column_id = int(token)
        except ValueError:
            raise IndexColumnOrderError(
                schema, table, index, f"convert column {token!r} to int"
            ) from None

        match = next((c for c in columns if c.column_id == column_id), None)
        if match is None:
            raise IndexColumnOrderError(schema, table, index, f"find column id {column_id}")
        ordered.append(match)

    return ordered


def order_index_columns(
    conn: Connection, schema: str, table: str, index: str
) -> list[IndexColumn]:
    """Fetch the columns of an index in the order the index declares them."""
    columns = catalog.list_index_columns(conn, schema, index)
    column_order = catalog.get_index_column_order(conn, schema, index)
    return order_columns(columns, column_order, schema, table, index)

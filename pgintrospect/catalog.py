"""Raw PostgreSQL catalog queries.

Each function runs one catalog query on a psycopg connection and maps the rows
to model objects. No type translation or reconciliation happens here; see
``pgintrospect.loader`` for that.
"""

import logging
from typing import Any

from psycopg import Connection

from pgintrospect.exceptions import IndexNotFoundError
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
    Sequence,
    Table,
)

logger = logging.getLogger(__name__)

RELKIND_TO_KIND = {"r": RelationKind.TABLE, "v": RelationKind.VIEW}


def _fetchall(conn: Connection, query: str, params: tuple[Any, ...]) -> list[tuple]:
    logger.debug(f"{' '.join(query.split())} {params!r}")
    with conn.cursor() as cur:
        cur.execute(query, params)
        return cur.fetchall()


def list_relations(conn: Connection, schema: str, relkind: str) -> list[Table]:
    """List tables or views (by pg_class.relkind) in a schema."""
    rows = _fetchall(
        conn,
        """
        SELECT c.relkind, c.relname
        FROM pg_class c
        JOIN ONLY pg_namespace n ON n.oid = c.relnamespace
        WHERE n.nspname = %s AND c.relkind = %s
        ORDER BY c.relname
        """,
        (schema, relkind),
    )
    return [Table(name=row[1], kind=RELKIND_TO_KIND[row[0]]) for row in rows]


def list_sequences(conn: Connection, schema: str) -> list[Sequence]:
    """List sequences in a schema by the table that owns them."""
    rows = _fetchall(
        conn,
        """
        SELECT t.relname
        FROM pg_class s
        JOIN pg_depend d ON d.objid = s.oid AND d.refclassid = 'pg_class'::regclass
        JOIN pg_class t ON d.refobjid = t.oid
        JOIN pg_namespace n ON n.oid = s.relnamespace
        WHERE n.nspname = %s AND s.relkind = 'S'
        """,
        (schema,),
    )
    return [Sequence(table_name=row[0]) for row in rows]


def list_columns(
    conn: Connection, schema: str, table: str, include_system: bool = False
) -> list[Column]:
    """
    List columns of a table or view in attribute order.

    Args:
        conn: PostgreSQL connection
        schema: Schema name
        table: Relation name
        include_system: Also return system columns (oid, ctid, ...)

    Returns:
        List of Column objects without type descriptors
    """
    rows = _fetchall(
        conn,
        """
        SELECT
            a.attnum,
            a.attname,
            format_type(a.atttypid, a.atttypmod),
            a.attnotnull,
            COALESCE(pg_get_expr(ad.adbin, ad.adrelid), ''),
            EXISTS(
                SELECT 1 FROM pg_constraint ct
                WHERE ct.conrelid = c.oid
                  AND ct.contype = 'p'
                  AND a.attnum = ANY(ct.conkey)
            )
        FROM pg_attribute a
        JOIN ONLY pg_class c ON c.oid = a.attrelid
        JOIN ONLY pg_namespace n ON n.oid = c.relnamespace
        LEFT JOIN pg_attrdef ad ON ad.adrelid = c.oid AND ad.adnum = a.attnum
        WHERE a.attisdropped = false
          AND n.nspname = %s
          AND c.relname = %s
          AND (%s OR a.attnum > 0)
        ORDER BY a.attnum
        """,
        (schema, table, include_system),
    )
    return [
        Column(
            ordinal=row[0],
            name=row[1],
            data_type=row[2],
            not_null=row[3],
            default_value=row[4],
            is_primary_key=row[5],
        )
        for row in rows
    ]


def list_foreign_keys(conn: Connection, schema: str, table: str) -> list[ForeignKey]:
    """List single-column foreign key references of a table."""
    rows = _fetchall(
        conn,
        """
        SELECT
            r.conname,
            b.attname,
            i.relname,
            c.relname,
            d.attname,
            r.conkey[1],
            r.confkey[1]
        FROM pg_constraint r
        JOIN ONLY pg_class a ON a.oid = r.conrelid
        JOIN ONLY pg_attribute b ON b.attisdropped = false AND b.attnum = r.conkey[1]
            AND b.attrelid = r.conrelid
        JOIN ONLY pg_class i ON i.oid = r.conindid
        JOIN ONLY pg_class c ON c.oid = r.confrelid
        JOIN ONLY pg_attribute d ON d.attisdropped = false AND d.attnum = r.confkey[1]
            AND d.attrelid = r.confrelid
        JOIN ONLY pg_namespace n ON n.oid = r.connamespace
        WHERE r.contype = 'f' AND n.nspname = %s AND a.relname = %s
        ORDER BY r.conname, b.attname
        """,
        (schema, table),
    )
    return [
        ForeignKey(
            name=row[0],
            column_name=row[1],
            ref_index_name=row[2],
            ref_table_name=row[3],
            ref_column_name=row[4],
            key_id=row[5],
            seq_no=row[6],
        )
        for row in rows
    ]


def list_indexes(conn: Connection, schema: str, table: str) -> list[Index]:
    """List indexes on a table (expression-only indexes excluded)."""
    rows = _fetchall(
        conn,
        """
        SELECT DISTINCT ic.relname, i.indisunique, i.indisprimary
        FROM pg_index i
        JOIN ONLY pg_class c ON c.oid = i.indrelid
        JOIN ONLY pg_namespace n ON n.oid = c.relnamespace
        JOIN ONLY pg_class ic ON ic.oid = i.indexrelid
        WHERE i.indkey <> '0' AND n.nspname = %s AND c.relname = %s
        ORDER BY ic.relname
        """,
        (schema, table),
    )
    return [Index(name=row[0], is_unique=row[1], is_primary=row[2]) for row in rows]


def list_index_columns(conn: Connection, schema: str, index: str) -> list[IndexColumn]:
    """List the columns of an index, in no particular order."""
    rows = _fetchall(
        conn,
        """
        SELECT row_number() OVER (), a.attnum, a.attname
        FROM pg_index i
        JOIN ONLY pg_class c ON c.oid = i.indrelid
        JOIN ONLY pg_namespace n ON n.oid = c.relnamespace
        JOIN ONLY pg_class ic ON ic.oid = i.indexrelid
        LEFT JOIN pg_attribute a ON i.indrelid = a.attrelid
            AND a.attnum = ANY(i.indkey) AND a.attisdropped = false
        WHERE i.indkey <> '0' AND n.nspname = %s AND ic.relname = %s
        """,
        (schema, index),
    )
    return [IndexColumn(seq_no=row[0], column_id=row[1], column_name=row[2]) for row in rows]


def get_index_column_order(conn: Connection, schema: str, index: str) -> str:
    """
    Get the declared column order of an index.

    Returns:
        Space-separated attribute numbers (pg_index.indkey), e.g. "2 1 3"

    Raises:
        IndexNotFoundError: If the index does not exist in the schema
    """
    rows = _fetchall(
        conn,
        """
        SELECT i.indkey::text
        FROM pg_index i
        JOIN ONLY pg_class ic ON ic.oid = i.indexrelid
        JOIN ONLY pg_namespace n ON n.oid = ic.relnamespace
        WHERE n.nspname = %s AND ic.relname = %s
        """,
        (schema, index),
    )
    if not rows:
        raise IndexNotFoundError(schema, index)
    return rows[0][0]


def list_enums(conn: Connection, schema: str) -> list[Enum]:
    """List enumerated types defined in a schema."""
    rows = _fetchall(
        conn,
        """
        SELECT DISTINCT t.typname
        FROM pg_type t
        JOIN ONLY pg_namespace n ON n.oid = t.typnamespace
        JOIN ONLY pg_enum e ON t.oid = e.enumtypid
        WHERE n.nspname = %s
        ORDER BY t.typname
        """,
        (schema,),
    )
    return [Enum(name=row[0]) for row in rows]


def list_enum_values(conn: Connection, schema: str, enum: str) -> list[EnumValue]:
    """List the labels of an enumerated type in sort order."""
    rows = _fetchall(
        conn,
        """
        SELECT e.enumlabel, e.enumsortorder
        FROM pg_type t
        JOIN ONLY pg_namespace n ON n.oid = t.typnamespace
        JOIN ONLY pg_enum e ON t.oid = e.enumtypid
        WHERE n.nspname = %s AND t.typname = %s
        ORDER BY e.enumsortorder
        """,
        (schema, enum),
    )
    return [EnumValue(label=row[0], sort_order=row[1]) for row in rows]


def list_procs(conn: Connection, schema: str) -> list[Proc]:
    """List stored procedures with their result types."""
    rows = _fetchall(
        conn,
        """
        SELECT p.proname, pg_get_function_result(p.oid)
        FROM pg_proc p
        JOIN ONLY pg_namespace n ON p.pronamespace = n.oid
        WHERE n.nspname = %s
        ORDER BY p.proname
        """,
        (schema,),
    )
    return [Proc(name=row[0], return_type=row[1]) for row in rows]


def list_proc_params(conn: Connection, schema: str, proc: str) -> list[ProcParam]:
    """List the input parameter types of a stored procedure."""
    rows = _fetchall(
        conn,
        """
        SELECT UNNEST(STRING_TO_ARRAY(oidvectortypes(p.proargtypes), ', '))
        FROM pg_proc p
        JOIN ONLY pg_namespace n ON p.pronamespace = n.oid
        WHERE n.nspname = %s AND p.proname = %s
        """,
        (schema, proc),
    )
    return [ProcParam(param_type=row[0]) for row in rows]

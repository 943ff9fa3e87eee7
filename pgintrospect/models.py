"""
Core data models for pgintrospect.

Defines the structures returned by catalog introspection: relations, columns,
keys, indexes, enums and stored procedures, plus the canonical type descriptor
attached to every column.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional


class RelationKind(enum.Enum):
    """Whether a named database object is a physical table or a view."""

    TABLE = "table"
    VIEW = "view"


def native_code(kind: RelationKind) -> str:
    """Return the pg_class.relkind code for a relation kind."""
    if kind is RelationKind.TABLE:
        return "r"
    if kind is RelationKind.VIEW:
        return "v"
    raise ValueError(f"unsupported relation kind: {kind!r}")


@dataclass(frozen=True)
class TypeDescriptor:
    """
    Canonical description of a database type for code generation.

    Attributes:
        precision: Leading precision qualifier (0 if absent)
        zero_value: Literal expression for the type's zero value
        type_name: Canonical type name
    """

    precision: int
    zero_value: str
    type_name: str


@dataclass
class Table:
    """A table or view, with manual primary key detection."""

    name: str
    kind: RelationKind
    manual_primary_key: bool = True


@dataclass
class Sequence:
    """A sequence owned by a table column."""

    table_name: str


@dataclass
class Column:
    """
    Column metadata from catalog introspection.

    Attributes:
        ordinal: Attribute number (negative for system columns)
        name: Column name
        data_type: PostgreSQL type as rendered by format_type()
        not_null: Whether the column has a NOT NULL constraint
        default_value: Default expression, empty if none
        is_primary_key: Whether the column is part of the primary key
        descriptor: Canonical type descriptor (set by the loader)
    """

    ordinal: int
    name: str
    data_type: str
    not_null: bool = False
    default_value: str = ""
    is_primary_key: bool = False
    descriptor: Optional[TypeDescriptor] = field(default=None, compare=False)

    @property
    def nullable(self) -> bool:
        return not self.not_null


@dataclass
class ForeignKey:
    """A single-column foreign key reference."""

    name: str
    column_name: str
    ref_index_name: str
    ref_table_name: str
    ref_column_name: str
    key_id: int = 0
    seq_no: int = 0


@dataclass
class Index:
    """An index on a table."""

    name: str
    is_unique: bool = False
    is_primary: bool = False


@dataclass
class IndexColumn:
    """A column participating in an index, keyed by its attribute number."""

    seq_no: int
    column_id: int
    column_name: str


@dataclass
class Enum:
    """A user-defined enumerated type."""

    name: str
    values: list[EnumValue] = field(default_factory=list)


@dataclass
class EnumValue:
    """A label of an enumerated type."""

    label: str
    sort_order: float


@dataclass
class Proc:
    """A stored procedure and its result type."""

    name: str
    return_type: str


@dataclass
class ProcParam:
    """A stored procedure input parameter type."""

    param_type: str

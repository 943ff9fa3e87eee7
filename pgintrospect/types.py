"""Translate PostgreSQL type strings into canonical type descriptors.

The family table below is the single place where PostgreSQL type spelling is
mapped to the canonical vocabulary used by generated code. Everything else in
the package works with ``TypeDescriptor`` values only.
"""

import re

from pgintrospect.models import TypeDescriptor

SETOF_PREFIX = "SETOF "
ARRAY_SUFFIX = "[]"
NIL_VALUE = "nil"
DEFAULT_PACKAGE = "pgtype"

# First "(precision[, scale])" qualifier, wherever format_type() placed it:
# "numeric(10,2)", "character varying(255)", "timestamp(3) with time zone".
PRECISION_RE = re.compile(r"\((\d+)(?:\s*,\s*(\d+))?\)")

# Base type name -> canonical family
TYPE_FAMILIES: dict[str, str] = {
    "boolean": "Bool",
    "character": "Text",
    "character varying": "Text",
    "text": "Text",
    "money": "Text",
    "inet": "Text",
    "smallint": "Int2",
    "smallserial": "Int2",
    "integer": "Int4",
    "serial": "Int4",
    "bigint": "Int8",
    "bigserial": "Int8",
    "real": "Float4",
    "numeric": "Float8",
    "double precision": "Float8",
    "bytea": "Bytea",
    "jsonb": "JSONB",
    "date": "Date",
    "timestamp with time zone": "Timestamptz",
    "time with time zone": "Timestamptz",
    "timestamp without time zone": "Timestamp",
    "time without time zone": "Timestamp",
    "timestamp": "Timestamp",
    "time": "Timestamp",
    "interval": "Interval",
    '"char"': "QChar",
    "bit": "Bit",
    "uuid": "UUID",
}

# Older generated code was built against swapped time zone families.
LEGACY_TIMEZONE_FAMILIES: dict[str, str] = {
    "timestamp with time zone": "Timestamp",
    "time with time zone": "Timestamp",
    "timestamp without time zone": "Timestamptz",
    "time without time zone": "Timestamptz",
}

# Families with a dedicated array type
ARRAY_FAMILIES: dict[str, str] = {
    "uuid": "UUIDArray",
}

# Initialisms kept upper-case when camel casing identifiers
INITIALISMS = {
    "ACL", "API", "ASCII", "CPU", "CSS", "DNS", "EOF", "GUID", "HTML", "HTTP",
    "HTTPS", "ID", "IP", "JSON", "LHS", "QPS", "RAM", "RHS", "RPC", "SLA",
    "SMTP", "SQL", "SSH", "TCP", "TLS", "TTL", "UDP", "UI", "UID", "URI",
    "URL", "UTF8", "UUID", "VM", "XML", "XMPP", "XSRF", "XSS",
}


def parse_precision(data_type: str) -> tuple[str, int, int]:
    """
    Split a precision/scale qualifier off a type string.

    Args:
        data_type: Type as rendered by format_type()

    Returns:
        (base type, precision, scale); precision and scale are 0 if absent

    Example:
        >>> parse_precision("numeric(10,2)")
        ('numeric', 10, 2)
        >>> parse_precision("timestamp(3) with time zone")
        ('timestamp with time zone', 3, 0)
    """
    match = PRECISION_RE.search(data_type)
    if match is None:
        return data_type, 0, 0

    precision = int(match.group(1))
    scale = int(match.group(2)) if match.group(2) else 0
    base = data_type[: match.start()] + data_type[match.end() :]
    return " ".join(base.split()), precision, scale


def snake_to_camel_identifier(name: str) -> str:
    """
    Convert a snake_case database name to a CamelCase identifier.

    Example:
        >>> snake_to_camel_identifier("order_status")
        'OrderStatus'
        >>> snake_to_camel_identifier("user_id_kind")
        'UserIDKind'
    """
    parts = [p for p in re.split(r"[^0-9A-Za-z]+", name) if p]
    words = []
    for part in parts:
        upper = part.upper()
        words.append(upper if upper in INITIALISMS else part[0].upper() + part[1:].lower())

    ident = "".join(words)
    if not ident or ident[0].isdigit():
        ident = "_" + ident
    return ident


def _qualify(family: str, package: str) -> str:
    return f"{package}.{family}" if package else family


def _scalar(base: str, package: str, legacy_timezone: bool) -> tuple[str, str]:
    """Return (zero value, type name) for a non-array base type."""
    family = None
    if legacy_timezone:
        family = LEGACY_TIMEZONE_FAMILIES.get(base)
    if family is None:
        family = TYPE_FAMILIES.get(base)

    if family is None:
        # user-defined enum or composite type, possibly schema qualified
        type_name = snake_to_camel_identifier(base.rsplit(".", 1)[-1])
    else:
        type_name = _qualify(family, package)
    return type_name + "{}", type_name


def _array(base: str, package: str, legacy_timezone: bool) -> tuple[str, str]:
    """Return (zero value, type name) for an array of a base type."""
    family = ARRAY_FAMILIES.get(base)
    if family is not None:
        type_name = _qualify(family, package)
    else:
        _, elem = _scalar(base, package, legacy_timezone)
        type_name = "[]" + elem
    return type_name + "{}", type_name


def translate(
    data_type: str,
    nullable: bool,
    package: str = DEFAULT_PACKAGE,
    legacy_timezone: bool = False,
) -> TypeDescriptor:
    """
    Translate a PostgreSQL type string into a canonical type descriptor.

    Handles set-returning results ("SETOF integer"), arrays ("text[]") and
    precision qualifiers ("numeric(10,2)"). Unknown types are treated as
    user-defined enum or composite types.

    Args:
        data_type: Type as rendered by format_type() or pg_get_function_result()
        nullable: Whether the column allows NULL values
        package: Package qualifying canonical family names ("" for none)
        legacy_timezone: Use the swapped time zone families of older output

    Returns:
        TypeDescriptor for the type

    Example:
        >>> translate("numeric(10,2)", True, package="")
        TypeDescriptor(precision=10, zero_value='Float8{}', type_name='Float8')
    """
    if data_type.startswith(SETOF_PREFIX):
        inner = translate(
            data_type[len(SETOF_PREFIX) :],
            False,
            package=package,
            legacy_timezone=legacy_timezone,
        )
        return TypeDescriptor(0, NIL_VALUE, "[]" + inner.type_name)

    is_array = data_type.endswith(ARRAY_SUFFIX)
    if is_array:
        data_type = data_type[: -len(ARRAY_SUFFIX)]

    base, precision, _ = parse_precision(data_type)

    if is_array:
        zero_value, type_name = _array(base, package, legacy_timezone)
    else:
        zero_value, type_name = _scalar(base, package, legacy_timezone)
    return TypeDescriptor(precision, zero_value, type_name)

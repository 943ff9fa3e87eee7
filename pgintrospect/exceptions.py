"""Custom exceptions with helpful error messages."""


class PgIntrospectError(Exception):
    """Base exception for pgintrospect errors."""

    pass


class QueryIntrospectionError(PgIntrospectError):
    """A step of ad-hoc query shape discovery failed."""

    def __init__(self, step: str, view_name: str, cause: Exception):
        self.step = step
        self.view_name = view_name
        super().__init__(
            f"Could not introspect query ({step} failed for '{view_name}'): {cause}\n\n"
            f"Suggestions:\n"
            f"1. Check the query runs on its own: psql -c '<query>'\n"
            f"2. Give every computed column an explicit '::type AS name' cast\n"
            f"3. Ensure the role may create temporary objects: GRANT TEMPORARY ON DATABASE ..."
        )


class IndexColumnOrderError(PgIntrospectError):
    """Index columns could not be reconciled with the index column order."""

    def __init__(self, schema: str, table: str, index: str, detail: str):
        self.schema = schema
        self.table = table
        self.index = index
        qualified = f"{schema}.{table}" if schema else table
        super().__init__(f"could not {detail} in {qualified} index {index}")


class UnknownBackendError(PgIntrospectError):
    """No loader registered for the requested backend."""

    def __init__(self, name: str, available: list[str]):
        available_str = ", ".join(sorted(available)) or "(none)"
        super().__init__(
            f"No loader registered for backend '{name}'.\n\n"
            f"Available backends: {available_str}"
        )


class IndexNotFoundError(PgIntrospectError, LookupError):
    """An index does not exist in the schema."""

    def __init__(self, schema: str, index: str):
        self.schema = schema
        self.index = index
        super().__init__(f"index '{index}' not found in schema '{schema}'")

"""Command-line interface for pgintrospect."""

"""CLI commands for pgintrospect."""

import dataclasses
import enum
import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
import psycopg

from pgintrospect.config import LoaderConfig
from pgintrospect.exceptions import PgIntrospectError
from pgintrospect.loader import PostgresLoader
from pgintrospect.models import RelationKind
from pgintrospect.types import translate


def _jsonable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _echo_json(items: Any) -> None:
    if isinstance(items, list):
        data = [_as_data(item) for item in items]
    else:
        data = _as_data(items)
    click.echo(json.dumps(data, indent=2, default=_jsonable))


def _as_data(item: Any) -> Any:
    return dataclasses.asdict(item) if dataclasses.is_dataclass(item) else item


def _run(ctx: click.Context, action) -> None:
    """Open a connection, run action(loader, schema) and print its result."""
    config: LoaderConfig = ctx.obj["config"]
    try:
        with psycopg.connect(config.database_url, autocommit=True) as conn:
            loader = PostgresLoader(conn, config)
            _echo_json(action(loader, config.schema_name))
    except (psycopg.Error, PgIntrospectError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(package_name="pgintrospect")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="TOML config file")
@click.option("--database-url", help="PostgreSQL connection URL")
@click.option("--schema", help="Schema to introspect")
@click.option("--verbose", "-v", is_flag=True, help="Log catalog queries")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    database_url: str | None,
    schema: str | None,
    verbose: bool,
) -> None:
    """pgintrospect - PostgreSQL schema introspection for code generators."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)

    config = LoaderConfig.from_toml(config_path) if config_path else LoaderConfig()
    overrides = {}
    if database_url:
        overrides["database_url"] = database_url
    if schema:
        overrides["schema_name"] = schema
    if overrides:
        config = config.model_copy(update=overrides)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command("parse-type")
@click.argument("data_type")
@click.option("--nullable", is_flag=True, help="Column allows NULL")
@click.pass_context
def parse_type(ctx: click.Context, data_type: str, nullable: bool) -> None:
    """Translate a PostgreSQL type into a type descriptor."""
    config: LoaderConfig = ctx.obj["config"]
    descriptor = translate(
        data_type,
        nullable,
        package=config.type_package,
        legacy_timezone=config.legacy_timezone_mapping,
    )
    _echo_json(descriptor)


@cli.command()
@click.option("--views", is_flag=True, help="List views instead of tables")
@click.pass_context
def tables(ctx: click.Context, views: bool) -> None:
    """List tables (or views) with manual primary key detection."""
    kind = RelationKind.VIEW if views else RelationKind.TABLE
    _run(ctx, lambda loader, schema: loader.list_tables(schema, kind))


@cli.command()
@click.argument("table")
@click.pass_context
def columns(ctx: click.Context, table: str) -> None:
    """List columns of a table or view."""
    _run(ctx, lambda loader, schema: loader.list_columns(schema, table))


@cli.command()
@click.argument("table")
@click.pass_context
def indexes(ctx: click.Context, table: str) -> None:
    """List indexes of a table with their ordered columns."""

    def action(loader: PostgresLoader, schema: str) -> list[dict[str, Any]]:
        return [
            {
                "index": dataclasses.asdict(index),
                "columns": [
                    dataclasses.asdict(c)
                    for c in loader.list_index_columns(schema, table, index.name)
                ],
            }
            for index in loader.list_indexes(schema, table)
        ]

    _run(ctx, action)


@cli.command()
@click.argument("query_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def query(ctx: click.Context, query_file: str) -> None:
    """Discover the result columns of the query in QUERY_FILE and strip its casts."""
    lines = Path(query_file).read_text().splitlines()

    def action(loader: PostgresLoader, schema: str) -> dict[str, Any]:
        # casts pin the column types, so discover before stripping them
        found = loader.discover_query_columns(lines)
        stripped = list(lines)
        comments = [""] * (len(lines) + 1)
        loader.strip_query(stripped, comments)
        return {
            "query": stripped,
            "comments": comments,
            "columns": [dataclasses.asdict(c) for c in found],
        }

    _run(ctx, action)


if __name__ == "__main__":
    cli()

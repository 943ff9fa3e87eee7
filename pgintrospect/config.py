"""
Configuration management for pgintrospect.

Loads and validates loader settings from environment variables
(``PGINTROSPECT_*``) or the ``[loader]`` table of a TOML file using Pydantic.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Literal

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoaderConfig(BaseSettings):
    """PostgreSQL loader configuration."""

    model_config = SettingsConfigDict(env_prefix="PGINTROSPECT_")

    database_url: str = Field(
        default="postgresql://localhost/postgres",
        description="PostgreSQL connection URL",
    )
    schema_name: str = Field(default="public", description="Default schema to introspect")
    type_package: str = Field(
        default="pgtype", description="Package qualifying canonical type names"
    )
    enable_oids: bool = Field(
        default=False, description="Include system columns (oid, ctid, ...) in column lists"
    )
    legacy_timezone_mapping: bool = Field(
        default=False,
        description="Map 'with time zone' types to Timestamp and vice versa, "
        "matching code generated by older releases",
    )
    query_strategy: Literal["temp_view", "describe"] = Field(
        default="temp_view", description="How ad-hoc query result shapes are discovered"
    )
    temp_view_prefix: str = Field(
        default="_xo_",
        pattern=r"^[a-z_][a-z0-9_]*$",
        description="Name prefix of temporary views created for ad-hoc queries",
    )
    drop_temp_views: bool = Field(
        default=False,
        description="Drop temporary views after introspection instead of leaving "
        "them to session teardown",
    )

    @classmethod
    def from_toml(cls, path: Path | str) -> LoaderConfig:
        """
        Load configuration from the [loader] table of a TOML file.

        Args:
            path: Path to TOML file

        Returns:
            LoaderConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        return cls(**data.get("loader", {}))

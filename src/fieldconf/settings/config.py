"""Configuration of the collector itself, loaded with pydantic settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "FIELDCONF_"
DEFAULT_BASE_NAME = "config"
DEFAULT_FILE_SEPARATOR = "."
DEFAULT_ENV_SEPARATOR = "_"
DEFAULT_FLAG_SEPARATOR = "-"


def _require_separator(value: str) -> str:
    if not value:
        raise ValueError("separator must not be empty")
    return value


class FilesConfig(BaseModel):
    """Where configuration files are searched and how their keys are split."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    locations: list[str] = Field(default_factory=lambda: ["."])
    base_name: str = DEFAULT_BASE_NAME
    separator: str = DEFAULT_FILE_SEPARATOR
    required: bool = False
    disabled: bool = False

    @field_validator("locations")
    @classmethod
    def _expand_locations(cls, value: list[str]) -> list[str]:
        return [str(Path(location).expanduser()) for location in value]

    @field_validator("base_name")
    @classmethod
    def _require_base_name(cls, value: str) -> str:
        if not value:
            raise ValueError("base_name must not be empty")
        return value

    @field_validator("separator")
    @classmethod
    def _check_separator(cls, value: str) -> str:
        return _require_separator(value)


class EnvConfig(BaseModel):
    """Prefix and separator used to derive environment variable names.

    With ``prefix="example"`` and ``separator="_"`` a top-level field ``port``
    is read from ``EXAMPLE_PORT``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    prefix: str = ""
    separator: str = DEFAULT_ENV_SEPARATOR
    disabled: bool = False

    @field_validator("separator")
    @classmethod
    def _check_separator(cls, value: str) -> str:
        return _require_separator(value)


class FlagsConfig(BaseModel):
    """Separator used to build flag names for nested fields."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    separator: str = DEFAULT_FLAG_SEPARATOR
    disabled: bool = False

    @field_validator("separator")
    @classmethod
    def _check_separator(cls, value: str) -> str:
        return _require_separator(value)


class CollectorSettings(BaseSettings):
    """Top-level collector configuration with one section per source.

    Values can be overridden through ``FIELDCONF_*`` environment variables,
    e.g. ``FIELDCONF_FILES__LOCATIONS='["/etc/app", "."]'`` or
    ``FIELDCONF_FLAGS__DISABLED=true``.
    """

    files: FilesConfig = Field(default_factory=FilesConfig)
    env: EnvConfig = Field(default_factory=EnvConfig)
    flags: FlagsConfig = Field(default_factory=FlagsConfig)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


def load_collector_settings(**overrides: object) -> CollectorSettings:
    """Build collector settings from defaults, ``FIELDCONF_*`` variables and ``overrides``.

    A fresh instance is returned on every call.
    """

    return CollectorSettings(**overrides)  # type: ignore[arg-type]


__all__ = [
    "ENV_PREFIX",
    "CollectorSettings",
    "EnvConfig",
    "FilesConfig",
    "FlagsConfig",
    "load_collector_settings",
]

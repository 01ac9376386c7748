"""Read settings from environment variables."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from fieldconf.catalog import Field
from fieldconf.settings import EnvConfig

LOGGER = logging.getLogger(__name__)


def distinct_env_name(field: Field, config: EnvConfig) -> str:
    """Return the computed ``[PREFIX_]PATH_SEGMENTS`` name for ``field``, uppercased."""

    name = field.full_name(config.separator)
    if config.prefix:
        name = f"{config.prefix}{config.separator}{name}"
    return name.upper()


def read_env(fields: Sequence[Field], config: EnvConfig, environ: Mapping[str, str]) -> None:
    """Assign environment values to every field with a matching variable.

    Names are compared uppercased on both sides, so ``database_port`` and
    ``DATABASE_PORT`` address the same field. Each field checks its explicit
    ``env=`` name and then its computed name; both hits are applied in that
    order, so the computed name wins when both are set.
    """

    table = {key.upper(): value for key, value in environ.items()}
    for field in fields:
        for name in (field.config.default_env_name, distinct_env_name(field, config)):
            if not name:
                continue
            value = table.get(name.upper())
            if value is None:
                continue
            field.set_from_string(value)
            LOGGER.debug("Applied environment value field=%s name=%s", field.path, name.upper())


__all__ = ["distinct_env_name", "read_env"]

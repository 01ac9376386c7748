"""Merge defaults, files, environment variables and flags into a settings object."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any, Mapping, Sequence

from fieldconf.catalog import collect_fields
from fieldconf.errors import NoConfigFileFoundError
from fieldconf.settings import CollectorSettings, EnvConfig, FilesConfig, FlagsConfig
from fieldconf.sources import read_env, read_files, read_flags

LOGGER = logging.getLogger(__name__)


class Collector:
    """Populate a caller-owned settings structure from every enabled source.

    Sources overwrite each other field by field in a fixed order::

        defaults -> config files -> environment variables -> command-line flags

    Fields no source mentions keep the value preset on the structure. The
    merge is not transactional: when a later value fails to coerce, values
    already assigned during the same call stay assigned.
    """

    def __init__(
        self,
        settings: CollectorSettings | None = None,
        *,
        files: FilesConfig | None = None,
        env: EnvConfig | None = None,
        flags: FlagsConfig | None = None,
    ) -> None:
        resolved = settings if settings is not None else CollectorSettings()
        self.files = files if files is not None else resolved.files
        self.env = env if env is not None else resolved.env
        self.flags = flags if flags is not None else resolved.flags

    def get(
        self,
        target: Any,
        *,
        environ: Mapping[str, str] | None = None,
        args: Sequence[str] | None = None,
    ) -> tuple[Path, ...]:
        """Write configuration values into ``target``.

        Args:
            target: Dataclass or pydantic model instance to populate in place.
            environ: Environment table; defaults to ``os.environ``.
            args: Command-line arguments without the program name; defaults to
                ``sys.argv[1:]``.

        Returns:
            Configuration files that were merged. Empty when no file matched,
            which is tolerated unless ``files.required`` is set.

        Raises:
            FieldconfError: The first failure encountered; see
                :mod:`fieldconf.errors` for the individual types.
        """

        fields = collect_fields(target)

        merged: tuple[Path, ...] = ()
        if not self.files.disabled:
            try:
                merged = read_files(fields, self.files)
            except NoConfigFileFoundError as exc:
                if self.files.required:
                    raise
                LOGGER.info("%s; proceeding with environment and flags", exc)

        if not self.env.disabled:
            read_env(fields, self.env, os.environ if environ is None else environ)

        if not self.flags.disabled:
            read_flags(fields, self.flags, sys.argv[1:] if args is None else args)

        LOGGER.debug("Collected configuration for %s files=%d", type(target).__name__, len(merged))
        return merged


def get(
    target: Any,
    *,
    environ: Mapping[str, str] | None = None,
    args: Sequence[str] | None = None,
) -> tuple[Path, ...]:
    """Populate ``target`` using a freshly built default :class:`Collector`.

    All sources are enabled: ``config.*`` files in the current directory,
    unprefixed environment variables joined with ``_`` and flags joined
    with ``-``, unless ``FIELDCONF_*`` variables say otherwise.
    """

    return Collector().get(target, environ=environ, args=args)


__all__ = ["Collector", "get"]

"""Read configuration files found in the search locations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

from pydantic import ConfigDict, TypeAdapter, ValidationError
from pydantic.errors import PydanticUserError

from fieldconf.catalog import Field
from fieldconf.cimap import CiMap, decode_document
from fieldconf.coercion import TypeKind, classify
from fieldconf.errors import ConfigFileReadError, NoConfigFileFoundError, ValueCoercionError
from fieldconf.settings import FilesConfig

LOGGER = logging.getLogger(__name__)

_ARBITRARY_TYPES = ConfigDict(arbitrary_types_allowed=True)


def find_config_files(config: FilesConfig) -> list[Path]:
    """Return matching files in location order, entries sorted by name within a location.

    A file matches when its name without the last extension equals
    ``config.base_name``. Locations that cannot be listed are skipped.
    """

    matches: list[Path] = []
    for location in config.locations:
        directory = Path(location)
        try:
            entries = sorted(directory.iterdir())
        except OSError as exc:
            LOGGER.debug("Skipping config location %s: %s", directory, exc)
            continue
        for entry in entries:
            if entry.stem != config.base_name or not entry.is_file():
                continue
            matches.append(entry)
    return matches


def _type_adapter(annotation: Any) -> TypeAdapter[Any]:
    try:
        return TypeAdapter(annotation, config=_ARBITRARY_TYPES)
    except PydanticUserError:
        # models and dataclasses carry their own config
        return TypeAdapter(annotation)


def _decode_value(field: Field, raw: Any) -> Any:
    """Decode ``raw`` structurally into the field's static type."""

    adapter = _type_adapter(field.annotation)
    return adapter.validate_python(raw)


def _apply_value(field: Field, raw: Any) -> None:
    if field.is_struct:
        # children carry their own catalog entries and are matched one by one
        if isinstance(raw, str):
            field.set_from_string(raw)
        return

    if raw is None:
        # null is the file spelling of an explicit unset
        field.set_from_string("")
        return

    plain = raw.to_dict() if isinstance(raw, CiMap) else raw
    try:
        value = _decode_value(field, plain)
    except (ValidationError, PydanticUserError) as exc:
        if isinstance(plain, str):
            field.set_from_string(plain)
            return
        if classify(field.annotation).kind is TypeKind.STRUCT:
            return
        raise ValueCoercionError(
            f"{field.path}: cannot decode {plain!r} as {field.annotation!r}",
            value=plain,
            target=field.annotation,
            path=field.path,
        ) from exc
    field.set(value)


def apply_document(fields: Sequence[Field], document: CiMap) -> None:
    """Assign values from one decoded file to every matching field.

    Each field is looked up by its explicit ``file=`` key first and then by
    its full path; the first hit is applied.
    """

    for field in fields:
        for key in (field.config.default_file_field, field.full_name(document.separator)):
            raw, found = document.lookup(key)
            if not found:
                continue
            _apply_value(field, raw)
            LOGGER.debug("Applied file value field=%s key=%s", field.path, key)
            break


def read_files(fields: Sequence[Field], config: FilesConfig) -> tuple[Path, ...]:
    """Merge every matching configuration file into ``fields``.

    Returns:
        The files that were merged, in the order they were applied.

    Raises:
        NoConfigFileFoundError: No location held a matching file.
        ConfigFileReadError: A matching file could not be read.
        FileTypeNotSupportedError: A matching file could not be decoded.
    """

    paths = find_config_files(config)
    if not paths:
        raise NoConfigFileFoundError(
            f"no config file named {config.base_name!r} found in {', '.join(map(str, config.locations))}"
        )

    for path in paths:
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ConfigFileReadError(f"could not read config file {path}: {exc}") from exc
        document = decode_document(data, separator=config.separator, source=str(path))
        apply_document(fields, document)
        LOGGER.info("Merged config file path=%s", path)
    return tuple(paths)


__all__ = ["apply_document", "find_config_files", "read_files"]

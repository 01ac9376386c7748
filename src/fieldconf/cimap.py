"""Case-insensitive, path-addressable view of a decoded configuration file."""

from __future__ import annotations

import json
import logging
import tomllib
from collections.abc import Iterator, Mapping
from typing import Any, Callable

import yaml

from fieldconf.errors import FileTypeNotSupportedError

LOGGER = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "."


class CiMap(Mapping[str, Any]):
    """Ordered mapping whose keys match regardless of case.

    Nested mappings are wrapped in :class:`CiMap` as well, so a dotted path
    such as ``"database.port"`` can be resolved level by level with
    :meth:`lookup`. When two keys differ only by case the later one wins.
    """

    def __init__(self, data: Mapping[Any, Any] | None = None, *, separator: str = DEFAULT_SEPARATOR) -> None:
        self.separator = separator
        self._entries: dict[str, tuple[str, Any]] = {}
        for key, value in (data or {}).items():
            text_key = str(key)
            if isinstance(value, Mapping):
                value = CiMap(value, separator=separator)
            self._entries[text_key.lower()] = (text_key, value)

    def __getitem__(self, key: str) -> Any:
        if not isinstance(key, str):
            raise KeyError(key)
        return self._entries[key.lower()][1]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._entries

    def __repr__(self) -> str:
        return f"CiMap({self.to_dict()!r})"

    def lookup(self, path: str) -> tuple[Any, bool]:
        """Resolve ``path`` by splitting it on the separator.

        Returns:
            ``(value, True)`` when every segment matched, ``(None, False)``
            otherwise. A missing key is not an error.
        """

        if not path:
            return None, False
        current: Any = self
        for segment in path.split(self.separator):
            if not isinstance(current, CiMap) or segment not in current:
                return None, False
            current = current[segment]
        return current, True

    def to_dict(self) -> dict[str, Any]:
        """Return plain nested dicts with the original key spelling."""

        result: dict[str, Any] = {}
        for original, value in self._entries.values():
            result[original] = value.to_dict() if isinstance(value, CiMap) else value
        return result


def _decode_yaml(data: bytes) -> Any:
    document = yaml.safe_load(data)
    return {} if document is None else document


def _decode_json(data: bytes) -> Any:
    return json.loads(data)


def _decode_toml(data: bytes) -> Any:
    return tomllib.loads(data.decode("utf-8"))


DECODERS: tuple[tuple[str, Callable[[bytes], Any]], ...] = (
    ("yaml", _decode_yaml),
    ("json", _decode_json),
    ("toml", _decode_toml),
)


def decode_document(data: bytes, *, separator: str = DEFAULT_SEPARATOR, source: str = "<bytes>") -> CiMap:
    """Decode file bytes into a :class:`CiMap`, trying YAML, JSON and TOML in order.

    Raises:
        FileTypeNotSupportedError: No decoder produced a top-level mapping.
    """

    for name, decoder in DECODERS:
        try:
            document = decoder(data)
        except (yaml.YAMLError, ValueError, UnicodeDecodeError) as exc:
            LOGGER.debug("Decoder %s rejected %s: %s", name, source, exc)
            continue
        if not isinstance(document, Mapping):
            LOGGER.debug("Decoder %s produced %s for %s, expected a mapping", name, type(document).__name__, source)
            continue
        LOGGER.debug("Decoded %s as %s", source, name)
        return CiMap(document, separator=separator)
    raise FileTypeNotSupportedError(f"could not decode {source}: file type not supported")


__all__ = ["CiMap", "DECODERS", "decode_document"]

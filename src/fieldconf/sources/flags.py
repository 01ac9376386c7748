"""Read settings from command-line flags."""

from __future__ import annotations

import argparse
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Sequence

from fieldconf.catalog import Field
from fieldconf.errors import FlagParseError, MalformedFlagConfigError
from fieldconf.settings import FlagsConfig

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class FlagInfo:
    """One registered flag identity and what the command line supplied for it."""

    name: str
    dest: str
    help: str
    short_names: list[str] = field(default_factory=list)
    raw_value: str | None = None

    @property
    def changed(self) -> bool:
        """bool: True when the flag was present on the command line, even as ``--name=``."""

        return self.raw_value is not None

    @property
    def option_strings(self) -> list[str]:
        return [f"--{self.name}", *(f"-{short}" for short in self.short_names)]


class _FlagParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of printing usage and exiting."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise FlagParseError(message)


def specific_flag_name(field: Field, config: FlagsConfig) -> str:
    return field.full_name(config.separator).lower()


class FlagRegistry:
    """De-duplicated set of flag identities for one catalog.

    Identities are keyed by long name, so a shared ``flag=`` default name is
    registered once no matter how many fields declare it, and a field whose
    specific name equals an existing default name reuses that identity.
    """

    def __init__(self, fields: Sequence[Field], config: FlagsConfig) -> None:
        self._identities: dict[str, FlagInfo] = {}
        self._bindings: list[tuple[Field, FlagInfo | None, FlagInfo]] = []

        for item in fields:
            default_name = item.config.flag.default_name
            shared = self._register(default_name, "shared") if default_name else None
            specific = self._register(specific_flag_name(item, config), "specific")
            self._bindings.append((item, shared, specific))

        self._bind_short_names()

    def _register(self, name: str, kind: str) -> FlagInfo:
        info = self._identities.get(name)
        if info is None:
            info = FlagInfo(name=name, dest=f"flag_{len(self._identities)}", help=kind)
            self._identities[name] = info
        return info

    def _bind_short_names(self) -> None:
        requests: dict[str, list[Field]] = defaultdict(list)
        specifics: dict[str, list[FlagInfo]] = defaultdict(list)
        for item, _, specific in self._bindings:
            short = item.config.flag.short_name
            if short:
                requests[short].append(item)
                specifics[short].append(specific)

        for short, owners in requests.items():
            if len(owners) == 1:
                identity = specifics[short][0]
            else:
                shared = {owner.config.flag.default_name for owner in owners}
                if len(shared) != 1 or "" in shared:
                    paths = ", ".join(owner.path for owner in owners)
                    raise MalformedFlagConfigError(
                        f"short flag -{short} is requested by fields with different flag names: {paths}"
                    )
                identity = self._identities[shared.pop()]
            identity.short_names.append(short)

    @property
    def identities(self) -> list[FlagInfo]:
        return list(self._identities.values())

    def build_parser(self) -> argparse.ArgumentParser:
        parser = _FlagParser(prog="config", add_help=False, allow_abbrev=False)
        for info in self._identities.values():
            parser.add_argument(*info.option_strings, dest=info.dest, default=None, metavar="VALUE", help=info.help)
        return parser

    def parse(self, args: Sequence[str]) -> None:
        """Tokenize ``args`` and record the raw value of every supplied identity.

        A value that starts with ``-`` (other than a negative number) must be
        attached with ``=``, as in ``--name=-v``. Given as a separate token it
        is read as another flag and the first one reports a missing value.

        Raises:
            MalformedFlagConfigError: Two identities claim the same option string.
            FlagParseError: A supplied flag has no value.
        """

        try:
            parser = self.build_parser()
        except argparse.ArgumentError as exc:
            raise MalformedFlagConfigError(str(exc)) from exc
        try:
            namespace, unknown = parser.parse_known_args(list(args))
        except argparse.ArgumentError as exc:
            raise FlagParseError(str(exc)) from exc
        if unknown:
            LOGGER.debug("Ignoring unknown arguments %s", unknown)
        for info in self._identities.values():
            info.raw_value = getattr(namespace, info.dest)

    def apply(self) -> None:
        """Assign every supplied identity to its fields, shared identity first."""

        for item, shared, specific in self._bindings:
            identities = (specific,) if shared is None or shared is specific else (shared, specific)
            for info in identities:
                if not info.changed:
                    continue
                item.set_from_string(info.raw_value or "")
                LOGGER.debug("Applied flag value field=%s flag=--%s", item.path, info.name)


def read_flags(fields: Sequence[Field], config: FlagsConfig, args: Sequence[str]) -> None:
    """Parse ``args`` against every field's flag identities and assign supplied values."""

    registry = FlagRegistry(fields, config)
    registry.parse(args)
    registry.apply()


__all__ = ["FlagInfo", "FlagRegistry", "read_flags", "specific_flag_name"]

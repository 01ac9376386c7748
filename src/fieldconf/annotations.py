"""Parse per-field ``config`` annotations into source naming metadata.

An annotation is a comma-separated list of ``key=value`` pairs::

    port: int = field(default=3000, metadata={"config": "env=PORT,flag=p port"})

Recognised keys are ``env`` (explicit environment variable name), ``file``
(explicit file key) and ``flag`` (a shared long flag name and/or a
one-character short alias, separated by a single space).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fieldconf.errors import MalformedAnnotationError, MalformedFlagConfigError

TAG = "config"
ENV_KEY = "env"
FILE_KEY = "file"
FLAG_KEY = "flag"
FLAG_SPEC_SEPARATOR = " "


@dataclass(frozen=True, slots=True)
class FlagSpec:
    """Long default flag name and short alias declared by ``flag=``."""

    default_name: str = ""
    short_name: str = ""


@dataclass(frozen=True, slots=True)
class ParameterConfig:
    """Explicit per-source names for a single settings field."""

    default_file_field: str = ""
    default_env_name: str = ""
    flag: FlagSpec = field(default_factory=FlagSpec)


def parse_flag_spec(spec: str) -> FlagSpec:
    """Parse the value of a ``flag=`` entry.

    Args:
        spec: One or two space-separated tokens. A one-character token is the
            short alias, any longer token is the shared default name.

    Returns:
        The parsed :class:`FlagSpec`.

    Raises:
        MalformedFlagConfigError: More than two tokens, an empty token, or two
            tokens of the same category.
    """

    tokens = spec.split(FLAG_SPEC_SEPARATOR)
    if len(tokens) > 2:
        raise MalformedFlagConfigError(f"flag spec {spec!r} has more than two tokens")

    default_name = ""
    short_name = ""
    for token in tokens:
        if not token:
            raise MalformedFlagConfigError(f"flag spec {spec!r} contains an empty token")
        if len(token) == 1:
            if short_name:
                raise MalformedFlagConfigError(f"flag spec {spec!r} declares two short names")
            short_name = token
        else:
            if default_name:
                raise MalformedFlagConfigError(f"flag spec {spec!r} declares two long names")
            default_name = token
    return FlagSpec(default_name=default_name, short_name=short_name)


def parse_parameter_config(annotation: str) -> ParameterConfig:
    """Parse a full ``config`` annotation string.

    An empty annotation yields an empty :class:`ParameterConfig`. Any grammar
    violation is raised as :class:`MalformedAnnotationError` so the collector
    can abort before a single source is read.
    """

    if not annotation:
        return ParameterConfig()

    values: dict[str, object] = {}
    for entry in annotation.split(","):
        key, sep, value = entry.partition("=")
        if not sep:
            raise MalformedAnnotationError(
                f"invalid config annotation {annotation!r}: entry {entry!r} is not key=value"
            )
        if not key or not value:
            raise MalformedAnnotationError(
                f"invalid config annotation {annotation!r}: expected the format "
                "'file=val,env=val,flag=l long'"
            )
        if key == ENV_KEY:
            values["default_env_name"] = value
        elif key == FILE_KEY:
            values["default_file_field"] = value
        elif key == FLAG_KEY:
            values["flag"] = parse_flag_spec(value)
        else:
            raise MalformedAnnotationError(
                f"invalid config annotation {annotation!r}: only {ENV_KEY}, {FILE_KEY} and "
                f"{FLAG_KEY} are allowed as keys, got {key!r}"
            )
    return ParameterConfig(**values)  # type: ignore[arg-type]


__all__ = [
    "TAG",
    "FlagSpec",
    "ParameterConfig",
    "parse_flag_spec",
    "parse_parameter_config",
]

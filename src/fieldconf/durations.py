"""Duration strings such as ``"10s"``, ``"1h30m"`` or ``"-1.5ms"``."""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation

_UNIT_NANOS: dict[str, int] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # micro sign
    "μs": 1_000,  # greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_COMPONENT = re.compile(r"(\d*\.?\d*)([a-zµμ]+)")


def parse_duration(text: str) -> timedelta:
    """Parse a signed sequence of ``<number><unit>`` components.

    Sub-microsecond precision is truncated since ``timedelta`` stops at
    microseconds.

    Raises:
        ValueError: When the text does not follow the duration grammar.
    """

    if not text:
        raise ValueError("invalid duration ''")

    body = text
    negative = False
    if body[0] in "+-":
        negative = body[0] == "-"
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration {text!r}")

    total_nanos = Decimal(0)
    position = 0
    while position < len(body):
        match = _COMPONENT.match(body, position)
        if match is None or match.end() == position:
            raise ValueError(f"invalid duration {text!r}")
        number, unit = match.groups()
        if number in ("", "."):
            raise ValueError(f"invalid duration {text!r}: missing number")
        if unit not in _UNIT_NANOS:
            raise ValueError(f"invalid duration {text!r}: unknown unit {unit!r}")
        try:
            total_nanos += Decimal(number) * _UNIT_NANOS[unit]
        except InvalidOperation as exc:
            raise ValueError(f"invalid duration {text!r}") from exc
        position = match.end()

    micros = int(total_nanos / 1000)
    return timedelta(microseconds=-micros if negative else micros)


def format_duration(delta: timedelta) -> str:
    """Render a ``timedelta`` in the grammar accepted by :func:`parse_duration`."""

    total_micros = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    if total_micros == 0:
        return "0s"

    sign = "-" if total_micros < 0 else ""
    total_micros = abs(total_micros)
    if total_micros < 1_000:
        return f"{sign}{total_micros}us"
    if total_micros < 1_000_000:
        millis, micros = divmod(total_micros, 1_000)
        return f"{sign}{millis}{_fraction(micros, 3)}ms"

    hours, remainder = divmod(total_micros, 3_600_000_000)
    minutes, remainder = divmod(remainder, 60_000_000)
    seconds, micros = divmod(remainder, 1_000_000)
    text = f"{seconds}{_fraction(micros, 6)}s"
    if hours:
        return f"{sign}{hours}h{minutes}m{text}"
    if minutes:
        return f"{sign}{minutes}m{text}"
    return f"{sign}{text}"


def _fraction(value: int, width: int) -> str:
    if not value:
        return ""
    return "." + f"{value:0{width}d}".rstrip("0")


__all__ = ["parse_duration", "format_duration"]

"""Unit tests for text-to-type coercion."""

from __future__ import annotations

import enum
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Literal, Mapping, Optional, Sequence

import pytest
from pydantic import NonNegativeInt

from fieldconf.coercion import (
    ZERO_TIME,
    _PARSERS,
    Int8,
    TypeKind,
    Uint8,
    classify,
    coerce,
    format_string_list,
    format_string_map,
    zero_value,
)
from fieldconf.durations import format_duration
from fieldconf.errors import UnsupportedTypeError, ValueCoercionError


class LogLevel(enum.IntEnum):
    DEBUG = 10
    INFO = 20
    WARNING = 30


class Severity(enum.IntEnum):
    """Level type with its own short-name decoder."""

    WARN = 2
    NONE = 0
    ERROR = 3

    @classmethod
    def from_text(cls, text: str) -> "Severity":
        return {"off": cls.NONE, "wrn": cls.WARN, "err": cls.ERROR}[text]


class Endpoint:
    """Custom type decoded from ``host:port`` text."""

    def __init__(self, host: str = "", port: int = 0) -> None:
        self.host = host
        self.port = port

    @classmethod
    def from_text(cls, text: str) -> "Endpoint":
        host, _, port = text.partition(":")
        return cls(host, int(port))


@pytest.mark.parametrize(
    "annotation,kind",
    [
        (bool, TypeKind.BOOL),
        (int, TypeKind.INT),
        (Int8, TypeKind.INT),
        (Uint8, TypeKind.UINT),
        (NonNegativeInt, TypeKind.UINT),
        (float, TypeKind.FLOAT),
        (Decimal, TypeKind.DECIMAL),
        (complex, TypeKind.COMPLEX),
        (timedelta, TypeKind.DURATION),
        (datetime, TypeKind.TIMESTAMP),
        (str, TypeKind.STRING),
        (Path, TypeKind.PATH),
        (Literal["a", "b"], TypeKind.LITERAL),
        (LogLevel, TypeKind.ENUM),
        (list[str], TypeKind.STRING_LIST),
        (Sequence[str], TypeKind.STRING_LIST),
        (tuple[str, ...], TypeKind.STRING_TUPLE),
        (dict[str, str], TypeKind.STRING_MAP),
        (Mapping[str, str], TypeKind.STRING_MAP),
        (Endpoint, TypeKind.TEXT),
        (list[int], TypeKind.UNSUPPORTED),
        (Any, TypeKind.UNSUPPORTED),
        (int | str, TypeKind.UNSUPPORTED),
    ],
)
def test_classify(annotation: Any, kind: TypeKind) -> None:
    """Each supported annotation lands in its coercion category."""

    assert classify(annotation).kind is kind


def test_optional_is_unwrapped() -> None:
    """Optional types coerce as their inner type."""

    info = classify(Optional[int])
    assert info.kind is TypeKind.INT
    assert info.optional is True
    assert coerce(int | None, "42") == 42


@pytest.mark.parametrize(
    "annotation,value",
    [
        (int, -17),
        (int, 2**70),
        (float, 3.25),
        (float, -0.5),
        (complex, 1 + 2j),
        (bool, True),
        (bool, False),
        (str, "hello world"),
        (Decimal, Decimal("10.05")),
    ],
)
def test_scalar_round_trip(annotation: Any, value: Any) -> None:
    """Coercing a value's canonical string representation reads back the same value."""

    assert coerce(annotation, str(value)) == value


@pytest.mark.parametrize(
    "delta",
    [timedelta(seconds=10), timedelta(hours=1, minutes=30), timedelta(milliseconds=250), timedelta(seconds=-3)],
)
def test_duration_round_trip(delta: timedelta) -> None:
    """Durations survive format -> coerce."""

    assert coerce(timedelta, format_duration(delta)) == delta


def test_timestamp_round_trip() -> None:
    """RFC 3339 timestamps survive isoformat -> coerce."""

    moment = datetime(2024, 5, 17, 8, 30, 15, 123000, tzinfo=timezone.utc)
    assert coerce(datetime, moment.isoformat()) == moment


def test_timestamp_accepts_zulu_and_long_fractions() -> None:
    """``Z`` suffix and nanosecond fractions are accepted."""

    parsed = coerce(datetime, "2024-05-17T08:30:15.123456789Z")
    assert parsed == datetime(2024, 5, 17, 8, 30, 15, 123456, tzinfo=timezone.utc)


@pytest.mark.parametrize("text", ["2024-05-17", "2024-05-17T08:30:15", "yesterday"])
def test_timestamp_requires_rfc3339(text: str) -> None:
    """Dates without time or offset are not RFC 3339."""

    with pytest.raises(ValueCoercionError):
        coerce(datetime, text)


@pytest.mark.parametrize("text,expected", [("1", True), ("T", True), ("TRUE", True), ("f", False), ("False", False)])
def test_bool_strings(text: str, expected: bool) -> None:
    """The canonical boolean spellings are accepted."""

    assert coerce(bool, text) is expected


@pytest.mark.parametrize("text", ["yes", "on", "2"])
def test_bool_rejects_other_words(text: str) -> None:
    """Anything outside the canonical set is a coercion error."""

    with pytest.raises(ValueCoercionError):
        coerce(bool, text)


@pytest.mark.parametrize("text", ["1.5", " 3", "1_000", "0x10", "ten"])
def test_int_requires_base10(text: str) -> None:
    """Integers are parsed strictly in base 10."""

    with pytest.raises(ValueCoercionError):
        coerce(int, text)


def test_sized_int_bounds() -> None:
    """Bounded integer aliases reject out-of-range values."""

    assert coerce(Int8, "-128") == -128
    with pytest.raises(ValueCoercionError):
        coerce(Int8, "128")


def test_unsigned_rejects_sign() -> None:
    """Unsigned integers accept digits only."""

    assert coerce(Uint8, "255") == 255
    with pytest.raises(ValueCoercionError):
        coerce(Uint8, "-1")
    with pytest.raises(ValueCoercionError):
        coerce(Uint8, "+1")
    with pytest.raises(ValueCoercionError):
        coerce(Uint8, "256")


def test_complex_accepts_i_suffix() -> None:
    """``i`` is accepted as the imaginary unit."""

    assert coerce(complex, "1+2i") == 1 + 2j
    assert coerce(complex, "(3-4i)") == 3 - 4j


def test_string_list_is_split_and_trimmed() -> None:
    """Comma-separated text becomes a trimmed list."""

    assert coerce(list[str], " a, b ,c ") == ["a", "b", "c"]
    assert coerce(tuple[str, ...], "x,y") == ("x", "y")


def test_string_map_skips_malformed_entries() -> None:
    """Entries without ``=`` are skipped rather than failing the value."""

    assert coerce(dict[str, str], "a = 1, broken, b=x=y") == {"a": "1", "b": "x=y"}


def test_string_collection_round_trip() -> None:
    """The formatting helpers produce text the coercer reads back."""

    assert coerce(list[str], format_string_list(["a", "b"])) == ["a", "b"]
    assert coerce(dict[str, str], format_string_map({"k1": "v1", "k2": "v2"})) == {"k1": "v1", "k2": "v2"}


def test_enum_by_name_or_value() -> None:
    """Enums resolve by case-insensitive name and then by value."""

    assert coerce(LogLevel, "warning") is LogLevel.WARNING
    assert coerce(LogLevel, "20") is LogLevel.INFO
    with pytest.raises(ValueCoercionError):
        coerce(LogLevel, "verbose")


def test_literal_membership() -> None:
    """Literal values must match one of the members."""

    assert coerce(Literal["sqlite", "postgres"], "postgres") == "postgres"
    with pytest.raises(ValueCoercionError):
        coerce(Literal["sqlite", "postgres"], "mysql")


def test_custom_text_decoder_is_delegated_to() -> None:
    """Types with ``from_text`` decode themselves."""

    endpoint = coerce(Endpoint, "db.local:5432")
    assert (endpoint.host, endpoint.port) == ("db.local", 5432)


def test_custom_text_decoder_failure_is_typed() -> None:
    """A ValueError from the custom decoder surfaces as a coercion error."""

    with pytest.raises(ValueCoercionError):
        coerce(Endpoint, "db.local:not-a-port")


def test_path_passthrough() -> None:
    """Paths are built from the raw text."""

    assert coerce(Path, "/etc/app") == Path("/etc/app")


@pytest.mark.parametrize(
    "annotation,expected",
    [
        (int, 0),
        (float, 0.0),
        (bool, False),
        (str, ""),
        (timedelta, timedelta(0)),
        (datetime, ZERO_TIME),
        (list[str], []),
        (dict[str, str], {}),
        (Optional[int], None),
        (Optional[LogLevel], None),
    ],
)
def test_empty_string_resets_to_zero(annotation: Any, expected: Any) -> None:
    """An empty string is the explicit unset signal."""

    assert coerce(annotation, "") == expected
    assert zero_value(annotation) == expected


def test_enum_zero_value_is_first_member_without_falsy_value() -> None:
    """Enums without a falsy member reset to their first declared member."""

    assert coerce(LogLevel, "") is LogLevel.DEBUG


def test_enum_zero_value_prefers_falsy_member() -> None:
    assert coerce(Severity, "") is Severity.NONE


def test_literal_zero_value_is_first_argument() -> None:
    assert coerce(Literal["sqlite", "postgres"], "") == "sqlite"


def test_enum_with_custom_decoder_delegates_to_it() -> None:
    """``from_text`` wins over the built-in member-name lookup."""

    assert classify(Severity).kind is TypeKind.TEXT
    assert coerce(Severity, "wrn") is Severity.WARN
    with pytest.raises(ValueCoercionError):
        coerce(Severity, "WARN")


def test_every_kind_has_a_parser() -> None:
    assert set(_PARSERS) == set(TypeKind)


def test_custom_type_zero_value_uses_default_constructor() -> None:
    """Text-decodable types reset through their no-argument constructor."""

    assert coerce(Endpoint, "").host == ""


@pytest.mark.parametrize("annotation", [list[int], Any, int | str, set[str]])
def test_unsupported_types_raise(annotation: Any) -> None:
    """Types outside the supported categories report an unsupported-type error."""

    with pytest.raises(UnsupportedTypeError):
        coerce(annotation, "value")

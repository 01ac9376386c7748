"""Convert raw text values into a settings field's static type."""

from __future__ import annotations

import enum
import re
import types
from collections.abc import Iterable, Mapping, MutableMapping, MutableSequence, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Annotated, Any, Callable, Literal, Protocol, Union, get_args, get_origin, runtime_checkable

import annotated_types
from pydantic import BaseModel

from fieldconf.durations import parse_duration
from fieldconf.errors import UnsupportedTypeError, ValueCoercionError

Int8 = Annotated[int, annotated_types.Ge(-(2**7)), annotated_types.Le(2**7 - 1)]
Int16 = Annotated[int, annotated_types.Ge(-(2**15)), annotated_types.Le(2**15 - 1)]
Int32 = Annotated[int, annotated_types.Ge(-(2**31)), annotated_types.Le(2**31 - 1)]
Int64 = Annotated[int, annotated_types.Ge(-(2**63)), annotated_types.Le(2**63 - 1)]
Uint8 = Annotated[int, annotated_types.Ge(0), annotated_types.Le(2**8 - 1)]
Uint16 = Annotated[int, annotated_types.Ge(0), annotated_types.Le(2**16 - 1)]
Uint32 = Annotated[int, annotated_types.Ge(0), annotated_types.Le(2**32 - 1)]
Uint64 = Annotated[int, annotated_types.Ge(0), annotated_types.Le(2**64 - 1)]

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_SIGNED_INT = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_INT = re.compile(r"[0-9]+")
_RFC3339 = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})(?:\.(?P<fraction>\d+))?(?P<offset>[Zz]|[+-]\d{2}:\d{2})"
)


@runtime_checkable
class TextDecodable(Protocol):
    """Types that know how to build themselves from a text value."""

    @classmethod
    def from_text(cls, text: str) -> Any: ...


class TypeKind(enum.Enum):
    """Categories of target types the coercer dispatches on."""

    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    DECIMAL = "decimal"
    COMPLEX = "complex"
    DURATION = "duration"
    TIMESTAMP = "timestamp"
    STRING = "string"
    PATH = "path"
    LITERAL = "literal"
    ENUM = "enum"
    STRING_LIST = "string_list"
    STRING_TUPLE = "string_tuple"
    STRING_MAP = "string_map"
    TEXT = "text"
    STRUCT = "struct"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class TypeInfo:
    """Classification of a static type for coercion."""

    kind: TypeKind
    base: Any
    optional: bool = False
    lower: int | None = None
    upper: int | None = None


def _strip_optional(annotation: Any) -> tuple[Any, bool]:
    origin = get_origin(annotation)
    if origin in (Union, types.UnionType):
        members = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(members) == 1 and len(members) != len(get_args(annotation)):
            return members[0], True
    return annotation, False


def _integer_bounds(metadata: Iterable[Any]) -> tuple[int | None, int | None]:
    lower: int | None = None
    upper: int | None = None
    for item in metadata:
        if isinstance(item, annotated_types.Ge):
            lower = int(item.ge)
        elif isinstance(item, annotated_types.Gt):
            lower = int(item.gt) + 1
        elif isinstance(item, annotated_types.Le):
            upper = int(item.le)
        elif isinstance(item, annotated_types.Lt):
            upper = int(item.lt) - 1
        elif isinstance(item, annotated_types.GroupedMetadata):
            # conint() and Interval() bundle several bounds
            nested_lower, nested_upper = _integer_bounds(item)
            lower = nested_lower if nested_lower is not None else lower
            upper = nested_upper if nested_upper is not None else upper
    return lower, upper


def is_settings_struct(value: Any) -> bool:
    """Return True for dataclass or pydantic model *instances*."""

    if isinstance(value, type):
        return False
    return isinstance(value, BaseModel) or hasattr(type(value), "__dataclass_fields__")


def _is_settings_class(annotation: Any) -> bool:
    if not isinstance(annotation, type):
        return False
    return issubclass(annotation, BaseModel) or hasattr(annotation, "__dataclass_fields__")


def classify(annotation: Any) -> TypeInfo:
    """Classify ``annotation`` into the :class:`TypeKind` the coercer dispatches on."""

    base, optional = _strip_optional(annotation)
    metadata: tuple[Any, ...] = ()
    if get_origin(base) is Annotated:
        base, *extra = get_args(base)
        metadata = tuple(extra)
        inner, inner_optional = _strip_optional(base)
        base, optional = inner, optional or inner_optional

    origin = get_origin(base)
    args = get_args(base)
    is_class = isinstance(base, type) and origin is None

    if base is bool:
        return TypeInfo(TypeKind.BOOL, base, optional)
    if base is int:
        lower, upper = _integer_bounds(metadata)
        kind = TypeKind.UINT if lower is not None and lower >= 0 else TypeKind.INT
        return TypeInfo(kind, base, optional, lower, upper)
    if base is float:
        return TypeInfo(TypeKind.FLOAT, base, optional)
    if base is Decimal:
        return TypeInfo(TypeKind.DECIMAL, base, optional)
    if base is complex:
        return TypeInfo(TypeKind.COMPLEX, base, optional)
    if base is timedelta:
        return TypeInfo(TypeKind.DURATION, base, optional)
    if base is datetime:
        return TypeInfo(TypeKind.TIMESTAMP, base, optional)
    if base is str:
        return TypeInfo(TypeKind.STRING, base, optional)
    # a custom decoder takes precedence over the built-in enum and path rules
    if is_class and callable(getattr(base, "from_text", None)):
        return TypeInfo(TypeKind.TEXT, base, optional)
    if is_class and issubclass(base, Path):
        return TypeInfo(TypeKind.PATH, base, optional)
    if origin is Literal:
        return TypeInfo(TypeKind.LITERAL, base, optional)
    if is_class and issubclass(base, enum.Enum):
        return TypeInfo(TypeKind.ENUM, base, optional)
    if origin in (list, Sequence, MutableSequence) and args == (str,):
        return TypeInfo(TypeKind.STRING_LIST, base, optional)
    if base is list:
        return TypeInfo(TypeKind.STRING_LIST, base, optional)
    if origin is tuple and args == (str, Ellipsis):
        return TypeInfo(TypeKind.STRING_TUPLE, base, optional)
    if origin in (dict, Mapping, MutableMapping) and args == (str, str):
        return TypeInfo(TypeKind.STRING_MAP, base, optional)
    if base is dict:
        return TypeInfo(TypeKind.STRING_MAP, base, optional)
    if is_class and _is_settings_class(base):
        return TypeInfo(TypeKind.STRUCT, base, optional)
    return TypeInfo(TypeKind.UNSUPPORTED, base, optional)


def split_string_list(text: str) -> list[str]:
    """Split ``a, b ,c`` into ``["a", "b", "c"]``."""

    return [item.strip() for item in text.split(",")]


def split_string_map(text: str) -> dict[str, str]:
    """Split ``k1=v1, k2=v2`` into a mapping; entries without ``=`` are skipped."""

    result: dict[str, str] = {}
    for item in split_string_list(text):
        key, sep, value = item.partition("=")
        if not sep:
            continue
        result[key.strip()] = value.strip()
    return result


def format_string_list(values: Sequence[str]) -> str:
    return ",".join(values)


def format_string_map(values: Mapping[str, str]) -> str:
    return ",".join(f"{key}={value}" for key, value in values.items())


def _parse_bool(text: str, info: TypeInfo) -> bool:
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"invalid boolean {text!r}")


def _parse_int(text: str, info: TypeInfo) -> int:
    pattern = _UNSIGNED_INT if info.kind is TypeKind.UINT else _SIGNED_INT
    if not pattern.fullmatch(text):
        raise ValueError(f"invalid base-10 integer {text!r}")
    value = int(text)
    if info.lower is not None and value < info.lower:
        raise ValueError(f"value {value} out of range, minimum is {info.lower}")
    if info.upper is not None and value > info.upper:
        raise ValueError(f"value {value} out of range, maximum is {info.upper}")
    return value


def _parse_float(text: str, info: TypeInfo) -> float:
    if text != text.strip() or "_" in text:
        raise ValueError(f"invalid float {text!r}")
    return float(text)


def _parse_decimal(text: str, info: TypeInfo) -> Decimal:
    try:
        return Decimal(text)
    except InvalidOperation as exc:
        raise ValueError(f"invalid decimal {text!r}") from exc


def _parse_complex(text: str, info: TypeInfo) -> complex:
    if text != text.strip() or "_" in text:
        raise ValueError(f"invalid complex {text!r}")
    candidate = text
    if candidate.startswith("(") and candidate.endswith(")"):
        candidate = candidate[1:-1]
    if candidate.endswith("i"):
        candidate = candidate[:-1] + "j"
    return complex(candidate)


def _parse_duration(text: str, info: TypeInfo) -> timedelta:
    return parse_duration(text)


def _parse_timestamp(text: str, info: TypeInfo) -> datetime:
    match = _RFC3339.fullmatch(text)
    if match is None:
        raise ValueError(f"timestamp {text!r} is not RFC 3339")
    fraction = match.group("fraction")
    offset = match.group("offset").upper()
    normalized = f"{match.group('date')}T{match.group('time')}"
    if fraction:
        normalized += "." + fraction[:6].ljust(6, "0")
    normalized += "+00:00" if offset == "Z" else offset
    return datetime.fromisoformat(normalized)


def _parse_string(text: str, info: TypeInfo) -> str:
    return text


def _parse_path(text: str, info: TypeInfo) -> Path:
    return info.base(text)


def _parse_literal(text: str, info: TypeInfo) -> Any:
    for member in get_args(info.base):
        if str(member) == text:
            return member
    allowed = ", ".join(repr(member) for member in get_args(info.base))
    raise ValueError(f"{text!r} is not one of {allowed}")


def _parse_enum(text: str, info: TypeInfo) -> enum.Enum:
    members = info.base.__members__
    lowered = text.lower()
    for name, member in members.items():
        if name.lower() == lowered:
            return member
    for member in info.base:
        if str(member.value) == text:
            return member
    raise ValueError(f"{text!r} is not a member of {info.base.__name__}")


def _parse_string_list(text: str, info: TypeInfo) -> list[str]:
    return split_string_list(text)


def _parse_string_tuple(text: str, info: TypeInfo) -> tuple[str, ...]:
    return tuple(split_string_list(text))


def _parse_string_map(text: str, info: TypeInfo) -> dict[str, str]:
    return split_string_map(text)


def _parse_text(text: str, info: TypeInfo) -> Any:
    return info.base.from_text(text)


def _unsupported(text: str, info: TypeInfo) -> Any:
    raise UnsupportedTypeError(
        f"no text coercion for type {_type_name(info.base)}",
        value=text,
        target=info.base,
    )


_PARSERS: dict[TypeKind, Callable[[str, TypeInfo], Any]] = {
    TypeKind.BOOL: _parse_bool,
    TypeKind.INT: _parse_int,
    TypeKind.UINT: _parse_int,
    TypeKind.FLOAT: _parse_float,
    TypeKind.DECIMAL: _parse_decimal,
    TypeKind.COMPLEX: _parse_complex,
    TypeKind.DURATION: _parse_duration,
    TypeKind.TIMESTAMP: _parse_timestamp,
    TypeKind.STRING: _parse_string,
    TypeKind.PATH: _parse_path,
    TypeKind.LITERAL: _parse_literal,
    TypeKind.ENUM: _parse_enum,
    TypeKind.STRING_LIST: _parse_string_list,
    TypeKind.STRING_TUPLE: _parse_string_tuple,
    TypeKind.STRING_MAP: _parse_string_map,
    TypeKind.TEXT: _parse_text,
    TypeKind.STRUCT: _unsupported,
    TypeKind.UNSUPPORTED: _unsupported,
}


def _enum_zero(info: TypeInfo) -> enum.Enum:
    """Member whose value is falsy (``0``, ``""``), else the first declared member."""

    members = list(info.base)
    if not members:
        raise UnsupportedTypeError(f"enum {_type_name(info.base)} has no members", value="", target=info.base)
    for member in members:
        if not member.value:
            return member
    return members[0]


def _text_zero(info: TypeInfo) -> Any:
    if issubclass(info.base, enum.Enum):
        return _enum_zero(info)
    try:
        return info.base()
    except TypeError as exc:
        raise UnsupportedTypeError(
            f"type {_type_name(info.base)} has no zero value", value="", target=info.base
        ) from exc


_ZEROS: dict[TypeKind, Callable[[TypeInfo], Any]] = {
    TypeKind.BOOL: lambda info: False,
    TypeKind.INT: lambda info: 0,
    TypeKind.UINT: lambda info: 0,
    TypeKind.FLOAT: lambda info: 0.0,
    TypeKind.DECIMAL: lambda info: Decimal(0),
    TypeKind.COMPLEX: lambda info: 0j,
    TypeKind.DURATION: lambda info: timedelta(0),
    TypeKind.TIMESTAMP: lambda info: ZERO_TIME,
    TypeKind.STRING: lambda info: "",
    TypeKind.PATH: lambda info: info.base(),
    TypeKind.LITERAL: lambda info: get_args(info.base)[0],
    TypeKind.ENUM: _enum_zero,
    TypeKind.STRING_LIST: lambda info: [],
    TypeKind.STRING_TUPLE: lambda info: (),
    TypeKind.STRING_MAP: lambda info: {},
    TypeKind.TEXT: _text_zero,
}


def _type_name(annotation: Any) -> str:
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation)


def zero_value(annotation: Any) -> Any:
    """Return the value an explicit "unset" resets a field of ``annotation`` to.

    Enums reset to their falsy member or, failing that, their first member;
    literals reset to their first argument.

    Raises:
        UnsupportedTypeError: The type has no zero value (nested settings
            structures, custom types without a no-argument constructor).
    """

    info = classify(annotation)
    if info.optional:
        return None
    factory = _ZEROS.get(info.kind)
    if factory is not None:
        return factory(info)
    raise UnsupportedTypeError(f"type {_type_name(info.base)} has no zero value", value="", target=annotation)


def coerce(annotation: Any, text: str) -> Any:
    """Convert ``text`` into a value of ``annotation``.

    An empty string is the explicit "unset" signal and yields the type's zero
    value. Parse failures are raised as :class:`ValueCoercionError`, types
    without a coercion rule as :class:`UnsupportedTypeError`.
    """

    if text == "":
        return zero_value(annotation)

    info = classify(annotation)
    parser = _PARSERS[info.kind]
    try:
        return parser(text, info)
    except ValueCoercionError:
        raise
    except (ValueError, TypeError, LookupError, ArithmeticError) as exc:
        raise ValueCoercionError(
            f"cannot convert {text!r} to {_type_name(info.base)}: {exc}",
            value=text,
            target=annotation,
        ) from exc


__all__ = [
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "ZERO_TIME",
    "TextDecodable",
    "TypeKind",
    "TypeInfo",
    "classify",
    "coerce",
    "zero_value",
    "is_settings_struct",
    "split_string_list",
    "split_string_map",
    "format_string_list",
    "format_string_map",
]

"""Flatten a settings structure into addressable fields with naming metadata."""

from __future__ import annotations

import dataclasses
import logging
import typing
from dataclasses import dataclass
from typing import Annotated, Any, Iterator

from pydantic import BaseModel, ValidationError

from fieldconf.annotations import TAG, ParameterConfig, parse_parameter_config
from fieldconf.coercion import coerce, is_settings_struct
from fieldconf.errors import (
    FieldNotWritableError,
    MalformedAnnotationError,
    SettingsTargetError,
    ValueCoercionError,
)

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class Field:
    """A single settable slot of a settings structure.

    ``owner`` is the structure instance holding the attribute, so writes go
    straight into the caller's object graph.
    """

    base: tuple[str, ...]
    name: str
    owner: Any
    annotation: Any
    config: ParameterConfig

    def full_name(self, separator: str) -> str:
        return separator.join((*self.base, self.name))

    @property
    def path(self) -> str:
        """str: Dotted path used in log and error messages."""

        return self.full_name(".")

    @property
    def value(self) -> Any:
        return getattr(self.owner, self.name)

    @property
    def is_struct(self) -> bool:
        return is_settings_struct(self.value)

    def set(self, value: Any) -> None:
        """Assign ``value`` to the underlying attribute.

        Raises:
            FieldNotWritableError: The owning structure is frozen.
            ValueCoercionError: pydantic's assignment validation rejected the value.
        """

        if _is_frozen(self.owner, self.name):
            raise FieldNotWritableError(f"can't set {self.path}: {type(self.owner).__name__} is frozen")
        try:
            setattr(self.owner, self.name, value)
        except ValidationError as exc:
            raise ValueCoercionError(
                f"{self.path}: value {value!r} rejected by {type(self.owner).__name__}",
                value=value,
                target=self.annotation,
                path=self.path,
            ) from exc
        except AttributeError as exc:
            raise FieldNotWritableError(f"can't set {self.path}: {exc}") from exc

    def set_from_string(self, text: str) -> None:
        """Coerce ``text`` into the field's static type and assign it."""

        try:
            value = coerce(self.annotation, text)
        except ValueCoercionError as exc:
            raise exc.with_path(self.path) from exc.__cause__
        self.set(value)


def _is_frozen(owner: Any, name: str) -> bool:
    if isinstance(owner, BaseModel):
        info = type(owner).model_fields.get(name)
        return bool(type(owner).model_config.get("frozen") or (info is not None and info.frozen))
    params = getattr(type(owner), "__dataclass_params__", None)
    return bool(params is not None and params.frozen)


def _iter_dataclass_fields(owner: Any) -> Iterator[tuple[str, Any, str]]:
    owner_type = type(owner)
    try:
        hints = typing.get_type_hints(owner_type, include_extras=True)
    except (NameError, TypeError) as exc:
        LOGGER.debug("Could not resolve type hints for %s: %s", owner_type.__name__, exc)
        hints = {}
    for item in dataclasses.fields(owner):
        annotation = hints.get(item.name, item.type)
        if isinstance(annotation, str):
            annotation = type(getattr(owner, item.name))
        yield item.name, annotation, str(item.metadata.get(TAG, ""))


def _iter_model_fields(owner: BaseModel) -> Iterator[tuple[str, Any, str]]:
    for name, info in type(owner).model_fields.items():
        annotation = info.annotation
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]  # type: ignore[valid-type]
        extra = info.json_schema_extra
        raw = extra.get(TAG, "") if isinstance(extra, dict) else ""
        yield name, annotation, str(raw or "")


def _iter_struct_fields(owner: Any) -> Iterator[tuple[str, Any, str]]:
    if isinstance(owner, BaseModel):
        return _iter_model_fields(owner)
    return _iter_dataclass_fields(owner)


def _collect(owner: Any, base: tuple[str, ...]) -> list[Field]:
    fields: list[Field] = []
    for name, annotation, raw_config in _iter_struct_fields(owner):
        try:
            config = parse_parameter_config(raw_config)
        except MalformedAnnotationError as exc:
            dotted = ".".join((*base, name))
            raise type(exc)(f"{dotted}: {exc}") from exc
        field = Field(base=base, name=name, owner=owner, annotation=annotation, config=config)
        fields.append(field)
        if field.is_struct:
            fields.extend(_collect(field.value, (*base, name)))
    return fields


def collect_fields(target: Any) -> list[Field]:
    """Walk ``target`` depth-first and return every field, nested ones included.

    Struct-typed fields are listed before their children. Annotations are
    parsed eagerly, so a malformed annotation anywhere in the structure
    fails the whole walk.

    Args:
        target: A dataclass or pydantic model instance owned by the caller.

    Returns:
        Fields in declaration order.

    Raises:
        SettingsTargetError: ``target`` is not a settings structure instance.
        MalformedAnnotationError: A field carries an invalid annotation.
    """

    if not is_settings_struct(target):
        raise SettingsTargetError(
            f"expected a dataclass or pydantic model instance, got {type(target).__name__}"
        )
    fields = _collect(target, ())
    LOGGER.debug("Collected %d fields from %s", len(fields), type(target).__name__)
    return fields


__all__ = ["Field", "collect_fields"]

"""Exception hierarchy raised while collecting configuration values."""

from __future__ import annotations

from typing import Any


class FieldconfError(RuntimeError):
    """Base class for every error raised by fieldconf."""


class MalformedAnnotationError(FieldconfError):
    """A field's ``config`` annotation does not follow the ``key=value`` grammar."""


class MalformedFlagConfigError(MalformedAnnotationError):
    """A ``flag=`` spec (or a short alias registration) is malformed."""


class SettingsTargetError(FieldconfError):
    """The merge target is not a dataclass or pydantic model instance."""


class FileTypeNotSupportedError(FieldconfError):
    """A matched configuration file could not be decoded by any known format."""


class ConfigFileReadError(FieldconfError):
    """A matched configuration file exists but could not be read."""


class NoConfigFileFoundError(FieldconfError):
    """No search location contained a file with the configured base name.

    The collector treats this as a soft condition unless files are required.
    """


class ValueCoercionError(FieldconfError):
    """A raw value could not be converted into a field's static type."""

    def __init__(self, message: str, *, value: Any = None, target: Any = None, path: str | None = None) -> None:
        super().__init__(message)
        self.value = value
        self.target = target
        self.path = path

    def with_path(self, path: str) -> "ValueCoercionError":
        """Return a copy of the error that names the field it was raised for."""

        if self.path is not None:
            return self
        error = type(self)(f"{path}: {self}", value=self.value, target=self.target, path=path)
        error.__cause__ = self.__cause__
        return error


class UnsupportedTypeError(ValueCoercionError):
    """The field's static type has no text coercion rule."""


class FieldNotWritableError(FieldconfError):
    """The field belongs to a frozen settings structure."""


class FlagParseError(FieldconfError):
    """The command-line arguments could not be tokenized."""


__all__ = [
    "FieldconfError",
    "MalformedAnnotationError",
    "MalformedFlagConfigError",
    "SettingsTargetError",
    "FileTypeNotSupportedError",
    "ConfigFileReadError",
    "NoConfigFileFoundError",
    "ValueCoercionError",
    "UnsupportedTypeError",
    "FieldNotWritableError",
    "FlagParseError",
]

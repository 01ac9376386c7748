"""Populate typed settings objects from defaults, files, environment and flags."""

from .annotations import FlagSpec, ParameterConfig, parse_parameter_config
from .catalog import Field, collect_fields
from .cimap import CiMap, decode_document
from .coercion import (
    Int8,
    Int16,
    Int32,
    Int64,
    TextDecodable,
    Uint8,
    Uint16,
    Uint32,
    Uint64,
    coerce,
    format_string_list,
    format_string_map,
)
from .collector import Collector, get
from .durations import format_duration, parse_duration
from .errors import (
    ConfigFileReadError,
    FieldconfError,
    FieldNotWritableError,
    FileTypeNotSupportedError,
    FlagParseError,
    MalformedAnnotationError,
    MalformedFlagConfigError,
    NoConfigFileFoundError,
    SettingsTargetError,
    UnsupportedTypeError,
    ValueCoercionError,
)
from .settings import CollectorSettings, EnvConfig, FilesConfig, FlagsConfig, load_collector_settings

__all__ = [
    "Collector",
    "get",
    "CollectorSettings",
    "FilesConfig",
    "EnvConfig",
    "FlagsConfig",
    "load_collector_settings",
    "Field",
    "collect_fields",
    "FlagSpec",
    "ParameterConfig",
    "parse_parameter_config",
    "CiMap",
    "decode_document",
    "coerce",
    "TextDecodable",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "format_duration",
    "parse_duration",
    "format_string_list",
    "format_string_map",
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

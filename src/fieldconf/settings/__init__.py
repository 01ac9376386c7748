"""Public interface for the collector's own configuration."""

from .config import (
    ENV_PREFIX,
    CollectorSettings,
    EnvConfig,
    FilesConfig,
    FlagsConfig,
    load_collector_settings,
)

__all__ = [
    "CollectorSettings",
    "EnvConfig",
    "FilesConfig",
    "FlagsConfig",
    "load_collector_settings",
    "ENV_PREFIX",
]

"""Source readers applied by the collector: files, environment, flags."""

from .env import read_env
from .files import read_files
from .flags import read_flags

__all__ = ["read_env", "read_files", "read_flags"]

"""Core models and utilities for twch."""

from .models import TwitchStream, format_streams
from .settings import ConfigError, Settings

__all__ = [
    "ConfigError",
    "Settings",
    "TwitchStream",
    "format_streams",
]

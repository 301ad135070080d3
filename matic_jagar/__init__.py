"""
matic-jagar configuration package

Typed, validated configuration for the matic-jagar validator monitor.
"""

__version__ = "1.0.0"

from .errors import (
    ConfigError,
    ResolutionError,
    SettingsError,
    NotFoundError,
    ParseError,
    MappingError,
    ValidationError,
    Violation,
)
from .models import Config
from .config import ConfigLoader, load_config

__all__ = [
    "Config",
    "ConfigLoader",
    "load_config",
    "ConfigError",
    "ResolutionError",
    "SettingsError",
    "NotFoundError",
    "ParseError",
    "MappingError",
    "ValidationError",
    "Violation",
]

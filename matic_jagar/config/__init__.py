"""
Configuration management for matic-jagar

Handles locating, loading and validating the config file.
"""

from .loader import (
    ConfigLoader, LoaderSettings, load_config, load_settings, resolve_search_paths
)

__all__ = [
    "ConfigLoader", "LoaderSettings", "load_config", "load_settings", "resolve_search_paths"
]

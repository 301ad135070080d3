"""
Configuration schema for matic-jagar

Typed sections, the root Config aggregate and the constraint-tag validator.
"""

from .config import (
    Config,
    Endpoints,
    ValDetails,
    EnableAlerts,
    RegularStatusAlerts,
    AlerterPreferences,
    AlertingThreshold,
    Scraper,
    Telegram,
    SendGrid,
    InfluxDB,
)
from .validation import collect_violations, parse_duration

__all__ = [
    # Root
    "Config",

    # Sections
    "Endpoints",
    "ValDetails",
    "EnableAlerts",
    "RegularStatusAlerts",
    "AlerterPreferences",
    "AlertingThreshold",
    "Scraper",
    "Telegram",
    "SendGrid",
    "InfluxDB",

    # Validation
    "collect_violations",
    "parse_duration",
]

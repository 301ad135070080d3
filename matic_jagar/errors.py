"""
Error taxonomy for configuration loading and validation.

Every failure raised by the loader derives from ConfigError so the process
bootstrap can catch one type and decide whether to exit.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class Violation:
    """A single failed constraint"""
    path: str
    rule: str
    value: Any

    def __str__(self) -> str:
        return f"{self.path}: failed '{self.rule}' (got {self.value!r})"


class ConfigError(Exception):
    """Base error for configuration problems"""

    def diagnostic(self) -> str:
        """One-line description naming the failure kind and its cause"""
        return f"{type(self).__name__}: {self}"


class ResolutionError(ConfigError):
    """Raised when the user's home directory cannot be determined"""


class SettingsError(ConfigError):
    """Raised when loader settings from the environment are invalid"""


class NotFoundError(ConfigError):
    """Raised when no config file exists in any search directory"""

    def __init__(self, config_name: str, searched: Sequence[Path]):
        self.config_name = config_name
        self.searched = list(searched)
        dirs = ", ".join(str(p) for p in self.searched)
        super().__init__(f"no '{config_name}' config file found in: {dirs}")


class ParseError(ConfigError):
    """Raised when a config file exists but cannot be parsed"""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot parse {path}: {reason}")


class MappingError(ConfigError):
    """Raised when parsed content does not fit the typed schema"""

    def __init__(self, errors: List[Tuple[str, str]], source: Optional[Path] = None):
        self.errors = errors
        self.source = source
        details = "; ".join(f"{loc}: {msg}" for loc, msg in errors)
        where = f" in {source}" if source else ""
        super().__init__(f"cannot map config{where}: {details}")


class ValidationError(ConfigError):
    """Raised when a mapped config violates declared field constraints"""

    def __init__(self, violations: Sequence[Violation]):
        self.violations = list(violations)
        count = len(self.violations)
        summary = "; ".join(str(v) for v in self.violations)
        super().__init__(f"{count} constraint violation(s): {summary}")

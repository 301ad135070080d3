"""
Constraint-tag validation for configuration models.

Fields declare their rules as a comma-separated tag string (for example
``"required,gte=0"``) in the field's schema extras. This module reads those
tags, applies the matching checks and reports every violation at once.
"""

import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple
from urllib.parse import urlparse

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from ..errors import Violation

logger = logging.getLogger(__name__)

RULES_KEY = "rules"

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_HEXADECIMAL_RE = re.compile(r"^(0[xX])?[0-9a-fA-F]+$")
_NUMERIC_RE = re.compile(r"^\d+$")
_TIMESLOT_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_URL_SCHEMES = {"http", "https", "ws", "wss"}


def parse_duration(text: str) -> float:
    """Parse a Go-style duration string ("1m30s") into seconds"""
    s = text.strip()
    sign = 1.0
    if s[:1] in ("+", "-"):
        sign = -1.0 if s[0] == "-" else 1.0
        s = s[1:]
    if s == "0":
        return 0.0
    if not s:
        raise ValueError(f"invalid duration: {text!r}")

    total = 0.0
    pos = 0
    while pos < len(s):
        match = _DURATION_PART_RE.match(s, pos)
        if not match:
            raise ValueError(f"invalid duration: {text!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    return sign * total


def is_empty(value: Any) -> bool:
    """Zero-value test used by the 'required' rule"""
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return value == 0


def _check_gte(value: Any, param: Optional[str]) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value >= float(param)


def _check_url(value: Any, param: Optional[str]) -> bool:
    parsed = urlparse(str(value))
    return parsed.scheme in _URL_SCHEMES and bool(parsed.netloc)


def _check_port(value: Any, param: Optional[str]) -> bool:
    text = str(value)
    return bool(_NUMERIC_RE.match(text)) and 1 <= int(text) <= 65535


def _check_duration(value: Any, param: Optional[str]) -> bool:
    # Polling intervals must move forward
    try:
        return parse_duration(str(value)) > 0
    except ValueError:
        return False


def _regex_check(pattern: "re.Pattern[str]") -> Callable[[Any, Optional[str]], bool]:
    def check(value: Any, param: Optional[str]) -> bool:
        return bool(pattern.match(str(value)))
    return check


RULE_CHECKS: Dict[str, Callable[[Any, Optional[str]], bool]] = {
    "required": lambda value, param: not is_empty(value),
    "gte": _check_gte,
    "url": _check_url,
    "email": _regex_check(_EMAIL_RE),
    "hexadecimal": _regex_check(_HEXADECIMAL_RE),
    "numeric": _regex_check(_NUMERIC_RE),
    "port": _check_port,
    "timeslot": _regex_check(_TIMESLOT_RE),
    "duration": _check_duration,
}


def parse_rules(tag: str) -> List[Tuple[str, Optional[str]]]:
    """Split a tag string into (rule, param) pairs"""
    rules = []
    for part in tag.split(","):
        part = part.strip()
        if not part:
            continue
        name, _, param = part.partition("=")
        name = name.strip()
        if name != "dive" and name not in RULE_CHECKS:
            raise ValueError(f"Unknown validation rule: {name!r}")
        rules.append((name, param.strip() or None))
    return rules


def field_rules(field: FieldInfo) -> str:
    """Return the constraint tag string declared on a field"""
    extra = field.json_schema_extra
    if isinstance(extra, dict):
        return str(extra.get(RULES_KEY, ""))
    return ""


def normalize_name(name: str) -> str:
    """Case- and underscore-insensitive form used to match exclusions"""
    return name.replace("_", "").lower()


def _apply(
    value: Any,
    rules: List[Tuple[str, Optional[str]]],
    path: str,
    violations: List[Violation],
) -> None:
    for index, (name, param) in enumerate(rules):
        if name == "dive":
            if isinstance(value, (list, tuple)):
                for i, item in enumerate(value):
                    _apply(item, rules[index + 1:], f"{path}[{i}]", violations)
            return

        # Non-required rules only apply to values that are set
        if name != "required" and is_empty(value):
            continue

        if not RULE_CHECKS[name](value, param):
            rule = f"{name}={param}" if param is not None else name
            violations.append(Violation(path=path, rule=rule, value=value))


class ModelValidator:
    """Walk a model tree and check every declared constraint tag"""

    def __init__(self, exclude: Iterable[str] = ()):
        self.exclude: Set[Tuple[str, ...]] = {
            tuple(normalize_name(seg.strip()) for seg in ident.split("."))
            for ident in exclude
            if ident and ident.strip()
        }
        self._matched: Set[Tuple[str, ...]] = set()

    def _excluded(self, names: List[Tuple[str, ...]]) -> bool:
        """names holds the accepted spellings of each path segment"""
        for ident in self.exclude:
            if len(ident) > len(names):
                continue
            if all(seg in names[i] for i, seg in enumerate(ident)):
                self._matched.add(ident)
                return True
        return False

    def _walk(
        self,
        model: BaseModel,
        prefix: str,
        names: List[Tuple[str, ...]],
        violations: List[Violation],
    ) -> None:
        for attr, field in type(model).model_fields.items():
            key = field.alias or attr
            spellings = names + [(normalize_name(attr), normalize_name(key))]
            if self._excluded(spellings):
                continue

            value = getattr(model, attr)
            path = f"{prefix}.{key}" if prefix else key

            if isinstance(value, BaseModel):
                self._walk(value, path, spellings, violations)
                continue

            tag = field_rules(field)
            if tag:
                _apply(value, parse_rules(tag), path, violations)

    def run(self, model: BaseModel) -> List[Violation]:
        """Return every violation found outside the exclusion set"""
        self._matched.clear()
        violations: List[Violation] = []
        self._walk(model, "", [], violations)

        for ident in self.exclude - self._matched:
            logger.warning(f"Exclusion '{'.'.join(ident)}' matched no config field")

        return violations


def collect_violations(model: BaseModel, exclude: Iterable[str] = ()) -> List[Violation]:
    """Validate a model, skipping excluded fields entirely"""
    return ModelValidator(exclude).run(model)

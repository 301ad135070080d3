"""
Unit tests for the constraint-tag rule engine.
"""

import pytest
from pydantic import BaseModel, ConfigDict

from matic_jagar.models.validation import (
    RULE_CHECKS, collect_violations, is_empty, normalize_name, parse_duration, parse_rules
)
from matic_jagar.models.config import setting


class TestParseDuration:
    """Test Go-style duration parsing"""

    def test_simple_units(self):
        assert parse_duration("30s") == 30.0
        assert parse_duration("2m") == 120.0
        assert parse_duration("1h") == 3600.0
        assert parse_duration("500ms") == pytest.approx(0.5)

    def test_compound_and_fractional(self):
        assert parse_duration("1m30s") == 90.0
        assert parse_duration("1.5h") == 5400.0
        assert parse_duration("1h2m3s") == 3723.0

    def test_zero_and_sign(self):
        assert parse_duration("0") == 0.0
        assert parse_duration("-2s") == -2.0
        assert parse_duration("+2s") == 2.0

    def test_invalid_durations(self):
        for text in ["", "5", "abc", "1m30", "30 seconds", "s", "-"]:
            with pytest.raises(ValueError):
                parse_duration(text)


class TestRuleChecks:
    """Test individual rule checks"""

    def test_is_empty(self):
        assert is_empty(None)
        assert is_empty("")
        assert is_empty([])
        assert is_empty(0)
        assert is_empty(0.0)
        assert is_empty(False)
        assert not is_empty("x")
        assert not is_empty(["09:00"])
        assert not is_empty(-1)

    def test_gte(self):
        check = RULE_CHECKS["gte"]
        assert check(0, "0")
        assert check(2.5, "1")
        assert not check(-1, "0")
        assert not check(True, "0")
        assert not check("5", "0")

    def test_url(self):
        check = RULE_CHECKS["url"]
        assert check("http://localhost:26657", None)
        assert check("https://rpc.example.com/path", None)
        assert check("wss://node.example.com/ws", None)
        assert not check("localhost:26657", None)
        assert not check("ftp://example.com", None)
        assert not check("http://", None)

    def test_hexadecimal(self):
        check = RULE_CHECKS["hexadecimal"]
        assert check("0x1234abcdEF", None)
        assert check("ABC", None)
        assert not check("0x", None)
        assert not check("0xZZZ", None)

    def test_port(self):
        check = RULE_CHECKS["port"]
        assert check("8086", None)
        assert check("65535", None)
        assert not check("0", None)
        assert not check("65536", None)
        assert not check("80a", None)

    def test_timeslot(self):
        check = RULE_CHECKS["timeslot"]
        assert check("00:00", None)
        assert check("23:59", None)
        assert not check("24:00", None)
        assert not check("9:00", None)
        assert not check("12:60", None)

    def test_duration(self):
        check = RULE_CHECKS["duration"]
        assert check("1s", None)
        assert check("1m30s", None)
        assert not check("-1s", None)
        assert not check("0", None)
        assert not check("0s", None)
        assert not check("30 seconds", None)

    def test_email_and_numeric(self):
        assert RULE_CHECKS["email"]("ops@example.com", None)
        assert not RULE_CHECKS["email"]("ops@example", None)
        assert RULE_CHECKS["numeric"]("42", None)
        assert not RULE_CHECKS["numeric"]("4.2", None)


class TestParseRules:
    """Test tag string parsing"""

    def test_rules_with_params(self):
        assert parse_rules("required,gte=0") == [("required", None), ("gte", "0")]

    def test_dive_and_blanks(self):
        assert parse_rules(" dive , timeslot ,") == [("dive", None), ("timeslot", None)]

    def test_unknown_rule_rejected(self):
        with pytest.raises(ValueError, match="Unknown validation rule"):
            parse_rules("required,bogus")

    def test_normalize_name(self):
        assert normalize_name("AlertingThresholds") == normalize_name("alerting_thresholds")
        assert normalize_name("SendGrid") == "sendgrid"


class Inner(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    value: int = setting("the_value", default=0, rules="gte=1")


class Outer(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    name: str = setting("display_name", rules="required")
    inner: Inner = setting("nested", default_factory=Inner)
    tags: list = setting("tag_list", rules="required,dive,required", default_factory=list)


class TestCollectViolations:
    """Test the walker on arbitrary tagged models"""

    def test_walks_nested_models(self):
        model = Outer(inner=Inner(value=-3), tags=["a", ""])

        violations = collect_violations(model)

        assert [(v.path, v.rule) for v in violations] == [
            ("display_name", "required"),
            ("nested.the_value", "gte=1"),
            ("tag_list[1]", "required"),
        ]

    def test_required_list(self):
        violations = collect_violations(Outer(name="x", inner=Inner(value=1)))

        assert [(v.path, v.rule) for v in violations] == [("tag_list", "required")]

    def test_nested_exclusion(self):
        model = Outer(inner=Inner(value=-3))

        violations = collect_violations(model, exclude=["nested", "name", "tags"])

        assert violations == []

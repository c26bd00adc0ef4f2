"""
Tests for input validation and sanitization.
"""

import pytest

from infra_sizing.domain.enums import ControlPlaneHA
from infra_sizing.domain.hadr_models import HADRConfig
from infra_sizing.services.validation import (
    DEFAULT_SCENARIO_NAME,
    InputValidator,
    ValidationSeverity,
    has_blocking,
)


@pytest.fixture
def validator():
    return InputValidator()


def test_app_counts_in_range(validator):
    """Valid app counts produce no issues."""
    assert validator.validate_app_counts(10, 5, 1) == []


def test_app_count_out_of_range(validator):
    """Each out-of-range count is reported with its rule code."""
    issues = validator.validate_app_counts(1001, 0, -1)
    assert [(issue.field, issue.rule_code) for issue in issues] == [
        ("small_apps", "BR-V001"),
        ("large_apps", "BR-V001"),
    ]
    assert issues[0].message == "Value out of range: small app count must be 0-1000 (got 1001)"


def test_at_least_one_app(validator):
    """Zero applications in total is an error."""
    issues = validator.validate_app_counts(0, 0, 0)
    assert [issue.rule_code for issue in issues] == ["BR-V002"]
    assert has_blocking(issues)


@pytest.mark.parametrize("cpu,ram,disk,fields", [
    (8, 32, 100, []),
    (0, 32, 100, ["cpu"]),
    (8, 2048, 100, ["ram"]),
    (300, 32, 20000, ["cpu", "disk"]),
])
def test_node_specs(validator, cpu, ram, disk, fields):
    """Node dimensions must be positive and bounded."""
    assert [issue.field for issue in validator.validate_node_specs(cpu, ram, disk)] == fields


def test_pricing_rates(validator):
    """Negative or absurd rates are rejected."""
    assert validator.validate_pricing(0.5, 1000) == []
    assert [issue.field for issue in validator.validate_pricing(-1, 2_000_000)] == [
        "hourly_rate", "monthly_rate"
    ]


def test_percentages_and_ratios(validator):
    """Growth, headroom, overcommit and replicas have their own bounds."""
    assert validator.validate_growth_rate(500) == []
    assert validator.validate_growth_rate(501)[0].rule_code == "BR-V005"
    assert validator.validate_headroom(101)[0].rule_code == "BR-V007"
    assert validator.validate_overcommit(0.5, 4)[0].field == "cpu_overcommit"
    assert validator.validate_overcommit(2, 5)[0].field == "memory_overcommit"
    assert validator.validate_replicas(0)[0].rule_code == "BR-V009"
    assert validator.validate_replicas(3) == []


def test_hadr_defaults_valid(validator):
    """Default HA/DR topology passes."""
    assert validator.validate_hadr(HADRConfig()) == []


def test_hadr_even_control_plane_warns(validator):
    """An even etcd member count is a warning, not an error."""
    issues = validator.validate_hadr(HADRConfig(control_plane_ha=ControlPlaneHA.STACKED_HA, control_plane_nodes=4))
    assert len(issues) == 1
    assert issues[0].severity == ValidationSeverity.WARNING
    assert not has_blocking(issues)


def test_hadr_out_of_range(validator):
    """Node and zone counts outside their bounds are errors."""
    issues = validator.validate_hadr(HADRConfig(control_plane_nodes=10, availability_zones=7))
    assert [issue.rule_code for issue in issues] == ["BR-V010", "BR-V011"]
    assert has_blocking(issues)


@pytest.mark.parametrize("name,expected", [
    ("Prod <b>Sizing</b>", "Prod bSizing/b"),
    ("  many   spaces  ", "many spaces"),
    ("", DEFAULT_SCENARIO_NAME),
    ("<>;", DEFAULT_SCENARIO_NAME),
    ("a" * 150, "a" * 100),
])
def test_sanitize_scenario_name(validator, name, expected):
    """Scenario names lose markup characters and are capped."""
    assert validator.sanitize_scenario_name(name) == expected


def test_sanitize_text(validator):
    """Free text loses HTML tags and is truncated."""
    assert validator.sanitize_text("<script>alert(1)</script> hello") == "alert(1) hello"
    assert validator.sanitize_text("x" * 20, max_length=5) == "xxxxx"
    assert validator.sanitize_text("") == ""


def test_issue_to_dict(validator):
    """Issues serialize with their severity value."""
    issue = validator.validate_replicas(11)[0]
    assert issue.to_dict() == {
        "field": "replicas",
        "rule_code": "BR-V009",
        "message": "Value out of range: replica count must be 1-10 (got 11)",
        "severity": "error",
    }

"""
Input validation for sizing and pricing configuration.
Rules return issues with a stable rule code; nothing here raises.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Dict, Any

from infra_sizing.domain.enums import ControlPlaneHA
from infra_sizing.domain.hadr_models import HADRConfig


MAX_SMALL_APPS = 1000
MAX_MEDIUM_APPS = 500
MAX_LARGE_APPS = 100
MAX_CPU_CORES = 256
MAX_MEMORY_GB = 1024
MAX_STORAGE_GB = 10000
MAX_HOURLY_RATE = 10000
MAX_MONTHLY_RATE = 1_000_000
MAX_GROWTH_PERCENT = 500
MAX_CPU_OVERCOMMIT = 10
MAX_MEMORY_OVERCOMMIT = 4
MAX_REPLICAS = 10
MAX_CONTROL_PLANE_NODES = 9
MAX_AVAILABILITY_ZONES = 6
MAX_SCENARIO_NAME_LENGTH = 100
DEFAULT_SCENARIO_NAME = "Untitled Scenario"

_UNSAFE_CHARACTERS = re.compile(r"[<>\"'&;`]")
_HTML_TAG = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")


class ValidationSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class ValidationIssue:
    """One failed rule."""
    field: str
    rule_code: str
    message: str
    severity: ValidationSeverity = ValidationSeverity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "field": self.field,
            "rule_code": self.rule_code,
            "message": self.message,
            "severity": self.severity.value,
        }


def has_blocking(issues: List[ValidationIssue]) -> bool:
    """True if any issue is an error."""
    return any(issue.severity == ValidationSeverity.ERROR for issue in issues)


def _range_issue(
    field: str,
    rule_code: str,
    value: float,
    minimum: float,
    maximum: float,
    label: str
) -> List[ValidationIssue]:
    if minimum <= value <= maximum:
        return []
    return [ValidationIssue(
        field,
        rule_code,
        f"Value out of range: {label} must be {minimum:g}-{maximum:g} (got {value:g})",
    )]


class InputValidator:
    """Range and sanity checks for caller-supplied configuration."""

    def validate_app_counts(self, small: int, medium: int, large: int) -> List[ValidationIssue]:
        issues = []
        issues += _range_issue("small_apps", "BR-V001", small, 0, MAX_SMALL_APPS, "small app count")
        issues += _range_issue("medium_apps", "BR-V001", medium, 0, MAX_MEDIUM_APPS, "medium app count")
        issues += _range_issue("large_apps", "BR-V001", large, 0, MAX_LARGE_APPS, "large app count")
        if small + medium + large <= 0:
            issues.append(ValidationIssue("apps", "BR-V002", "At least one application is required"))
        return issues

    def validate_node_specs(self, cpu: int, ram: int, disk: int) -> List[ValidationIssue]:
        issues = []
        issues += _range_issue("cpu", "BR-V003", cpu, 1, MAX_CPU_CORES, "CPU cores")
        issues += _range_issue("ram", "BR-V003", ram, 1, MAX_MEMORY_GB, "RAM (GB)")
        issues += _range_issue("disk", "BR-V003", disk, 1, MAX_STORAGE_GB, "disk (GB)")
        return issues

    def validate_pricing(self, hourly_rate: float, monthly_rate: float) -> List[ValidationIssue]:
        issues = []
        issues += _range_issue("hourly_rate", "BR-V004", hourly_rate, 0, MAX_HOURLY_RATE, "hourly rate")
        issues += _range_issue("monthly_rate", "BR-V004", monthly_rate, 0, MAX_MONTHLY_RATE, "monthly rate")
        return issues

    def validate_growth_rate(self, percent: float) -> List[ValidationIssue]:
        return _range_issue("growth_rate", "BR-V005", percent, 0, MAX_GROWTH_PERCENT, "growth rate (%)")

    def validate_overcommit(self, cpu_ratio: float, memory_ratio: float) -> List[ValidationIssue]:
        issues = []
        issues += _range_issue("cpu_overcommit", "BR-V006", cpu_ratio, 1, MAX_CPU_OVERCOMMIT, "CPU overcommit ratio")
        issues += _range_issue(
            "memory_overcommit", "BR-V006", memory_ratio, 1, MAX_MEMORY_OVERCOMMIT, "memory overcommit ratio"
        )
        return issues

    def validate_headroom(self, percent: float) -> List[ValidationIssue]:
        return _range_issue("headroom", "BR-V007", percent, 0, 100, "headroom (%)")

    def validate_replicas(self, count: int) -> List[ValidationIssue]:
        return _range_issue("replicas", "BR-V009", count, 1, MAX_REPLICAS, "replica count")

    def validate_hadr(self, hadr: HADRConfig) -> List[ValidationIssue]:
        """
        Check HA/DR topology values.

        An even control-plane node count under self-managed HA is reported
        as a warning since etcd quorum gains nothing from the extra node.
        """
        issues = _range_issue(
            "control_plane_nodes", "BR-V010", hadr.control_plane_nodes,
            1, MAX_CONTROL_PLANE_NODES, "control plane node count"
        )
        if (
            not issues
            and hadr.control_plane_ha in (ControlPlaneHA.STACKED_HA, ControlPlaneHA.EXTERNAL_ETCD)
            and hadr.control_plane_nodes % 2 == 0
        ):
            issues.append(ValidationIssue(
                "control_plane_nodes",
                "BR-V010",
                f"Control plane node count should be odd for etcd quorum (got {hadr.control_plane_nodes})",
                ValidationSeverity.WARNING,
            ))
        issues += _range_issue(
            "availability_zones", "BR-V011", hadr.availability_zones,
            1, MAX_AVAILABILITY_ZONES, "availability zone count"
        )
        return issues

    def sanitize_scenario_name(self, name: str) -> str:
        """Strip markup characters, collapse whitespace, cap length (BR-V008)."""
        if not name:
            return DEFAULT_SCENARIO_NAME
        cleaned = _UNSAFE_CHARACTERS.sub("", name)
        cleaned = _WHITESPACE.sub(" ", cleaned).strip()
        cleaned = cleaned[:MAX_SCENARIO_NAME_LENGTH].strip()
        return cleaned or DEFAULT_SCENARIO_NAME

    def sanitize_text(self, text: str, max_length: int = 500) -> str:
        """Remove HTML tags and markup characters from free text."""
        if not text:
            return ""
        cleaned = _HTML_TAG.sub("", text)
        cleaned = _UNSAFE_CHARACTERS.sub("", cleaned)
        cleaned = _WHITESPACE.sub(" ", cleaned).strip()
        return cleaned[:max_length]

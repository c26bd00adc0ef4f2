"""
Tests for the HA/DR cost multiplier.
"""

import pytest

from infra_sizing.domain.enums import (
    BackupStrategy,
    CloudProvider,
    ControlPlaneHA,
    DRPattern,
    NodeDistribution,
)
from infra_sizing.domain.hadr_models import HADRConfig
from infra_sizing.services.cost_multiplier import BASIC_SUMMARY, CostMultiplierCalculator


@pytest.fixture
def calculator():
    return CostMultiplierCalculator()


def test_defaults_are_neutral(calculator):
    """A basic topology costs exactly the baseline."""
    assert calculator.compute(HADRConfig()) == pytest.approx(1.0)
    assert calculator.compute(HADRConfig(), CloudProvider.AWS) == pytest.approx(1.0)


def test_stacked_ha_multi_az_warm_standby(calculator):
    """Stacked HA with 5 nodes, multi-AZ and warm standby compose additively."""
    hadr = HADRConfig(
        control_plane_ha=ControlPlaneHA.STACKED_HA,
        control_plane_nodes=5,
        node_distribution=NodeDistribution.MULTI_AZ,
        dr_pattern=DRPattern.WARM_STANDBY,
    )
    assert calculator.compute(hadr) == pytest.approx(1.83)


def test_external_etcd_adds_cluster_overhead(calculator):
    """External etcd charges per extra node plus a fixed cluster surcharge."""
    hadr = HADRConfig(control_plane_ha=ControlPlaneHA.EXTERNAL_ETCD, control_plane_nodes=3)
    assert calculator.compute(hadr) == pytest.approx(1.0 + 2 * 0.12 + 0.15)


def test_single_control_plane_node_has_no_surcharge(calculator):
    """One control plane node adds nothing whatever the HA mode."""
    hadr = HADRConfig(control_plane_ha=ControlPlaneHA.STACKED_HA, control_plane_nodes=1)
    assert calculator.control_plane_surcharge(hadr) == 0


def test_dr_supersedes_backup(calculator):
    """Backup cost is ignored once a DR pattern is chosen."""
    hadr = HADRConfig(dr_pattern=DRPattern.BACKUP_RESTORE, backup_strategy=BackupStrategy.VELERO)
    assert calculator.compute(hadr) == pytest.approx(1.08)


def test_backup_without_dr(calculator):
    """A standalone backup strategy adds its own cost."""
    hadr = HADRConfig(backup_strategy=BackupStrategy.PORTWORX)
    assert calculator.compute(hadr) == pytest.approx(1.08)


@pytest.mark.parametrize("provider", [CloudProvider.AZURE, CloudProvider.ARO, CloudProvider.ON_PREM])
def test_free_cross_az_providers(calculator, provider):
    """Providers without cross-zone charges add nothing for multi-AZ."""
    hadr = HADRConfig(node_distribution=NodeDistribution.MULTI_AZ)
    assert calculator.compute(hadr, provider) == pytest.approx(1.0)


def test_cross_az_by_zone_count(calculator):
    """Two zones cost less than three or more."""
    assert calculator.cross_az_surcharge(CloudProvider.AWS, 1) == 0
    assert calculator.cross_az_surcharge(CloudProvider.AWS, 2) == pytest.approx(0.02)
    assert calculator.cross_az_surcharge(CloudProvider.AWS, 3) == pytest.approx(0.03)


def test_dual_az_uses_two_zones(calculator):
    """Dual-AZ placement is priced as two zones regardless of the zone setting."""
    hadr = HADRConfig(node_distribution=NodeDistribution.DUAL_AZ, availability_zones=3)
    assert calculator.compute(hadr, CloudProvider.GCP) == pytest.approx(1.02)


def test_multi_region_extra(calculator):
    """Multi-region adds its own surcharge on top of the cross-zone cost."""
    hadr = HADRConfig(node_distribution=NodeDistribution.MULTI_REGION, availability_zones=3)
    assert calculator.compute(hadr, CloudProvider.AWS) == pytest.approx(1.20)
    assert calculator.compute(hadr, CloudProvider.AZURE) == pytest.approx(1.17)


def test_multiplier_never_below_one(calculator):
    """Every combination is at least the baseline."""
    for ha in ControlPlaneHA:
        for distribution in NodeDistribution:
            for dr in DRPattern:
                for backup in BackupStrategy:
                    hadr = HADRConfig(
                        control_plane_ha=ha,
                        node_distribution=distribution,
                        dr_pattern=dr,
                        backup_strategy=backup,
                    )
                    assert calculator.compute(hadr) >= 1.0
                    assert calculator.compute(hadr, CloudProvider.AWS) >= 1.0


def test_summary_basic(calculator):
    """Default topology reads as basic."""
    assert calculator.get_summary(HADRConfig()) == BASIC_SUMMARY


def test_summary_lists_choices(calculator):
    """Summary names HA, zones and DR, joined with bullets."""
    hadr = HADRConfig(
        control_plane_ha=ControlPlaneHA.STACKED_HA,
        control_plane_nodes=3,
        node_distribution=NodeDistribution.MULTI_AZ,
        availability_zones=3,
        dr_pattern=DRPattern.HOT_STANDBY,
        backup_strategy=BackupStrategy.VELERO,
    )
    assert calculator.get_summary(hadr) == "CP HA (3 nodes) • 3 AZs • Hot Standby DR"


def test_summary_backup_only(calculator):
    """Backup appears only when no DR pattern is chosen."""
    hadr = HADRConfig(node_distribution=NodeDistribution.DUAL_AZ, backup_strategy=BackupStrategy.KASTEN)
    assert calculator.get_summary(hadr) == "2 AZs • Backup (Kasten K10)"

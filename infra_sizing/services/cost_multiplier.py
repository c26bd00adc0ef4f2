"""
HA/DR cost multiplier.
Composes the cost impact of control-plane HA, node placement, DR pattern and
backup strategy into a single factor applied to baseline infrastructure cost.
"""
from typing import Dict, List, Optional

from infra_sizing.domain.enums import (
    BackupStrategy,
    CloudProvider,
    ControlPlaneHA,
    DRPattern,
    NodeDistribution,
)
from infra_sizing.domain.hadr_models import HADRConfig


# Surcharge per extra control plane node
STACKED_HA_PER_NODE = 0.10
EXTERNAL_ETCD_PER_NODE = 0.12
EXTERNAL_ETCD_CLUSTER = 0.15

NODE_DISTRIBUTION_COST: Dict[NodeDistribution, float] = {
    NodeDistribution.SINGLE_AZ: 0.0,
    NodeDistribution.DUAL_AZ: 0.02,
    NodeDistribution.MULTI_AZ: 0.03,
    NodeDistribution.MULTI_REGION: 0.20,
}

MULTI_REGION_EXTRA = 0.17

DR_PATTERN_COST: Dict[DRPattern, float] = {
    DRPattern.NONE: 0.0,
    DRPattern.BACKUP_RESTORE: 0.08,
    DRPattern.WARM_STANDBY: 0.40,
    DRPattern.HOT_STANDBY: 0.90,
    DRPattern.ACTIVE_ACTIVE: 1.10,
}

BACKUP_STRATEGY_COST: Dict[BackupStrategy, float] = {
    BackupStrategy.NONE: 0.0,
    BackupStrategy.VELERO: 0.02,
    BackupStrategy.KASTEN: 0.05,
    BackupStrategy.PORTWORX: 0.08,
    BackupStrategy.CLOUD_NATIVE: 0.03,
    BackupStrategy.CUSTOM: 0.0,
}

# Providers that do not bill traffic between availability zones
FREE_CROSS_AZ_PROVIDERS = frozenset({
    CloudProvider.AZURE,
    CloudProvider.ARO,
    CloudProvider.ON_PREM,
})

DR_PATTERN_NAMES: Dict[DRPattern, str] = {
    DRPattern.BACKUP_RESTORE: "Backup/Restore DR",
    DRPattern.WARM_STANDBY: "Warm Standby DR",
    DRPattern.HOT_STANDBY: "Hot Standby DR",
    DRPattern.ACTIVE_ACTIVE: "Active-Active DR",
}

BACKUP_STRATEGY_NAMES: Dict[BackupStrategy, str] = {
    BackupStrategy.VELERO: "Velero",
    BackupStrategy.KASTEN: "Kasten K10",
    BackupStrategy.PORTWORX: "Portworx",
    BackupStrategy.CLOUD_NATIVE: "Cloud Native",
    BackupStrategy.CUSTOM: "Custom",
}

BASIC_SUMMARY = "Basic (no HA/DR)"


class CostMultiplierCalculator:
    """Computes the HA/DR cost multiplier (>= 1.0)."""

    def compute(self, hadr: HADRConfig, provider: Optional[CloudProvider] = None) -> float:
        """
        Compose the multiplier for a topology.

        Args:
            hadr: HA/DR choices
            provider: When given, cross-zone cost is provider specific

        Returns:
            1.0 plus every applicable surcharge
        """
        multiplier = 1.0
        multiplier += self.control_plane_surcharge(hadr)

        if provider is None:
            multiplier += NODE_DISTRIBUTION_COST[hadr.node_distribution]
        else:
            multiplier += self.placement_surcharge(hadr, provider)

        if hadr.dr_pattern != DRPattern.NONE:
            multiplier += DR_PATTERN_COST[hadr.dr_pattern]
        else:
            # DR supersedes standalone backups
            multiplier += BACKUP_STRATEGY_COST[hadr.backup_strategy]

        return multiplier

    @staticmethod
    def control_plane_surcharge(hadr: HADRConfig) -> float:
        extra_nodes = max(0, hadr.control_plane_nodes - 1)
        if hadr.control_plane_ha == ControlPlaneHA.STACKED_HA:
            return STACKED_HA_PER_NODE * extra_nodes
        if hadr.control_plane_ha == ControlPlaneHA.EXTERNAL_ETCD:
            return EXTERNAL_ETCD_PER_NODE * extra_nodes + EXTERNAL_ETCD_CLUSTER
        return 0.0

    @staticmethod
    def cross_az_surcharge(provider: CloudProvider, az_count: int) -> float:
        """Cross-zone traffic surcharge for a provider and zone count."""
        if az_count <= 1 or provider in FREE_CROSS_AZ_PROVIDERS:
            return 0.0
        return 0.02 if az_count == 2 else 0.03

    def placement_surcharge(self, hadr: HADRConfig, provider: CloudProvider) -> float:
        if hadr.node_distribution == NodeDistribution.SINGLE_AZ:
            return 0.0
        if hadr.node_distribution == NodeDistribution.DUAL_AZ:
            az_count = 2
        else:
            az_count = hadr.availability_zones

        surcharge = self.cross_az_surcharge(provider, az_count)
        if hadr.node_distribution == NodeDistribution.MULTI_REGION:
            surcharge += MULTI_REGION_EXTRA
        return surcharge

    def get_summary(self, hadr: HADRConfig) -> str:
        """Readable description of the non-default choices."""
        parts: List[str] = []

        if hadr.has_self_managed_ha:
            parts.append(f"CP HA ({hadr.control_plane_nodes} nodes)")

        if hadr.node_distribution == NodeDistribution.DUAL_AZ:
            parts.append("2 AZs")
        elif hadr.node_distribution != NodeDistribution.SINGLE_AZ:
            parts.append(f"{hadr.availability_zones} AZs")

        if hadr.dr_pattern != DRPattern.NONE:
            parts.append(DR_PATTERN_NAMES[hadr.dr_pattern])
        elif hadr.backup_strategy != BackupStrategy.NONE:
            parts.append(f"Backup ({BACKUP_STRATEGY_NAMES[hadr.backup_strategy]})")

        return " • ".join(parts) if parts else BASIC_SUMMARY

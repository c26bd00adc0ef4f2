"""
Domain model for high-availability and disaster-recovery choices.
"""
from typing import Dict, Any, Optional
from dataclasses import dataclass

from infra_sizing.domain.enums import (
    BackupStrategy,
    ControlPlaneHA,
    DRPattern,
    NodeDistribution,
)


@dataclass
class HADRConfig:
    """HA/DR topology of a cluster. Defaults describe a basic, single-zone setup."""
    control_plane_ha: ControlPlaneHA = ControlPlaneHA.MANAGED
    control_plane_nodes: int = 3
    node_distribution: NodeDistribution = NodeDistribution.SINGLE_AZ
    availability_zones: int = 3
    dr_pattern: DRPattern = DRPattern.NONE
    backup_strategy: BackupStrategy = BackupStrategy.NONE
    backup_frequency_hours: int = 24
    backup_retention_days: int = 30
    dr_region: Optional[str] = None
    rto_minutes: Optional[int] = None
    rpo_minutes: Optional[int] = None

    @property
    def has_self_managed_ha(self) -> bool:
        return self.control_plane_ha in (ControlPlaneHA.STACKED_HA, ControlPlaneHA.EXTERNAL_ETCD)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "control_plane_ha": self.control_plane_ha.value,
            "control_plane_nodes": self.control_plane_nodes,
            "node_distribution": self.node_distribution.value,
            "availability_zones": self.availability_zones,
            "dr_pattern": self.dr_pattern.value,
            "backup_strategy": self.backup_strategy.value,
            "backup_frequency_hours": self.backup_frequency_hours,
            "backup_retention_days": self.backup_retention_days,
            "dr_region": self.dr_region,
            "rto_minutes": self.rto_minutes,
            "rpo_minutes": self.rpo_minutes,
        }

"""
Domain models for node sizing.
Defines node specifications and per-distribution sizing templates.
"""
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

from infra_sizing.domain.enums import Distribution, EnvironmentType


@dataclass(frozen=True)
class NodeSpecs:
    """CPU cores, RAM (GB) and disk (GB) of a single node."""
    cpu: int
    ram: int
    disk: int = 100

    @property
    def is_zero(self) -> bool:
        return self.cpu == 0 and self.ram == 0 and self.disk == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"cpu": self.cpu, "ram": self.ram, "disk": self.disk}


# "Not applicable" (managed control plane, no infra nodes)
ZERO_SPECS = NodeSpecs(0, 0, 0)

DEFAULT_PROD_CONTROL_PLANE = NodeSpecs(8, 32, 200)
DEFAULT_NON_PROD_CONTROL_PLANE = NodeSpecs(8, 32, 100)
DEFAULT_PROD_INFRA = NodeSpecs(8, 32, 500)
DEFAULT_NON_PROD_INFRA = NodeSpecs(8, 32, 200)
DEFAULT_PROD_WORKER = NodeSpecs(16, 64, 200)
DEFAULT_NON_PROD_WORKER = NodeSpecs(8, 32, 100)


@dataclass
class DistributionTemplate:
    """
    Baseline node specs for a distribution.

    Prod/Non-Prod pairs apply to every environment unless the matching
    per-environment map holds an override.
    """
    distribution: Optional[Distribution] = None
    prod_control_plane: NodeSpecs = DEFAULT_PROD_CONTROL_PLANE
    non_prod_control_plane: NodeSpecs = DEFAULT_NON_PROD_CONTROL_PLANE
    prod_infra: NodeSpecs = DEFAULT_PROD_INFRA
    non_prod_infra: NodeSpecs = DEFAULT_NON_PROD_INFRA
    prod_worker: NodeSpecs = DEFAULT_PROD_WORKER
    non_prod_worker: NodeSpecs = DEFAULT_NON_PROD_WORKER
    per_env_control_plane: Dict[EnvironmentType, NodeSpecs] = field(default_factory=dict)
    per_env_infra: Dict[EnvironmentType, NodeSpecs] = field(default_factory=dict)
    per_env_worker: Dict[EnvironmentType, NodeSpecs] = field(default_factory=dict)
    has_infra_nodes: bool = False
    has_managed_control_plane: bool = False

    def __post_init__(self):
        if self.has_managed_control_plane:
            self.prod_control_plane = ZERO_SPECS
            self.non_prod_control_plane = ZERO_SPECS
            self.per_env_control_plane = {}
        if not self.has_infra_nodes:
            self.prod_infra = ZERO_SPECS
            self.non_prod_infra = ZERO_SPECS
            self.per_env_infra = {}


_OPENSHIFT_FAMILY = {
    Distribution.OPENSHIFT,
}

_MANAGED_OPENSHIFT = {
    Distribution.OPENSHIFT_ROSA,
    Distribution.OPENSHIFT_ARO,
    Distribution.OPENSHIFT_DEDICATED,
    Distribution.OPENSHIFT_IBM,
}

_MANAGED_KUBERNETES = {
    Distribution.EKS,
    Distribution.AKS,
    Distribution.GKE,
    Distribution.OKE,
    Distribution.IKS,
    Distribution.ACK,
    Distribution.TKE,
    Distribution.CCE,
    Distribution.DOKS,
    Distribution.LKE,
    Distribution.VKE,
    Distribution.HETZNER_K8S,
    Distribution.OVH_KUBERNETES,
    Distribution.SCALEWAY_KAPSULE,
}

_LIGHTWEIGHT = {
    Distribution.K3S,
    Distribution.MICROK8S,
    Distribution.K3S_AWS,
    Distribution.K3S_AZURE,
    Distribution.K3S_GCP,
    Distribution.MICROK8S_AWS,
    Distribution.MICROK8S_AZURE,
    Distribution.MICROK8S_GCP,
}


def get_distribution_template(distribution: Distribution) -> DistributionTemplate:
    """
    Build the sizing template for a distribution.

    Args:
        distribution: Kubernetes distribution

    Returns:
        New DistributionTemplate (callers may mutate it)
    """
    if distribution in _OPENSHIFT_FAMILY:
        return DistributionTemplate(distribution=distribution, has_infra_nodes=True)

    if distribution in _MANAGED_OPENSHIFT:
        return DistributionTemplate(
            distribution=distribution,
            has_infra_nodes=True,
            has_managed_control_plane=True,
        )

    if distribution in _MANAGED_KUBERNETES:
        return DistributionTemplate(distribution=distribution, has_managed_control_plane=True)

    if distribution in _LIGHTWEIGHT:
        return DistributionTemplate(
            distribution=distribution,
            prod_control_plane=NodeSpecs(2, 4, 50),
            non_prod_control_plane=NodeSpecs(2, 4, 50),
            prod_worker=NodeSpecs(4, 8, 100),
            non_prod_worker=NodeSpecs(2, 4, 50),
        )

    return DistributionTemplate(distribution=distribution)

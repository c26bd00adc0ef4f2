"""
Shared enumerations for providers, pricing, environments and K8s topology.
"""
from enum import Enum
from typing import Dict, FrozenSet


class CloudProvider(Enum):
    """Infrastructure providers with a default price list."""
    AWS = "aws"
    AZURE = "azure"
    GCP = "gcp"
    OCI = "oci"
    IBM = "ibm"
    ALIBABA = "alibaba"
    TENCENT = "tencent"
    HUAWEI = "huawei"
    # Managed OpenShift variants
    ROSA = "rosa"
    ARO = "aro"
    OSD = "osd"
    ROKS = "roks"
    # Developer clouds
    DIGITALOCEAN = "digitalocean"
    LINODE = "linode"
    VULTR = "vultr"
    HETZNER = "hetzner"
    OVH = "ovh"
    SCALEWAY = "scaleway"
    CIVO = "civo"
    EXOSCALE = "exoscale"
    ON_PREM = "onprem"
    MANUAL = "manual"


class PricingType(Enum):
    """Purchase model for compute."""
    ON_DEMAND = "ondemand"
    RESERVED_1_YEAR = "reserved1year"
    RESERVED_3_YEAR = "reserved3year"
    SPOT = "spot"


class Currency(Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    AUD = "AUD"
    CAD = "CAD"
    JPY = "JPY"


class CostCategory(Enum):
    """Buckets used in cluster cost breakdowns."""
    COMPUTE = "compute"
    STORAGE = "storage"
    NETWORK = "network"
    LICENSE = "license"
    SUPPORT = "support"
    DATA_CENTER = "data_center"
    LABOR = "labor"


class SupportLevel(Enum):
    NONE = "none"
    BASIC = "basic"
    DEVELOPER = "developer"
    BUSINESS = "business"
    ENTERPRISE = "enterprise"


class EnvironmentType(Enum):
    DEV = "dev"
    TEST = "test"
    STAGE = "stage"
    PROD = "prod"
    DR = "dr"
    LIFETIME = "lifetime"


class NodeRole(Enum):
    CONTROL_PLANE = "control_plane"
    INFRA = "infra"
    WORKER = "worker"


class NodeDimension(Enum):
    CPU = "cpu"
    RAM = "ram"
    DISK = "disk"


class ControlPlaneHA(Enum):
    """Control plane high-availability mode."""
    MANAGED = "managed"  # Cloud provider runs the control plane
    SINGLE = "single"
    STACKED_HA = "stacked_ha"  # etcd co-located on control plane nodes
    EXTERNAL_ETCD = "external_etcd"


class NodeDistribution(Enum):
    """Placement of worker nodes across failure domains."""
    SINGLE_AZ = "single_az"
    DUAL_AZ = "dual_az"
    MULTI_AZ = "multi_az"
    MULTI_REGION = "multi_region"


class DRPattern(Enum):
    NONE = "none"
    BACKUP_RESTORE = "backup_restore"
    WARM_STANDBY = "warm_standby"
    HOT_STANDBY = "hot_standby"
    ACTIVE_ACTIVE = "active_active"


class BackupStrategy(Enum):
    NONE = "none"
    VELERO = "velero"
    KASTEN = "kasten"
    PORTWORX = "portworx"
    CLOUD_NATIVE = "cloud_native"
    CUSTOM = "custom"


class Distribution(Enum):
    """Kubernetes distributions, self-managed and managed."""
    # Self-managed
    OPENSHIFT = "openshift"
    KUBERNETES = "kubernetes"
    RANCHER = "rancher"
    RKE2 = "rke2"
    K3S = "k3s"
    MICROK8S = "microk8s"
    CHARMED = "charmed"
    TANZU = "tanzu"
    # Managed OpenShift
    OPENSHIFT_ROSA = "openshift_rosa"
    OPENSHIFT_ARO = "openshift_aro"
    OPENSHIFT_DEDICATED = "openshift_dedicated"
    OPENSHIFT_IBM = "openshift_ibm"
    # Managed Kubernetes services
    EKS = "eks"
    AKS = "aks"
    GKE = "gke"
    OKE = "oke"
    IKS = "iks"
    ACK = "ack"
    TKE = "tke"
    CCE = "cce"
    DOKS = "doks"
    LKE = "lke"
    VKE = "vke"
    HETZNER_K8S = "hetzner_k8s"
    OVH_KUBERNETES = "ovh_kubernetes"
    SCALEWAY_KAPSULE = "scaleway_kapsule"
    # Self-managed distributions hosted on a public cloud
    RANCHER_EKS = "rancher_eks"
    RANCHER_AKS = "rancher_aks"
    RANCHER_GKE = "rancher_gke"
    TANZU_AWS = "tanzu_aws"
    TANZU_AZURE = "tanzu_azure"
    TANZU_GCP = "tanzu_gcp"
    CHARMED_AWS = "charmed_aws"
    CHARMED_AZURE = "charmed_azure"
    CHARMED_GCP = "charmed_gcp"
    MICROK8S_AWS = "microk8s_aws"
    MICROK8S_AZURE = "microk8s_azure"
    MICROK8S_GCP = "microk8s_gcp"
    K3S_AWS = "k3s_aws"
    K3S_AZURE = "k3s_azure"
    K3S_GCP = "k3s_gcp"
    RKE2_AWS = "rke2_aws"
    RKE2_AZURE = "rke2_azure"
    RKE2_GCP = "rke2_gcp"


PROD_ENVIRONMENTS: FrozenSet[EnvironmentType] = frozenset({
    EnvironmentType.PROD,
    EnvironmentType.DR,
})

ON_PREM_DISTRIBUTIONS: FrozenSet[Distribution] = frozenset({
    Distribution.OPENSHIFT,
    Distribution.KUBERNETES,
    Distribution.RANCHER,
    Distribution.RKE2,
    Distribution.K3S,
    Distribution.MICROK8S,
    Distribution.CHARMED,
    Distribution.TANZU,
})

MANAGED_OPENSHIFT_PROVIDERS: FrozenSet[CloudProvider] = frozenset({
    CloudProvider.ROSA,
    CloudProvider.ARO,
    CloudProvider.OSD,
    CloudProvider.ROKS,
})

# Distributions not listed here run on premises
_DISTRIBUTION_PROVIDERS: Dict[Distribution, CloudProvider] = {
    Distribution.OPENSHIFT_ROSA: CloudProvider.ROSA,
    Distribution.OPENSHIFT_ARO: CloudProvider.ARO,
    Distribution.OPENSHIFT_DEDICATED: CloudProvider.OSD,
    Distribution.OPENSHIFT_IBM: CloudProvider.ROKS,
    Distribution.EKS: CloudProvider.AWS,
    Distribution.AKS: CloudProvider.AZURE,
    Distribution.GKE: CloudProvider.GCP,
    Distribution.OKE: CloudProvider.OCI,
    Distribution.IKS: CloudProvider.IBM,
    Distribution.ACK: CloudProvider.ALIBABA,
    Distribution.TKE: CloudProvider.TENCENT,
    Distribution.CCE: CloudProvider.HUAWEI,
    Distribution.DOKS: CloudProvider.DIGITALOCEAN,
    Distribution.LKE: CloudProvider.LINODE,
    Distribution.VKE: CloudProvider.VULTR,
    Distribution.HETZNER_K8S: CloudProvider.HETZNER,
    Distribution.OVH_KUBERNETES: CloudProvider.OVH,
    Distribution.SCALEWAY_KAPSULE: CloudProvider.SCALEWAY,
    Distribution.RANCHER_EKS: CloudProvider.AWS,
    Distribution.RANCHER_AKS: CloudProvider.AZURE,
    Distribution.RANCHER_GKE: CloudProvider.GCP,
    Distribution.TANZU_AWS: CloudProvider.AWS,
    Distribution.TANZU_AZURE: CloudProvider.AZURE,
    Distribution.TANZU_GCP: CloudProvider.GCP,
    Distribution.CHARMED_AWS: CloudProvider.AWS,
    Distribution.CHARMED_AZURE: CloudProvider.AZURE,
    Distribution.CHARMED_GCP: CloudProvider.GCP,
    Distribution.MICROK8S_AWS: CloudProvider.AWS,
    Distribution.MICROK8S_AZURE: CloudProvider.AZURE,
    Distribution.MICROK8S_GCP: CloudProvider.GCP,
    Distribution.K3S_AWS: CloudProvider.AWS,
    Distribution.K3S_AZURE: CloudProvider.AZURE,
    Distribution.K3S_GCP: CloudProvider.GCP,
    Distribution.RKE2_AWS: CloudProvider.AWS,
    Distribution.RKE2_AZURE: CloudProvider.AZURE,
    Distribution.RKE2_GCP: CloudProvider.GCP,
}

# Cloud-hosted variants share the licensing of their base distribution
_BASE_DISTRIBUTIONS: Dict[Distribution, Distribution] = {
    Distribution.RANCHER_EKS: Distribution.RANCHER,
    Distribution.RANCHER_AKS: Distribution.RANCHER,
    Distribution.RANCHER_GKE: Distribution.RANCHER,
    Distribution.TANZU_AWS: Distribution.TANZU,
    Distribution.TANZU_AZURE: Distribution.TANZU,
    Distribution.TANZU_GCP: Distribution.TANZU,
    Distribution.CHARMED_AWS: Distribution.CHARMED,
    Distribution.CHARMED_AZURE: Distribution.CHARMED,
    Distribution.CHARMED_GCP: Distribution.CHARMED,
    Distribution.MICROK8S_AWS: Distribution.MICROK8S,
    Distribution.MICROK8S_AZURE: Distribution.MICROK8S,
    Distribution.MICROK8S_GCP: Distribution.MICROK8S,
    Distribution.K3S_AWS: Distribution.K3S,
    Distribution.K3S_AZURE: Distribution.K3S,
    Distribution.K3S_GCP: Distribution.K3S,
    Distribution.RKE2_AWS: Distribution.RKE2,
    Distribution.RKE2_AZURE: Distribution.RKE2,
    Distribution.RKE2_GCP: Distribution.RKE2,
}


def provider_for_distribution(distribution: Distribution) -> CloudProvider:
    """Provider whose infrastructure hosts the given distribution."""
    return _DISTRIBUTION_PROVIDERS.get(distribution, CloudProvider.ON_PREM)


def base_distribution(distribution: Distribution) -> Distribution:
    """Self-managed distribution a cloud-hosted variant is licensed as."""
    return _BASE_DISTRIBUTIONS.get(distribution, distribution)


def is_prod_environment(environment: EnvironmentType) -> bool:
    """Prod and DR environments use production-grade node specs."""
    return environment in PROD_ENVIRONMENTS

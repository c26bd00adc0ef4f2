"""
Domain models for Mendix platform licensing.
Pricebook tables, deployment configuration and cost result.
"""
from typing import List, Dict, Any, Optional, FrozenSet
from dataclasses import dataclass, field
from enum import Enum

from infra_sizing.core.config import config
from infra_sizing.domain.cost_models import LicenseLineItem
from infra_sizing.domain.tier_models import PricedTier


class MendixDeploymentCategory(Enum):
    CLOUD = "cloud"
    PRIVATE_CLOUD = "private_cloud"
    OTHER = "other"


class MendixCloudType(Enum):
    SAAS = "saas"  # Multi-tenant, billed by resource packs
    DEDICATED = "dedicated"


class MendixPrivateCloudProvider(Enum):
    AZURE = "azure"
    EKS = "eks"
    AKS = "aks"
    GKE = "gke"
    OPENSHIFT = "openshift"
    GENERIC_K8S = "generic_k8s"
    RANCHER = "rancher"
    K3S = "k3s"
    DOCKER = "docker"


class MendixOtherDeployment(Enum):
    SERVER = "server"  # VMs or Docker on customer infrastructure
    STACKIT = "stackit"
    SAP_BTP = "sap_btp"


class MendixResourcePackTier(Enum):
    STANDARD = "standard"
    PREMIUM = "premium"
    PREMIUM_PLUS = "premium_plus"


class MendixResourcePackSize(Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    TWO_XL = "2XL"
    THREE_XL = "3XL"
    FOUR_XL = "4XL"
    FOUR_XL_5XL_DB = "4XL-5XLDB"


SUPPORTED_PRIVATE_CLOUD_PROVIDERS: FrozenSet[MendixPrivateCloudProvider] = frozenset({
    MendixPrivateCloudProvider.AZURE,
    MendixPrivateCloudProvider.EKS,
    MendixPrivateCloudProvider.AKS,
    MendixPrivateCloudProvider.GKE,
    MendixPrivateCloudProvider.OPENSHIFT,
})


@dataclass(frozen=True)
class MendixResourcePack:
    """One row of the Mendix Cloud resource pack pricebook."""
    tier: MendixResourcePackTier
    size: MendixResourcePackSize
    mx_memory_gb: float
    mx_vcpu: float
    db_memory_gb: float
    db_vcpu: int
    db_storage_gb: float
    file_storage_gb: float
    price_per_year: float
    cloud_tokens: int
    uptime_sla: float = 99.5
    has_fallback: bool = False
    has_multi_region_failover: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "tier": self.tier.value,
            "size": self.size.value,
            "mx_memory_gb": self.mx_memory_gb,
            "mx_vcpu": self.mx_vcpu,
            "db_storage_gb": self.db_storage_gb,
            "price_per_year": round(self.price_per_year, 2),
            "cloud_tokens": self.cloud_tokens,
            "uptime_sla": self.uptime_sla,
        }


def _packs(tier: MendixResourcePackTier, rows, **features) -> List[MendixResourcePack]:
    return [
        MendixResourcePack(tier, size, mx_mem, mx_cpu, db_mem, db_cpu, db_storage, files, price, tokens, **features)
        for size, mx_mem, mx_cpu, db_mem, db_cpu, db_storage, files, price, tokens in rows
    ]


_Size = MendixResourcePackSize

STANDARD_PACKS = _packs(MendixResourcePackTier.STANDARD, [
    (_Size.XS, 1, 0.25, 1, 2, 5, 10, 516, 10),
    (_Size.S, 2, 0.5, 2, 2, 10, 20, 1032, 20),
    (_Size.M, 4, 1, 4, 2, 20, 40, 2064, 40),
    (_Size.L, 8, 2, 8, 2, 40, 80, 4128, 80),
    (_Size.XL, 16, 4, 16, 4, 80, 160, 8256, 160),
    (_Size.TWO_XL, 32, 8, 32, 4, 160, 320, 16512, 320),
    (_Size.THREE_XL, 64, 16, 64, 8, 320, 640, 33024, 640),
    (_Size.FOUR_XL, 128, 32, 128, 16, 640, 1280, 66048, 1280),
    (_Size.FOUR_XL_5XL_DB, 128, 32, 256, 32, 1280, 1280, 115584, 2240),
])

PREMIUM_PACKS = _packs(MendixResourcePackTier.PREMIUM, [
    (_Size.S, 2, 0.5, 2, 2, 10, 20, 1548, 30),
    (_Size.M, 4, 1, 4, 2, 20, 40, 3096, 60),
    (_Size.L, 8, 2, 8, 2, 40, 80, 6192, 120),
    (_Size.XL, 16, 4, 16, 4, 80, 160, 12384, 240),
    (_Size.TWO_XL, 32, 8, 32, 4, 160, 320, 24768, 480),
    (_Size.THREE_XL, 64, 16, 64, 8, 320, 640, 49536, 960),
    (_Size.FOUR_XL, 128, 32, 128, 16, 640, 1280, 99072, 1920),
    (_Size.FOUR_XL_5XL_DB, 128, 32, 256, 32, 1280, 1280, 173376, 3360),
], uptime_sla=99.95, has_fallback=True)

PREMIUM_PLUS_PACKS = _packs(MendixResourcePackTier.PREMIUM_PLUS, [
    (_Size.XL, 16, 4, 16, 4, 80, 160, 20640, 400),
    (_Size.TWO_XL, 32, 8, 32, 4, 160, 320, 41280, 800),
    (_Size.THREE_XL, 64, 16, 64, 8, 320, 640, 82560, 1600),
    (_Size.FOUR_XL, 128, 32, 128, 16, 640, 1280, 165120, 3200),
    (_Size.FOUR_XL_5XL_DB, 128, 32, 128, 32, 1280, 1280, 288960, 5600),
], uptime_sla=99.95, has_fallback=True, has_multi_region_failover=True)


def default_k8s_environment_tiers() -> List[PricedTier]:
    """Per-environment pricing for Mendix on Kubernetes (beyond the included ones)."""
    return [
        PricedTier(1, 50, 552.0),
        PricedTier(51, 100, 408.0),
        PricedTier(101, 150, 240.0),
        PricedTier(151, None, 0.0),
    ]


@dataclass
class MendixPricingSettings:
    """Mendix pricebook values (all annual, USD)."""
    standard_packs: List[MendixResourcePack] = field(default_factory=lambda: list(STANDARD_PACKS))
    premium_packs: List[MendixResourcePack] = field(default_factory=lambda: list(PREMIUM_PACKS))
    premium_plus_packs: List[MendixResourcePack] = field(default_factory=lambda: list(PREMIUM_PLUS_PACKS))

    cloud_token_price: float = 51.60
    additional_file_storage_per_100gb: float = 123.0
    additional_db_storage_per_100gb: float = 246.0
    cloud_dedicated_price: float = 368100.0

    azure_base_price: float = 6612.0
    azure_base_environments_included: int = 3
    azure_additional_environment_price: float = 722.40
    azure_additional_environment_tokens: int = 14

    k8s_base_price: float = 6360.0
    k8s_base_environments_included: int = 3
    k8s_environment_tiers: List[PricedTier] = field(default_factory=default_k8s_environment_tiers)

    server_per_app_price: float = 6612.0
    server_unlimited_apps_price: float = 33060.0
    stackit_per_app_price: float = 6612.0
    stackit_unlimited_apps_price: float = 33060.0
    sap_btp_per_app_price: float = 6612.0
    sap_btp_unlimited_apps_price: float = 33060.0

    genai_model_pack_prices: Dict[str, float] = field(default_factory=lambda: {
        "S": 1857.60,
        "M": 3715.20,
        "L": 7430.40,
    })
    genai_model_pack_tokens: Dict[str, int] = field(default_factory=lambda: {"S": 36, "M": 72, "L": 144})
    genai_knowledge_base_price: float = 2476.80
    genai_knowledge_base_tokens: int = 48

    platform_premium_unlimited_price: float = 65400.0
    internal_users_per_100_price: float = 40800.0
    external_users_per_250k_price: float = 60000.0
    customer_enablement_price: float = 45000.0
    volume_discount_percent: float = 10.0

    def packs_for(self, tier: MendixResourcePackTier) -> List[MendixResourcePack]:
        if tier == MendixResourcePackTier.PREMIUM:
            return self.premium_packs
        if tier == MendixResourcePackTier.PREMIUM_PLUS:
            return self.premium_plus_packs
        return self.standard_packs

    def find_pack(
        self,
        tier: MendixResourcePackTier,
        size: MendixResourcePackSize
    ) -> Optional[MendixResourcePack]:
        return next((pack for pack in self.packs_for(tier) if pack.size == size), None)


@dataclass
class MendixResourcePackSelection:
    tier: MendixResourcePackTier
    size: MendixResourcePackSize
    quantity: int = 1


@dataclass
class MendixDeploymentConfig:
    """Caller-supplied description of a Mendix deployment."""
    category: MendixDeploymentCategory = MendixDeploymentCategory.CLOUD
    cloud_type: MendixCloudType = MendixCloudType.SAAS
    private_cloud_provider: Optional[MendixPrivateCloudProvider] = None
    other_deployment: Optional[MendixOtherDeployment] = None

    resource_packs: List[MendixResourcePackSelection] = field(default_factory=list)
    additional_cloud_tokens: int = 0
    additional_file_storage_gb: int = 0
    additional_db_storage_gb: int = 0

    number_of_environments: int = 3
    number_of_apps: int = 1
    unlimited_apps: bool = False

    internal_users: int = 0
    external_users: int = 0
    platform_premium_unlimited: bool = True

    genai_model_pack_size: Optional[str] = None  # "S" | "M" | "L"
    genai_model_pack_quantity: int = 1
    genai_knowledge_base_quantity: int = 0

    include_customer_enablement: bool = False
    apply_volume_discount: bool = True


@dataclass
class MendixCostResult:
    """Itemized annual Mendix cost."""
    deployment_description: str = ""
    deployment_fee: float = 0.0
    environment_cost: float = 0.0
    environment_details: str = ""
    resource_pack_cost: float = 0.0
    storage_cost: float = 0.0
    cloud_token_cost: float = 0.0
    total_cloud_tokens: int = 0
    platform_cost: float = 0.0
    user_license_cost: float = 0.0
    genai_cost: float = 0.0
    services_cost: float = 0.0
    discount_amount: float = 0.0
    line_items: List[LicenseLineItem] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def gross_total(self) -> float:
        return (
            self.deployment_fee
            + self.environment_cost
            + self.resource_pack_cost
            + self.storage_cost
            + self.cloud_token_cost
            + self.platform_cost
            + self.user_license_cost
            + self.genai_cost
            + self.services_cost
        )

    @property
    def total_per_year(self) -> float:
        return self.gross_total - self.discount_amount

    @property
    def total_per_month(self) -> float:
        return self.total_per_year / config.MONTHS_PER_YEAR

    @property
    def total_three_year(self) -> float:
        return self.total_per_year * 3

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "deployment_description": self.deployment_description,
            "deployment_fee": round(self.deployment_fee, 2),
            "environment_cost": round(self.environment_cost, 2),
            "environment_details": self.environment_details,
            "resource_pack_cost": round(self.resource_pack_cost, 2),
            "storage_cost": round(self.storage_cost, 2),
            "cloud_token_cost": round(self.cloud_token_cost, 2),
            "total_cloud_tokens": self.total_cloud_tokens,
            "platform_cost": round(self.platform_cost, 2),
            "user_license_cost": round(self.user_license_cost, 2),
            "genai_cost": round(self.genai_cost, 2),
            "services_cost": round(self.services_cost, 2),
            "discount_amount": round(self.discount_amount, 2),
            "total_per_year": round(self.total_per_year, 2),
            "total_per_month": round(self.total_per_month, 2),
            "total_three_year": round(self.total_three_year, 2),
            "line_items": [item.to_dict() for item in self.line_items],
            "warnings": self.warnings,
        }

"""
Domain models for OutSystems licensing (ODC and O11).
All prices are annual USD unless a field says otherwise.
"""
from typing import List, Dict, Any, Optional, FrozenSet, Tuple
from dataclasses import dataclass, field
from enum import Enum

from infra_sizing.domain.cost_models import LicenseLineItem
from infra_sizing.domain.tier_models import PricedTier


class OutSystemsPlatform(Enum):
    ODC = "odc"  # OutSystems Developer Cloud
    O11 = "o11"


class OutSystemsDeployment(Enum):
    CLOUD = "cloud"
    SELF_MANAGED = "self_managed"


class OutSystemsCloudProvider(Enum):
    """Where a self-managed O11 installation runs."""
    ON_PREMISES = "on_premises"
    AZURE = "azure"
    AWS = "aws"


class OutSystemsRegion(Enum):
    AFRICA = "africa"
    MIDDLE_EAST = "middle_east"
    AMERICAS = "americas"
    EUROPE = "europe"
    ASIA_PACIFIC = "asia_pacific"


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class DiscountScope(Enum):
    TOTAL = "Total"
    LICENSE_ONLY = "LicenseOnly"
    ADD_ONS_ONLY = "AddOnsOnly"
    LICENSE_AND_ADD_ONS = "LicenseAndAddOns"


class OutSystemsFeature(Enum):
    SUPPORT_24X7_EXTENDED = "support_24x7_extended"
    SUPPORT_24X7_PREMIUM = "support_24x7_premium"
    SENTRY = "sentry"
    HIGH_AVAILABILITY = "high_availability"
    NON_PROD_ENV = "non_prod_env"
    LOAD_TEST_ENV = "load_test_env"
    ENVIRONMENT_PACK = "environment_pack"
    DISASTER_RECOVERY = "disaster_recovery"
    LOG_STREAMING = "log_streaming"
    DATABASE_REPLICA = "database_replica"
    PRIVATE_GATEWAY = "private_gateway"


# O11 features only sold with OutSystems Cloud
CLOUD_ONLY_FEATURES: FrozenSet[OutSystemsFeature] = frozenset({
    OutSystemsFeature.SENTRY,
    OutSystemsFeature.HIGH_AVAILABILITY,
    OutSystemsFeature.LOAD_TEST_ENV,
    OutSystemsFeature.LOG_STREAMING,
    OutSystemsFeature.DATABASE_REPLICA,
})

SELF_MANAGED_ONLY_FEATURES: FrozenSet[OutSystemsFeature] = frozenset({
    OutSystemsFeature.DISASTER_RECOVERY,
})

DEFAULT_AZURE_INSTANCE = "F4s_v2"
DEFAULT_AWS_INSTANCE = "m5.xlarge"

# instance type -> (vCPU, RAM GB)
AZURE_INSTANCE_SPECS: Dict[str, Tuple[int, int]] = {
    "F4s_v2": (4, 8),
    "D4s_v3": (4, 16),
    "D8s_v3": (8, 32),
    "D16s_v3": (16, 64),
}
AWS_INSTANCE_SPECS: Dict[str, Tuple[int, int]] = {
    "m5.large": (2, 8),
    "m5.xlarge": (4, 16),
    "m5.2xlarge": (8, 32),
}


@dataclass
class ServicesPricing:
    """Professional services price list for a region."""
    essential_success_plan: float = 30250.0
    premier_success_plan: float = 60500.0
    dedicated_group_session: float = 3820.0
    public_session: float = 720.0
    expert_day: float = 2640.0


def default_services_pricing() -> Dict[OutSystemsRegion, ServicesPricing]:
    return {
        OutSystemsRegion.AMERICAS: ServicesPricing(),
        OutSystemsRegion.EUROPE: ServicesPricing(),
        OutSystemsRegion.ASIA_PACIFIC: ServicesPricing(expert_day=2400.0),
        OutSystemsRegion.MIDDLE_EAST: ServicesPricing(27225.0, 54450.0, 3438.0, 648.0, 2376.0),
        OutSystemsRegion.AFRICA: ServicesPricing(27225.0, 54450.0, 3438.0, 648.0, 2376.0),
    }


def default_o11_internal_user_tiers() -> List[PricedTier]:
    return [
        PricedTier(1, 1000, 4840.0, pack_size=100),
        PricedTier(1001, 5000, 3630.0, pack_size=100),
        PricedTier(5001, None, 2420.0, pack_size=100),
    ]


def default_o11_external_user_tiers() -> List[PricedTier]:
    return [
        PricedTier(1, 10000, 4840.0, pack_size=1000),
        PricedTier(10001, 250000, 1210.0, pack_size=1000),
        PricedTier(250001, None, 242.0, pack_size=1000),
    ]


def default_app_shield_tiers() -> List[PricedTier]:
    """Flat annual AppShield price by total user volume."""
    return [
        PricedTier(0, 10000, 18150.0),
        PricedTier(10001, 50000, 32670.0),
        PricedTier(50001, 100000, 54450.0),
        PricedTier(100001, 500000, 108900.0),
        PricedTier(500001, None, 181500.0),
    ]


@dataclass
class OutSystemsPricingSettings:
    """OutSystems partner price calculator values."""
    ao_pack_size: int = 150

    # ODC
    odc_platform_base_price: float = 30250.0
    odc_ao_pack_price: float = 18150.0
    odc_internal_users_included: int = 100
    odc_internal_user_pack_size: int = 100
    odc_internal_user_pack_price: float = 6050.0
    odc_external_user_pack_size: int = 1000
    odc_external_user_pack_price: float = 6050.0
    odc_support_24x7_extended_per_pack: float = 6050.0
    odc_support_24x7_premium_per_pack: float = 9680.0
    odc_high_availability_per_pack: float = 18150.0
    odc_sentry_per_pack: float = 30250.0
    odc_non_prod_runtime_per_pack: float = 6050.0
    odc_private_gateway_per_pack: float = 1210.0

    # O11
    o11_enterprise_base_price: float = 36300.0
    o11_ao_pack_price: float = 36300.0
    o11_internal_users_included: int = 100
    o11_internal_user_tiers: List[PricedTier] = field(default_factory=default_o11_internal_user_tiers)
    o11_external_user_tiers: List[PricedTier] = field(default_factory=default_o11_external_user_tiers)
    o11_support_24x7_premium_per_pack: float = 3630.0
    o11_sentry_per_pack: float = 24200.0
    o11_high_availability_per_pack: float = 12100.0
    o11_non_prod_env_per_pack: float = 3630.0
    o11_load_test_env_per_pack: float = 6050.0
    o11_environment_pack_per_pack: float = 9680.0
    o11_disaster_recovery_per_pack: float = 12100.0
    o11_log_streaming_price: float = 7260.0
    o11_database_replica_price: float = 96800.0

    unlimited_users_per_ao_pack: float = 60500.0
    app_shield_tiers: List[PricedTier] = field(default_factory=default_app_shield_tiers)
    services_by_region: Dict[OutSystemsRegion, ServicesPricing] = field(default_factory=default_services_pricing)

    # Hourly VM rates for self-managed O11 on public cloud
    azure_vm_hourly_rates: Dict[str, float] = field(default_factory=lambda: {
        "F4s_v2": 0.169,
        "D4s_v3": 0.192,
        "D8s_v3": 0.384,
        "D16s_v3": 0.768,
    })
    aws_vm_hourly_rates: Dict[str, float] = field(default_factory=lambda: {
        "m5.large": 0.096,
        "m5.xlarge": 0.192,
        "m5.2xlarge": 0.384,
    })

    def get_services_pricing(self, region: OutSystemsRegion) -> ServicesPricing:
        return self.services_by_region.get(region) or self.services_by_region.get(
            OutSystemsRegion.AMERICAS, ServicesPricing()
        )


@dataclass
class OutSystemsDiscount:
    type: DiscountType = DiscountType.PERCENTAGE
    scope: DiscountScope = DiscountScope.TOTAL
    value: float = 0.0
    notes: Optional[str] = None

    def describe(self) -> str:
        if self.type == DiscountType.PERCENTAGE:
            description = f"{self.value:g}% discount on {self.scope.value}"
        else:
            description = f"${self.value:,.0f} discount on {self.scope.value}"
        if self.notes:
            description += f" ({self.notes})"
        return description


@dataclass
class OutSystemsDeploymentConfig:
    """Caller-supplied description of an OutSystems subscription."""
    platform: OutSystemsPlatform = OutSystemsPlatform.ODC
    deployment: OutSystemsDeployment = OutSystemsDeployment.CLOUD
    cloud_provider: OutSystemsCloudProvider = OutSystemsCloudProvider.ON_PREMISES
    region: OutSystemsRegion = OutSystemsRegion.AMERICAS

    total_application_objects: int = 150
    internal_users: int = 100
    external_users: int = 0
    use_unlimited_users: bool = False

    app_shield: bool = False
    app_shield_user_volume: int = 10000  # used with unlimited users

    support_24x7_extended: bool = False
    support_24x7_premium: bool = False
    sentry: bool = False
    high_availability: bool = False
    non_production_quantity: int = 0
    load_test_env_quantity: int = 0
    environment_pack_quantity: int = 0
    disaster_recovery: bool = False
    log_streaming_quantity: int = 0
    database_replica_quantity: int = 0
    private_gateway: bool = False

    essential_success_plan_quantity: int = 0
    premier_success_plan_quantity: int = 0
    dedicated_group_session_quantity: int = 0
    public_session_quantity: int = 0
    expert_day_quantity: int = 0

    total_environments: int = 4
    front_end_servers_per_environment: int = 1
    azure_instance_type: str = DEFAULT_AZURE_INSTANCE
    aws_instance_type: str = DEFAULT_AWS_INSTANCE

    discount: Optional[OutSystemsDiscount] = None

    @property
    def is_self_managed(self) -> bool:
        return self.deployment == OutSystemsDeployment.SELF_MANAGED

    def selected_features(self) -> List[OutSystemsFeature]:
        flags = [
            (self.support_24x7_extended, OutSystemsFeature.SUPPORT_24X7_EXTENDED),
            (self.support_24x7_premium, OutSystemsFeature.SUPPORT_24X7_PREMIUM),
            (self.sentry, OutSystemsFeature.SENTRY),
            (self.high_availability, OutSystemsFeature.HIGH_AVAILABILITY),
            (self.non_production_quantity > 0, OutSystemsFeature.NON_PROD_ENV),
            (self.load_test_env_quantity > 0, OutSystemsFeature.LOAD_TEST_ENV),
            (self.environment_pack_quantity > 0, OutSystemsFeature.ENVIRONMENT_PACK),
            (self.disaster_recovery, OutSystemsFeature.DISASTER_RECOVERY),
            (self.log_streaming_quantity > 0, OutSystemsFeature.LOG_STREAMING),
            (self.database_replica_quantity > 0, OutSystemsFeature.DATABASE_REPLICA),
            (self.private_gateway, OutSystemsFeature.PRIVATE_GATEWAY),
        ]
        return [feature for selected, feature in flags if selected]


@dataclass
class OutSystemsCostResult:
    """Itemized annual OutSystems cost."""
    platform: OutSystemsPlatform
    deployment: OutSystemsDeployment
    ao_pack_count: int = 1
    license_breakdown: Dict[str, float] = field(default_factory=dict)
    add_on_costs: Dict[str, float] = field(default_factory=dict)
    service_costs: Dict[str, float] = field(default_factory=dict)
    vm_monthly_cost: float = 0.0
    vm_annual_cost: float = 0.0
    vm_details: str = ""
    discount_amount: float = 0.0
    discount_description: str = ""
    line_items: List[LicenseLineItem] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def license_subtotal(self) -> float:
        return sum(self.license_breakdown.values())

    @property
    def add_ons_subtotal(self) -> float:
        return sum(self.add_on_costs.values())

    @property
    def services_subtotal(self) -> float:
        return sum(self.service_costs.values())

    @property
    def gross_total(self) -> float:
        return self.license_subtotal + self.add_ons_subtotal + self.services_subtotal + self.vm_annual_cost

    @property
    def net_total(self) -> float:
        return self.gross_total - self.discount_amount

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "platform": self.platform.value,
            "deployment": self.deployment.value,
            "ao_pack_count": self.ao_pack_count,
            "license_subtotal": round(self.license_subtotal, 2),
            "add_ons_subtotal": round(self.add_ons_subtotal, 2),
            "services_subtotal": round(self.services_subtotal, 2),
            "vm_monthly_cost": round(self.vm_monthly_cost, 2),
            "vm_annual_cost": round(self.vm_annual_cost, 2),
            "vm_details": self.vm_details,
            "discount_amount": round(self.discount_amount, 2),
            "discount_description": self.discount_description,
            "net_total": round(self.net_total, 2),
            "line_items": [item.to_dict() for item in self.line_items],
            "warnings": self.warnings,
        }

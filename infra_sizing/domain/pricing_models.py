"""
Domain models for provider price lists.
A PriceList is replaced wholesale on refresh; it is never partially updated.
"""
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime, timezone

from infra_sizing.core.config import config
from infra_sizing.domain.enums import (
    CloudProvider,
    Currency,
    Distribution,
    PricingType,
    SupportLevel,
    base_distribution,
)


TANZU_CORES_PER_NODE = 8


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Express a timestamp as naive UTC, the form the cache clocks use."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@dataclass
class ComputePricing:
    """Hourly compute rates."""
    cpu_per_hour: float = 0.0
    ram_gb_per_hour: float = 0.0
    managed_control_plane_per_hour: float = 0.0
    openshift_service_fee_per_worker_hour: float = 0.0
    instance_type_prices: Dict[str, float] = field(default_factory=dict)

    def hourly_cost(self, cpu_cores: float, ram_gb: float) -> float:
        return cpu_cores * self.cpu_per_hour + ram_gb * self.ram_gb_per_hour

    def monthly_cost(self, cpu_cores: float, ram_gb: float) -> float:
        return self.hourly_cost(cpu_cores, ram_gb) * config.HOURS_PER_MONTH

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "cpu_per_hour": self.cpu_per_hour,
            "ram_gb_per_hour": self.ram_gb_per_hour,
            "managed_control_plane_per_hour": self.managed_control_plane_per_hour,
            "openshift_service_fee_per_worker_hour": self.openshift_service_fee_per_worker_hour,
            "instance_type_prices": dict(self.instance_type_prices),
        }


@dataclass
class StoragePricing:
    """Per GB-month storage rates."""
    ssd_per_gb_month: float = 0.0
    hdd_per_gb_month: float = 0.0
    object_storage_per_gb_month: float = 0.0
    backup_per_gb_month: float = 0.0
    registry_per_gb_month: float = 0.0

    def monthly_cost(
        self,
        ssd_gb: float,
        hdd_gb: float = 0,
        object_gb: float = 0,
        backup_gb: float = 0
    ) -> float:
        return (
            ssd_gb * self.ssd_per_gb_month
            + hdd_gb * self.hdd_per_gb_month
            + object_gb * self.object_storage_per_gb_month
            + backup_gb * self.backup_per_gb_month
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "ssd_per_gb_month": self.ssd_per_gb_month,
            "hdd_per_gb_month": self.hdd_per_gb_month,
            "object_storage_per_gb_month": self.object_storage_per_gb_month,
            "backup_per_gb_month": self.backup_per_gb_month,
            "registry_per_gb_month": self.registry_per_gb_month,
        }


@dataclass
class NetworkPricing:
    """Network rates (egress per GB, everything else per hour)."""
    egress_per_gb: float = 0.0
    ingress_per_gb: float = 0.0
    load_balancer_per_hour: float = 0.0
    nat_gateway_per_hour: float = 0.0
    vpn_per_hour: float = 0.0
    public_ip_per_hour: float = 0.0

    def monthly_cost(self, load_balancers: int, egress_gb: float, public_ips: int = 0) -> float:
        hours = config.HOURS_PER_MONTH
        return (
            load_balancers * self.load_balancer_per_hour * hours
            + egress_gb * self.egress_per_gb
            + public_ips * self.public_ip_per_hour * hours
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "egress_per_gb": self.egress_per_gb,
            "ingress_per_gb": self.ingress_per_gb,
            "load_balancer_per_hour": self.load_balancer_per_hour,
            "nat_gateway_per_hour": self.nat_gateway_per_hour,
            "vpn_per_hour": self.vpn_per_hour,
            "public_ip_per_hour": self.public_ip_per_hour,
        }


@dataclass
class LicensePricing:
    """Commercial distribution subscriptions (annual)."""
    openshift_per_node_year: float = 2500.0
    rancher_enterprise_per_node_year: float = 1000.0
    tanzu_per_core_year: float = 1500.0
    charmed_k8s_per_node_year: float = 500.0
    custom_licenses: Dict[str, float] = field(default_factory=dict)

    def license_per_node_year(self, distribution: Distribution) -> float:
        """
        Annual license cost of one node for a distribution.

        Cloud-hosted variants are licensed as their base distribution;
        open-source and managed services cost nothing.
        """
        if distribution.value in self.custom_licenses:
            return self.custom_licenses[distribution.value]

        base = base_distribution(distribution)
        if base == Distribution.OPENSHIFT:
            return self.openshift_per_node_year
        if base == Distribution.RANCHER:
            return self.rancher_enterprise_per_node_year
        if base == Distribution.TANZU:
            return self.tanzu_per_core_year * TANZU_CORES_PER_NODE
        if base == Distribution.CHARMED:
            return self.charmed_k8s_per_node_year
        return 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "openshift_per_node_year": self.openshift_per_node_year,
            "rancher_enterprise_per_node_year": self.rancher_enterprise_per_node_year,
            "tanzu_per_core_year": self.tanzu_per_core_year,
            "charmed_k8s_per_node_year": self.charmed_k8s_per_node_year,
            "custom_licenses": dict(self.custom_licenses),
        }


@dataclass
class SupportPricing:
    """Support plans as a percentage of the base bill."""
    basic_percent: float = 0.0
    developer_percent: float = 3.0
    business_percent: float = 10.0
    enterprise_percent: float = 15.0

    def percent_for(self, level: SupportLevel) -> float:
        return {
            SupportLevel.BASIC: self.basic_percent,
            SupportLevel.DEVELOPER: self.developer_percent,
            SupportLevel.BUSINESS: self.business_percent,
            SupportLevel.ENTERPRISE: self.enterprise_percent,
        }.get(level, 0.0)

    def support_cost(self, base_cost: float, level: SupportLevel) -> float:
        return base_cost * self.percent_for(level) / 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "basic_percent": self.basic_percent,
            "developer_percent": self.developer_percent,
            "business_percent": self.business_percent,
            "enterprise_percent": self.enterprise_percent,
        }


@dataclass
class PriceList:
    """Complete unit-price table for one (provider, region, pricing type)."""
    provider: CloudProvider
    region: str
    region_display_name: str = ""
    currency: Currency = Currency.USD
    pricing_type: PricingType = PricingType.ON_DEMAND
    compute: ComputePricing = field(default_factory=ComputePricing)
    storage: StoragePricing = field(default_factory=StoragePricing)
    network: NetworkPricing = field(default_factory=NetworkPricing)
    licenses: LicensePricing = field(default_factory=LicensePricing)
    support: SupportPricing = field(default_factory=SupportPricing)
    last_updated: Optional[datetime] = None
    is_live: bool = False
    source: str = "Default"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "provider": self.provider.value,
            "region": self.region,
            "region_display_name": self.region_display_name or self.region,
            "currency": self.currency.value,
            "pricing_type": self.pricing_type.value,
            "compute": self.compute.to_dict(),
            "storage": self.storage.to_dict(),
            "network": self.network.to_dict(),
            "licenses": self.licenses.to_dict(),
            "support": self.support.to_dict(),
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
            "is_live": self.is_live,
            "source": self.source,
        }

"""
Built-in baseline price lists.
Used when neither a cached nor a live price list is available. Figures are
public list prices (USD) for the provider's reference region.
"""
from typing import Dict, List, Optional, Tuple
from datetime import datetime
import logging

from infra_sizing.domain.enums import CloudProvider, PricingType
from infra_sizing.domain.pricing_models import (
    ComputePricing,
    LicensePricing,
    NetworkPricing,
    PriceList,
    StoragePricing,
    SupportPricing,
)


logger = logging.getLogger(__name__)


# provider -> (cpu/h, ram GB/h, managed control plane/h)
_COMPUTE: Dict[CloudProvider, Tuple[float, float, float]] = {
    CloudProvider.AWS: (0.048, 0.006, 0.10),
    CloudProvider.AZURE: (0.048, 0.006, 0.0),
    CloudProvider.GCP: (0.0335, 0.0045, 0.10),
    CloudProvider.OCI: (0.03, 0.0015, 0.0),
    CloudProvider.IBM: (0.05, 0.007, 0.0),
    CloudProvider.ALIBABA: (0.04, 0.005, 0.0),
    CloudProvider.TENCENT: (0.035, 0.005, 0.0),
    CloudProvider.HUAWEI: (0.038, 0.005, 0.0),
    CloudProvider.DIGITALOCEAN: (0.018, 0.003, 0.0),
    CloudProvider.LINODE: (0.015, 0.003, 0.0),
    CloudProvider.VULTR: (0.012, 0.003, 0.0),
    CloudProvider.HETZNER: (0.006, 0.002, 0.0),
    CloudProvider.OVH: (0.010, 0.003, 0.0),
    CloudProvider.SCALEWAY: (0.008, 0.002, 0.0),
    CloudProvider.CIVO: (0.0075, 0.0025, 0.0),
    CloudProvider.EXOSCALE: (0.012, 0.003, 0.0),
    CloudProvider.ON_PREM: (0.0, 0.0, 0.0),
}

# provider -> (ssd, hdd, object, backup, registry) per GB-month
_STORAGE: Dict[CloudProvider, Tuple[float, float, float, float, float]] = {
    CloudProvider.AWS: (0.08, 0.045, 0.023, 0.05, 0.10),
    CloudProvider.AZURE: (0.075, 0.04, 0.0184, 0.05, 0.10),
    CloudProvider.GCP: (0.17, 0.04, 0.02, 0.05, 0.10),
    CloudProvider.OCI: (0.0255, 0.0255, 0.0255, 0.05, 0.0255),
    CloudProvider.IBM: (0.10, 0.05, 0.022, 0.05, 0.10),
    CloudProvider.ALIBABA: (0.08, 0.04, 0.02, 0.05, 0.08),
    CloudProvider.TENCENT: (0.07, 0.04, 0.02, 0.04, 0.05),
    CloudProvider.HUAWEI: (0.08, 0.04, 0.02, 0.04, 0.06),
    CloudProvider.DIGITALOCEAN: (0.10, 0.10, 0.02, 0.05, 0.02),
    CloudProvider.LINODE: (0.10, 0.10, 0.02, 0.025, 0.0),
    CloudProvider.VULTR: (0.10, 0.10, 0.02, 0.05, 0.0),
    CloudProvider.HETZNER: (0.044, 0.044, 0.02, 0.02, 0.0),
    CloudProvider.OVH: (0.04, 0.02, 0.01, 0.02, 0.02),
    CloudProvider.SCALEWAY: (0.08, 0.04, 0.01, 0.02, 0.02),
    CloudProvider.CIVO: (0.10, 0.10, 0.02, 0.05, 0.0),
    CloudProvider.EXOSCALE: (0.08, 0.04, 0.02, 0.03, 0.02),
    CloudProvider.ON_PREM: (0.0, 0.0, 0.0, 0.0, 0.0),
}

# provider -> (egress/GB, load balancer/h, NAT/h, VPN/h, public IP/h)
_NETWORK: Dict[CloudProvider, Tuple[float, float, float, float, float]] = {
    CloudProvider.AWS: (0.09, 0.0225, 0.045, 0.05, 0.005),
    CloudProvider.AZURE: (0.087, 0.025, 0.045, 0.05, 0.004),
    CloudProvider.GCP: (0.12, 0.025, 0.045, 0.05, 0.004),
    CloudProvider.OCI: (0.0085, 0.01, 0.03, 0.04, 0.0),
    CloudProvider.IBM: (0.09, 0.025, 0.045, 0.05, 0.004),
    CloudProvider.ALIBABA: (0.12, 0.02, 0.04, 0.05, 0.003),
    CloudProvider.TENCENT: (0.08, 0.02, 0.03, 0.05, 0.003),
    CloudProvider.HUAWEI: (0.10, 0.02, 0.04, 0.05, 0.003),
    CloudProvider.DIGITALOCEAN: (0.01, 0.015, 0.0, 0.0, 0.0),
    CloudProvider.LINODE: (0.01, 0.015, 0.0, 0.0, 0.0),
    CloudProvider.VULTR: (0.01, 0.015, 0.0, 0.0, 0.0),
    CloudProvider.HETZNER: (0.0, 0.008, 0.0, 0.0, 0.001),
    CloudProvider.OVH: (0.01, 0.012, 0.0, 0.03, 0.0),
    CloudProvider.SCALEWAY: (0.01, 0.012, 0.01, 0.0, 0.002),
    CloudProvider.CIVO: (0.01, 0.015, 0.0, 0.0, 0.0),
    CloudProvider.EXOSCALE: (0.02, 0.015, 0.0, 0.0, 0.003),
    CloudProvider.ON_PREM: (0.0, 0.0, 0.0, 0.0, 0.0),
}

# Reference-region instance prices per hour
_INSTANCE_TYPES: Dict[CloudProvider, Dict[str, float]] = {
    CloudProvider.AWS: {
        "t3.medium": 0.0416,
        "t3.large": 0.0832,
        "m6i.large": 0.096,
        "m6i.xlarge": 0.192,
        "m6i.2xlarge": 0.384,
        "m6i.4xlarge": 0.768,
        "c6i.xlarge": 0.17,
        "r6i.xlarge": 0.252,
        "m5.large": 0.096,
        "m5.xlarge": 0.192,
        "m5.2xlarge": 0.384,
        "m5.4xlarge": 0.768,
    },
    CloudProvider.AZURE: {
        "Standard_B2s": 0.0416,
        "Standard_D2s_v5": 0.096,
        "Standard_D4s_v5": 0.192,
        "Standard_D8s_v5": 0.384,
        "Standard_D16s_v5": 0.768,
        "Standard_F4s_v2": 0.169,
        "Standard_D4s_v3": 0.192,
        "Standard_D8s_v3": 0.384,
        "Standard_E4s_v5": 0.252,
    },
    CloudProvider.GCP: {
        "e2-standard-2": 0.067,
        "e2-standard-4": 0.134,
        "n2-standard-4": 0.194,
        "n2-standard-8": 0.388,
        "n2-standard-16": 0.777,
        "c2-standard-4": 0.209,
    },
    CloudProvider.OCI: {
        "VM.Standard.E4.Flex.4": 0.1,
        "VM.Standard.E4.Flex.8": 0.2,
    },
}

_DEFAULT_REGIONS: Dict[CloudProvider, str] = {
    CloudProvider.AWS: "us-east-1",
    CloudProvider.AZURE: "eastus",
    CloudProvider.GCP: "us-central1",
    CloudProvider.OCI: "us-ashburn-1",
    CloudProvider.IBM: "us-south",
    CloudProvider.ALIBABA: "cn-hangzhou",
    CloudProvider.TENCENT: "ap-guangzhou",
    CloudProvider.HUAWEI: "cn-north-4",
    CloudProvider.ROSA: "us-east-1",
    CloudProvider.ARO: "eastus",
    CloudProvider.OSD: "us-central1",
    CloudProvider.ROKS: "us-south",
    CloudProvider.DIGITALOCEAN: "nyc1",
    CloudProvider.LINODE: "us-east",
    CloudProvider.VULTR: "ewr",
    CloudProvider.HETZNER: "fsn1",
    CloudProvider.OVH: "gra",
    CloudProvider.SCALEWAY: "fr-par",
    CloudProvider.CIVO: "lon1",
    CloudProvider.EXOSCALE: "ch-gva-2",
    CloudProvider.ON_PREM: "on-premises",
    CloudProvider.MANUAL: "on-premises",
}

_REGION_NAMES: Dict[str, str] = {
    "us-east-1": "US East (N. Virginia)",
    "us-east-2": "US East (Ohio)",
    "us-west-1": "US West (N. California)",
    "us-west-2": "US West (Oregon)",
    "eu-west-1": "Europe (Ireland)",
    "eu-west-2": "Europe (London)",
    "eu-central-1": "Europe (Frankfurt)",
    "ap-southeast-1": "Asia Pacific (Singapore)",
    "ap-northeast-1": "Asia Pacific (Tokyo)",
    "ap-south-1": "Asia Pacific (Mumbai)",
    "sa-east-1": "South America (Sao Paulo)",
    "eastus": "East US",
    "westus2": "West US 2",
    "westeurope": "West Europe",
    "northeurope": "North Europe",
    "uksouth": "UK South",
    "southeastasia": "Southeast Asia",
    "us-central1": "Iowa",
    "us-east4": "Northern Virginia",
    "europe-west1": "Belgium",
    "europe-west3": "Frankfurt",
    "asia-southeast1": "Singapore",
    "us-ashburn-1": "US East (Ashburn)",
    "us-south": "Dallas",
    "on-premises": "On-Premises",
}

# Applied to compute and storage; unknown regions price like the reference region
_REGIONAL_MULTIPLIERS: Dict[CloudProvider, Dict[str, float]] = {
    CloudProvider.AWS: {
        "us-west-1": 1.1,
        "eu-west-1": 1.05,
        "eu-central-1": 1.05,
        "eu-west-2": 1.08,
        "eu-west-3": 1.08,
        "ap-southeast-1": 1.1,
        "ap-southeast-2": 1.1,
        "ap-northeast-1": 1.15,
        "ap-south-1": 0.95,
        "me-south-1": 1.2,
        "me-central-1": 1.2,
        "sa-east-1": 1.25,
    },
    CloudProvider.AZURE: {
        "westeurope": 1.08,
        "northeurope": 1.04,
        "uksouth": 1.08,
        "southeastasia": 1.1,
        "japaneast": 1.15,
        "brazilsouth": 1.3,
    },
    CloudProvider.GCP: {
        "europe-west1": 1.05,
        "europe-west3": 1.1,
        "asia-southeast1": 1.1,
        "asia-northeast1": 1.15,
        "southamerica-east1": 1.25,
    },
    CloudProvider.OCI: {"eu-frankfurt-1": 1.0, "ap-tokyo-1": 1.05},
    CloudProvider.ALIBABA: {"ap-southeast-1": 1.1, "eu-central-1": 1.15},
    CloudProvider.TENCENT: {"ap-singapore": 1.1, "eu-frankfurt": 1.15},
    CloudProvider.HUAWEI: {"ap-southeast-1": 1.1, "eu-west-0": 1.15},
}

# Managed OpenShift runs on a host cloud's infrastructure
_HOST_PROVIDERS: Dict[CloudProvider, CloudProvider] = {
    CloudProvider.ROSA: CloudProvider.AWS,
    CloudProvider.ARO: CloudProvider.AZURE,
    CloudProvider.OSD: CloudProvider.GCP,
    CloudProvider.ROKS: CloudProvider.IBM,
}

_OPENSHIFT_SERVICE_FEES: Dict[CloudProvider, float] = {
    CloudProvider.ROSA: 0.171,
    CloudProvider.ARO: 0.21,
    CloudProvider.OSD: 0.166,
    CloudProvider.ROKS: 0.20,
}

# Compute price factor per purchase model
PRICING_TYPE_FACTORS: Dict[PricingType, float] = {
    PricingType.ON_DEMAND: 1.0,
    PricingType.RESERVED_1_YEAR: 0.6,
    PricingType.RESERVED_3_YEAR: 0.4,
    PricingType.SPOT: 0.3,
}

_DISPLAY_NAMES: Dict[CloudProvider, str] = {
    CloudProvider.AWS: "AWS",
    CloudProvider.AZURE: "Azure",
    CloudProvider.GCP: "GCP",
    CloudProvider.OCI: "OCI",
    CloudProvider.IBM: "IBM Cloud",
    CloudProvider.ALIBABA: "Alibaba Cloud",
    CloudProvider.TENCENT: "Tencent Cloud",
    CloudProvider.HUAWEI: "Huawei Cloud",
    CloudProvider.ROSA: "ROSA",
    CloudProvider.ARO: "ARO",
    CloudProvider.OSD: "OpenShift Dedicated",
    CloudProvider.ROKS: "Red Hat OpenShift on IBM Cloud",
    CloudProvider.DIGITALOCEAN: "DigitalOcean",
    CloudProvider.LINODE: "Linode",
    CloudProvider.VULTR: "Vultr",
    CloudProvider.HETZNER: "Hetzner",
    CloudProvider.OVH: "OVHcloud",
    CloudProvider.SCALEWAY: "Scaleway",
    CloudProvider.CIVO: "Civo",
    CloudProvider.EXOSCALE: "Exoscale",
    CloudProvider.ON_PREM: "On-Premises",
    CloudProvider.MANUAL: "Manual",
}


def get_default_region(provider: CloudProvider) -> str:
    """Reference region of a provider (on-premises for unknown ones)."""
    return _DEFAULT_REGIONS.get(provider, "on-premises")


def get_region_display_name(region: str) -> str:
    return _REGION_NAMES.get(region, region)


def get_regional_multiplier(provider: CloudProvider, region: str) -> float:
    host = _HOST_PROVIDERS.get(provider, provider)
    return _REGIONAL_MULTIPLIERS.get(host, {}).get(region, 1.0)


def supported_providers() -> List[CloudProvider]:
    """Providers with a dedicated default price table."""
    return list(_COMPUTE.keys()) + list(_HOST_PROVIDERS.keys())


def _table_provider(provider: CloudProvider) -> CloudProvider:
    host = _HOST_PROVIDERS.get(provider, provider)
    if host not in _COMPUTE:
        logger.debug(f"No default price table for {provider.value}, using zero-rate table")
        return CloudProvider.ON_PREM
    return host


def get_default_price_list(
    provider: CloudProvider,
    region: Optional[str] = None,
    pricing_type: PricingType = PricingType.ON_DEMAND,
    now: Optional[datetime] = None
) -> PriceList:
    """
    Build a fresh default price list.

    Args:
        provider: Provider to price
        region: Region code (provider's reference region if None)
        pricing_type: Purchase model; scales compute rates
        now: Timestamp to stamp as last_updated

    Returns:
        New PriceList with is_live=False
    """
    region = region or get_default_region(provider)
    table = _table_provider(provider)
    multiplier = get_regional_multiplier(table, region)
    compute_factor = multiplier * PRICING_TYPE_FACTORS.get(pricing_type, 1.0)

    cpu, ram, control_plane = _COMPUTE[table]
    ssd, hdd, obj, backup, registry = _STORAGE[table]
    egress, lb, nat, vpn, public_ip = _NETWORK[table]

    compute = ComputePricing(
        cpu_per_hour=cpu * compute_factor,
        ram_gb_per_hour=ram * compute_factor,
        managed_control_plane_per_hour=control_plane,
        instance_type_prices={
            name: price * compute_factor
            for name, price in _INSTANCE_TYPES.get(table, {}).items()
        },
    )
    licenses = LicensePricing()

    if provider in _OPENSHIFT_SERVICE_FEES:
        # Subscription is bundled into the per-worker service fee
        compute.openshift_service_fee_per_worker_hour = _OPENSHIFT_SERVICE_FEES[provider]
        licenses = LicensePricing(
            openshift_per_node_year=0.0,
            rancher_enterprise_per_node_year=0.0,
            tanzu_per_core_year=0.0,
            charmed_k8s_per_node_year=0.0,
        )

    display = _DISPLAY_NAMES.get(provider, provider.value)

    return PriceList(
        provider=provider,
        region=region,
        region_display_name=get_region_display_name(region),
        pricing_type=pricing_type,
        compute=compute,
        storage=StoragePricing(
            ssd_per_gb_month=ssd * multiplier,
            hdd_per_gb_month=hdd * multiplier,
            object_storage_per_gb_month=obj * multiplier,
            backup_per_gb_month=backup * multiplier,
            registry_per_gb_month=registry * multiplier,
        ),
        network=NetworkPricing(
            egress_per_gb=egress,
            load_balancer_per_hour=lb,
            nat_gateway_per_hour=nat,
            vpn_per_hour=vpn,
            public_ip_per_hour=public_ip,
        ),
        licenses=licenses,
        support=SupportPricing(),
        last_updated=now or datetime.utcnow(),
        is_live=False,
        source=f"Default ({display} public pricing)",
    )


def get_instance_price(price_list: PriceList, instance_type: str) -> float:
    """
    Hourly price of a named instance type.

    Unknown instance types price as a 4 vCPU equivalent.
    """
    prices = price_list.compute.instance_type_prices
    if instance_type in prices:
        return prices[instance_type]
    logger.debug(f"Unknown instance type {instance_type}, pricing as 4 vCPU")
    return price_list.compute.cpu_per_hour * 4

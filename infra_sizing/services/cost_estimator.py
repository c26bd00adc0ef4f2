"""
Cluster cost estimator.
Converts per-environment node sizing into monthly cost estimates for cloud
providers (through the price cache) and for self-hosted hardware.
"""
from typing import Callable, Dict, List, Optional
from datetime import datetime
import logging
import math

from infra_sizing.core.config import config
from infra_sizing.domain.cost_models import (
    CostBreakdown,
    CostComparison,
    CostEstimate,
    CostLineItem,
    EnvironmentCost,
    EnvironmentSizing,
    EstimateOptions,
)
from infra_sizing.domain.enums import (
    CloudProvider,
    CostCategory,
    EnvironmentType,
    NodeRole,
    PricingType,
    is_prod_environment,
)
from infra_sizing.domain.on_prem_models import CORES_PER_SERVER, OnPremPricing
from infra_sizing.pricing.price_cache import PriceCache, get_price_cache
from infra_sizing.services.cost_multiplier import CostMultiplierCalculator
from infra_sizing.services.node_specs_resolver import NodeSpecsResolver


logger = logging.getLogger(__name__)

# Categories scaled by the HA/DR multiplier
INFRASTRUCTURE_CATEGORIES = (CostCategory.COMPUTE, CostCategory.STORAGE, CostCategory.NETWORK)

ON_PREM_REGION = "on-premises"


def build_environment_sizing(
    resolver: NodeSpecsResolver,
    environment: EnvironmentType,
    control_plane_nodes: int,
    infra_nodes: int,
    worker_nodes: int
) -> EnvironmentSizing:
    """Sizing of one environment with specs taken from a resolver."""
    return EnvironmentSizing(
        environment=environment,
        control_plane_nodes=control_plane_nodes,
        infra_nodes=infra_nodes,
        worker_nodes=worker_nodes,
        control_plane_specs=resolver.get_specs(NodeRole.CONTROL_PLANE, environment),
        infra_specs=resolver.get_specs(NodeRole.INFRA, environment),
        worker_specs=resolver.get_specs(NodeRole.WORKER, environment),
    )


class CostEstimator:
    """Service for estimating cluster costs from node sizing."""

    def __init__(
        self,
        price_cache: Optional[PriceCache] = None,
        multiplier_calculator: Optional[CostMultiplierCalculator] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize cost estimator.

        Args:
            price_cache: Price list source (global cache if None)
            multiplier_calculator: HA/DR multiplier (new instance if None)
            clock: Time source for calculated_at
        """
        self.price_cache = price_cache or get_price_cache()
        self.multiplier_calculator = multiplier_calculator or CostMultiplierCalculator()
        self._clock = clock or datetime.utcnow

    async def estimate_k8s_cost(
        self,
        sizings: List[EnvironmentSizing],
        provider: CloudProvider,
        region: Optional[str] = None,
        options: Optional[EstimateOptions] = None
    ) -> CostEstimate:
        """
        Estimate the monthly cost of Kubernetes clusters on a provider.

        Args:
            sizings: One entry per environment cluster
            provider: Provider hosting the clusters
            region: Region code (provider default if None)
            options: Estimate knobs (defaults if None)

        Returns:
            CostEstimate with per-category and per-environment costs
        """
        options = options or EstimateOptions()
        price_list = await self.price_cache.resolve(provider, region, options.pricing_type)
        hours = config.HOURS_PER_MONTH

        total_nodes = sum(sizing.total_nodes for sizing in sizings)
        total_cpu = sum(sizing.total_cpu for sizing in sizings)
        total_ram = sum(sizing.total_ram for sizing in sizings)
        total_disk = sum(sizing.total_disk for sizing in sizings)
        total_workers = sum(sizing.worker_nodes for sizing in sizings)
        clusters = len(sizings)

        breakdown: Dict[CostCategory, CostBreakdown] = {}

        # Compute
        compute_items = [CostLineItem(
            "vCPU",
            total_cpu * hours,
            "core-hour",
            price_list.compute.cpu_per_hour,
        ), CostLineItem(
            "Memory",
            total_ram * hours,
            "GB-hour",
            price_list.compute.ram_gb_per_hour,
        )]
        managed_clusters = sum(
            1 for sizing in sizings if sizing.control_plane_specs.is_zero
        )
        if options.include_managed_control_plane and managed_clusters and price_list.compute.managed_control_plane_per_hour:
            compute_items.append(CostLineItem(
                "Managed control plane",
                managed_clusters * hours,
                "cluster-hour",
                price_list.compute.managed_control_plane_per_hour,
            ))
        if price_list.compute.openshift_service_fee_per_worker_hour and total_workers:
            compute_items.append(CostLineItem(
                "OpenShift service fee",
                total_workers * hours,
                "worker-hour",
                price_list.compute.openshift_service_fee_per_worker_hour,
            ))
        compute_cost = sum(item.total for item in compute_items)
        if options.headroom_percent > 0:
            compute_cost *= 1 + options.headroom_percent / 100
        breakdown[CostCategory.COMPUTE] = CostBreakdown(
            CostCategory.COMPUTE,
            compute_cost,
            f"{total_nodes} nodes, {total_cpu} vCPU, {total_ram} GB RAM",
            compute_items,
        )

        # Storage
        if options.include_storage:
            volume_gb = total_disk + total_workers * options.storage_gb_per_node
            storage_items = [CostLineItem(
                "Block storage (SSD)", volume_gb, "GB-month", price_list.storage.ssd_per_gb_month
            )]
            if options.registry_gb > 0:
                storage_items.append(CostLineItem(
                    "Container registry",
                    options.registry_gb,
                    "GB-month",
                    price_list.storage.registry_per_gb_month,
                ))
            breakdown[CostCategory.STORAGE] = CostBreakdown(
                CostCategory.STORAGE,
                sum(item.total for item in storage_items),
                f"{volume_gb:,} GB SSD",
                storage_items,
            )

        # Network
        if options.include_network:
            network_items = [
                CostLineItem("Egress", options.monthly_egress_gb, "GB", price_list.network.egress_per_gb),
                CostLineItem(
                    "Load balancers",
                    options.load_balancers * clusters * hours,
                    "LB-hour",
                    price_list.network.load_balancer_per_hour,
                ),
                CostLineItem(
                    "NAT gateways",
                    clusters * hours,
                    "gateway-hour",
                    price_list.network.nat_gateway_per_hour,
                ),
            ]
            breakdown[CostCategory.NETWORK] = CostBreakdown(
                CostCategory.NETWORK,
                sum(item.total for item in network_items),
                f"{options.load_balancers * clusters} load balancer(s)",
                network_items,
            )

        # HA/DR applies to infrastructure only
        multiplier = 1.0
        notes: List[str] = []
        if options.hadr is not None:
            multiplier = self.multiplier_calculator.compute(options.hadr, provider)
            notes.append(f"HA/DR: {self.multiplier_calculator.get_summary(options.hadr)} (x{multiplier:.2f})")
            for category in INFRASTRUCTURE_CATEGORIES:
                if category in breakdown:
                    breakdown[category].monthly *= multiplier

        # Licenses
        if options.include_licenses and options.distribution is not None:
            per_node_year = price_list.licenses.license_per_node_year(options.distribution)
            if per_node_year > 0:
                license_items = [CostLineItem(
                    f"{options.distribution.value} subscription",
                    total_nodes,
                    "node-month",
                    per_node_year / config.MONTHS_PER_YEAR,
                )]
                breakdown[CostCategory.LICENSE] = CostBreakdown(
                    CostCategory.LICENSE,
                    sum(item.total for item in license_items),
                    f"{total_nodes} node subscriptions",
                    license_items,
                )

        # Support is a percentage of everything above
        support_percent = price_list.support.percent_for(options.support_level)
        if support_percent > 0:
            base = sum(item.monthly for item in breakdown.values())
            breakdown[CostCategory.SUPPORT] = CostBreakdown(
                CostCategory.SUPPORT,
                price_list.support.support_cost(base, options.support_level),
                f"{options.support_level.value} support ({support_percent:g}%)",
            )

        if not price_list.is_live:
            notes.append(f"Using {price_list.source}")
        if options.pricing_type != PricingType.ON_DEMAND:
            notes.append(f"Compute priced as {options.pricing_type.value}")

        estimate = CostEstimate(
            provider=provider,
            region=price_list.region,
            pricing_type=options.pricing_type,
            currency=price_list.currency,
            breakdown=breakdown,
            multiplier=multiplier,
            calculated_at=self._clock(),
            pricing_source=price_list.source,
            notes=notes,
        )
        self._finalize(estimate, sizings)

        logger.info(
            f"Estimated {provider.value}/{price_list.region}: "
            f"${estimate.monthly_total:,.2f}/month for {total_nodes} nodes"
        )
        return estimate

    def estimate_on_prem_cost(
        self,
        sizings: List[EnvironmentSizing],
        on_prem: Optional[OnPremPricing] = None,
        options: Optional[EstimateOptions] = None
    ) -> CostEstimate:
        """
        Estimate the monthly cost of running the clusters on owned hardware.

        Hardware is amortized over the refresh cycle.

        Args:
            sizings: One entry per environment cluster
            on_prem: Hardware, data center, labor and license costs
            options: Estimate knobs (defaults if None)

        Returns:
            CostEstimate for CloudProvider.ON_PREM
        """
        on_prem = on_prem or OnPremPricing()
        options = options or EstimateOptions()
        months = on_prem.amortization_months

        total_nodes = sum(sizing.total_nodes for sizing in sizings)
        total_cpu = sum(sizing.total_cpu for sizing in sizings)
        total_ram = sum(sizing.total_ram for sizing in sizings)
        total_disk = sum(sizing.total_disk for sizing in sizings)
        has_prod = any(is_prod_environment(sizing.environment) for sizing in sizings)
        servers = math.ceil(total_cpu / CORES_PER_SERVER)

        hardware = on_prem.hardware
        breakdown: Dict[CostCategory, CostBreakdown] = {}

        compute_items = [
            CostLineItem(
                "Servers (amortized + maintenance)",
                servers,
                "server-month",
                on_prem.monthly_hardware_cost(1),
            ),
            CostLineItem("CPU cores (amortized)", total_cpu, "core-month", hardware.per_cpu_core / months),
            CostLineItem("Memory (amortized)", total_ram, "GB-month", hardware.per_gb_ram / months),
        ]
        compute_cost = sum(item.total for item in compute_items)
        if options.headroom_percent > 0:
            compute_cost *= 1 + options.headroom_percent / 100
        breakdown[CostCategory.COMPUTE] = CostBreakdown(
            CostCategory.COMPUTE,
            compute_cost,
            f"{servers} server(s), {total_cpu} cores, {total_ram} GB RAM",
            compute_items,
        )

        if options.include_storage:
            storage_tb = total_disk / 1000
            storage_items = [CostLineItem("SSD (amortized)", storage_tb, "TB-month", hardware.per_tb_ssd / months)]
            breakdown[CostCategory.STORAGE] = CostBreakdown(
                CostCategory.STORAGE,
                sum(item.total for item in storage_items),
                f"{storage_tb:,.1f} TB SSD",
                storage_items,
            )

        if options.include_network and servers > 0:
            switches = max(1, math.ceil(servers / 40))
            network_items = [
                CostLineItem("Switches (amortized)", switches, "switch-month", hardware.network_switch_cost / months),
                CostLineItem(
                    "Load balancers (amortized)",
                    options.load_balancers,
                    "LB-month",
                    hardware.load_balancer_cost / months,
                ),
            ]
            breakdown[CostCategory.NETWORK] = CostBreakdown(
                CostCategory.NETWORK,
                sum(item.total for item in network_items),
                f"{switches} switch(es)",
                network_items,
            )

        multiplier = 1.0
        notes: List[str] = [f"Hardware amortized over {on_prem.hardware_refresh_years} years"]
        if options.hadr is not None:
            multiplier = self.multiplier_calculator.compute(options.hadr, CloudProvider.ON_PREM)
            notes.append(f"HA/DR: {self.multiplier_calculator.get_summary(options.hadr)} (x{multiplier:.2f})")
            for category in INFRASTRUCTURE_CATEGORIES:
                if category in breakdown:
                    breakdown[category].monthly *= multiplier

        breakdown[CostCategory.DATA_CENTER] = CostBreakdown(
            CostCategory.DATA_CENTER,
            on_prem.data_center.monthly_cost(servers),
            "Rack space, power and cooling",
        )
        breakdown[CostCategory.LABOR] = CostBreakdown(
            CostCategory.LABOR,
            on_prem.labor.monthly_cost(total_nodes, has_prod),
            "Operations staff",
        )

        if options.include_licenses and options.distribution is not None:
            license_cost = on_prem.licensing.monthly_cost(options.distribution, total_nodes, total_cpu)
            if license_cost > 0:
                breakdown[CostCategory.LICENSE] = CostBreakdown(
                    CostCategory.LICENSE,
                    license_cost,
                    f"{options.distribution.value} subscriptions",
                )

        estimate = CostEstimate(
            provider=CloudProvider.ON_PREM,
            region=ON_PREM_REGION,
            pricing_type=PricingType.ON_DEMAND,
            breakdown=breakdown,
            multiplier=multiplier,
            calculated_at=self._clock(),
            pricing_source="On-premises pricing settings",
            notes=notes,
        )
        self._finalize(estimate, sizings)

        logger.info(f"Estimated on-premises: ${estimate.monthly_total:,.2f}/month for {servers} server(s)")
        return estimate

    def _finalize(self, estimate: CostEstimate, sizings: List[EnvironmentSizing]) -> None:
        """Fill category percentages and split the bill by node share."""
        monthly_total = estimate.monthly_total
        for item in estimate.breakdown.values():
            item.percentage = item.monthly / monthly_total * 100 if monthly_total > 0 else 0.0

        total_nodes = sum(sizing.total_nodes for sizing in sizings)
        for sizing in sizings:
            share = sizing.total_nodes / total_nodes if total_nodes > 0 else 0.0
            estimate.environment_costs[sizing.environment] = EnvironmentCost(
                environment=sizing.environment,
                monthly_cost=monthly_total * share,
                nodes=sizing.total_nodes,
                total_cpu=sizing.total_cpu,
                total_ram_gb=sizing.total_ram,
                total_disk_gb=sizing.total_disk,
                percentage=share * 100,
            )

    def compare(self, estimates: List[CostEstimate]) -> CostComparison:
        """
        Rank estimates by monthly total.

        Returns:
            CostComparison with monthly savings of the cheapest option
            relative to each alternative
        """
        if not estimates:
            return CostComparison(estimates=[])

        ranked = sorted(estimates, key=lambda estimate: estimate.monthly_total)
        cheapest, most_expensive = ranked[0], ranked[-1]
        comparison = CostComparison(
            estimates=ranked,
            cheapest=cheapest,
            most_expensive=most_expensive,
        )

        for estimate in ranked[1:]:
            key = f"{estimate.provider.value}:{estimate.region}"
            comparison.potential_savings[key] = estimate.monthly_total - cheapest.monthly_total

        if len(ranked) > 1 and most_expensive.monthly_total > 0:
            percent = (1 - cheapest.monthly_total / most_expensive.monthly_total) * 100
            comparison.insights.append(
                f"{cheapest.provider.value} is {percent:.0f}% cheaper than "
                f"{most_expensive.provider.value} "
                f"(${(most_expensive.monthly_total - cheapest.monthly_total) * config.MONTHS_PER_YEAR:,.0f}/year)"
            )
        return comparison

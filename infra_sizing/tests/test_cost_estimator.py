"""
Tests for cluster cost estimation.
"""

import pytest

from infra_sizing.domain.cost_models import EnvironmentSizing, EstimateOptions
from infra_sizing.domain.enums import (
    CloudProvider,
    ControlPlaneHA,
    CostCategory,
    Distribution,
    DRPattern,
    EnvironmentType,
    NodeDistribution,
    NodeRole,
    PricingType,
    SupportLevel,
)
from infra_sizing.domain.hadr_models import HADRConfig
from infra_sizing.domain.node_models import NodeSpecs, ZERO_SPECS, get_distribution_template
from infra_sizing.services.cost_estimator import CostEstimator, build_environment_sizing
from infra_sizing.services.node_specs_resolver import NodeSpecsResolver


COMPUTE_ONLY = dict(include_storage=False, include_network=False, include_licenses=False)


@pytest.fixture
def estimator(price_cache, clock):
    return CostEstimator(price_cache=price_cache, clock=clock)


def managed_sizing(environment=EnvironmentType.PROD, workers=3):
    return EnvironmentSizing(
        environment=environment,
        control_plane_nodes=3,
        worker_nodes=workers,
        control_plane_specs=ZERO_SPECS,
        worker_specs=NodeSpecs(4, 16, 100),
    )


def test_build_environment_sizing_uses_resolver():
    """Sizing specs come from the resolver for the environment."""
    resolver = NodeSpecsResolver(get_distribution_template(Distribution.EKS))
    sizing = build_environment_sizing(resolver, EnvironmentType.DEV, 3, 0, 4)
    assert sizing.control_plane_specs == ZERO_SPECS
    assert sizing.worker_specs == resolver.get_specs(NodeRole.WORKER, EnvironmentType.DEV)
    assert sizing.total_nodes == 4


def test_managed_control_plane_not_counted_as_nodes():
    """Zero-spec control plane nodes are not billable nodes."""
    sizing = managed_sizing()
    assert sizing.total_nodes == 3
    assert sizing.total_cpu == 12
    assert sizing.total_ram == 48


@pytest.mark.asyncio
async def test_compute_cost(estimator):
    """Compute covers vCPU, memory and the managed control plane fee."""
    estimate = await estimator.estimate_k8s_cost(
        [managed_sizing()], CloudProvider.AWS, "us-east-1", EstimateOptions(**COMPUTE_ONLY)
    )
    expected = 12 * 730 * 0.048 + 48 * 730 * 0.006 + 730 * 0.10
    assert estimate.category_cost(CostCategory.COMPUTE) == pytest.approx(expected)
    assert estimate.monthly_total == pytest.approx(expected)
    assert estimate.yearly_total == pytest.approx(expected * 12)


@pytest.mark.asyncio
async def test_storage_and_network(estimator):
    """Storage and network are itemized from defaults."""
    estimate = await estimator.estimate_k8s_cost(
        [managed_sizing()], CloudProvider.AWS, "us-east-1", EstimateOptions(include_licenses=False)
    )
    assert estimate.category_cost(CostCategory.STORAGE) == pytest.approx(600 * 0.08 + 50 * 0.10)
    assert estimate.category_cost(CostCategory.NETWORK) == pytest.approx(
        100 * 0.09 + 730 * 0.0225 + 730 * 0.045
    )


@pytest.mark.asyncio
async def test_headroom_scales_compute(estimator):
    """Headroom is added on top of compute."""
    base = await estimator.estimate_k8s_cost(
        [managed_sizing()], CloudProvider.AWS, options=EstimateOptions(**COMPUTE_ONLY)
    )
    padded = await estimator.estimate_k8s_cost(
        [managed_sizing()], CloudProvider.AWS, options=EstimateOptions(headroom_percent=20, **COMPUTE_ONLY)
    )
    assert padded.monthly_total == pytest.approx(base.monthly_total * 1.2)


@pytest.mark.asyncio
async def test_hadr_multiplier_applies_to_infrastructure(estimator):
    """The HA/DR multiplier scales infrastructure but not licenses."""
    hadr = HADRConfig(
        control_plane_ha=ControlPlaneHA.STACKED_HA,
        control_plane_nodes=5,
        node_distribution=NodeDistribution.MULTI_AZ,
        availability_zones=3,
        dr_pattern=DRPattern.WARM_STANDBY,
    )
    options = EstimateOptions(distribution=Distribution.OPENSHIFT, include_storage=False, include_network=False)
    base = await estimator.estimate_k8s_cost([managed_sizing()], CloudProvider.AWS, options=options)

    options.hadr = hadr
    resilient = await estimator.estimate_k8s_cost([managed_sizing()], CloudProvider.AWS, options=options)

    assert resilient.multiplier == pytest.approx(1.83)
    assert resilient.category_cost(CostCategory.COMPUTE) == pytest.approx(
        base.category_cost(CostCategory.COMPUTE) * 1.83
    )
    assert resilient.category_cost(CostCategory.LICENSE) == pytest.approx(
        base.category_cost(CostCategory.LICENSE)
    )
    assert any(note.startswith("HA/DR:") for note in resilient.notes)


@pytest.mark.asyncio
async def test_license_per_node(estimator):
    """Distribution subscriptions are billed per node-month."""
    estimate = await estimator.estimate_k8s_cost(
        [managed_sizing()], CloudProvider.AWS,
        options=EstimateOptions(distribution=Distribution.OPENSHIFT, include_storage=False, include_network=False),
    )
    assert estimate.category_cost(CostCategory.LICENSE) == pytest.approx(2500 / 12 * 3)


@pytest.mark.asyncio
async def test_support_is_percentage_of_total(estimator):
    """Support is charged on everything else."""
    estimate = await estimator.estimate_k8s_cost(
        [managed_sizing()], CloudProvider.AWS,
        options=EstimateOptions(support_level=SupportLevel.BUSINESS, **COMPUTE_ONLY),
    )
    compute = estimate.category_cost(CostCategory.COMPUTE)
    assert estimate.category_cost(CostCategory.SUPPORT) == pytest.approx(compute * 0.10)


@pytest.mark.asyncio
async def test_openshift_service_fee(estimator):
    """Managed OpenShift adds a per-worker service fee."""
    estimate = await estimator.estimate_k8s_cost(
        [managed_sizing()], CloudProvider.ROSA, options=EstimateOptions(**COMPUTE_ONLY)
    )
    compute = estimate.breakdown[CostCategory.COMPUTE]
    fee = next(item for item in compute.line_items if item.description == "OpenShift service fee")
    assert fee.total == pytest.approx(3 * 730 * 0.171)


@pytest.mark.asyncio
async def test_environment_split_by_node_share(estimator):
    """Each environment carries its share of nodes."""
    sizings = [managed_sizing(EnvironmentType.PROD, 3), managed_sizing(EnvironmentType.DEV, 1)]
    estimate = await estimator.estimate_k8s_cost(sizings, CloudProvider.GCP)
    prod = estimate.environment_costs[EnvironmentType.PROD]
    dev = estimate.environment_costs[EnvironmentType.DEV]
    assert prod.percentage == pytest.approx(75)
    assert prod.monthly_cost + dev.monthly_cost == pytest.approx(estimate.monthly_total)
    assert sum(item.percentage for item in estimate.breakdown.values()) == pytest.approx(100)


@pytest.mark.asyncio
async def test_default_pricing_noted(estimator, clock):
    """Estimates from default prices say so."""
    estimate = await estimator.estimate_k8s_cost(
        [managed_sizing()], CloudProvider.AZURE,
        options=EstimateOptions(pricing_type=PricingType.SPOT),
    )
    assert estimate.calculated_at == clock()
    assert estimate.pricing_source.startswith("Default")
    assert "Compute priced as spot" in estimate.notes


def test_on_prem_estimate(estimator):
    """Owned hardware includes data center and labor costs."""
    sizing = EnvironmentSizing(
        environment=EnvironmentType.PROD,
        control_plane_nodes=3,
        worker_nodes=4,
        control_plane_specs=NodeSpecs(8, 32, 200),
        worker_specs=NodeSpecs(16, 64, 200),
    )
    hadr = HADRConfig(node_distribution=NodeDistribution.MULTI_AZ)
    estimate = estimator.estimate_on_prem_cost(
        [sizing], options=EstimateOptions(distribution=Distribution.OPENSHIFT, hadr=hadr)
    )
    assert estimate.provider == CloudProvider.ON_PREM
    assert estimate.region == "on-premises"
    assert estimate.multiplier == pytest.approx(1.0)
    assert estimate.category_cost(CostCategory.DATA_CENTER) > 0
    assert estimate.category_cost(CostCategory.LABOR) > 0
    assert estimate.category_cost(CostCategory.LICENSE) == pytest.approx(2500 * 7 / 12)
    # 88 cores need two 64-core servers
    assert estimate.breakdown[CostCategory.COMPUTE].line_items[0].quantity == 2


@pytest.mark.asyncio
async def test_compare_ranks_and_reports_savings(estimator):
    """Comparison is ordered cheapest first with savings per alternative."""
    options = EstimateOptions(**COMPUTE_ONLY)
    aws = await estimator.estimate_k8s_cost([managed_sizing()], CloudProvider.AWS, options=options)
    hetzner = await estimator.estimate_k8s_cost([managed_sizing()], CloudProvider.HETZNER, options=options)

    comparison = estimator.compare([aws, hetzner])

    assert comparison.cheapest is hetzner
    assert comparison.most_expensive is aws
    assert comparison.potential_savings["aws:us-east-1"] == pytest.approx(
        aws.monthly_total - hetzner.monthly_total
    )
    assert comparison.insights[0].startswith("hetzner is")


def test_compare_empty(estimator):
    """Comparing nothing yields an empty comparison."""
    comparison = estimator.compare([])
    assert comparison.estimates == []
    assert comparison.cheapest is None

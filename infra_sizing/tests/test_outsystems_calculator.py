"""
Tests for OutSystems license pricing.
"""

import pytest

from infra_sizing.domain.outsystems_models import (
    DiscountScope,
    DiscountType,
    OutSystemsCloudProvider,
    OutSystemsDeployment,
    OutSystemsDeploymentConfig,
    OutSystemsDiscount,
    OutSystemsPlatform,
    OutSystemsRegion,
)
from infra_sizing.services.outsystems_calculator import (
    OutSystemsCostCalculator,
    calculate_discount,
    recommend_aws_instance,
    recommend_azure_instance,
)


@pytest.fixture
def calculator():
    return OutSystemsCostCalculator()


def o11(**kwargs):
    return OutSystemsDeploymentConfig(platform=OutSystemsPlatform.O11, **kwargs)


def test_odc_base_subscription(calculator, outsystems_pricing):
    """One AO pack and the included users cost only the platform base."""
    result = calculator.calculate(OutSystemsDeploymentConfig(), outsystems_pricing)
    assert result.ao_pack_count == 1
    assert result.license_breakdown == {"Platform Base (ODC)": 30250}
    assert result.net_total == pytest.approx(30250)


@pytest.mark.parametrize("aos,packs", [(0, 1), (1, 1), (150, 1), (151, 2), (450, 3)])
def test_ao_pack_count(calculator, outsystems_pricing, aos, packs):
    """AO packs round up with a minimum of one."""
    deployment = OutSystemsDeploymentConfig(total_application_objects=aos)
    assert calculator.ao_pack_count(deployment, outsystems_pricing) == packs


def test_odc_additional_packs_and_users(calculator, outsystems_pricing):
    """Extra AO packs and user packs are itemized."""
    deployment = OutSystemsDeploymentConfig(
        total_application_objects=450,
        internal_users=250,
        external_users=1500,
    )
    result = calculator.calculate(deployment, outsystems_pricing)
    assert result.license_breakdown["Additional AO Packs (2×$18,150)"] == pytest.approx(36300)
    assert result.license_breakdown["Internal Users (+150 users, 2 pack(s))"] == pytest.approx(2 * 6050)
    assert result.license_breakdown["External Users (1500 users, 2 pack(s))"] == pytest.approx(2 * 6050)


@pytest.mark.parametrize("platform", [OutSystemsPlatform.ODC, OutSystemsPlatform.O11])
def test_unlimited_users_per_ao_pack(calculator, outsystems_pricing, platform):
    """Unlimited users replace user packs and scale with AO packs."""
    deployment = OutSystemsDeploymentConfig(
        platform=platform,
        total_application_objects=450,
        use_unlimited_users=True,
        internal_users=5000,
    )
    result = calculator.calculate(deployment, outsystems_pricing)
    assert result.license_breakdown["Unlimited Users (3×$60,500)"] == pytest.approx(3 * 60500)
    assert not any(name.startswith("Internal Users") for name in result.license_breakdown)


def test_o11_internal_users_tiered(calculator, outsystems_pricing):
    """O11 internal user tiers count the included users."""
    result = calculator.calculate(o11(internal_users=1250), outsystems_pricing)
    assert result.license_breakdown["Internal Users (+1150 tiered)"] == pytest.approx(
        9 * 4840 + 3 * 3630
    )


def test_o11_external_users_tiered(calculator, outsystems_pricing):
    """O11 external users are billed in packs of 1000."""
    result = calculator.calculate(o11(external_users=1500), outsystems_pricing)
    assert result.license_breakdown["External Users (1500 tiered)"] == pytest.approx(2 * 4840)


def test_odc_support_and_sentry_exclusivity(calculator, outsystems_pricing):
    """Premium support supersedes extended; Sentry supersedes HA."""
    deployment = OutSystemsDeploymentConfig(
        total_application_objects=300,
        support_24x7_extended=True,
        support_24x7_premium=True,
        sentry=True,
        high_availability=True,
    )
    result = calculator.calculate(deployment, outsystems_pricing)
    assert result.add_on_costs == {
        "Support 24x7 Premium": pytest.approx(2 * 9680),
        "Sentry": pytest.approx(2 * 30250),
    }
    assert "Sentry already includes High Availability. HA add-on will be ignored." in result.warnings


def test_o11_cloud_only_features_ignored_when_self_managed(calculator, outsystems_pricing):
    """Cloud-only add-ons are dropped and flagged for self-managed O11."""
    deployment = o11(
        deployment=OutSystemsDeployment.SELF_MANAGED,
        sentry=True,
        log_streaming_quantity=2,
        disaster_recovery=True,
    )
    result = calculator.calculate(deployment, outsystems_pricing)
    assert "Sentry (incl. HA)" not in result.add_on_costs
    assert "Log Streaming (×2)" not in result.add_on_costs
    assert result.add_on_costs["Disaster Recovery"] == pytest.approx(12100)
    assert any(warning.startswith("Sentry is a Cloud-only feature") for warning in result.warnings)
    assert any(warning.startswith("Log Streaming is a Cloud-only feature") for warning in result.warnings)


def test_o11_disaster_recovery_ignored_in_cloud(calculator, outsystems_pricing):
    """Disaster recovery is self-managed only."""
    result = calculator.calculate(o11(disaster_recovery=True), outsystems_pricing)
    assert "Disaster Recovery" not in result.add_on_costs
    assert result.warnings == [
        "Disaster Recovery is a Self-Managed-only feature. It will be ignored for cloud deployments."
    ]


def test_o11_flat_add_ons(calculator, outsystems_pricing):
    """Log streaming and database replicas are not scaled by AO packs."""
    deployment = o11(
        total_application_objects=300,
        log_streaming_quantity=2,
        database_replica_quantity=1,
    )
    result = calculator.calculate(deployment, outsystems_pricing)
    assert result.add_on_costs["Log Streaming (×2)"] == pytest.approx(2 * 7260)
    assert result.add_on_costs["Database Replica (×1)"] == pytest.approx(96800)


def test_app_shield_by_user_volume(calculator, outsystems_pricing):
    """AppShield price is a flat lookup on total users."""
    deployment = OutSystemsDeploymentConfig(app_shield=True, internal_users=9000, external_users=2000)
    result = calculator.calculate(deployment, outsystems_pricing)
    assert result.add_on_costs["AppShield (10001-50000 users)"] == pytest.approx(32670)


def test_app_shield_with_unlimited_users(calculator, outsystems_pricing):
    """With unlimited users the declared volume picks the tier."""
    deployment = OutSystemsDeploymentConfig(
        app_shield=True,
        use_unlimited_users=True,
        app_shield_user_volume=600000,
    )
    result = calculator.calculate(deployment, outsystems_pricing)
    assert result.add_on_costs["AppShield (500001+ users)"] == pytest.approx(181500)


def test_services_use_regional_prices(calculator, outsystems_pricing):
    """Services are priced from the selected region."""
    deployment = OutSystemsDeploymentConfig(region=OutSystemsRegion.MIDDLE_EAST, expert_day_quantity=2)
    result = calculator.calculate(deployment, outsystems_pricing)
    assert result.service_costs == {"Expert Day (×2)": pytest.approx(2 * 2376)}


def test_self_managed_azure_vms(calculator, outsystems_pricing):
    """Self-managed O11 on Azure adds VM cost."""
    deployment = o11(
        deployment=OutSystemsDeployment.SELF_MANAGED,
        cloud_provider=OutSystemsCloudProvider.AZURE,
        total_environments=4,
        front_end_servers_per_environment=1,
    )
    result = calculator.calculate(deployment, outsystems_pricing)
    assert result.vm_monthly_cost == pytest.approx(0.169 * 730 * 4)
    assert result.vm_annual_cost == pytest.approx(0.169 * 730 * 4 * 12)
    assert result.vm_details == "4× Azure F4s_v2 (4 vCPU, 8 GB)"
    assert result.line_items[-1].category == "Infrastructure"


def test_unknown_instance_falls_back(calculator, outsystems_pricing):
    """Unknown instance types are priced as the default type."""
    deployment = o11(
        deployment=OutSystemsDeployment.SELF_MANAGED,
        cloud_provider=OutSystemsCloudProvider.AWS,
        aws_instance_type="z9.huge",
        total_environments=2,
    )
    result = calculator.calculate(deployment, outsystems_pricing)
    assert result.vm_monthly_cost == pytest.approx(0.192 * 730 * 2)
    assert "z9.huge" in result.warnings[0]


def test_on_premises_has_no_vm_cost(calculator, outsystems_pricing):
    """On-premises installations carry no VM cost."""
    result = calculator.calculate(o11(deployment=OutSystemsDeployment.SELF_MANAGED), outsystems_pricing)
    assert result.vm_annual_cost == 0


def test_license_only_percentage_discount():
    """A 10% license-only discount ignores add-ons."""
    discount = OutSystemsDiscount(DiscountType.PERCENTAGE, DiscountScope.LICENSE_ONLY, 10)
    assert calculate_discount(discount, 10000, 2000, 500) == pytest.approx(1000)


@pytest.mark.parametrize("scope,expected", [
    (DiscountScope.TOTAL, 1250),
    (DiscountScope.ADD_ONS_ONLY, 200),
    (DiscountScope.LICENSE_AND_ADD_ONS, 1200),
])
def test_discount_scopes(scope, expected):
    """Each scope discounts its own base."""
    discount = OutSystemsDiscount(DiscountType.PERCENTAGE, scope, 10)
    assert calculate_discount(discount, 10000, 2000, 500) == pytest.approx(expected)


def test_fixed_discount_capped_at_base():
    """A fixed discount never exceeds what it applies to."""
    discount = OutSystemsDiscount(DiscountType.FIXED_AMOUNT, DiscountScope.ADD_ONS_ONLY, 5000)
    assert calculate_discount(discount, 10000, 2000, 0) == pytest.approx(2000)


def test_discount_applied_to_result(calculator, outsystems_pricing):
    """A configured discount reduces the net total and is described."""
    deployment = OutSystemsDeploymentConfig(
        discount=OutSystemsDiscount(DiscountType.PERCENTAGE, DiscountScope.LICENSE_ONLY, 10, notes="Partner"),
    )
    result = calculator.calculate(deployment, outsystems_pricing)
    assert result.discount_amount == pytest.approx(3025)
    assert result.net_total == pytest.approx(30250 - 3025)
    assert result.discount_description == "10% discount on LicenseOnly (Partner)"


def test_zero_discount_ignored(calculator, outsystems_pricing):
    """A zero-valued discount is not applied."""
    deployment = OutSystemsDeploymentConfig(discount=OutSystemsDiscount(value=0))
    result = calculator.calculate(deployment, outsystems_pricing)
    assert result.discount_amount == 0
    assert result.discount_description == ""


def test_instance_recommendations():
    """Smallest instance type covering cores and RAM."""
    assert recommend_azure_instance(4, 8) == "F4s_v2"
    assert recommend_azure_instance(4, 16) == "D4s_v3"
    assert recommend_azure_instance(12, 48) == "D16s_v3"
    assert recommend_aws_instance(2, 8) == "m5.large"
    assert recommend_aws_instance(8, 32) == "m5.2xlarge"

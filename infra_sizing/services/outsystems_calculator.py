"""
OutSystems license cost calculator.
Prices ODC and O11 subscriptions: licenses, add-ons, services, self-managed
cloud VMs and a scoped discount.
"""
import logging
import math
from typing import Dict, List

from infra_sizing.core.config import config
from infra_sizing.domain.cost_models import LicenseLineItem
from infra_sizing.domain.outsystems_models import (
    AWS_INSTANCE_SPECS,
    AZURE_INSTANCE_SPECS,
    CLOUD_ONLY_FEATURES,
    DEFAULT_AWS_INSTANCE,
    DEFAULT_AZURE_INSTANCE,
    DiscountScope,
    DiscountType,
    OutSystemsCloudProvider,
    OutSystemsCostResult,
    OutSystemsDeploymentConfig,
    OutSystemsDiscount,
    OutSystemsFeature,
    OutSystemsPlatform,
    OutSystemsPricingSettings,
)
from infra_sizing.services.tier_walker import find_tier, walk_tiers


logger = logging.getLogger(__name__)

FEATURE_NAMES: Dict[OutSystemsFeature, str] = {
    OutSystemsFeature.SUPPORT_24X7_EXTENDED: "Support 24x7 Extended",
    OutSystemsFeature.SUPPORT_24X7_PREMIUM: "Support 24x7 Premium",
    OutSystemsFeature.SENTRY: "Sentry",
    OutSystemsFeature.HIGH_AVAILABILITY: "High Availability",
    OutSystemsFeature.NON_PROD_ENV: "Non-Production Environment",
    OutSystemsFeature.LOAD_TEST_ENV: "Load Testing Environment",
    OutSystemsFeature.ENVIRONMENT_PACK: "Environment Pack",
    OutSystemsFeature.DISASTER_RECOVERY: "Disaster Recovery",
    OutSystemsFeature.LOG_STREAMING: "Log Streaming",
    OutSystemsFeature.DATABASE_REPLICA: "Database Replica",
    OutSystemsFeature.PRIVATE_GATEWAY: "Private Gateway",
}


def calculate_discount(
    discount: OutSystemsDiscount,
    license_subtotal: float,
    add_ons_subtotal: float,
    services_subtotal: float
) -> float:
    """
    Discount amount for a scope.

    A fixed amount never exceeds the scoped base.
    """
    if discount.scope == DiscountScope.LICENSE_ONLY:
        base = license_subtotal
    elif discount.scope == DiscountScope.ADD_ONS_ONLY:
        base = add_ons_subtotal
    elif discount.scope == DiscountScope.LICENSE_AND_ADD_ONS:
        base = license_subtotal + add_ons_subtotal
    else:
        base = license_subtotal + add_ons_subtotal + services_subtotal

    if discount.type == DiscountType.PERCENTAGE:
        return base * discount.value / 100
    return min(discount.value, base)


class OutSystemsCostCalculator:
    """Computes annual OutSystems subscription cost."""

    @staticmethod
    def ao_pack_count(deployment: OutSystemsDeploymentConfig, pricing: OutSystemsPricingSettings) -> int:
        return max(1, math.ceil(deployment.total_application_objects / pricing.ao_pack_size))

    def calculate(
        self,
        deployment: OutSystemsDeploymentConfig,
        pricing: OutSystemsPricingSettings
    ) -> OutSystemsCostResult:
        """
        Price an OutSystems subscription.

        Args:
            deployment: Subscription description
            pricing: OutSystems price list

        Returns:
            Itemized OutSystemsCostResult
        """
        result = OutSystemsCostResult(
            platform=deployment.platform,
            deployment=deployment.deployment,
            ao_pack_count=self.ao_pack_count(deployment, pricing),
        )
        result.warnings = self.get_warnings(deployment)

        if deployment.platform == OutSystemsPlatform.ODC:
            self._odc_licenses(deployment, pricing, result)
            self._odc_add_ons(deployment, pricing, result)
        else:
            self._o11_licenses(deployment, pricing, result)
            self._o11_add_ons(deployment, pricing, result)

        self._app_shield(deployment, pricing, result)
        self._services(deployment, pricing, result)

        if (
            deployment.platform == OutSystemsPlatform.O11
            and deployment.is_self_managed
            and deployment.cloud_provider != OutSystemsCloudProvider.ON_PREMISES
        ):
            self._cloud_vms(deployment, pricing, result)

        discount = deployment.discount
        if discount is not None and discount.value > 0:
            result.discount_amount = calculate_discount(
                discount,
                result.license_subtotal,
                result.add_ons_subtotal,
                result.services_subtotal,
            )
            result.discount_description = discount.describe()

        result.line_items = self._line_items(result)

        logger.info(
            f"OutSystems {deployment.platform.value} estimate: "
            f"{result.ao_pack_count} AO pack(s), ${result.net_total:,.2f}/year"
        )
        return result

    def get_warnings(self, deployment: OutSystemsDeploymentConfig) -> List[str]:
        """Advisory messages for feature combinations that are ignored or bundled."""
        warnings: List[str] = []
        selected = deployment.selected_features()

        if deployment.platform == OutSystemsPlatform.O11:
            if deployment.is_self_managed:
                for feature in selected:
                    if feature in CLOUD_ONLY_FEATURES:
                        warnings.append(
                            f"{FEATURE_NAMES[feature]} is a Cloud-only feature. "
                            f"It will be ignored for self-managed deployments."
                        )
            elif deployment.disaster_recovery:
                warnings.append(
                    "Disaster Recovery is a Self-Managed-only feature. "
                    "It will be ignored for cloud deployments."
                )

        if deployment.sentry and deployment.high_availability:
            warnings.append("Sentry already includes High Availability. HA add-on will be ignored.")

        return warnings

    def _unlimited_users(
        self,
        pricing: OutSystemsPricingSettings,
        result: OutSystemsCostResult
    ) -> None:
        packs = result.ao_pack_count
        result.license_breakdown[
            f"Unlimited Users ({packs}×${pricing.unlimited_users_per_ao_pack:,.0f})"
        ] = pricing.unlimited_users_per_ao_pack * packs

    def _odc_licenses(
        self,
        deployment: OutSystemsDeploymentConfig,
        pricing: OutSystemsPricingSettings,
        result: OutSystemsCostResult
    ) -> None:
        result.license_breakdown["Platform Base (ODC)"] = pricing.odc_platform_base_price

        additional_packs = result.ao_pack_count - 1
        if additional_packs > 0:
            result.license_breakdown[
                f"Additional AO Packs ({additional_packs}×${pricing.odc_ao_pack_price:,.0f})"
            ] = additional_packs * pricing.odc_ao_pack_price

        if deployment.use_unlimited_users:
            self._unlimited_users(pricing, result)
            return

        extra_internal = max(0, deployment.internal_users - pricing.odc_internal_users_included)
        if extra_internal > 0:
            packs = math.ceil(extra_internal / pricing.odc_internal_user_pack_size)
            result.license_breakdown[
                f"Internal Users (+{extra_internal} users, {packs} pack(s))"
            ] = packs * pricing.odc_internal_user_pack_price

        if deployment.external_users > 0:
            packs = math.ceil(deployment.external_users / pricing.odc_external_user_pack_size)
            result.license_breakdown[
                f"External Users ({deployment.external_users} users, {packs} pack(s))"
            ] = packs * pricing.odc_external_user_pack_price

    def _o11_licenses(
        self,
        deployment: OutSystemsDeploymentConfig,
        pricing: OutSystemsPricingSettings,
        result: OutSystemsCostResult
    ) -> None:
        result.license_breakdown["Enterprise Edition (O11)"] = pricing.o11_enterprise_base_price

        additional_packs = result.ao_pack_count - 1
        if additional_packs > 0:
            result.license_breakdown[
                f"Additional AO Packs ({additional_packs}×${pricing.o11_ao_pack_price:,.0f})"
            ] = additional_packs * pricing.o11_ao_pack_price

        if deployment.use_unlimited_users:
            self._unlimited_users(pricing, result)
            return

        included = pricing.o11_internal_users_included
        extra_internal = max(0, deployment.internal_users - included)
        if extra_internal > 0:
            result.license_breakdown[f"Internal Users (+{extra_internal} tiered)"] = walk_tiers(
                deployment.internal_users, included, pricing.o11_internal_user_tiers,
                absolute_positions=True
            )

        if deployment.external_users > 0:
            result.license_breakdown[f"External Users ({deployment.external_users} tiered)"] = walk_tiers(
                deployment.external_users, 0, pricing.o11_external_user_tiers
            )

    def _odc_add_ons(
        self,
        deployment: OutSystemsDeploymentConfig,
        pricing: OutSystemsPricingSettings,
        result: OutSystemsCostResult
    ) -> None:
        packs = result.ao_pack_count
        add_ons = result.add_on_costs

        # Premium support supersedes extended
        if deployment.support_24x7_premium:
            add_ons["Support 24x7 Premium"] = pricing.odc_support_24x7_premium_per_pack * packs
        elif deployment.support_24x7_extended:
            add_ons["Support 24x7 Extended"] = pricing.odc_support_24x7_extended_per_pack * packs

        # Sentry includes HA
        if deployment.sentry:
            add_ons["Sentry"] = pricing.odc_sentry_per_pack * packs
        elif deployment.high_availability:
            add_ons["High Availability"] = pricing.odc_high_availability_per_pack * packs

        quantity = deployment.non_production_quantity
        if quantity > 0:
            add_ons[f"Non-Production Runtime (×{quantity})"] = (
                pricing.odc_non_prod_runtime_per_pack * packs * quantity
            )

        if deployment.private_gateway:
            add_ons["Private Gateway"] = pricing.odc_private_gateway_per_pack * packs

    def _o11_add_ons(
        self,
        deployment: OutSystemsDeploymentConfig,
        pricing: OutSystemsPricingSettings,
        result: OutSystemsCostResult
    ) -> None:
        packs = result.ao_pack_count
        add_ons = result.add_on_costs
        is_cloud = not deployment.is_self_managed

        # 24x7 support is part of the Enterprise edition; only premium is extra
        if deployment.support_24x7_premium:
            add_ons["Support 24x7 Premium"] = pricing.o11_support_24x7_premium_per_pack * packs

        if deployment.sentry and is_cloud:
            add_ons["Sentry (incl. HA)"] = pricing.o11_sentry_per_pack * packs
        elif deployment.high_availability and is_cloud:
            add_ons["High Availability"] = pricing.o11_high_availability_per_pack * packs

        quantity = deployment.non_production_quantity
        if quantity > 0:
            add_ons[f"Non-Production Env (×{quantity})"] = pricing.o11_non_prod_env_per_pack * packs * quantity

        quantity = deployment.load_test_env_quantity
        if quantity > 0 and is_cloud:
            add_ons[f"Load Test Env (×{quantity})"] = pricing.o11_load_test_env_per_pack * packs * quantity

        quantity = deployment.environment_pack_quantity
        if quantity > 0:
            add_ons[f"Environment Pack (×{quantity})"] = (
                pricing.o11_environment_pack_per_pack * packs * quantity
            )

        if deployment.disaster_recovery and not is_cloud:
            add_ons["Disaster Recovery"] = pricing.o11_disaster_recovery_per_pack * packs

        # Flat fees, not per AO pack
        quantity = deployment.log_streaming_quantity
        if quantity > 0 and is_cloud:
            add_ons[f"Log Streaming (×{quantity})"] = pricing.o11_log_streaming_price * quantity

        quantity = deployment.database_replica_quantity
        if quantity > 0 and is_cloud:
            add_ons[f"Database Replica (×{quantity})"] = pricing.o11_database_replica_price * quantity

    def _app_shield(
        self,
        deployment: OutSystemsDeploymentConfig,
        pricing: OutSystemsPricingSettings,
        result: OutSystemsCostResult
    ) -> None:
        if not deployment.app_shield:
            return

        if deployment.use_unlimited_users:
            volume = deployment.app_shield_user_volume
        else:
            volume = deployment.internal_users + deployment.external_users

        tier = find_tier(volume, pricing.app_shield_tiers)
        if tier is None:
            result.warnings.append(f"No AppShield tier covers {volume:,} users")
            return
        result.add_on_costs[f"AppShield ({tier.label} users)"] = tier.price_per_pack

    def _services(
        self,
        deployment: OutSystemsDeploymentConfig,
        pricing: OutSystemsPricingSettings,
        result: OutSystemsCostResult
    ) -> None:
        prices = pricing.get_services_pricing(deployment.region)
        services = [
            ("Essential Success Plan", prices.essential_success_plan, deployment.essential_success_plan_quantity),
            ("Premier Success Plan", prices.premier_success_plan, deployment.premier_success_plan_quantity),
            ("Dedicated Group Session", prices.dedicated_group_session, deployment.dedicated_group_session_quantity),
            ("Public Session", prices.public_session, deployment.public_session_quantity),
            ("Expert Day", prices.expert_day, deployment.expert_day_quantity),
        ]
        for name, price, quantity in services:
            if quantity > 0:
                result.service_costs[f"{name} (×{quantity})"] = price * quantity

    def _cloud_vms(
        self,
        deployment: OutSystemsDeploymentConfig,
        pricing: OutSystemsPricingSettings,
        result: OutSystemsCostResult
    ) -> None:
        servers = deployment.total_environments * deployment.front_end_servers_per_environment

        if deployment.cloud_provider == OutSystemsCloudProvider.AZURE:
            label, instance, default = "Azure", deployment.azure_instance_type, DEFAULT_AZURE_INSTANCE
            rates, specs = pricing.azure_vm_hourly_rates, AZURE_INSTANCE_SPECS
        else:
            label, instance, default = "AWS", deployment.aws_instance_type, DEFAULT_AWS_INSTANCE
            rates, specs = pricing.aws_vm_hourly_rates, AWS_INSTANCE_SPECS

        if instance not in rates:
            logger.warning(f"Unknown {label} instance type '{instance}', pricing as {default}")
            result.warnings.append(f"Unknown {label} instance type '{instance}'; priced as {default}")
            instance = default

        result.vm_monthly_cost = rates[instance] * config.HOURS_PER_MONTH * servers
        result.vm_annual_cost = result.vm_monthly_cost * config.MONTHS_PER_YEAR
        vcpu, ram = specs[instance]
        result.vm_details = f"{servers}× {label} {instance} ({vcpu} vCPU, {ram} GB)"

    @staticmethod
    def _line_items(result: OutSystemsCostResult) -> List[LicenseLineItem]:
        items = [LicenseLineItem("License", name, amount) for name, amount in result.license_breakdown.items()]
        items += [LicenseLineItem("Add-On", name, amount) for name, amount in result.add_on_costs.items()]
        items += [LicenseLineItem("Service", name, amount) for name, amount in result.service_costs.items()]
        if result.vm_annual_cost > 0:
            items.append(LicenseLineItem(
                "Infrastructure",
                result.vm_details or "Cloud VMs",
                result.vm_annual_cost,
                f"${result.vm_monthly_cost:,.0f}/month",
            ))
        return items


def recommend_azure_instance(total_cores: int, total_ram_gb: int) -> str:
    """Smallest Azure instance type for the required cores and RAM."""
    if total_ram_gb <= 8 and total_cores <= 4:
        return "F4s_v2"
    if total_ram_gb <= 16 and total_cores <= 4:
        return "D4s_v3"
    if total_ram_gb <= 32 and total_cores <= 8:
        return "D8s_v3"
    return "D16s_v3"


def recommend_aws_instance(total_cores: int, total_ram_gb: int) -> str:
    """Smallest AWS instance type for the required cores and RAM."""
    if total_ram_gb <= 8 and total_cores <= 2:
        return "m5.large"
    if total_ram_gb <= 16 and total_cores <= 4:
        return "m5.xlarge"
    return "m5.2xlarge"

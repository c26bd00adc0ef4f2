"""
Mendix license cost calculator.
Prices Mendix Cloud, Private Cloud and other deployments from a pricebook.
"""
import logging
import math
from typing import Optional

from infra_sizing.domain.cost_models import LicenseLineItem
from infra_sizing.domain.mendix_models import (
    MendixCloudType,
    MendixCostResult,
    MendixDeploymentCategory,
    MendixDeploymentConfig,
    MendixOtherDeployment,
    MendixPricingSettings,
    MendixPrivateCloudProvider,
    MendixResourcePack,
    MendixResourcePackTier,
    SUPPORTED_PRIVATE_CLOUD_PROVIDERS,
)
from infra_sizing.services.tier_walker import describe_walk, walk_tiers_detailed


logger = logging.getLogger(__name__)

STORAGE_BLOCK_GB = 100
INTERNAL_USER_BLOCK = 100
EXTERNAL_USER_BLOCK = 250000

_PRIVATE_CLOUD_NAMES = {
    MendixPrivateCloudProvider.EKS: "EKS",
    MendixPrivateCloudProvider.AKS: "AKS",
    MendixPrivateCloudProvider.GKE: "GKE",
    MendixPrivateCloudProvider.OPENSHIFT: "OpenShift",
    MendixPrivateCloudProvider.GENERIC_K8S: "Generic Kubernetes",
    MendixPrivateCloudProvider.RANCHER: "Rancher",
    MendixPrivateCloudProvider.K3S: "K3s",
    MendixPrivateCloudProvider.DOCKER: "Docker",
}


class MendixCostCalculator:
    """Computes annual Mendix licensing cost."""

    def is_supported_provider(self, provider: MendixPrivateCloudProvider) -> bool:
        return provider in SUPPORTED_PRIVATE_CLOUD_PROVIDERS

    def calculate(
        self,
        deployment: MendixDeploymentConfig,
        pricing: MendixPricingSettings
    ) -> MendixCostResult:
        """
        Price a Mendix deployment.

        Args:
            deployment: Deployment description
            pricing: Mendix pricebook

        Returns:
            Itemized MendixCostResult
        """
        result = MendixCostResult()

        if deployment.category == MendixDeploymentCategory.CLOUD:
            self._calculate_cloud(deployment, pricing, result)
        elif deployment.category == MendixDeploymentCategory.PRIVATE_CLOUD:
            self._calculate_private_cloud(deployment, pricing, result)
        else:
            self._calculate_other(deployment, pricing, result)

        internal_cost = (
            math.ceil(deployment.internal_users / INTERNAL_USER_BLOCK)
            * pricing.internal_users_per_100_price
        )
        external_cost = (
            math.ceil(deployment.external_users / EXTERNAL_USER_BLOCK)
            * pricing.external_users_per_250k_price
        )
        result.user_license_cost = internal_cost + external_cost

        self._calculate_genai(deployment, pricing, result)

        if deployment.include_customer_enablement:
            result.services_cost = pricing.customer_enablement_price

        if deployment.apply_volume_discount:
            # Deployment fees, packs, storage and add-ons are never discounted
            discountable = result.platform_cost + result.user_license_cost
            result.discount_amount = discountable * pricing.volume_discount_percent / 100

        self._build_line_items(deployment, result, internal_cost, external_cost)

        logger.info(
            f"Mendix estimate for {result.deployment_description}: "
            f"${result.total_per_year:,.2f}/year"
        )
        return result

    def _calculate_cloud(
        self,
        deployment: MendixDeploymentConfig,
        pricing: MendixPricingSettings,
        result: MendixCostResult
    ) -> None:
        if deployment.cloud_type == MendixCloudType.DEDICATED:
            # Dedicated always bundles the platform license
            result.deployment_description = "Mendix Cloud Dedicated"
            result.deployment_fee = pricing.cloud_dedicated_price
            result.platform_cost = pricing.platform_premium_unlimited_price
            return

        result.deployment_description = "Mendix Cloud (SaaS)"
        if deployment.platform_premium_unlimited:
            result.platform_cost = pricing.platform_premium_unlimited_price

        for selection in deployment.resource_packs:
            pack = pricing.find_pack(selection.tier, selection.size)
            if pack is None:
                result.warnings.append(
                    f"Resource pack {selection.size.value} is not offered in the "
                    f"{selection.tier.value} tier"
                )
                continue
            result.resource_pack_cost += pack.price_per_year * selection.quantity
            result.total_cloud_tokens += pack.cloud_tokens * selection.quantity

        if deployment.additional_cloud_tokens > 0:
            result.cloud_token_cost = deployment.additional_cloud_tokens * pricing.cloud_token_price
            result.total_cloud_tokens += deployment.additional_cloud_tokens

        if deployment.additional_file_storage_gb > 0:
            blocks = math.ceil(deployment.additional_file_storage_gb / STORAGE_BLOCK_GB)
            result.storage_cost += blocks * pricing.additional_file_storage_per_100gb
        if deployment.additional_db_storage_gb > 0:
            blocks = math.ceil(deployment.additional_db_storage_gb / STORAGE_BLOCK_GB)
            result.storage_cost += blocks * pricing.additional_db_storage_per_100gb

    def _calculate_private_cloud(
        self,
        deployment: MendixDeploymentConfig,
        pricing: MendixPricingSettings,
        result: MendixCostResult
    ) -> None:
        if deployment.platform_premium_unlimited:
            result.platform_cost = pricing.platform_premium_unlimited_price
        environments = deployment.number_of_environments
        provider = deployment.private_cloud_provider or MendixPrivateCloudProvider.GENERIC_K8S

        if provider == MendixPrivateCloudProvider.AZURE:
            result.deployment_description = "Mendix on Azure"
            result.deployment_fee = pricing.azure_base_price
            included = pricing.azure_base_environments_included
            if environments > included:
                additional = environments - included
                result.environment_cost = additional * pricing.azure_additional_environment_price
                result.total_cloud_tokens += additional * pricing.azure_additional_environment_tokens
                result.environment_details = (
                    f"{included} included + {additional} additional "
                    f"@ ${pricing.azure_additional_environment_price:,.2f}/env"
                )
            else:
                result.environment_details = f"{environments} environments (up to {included} included)"
            return

        name = _PRIVATE_CLOUD_NAMES.get(provider, provider.value)
        result.deployment_description = f"Mendix on Kubernetes ({name})"
        if not self.is_supported_provider(provider):
            result.deployment_description += " - Manual Setup"
            result.warnings.append(
                f"{name} is not an officially supported Mendix Private Cloud provider; "
                f"manual setup is required"
            )

        result.deployment_fee = pricing.k8s_base_price
        included = pricing.k8s_base_environments_included
        if environments > included:
            consumed = walk_tiers_detailed(environments, included, pricing.k8s_environment_tiers)
            result.environment_cost = sum(cost for _, _, cost in consumed)
            result.environment_details = describe_walk(included, consumed, "env")
        else:
            result.environment_details = f"{environments} environments ({included} included in base)"

    def _calculate_other(
        self,
        deployment: MendixDeploymentConfig,
        pricing: MendixPricingSettings,
        result: MendixCostResult
    ) -> None:
        if deployment.platform_premium_unlimited:
            result.platform_cost = pricing.platform_premium_unlimited_price
        target = deployment.other_deployment or MendixOtherDeployment.SERVER

        if target == MendixOtherDeployment.STACKIT:
            per_app, unlimited = pricing.stackit_per_app_price, pricing.stackit_unlimited_apps_price
            result.deployment_description = "Mendix on StackIT"
        elif target == MendixOtherDeployment.SAP_BTP:
            per_app, unlimited = pricing.sap_btp_per_app_price, pricing.sap_btp_unlimited_apps_price
            result.deployment_description = "Mendix on SAP BTP"
        else:
            per_app, unlimited = pricing.server_per_app_price, pricing.server_unlimited_apps_price
            result.deployment_description = "Mendix on Server (VMs/Docker)"

        if deployment.unlimited_apps:
            result.deployment_fee = unlimited
            result.environment_details = "Unlimited applications"
        else:
            result.deployment_fee = per_app * deployment.number_of_apps
            result.environment_details = f"{deployment.number_of_apps} application(s) @ ${per_app:,.0f}/app"

    def _calculate_genai(
        self,
        deployment: MendixDeploymentConfig,
        pricing: MendixPricingSettings,
        result: MendixCostResult
    ) -> None:
        size = deployment.genai_model_pack_size
        if size:
            price = pricing.genai_model_pack_prices.get(size)
            if price is None:
                result.warnings.append(f"Unknown GenAI model pack size '{size}'")
            else:
                quantity = deployment.genai_model_pack_quantity
                result.genai_cost += price * quantity
                result.total_cloud_tokens += pricing.genai_model_pack_tokens.get(size, 0) * quantity

        if deployment.genai_knowledge_base_quantity > 0:
            quantity = deployment.genai_knowledge_base_quantity
            result.genai_cost += pricing.genai_knowledge_base_price * quantity
            result.total_cloud_tokens += pricing.genai_knowledge_base_tokens * quantity

    def _build_line_items(
        self,
        deployment: MendixDeploymentConfig,
        result: MendixCostResult,
        internal_cost: float,
        external_cost: float
    ) -> None:
        entries = [
            ("License", "Platform Premium (unlimited apps)", result.platform_cost, None),
            ("License", f"Internal Users ({deployment.internal_users:,})", internal_cost, None),
            ("License", f"External Users ({deployment.external_users:,})", external_cost, None),
            ("Add-On", "Additional Storage", result.storage_cost, None),
            ("Add-On", "Cloud Tokens", result.cloud_token_cost, None),
            ("Add-On", "GenAI", result.genai_cost, None),
            ("Service", "Customer Enablement", result.services_cost, None),
            ("Infrastructure", result.deployment_description, result.deployment_fee, None),
            ("Infrastructure", "Environments", result.environment_cost, result.environment_details or None),
            ("Infrastructure", "Resource Packs", result.resource_pack_cost, None),
        ]
        result.line_items = [
            LicenseLineItem(category, name, amount, notes)
            for category, name, amount, notes in entries
            if amount > 0
        ]

    def recommend_resource_pack(
        self,
        pricing: MendixPricingSettings,
        tier: MendixResourcePackTier,
        memory_gb: float,
        vcpu: float,
        db_storage_gb: float
    ) -> Optional[MendixResourcePack]:
        """
        Cheapest pack of a tier meeting all three requirements.

        Returns:
            MendixResourcePack, or None if no pack is large enough
        """
        candidates = [
            pack for pack in pricing.packs_for(tier)
            if pack.mx_memory_gb >= memory_gb
            and pack.mx_vcpu >= vcpu
            and pack.db_storage_gb >= db_storage_gb
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda pack: pack.price_per_year)

"""
Pricing settings service.
Owns the current PricingSettings document, persists it through a settings
store and exposes a version counter that callers poll for changes.
"""
from typing import Callable, Dict, Optional
from datetime import datetime, timedelta
import logging
import threading

from infra_sizing.core.config import config
from infra_sizing.domain.enums import CloudProvider, Distribution, ON_PREM_DISTRIBUTIONS
from infra_sizing.domain.mendix_models import MendixCostResult, MendixDeploymentConfig
from infra_sizing.domain.outsystems_models import OutSystemsCostResult, OutSystemsDeploymentConfig
from infra_sizing.domain.settings_models import (
    CloudApiConfig,
    PricingCacheStatus,
    PricingSettings,
    ProviderCacheStatus,
)
from infra_sizing.pricing.price_cache import PriceCache, is_expired
from infra_sizing.pricing.settings_store import SettingsStore, SettingsStoreError, create_settings_store
from infra_sizing.services.mendix_calculator import MendixCostCalculator
from infra_sizing.services.outsystems_calculator import OutSystemsCostCalculator


logger = logging.getLogger(__name__)


class PricingSettingsService:
    """Service for loading, saving and applying pricing settings."""

    def __init__(
        self,
        store: Optional[SettingsStore] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize settings service.

        Args:
            store: Settings store (configured store if None)
            clock: Time source (defaults to datetime.utcnow)
        """
        self.store = store or create_settings_store(config.PRICING_SETTINGS_PATH)
        self._clock = clock or datetime.utcnow
        self._settings: Optional[PricingSettings] = None
        self._version = 0
        self._lock = threading.Lock()
        self.mendix_calculator = MendixCostCalculator()
        self.outsystems_calculator = OutSystemsCostCalculator()

    @property
    def version(self) -> int:
        """Incremented on every change; compare against a remembered value to detect updates."""
        return self._version

    def load_settings(self) -> PricingSettings:
        """
        Current settings, loaded from the store on first use.

        Store failures and missing documents yield defaults.
        """
        with self._lock:
            if self._settings is not None:
                return self._settings

            settings = None
            try:
                settings = self.store.load()
            except SettingsStoreError as error:
                logger.warning(f"Failed to load pricing settings, using defaults: {error}")

            if settings is None:
                logger.info("No saved pricing settings, using defaults")
                settings = PricingSettings()

            self._settings = settings
            return settings

    def save_settings(self, settings: PricingSettings) -> None:
        """
        Replace the current settings and persist them.

        A store failure is logged; the in-memory settings still change.
        """
        settings.last_modified = self._clock()
        with self._lock:
            self._settings = settings
            self._version += 1
        try:
            self.store.save(settings)
        except SettingsStoreError as error:
            logger.warning(f"Failed to save pricing settings: {error}")

    def reset_to_defaults(self) -> PricingSettings:
        settings = PricingSettings()
        self.save_settings(settings)
        logger.info("Pricing settings reset to defaults")
        return settings

    def reset_cache_timestamp(self, price_cache: Optional[PriceCache] = None) -> None:
        """Mark cached pricing as reset now, emptying the price cache if given."""
        settings = self.load_settings()
        settings.last_cache_reset = self._clock()
        if price_cache is not None:
            price_cache.clear()
        self.save_settings(settings)
        logger.info("Pricing cache reset")

    def configure_cloud_api(self, provider: CloudProvider, api_config: CloudApiConfig) -> None:
        settings = self.load_settings()
        settings.cloud_api_configs[provider] = api_config
        self.save_settings(settings)

    def get_cache_status(self, price_cache: PriceCache) -> PricingCacheStatus:
        """
        Summarize what the price cache holds.

        Args:
            price_cache: Cache to inspect

        Returns:
            PricingCacheStatus grouped by provider
        """
        settings = self.load_settings()
        provider_status: Dict[CloudProvider, ProviderCacheStatus] = {}
        regions: Dict[CloudProvider, set] = {}

        for entry in price_cache.cached_entries():
            status = provider_status.setdefault(entry.provider, ProviderCacheStatus(has_cached_data=True))
            regions.setdefault(entry.provider, set()).add(entry.region)
            if entry.last_updated and (status.last_fetched is None or entry.last_updated > status.last_fetched):
                status.last_fetched = entry.last_updated
                status.source = entry.source

        for provider, status in provider_status.items():
            status.region_count = len(regions[provider])

        ttl = timedelta(seconds=config.PRICING_CACHE_TTL_SECONDS)
        return PricingCacheStatus(
            last_reset=settings.last_cache_reset,
            cached_provider_count=len(provider_status),
            configured_api_count=sum(
                1 for api_config in settings.cloud_api_configs.values() if api_config.is_configured
            ),
            is_stale=is_expired(settings.last_cache_reset, self._clock(), ttl),
            provider_status=provider_status,
        )

    @staticmethod
    def is_on_prem_distribution(distribution: Distribution) -> bool:
        return distribution in ON_PREM_DISTRIBUTIONS

    def calculate_mendix_cost(self, deployment: MendixDeploymentConfig) -> MendixCostResult:
        """Price a Mendix deployment with the current pricebook."""
        return self.mendix_calculator.calculate(deployment, self.load_settings().mendix_pricing)

    def calculate_outsystems_cost(self, deployment: OutSystemsDeploymentConfig) -> OutSystemsCostResult:
        """Price an OutSystems subscription with the current price list."""
        return self.outsystems_calculator.calculate(deployment, self.load_settings().outsystems_pricing)


# Global singleton instance
_settings_service: Optional[PricingSettingsService] = None


def get_pricing_settings_service() -> PricingSettingsService:
    """
    Get the global pricing settings service.

    Returns:
        PricingSettingsService instance
    """
    global _settings_service
    if _settings_service is None:
        _settings_service = PricingSettingsService()
    return _settings_service

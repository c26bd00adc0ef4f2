"""
Domain models for persisted pricing settings and cache status.
"""
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime

from infra_sizing.domain.enums import CloudProvider
from infra_sizing.domain.mendix_models import MendixPricingSettings
from infra_sizing.domain.on_prem_models import OnPremPricing
from infra_sizing.domain.outsystems_models import OutSystemsPricingSettings


@dataclass
class CloudApiConfig:
    """Credentials for a provider's pricing API."""
    api_key: Optional[str] = None
    secret_key: Optional[str] = None
    service_account_json: Optional[str] = None
    default_region: Optional[str] = None
    last_validated: Optional[datetime] = None
    is_valid: Optional[bool] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) or bool(self.service_account_json)


@dataclass
class PricingSettings:
    """User-editable pricing document."""
    include_pricing_in_results: bool = False
    on_prem_defaults: OnPremPricing = field(default_factory=OnPremPricing)
    mendix_pricing: MendixPricingSettings = field(default_factory=MendixPricingSettings)
    outsystems_pricing: OutSystemsPricingSettings = field(default_factory=OutSystemsPricingSettings)
    cloud_api_configs: Dict[CloudProvider, CloudApiConfig] = field(default_factory=dict)
    last_modified: Optional[datetime] = None
    last_cache_reset: Optional[datetime] = None


@dataclass
class ProviderCacheStatus:
    has_cached_data: bool = False
    last_fetched: Optional[datetime] = None
    source: str = "Default"
    region_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "has_cached_data": self.has_cached_data,
            "last_fetched": self.last_fetched.isoformat() if self.last_fetched else None,
            "source": self.source,
            "region_count": self.region_count,
        }


@dataclass
class PricingCacheStatus:
    last_reset: Optional[datetime] = None
    cached_provider_count: int = 0
    configured_api_count: int = 0
    is_stale: bool = True
    provider_status: Dict[CloudProvider, ProviderCacheStatus] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "last_reset": self.last_reset.isoformat() if self.last_reset else None,
            "cached_provider_count": self.cached_provider_count,
            "configured_api_count": self.configured_api_count,
            "is_stale": self.is_stale,
            "provider_status": {
                provider.value: status.to_dict()
                for provider, status in self.provider_status.items()
            },
        }

"""
Live price-list client.
Fetches a published price list document over HTTP. Disabled (always None)
unless LIVE_PRICING_URL is configured.
"""
from typing import Optional
from datetime import datetime
import logging

import httpx
from pydantic import TypeAdapter, ValidationError

from infra_sizing.core.config import config
from infra_sizing.domain.enums import CloudProvider, PricingType
from infra_sizing.domain.pricing_models import PriceList, as_naive_utc
from infra_sizing.resilience.circuit_breaker import CircuitBreakerError, get_circuit_breaker


logger = logging.getLogger(__name__)

_price_list_adapter = TypeAdapter(PriceList)


class LivePricingError(Exception):
    """Raised when the live pricing source fails."""
    pass


class LivePriceFetcher:
    """Client for an HTTP price-list endpoint."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        """
        Initialize live price fetcher.

        Args:
            base_url: Endpoint root (defaults to LIVE_PRICING_URL; empty disables fetching)
            timeout: Per-request timeout in seconds (defaults to LIVE_PRICING_TIMEOUT)
        """
        self.base_url = (config.LIVE_PRICING_URL if base_url is None else base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.LIVE_PRICING_TIMEOUT
        self.circuit_breaker = get_circuit_breaker("live_pricing")

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def _build_url(self, provider: CloudProvider, region: str, pricing_type: PricingType) -> str:
        return f"{self.base_url}/{provider.value}/{region}/{pricing_type.value}"

    async def fetch(
        self,
        provider: CloudProvider,
        region: str,
        pricing_type: PricingType
    ) -> Optional[PriceList]:
        """
        Fetch the current price list.

        Args:
            provider: Provider to price
            region: Region code
            pricing_type: Purchase model

        Returns:
            PriceList marked live, or None if unavailable (disabled, circuit
            open, or not published for this key)

        Raises:
            LivePricingError: If the request or response parsing fails
        """
        if not self.enabled:
            return None

        try:
            self.circuit_breaker.guard()
        except CircuitBreakerError as error:
            logger.warning(f"{error}, skipping {provider.value}/{region}")
            return None

        url = self._build_url(provider, region, pricing_type)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers={"Accept": "application/json"})
                if response.status_code == 404:
                    self.circuit_breaker.record_success()  # Not found is not a failure
                    return None
                response.raise_for_status()
                price_list = _price_list_adapter.validate_json(response.content)

        except httpx.HTTPStatusError as error:
            self.circuit_breaker.record_failure()
            logger.error(f"Live pricing HTTP error: {error}")
            raise LivePricingError(
                f"Failed to query live pricing: {error.response.status_code}"
            ) from error
        except httpx.RequestError as error:
            self.circuit_breaker.record_failure()
            logger.error(f"Live pricing request error: {error}")
            raise LivePricingError(f"Failed to connect to live pricing: {str(error)}") from error
        except ValidationError as error:
            self.circuit_breaker.record_failure()
            logger.error(f"Error parsing live pricing response: {error}")
            raise LivePricingError(f"Invalid live pricing document from {url}") from error

        self.circuit_breaker.record_success()
        price_list.provider = provider
        price_list.region = region
        price_list.pricing_type = pricing_type
        price_list.is_live = True
        price_list.last_updated = as_naive_utc(price_list.last_updated) or datetime.utcnow()
        return price_list

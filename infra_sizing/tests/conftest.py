"""
Shared pytest fixtures for infra_sizing tests.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest
from datetime import datetime, timedelta

from infra_sizing.domain.mendix_models import MendixPricingSettings
from infra_sizing.domain.outsystems_models import OutSystemsPricingSettings
from infra_sizing.pricing.persistent_cache import InMemoryPersistentCache
from infra_sizing.pricing.price_cache import PriceCache
from infra_sizing.resilience.circuit_breaker import reset_circuit_breakers


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Clock fixed at a known instant."""
    return FakeClock(datetime(2024, 6, 1, 12, 0, 0))


@pytest.fixture
def persistent_cache():
    """In-memory persistent cache."""
    return InMemoryPersistentCache()


@pytest.fixture
def price_cache(persistent_cache, clock):
    """Price cache with no live source."""
    return PriceCache(persistent=persistent_cache, fetcher=None, clock=clock)


@pytest.fixture
def mendix_pricing():
    """Default Mendix pricebook."""
    return MendixPricingSettings()


@pytest.fixture
def outsystems_pricing():
    """Default OutSystems price list."""
    return OutSystemsPricingSettings()


@pytest.fixture(autouse=True)
def isolated_circuit_breakers():
    """Fresh circuit breaker registry per test."""
    reset_circuit_breakers()
    yield
    reset_circuit_breakers()

"""
Layered price-list resolution.

Resolution order for (provider, region, pricing type):
1. In-memory entry, if fresh
2. Persistent cache entry, if fresh (promoted into memory)
3. Live price list (written through both layers)
4. Built-in default price list (memory only)

Store and live-fetch failures are logged and treated as misses; resolve()
always returns a price list.
"""
import asyncio
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from infra_sizing.core.config import config
from infra_sizing.domain.enums import CloudProvider, PricingType
from infra_sizing.domain.pricing_models import PriceList, as_naive_utc
from infra_sizing.pricing.default_catalog import get_default_price_list, get_default_region
from infra_sizing.pricing.live_fetch import LivePriceFetcher, LivePricingError
from infra_sizing.pricing.persistent_cache import (
    PersistentPriceCache,
    PriceCacheStoreError,
    create_persistent_cache,
)


logger = logging.getLogger(__name__)


def is_expired(timestamp: Optional[datetime], now: datetime, ttl: timedelta) -> bool:
    """True when a timestamp is missing or older than the TTL."""
    if timestamp is None:
        return True
    return as_naive_utc(now) - as_naive_utc(timestamp) > ttl


class PriceCache:
    """Resolves price lists through memory, persistent store, live source and defaults."""

    def __init__(
        self,
        persistent: Optional[PersistentPriceCache] = None,
        fetcher: Optional[LivePriceFetcher] = None,
        clock: Optional[Callable[[], datetime]] = None,
        ttl_seconds: Optional[int] = None,
        live_timeout: Optional[float] = None
    ):
        """
        Initialize price cache.

        Args:
            persistent: Persistent store (None disables that layer)
            fetcher: Live price source (None disables that layer)
            clock: Time source (defaults to datetime.utcnow)
            ttl_seconds: Freshness window (defaults to PRICING_CACHE_TTL_SECONDS)
            live_timeout: Deadline for one live fetch (defaults to LIVE_PRICING_TIMEOUT)
        """
        self._memory: Dict[str, PriceList] = {}
        self._lock = threading.Lock()
        self._persistent = persistent
        self._fetcher = fetcher
        self._clock = clock or datetime.utcnow
        self.ttl = timedelta(seconds=ttl_seconds or config.PRICING_CACHE_TTL_SECONDS)
        self.live_timeout = live_timeout or config.LIVE_PRICING_TIMEOUT

    @staticmethod
    def cache_key(provider: CloudProvider, region: str, pricing_type: PricingType) -> str:
        """Lowercase composite key shared by both cache layers."""
        return f"pricing-cache-{provider.value}-{region}-{pricing_type.value}".lower()

    def _now(self) -> datetime:
        return self._clock()

    def _get_fresh(self, key: str, now: datetime) -> Optional[PriceList]:
        with self._lock:
            entry = self._memory.get(key)
        if entry is not None and not is_expired(entry.last_updated, now, self.ttl):
            return entry
        return None

    def _store(self, key: str, price_list: PriceList, force: bool = False) -> PriceList:
        """
        Put an entry in memory and return the entry that ended up cached.

        Unless forced, a fresher entry written concurrently by another
        caller is kept.
        """
        with self._lock:
            existing = self._memory.get(key)
            if (
                not force
                and existing is not None
                and existing is not price_list
                and existing.last_updated is not None
                and price_list.last_updated is not None
                and as_naive_utc(existing.last_updated) > as_naive_utc(price_list.last_updated)
            ):
                return existing
            self._memory[key] = price_list
            return price_list

    async def _load_persistent(self, key: str) -> Optional[PriceList]:
        if self._persistent is None:
            return None
        try:
            return await asyncio.to_thread(self._persistent.get, key)
        except PriceCacheStoreError as error:
            logger.warning(f"Persistent price cache read failed for {key}: {error}")
        except Exception as error:
            logger.error(
                f"Unexpected persistent price cache error reading {key}: {type(error).__name__}: {error}",
                exc_info=True
            )
        return None

    async def _save_persistent(self, key: str, price_list: PriceList) -> None:
        if self._persistent is None:
            return
        try:
            await asyncio.to_thread(self._persistent.set, key, price_list)
        except PriceCacheStoreError as error:
            logger.warning(f"Persistent price cache write failed for {key}: {error}")
        except Exception as error:
            logger.error(
                f"Unexpected persistent price cache error writing {key}: {type(error).__name__}: {error}",
                exc_info=True
            )

    async def _fetch_live(
        self,
        provider: CloudProvider,
        region: str,
        pricing_type: PricingType
    ) -> Optional[PriceList]:
        if self._fetcher is None:
            return None
        try:
            return await asyncio.wait_for(
                self._fetcher.fetch(provider, region, pricing_type),
                timeout=self.live_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Live pricing for {provider.value}/{region} timed out after {self.live_timeout}s"
            )
        except LivePricingError as error:
            logger.warning(f"Live pricing unavailable for {provider.value}/{region}: {error}")
        except Exception as error:
            logger.error(
                f"Unexpected live pricing error for {provider.value}/{region}: {type(error).__name__}: {error}",
                exc_info=True
            )
        return None

    async def resolve(
        self,
        provider: CloudProvider,
        region: Optional[str] = None,
        pricing_type: PricingType = PricingType.ON_DEMAND
    ) -> PriceList:
        """
        Resolve the price list for a provider/region/pricing type.

        Args:
            provider: Provider to price
            region: Region code (provider's default region if None)
            pricing_type: Purchase model

        Returns:
            Cached, live or default PriceList (never None)
        """
        region = region or get_default_region(provider)
        key = self.cache_key(provider, region, pricing_type)
        now = self._now()

        cached = self._get_fresh(key, now)
        if cached is not None:
            logger.debug(f"Price cache hit for {key}")
            return cached

        stored = await self._load_persistent(key)
        if stored is not None and not is_expired(stored.last_updated, now, self.ttl):
            logger.info(f"Promoted persisted price list {key} into memory")
            return self._store(key, stored)

        live = await self._fetch_live(provider, region, pricing_type)
        if live is not None:
            # Freshness is measured from when this process fetched the list
            live.is_live = True
            live.last_updated = now
            winner = self._store(key, live)
            await self._save_persistent(key, winner)
            return winner

        # Defaults are not user data, so they stay out of the persistent store
        default = get_default_price_list(provider, region, pricing_type, now=now)
        return self._store(key, default)

    async def refresh(
        self,
        provider: CloudProvider,
        region: Optional[str] = None
    ) -> Optional[PriceList]:
        """
        Force a live fetch of on-demand pricing and overwrite both layers.

        Args:
            provider: Provider to refresh
            region: Region code (provider's default region if None)

        Returns:
            Fresh PriceList, or None if the live source has nothing (the
            previous cached value is kept)
        """
        region = region or get_default_region(provider)
        pricing_type = PricingType.ON_DEMAND
        key = self.cache_key(provider, region, pricing_type)

        live = await self._fetch_live(provider, region, pricing_type)
        if live is None:
            logger.info(f"Refresh of {key} found no live pricing; keeping cached value")
            return None

        live.is_live = True
        live.last_updated = self._now()
        self._store(key, live, force=True)
        await self._save_persistent(key, live)
        logger.info(f"Refreshed {key} from live pricing")
        return live

    def is_stale(self, provider: CloudProvider, region: Optional[str] = None) -> bool:
        """True when on-demand pricing is missing from memory or older than the TTL."""
        region = region or get_default_region(provider)
        key = self.cache_key(provider, region, PricingType.ON_DEMAND)
        with self._lock:
            entry = self._memory.get(key)
        if entry is None:
            return True
        return is_expired(entry.last_updated, self._now(), self.ttl)

    def get_last_update(
        self,
        provider: CloudProvider,
        region: Optional[str] = None
    ) -> Optional[datetime]:
        """Timestamp of the in-memory on-demand entry, or None."""
        region = region or get_default_region(provider)
        key = self.cache_key(provider, region, PricingType.ON_DEMAND)
        with self._lock:
            entry = self._memory.get(key)
        return entry.last_updated if entry is not None else None

    def invalidate(
        self,
        provider: CloudProvider,
        region: Optional[str] = None,
        pricing_type: Optional[PricingType] = None
    ) -> None:
        """
        Drop cached entries for a provider/region.

        Args:
            provider: Provider to drop
            region: Region code (provider's default region if None)
            pricing_type: Single pricing type, or every type if None
        """
        region = region or get_default_region(provider)
        pricing_types = [pricing_type] if pricing_type else list(PricingType)
        for each_type in pricing_types:
            key = self.cache_key(provider, region, each_type)
            with self._lock:
                self._memory.pop(key, None)
            if self._persistent is None:
                continue
            try:
                self._persistent.remove(key)
            except PriceCacheStoreError as error:
                logger.warning(f"Persistent price cache delete failed for {key}: {error}")
            except Exception as error:
                logger.error(
                    f"Unexpected persistent price cache error deleting {key}: {type(error).__name__}: {error}",
                    exc_info=True
                )

    def clear(self) -> None:
        """Empty the in-memory layer."""
        with self._lock:
            self._memory.clear()

    def cached_keys(self) -> List[str]:
        with self._lock:
            return sorted(self._memory.keys())

    def cached_entries(self) -> List[PriceList]:
        with self._lock:
            return list(self._memory.values())


# Global singleton instance
_price_cache: Optional[PriceCache] = None


def get_price_cache() -> PriceCache:
    """
    Get the global price cache, wired from configuration.

    Returns:
        PriceCache instance
    """
    global _price_cache
    if _price_cache is None:
        _price_cache = PriceCache(
            persistent=create_persistent_cache(config.PRICE_CACHE_DIR),
            fetcher=LivePriceFetcher(),
        )
    return _price_cache

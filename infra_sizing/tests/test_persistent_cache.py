"""
Tests for persistent price cache backends and JSON document helpers.
"""

from datetime import datetime

import pytest

from infra_sizing.domain.enums import CloudProvider, PricingType
from infra_sizing.pricing.default_catalog import get_default_price_list
from infra_sizing.pricing.persistent_cache import (
    InMemoryPersistentCache,
    JsonFilePersistentCache,
    PriceCacheStoreError,
    create_persistent_cache,
)
from infra_sizing.utils.json_store import document_path


KEY = "pricing-cache-aws-us-east-1-ondemand"


@pytest.fixture
def price_list():
    return get_default_price_list(
        CloudProvider.AWS, "us-east-1", PricingType.ON_DEMAND, now=datetime(2024, 6, 1, 12)
    )


def test_file_cache_roundtrip(tmp_path, price_list):
    """Stored lists survive a new cache instance on the same directory."""
    JsonFilePersistentCache(tmp_path).set(KEY, price_list)
    loaded = JsonFilePersistentCache(tmp_path).get(KEY)
    assert loaded == price_list
    assert loaded.provider == CloudProvider.AWS
    assert loaded.last_updated == datetime(2024, 6, 1, 12)


def test_file_cache_offset_timestamp_made_naive(tmp_path):
    """Documents stamped with a UTC offset load as naive UTC."""
    document_path(tmp_path, KEY).write_text(
        '{"provider": "aws", "region": "us-east-1", "last_updated": "2024-06-01T13:00:00+02:00"}'
    )
    loaded = JsonFilePersistentCache(tmp_path).get(KEY)
    assert loaded.last_updated == datetime(2024, 6, 1, 11)
    assert loaded.last_updated.tzinfo is None


def test_file_cache_missing_key(tmp_path):
    """Unknown keys are a miss."""
    assert JsonFilePersistentCache(tmp_path).get(KEY) is None


def test_file_cache_corrupt_document(tmp_path):
    """Corrupt documents raise PriceCacheStoreError."""
    document_path(tmp_path, KEY).write_text("{not json")
    with pytest.raises(PriceCacheStoreError):
        JsonFilePersistentCache(tmp_path).get(KEY)


def test_file_cache_remove(tmp_path, price_list):
    """Removed keys are gone; removing twice is harmless."""
    cache = JsonFilePersistentCache(tmp_path)
    cache.set(KEY, price_list)
    cache.remove(KEY)
    cache.remove(KEY)
    assert cache.get(KEY) is None


def test_file_cache_leaves_no_temp_files(tmp_path, price_list):
    """Atomic writes leave only the final document behind."""
    JsonFilePersistentCache(tmp_path).set(KEY, price_list)
    assert [path.name for path in tmp_path.iterdir()] == [f"{KEY}.json"]


def test_document_path_sanitizes_key(tmp_path):
    """Unsafe characters in keys never reach the file name."""
    path = document_path(tmp_path, "Pricing/../AWS us")
    assert path.parent == tmp_path
    assert path.name == "pricing_.._aws_us.json"


def test_memory_cache_copies_entries(price_list):
    """Callers cannot mutate stored entries through returned objects."""
    cache = InMemoryPersistentCache()
    cache.set(KEY, price_list)
    cache.get(KEY).compute.cpu_per_hour = 99.0
    assert cache.get(KEY).compute.cpu_per_hour == price_list.compute.cpu_per_hour


def test_create_persistent_cache(tmp_path):
    """An empty directory selects the in-memory backend."""
    assert isinstance(create_persistent_cache(""), InMemoryPersistentCache)
    assert isinstance(create_persistent_cache(str(tmp_path)), JsonFilePersistentCache)

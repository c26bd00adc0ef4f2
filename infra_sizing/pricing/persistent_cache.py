"""
Persistent price cache backends.
Store resolved price lists across process restarts. Failures surface as
PriceCacheStoreError; PriceCache treats them as cache misses.
"""
from typing import Dict, Optional
from pathlib import Path
import copy
import logging

from pydantic import TypeAdapter, ValidationError

from infra_sizing.domain.pricing_models import PriceList, as_naive_utc
from infra_sizing.utils.json_store import (
    delete_document,
    document_path,
    read_document,
    write_document,
)


logger = logging.getLogger(__name__)

_price_list_adapter = TypeAdapter(PriceList)


class PriceCacheStoreError(Exception):
    """Raised when the persistent price cache cannot be read or written."""
    pass


class PersistentPriceCache:
    """Key/value store for price lists."""
    
    def get(self, key: str) -> Optional[PriceList]:
        raise NotImplementedError
    
    def set(self, key: str, price_list: PriceList) -> None:
        raise NotImplementedError
    
    def remove(self, key: str) -> None:
        raise NotImplementedError


class InMemoryPersistentCache(PersistentPriceCache):
    """Process-local store, used when no cache directory is configured."""
    
    def __init__(self):
        self._entries: Dict[str, PriceList] = {}
    
    def get(self, key: str) -> Optional[PriceList]:
        entry = self._entries.get(key)
        # Copies keep stored entries independent of the memory layer
        return copy.deepcopy(entry) if entry is not None else None
    
    def set(self, key: str, price_list: PriceList) -> None:
        self._entries[key] = copy.deepcopy(price_list)
    
    def remove(self, key: str) -> None:
        self._entries.pop(key, None)


class JsonFilePersistentCache(PersistentPriceCache):
    """One JSON document per cache key inside a directory."""
    
    def __init__(self, directory: Path):
        """
        Initialize file-backed cache.
        
        Args:
            directory: Directory holding the documents (created on first write)
        """
        self.directory = Path(directory)
    
    def get(self, key: str) -> Optional[PriceList]:
        path = document_path(self.directory, key)
        try:
            payload = read_document(path)
            if payload is None:
                return None
            price_list = _price_list_adapter.validate_json(payload)
        except OSError as error:
            raise PriceCacheStoreError(f"Failed to read {path}: {error}") from error
        except ValidationError as error:
            raise PriceCacheStoreError(f"Corrupt price cache document {path}: {error}") from error
        price_list.last_updated = as_naive_utc(price_list.last_updated)
        return price_list
    
    def set(self, key: str, price_list: PriceList) -> None:
        path = document_path(self.directory, key)
        try:
            write_document(path, _price_list_adapter.dump_json(price_list))
        except OSError as error:
            raise PriceCacheStoreError(f"Failed to write {path}: {error}") from error
    
    def remove(self, key: str) -> None:
        path = document_path(self.directory, key)
        try:
            delete_document(path)
        except OSError as error:
            raise PriceCacheStoreError(f"Failed to delete {path}: {error}") from error


def create_persistent_cache(directory: str = "") -> PersistentPriceCache:
    """
    Create the configured persistent cache backend.
    
    Args:
        directory: Cache directory; empty selects the in-memory backend
    
    Returns:
        PersistentPriceCache instance
    """
    if directory:
        logger.info(f"Using file-backed price cache at {directory}")
        return JsonFilePersistentCache(Path(directory))
    return InMemoryPersistentCache()

"""
Pricing settings stores.
Persist the user-editable PricingSettings document. Failures surface as
SettingsStoreError; PricingSettingsService falls back to defaults.
"""
from typing import Optional
from pathlib import Path
import copy
import logging

from pydantic import TypeAdapter, ValidationError

from infra_sizing.domain.settings_models import PricingSettings
from infra_sizing.utils.json_store import delete_document, read_document, write_document


logger = logging.getLogger(__name__)

_settings_adapter = TypeAdapter(PricingSettings)


class SettingsStoreError(Exception):
    """Raised when pricing settings cannot be loaded or saved."""
    pass


class SettingsStore:
    """Single-document store for pricing settings."""

    def load(self) -> Optional[PricingSettings]:
        raise NotImplementedError

    def save(self, settings: PricingSettings) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class InMemorySettingsStore(SettingsStore):
    """Process-local store, used when no settings path is configured."""

    def __init__(self):
        self._settings: Optional[PricingSettings] = None

    def load(self) -> Optional[PricingSettings]:
        return copy.deepcopy(self._settings)

    def save(self, settings: PricingSettings) -> None:
        self._settings = copy.deepcopy(settings)

    def clear(self) -> None:
        self._settings = None


class JsonFileSettingsStore(SettingsStore):
    """Stores the settings as one JSON file."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> Optional[PricingSettings]:
        """
        Read the settings document.

        Returns:
            PricingSettings, or None if no document has been saved

        Raises:
            SettingsStoreError: If the file is unreadable or invalid
        """
        try:
            payload = read_document(self.path)
        except OSError as error:
            raise SettingsStoreError(f"Failed to read {self.path}: {error}") from error
        if payload is None:
            return None

        try:
            return _settings_adapter.validate_json(payload)
        except ValidationError as error:
            raise SettingsStoreError(f"Invalid settings document {self.path}: {error}") from error

    def save(self, settings: PricingSettings) -> None:
        try:
            write_document(self.path, _settings_adapter.dump_json(settings, indent=2))
        except OSError as error:
            raise SettingsStoreError(f"Failed to write {self.path}: {error}") from error
        logger.debug(f"Saved pricing settings to {self.path}")

    def clear(self) -> None:
        try:
            delete_document(self.path)
        except OSError as error:
            raise SettingsStoreError(f"Failed to delete {self.path}: {error}") from error


def create_settings_store(path: str = "") -> SettingsStore:
    """
    Build the configured settings store.

    Args:
        path: Settings file path (empty for an in-memory store)

    Returns:
        SettingsStore instance
    """
    if path:
        logger.info(f"Using file-backed pricing settings at {path}")
        return JsonFileSettingsStore(path)
    return InMemorySettingsStore()

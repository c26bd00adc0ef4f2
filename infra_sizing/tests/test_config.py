"""
Tests for configuration validation.
"""

import logging

import pytest

from infra_sizing.core.config import Config, configure_logging


@pytest.fixture
def restore_config():
    """Snapshot class attributes changed by a test."""
    saved = {
        name: getattr(Config, name)
        for name in ("PRICING_CACHE_TTL_SECONDS", "LIVE_PRICING_TIMEOUT", "LIVE_PRICING_URL", "LOG_LEVEL")
    }
    yield
    for name, value in saved.items():
        setattr(Config, name, value)


def test_defaults_are_valid(restore_config):
    """Shipped defaults pass validation."""
    Config.LIVE_PRICING_URL = ""
    Config.validate()
    assert Config.HOURS_PER_MONTH == 730


@pytest.mark.parametrize("name,value,message", [
    ("PRICING_CACHE_TTL_SECONDS", 0, "PRICING_CACHE_TTL_SECONDS"),
    ("LIVE_PRICING_TIMEOUT", -1.0, "LIVE_PRICING_TIMEOUT"),
    ("LIVE_PRICING_URL", "ftp://prices", "LIVE_PRICING_URL"),
    ("LOG_LEVEL", "LOUD", "LOG_LEVEL"),
])
def test_invalid_values_rejected(restore_config, name, value, message):
    """Unusable settings raise ValueError naming the setting."""
    setattr(Config, name, value)
    with pytest.raises(ValueError, match=message):
        Config.validate()


def test_configure_logging_applies_level(restore_config, monkeypatch):
    """LOG_LEVEL is passed to logging.basicConfig."""
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    Config.LOG_LEVEL = "debug"
    configure_logging()
    assert calls[0]["level"] == "DEBUG"

"""
Configuration module for loading environment variables.
All tunables for pricing resolution and persistence are read at import time.
"""
import logging
import os


class Config:
    """Application configuration loaded from environment variables."""
    
    # Pricing Configuration
    PRICING_CACHE_TTL_SECONDS: int = int(os.getenv("PRICING_CACHE_TTL_SECONDS", "86400"))  # 24 hours
    HOURS_PER_MONTH: int = 730  # Standard assumption: 24/7 operation
    MONTHS_PER_YEAR: int = 12
    
    # Live pricing collaborator (disabled when URL is empty)
    LIVE_PRICING_URL: str = os.getenv("LIVE_PRICING_URL", "").rstrip("/")
    LIVE_PRICING_TIMEOUT: float = float(os.getenv("LIVE_PRICING_TIMEOUT", "10.0"))
    
    # Persistence (empty means in-memory)
    PRICE_CACHE_DIR: str = os.getenv("PRICE_CACHE_DIR", "")
    PRICING_SETTINGS_PATH: str = os.getenv("PRICING_SETTINGS_PATH", "")
    
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    
    @classmethod
    def validate(cls) -> None:
        """
        Validates that configuration values are usable.
        
        Raises:
            ValueError: If any configuration value is invalid.
        """
        if cls.PRICING_CACHE_TTL_SECONDS <= 0:
            raise ValueError("PRICING_CACHE_TTL_SECONDS must be positive")
        if cls.LIVE_PRICING_TIMEOUT <= 0:
            raise ValueError("LIVE_PRICING_TIMEOUT must be positive")
        if cls.LIVE_PRICING_URL and not cls.LIVE_PRICING_URL.startswith(("http://", "https://")):
            raise ValueError(
                f"LIVE_PRICING_URL must be a valid URL (got: {cls.LIVE_PRICING_URL})"
            )
        if cls.LOG_LEVEL.upper() not in logging.getLevelNamesMapping():
            raise ValueError(f"LOG_LEVEL is not a known level (got: {cls.LOG_LEVEL})")


def configure_logging() -> None:
    """Apply LOG_LEVEL to the root logger."""
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


config = Config()

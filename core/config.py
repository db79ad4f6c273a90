"""
Configuration Management Module

This module handles loading, validating, and providing access to client configuration
from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Validates URL, timeout, log level and credential pairing
- Provides type-safe access to configuration values
- Handles optional settings with sensible defaults

Settings never construct a client by themselves. Credentials found here are
only used when passed explicitly, e.g. through client_from_settings().

Usage:
    from core.config import settings

    print(settings.valr_base_url)
    print(settings.has_credentials)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, SecretStr


class Settings(BaseSettings):
    """
    Client Settings

    Values are automatically loaded from environment variables or .env file.

    Attributes:
        valr_base_url: Base URL of the VALR REST API (including the version segment)
        valr_api_key: API key (optional, not needed for public endpoints)
        valr_api_secret: API secret used to sign private requests (never transmitted)
        request_timeout: Total timeout for a single HTTP request in seconds
        log_level: Logging level for the "valr" logger
    """

    # ============================================
    # VALR API Configuration
    # ============================================

    valr_base_url: str = Field(
        default="https://api.valr.com/v1",
        description="VALR REST API base URL"
    )

    valr_api_key: str = Field(
        default="",
        description="VALR API key (optional for public endpoints)"
    )

    valr_api_secret: SecretStr = Field(
        default=SecretStr(""),
        description="VALR API secret (optional for public endpoints)"
    )

    # ============================================
    # Transport & Logging
    # ============================================

    request_timeout: float = Field(
        default=30,
        description="HTTP request timeout in seconds"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # ============================================
    # Pydantic Settings Configuration
    # ============================================

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False
    )

    @property
    def has_credentials(self) -> bool:
        """
        Check if both the API key and secret are configured.

        Returns:
            True if key and secret are set, False otherwise
        """
        return bool(self.valr_api_key) and bool(self.valr_api_secret.get_secret_value())


# ============================================
# Global Settings Instance
# ============================================

settings = Settings()


# ============================================
# Configuration Validation
# ============================================

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def validate_configuration(config: Settings = None) -> None:
    """
    Validate client configuration.

    Args:
        config: Settings to validate (defaults to the global settings)

    Raises:
        ValueError: If configuration is missing or invalid
    """
    # Avoid circular import (logging.py imports config.py)
    from core.logging import logger

    config = config or settings

    if not config.valr_base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid VALR_BASE_URL: '{config.valr_base_url}'. "
            f"Must start with http:// or https://"
        )

    if config.request_timeout <= 0:
        raise ValueError(f"Invalid REQUEST_TIMEOUT: {config.request_timeout}. Must be positive")

    if config.log_level.upper() not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{config.log_level}'. "
            f"Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    # A key without a secret (or the reverse) can only produce rejected requests
    has_key = bool(config.valr_api_key)
    has_secret = bool(config.valr_api_secret.get_secret_value())
    if has_key != has_secret:
        raise ValueError("VALR_API_KEY and VALR_API_SECRET must be set together")

    logger.info("Configuration validated successfully")
    logger.info(f"VALR API: {config.valr_base_url}")
    logger.info(f"Credentials: {'configured' if config.has_credentials else 'none (public only)'}")
    logger.info(f"Log level: {config.log_level.upper()}")

"""
Unified Logging Configuration

This module sets up the logging used across the client.
All modules should get their logger from here instead of using print().

Everything logs under the "valr" logger namespace, so applications embedding the
client can tune or silence it with logging.getLogger("valr").

Usage:
    from core.logging import logger, get_logger

    logger.info("General informational messages")

    log = get_logger(__name__)
    log.debug("Detailed debugging information")

Log Levels used by the client:
    DEBUG    - Request/response traces (method, path, params, status, timing)
    INFO     - Lifecycle messages (session opened/closed, configuration)
    WARNING  - Non-2xx responses
    ERROR    - Transport failures and undecodable responses

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file (default INFO).
    Request headers are never logged, they carry the API key and signature.
"""

import logging
import sys
from typing import Optional

LOGGER_NAME = "valr"


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    include_module: bool = True
) -> logging.Logger:
    """
    Configure and return the client logger.

    Only the "valr" logger is configured; the root logger of the host
    application is left alone.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string (uses default if None)
        include_timestamp: Include timestamp in log messages
        include_module: Include module name in log messages

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Client ready")
        2024-01-01 12:00:00 [INFO] valr: Client ready
    """
    if log_format is None:
        format_parts = []

        if include_timestamp:
            format_parts.append("%(asctime)s")

        format_parts.append("[%(levelname)s]")

        if include_module:
            format_parts.append("%(name)s:")

        format_parts.append("%(message)s")

        log_format = " ".join(format_parts)

    level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Replace our own handler on re-configuration instead of stacking them
    for handler in list(logger.handlers):
        if getattr(handler, "_valr_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(log_format, datefmt="%Y-%m-%d %H:%M:%S"))
    handler._valr_handler = True
    logger.addHandler(handler)
    logger.propagate = False

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

try:
    from core.config import settings
    log_level = settings.log_level if hasattr(settings, 'log_level') else "INFO"
except ImportError:
    log_level = "INFO"

logger = setup_logging(log_level=log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module or component.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Child of the "valr" logger

    Example:
        # In exchanges/valr/api_client.py:
        logger = get_logger(__name__)  # "valr.exchanges.valr.api_client"
    """
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def set_log_level(level: str) -> None:
    """
    Change the log level at runtime.

    Args:
        level: New log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(method: str, endpoint: str, params=None) -> None:
    """
    Log an API request with consistent formatting.

    Args:
        method: HTTP method (e.g., "GET")
        endpoint: API endpoint being called
        params: Query parameters (optional)

    Example:
        >>> log_api_request("GET", "/account/transactionhistory", [("limit", "10")])
        [DEBUG] API Request: GET /account/transactionhistory | Params: [('limit', '10')]
    """
    if params:
        logger.debug(f"API Request: {method} {endpoint} | Params: {params}")
    else:
        logger.debug(f"API Request: {method} {endpoint}")


def log_api_response(method: str, endpoint: str, status: int, response_time: float = None) -> None:
    """
    Log an API response with status and timing information.

    Args:
        method: HTTP method
        endpoint: API endpoint
        status: HTTP status code
        response_time: Response time in seconds (optional)

    Example:
        >>> log_api_response("GET", "/public/time", 200, 0.342)
        [DEBUG] API Response: GET /public/time | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {method} {endpoint} | Status: {status}{time_str}")


logger.debug("Logging system initialized")

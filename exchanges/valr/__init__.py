"""
VALR Exchange Connector

VALR is a South African cryptocurrency exchange offering:
- Public REST endpoints for currencies, pairs, order books and market summaries
- Private REST endpoints (signed) for balances, trades, wallets and orders

API Documentation:
    https://docs.valr.com/

Structure:
    exchanges/valr/
    ├── __init__.py          # This file (client constructors and conversions)
    ├── api_client.py        # REST API client with aiohttp
    └── auth.py              # HMAC-SHA512 request signing

Example:
    >>> client = new_public_client()
    >>> async with client:
    ...     status = await client.get_status()
    >>>
    >>> private = to_private_client(client, api_key, api_secret)
    >>> async with private:
    ...     balances = await private.get_balances()
"""

from typing import Optional

from pydantic import SecretStr

from core.config import Settings, settings
from core.logging import get_logger
from .api_client import ClientConfig, Credentials, ValrAPIClient
from .auth import authentication_hook, generate_auth_signature

logger = get_logger(__name__)

__all__ = [
    "ClientConfig",
    "Credentials",
    "ValrAPIClient",
    "authentication_hook",
    "client_from_settings",
    "generate_auth_signature",
    "new_client",
    "new_public_client",
    "to_private_client",
    "to_public_client",
]


def _config(
    credentials: Optional[Credentials],
    base_url: Optional[str],
    timeout: Optional[float]
) -> ClientConfig:
    overrides = {"credentials": credentials}
    if base_url is not None:
        overrides["base_url"] = base_url
    if timeout is not None:
        overrides["timeout"] = timeout
    return ClientConfig(**overrides)


def new_client(
    api_key: str,
    api_secret: str,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None
) -> ValrAPIClient:
    """
    Create a client that can call both public and private endpoints.

    Args:
        api_key: VALR API key
        api_secret: VALR API secret
        base_url: API root (defaults to settings.valr_base_url)
        timeout: Per-request timeout in seconds (defaults to settings.request_timeout)
    """
    credentials = Credentials(api_key=api_key, api_secret=SecretStr(api_secret))
    return ValrAPIClient(_config(credentials, base_url, timeout))


def new_public_client(
    base_url: Optional[str] = None,
    timeout: Optional[float] = None
) -> ValrAPIClient:
    """
    Create a client without credentials, for public endpoints only.

    The returned object is the same ValrAPIClient type as a private client, so
    it still passes isinstance checks against PrivateClient. Only the missing
    credentials separate the two: private calls go out unsigned and VALR
    rejects them (StatusError with status 401). Annotate parameters with
    PublicClient where a function must only use public endpoints.
    """
    return ValrAPIClient(_config(None, base_url, timeout))


def client_from_settings(config: Optional[Settings] = None) -> ValrAPIClient:
    """
    Create a client from application settings (environment / .env).

    Returns a private client when VALR_API_KEY and VALR_API_SECRET are both
    set, a public one otherwise.
    """
    config = config or settings
    credentials = None
    if config.has_credentials:
        credentials = Credentials(api_key=config.valr_api_key, api_secret=config.valr_api_secret)
    else:
        logger.info("No VALR credentials configured; creating public client")

    return ValrAPIClient(ClientConfig(
        base_url=config.valr_base_url,
        credentials=credentials,
        timeout=config.request_timeout
    ))


def to_private_client(client: ValrAPIClient, api_key: str, api_secret: str) -> ValrAPIClient:
    """
    Build a private client with the same base URL and timeout as `client`.

    The source client is left untouched and keeps its own session.
    """
    credentials = Credentials(api_key=api_key, api_secret=SecretStr(api_secret))
    return ValrAPIClient(client.config.model_copy(update={"credentials": credentials}))


def to_public_client(client: ValrAPIClient) -> ValrAPIClient:
    """
    Build a credential-less client with the same base URL and timeout as `client`.

    Same caveat as new_public_client(): the result is still a ValrAPIClient.
    """
    return ValrAPIClient(client.config.model_copy(update={"credentials": None}))

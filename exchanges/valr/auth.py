"""
VALR Request Signing

Private VALR endpoints authenticate every request with three headers:

    X-VALR-API-KEY    the API key
    X-VALR-SIGNATURE  hex HMAC-SHA512 of (timestamp + METHOD + path + body), keyed by the secret
    X-VALR-TIMESTAMP  milliseconds since epoch, the same value used in the signature

The server rejects requests whose timestamp is outside its clock-skew window,
so the timestamp is taken fresh for every request, right before signing.

Public endpoints (any path containing "public") are sent unsigned.

API Documentation:
    https://docs.valr.com/#authentication

Usage:
    hook = authentication_hook(api_key, api_secret)
    request = PendingRequest("GET", "https://api.valr.com/v1/account/balances")
    hook(request)
    request.headers["X-VALR-SIGNATURE"]
"""

import hashlib
import hmac
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlsplit

from core.exceptions import BodyReadError
from core.logging import get_logger
from core.utils.time import current_utc_timestamp

logger = get_logger(__name__)

API_KEY_HEADER = "X-VALR-API-KEY"
SIGNATURE_HEADER = "X-VALR-SIGNATURE"
TIMESTAMP_HEADER = "X-VALR-TIMESTAMP"

# Any path containing this token is treated as public and left unsigned
PUBLIC_PATH_MARKER = "public"


@dataclass
class PendingRequest:
    """
    An outgoing request right before transmission.

    Attributes:
        method: HTTP method (e.g., "GET")
        url: Full request URL (query string, if any, is not part of the signed path)
        headers: Mutable header mapping; the signing hook writes into it
        body: None, bytes, str, or a seekable binary file-like object
    """

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None

    @property
    def path(self) -> str:
        return urlsplit(self.url).path


RequestHook = Callable[[PendingRequest], None]


def generate_auth_signature(
    secret: str,
    timestamp: str,
    method: str,
    path: str,
    body: Optional[bytes] = None
) -> str:
    """
    Compute the VALR request signature.

    Args:
        secret: API secret (HMAC key)
        timestamp: Milliseconds since epoch as a base-10 string
        method: HTTP method, uppercased before signing
        path: URL path including the version prefix (e.g., "/v1/account/balances")
        body: Raw request body bytes (None or b"" for no body)

    Returns:
        Lowercase hex HMAC-SHA512 digest

    Example:
        >>> generate_auth_signature(secret, "1558014486185", "GET", "/v1/account/balances")
        '9d52c181ed69460b49307b7891f04658e938b21181173844b5018b2fe783a6d4...'
    """
    mac = hmac.new(secret.encode("utf-8"), digestmod=hashlib.sha512)
    mac.update(timestamp.encode("utf-8"))
    mac.update(method.upper().encode("utf-8"))
    mac.update(path.encode("utf-8"))
    mac.update(body or b"")
    return mac.hexdigest()


def is_public_path(path: str) -> bool:
    """Plain substring match, so a private path containing "public" also counts."""
    return PUBLIC_PATH_MARKER in path


def read_body(body: Any) -> bytes:
    """
    Read the request body for signing without consuming it.

    File-like bodies are read from their current position and then rewound
    to it, so the transport can still send them afterwards.

    Raises:
        BodyReadError: If the body cannot be read or rewound
    """
    if body is None:
        return b""
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")

    if not hasattr(body, "read"):
        raise BodyReadError(f"failed to get request body: unsupported body type {type(body).__name__}")

    try:
        position = body.tell()
        data = body.read()
        body.seek(position)
    except (OSError, ValueError) as e:
        raise BodyReadError(f"failed to read request body: {e}") from e

    if isinstance(data, str):
        data = data.encode("utf-8")
    return data


def authentication_hook(
    key: str,
    secret: str,
    clock: Optional[Callable[[], int]] = None
) -> RequestHook:
    """
    Build the hook that signs requests to private endpoints.

    Args:
        key: API key
        secret: API secret
        clock: Returns the current time in milliseconds (defaults to wall clock)

    Returns:
        Callable taking a PendingRequest and setting the auth headers in place
    """
    clock = clock or (lambda: current_utc_timestamp(milliseconds=True))

    def hook(request: PendingRequest) -> None:
        path = request.path
        if is_public_path(path):
            return

        body = read_body(request.body)

        timestamp = str(clock())
        signature = generate_auth_signature(secret, timestamp, request.method, path, body)

        request.headers[API_KEY_HEADER] = key
        request.headers[SIGNATURE_HEADER] = signature
        request.headers[TIMESTAMP_HEADER] = timestamp
        logger.debug(f"Signed {request.method.upper()} {path} at {timestamp}")

    return hook

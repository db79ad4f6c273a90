"""
Client Exceptions

Typed exception hierarchy for VALR API calls. Every failure raised by an
endpoint method is a ValrError subclass, so callers can tell apart:

    TransportError  - the request never got a response (connection, timeout)
    BodyReadError   - the request body could not be read for signing
    StatusError     - the server answered with a non-2xx status code
    DecodeError     - the server answered 2xx but the body was not the expected shape

Each error carries `operation`, the short description of which call failed.
None of these are retried by the client; deciding to retry is up to the caller.

Usage:
    from core.exceptions import StatusError

    try:
        balances = await client.get_balances()
    except StatusError as e:
        print(f"VALR rejected the request: {e.status_code}")
"""

from typing import Optional


class ValrError(RuntimeError):
    """
    Base class for all VALR client errors.

    Attributes:
        operation: Short static description of the failed operation
                   (e.g., "fetch account balances")
    """

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.operation = operation


class TransportError(ValrError):
    """Network or connection failure before a response was received."""


class BodyReadError(ValrError):
    """The request body could not be read or rewound prior to signing."""


class StatusError(ValrError):
    """
    The server responded with a non-2xx status code.

    The status code is surfaced as-is; the client does not interpret
    specific codes (rate limiting vs. authentication failure, etc).

    Attributes:
        status_code: HTTP status code received
        body: Response body text (truncated), for diagnostics
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: str = "",
        operation: Optional[str] = None
    ):
        super().__init__(message, operation=operation)
        self.status_code = status_code
        self.body = body


class DecodeError(ValrError):
    """The response was successful but its body did not match the expected shape."""

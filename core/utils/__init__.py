"""
Core Utilities Package

This package contains utility functions and helpers used throughout the client.

Modules:
    - time: Millisecond timestamps for signing and ISO-8601 formatting for query params
"""

from core.utils.time import current_utc_timestamp, datetime_to_timestamp, to_iso8601

__all__ = ["current_utc_timestamp", "datetime_to_timestamp", "to_iso8601"]

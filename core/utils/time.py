"""
Time Utilities

VALR uses two time representations:
- Request signing: milliseconds since epoch, as a base-10 string
- Query parameters (startTime/endTime): ISO-8601 timestamps in UTC

The utilities in this module produce both from Python datetime objects.
"""

from datetime import datetime, timezone


def datetime_to_timestamp(dt: datetime, milliseconds: bool = False) -> int:
    """
    Convert a datetime object to Unix timestamp.

    Args:
        dt: Datetime object (can be naive or timezone-aware)
        milliseconds: If True, return milliseconds; if False, return seconds

    Returns:
        int: Unix timestamp in seconds or milliseconds

    Examples:
        >>> dt = datetime(2019, 5, 16, 13, 48, 6, 185000, tzinfo=timezone.utc)
        >>> datetime_to_timestamp(dt)
        1558014486

        >>> datetime_to_timestamp(dt, milliseconds=True)
        1558014486185

    Notes:
        - If datetime is naive (no timezone), UTC is assumed
        - Sub-millisecond precision is truncated
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    if milliseconds:
        # Integer arithmetic on the timedelta keeps the millisecond digits exact
        delta = dt - datetime(1970, 1, 1, tzinfo=timezone.utc)
        return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000

    return int(dt.timestamp())


def current_utc_timestamp(milliseconds: bool = False) -> int:
    """
    Get current UTC timestamp.

    Args:
        milliseconds: If True, return milliseconds; if False, return seconds

    Returns:
        int: Current Unix timestamp
    """
    return datetime_to_timestamp(datetime.now(timezone.utc), milliseconds)


def to_iso8601(dt: datetime) -> str:
    """
    Format a datetime as an ISO-8601 UTC string with a "Z" suffix.

    Examples:
        >>> to_iso8601(datetime(2019, 5, 7, 10, 55, 9, 949000, tzinfo=timezone.utc))
        '2019-05-07T10:55:09.949Z'

        >>> to_iso8601(datetime(2019, 5, 7))
        '2019-05-07T00:00:00.000Z'
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"

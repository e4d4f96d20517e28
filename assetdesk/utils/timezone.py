"""
UTC helpers.
The database stores naive UTC datetimes; the API speaks ISO-8601 with offsets.
"""
from datetime import datetime, timezone


def to_utc_naive(value):
    """Convert an aware datetime to naive UTC. Naive values are assumed UTC already."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def isoformat_utc(value):
    """Format a stored datetime as ISO-8601 UTC with a Z suffix."""
    if value is None:
        return None
    return to_utc_naive(value).isoformat(timespec='seconds') + 'Z'


def month_label(value):
    """'2024-03-15 19:00' -> 'March 2024'."""
    return value.strftime('%B %Y')

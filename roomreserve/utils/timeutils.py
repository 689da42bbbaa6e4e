from datetime import datetime, timedelta
import math
import pytz


def utcnow():
    return datetime.now(pytz.utc)


def is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


def to_utc(value: datetime) -> datetime:
    """Normalize a datetime to an aware UTC instant.

    Naive values are assumed to already be UTC. Only storage code should
    rely on that; request input goes through parse_instant.
    """
    if not is_aware(value):
        return pytz.utc.localize(value.replace(tzinfo=None))
    return value.astimezone(pytz.utc)


def parse_instant(value) -> datetime:
    """Accept an aware datetime or an ISO 8601 string with an offset, return aware UTC.

    Values without a timezone are refused rather than guessed.
    """
    if isinstance(value, str):
        # fromisoformat does not understand a trailing Z before 3.11
        if value.endswith('Z'):
            value = value[:-1] + '+00:00'
        value = datetime.fromisoformat(value)
    if not isinstance(value, datetime):
        raise TypeError(f"Expected datetime or ISO string, got {type(value).__name__}")
    if not is_aware(value):
        raise ValueError(f"Timestamp {value.isoformat()} has no timezone")
    return value.astimezone(pytz.utc)


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def days_spanned(start: datetime, end: datetime) -> int:
    """Number of whole days covered by [start, end), rounded up."""
    return math.ceil((end - start) / timedelta(days=1))

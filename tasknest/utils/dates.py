"""Day-boundary helpers.

Everything is persisted as naive UTC. The per-view endpoints (today, missed,
scheduled) cut days at local server midnight, while the dashboard cuts them at
UTC midnight; both boundaries are returned here as naive UTC so they can be
compared directly against stored columns.
"""
from datetime import UTC, datetime, time, timedelta
from typing import Optional, Tuple


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an incoming datetime: aware values are converted to UTC,
    naive values are taken to already be UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


def local_day_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Start of the current local day and of the next one, as naive UTC."""
    if now is not None and now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    today = (now or datetime.now(UTC)).astimezone().date()
    # naive datetimes passed to astimezone() are read as local time
    start = datetime.combine(today, time(0)).astimezone()
    tomorrow = datetime.combine(today + timedelta(days=1), time(0)).astimezone()
    return to_naive_utc(start), to_naive_utc(tomorrow)


def utc_day_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Start of the current UTC calendar day and of the next one, as naive UTC."""
    current = to_naive_utc(now or datetime.now(UTC))
    start = datetime.combine(current.date(), time(0))
    return start, start + timedelta(days=1)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with millisecond precision and a Z suffix, or None."""
    if value is None:
        return None
    return to_naive_utc(value).isoformat(timespec="milliseconds") + "Z"

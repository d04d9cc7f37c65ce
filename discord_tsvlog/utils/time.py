from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """
    Format a capture time for log rows.

    Fixed width: microsecond precision and a numeric UTC offset, e.g.
    2024-05-01T10:00:00.000000+00:00. Naive datetimes are taken as UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="microseconds")


def log_timestamp() -> str:
    """Capture time for a row written now."""
    return format_timestamp(utcnow())

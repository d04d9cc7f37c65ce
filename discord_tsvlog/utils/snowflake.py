# discord_tsvlog/utils/snowflake.py
from __future__ import annotations

from datetime import datetime, timezone

DISCORD_EPOCH = 1420070400000  # 2015-01-01 UTC (ms)


def snowflake_to_datetime(snowflake: int | str) -> datetime:
    ms = (int(snowflake) >> 22) + DISCORD_EPOCH
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


def snowflake_date(snowflake: int | str) -> str:
    """Creation date of a snowflake as YYYY-MM-DD, for progress output."""
    return snowflake_to_datetime(snowflake).strftime("%Y-%m-%d")


def snowflake_order(value: str) -> tuple[int, int, str]:
    """Sort key putting numeric ids in numeric order, anything else after."""
    if value.isdigit():
        return (0, int(value), value)
    return (1, 0, value)

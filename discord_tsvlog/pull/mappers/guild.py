"""Guild API JSON to entity mapper."""

from __future__ import annotations

from typing import Any

from discord_tsvlog.logentry import Guild


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def map_guild(data: dict[str, Any]) -> Guild:
    """Convert Discord API guild JSON to a Guild entity."""
    return Guild(
        id=str(data["id"]),
        name=data.get("name") or "",
        owner_id=_str(data.get("owner_id")),
        icon=_str(data.get("icon")),
        splash=_str(data.get("splash")),
        afk_channel_id=_str(data.get("afk_channel_id")),
        afk_timeout=int(data.get("afk_timeout") or 0),
        widget_enabled=bool(data.get("widget_enabled", False)),
        widget_channel_id=_str(data.get("widget_channel_id")),
    )

"""Emoji API JSON to entity mapper."""

from __future__ import annotations

from typing import Any

from discord_tsvlog.logentry import Emoji


def map_emoji(data: dict[str, Any]) -> Emoji:
    """Convert Discord API emoji JSON to an Emoji entity."""
    return Emoji(
        id=str(data["id"]),
        name=data.get("name") or "",
        require_colons=bool(data.get("require_colons", True)),
        animated=bool(data.get("animated", False)),
    )


def emoji_api_name(data: dict[str, Any]) -> str:
    """Name used to address an emoji in the reactions API.

    Custom emoji are "name:id", unicode emoji are the character itself.
    """
    name = data.get("name") or ""
    if data.get("id"):
        return f"{name}:{data['id']}"
    return name

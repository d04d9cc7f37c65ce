"""Guild member API JSON to entity mapper."""

from __future__ import annotations

from typing import Any

from discord_tsvlog.logentry import Member


def map_member(data: dict[str, Any]) -> Member:
    """Convert Discord API guild member JSON to a Member entity.

    Args:
        data: Raw guild member object (with nested user) from Discord API

    Returns:
        Member entity
    """
    user = data["user"]
    return Member(
        user_id=str(user["id"]),
        username=user.get("username") or "",
        discriminator=user.get("discriminator") or "",
        avatar=user.get("avatar") or "",
        nick=data.get("nick") or "",
        roles=tuple(str(r) for r in data.get("roles") or []),
    )

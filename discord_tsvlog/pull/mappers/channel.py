"""Channel API JSON to entity mapper."""

from __future__ import annotations

from typing import Any

from discord_tsvlog.logentry import Channel, PermissionOverwrite


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def map_channel(data: dict[str, Any]) -> Channel:
    """Convert Discord API channel JSON to a Channel entity."""
    return Channel(
        id=str(data["id"]),
        type=int(data["type"]),
        position=int(data.get("position") or 0),
        name=_str(data.get("name")),
        topic=_str(data.get("topic")),
        nsfw=bool(data.get("nsfw", False)),
        parent_id=_str(data.get("parent_id")),
        recipient_ids=tuple(str(u["id"]) for u in data.get("recipients") or []),
        icon=_str(data.get("icon")),
    )


def map_permission_overwrites(data: dict[str, Any]) -> list[PermissionOverwrite]:
    """Map a channel's permission overwrites, tagged with the channel id."""
    channel_id = str(data["id"])
    return [
        PermissionOverwrite(
            id=str(o["id"]),
            type=int(o["type"]),
            channel_id=channel_id,
            allow=int(o.get("allow", "0")),
            deny=int(o.get("deny", "0")),
        )
        for o in data.get("permission_overwrites") or []
    ]


# Channel type constants for reference
CHANNEL_TYPE_TEXT = 0
CHANNEL_TYPE_DM = 1
CHANNEL_TYPE_VOICE = 2
CHANNEL_TYPE_GROUP_DM = 3
CHANNEL_TYPE_CATEGORY = 4
CHANNEL_TYPE_ANNOUNCEMENT = 5
CHANNEL_TYPE_ANNOUNCEMENT_THREAD = 10
CHANNEL_TYPE_PUBLIC_THREAD = 11
CHANNEL_TYPE_PRIVATE_THREAD = 12
CHANNEL_TYPE_STAGE = 13
CHANNEL_TYPE_FORUM = 15
CHANNEL_TYPE_MEDIA = 16


def has_messages(channel_type: int) -> bool:
    """Check if a guild channel type carries its own message history."""
    return channel_type in (
        CHANNEL_TYPE_TEXT,
        CHANNEL_TYPE_ANNOUNCEMENT,
        CHANNEL_TYPE_ANNOUNCEMENT_THREAD,
        CHANNEL_TYPE_PUBLIC_THREAD,
        CHANNEL_TYPE_PRIVATE_THREAD,
        CHANNEL_TYPE_VOICE,  # Voice channels can have text too
        CHANNEL_TYPE_STAGE,  # Stage channels can have text too
    )

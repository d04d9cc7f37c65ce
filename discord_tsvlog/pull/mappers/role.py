"""Role API JSON to entity mapper."""

from __future__ import annotations

from typing import Any

from discord_tsvlog.logentry import Role


def map_role(data: dict[str, Any]) -> Role:
    """Convert Discord API role JSON to a Role entity.

    Permissions arrive as a decimal string bitfield.
    """
    return Role(
        id=str(data["id"]),
        name=data.get("name") or "",
        color=int(data.get("color", 0)),
        position=int(data.get("position", 0)),
        permissions=int(data.get("permissions", "0")),
        hoist=bool(data.get("hoist", False)),
    )

"""Column layout of log rows.

Every row starts with four header columns followed by the fields of one
entity type. The field columns of each type are fixed in count and order;
readers ignore any trailing columns beyond the ones listed here.
"""

from __future__ import annotations

# Header column indices
H_TIME = 0
H_FETCH_TYPE = 1
H_OP = 2
H_TYPE = 3
HEADER_WIDTH = 4

# Fetch types. Pulls write "history"; "live" is reserved for rows captured
# from the real-time gateway and is accepted by readers.
FETCH_HISTORY = "history"
FETCH_LIVE = "live"

# Operations (only "add" is produced; the column is reserved for removals/updates)
OP_ADD = "add"

# Entity type tags
MESSAGE = "message"
ATTACHMENT = "attachment"
REACTION = "reaction"
EMBED = "embed"
GUILD = "guild"
MEMBER = "member"
ROLE = "role"
CHANNEL = "channel"
PERMISSION_OVERWRITE = "permoverwrite"
EMOJI = "emoji"

MULTI_VALUE_SEPARATOR = ","

COLUMNS: dict[str, tuple[str, ...]] = {
    MESSAGE: (
        "id",
        "author_id",
        "edited_timestamp",
        "tts",
        "content",
        "webhook",
        "author_username",
        "author_avatar",
        "type",
        "ref_guild_id",
        "ref_channel_id",
        "ref_message_id",
    ),
    ATTACHMENT: ("id", "message_id", "filename"),
    REACTION: ("user_id", "message_id", "emoji", "count"),
    EMBED: ("message_id", "embed"),
    GUILD: (
        "id",
        "name",
        "icon",
        "splash",
        "owner_id",
        "afk_channel_id",
        "afk_timeout",
        "embeddable",
        "widget_channel_id",
    ),
    MEMBER: ("user_id", "username", "discriminator", "avatar", "nick", "roles"),
    ROLE: ("id", "name", "color", "position", "permissions", "hoist"),
    CHANNEL: (
        "id",
        "type",
        "position",
        "name",
        "topic",
        "nsfw",
        "parent_id",
        "recipients",
        "icon",
    ),
    PERMISSION_OVERWRITE: ("id", "type", "allow", "deny", "channel_id"),
    EMOJI: ("id", "name", "nocolons"),
}

# Columns identifying "the same entity" across rows, used for change detection.
KEY_COLUMNS: dict[str, tuple[int, ...]] = {
    MESSAGE: (0,),
    ATTACHMENT: (0,),
    REACTION: (1, 2, 0),
    EMBED: (0,),
    GUILD: (0,),
    MEMBER: (0,),
    ROLE: (0,),
    CHANNEL: (0,),
    PERMISSION_OVERWRITE: (4, 0),
    EMOJI: (0,),
}

ENTITY_TYPES = frozenset(COLUMNS)


def field_count(entity_type: str) -> int:
    """Number of field columns for an entity type."""
    return len(COLUMNS[entity_type])


def row_key(entity_type: str, fields: tuple[str, ...]) -> tuple[str, ...]:
    """Extract the identity of a row from its field columns."""
    return tuple(fields[i] for i in KEY_COLUMNS[entity_type])

"""Log entry model: entity types, column schema and row encoding."""

from discord_tsvlog.logentry.encoder import (
    LogEntry,
    UnsupportedEntityError,
    encode,
    entity_type_of,
    make_entry,
)
from discord_tsvlog.logentry.entities import (
    Attachment,
    Channel,
    Embed,
    Emoji,
    Entity,
    Guild,
    Member,
    Message,
    MessageReference,
    PermissionOverwrite,
    Reaction,
    Role,
)

__all__ = [
    "Attachment",
    "Channel",
    "Embed",
    "Emoji",
    "Entity",
    "Guild",
    "LogEntry",
    "Member",
    "Message",
    "MessageReference",
    "PermissionOverwrite",
    "Reaction",
    "Role",
    "UnsupportedEntityError",
    "encode",
    "entity_type_of",
    "make_entry",
]

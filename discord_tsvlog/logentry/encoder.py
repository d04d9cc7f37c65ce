"""Canonical row encoding of entities.

``encode`` turns an entity into its flat field tuple; ``make_entry`` prefixes
it with the capture timestamp, fetch type, operation and entity type. Both are
pure: nothing is written and the entity is not modified.
"""

from __future__ import annotations

import json
import logging
from functools import singledispatch
from typing import NamedTuple

from discord_tsvlog.logentry import schema
from discord_tsvlog.logentry.entities import (
    ENTITY_CLASSES,
    Attachment,
    Channel,
    Embed,
    Emoji,
    Entity,
    Guild,
    Member,
    Message,
    PermissionOverwrite,
    Reaction,
    Role,
)
from discord_tsvlog.utils.snowflake import snowflake_order
from discord_tsvlog.utils.time import log_timestamp

log = logging.getLogger(__name__)


class UnsupportedEntityError(TypeError):
    """Raised when asked to encode a value that is not a known entity."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"unsupported entity type: {type(value).__name__}")


class LogEntry(NamedTuple):
    """One log row: header columns plus the entity's field tuple."""

    timestamp: str
    fetch_type: str
    operation: str
    entity_type: str
    fields: tuple[str, ...]

    @property
    def key(self) -> tuple[str, ...]:
        return schema.row_key(self.entity_type, self.fields)

    def columns(self) -> tuple[str, ...]:
        return (
            self.timestamp,
            self.fetch_type,
            self.operation,
            self.entity_type,
            *self.fields,
        )


MESSAGE_TYPE_NAMES = {
    0: "",
    1: "recipient_add",
    2: "recipient_remove",
    3: "call",
    4: "channel_name_change",
    5: "channel_icon_change",
    6: "channel_pinned_message",
    7: "guild_member_join",
    19: "reply",
    20: "application_command",
}

CHANNEL_TYPE_NAMES = {
    0: "text",
    1: "dm",
    2: "voice",
    3: "groupdm",
    4: "category",
    5: "news",
    6: "store",
    10: "news_thread",
    11: "public_thread",
    12: "private_thread",
    13: "stage",
    14: "directory",
    15: "forum",
    16: "media",
}

OVERWRITE_TYPE_NAMES = {
    0: "role",
    1: "member",
}

INVALID = "invalid"


def format_flag(name: str, value: bool) -> str:
    """Booleans are stored as the flag's name when set, empty otherwise."""
    return name if value else ""


def join_ids(ids: tuple[str, ...]) -> str:
    """Sorted, comma-joined id list (order-stable for change detection)."""
    return schema.MULTI_VALUE_SEPARATOR.join(sorted(ids, key=snowflake_order))


def format_message_type(value: int) -> str:
    try:
        return MESSAGE_TYPE_NAMES[value]
    except KeyError:
        log.warning("unsupported message type %s", value)
        return f"unknown-{value}"


def format_channel_type(value: int) -> str:
    try:
        return CHANNEL_TYPE_NAMES[value]
    except KeyError:
        log.warning("unsupported channel type %s", value)
        return INVALID


def format_overwrite_type(value: int) -> str:
    try:
        return OVERWRITE_TYPE_NAMES[value]
    except KeyError:
        log.warning("unsupported permission overwrite type %s", value)
        return INVALID


@singledispatch
def encode(entity: object) -> tuple[str, ...]:
    """Encode an entity into its canonical field tuple."""
    raise UnsupportedEntityError(entity)


@encode.register
def _(entity: Message) -> tuple[str, ...]:
    ref = entity.reference
    webhook = bool(entity.webhook_id)
    return (
        entity.id,
        entity.author_id,
        entity.edited_timestamp,
        format_flag("tts", entity.tts),
        entity.content,
        format_flag("webhook", webhook),
        # only webhooks can override the author's name and avatar
        entity.author_username if webhook else "",
        entity.author_avatar if webhook else "",
        format_message_type(entity.type),
        ref.guild_id if ref else "",
        ref.channel_id if ref else "",
        ref.message_id if ref else "",
    )


@encode.register
def _(entity: Attachment) -> tuple[str, ...]:
    return (entity.id, entity.message_id, entity.filename)


@encode.register
def _(entity: Reaction) -> tuple[str, ...]:
    return (entity.user_id, entity.message_id, entity.emoji, str(entity.count))


@encode.register
def _(entity: Embed) -> tuple[str, ...]:
    payload = json.dumps(
        entity.payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )
    return (entity.message_id, payload)


@encode.register
def _(entity: Guild) -> tuple[str, ...]:
    return (
        entity.id,
        entity.name,
        entity.icon,
        entity.splash,
        entity.owner_id,
        entity.afk_channel_id,
        str(entity.afk_timeout),
        format_flag("embeddable", entity.widget_enabled),
        entity.widget_channel_id,
    )


@encode.register
def _(entity: Member) -> tuple[str, ...]:
    return (
        entity.user_id,
        entity.username,
        entity.discriminator,
        entity.avatar,
        entity.nick,
        join_ids(entity.roles),
    )


@encode.register
def _(entity: Role) -> tuple[str, ...]:
    return (
        entity.id,
        entity.name,
        str(entity.color),
        str(entity.position),
        str(entity.permissions),
        format_flag("hoist", entity.hoist),
    )


@encode.register
def _(entity: Channel) -> tuple[str, ...]:
    return (
        entity.id,
        format_channel_type(entity.type),
        str(entity.position),
        entity.name,
        entity.topic,
        format_flag("nsfw", entity.nsfw),
        entity.parent_id,
        join_ids(entity.recipient_ids),
        entity.icon,
    )


@encode.register
def _(entity: PermissionOverwrite) -> tuple[str, ...]:
    return (
        entity.id,
        format_overwrite_type(entity.type),
        str(entity.allow),
        str(entity.deny),
        entity.channel_id,
    )


@encode.register
def _(entity: Emoji) -> tuple[str, ...]:
    return (entity.id, entity.name, format_flag("nocolons", not entity.require_colons))


def entity_type_of(entity: object) -> str:
    """Return the type tag of an entity, failing on anything else."""
    if not isinstance(entity, ENTITY_CLASSES):
        raise UnsupportedEntityError(entity)
    return entity.entity_type  # type: ignore[attr-defined]


def make_entry(
    fetch_type: str,
    operation: str,
    entity: Entity,
    timestamp: str | None = None,
) -> LogEntry:
    """Build a complete log entry for an entity, stamped with capture time."""
    entity_type = entity_type_of(entity)
    return LogEntry(
        timestamp=timestamp if timestamp is not None else log_timestamp(),
        fetch_type=fetch_type,
        operation=operation,
        entity_type=entity_type,
        fields=encode(entity),
    )

"""Typed snapshots of the remote entities that end up in log rows.

Each class carries its entity type tag. ``Entity`` is the closed union of all
of them; the encoder handles exactly these classes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Union

from discord_tsvlog.logentry import schema


@dataclass(frozen=True)
class MessageReference:
    """Target of a reply, crosspost or pin notification."""

    guild_id: str = ""
    channel_id: str = ""
    message_id: str = ""


@dataclass(frozen=True)
class Message:
    entity_type: ClassVar[str] = schema.MESSAGE

    id: str
    channel_id: str
    author_id: str
    author_username: str = ""
    author_avatar: str = ""
    content: str = ""
    edited_timestamp: str = ""
    tts: bool = False
    webhook_id: str = ""
    type: int = 0
    reference: MessageReference | None = None


@dataclass(frozen=True)
class Attachment:
    entity_type: ClassVar[str] = schema.ATTACHMENT

    id: str
    message_id: str
    filename: str
    url: str = ""


@dataclass(frozen=True)
class Reaction:
    """One user's reaction to a message.

    An empty ``user_id`` marks an anonymous reaction synthesized for users the
    API would not enumerate.
    """

    entity_type: ClassVar[str] = schema.REACTION

    user_id: str
    message_id: str
    emoji: str
    count: int = 1


@dataclass(frozen=True)
class Embed:
    entity_type: ClassVar[str] = schema.EMBED

    message_id: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Guild:
    entity_type: ClassVar[str] = schema.GUILD

    id: str
    name: str
    owner_id: str
    icon: str = ""
    splash: str = ""
    afk_channel_id: str = ""
    afk_timeout: int = 0
    widget_enabled: bool = False
    widget_channel_id: str = ""


@dataclass(frozen=True)
class Member:
    entity_type: ClassVar[str] = schema.MEMBER

    user_id: str
    username: str
    discriminator: str = ""
    avatar: str = ""
    nick: str = ""
    roles: tuple[str, ...] = ()


@dataclass(frozen=True)
class Role:
    entity_type: ClassVar[str] = schema.ROLE

    id: str
    name: str
    color: int = 0
    position: int = 0
    permissions: int = 0
    hoist: bool = False


@dataclass(frozen=True)
class Channel:
    entity_type: ClassVar[str] = schema.CHANNEL

    id: str
    type: int
    position: int = 0
    name: str = ""
    topic: str = ""
    nsfw: bool = False
    parent_id: str = ""
    recipient_ids: tuple[str, ...] = ()
    icon: str = ""


@dataclass(frozen=True)
class PermissionOverwrite:
    entity_type: ClassVar[str] = schema.PERMISSION_OVERWRITE

    id: str
    type: int
    channel_id: str
    allow: int = 0
    deny: int = 0


@dataclass(frozen=True)
class Emoji:
    entity_type: ClassVar[str] = schema.EMOJI

    id: str
    name: str
    require_colons: bool = True
    animated: bool = False


Entity = Union[
    Message,
    Attachment,
    Reaction,
    Embed,
    Guild,
    Member,
    Role,
    Channel,
    PermissionOverwrite,
    Emoji,
]

ENTITY_CLASSES: tuple[type, ...] = (
    Message,
    Attachment,
    Reaction,
    Embed,
    Guild,
    Member,
    Role,
    Channel,
    PermissionOverwrite,
    Emoji,
)

"""Message API JSON to entity mapper."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from discord_tsvlog.logentry import Attachment, Embed, Message, MessageReference
from discord_tsvlog.pull.mappers.emoji import emoji_api_name


@dataclass(frozen=True)
class ReactionSummary:
    """A reaction as reported on the message: emoji and total count."""

    emoji: str
    count: int


@dataclass
class MessageBundle:
    """A message plus the rows that hang off it."""

    message: Message
    embeds: list[Embed] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    reactions: list[ReactionSummary] = field(default_factory=list)


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def map_message(data: dict[str, Any]) -> Message:
    """Convert Discord API message JSON to a Message entity.

    Args:
        data: Raw message object from Discord API

    Returns:
        Message entity
    """
    author = data.get("author") or {}

    reference = None
    if data.get("message_reference"):
        ref = data["message_reference"]
        reference = MessageReference(
            guild_id=_str(ref.get("guild_id")),
            channel_id=_str(ref.get("channel_id")),
            message_id=_str(ref.get("message_id")),
        )

    return Message(
        id=str(data["id"]),
        channel_id=_str(data.get("channel_id")),
        author_id=_str(author.get("id")),
        author_username=_str(author.get("username")),
        author_avatar=_str(author.get("avatar")),
        content=data.get("content") or "",
        edited_timestamp=_str(data.get("edited_timestamp")),
        tts=bool(data.get("tts", False)),
        webhook_id=_str(data.get("webhook_id")),
        type=int(data.get("type", 0)),
        reference=reference,
    )


def map_attachment(data: dict[str, Any], message_id: str) -> Attachment:
    """Convert Discord API attachment JSON to an Attachment entity."""
    return Attachment(
        id=str(data["id"]),
        message_id=message_id,
        filename=data.get("filename") or "",
        url=data.get("url") or "",
    )


def map_reaction_summary(data: dict[str, Any]) -> ReactionSummary:
    """Convert a reaction object embedded in a message."""
    return ReactionSummary(
        emoji=emoji_api_name(data["emoji"]),
        count=int(data.get("count", 0)),
    )


def map_message_bundle(data: dict[str, Any]) -> MessageBundle:
    """Map a message and its embeds, attachments and reaction summaries."""
    message = map_message(data)
    return MessageBundle(
        message=message,
        embeds=[Embed(message_id=message.id, payload=e) for e in data.get("embeds") or []],
        attachments=[map_attachment(a, message.id) for a in data.get("attachments") or []],
        reactions=[map_reaction_summary(r) for r in data.get("reactions") or []],
    )

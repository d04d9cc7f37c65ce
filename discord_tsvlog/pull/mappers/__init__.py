"""Mappers for converting Discord API JSON to log entities."""

from discord_tsvlog.pull.mappers.channel import map_channel, map_permission_overwrites
from discord_tsvlog.pull.mappers.emoji import emoji_api_name, map_emoji
from discord_tsvlog.pull.mappers.guild import map_guild
from discord_tsvlog.pull.mappers.member import map_member
from discord_tsvlog.pull.mappers.message import (
    MessageBundle,
    ReactionSummary,
    map_attachment,
    map_message,
    map_message_bundle,
)
from discord_tsvlog.pull.mappers.role import map_role

__all__ = [
    "MessageBundle",
    "ReactionSummary",
    "emoji_api_name",
    "map_attachment",
    "map_channel",
    "map_emoji",
    "map_guild",
    "map_member",
    "map_message",
    "map_message_bundle",
    "map_permission_overwrites",
    "map_role",
]

"""Guild metadata sync.

Writes the guild row, its channels and their permission overwrites, roles,
emoji and members to the guild log, appending only rows that differ from the
last known state replayed from that same file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

from discord_tsvlog.logstore import EntryCache, LogWriter
from discord_tsvlog.pull.client import DiscordAPIError
from discord_tsvlog.pull.logger import logger
from discord_tsvlog.pull.mappers import (
    map_channel,
    map_emoji,
    map_guild,
    map_member,
    map_permission_overwrites,
    map_role,
)
from discord_tsvlog.pull.media import MediaResult

if TYPE_CHECKING:
    from discord_tsvlog.pull.client import DiscordClient
    from discord_tsvlog.pull.media import MediaDownloader


@dataclass
class GuildSyncResult:
    """Result of a guild sync."""

    guild_name: str = ""
    rows_written: int = 0
    members_seen: int = 0
    media_failures: int = 0
    members_complete: bool = True


def _note_media(result: GuildSyncResult, scope: str, outcome: MediaResult) -> None:
    if outcome.failed:
        result.media_failures += 1
        logger.media_failed(scope, outcome.kind, outcome.locator, outcome.error or "")


async def sync_guild(
    client: "DiscordClient",
    media: "MediaDownloader",
    writer: LogWriter,
    cache: EntryCache,
    guild_id: str,
    member_page_size: int = 1000,
) -> GuildSyncResult:
    """Capture the current state of a guild.

    Args:
        client: Discord API client
        media: Downloader for icon, splash, emoji and avatars
        writer: Open writer on the guild log
        cache: Last known rows replayed from the guild log (updated in place)
        guild_id: Guild to sync
        member_page_size: Members per page

    Returns:
        GuildSyncResult with row and member counts

    Raises:
        DiscordAPIError, httpx.HTTPError: if the guild or its channel list
            cannot be fetched; nothing has been written in that case.
    """
    guild_data = await client.get_guild(guild_id)
    channels_data = await client.get_guild_channels(guild_id)

    guild = map_guild(guild_data)
    result = GuildSyncResult(guild_name=guild.name)
    logger.guild_start(guild_id, guild.name)

    if guild.icon:
        _note_media(result, guild_id, await media.icon(guild_id, guild.icon))
    if guild.splash:
        _note_media(result, guild_id, await media.splash(guild_id, guild.splash))

    if writer.write_if_changed(guild, cache):
        result.rows_written += 1

    written = 0
    for channel_data in channels_data:
        written += writer.write_if_changed(map_channel(channel_data), cache)
        for overwrite in map_permission_overwrites(channel_data):
            written += writer.write_if_changed(overwrite, cache)
    logger.guild_entities("Channels", len(channels_data), written)
    result.rows_written += written

    roles_data = guild_data.get("roles") or []
    written = 0
    for role_data in roles_data:
        written += writer.write_if_changed(map_role(role_data), cache)
    logger.guild_entities("Roles", len(roles_data), written)
    result.rows_written += written

    emojis_data = guild_data.get("emojis") or []
    written = 0
    for emoji_data in emojis_data:
        emoji = map_emoji(emoji_data)
        _note_media(result, guild_id, await media.emoji(emoji.id, emoji.animated))
        written += writer.write_if_changed(emoji, cache)
    logger.guild_entities("Emoji", len(emojis_data), written)
    result.rows_written += written

    await _sync_members(client, media, writer, cache, guild_id, member_page_size, result)
    return result


async def _sync_members(
    client: "DiscordClient",
    media: "MediaDownloader",
    writer: LogWriter,
    cache: EntryCache,
    guild_id: str,
    page_size: int,
    result: GuildSyncResult,
) -> None:
    """Walk the full member list in ascending id order.

    There is no resume cursor for members; change detection alone keeps
    unchanged members out of the log. A failed page ends the walk, keeping
    what was already written.
    """
    after = "0"
    written = 0

    while True:
        try:
            members_data = await client.get_guild_members(guild_id, after=after, limit=page_size)
        except (DiscordAPIError, httpx.HTTPError) as e:
            logger.warning(f"[{guild_id}] error getting members after {after}: {e}")
            result.members_complete = False
            break

        if not members_data:
            break

        for member_data in members_data:
            member = map_member(member_data)
            after = member.user_id

            if member.avatar:
                _note_media(result, guild_id, await media.avatar(member.user_id, member.avatar))

            written += writer.write_if_changed(member, cache)

        result.members_seen += len(members_data)
        logger.batch_progress(result.members_seen, unit="members")

    logger.guild_entities("Members", result.members_seen, written)
    result.rows_written += written

"""Main orchestration for the pull pipeline.

Drives every configured account: each guild's metadata is synced once per
run into ``guild.tsv``, then each text-capable channel is pulled forward from
the cursor found in its own log file.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from discord_tsvlog.config.settings import AccountConfig, AppSettings
from discord_tsvlog.core import BaseOrchestrator
from discord_tsvlog.logstore import (
    BEGINNING,
    CursorNotFoundError,
    LogFormatError,
    LogWriter,
    channel_log_path,
    guild_dir,
    guild_log_path,
    last_message_id,
    new_cache,
    reconstruct,
)
from discord_tsvlog.pull.channel_pull import ChannelPullResult, pull_messages
from discord_tsvlog.pull.client import MAX_GUILDS_PER_PAGE, DiscordAPIError, DiscordClient
from discord_tsvlog.pull.guild_sync import GuildSyncResult, sync_guild
from discord_tsvlog.pull.logger import logger
from discord_tsvlog.pull.mappers.channel import has_messages
from discord_tsvlog.pull.media import MediaDownloader


@dataclass
class RunContext:
    """State shared by every unit of work in one run.

    ``synced_guilds`` is the guild-once gate; it is only read or changed
    while holding ``guild_lock``.
    """

    output_dir: Path
    message_page_size: int = 100
    member_page_size: int = 1000
    reaction_page_size: int = 100
    max_reaction_users: int = 100
    synced_guilds: set[str] = field(default_factory=set)
    guild_lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    # Stats
    guilds_synced: int = 0
    channels_pulled: int = 0
    messages_captured: int = 0
    rows_written: int = 0
    media_failures: int = 0

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "RunContext":
        return cls(
            output_dir=Path(settings.output_dir),
            message_page_size=settings.message_page_size,
            member_page_size=settings.member_page_size,
            reaction_page_size=settings.reaction_page_size,
            max_reaction_users=settings.max_reaction_users,
        )


async def ensure_guild_synced(
    client: DiscordClient,
    media: MediaDownloader,
    context: RunContext,
    guild_id: str,
) -> GuildSyncResult | None:
    """Run the guild sync the first time a guild is seen in this run.

    Returns:
        The sync result, or None if the guild was already handled or the
        sync did not happen
    """
    async with context.guild_lock:
        if guild_id in context.synced_guilds:
            return None

        path = guild_log_path(context.output_dir, guild_id)
        cache = new_cache()
        if path.exists():
            try:
                cache = await asyncio.to_thread(reconstruct, path)
            except (LogFormatError, OSError) as e:
                # Only the guild file is skipped. The channel that triggered
                # the gate is still pulled from its own file.
                logger.warning(
                    f"[{guild_id}] error reconstructing guild state, "
                    f"skipping guild sync for this run: {e}"
                )
                context.synced_guilds.add(guild_id)
                return None

        try:
            with LogWriter(path) as writer:
                result = await sync_guild(
                    client,
                    media,
                    writer,
                    cache,
                    guild_id,
                    member_page_size=context.member_page_size,
                )
        except (DiscordAPIError, httpx.HTTPError) as e:
            logger.warning(f"[{guild_id}] error getting guild info: {e}")
            return None
        except OSError as e:
            logger.error(f"[{guild_id}] error writing guild log: {e}")
            return None

        context.synced_guilds.add(guild_id)
        context.guilds_synced += 1
        context.rows_written += result.rows_written
        context.media_failures += result.media_failures
        return result


async def pull_channel(
    client: DiscordClient,
    media: MediaDownloader,
    context: RunContext,
    guild_id: str,
    channel_id: str,
    channel_name: str | None = None,
) -> ChannelPullResult | None:
    """Pull one channel: init, guild gate, cursor resolution, message loop.

    Returns:
        The pull result (``aborted`` set if a fetch or write failed part
        way), or None if the channel was skipped before pulling
    """
    try:
        guild_dir(context.output_dir, guild_id).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"[{channel_id}] error creating directory: {e}")
        return None

    await ensure_guild_synced(client, media, context, guild_id)

    path = channel_log_path(context.output_dir, guild_id, channel_id)

    with logger.block(channel_name or f"Channel {channel_id}") as block:
        block.field("channel ID", channel_id)

        cursor = BEGINNING
        if path.exists():
            try:
                cursor = await asyncio.to_thread(last_message_id, path)
            except CursorNotFoundError:
                cursor = BEGINNING
            except (LogFormatError, OSError) as e:
                logger.warning(f"[{channel_id}] error reading channel log: {e}")
                block.skip("unreadable log")
                return None

        if cursor == BEGINNING:
            block.field("cursor", "beginning", color="magenta")
        else:
            block.field("cursor", cursor, color="green")

        result = ChannelPullResult(cursor=cursor)
        try:
            with LogWriter(path) as writer:
                await pull_messages(
                    client,
                    media,
                    writer,
                    channel_id,
                    after=cursor,
                    page_size=context.message_page_size,
                    reaction_page_size=context.reaction_page_size,
                    max_reaction_users=context.max_reaction_users,
                    result=result,
                )
        except DiscordAPIError as e:
            result.aborted = True
            if e.status_code == 403:
                block.skip("no access")
            else:
                logger.warning(f"[{channel_id}] error getting messages: {e}")
                block.result(f"aborted after {result.messages_count:,} messages", success=False)
        except (httpx.HTTPError, OSError) as e:
            result.aborted = True
            logger.warning(f"[{channel_id}] error pulling channel: {e}")
            block.result(f"aborted after {result.messages_count:,} messages", success=False)
        else:
            if result.messages_count == 0:
                block.skip("already up to date")
            else:
                block.result(f"captured {result.messages_count:,} messages")

    context.channels_pulled += 1
    context.messages_captured += result.messages_count
    context.rows_written += result.rows_written
    context.media_failures += result.media_failures
    return result


async def list_guild_ids(client: DiscordClient) -> list[str]:
    """Every guild the account is a member of, ascending by id."""
    guild_ids: list[str] = []
    after: str | None = None

    while True:
        guilds = await client.get_current_user_guilds(after=after, limit=MAX_GUILDS_PER_PAGE)
        if not guilds:
            break
        guild_ids.extend(str(g["id"]) for g in guilds)
        if len(guilds) < MAX_GUILDS_PER_PAGE:
            break
        after = guild_ids[-1]

    return guild_ids


def select_channels(channels_data: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Channels that carry messages, in display order."""
    return sorted(
        (c for c in channels_data if has_messages(c["type"])),
        key=lambda c: (c.get("position") or 0, int(c["id"])),
    )


class PullOrchestrator(BaseOrchestrator):
    """Orchestrates the full pull pipeline."""

    def __init__(self, settings: AppSettings) -> None:
        super().__init__()
        self.settings = settings
        self.context = RunContext.from_settings(settings)

    async def _run_pipeline(
        self,
        guild_id: str | None = None,
        channel_id: str | None = None,
    ) -> None:
        """Execute the pull pipeline."""
        if channel_id:
            await self._process_single_channel(channel_id)
        else:
            for account in self.settings.accounts:
                await self._process_account(account, guild_id)

    def _log_summary(self, elapsed: float) -> None:
        """Log the final pull summary."""
        logger.summary(
            guilds=self.context.guilds_synced,
            channels=self.context.channels_pulled,
            messages=self.context.messages_captured,
            rows=self.context.rows_written,
            media_failures=self.context.media_failures,
            elapsed=elapsed,
        )

    def _media(self) -> MediaDownloader:
        return MediaDownloader(self.settings.media_dir, enabled=self.settings.download_media)

    async def _process_account(
        self, account: AccountConfig, filter_guild_id: str | None = None
    ) -> None:
        """Process all guilds for an account."""
        logger.info(f"Processing account: {account.name}")

        async with DiscordClient(
            token=account.token,
            user_agent=account.user_agent,
        ) as client, self._media() as media:
            guild_ids = account.guilds
            if not guild_ids:
                try:
                    guild_ids = await list_guild_ids(client)
                except (DiscordAPIError, httpx.HTTPError) as e:
                    logger.error(f"Error listing guilds for {account.name}: {e}")
                    return

            for guild_id in guild_ids:
                if filter_guild_id and guild_id != filter_guild_id:
                    continue
                await self._process_guild(client, media, guild_id)

    async def _process_guild(
        self, client: DiscordClient, media: MediaDownloader, guild_id: str
    ) -> None:
        try:
            channels_data = await client.get_guild_channels(guild_id)
        except (DiscordAPIError, httpx.HTTPError) as e:
            logger.error(f"[{guild_id}] error getting channels: {e}")
            return

        for channel_data in select_channels(channels_data):
            await pull_channel(
                client,
                media,
                self.context,
                guild_id,
                str(channel_data["id"]),
                channel_name=channel_data.get("name"),
            )

    async def _process_single_channel(self, channel_id: str) -> None:
        """Process a single channel by ID (needs to find the right account)."""
        for account in self.settings.accounts:
            async with DiscordClient(
                token=account.token,
                user_agent=account.user_agent,
            ) as client, self._media() as media:
                try:
                    channel_data = await client.get_channel(channel_id)
                except (DiscordAPIError, httpx.HTTPError) as e:
                    logger.debug(f"[{channel_id}] not visible to {account.name}: {e}")
                    continue  # Try next account

                guild_id = channel_data.get("guild_id")
                if not guild_id:
                    continue

                await pull_channel(
                    client,
                    media,
                    self.context,
                    str(guild_id),
                    channel_id,
                    channel_name=channel_data.get("name"),
                )
                return  # Found and processed

        logger.warning(f"Could not find channel {channel_id} in any account")


async def run_pull(
    config_path: str = "config.json",
    guild_id: str | None = None,
    channel_id: str | None = None,
) -> None:
    """Entry point for running the pull pipeline."""
    settings = AppSettings.from_json(config_path)
    orchestrator = PullOrchestrator(settings)
    await orchestrator.run(guild_id=guild_id, channel_id=channel_id)

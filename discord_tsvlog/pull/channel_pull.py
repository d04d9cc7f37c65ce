"""Forward-only message pull for one channel.

Messages are fetched page by page after the resume cursor. The API returns
each page newest first; rows are written oldest first so a channel log stays
in ascending id order and its last message row is always the cursor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from discord_tsvlog.logentry import Reaction
from discord_tsvlog.logstore import BEGINNING, LogWriter, newest_id
from discord_tsvlog.pull.logger import logger
from discord_tsvlog.pull.mappers import MessageBundle, ReactionSummary, map_message_bundle
from discord_tsvlog.utils.snowflake import snowflake_date

if TYPE_CHECKING:
    from discord_tsvlog.pull.client import DiscordClient
    from discord_tsvlog.pull.media import MediaDownloader


@dataclass
class ChannelPullResult:
    """Result of pulling a channel's messages.

    Counts are updated as rows are written, so they stay meaningful when the
    pull is aborted part way.
    """

    cursor: str = BEGINNING
    messages_count: int = 0
    rows_written: int = 0
    media_failures: int = 0
    anonymous_reactions: int = 0
    aborted: bool = False


async def fetch_reaction_users(
    client: "DiscordClient",
    channel_id: str,
    message_id: str,
    emoji: str,
    page_size: int = 100,
    max_users: int = 100,
) -> list[str]:
    """Enumerate up to ``max_users`` ids of users who reacted with ``emoji``."""
    user_ids: list[str] = []
    after: str | None = None

    while len(user_ids) < max_users:
        limit = min(page_size, max_users - len(user_ids))
        users = await client.get_reaction_users(
            channel_id, message_id, emoji, after=after, limit=limit
        )
        if not users:
            break
        user_ids.extend(str(u["id"]) for u in users)
        if len(users) < limit:
            break
        after = user_ids[-1]

    return user_ids[:max_users]


def reaction_rows(
    message_id: str, summary: ReactionSummary, user_ids: list[str]
) -> list[Reaction]:
    """One row per enumerated user, plus anonymous rows for the remainder.

    When the reported count exceeds the users the API would enumerate, rows
    with an empty user id make up the difference. This is an approximation:
    the count and the user list are not read atomically.
    """
    rows = [Reaction(user_id=u, message_id=message_id, emoji=summary.emoji) for u in user_ids]
    overflow = summary.count - len(user_ids)
    rows.extend(
        Reaction(user_id="", message_id=message_id, emoji=summary.emoji)
        for _ in range(max(overflow, 0))
    )
    return rows


async def pull_messages(
    client: "DiscordClient",
    media: "MediaDownloader",
    writer: LogWriter,
    channel_id: str,
    after: str = BEGINNING,
    page_size: int = 100,
    reaction_page_size: int = 100,
    max_reaction_users: int = 100,
    result: ChannelPullResult | None = None,
) -> ChannelPullResult:
    """Pull every message newer than ``after`` into the channel log.

    Message, embed, attachment and reaction rows are written unconditionally;
    the cursor already guarantees none of these messages were captured before.
    Any fetch or write error propagates and ends the pull; rows written up to
    that point stay, and the next run resumes after the last message row.

    Args:
        client: Discord API client
        media: Downloader for attachments
        writer: Open writer on the channel log
        channel_id: Channel to pull
        after: Resume cursor (newest message id already captured)
        page_size: Messages per API call (max 100)
        reaction_page_size: Reaction users per API call (max 100)
        max_reaction_users: Cap on enumerated users per reaction
        result: Result object to update in place

    Returns:
        ChannelPullResult with the advanced cursor and counts
    """
    if result is None:
        result = ChannelPullResult()
    result.cursor = after

    while True:
        messages_data = await client.get_messages(
            channel_id, after=result.cursor, limit=page_size
        )
        if not messages_data:
            break

        # oldest first; anything at or before the cursor is already captured
        floor = int(result.cursor)
        bundles = sorted(
            (b for b in map(map_message_bundle, messages_data) if int(b.message.id) > floor),
            key=lambda b: int(b.message.id),
        )
        if not bundles:
            break

        for bundle in bundles:
            await _write_message(
                client,
                media,
                writer,
                channel_id,
                bundle,
                reaction_page_size,
                max_reaction_users,
                result,
            )

        result.cursor = newest_id([b.message.id for b in bundles])
        logger.batch_progress(result.messages_count, newest_date=snowflake_date(result.cursor))

    return result


async def _write_message(
    client: "DiscordClient",
    media: "MediaDownloader",
    writer: LogWriter,
    channel_id: str,
    bundle: MessageBundle,
    reaction_page_size: int,
    max_reaction_users: int,
    result: ChannelPullResult,
) -> None:
    message_id = bundle.message.id

    # Enumerate reactions before writing anything for this message, so a
    # failure here leaves the message uncaptured and it is retried next run.
    reactions: list[Reaction] = []
    for summary in bundle.reactions:
        user_ids = await fetch_reaction_users(
            client,
            channel_id,
            message_id,
            summary.emoji,
            page_size=reaction_page_size,
            max_users=max_reaction_users,
        )
        rows = reaction_rows(message_id, summary, user_ids)
        result.anonymous_reactions += len(rows) - len(user_ids)
        reactions.extend(rows)

    writer.write(bundle.message)
    result.messages_count += 1
    result.rows_written += 1

    for embed in bundle.embeds:
        writer.write(embed)
        result.rows_written += 1

    for attachment in bundle.attachments:
        if attachment.url:
            logger.debug(f"[{channel_id}] downloading attachment {attachment.id}")
            outcome = await media.attachment(attachment.url)
            if outcome.failed:
                result.media_failures += 1
                logger.media_failed(channel_id, outcome.kind, attachment.id, outcome.error or "")
        writer.write(attachment)
        result.rows_written += 1

    for reaction in reactions:
        writer.write(reaction)
        result.rows_written += 1

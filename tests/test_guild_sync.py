"""Tests for discord_tsvlog.pull.guild_sync."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from discord_tsvlog.logstore import LogWriter, iter_entries, new_cache, reconstruct
from discord_tsvlog.pull.client import DiscordAPIError
from discord_tsvlog.pull.guild_sync import sync_guild
from discord_tsvlog.pull.media import STATUS_FAILED, STATUS_OK, MediaResult


def _make_client(guild_data: dict, channels_data: list, member_pages: list) -> MagicMock:
    client = MagicMock()
    client.get_guild = AsyncMock(return_value=guild_data)
    client.get_guild_channels = AsyncMock(return_value=channels_data)
    client.get_guild_members = AsyncMock(side_effect=member_pages)
    return client


def _make_media(status: str = STATUS_OK) -> MagicMock:
    result = MediaResult("image", "url", status, error="boom" if status == STATUS_FAILED else None)
    media = MagicMock()
    for name in ("avatar", "icon", "splash", "emoji"):
        setattr(media, name, AsyncMock(return_value=result))
    return media


async def _sync(path: Path, clock, client, media, cache=None, page_size: int = 1000):
    path.parent.mkdir(parents=True, exist_ok=True)
    if cache is None:
        cache = reconstruct(path) if path.exists() else new_cache()
    with LogWriter(path, clock=clock) as writer:
        return await sync_guild(client, media, writer, cache, "100", member_page_size=page_size)


@pytest.fixture
def guild_path(tmp_path: Path) -> Path:
    return tmp_path / "100" / "guild.tsv"


class TestSyncGuild:
    """Tests for sync_guild."""

    @pytest.mark.asyncio
    async def test_first_sync_writes_everything_in_order(
        self, guild_path, fixed_clock, guild_data, channels_data, members_data
    ) -> None:
        client = _make_client(guild_data, channels_data, [members_data, []])

        result = await _sync(guild_path, fixed_clock, client, _make_media())

        kinds = [e.entity_type for e in iter_entries(guild_path)]
        assert kinds == [
            "guild",
            "channel",
            "channel",
            "permoverwrite",
            "permoverwrite",
            "channel",
            "role",
            "role",
            "emoji",
            "member",
            "member",
        ]
        assert result.guild_name == "Test Guild"
        assert result.rows_written == 11
        assert result.members_seen == 2
        assert result.members_complete is True

    @pytest.mark.asyncio
    async def test_second_sync_is_byte_identical(
        self, guild_path, fixed_clock, guild_data, channels_data, members_data
    ) -> None:
        await _sync(
            guild_path, fixed_clock, _make_client(guild_data, channels_data, [members_data, []]), _make_media()
        )
        before = guild_path.read_bytes()

        result = await _sync(
            guild_path, fixed_clock, _make_client(guild_data, channels_data, [members_data, []]), _make_media()
        )

        assert result.rows_written == 0
        assert guild_path.read_bytes() == before

    @pytest.mark.asyncio
    async def test_changed_role_appends_one_row(
        self, guild_path, fixed_clock, guild_data, channels_data, members_data
    ) -> None:
        await _sync(
            guild_path, fixed_clock, _make_client(guild_data, channels_data, [members_data, []]), _make_media()
        )
        before = guild_path.read_text(encoding="utf-8")
        guild_data["roles"][1]["color"] = 5

        result = await _sync(
            guild_path, fixed_clock, _make_client(guild_data, channels_data, [members_data, []]), _make_media()
        )

        assert result.rows_written == 1
        content = guild_path.read_text(encoding="utf-8")
        assert content.startswith(before)
        last = list(iter_entries(guild_path))[-1]
        assert last.entity_type == "role"
        assert last.fields[:3] == ("R1", "Mods", "5")

    @pytest.mark.asyncio
    async def test_guild_fetch_failure_writes_nothing(
        self, guild_path, fixed_clock, guild_data, channels_data
    ) -> None:
        client = _make_client(guild_data, channels_data, [])
        client.get_guild.side_effect = DiscordAPIError(403, "Missing Access")

        with pytest.raises(DiscordAPIError):
            await _sync(guild_path, fixed_clock, client, _make_media())

        assert not guild_path.exists()
        client.get_guild_members.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_members_paginate_after_last_id(
        self, guild_path, fixed_clock, guild_data, channels_data, members_data
    ) -> None:
        client = _make_client(guild_data, channels_data, [members_data[:1], members_data[1:], []])

        result = await _sync(guild_path, fixed_clock, client, _make_media(), page_size=1)

        afters = [c.kwargs["after"] for c in client.get_guild_members.await_args_list]
        assert afters == ["0", "42", "43"]
        assert result.members_seen == 2

    @pytest.mark.asyncio
    async def test_member_page_failure_keeps_earlier_rows(
        self, guild_path, fixed_clock, guild_data, channels_data, members_data
    ) -> None:
        client = _make_client(
            guild_data, channels_data, [members_data[:1], httpx.ReadTimeout("slow")]
        )

        result = await _sync(guild_path, fixed_clock, client, _make_media(), page_size=1)

        members = [e.fields[0] for e in iter_entries(guild_path) if e.entity_type == "member"]
        assert members == ["42"]
        assert result.members_complete is False

    @pytest.mark.asyncio
    async def test_media_failures_counted_not_fatal(
        self, guild_path, fixed_clock, guild_data, channels_data, members_data
    ) -> None:
        client = _make_client(guild_data, channels_data, [members_data, []])

        result = await _sync(guild_path, fixed_clock, client, _make_media(STATUS_FAILED))

        # guild icon, one emoji, one member avatar
        assert result.media_failures == 3
        assert result.rows_written == 11

    @pytest.mark.asyncio
    async def test_media_requested_for_assets(
        self, guild_path, fixed_clock, guild_data, channels_data, members_data
    ) -> None:
        client = _make_client(guild_data, channels_data, [members_data, []])
        media = _make_media()

        await _sync(guild_path, fixed_clock, client, media)

        media.icon.assert_awaited_once_with("100", "iconhash")
        media.splash.assert_not_awaited()
        media.emoji.assert_awaited_once_with("900", False)
        media.avatar.assert_awaited_once_with("43", "bobhash")

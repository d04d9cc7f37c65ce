"""On-disk layout: one directory per guild, one file per channel plus a guild file."""

from __future__ import annotations

from pathlib import Path

LOG_SUFFIX = ".tsv"
GUILD_LOG_NAME = f"guild{LOG_SUFFIX}"


def guild_dir(output_dir: str | Path, guild_id: str) -> Path:
    return Path(output_dir) / guild_id


def guild_log_path(output_dir: str | Path, guild_id: str) -> Path:
    return guild_dir(output_dir, guild_id) / GUILD_LOG_NAME


def channel_log_path(output_dir: str | Path, guild_id: str, channel_id: str) -> Path:
    return guild_dir(output_dir, guild_id) / f"{channel_id}{LOG_SUFFIX}"

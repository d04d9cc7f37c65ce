"""Append-only log files: row format, writer, replay cache and resume cursor.

All state needed for incremental pulls is derived from the log files
themselves; there is no separate index.
"""

from discord_tsvlog.logstore.cache import (
    EntryCache,
    needs_write,
    new_cache,
    reconstruct,
    remember,
)
from discord_tsvlog.logstore.cursor import (
    BEGINNING,
    CursorNotFoundError,
    last_message_id,
    newest_id,
)
from discord_tsvlog.logstore.format import (
    LogFormatError,
    format_line,
    iter_entries,
    parse_line,
)
from discord_tsvlog.logstore.layout import (
    channel_log_path,
    guild_dir,
    guild_log_path,
)
from discord_tsvlog.logstore.writer import LogWriter

__all__ = [
    "BEGINNING",
    "CursorNotFoundError",
    "EntryCache",
    "LogFormatError",
    "LogWriter",
    "channel_log_path",
    "format_line",
    "guild_dir",
    "guild_log_path",
    "iter_entries",
    "last_message_id",
    "needs_write",
    "new_cache",
    "newest_id",
    "parse_line",
    "reconstruct",
    "remember",
]

"""Last-known-row cache rebuilt by replaying a log file.

The cache maps entity type to row identity to that entity's most recently
written field tuple. It only ever lives for one run; the log file remains the
source of truth.
"""

from __future__ import annotations

from pathlib import Path

from discord_tsvlog.logentry import LogEntry
from discord_tsvlog.logstore.format import iter_entries

EntryCache = dict[str, dict[tuple[str, ...], tuple[str, ...]]]


def new_cache() -> EntryCache:
    return {}


def remember(cache: EntryCache, entry: LogEntry) -> None:
    """Record an entry as the latest row for its identity."""
    cache.setdefault(entry.entity_type, {})[entry.key] = entry.fields


def reconstruct(path: str | Path) -> EntryCache:
    """Replay a log file into a cache. Later rows overwrite earlier ones.

    Raises:
        LogFormatError: if any line is malformed; the file must then be
            treated as untrustworthy.
        OSError: if the file cannot be read.
    """
    cache = new_cache()
    for entry in iter_entries(path):
        remember(cache, entry)
    return cache


def cached_fields(cache: EntryCache, entry: LogEntry) -> tuple[str, ...] | None:
    return cache.get(entry.entity_type, {}).get(entry.key)


def needs_write(cache: EntryCache, entry: LogEntry) -> bool:
    """Whether an entry differs from the cached row for the same identity.

    Comparison is exact and order-sensitive over the field columns only;
    timestamp, fetch type and operation are ignored. Unknown identities
    always need a write.
    """
    return cached_fields(cache, entry) != entry.fields

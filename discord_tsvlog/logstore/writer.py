"""Append-only log writer.

The file is opened in append mode and never truncated, seeked or rewritten.
Each ``write`` emits one whole line and flushes it immediately so the row is
visible to readers as soon as the call returns.
"""

from __future__ import annotations

from pathlib import Path
from typing import IO, Any, Callable

from discord_tsvlog.logentry import Entity, LogEntry, make_entry
from discord_tsvlog.logentry.schema import FETCH_HISTORY, OP_ADD
from discord_tsvlog.logstore.cache import EntryCache, needs_write, remember
from discord_tsvlog.logstore.format import ENCODING, TERMINATOR, format_line
from discord_tsvlog.utils.time import log_timestamp


class LogWriter:
    """Writes rows for one log file.

    The file is opened (and created) on the first write, so a writer that
    never writes leaves no file behind.

    Usage:
        with LogWriter(path) as writer:
            writer.write(message)
            writer.write_if_changed(role, cache)
    """

    def __init__(
        self,
        path: str | Path,
        fetch_type: str = FETCH_HISTORY,
        operation: str = OP_ADD,
        clock: Callable[[], str] = log_timestamp,
    ) -> None:
        self.path = Path(path)
        self.fetch_type = fetch_type
        self.operation = operation
        self._clock = clock
        self._file: IO[str] | None = None
        self.rows_written = 0

    def __enter__(self) -> "LogWriter":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def open(self) -> None:
        if self._file is None:
            self._file = open(self.path, "a", encoding=ENCODING, newline=TERMINATOR)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def append(self, entry: LogEntry) -> LogEntry:
        """Append an already built entry."""
        self.open()
        assert self._file is not None
        self._file.write(format_line(entry))
        self._file.flush()
        self.rows_written += 1
        return entry

    def write(self, entity: Entity) -> LogEntry:
        """Encode and append an entity unconditionally."""
        return self.append(
            make_entry(self.fetch_type, self.operation, entity, timestamp=self._clock())
        )

    def write_if_changed(self, entity: Entity, cache: EntryCache) -> bool:
        """Append an entity only if it differs from its last known row.

        The cache is updated after a write so repeated sightings within one
        run are not logged twice.

        Returns:
            True if a row was written
        """
        entry = make_entry(self.fetch_type, self.operation, entity, timestamp=self._clock())
        if not needs_write(cache, entry):
            return False
        self.append(entry)
        remember(cache, entry)
        return True

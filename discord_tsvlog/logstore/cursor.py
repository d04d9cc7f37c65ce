"""Resume cursor resolution for channel logs."""

from __future__ import annotations

from pathlib import Path

from discord_tsvlog.logentry import schema
from discord_tsvlog.logstore.format import LogFormatError, iter_entries

# Cursor value meaning "nothing captured yet"
BEGINNING = "0"


class CursorNotFoundError(LookupError):
    """Raised when a log file holds no message rows."""

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(f"{self.path}: no message rows")


def last_message_id(path: str | Path) -> str:
    """Return the newest message id captured in a channel log.

    Embed, attachment and reaction rows sharing the file are skipped; only
    rows tagged as messages are considered.

    Raises:
        CursorNotFoundError: if the file contains no message rows
        LogFormatError: if the file is malformed or a message id is not a
            snowflake
    """
    newest: str | None = None
    for entry in iter_entries(path):
        if entry.entity_type != schema.MESSAGE:
            continue
        message_id = entry.fields[0]
        if not message_id.isdigit():
            raise LogFormatError(f"message id {message_id!r} is not a snowflake", path)
        if newest is None or int(message_id) > int(newest):
            newest = message_id

    if newest is None:
        raise CursorNotFoundError(path)
    return newest


def newest_id(ids: list[str]) -> str:
    """Largest snowflake among ids."""
    return max(ids, key=int)

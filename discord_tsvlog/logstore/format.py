"""Tab-separated row format.

A row is one line: header columns then entity fields, separated by TAB and
terminated by LF. Fields are escaped so that tabs, newlines and carriage
returns inside content never break the line structure.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterator

from discord_tsvlog.logentry import LogEntry
from discord_tsvlog.logentry import schema

SEPARATOR = "\t"
TERMINATOR = "\n"
ENCODING = "utf-8"

_TERMINATOR_BYTES = TERMINATOR.encode(ENCODING)
_ESCAPES = {"\\": "\\\\", "\t": "\\t", "\n": "\\n", "\r": "\\r"}
_UNESCAPES = {"\\": "\\", "t": "\t", "n": "\n", "r": "\r"}
# Unpaired surrogates (legal in JSON strings, not encodable as UTF-8) are
# written as \uXXXX.
_ESCAPE_RE = re.compile("[\\\\\t\n\r\ud800-\udfff]")
_UNESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|.?)", re.DOTALL)


class LogFormatError(ValueError):
    """Raised when a line cannot be parsed as a well-formed row."""

    def __init__(self, message: str, path: str | Path | None = None, line: int = 0) -> None:
        self.path = str(path) if path is not None else None
        self.line = line
        where = ""
        if self.path:
            where = f"{self.path}:{line}: " if line else f"{self.path}: "
        super().__init__(f"{where}{message}")


def _escape(match: re.Match[str]) -> str:
    char = match.group(0)
    if char in _ESCAPES:
        return _ESCAPES[char]
    return f"\\u{ord(char):04x}"


def escape_field(value: str) -> str:
    return _ESCAPE_RE.sub(_escape, value)


def unescape_field(value: str) -> str:
    def replace(match: re.Match[str]) -> str:
        code = match.group(1)
        if len(code) == 5 and code[0] == "u":
            return chr(int(code[1:], 16))
        try:
            return _UNESCAPES[code]
        except KeyError:
            raise LogFormatError(f"invalid escape sequence {match.group(0)!r}") from None

    return _UNESCAPE_RE.sub(replace, value)


def format_line(entry: LogEntry) -> str:
    """Serialize an entry to a single terminated line."""
    return SEPARATOR.join(escape_field(c) for c in entry.columns()) + TERMINATOR


def parse_line(line: str) -> LogEntry:
    """Parse one line (without its terminator) into an entry.

    Columns beyond the entity type's schema are ignored.
    """
    columns = line.split(SEPARATOR)
    if len(columns) <= schema.H_TYPE:
        raise LogFormatError(f"expected at least {schema.HEADER_WIDTH} columns, got {len(columns)}")

    entity_type = columns[schema.H_TYPE]
    if entity_type not in schema.ENTITY_TYPES:
        raise LogFormatError(f"unknown entity type {entity_type!r}")

    width = schema.field_count(entity_type)
    fields = columns[schema.HEADER_WIDTH:]
    if len(fields) < width:
        raise LogFormatError(
            f"{entity_type} row has {len(fields)} fields, expected {width}"
        )

    return LogEntry(
        timestamp=unescape_field(columns[schema.H_TIME]),
        fetch_type=unescape_field(columns[schema.H_FETCH_TYPE]),
        operation=unescape_field(columns[schema.H_OP]),
        entity_type=entity_type,
        fields=tuple(unescape_field(f) for f in fields[:width]),
    )


def iter_entries(path: str | Path) -> Iterator[LogEntry]:
    """Read a log file from top to bottom.

    Raises:
        LogFormatError: on the first malformed line, including a final line
            missing its terminator (a torn write) or bytes that are not UTF-8.
    """
    with open(path, "rb") as f:
        for lineno, raw in enumerate(f, start=1):
            if not raw.endswith(_TERMINATOR_BYTES):
                raise LogFormatError("unterminated line", path, lineno)
            try:
                line = raw[: -len(_TERMINATOR_BYTES)].decode(ENCODING)
            except UnicodeDecodeError as e:
                raise LogFormatError(f"invalid {ENCODING}: {e.reason}", path, lineno) from e
            try:
                yield parse_line(line)
            except LogFormatError as e:
                raise LogFormatError(str(e), path, lineno) from e

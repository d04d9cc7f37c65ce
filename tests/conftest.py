"""Shared fixtures for discord-tsvlog tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

FIXED_TIMESTAMP = "2024-05-01T10:00:00.000000+00:00"


def _message_data(message_id: str, channel_id: str = "500", **overrides: Any) -> dict:
    data: dict[str, Any] = {
        "id": message_id,
        "channel_id": channel_id,
        "author": {"id": "42", "username": "alice", "avatar": "abc"},
        "content": f"message {message_id}",
        "edited_timestamp": None,
        "tts": False,
        "type": 0,
        "embeds": [],
        "attachments": [],
    }
    data.update(overrides)
    return data


@pytest.fixture
def message_data() -> Callable[..., dict]:
    """Factory for minimal Discord API message objects."""
    return _message_data


@pytest.fixture
def fixed_clock() -> Callable[[], str]:
    """Clock returning the same capture timestamp for every row."""
    return lambda: FIXED_TIMESTAMP


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    """Path of a not-yet-created log file."""
    return tmp_path / "100" / "500.tsv"


@pytest.fixture
def guild_data() -> dict:
    """Sample guild with roles and emoji embedded, as returned by GET /guilds/{id}."""
    return {
        "id": "100",
        "name": "Test Guild",
        "owner_id": "42",
        "icon": "iconhash",
        "splash": None,
        "afk_channel_id": None,
        "afk_timeout": 300,
        "widget_enabled": False,
        "widget_channel_id": None,
        "roles": [
            {"id": "100", "name": "@everyone", "color": 0, "position": 0, "permissions": "104324673", "hoist": False},
            {"id": "R1", "name": "Mods", "color": 0, "position": 1, "permissions": "8", "hoist": True},
        ],
        "emojis": [
            {"id": "900", "name": "blob", "require_colons": True, "animated": False},
        ],
    }


@pytest.fixture
def channels_data() -> list[dict]:
    """Sample guild channel list: a category, a text channel and a voice channel."""
    return [
        {"id": "400", "type": 4, "position": 0, "name": "General"},
        {
            "id": "500",
            "type": 0,
            "position": 1,
            "name": "chat",
            "topic": "talk here",
            "nsfw": False,
            "parent_id": "400",
            "permission_overwrites": [
                {"id": "100", "type": 0, "allow": "0", "deny": "1024"},
                {"id": "R1", "type": 0, "allow": "1024", "deny": "0"},
            ],
        },
        {"id": "600", "type": 2, "position": 2, "name": "voice", "parent_id": "400"},
    ]


@pytest.fixture
def members_data() -> list[dict]:
    """Sample guild members in ascending id order."""
    return [
        {"user": {"id": "42", "username": "alice", "discriminator": "0", "avatar": None}, "nick": None, "roles": ["R1"]},
        {"user": {"id": "43", "username": "bob", "discriminator": "0", "avatar": "bobhash"}, "nick": "bobby", "roles": []},
    ]

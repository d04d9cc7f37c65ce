"""Configuration management using pydantic-settings.

Provides validated configuration with support for:
- JSON config file (config.json)
- Environment variables (DISCORD_TSVLOG_ prefix) for unset values
- Type coercion and validation
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AccountConfig(BaseModel):
    """Configuration for a single Discord account.

    An empty ``guilds`` list means every guild the account is a member of.
    """

    name: str
    token: str
    user_agent: str
    guilds: list[str] = []

    @field_validator("guilds", mode="before")
    @classmethod
    def ensure_string_list(cls, v: Any) -> list[str]:
        """Ensure guilds are strings (for snowflake IDs)."""
        if isinstance(v, list):
            return [str(g) for g in v]
        return v


class AppSettings(BaseSettings):
    """Application settings with validation.

    Settings are loaded from a JSON config file (config.json). Environment
    variables fill in anything the file leaves unset.
    """

    accounts: list[AccountConfig] = []

    # Where log files and downloaded media go
    output_dir: Path = Path("channels")
    media_dir: Path = Path("media")
    download_media: bool = True

    # Page sizes for the paginated endpoints
    message_page_size: int = Field(default=100, ge=1, le=100)
    member_page_size: int = Field(default=1000, ge=1, le=1000)
    reaction_page_size: int = Field(default=100, ge=1, le=100)
    max_reaction_users: int = Field(default=100, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="DISCORD_TSVLOG_",
        extra="ignore",
    )

    @classmethod
    def from_json(cls, path: str | Path = "config.json") -> "AppSettings":
        """Load settings from a JSON config file.

        Args:
            path: Path to the JSON config file

        Returns:
            AppSettings instance with validated configuration
        """
        config_path = Path(path)
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return cls(**data)
        return cls()


@lru_cache
def get_settings(config_path: str = "config.json") -> AppSettings:
    """Get cached application settings.

    Args:
        config_path: Path to JSON config file (default: config.json)

    Returns:
        Cached AppSettings instance
    """
    return AppSettings.from_json(config_path)

"""Best-effort download of avatars, icons, splashes, emoji and attachments.

Every operation returns a ``MediaResult`` instead of raising, so a failed
download can never stand in the way of writing the entity's log row.
Files already on disk are not fetched again.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from discord_tsvlog.pull.logger import logger

CDN_URL = "https://cdn.discordapp.com"

AVATAR = "avatar"
ICON = "icon"
SPLASH = "splash"
EMOJI = "emoji"
ATTACHMENT = "attachment"

STATUS_OK = "ok"
STATUS_SKIPPED = "skipped"
STATUS_FAILED = "failed"


@dataclass
class MediaResult:
    """Outcome of one download."""

    kind: str
    locator: str
    status: str
    path: Path | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.status == STATUS_FAILED


def _image_ext(asset_hash: str) -> str:
    # animated assets have hashes starting with "a_"
    return "gif" if asset_hash.startswith("a_") else "png"


@dataclass
class MediaDownloader:
    """Stores binary assets below ``root``.

    Use as an async context manager; when ``enabled`` is False every call is
    reported as skipped without touching the network.
    """

    root: Path
    enabled: bool = True

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        self._client: httpx.AsyncClient | None = None
        self.failures = 0

    async def __aenter__(self) -> "MediaDownloader":
        if self.enabled:
            self._client = httpx.AsyncClient(timeout=60.0, follow_redirects=True)
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def avatar(self, user_id: str, avatar_hash: str) -> MediaResult:
        ext = _image_ext(avatar_hash)
        return await self.fetch(
            AVATAR,
            f"{CDN_URL}/avatars/{user_id}/{avatar_hash}.{ext}",
            self.root / "avatars" / user_id / f"{avatar_hash}.{ext}",
        )

    async def icon(self, guild_id: str, icon_hash: str) -> MediaResult:
        ext = _image_ext(icon_hash)
        return await self.fetch(
            ICON,
            f"{CDN_URL}/icons/{guild_id}/{icon_hash}.{ext}",
            self.root / "icons" / guild_id / f"{icon_hash}.{ext}",
        )

    async def splash(self, guild_id: str, splash_hash: str) -> MediaResult:
        return await self.fetch(
            SPLASH,
            f"{CDN_URL}/splashes/{guild_id}/{splash_hash}.png",
            self.root / "splashes" / guild_id / f"{splash_hash}.png",
        )

    async def emoji(self, emoji_id: str, animated: bool = False) -> MediaResult:
        ext = "gif" if animated else "png"
        return await self.fetch(
            EMOJI,
            f"{CDN_URL}/emojis/{emoji_id}.{ext}",
            self.root / "emojis" / f"{emoji_id}.{ext}",
        )

    async def attachment(self, url: str) -> MediaResult:
        # keep the CDN path (channel/attachment/filename), drop the signed query
        parts = [p for p in httpx.URL(url).path.split("/") if p and p not in (".", "..")]
        if not parts:
            return MediaResult(ATTACHMENT, url, STATUS_FAILED, error="empty URL path")
        return await self.fetch(ATTACHMENT, url, self.root.joinpath(*parts))

    async def fetch(self, kind: str, url: str, dest: Path) -> MediaResult:
        """Download ``url`` into ``dest`` unless it is already there."""
        if not self.enabled or dest.exists():
            return MediaResult(kind, url, STATUS_SKIPPED, path=dest)
        if self._client is None:
            raise RuntimeError("Downloader not initialized. Use async with.")

        try:
            response = await self._client.get(url)
            response.raise_for_status()
            dest.parent.mkdir(parents=True, exist_ok=True)
            partial = dest.with_name(dest.name + ".part")
            partial.write_bytes(response.content)
            partial.replace(dest)
        except (httpx.HTTPError, OSError) as e:
            self.failures += 1
            logger.debug(f"download of {kind} {url} failed: {e}")
            return MediaResult(kind, url, STATUS_FAILED, path=dest, error=str(e) or type(e).__name__)

        return MediaResult(kind, url, STATUS_OK, path=dest)

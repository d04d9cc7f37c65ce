"""Rich-based logging for the pull pipeline.

Console output for guild and channel pulls: structured per-channel blocks,
inline page progress, warnings for rate limits, retries and failed media
downloads, and a final summary panel.
"""

from __future__ import annotations

from typing import Any

from discord_tsvlog.utils.pipeline_logger import BasePipelineLogger


class PullLogger(BasePipelineLogger):
    """Logger for guild/channel pulls with rich output."""

    def __init__(self) -> None:
        super().__init__(__name__)

    # -------------------------------------------------------------------------
    # Remote client
    # -------------------------------------------------------------------------

    def rate_limit(self, retry_after: float) -> None:
        """Log a rate limit warning with retry time."""
        self._logger.warning(f"Rate limited. Waiting {retry_after:.1f}s...")

    def retry(
        self, attempt: int, max_attempts: int, wait_time: float, reason: str = ""
    ) -> None:
        """Log a retry attempt with optional reason."""
        msg = f"Retry {attempt}/{max_attempts} in {wait_time:.1f}s"
        if reason:
            msg += f" ({reason})"
        self._logger.warning(msg)

    # -------------------------------------------------------------------------
    # Guild sync
    # -------------------------------------------------------------------------

    def guild_start(self, guild_id: str, guild_name: str) -> None:
        """Log the start of a guild sync."""
        self.console.print()
        self.console.rule(f"[bold cyan]{guild_name}[/bold cyan]", style="cyan")
        self.console.print(f"[dim]Guild ID: {guild_id}[/dim]")

    def guild_entities(self, label: str, seen: int, written: int) -> None:
        """Log how many guild-level entities were seen and how many changed."""
        self._clear_progress_line()
        self.console.print(
            f"  [green]✓[/green] {label}: {seen:,} seen, {written:,} new rows"
        )

    # -------------------------------------------------------------------------
    # Media
    # -------------------------------------------------------------------------

    def media_failed(self, scope: str, kind: str, locator: str, error: str) -> None:
        """Log a failed best-effort media download."""
        self._logger.warning(f"[{scope}] error downloading {kind} {locator}: {error}")

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def summary(
        self,
        guilds: int = 0,
        channels: int = 0,
        messages: int = 0,
        rows: int = 0,
        media_failures: int = 0,
        elapsed: float = 0.0,
        **kwargs: Any,
    ) -> None:
        """Print final pull summary."""
        self.print_summary(
            "Pull",
            elapsed=elapsed,
            stats={
                "Guilds synced": guilds,
                "Channels pulled": channels,
                "Messages captured": messages,
                "Rows written": rows,
                "Media failures": media_failures,
            },
            style="cyan",
        )


# Global logger instance
logger = PullLogger()

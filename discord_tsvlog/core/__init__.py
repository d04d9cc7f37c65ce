"""Base orchestrator for pipeline execution.

Provides the timing and summary scaffolding shared by pipeline
orchestrators:

Usage:
    class MyOrchestrator(BaseOrchestrator):
        async def _run_pipeline(self, guild_id, channel_id):
            ...

        def _log_summary(self, elapsed):
            ...
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod


class BaseOrchestrator(ABC):
    """Abstract base class for pipeline orchestrators.

    Subclasses must implement:
    - _run_pipeline(): The actual pipeline logic
    - _log_summary(): Log final statistics
    """

    def __init__(self) -> None:
        self.start_time: float = 0.0

    async def run(
        self,
        guild_id: str | None = None,
        channel_id: str | None = None,
    ) -> None:
        """Run the pipeline.

        Args:
            guild_id: If provided, only process this guild.
            channel_id: If provided, only process this channel.
        """
        self.start_time = time.time()

        await self._run_pipeline(guild_id=guild_id, channel_id=channel_id)

        elapsed = time.time() - self.start_time
        self._log_summary(elapsed)

    @abstractmethod
    async def _run_pipeline(
        self,
        guild_id: str | None = None,
        channel_id: str | None = None,
    ) -> None:
        """Execute the pipeline logic."""
        ...

    @abstractmethod
    def _log_summary(self, elapsed: float) -> None:
        """Log the final summary statistics.

        Args:
            elapsed: Total time elapsed in seconds.
        """
        ...

"""Tests for discord_tsvlog.utils.pipeline_logger and the pull logger."""

from __future__ import annotations

from io import StringIO
from typing import Any
from unittest.mock import MagicMock

from rich.console import Console

from discord_tsvlog.pull.logger import PullLogger
from discord_tsvlog.utils.pipeline_logger import BasePipelineLogger, StructuredBlock


def _capturing_console() -> Console:
    return Console(file=StringIO(), force_terminal=True, width=120)


def _output(console: Console) -> str:
    console.file.seek(0)
    return console.file.read()


class ConcreteLogger(BasePipelineLogger):
    """Concrete implementation for testing the abstract base class."""

    def __init__(self) -> None:
        super().__init__("test_logger")
        # Replace console with a string-capturing one for assertions
        self.console = _capturing_console()

    def summary(self, **kwargs: Any) -> None:
        self.print_summary("Test", elapsed=0.0, stats={})

    def get_output(self) -> str:
        return _output(self.console)


# ---------------------------------------------------------------------------
# TestStructuredBlock
# ---------------------------------------------------------------------------


class TestStructuredBlock:
    """Tests for StructuredBlock context manager."""

    def test_prints_title_on_enter(self) -> None:
        logger = ConcreteLogger()

        with logger.block("My Block"):
            pass

        assert "My Block" in logger.get_output()

    def test_field_prints_key_value(self) -> None:
        logger = ConcreteLogger()

        with logger.block("Block") as b:
            b.field("channel ID", 12345)

        output = logger.get_output()
        assert "channel ID:" in output
        assert "12345" in output

    def test_field_with_color(self) -> None:
        logger = ConcreteLogger()

        with logger.block("Block") as b:
            b.field("cursor", "beginning", color="magenta")

        output = logger.get_output()
        assert "cursor:" in output
        assert "beginning" in output

    def test_result_success(self) -> None:
        logger = ConcreteLogger()

        with logger.block("Block") as b:
            b.result("captured 100 messages")

        output = logger.get_output()
        assert "captured" in output
        assert "messages" in output

    def test_result_failure(self) -> None:
        logger = ConcreteLogger()

        with logger.block("Block") as b:
            b.result("aborted", success=False)

        assert "aborted" in logger.get_output()

    def test_skip(self) -> None:
        logger = ConcreteLogger()

        with logger.block("Block") as b:
            b.skip("no access")

        assert "Skipped: no access" in logger.get_output()


# ---------------------------------------------------------------------------
# TestBasePipelineLogger
# ---------------------------------------------------------------------------


class TestBasePipelineLogger:
    """Tests for BasePipelineLogger base class."""

    def test_clear_progress_line_resets_flag(self) -> None:
        logger = ConcreteLogger()
        logger._has_progress_line = True

        logger._clear_progress_line()

        assert logger._has_progress_line is False

    def test_info_delegates_to_python_logger(self) -> None:
        logger = ConcreteLogger()
        logger._logger = MagicMock()

        logger.info("test message")

        logger._logger.info.assert_called_once_with("test message")

    def test_warning_delegates_to_python_logger(self) -> None:
        logger = ConcreteLogger()
        logger._logger = MagicMock()

        logger.warning("warn message")

        logger._logger.warning.assert_called_once_with("warn message")

    def test_error_delegates_to_python_logger(self) -> None:
        logger = ConcreteLogger()
        logger._logger = MagicMock()

        logger.error("error message")

        logger._logger.error.assert_called_once_with("error message")

    def test_success_prints_message(self) -> None:
        logger = ConcreteLogger()

        logger.success("done")

        assert "done" in logger.get_output()

    def test_batch_progress_sets_flag(self) -> None:
        logger = ConcreteLogger()

        logger.batch_progress(50, newest_date="2024-06-01")

        assert logger._has_progress_line is True
        assert "Captured" in logger.get_output()

    def test_batch_progress_unit(self) -> None:
        logger = ConcreteLogger()

        logger.batch_progress(1000, unit="members")

        assert "members" in logger.get_output()

    def test_block_yields_structured_block(self) -> None:
        logger = ConcreteLogger()

        with logger.block("test") as b:
            assert isinstance(b, StructuredBlock)

    def test_print_summary_outputs_panel(self) -> None:
        logger = ConcreteLogger()

        logger.print_summary(
            "Test Pipeline",
            elapsed=12.3,
            stats={"Messages": 100, "Channels": 5},
        )

        output = logger.get_output()
        assert "Test Pipeline Complete" in output
        assert "12.3s" in output


# ---------------------------------------------------------------------------
# TestPullLogger
# ---------------------------------------------------------------------------


class TestPullLogger:
    """Tests for PullLogger (the concrete subclass in pull/logger.py)."""

    def test_rate_limit_logs_warning(self) -> None:
        logger = PullLogger()
        logger._logger = MagicMock()

        logger.rate_limit(1.5)

        logger._logger.warning.assert_called_once()
        assert "1.5" in logger._logger.warning.call_args[0][0]

    def test_retry_with_reason(self) -> None:
        logger = PullLogger()
        logger._logger = MagicMock()

        logger.retry(2, 5, 3.0, reason="timeout")

        msg = logger._logger.warning.call_args[0][0]
        assert "2/5" in msg
        assert "timeout" in msg

    def test_media_failed_logs_warning(self) -> None:
        logger = PullLogger()
        logger._logger = MagicMock()

        logger.media_failed("100", "avatar", "https://cdn/x.png", "404")

        msg = logger._logger.warning.call_args[0][0]
        assert "[100]" in msg
        assert "avatar" in msg
        assert "404" in msg

    def test_guild_entities_counts(self) -> None:
        logger = PullLogger()
        logger.console = _capturing_console()

        logger.guild_entities("Roles", 12, 3)

        output = _output(logger.console)
        assert "Roles" in output
        assert "new rows" in output

    def test_summary_prints_panel(self) -> None:
        logger = PullLogger()
        logger.console = _capturing_console()

        logger.summary(guilds=2, channels=10, messages=500, rows=640, elapsed=5.5)

        output = _output(logger.console)
        assert "Pull Complete" in output
        assert "Rows written" in output
        assert "640" in output

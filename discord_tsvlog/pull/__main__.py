"""CLI entry point for discord_tsvlog.pull.

Usage:
    python -m discord_tsvlog.pull                    # Pull all guilds
    python -m discord_tsvlog.pull --guild-id 123     # Pull specific guild
    python -m discord_tsvlog.pull --channel-id 456   # Pull specific channel
    python -m discord_tsvlog.pull --verbose          # Show more details
    python -m discord_tsvlog.pull --debug            # Show debug info
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from discord_tsvlog.pull.logger import logger
from discord_tsvlog.pull.run import run_pull
from discord_tsvlog.utils.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Discord TSV Log Pull Pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m discord_tsvlog.pull
      Pull all guilds defined in config.json

  python -m discord_tsvlog.pull --guild-id 123456789
      Pull only the specified guild

  python -m discord_tsvlog.pull --channel-id 987654321
      Pull only the specified channel

  python -m discord_tsvlog.pull --config /path/to/config.json
      Use a custom config file

  python -m discord_tsvlog.pull --debug
      Enable debug logging including third-party libraries
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config.json",
        help="Path to config.json (default: config.json)",
    )
    parser.add_argument(
        "--guild-id",
        type=str,
        help="Pull only this guild ID",
    )
    parser.add_argument(
        "--channel-id",
        type=str,
        help="Pull only this channel ID",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (DEBUG level)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode with third-party library logs",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Optional file to write logs to",
    )
    return parser


def main() -> None:
    """CLI entry point."""
    args = build_parser().parse_args()

    # Configure logging based on CLI flags
    if args.debug:
        log_level = logging.DEBUG
        debug_third_party = True
    elif args.verbose:
        log_level = logging.DEBUG
        debug_third_party = False
    else:
        log_level = logging.INFO
        debug_third_party = False

    setup_logging(
        level=log_level,
        log_file=args.log_file,
        debug_third_party=debug_third_party,
    )

    logger.info("Starting Discord TSV log pull")

    try:
        asyncio.run(
            run_pull(
                config_path=args.config,
                guild_id=args.guild_id,
                channel_id=args.channel_id,
            )
        )
        logger.success("Pull complete!")
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        raise


if __name__ == "__main__":
    main()

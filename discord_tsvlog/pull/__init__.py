"""Discord TSV Log Pull Pipeline.

This package pulls Discord guild metadata and channel messages into
append-only tab-separated log files, resuming from what those files
already hold.

Usage:
    python -m discord_tsvlog.pull                   # Pull all guilds in config
    python -m discord_tsvlog.pull --guild-id X      # Pull specific guild
    python -m discord_tsvlog.pull --channel-id X    # Pull specific channel
"""

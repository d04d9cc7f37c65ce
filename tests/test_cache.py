"""Tests for discord_tsvlog.logstore.cache (replay and change detection)."""

from __future__ import annotations

from pathlib import Path

import pytest

from discord_tsvlog.logentry import (
    Channel,
    Embed,
    Emoji,
    Guild,
    Member,
    PermissionOverwrite,
    Reaction,
    Role,
    make_entry,
)
from discord_tsvlog.logstore import (
    LogFormatError,
    LogWriter,
    needs_write,
    new_cache,
    reconstruct,
    remember,
)


def _entry(entity, timestamp: str = "T"):
    return make_entry("history", "add", entity, timestamp=timestamp)


GUILD_ENTITIES = [
    Guild(id="100", name="Test", owner_id="42", afk_timeout=300),
    Channel(id="500", type=0, position=1, name="chat"),
    Channel(id="501", type=0, position=2, name="memes"),
    PermissionOverwrite(id="R1", type=0, channel_id="500", allow=1024),
    PermissionOverwrite(id="R1", type=0, channel_id="501", deny=1024),
    Role(id="R1", name="Mods", color=0),
    Emoji(id="900", name="blob"),
    Member(user_id="42", username="alice", roles=("R2", "R1")),
    Member(user_id="43", username="bob"),
]


# ---------------------------------------------------------------------------
# TestNeedsWrite
# ---------------------------------------------------------------------------


class TestNeedsWrite:
    """Tests for the change detector."""

    def test_absent_needs_write(self) -> None:
        assert needs_write(new_cache(), _entry(Role(id="R1", name="Mods"))) is True

    def test_identical_does_not(self) -> None:
        cache = new_cache()
        remember(cache, _entry(Role(id="R1", name="Mods")))

        assert needs_write(cache, _entry(Role(id="R1", name="Mods"))) is False

    def test_timestamp_and_fetch_type_ignored(self) -> None:
        cache = new_cache()
        remember(cache, _entry(Role(id="R1", name="Mods"), timestamp="earlier"))

        entry = make_entry("live", "add", Role(id="R1", name="Mods"), timestamp="later")

        assert needs_write(cache, entry) is False

    @pytest.mark.parametrize(
        "changed",
        [
            Role(id="R1", name="Moderators"),
            Role(id="R1", name="Mods", color=5),
            Role(id="R1", name="Mods", position=3),
            Role(id="R1", name="Mods", permissions=8),
            Role(id="R1", name="Mods", hoist=True),
        ],
    )
    def test_any_single_field_change_needs_write(self, changed: Role) -> None:
        cache = new_cache()
        remember(cache, _entry(Role(id="R1", name="Mods")))

        assert needs_write(cache, _entry(changed)) is True

    def test_comparison_is_case_sensitive(self) -> None:
        cache = new_cache()
        remember(cache, _entry(Role(id="R1", name="Mods")))

        assert needs_write(cache, _entry(Role(id="R1", name="mods"))) is True

    def test_role_order_does_not_matter(self) -> None:
        cache = new_cache()
        remember(cache, _entry(Member(user_id="42", username="alice", roles=("3", "1", "2"))))

        entry = _entry(Member(user_id="42", username="alice", roles=("2", "3", "1")))

        assert needs_write(cache, entry) is False

    def test_ids_of_different_types_do_not_collide(self) -> None:
        cache = new_cache()
        remember(cache, _entry(Role(id="100", name="@everyone")))

        assert needs_write(cache, _entry(Guild(id="100", name="Test", owner_id="42"))) is True

    def test_overwrites_keyed_by_channel(self) -> None:
        cache = new_cache()
        remember(cache, _entry(PermissionOverwrite(id="R1", type=0, channel_id="500", allow=1024)))

        other_channel = PermissionOverwrite(id="R1", type=0, channel_id="501", allow=1024)

        assert needs_write(cache, _entry(other_channel)) is True

    def test_reactions_keyed_by_message_emoji_user(self) -> None:
        cache = new_cache()
        remember(cache, _entry(Reaction(user_id="42", message_id="5", emoji="👍")))

        assert needs_write(cache, _entry(Reaction(user_id="42", message_id="5", emoji="👍"))) is False
        assert needs_write(cache, _entry(Reaction(user_id="42", message_id="5", emoji="🎉"))) is True

    def test_embeds_keyed_by_message(self) -> None:
        cache = new_cache()
        remember(cache, _entry(Embed(message_id="5", payload={"title": "a"})))

        assert needs_write(cache, _entry(Embed(message_id="5", payload={"title": "b"}))) is True


# ---------------------------------------------------------------------------
# TestReconstruct
# ---------------------------------------------------------------------------


class TestReconstruct:
    """Tests for replaying a log file into a cache."""

    def test_last_write_wins(self, log_path: Path, fixed_clock) -> None:
        log_path.parent.mkdir(parents=True)
        with LogWriter(log_path, clock=fixed_clock) as writer:
            writer.write(Role(id="R1", name="Mods", color=0))
            writer.write(Role(id="R1", name="Mods", color=5))

        cache = reconstruct(log_path)

        assert cache["role"][("R1",)] == ("R1", "Mods", "5", "0", "0", "")

    def test_replay_is_deterministic(self, log_path: Path, fixed_clock) -> None:
        log_path.parent.mkdir(parents=True)
        with LogWriter(log_path, clock=fixed_clock) as writer:
            for entity in GUILD_ENTITIES:
                writer.write(entity)

        assert reconstruct(log_path) == reconstruct(log_path)

    def test_replay_equivalence(self, log_path: Path, fixed_clock) -> None:
        """Re-encoding the entities a file was built from needs no writes."""
        log_path.parent.mkdir(parents=True)
        with LogWriter(log_path, clock=fixed_clock) as writer:
            for entity in GUILD_ENTITIES:
                writer.write_if_changed(entity, new_cache())

        cache = reconstruct(log_path)

        for entity in GUILD_ENTITIES:
            assert needs_write(cache, _entry(entity)) is False

    def test_content_with_control_characters(self, log_path: Path, fixed_clock) -> None:
        log_path.parent.mkdir(parents=True)
        channel = Channel(id="500", type=0, topic="rules:\n1.\tbe nice\\")
        with LogWriter(log_path, clock=fixed_clock) as writer:
            writer.write(channel)

        assert needs_write(reconstruct(log_path), _entry(channel)) is False

    def test_malformed_file_raises(self, log_path: Path) -> None:
        log_path.parent.mkdir(parents=True)
        log_path.write_text("T\thistory\tadd\trole\tR1\n", encoding="utf-8")

        with pytest.raises(LogFormatError):
            reconstruct(log_path)

    def test_missing_file_raises_os_error(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            reconstruct(tmp_path / "absent.tsv")

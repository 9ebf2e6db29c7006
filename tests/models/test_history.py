"""Unit tests for history navigation, tab completion and the clipboard ring."""

import pytest

from models.history import (
    CLIPBOARD_CAPACITY,
    NOT_NAVIGATING,
    ClipboardBackend,
    ClipboardRing,
    CommandHistory,
    complete_input,
    completion_directory,
    navigate_next,
    navigate_previous,
)

HOME_ENTRIES = [("Documents", True), ("Tools", True), ("Downloads", True), ("notes.txt", False)]


class TestNavigation:
    """Test history cursor movement."""

    def test_previous_from_idle_selects_newest(self):
        assert navigate_previous(["a", "b", "c"], NOT_NAVIGATING) == (2, "c")

    def test_previous_stops_at_oldest(self):
        assert navigate_previous(["a", "b"], 0) == (0, "a")

    def test_previous_on_empty_history(self):
        assert navigate_previous([], NOT_NAVIGATING) == (NOT_NAVIGATING, None)

    def test_next_when_not_navigating(self):
        assert navigate_next(["a"], NOT_NAVIGATING) == (NOT_NAVIGATING, None)

    def test_next_past_newest_clears_input(self):
        assert navigate_next(["a", "b"], 1) == (NOT_NAVIGATING, "")

    def test_walk_back_and_forth(self):
        """Walking to the oldest entry and back out ends with an empty input."""
        history = CommandHistory()
        for line in ["A", "B", "C"]:
            history.append(line)

        assert [history.previous() for _ in range(3)] == ["C", "B", "A"]
        assert [history.next() for _ in range(3)] == ["B", "C", ""]
        assert history.cursor == NOT_NAVIGATING

    def test_append_resets_cursor(self):
        history = CommandHistory(entries=["a"])
        history.previous()
        history.append("b")
        assert history.cursor == NOT_NAVIGATING
        assert history.entries == ["a", "b"]


class TestCompleteInput:
    """Test tab completion priority."""

    def test_command_name(self):
        assert complete_input("whoa", []) == "whoami"

    def test_first_command_match_wins(self):
        assert complete_input("c", []) == "cat"

    def test_flag(self):
        assert complete_input("ls -l", HOME_ENTRIES) == "ls -l"
        assert complete_input("mkdir -", HOME_ENTRIES) == "mkdir -p"

    def test_unknown_command_flags_fall_through_to_files(self):
        assert complete_input("foo -x", HOME_ENTRIES) == "foo -x"

    def test_directory_gets_slash(self):
        assert complete_input("cd Doc", HOME_ENTRIES) == "cd Documents/"

    def test_first_file_match_wins(self):
        assert complete_input("cd Do", HOME_ENTRIES) == "cd Documents/"

    def test_file(self):
        assert complete_input("cat no", HOME_ENTRIES) == "cat notes.txt"

    def test_single_token_falls_back_to_files(self):
        assert complete_input("Too", HOME_ENTRIES) == "Tools/"

    def test_directory_part_kept(self):
        entries = [("welcome.txt", False)]
        assert complete_input("cat Documents/Notes/we", entries) == "cat Documents/Notes/welcome.txt"

    def test_absolute_directory_part(self):
        assert complete_input("ls /et", [("etc", True)]) == "ls /etc/"

    def test_trailing_slash_unchanged(self):
        assert complete_input("ls Documents/", [("Notes", True)]) == "ls Documents/"

    def test_trailing_space_unchanged(self):
        assert complete_input("ls ", HOME_ENTRIES) == "ls "

    def test_no_match_unchanged(self):
        assert complete_input("cat zzz", HOME_ENTRIES) == "cat zzz"


class TestCompletionDirectory:
    """Test the directory part of a completion token."""

    @pytest.mark.parametrize(
        "token, expected",
        [("Documents/No", "Documents"), ("/et", "/"), ("/etc/pa", "/etc"), ("file", None)],
    )
    def test_directory_part(self, token, expected):
        assert completion_directory(token) == expected


class TestClipboardRing:
    """Test the bounded clipboard ring."""

    def test_most_recent_first(self):
        ring = ClipboardRing()
        ring.record("one")
        ring.record("two")
        assert ring.items == ["two", "one"]

    def test_duplicate_head_ignored(self):
        ring = ClipboardRing()
        assert ring.record("one") is True
        assert ring.record("one") is False
        assert ring.items == ["one"]

    def test_empty_ignored(self):
        ring = ClipboardRing()
        assert ring.record("") is False
        assert ring.items == []

    def test_capacity(self):
        ring = ClipboardRing()
        for n in range(CLIPBOARD_CAPACITY + 5):
            ring.record(str(n))
        assert len(ring.items) == CLIPBOARD_CAPACITY
        assert ring.items[0] == str(CLIPBOARD_CAPACITY + 4)

    def test_get(self):
        ring = ClipboardRing(items=["a", "b"])
        assert ring.get(1) == "b"
        assert ring.get(2) is None
        assert ring.get(-1) is None


class TestClipboardBackend:
    def test_read_back(self):
        backend = ClipboardBackend()
        assert backend.read_text() == ""
        backend.write_text("copied")
        assert backend.read_text() == "copied"

"""Command history, clipboard ring and tab completion.

Navigation and completion are pure functions over plain values so the
terminal session can apply them as state transitions and a presentation
layer can reuse them without a session.
"""

from typing import Iterable, Optional

from pydantic import BaseModel, Field

NOT_NAVIGATING = -1
CLIPBOARD_CAPACITY = 10

KNOWN_COMMANDS = [
    "cat", "cd", "chmod", "clear", "cp", "date", "echo", "grep", "head", "help",
    "history", "kill", "ls", "mkdir", "mv", "ps", "pwd", "rm", "tail",
    "touch", "uname", "whoami", "nmap", "hydra", "sqlmap", "python", "ssh",
]

COMMAND_FLAGS: dict[str, list[str]] = {
    "ls": ["-a", "-l", "-la", "-al", "-R", "-h", "-t", "-S", "-r"],
    "grep": ["-i", "-r", "-v", "-n", "-E", "-c"],
    "rm": ["-r", "-f", "-rf", "-i"],
    "cp": ["-r", "-f", "-i", "-v"],
    "mv": ["-f", "-i", "-v", "-n"],
    "mkdir": ["-p", "-v"],
    "ps": ["-e", "-f", "-ef", "aux"],
    "nmap": ["-sS", "-sV", "-A", "-p", "-O", "-T4", "-Pn", "-v", "-sC"],
    "uname": ["-a", "-r", "-m", "-s", "-n"],
    "chmod": ["+x", "-R", "777", "755", "644", "600", "-x"],
    "tar": ["-czvf", "-xzvf", "-tf", "-cf", "-xf"],
    "ssh": ["-p", "-i", "-L", "-R"],
    "head": ["-n", "-c", "-q"],
    "tail": ["-n", "-f", "-q"],
    "python": ["-m", "-c", "-V"],
}


def navigate_previous(entries: list[str], cursor: int) -> tuple[int, Optional[str]]:
    """Move the history cursor toward the oldest entry.

    From ``NOT_NAVIGATING`` the newest entry is selected; at the oldest entry
    the cursor stays put.

    Args:
        entries: History entries, oldest first.
        cursor: Current cursor position.

    Returns:
        ``(new_cursor, input_text)``; ``input_text`` is None when the
        history is empty and the input should be left alone.
    """
    if not entries:
        return cursor, None
    if cursor == NOT_NAVIGATING:
        new_cursor = len(entries) - 1
    else:
        new_cursor = max(0, cursor - 1)
    return new_cursor, entries[new_cursor]


def navigate_next(entries: list[str], cursor: int) -> tuple[int, Optional[str]]:
    """Move the history cursor toward the newest entry.

    Stepping past the newest entry clears the input and stops navigating.

    Returns:
        ``(new_cursor, input_text)``; ``input_text`` is None when not
        navigating and the input should be left alone.
    """
    if cursor == NOT_NAVIGATING:
        return cursor, None
    new_cursor = cursor + 1
    if new_cursor >= len(entries):
        return NOT_NAVIGATING, ""
    return new_cursor, entries[new_cursor]


def _first_prefix_match(candidates: Iterable[str], prefix: str) -> Optional[str]:
    for candidate in candidates:
        if candidate.startswith(prefix):
            return candidate
    return None


def complete_input(
    text: str,
    directory_entries: Iterable[tuple[str, bool]],
    commands: Iterable[str] = KNOWN_COMMANDS,
    flags: dict[str, list[str]] = COMMAND_FLAGS,
) -> str:
    """Tab-complete the last token of an input line.

    Strict priority, first match wins, no cycling:

    1. Single token: prefix-match against command names.
    2. Several tokens, last one starting with ``-``: per-command flags.
    3. Otherwise: prefix-match the last token against directory entries.

    Args:
        text: The current input line.
        directory_entries: ``(name, is_directory)`` pairs to complete
            file names from. For tokens containing ``/`` the caller passes
            the entries of the token's directory part.
        commands: Known command names.
        flags: Per-command flag table.

    Returns:
        The completed input line (unchanged when nothing matches).
    """
    tokens = text.split(" ")
    last = tokens[-1]
    if not last:
        return text

    if len(tokens) == 1:
        match = _first_prefix_match(commands, last)
        if match:
            return match

    if len(tokens) > 1 and last.startswith("-"):
        match = _first_prefix_match(flags.get(tokens[0], []), last)
        if match:
            tokens[-1] = match
            return " ".join(tokens)

    directory_part, _, name_prefix = last.rpartition("/")
    if "/" in last and not name_prefix:
        return text
    for name, is_directory in directory_entries:
        if name.startswith(name_prefix):
            completed = name + "/" if is_directory else name
            tokens[-1] = f"{directory_part}/{completed}" if "/" in last else completed
            return " ".join(tokens)

    return text


def completion_directory(last_token: str) -> Optional[str]:
    """Return the directory part of a token being completed, if any.

    Example:
        >>> completion_directory("Documents/No")
        'Documents'
        >>> completion_directory("/et")
        '/'
        >>> completion_directory("file") is None
        True
    """
    if "/" not in last_token:
        return None
    directory_part = last_token.rpartition("/")[0]
    return directory_part or "/"


class CommandHistory(BaseModel):
    """Append-only command history with a navigation cursor.

    Args:
        entries: Submitted command lines, oldest first.
        cursor: Navigation index, -1 when not navigating.
    """

    entries: list[str] = Field(default_factory=list, description="Submitted lines, oldest first")
    cursor: int = Field(default=NOT_NAVIGATING, description="Navigation index (-1 = not navigating)")

    def append(self, line: str) -> None:
        self.entries.append(line)
        self.cursor = NOT_NAVIGATING

    def reset_cursor(self) -> None:
        self.cursor = NOT_NAVIGATING

    def previous(self) -> Optional[str]:
        self.cursor, text = navigate_previous(self.entries, self.cursor)
        return text

    def next(self) -> Optional[str]:
        self.cursor, text = navigate_next(self.entries, self.cursor)
        return text


class ClipboardRing(BaseModel):
    """Bounded clipboard history, most recent first.

    Args:
        items: Copied texts, most recent first.
        capacity: Maximum number of retained items.
    """

    items: list[str] = Field(default_factory=list, description="Copied texts, most recent first")
    capacity: int = Field(default=CLIPBOARD_CAPACITY, ge=1, description="Maximum retained items")

    def record(self, text: str) -> bool:
        """Record copied text.

        Returns:
            False if the text was empty or equal to the current head.
        """
        if not text or (self.items and self.items[0] == text):
            return False
        self.items = [text, *self.items][: self.capacity]
        return True

    def get(self, index: int) -> Optional[str]:
        if 0 <= index < len(self.items):
            return self.items[index]
        return None


class ClipboardBackend:
    """Opaque system clipboard primitives.

    The default implementation keeps the clipboard in memory; a host UI can
    substitute one that talks to the real clipboard.
    """

    def __init__(self) -> None:
        self._text = ""

    def read_text(self) -> str:
        return self._text

    def write_text(self, text: str) -> None:
        self._text = text

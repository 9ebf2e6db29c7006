"""Terminal sessions.

A session is an explicit state value (working directory, visible log, input
line, history, clipboard ring, turn state) plus the transitions a
presentation layer may request: submit a line, edit the input, navigate
history, complete, interrupt, copy and paste.

Turn state machine::

    IDLE -> SUBMITTED -> PROCESSING -> RENDERED  -> IDLE
                                    -> DELEGATED -> IDLE
                                    -> CLEARED   -> IDLE

Exactly one line is in flight per session; submitting while the session is
not idle raises ``SessionBusyError``.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from models.commands import expand_home
from models.config import Settings
from models.errors import NotADirectory, PathNotFound, SessionBusyError
from models.filesystem import FileSystemEngine
from models.gateway import FallbackGateway
from models.history import (
    ClipboardBackend,
    ClipboardRing,
    CommandHistory,
    complete_input,
    completion_directory,
)
from models.pipeline import OutcomeKind, PipelineExecutor, PipelineOutcome
from models.windows import WindowManager

logger = logging.getLogger(__name__)

INTERRUPT_MARKER = "^C"


class TurnState(str, Enum):
    """Where a session is in processing a submitted line."""

    IDLE = "idle"
    SUBMITTED = "submitted"
    PROCESSING = "processing"
    RENDERED = "rendered"
    DELEGATED = "delegated"
    CLEARED = "cleared"


ALLOWED_TRANSITIONS: dict[TurnState, set[TurnState]] = {
    TurnState.IDLE: {TurnState.SUBMITTED},
    TurnState.SUBMITTED: {TurnState.PROCESSING},
    TurnState.PROCESSING: {TurnState.RENDERED, TurnState.DELEGATED, TurnState.CLEARED},
    TurnState.RENDERED: {TurnState.IDLE},
    TurnState.DELEGATED: {TurnState.IDLE},
    TurnState.CLEARED: {TurnState.IDLE},
}

_OUTCOME_STATES = {
    OutcomeKind.RENDERED: TurnState.RENDERED,
    OutcomeKind.DELEGATED: TurnState.DELEGATED,
    OutcomeKind.CLEARED: TurnState.CLEARED,
}


class LogEntry(BaseModel):
    """One entry in a session's visible log.

    Args:
        kind: "command" for echoed input lines, "output" for results.
        text: Plain text of the entry.
        markup: Optional rich markup for display (output entries only).
        cwd: Working directory the command was typed in (command entries only).
    """

    kind: Literal["command", "output"] = Field(description="Entry kind")
    text: str = Field(description="Plain text")
    markup: Optional[str] = Field(default=None, description="Rich markup for display")
    cwd: Optional[str] = Field(default=None, description="Working directory of a command")


class SessionState(BaseModel):
    """Observable state of one terminal session.

    Args:
        session_id: Unique session identifier.
        cwd: Current working directory, as a path string.
        input_text: Text currently typed on the input line.
        log: Visible log entries, oldest first.
        history: Submitted lines and navigation cursor.
        clipboard: Clipboard ring of copied texts.
        turn_state: Where the session is in processing a line.
        created_at: When the session was created.
    """

    session_id: str = Field(description="Unique session identifier")
    cwd: str = Field(description="Current working directory")
    input_text: str = Field(default="", description="Current input line")
    log: list[LogEntry] = Field(default_factory=list, description="Visible log")
    history: CommandHistory = Field(default_factory=CommandHistory)
    clipboard: ClipboardRing = Field(default_factory=ClipboardRing)
    turn_state: TurnState = Field(default=TurnState.IDLE, description="Turn state")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_processing(self) -> bool:
        return self.turn_state == TurnState.PROCESSING


class TerminalSession:
    """A terminal session bound to a shared engine.

    Args:
        executor: Pipeline executor sharing the environment's engine.
        cwd: Initial working directory.
        settings: Simulator settings (prompt user and host).
        clipboard_backend: System clipboard primitives.
        session_id: Optional explicit identifier.
    """

    def __init__(
        self,
        executor: PipelineExecutor,
        cwd: str,
        settings: Settings | None = None,
        clipboard_backend: ClipboardBackend | None = None,
        session_id: str | None = None,
    ) -> None:
        self.executor = executor
        self.settings = settings or executor.settings
        self.clipboard_backend = clipboard_backend or ClipboardBackend()
        self.state = SessionState(session_id=session_id or uuid.uuid4().hex[:12], cwd=cwd)

    @property
    def session_id(self) -> str:
        return self.state.session_id

    @property
    def engine(self) -> FileSystemEngine:
        return self.executor.engine

    @property
    def prompt(self) -> str:
        """Prompt line, with the home directory shown as ``~``."""
        home = self.settings.home or ""
        cwd = self.state.cwd
        if home and (cwd == home or cwd.startswith(home + "/")):
            cwd = "~" + cwd[len(home):]
        return f"{self.settings.username}@{self.settings.hostname}:{cwd}$"

    def _transition(self, new_state: TurnState) -> None:
        current = self.state.turn_state
        if new_state not in ALLOWED_TRANSITIONS[current]:
            raise RuntimeError(f"Invalid turn transition {current.value} -> {new_state.value}")
        self.state.turn_state = new_state

    def _append_output(self, text: str, markup: str | None = None) -> None:
        if text:
            self.state.log.append(LogEntry(kind="output", text=text, markup=markup))

    # ===== Submission =====

    async def submit(self, line: str | None = None) -> PipelineOutcome | None:
        """Submit a line (or the current input) for execution.

        Whitespace-only lines are ignored.

        Args:
            line: The line to run. Defaults to the current input text.

        Returns:
            The outcome of the line, or None for a whitespace-only line.

        Raises:
            SessionBusyError: If another line is still being processed.
        """
        if self.state.turn_state != TurnState.IDLE:
            raise SessionBusyError(self.session_id, self.state.turn_state.value)

        line = self.state.input_text if line is None else line
        if not line.strip():
            return None

        cwd = self.state.cwd
        self._transition(TurnState.SUBMITTED)
        self.state.log.append(LogEntry(kind="command", text=line, cwd=cwd))
        self.state.history.append(line)
        self.state.input_text = ""
        logger.info(f"Session {self.session_id} submitted {line!r} in {cwd}")

        try:
            self._transition(TurnState.PROCESSING)
            try:
                outcome = await self.executor.execute(line, cwd, self.state.history.entries)
            except Exception as e:
                logger.exception(f"Session {self.session_id} failed running {line!r}")
                outcome = PipelineOutcome(kind=OutcomeKind.RENDERED, output=f"Error: {e}")

            self._transition(_OUTCOME_STATES[outcome.kind])
            if outcome.kind == OutcomeKind.CLEARED:
                self.state.log.clear()
            else:
                self._append_output(outcome.output, outcome.markup)
                if outcome.new_cwd is not None:
                    self.state.cwd = outcome.new_cwd
        finally:
            self.state.turn_state = TurnState.IDLE

        return outcome

    # ===== Input Line =====

    def set_input(self, text: str) -> None:
        self.state.input_text = text

    def history_previous(self) -> str:
        text = self.state.history.previous()
        if text is not None:
            self.state.input_text = text
        return self.state.input_text

    def history_next(self) -> str:
        text = self.state.history.next()
        if text is not None:
            self.state.input_text = text
        return self.state.input_text

    def complete(self) -> str:
        """Tab-complete the input line against commands, flags and paths."""
        text = self.state.input_text
        last = text.split(" ")[-1]
        directory = completion_directory(last)
        home = self.settings.home or ""
        base = self.engine.resolve_path(
            self.state.cwd, expand_home(directory, home) if directory else "."
        )
        entries = [(node.name, node.is_directory) for node in self.engine.read_directory(base) or []]
        self.state.input_text = complete_input(text, entries)
        return self.state.input_text

    def interrupt(self) -> None:
        """Discard the typed input, logging it with an interrupt marker.

        An in-flight gateway call is not cancelled; its response is still
        appended when it arrives.
        """
        self.state.log.append(
            LogEntry(
                kind="command",
                text=self.state.input_text + INTERRUPT_MARKER,
                cwd=self.state.cwd,
            )
        )
        self.state.input_text = ""
        self.state.history.reset_cursor()

    def clear(self) -> None:
        self.state.log.clear()

    # ===== Clipboard =====

    def copy(self, text: str) -> bool:
        """Copy text to the system clipboard and record it in the ring."""
        if not text:
            return False
        self.clipboard_backend.write_text(text)
        return self.state.clipboard.record(text)

    def paste(self, index: int | None = None) -> str:
        """Append clipboard text to the input line.

        Args:
            index: Ring position to paste from. None reads the system clipboard.

        Returns:
            The updated input line.

        Raises:
            IndexError: If ``index`` is outside the ring.
        """
        if index is None:
            text = self.clipboard_backend.read_text()
        else:
            text = self.state.clipboard.get(index)
            if text is None:
                raise IndexError(f"Clipboard entry {index} does not exist")
        self.state.input_text += text
        return self.state.input_text

    def get_snapshot(self) -> dict[str, Any]:
        snapshot = self.state.model_dump(mode="json")
        snapshot["prompt"] = self.prompt
        snapshot["is_processing"] = self.state.is_processing
        return snapshot


class SessionManager:
    """Owns every terminal session of one environment.

    Args:
        engine: Shared filesystem engine.
        gateway: AI fallback gateway shared by all sessions.
        windows: Window manager shared by all sessions.
        settings: Simulator settings.
    """

    def __init__(
        self,
        engine: FileSystemEngine,
        gateway: FallbackGateway | None = None,
        windows: WindowManager | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.executor = PipelineExecutor(engine, gateway, windows, self.settings)
        self._sessions: dict[str, TerminalSession] = {}
        self._lock = threading.Lock()

    @property
    def engine(self) -> FileSystemEngine:
        return self.executor.engine

    async def create(self, start_path: str | None = None, auto_run: str | None = None) -> TerminalSession:
        """Create a session, optionally running a first line.

        Args:
            start_path: Initial working directory (defaults to home).
            auto_run: Line submitted as soon as the session exists.

        Returns:
            The new session.

        Raises:
            PathNotFound: If ``start_path`` does not exist.
            NotADirectory: If ``start_path`` is not a directory.
        """
        home = self.settings.home or "/"
        cwd = self.engine.resolve_path("/", expand_home(start_path or home, home))
        node = self.engine.get_node(cwd)
        if node is None:
            raise PathNotFound(str(cwd))
        if not node.is_directory:
            raise NotADirectory(str(cwd))

        session = TerminalSession(self.executor, str(cwd), self.settings)
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info(f"Created session {session.session_id} in {cwd}")

        if auto_run:
            await session.submit(auto_run)
        return session

    def get(self, session_id: str) -> Optional[TerminalSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def list_sessions(self) -> list[TerminalSession]:
        with self._lock:
            return list(self._sessions.values())

    def close(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.info(f"Closed session {session_id}")
        return session is not None

    def close_all(self) -> None:
        with self._lock:
            self._sessions.clear()

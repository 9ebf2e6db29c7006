"""Shared request and response models for API endpoints.

Models used by more than one router live here; route-specific request
bodies are defined next to their handlers.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from models.history import ClipboardRing, CommandHistory
from models.session import LogEntry, TerminalSession, TurnState
from models.windows import Window


class OperationResponse(BaseModel):
    """Response for mutating endpoints that return no resource.

    Attributes:
        success: Whether the operation was applied.
        message: Human-readable message describing the result.
        path: Path the operation was applied to, when there is one.
    """

    success: bool
    message: str
    path: Optional[str] = None


class SessionResponse(BaseModel):
    """Full observable state of a terminal session.

    Attributes:
        session_id: Unique session identifier.
        cwd: Current working directory.
        prompt: Prompt line for the session.
        input_text: Current input line.
        log: Visible log entries, oldest first.
        history: Submitted lines and navigation cursor.
        clipboard: Clipboard ring.
        turn_state: Where the session is in processing a line.
        is_processing: True while a line is running.
        created_at: When the session was created.
    """

    session_id: str
    cwd: str
    prompt: str
    input_text: str
    log: list[LogEntry]
    history: CommandHistory
    clipboard: ClipboardRing
    turn_state: TurnState
    is_processing: bool
    created_at: datetime

    @classmethod
    def from_session(cls, session: TerminalSession) -> "SessionResponse":
        return cls(**session.get_snapshot())


class InputResponse(BaseModel):
    """Input line after an editing operation.

    Attributes:
        session_id: Session the input belongs to.
        input_text: The updated input line.
        history_cursor: History navigation cursor (-1 = not navigating).
    """

    session_id: str
    input_text: str
    history_cursor: int = Field(description="History cursor (-1 = not navigating)")

    @classmethod
    def from_session(cls, session: TerminalSession) -> "InputResponse":
        return cls(
            session_id=session.session_id,
            input_text=session.state.input_text,
            history_cursor=session.state.history.cursor,
        )


class WindowResponse(BaseModel):
    """An open window."""

    window_id: str
    app_id: str
    app_name: str
    title: str
    opened_at: datetime

    @classmethod
    def from_window(cls, window: Window) -> "WindowResponse":
        return cls(**window.to_dict())


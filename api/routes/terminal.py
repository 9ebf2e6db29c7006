"""Terminal session endpoints.

Lets a presentation layer drive terminal sessions: create and close them,
edit the input line, navigate history, complete, submit lines, interrupt,
and use the clipboard ring. Every session shares the environment's
filesystem engine.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from api.dependencies import SessionManagerDep
from api.exceptions import SessionNotFoundError
from api.models import InputResponse, OperationResponse, SessionResponse
from models.session import SessionManager, TerminalSession

router = APIRouter(
    prefix="/terminal/sessions",
    tags=["terminal"],
)


# Request Models


class CreateSessionRequest(BaseModel):
    """Request to open a terminal session.

    Args:
        start_path: Initial working directory (defaults to home).
        auto_run: Line submitted as soon as the session exists.
    """

    start_path: Optional[str] = Field(default=None, description="Initial working directory")
    auto_run: Optional[str] = Field(default=None, description="Line to run on creation")


class SubmitRequest(BaseModel):
    """Request to run a line. Omit ``line`` to submit the current input."""

    line: Optional[str] = Field(default=None, description="Line to run")


class SetInputRequest(BaseModel):
    """Request to replace the input line."""

    text: str = Field(description="New input text")


class CopyRequest(BaseModel):
    """Request to copy text to the clipboard."""

    text: str = Field(min_length=1, description="Text to copy")


class PasteRequest(BaseModel):
    """Request to paste into the input line.

    Args:
        index: Clipboard ring position. Omit to paste the system clipboard.
    """

    index: Optional[int] = Field(default=None, ge=0, description="Clipboard ring position")


# Response Models


class SessionListResponse(BaseModel):
    sessions: list[SessionResponse]
    count: int


class SubmitResponse(BaseModel):
    """Result of running one line.

    Args:
        outcome: rendered, delegated or cleared; None for a blank line.
        output: Plain text appended to the log.
        markup: Rich markup rendering of ``output``.
        session: Session state after the line finished.
    """

    outcome: Optional[str] = Field(description="How the line finished")
    output: str = Field(default="", description="Plain text output")
    markup: Optional[str] = Field(default=None, description="Rich markup for display")
    session: SessionResponse


class ClipboardResponse(BaseModel):
    session_id: str
    items: list[str]
    current: str = Field(description="System clipboard text")


class CopyResponse(BaseModel):
    recorded: bool = Field(description="False when the text equalled the ring head")
    items: list[str]


# Helpers


def _get_session(manager: SessionManager, session_id: str) -> TerminalSession:
    session = manager.get(session_id)
    if session is None:
        raise SessionNotFoundError(session_id)
    return session


# Route Handlers


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(request: CreateSessionRequest, manager: SessionManagerDep):
    """Open a terminal session, optionally running a first line."""
    session = await manager.create(start_path=request.start_path, auto_run=request.auto_run)
    return SessionResponse.from_session(session)


@router.get("", response_model=SessionListResponse)
async def list_sessions(manager: SessionManagerDep):
    sessions = [SessionResponse.from_session(session) for session in manager.list_sessions()]
    return SessionListResponse(sessions=sessions, count=len(sessions))


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, manager: SessionManagerDep):
    return SessionResponse.from_session(_get_session(manager, session_id))


@router.delete("/{session_id}", response_model=OperationResponse)
async def close_session(session_id: str, manager: SessionManagerDep):
    if not manager.close(session_id):
        raise SessionNotFoundError(session_id)
    return OperationResponse(success=True, message=f"Session {session_id} closed")


@router.post("/{session_id}/submit", response_model=SubmitResponse)
async def submit(session_id: str, request: SubmitRequest, manager: SessionManagerDep):
    """Run a line in the session.

    Lines the builtins cannot handle are answered by the AI fallback
    gateway. Returns 409 if the session is still processing another line.
    """
    session = _get_session(manager, session_id)
    outcome = await session.submit(request.line)
    return SubmitResponse(
        outcome=outcome.kind.value if outcome else None,
        output=outcome.output if outcome else "",
        markup=outcome.markup if outcome else None,
        session=SessionResponse.from_session(session),
    )


@router.put("/{session_id}/input", response_model=InputResponse)
async def set_input(session_id: str, request: SetInputRequest, manager: SessionManagerDep):
    session = _get_session(manager, session_id)
    session.set_input(request.text)
    return InputResponse.from_session(session)


@router.post("/{session_id}/history/previous", response_model=InputResponse)
async def history_previous(session_id: str, manager: SessionManagerDep):
    session = _get_session(manager, session_id)
    session.history_previous()
    return InputResponse.from_session(session)


@router.post("/{session_id}/history/next", response_model=InputResponse)
async def history_next(session_id: str, manager: SessionManagerDep):
    session = _get_session(manager, session_id)
    session.history_next()
    return InputResponse.from_session(session)


@router.post("/{session_id}/complete", response_model=InputResponse)
async def complete(session_id: str, manager: SessionManagerDep):
    """Tab-complete the input line."""
    session = _get_session(manager, session_id)
    session.complete()
    return InputResponse.from_session(session)


@router.post("/{session_id}/interrupt", response_model=SessionResponse)
async def interrupt(session_id: str, manager: SessionManagerDep):
    """Discard the typed input (Ctrl+C)."""
    session = _get_session(manager, session_id)
    session.interrupt()
    return SessionResponse.from_session(session)


@router.post("/{session_id}/clear", response_model=SessionResponse)
async def clear(session_id: str, manager: SessionManagerDep):
    session = _get_session(manager, session_id)
    session.clear()
    return SessionResponse.from_session(session)


@router.get("/{session_id}/clipboard", response_model=ClipboardResponse)
async def get_clipboard(session_id: str, manager: SessionManagerDep):
    session = _get_session(manager, session_id)
    return ClipboardResponse(
        session_id=session_id,
        items=session.state.clipboard.items,
        current=session.clipboard_backend.read_text(),
    )


@router.post("/{session_id}/clipboard/copy", response_model=CopyResponse)
async def copy(session_id: str, request: CopyRequest, manager: SessionManagerDep):
    session = _get_session(manager, session_id)
    recorded = session.copy(request.text)
    return CopyResponse(recorded=recorded, items=session.state.clipboard.items)


@router.post("/{session_id}/clipboard/paste", response_model=InputResponse)
async def paste(session_id: str, request: PasteRequest, manager: SessionManagerDep):
    session = _get_session(manager, session_id)
    try:
        session.paste(request.index)
    except IndexError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return InputResponse.from_session(session)

"""Terminal session sub-client for the DES API.

This module provides TerminalClient and AsyncTerminalClient for the
terminal session endpoints (/terminal/sessions/*).

This is an internal module. Import from `client` instead.
"""

from typing import Any

from client._base import AsyncBaseClient, BaseClient
from client.models import (
    ClipboardResponse,
    CopyResponse,
    InputResponse,
    OperationResponse,
    SessionListResponse,
    SessionResponse,
    SubmitResponse,
)


def _create_body(start_path: str | None, auto_run: str | None) -> dict[str, Any]:
    return {"start_path": start_path, "auto_run": auto_run}


class TerminalClient(BaseClient):
    """Synchronous client for terminal sessions.

    A session owns its working directory, input line, log, history and
    clipboard ring. All sessions share the server's filesystem.

    Example:
        with DESClient() as client:
            session = client.terminal.create_session()
            result = client.terminal.submit(session.session_id, "ls -la | grep txt")
            print(result.output)
    """

    _BASE_PATH = "/terminal/sessions"

    def create_session(
        self,
        start_path: str | None = None,
        auto_run: str | None = None,
    ) -> SessionResponse:
        """Open a session.

        Args:
            start_path: Initial working directory (defaults to the home directory).
            auto_run: Line to submit as soon as the session exists.

        Raises:
            NotFoundError: If start_path does not exist.
            APIError: If start_path is a file (status 400).
        """
        data = self._post("", json=_create_body(start_path, auto_run))
        return SessionResponse(**data)

    def list_sessions(self) -> SessionListResponse:
        data = self._get("")
        return SessionListResponse(**data)

    def get_session(self, session_id: str) -> SessionResponse:
        data = self._get(f"/{session_id}")
        return SessionResponse(**data)

    def close_session(self, session_id: str) -> OperationResponse:
        data = self._delete(f"/{session_id}")
        return OperationResponse(**data)

    def submit(self, session_id: str, line: str | None = None) -> SubmitResponse:
        """Run a line, or the session's current input when ``line`` is None.

        Raises:
            ConflictError: If the session is still processing a line.
        """
        data = self._post(f"/{session_id}/submit", json={"line": line})
        return SubmitResponse(**data)

    def set_input(self, session_id: str, text: str) -> InputResponse:
        data = self._put(f"/{session_id}/input", json={"text": text})
        return InputResponse(**data)

    def history_previous(self, session_id: str) -> InputResponse:
        data = self._post(f"/{session_id}/history/previous")
        return InputResponse(**data)

    def history_next(self, session_id: str) -> InputResponse:
        data = self._post(f"/{session_id}/history/next")
        return InputResponse(**data)

    def complete(self, session_id: str) -> InputResponse:
        data = self._post(f"/{session_id}/complete")
        return InputResponse(**data)

    def interrupt(self, session_id: str) -> SessionResponse:
        data = self._post(f"/{session_id}/interrupt")
        return SessionResponse(**data)

    def clear(self, session_id: str) -> SessionResponse:
        data = self._post(f"/{session_id}/clear")
        return SessionResponse(**data)

    def get_clipboard(self, session_id: str) -> ClipboardResponse:
        data = self._get(f"/{session_id}/clipboard")
        return ClipboardResponse(**data)

    def copy(self, session_id: str, text: str) -> CopyResponse:
        data = self._post(f"/{session_id}/clipboard/copy", json={"text": text})
        return CopyResponse(**data)

    def paste(self, session_id: str, index: int | None = None) -> InputResponse:
        """Paste into the input line.

        Args:
            session_id: Target session.
            index: Clipboard ring position; None pastes the system clipboard.

        Raises:
            NotFoundError: If the ring has no item at ``index``.
        """
        data = self._post(f"/{session_id}/clipboard/paste", json={"index": index})
        return InputResponse(**data)


class AsyncTerminalClient(AsyncBaseClient):
    """Asynchronous client for terminal sessions."""

    _BASE_PATH = "/terminal/sessions"

    async def create_session(
        self,
        start_path: str | None = None,
        auto_run: str | None = None,
    ) -> SessionResponse:
        data = await self._post("", json=_create_body(start_path, auto_run))
        return SessionResponse(**data)

    async def list_sessions(self) -> SessionListResponse:
        data = await self._get("")
        return SessionListResponse(**data)

    async def get_session(self, session_id: str) -> SessionResponse:
        data = await self._get(f"/{session_id}")
        return SessionResponse(**data)

    async def close_session(self, session_id: str) -> OperationResponse:
        data = await self._delete(f"/{session_id}")
        return OperationResponse(**data)

    async def submit(self, session_id: str, line: str | None = None) -> SubmitResponse:
        data = await self._post(f"/{session_id}/submit", json={"line": line})
        return SubmitResponse(**data)

    async def set_input(self, session_id: str, text: str) -> InputResponse:
        data = await self._put(f"/{session_id}/input", json={"text": text})
        return InputResponse(**data)

    async def history_previous(self, session_id: str) -> InputResponse:
        data = await self._post(f"/{session_id}/history/previous")
        return InputResponse(**data)

    async def history_next(self, session_id: str) -> InputResponse:
        data = await self._post(f"/{session_id}/history/next")
        return InputResponse(**data)

    async def complete(self, session_id: str) -> InputResponse:
        data = await self._post(f"/{session_id}/complete")
        return InputResponse(**data)

    async def interrupt(self, session_id: str) -> SessionResponse:
        data = await self._post(f"/{session_id}/interrupt")
        return SessionResponse(**data)

    async def clear(self, session_id: str) -> SessionResponse:
        data = await self._post(f"/{session_id}/clear")
        return SessionResponse(**data)

    async def get_clipboard(self, session_id: str) -> ClipboardResponse:
        data = await self._get(f"/{session_id}/clipboard")
        return ClipboardResponse(**data)

    async def copy(self, session_id: str, text: str) -> CopyResponse:
        data = await self._post(f"/{session_id}/clipboard/copy", json={"text": text})
        return CopyResponse(**data)

    async def paste(self, session_id: str, index: int | None = None) -> InputResponse:
        data = await self._post(f"/{session_id}/clipboard/paste", json={"index": index})
        return InputResponse(**data)

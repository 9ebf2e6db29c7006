"""DES API Client Library.

A typed Python client for the DES (Desktop Environment Simulator) REST API,
in synchronous and asynchronous flavours.

Example:
    Synchronous usage::

        from client import DESClient

        with DESClient(base_url="http://localhost:8000") as client:
            session = client.terminal.create_session()
            result = client.terminal.submit(session.session_id, "ls -la")
            print(result.output)

Exports:
    DESClient: Synchronous client for the DES REST API.
    AsyncDESClient: Asynchronous client for the DES REST API.

    Exceptions:
        DESClientError: Base exception for all client errors.
        ConnectionError: Failed to connect to the server.
        TimeoutError: Request timed out.
        APIError: Server returned an error response.
        ValidationError: Request validation failed (HTTP 422).
        NotFoundError: Resource not found (HTTP 404).
        ConflictError: State conflict (HTTP 409).
        ServerError: Server-side error (HTTP 5xx).
"""

from client._filesystem import AsyncFileSystemClient, FileSystemClient
from client._terminal import AsyncTerminalClient, TerminalClient
from client._windows import AsyncWindowsClient, WindowsClient
from client.exceptions import (
    APIError,
    ConflictError,
    ConnectionError,
    DESClientError,
    NotFoundError,
    ServerError,
    TimeoutError,
    ValidationError,
)
from client.models import (
    ClipboardResponse,
    CopyResponse,
    FileResponse,
    HealthResponse,
    InputResponse,
    ListResponse,
    NodeInfo,
    OperationResponse,
    ResolveResponse,
    SessionListResponse,
    SessionResponse,
    StateResponse,
    SubmitResponse,
    TreeResponse,
    WindowListResponse,
    WindowResponse,
)
from client.client import AsyncDESClient, DESClient

__all__ = [
    # Main clients
    "DESClient",
    "AsyncDESClient",
    # Sub-clients
    "FileSystemClient",
    "AsyncFileSystemClient",
    "TerminalClient",
    "AsyncTerminalClient",
    "WindowsClient",
    "AsyncWindowsClient",
    # Exceptions
    "DESClientError",
    "ConnectionError",
    "TimeoutError",
    "APIError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ServerError",
    # Response models
    "HealthResponse",
    "OperationResponse",
    "NodeInfo",
    "TreeResponse",
    "ListResponse",
    "FileResponse",
    "ResolveResponse",
    "StateResponse",
    "SessionResponse",
    "SessionListResponse",
    "SubmitResponse",
    "InputResponse",
    "ClipboardResponse",
    "CopyResponse",
    "WindowResponse",
    "WindowListResponse",
]

"""Client response models for the DES API client.

This module re-exports the shared models from the API layer and defines
client-side mirrors of the route-specific response models.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

# Re-export common models from API layer for client convenience
from api.models import InputResponse, OperationResponse, SessionResponse, WindowResponse

__all__ = [
    # Re-exported from api.models
    "InputResponse",
    "OperationResponse",
    "SessionResponse",
    "WindowResponse",
    # Client-specific models
    "ClipboardResponse",
    "CopyResponse",
    "FileResponse",
    "HealthResponse",
    "ListResponse",
    "NodeInfo",
    "ResolveResponse",
    "SessionListResponse",
    "StateResponse",
    "SubmitResponse",
    "TreeResponse",
    "WindowListResponse",
]


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str = Field(..., description="Server health status")


# Filesystem


class NodeInfo(BaseModel):
    """One node of a directory listing.

    Attributes:
        name: Entry name ("" for the root).
        kind: "file" or "directory".
        permissions: Ten-character mode string (e.g. "-rw-r--r--").
        owner: Owning user.
        group: Owning group.
        size: Content length for files, 4096 for directories.
        created_at: Creation timestamp.
    """

    name: str
    kind: str
    permissions: str
    owner: str
    group: str
    size: int
    created_at: datetime


class TreeResponse(BaseModel):
    path: str
    tree: dict[str, Any]


class ListResponse(BaseModel):
    path: str
    entries: list[NodeInfo]
    count: int


class FileResponse(BaseModel):
    path: str
    content: str
    size: int


class ResolveResponse(BaseModel):
    """A path normalized against a base directory.

    Attributes:
        base: Directory the target was resolved against.
        target: Path as given.
        path: Normalized absolute path.
        exists: Whether a node lives at ``path``.
    """

    base: str
    target: str
    path: str
    exists: bool


class StateResponse(BaseModel):
    last_updated: datetime
    update_count: int
    node_count: int
    issues: list[str] = Field(default_factory=list, description="Invariant violations")


# Terminal


class SessionListResponse(BaseModel):
    sessions: list[SessionResponse]
    count: int


class SubmitResponse(BaseModel):
    """Result of running one line.

    Attributes:
        outcome: "rendered", "delegated" or "cleared"; None for a blank line.
        output: Plain text appended to the session log.
        markup: Rich markup rendering of ``output``, when the command styles it.
        session: Session state after the line finished.
    """

    outcome: Optional[str] = None
    output: str = ""
    markup: Optional[str] = None
    session: SessionResponse


class ClipboardResponse(BaseModel):
    session_id: str
    items: list[str]
    current: str


class CopyResponse(BaseModel):
    recorded: bool
    items: list[str]


# Windows


class WindowListResponse(BaseModel):
    windows: list[WindowResponse]
    count: int

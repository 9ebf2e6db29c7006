"""Window endpoints.

The window manager collaborator as seen by presentation layers: list open
windows, open one for an app, close one. Terminal ``ps`` and ``kill`` see
the same list.
"""

from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from api.dependencies import WindowManagerDep
from api.exceptions import WindowNotFoundError
from api.models import OperationResponse, WindowResponse

router = APIRouter(
    prefix="/windows",
    tags=["windows"],
)


class OpenWindowRequest(BaseModel):
    """Request to open a window.

    Args:
        app_id: Application identifier (terminal, files, browser ...).
        title: Optional title override.
    """

    app_id: str = Field(description="Application identifier")
    title: Optional[str] = Field(default=None, description="Window title")


class WindowListResponse(BaseModel):
    windows: list[WindowResponse]
    count: int


@router.get("", response_model=WindowListResponse)
async def list_windows(windows: WindowManagerDep):
    """List open windows in opening order (the order ps assigns PIDs in)."""
    items = [WindowResponse.from_window(window) for window in windows.list_windows()]
    return WindowListResponse(windows=items, count=len(items))


@router.post("", response_model=WindowResponse, status_code=status.HTTP_201_CREATED)
async def open_window(request: OpenWindowRequest, windows: WindowManagerDep):
    return WindowResponse.from_window(windows.open(request.app_id, request.title))


@router.delete("/{window_id}", response_model=OperationResponse)
async def close_window(window_id: str, windows: WindowManagerDep):
    if not windows.close(window_id):
        raise WindowNotFoundError(window_id)
    return OperationResponse(success=True, message=f"Window {window_id} closed")

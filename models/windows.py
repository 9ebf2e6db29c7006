"""Window manager collaborator.

The shell does not draw windows; it only needs to know which windows are
open (for ``ps``) and to ask for one to be closed (for ``kill``). This module
provides an in-memory window list with exactly that surface.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, PrivateAttr

logger = logging.getLogger(__name__)

# Display names for the applications a window can belong to
APP_NAMES: dict[str, str] = {
    "terminal": "Terminal",
    "files": "File Explorer",
    "browser": "Browser",
    "net_analyzer": "Network Analyzer",
    "settings": "Settings",
    "notes": "Notes",
    "trash": "Trash",
    "text_editor": "Text Editor",
    "task_manager": "Task Manager",
    "paint": "Paint",
    "tictactoe": "Tic Tac Toe",
    "word": "Word",
    "excel": "Excel",
    "powerpoint": "PowerPoint",
    "chatgpt": "ChatGPT",
    "clock": "Clock",
    "camera": "Camera",
    "youtube": "YouTube",
    "vscode": "VS Code",
    "spotify": "Spotify",
}

# Apps that only ever get one window; opening again returns the existing one
SINGLE_INSTANCE_APPS = {"settings", "task_manager"}


class Window(BaseModel):
    """An open window.

    Args:
        window_id: Unique window identifier.
        app_id: Identifier of the owning application.
        title: Window title.
        opened_at: When the window was opened.
    """

    window_id: str = Field(description="Unique window identifier")
    app_id: str = Field(description="Owning application identifier")
    title: str = Field(description="Window title")
    opened_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="When the window opened"
    )

    @property
    def app_name(self) -> str:
        return APP_NAMES.get(self.app_id, self.app_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "window_id": self.window_id,
            "app_id": self.app_id,
            "app_name": self.app_name,
            "title": self.title,
            "opened_at": self.opened_at.isoformat(),
        }


class WindowManager(BaseModel):
    """In-memory list of open windows, in opening order.

    Attributes:
        windows: Currently open windows, oldest first.
    """

    windows: list[Window] = Field(default_factory=list)

    _lock: Any = PrivateAttr(default_factory=threading.Lock)

    def list_windows(self) -> list[Window]:
        """Return the open windows, oldest first."""
        with self._lock:
            return list(self.windows)

    def get_window(self, window_id: str) -> Optional[Window]:
        with self._lock:
            for window in self.windows:
                if window.window_id == window_id:
                    return window
        return None

    def open(self, app_id: str, title: str | None = None) -> Window:
        """Open a window for an application.

        Args:
            app_id: Identifier of the application.
            title: Optional title override (defaults to the app name).

        Returns:
            The new window, or the existing one for single-instance apps.

        Raises:
            ValueError: If the app identifier is unknown.
        """
        if app_id not in APP_NAMES:
            raise ValueError(f"Unknown application: {app_id}")

        with self._lock:
            if title is None and app_id in SINGLE_INSTANCE_APPS:
                for window in self.windows:
                    if window.app_id == app_id:
                        return window

            window = Window(
                window_id=f"{app_id}-{uuid.uuid4().hex[:8]}",
                app_id=app_id,
                title=title or APP_NAMES[app_id],
            )
            self.windows.append(window)

        logger.info(f"Opened window {window.window_id} ({window.app_name})")
        return window

    def close(self, window_id: str) -> bool:
        """Close a window.

        Returns:
            True if the window was open and is now closed.
        """
        with self._lock:
            for index, window in enumerate(self.windows):
                if window.window_id == window_id:
                    self.windows.pop(index)
                    logger.info(f"Closed window {window_id}")
                    return True
        return False

    def clear(self) -> None:
        with self._lock:
            self.windows.clear()

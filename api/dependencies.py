"""Dependency injection providers for the FastAPI application.

This module owns the environment's shared resources (filesystem engine,
window manager, AI fallback gateway and session manager) and exposes them to
route handlers as FastAPI dependencies.
"""

import logging
from typing import Annotated

from fastapi import Depends

from models.config import Settings
from models.filesystem import FileSystemEngine, build_default_tree
from models.gateway import FallbackGateway, create_gateway
from models.session import SessionManager
from models.windows import WindowManager

logger = logging.getLogger(__name__)


# Global state
# One environment per process, created by the app lifespan
_settings: Settings | None = None
_engine: FileSystemEngine | None = None
_windows: WindowManager | None = None
_gateway: FallbackGateway | None = None
_session_manager: SessionManager | None = None


def _require(resource, name: str):
    if resource is None:
        raise RuntimeError(f"{name} not initialized. Call initialize_environment() first.")
    return resource


def get_settings() -> Settings:
    return _require(_settings, "Settings")


def get_filesystem_engine() -> FileSystemEngine:
    """Get the shared FileSystemEngine instance.

    Returns:
        The engine every terminal session operates on.

    Raises:
        RuntimeError: If the environment hasn't been initialized yet.
    """
    return _require(_engine, "FileSystemEngine")


def get_window_manager() -> WindowManager:
    return _require(_windows, "WindowManager")


def get_session_manager() -> SessionManager:
    """Get the shared SessionManager instance.

    Raises:
        RuntimeError: If the environment hasn't been initialized yet.
    """
    return _require(_session_manager, "SessionManager")


def initialize_environment(
    settings: Settings | None = None,
    gateway: FallbackGateway | None = None,
) -> SessionManager:
    """Create the shared environment.

    Called once when the FastAPI app starts up.

    Args:
        settings: Settings to use. Read from the environment when omitted.
        gateway: Gateway override. Built from the settings when omitted.

    Returns:
        The newly created SessionManager.
    """
    global _settings, _engine, _windows, _gateway, _session_manager

    _settings = settings or Settings.from_env()
    _engine = FileSystemEngine(
        root=build_default_tree(
            username=_settings.username,
            home=_settings.home,
            hostname=_settings.hostname,
        ),
        default_owner=_settings.username,
    )
    _windows = WindowManager()
    _gateway = gateway or create_gateway(_settings)
    _session_manager = SessionManager(_engine, _gateway, _windows, _settings)

    logger.info(f"Environment initialized for {_settings.username}@{_settings.hostname}")
    return _session_manager


async def shutdown_environment() -> None:
    """Tear down the shared environment and release the gateway client."""
    global _settings, _engine, _windows, _gateway, _session_manager

    if _session_manager is not None:
        _session_manager.close_all()
    if _gateway is not None:
        await _gateway.close()

    _settings = None
    _engine = None
    _windows = None
    _gateway = None
    _session_manager = None


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
FileSystemEngineDep = Annotated[FileSystemEngine, Depends(get_filesystem_engine)]
WindowManagerDep = Annotated[WindowManager, Depends(get_window_manager)]
SessionManagerDep = Annotated[SessionManager, Depends(get_session_manager)]

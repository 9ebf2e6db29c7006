"""Main entry point for the Desktop Environment Simulator (DES) FastAPI application.

This module creates and configures the FastAPI app instance that serves the
REST API for the simulator's virtual filesystem, terminal sessions and
window list.

To run the development server:
    uvicorn main:app --reload

To run in production:
    uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pydantic import ValidationError

from api.dependencies import initialize_environment, shutdown_environment
from api.exceptions import (
    SessionNotFoundError,
    WindowNotFoundError,
    filesystem_error_handler,
    generic_exception_handler,
    runtime_error_handler,
    session_busy_handler,
    session_not_found_handler,
    validation_exception_handler,
    value_error_handler,
    window_not_found_handler,
)
from api.routes import filesystem as filesystem_routes
from api.routes import terminal as terminal_routes
from api.routes import windows as windows_routes
from models.config import Settings
from models.errors import FileSystemError, SessionBusyError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events.

    Builds the shared environment (filesystem engine, window manager,
    gateway, session manager) at startup and tears it down at shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to FastAPI to handle requests.
    """
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("🚀 Starting DES - Initializing environment...")
    initialize_environment(settings)
    print(f"✅ Environment initialized ({settings.username}@{settings.hostname})")

    yield

    print("🛑 Shutting down DES - Cleaning up environment...")
    await shutdown_environment()
    print("✅ Shutdown complete")


app = FastAPI(
    title="Desktop Environment Simulator (DES)",
    description="API for a simulated desktop's virtual filesystem and terminal shell",
    version="0.1.0",
    lifespan=lifespan,
)

# Register exception handlers
# Specific exceptions before general ones
app.add_exception_handler(SessionNotFoundError, session_not_found_handler)
app.add_exception_handler(SessionBusyError, session_busy_handler)
app.add_exception_handler(WindowNotFoundError, window_not_found_handler)
app.add_exception_handler(FileSystemError, filesystem_error_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(ValueError, value_error_handler)
app.add_exception_handler(RuntimeError, runtime_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(filesystem_routes.router)
app.include_router(terminal_routes.router)
app.include_router(windows_routes.router)


@app.get("/")
async def root():
    """Root endpoint - returns a welcome message."""
    return {
        "message": "Welcome to the Desktop Environment Simulator API",
        "version": "0.1.0",
        "docs_url": "/docs",
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}

"""DES data models package.

This package contains the core of the Desktop Environment Simulator: the
virtual filesystem engine, the builtin command registry, the pipeline
executor, history and completion helpers, terminal sessions, the AI fallback
gateway and the window manager collaborator.
"""

from models.commands import COMMAND_REGISTRY, CommandContext, CommandResult, ResultKind
from models.config import Settings
from models.errors import FileSystemError, SessionBusyError
from models.filesystem import FileSystemEngine, FileSystemInput, FileSystemNode, NodeKind, VirtualPath
from models.gateway import FallbackGateway, GeminiGateway, OfflineGateway
from models.history import ClipboardBackend, ClipboardRing, CommandHistory
from models.pipeline import OutcomeKind, Pipeline, PipelineExecutor, PipelineOutcome
from models.session import SessionManager, TerminalSession, TurnState
from models.windows import Window, WindowManager

__all__ = [
    "COMMAND_REGISTRY",
    "CommandContext",
    "CommandResult",
    "ResultKind",
    "Settings",
    "FileSystemError",
    "SessionBusyError",
    "FileSystemEngine",
    "FileSystemInput",
    "FileSystemNode",
    "NodeKind",
    "VirtualPath",
    "FallbackGateway",
    "GeminiGateway",
    "OfflineGateway",
    "ClipboardBackend",
    "ClipboardRing",
    "CommandHistory",
    "OutcomeKind",
    "Pipeline",
    "PipelineExecutor",
    "PipelineOutcome",
    "SessionManager",
    "TerminalSession",
    "TurnState",
    "Window",
    "WindowManager",
]

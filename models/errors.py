"""Error taxonomy for the virtual filesystem and terminal sessions.

The shell-facing VFS operations never raise for bad user input; they return
``False`` or ``None``. These exceptions are raised by the strict code path
(``FileSystemEngine.apply_input``) and are translated into JSON responses by
the API layer or into Unix-style messages by the shell builtins.

Exception Hierarchy:
    FileSystemError (base)
    ├── PathNotFound - Path (or one of its parents) does not exist
    ├── NotADirectory - A directory was required but a file was found
    ├── IsADirectory - A file was required but a directory was found
    ├── AlreadyExists - Target already exists
    ├── InvalidOperation - Operation is never allowed (e.g. deleting root)
    └── PermissionDenied - Cosmetic only, never enforced against the OS

    SessionBusyError - A line was submitted while another is still running
"""


class FileSystemError(Exception):
    """Base exception for all virtual filesystem errors.

    Attributes:
        path: The path the failing operation was applied to.
        message: Human-readable error description.
    """

    reason = "Input/output error"

    def __init__(self, path: str, message: str | None = None) -> None:
        """Initialize the exception.

        Args:
            path: The path the failing operation was applied to.
            message: Optional description. Defaults to the class reason.
        """
        self.path = path
        self.message = message or self.reason
        super().__init__(f"{path}: {self.message}")


class PathNotFound(FileSystemError):
    """Raised when a path or one of its parents does not exist."""

    reason = "No such file or directory"


class NotADirectory(FileSystemError):
    """Raised when a directory was expected but a file was found."""

    reason = "Not a directory"


class IsADirectory(FileSystemError):
    """Raised when a file was expected but a directory was found."""

    reason = "Is a directory"


class AlreadyExists(FileSystemError):
    """Raised when creating a node whose name is already taken."""

    reason = "File exists"


class InvalidOperation(FileSystemError):
    """Raised for operations that can never succeed on the given path."""

    reason = "Invalid argument"


class PermissionDenied(FileSystemError):
    """Raised for cosmetic permission failures."""

    reason = "Permission denied"


class SessionBusyError(RuntimeError):
    """Raised when a line is submitted while the session is not idle.

    Args:
        session_id: The busy session.
        state: The turn state the session was in.
    """

    def __init__(self, session_id: str, state: str) -> None:
        self.session_id = session_id
        self.state = state
        super().__init__(f"Session {session_id} is busy ({state})")

"""Exception hierarchy for the DES API client.

Exception Hierarchy:
    DESClientError (base)
    ├── ConnectionError - Network/connection failures
    ├── TimeoutError - Request timeout
    └── APIError - Server returned an error response
        ├── ValidationError (HTTP 422)
        ├── NotFoundError (HTTP 404)
        ├── ConflictError (HTTP 409)
        └── ServerError (HTTP 5xx)

Example:
    Catching a busy session::

        try:
            client.terminal.submit(session_id, "ls -la")
        except ConflictError:
            # Another line is still running in this session
            pass

    Catching filesystem errors::

        try:
            client.filesystem.read_file("/missing.txt")
        except NotFoundError as e:
            print(f"{e.path}: {e.message}")
"""

from typing import Any


class DESClientError(Exception):
    """Base exception for all DES client errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ConnectionError(DESClientError):
    """Failed to connect to the DES server.

    Attributes:
        message: Human-readable error description.
        url: The URL that failed to connect.
        cause: The underlying transport exception.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.url = url
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.message} (url: {self.url})" if self.url else self.message


class TimeoutError(DESClientError):
    """Request took longer than the configured timeout.

    Attributes:
        message: Human-readable error description.
        timeout: The timeout value in seconds.
        url: The URL that timed out.
    """

    def __init__(
        self,
        message: str,
        timeout: float | None = None,
        url: str | None = None,
    ) -> None:
        self.timeout = timeout
        self.url = url
        super().__init__(message)

    def __str__(self) -> str:
        extras = []
        if self.timeout is not None:
            extras.append(f"timeout: {self.timeout}s")
        if self.url:
            extras.append(f"url: {self.url}")
        return f"{self.message} ({', '.join(extras)})" if extras else self.message


class APIError(DESClientError):
    """Server returned an error response.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from the server.
        error_type: Error name from the response body (e.g. "PathNotFound").
        details: Extra fields from the response body (path, session_id ...).
        response_body: Raw response body for debugging.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.details = details or {}
        self.response_body = response_body
        super().__init__(message)

    @property
    def path(self) -> str | None:
        """Filesystem path the error refers to, when the server sent one."""
        return self.details.get("path")

    def __str__(self) -> str:
        if self.error_type:
            return f"[HTTP {self.status_code}] [{self.error_type}] {self.message}"
        return f"[HTTP {self.status_code}] {self.message}"


class ValidationError(APIError):
    """Request validation failed (HTTP 422)."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=422,
            error_type="validation_error",
            details=details,
            response_body=response_body,
        )


class NotFoundError(APIError):
    """Resource not found (HTTP 404).

    Raised for missing paths, unknown session ids and closed windows.
    """

    def __init__(
        self,
        message: str,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=404,
            error_type=error_type or "not_found",
            details=details,
            response_body=response_body,
        )


class ConflictError(APIError):
    """State conflict (HTTP 409).

    Common cases:
    - Submitting to a session that is still processing a line
    - Creating a directory whose name is already taken
    """

    def __init__(
        self,
        message: str,
        error_type: str | None = None,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=409,
            error_type=error_type or "conflict",
            details=details,
            response_body=response_body,
        )


class ServerError(APIError):
    """Server-side error (HTTP 5xx)."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            error_type="server_error",
            details=details,
            response_body=response_body,
        )

"""Main DES client classes.

This module provides the entry points for talking to a running DES server:
- DESClient: Synchronous client for the DES REST API
- AsyncDESClient: Asynchronous client for the DES REST API

Both clients expose the API through namespaced sub-clients
(``client.filesystem``, ``client.terminal``, ``client.windows``).

Example:
    Synchronous usage::

        from client import DESClient

        with DESClient(base_url="http://localhost:8000") as client:
            session = client.terminal.create_session(start_path="/tmp")
            client.terminal.submit(session.session_id, "echo hi > note.txt")
            print(client.filesystem.read_file("/tmp/note.txt").content)

    Asynchronous usage::

        from client import AsyncDESClient

        async with AsyncDESClient() as client:
            session = await client.terminal.create_session()
            await client.terminal.submit(session.session_id, "ps")
"""

from typing import Any

from client._filesystem import AsyncFileSystemClient, FileSystemClient
from client._http import AsyncHTTPClient, HTTPClient
from client._terminal import AsyncTerminalClient, TerminalClient
from client._windows import AsyncWindowsClient, WindowsClient
from client.models import HealthResponse


class DESClient:
    """Synchronous client for the DES REST API.

    Sub-clients are created on first access and share one HTTP connection
    pool. Supports the context manager protocol for cleanup.

    Attributes:
        base_url: The base URL of the DES server.
        timeout: Request timeout in seconds.
        retry_enabled: Whether automatic retry is enabled.
        max_retries: Maximum number of retry attempts.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: Any = None,
    ) -> None:
        """Initialize the DES client.

        Args:
            base_url: The base URL of the DES server.
            timeout: Request timeout in seconds. Lines answered by the AI
                gateway can take a while, so keep this above the server's
                gateway timeout.
            retry_enabled: Retry connection errors, timeouts and HTTP
                502/503/504 with exponential backoff.
            max_retries: Maximum number of retry attempts when retry is enabled.
            transport: Custom HTTP transport (e.g., MockTransport for testing).
        """
        self.base_url = base_url
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries

        self._http = HTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )

        self._filesystem: FileSystemClient | None = None
        self._terminal: TerminalClient | None = None
        self._windows: WindowsClient | None = None

    def __enter__(self) -> "DESClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()

    def health(self) -> HealthResponse:
        return HealthResponse(**self._http.get("/health"))

    @property
    def filesystem(self) -> FileSystemClient:
        """Access the virtual filesystem endpoints (/filesystem/*)."""
        if self._filesystem is None:
            self._filesystem = FileSystemClient(self._http)
        return self._filesystem

    @property
    def terminal(self) -> TerminalClient:
        """Access terminal session endpoints (/terminal/sessions/*).

        Provides methods for:
        - Creating, listing and closing sessions
        - Submitting lines and reading their output
        - Editing the input line (history, completion, interrupt)
        - The per-session clipboard ring
        """
        if self._terminal is None:
            self._terminal = TerminalClient(self._http)
        return self._terminal

    @property
    def windows(self) -> WindowsClient:
        """Access the open-window list (/windows/*)."""
        if self._windows is None:
            self._windows = WindowsClient(self._http)
        return self._windows


class AsyncDESClient:
    """Asynchronous client for the DES REST API.

    Attributes:
        base_url: The base URL of the DES server.
        timeout: Request timeout in seconds.
        retry_enabled: Whether automatic retry is enabled.
        max_retries: Maximum number of retry attempts.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: Any = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries

        self._http = AsyncHTTPClient(
            base_url=base_url,
            timeout=timeout,
            retry_enabled=retry_enabled,
            max_retries=max_retries,
            transport=transport,
        )

        self._filesystem: AsyncFileSystemClient | None = None
        self._terminal: AsyncTerminalClient | None = None
        self._windows: AsyncWindowsClient | None = None

    async def __aenter__(self) -> "AsyncDESClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.close()

    async def health(self) -> HealthResponse:
        return HealthResponse(**await self._http.get("/health"))

    @property
    def filesystem(self) -> AsyncFileSystemClient:
        if self._filesystem is None:
            self._filesystem = AsyncFileSystemClient(self._http)
        return self._filesystem

    @property
    def terminal(self) -> AsyncTerminalClient:
        if self._terminal is None:
            self._terminal = AsyncTerminalClient(self._http)
        return self._terminal

    @property
    def windows(self) -> AsyncWindowsClient:
        if self._windows is None:
            self._windows = AsyncWindowsClient(self._http)
        return self._windows

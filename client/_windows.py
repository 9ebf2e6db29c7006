"""Window sub-client for the DES API (/windows/*).

This is an internal module. Import from `client` instead.
"""

from client._base import AsyncBaseClient, BaseClient
from client.models import OperationResponse, WindowListResponse, WindowResponse


class WindowsClient(BaseClient):
    """Synchronous client for the open-window list.

    Windows opened here show up in a terminal's ``ps`` output and can be
    closed from a terminal with ``kill``.
    """

    _BASE_PATH = "/windows"

    def list(self) -> WindowListResponse:
        data = self._get("")
        return WindowListResponse(**data)

    def open(self, app_id: str, title: str | None = None) -> WindowResponse:
        """Open a window for an app.

        Raises:
            APIError: If the app id is unknown (status 400), or a
                single-instance app already has a window.
        """
        data = self._post("", json={"app_id": app_id, "title": title})
        return WindowResponse(**data)

    def close(self, window_id: str) -> OperationResponse:
        data = self._delete(f"/{window_id}")
        return OperationResponse(**data)


class AsyncWindowsClient(AsyncBaseClient):
    """Asynchronous client for the open-window list."""

    _BASE_PATH = "/windows"

    async def list(self) -> WindowListResponse:
        data = await self._get("")
        return WindowListResponse(**data)

    async def open(self, app_id: str, title: str | None = None) -> WindowResponse:
        data = await self._post("", json={"app_id": app_id, "title": title})
        return WindowResponse(**data)

    async def close(self, window_id: str) -> OperationResponse:
        data = await self._delete(f"/{window_id}")
        return OperationResponse(**data)

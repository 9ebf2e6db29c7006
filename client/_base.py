"""Base classes for the DES sub-clients.

This is an internal module and should not be imported directly by users.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from client._http import AsyncHTTPClient, HTTPClient


class BaseClient:
    """Base class for synchronous sub-clients.

    Attributes:
        _http: The shared HTTP client for making requests.
    """

    _BASE_PATH = ""

    def __init__(self, http_client: "HTTPClient") -> None:
        self._http = http_client

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self._http.get(self._BASE_PATH + path, params=params)

    def _post(self, path: str, json: dict[str, Any] | None = None, params: dict[str, Any] | None = None) -> Any:
        return self._http.post(self._BASE_PATH + path, json=json, params=params)

    def _put(self, path: str, json: dict[str, Any] | None = None, params: dict[str, Any] | None = None) -> Any:
        return self._http.put(self._BASE_PATH + path, json=json, params=params)

    def _delete(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self._http.delete(self._BASE_PATH + path, params=params)


class AsyncBaseClient:
    """Base class for asynchronous sub-clients.

    Attributes:
        _http: The shared async HTTP client for making requests.
    """

    _BASE_PATH = ""

    def __init__(self, http_client: "AsyncHTTPClient") -> None:
        self._http = http_client

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._http.get(self._BASE_PATH + path, params=params)

    async def _post(self, path: str, json: dict[str, Any] | None = None, params: dict[str, Any] | None = None) -> Any:
        return await self._http.post(self._BASE_PATH + path, json=json, params=params)

    async def _put(self, path: str, json: dict[str, Any] | None = None, params: dict[str, Any] | None = None) -> Any:
        return await self._http.put(self._BASE_PATH + path, json=json, params=params)

    async def _delete(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self._http.delete(self._BASE_PATH + path, params=params)

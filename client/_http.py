"""Internal HTTP handling for the DES client.

Wraps httpx clients with JSON parsing, mapping of error responses onto the
client exception hierarchy, and optional retry with exponential backoff.

This is an internal module and should not be imported directly by users.
"""

import asyncio
import time
from typing import Any, Literal

import httpx

from client.exceptions import (
    APIError,
    ConflictError,
    ConnectionError,
    NotFoundError,
    ServerError,
    TimeoutError,
    ValidationError,
)

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]

# Status codes retried when retry is enabled
RETRYABLE_STATUS_CODES = {502, 503, 504}

DEFAULT_RETRY_BACKOFF_BASE = 0.5  # seconds
DEFAULT_RETRY_BACKOFF_MAX = 30.0  # seconds

# Keys of an error body that describe the error rather than add details
_MESSAGE_KEYS = {"error", "detail", "type", "message"}


def _parse_error_response(response: httpx.Response) -> tuple[str, str | None, dict[str, Any]]:
    """Extract ``(message, error_type, details)`` from an error response.

    Understands the app's handler format (``{"error", "detail", ...}``) and
    FastAPI's own ``{"detail": ...}`` bodies, including request validation
    lists. Falls back to the raw text for non-JSON bodies.
    """
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or f"HTTP {response.status_code} error", None, {}

    if not isinstance(body, dict):
        return str(body), None, {}

    detail = body.get("detail")
    if isinstance(detail, list):
        messages = [
            f"{err.get('loc', ['unknown'])[-1]}: {err.get('msg', 'invalid')}" for err in detail
        ]
        return "; ".join(messages), "validation_error", {"errors": detail}

    details = {key: value for key, value in body.items() if key not in _MESSAGE_KEYS}
    if "validation_errors" in body:
        details["errors"] = body["validation_errors"]

    message = detail if isinstance(detail, str) else body.get("message") or body.get("error")
    return str(message or body), body.get("error") or body.get("type"), details


def _raise_for_status(response: httpx.Response) -> None:
    """Raise the client exception matching an error status code.

    Raises:
        ValidationError: For HTTP 422 responses.
        NotFoundError: For HTTP 404 responses.
        ConflictError: For HTTP 409 responses.
        ServerError: For HTTP 5xx responses.
        APIError: For other HTTP 4xx responses.
    """
    if response.is_success:
        return

    message, error_type, details = _parse_error_response(response)
    try:
        response_body = response.json()
    except ValueError:
        response_body = response.text

    status_code = response.status_code
    if status_code == 422:
        raise ValidationError(message=message, details=details, response_body=response_body)
    if status_code == 404:
        raise NotFoundError(
            message=message, error_type=error_type, details=details, response_body=response_body
        )
    if status_code == 409:
        raise ConflictError(
            message=message, error_type=error_type, details=details, response_body=response_body
        )
    if status_code >= 500:
        raise ServerError(
            message=message, status_code=status_code, details=details, response_body=response_body
        )
    raise APIError(
        message=message,
        status_code=status_code,
        error_type=error_type,
        details=details,
        response_body=response_body,
    )


def _calculate_backoff(attempt: int, base: float = DEFAULT_RETRY_BACKOFF_BASE) -> float:
    """Exponential backoff ``base * 2**attempt``, capped at the maximum."""
    return min(base * (2 ** attempt), DEFAULT_RETRY_BACKOFF_MAX)


class _HTTPClientBase:
    """Configuration and response handling shared by both clients.

    Attributes:
        base_url: The base URL for all API requests.
        timeout: Request timeout in seconds.
        retry_enabled: Whether to retry on transient failures.
        max_retries: Maximum number of retry attempts.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_enabled = retry_enabled
        self.max_retries = max_retries

    @property
    def _attempts(self) -> int:
        return self.max_retries + 1 if self.retry_enabled else 1

    @staticmethod
    def _clean_params(params: dict[str, Any] | None) -> dict[str, Any] | None:
        if not params:
            return params
        return {key: value for key, value in params.items() if value is not None}

    def _should_retry_status(self, response: httpx.Response, attempt: int) -> bool:
        return (
            self.retry_enabled
            and response.status_code in RETRYABLE_STATUS_CODES
            and attempt < self._attempts - 1
        )

    def _can_retry_error(self, attempt: int) -> bool:
        return self.retry_enabled and attempt < self._attempts - 1

    def _translate_transport_error(self, path: str, exc: httpx.TransportError) -> Exception:
        url = f"{self.base_url}{path}"
        if isinstance(exc, httpx.TimeoutException):
            return TimeoutError(message=f"Request to {url} timed out", timeout=self.timeout, url=url)
        return ConnectionError(message=f"Failed to connect to {url}", url=url, cause=exc)

    @staticmethod
    def _parse(response: httpx.Response) -> Any:
        _raise_for_status(response)
        return response.json() if response.content else None


class HTTPClient(_HTTPClientBase):
    """Synchronous HTTP client for the DES API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: The base URL for all API requests.
            timeout: Request timeout in seconds.
            retry_enabled: Whether to retry on transient failures.
            max_retries: Maximum number of retry attempts.
            transport: Custom transport (e.g., MockTransport for testing).
        """
        super().__init__(base_url, timeout, retry_enabled, max_retries)
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: HttpMethod,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Make a request and return the parsed JSON body (None if empty).

        Raises:
            ConnectionError: If the connection fails.
            TimeoutError: If the request times out.
            APIError: If the server returns an error response.
        """
        params = self._clean_params(params)
        for attempt in range(self._attempts):
            try:
                response = self._client.request(method, path, params=params, json=json)
            except httpx.TransportError as e:
                if not self._can_retry_error(attempt):
                    raise self._translate_transport_error(path, e) from e
                time.sleep(_calculate_backoff(attempt))
                continue

            if self._should_retry_status(response, attempt):
                time.sleep(_calculate_backoff(attempt))
                continue
            return self._parse(response)

        raise RuntimeError("Unexpected error in request retry loop")

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: dict[str, Any] | None = None, params: dict[str, Any] | None = None) -> Any:
        return self.request("POST", path, params=params, json=json)

    def put(self, path: str, json: dict[str, Any] | None = None, params: dict[str, Any] | None = None) -> Any:
        return self.request("PUT", path, params=params, json=json)

    def delete(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("DELETE", path, params=params)


class AsyncHTTPClient(_HTTPClientBase):
    """Asynchronous HTTP client for the DES API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        retry_enabled: bool = False,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the async HTTP client.

        Args:
            base_url: The base URL for all API requests.
            timeout: Request timeout in seconds.
            retry_enabled: Whether to retry on transient failures.
            max_retries: Maximum number of retry attempts.
            transport: Custom transport (e.g., ASGITransport for testing).
        """
        super().__init__(base_url, timeout, retry_enabled, max_retries)
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request(
        self,
        method: HttpMethod,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        """Make an async request and return the parsed JSON body (None if empty).

        Raises:
            ConnectionError: If the connection fails.
            TimeoutError: If the request times out.
            APIError: If the server returns an error response.
        """
        params = self._clean_params(params)
        for attempt in range(self._attempts):
            try:
                response = await self._client.request(method, path, params=params, json=json)
            except httpx.TransportError as e:
                if not self._can_retry_error(attempt):
                    raise self._translate_transport_error(path, e) from e
                await asyncio.sleep(_calculate_backoff(attempt))
                continue

            if self._should_retry_status(response, attempt):
                await asyncio.sleep(_calculate_backoff(attempt))
                continue
            return self._parse(response)

        raise RuntimeError("Unexpected error in request retry loop")

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: dict[str, Any] | None = None, params: dict[str, Any] | None = None) -> Any:
        return await self.request("POST", path, params=params, json=json)

    async def put(self, path: str, json: dict[str, Any] | None = None, params: dict[str, Any] | None = None) -> Any:
        return await self.request("PUT", path, params=params, json=json)

    async def delete(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("DELETE", path, params=params)

"""Unit tests for the WindowsClient and AsyncWindowsClient."""

from unittest.mock import AsyncMock, MagicMock

from client._windows import AsyncWindowsClient, WindowsClient

WINDOW = {
    "window_id": "browser-1a2b3c4d",
    "app_id": "browser",
    "app_name": "Browser",
    "title": "Browser",
    "opened_at": "2025-01-01T12:00:00+00:00",
}


class TestWindowsClient:
    """Tests for the synchronous WindowsClient."""

    def test_list(self) -> None:
        mock_http = MagicMock()
        mock_http.get.return_value = {"windows": [WINDOW], "count": 1}
        result = WindowsClient(mock_http).list()
        mock_http.get.assert_called_once_with("/windows", params=None)
        assert result.windows[0].app_name == "Browser"

    def test_open(self) -> None:
        mock_http = MagicMock()
        mock_http.post.return_value = WINDOW
        WindowsClient(mock_http).open("browser", title="Docs")
        mock_http.post.assert_called_once_with(
            "/windows", json={"app_id": "browser", "title": "Docs"}, params=None
        )

    def test_close(self) -> None:
        mock_http = MagicMock()
        mock_http.delete.return_value = {"success": True, "message": "closed", "path": None}
        assert WindowsClient(mock_http).close("browser-1a2b3c4d").success is True
        mock_http.delete.assert_called_once_with("/windows/browser-1a2b3c4d", params=None)


class TestAsyncWindowsClient:
    """Tests for AsyncWindowsClient."""

    async def test_open_and_list(self) -> None:
        mock_http = MagicMock()
        mock_http.post = AsyncMock(return_value=WINDOW)
        mock_http.get = AsyncMock(return_value={"windows": [WINDOW], "count": 1})
        client = AsyncWindowsClient(mock_http)

        window = await client.open("browser")
        listing = await client.list()

        assert window.window_id == "browser-1a2b3c4d"
        assert listing.count == 1

"""Filesystem sub-client for the DES API.

This module provides FileSystemClient and AsyncFileSystemClient for the
virtual filesystem endpoints (/filesystem/*).

This is an internal module. Import from `client` instead.
"""

from client._base import AsyncBaseClient, BaseClient
from client.models import (
    FileResponse,
    ListResponse,
    NodeInfo,
    OperationResponse,
    ResolveResponse,
    StateResponse,
    TreeResponse,
)


class FileSystemClient(BaseClient):
    """Synchronous client for the virtual filesystem endpoints.

    Reads of missing paths raise NotFoundError. Mutations that cannot be
    applied raise NotFoundError (missing parent or source), ConflictError
    (name already taken) or APIError with status 400 (everything else).

    Example:
        with DESClient() as client:
            client.filesystem.write_file("/home/user/notes.txt", "hello")
            listing = client.filesystem.list("/home/user")
            for entry in listing.entries:
                print(entry.permissions, entry.name)
    """

    _BASE_PATH = "/filesystem"

    def tree(self, path: str = "/", include_content: bool = False) -> TreeResponse:
        """Get a subtree as nested records.

        Args:
            path: Root of the subtree.
            include_content: Include file contents in the records.

        Returns:
            The normalized path and its nested tree.
        """
        data = self._get("/tree", params={"path": path, "include_content": include_content})
        return TreeResponse(**data)

    def list(self, path: str = "/", show_hidden: bool = True) -> ListResponse:
        """List a directory's entries in insertion order.

        Raises:
            NotFoundError: If the path does not exist.
            APIError: If the path is a file (status 400).
        """
        data = self._get("/list", params={"path": path, "show_hidden": show_hidden})
        return ListResponse(**data)

    def read_file(self, path: str) -> FileResponse:
        data = self._get("/file", params={"path": path})
        return FileResponse(**data)

    def write_file(self, path: str, content: str = "") -> OperationResponse:
        """Create or overwrite a file. The parent directory must exist."""
        data = self._put("/file", json={"path": path, "content": content})
        return OperationResponse(**data)

    def make_directory(self, path: str) -> OperationResponse:
        data = self._post("/directory", json={"path": path})
        return OperationResponse(**data)

    def delete(self, path: str) -> OperationResponse:
        data = self._delete("/item", params={"path": path})
        return OperationResponse(**data)

    def copy(self, source: str, destination: str) -> OperationResponse:
        """Deep-copy a node. An existing directory destination receives the copy."""
        data = self._post("/copy", json={"source": source, "destination": destination})
        return OperationResponse(**data)

    def move(self, source: str, destination: str) -> OperationResponse:
        data = self._post("/move", json={"source": source, "destination": destination})
        return OperationResponse(**data)

    def chmod(self, path: str, mode: str) -> NodeInfo:
        """Change permissions with a numeric ("755") or symbolic ("u+x") mode."""
        data = self._post("/chmod", json={"path": path, "mode": mode})
        return NodeInfo(**data)

    def resolve(self, target: str, base: str = "/") -> ResolveResponse:
        data = self._get("/resolve", params={"target": target, "base": base})
        return ResolveResponse(**data)

    def state(self) -> StateResponse:
        data = self._get("/state")
        return StateResponse(**data)

    def reset(self) -> OperationResponse:
        """Replace the whole tree with the default seed tree."""
        data = self._post("/reset")
        return OperationResponse(**data)


class AsyncFileSystemClient(AsyncBaseClient):
    """Asynchronous client for the virtual filesystem endpoints.

    Example:
        async with AsyncDESClient() as client:
            await client.filesystem.make_directory("/tmp/work")
            state = await client.filesystem.state()
    """

    _BASE_PATH = "/filesystem"

    async def tree(self, path: str = "/", include_content: bool = False) -> TreeResponse:
        data = await self._get("/tree", params={"path": path, "include_content": include_content})
        return TreeResponse(**data)

    async def list(self, path: str = "/", show_hidden: bool = True) -> ListResponse:
        data = await self._get("/list", params={"path": path, "show_hidden": show_hidden})
        return ListResponse(**data)

    async def read_file(self, path: str) -> FileResponse:
        data = await self._get("/file", params={"path": path})
        return FileResponse(**data)

    async def write_file(self, path: str, content: str = "") -> OperationResponse:
        data = await self._put("/file", json={"path": path, "content": content})
        return OperationResponse(**data)

    async def make_directory(self, path: str) -> OperationResponse:
        data = await self._post("/directory", json={"path": path})
        return OperationResponse(**data)

    async def delete(self, path: str) -> OperationResponse:
        data = await self._delete("/item", params={"path": path})
        return OperationResponse(**data)

    async def copy(self, source: str, destination: str) -> OperationResponse:
        data = await self._post("/copy", json={"source": source, "destination": destination})
        return OperationResponse(**data)

    async def move(self, source: str, destination: str) -> OperationResponse:
        data = await self._post("/move", json={"source": source, "destination": destination})
        return OperationResponse(**data)

    async def chmod(self, path: str, mode: str) -> NodeInfo:
        data = await self._post("/chmod", json={"path": path, "mode": mode})
        return NodeInfo(**data)

    async def resolve(self, target: str, base: str = "/") -> ResolveResponse:
        data = await self._get("/resolve", params={"target": target, "base": base})
        return ResolveResponse(**data)

    async def state(self) -> StateResponse:
        data = await self._get("/state")
        return StateResponse(**data)

    async def reset(self) -> OperationResponse:
        data = await self._post("/reset")
        return OperationResponse(**data)

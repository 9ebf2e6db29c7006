"""Filesystem endpoints.

Provides REST API access to the shared virtual filesystem. Reads return
404 for missing paths; mutations go through the engine's strict
``apply_input`` path so failures come back as typed errors (404 / 409 / 400)
instead of a bare ``false``.
"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, Field

from api.dependencies import FileSystemEngineDep, SettingsDep
from api.models import OperationResponse
from models.errors import IsADirectory, NotADirectory, PathNotFound
from models.filesystem import FileSystemInput, FileSystemNode, resolve_path

router = APIRouter(
    prefix="/filesystem",
    tags=["filesystem"],
)


# Request Models


class WriteFileRequest(BaseModel):
    """Request to create or overwrite a file.

    Args:
        path: Absolute path of the file.
        content: New file content.
    """

    path: str = Field(description="Absolute file path")
    content: str = Field(default="", description="File content")


class PathRequest(BaseModel):
    """Request naming a single path."""

    path: str = Field(description="Absolute path")


class TransferRequest(BaseModel):
    """Request to copy or move a node.

    Args:
        source: Path of the node to copy or move.
        destination: Target path. An existing directory receives the node.
    """

    source: str = Field(description="Source path")
    destination: str = Field(description="Destination path")


class ChmodRequest(BaseModel):
    """Request to change a node's permissions.

    Args:
        path: Path of the node.
        mode: Numeric (755) or symbolic (u+x, go-w) mode.
    """

    path: str = Field(description="Target path")
    mode: str = Field(description="Numeric or symbolic mode")


# Response Models


class NodeInfo(BaseModel):
    """Flat listing record for one filesystem node."""

    name: str
    kind: str
    permissions: str
    owner: str
    group: str
    size: int
    created_at: datetime

    @classmethod
    def from_node(cls, node: FileSystemNode) -> "NodeInfo":
        return cls(
            name=node.name,
            kind=node.kind.value,
            permissions=node.permissions,
            owner=node.owner,
            group=node.group,
            size=node.size,
            created_at=node.created_at,
        )


class TreeResponse(BaseModel):
    """Nested records for a subtree."""

    path: str
    tree: dict[str, Any]


class ListResponse(BaseModel):
    """Entries of a directory in insertion order."""

    path: str
    entries: list[NodeInfo]
    count: int


class FileResponse(BaseModel):
    """Content of a file."""

    path: str
    content: str
    size: int


class ResolveResponse(BaseModel):
    """A normalized absolute path."""

    base: str
    target: str
    path: str
    exists: bool


class StateResponse(BaseModel):
    """Engine bookkeeping and invariant check results."""

    last_updated: datetime
    update_count: int
    node_count: int
    issues: list[str]


# Route Handlers


@router.get("/tree", response_model=TreeResponse)
async def get_tree(
    engine: FileSystemEngineDep,
    path: str = Query(default="/", description="Root of the subtree"),
    include_content: bool = Query(default=False, description="Include file contents"),
):
    """Get a subtree as nested records."""
    node = engine.get_node(path)
    if node is None:
        raise PathNotFound(path)
    return TreeResponse(
        path=str(engine.resolve_path("/", path)),
        tree=node.to_dict(include_content=include_content),
    )


@router.get("/list", response_model=ListResponse)
async def list_directory(
    engine: FileSystemEngineDep,
    path: str = Query(default="/", description="Directory to list"),
    show_hidden: bool = Query(default=True, description="Include dot entries"),
):
    """List a directory's entries in insertion order."""
    entries = engine.read_directory(path)
    if entries is None:
        if engine.exists(path):
            raise NotADirectory(path)
        raise PathNotFound(path)

    visible = [node for node in entries if show_hidden or not node.name.startswith(".")]
    return ListResponse(
        path=str(engine.resolve_path("/", path)),
        entries=[NodeInfo.from_node(node) for node in visible],
        count=len(visible),
    )


@router.get("/file", response_model=FileResponse)
async def read_file(
    engine: FileSystemEngineDep,
    path: str = Query(description="File to read"),
):
    """Read a file's content."""
    content = engine.read_file(path)
    if content is None:
        if engine.is_directory(path):
            raise IsADirectory(path)
        raise PathNotFound(path)
    return FileResponse(path=str(engine.resolve_path("/", path)), content=content, size=len(content))


@router.put("/file", response_model=OperationResponse)
async def write_file(request: WriteFileRequest, engine: FileSystemEngineDep):
    """Create or overwrite a file. Parent directories are never created."""
    engine.apply_input(
        FileSystemInput(operation="write_file", path=request.path, content=request.content)
    )
    return OperationResponse(success=True, message="File written", path=request.path)


@router.post("/directory", response_model=OperationResponse, status_code=status.HTTP_201_CREATED)
async def make_directory(request: PathRequest, engine: FileSystemEngineDep):
    """Create an empty directory."""
    engine.apply_input(FileSystemInput(operation="make_directory", path=request.path))
    return OperationResponse(success=True, message="Directory created", path=request.path)


@router.delete("/item", response_model=OperationResponse)
async def delete_item(
    engine: FileSystemEngineDep,
    path: str = Query(description="Path to delete"),
):
    """Delete a file, or a directory and all of its descendants."""
    engine.apply_input(FileSystemInput(operation="delete", path=path))
    return OperationResponse(success=True, message="Deleted", path=path)


@router.post("/copy", response_model=OperationResponse)
async def copy_item(request: TransferRequest, engine: FileSystemEngineDep):
    """Deep-copy a node, overwriting the destination."""
    engine.apply_input(
        FileSystemInput(operation="copy", path=request.source, destination=request.destination)
    )
    return OperationResponse(
        success=True, message=f"Copied to {request.destination}", path=request.source
    )


@router.post("/move", response_model=OperationResponse)
async def move_item(request: TransferRequest, engine: FileSystemEngineDep):
    """Move a node, overwriting the destination."""
    engine.apply_input(
        FileSystemInput(operation="move", path=request.source, destination=request.destination)
    )
    return OperationResponse(
        success=True, message=f"Moved to {request.destination}", path=request.source
    )


@router.post("/chmod", response_model=NodeInfo)
async def chmod(request: ChmodRequest, engine: FileSystemEngineDep):
    """Change a node's permissions and return the updated node."""
    engine.apply_input(FileSystemInput(operation="chmod", path=request.path, mode=request.mode))
    return NodeInfo.from_node(engine.get_node(request.path))


@router.get("/resolve", response_model=ResolveResponse)
async def resolve(
    engine: FileSystemEngineDep,
    target: str = Query(description="Path to resolve"),
    base: str = Query(default="/", description="Directory to resolve against"),
):
    """Normalize a path against a base directory."""
    resolved = resolve_path(base, target)
    return ResolveResponse(base=base, target=target, path=str(resolved), exists=engine.exists(resolved))


@router.get("/state", response_model=StateResponse)
async def get_state(engine: FileSystemEngineDep):
    """Get engine bookkeeping and any invariant violations."""
    return StateResponse(
        last_updated=engine.last_updated,
        update_count=engine.update_count,
        node_count=sum(1 for _ in engine.root.walk()),
        issues=engine.validate_state(),
    )


@router.post("/reset", response_model=OperationResponse)
async def reset(engine: FileSystemEngineDep, settings: SettingsDep):
    """Replace the tree with the default seed tree."""
    engine.reset(username=settings.username, home=settings.home, hostname=settings.hostname)
    return OperationResponse(success=True, message="Filesystem reset", path="/")

"""Virtual filesystem models and engine.

This module contains the in-memory document tree that every terminal session
operates on:

- FileSystemNode: A file or directory in the tree
- VirtualPath: A normalized absolute or relative path
- FileSystemInput: A strict mutation request, applied with apply_input()
- FileSystemEngine: Owns the tree and performs all reads and writes

The engine is the single owner of the tree. Sessions and API handlers refer
to nodes by path only, so deleting or moving a node never leaves a caller
holding a stale reference.
"""

import json
import logging
import re
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, Field, PrivateAttr, field_validator, model_validator

from models.errors import (
    AlreadyExists,
    FileSystemError,
    InvalidOperation,
    IsADirectory,
    NotADirectory,
    PathNotFound,
)

logger = logging.getLogger(__name__)

PERMISSIONS_PATTERN = re.compile(r"^[-d]([r-][w-][x-]){3}$")
NUMERIC_MODE_PATTERN = re.compile(r"^[0-7]{3}$")
SYMBOLIC_CLAUSE_PATTERN = re.compile(r"^([ugoa]*)([+\-=])([rwx]*)$")

DIRECTORY_SIZE = 4096
DEFAULT_FILE_PERMISSIONS = "-rw-r--r--"
DEFAULT_DIRECTORY_PERMISSIONS = "drwxr-xr-x"

_TRIAD_OFFSETS = {"u": 1, "g": 4, "o": 7}
_BIT_OFFSETS = {"r": 0, "w": 1, "x": 2}
_OCTAL_TRIADS = ["---", "--x", "-w-", "-wx", "r--", "r-x", "rw-", "rwx"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class NodeKind(str, Enum):
    """Kind of a filesystem node."""

    FILE = "file"
    DIRECTORY = "directory"


class FileSystemNode(BaseModel):
    """A file or directory in the virtual filesystem.

    Directories keep their children in insertion order. Files carry content
    and never have children.

    Args:
        name: Node name, unique among siblings. Empty only for the root.
        kind: Whether this node is a file or a directory.
        permissions: 10-character symbolic permissions (e.g. "drwxr-xr-x").
        owner: Owning user name.
        group: Owning group name.
        created_at: When the node was created.
        content: File content (files only).
        children: Child nodes (directories only).
    """

    name: str = Field(description="Node name, unique among siblings")
    kind: NodeKind = Field(description="File or directory")
    permissions: str = Field(default="", description="Symbolic permissions string")
    owner: str = Field(default="root", description="Owning user")
    group: str = Field(default="root", description="Owning group")
    created_at: datetime = Field(default_factory=_now, description="Creation time")
    content: Optional[str] = Field(default=None, description="File content (files only)")
    children: list["FileSystemNode"] = Field(
        default_factory=list, description="Child nodes (directories only)"
    )

    class Config:
        validate_assignment = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        """Reject names that would break path resolution."""
        if "/" in value:
            raise ValueError(f"Node name cannot contain '/': {value!r}")
        if value in (".", ".."):
            raise ValueError(f"Node name cannot be {value!r}")
        return value

    @model_validator(mode="after")
    def validate_kind_consistency(self) -> "FileSystemNode":
        """Enforce file/directory invariants and fill default permissions."""
        if not self.permissions:
            # Bypass validate_assignment; we are already inside validation
            object.__setattr__(
                self,
                "permissions",
                DEFAULT_DIRECTORY_PERMISSIONS
                if self.kind == NodeKind.DIRECTORY
                else DEFAULT_FILE_PERMISSIONS,
            )
        if not PERMISSIONS_PATTERN.match(self.permissions):
            raise ValueError(f"Invalid permissions string: {self.permissions!r}")

        type_char = "d" if self.kind == NodeKind.DIRECTORY else "-"
        if self.permissions[0] != type_char:
            raise ValueError(
                f"Permissions {self.permissions!r} do not match node kind {self.kind.value}"
            )

        if self.kind == NodeKind.FILE:
            if self.children:
                raise ValueError(f"File {self.name!r} cannot have children")
            if self.content is None:
                object.__setattr__(self, "content", "")
        else:
            if self.content is not None:
                raise ValueError(f"Directory {self.name!r} cannot have content")
            names = [child.name for child in self.children]
            if len(names) != len(set(names)):
                raise ValueError(f"Duplicate child names in directory {self.name!r}")
        return self

    @property
    def is_directory(self) -> bool:
        return self.kind == NodeKind.DIRECTORY

    @property
    def size(self) -> int:
        """Size as reported by ``ls -l``."""
        if self.is_directory:
            return DIRECTORY_SIZE
        return len(self.content or "")

    def get_child(self, name: str) -> Optional["FileSystemNode"]:
        """Return the child with the given name, or None."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def remove_child(self, name: str) -> Optional["FileSystemNode"]:
        """Detach and return the child with the given name, or None."""
        for index, child in enumerate(self.children):
            if child.name == name:
                return self.children.pop(index)
        return None

    def walk(self, prefix: str = ""):
        """Yield ``(path, node)`` pairs for this node and all descendants."""
        path = prefix + "/" + self.name if self.name else prefix or "/"
        yield path, self
        for child in self.children:
            yield from child.walk("" if path == "/" else path)

    def to_dict(self, include_content: bool = True, include_timestamps: bool = True) -> dict[str, Any]:
        """Convert this node (and its subtree) to nested records.

        Args:
            include_content: Whether to include file contents.
            include_timestamps: Whether to include creation timestamps.

        Returns:
            Dictionary representation of this node.
        """
        result: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "permissions": self.permissions,
            "owner": self.owner,
            "group": self.group,
        }
        if include_timestamps:
            result["created_at"] = self.created_at.isoformat()
        if self.is_directory:
            result["children"] = [
                child.to_dict(include_content, include_timestamps) for child in self.children
            ]
        elif include_content:
            result["content"] = self.content
        return result


FileSystemNode.model_rebuild()


class VirtualPath(BaseModel):
    """An ordered sequence of non-empty segments plus an absolute flag.

    Args:
        segments: Path segments, never empty strings, "." or "..".
        is_absolute: Whether the path starts at the root.
    """

    segments: tuple[str, ...] = Field(default=(), description="Path segments")
    is_absolute: bool = Field(default=True, description="Whether the path is absolute")

    class Config:
        frozen = True

    @classmethod
    def parse(cls, raw: str) -> "VirtualPath":
        """Split a raw path string into segments without resolving dots."""
        return cls(
            segments=tuple(segment for segment in raw.split("/") if segment),
            is_absolute=raw.startswith("/"),
        )

    @property
    def is_root(self) -> bool:
        return self.is_absolute and not self.segments

    @property
    def name(self) -> str:
        return self.segments[-1] if self.segments else ""

    @property
    def parent(self) -> "VirtualPath":
        return VirtualPath(segments=self.segments[:-1], is_absolute=self.is_absolute)

    def child(self, name: str) -> "VirtualPath":
        return VirtualPath(segments=self.segments + (name,), is_absolute=self.is_absolute)

    def is_within(self, other: "VirtualPath") -> bool:
        """Return True if this path equals ``other`` or lies below it."""
        return self.segments[: len(other.segments)] == other.segments

    def __str__(self) -> str:
        joined = "/".join(self.segments)
        if self.is_absolute:
            return "/" + joined
        return joined or "."


PathLike = Union[str, VirtualPath]


def resolve_path(base: PathLike, target: str) -> VirtualPath:
    """Normalize ``target`` against ``base`` into an absolute path.

    Segments are processed left to right on a stack: ordinary segments are
    pushed, ``..`` pops, ``.`` and empty segments are ignored. Popping past
    the root is a no-op.

    Args:
        base: Directory to resolve relative targets against.
        target: Absolute or relative path string.

    Returns:
        The resolved absolute VirtualPath.

    Example:
        >>> str(resolve_path("/home/user", "../etc/./passwd"))
        '/home/etc/passwd'
    """
    stack: list[str] = []
    if not target.startswith("/"):
        base_str = str(base) if isinstance(base, VirtualPath) else base
        stack.extend(resolve_path("/", base_str).segments if base_str else ())

    for segment in target.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if stack:
                stack.pop()
            continue
        stack.append(segment)

    return VirtualPath(segments=tuple(stack), is_absolute=True)


def apply_mode(permissions: str, mode: str) -> str:
    """Compute a new permissions string from a chmod mode argument.

    Supports three octal digits (``755``) and symbolic clauses such as
    ``+x``, ``u+x``, ``go-w`` or ``a=r,u+w``. The type character is kept.

    Args:
        permissions: Current 10-character permissions string.
        mode: Numeric or symbolic mode.

    Returns:
        The new permissions string.

    Raises:
        ValueError: If the mode cannot be parsed.
    """
    type_char = permissions[0]

    if NUMERIC_MODE_PATTERN.match(mode):
        return type_char + "".join(_OCTAL_TRIADS[int(digit)] for digit in mode)

    bits = list(permissions)
    for clause in mode.split(","):
        match = SYMBOLIC_CLAUSE_PATTERN.match(clause)
        if not match or (not match.group(3) and match.group(2) != "="):
            raise ValueError(f"invalid mode: '{mode}'")
        who, op, perms = match.groups()
        if not who or "a" in who:
            who = "ugo"

        for triad in who:
            offset = _TRIAD_OFFSETS[triad]
            if op == "=":
                for letter, bit in _BIT_OFFSETS.items():
                    bits[offset + bit] = letter if letter in perms else "-"
                continue
            for letter in perms:
                bits[offset + _BIT_OFFSETS[letter]] = letter if op == "+" else "-"

    return "".join(bits)


class FileSystemInput(BaseModel):
    """A strict filesystem mutation request.

    Applied with ``FileSystemEngine.apply_input()``, which raises a
    ``FileSystemError`` subclass on failure instead of returning False.

    Args:
        operation: Operation type.
        path: Target path (source path for copy and move).
        destination: Destination path (copy and move only).
        content: File content (write_file only).
        mode: Permission mode (chmod only).
    """

    operation: Literal[
        "write_file", "make_directory", "delete", "copy", "move", "chmod"
    ] = Field(description="Operation type")
    path: str = Field(description="Target path (source for copy/move)")
    destination: Optional[str] = Field(default=None, description="Destination for copy/move")
    content: Optional[str] = Field(default=None, description="File content for write_file")
    mode: Optional[str] = Field(default=None, description="Mode for chmod")

    def validate_input(self) -> None:
        """Validate operation-specific required fields.

        Raises:
            ValueError: If a required field for the operation is missing.
        """
        if self.operation in ("copy", "move") and not self.destination:
            raise ValueError(f"Operation '{self.operation}' requires a destination")
        if self.operation == "chmod" and not self.mode:
            raise ValueError("Operation 'chmod' requires a mode")
        if self.operation == "write_file" and self.content is None:
            raise ValueError("Operation 'write_file' requires content")


def _directory(name: str, owner: str, children: list[FileSystemNode] | None = None) -> FileSystemNode:
    return FileSystemNode(
        name=name,
        kind=NodeKind.DIRECTORY,
        owner=owner,
        group=owner,
        children=children or [],
    )


def _file(name: str, owner: str, content: str, permissions: str = DEFAULT_FILE_PERMISSIONS) -> FileSystemNode:
    return FileSystemNode(
        name=name,
        kind=NodeKind.FILE,
        owner=owner,
        group=owner,
        content=content,
        permissions=permissions,
    )


def build_default_tree(username: str = "user", home: str | None = None, hostname: str = "desktop") -> FileSystemNode:
    """Build the seed filesystem every new environment starts with.

    Args:
        username: Owner of the home directory contents.
        home: Home directory path (defaults to /home/<username>).
        hostname: Content of /etc/hostname.

    Returns:
        The root directory node.
    """
    home_path = resolve_path("/", home or f"/home/{username}")

    home_contents = [
        _directory("Documents", username, [
            _file(
                "mission_brief.txt",
                username,
                "Target: 10.10.11.24\nObjective: Root\n\n1. Recon (Nmap)\n"
                "2. Enum (GoBuster)\n3. Exploit (CVE-2024-XXXX)\n4. PrivEsc",
            ),
            _file("wordlists.txt", username, "admin\npassword\n123456\nroot\ntoor"),
            _directory("Notes", username, [
                _file(
                    "welcome.txt",
                    username,
                    "# Welcome to Notes\n\nThis is a note-taking app.\n\n"
                    "- Supports Markdown preview\n- Auto-saves to File System",
                ),
            ]),
        ]),
        _directory("Tools", username, [
            _file("scan.py", username, "print('scanning 10.10.11.0/24 ...')", "-rwxr-xr-x"),
        ]),
        _directory("Downloads", username),
        _directory("Desktop", username, [
            _file("todo.md", username, "# TO DO\n- Update kernel\n- Scan network\n- Buy coffee"),
        ]),
        _file(".bash_history", username, "", "-rw-------"),
    ]

    root = _directory("", "root", [
        _directory("etc", "root", [
            _file(
                "passwd",
                "root",
                "root:x:0:0:root:/root:/bin/bash\n"
                f"{username}:x:1000:1000:{username}:{home_path}:/bin/bash",
            ),
            _file("hostname", "root", hostname),
            _file("os-release", "root", 'PRETTY_NAME="Desktop Environment Simulator"\nID=des'),
        ]),
        _directory("tmp", "root"),
    ])

    current = root
    for index, segment in enumerate(home_path.segments):
        existing = current.get_child(segment)
        if existing is None or not existing.is_directory:
            if existing is not None:
                current.remove_child(segment)
            owner = username if index == len(home_path.segments) - 1 else "root"
            existing = _directory(segment, owner)
            current.children.append(existing)
        current = existing

    for node in home_contents:
        if current.get_child(node.name) is None:
            current.children.append(node)

    return root


class FileSystemEngine(BaseModel):
    """Owner of the virtual filesystem tree.

    All operations are synchronous and appear atomic: every public method
    runs under a single lock and performs its checks before mutating, so a
    failed operation leaves the tree unchanged. Multiple terminal sessions
    share one engine.

    The shell-facing operations (``write_file``, ``make_directory``,
    ``delete_item`` ...) return ``bool`` and never raise for bad input.
    ``apply_input`` is the strict variant used by the HTTP API; it raises a
    ``FileSystemError`` subclass describing why the operation failed.

    Attributes:
        root: The root directory node.
        last_updated: When the tree was last modified.
        update_count: Number of successful mutations.
        default_owner: Owner and group given to newly created nodes.
    """

    root: FileSystemNode = Field(default_factory=build_default_tree)
    last_updated: datetime = Field(default_factory=_now)
    update_count: int = Field(default=0)
    default_owner: str = Field(default="user", description="Owner of newly created nodes")

    _lock: Any = PrivateAttr(default_factory=threading.RLock)

    class Config:
        arbitrary_types_allowed = True

    @model_validator(mode="after")
    def validate_root(self) -> "FileSystemEngine":
        """Ensure the root node is a nameless directory."""
        if not self.root.is_directory or self.root.name != "":
            raise ValueError("Root node must be a directory with an empty name")
        return self

    @classmethod
    def from_snapshot(cls, snapshot: dict[str, Any]) -> "FileSystemEngine":
        """Rebuild an engine from a ``get_snapshot()`` dictionary."""
        return cls(root=FileSystemNode.model_validate(snapshot))

    # ===== Path Helpers =====

    def resolve_path(self, base: PathLike, target: str) -> VirtualPath:
        """Normalize ``target`` relative to ``base``. See ``resolve_path``."""
        return resolve_path(base, target)

    def _normalize(self, path: PathLike) -> VirtualPath:
        if isinstance(path, VirtualPath) and path.is_absolute:
            return path
        return resolve_path("/", str(path))

    def _find(self, path: VirtualPath) -> FileSystemNode:
        current = self.root
        walked = VirtualPath()
        for segment in path.segments:
            if not current.is_directory:
                raise NotADirectory(str(walked))
            child = current.get_child(segment)
            if child is None:
                raise PathNotFound(str(path))
            current = child
            walked = walked.child(segment)
        return current

    def _find_parent(self, path: VirtualPath) -> FileSystemNode:
        if path.is_root:
            raise InvalidOperation("/", "Operation not permitted on root")
        parent = self._find(path.parent)
        if not parent.is_directory:
            raise NotADirectory(str(path.parent))
        return parent

    def _final_destination(self, source: VirtualPath, dest: VirtualPath) -> VirtualPath:
        try:
            existing = self._find(dest)
        except FileSystemError:
            return dest
        if existing.is_directory:
            return dest.child(source.name)
        return dest

    # ===== Read Operations =====

    def get_node(self, path: PathLike) -> Optional[FileSystemNode]:
        """Return the node at ``path``, or None if it does not exist.

        The returned node is owned by the engine and must be treated as
        read-only.
        """
        with self._lock:
            try:
                return self._find(self._normalize(path))
            except FileSystemError:
                return None

    def exists(self, path: PathLike) -> bool:
        return self.get_node(path) is not None

    def is_directory(self, path: PathLike) -> bool:
        node = self.get_node(path)
        return node is not None and node.is_directory

    def read_directory(self, path: PathLike) -> Optional[list[FileSystemNode]]:
        """List the entries of a directory in insertion order.

        Returns:
            The child nodes, or None if the path is missing or not a directory.
        """
        node = self.get_node(path)
        if node is None or not node.is_directory:
            return None
        return list(node.children)

    def read_file(self, path: PathLike) -> Optional[str]:
        """Read a file's content.

        Returns:
            The content, or None if the path is missing or is a directory.
        """
        node = self.get_node(path)
        if node is None or node.is_directory:
            return None
        return node.content or ""

    # ===== Mutating Operations (bool results) =====

    def write_file(self, path: PathLike, content: str) -> bool:
        """Create or overwrite a file. Parents are never created."""
        return self._attempt(self._write_file, path, content)

    def make_directory(self, path: PathLike) -> bool:
        """Create an empty directory under an existing parent."""
        return self._attempt(self._make_directory, path)

    def delete_item(self, path: PathLike) -> bool:
        """Remove a node and, for directories, all descendants."""
        return self._attempt(self._delete_item, path)

    def copy_item(self, source: PathLike, dest: PathLike) -> bool:
        """Deep-clone the subtree at ``source`` to ``dest``, overwriting."""
        return self._attempt(self._copy_item, source, dest)

    def move_item(self, source: PathLike, dest: PathLike) -> bool:
        """Relocate the subtree at ``source`` to ``dest``, overwriting."""
        return self._attempt(self._move_item, source, dest)

    def chmod(self, path: PathLike, mode: str) -> bool:
        """Rewrite a node's permissions from a numeric or symbolic mode."""
        return self._attempt(self._chmod, path, mode)

    def _attempt(self, handler: Callable[..., None], *args: Any) -> bool:
        with self._lock:
            try:
                handler(*args)
            except FileSystemError as e:
                logger.debug(f"{handler.__name__.lstrip('_')} failed: {e}")
                return False
            self._mark_updated()
            return True

    def _mark_updated(self) -> None:
        self.last_updated = _now()
        self.update_count += 1

    # ===== Strict Mutation API =====

    def apply_input(self, input_data: FileSystemInput) -> None:
        """Apply a FileSystemInput, raising on failure.

        Args:
            input_data: The mutation to apply.

        Raises:
            ValueError: If required fields for the operation are missing.
            FileSystemError: If the operation cannot be performed.
        """
        input_data.validate_input()

        operation_handlers: dict[str, Callable[[], None]] = {
            "write_file": lambda: self._write_file(input_data.path, input_data.content or ""),
            "make_directory": lambda: self._make_directory(input_data.path),
            "delete": lambda: self._delete_item(input_data.path),
            "copy": lambda: self._copy_item(input_data.path, input_data.destination or ""),
            "move": lambda: self._move_item(input_data.path, input_data.destination or ""),
            "chmod": lambda: self._chmod(input_data.path, input_data.mode or ""),
        }

        with self._lock:
            operation_handlers[input_data.operation]()
            self._mark_updated()

    # ===== Operation Handlers =====

    def _write_file(self, path: PathLike, content: str) -> None:
        target = self._normalize(path)
        parent = self._find_parent(target)
        existing = parent.get_child(target.name)
        if existing is not None:
            if existing.is_directory:
                raise IsADirectory(str(target))
            existing.content = content
        else:
            parent.children.append(
                FileSystemNode(
                    name=target.name,
                    kind=NodeKind.FILE,
                    content=content,
                    owner=self.default_owner,
                    group=self.default_owner,
                )
            )
        logger.debug(f"Wrote {len(content)} chars to {target}")

    def _make_directory(self, path: PathLike) -> None:
        target = self._normalize(path)
        parent = self._find_parent(target)
        if parent.get_child(target.name) is not None:
            raise AlreadyExists(str(target))
        parent.children.append(
            FileSystemNode(
                name=target.name,
                kind=NodeKind.DIRECTORY,
                owner=self.default_owner,
                group=self.default_owner,
            )
        )
        logger.debug(f"Created directory {target}")

    def _delete_item(self, path: PathLike) -> None:
        target = self._normalize(path)
        parent = self._find_parent(target)
        if parent.remove_child(target.name) is None:
            raise PathNotFound(str(target))
        logger.debug(f"Deleted {target}")

    def _copy_item(self, source: PathLike, dest: PathLike) -> None:
        source_path = self._normalize(source)
        node = self._find(source_path)
        final = self._final_destination(source_path, self._normalize(dest))

        if final == source_path:
            raise InvalidOperation(str(final), "Source and destination are the same file")
        if final.is_within(source_path):
            raise InvalidOperation(str(final), "Cannot copy a directory into itself")

        parent = self._find_parent(final)
        clone = node.model_copy(deep=True)
        clone.name = final.name
        clone.created_at = _now()

        parent.remove_child(final.name)
        parent.children.append(clone)
        logger.debug(f"Copied {source_path} to {final}")

    def _move_item(self, source: PathLike, dest: PathLike) -> None:
        source_path = self._normalize(source)
        if source_path.is_root:
            raise InvalidOperation("/", "Cannot move the root directory")
        node = self._find(source_path)
        final = self._final_destination(source_path, self._normalize(dest))

        if final == source_path:
            raise InvalidOperation(str(final), "Source and destination are the same file")
        if final.is_within(source_path):
            raise InvalidOperation(str(final), "Cannot move a directory into itself")
        if source_path.is_within(final):
            raise InvalidOperation(str(final), "Cannot overwrite an ancestor directory")

        source_parent = self._find_parent(source_path)
        dest_parent = self._find_parent(final)

        source_parent.remove_child(source_path.name)
        dest_parent.remove_child(final.name)
        node.name = final.name
        dest_parent.children.append(node)
        logger.debug(f"Moved {source_path} to {final}")

    def _chmod(self, path: PathLike, mode: str) -> None:
        target = self._normalize(path)
        node = self._find(target)
        try:
            node.permissions = apply_mode(node.permissions, mode)
        except ValueError as e:
            raise InvalidOperation(str(target), str(e)) from e
        logger.debug(f"chmod {mode} {target} -> {node.permissions}")

    # ===== Snapshots & Validation =====

    def get_snapshot(self, include_content: bool = True, include_timestamps: bool = True) -> dict[str, Any]:
        """Export the tree as nested records.

        Args:
            include_content: Whether to include file contents.
            include_timestamps: Whether to include creation timestamps.

        Returns:
            Dictionary for the root node, children nested.
        """
        with self._lock:
            return self.root.to_dict(include_content, include_timestamps)

    def get_summary(self) -> str:
        """Return the JSON tree summary sent to the AI fallback gateway.

        File contents, timestamps and internal identifiers are excluded.
        """
        snapshot = self.get_snapshot(include_content=False, include_timestamps=False)
        return json.dumps(snapshot["children"], separators=(",", ":"))

    def validate_state(self) -> list[str]:
        """Validate tree invariants and return any issues.

        Checks for:
        - Root is a nameless directory
        - Sibling names are unique
        - Files have no children, directories have no content
        - Permissions strings match the fixed pattern and node kind

        Returns:
            List of validation error messages (empty list if valid).
        """
        issues = []
        with self._lock:
            if not self.root.is_directory or self.root.name:
                issues.append("Root must be a nameless directory")

            for path, node in self.root.walk():
                if not PERMISSIONS_PATTERN.match(node.permissions):
                    issues.append(f"{path}: invalid permissions {node.permissions!r}")
                elif (node.permissions[0] == "d") != node.is_directory:
                    issues.append(f"{path}: permissions type does not match kind")

                if node.is_directory:
                    names = [child.name for child in node.children]
                    duplicates = {name for name in names if names.count(name) > 1}
                    for name in sorted(duplicates):
                        issues.append(f"{path}: duplicate entry {name!r}")
                    if node.content is not None:
                        issues.append(f"{path}: directory has content")
                elif node.children:
                    issues.append(f"{path}: file has children")
        return issues

    def reset(self, username: str = "user", home: str | None = None, hostname: str = "desktop") -> None:
        """Replace the tree with a fresh seed tree."""
        with self._lock:
            self.root = build_default_tree(username=username, home=home, hostname=hostname)
            self.default_owner = username
            self._mark_updated()
        logger.info("Filesystem reset to default tree")

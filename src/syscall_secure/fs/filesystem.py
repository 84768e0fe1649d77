"""In-memory virtual file system: the resource store behind file syscalls.

The tree is made of two node kinds:

- **File** — a name and a byte string of content.
- **Directory** — a name and an insertion-ordered ``dict`` mapping child
  names to nodes.

The tree is rooted at a single directory named ``/``.  Nodes hold no
reference to their parent; the only way to reach a node is to walk a
path down from the root, one segment at a time.

Path handling is deliberately literal:

- Empty segments are skipped, so ``//home///admin`` is ``/home/admin``.
- ``.`` and ``..`` are ordinary names, not navigation.  ``/home/..``
  looks for a child called ``..`` inside ``home`` and does not find one.

Errors are the narrowest ``SyscallError`` subclass that applies, so the
dispatcher can pass them to the caller unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from syscall_secure.errors import (
    AlreadyExists,
    IsADirectory,
    NotADirectory,
    NotFound,
    ParentMissing,
)

ROOT_PATH = "/"


class FileType(StrEnum):
    """The kind of node a path resolves to."""

    FILE = "file"
    DIRECTORY = "dir"


@dataclass
class File:
    """A file node; content is replaced wholesale on write."""

    name: str
    content: bytes = b""

    @property
    def file_type(self) -> FileType:
        """Return ``FileType.FILE``."""
        return FileType.FILE

    @property
    def size(self) -> int:
        """Return the content length in bytes."""
        return len(self.content)


@dataclass
class Directory:
    """A directory node; children keep insertion order."""

    name: str
    children: dict[str, Node] = field(default_factory=dict)  # pyright: ignore[reportUnknownVariableType]

    @property
    def file_type(self) -> FileType:
        """Return ``FileType.DIRECTORY``."""
        return FileType.DIRECTORY

    @property
    def size(self) -> int:
        """Return the number of direct children."""
        return len(self.children)


Node = File | Directory


@dataclass(frozen=True)
class DirEntry:
    """One row of a directory listing."""

    name: str
    file_type: FileType
    size: int

    def to_dict(self) -> dict[str, Any]:
        """Return the ``{name, type, size}`` form shown to callers."""
        return {"name": self.name, "type": self.file_type.value, "size": self.size}


def split_path(path: str) -> list[str]:
    """Split *path* into its non-empty segments.

    Examples::

        "/home/admin/notes.md" → ["home", "admin", "notes.md"]
        "//etc//"              → ["etc"]
        "/"                    → []

    """
    return [part for part in path.split("/") if part]


class FileSystem:
    """A hierarchical in-memory file system.

    All operations take absolute paths and resolve them by walking from
    the root directory.  A fresh instance holds only an empty root; use
    ``seed_filesystem()`` for the standard starting tree.
    """

    def __init__(self) -> None:
        """Create a file system containing only the root directory."""
        self._root = Directory(name=ROOT_PATH)

    @property
    def root(self) -> Directory:
        """Return the root directory node."""
        return self._root

    def resolve(self, path: str) -> Node | None:
        """Walk *path* from the root and return the node it names.

        Returns:
            The node, or None if any segment is missing or an
            intermediate segment is a file.

        """
        if path == ROOT_PATH:
            return self._root

        current: Node = self._root
        for part in split_path(path):
            if not isinstance(current, Directory):
                return None
            child = current.children.get(part)
            if child is None:
                return None
            current = child
        return current

    def exists(self, path: str) -> bool:
        """Return True if *path* resolves to a node."""
        return self.resolve(path) is not None

    def _parent_of(self, path: str) -> tuple[Directory, str]:
        """Return the parent directory of *path* and the final segment.

        Raises:
            AlreadyExists: If *path* names the root.
            ParentMissing: If the parent is absent or is a file.

        """
        parts = split_path(path)
        if not parts:
            msg = "File already exists"
            raise AlreadyExists(msg)
        parent = self.resolve("/" + "/".join(parts[:-1]))
        if not isinstance(parent, Directory):
            msg = "Parent directory does not exist"
            raise ParentMissing(msg)
        return parent, parts[-1]

    def _link(self, path: str, node: Node) -> None:
        """Insert *node* under the parent of *path*."""
        parent, name = self._parent_of(path)
        if name in parent.children:
            msg = "File already exists"
            raise AlreadyExists(msg)
        node.name = name
        parent.children[name] = node

    def create_file(self, path: str, content: bytes = b"") -> None:
        """Create a new file.  Intermediate directories are not created.

        Args:
            path: Absolute path for the new file.
            content: Initial content.

        Raises:
            ParentMissing: If the parent directory does not exist.
            AlreadyExists: If the name is already taken.

        """
        self._link(path, File(name="", content=content))

    def create_dir(self, path: str) -> None:
        """Create a new, empty directory.

        Raises:
            ParentMissing: If the parent directory does not exist.
            AlreadyExists: If the name is already taken.

        """
        self._link(path, Directory(name=""))

    def _file_at(self, path: str) -> File:
        node = self.resolve(path)
        if node is None:
            msg = "File not found"
            raise NotFound(msg)
        if isinstance(node, Directory):
            msg = "Is a directory"
            raise IsADirectory(msg)
        return node

    def read_file(self, path: str) -> bytes:
        """Return the content of the file at *path*.

        Raises:
            NotFound: If the path does not resolve.
            IsADirectory: If the path is a directory.

        """
        return self._file_at(path).content

    def write_file(self, path: str, content: bytes) -> None:
        """Replace the content of an existing file.

        Raises:
            NotFound: If the path does not resolve.
            IsADirectory: If the path is a directory.

        """
        self._file_at(path).content = content

    def delete_file(self, path: str) -> None:
        """Remove the node at *path* (file or directory) from its parent.

        Raises:
            NotFound: If the parent or the child is missing.

        """
        parts = split_path(path)
        parent = self.resolve("/" + "/".join(parts[:-1])) if parts else None
        if not isinstance(parent, Directory) or parts[-1] not in parent.children:
            msg = "File not found"
            raise NotFound(msg)
        del parent.children[parts[-1]]

    def list_dir(self, path: str) -> list[DirEntry]:
        """List the children of a directory in insertion order.

        Raises:
            NotFound: If the path does not resolve.
            NotADirectory: If the path is a file.

        """
        node = self.resolve(path)
        if node is None:
            msg = "Directory not found"
            raise NotFound(msg)
        if not isinstance(node, Directory):
            msg = "Not a directory"
            raise NotADirectory(msg)
        return [
            DirEntry(name=name, file_type=child.file_type, size=child.size)
            for name, child in node.children.items()
        ]

    def to_dict(self) -> dict[str, Any]:
        """Return a nested snapshot of the whole tree.

        Directories carry ``children`` (a list, in insertion order);
        files carry their ``size``.  Content is left out; it is only
        readable through ``read_file``.
        """
        return _node_to_dict(self._root)


def _node_to_dict(node: Node) -> dict[str, Any]:
    if isinstance(node, File):
        return {"name": node.name, "type": node.file_type.value, "size": node.size}
    return {
        "name": node.name,
        "type": node.file_type.value,
        "children": [_node_to_dict(child) for child in node.children.values()],
    }


SEED_DIRECTORIES: tuple[str, ...] = (
    "/home",
    "/home/admin",
    "/home/guest",
    "/etc",
    "/var",
    "/var/log",
)

SEED_FILES: tuple[tuple[str, str], ...] = (
    ("/home/admin/secret.txt", "CONFIDENTIAL: Project Blue Book"),
    ("/home/admin/notes.md", "# To Do\n1. Secure the kernel\n2. Audit logs"),
    ("/etc/passwd", "admin:x:0:0:root:/home/admin:/bin/sh"),
    ("/etc/config", "mode=secure"),
)


def seed_filesystem() -> FileSystem:
    """Build the standard starting tree.

    ::

        /
        ├── home/
        │   ├── admin/{secret.txt, notes.md}
        │   └── guest/
        ├── etc/{passwd, config}
        └── var/
            └── log/

    """
    fs = FileSystem()
    for path in SEED_DIRECTORIES:
        fs.create_dir(path)
    for path, content in SEED_FILES:
        fs.create_file(path, content.encode())
    return fs

"""Virtual file system subsystem — the resource store behind file syscalls.

Re-exports public symbols so callers can write::

    from syscall_secure.fs import FileSystem, seed_filesystem
"""

from syscall_secure.fs.filesystem import (
    ROOT_PATH,
    DirEntry,
    Directory,
    File,
    FileSystem,
    FileType,
    Node,
    seed_filesystem,
    split_path,
)

__all__ = [
    "ROOT_PATH",
    "DirEntry",
    "Directory",
    "File",
    "FileSystem",
    "FileType",
    "Node",
    "seed_filesystem",
    "split_path",
]

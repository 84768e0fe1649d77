"""Tests for the virtual file system.

The file system is an in-memory tree of directories and files, rooted
at ``/`` and reached only by walking paths down from the root.  It is
the resource store behind every file syscall.
"""

import pytest

from syscall_secure.errors import (
    AlreadyExists,
    IsADirectory,
    NotADirectory,
    NotFound,
    ParentMissing,
)
from syscall_secure.fs.filesystem import (
    Directory,
    File,
    FileSystem,
    FileType,
    seed_filesystem,
    split_path,
)

ROOT_PATH = "/"
SECRET_CONTENT = b"CONFIDENTIAL: Project Blue Book"


class TestSplitPath:
    """Verify path segmentation."""

    def test_absolute_path(self) -> None:
        """Segments come out in order without the separators."""
        assert split_path("/home/admin/notes.md") == ["home", "admin", "notes.md"]

    def test_root_has_no_segments(self) -> None:
        """The root path is empty."""
        assert split_path("/") == []

    def test_duplicate_separators_are_skipped(self) -> None:
        """Empty segments do not count."""
        assert split_path("//etc///passwd/") == ["etc", "passwd"]


class TestFileSystemCreation:
    """Verify the initial state of a fresh file system."""

    def test_root_resolves_to_directory(self) -> None:
        """``/`` should resolve to the root directory."""
        fs = FileSystem()
        root = fs.resolve(ROOT_PATH)
        assert isinstance(root, Directory)
        assert root is fs.root
        assert root.name == "/"

    def test_root_is_empty(self) -> None:
        """A fresh root has no children."""
        fs = FileSystem()
        assert fs.list_dir(ROOT_PATH) == []


class TestResolve:
    """Verify path resolution."""

    def test_missing_path_is_none(self) -> None:
        """An unknown path resolves to None."""
        fs = seed_filesystem()
        assert fs.resolve("/nope") is None
        assert not fs.exists("/nope")

    def test_file_as_intermediate_is_none(self) -> None:
        """Walking through a file should fail, not raise."""
        fs = seed_filesystem()
        assert fs.resolve("/etc/passwd/extra") is None

    def test_resolves_file(self) -> None:
        """A file path resolves to its File node."""
        fs = seed_filesystem()
        node = fs.resolve("/home/admin/secret.txt")
        assert isinstance(node, File)
        assert node.name == "secret.txt"

    def test_duplicate_separators_collapse(self) -> None:
        """``//home///admin`` names the same directory as ``/home/admin``."""
        fs = seed_filesystem()
        assert fs.resolve("//home///admin") is fs.resolve("/home/admin")

    def test_dot_dot_is_a_literal_name(self) -> None:
        """``..`` is not navigation; it is looked up as a child name."""
        fs = seed_filesystem()
        assert fs.resolve("/home/admin/..") is None
        assert not fs.exists("/etc/../home")

    def test_dot_is_a_literal_name(self) -> None:
        """``.`` is not the current directory either."""
        fs = seed_filesystem()
        assert fs.resolve("/home/./admin") is None


class TestCreateFile:
    """Verify creating files."""

    def test_create_and_read_round_trip(self) -> None:
        """Reading a new file returns exactly what was created."""
        fs = FileSystem()
        fs.create_file("/hello.txt", b"hello")
        assert fs.read_file("/hello.txt") == b"hello"

    def test_default_content_is_empty(self) -> None:
        """Content defaults to no bytes."""
        fs = FileSystem()
        fs.create_file("/empty")
        assert fs.read_file("/empty") == b""

    def test_create_twice_raises_already_exists(self) -> None:
        """The second create fails and leaves the first file untouched."""
        fs = FileSystem()
        fs.create_file("/a.txt", b"first")
        with pytest.raises(AlreadyExists, match="File already exists"):
            fs.create_file("/a.txt", b"second")
        assert fs.read_file("/a.txt") == b"first"
        assert [e.name for e in fs.list_dir("/")] == ["a.txt"]

    def test_name_taken_by_directory(self) -> None:
        """A file cannot replace a directory of the same name."""
        fs = seed_filesystem()
        with pytest.raises(AlreadyExists):
            fs.create_file("/home/guest", b"")

    def test_missing_parent_raises(self) -> None:
        """Intermediate directories are never created."""
        fs = FileSystem()
        with pytest.raises(ParentMissing, match="Parent directory does not exist"):
            fs.create_file("/no/such/file.txt")
        assert not fs.exists("/no")

    def test_parent_is_a_file(self) -> None:
        """A file cannot be the parent of another node."""
        fs = seed_filesystem()
        with pytest.raises(ParentMissing):
            fs.create_file("/etc/passwd/child")

    def test_create_root_raises(self) -> None:
        """The root always exists."""
        fs = FileSystem()
        with pytest.raises(AlreadyExists):
            fs.create_file("/")


class TestReadWrite:
    """Verify reading and overwriting files."""

    def test_write_replaces_content(self) -> None:
        """Writing replaces the whole content."""
        fs = seed_filesystem()
        fs.write_file("/etc/config", b"mode=open")
        assert fs.read_file("/etc/config") == b"mode=open"

    def test_read_missing_raises_not_found(self) -> None:
        """Reading an unknown path raises NotFound."""
        fs = FileSystem()
        with pytest.raises(NotFound, match="File not found"):
            fs.read_file("/ghost")

    def test_read_directory_raises(self) -> None:
        """Reading a directory raises IsADirectory."""
        fs = seed_filesystem()
        with pytest.raises(IsADirectory, match="Is a directory"):
            fs.read_file("/home")

    def test_write_missing_raises_not_found(self) -> None:
        """write_file never creates files."""
        fs = FileSystem()
        with pytest.raises(NotFound):
            fs.write_file("/ghost", b"boo")
        assert not fs.exists("/ghost")

    def test_write_directory_raises(self) -> None:
        """Writing to a directory raises IsADirectory."""
        fs = seed_filesystem()
        with pytest.raises(IsADirectory):
            fs.write_file("/var/log", b"x")


class TestDeleteFile:
    """Verify removing nodes."""

    def test_delete_removes_entry(self) -> None:
        """A deleted file no longer resolves."""
        fs = seed_filesystem()
        fs.delete_file("/home/admin/notes.md")
        assert not fs.exists("/home/admin/notes.md")
        assert [e.name for e in fs.list_dir("/home/admin")] == ["secret.txt"]

    def test_delete_directory_removes_subtree(self) -> None:
        """Removing a directory takes its children with it."""
        fs = seed_filesystem()
        fs.delete_file("/home/admin")
        assert not fs.exists("/home/admin/secret.txt")

    def test_delete_missing_child(self) -> None:
        """An unknown child raises NotFound."""
        fs = seed_filesystem()
        with pytest.raises(NotFound):
            fs.delete_file("/home/admin/ghost")

    def test_delete_missing_parent(self) -> None:
        """An unknown parent raises NotFound."""
        fs = seed_filesystem()
        with pytest.raises(NotFound):
            fs.delete_file("/nowhere/file")

    def test_delete_root(self) -> None:
        """The root has no parent to be removed from."""
        fs = seed_filesystem()
        with pytest.raises(NotFound):
            fs.delete_file("/")


class TestListDir:
    """Verify directory listings."""

    def test_seeded_admin_listing(self) -> None:
        """Entries come back in insertion order with byte sizes."""
        fs = seed_filesystem()
        entries = fs.list_dir("/home/admin")
        assert [e.name for e in entries] == ["secret.txt", "notes.md"]
        assert entries[0].file_type is FileType.FILE
        assert entries[0].size == len(SECRET_CONTENT)

    def test_directory_size_is_child_count(self) -> None:
        """A directory's size is how many children it has."""
        fs = seed_filesystem()
        home = {e.name: e for e in fs.list_dir("/home")}
        expected_children = 2
        assert home["admin"].size == expected_children
        assert home["guest"].size == 0
        assert home["admin"].file_type is FileType.DIRECTORY

    def test_size_counts_bytes_not_characters(self) -> None:
        """Multi-byte characters count once per byte."""
        fs = FileSystem()
        content = "héllo".encode()
        fs.create_file("/utf8", content)
        assert fs.list_dir("/")[0].size == len(content)

    def test_entry_to_dict(self) -> None:
        """Rows serialize with the short type names."""
        fs = seed_filesystem()
        rows = [e.to_dict() for e in fs.list_dir("/var")]
        assert rows == [{"name": "log", "type": "dir", "size": 0}]

    def test_missing_directory(self) -> None:
        """Listing an unknown path raises NotFound."""
        fs = FileSystem()
        with pytest.raises(NotFound, match="Directory not found"):
            fs.list_dir("/ghost")

    def test_listing_a_file(self) -> None:
        """Listing a file raises NotADirectory."""
        fs = seed_filesystem()
        with pytest.raises(NotADirectory, match="Not a directory"):
            fs.list_dir("/etc/passwd")


class TestSeededTree:
    """Verify the standard starting tree byte for byte."""

    def test_root_children(self) -> None:
        """``/`` holds home, etc, and var in that order."""
        fs = seed_filesystem()
        assert [e.name for e in fs.list_dir("/")] == ["home", "etc", "var"]

    def test_seed_contents(self) -> None:
        """Each seeded file has its literal content."""
        fs = seed_filesystem()
        assert fs.read_file("/home/admin/secret.txt") == SECRET_CONTENT
        assert fs.read_file("/home/admin/notes.md") == (
            b"# To Do\n1. Secure the kernel\n2. Audit logs"
        )
        assert fs.read_file("/etc/passwd") == b"admin:x:0:0:root:/home/admin:/bin/sh"
        assert fs.read_file("/etc/config") == b"mode=secure"

    def test_empty_directories(self) -> None:
        """guest and log start empty."""
        fs = seed_filesystem()
        assert fs.list_dir("/home/guest") == []
        assert fs.list_dir("/var/log") == []

    def test_seeds_are_independent(self) -> None:
        """Two seeded trees share no nodes."""
        first = seed_filesystem()
        second = seed_filesystem()
        first.write_file("/etc/config", b"changed")
        assert second.read_file("/etc/config") == b"mode=secure"


class TestToDict:
    """Verify the tree snapshot used by the file browser."""

    def test_snapshot_shape(self) -> None:
        """Directories nest children; files carry sizes but no content."""
        fs = seed_filesystem()
        tree = fs.to_dict()
        assert tree["name"] == "/"
        assert tree["type"] == "dir"
        etc = next(c for c in tree["children"] if c["name"] == "etc")
        assert etc["children"][0] == {"name": "passwd", "type": "file", "size": 36}
        assert "content" not in etc["children"][0]

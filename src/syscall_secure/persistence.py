"""Audit persistence stores — where the audit log goes between runs.

The audit log is saved as one JSON document under one logical key, the
way a browser page would keep it in ``localStorage``.  A store is
anything with two methods::

    load(key) -> str | None   # None when nothing was ever saved
    save(key, value) -> None

Two stores are provided:

- ``MemoryStore`` — a ``dict``; state lives as long as the object.
- ``JsonFileStore`` — one ``<key>.json`` file per key in a directory,
  so the log survives a restart of the simulation.  Files are replaced
  by rename, never rewritten in place.

Stores are free to raise ``OSError`` (disk full, permissions, ...).
The audit log catches and reports those; a store never has to.
"""

from pathlib import Path
from typing import Protocol


class AuditStore(Protocol):
    """Key-value storage for serialized audit logs."""

    def load(self, key: str) -> str | None:
        """Return the value saved under *key*, or None."""
        ...

    def save(self, key: str, value: str) -> None:
        """Replace the value saved under *key*."""
        ...


class MemoryStore:
    """Dict-backed store; nothing touches the disk."""

    def __init__(self) -> None:
        """Create an empty store."""
        self._data: dict[str, str] = {}

    def load(self, key: str) -> str | None:
        """Return the value saved under *key*, or None."""
        return self._data.get(key)

    def save(self, key: str, value: str) -> None:
        """Replace the value saved under *key*."""
        self._data[key] = value


class JsonFileStore:
    """Store each key as ``<directory>/<key>.json``.

    The directory is created on the first save.  Writes replace the
    whole file, matching the write-everything-back model of the log.
    """

    def __init__(self, directory: Path) -> None:
        """Create a store rooted at *directory*."""
        self._directory = directory

    @property
    def directory(self) -> Path:
        """Return the directory holding the JSON files."""
        return self._directory

    def path_for(self, key: str) -> Path:
        """Return the file path used for *key*."""
        return self._directory / f"{key}.json"

    def load(self, key: str) -> str | None:
        """Read the file for *key*; a missing file is None.

        Raises:
            OSError: If the file exists but cannot be read.

        """
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, key: str, value: str) -> None:
        """Write *value* to the file for *key*.

        The value goes to a sibling ``.tmp`` file first and is then renamed
        over the target, so a reader sees either the old log or the new
        one, never a half-written file.

        Raises:
            OSError: If the directory or file cannot be written.

        """
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        staging = path.with_name(f"{path.name}.tmp")
        staging.write_text(value, encoding="utf-8")
        staging.replace(path)

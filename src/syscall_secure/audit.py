"""Audit log — the record of every system call attempt.

Every call that reaches the dispatcher leaves exactly one entry here,
whatever the outcome:

- **ALLOWED** — the call ran and returned a value.
- **DENIED** — the session's role was refused (``PermissionDenied``),
  or a login presented bad credentials.
- **ERROR** — anything else went wrong (no session, missing file,
  unknown syscall, ...).

Entries are immutable and the log is kept newest-first.  Individual
entries are never edited or removed; the only way to shrink the log is
to clear all of it.

After each change the whole log is written to an ``AuditStore`` as a
JSON array under one key.  Storage trouble is reported to the
operational ``Logger`` and otherwise ignored: a broken disk must never
stop a system call from completing.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from syscall_secure.logging import Logger, LogLevel
from syscall_secure.persistence import AuditStore, MemoryStore

DEFAULT_STORAGE_KEY = "os_simulation_logs"


class AuditStatus(StrEnum):
    """Outcome of an audited operation."""

    ALLOWED = "ALLOWED"
    DENIED = "DENIED"
    ERROR = "ERROR"


@dataclass(frozen=True)
class AuditEntry:
    """One immutable audit record.

    Attributes:
        id: Unique, strictly increasing value derived from the timestamp
            (microseconds since the epoch).
        timestamp: ISO-8601 UTC time of the call.
        user: Who made the call (``system`` for logins, ``anonymous``
            when there was no session).
        syscall: Operation name.
        params: The call's arguments, serialized as JSON.
        status: ALLOWED, DENIED, or ERROR.
        message: ``Success`` or the error text.

    """

    id: int
    timestamp: str
    user: str
    syscall: str
    params: str
    status: AuditStatus
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dictionary."""
        data = asdict(self)
        data["status"] = self.status.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditEntry:
        """Rebuild an entry from ``to_dict()`` output.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If the status is not a known ``AuditStatus``.

        """
        return cls(
            id=int(data["id"]),
            timestamp=str(data["timestamp"]),
            user=str(data["user"]),
            syscall=str(data["syscall"]),
            params=str(data["params"]),
            status=AuditStatus(data["status"]),
            message=str(data.get("message", "")),
        )


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _params_json(params: Any) -> str:
    try:
        return json.dumps(params, default=str)
    except (TypeError, ValueError):
        # Circular or otherwise unencodable: keep the repr as a JSON string.
        return json.dumps(repr(params))


class AuditLog:
    """Newest-first, append-only audit log backed by an ``AuditStore``."""

    def __init__(
        self,
        *,
        store: AuditStore | None = None,
        key: str = DEFAULT_STORAGE_KEY,
        logger: Logger | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Create a log and load whatever *store* holds under *key*.

        Args:
            store: Persistence backend (defaults to a fresh MemoryStore).
            key: The single key the log is saved under.
            logger: Operational log for storage diagnostics.
            clock: Source of timestamps, injectable for tests.

        """
        self._store: AuditStore = store if store is not None else MemoryStore()
        self._key = key
        self._logger = logger if logger is not None else Logger()
        self._clock = clock
        self._entries: list[AuditEntry] = self._load()
        self._last_id = max((e.id for e in self._entries), default=0)

    @property
    def entries(self) -> list[AuditEntry]:
        """Return a copy of all entries, newest first."""
        return list(self._entries)

    def __len__(self) -> int:
        """Return the number of entries."""
        return len(self._entries)

    def count(self, status: AuditStatus) -> int:
        """Return how many entries have the given status."""
        return sum(1 for e in self._entries if e.status is status)

    def record(
        self,
        user: str,
        syscall: str,
        params: Any,
        status: AuditStatus,
        message: str = "",
    ) -> AuditEntry:
        """Create an entry, put it at the front, and persist the log.

        Never raises: storage failures are reported to the operational
        log and the entry is kept in memory regardless.

        Args:
            user: Who made the call.
            syscall: Operation name.
            params: Arguments; serialized to JSON (unserializable values
                fall back to ``str``).
            status: Outcome.
            message: ``Success`` or the error text.

        Returns:
            The new entry.

        """
        now = self._clock()
        # Two calls inside one clock tick still get distinct ids.
        entry_id = max(int(now.timestamp() * 1_000_000), self._last_id + 1)
        self._last_id = entry_id
        entry = AuditEntry(
            id=entry_id,
            timestamp=now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            user=user,
            syscall=syscall,
            params=_params_json(params),
            status=status,
            message=message,
        )
        self._entries.insert(0, entry)
        self._save()
        return entry

    def clear(self) -> None:
        """Empty the log, including its persisted copy."""
        self._entries.clear()
        self._save()

    def _load(self) -> list[AuditEntry]:
        try:
            text = self._store.load(self._key)
            if not text:
                return []
            return [AuditEntry.from_dict(item) for item in json.loads(text)]
        except Exception as e:  # noqa: BLE001
            self._logger.log(LogLevel.ERROR, f"Failed to load audit log: {e}", source="audit")
            return []

    def _save(self) -> None:
        try:
            payload = json.dumps([e.to_dict() for e in self._entries])
            self._store.save(self._key, payload)
        except Exception as e:  # noqa: BLE001
            self._logger.log(LogLevel.ERROR, f"Failed to save audit log: {e}", source="audit")

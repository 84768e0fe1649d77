"""Operational kernel log.

This is the ``dmesg`` of the simulation: boot messages, per-syscall
traces, and diagnostics such as an audit store that failed to save.
It is *not* the audit log.  The audit log (``syscall_secure.audit``) is
the user-facing record of who asked for what; this log is for whoever
is running the simulation, and it is never persisted.

Like a kernel ring buffer it has a fixed capacity: once full, the
oldest lines fall off the front.  Every line carries a sequence number
that keeps counting across evictions and ``clear()``, so a reader can
tell when lines are missing::

    [     0] INFO    kernel: Kernel System Initializing...
    [     7] DEBUG   syscall: read_file('/etc/passwd')  (user)
"""

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum
from itertools import count
from typing import Any

DEFAULT_CAPACITY = 1024
SYSTEM_SOURCE_USER = "system"


class LogLevel(IntEnum):
    """Severity levels for operational log entries."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """A single operational log record.

    Attributes:
        seq: Position in the log since the logger was created.
        level: The severity of this event.
        message: What happened.
        source: The subsystem that reported it (``kernel``, ``audit``...).
        user: The session user at the time, or ``system``.

    """

    seq: int
    level: LogLevel
    message: str
    source: str
    user: str = SYSTEM_SOURCE_USER

    def __str__(self) -> str:
        """Format as a ``dmesg`` line; non-system users are appended."""
        line = f"[{self.seq:>6}] {self.level.name:<7} {self.source}: {self.message}"
        if self.user != SYSTEM_SOURCE_USER:
            line += f"  ({self.user})"
        return line


def format_call(name: str, args: Sequence[Any]) -> str:
    """Render a syscall the way a tracer prints it: ``name('a', 'b')``."""
    return f"{name}({', '.join(repr(arg) for arg in args)})"


class Logger:
    """Bounded, in-memory log buffer."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        """Create an empty logger holding at most *capacity* entries.

        Raises:
            ValueError: If *capacity* is not positive.

        """
        if capacity < 1:
            msg = f"Log capacity must be positive, got {capacity}"
            raise ValueError(msg)
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._seq = count()

    @property
    def capacity(self) -> int:
        """Return the maximum number of retained entries."""
        return self._entries.maxlen or 0

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of the retained entries, oldest first."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        user: str = SYSTEM_SOURCE_USER,
    ) -> LogEntry:
        """Append a new entry, evicting the oldest when full."""
        entry = LogEntry(
            seq=next(self._seq), level=level, message=message, source=source, user=user
        )
        self._entries.append(entry)
        return entry

    def trace_syscall(self, name: str, args: Sequence[Any], *, user: str) -> LogEntry:
        """Record a DEBUG line for a syscall about to be dispatched."""
        return self.log(LogLevel.DEBUG, format_call(name, args), source="syscall", user=user)

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
        user: str | None = None,
    ) -> list[LogEntry]:
        """Return retained entries matching every given criterion."""
        return [
            e
            for e in self._entries
            if (min_level is None or e.level >= min_level)
            and (source is None or e.source == source)
            and (user is None or e.user == user)
        ]

    def tail(self, n: int) -> list[LogEntry]:
        """Return the newest *n* entries, oldest first."""
        if n <= 0:
            return []
        return list(self._entries)[-n:]

    def clear(self) -> None:
        """Drop every retained entry; sequence numbers keep counting."""
        self._entries.clear()

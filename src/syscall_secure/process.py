"""Process table — pid allocation and process records.

There is no scheduler here: a process is just a record that says a
program with some name was started by some user.  Records are created
by ``create_process`` and removed by ``kill_process``; both are
root-only syscalls, enforced by the dispatcher, not by this table.

Pids come from a per-table ``itertools.count`` starting at a reserved
base (100 by default).  A pid is never handed out twice, even after
the process it named has been killed, so a stale pid can never point
at a newer process.
"""

from dataclasses import dataclass
from enum import StrEnum
from itertools import count
from typing import Any

from syscall_secure.errors import ProcessNotFound

DEFAULT_PID_BASE = 100


class ProcessStatus(StrEnum):
    """Lifecycle status of a process record.

    Without a scheduler the only state a live process can be in is
    RUNNING; a killed process is removed rather than marked.
    """

    RUNNING = "running"


@dataclass(frozen=True)
class ProcessRecord:
    """One entry in the process table."""

    pid: int
    name: str
    owner: str
    status: ProcessStatus = ProcessStatus.RUNNING

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dictionary."""
        return {
            "pid": self.pid,
            "name": self.name,
            "owner": self.owner,
            "status": self.status.value,
        }


class ProcessTable:
    """Insertion-ordered table of live processes keyed by pid."""

    def __init__(self, *, pid_base: int = DEFAULT_PID_BASE) -> None:
        """Create an empty table whose first pid will be *pid_base*."""
        self._pid_counter = count(start=pid_base)
        self._records: dict[int, ProcessRecord] = {}

    def create(self, name: str, owner: str) -> ProcessRecord:
        """Allocate the next pid and add a running process.

        Args:
            name: Program name (e.g. ``init``, ``firefox``).
            owner: Username that started it.

        Returns:
            The new record.

        """
        record = ProcessRecord(pid=next(self._pid_counter), name=name, owner=owner)
        self._records[record.pid] = record
        return record

    def kill(self, pid: int) -> ProcessRecord:
        """Remove a process by pid and return its record.

        Raises:
            ProcessNotFound: If no live process has this pid.

        """
        record = self._records.pop(pid, None)
        if record is None:
            msg = "Process not found"
            raise ProcessNotFound(msg)
        return record

    def get(self, pid: int) -> ProcessRecord | None:
        """Return the record for *pid*, or None."""
        return self._records.get(pid)

    def records(self) -> list[ProcessRecord]:
        """Return all live records in creation order."""
        return list(self._records.values())

    def __len__(self) -> int:
        """Return the number of live processes."""
        return len(self._records)

    def __contains__(self, pid: object) -> bool:
        """Return True if *pid* names a live process."""
        return pid in self._records

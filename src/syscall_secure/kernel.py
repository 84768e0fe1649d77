"""The kernel — the aggregate that owns all simulated state.

One ``Kernel`` instance owns:

- the operational log (``dmesg``),
- the audit log and its store,
- the session manager and its credential table,
- the virtual file system (seeded with the standard tree),
- the process table (seeded with ``init``).

Nothing lives at module level, so two kernels never share state; tests
build a fresh one each time.

``invoke()`` is the single entry point for privileged work:

    auth check → resolve → role check → parse → handler (acts) → audit

Exactly one audit entry is written per call, before the caller sees the
result or the error.  Errors are re-raised unchanged: auditing is a side
effect, never a recovery path.

Every public method that reads or changes state takes the kernel's
re-entrant lock, so one call, including its audit write, finishes before
the next begins even when the web server handles requests on several
threads.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from typing import Any

from syscall_secure.audit import AuditEntry, AuditLog, AuditStatus
from syscall_secure.config import KernelConfig
from syscall_secure.errors import NotAuthenticated, PermissionDenied
from syscall_secure.fs.filesystem import FileSystem, seed_filesystem
from syscall_secure.logging import Logger, LogLevel
from syscall_secure.persistence import AuditStore, JsonFileStore, MemoryStore
from syscall_secure.process import ProcessRecord, ProcessTable
from syscall_secure.syscalls import dispatch_syscall
from syscall_secure.users import (
    ANONYMOUS_USER,
    SYSTEM_USER,
    CredentialStore,
    Session,
    SessionManager,
    StaticCredentialStore,
)

INIT_PROCESS_NAME = "init"


def _store_for(config: KernelConfig) -> AuditStore:
    if config.audit_dir is None:
        return MemoryStore()
    return JsonFileStore(config.audit_dir)


class Kernel:
    """The central coordinator of the simulated operating system."""

    def __init__(
        self,
        *,
        config: KernelConfig | None = None,
        credentials: CredentialStore | None = None,
        audit_store: AuditStore | None = None,
        filesystem: FileSystem | None = None,
    ) -> None:
        """Build every subsystem and start ``init``.

        Args:
            config: Settings; defaults to ``KernelConfig()``.
            credentials: Credential table; defaults to the accounts in
                *config*.
            audit_store: Audit persistence; defaults to a JSON file store
                when ``config.audit_dir`` is set, else memory.
            filesystem: Starting tree; defaults to the seeded tree.

        """
        self._config = config if config is not None else KernelConfig()
        self._lock = threading.RLock()

        self._logger = Logger()
        self._logger.log(LogLevel.INFO, "Kernel System Initializing...", source="kernel")

        self._audit = AuditLog(
            store=audit_store if audit_store is not None else _store_for(self._config),
            key=self._config.storage_key,
            logger=self._logger,
        )
        self._boot(f"Audit log ({len(self._audit)} entries restored)")

        self._sessions = SessionManager(
            credentials=(
                credentials
                if credentials is not None
                else StaticCredentialStore(self._config.accounts)
            ),
            audit=self._audit,
        )
        self._boot("Session manager")

        self._filesystem = filesystem if filesystem is not None else seed_filesystem()
        self._boot("File system")

        self._processes = ProcessTable(pid_base=self._config.pid_base)
        init = self._processes.create(INIT_PROCESS_NAME, owner=SYSTEM_USER)
        self._boot(f"Init process (PID {init.pid})")

    @classmethod
    def from_config(cls, config: KernelConfig) -> Kernel:
        """Build a kernel whose store and credentials come from *config*."""
        return cls(config=config)

    def _boot(self, subsystem: str) -> None:
        self._logger.log(LogLevel.INFO, f"[OK] {subsystem}", source="kernel")

    # -- Subsystems ---------------------------------------------------------

    @property
    def config(self) -> KernelConfig:
        """Return the settings this kernel was built from."""
        return self._config

    @property
    def logger(self) -> Logger:
        """Return the operational log."""
        return self._logger

    @property
    def audit(self) -> AuditLog:
        """Return the audit log."""
        return self._audit

    @property
    def filesystem(self) -> FileSystem:
        """Return the virtual file system."""
        return self._filesystem

    @property
    def processes(self) -> ProcessTable:
        """Return the process table."""
        return self._processes

    @property
    def session(self) -> Session | None:
        """Return the active session, or None."""
        return self._sessions.current

    # -- Sessions -----------------------------------------------------------

    def login(self, username: str, password: str) -> bool:
        """Open a session; a wrong pair returns False (and is audited)."""
        with self._lock:
            ok = self._sessions.login(username, password)
            level = LogLevel.INFO if ok else LogLevel.WARNING
            outcome = "succeeded" if ok else "failed"
            self._logger.log(level, f"login {outcome} for '{username}'", source="auth")
            return ok

    def logout(self) -> None:
        """Close the active session, if any."""
        with self._lock:
            session = self._sessions.current
            self._sessions.logout()
            if session is not None:
                self._logger.log(
                    LogLevel.INFO, "logout", source="auth", user=session.username
                )

    def require_session(self) -> Session:
        """Return the active session or raise ``NotAuthenticated``."""
        return self._sessions.require_authenticated()

    def is_privileged(self) -> bool:
        """Return True iff a root session is active."""
        return self._sessions.is_privileged()

    # -- System calls -------------------------------------------------------

    def invoke(self, name: str, args: Sequence[Any] = ()) -> Any:
        """Execute a system call and audit the outcome.

        Args:
            name: Wire name of the syscall (e.g. ``"read_file"``).
            args: Positional arguments for the call.

        Returns:
            The syscall's result.

        Raises:
            NotAuthenticated: If no session is active.
            SyscallError: Whatever the dispatcher or handler raised.

        """
        params = list(args)
        with self._lock:
            try:
                session = self._sessions.require_authenticated()
            except NotAuthenticated as e:
                self._audit.record(ANONYMOUS_USER, name, params, AuditStatus.ERROR, str(e))
                raise

            self._logger.trace_syscall(name, params, user=session.username)
            try:
                result = dispatch_syscall(self, name, params)
            except Exception as exc:
                status = (
                    AuditStatus.DENIED if isinstance(exc, PermissionDenied) else AuditStatus.ERROR
                )
                self._audit.record(session.username, name, params, status, str(exc))
                raise
            self._audit.record(session.username, name, params, AuditStatus.ALLOWED, "Success")
            return result

    # -- Read-side helpers for the presentation layer -----------------------

    def logs(self) -> list[AuditEntry]:
        """Return the audit entries, newest first."""
        with self._lock:
            return self._audit.entries

    def clear_logs(self) -> None:
        """Empty the audit log and its persisted copy."""
        with self._lock:
            self._audit.clear()
            self._logger.log(LogLevel.INFO, "audit log cleared", source="audit")

    def list_processes(self) -> list[ProcessRecord]:
        """Return the live process records."""
        with self._lock:
            return self._processes.records()

    def stats(self) -> dict[str, int]:
        """Return dashboard counters.

        Returns:
            ``syscalls`` (audit entries), ``violations`` (DENIED
            entries), and ``processes`` (live processes).

        """
        with self._lock:
            return {
                "syscalls": len(self._audit),
                "violations": self._audit.count(AuditStatus.DENIED),
                "processes": len(self._processes),
            }

    def filesystem_tree(self) -> dict[str, Any]:
        """Return a nested snapshot of the file system."""
        with self._lock:
            return self._filesystem.to_dict()

    def dmesg(self, min_level: LogLevel | None = None) -> list[str]:
        """Return the operational log as formatted lines, oldest first."""
        return [str(entry) for entry in self._logger.filter(min_level=min_level)]

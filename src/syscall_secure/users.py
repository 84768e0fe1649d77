"""Users and sessions — who is making the request?

Three building blocks:

**Role** — ``root`` or ``user``.  There are no permission bits in this
    simulation; every authorization decision is made from the role.

**CredentialStore** — anything that can turn a username and password
    into a role.  ``StaticCredentialStore`` is a fixed table, seeded by
    default with an ``admin`` (root) account and a ``user`` account.
    The kernel accepts any object with a ``verify`` method, so the
    table can be swapped for something else without touching the rest.

**SessionManager** — holds the one active ``Session``.  Logging in
    replaces whatever session was active; logging out clears it.
    A failed login is an ordinary outcome: it returns False and is
    written to the audit log as DENIED, it does not raise.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol

from syscall_secure.audit import AuditLog, AuditStatus
from syscall_secure.errors import NotAuthenticated

SYSTEM_USER = "system"
ANONYMOUS_USER = "anonymous"


class Role(StrEnum):
    """Privilege level of a session."""

    ROOT = "root"
    USER = "user"


@dataclass(frozen=True)
class Session:
    """The identity behind the current system calls."""

    username: str
    role: Role

    @property
    def is_root(self) -> bool:
        """Return True for a root session."""
        return self.role is Role.ROOT

    def to_dict(self) -> dict[str, Any]:
        """Return ``{"username", "role"}``."""
        return {"username": self.username, "role": self.role.value}


@dataclass(frozen=True)
class Account:
    """A username/password/role triple in a credential table."""

    username: str
    password: str
    role: Role

    def __repr__(self) -> str:
        """Return a representation that does not leak the password."""
        return f"Account(username={self.username!r}, role={self.role.value!r})"


DEFAULT_ACCOUNTS: tuple[Account, ...] = (
    Account(username="admin", password="admin123", role=Role.ROOT),
    Account(username="user", password="user123", role=Role.USER),
)


class CredentialStore(Protocol):
    """Verifies a username/password pair."""

    def verify(self, username: str, password: str) -> Role | None:
        """Return the account's role, or None if the pair is wrong."""
        ...


class StaticCredentialStore:
    """A fixed, in-memory credential table."""

    def __init__(self, accounts: Iterable[Account] = DEFAULT_ACCOUNTS) -> None:
        """Create a table from *accounts*.

        Raises:
            ValueError: If a username appears twice.

        """
        self._accounts: dict[str, Account] = {}
        for account in accounts:
            if account.username in self._accounts:
                msg = f"Duplicate account '{account.username}'"
                raise ValueError(msg)
            self._accounts[account.username] = account

    @property
    def usernames(self) -> list[str]:
        """Return the known usernames."""
        return list(self._accounts)

    def verify(self, username: str, password: str) -> Role | None:
        """Return the role for a matching pair, else None."""
        account = self._accounts.get(username)
        if account is None or account.password != password:
            return None
        return account.role


class SessionManager:
    """Owns the single current session and audits logins and logouts."""

    def __init__(self, *, credentials: CredentialStore, audit: AuditLog) -> None:
        """Create a manager with no active session."""
        self._credentials = credentials
        self._audit = audit
        self._session: Session | None = None

    @property
    def current(self) -> Session | None:
        """Return the active session, or None."""
        return self._session

    def login(self, username: str, password: str) -> bool:
        """Try to open a session.

        Both outcomes are audited under the ``system`` user.  On failure
        an already active session is left as it was.

        Returns:
            True if the credentials matched.

        """
        role = self._credentials.verify(username, password)
        params = {"username": username}
        if role is None:
            self._audit.record(
                SYSTEM_USER, "login", params, AuditStatus.DENIED, "Invalid credentials"
            )
            return False
        self._session = Session(username=username, role=role)
        self._audit.record(SYSTEM_USER, "login", params, AuditStatus.ALLOWED, "Auth successful")
        return True

    def logout(self) -> None:
        """Close the active session, if any, and audit it."""
        if self._session is None:
            return
        self._audit.record(self._session.username, "logout", {}, AuditStatus.ALLOWED)
        self._session = None

    def require_authenticated(self) -> Session:
        """Return the active session.

        Raises:
            NotAuthenticated: If nobody is logged in.

        """
        if self._session is None:
            msg = "Not logged in"
            raise NotAuthenticated(msg)
        return self._session

    def is_privileged(self) -> bool:
        """Return True iff a root session is active."""
        return self._session is not None and self._session.is_root

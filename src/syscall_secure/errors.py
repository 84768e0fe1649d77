"""Error taxonomy for system calls.

Every failure a caller can see from ``Kernel.invoke`` is a
``SyscallError``.  The subclasses say *what kind* of failure happened,
and the message (``str(error)``) is shown to the user verbatim.

The tree::

    SyscallError
    ├── NotAuthenticated   no active session
    ├── PermissionDenied   role or path-scoped refusal
    ├── NotFound           file, directory, or process absent
    │   └── ProcessNotFound
    ├── AlreadyExists
    ├── IsADirectory
    ├── NotADirectory
    ├── ParentMissing
    ├── UnknownSyscall
    └── InvalidArguments   wrong arity or an unparsable argument

The audit log classifies outcomes by type: ``PermissionDenied`` is a
*denial*, everything else is an *error*.
"""


class SyscallError(Exception):
    """Base class for every failure raised through the syscall layer."""


class NotAuthenticated(SyscallError):
    """Raised when a system call is attempted without a session."""


# Named after the OS concept; deliberately not the built-in PermissionError.
class PermissionDenied(SyscallError):
    """Raised when the session's role may not perform the operation."""


class NotFound(SyscallError):
    """Raised when a path or process does not exist."""


class ProcessNotFound(NotFound):
    """Raised when no process record has the requested pid."""


class AlreadyExists(SyscallError):
    """Raised when creating a node whose name is already taken."""


class IsADirectory(SyscallError):
    """Raised when a file operation targets a directory."""


class NotADirectory(SyscallError):
    """Raised when a directory operation targets a file."""


class ParentMissing(SyscallError):
    """Raised when the parent of a new node is absent or not a directory."""


class UnknownSyscall(SyscallError):
    """Raised when the requested syscall name is not in the registry."""


class InvalidArguments(SyscallError):
    """Raised when syscall arguments cannot be parsed."""

"""SysCall Secure — a simulated OS authentication, file system, and syscall layer.

Build a kernel, log in, and make system calls::

    from syscall_secure import Kernel

    kernel = Kernel()
    kernel.login("admin", "admin123")
    kernel.invoke("list_dir", ["/home/admin"])
    kernel.logs()  # one audit entry per call, newest first
"""

from syscall_secure.audit import AuditEntry, AuditLog, AuditStatus
from syscall_secure.config import KernelConfig, load_config
from syscall_secure.errors import (
    AlreadyExists,
    InvalidArguments,
    IsADirectory,
    NotADirectory,
    NotAuthenticated,
    NotFound,
    ParentMissing,
    PermissionDenied,
    ProcessNotFound,
    SyscallError,
    UnknownSyscall,
)
from syscall_secure.kernel import Kernel
from syscall_secure.syscalls import SyscallName
from syscall_secure.users import Role, Session

__version__ = "1.0.0"

__all__ = [
    "AlreadyExists",
    "AuditEntry",
    "AuditLog",
    "AuditStatus",
    "InvalidArguments",
    "IsADirectory",
    "Kernel",
    "KernelConfig",
    "NotADirectory",
    "NotAuthenticated",
    "NotFound",
    "ParentMissing",
    "PermissionDenied",
    "ProcessNotFound",
    "Role",
    "Session",
    "SyscallError",
    "SyscallName",
    "UnknownSyscall",
    "load_config",
]

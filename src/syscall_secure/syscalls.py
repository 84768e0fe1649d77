"""System call interface — the gateway between callers and kernel state.

Callers never touch the file system or the process table directly.
They name an operation and hand over a list of string arguments; the
kernel authenticates the session, then this module takes over:

1. ``SyscallName`` — an enum of every operation the kernel supports.
   It is a StrEnum, so the wire name (``"read_file"``) *is* the member.

2. Typed parameters — each operation declares its positional
   parameters and parses the raw argument list into a small frozen
   dataclass (``PathArgs``, ``PidArgs``, ...) before its handler runs.
   Wrong arity or a non-numeric pid fails here with
   ``InvalidArguments``, so handlers only ever see well-formed input.

3. ``SYSCALL_TABLE`` — maps every ``SyscallName`` to a ``SyscallDef``
   (parameters, parser, handler).  ``dispatch_syscall()`` looks the
   name up, refuses root-only calls from other sessions, parses, and
   calls the handler.

Authorization is per operation, not global.  Calls marked ``root_only``
are refused by the dispatcher before their arguments are parsed; the
path-scoped rules (``shadow`` reads, ``/etc`` writes) are checked by
the handler before it touches shared state.

==============  ==========================================================
get_info        any session
create_process  root only
kill_process    root only
open_file       any session
read_file       any session, but paths containing ``shadow`` are refused
                for everyone, root included
write_file      non-root sessions are refused anywhere under ``/etc``
create_file     any session
list_dir        any session
==============  ==========================================================
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from syscall_secure.errors import InvalidArguments, NotFound, PermissionDenied, UnknownSyscall
from syscall_secure.fs.filesystem import split_path

if TYPE_CHECKING:
    from syscall_secure.kernel import Kernel

FILE_DESCRIPTOR_TOKEN = "File Descriptor [Mocked]"
FORBIDDEN_READ_MARKER = "shadow"
READ_ONLY_TREE = "etc"


class SyscallName(StrEnum):
    """Every system call the kernel supports, by wire name."""

    GET_INFO = "get_info"
    CREATE_PROCESS = "create_process"
    KILL_PROCESS = "kill_process"
    OPEN_FILE = "open_file"
    READ_FILE = "read_file"
    WRITE_FILE = "write_file"
    CREATE_FILE = "create_file"
    LIST_DIR = "list_dir"


# -- Typed parameters ---------------------------------------------------------


@dataclass(frozen=True)
class NoArgs:
    """Parameters for calls that take none."""


@dataclass(frozen=True)
class ProcessNameArgs:
    """Parameters for ``create_process``."""

    name: str


@dataclass(frozen=True)
class PidArgs:
    """Parameters for ``kill_process``."""

    pid: int


@dataclass(frozen=True)
class PathArgs:
    """Parameters for calls that take a single path."""

    path: str


@dataclass(frozen=True)
class PathContentArgs:
    """Parameters for calls that take a path and new content."""

    path: str
    content: str


@dataclass(frozen=True)
class ParamSpec:
    """One positional parameter, as shown to a user filling in a form."""

    name: str
    placeholder: str = ""


def _text(value: Any, param: str) -> str:
    if not isinstance(value, str):
        msg = f"Invalid {param}: expected text, got {type(value).__name__}"
        raise InvalidArguments(msg)
    return value


def _pid(value: Any) -> int:
    if isinstance(value, bool):
        msg = f"Invalid pid: {value!r}"
        raise InvalidArguments(msg)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        msg = f"Invalid pid: {value!r}"
        raise InvalidArguments(msg) from e


def _parse_none(_args: Sequence[Any]) -> NoArgs:
    return NoArgs()


def _parse_process_name(args: Sequence[Any]) -> ProcessNameArgs:
    return ProcessNameArgs(name=_text(args[0], "process_name"))


def _parse_pid(args: Sequence[Any]) -> PidArgs:
    return PidArgs(pid=_pid(args[0]))


def _parse_path(args: Sequence[Any]) -> PathArgs:
    return PathArgs(path=_text(args[0], "path"))


def _parse_path_content(args: Sequence[Any]) -> PathContentArgs:
    return PathContentArgs(path=_text(args[0], "path"), content=_text(args[1], "content"))


# -- Authorization predicates -------------------------------------------------


def _require_root(kernel: Kernel) -> None:
    """Raise PermissionDenied unless the session is root."""
    if not kernel.is_privileged():
        msg = "Permission denied: requires root"
        raise PermissionDenied(msg)


def is_forbidden_read(path: str) -> bool:
    """Return True for paths no session may read."""
    return FORBIDDEN_READ_MARKER in path


def is_read_only_for_users(path: str) -> bool:
    """Return True if *path* lies in ``/etc`` or below.

    Judged on segments, so ``//etc/passwd`` (which resolves to
    ``/etc/passwd``) counts, and ``/etcetera`` does not.
    """
    return split_path(path)[:1] == [READ_ONLY_TREE]


# -- Handlers -----------------------------------------------------------------


def _sys_get_info(kernel: Kernel, _args: NoArgs) -> dict[str, Any]:
    """Return the system identity and the calling session."""
    session = kernel.require_session()
    return {"os": kernel.config.os_name, "user": session.to_dict()}


def _sys_create_process(kernel: Kernel, args: ProcessNameArgs) -> int:
    """Start a process owned by the caller and return its pid."""
    session = kernel.require_session()
    return kernel.processes.create(args.name, owner=session.username).pid


def _sys_kill_process(kernel: Kernel, args: PidArgs) -> bool:
    """Remove a process record by pid."""
    kernel.processes.kill(args.pid)
    return True


def _sys_open_file(kernel: Kernel, args: PathArgs) -> str:
    """Return a descriptor token for an existing path."""
    if not kernel.filesystem.exists(args.path):
        msg = "File not found"
        raise NotFound(msg)
    return FILE_DESCRIPTOR_TOKEN


def _sys_read_file(kernel: Kernel, args: PathArgs) -> str:
    """Return a file's content as text."""
    if is_forbidden_read(args.path):
        msg = "Permission denied"
        raise PermissionDenied(msg)
    return kernel.filesystem.read_file(args.path).decode("utf-8", errors="replace")


def _sys_write_file(kernel: Kernel, args: PathContentArgs) -> bool:
    """Replace a file's content."""
    if not kernel.is_privileged() and is_read_only_for_users(args.path):
        msg = "Permission denied: /etc is read-only"
        raise PermissionDenied(msg)
    kernel.filesystem.write_file(args.path, args.content.encode())
    return True


def _sys_create_file(kernel: Kernel, args: PathContentArgs) -> bool:
    """Create a new file with initial content."""
    kernel.filesystem.create_file(args.path, args.content.encode())
    return True


def _sys_list_dir(kernel: Kernel, args: PathArgs) -> list[dict[str, Any]]:
    """List a directory as ``{name, type, size}`` rows."""
    return [entry.to_dict() for entry in kernel.filesystem.list_dir(args.path)]


# -- Registry -----------------------------------------------------------------


@dataclass(frozen=True)
class SyscallDef:
    """Everything the dispatcher needs to know about one syscall."""

    name: SyscallName
    params: tuple[ParamSpec, ...]
    parse: Callable[[Sequence[Any]], Any]
    handler: Callable[[Kernel, Any], Any]
    root_only: bool = False

    def bind(self, args: Sequence[Any]) -> Any:
        """Check arity and parse *args* into the typed parameters.

        Raises:
            InvalidArguments: If the count is wrong or a value is bad.

        """
        if len(args) != len(self.params):
            names = ", ".join(p.name for p in self.params) or "none"
            msg = (
                f"{self.name} expects {len(self.params)} argument(s) ({names}), got {len(args)}"
            )
            raise InvalidArguments(msg)
        return self.parse(args)

    def to_dict(self) -> dict[str, Any]:
        """Describe the call for a form builder."""
        return {
            "name": self.name.value,
            "params": [{"name": p.name, "placeholder": p.placeholder} for p in self.params],
        }


_PATH = ParamSpec("path", "/home/admin/file.txt")
_CONTENT = ParamSpec("content", "New Content")

SYSCALL_TABLE: dict[SyscallName, SyscallDef] = {
    SyscallName.GET_INFO: SyscallDef(SyscallName.GET_INFO, (), _parse_none, _sys_get_info),
    SyscallName.CREATE_PROCESS: SyscallDef(
        SyscallName.CREATE_PROCESS,
        (ParamSpec("process_name", "e.g. firefox"),),
        _parse_process_name,
        _sys_create_process,
        root_only=True,
    ),
    SyscallName.KILL_PROCESS: SyscallDef(
        SyscallName.KILL_PROCESS,
        (ParamSpec("pid", "Process ID"),),
        _parse_pid,
        _sys_kill_process,
        root_only=True,
    ),
    SyscallName.LIST_DIR: SyscallDef(
        SyscallName.LIST_DIR,
        (ParamSpec("path", "/home/admin"),),
        _parse_path,
        _sys_list_dir,
    ),
    SyscallName.CREATE_FILE: SyscallDef(
        SyscallName.CREATE_FILE,
        (ParamSpec("path", "/home/admin/new.txt"), ParamSpec("content", "Hello World")),
        _parse_path_content,
        _sys_create_file,
    ),
    SyscallName.READ_FILE: SyscallDef(
        SyscallName.READ_FILE,
        (ParamSpec("path", "/etc/passwd"),),
        _parse_path,
        _sys_read_file,
    ),
    SyscallName.WRITE_FILE: SyscallDef(
        SyscallName.WRITE_FILE,
        (_PATH, _CONTENT),
        _parse_path_content,
        _sys_write_file,
    ),
    SyscallName.OPEN_FILE: SyscallDef(
        SyscallName.OPEN_FILE,
        (_PATH,),
        _parse_path,
        _sys_open_file,
    ),
}


def lookup_syscall(name: str) -> SyscallDef:
    """Return the definition registered for *name*.

    Raises:
        UnknownSyscall: If *name* is not a ``SyscallName``.

    """
    try:
        return SYSCALL_TABLE[SyscallName(name)]
    except ValueError:
        msg = "Unknown system call"
        raise UnknownSyscall(msg) from None


def dispatch_syscall(kernel: Kernel, name: str, args: Sequence[Any]) -> Any:
    """Route one system call to its handler.

    The caller (``Kernel.invoke``) has already checked the session and
    is responsible for auditing.  Root-only calls are refused before
    their arguments are parsed, so a user sending a malformed pid is
    still denied rather than told the pid is bad.  Errors propagate
    unchanged.

    Args:
        kernel: The kernel whose state the handler acts on.
        name: Wire name of the syscall.
        args: Positional arguments, usually strings.

    Returns:
        The handler's result.

    Raises:
        UnknownSyscall: If the name is not registered.
        PermissionDenied: If the call is root-only and the session is not.
        InvalidArguments: If the arguments do not fit the call.
        SyscallError: Whatever the handler raises.

    """
    definition = lookup_syscall(name)
    if definition.root_only:
        _require_root(kernel)
    return definition.handler(kernel, definition.bind(args))


def syscall_catalogue() -> list[dict[str, Any]]:
    """Describe every syscall, in the order a menu should show them."""
    return [definition.to_dict() for definition in SYSCALL_TABLE.values()]

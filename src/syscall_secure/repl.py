"""Interactive terminal console for the simulated kernel.

The REPL is the terminal twin of the web console.  It builds a kernel,
asks for credentials, then reads lines of the form::

    <syscall> <arg> <arg> ...

Arguments are split with shell quoting rules, so
``write_file /home/admin/notes.md "new text"`` passes two arguments.
A few console commands sit alongside the syscalls:

==============  =================================================
help            list syscalls and console commands
logs            show the audit log, newest first
stats           syscall, violation, and process counters
clear-logs      empty the audit log
logout          end the session and ask for credentials again
exit            leave the console
==============  =================================================

The helpers (``format_banner``, ``build_prompt``, ``execute_line``,
``format_logs``) are pure and tested; ``run()`` is the thin I/O loop.
"""

import getpass
import json
import readline
import shlex
from typing import Any

from syscall_secure.audit import AuditEntry
from syscall_secure.config import config_from_env
from syscall_secure.errors import SyscallError
from syscall_secure.kernel import Kernel
from syscall_secure.syscalls import syscall_catalogue

EXIT_SENTINEL = "__EXIT__"
LOGOUT_SENTINEL = "__LOGOUT__"

_BANNER_WIDTH = 38
_CONSOLE_COMMANDS = ("help", "logs", "stats", "clear-logs", "logout", "exit")


def format_banner(kernel: Kernel) -> str:
    """Return the start-up banner with the kernel's boot messages."""
    border = "=" * _BANNER_WIDTH
    header = f"\n  {border}\n    {kernel.config.os_name}\n  {border}\n\n"
    body = "\n".join(f"  {line}" for line in kernel.dmesg())
    return header + body + "\n"


def build_prompt(kernel: Kernel) -> str:
    """Return ``user@syscall $ `` (``#`` for root), or a login hint."""
    session = kernel.session
    if session is None:
        return "login: "
    marker = "#" if session.is_root else "$"
    return f"{session.username}@syscall {marker} "


def format_result(result: Any) -> str:
    """Render a syscall result the way the web console does."""
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2)


def format_logs(entries: list[AuditEntry]) -> str:
    """Render audit entries as aligned text rows."""
    if not entries:
        return "No logs found"
    return "\n".join(
        f"{e.timestamp}  {e.status:<7}  {e.user:<9}  {e.syscall}({e.params})  {e.message}"
        for e in entries
    )


def format_help() -> str:
    """List the syscalls with their parameters, then console commands."""
    lines = ["System calls:"]
    for definition in syscall_catalogue():
        params = " ".join(f"<{p['name']}>" for p in definition["params"])
        lines.append(f"  {definition['name']} {params}".rstrip())
    lines.append("Console: " + ", ".join(_CONSOLE_COMMANDS))
    return "\n".join(lines)


def execute_line(kernel: Kernel, line: str) -> str:
    """Run one console line and return the text to print.

    Returns:
        The output, ``EXIT_SENTINEL`` for ``exit``, or
        ``LOGOUT_SENTINEL`` after ``logout``.

    """
    try:
        words = shlex.split(line)
    except ValueError as e:
        return f"Error: {e}"
    if not words:
        return ""

    command, args = words[0], words[1:]
    match command:
        case "exit":
            return EXIT_SENTINEL
        case "help":
            return format_help()
        case "logs":
            return format_logs(kernel.logs())
        case "stats":
            return format_result(kernel.stats())
        case "clear-logs":
            kernel.clear_logs()
            return "Audit log cleared."
        case "logout":
            kernel.logout()
            return LOGOUT_SENTINEL
        case _:
            try:
                return format_result(kernel.invoke(command, args))
            except SyscallError as e:
                return f"Error: {e}"


def complete(text: str, state: int) -> str | None:
    """Readline completer over syscall names and console commands."""
    names = [d["name"] for d in syscall_catalogue()] + list(_CONSOLE_COMMANDS)
    matches = [name for name in names if name.startswith(text)]
    return matches[state] if state < len(matches) else None


def _prompt_login(kernel: Kernel) -> bool:
    """Ask for credentials once; return whether a session was opened."""
    username = input(build_prompt(kernel))
    password = getpass.getpass("password: ")
    if kernel.login(username, password):
        return True
    print("Invalid credentials")  # noqa: T201
    return False


def run() -> None:
    """Build a kernel and run the console until ``exit`` or EOF.

    This is the ``syscall-secure`` console entry point.
    """
    kernel = Kernel.from_config(config_from_env())
    readline.set_completer(complete)
    readline.parse_and_bind("tab: complete")
    print(format_banner(kernel))  # noqa: T201

    try:
        while True:
            try:
                if kernel.session is None and not _prompt_login(kernel):
                    continue
                line = input(build_prompt(kernel))
            except EOFError:
                print()  # noqa: T201
                break

            result = execute_line(kernel, line)
            if result == EXIT_SENTINEL:
                break
            if result == LOGOUT_SENTINEL:
                continue
            if result:
                print(result)  # noqa: T201

    except KeyboardInterrupt:
        print("\nInterrupted.")  # noqa: T201

    finally:
        kernel.logout()
        print("Session closed.")  # noqa: T201

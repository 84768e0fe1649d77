"""Kernel configuration — the settings a kernel is built from.

A ``KernelConfig`` is what the bootloader of a real machine would read
from disk before starting the kernel: the system name reported by
``get_info``, the first pid handed out, where the audit log lives, and
which accounts may log in.

Configuration comes from a JSON file::

    {
        "os_name": "SysCall Secure v1.0",
        "pid_base": 100,
        "storage_key": "os_simulation_logs",
        "audit_dir": "/var/tmp/syscall-secure",
        "accounts": [
            {"username": "admin", "password": "admin123", "role": "root"}
        ]
    }

Every key is optional; missing keys take the defaults below.  The
console scripts read the file named by ``SYSCALL_SECURE_CONFIG``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from syscall_secure.audit import DEFAULT_STORAGE_KEY
from syscall_secure.process import DEFAULT_PID_BASE
from syscall_secure.users import DEFAULT_ACCOUNTS, Account, Role

DEFAULT_OS_NAME = "SysCall Secure v1.0"
CONFIG_ENV_VAR = "SYSCALL_SECURE_CONFIG"


class ConfigError(RuntimeError):
    """Raise when a configuration file cannot be read or is malformed."""


@dataclass(frozen=True)
class KernelConfig:
    """Settings used to build a kernel.

    Attributes:
        os_name: System identity returned by ``get_info``.
        pid_base: First pid allocated (the bootstrap ``init`` gets it).
        storage_key: Key the audit log is saved under.
        audit_dir: Directory for the JSON audit store, or None to keep
            the audit log in memory only.
        accounts: The credential table.

    """

    os_name: str = DEFAULT_OS_NAME
    pid_base: int = DEFAULT_PID_BASE
    storage_key: str = DEFAULT_STORAGE_KEY
    audit_dir: Path | None = None
    accounts: tuple[Account, ...] = DEFAULT_ACCOUNTS

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KernelConfig:
        """Build a config from parsed JSON, defaulting missing keys.

        Raises:
            ConfigError: If a value has the wrong shape.

        """
        try:
            accounts = (
                tuple(
                    Account(
                        username=str(item["username"]),
                        password=str(item["password"]),
                        role=Role(item.get("role", Role.USER.value)),
                    )
                    for item in data["accounts"]
                )
                if "accounts" in data
                else DEFAULT_ACCOUNTS
            )
            audit_dir = data.get("audit_dir")
            return cls(
                os_name=str(data.get("os_name", DEFAULT_OS_NAME)),
                pid_base=int(data.get("pid_base", DEFAULT_PID_BASE)),
                storage_key=str(data.get("storage_key", DEFAULT_STORAGE_KEY)),
                audit_dir=Path(audit_dir) if audit_dir else None,
                accounts=accounts,
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigError(msg) from e


def load_config(path: Path) -> KernelConfig:
    """Load a ``KernelConfig`` from a JSON file.

    Raises:
        ConfigError: If the file cannot be read or parsed.

    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot load configuration: {e}"
        raise ConfigError(msg) from e
    if not isinstance(data, dict):
        msg = "Cannot load configuration: top level must be a JSON object"
        raise ConfigError(msg)
    return KernelConfig.from_dict(data)  # pyright: ignore[reportUnknownArgumentType]


def config_from_env() -> KernelConfig:
    """Load the file named by ``SYSCALL_SECURE_CONFIG``, or use defaults."""
    path = os.environ.get(CONFIG_ENV_VAR)
    if not path:
        return KernelConfig()
    return load_config(Path(path))

"""Tests for kernel configuration.

Configuration is read from a JSON file; every key is optional and bad
files fail loudly at startup with ConfigError.
"""

import json
from pathlib import Path

import pytest

from syscall_secure.audit import DEFAULT_STORAGE_KEY
from syscall_secure.config import (
    CONFIG_ENV_VAR,
    DEFAULT_OS_NAME,
    ConfigError,
    KernelConfig,
    config_from_env,
    load_config,
)
from syscall_secure.kernel import Kernel
from syscall_secure.persistence import JsonFileStore
from syscall_secure.users import DEFAULT_ACCOUNTS, Role

_CUSTOM_PID_BASE = 1000


def _write(tmp_path: Path, data: object) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))
    return path


class TestKernelConfig:
    """Verify defaults."""

    def test_defaults(self) -> None:
        """An empty config matches the reference system."""
        config = KernelConfig()
        assert config.os_name == DEFAULT_OS_NAME == "SysCall Secure v1.0"
        assert config.pid_base == 100  # noqa: PLR2004
        assert config.storage_key == DEFAULT_STORAGE_KEY == "os_simulation_logs"
        assert config.audit_dir is None
        assert config.accounts == DEFAULT_ACCOUNTS

    def test_frozen(self) -> None:
        """Configs are immutable."""
        config = KernelConfig()
        with pytest.raises(AttributeError):
            config.os_name = "changed"  # type: ignore[misc]


class TestLoadConfig:
    """Verify reading JSON files."""

    def test_empty_object_uses_defaults(self, tmp_path: Path) -> None:
        """Missing keys take defaults."""
        assert load_config(_write(tmp_path, {})) == KernelConfig()

    def test_all_keys(self, tmp_path: Path) -> None:
        """Every key is honoured."""
        path = _write(
            tmp_path,
            {
                "os_name": "Test OS",
                "pid_base": _CUSTOM_PID_BASE,
                "storage_key": "k",
                "audit_dir": str(tmp_path / "audit"),
                "accounts": [{"username": "alice", "password": "pw", "role": "root"}],
            },
        )
        config = load_config(path)
        assert config.os_name == "Test OS"
        assert config.pid_base == _CUSTOM_PID_BASE
        assert config.storage_key == "k"
        assert config.audit_dir == tmp_path / "audit"
        assert len(config.accounts) == 1
        assert config.accounts[0].role is Role.ROOT

    def test_account_role_defaults_to_user(self, tmp_path: Path) -> None:
        """Accounts without a role are standard users."""
        path = _write(tmp_path, {"accounts": [{"username": "bob", "password": "pw"}]})
        assert load_config(path).accounts[0].role is Role.USER

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ConfigError."""
        with pytest.raises(ConfigError, match="Cannot load"):
            load_config(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Unparsable JSON raises ConfigError."""
        path = tmp_path / "config.json"
        path.write_text("{oops")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_top_level_must_be_object(self, tmp_path: Path) -> None:
        """A JSON list is not a config."""
        with pytest.raises(ConfigError, match="JSON object"):
            load_config(_write(tmp_path, [1, 2]))

    def test_bad_role(self, tmp_path: Path) -> None:
        """Unknown roles raise ConfigError."""
        path = _write(tmp_path, {"accounts": [{"username": "x", "password": "y", "role": "god"}]})
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_bad_pid_base(self, tmp_path: Path) -> None:
        """A non-numeric pid base raises ConfigError."""
        with pytest.raises(ConfigError):
            load_config(_write(tmp_path, {"pid_base": "lots"}))


class TestConfigFromEnv:
    """Verify the environment lookup used by the console scripts."""

    def test_unset_uses_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """No variable means default settings."""
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        assert config_from_env() == KernelConfig()

    def test_reads_named_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """The variable names a JSON file."""
        monkeypatch.setenv(CONFIG_ENV_VAR, str(_write(tmp_path, {"os_name": "Env OS"})))
        assert config_from_env().os_name == "Env OS"


class TestKernelFromConfig:
    """Verify kernels built from configuration."""

    def test_settings_applied(self, tmp_path: Path) -> None:
        """pid base, name, and accounts flow into the kernel."""
        config = load_config(
            _write(
                tmp_path,
                {
                    "os_name": "Lab OS",
                    "pid_base": _CUSTOM_PID_BASE,
                    "accounts": [{"username": "alice", "password": "pw", "role": "root"}],
                },
            )
        )
        kernel = Kernel.from_config(config)
        assert kernel.list_processes()[0].pid == _CUSTOM_PID_BASE
        assert not kernel.login("admin", "admin123")
        assert kernel.login("alice", "pw")
        assert kernel.invoke("get_info")["os"] == "Lab OS"

    def test_audit_dir_selects_file_store(self, tmp_path: Path) -> None:
        """With audit_dir set, the log lands on disk and survives a restart."""
        config = KernelConfig(audit_dir=tmp_path)
        first = Kernel.from_config(config)
        first.login("admin", "admin123")
        assert JsonFileStore(tmp_path).load(DEFAULT_STORAGE_KEY) is not None
        second = Kernel.from_config(config)
        assert len(second.logs()) == 1

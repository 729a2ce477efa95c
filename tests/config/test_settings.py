"""Tests for server settings loading."""

import logging
from pathlib import Path

import pytest

from carrots.config import Paths, SettingsManager
from carrots.exceptions import ConfigurationError

REQUIRED_ENV = {"ACCOUNT": "owner", "REPOSITORY": "app"}


def write_settings(config_dir: Path, content: str) -> None:
    """Write a settings.conf file into ``config_dir``."""
    (config_dir / "settings.conf").write_text(content, encoding="utf-8")


class TestSettingsManager:
    """Test SettingsManager.load()."""

    def test_defaults(self, tmp_path) -> None:
        """Test built-in defaults apply when only required values are set."""
        config = SettingsManager(tmp_path, environ=REQUIRED_ENV).load()

        assert config["account"] == "owner"
        assert config["repository"] == "app"
        assert config["token"] is None
        assert config["host"] == "0.0.0.0"
        assert config["port"] == 3000
        assert config["cache_minutes"] == 15
        assert config["log_level"] == "INFO"
        assert config["network"] == {
            "timeout_seconds": 15,
            "retry_attempts": 2,
            "max_concurrent_fetches": 5,
        }

    def test_settings_file(self, tmp_path) -> None:
        """Test values are read from the DEFAULT and network sections."""
        write_settings(
            tmp_path,
            "[DEFAULT]\n"
            "account = owner\n"
            "repository = app  # inline comment\n"
            "port = 8080\n"
            "log_level = debug\n"
            "\n"
            "[network]\n"
            "retry_attempts = 4\n",
        )

        config = SettingsManager(tmp_path, environ={}).load()

        assert config["repository"] == "app"
        assert config["port"] == 8080
        assert config["log_level"] == "DEBUG"
        assert config["network"]["retry_attempts"] == 4
        assert config["network"]["timeout_seconds"] == 15

    def test_environment_overrides_file(self, tmp_path) -> None:
        """Test environment variables win over the settings file."""
        write_settings(
            tmp_path,
            "[DEFAULT]\naccount = file-owner\nrepository = app\nport = 8080\n",
        )
        environ = {"ACCOUNT": "env-owner", "PORT": "9000", "CACHE_MINUTES": "1"}

        config = SettingsManager(tmp_path, environ=environ).load()

        assert config["account"] == "env-owner"
        assert config["repository"] == "app"
        assert config["port"] == 9000
        assert config["cache_minutes"] == 1

    def test_empty_environment_value_is_ignored(self, tmp_path) -> None:
        """Test an empty variable does not clear a configured value."""
        write_settings(tmp_path, "[DEFAULT]\naccount = owner\nrepository = app\n")
        config = SettingsManager(tmp_path, environ={"ACCOUNT": ""}).load()
        assert config["account"] == "owner"

    @pytest.mark.parametrize("missing", ["ACCOUNT", "REPOSITORY"])
    def test_missing_required_value(self, tmp_path, missing) -> None:
        """Test the repository coordinates are mandatory."""
        environ = {k: v for k, v in REQUIRED_ENV.items() if k != missing}

        with pytest.raises(ConfigurationError) as exc_info:
            SettingsManager(tmp_path, environ=environ).load()
        assert exc_info.value.target == missing.lower()

    @pytest.mark.parametrize("port", ["http", "0", "-1"])
    def test_invalid_integer(self, tmp_path, port) -> None:
        """Test non-numeric and non-positive integers are rejected."""
        environ = {**REQUIRED_ENV, "PORT": port}

        with pytest.raises(ConfigurationError, match="port"):
            SettingsManager(tmp_path, environ=environ).load()

    def test_malformed_settings_file(self, tmp_path) -> None:
        """Test an unparsable settings file is a configuration error."""
        write_settings(tmp_path, "account = owner\n")

        with pytest.raises(ConfigurationError, match="settings.conf"):
            SettingsManager(tmp_path, environ=REQUIRED_ENV).load()

    def test_token_is_kept(self, tmp_path) -> None:
        """Test a well-formed token is passed through silently."""
        token = "ghp_" + "X" * 36
        environ = {**REQUIRED_ENV, "TOKEN": token}
        assert SettingsManager(tmp_path, environ=environ).load()["token"] == token

    def test_odd_token_warns(self, tmp_path, caplog) -> None:
        """Test an unusual token is used but flagged."""
        environ = {**REQUIRED_ENV, "TOKEN": "not-a-token"}

        with caplog.at_level(logging.WARNING, logger="carrots"):
            config = SettingsManager(tmp_path, environ=environ).load()

        assert config["token"] == "not-a-token"
        assert "does not look like a GitHub token" in caplog.text


class TestPaths:
    """Test configuration directory resolution."""

    def test_environment_directory(self, monkeypatch, tmp_path) -> None:
        """Test CARROTS_CONFIG_DIR takes precedence."""
        monkeypatch.setenv("CARROTS_CONFIG_DIR", str(tmp_path))
        assert Paths.config_dir() == tmp_path

    def test_default_directory(self, monkeypatch) -> None:
        """Test the XDG-style default is used otherwise."""
        monkeypatch.delenv("CARROTS_CONFIG_DIR", raising=False)
        assert Paths.config_dir() == Path.home() / ".config" / "carrots"

    def test_manager_uses_paths(self, monkeypatch, tmp_path) -> None:
        """Test the manager reads settings from the resolved directory."""
        monkeypatch.setenv("CARROTS_CONFIG_DIR", str(tmp_path))
        assert SettingsManager().settings_file == tmp_path / "settings.conf"

"""
Tests for config stores and typed settings (ghcodeql/utils/config.py).
"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from ghcodeql.core.errors import ConfigError
from ghcodeql.core.releases import NIGHTLY, STABLE
from ghcodeql.utils.config import (
    GhConfigStore,
    MemoryConfigStore,
    Settings,
    YamlConfigStore,
    default_store,
    get_install_root,
)


class TestMemoryConfigStore:
    def test_get_and_set(self):
        store = MemoryConfigStore({"channel": "nightly"})
        assert store.get("channel") == "nightly"
        assert store.get("version") is None
        store.set("version", "v1.0.0")
        assert store.get("version") == "v1.0.0"


class TestYamlConfigStore:
    """Test the YAML file backed store."""

    def test_missing_file_reads_as_unset(self, tmp_path):
        store = YamlConfigStore(str(tmp_path / "config.yml"))
        assert store.get("channel") is None

    def test_set_creates_file(self, tmp_path):
        path = tmp_path / "nested" / "config.yml"
        store = YamlConfigStore(str(path))
        store.set("channel", "nightly")
        store.set("version", "v2.0.0")

        assert path.exists()
        assert YamlConfigStore(str(path)).get("channel") == "nightly"
        assert YamlConfigStore(str(path)).get("version") == "v2.0.0"

    def test_yaml_booleans_read_as_strings(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("debug: true\nlocal-version: false\n")
        store = YamlConfigStore(str(path))
        assert store.get("debug") == "true"
        assert store.get("local-version") == "false"

    def test_numeric_looking_values_kept_verbatim(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("version: 2.10\nchannel: [stable]\n")
        store = YamlConfigStore(str(path))
        assert store.get("version") == "2.10"
        assert store.get("channel") is None

    def test_invalid_yaml_reads_as_unset(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("channel: [unclosed\n")
        assert YamlConfigStore(str(path)).get("channel") is None

    def test_write_failure_raises_config_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        store = YamlConfigStore(str(blocker / "config.yml"))
        with pytest.raises(ConfigError):
            store.set("channel", "stable")


class TestGhConfigStore:
    """Test the gh config backed store with subprocess mocked."""

    @patch("ghcodeql.utils.config.run_command")
    def test_get(self, mock_run):
        mock_run.return_value = MagicMock(stdout="nightly\n")
        assert GhConfigStore("gh").get("channel") == "nightly"
        mock_run.assert_called_once_with(["gh", "config", "get", "extensions.codeql.channel"])

    @patch("ghcodeql.utils.config.run_command")
    def test_get_empty_is_unset(self, mock_run):
        mock_run.return_value = MagicMock(stdout="\n")
        assert GhConfigStore("gh").get("version") is None

    @patch("ghcodeql.utils.config.run_command")
    def test_get_failure_is_unset(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(1, ["gh"])
        assert GhConfigStore("gh").get("version") is None

    @patch("ghcodeql.utils.config.run_command")
    def test_set(self, mock_run):
        GhConfigStore("gh").set("debug", "true")
        mock_run.assert_called_once_with(
            ["gh", "config", "set", "extensions.codeql.debug", "true"]
        )

    @patch("ghcodeql.utils.config.run_command")
    def test_set_failure_raises(self, mock_run):
        mock_run.side_effect = FileNotFoundError("gh")
        with pytest.raises(ConfigError):
            GhConfigStore("gh").set("debug", "true")


class TestDefaultStore:
    @patch("ghcodeql.utils.config.shutil.which")
    def test_uses_gh_when_available(self, mock_which):
        mock_which.return_value = "/usr/bin/gh"
        store = default_store()
        assert isinstance(store, GhConfigStore)
        assert store.gh == "/usr/bin/gh"

    @patch("ghcodeql.utils.config.shutil.which")
    def test_falls_back_to_yaml(self, mock_which, monkeypatch, tmp_path):
        mock_which.return_value = None
        monkeypatch.setenv("GH_CODEQL_CONFIG", str(tmp_path / "c.yml"))
        store = default_store()
        assert isinstance(store, YamlConfigStore)
        assert store.config_path == str(tmp_path / "c.yml")


class TestSettings:
    """Test typed access to config keys."""

    def test_defaults(self):
        settings = Settings(MemoryConfigStore())
        assert settings.channel is STABLE
        assert settings.version is None
        assert settings.debug is False
        assert settings.local_version is False
        assert settings.platform is None

    def test_channel_round_trip(self):
        store = MemoryConfigStore()
        settings = Settings(store)
        settings.channel = NIGHTLY
        assert store.get("channel") == "nightly"
        assert settings.channel is NIGHTLY

    def test_invalid_channel(self):
        settings = Settings(MemoryConfigStore({"channel": "beta"}))
        assert settings.channel_name == "beta"
        with pytest.raises(ConfigError, match="Invalid channel 'beta'"):
            settings.channel

    def test_flags_stored_as_strings(self):
        store = MemoryConfigStore()
        settings = Settings(store)
        settings.debug = True
        settings.local_version = False
        assert store.get("debug") == "true"
        assert store.get("local-version") == "false"
        assert settings.debug is True

    def test_clearing_version(self):
        store = MemoryConfigStore({"version": "v1.0.0"})
        settings = Settings(store)
        settings.version = None
        assert store.get("version") == ""
        assert settings.version is None


def test_install_root_env_override(monkeypatch, tmp_path):
    monkeypatch.setenv("GH_CODEQL_ROOT", str(tmp_path))
    assert get_install_root() == str(tmp_path)

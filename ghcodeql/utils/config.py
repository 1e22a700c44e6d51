#!/usr/bin/env python3

import os
import shutil
import subprocess
from typing import Dict, Optional

import yaml

from ..core.errors import ConfigError
from ..core.releases import CHANNELS, DEFAULT_CHANNEL, Channel
from .system import get_real_home, run_command

# Config keys
KEY_CHANNEL = "channel"
KEY_VERSION = "version"
KEY_DEBUG = "debug"
KEY_LOCAL_VERSION = "local-version"
KEY_PLATFORM = "platform"

# Namespace of our keys inside the host CLI's config
GH_CONFIG_PREFIX = "extensions.codeql."

# Default paths
DEFAULT_CONFIG_PATH = os.path.join(get_real_home(), ".config/gh-codeql/config.yml")
DEFAULT_ROOT = os.path.join(get_real_home(), ".local/share/gh-codeql")

# Environment variables
ENV_VERSION = "GH_CODEQL_VERSION"
ENV_ROOT = "GH_CODEQL_ROOT"
ENV_CONFIG = "GH_CODEQL_CONFIG"
ENV_DIST = "CODEQL_DIST"

LOCAL_VERSION_FILE = ".codeql-version"


def get_install_root() -> str:
    """Directory holding the dist/ cache tree"""
    return os.environ.get(ENV_ROOT) or DEFAULT_ROOT


class ConfigStore:
    """Key-value store holding gh-codeql settings"""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryConfigStore(ConfigStore):
    def __init__(self, values: Optional[Dict[str, str]] = None):
        self.values = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class GhConfigStore(ConfigStore):
    """Settings kept in the host CLI's config under extensions.codeql.*"""

    def __init__(self, gh: str = "gh"):
        self.gh = gh

    def get(self, key: str) -> Optional[str]:
        try:
            result = run_command([self.gh, "config", "get", GH_CONFIG_PREFIX + key])
        except (OSError, subprocess.CalledProcessError):
            return None
        value = result.stdout.strip()
        return value or None

    def set(self, key: str, value: str) -> None:
        try:
            run_command([self.gh, "config", "set", GH_CONFIG_PREFIX + key, value])
        except (OSError, subprocess.CalledProcessError) as e:
            raise ConfigError(f"Failed to set {GH_CONFIG_PREFIX}{key}: {e}")


class YamlConfigStore(ConfigStore):
    """Settings kept in a standalone YAML file, for hosts without gh"""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        self.config_path = config_path

    def load(self) -> Dict[str, str]:
        try:
            with open(self.config_path, "r") as file:
                # BaseLoader keeps every scalar a string, so 2.10 stays "2.10"
                config = yaml.load(file, Loader=yaml.BaseLoader)
        except (OSError, yaml.YAMLError):
            return {}
        return config if isinstance(config, dict) else {}

    def get(self, key: str) -> Optional[str]:
        value = self.load().get(key)
        if not isinstance(value, str):
            return None
        return value

    def set(self, key: str, value: str) -> None:
        config = self.load()
        config[key] = value
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.config_path)), exist_ok=True)
            with open(self.config_path, "w") as file:
                yaml.safe_dump(config, file, default_flow_style=False)
        except OSError as e:
            raise ConfigError(f"Failed to save config file: {e}")


def default_store() -> ConfigStore:
    """Use the host CLI's config when gh is installed, a YAML file otherwise"""
    gh = shutil.which("gh")
    if gh:
        return GhConfigStore(gh)
    return YamlConfigStore(os.environ.get(ENV_CONFIG) or DEFAULT_CONFIG_PATH)


class Settings:
    """Typed view of the persisted gh-codeql settings"""

    def __init__(self, store: ConfigStore):
        self.store = store

    def _get_flag(self, key: str) -> bool:
        return (self.store.get(key) or "").lower() == "true"

    def _set_flag(self, key: str, enabled: bool) -> None:
        self.store.set(key, "true" if enabled else "false")

    @property
    def channel_name(self) -> str:
        return self.store.get(KEY_CHANNEL) or DEFAULT_CHANNEL

    @property
    def channel(self) -> Channel:
        name = self.channel_name
        if name not in CHANNELS:
            raise ConfigError(
                f"Invalid channel '{name}' in config, use set-channel to pick one of: {', '.join(CHANNELS)}"
            )
        return CHANNELS[name]

    @channel.setter
    def channel(self, channel: Channel) -> None:
        self.store.set(KEY_CHANNEL, channel.name)

    @property
    def version(self) -> Optional[str]:
        return self.store.get(KEY_VERSION) or None

    @version.setter
    def version(self, version: Optional[str]) -> None:
        self.store.set(KEY_VERSION, version or "")

    @property
    def debug(self) -> bool:
        return self._get_flag(KEY_DEBUG)

    @debug.setter
    def debug(self, enabled: bool) -> None:
        self._set_flag(KEY_DEBUG, enabled)

    @property
    def local_version(self) -> bool:
        return self._get_flag(KEY_LOCAL_VERSION)

    @local_version.setter
    def local_version(self, enabled: bool) -> None:
        self._set_flag(KEY_LOCAL_VERSION, enabled)

    @property
    def platform(self) -> Optional[str]:
        return self.store.get(KEY_PLATFORM) or None

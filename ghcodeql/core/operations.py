#!/usr/bin/env python3

import logging
import os
import subprocess
import sys
from typing import List, Optional

from colorama import Fore, Style

from ..utils.cache import clear_cache, get_cache_info, list_installed, remove_version
from ..utils.config import ENV_DIST
from ..utils.system import exec_tool
from .errors import ConfigError, StubInstallError
from .manager import CodeQLManager
from .releases import CHANNELS
from .resolver import LATEST

logger = logging.getLogger(__name__)

DEFAULT_STUB_DIR = "/usr/local/bin"
STUB_SCRIPT = '#!/bin/sh\nexec gh codeql "$@"\n'
STUB_SCRIPT_WINDOWS = "@gh codeql %*\r\n"


def warn(message: str) -> None:
    print(f"{Fore.YELLOW}⚠️  {message}{Style.RESET_ALL}", file=sys.stderr)


def show_status(manager: CodeQLManager) -> None:
    """Print the active channel and version"""
    version = manager.settings.version
    print(f"Channel: {Fore.CYAN}{manager.channel.name}{Style.RESET_ALL}")
    if version:
        print(f"Version: {Fore.CYAN}{version}{Style.RESET_ALL}")
    else:
        print(f"Version: {Fore.YELLOW}not set (latest is used on first run){Style.RESET_ALL}")

    local_version = manager.read_local_version()
    if local_version:
        state = "active" if manager.settings.local_version else "ignored, local-version is off"
        print(f"Local version: {local_version} ({state})")


def print_tool_version(manager: CodeQLManager, tag: str) -> None:
    """Run 'codeql version' from the cache so the user sees what got installed"""
    result = subprocess.run([manager.executable(tag), "version"])
    if result.returncode != 0:
        warn(f"'codeql version' exited with status {result.returncode}")


def set_channel(manager: CodeQLManager, name: str) -> None:
    """Switch release channel, forgetting the pinned version"""
    channel = CHANNELS.get(name)
    if channel is None:
        raise ConfigError(f"Unknown channel '{name}', expected one of: {', '.join(CHANNELS)}")

    if manager.settings.channel_name == channel.name:
        print(f"Already on the {Fore.CYAN}{name}{Style.RESET_ALL} channel")
        return

    manager.settings.channel = channel
    manager.settings.version = None
    print(f"{Fore.GREEN}✅ Switched to the {name} channel{Style.RESET_ALL}")
    print(
        f"{Fore.CYAN}ℹ️  Pinned version cleared, the latest {name} release will be used on next run{Style.RESET_ALL}"
    )


def set_version(manager: CodeQLManager, token: Optional[str]) -> None:
    """Resolve, download and pin a version globally"""
    tag = manager.resolve(token or LATEST)
    manager.ensure_cached(tag)
    manager.settings.version = tag
    print(f"{Fore.GREEN}✅ Pinned CodeQL CLI version {tag} ({manager.channel.name}){Style.RESET_ALL}")
    print_tool_version(manager, tag)


def set_local_version_support(manager: CodeQLManager, enabled: bool) -> None:
    manager.settings.local_version = enabled
    state = "enabled" if enabled else "disabled"
    print(f"{Fore.GREEN}✅ Local version support {state}{Style.RESET_ALL}")


def set_local_version(manager: CodeQLManager, token: Optional[str]) -> None:
    """Resolve, download and pin a version for the current directory"""
    if not manager.settings.local_version:
        raise ConfigError(
            "Local version support is off, enable it first with 'gh codeql local-version on'"
        )

    tag = manager.resolve(token or LATEST)
    manager.ensure_cached(tag)
    manager.write_local_version(tag)
    print(f"{Fore.GREEN}✅ Wrote {tag} to {manager.local_version_path}{Style.RESET_ALL}")
    print_tool_version(manager, tag)


def unset_local_version(manager: CodeQLManager) -> None:
    if manager.remove_local_version():
        print(f"{Fore.GREEN}✅ Removed {manager.local_version_path}{Style.RESET_ALL}")
    else:
        warn(f"No local version set in {manager.cwd}")


def set_debug(manager: CodeQLManager, enabled: bool) -> None:
    manager.settings.debug = enabled
    state = "enabled" if enabled else "disabled"
    print(f"{Fore.GREEN}✅ Debug output {state}{Style.RESET_ALL}")


def list_versions(manager: CodeQLManager) -> None:
    """List every published release of the current channel"""
    for tag in manager.source().list_tags():
        print(tag)


def list_installed_versions(manager: CodeQLManager) -> None:
    """List the cached versions of the current channel"""
    for version in list_installed(manager.root, manager.channel.name):
        print(version)


def cleanup_version(manager: CodeQLManager, version: str) -> None:
    removed = remove_version(manager.root, manager.channel.name, version)
    print(f"{Fore.GREEN}✅ Removed {removed}{Style.RESET_ALL}")


def cleanup_all(manager: CodeQLManager) -> None:
    if clear_cache(manager.root):
        print(f"{Fore.GREEN}✅ Removed all cached CodeQL CLI versions{Style.RESET_ALL}")
    else:
        print(f"{Fore.YELLOW}ℹ️  Nothing to clean up{Style.RESET_ALL}")


def show_cache_info(manager: CodeQLManager) -> None:
    cache_info = get_cache_info(manager.root)
    print(f"Cache directory: {cache_info['path']}")

    if not cache_info["exists"]:
        print("Cache directory does not exist yet")
        return

    print(f"Cache size: {cache_info['size_bytes'] / (1024*1024):.2f} MB")
    for channel, count in cache_info["channels"].items():
        print(f"{channel} versions: {count}")


def download_version(manager: CodeQLManager, token: Optional[str]) -> str:
    """Make sure a version is cached without changing any pin"""
    token = token or manager.effective_version() or LATEST
    tag = manager.prepare(token)
    print(manager.version_dir(tag))
    return tag


def install_stub(directory: Optional[str] = None) -> str:
    """Write a 'codeql' script into directory that forwards to gh codeql"""
    directory = directory or DEFAULT_STUB_DIR

    if not os.path.isdir(directory):
        raise StubInstallError(f"Directory {directory} does not exist")
    if not os.access(directory, os.W_OK):
        raise StubInstallError(
            f"No write permission for {directory}, retry with sudo or pick another directory"
        )

    if os.name == "nt":
        stub_path = os.path.join(directory, "codeql.cmd")
        script = STUB_SCRIPT_WINDOWS
    else:
        stub_path = os.path.join(directory, "codeql")
        script = STUB_SCRIPT

    with open(stub_path, "w") as f:
        f.write(script)
    os.chmod(stub_path, 0o755)

    print(f"{Fore.GREEN}✅ Installed stub {stub_path}{Style.RESET_ALL}")
    return stub_path


def run_codeql(manager: CodeQLManager, args: List[str]) -> int:
    """Run the active CodeQL CLI with the given arguments"""
    version = manager.effective_version()

    if version:
        tag = manager.prepare(version)
    else:
        tag = manager.resolve(LATEST)
        manager.ensure_cached(tag)
        manager.settings.version = tag
        logger.debug("Pinned %s as the global version", tag)

    env = dict(manager.environ)
    env[ENV_DIST] = manager.version_dir(tag)
    return exec_tool(manager.executable(tag), args, env)

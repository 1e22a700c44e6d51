#!/usr/bin/env python3

import logging
import os
import subprocess
import sys
from typing import Dict, List, Optional

from ..core.errors import PlatformError

logger = logging.getLogger(__name__)

PLATFORMS = ("linux64", "osx64", "win64")


def get_real_home() -> str:
    """Get the real user's home directory even when running with sudo"""
    if "SUDO_USER" in os.environ and os.environ.get("HOME") == "/root":
        real_user = os.environ["SUDO_USER"]
        return os.path.expanduser(f"~{real_user}")
    return os.path.expanduser("~")


def detect_platform(override: Optional[str] = None) -> str:
    """Map the host OS (or an explicit override) to a CodeQL platform name"""
    if override:
        if override not in PLATFORMS:
            raise PlatformError(
                f"Invalid platform override '{override}', expected one of: {', '.join(PLATFORMS)}"
            )
        return override

    current_platform = sys.platform
    if current_platform.startswith("linux"):
        return "linux64"
    elif current_platform.startswith("darwin"):
        return "osx64"
    elif current_platform.startswith(("win", "cygwin", "msys")):
        return "win64"

    raise PlatformError(f"Unable to detect a supported platform from '{current_platform}'")


def executable_name(platform: str) -> str:
    return "codeql.exe" if platform == "win64" else "codeql"


def run_command(cmd: List[str], check: bool = True) -> subprocess.CompletedProcess:
    """Run a command capturing its text output"""
    logger.debug("Running: %s", " ".join(cmd))
    return subprocess.run(cmd, check=check, capture_output=True, text=True)


def exec_tool(executable: str, args: List[str], env: Dict[str, str]) -> int:
    """
    Replace the current process with the given executable.

    Where the process image cannot be replaced (Windows), the tool runs as a
    child process and its exit code is returned so the caller can exit with it.
    """
    argv = [executable] + list(args)
    logger.debug("Executing: %s", " ".join(argv))
    sys.stdout.flush()
    sys.stderr.flush()

    if os.name == "nt":
        return subprocess.run(argv, env=env).returncode

    os.execve(executable, argv, env)
    return 0

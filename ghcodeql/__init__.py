#!/usr/bin/env python3

"""
gh-codeql - A Python utility for downloading, pinning and running the CodeQL CLI
Features:
- Stable and nightly release channels
- Global and per-directory version pins
- Versioned download cache, one directory per channel and version
- Transparent forwarding of every other command to CodeQL
"""

from .version import __version__
from .core.manager import CodeQLManager
from .core.resolver import resolve_version
from .utils.config import Settings, default_store
from .cli.cli import run_cli

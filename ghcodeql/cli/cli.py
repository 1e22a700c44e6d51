#!/usr/bin/env python3

import argparse
import sys
from typing import List, Optional

import requests
from colorama import Fore, Style

from ..core.errors import GhCodeqlError
from ..core.manager import CodeQLManager
from ..core.operations import (
    DEFAULT_STUB_DIR,
    cleanup_all,
    cleanup_version,
    download_version,
    install_stub,
    list_installed_versions,
    list_versions,
    run_codeql,
    set_channel,
    set_debug,
    set_local_version,
    set_local_version_support,
    set_version,
    show_cache_info,
    show_status,
    unset_local_version,
)
from ..core.releases import CHANNELS
from ..utils.config import ENV_DIST, ENV_VERSION, LOCAL_VERSION_FILE, Settings, default_store
from ..utils.log import setup_logging
from ..version import __version__

COMMANDS = (
    "set-channel",
    "set-version",
    "local-version",
    "set-local-version",
    "unset-local-version",
    "list-versions",
    "list-installed",
    "cleanup",
    "cleanup-all",
    "cache-info",
    "download",
    "debug",
    "install-stub",
)

EPILOG = f"""\
Any other arguments are passed to the active CodeQL CLI, downloading it first
if needed. The version used is the global pin, overridden by {LOCAL_VERSION_FILE}
in the current directory (when local-version is on), overridden by ${ENV_VERSION}.
${ENV_DIST} is set to the CodeQL install directory before it runs.
"""


def build_parser() -> argparse.ArgumentParser:
    """Build the parser for the wrapper's own subcommands"""
    parser = argparse.ArgumentParser(
        prog="gh codeql",
        description=f"gh-codeql v{__version__} - manage and run versions of the CodeQL CLI",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    p = subparsers.add_parser(
        "set-channel", help="Switch between stable and nightly releases (clears the pinned version)"
    )
    p.add_argument("channel", choices=list(CHANNELS))

    p = subparsers.add_parser(
        "set-version", help="Download a version and pin it globally (default: latest)"
    )
    p.add_argument("version", nargs="?")

    p = subparsers.add_parser(
        "local-version", help=f"Turn support for {LOCAL_VERSION_FILE} files on or off"
    )
    p.add_argument("state", choices=["on", "off"])

    p = subparsers.add_parser(
        "set-local-version",
        help=f"Download a version and pin it in ./{LOCAL_VERSION_FILE} (default: latest)",
    )
    p.add_argument("version", nargs="?")

    subparsers.add_parser(
        "unset-local-version", help=f"Remove ./{LOCAL_VERSION_FILE}"
    )
    subparsers.add_parser(
        "list-versions", help="List all published versions of the current channel"
    )
    subparsers.add_parser(
        "list-installed", help="List downloaded versions of the current channel"
    )

    p = subparsers.add_parser("cleanup", help="Delete a downloaded version")
    p.add_argument("version")

    subparsers.add_parser("cleanup-all", help="Delete all downloaded versions")
    subparsers.add_parser("cache-info", help="Show cache location and size")

    p = subparsers.add_parser(
        "download", help="Download a version without pinning it (default: active version)"
    )
    p.add_argument("version", nargs="?")

    p = subparsers.add_parser("debug", help="Turn debug output on or off")
    p.add_argument("state", choices=["on", "off"])

    p = subparsers.add_parser(
        "install-stub",
        help=f"Install a 'codeql' script forwarding to gh codeql (default: {DEFAULT_STUB_DIR})",
    )
    p.add_argument("directory", nargs="?", default=DEFAULT_STUB_DIR)

    return parser


def run_cli(argv: Optional[List[str]] = None, manager: Optional[CodeQLManager] = None) -> int:
    """Run the command-line interface, returning the process exit code"""
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()

    if manager is None:
        manager = CodeQLManager(Settings(default_store()))
    setup_logging(verbose=manager.settings.debug)

    try:
        if not argv:
            parser.print_help()
            print()
            show_status(manager)
            return 0

        # Anything that isn't one of our commands belongs to codeql
        if argv[0] not in COMMANDS:
            return run_codeql(manager, argv)

        args = parser.parse_args(argv)

        if args.command == "set-channel":
            set_channel(manager, args.channel)
        elif args.command == "set-version":
            set_version(manager, args.version)
        elif args.command == "local-version":
            set_local_version_support(manager, args.state == "on")
        elif args.command == "set-local-version":
            set_local_version(manager, args.version)
        elif args.command == "unset-local-version":
            unset_local_version(manager)
        elif args.command == "list-versions":
            list_versions(manager)
        elif args.command == "list-installed":
            list_installed_versions(manager)
        elif args.command == "cleanup":
            cleanup_version(manager, args.version)
        elif args.command == "cleanup-all":
            cleanup_all(manager)
        elif args.command == "cache-info":
            show_cache_info(manager)
        elif args.command == "download":
            download_version(manager, args.version)
        elif args.command == "debug":
            set_debug(manager, args.state == "on")
        elif args.command == "install-stub":
            install_stub(args.directory)

        return 0

    except GhCodeqlError as e:
        print(f"{Fore.RED}❌ {e}{Style.RESET_ALL}", file=sys.stderr)
        return 1
    except requests.RequestException as e:
        print(f"{Fore.RED}❌ GitHub request failed: {e}{Style.RESET_ALL}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"{Fore.RED}❌ Error: {e}{Style.RESET_ALL}", file=sys.stderr)
        return 1


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()

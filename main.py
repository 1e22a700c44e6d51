#!/usr/bin/env python3

"""
gh-codeql - A Python utility for downloading, pinning and running the CodeQL CLI

Usage:
  gh codeql <command> [args]
  gh codeql <codeql arguments...>

Commands:
  set-channel CHANNEL       Switch between stable and nightly releases
  set-version [VERSION]     Download a version and pin it globally
  local-version on|off      Turn support for .codeql-version files on or off
  set-local-version [VER]   Download a version and pin it in ./.codeql-version
  unset-local-version       Remove ./.codeql-version
  list-versions             List all published versions of the current channel
  list-installed            List downloaded versions of the current channel
  cleanup VERSION           Delete a downloaded version
  cleanup-all               Delete all downloaded versions
  cache-info                Show cache location and size
  download [VERSION]        Download a version without pinning it
  debug on|off              Turn debug output on or off
  install-stub [DIR]        Install a 'codeql' script forwarding to gh codeql

Anything else is passed to the active CodeQL CLI.
"""

from ghcodeql.cli.cli import main

if __name__ == "__main__":
    main()

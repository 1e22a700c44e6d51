#!/usr/bin/env python3


class GhCodeqlError(Exception):
    """Base class for every error reported to the user by gh-codeql"""


class ConfigError(GhCodeqlError):
    """A configuration value could not be read back or written"""


class PlatformError(GhCodeqlError):
    """The host platform could not be mapped to a CodeQL release asset"""


class UnknownVersionError(GhCodeqlError):
    """A version token did not resolve to any release"""


class VersionNotFoundError(GhCodeqlError):
    """A resolved release (or its platform asset) is missing at download time"""


class DownloadError(GhCodeqlError):
    """A downloaded archive did not have the expected layout"""


class CacheError(GhCodeqlError):
    """A cache entry is missing or its name is not usable as a directory"""


class StubInstallError(GhCodeqlError):
    """The forwarding stub could not be written to the target directory"""

#!/usr/bin/env python3

import logging
import os
import shutil
import subprocess
import sys
import tempfile
import zipfile
from typing import Mapping, Optional

from colorama import Fore, Style

from ..utils.cache import get_channel_dir, get_dist_dir, get_version_dir
from ..utils.config import (
    ENV_VERSION,
    LOCAL_VERSION_FILE,
    Settings,
    get_install_root,
)
from ..utils.system import detect_platform, executable_name
from .errors import DownloadError, VersionNotFoundError
from .github import GitHubApi
from .releases import Channel, ReleaseSource
from .resolver import resolve_version

logger = logging.getLogger(__name__)


class CodeQLManager:
    """Core class tying settings, the release source and the dist cache together"""

    def __init__(
        self,
        settings: Settings,
        api=None,
        root: Optional[str] = None,
        cwd: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.settings = settings
        self._api = api
        self.root = root or get_install_root()
        self.cwd = cwd or os.getcwd()
        self.environ = os.environ if environ is None else environ

    @property
    def api(self):
        # Created on demand so offline commands never look up a token
        if self._api is None:
            self._api = GitHubApi()
        return self._api

    @property
    def channel(self) -> Channel:
        return self.settings.channel

    @property
    def platform(self) -> str:
        return detect_platform(self.settings.platform)

    def source(self) -> ReleaseSource:
        return ReleaseSource(self.api, self.channel)

    def version_dir(self, version: str) -> str:
        return get_version_dir(self.root, self.channel.name, version)

    def executable(self, version: str) -> str:
        return os.path.join(self.version_dir(version), executable_name(self.platform))

    def is_cached(self, version: str) -> bool:
        return os.path.isfile(self.executable(version))

    def resolve(self, token: str) -> str:
        return resolve_version(self.source(), token)

    def prepare(self, token: str) -> str:
        """Make a version token runnable, returning the concrete cached tag"""
        if token and self.is_cached(token):
            logger.debug("Using cached %s version %s", self.channel.name, token)
            return token
        tag = self.resolve(token)
        self.ensure_cached(tag)
        return tag

    def ensure_cached(self, tag: str) -> str:
        """Download and extract a release into the cache unless already there"""
        channel = self.channel
        platform = self.platform
        version_dir = self.version_dir(tag)
        executable = os.path.join(version_dir, executable_name(platform))

        if os.path.isfile(executable):
            logger.debug("%s is already cached", executable)
            return version_dir

        source = self.source()
        release_id = source.find_release_id(tag)
        if release_id is None:
            raise VersionNotFoundError(
                f"Version {tag} not found on the {channel.name} channel"
            )

        asset_name = f"codeql-{platform}.zip"
        dist_dir = get_dist_dir(self.root)
        os.makedirs(dist_dir, exist_ok=True)
        staging_dir = tempfile.mkdtemp(prefix="tmp.", dir=dist_dir)
        logger.debug("Staging %s %s in %s", channel.name, tag, staging_dir)

        try:
            asset = source.find_asset(release_id, asset_name)
            if not asset:
                raise VersionNotFoundError(
                    f"Version {tag} has no {asset_name} download on the {channel.name} channel"
                )

            print(
                f"⬇️  Downloading CodeQL CLI {Fore.CYAN}{tag}{Style.RESET_ALL} ({channel.name}, {platform})...",
                file=sys.stderr,
            )
            archive_path = source.download_asset(
                asset, os.path.join(staging_dir, asset_name)
            )

            extract_dir = os.path.join(staging_dir, "extract")
            self._extract_archive(archive_path, extract_dir)

            extracted = os.path.join(extract_dir, "codeql")
            if not os.path.isdir(extracted):
                raise DownloadError(f"{asset_name} does not contain a codeql directory")

            os.makedirs(get_channel_dir(self.root, channel.name), exist_ok=True)
            if os.path.isdir(version_dir) and not os.path.isfile(executable):
                # Left behind by a download for another platform
                logger.debug("Replacing stale %s", version_dir)
                shutil.rmtree(version_dir)
            try:
                os.rename(extracted, version_dir)
            except OSError:
                # Another invocation finished the same download first
                if not os.path.isfile(executable):
                    raise
                logger.debug("%s appeared while downloading, keeping it", version_dir)
        finally:
            shutil.rmtree(staging_dir, ignore_errors=True)

        print(
            f"{Fore.GREEN}✅ Installed CodeQL CLI {tag} to {version_dir}{Style.RESET_ALL}",
            file=sys.stderr,
        )
        return version_dir

    def _extract_archive(self, archive_path: str, destination: str) -> None:
        """Extract a zip archive, keeping executable bits"""
        os.makedirs(destination, exist_ok=True)

        unzip = shutil.which("unzip")
        if unzip:
            try:
                subprocess.run(
                    [unzip, "-q", archive_path, "-d", destination], check=True
                )
            except subprocess.CalledProcessError as e:
                raise DownloadError(f"Failed to extract {archive_path}: {e}")
            return

        try:
            with zipfile.ZipFile(archive_path) as zip_file:
                for info in zip_file.infolist():
                    path = zip_file.extract(info, destination)
                    mode = (info.external_attr >> 16) & 0o777
                    if mode and not info.is_dir():
                        os.chmod(path, mode)
        except zipfile.BadZipFile as e:
            raise DownloadError(f"Failed to extract {archive_path}: {e}")

    @property
    def local_version_path(self) -> str:
        return os.path.join(self.cwd, LOCAL_VERSION_FILE)

    def read_local_version(self) -> Optional[str]:
        try:
            with open(self.local_version_path, "r") as f:
                return f.read().strip() or None
        except FileNotFoundError:
            return None

    def write_local_version(self, version: str) -> None:
        with open(self.local_version_path, "w") as f:
            f.write(f"{version}\n")

    def remove_local_version(self) -> bool:
        if not os.path.isfile(self.local_version_path):
            return False
        os.remove(self.local_version_path)
        return True

    def effective_version(self) -> Optional[str]:
        """Global pin, overridden by .codeql-version, overridden by GH_CODEQL_VERSION"""
        version = self.settings.version

        if os.path.isfile(self.local_version_path):
            if self.settings.local_version:
                version = self.read_local_version() or version
            else:
                print(
                    f"{Fore.YELLOW}⚠️  Ignoring {self.local_version_path} because local version support is off "
                    f"(enable it with 'gh codeql local-version on'){Style.RESET_ALL}",
                    file=sys.stderr,
                )

        override = self.environ.get(ENV_VERSION)
        if override:
            logger.debug("Version overridden by %s=%s", ENV_VERSION, override)
            version = override

        return version

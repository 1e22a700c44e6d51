#!/usr/bin/env python3

import logging
from typing import Dict, Iterable, List, Optional

from packaging.version import InvalidVersion, Version

from .errors import UnknownVersionError

logger = logging.getLogger(__name__)


def _version_key(tag: str):
    """Sort key ordering tags by semantic version, unparsable tags lowest"""
    try:
        return (1, Version(tag[1:] if tag.startswith("v") else tag))
    except InvalidVersion:
        return (0, Version("0"))


class Channel:
    """A release registry that CodeQL builds are published to"""

    name = ""
    repo = ""

    def select_latest(self, releases: Iterable[Dict]) -> Optional[str]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.repo}>"


class StableChannel(Channel):
    name = "stable"
    repo = "github/codeql-cli-binaries"

    def select_latest(self, releases: Iterable[Dict]) -> Optional[str]:
        tags = [
            release["tag_name"]
            for release in releases
            if not release.get("draft") and not release.get("prerelease")
        ]
        if not tags:
            return None
        return max(tags, key=_version_key)


class NightlyChannel(Channel):
    name = "nightly"
    repo = "dsp-testing/codeql-cli-nightlies"

    def select_latest(self, releases: Iterable[Dict]) -> Optional[str]:
        # Releases come newest first
        for release in releases:
            if not release.get("draft"):
                return release["tag_name"]
        return None


STABLE = StableChannel()
NIGHTLY = NightlyChannel()
CHANNELS = {STABLE.name: STABLE, NIGHTLY.name: NIGHTLY}
DEFAULT_CHANNEL = STABLE.name


class ReleaseSource:
    """Read access to the releases of one channel's repository"""

    def __init__(self, api, channel: Channel):
        self.api = api
        self.channel = channel

    def list_releases(self) -> Iterable[Dict]:
        return self.api.paginate(f"repos/{self.channel.repo}/releases")

    def list_tags(self) -> List[str]:
        return [r["tag_name"] for r in self.list_releases() if not r.get("draft")]

    def get_release(self, tag: str) -> Optional[Dict]:
        return self.api.get_json(f"repos/{self.channel.repo}/releases/tags/{tag}")

    def latest_tag(self) -> str:
        tag = self.channel.select_latest(self.list_releases())
        if not tag:
            raise UnknownVersionError(
                f"No releases found in {self.channel.repo} for the {self.channel.name} channel"
            )
        logger.debug("Latest %s release is %s", self.channel.name, tag)
        return tag

    def find_release_id(self, tag: str) -> Optional[int]:
        for release in self.list_releases():
            if release.get("tag_name") == tag:
                return release["id"]
        return None

    def find_asset(self, release_id: int, name: str) -> Optional[Dict]:
        for asset in self.api.paginate(
            f"repos/{self.channel.repo}/releases/{release_id}/assets"
        ):
            if asset.get("name") == name:
                return asset
        return None

    def download_asset(self, asset: Dict, destination: str) -> str:
        return self.api.download(asset["url"], destination)

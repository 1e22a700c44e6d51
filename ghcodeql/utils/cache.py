#!/usr/bin/env python3

import os
import shutil
from typing import Dict, List

from ..core.errors import CacheError

DIST_DIR = "dist"


def get_dist_dir(root: str) -> str:
    return os.path.join(root, DIST_DIR)


def get_channel_dir(root: str, channel: str) -> str:
    return os.path.join(root, DIST_DIR, channel)


def get_version_dir(root: str, channel: str, version: str) -> str:
    if not version or os.sep in version or version in (".", ".."):
        raise CacheError(f"Invalid version name: '{version}'")
    return os.path.join(root, DIST_DIR, channel, version)


def list_installed(root: str, channel: str) -> List[str]:
    """List the cached versions of a channel"""
    channel_dir = get_channel_dir(root, channel)
    if not os.path.isdir(channel_dir):
        return []
    return sorted(
        item
        for item in os.listdir(channel_dir)
        if os.path.isdir(os.path.join(channel_dir, item))
    )


def remove_version(root: str, channel: str, version: str) -> str:
    """Delete a single cached version, failing if it is not installed"""
    version_dir = get_version_dir(root, channel, version)
    if not os.path.isdir(version_dir):
        raise CacheError(f"Version {version} is not installed on the {channel} channel")
    shutil.rmtree(version_dir)
    return version_dir


def clear_cache(root: str) -> bool:
    """Remove every cached version of every channel"""
    dist_dir = get_dist_dir(root)
    if not os.path.exists(dist_dir):
        return False
    shutil.rmtree(dist_dir)
    return True


def get_cache_info(root: str) -> Dict:
    """Get information about the cache"""
    dist_dir = get_dist_dir(root)
    info = {
        "exists": os.path.exists(dist_dir),
        "path": dist_dir,
        "size_bytes": 0,
        "channels": {},
    }

    if not info["exists"]:
        return info

    for channel in sorted(os.listdir(dist_dir)):
        channel_dir = os.path.join(dist_dir, channel)
        # Skip leftover staging directories
        if not os.path.isdir(channel_dir) or channel.startswith("tmp."):
            continue
        info["channels"][channel] = len(list_installed(root, channel))

    for dirpath, _, filenames in os.walk(dist_dir):
        for name in filenames:
            path = os.path.join(dirpath, name)
            if not os.path.islink(path):
                info["size_bytes"] += os.path.getsize(path)

    return info

#!/usr/bin/env python3

import logging

from .errors import UnknownVersionError
from .releases import ReleaseSource

logger = logging.getLogger(__name__)

LATEST = "latest"
VERSION_PREFIX = "v"


def resolve_version(source: ReleaseSource, token: str) -> str:
    """
    Turn a user supplied version token into a concrete release tag.

    "latest" picks the channel's newest release. Any other token must match a
    release tag exactly, or after prefixing it with "v" (stable tags carry the
    prefix, the retry is harmless on nightly).
    """
    if not token:
        raise UnknownVersionError("No version specified")

    if token == LATEST:
        return source.latest_tag()

    for candidate in (token, VERSION_PREFIX + token):
        logger.debug("Looking up %s release %s", source.channel.name, candidate)
        release = source.get_release(candidate)
        if release:
            return release.get("tag_name", candidate)

    raise UnknownVersionError(
        f"Unknown version '{token}' on the {source.channel.name} channel"
    )

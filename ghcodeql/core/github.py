#!/usr/bin/env python3

import logging
import os
import shutil
import subprocess
from typing import Any, Dict, Iterator, Optional

import requests

from ..utils.system import run_command

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"
PER_PAGE = 100


def find_token() -> Optional[str]:
    """Find a GitHub token from the environment or the gh CLI's login"""
    for var in ("GH_TOKEN", "GITHUB_TOKEN"):
        if os.environ.get(var):
            return os.environ[var]

    gh = shutil.which("gh")
    if not gh:
        return None
    try:
        result = run_command([gh, "auth", "token"])
    except (OSError, subprocess.CalledProcessError):
        return None
    return result.stdout.strip() or None


class GitHubApi:
    """Minimal GitHub REST client for the release endpoints"""

    def __init__(self, token: Optional[str] = None, api_url: str = API_URL):
        self.api_url = api_url.rstrip("/")
        self.session = requests.Session()
        self.session.headers["Accept"] = "application/vnd.github+json"
        if token is None:
            token = find_token()
        if token:
            self.session.headers["Authorization"] = f"token {token}"

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.api_url}/{path.lstrip('/')}"

    def get_json(self, path: str) -> Optional[Any]:
        """GET an endpoint, returning None when it does not exist"""
        url = self._url(path)
        logger.debug("GET %s", url)
        response = self.session.get(url)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    def paginate(self, path: str) -> Iterator[Dict]:
        """Yield every item of a list endpoint, following Link headers"""
        url: Optional[str] = self._url(path)
        params: Optional[Dict[str, int]] = {"per_page": PER_PAGE}
        while url:
            logger.debug("GET %s", url)
            response = self.session.get(url, params=params)
            response.raise_for_status()
            for item in response.json():
                yield item
            url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            params = None

    def download(self, url: str, destination: str) -> str:
        """Stream a release asset to a file"""
        logger.debug("Downloading %s to %s", url, destination)
        response = self.session.get(
            self._url(url),
            headers={"Accept": "application/octet-stream"},
            stream=True,
        )
        response.raise_for_status()

        with open(destination, "wb") as f:
            for chunk in response.iter_content(chunk_size=65536):
                f.write(chunk)

        return destination

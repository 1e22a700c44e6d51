"""
Shared fixtures: an in-memory config store, a fake GitHub API serving canned
releases and zip archives, and a manager wired to a temporary install root.
"""

import io
import zipfile

import pytest

from ghcodeql.core.manager import CodeQLManager
from ghcodeql.utils.config import MemoryConfigStore, Settings

STABLE_REPO = "github/codeql-cli-binaries"
NIGHTLY_REPO = "dsp-testing/codeql-cli-nightlies"


def make_codeql_zip(marker: str = "codeql", launcher_name: str = "codeql") -> bytes:
    """Build a zip laid out like a CodeQL release asset"""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zip_file:
        launcher = zipfile.ZipInfo(f"codeql/{launcher_name}")
        launcher.external_attr = 0o100755 << 16
        zip_file.writestr(launcher, f"#!/bin/sh\necho {marker}\n")
        zip_file.writestr("codeql/tools/README.txt", "tools\n")
    return buffer.getvalue()


def asset_url(asset_id: int) -> str:
    return f"https://api.github.com/repos/assets/{asset_id}"


class FakeApi:
    """Stands in for GitHubApi, recording every call"""

    def __init__(self, releases=None, assets=None, archives=None):
        self.releases = releases or {}
        self.assets = assets or {}
        self.archives = archives or {}
        self.calls = []

    def paginate(self, path):
        self.calls.append(("paginate", path))
        parts = path.split("/")
        if parts[-1] == "assets":
            return iter(self.assets.get(int(parts[-2]), []))
        return iter(self.releases.get("/".join(parts[1:3]), []))

    def get_json(self, path):
        self.calls.append(("get_json", path))
        repo = "/".join(path.split("/")[1:3])
        tag = path.split("/releases/tags/", 1)[1]
        for release in self.releases.get(repo, []):
            if release["tag_name"] == tag:
                return release
        return None

    def download(self, url, destination):
        self.calls.append(("download", url))
        with open(destination, "wb") as f:
            f.write(self.archives[url])
        return destination


def release(release_id, tag, draft=False, prerelease=False):
    return {"id": release_id, "tag_name": tag, "draft": draft, "prerelease": prerelease}


def linux_asset(asset_id):
    return {"id": asset_id, "name": "codeql-linux64.zip", "url": asset_url(asset_id)}


@pytest.fixture
def api():
    releases = {
        STABLE_REPO: [
            release(3, "v2.17.0", draft=True),
            release(4, "v2.17.0-rc1", prerelease=True),
            release(2, "v2.16.0"),
            release(1, "v2.15.0"),
        ],
        NIGHTLY_REPO: [
            release(12, "codeql-bundle-20240103", draft=True),
            release(11, "codeql-bundle-20240102"),
            release(10, "codeql-bundle-20240101"),
        ],
    }
    assets = {
        1: [{"id": 90, "name": "codeql-osx64.zip", "url": asset_url(90)}, linux_asset(101)],
        2: [linux_asset(102)],
        10: [linux_asset(110)],
        11: [linux_asset(111)],
    }
    archives = {
        asset_url(101): make_codeql_zip("2.15.0"),
        asset_url(102): make_codeql_zip("2.16.0"),
        asset_url(110): make_codeql_zip("20240101"),
        asset_url(111): make_codeql_zip("20240102"),
    }
    return FakeApi(releases, assets, archives)


@pytest.fixture
def store():
    return MemoryConfigStore({"platform": "linux64"})


@pytest.fixture
def workdir(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def root(tmp_path):
    return tmp_path / "root"


@pytest.fixture
def manager(store, api, root, workdir):
    return CodeQLManager(
        Settings(store), api=api, root=str(root), cwd=str(workdir), environ={}
    )


def seed_version(root, channel, version, executable="codeql"):
    """Create a cache entry without going through a download"""
    version_dir = root / "dist" / channel / version
    version_dir.mkdir(parents=True)
    (version_dir / executable).write_text("#!/bin/sh\n")
    return version_dir

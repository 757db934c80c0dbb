"""Downloading and unpacking prebuilt Ruby tarballs."""

from __future__ import annotations

import hashlib
import os
import platform as _platform
import shutil
import sys
import tarfile
import urllib.error
import urllib.request
from pathlib import Path, PurePosixPath
from typing import Optional

from .config import Config
from .request import RubyRequest

RELEASES_URL_ENV = "RV_RUBY_RELEASES_URL"

_PLATFORM_ARCHES = {
    "aarch64-apple-darwin": "arm64_sonoma",
    "x86_64-unknown-linux-gnu": "x86_64_linux",
    "aarch64-unknown-linux-gnu": "arm64_linux",
}


class InstallError(Exception):
    """Raised when a Ruby cannot be installed.

    ``kind`` is one of ``IncompleteVersion``, ``DownloadFailed``,
    ``InvalidTarballPath``, ``UnsupportedPlatform``, ``NoReleaseUrl`` or
    ``NoInstallDir``.
    """

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    @classmethod
    def incomplete_version(cls, requested: RubyRequest) -> InstallError:
        return cls(
            "IncompleteVersion",
            f"Major, minor, and patch version is required, but got {requested}",
        )

    @classmethod
    def download_failed(cls, url: str, status: object) -> InstallError:
        return cls("DownloadFailed", f"Download from URL {url} failed with status code {status}")

    @classmethod
    def invalid_tarball_path(cls, path: str) -> InstallError:
        return cls("InvalidTarballPath", f"Failed to unpack tarball path {path}")


def _current_platform() -> str:
    machine = _platform.machine().lower()
    if machine in ("arm64", "aarch64"):
        arch = "aarch64"
    elif machine in ("x86_64", "amd64"):
        arch = "x86_64"
    else:
        arch = machine
    if sys.platform == "darwin":
        system = "apple-darwin"
    elif sys.platform.startswith("linux"):
        system = "unknown-linux-gnu"
    elif sys.platform.startswith("win"):
        system = "pc-windows-msvc"
    else:
        system = sys.platform
    return f"{arch}-{system}"


def ruby_url(version: str, platform: Optional[str] = None) -> str:
    """The download URL of the prebuilt tarball for ``version`` on ``platform``.

    ``platform`` defaults to the running machine; the release location comes
    from the RV_RUBY_RELEASES_URL environment variable.
    """
    target = platform or _current_platform()
    try:
        arch = _PLATFORM_ARCHES[target]
    except KeyError:
        raise InstallError(
            "UnsupportedPlatform", f"rv does not (yet) support {target}. Sorry :("
        ) from None
    base = os.environ.get(RELEASES_URL_ENV)
    if not base:
        raise InstallError(
            "NoReleaseUrl", f"No release location configured; set {RELEASES_URL_ENV}"
        )
    number = version.removeprefix("ruby-")
    return f"{base.rstrip('/')}/{number}/portable-{version}.{arch}.bottle.tar.gz"


def tarball_path(config: Config, url: str) -> Path:
    """Where the tarball downloaded from ``url`` is kept in the cache."""
    digest = hashlib.sha256(url.encode()).hexdigest()[:16]
    return config.cache_dir / "ruby" / "tarballs" / f"{digest}.tar.gz"


def download_ruby_tarball(url: str, tarball_path: os.PathLike[str] | str) -> Path:
    """Download ``url`` to ``tarball_path``; a partial file is removed on failure."""
    target = Path(tarball_path)
    try:
        with urllib.request.urlopen(url) as response:
            status = getattr(response, "status", None)
            if status is not None and not 200 <= status < 300:
                raise InstallError.download_failed(url, status)
            with target.open("wb") as out:
                shutil.copyfileobj(response, out)
    except urllib.error.HTTPError as error:
        target.unlink(missing_ok=True)
        raise InstallError.download_failed(url, error.code) from error
    except urllib.error.URLError as error:
        target.unlink(missing_ok=True)
        raise InstallError(
            "DownloadFailed", f"Download from URL {url} failed: {error.reason}"
        ) from error
    except BaseException:
        target.unlink(missing_ok=True)
        raise
    print(f"Downloaded {url} to {target}")
    return target


def _renamed(name: str) -> str:
    renamed = name.replace("portable-ruby/", "ruby-")
    pure = PurePosixPath(renamed)
    if pure.is_absolute() or ".." in pure.parts:
        raise InstallError.invalid_tarball_path(name)
    return renamed


def extract_ruby_tarball(
    tarball_path: os.PathLike[str] | str, directory: os.PathLike[str] | str
) -> Path:
    """Unpack the tarball into ``directory``, renaming ``portable-ruby/`` to ``ruby-``."""
    target = Path(directory)
    target.mkdir(parents=True, exist_ok=True)
    options = {"filter": "fully_trusted"} if hasattr(tarfile, "data_filter") else {}
    with tarfile.open(tarball_path, "r:gz") as archive:
        for member in archive:
            member.name = _renamed(member.name)
            if member.islnk():
                member.linkname = _renamed(member.linkname)
            archive.extract(member, target, **options)
    return target


def install(config: Config, install_dir: Optional[str], requested: RubyRequest) -> Path:
    """Install the exactly specified Ruby ``requested``; return the directory used."""
    if install_dir is not None:
        target = Path(install_dir)
    elif config.ruby_dirs:
        target = Path(config.ruby_dirs[0])
    else:
        raise InstallError("NoInstallDir", "No Ruby directories to install into")

    if requested.patch is None:
        raise InstallError.incomplete_version(requested)

    url = ruby_url(str(requested))
    tarball = tarball_path(config, url)
    tarball.parent.mkdir(parents=True, exist_ok=True)

    if tarball.exists():
        print(f"Tarball {tarball} already exists, skipping download.")
    else:
        download_ruby_tarball(url, tarball)

    extract_ruby_tarball(tarball, target)
    print(f"Installed Ruby version {requested} to {target}")
    return target
"""Ruby installations: inspecting an interpreter and describing it."""

from __future__ import annotations

import functools
import os
import subprocess
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

from .request import RequestError, RubyRequest, RubyVersion

_INFO_SCRIPT = """
puts(defined?(RUBY_ENGINE) ? RUBY_ENGINE : 'ruby')
puts(RUBY_VERSION)
puts(defined?(RUBY_PLATFORM) ? RUBY_PLATFORM : 'unknown')
cfg = defined?(RbConfig) ? RbConfig::CONFIG : {}
puts(cfg['host_cpu'] || 'unknown')
puts(cfg['host_os'] || 'unknown')
begin
  require 'rubygems'
  puts Gem.default_dir
rescue ScriptError, NoMethodError
  puts ''
end
"""


class RubyError(Exception):
    """Raised when a directory does not hold a usable Ruby.

    ``kind`` is one of ``InvalidPath``, ``NoRubyExecutable``, ``RubyFailed``
    or ``RequestError``.
    """

    def __init__(
        self,
        kind: str,
        message: str,
        *,
        path: str | None = None,
        status: int | None = None,
        stderr: str | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.path = path
        self.status = status
        self.stderr = stderr

    @classmethod
    def invalid_path(cls, path: str) -> RubyError:
        return cls("InvalidPath", f"Invalid path: {path}", path=path)

    @classmethod
    def no_ruby_executable(cls) -> RubyError:
        return cls("NoRubyExecutable", "No ruby executable found in bin/ directory")

    @classmethod
    def ruby_failed(cls, status: int, stderr: str) -> RubyError:
        return cls(
            "RubyFailed",
            f"Running ruby failed with status {status}:\n{stderr}",
            status=status,
            stderr=stderr,
        )

    @classmethod
    def from_request_error(cls, error: RequestError) -> RubyError:
        return cls("RequestError", str(error))


@functools.total_ordering
@dataclass(frozen=True)
class Ruby:
    """One Ruby installation on disk."""

    key: str
    version: RubyVersion
    path: Path
    arch: str
    os: str
    symlink: Optional[Path] = None
    gem_root: Optional[Path] = None

    @classmethod
    def from_dir(cls, path: os.PathLike[str] | str) -> Ruby:
        """Inspect the Ruby installed in ``path`` by running its interpreter."""
        directory = Path(path)
        if not directory.name:
            raise RubyError.invalid_path(str(directory))

        ruby_bin = directory / "bin" / "ruby"
        if not ruby_bin.exists():
            raise RubyError.no_ruby_executable()

        symlink = Path(os.readlink(ruby_bin)) if ruby_bin.is_symlink() else None
        ruby = _extract_ruby_info(ruby_bin)
        return replace(ruby, path=directory, symlink=symlink)

    def is_valid(self) -> bool:
        """True if the interpreter still exists."""
        return self.executable_path().exists()

    def display_name(self) -> str:
        return str(self.version)

    def executable_path(self) -> Path:
        return self.bin_path() / "ruby"

    def bin_path(self) -> Path:
        return self.path / "bin"

    def is_active(self, active_version: str) -> bool:
        """True if ``active_version`` parses as a request this Ruby satisfies."""
        try:
            request = RubyRequest.parse(active_version)
        except RequestError:
            return False
        return request.satisfied_by(self)

    def gem_home(self) -> Optional[Path]:
        """The per-user gem directory for this Ruby, if a home directory is known."""
        try:
            home = Path.home()
        except (RuntimeError, KeyError):
            return None
        return home / ".gem" / self.version.engine.name() / self.version.number()

    def to_dict(self) -> dict[str, Any]:
        """A JSON-ready description of this Ruby."""
        data: dict[str, Any] = {
            "key": self.key,
            "version": str(self.version),
            "path": str(self.path),
        }
        if self.symlink is not None:
            data["symlink"] = str(self.symlink)
        data["arch"] = self.arch
        data["os"] = self.os
        data["gem_root"] = None if self.gem_root is None else str(self.gem_root)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Ruby:
        """Rebuild a Ruby from the output of :meth:`to_dict`."""
        symlink = data.get("symlink")
        gem_root = data.get("gem_root")
        return cls(
            key=str(data["key"]),
            version=RubyRequest.parse(str(data["version"])),
            path=Path(data["path"]),
            arch=str(data["arch"]),
            os=str(data["os"]),
            symlink=None if symlink is None else Path(symlink),
            gem_root=None if gem_root is None else Path(gem_root),
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Ruby):
            return NotImplemented
        return (self.version, self.path) < (other.version, other.path)


def _extract_ruby_info(ruby_bin: Path) -> Ruby:
    try:
        completed = subprocess.run(
            [str(ruby_bin), "-e", _INFO_SCRIPT],
            capture_output=True,
            check=False,
        )
    except OSError:
        raise RubyError.no_ruby_executable() from None

    if completed.returncode != 0:
        raise RubyError.ruby_failed(
            completed.returncode, completed.stderr.decode("utf-8", errors="replace")
        )

    lines = iter(completed.stdout.decode("utf-8", errors="replace").strip().splitlines())
    engine = next(lines, "ruby")
    version_text = next(lines, "")
    platform = next(lines, "unknown")
    host_cpu = next(lines, "unknown")
    host_os = next(lines, "unknown")
    gem_root = next(lines, "")

    if host_cpu == "unknown":
        host_cpu = _extract_arch_from_platform(platform)
    if host_os == "unknown":
        host_os = _extract_os_from_platform(platform)

    arch = _normalize_arch(host_cpu)
    os_name = _normalize_os(host_os)
    try:
        version = RubyRequest.parse(f"{engine}-{version_text}")
    except RequestError as error:
        raise RubyError.from_request_error(error) from error

    return Ruby(
        key=f"{version}-{os_name}-{arch}",
        version=version,
        path=Path(),
        arch=arch,
        os=os_name,
        gem_root=Path(gem_root) if gem_root else None,
    )


def _extract_arch_from_platform(platform: str) -> str:
    if "aarch64" in platform or "arm64" in platform:
        return "aarch64"
    if "x86_64" in platform or "amd64" in platform:
        return "x86_64"
    if "i386" in platform or "i686" in platform:
        return "x86"
    return "unknown"


def _extract_os_from_platform(platform: str) -> str:
    if "darwin" in platform:
        return "darwin"
    if "linux" in platform:
        return "linux"
    if "mingw" in platform or "mswin" in platform:
        return "windows"
    return "unknown"


_ARCH_ALIASES = {
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "i386": "x86",
    "i686": "x86",
}


def _normalize_arch(arch: str) -> str:
    return _ARCH_ALIASES.get(arch, arch)


def _normalize_os(os_name: str) -> str:
    if "darwin" in os_name:
        return "macos"
    if "linux" in os_name:
        return "linux"
    if any(marker in os_name for marker in ("mingw", "mswin", "windows")):
        return "windows"
    for bsd in ("freebsd", "openbsd", "netbsd"):
        if bsd in os_name:
            return bsd
    return os_name
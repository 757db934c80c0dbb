"""Configuration: where Rubies live, which project is active, and shell environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .discovery import discover_rubies
from .request import RequestError, RubyRequest
from .ruby import Ruby

log = logging.getLogger(__name__)

ENV_VARS = (
    "RUBY_ROOT",
    "RUBY_ENGINE",
    "RUBY_VERSION",
    "RUBYOPT",
    "GEM_ROOT",
    "GEM_HOME",
    "GEM_PATH",
)

_DEFAULT_RUBY_DIRS = ("~/.rubies", "/opt/rubies", "/usr/local/rubies")


class ConfigError(Exception):
    """Raised when the configuration cannot provide what was asked for."""


class NoProjectDirError(ConfigError):
    """Raised when no project directory was found."""

    def __init__(self, current_dir: os.PathLike[str] | str) -> None:
        super().__init__(f"No project was found in the parents of {current_dir}")
        self.current_dir = Path(current_dir)


@dataclass
class Config:
    """Everything a command needs to know about its surroundings."""

    ruby_dirs: list[Path]
    root: Path
    current_dir: Path
    cache_dir: Path
    current_exe: Path
    project_dir: Optional[Path] = None
    gemfile: Optional[Path] = field(default=None)

    def __post_init__(self) -> None:
        self.ruby_dirs = [Path(path) for path in self.ruby_dirs]
        self.root = Path(self.root)
        self.current_dir = Path(self.current_dir)
        self.cache_dir = Path(self.cache_dir)
        self.current_exe = Path(self.current_exe)
        if self.project_dir is not None:
            self.project_dir = Path(self.project_dir)
        if self.gemfile is not None:
            self.gemfile = Path(self.gemfile)

    def rubies(self) -> list[Ruby]:
        """All installed Rubies, sorted by version then path."""
        return discover_rubies(self.ruby_dirs, self.cache_dir)

    def matching_ruby(self, request: RubyRequest) -> Optional[Ruby]:
        """The newest Ruby satisfying ``request``, if any."""
        return next(
            (ruby for ruby in reversed(self.rubies()) if request.satisfied_by(ruby)),
            None,
        )

    def project_ruby(self) -> Optional[Ruby]:
        """The Ruby the current project asks for, or None if unavailable."""
        try:
            request = self.ruby_request()
        except (OSError, RequestError):
            return None
        return self.matching_ruby(request)

    def ruby_request(self) -> RubyRequest:
        """The request in the project's ``.ruby-version``, or the default request."""
        if self.project_dir is None:
            return RubyRequest()
        text = (self.project_dir / ".ruby-version").read_text(encoding="utf-8")
        return RubyRequest.parse(text)


def default_ruby_dirs(root: os.PathLike[str] | str) -> list[Path]:
    """The standard Ruby directories under ``root``; ``~/.rubies`` is always kept."""
    root_path = Path(root)
    dirs: list[Path] = []
    for candidate in _DEFAULT_RUBY_DIRS:
        expanded = os.path.expanduser(candidate)
        joined = root_path / expanded.lstrip("/")
        if joined.name == ".rubies":
            dirs.append(joined)
            continue
        try:
            dirs.append(joined.resolve(strict=True))
        except OSError:
            continue
    return dirs


def find_project_dir(
    current_dir: os.PathLike[str] | str, root: os.PathLike[str] | str
) -> Optional[Path]:
    """The nearest directory from ``current_dir`` up to ``root`` holding ``.ruby-version``."""
    project_dir = Path(current_dir)
    root_path = Path(root)
    log.debug("Searching for project directory in %s", project_dir)
    while True:
        if (project_dir / ".ruby-version").exists():
            log.debug("Found project directory %s", project_dir)
            return project_dir
        if project_dir == root_path:
            log.debug("Reached root %s without finding a project directory", root_path)
            return None
        parent = project_dir.parent
        if parent == project_dir:
            log.debug(
                "Ran out of parents of %s without finding a project directory", project_dir
            )
            return None
        project_dir = parent


def _join_paths(paths: Sequence[str]) -> str:
    for path in paths:
        if os.pathsep in path:
            raise ConfigError(f"path segment contains separator `{os.pathsep}`: {path}")
    return os.pathsep.join(paths)


def env_for(
    ruby: Optional[Ruby], environ: Optional[Mapping[str, str]] = None
) -> tuple[list[str], list[tuple[str, str]]]:
    """Variables to unset and variables to set so that ``ruby`` becomes active.

    With no Ruby, every Ruby variable is unset and old Ruby paths leave PATH.
    """
    env = os.environ if environ is None else environ
    unset = list(ENV_VARS)
    to_set: list[tuple[str, str]] = []

    def insert(var: str, value: str) -> None:
        if var in unset:
            unset.remove(var)
        to_set.append((var, value))

    paths = env.get("PATH", "").split(os.pathsep)

    old_paths = {
        Path(env[var]) / "bin" for var in ("RUBY_ROOT", "GEM_ROOT", "GEM_HOME") if var in env
    }
    old_paths.update(Path(p) for p in env.get("GEM_PATH", "").split(os.pathsep) if p)
    paths = [p for p in paths if not (p and Path(p) in old_paths)]

    if ruby is not None:
        gem_paths: list[str] = []
        paths.insert(0, str(ruby.bin_path()))
        insert("RUBY_ROOT", str(ruby.path))
        insert("RUBY_ENGINE", ruby.version.engine.name())
        insert("RUBY_VERSION", ruby.version.number())
        gem_home = ruby.gem_home()
        if gem_home is not None:
            paths.insert(0, str(gem_home / "bin"))
            gem_paths.insert(0, str(gem_home / "bin"))
            insert("GEM_HOME", str(gem_home))
        if ruby.gem_root is not None:
            paths.insert(0, str(ruby.gem_root / "bin"))
            gem_paths.insert(0, str(ruby.gem_root / "bin"))
            insert("GEM_ROOT", str(ruby.gem_root))
        insert("GEM_PATH", _join_paths(gem_paths))

    insert("PATH", _join_paths(paths))
    return unset, to_set
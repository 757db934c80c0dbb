"""The ``ruby`` commands: find, pin, list and run."""

from __future__ import annotations

import enum
import json
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn, Optional, Sequence

from .config import Config, NoProjectDirError, env_for
from .request import RubyRequest
from .ruby import Ruby

log = logging.getLogger(__name__)


class NoMatchingRubyError(LookupError):
    """Raised when no installed Ruby satisfies a request."""

    def __init__(self) -> None:
        super().__init__("no matching ruby version found")


class OutputFormat(enum.Enum):
    TEXT = "text"
    JSON = "json"


def find(config: Config, request: Optional[RubyRequest]) -> Path:
    """Print and return the interpreter path of the Ruby matching ``request``.

    Without a request the project's ``.ruby-version`` decides.
    """
    if request is None:
        request = config.ruby_request()
    ruby = config.matching_ruby(request)
    if ruby is None:
        raise NoMatchingRubyError()
    executable = ruby.executable_path()
    print(executable)
    return executable


def pin(config: Config, version: Optional[str]) -> str:
    """Show the pinned version, or pin ``version`` to the project; return the version text."""
    if version is None:
        return _show_pinned_ruby(config)
    return _set_pinned_ruby(config, version)


def _set_pinned_ruby(config: Config, version: str) -> str:
    project_dir = config.project_dir or config.current_dir
    (project_dir / ".ruby-version").write_text(f"{version}\n", encoding="utf-8")
    print(f"{project_dir} pinned to Ruby {version}")
    return version


def _show_pinned_ruby(config: Config) -> str:
    if config.project_dir is None:
        raise NoProjectDirError(config.current_dir)
    ruby_version = (config.project_dir / ".ruby-version").read_text(encoding="utf-8")
    print(f"{config.project_dir} is pinned to Ruby {ruby_version}")
    return ruby_version


def list_rubies(
    config: Config, output_format: OutputFormat, installed_only: bool = False
) -> list[Ruby]:
    """Print the installed Rubies as text or JSON and return them."""
    rubies = config.rubies()
    active = config.project_ruby()

    if not rubies:
        log.warning("No Ruby installations found.")
        log.info("Try installing Ruby with 'rv ruby install' or check your configuration.")

    if OutputFormat(output_format) is OutputFormat.TEXT:
        width = max((len(ruby.display_name()) for ruby in rubies), default=0)
        for ruby in rubies:
            print(format_ruby_entry(ruby, active, width))
    else:
        sys.stdout.write(json.dumps([ruby.to_dict() for ruby in rubies], indent=2))
    return rubies


def format_ruby_entry(ruby: Ruby, active: Optional[Ruby], width: int) -> str:
    """One line of the text listing; the active Ruby is marked with ``*``."""
    marker = "*" if active is not None and active == ruby else " "
    entry = f"{marker} {ruby.display_name():<{width}}    {ruby.executable_path()}"
    if ruby.symlink is not None:
        entry += f" -> {ruby.symlink}"
    return entry


def run(config: Config, request: RubyRequest, args: Sequence[str]) -> NoReturn:
    """Replace this process with the Ruby matching ``request``, run with ``args``."""
    ruby = config.matching_ruby(request)
    if ruby is None:
        raise NoMatchingRubyError()
    unset, to_set = env_for(ruby)
    env = {key: value for key, value in os.environ.items() if key not in unset}
    env.update(to_set)
    executable = str(ruby.executable_path())
    os.execve(executable, [executable, *args], env)
    raise OSError(f"failed to execute {executable}")
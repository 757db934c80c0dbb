"""The ``rv`` command line."""

from __future__ import annotations

import argparse
import enum
import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from .config import Config, ConfigError, default_ruby_dirs, find_project_dir
from .install import InstallError, install
from .request import MatchError, RequestError, RubyRequest
from .ruby import RubyError
from .ruby_commands import NoMatchingRubyError, OutputFormat, find, list_rubies, pin, run
from .shell import Shell, env_script, init_script

log = logging.getLogger(__name__)

_PROGRAM_VERSION = "0.1.1"

_HANDLED_ERRORS = (
    NoMatchingRubyError,
    ConfigError,
    RequestError,
    MatchError,
    RubyError,
    InstallError,
    OSError,
)


class ColorMode(enum.Enum):
    """When to colour output."""

    AUTO = "auto"
    ALWAYS = "always"
    NEVER = "never"

    def color_choice_for_terminal(self, stream: Any) -> ColorMode:
        """A concrete choice (ALWAYS or NEVER) for ``stream``."""
        if self is ColorMode.AUTO:
            isatty = getattr(stream, "isatty", None)
            return ColorMode.ALWAYS if isatty is not None and isatty() else ColorMode.NEVER
        return self


def _format_bytes(size: int) -> str:
    value = float(size)
    for unit in ("B", "KiB", "MiB", "GiB", "TiB"):
        if value < 1024 or unit == "TiB":
            return f"{size} B" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def cache_dir(config: Config) -> Path:
    """Print and return the cache directory."""
    print(config.cache_dir)
    return config.cache_dir


def cache_clean(config: Config) -> tuple[int, int]:
    """Remove the cache; return the number of directories and bytes removed."""
    root = config.cache_dir
    dirs = 0
    total = 0
    if root.exists():
        for current, _subdirs, files in os.walk(root):
            dirs += 1
            for name in files:
                try:
                    total += os.lstat(os.path.join(current, name)).st_size
                except OSError:
                    continue
        shutil.rmtree(root)
    log.info("Removed %d directories, totalling %s", dirs, _format_bytes(total))
    return dirs, total


def _default_cache_dir(env: Mapping[str, str]) -> Path:
    xdg = env.get("XDG_CACHE_HOME")
    base = Path(xdg) if xdg else Path(os.path.expanduser("~")) / ".cache"
    return base / "rv"


def build_config(args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build the configuration from parsed arguments and the environment."""
    env = os.environ if environ is None else environ

    root_arg = getattr(args, "root_dir", None) or env.get("RV_ROOT_DIR")
    root = Path(root_arg) if root_arg else Path("/")
    current_dir = Path.cwd()

    project_arg = getattr(args, "project_dir", None)
    project_dir = Path(project_arg) if project_arg else find_project_dir(current_dir, root)

    requested_dirs = getattr(args, "ruby_dir", None) or []
    ruby_dirs = [root / path for path in requested_dirs] or default_ruby_dirs(root)

    cache_arg = getattr(args, "cache_dir", None) or env.get("RV_CACHE_DIR")
    cache = Path(cache_arg) if cache_arg else _default_cache_dir(env)

    exe_arg = getattr(args, "current_exe", None) or env.get("RV_TEST_EXE")
    current_exe = Path(exe_arg) if exe_arg else Path(sys.argv[0]).resolve()

    gemfile_arg = getattr(args, "gemfile", None) or env.get("BUNDLE_GEMFILE")

    return Config(
        ruby_dirs=ruby_dirs,
        root=root,
        current_dir=current_dir,
        cache_dir=cache,
        current_exe=current_exe,
        project_dir=project_dir,
        gemfile=Path(gemfile_arg) if gemfile_arg else None,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rv", description="An extremely fast Ruby version manager."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_PROGRAM_VERSION}")
    parser.add_argument(
        "--ruby-dir", dest="ruby_dir", action="append", type=Path, default=[],
        help="Ruby directories to search for installations",
    )
    parser.add_argument("--project-dir", type=Path)
    parser.add_argument("--gemfile", type=Path, help="Path to Gemfile")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    parser.add_argument("-q", "--quiet", action="count", default=0)
    parser.add_argument("--color", choices=[mode.value for mode in ColorMode])
    parser.add_argument("--cache-dir", type=Path, help="Path to the cache directory")
    parser.add_argument("--root-dir", type=Path, help=argparse.SUPPRESS)
    parser.add_argument("--current-exe", type=Path, help=argparse.SUPPRESS)

    commands = parser.add_subparsers(dest="command")

    ruby = commands.add_parser("ruby", help="Manage Ruby versions and installations")
    ruby_commands = ruby.add_subparsers(dest="ruby_command", required=True)

    list_parser = ruby_commands.add_parser("list", help="List the available Ruby installations")
    list_parser.add_argument(
        "--format", choices=[fmt.value for fmt in OutputFormat], default="text"
    )
    list_parser.add_argument("--installed-only", action="store_true")

    pin_parser = ruby_commands.add_parser(
        "pin", help="Show or set the Ruby version for the current project"
    )
    pin_parser.add_argument("version_request", nargs="?")

    find_parser = ruby_commands.add_parser("find", help="Search for a Ruby installation")
    find_parser.add_argument("request", nargs="?", type=RubyRequest.parse)

    install_parser = ruby_commands.add_parser("install", help="Install a Ruby version")
    install_parser.add_argument("-i", "--install-dir", metavar="DIR")
    install_parser.add_argument("version", type=RubyRequest.parse)

    run_parser = ruby_commands.add_parser("run", help="Run a specific Ruby")
    run_parser.add_argument("version", type=RubyRequest.parse)
    run_parser.add_argument("args", nargs=argparse.REMAINDER)

    cache = commands.add_parser("cache", help="Manage rv's cache")
    cache_commands = cache.add_subparsers(dest="cache_command", required=True)
    cache_commands.add_parser("clean", help="Clear the cache")
    cache_commands.add_parser("dir", help="Show the cache directory")

    shell = commands.add_parser("shell", help="Configure your shell to use rv")
    shell_commands = shell.add_subparsers(dest="shell_command", required=True)
    choices = [item.value for item in Shell]
    init_parser = shell_commands.add_parser("init", help="Configure your shell to use rv")
    init_parser.add_argument("shell", choices=choices)
    env_parser = shell_commands.add_parser("env")
    env_parser.add_argument("shell", choices=choices)

    return parser


def _resolve_color(
    parser: argparse.ArgumentParser, value: Optional[str], env: Mapping[str, str]
) -> ColorMode:
    if value is not None:
        return ColorMode(value)
    if "RV_COLOR" in env:
        try:
            return ColorMode(env["RV_COLOR"])
        except ValueError:
            parser.error(f"invalid value for RV_COLOR: {env['RV_COLOR']}")
    if "NO_COLOR" in env:
        return ColorMode.NEVER
    if "FORCE_COLOR" in env or "CLICOLOR_FORCE" in env:
        return ColorMode.ALWAYS
    return ColorMode.AUTO


class _LevelFormatter(logging.Formatter):
    _COLORS = {"DEBUG": "36", "INFO": "32", "WARNING": "33", "ERROR": "31", "CRITICAL": "31"}

    def __init__(self, colored: bool) -> None:
        super().__init__("%(levelname)s %(message)s")
        self.colored = colored

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if not self.colored:
            return text
        code = self._COLORS.get(record.levelname, "0")
        return text.replace(record.levelname, f"\x1b[{code}m{record.levelname}\x1b[0m", 1)


def _configure_logging(verbosity: int, color: ColorMode) -> None:
    if verbosity <= -3:
        level = logging.CRITICAL + 1
    else:
        level = max(logging.DEBUG, logging.INFO - 10 * verbosity)
    handler = logging.StreamHandler(sys.stderr)
    colored = color.color_choice_for_terminal(sys.stderr) is ColorMode.ALWAYS
    handler.setFormatter(_LevelFormatter(colored))
    logging.basicConfig(level=level, handlers=[handler], force=True)


def _dispatch(config: Config, args: argparse.Namespace) -> None:
    if args.command == "ruby":
        command = args.ruby_command
        if command == "find":
            find(config, args.request)
        elif command == "list":
            list_rubies(config, OutputFormat(args.format), args.installed_only)
        elif command == "pin":
            pin(config, args.version_request)
        elif command == "install":
            install(config, args.install_dir, args.version)
        elif command == "run":
            extra = list(args.args)
            if extra and extra[0] == "--":
                extra = extra[1:]
            run(config, args.version, extra)
    elif args.command == "cache":
        if args.cache_command == "dir":
            cache_dir(config)
        else:
            cache_clean(config)
    elif args.command == "shell":
        shell = Shell(args.shell)
        if args.shell_command == "init":
            sys.stdout.write(init_script(config, shell))
        else:
            sys.stdout.write(env_script(config, shell))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line; return the exit status."""
    parser = _build_parser()
    arguments = sys.argv[1:] if argv is None else list(argv)
    if not arguments:
        parser.print_help(sys.stderr)
        raise SystemExit(2)
    args = parser.parse_args(arguments)

    env = os.environ
    color = _resolve_color(parser, args.color, env)
    _configure_logging(args.verbose - args.quiet, color)

    try:
        config = build_config(args, env)
        _dispatch(config, args)
    except _HANDLED_ERRORS as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
"""Finding Ruby installations, with an on-disk cache of what was found."""

from __future__ import annotations

import hashlib
import json
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .ruby import Ruby, RubyError

log = logging.getLogger(__name__)

_BUCKET = "ruby"
_SHARD = "interpreters"

PathLike = "os.PathLike[str] | str"


class RubyCacheMiss(LookupError):
    """Raised when no valid cached entry exists for a Ruby installation."""

    def __init__(self, ruby_path: os.PathLike[str] | str) -> None:
        super().__init__(f"Ruby cache miss or invalid cache for {ruby_path}")
        self.ruby_path = Path(ruby_path)


def _cache_entry(cache_dir: os.PathLike[str] | str, key: str) -> Path:
    return Path(cache_dir) / _BUCKET / _SHARD / f"{key}.json"


def ruby_path_cache_key(ruby_path: os.PathLike[str] | str) -> str:
    """A key for ``ruby_path`` that changes whenever its interpreter is modified."""
    path = Path(ruby_path)
    try:
        stat = (path / "bin" / "ruby").stat()
    except OSError:
        raise RubyCacheMiss(path) from None
    material = f"{path}\0{stat.st_mtime_ns}".encode()
    return hashlib.sha256(material).hexdigest()[:16]


def get_cached_ruby(cache_dir: os.PathLike[str] | str, ruby_path: os.PathLike[str] | str) -> Ruby:
    """Return the cached Ruby for ``ruby_path``; stale or broken entries are removed."""
    entry = _cache_entry(cache_dir, ruby_path_cache_key(ruby_path))
    try:
        content = entry.read_text(encoding="utf-8")
    except OSError:
        raise RubyCacheMiss(ruby_path) from None

    try:
        ruby = Ruby.from_dict(json.loads(content))
    except (ValueError, KeyError, TypeError):
        entry.unlink(missing_ok=True)
        raise RubyCacheMiss(ruby_path) from None

    if not ruby.is_valid():
        entry.unlink(missing_ok=True)
        raise RubyCacheMiss(ruby_path)
    return ruby


def cache_ruby(cache_dir: os.PathLike[str] | str, ruby: Ruby) -> None:
    """Store ``ruby`` in the cache under the key of its installation path."""
    entry = _cache_entry(cache_dir, ruby_path_cache_key(ruby.path))
    entry.parent.mkdir(parents=True, exist_ok=True)
    entry.write_text(json.dumps(ruby.to_dict()), encoding="utf-8")


def _candidate_paths(ruby_dirs: Iterable[os.PathLike[str] | str]) -> Iterator[Path]:
    for ruby_dir in map(Path, ruby_dirs):
        if not ruby_dir.exists():
            continue
        try:
            with os.scandir(ruby_dir) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            yield Path(entry.path)
                    except OSError:
                        continue
        except OSError:
            continue


def _load_ruby(cache_dir: os.PathLike[str] | str, ruby_path: Path) -> Optional[Ruby]:
    try:
        return get_cached_ruby(cache_dir, ruby_path)
    except RubyCacheMiss:
        pass

    try:
        ruby = Ruby.from_dir(ruby_path)
    except RubyError as error:
        log.debug("Failed to get ruby from %s: %s", ruby_path, error)
        return None

    if not ruby.is_valid():
        log.debug("Ruby at %s is invalid", ruby_path)
        return None

    try:
        cache_ruby(cache_dir, ruby)
    except (OSError, RubyCacheMiss) as error:
        log.debug("Failed to cache ruby at %s: %s", ruby.path, error)
    return ruby


def discover_rubies(
    ruby_dirs: Iterable[os.PathLike[str] | str], cache_dir: os.PathLike[str] | str
) -> list[Ruby]:
    """All Rubies found directly inside ``ruby_dirs``, sorted by version then path."""
    paths = list(_candidate_paths(ruby_dirs))
    if not paths:
        return []
    with ThreadPoolExecutor() as pool:
        found = pool.map(lambda path: _load_ruby(cache_dir, path), paths)
        rubies = [ruby for ruby in found if ruby is not None]
    return sorted(rubies)
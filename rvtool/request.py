"""Ruby version requests, such as ``3.4``, ``jruby-9.4`` or ``ruby-3.5-dev``."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from .engine import RubyEngine

_U32_MAX = 2**32 - 1
_U32_PATTERN = re.compile(r"\+?[0-9]+")
_MAX_SEGMENTS = 4
_PART_NAMES = ("major version", "minor version", "patch version", "tiny version")


class RequestError(ValueError):
    """Raised when a Ruby request string cannot be parsed.

    ``kind`` is one of ``EmptyInput``, ``InvalidVersion``, ``TooManySegments``
    or ``InvalidPart``; ``value`` is the offending input and ``part`` names the
    version part that failed for ``InvalidPart``.
    """

    def __init__(self, kind: str, message: str, value: str = "", part: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.value = value
        self.part = part

    @classmethod
    def empty_input(cls) -> RequestError:
        return cls("EmptyInput", "Empty input")

    @classmethod
    def invalid_version(cls, value: str) -> RequestError:
        return cls("InvalidVersion", f"Could not parse version: {value}", value)

    @classmethod
    def too_many_segments(cls, value: str) -> RequestError:
        return cls(
            "TooManySegments",
            f"Could not parse version {value}, no more than 4 numbers are allowed",
            value,
        )

    @classmethod
    def invalid_part(cls, part: str, value: str) -> RequestError:
        return cls("InvalidPart", f"Could not parse {part}: {value}", value, part)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RequestError):
            return NotImplemented
        return (self.kind, self.value, self.part) == (other.kind, other.value, other.part)

    def __hash__(self) -> int:
        return hash((self.kind, self.value, self.part))

    def __repr__(self) -> str:
        if self.kind == "EmptyInput":
            return "EmptyInput"
        if self.kind == "InvalidPart":
            return f"InvalidPart({self.part!r}, {self.value!r})"
        return f"{self.kind}({self.value!r})"


class MatchError(LookupError):
    """Raised when no Ruby satisfies a request."""

    def __init__(self, request: str) -> None:
        super().__init__(f"Ruby version {request} could not be found")
        self.request = request


def _parse_u32(text: str) -> int | None:
    if not _U32_PATTERN.fullmatch(text):
        return None
    number = int(text)
    return number if number <= _U32_MAX else None


def _option_key(value: Any) -> tuple:
    """Order absent values before present ones."""
    return (0,) if value is None else (1, value)


@functools.total_ordering
@dataclass(frozen=True, eq=True)
class RubyRequest:
    """A possibly partial Ruby version: engine plus up to four numbers and a prerelease."""

    engine: RubyEngine = RubyEngine.RUBY
    major: Optional[int] = None
    minor: Optional[int] = None
    patch: Optional[int] = None
    tiny: Optional[int] = None
    prerelease: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.engine, str):
            object.__setattr__(self, "engine", RubyEngine.parse(self.engine))

    @classmethod
    def parse(cls, text: str) -> RubyRequest:
        """Parse a request such as ``ruby-3.4.5``, ``3.4`` or ``jruby-dev``."""
        stripped = text.strip()
        if not stripped:
            raise RequestError.empty_input()

        if stripped[0].isalpha():
            engine, _, version = stripped.partition("-")
        else:
            engine, version = "ruby", stripped

        segments: list[str] = []
        prerelease: str | None = None

        if version:
            numbers: str | None
            if version[0].isalpha():
                if version != "dev":
                    raise RequestError.invalid_version(stripped)
                numbers, prerelease = None, version
            elif "-" in version:
                numbers, prerelease = version.split("-", 1)
            else:
                numbers = version

            segments = numbers.split(".") if numbers is not None else []
            if len(segments) > _MAX_SEGMENTS:
                raise RequestError.too_many_segments(stripped)

        parts: list[int | None] = [None] * _MAX_SEGMENTS
        for position, (name, segment) in enumerate(zip(_PART_NAMES, segments)):
            number = _parse_u32(segment)
            if number is None:
                raise RequestError.invalid_part(name, stripped)
            parts[position] = number

        major, minor, patch, tiny = parts
        return cls(
            engine=RubyEngine.parse(engine),
            major=major,
            minor=minor,
            patch=patch,
            tiny=tiny,
            prerelease=prerelease,
        )

    def satisfied_by(self, ruby: Any) -> bool:
        """True if every part given in this request matches the Ruby's version."""
        version = ruby.version
        if self.engine != version.engine:
            return False
        for field in ("major", "minor", "patch", "tiny", "prerelease"):
            wanted = getattr(self, field)
            if wanted is not None and wanted != getattr(version, field):
                return False
        return True

    def find_match_in(self, rubies: Iterable[Any]) -> Any:
        """Return the first Ruby satisfying this request, or raise MatchError."""
        for ruby in rubies:
            if self.satisfied_by(ruby):
                return ruby
        raise MatchError(str(self))

    def number(self) -> str:
        """The version number without the engine, e.g. ``3.4.5`` or ``3.5-dev``."""
        numbers = [self.major, self.minor, self.patch, self.tiny]
        text = ".".join(str(n) for n in numbers if n is not None)
        if self.prerelease is not None:
            if self.major is not None:
                text += "-"
            text += self.prerelease
        return text

    def _sort_key(self) -> tuple:
        return (
            self.engine,
            _option_key(self.major),
            _option_key(self.minor),
            _option_key(self.patch),
            _option_key(self.tiny),
            _option_key(self.prerelease),
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RubyRequest):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        text = self.engine.name()
        if self.major is not None:
            text += f"-{self.major}"
            if self.minor is not None:
                text += f".{self.minor}"
                if self.patch is not None:
                    text += f".{self.patch}"
                    if self.tiny is not None:
                        text += f".{self.tiny}"
        if self.prerelease is not None:
            text += f"-{self.prerelease}"
        return text


RubyVersion = RubyRequest


def sorted_requests(requests: Sequence[RubyRequest]) -> list[RubyRequest]:
    """Return the requests in ascending order."""
    return sorted(requests)
"""Gem-style version numbers: parsing, canonical form, comparison."""

from __future__ import annotations

import functools
import re
from typing import Iterable, Union

Segment = Union[int, str]

_U32_MAX = 2**32 - 1
_U32_PATTERN = re.compile(r"\+?[0-9]+")
_DIGIT_RUNS = re.compile(r"[0-9]+|[^0-9]+")


class VersionError(ValueError):
    """Raised when a version string cannot be parsed."""

    def __init__(self, message: str, value: str) -> None:
        super().__init__(message)
        self.value = value


def _parse_u32(text: str) -> int | None:
    """Parse an unsigned 32-bit integer, or return None."""
    if not _U32_PATTERN.fullmatch(text):
        return None
    number = int(text)
    return number if number <= _U32_MAX else None


def _normalize(version: str) -> str:
    trimmed = version.strip()
    if not trimmed:
        return "0"
    if "\n" in trimmed and len(trimmed.splitlines()) > 1:
        raise VersionError(f"Version cannot contain newlines: {version}", version)
    if ".." in trimmed:
        raise VersionError(f"Version cannot contain consecutive dots: {version}", version)
    if trimmed.isalpha():
        raise VersionError(f"Version cannot be pure alphabetic: {version}", version)
    if trimmed.endswith(".") or " " in trimmed:
        raise VersionError(f"Malformed version number string {version}", version)
    return trimmed


def _parse_segment(segment: str) -> Segment:
    number = _parse_u32(segment)
    if number is not None:
        return number
    if segment.isalnum():
        return segment
    raise VersionError(f"Invalid segment in version: {segment}", segment)


def _parse_segments(version: str) -> tuple[Segment, ...]:
    segments: list[Segment] = []
    for index, part in enumerate(version.split("-")):
        if index > 0:
            # A dash marks a prerelease.
            segments.append("pre")
        segments.extend(_parse_segment(piece) for piece in part.split(".") if piece)
    return tuple(segments) or (0,)


def _segments_to_string(segments: Iterable[Segment]) -> str:
    return ".".join(str(segment) for segment in segments)


def _compare_strings(left: str, right: str) -> int:
    left_parts = _DIGIT_RUNS.findall(left)
    right_parts = _DIGIT_RUNS.findall(right)
    for a_part, b_part in zip(left_parts, right_parts):
        a_num, b_num = _parse_u32(a_part), _parse_u32(b_part)
        if a_num is not None and b_num is not None:
            a_key, b_key = a_num, b_num
        else:
            a_key, b_key = a_part, b_part
        if a_key != b_key:
            return -1 if a_key < b_key else 1
    return (len(left_parts) > len(right_parts)) - (len(left_parts) < len(right_parts))


def _compare_segments(left: Segment, right: Segment) -> int:
    if isinstance(left, int) and isinstance(right, int):
        return (left > right) - (left < right)
    if isinstance(left, int):
        return 1
    if isinstance(right, int):
        return -1
    return _compare_strings(left, right)


@functools.total_ordering
class Version:
    """A version number made of numeric and alphanumeric segments."""

    __slots__ = ("version", "segments")

    def __init__(self, version: str = "") -> None:
        normalized = _normalize(version)
        self.version: str = normalized
        self.segments: tuple[Segment, ...] = _parse_segments(normalized)

    @classmethod
    def _from_segments(cls, segments: Iterable[Segment]) -> Version:
        instance = cls.__new__(cls)
        instance.segments = tuple(segments)
        instance.version = _segments_to_string(instance.segments)
        return instance

    def is_prerelease(self) -> bool:
        """True if any segment is a string."""
        return any(isinstance(segment, str) for segment in self.segments)

    def canonical_segments(self) -> tuple[Segment, ...]:
        """Segments with redundant zeros removed, used for equality and ordering."""
        first_string = next(
            (i for i, segment in enumerate(self.segments) if isinstance(segment, str)),
            None,
        )
        canonical = [
            segment
            for i, segment in enumerate(self.segments)
            if not (first_string is not None and 0 < i < first_string and segment == 0)
        ]
        while len(canonical) > 1 and canonical[-1] == 0:
            canonical.pop()
        return tuple(canonical) or (0,)

    def release(self) -> Version:
        """The version without any prerelease part."""
        release_segments: list[Segment] = []
        for segment in self.segments:
            if isinstance(segment, str):
                break
            release_segments.append(segment)
        return Version._from_segments(release_segments or [0])

    def bump(self) -> Version:
        """The next version: drop the last release segment and increment the one before."""
        segments = list(self.segments)
        while segments and isinstance(segments[-1], str):
            segments.pop()
        if len(segments) > 1:
            segments.pop()
        if segments and isinstance(segments[-1], int):
            segments[-1] += 1
        return Version._from_segments(segments)

    def _compare(self, other: Version) -> int:
        left = self.canonical_segments()
        right = other.canonical_segments()
        for i in range(max(len(left), len(right))):
            a = left[i] if i < len(left) else 0
            b = right[i] if i < len(right) else 0
            result = _compare_segments(a, b)
            if result:
                return result
        return 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.canonical_segments() == other.canonical_segments()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self) -> int:
        return hash(self.canonical_segments())

    def __str__(self) -> str:
        return self.version

    def __repr__(self) -> str:
        return f"Version({self.version!r})"
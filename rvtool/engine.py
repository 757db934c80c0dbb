"""Ruby implementations (engines) and their ordering."""

from __future__ import annotations

import functools
from typing import ClassVar

_KNOWN_ALTERNATIVES = frozenset({"jruby", "truffleruby", "mruby", "artichoke"})


@functools.total_ordering
class RubyEngine:
    """A Ruby implementation, known or not, identified by its name."""

    __slots__ = ("_name",)

    RUBY: ClassVar[RubyEngine]
    JRUBY: ClassVar[RubyEngine]
    TRUFFLERUBY: ClassVar[RubyEngine]
    MRUBY: ClassVar[RubyEngine]
    ARTICHOKE: ClassVar[RubyEngine]

    def __init__(self, name: str) -> None:
        self._name = name

    @classmethod
    def parse(cls, text: str) -> RubyEngine:
        """Parse an engine name; unrecognised names become unknown engines."""
        return cls(text)

    def name(self) -> str:
        """The display name of this engine."""
        return self._name

    @property
    def is_known(self) -> bool:
        return self._name == "ruby" or self._name in _KNOWN_ALTERNATIVES

    def _priority(self) -> int:
        if self._name == "ruby":
            return 0
        if self._name in _KNOWN_ALTERNATIVES:
            return 1
        return 2

    def _sort_key(self) -> tuple[int, str]:
        return (self._priority(), self._name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RubyEngine):
            return NotImplemented
        return self._name == other._name

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, RubyEngine):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self) -> int:
        return hash(self._name)

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"RubyEngine({self._name!r})"


RubyEngine.RUBY = RubyEngine("ruby")
RubyEngine.JRUBY = RubyEngine("jruby")
RubyEngine.TRUFFLERUBY = RubyEngine("truffleruby")
RubyEngine.MRUBY = RubyEngine("mruby")
RubyEngine.ARTICHOKE = RubyEngine("artichoke")
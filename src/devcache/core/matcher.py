"""Directory and marker-file name patterns.

Patterns come from configuration as plain strings and are compiled once
into a :class:`NamePattern` of a fixed kind:

* ``EXACT``: ``node_modules`` matches only ``node_modules``.
* ``PREFIX``: ``cmake-build-*`` matches any name starting with
  ``cmake-build-``, including ``cmake-build-`` itself.
* ``EXTENSION``: ``*.csproj`` matches any name ending in ``.csproj``,
  ignoring case. Only used for marker files.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class PatternKind(Enum):
    EXACT = "exact"
    PREFIX = "prefix"
    EXTENSION = "extension"


@dataclass(frozen=True, slots=True)
class NamePattern:
    """A compiled name pattern.

    ``text`` is the pattern as written in configuration and is what gets
    reported back in findings. ``literal`` is the part compared against
    names (the full name, the prefix, or the lower-cased suffix).
    """

    text: str
    kind: PatternKind
    literal: str

    def matches(self, name: str) -> bool:
        match self.kind:
            case PatternKind.EXACT:
                return name == self.literal
            case PatternKind.PREFIX:
                return name.startswith(self.literal)
            case PatternKind.EXTENSION:
                return name.lower().endswith(self.literal)
        return False

    def __str__(self) -> str:
        return self.text


def compile_pattern(raw: str) -> NamePattern:
    """Compile a cache-directory pattern (exact or trailing ``*``)."""
    if raw.endswith("*"):
        return NamePattern(raw, PatternKind.PREFIX, raw[:-1])
    return NamePattern(raw, PatternKind.EXACT, raw)


def compile_marker(raw: str) -> NamePattern:
    """Compile a marker-file pattern (exact or ``*.ext``)."""
    if raw.startswith("*."):
        return NamePattern(raw, PatternKind.EXTENSION, raw[1:].lower())
    return NamePattern(raw, PatternKind.EXACT, raw)


def matches(name: str, pattern: str | NamePattern) -> bool:
    """Return True if *name* matches a cache *pattern*.

    Raw strings are compiled on the fly; hot paths should pass
    pre-compiled patterns instead.
    """
    if isinstance(pattern, str):
        pattern = compile_pattern(pattern)
    return pattern.matches(name)


def first_match(name: str, patterns: Iterable[NamePattern]) -> NamePattern | None:
    """Return the first pattern in *patterns* that matches *name*."""
    for pattern in patterns:
        if pattern.matches(name):
            return pattern
    return None

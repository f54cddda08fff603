"""Language rules and the per-scan configuration built from them."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from devcache.core.matcher import NamePattern, compile_marker, compile_pattern

DEFAULT_PRIORITY = 5


@dataclass(frozen=True, slots=True)
class LanguageRule:
    """One language ecosystem: its cache directories and marker files."""

    name: str
    enabled: bool = True
    priority: int = DEFAULT_PRIORITY
    cache_patterns: tuple[NamePattern, ...] = ()
    markers: tuple[NamePattern, ...] = ()

    @classmethod
    def build(
        cls,
        name: str,
        *,
        enabled: bool = True,
        priority: int | None = None,
        patterns: Iterable[str] = (),
        markers: Iterable[str] = (),
    ) -> LanguageRule:
        """Compile raw pattern strings into a rule.

        A missing or zero priority falls back to ``DEFAULT_PRIORITY``.
        Repeated patterns are dropped, keeping the first occurrence.
        """
        return cls(
            name=name,
            enabled=enabled,
            priority=priority or DEFAULT_PRIORITY,
            cache_patterns=tuple(compile_pattern(p) for p in dict.fromkeys(patterns)),
            markers=tuple(compile_marker(m) for m in dict.fromkeys(markers)),
        )

    @property
    def pattern_texts(self) -> list[str]:
        return [p.text for p in self.cache_patterns]

    @property
    def marker_texts(self) -> list[str]:
        return [m.text for m in self.markers]


@dataclass(slots=True)
class ScanConfig:
    """Everything one scan needs, with lookup tables derived up front.

    Only enabled rules are kept. ``patterns`` is the union of all cache
    patterns in configuration order. When several languages share a pattern,
    ``pattern_to_language`` maps it to the first language that declared it.
    """

    root: Path
    max_depth: int
    detect_language: bool
    rules: tuple[LanguageRule, ...]
    patterns: tuple[NamePattern, ...] = field(init=False)
    pattern_to_language: dict[str, str] = field(init=False)
    language_patterns: dict[str, tuple[NamePattern, ...]] = field(init=False)

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        self.root = Path(os.path.abspath(self.root))
        self.rules = tuple(r for r in self.rules if r.enabled)

        patterns: dict[str, NamePattern] = {}
        self.pattern_to_language = {}
        self.language_patterns = {}
        for rule in self.rules:
            for pattern in rule.cache_patterns:
                patterns.setdefault(pattern.text, pattern)
                self.pattern_to_language.setdefault(pattern.text, rule.name)
            self.language_patterns[rule.name] = rule.cache_patterns
        self.patterns = tuple(patterns.values())

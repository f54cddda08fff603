"""Central language rule registry."""

from __future__ import annotations

import logging
from typing import Collection, Iterator

from devcache.models.language import LanguageRule

log = logging.getLogger(__name__)


class LanguageRegistry:
    """Stores language rules by name, in registration order."""

    def __init__(self) -> None:
        self._rules: dict[str, LanguageRule] = {}

    def register(self, rule: LanguageRule) -> None:
        """Register a language rule."""
        if rule.name in self._rules:
            log.warning("Language '%s' already registered, skipping duplicate", rule.name)
            return
        self._rules[rule.name] = rule
        log.debug("Registered language: %s (priority %d)", rule.name, rule.priority)

    def get(self, name: str) -> LanguageRule | None:
        """Get a rule by its language name."""
        return self._rules.get(name)

    def get_all(self) -> list[LanguageRule]:
        """Get all registered rules."""
        return list(self._rules.values())

    def get_enabled(self, selected: Collection[str] | None = None) -> list[LanguageRule]:
        """Get enabled rules in registration order.

        Args:
            selected: Optional language names to restrict to, compared
                case-insensitively. Empty or None means no restriction.
        """
        wanted = {s.strip().lower() for s in selected} if selected else set()
        rules = [r for r in self._rules.values() if r.enabled]
        if wanted:
            rules = [r for r in rules if r.name.lower() in wanted]
            unknown = wanted - {r.name.lower() for r in self._rules.values()}
            for name in sorted(unknown):
                log.warning("Language '%s' is not configured, ignoring", name)
        return rules

    def detection_order(self) -> list[LanguageRule]:
        """Enabled rules with markers, in the order they are checked."""
        return sorted(
            (r for r in self._rules.values() if r.enabled and r.markers),
            key=lambda r: r.priority,
        )

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[LanguageRule]:
        return iter(self._rules.values())

    def __contains__(self, name: str) -> bool:
        return name in self._rules

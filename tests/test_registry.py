"""Tests for the language registry."""

from __future__ import annotations

import logging

from devcache.core.registry import LanguageRegistry
from devcache.models.language import LanguageRule


def _registry(*rules: LanguageRule) -> LanguageRegistry:
    registry = LanguageRegistry()
    for rule in rules:
        registry.register(rule)
    return registry


class TestLanguageRegistry:
    def test_register_and_get(self):
        rust = LanguageRule.build("rust", patterns=["target"], markers=["Cargo.toml"])
        registry = _registry(rust)
        assert registry.get("rust") is rust
        assert registry.get("go") is None
        assert "rust" in registry
        assert len(registry) == 1

    def test_duplicate_is_skipped(self, caplog):
        first = LanguageRule.build("go", patterns=["vendor"])
        second = LanguageRule.build("go", patterns=["bin"])
        with caplog.at_level(logging.WARNING, logger="devcache.core.registry"):
            registry = _registry(first, second)
        assert registry.get("go") is first
        assert len(registry) == 1
        assert "already registered" in caplog.text

    def test_iteration_keeps_registration_order(self):
        registry = _registry(LanguageRule.build("b"), LanguageRule.build("a"), LanguageRule.build("c"))
        assert [r.name for r in registry] == ["b", "a", "c"]
        assert [r.name for r in registry.get_all()] == ["b", "a", "c"]

    def test_get_enabled(self):
        registry = _registry(
            LanguageRule.build("node"),
            LanguageRule.build("go", enabled=False),
            LanguageRule.build("rust"),
        )
        assert [r.name for r in registry.get_enabled()] == ["node", "rust"]
        assert [r.name for r in registry.get_enabled([])] == ["node", "rust"]

    def test_get_enabled_with_selection(self):
        registry = _registry(LanguageRule.build("node"), LanguageRule.build("Rust"), LanguageRule.build("go"))
        assert [r.name for r in registry.get_enabled(["rust", " NODE "])] == ["node", "Rust"]

    def test_selection_never_enables_disabled_languages(self):
        registry = _registry(LanguageRule.build("go", enabled=False))
        assert registry.get_enabled(["go"]) == []

    def test_unknown_selection_warns(self, caplog):
        registry = _registry(LanguageRule.build("node"))
        with caplog.at_level(logging.WARNING, logger="devcache.core.registry"):
            assert registry.get_enabled(["cobol"]) == []
        assert "cobol" in caplog.text

    def test_detection_order(self):
        registry = _registry(
            LanguageRule.build("node", priority=10, markers=["package.json"]),
            LanguageRule.build("python", markers=["setup.py"]),
            LanguageRule.build("nextjs", priority=1, markers=["next.config.js"]),
            LanguageRule.build("go", markers=["go.mod"]),
            LanguageRule.build("plain", patterns=["tmp"]),
            LanguageRule.build("off", enabled=False, priority=1, markers=["x"]),
        )
        assert [r.name for r in registry.detection_order()] == ["nextjs", "python", "go", "node"]

    def test_zero_priority_means_default(self):
        assert LanguageRule.build("x", priority=0).priority == 5
        assert LanguageRule.build("x").priority == 5

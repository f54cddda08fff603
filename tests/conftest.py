"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from devcache.models.language import LanguageRule, ScanConfig


def build_tree(root: Path, spec: dict[str, Any]) -> Path:
    """Create files and directories under *root* from a nested dict.

    Dict values become directories, str/bytes values become files.
    """
    root.mkdir(parents=True, exist_ok=True)
    for name, value in spec.items():
        path = root / name
        if isinstance(value, dict):
            build_tree(path, value)
        elif isinstance(value, bytes):
            path.write_bytes(value)
        else:
            path.write_text(value)
    return root


@pytest.fixture
def make_tree(tmp_path):
    """Return a helper that builds a directory tree under tmp_path/'src'."""

    def _make(spec: dict[str, Any]) -> Path:
        return build_tree(tmp_path / "src", spec)

    return _make


@pytest.fixture
def rules() -> tuple[LanguageRule, ...]:
    """A small rule set covering shared patterns and equal priorities."""
    return (
        LanguageRule.build("node", priority=10, patterns=["node_modules", ".npm"], markers=["package.json"]),
        LanguageRule.build(
            "python",
            priority=5,
            patterns=[".venv", "__pycache__"],
            markers=["requirements.txt", "pyproject.toml"],
        ),
        LanguageRule.build("rust", priority=5, patterns=["target"], markers=["Cargo.toml"]),
        LanguageRule.build("nextjs", priority=1, patterns=["node_modules", ".next"], markers=["next.config.js"]),
        LanguageRule.build("cpp", priority=5, patterns=["cmake-build-*"], markers=["CMakeLists.txt"]),
        LanguageRule.build("dotnet", priority=5, patterns=["bin", "obj"], markers=["*.csproj"]),
    )


@pytest.fixture
def scan_config(rules):
    """Return a helper building a ScanConfig for a root."""

    def _config(root: Path, max_depth: int = 1, detect_language: bool = True) -> ScanConfig:
        return ScanConfig(root=root, max_depth=max_depth, detect_language=detect_language, rules=rules)

    return _config


@pytest.fixture
def isolate_config(tmp_path, monkeypatch) -> Path:
    """Point XDG_CONFIG_HOME at a temp directory and return the config path."""
    config_home = tmp_path / "config"
    config_home.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "dev-cache" / "config.yaml"

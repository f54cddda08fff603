"""YAML configuration: schema, loading, starter file and scan setup."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Collection

import yaml

from devcache.core.registry import LanguageRegistry
from devcache.models.language import DEFAULT_PRIORITY, LanguageRule, ScanConfig
from devcache.utils import expand_path, xdg_config_home

log = logging.getLogger(__name__)

_CONFIG_DIR = "dev-cache"
_CONFIG_FILE = "config.yaml"

CONFIG_VERSION = 1
DEFAULT_MAX_DEPTH = 1


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


def default_config_path() -> Path:
    """Return the default config location under XDG_CONFIG_HOME."""
    return xdg_config_home() / _CONFIG_DIR / _CONFIG_FILE


@dataclass(slots=True)
class LanguageSpec:
    """A ``languages:`` entry as written in the config file."""

    name: str
    enabled: bool = False
    priority: int = DEFAULT_PRIORITY
    patterns: list[str] = field(default_factory=list)
    signatures: list[str] = field(default_factory=list)

    def to_rule(self) -> LanguageRule:
        return LanguageRule.build(
            self.name,
            enabled=self.enabled,
            priority=self.priority,
            patterns=self.patterns,
            markers=self.signatures,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "enabled": self.enabled,
            "priority": self.priority,
            "patterns": list(self.patterns),
            "signatures": list(self.signatures),
        }


@dataclass(slots=True)
class Options:
    default_scan_path: str = ""
    max_depth: int = DEFAULT_MAX_DEPTH
    detect_language: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "defaultScanPath": self.default_scan_path,
            "maxDepth": self.max_depth,
            "detectLanguage": self.detect_language,
        }


@dataclass(slots=True)
class Config:
    version: int = CONFIG_VERSION
    options: Options = field(default_factory=Options)
    languages: list[LanguageSpec] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "options": self.options.to_dict(),
            "languages": [lang.to_dict() for lang in self.languages],
        }

    @classmethod
    def from_dict(cls, data: Any) -> Config:
        """Validate parsed YAML and build a Config.

        Raises:
            ConfigError: If the data does not follow the schema.
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"expected a mapping at the top level, got {type(data).__name__}")

        raw_options = data.get("options") or {}
        if not isinstance(raw_options, dict):
            raise ConfigError("'options' must be a mapping")
        max_depth = raw_options.get("maxDepth", DEFAULT_MAX_DEPTH)
        if not isinstance(max_depth, int) or isinstance(max_depth, bool) or max_depth < 0:
            raise ConfigError(f"'options.maxDepth' must be a non-negative integer, got {max_depth!r}")
        options = Options(
            default_scan_path=str(raw_options.get("defaultScanPath") or ""),
            max_depth=max_depth,
            detect_language=bool(raw_options.get("detectLanguage", False)),
        )

        raw_languages = data.get("languages") or []
        if not isinstance(raw_languages, list):
            raise ConfigError("'languages' must be a list")
        languages = [_parse_language(i, item) for i, item in enumerate(raw_languages)]

        return cls(version=int(data.get("version", CONFIG_VERSION)), options=options, languages=languages)


def _parse_language(index: int, item: Any) -> LanguageSpec:
    if not isinstance(item, dict):
        raise ConfigError(f"languages[{index}] must be a mapping")
    name = str(item.get("name") or "").strip()
    if not name:
        raise ConfigError(f"languages[{index}] has no name")

    priority = item.get("priority") or DEFAULT_PRIORITY
    if not isinstance(priority, int) or isinstance(priority, bool):
        raise ConfigError(f"language '{name}': priority must be an integer, got {priority!r}")

    return LanguageSpec(
        name=name,
        enabled=bool(item.get("enabled", False)),
        priority=priority,
        patterns=_string_list(name, "patterns", item.get("patterns")),
        signatures=_string_list(name, "signatures", item.get("signatures")),
    )


def _string_list(language: str, key: str, value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"language '{language}': '{key}' must be a list")
    return [str(v) for v in value if str(v)]


def starter_config() -> Config:
    """The configuration written by ``dev-cache init``."""
    node_patterns = ["node_modules", ".npm", ".yarn", ".pnpm-store"]
    return Config(
        version=CONFIG_VERSION,
        options=Options(default_scan_path="~/src", max_depth=1, detect_language=True),
        languages=[
            LanguageSpec("node", True, 10, node_patterns,
                         ["package.json", "package-lock.json", "yarn.lock", "pnpm-lock.yaml"]),
            LanguageSpec("python", True, 5, [".venv", "venv", "__pycache__", ".pytest_cache", ".mypy_cache", ".tox"],
                         ["requirements.txt", "setup.py", "pyproject.toml", "Pipfile", "setup.cfg"]),
            LanguageSpec("go", True, 5, ["vendor"], ["go.mod", "go.sum", "Gopkg.toml"]),
            LanguageSpec("rust", True, 5, ["target"], ["Cargo.toml", "Cargo.lock"]),
            LanguageSpec("java", True, 5, ["target", ".gradle", "build"],
                         ["pom.xml", "build.gradle", "build.gradle.kts", ".mvn"]),
            LanguageSpec("nextjs", True, 1, [*node_patterns, ".next", "dist", "build", "out", ".cache"],
                         ["next.config.js", "next.config.ts", "next.config.mjs"]),
            LanguageSpec("vue", True, 2,
                         [*node_patterns, ".nuxt", "dist", "build", "out", ".cache", ".parcel-cache"],
                         ["nuxt.config.js", "nuxt.config.ts", "nuxt.config.mjs", "vue.config.js"]),
            LanguageSpec("php", True, 5, ["vendor"], ["composer.json", "composer.lock"]),
            LanguageSpec("ruby", True, 5, ["vendor/bundle"], ["Gemfile", "Gemfile.lock", "Rakefile"]),
            LanguageSpec("dotnet", True, 5, ["bin", "obj"],
                         ["*.csproj", "*.sln", "*.fsproj", "*.vbproj", "project.json"]),
            LanguageSpec("cpp", True, 5, ["cmake-build-*"], ["CMakeLists.txt", "Makefile", "configure", "configure.ac"]),
            LanguageSpec("flutter", True, 5, ["build", ".dart_tool"], ["pubspec.yaml", "pubspec.lock"]),
        ],
    )


def load_config(path: Path | str) -> Config:
    """Load and validate the YAML config at *path*.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"config file not found: {path}")
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    config = Config.from_dict(data)
    log.info("Loaded config from %s (%d languages)", path, len(config.languages))
    return config


def write_starter_config(path: Path | str, force: bool = False) -> Path | None:
    """Write the starter config to *path*.

    An existing file is only replaced with *force*, and is first renamed to
    ``<path>.<YYYYmmdd-HHMMSS>``.

    Returns:
        The backup path if an existing file was moved aside, else None.

    Raises:
        ConfigError: If the file exists and *force* is False, or on I/O errors.
    """
    path = Path(path)
    backup: Path | None = None
    try:
        if path.exists():
            if not force:
                raise ConfigError(f"config file already exists at {path}. Use --force to overwrite")
            backup = path.with_name(f"{path.name}.{datetime.now():%Y%m%d-%H%M%S}")
            path.rename(backup)
            log.info("Backed up existing config to %s", backup)

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            yaml.safe_dump(starter_config().to_dict(), default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
    except OSError as e:
        raise ConfigError(f"cannot write {path}: {e}") from e
    return backup


def build_registry(config: Config) -> LanguageRegistry:
    """Compile every configured language into a registry."""
    registry = LanguageRegistry()
    for spec in config.languages:
        registry.register(spec.to_rule())
    return registry


def build_scan_config(
    config: Config,
    *,
    scan_path: str | Path | None = None,
    max_depth: int | None = None,
    languages: Collection[str] | None = None,
) -> ScanConfig:
    """Combine the config file with command-line overrides.

    Args:
        scan_path: Overrides ``options.defaultScanPath``.
        max_depth: Overrides ``options.maxDepth`` when not None.
        languages: Restricts the scan to these language names.
    """
    root = scan_path if scan_path is not None else (config.options.default_scan_path or ".")
    depth = config.options.max_depth if max_depth is None else max_depth
    rules = build_registry(config).get_enabled(languages)
    return ScanConfig(
        root=expand_path(root),
        max_depth=depth,
        detect_language=config.options.detect_language,
        rules=tuple(rules),
    )

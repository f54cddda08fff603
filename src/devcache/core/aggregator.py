"""Per-project grouping of findings for the summary table."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from devcache.models.finding import Finding

NO_CACHE_LABEL = "(no cache directories)"


@dataclass(slots=True)
class CacheTypeSummary:
    """Totals for one cache pattern within one project."""

    label: str
    size_bytes: int = 0
    items: int = 0


@dataclass(slots=True)
class ProjectSummary:
    """One row of the summary table."""

    path: Path
    language: str = ""
    cache_types: list[CacheTypeSummary] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(c.size_bytes for c in self.cache_types)

    @property
    def total_items(self) -> int:
        return sum(c.items for c in self.cache_types)

    @property
    def labels(self) -> list[str]:
        return [c.label for c in self.cache_types]


def aggregate(findings: Iterable[Finding]) -> list[ProjectSummary]:
    """Group findings by project root, then by cache pattern.

    A project's status finding is dropped once the project has at least
    one cache match. Projects and their cache types are sorted largest
    first; the first non-empty language seen stands for the project.
    """
    findings = list(findings)
    with_cache = {_project_key(f) for f in findings if f.is_cache}

    groups: dict[Path, dict[str, CacheTypeSummary]] = {}
    languages: dict[Path, str] = {}
    for finding in findings:
        key = _project_key(finding)
        if not finding.is_cache and key in with_cache:
            continue

        label = finding.pattern or NO_CACHE_LABEL
        types = groups.setdefault(key, {})
        summary = types.setdefault(label, CacheTypeSummary(label))
        summary.size_bytes += finding.size_bytes
        summary.items += finding.items

        if finding.language and not languages.get(key):
            languages[key] = finding.language

    projects = [
        ProjectSummary(
            path=key,
            language=languages.get(key, ""),
            cache_types=sorted(types.values(), key=lambda c: (-c.size_bytes, c.label)),
        )
        for key, types in groups.items()
    ]
    projects.sort(key=lambda p: (-p.total_bytes, str(p.path)))
    return projects


def totals(projects: Iterable[ProjectSummary]) -> tuple[int, int]:
    """Return (total_bytes, total_items) over all *projects*."""
    size = items = 0
    for project in projects:
        size += project.total_bytes
        items += project.total_items
    return size, items


def _project_key(finding: Finding) -> Path:
    return finding.project_root or finding.path

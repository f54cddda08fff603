"""Finding and scan result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

NO_LANGUAGE = "no language found"


@dataclass(frozen=True, slots=True)
class Finding:
    """A reported fact about one directory.

    Either a cache match (``pattern`` set, sizes filled in) or a status
    report for a project root (``pattern`` empty, sizes zero).
    """

    path: Path
    project_root: Path | None = None
    size_bytes: int = 0
    items: int = 0
    latest_mtime: datetime | None = None
    pattern: str = ""
    language: str = ""
    error: str = ""

    @property
    def is_cache(self) -> bool:
        """Whether this finding is a removable cache directory."""
        return bool(self.pattern)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"path": str(self.path)}
        if self.project_root is not None:
            data["project_root"] = str(self.project_root)
        data["size_bytes"] = self.size_bytes
        data["items"] = self.items
        data["pattern"] = self.pattern
        data["language"] = self.language
        if self.error:
            data["error"] = self.error
        data["latest_mtime"] = self.latest_mtime.isoformat() if self.latest_mtime else None
        return data


@dataclass(slots=True)
class ScanResult:
    """Output of one tree scan."""

    findings: list[Finding] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

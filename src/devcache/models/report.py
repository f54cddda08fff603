"""Scan report dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from devcache.models.finding import Finding


@dataclass(slots=True)
class ScanReport:
    """A scan result plus the context it was produced in.

    This is what ``dev-cache scan --json`` prints.
    """

    scan_path: Path
    max_depth: int
    findings: list[Finding] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    hostname: str = ""
    os: str = ""
    arch: str = ""
    dry_run: bool = True
    when: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.findings)

    @property
    def cache_findings(self) -> list[Finding]:
        return [f for f in self.findings if f.is_cache]

    def to_dict(self) -> dict[str, Any]:
        return {
            "hostname": self.hostname,
            "os": self.os,
            "arch": self.arch,
            "dry_run": self.dry_run,
            "when": self.when.isoformat(),
            "scan_path": str(self.scan_path),
            "max_depth": self.max_depth,
            "total_bytes": self.total_bytes,
            "findings": [f.to_dict() for f in self.findings],
            "warnings": list(self.warnings),
        }

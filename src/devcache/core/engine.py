"""Scanning and cleaning orchestration engine."""

from __future__ import annotations

import logging
import platform
from pathlib import Path
from typing import Callable, Iterable

from devcache.core.scanner import scan_directory
from devcache.models.clean_result import CleanResult
from devcache.models.finding import Finding
from devcache.models.language import ScanConfig
from devcache.models.report import ScanReport
from devcache.utils import remove_directories

log = logging.getLogger(__name__)

ProgressCallback = Callable[[Path, str], None]  # (path, status_message)


class DevCacheEngine:
    """Runs scans for one configuration and cleans what they found."""

    def __init__(self, config: ScanConfig) -> None:
        self.config = config
        self._last_report: ScanReport | None = None

    @property
    def last_report(self) -> ScanReport | None:
        """The report of the most recent scan, if any."""
        return self._last_report

    def scan(self, dry_run: bool = True) -> ScanReport:
        """Scan the configured tree and wrap the result in a report."""
        result = scan_directory(self.config)
        report = ScanReport(
            scan_path=self.config.root,
            max_depth=self.config.max_depth,
            findings=result.findings,
            warnings=result.warnings,
            hostname=platform.node(),
            os=platform.system().lower(),
            arch=platform.machine(),
            dry_run=dry_run,
        )
        self._last_report = report
        return report

    def clean(
        self,
        findings: Iterable[Finding] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> CleanResult:
        """Delete cache directories and measure what was freed.

        Directories are removed one at a time; a failure is recorded and the
        rest are still attempted. Afterwards the tree is scanned again and
        whatever is still present at the deleted paths is subtracted from
        the freed total.

        Args:
            findings: Findings to delete. Only cache matches are acted on.
                If None, all cache matches of the last scan (scanning first
                if there was none).
            on_progress: Optional callback with (path, status) updates.
        """
        if findings is None:
            report = self._last_report or self.scan(dry_run=False)
            findings = report.cache_findings
        targets = [f for f in findings if f.is_cache]
        if not targets:
            return CleanResult()

        before = sum(f.size_bytes for f in targets)
        deleted, errors = remove_directories((f.path for f in targets), on_progress=on_progress)

        target_paths = {f.path for f in targets}
        after_report = self.scan(dry_run=False)
        after = sum(f.size_bytes for f in after_report.cache_findings if f.path in target_paths)

        freed = max(0, before - after)
        log.info("Deleted %d of %d directories, freed %d bytes", deleted, len(targets), freed)
        return CleanResult(requested=len(targets), deleted=deleted, freed_bytes=freed, errors=errors)

"""Depth-bounded, language-aware cache directory scanner.

The scanner walks a source tree in pre-order. Immediate children of the
scan root are depth 0 and are treated as project roots; everything deeper
is attributed to its depth-0 ancestor.

With language detection on, each project root is classified once from its
marker files and only that language's cache patterns are looked for inside
it. A project root without markers falls back to the full pattern set, and
directories below it (short of ``max_depth``) get a local classification of
their own so nested sub-projects are still recognised.

Matched cache directories are sized and never descended into. Every
project root ends up in the result, either through its own finding or
through findings attributed to it.

The scanner never deletes anything.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from devcache.core.classifier import ClassificationCache, LanguageClassifier
from devcache.core.matcher import NamePattern, first_match
from devcache.models.finding import NO_LANGUAGE, Finding, ScanResult
from devcache.models.language import ScanConfig
from devcache.utils import dir_info

log = logging.getLogger(__name__)

# Never classified; reported with an empty language when at depth 0.
EXCLUDED_FROM_DETECTION = frozenset({".git"})

# (path, depth, project_root)
_Node = tuple[str, int, str]


class TreeScanner:
    """One scan of one tree.

    All bookkeeping (classification cache, reported paths, project roots)
    lives on the instance, so a scanner is used for a single :meth:`run`.
    """

    def __init__(self, config: ScanConfig) -> None:
        self.config = config
        self._cache = ClassificationCache(LanguageClassifier(config.rules))
        self._findings: list[Finding] = []
        self._warnings: list[str] = []
        # Paths that already have a finding of their own
        self._reported: set[str] = set()
        # Project roots with at least one finding attributed to them
        self._attributed: set[str] = set()
        # Depth-0 directories in visit order
        self._project_roots: dict[str, None] = {}
        self._excluded_roots: set[str] = set()
        self._used = False

    def run(self) -> ScanResult:
        """Walk the tree and return the findings and warnings."""
        if self._used:
            raise RuntimeError("TreeScanner.run() can only be called once")
        self._used = True

        root = str(self.config.root)
        log.debug(
            "Scanning %s (max depth %d, language detection %s)",
            root,
            self.config.max_depth,
            "on" if self.config.detect_language else "off",
        )

        stack: list[_Node] = [(path, 0, path) for path in reversed(self._subdirs(root))]
        while stack:
            path, depth, project_root = stack.pop()
            if depth > self.config.max_depth:
                continue
            if not self._visit(path, depth, project_root):
                continue
            if depth < self.config.max_depth:
                children = self._subdirs(path)
                stack.extend((child, depth + 1, project_root) for child in reversed(children))

        if self.config.detect_language:
            self._report_remaining_roots()

        log.info(
            "Scan of %s finished: %d findings, %d warnings",
            root,
            len(self._findings),
            len(self._warnings),
        )
        return ScanResult(findings=list(self._findings), warnings=list(self._warnings))

    # ── traversal ────────────────────────────────────────────────────────

    def _subdirs(self, path: str) -> list[str]:
        """Sorted child directories of *path*, symlinks excluded."""
        try:
            with os.scandir(path) as it:
                return sorted(entry.path for entry in it if entry.is_dir(follow_symlinks=False))
        except OSError as e:
            message = f"cannot read directory {path}: {e}"
            log.warning("%s", message)
            self._warnings.append(message)
            return []

    def _visit(self, path: str, depth: int, project_root: str) -> bool:
        """Process one directory. Returns whether to descend into it."""
        name = os.path.basename(path)
        if depth == 0:
            self._project_roots.setdefault(path)

        language = ""
        if self.config.detect_language:
            excluded = name in EXCLUDED_FROM_DETECTION
            if depth == 0:
                if excluded:
                    self._excluded_roots.add(path)
                # A cache directory is not a project, whatever it contains
                if excluded or first_match(name, self.config.patterns) is not None:
                    self._cache.seed(path, "")
            language = self._resolve_language(path, depth, project_root, excluded)

        patterns = self._effective_patterns(language)
        matched = first_match(name, patterns)
        if matched is not None:
            self._report_match(path, project_root, matched, language)
            return False

        if self.config.detect_language and depth == 0 and not language:
            self._report_status(path, "")

        return True

    def _resolve_language(self, path: str, depth: int, project_root: str, excluded: bool) -> str:
        if project_root in self._excluded_roots:
            return ""
        language = self._cache.resolve(project_root)
        # Applies to this directory only; its children go back to the project root.
        if not language and 0 < depth < self.config.max_depth and not excluded:
            language = self._cache.resolve(path)
        return language

    def _effective_patterns(self, language: str) -> tuple[NamePattern, ...]:
        if language:
            return self.config.language_patterns.get(language, self.config.patterns)
        return self.config.patterns

    # ── reporting ────────────────────────────────────────────────────────

    def _report_match(self, path: str, project_root: str, pattern: NamePattern, language: str) -> None:
        if path in self._reported:
            return
        size, items, mtime, error = dir_info(path)
        if error:
            log.debug("Incomplete size for %s: %s", path, error)
        self._add(
            Finding(
                path=Path(path),
                project_root=Path(project_root),
                size_bytes=size,
                items=items,
                latest_mtime=mtime,
                pattern=pattern.text,
                # One pattern can belong to several languages, so the
                # detected language beats the static lookup.
                language=language or self.config.pattern_to_language.get(pattern.text, ""),
                error=error,
            ),
            project_root,
        )

    def _report_status(self, path: str, language: str) -> None:
        if path in self._reported:
            return
        if path in self._excluded_roots:
            label = ""
        else:
            label = language or NO_LANGUAGE
        self._add(Finding(path=Path(path), project_root=Path(path), language=label), path)

    def _report_remaining_roots(self) -> None:
        """Report project roots that ended the walk without any finding."""
        for root in self._project_roots:
            if root not in self._attributed:
                self._report_status(root, self._cache.get(root))

    def _add(self, finding: Finding, project_root: str) -> None:
        self._findings.append(finding)
        self._reported.add(str(finding.path))
        self._attributed.add(project_root)


def scan_directory(config: ScanConfig) -> ScanResult:
    """Scan ``config.root`` and return what can be reclaimed."""
    return TreeScanner(config).run()

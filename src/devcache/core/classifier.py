"""Marker-file based language classification."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from devcache.models.language import LanguageRule

log = logging.getLogger(__name__)


class LanguageClassifier:
    """Decides which language a directory belongs to from its marker files.

    Rules are checked in ascending priority; rules with equal priority keep
    the order they were configured in. Within a rule, markers are checked
    in order and the first marker present wins.
    """

    def __init__(self, rules: Iterable[LanguageRule]) -> None:
        # sorted() is stable, so equal priorities keep configuration order
        self._candidates = sorted(
            (r for r in rules if r.enabled and r.markers),
            key=lambda r: r.priority,
        )

    @property
    def candidates(self) -> list[LanguageRule]:
        """Rules in the order they are checked."""
        return list(self._candidates)

    def classify(self, directory: Path | str) -> str:
        """Return the language of *directory*, or ``""`` if none matches.

        Only the immediate entries are read, and directories never count
        as markers. An unreadable directory is treated as having no markers.
        """
        if not self._candidates:
            return ""
        try:
            with os.scandir(directory) as it:
                names = [entry.name for entry in it if not entry.is_dir()]
        except OSError as e:
            log.debug("Cannot read %s for language markers: %s", directory, e)
            return ""

        for rule in self._candidates:
            for marker in rule.markers:
                for name in names:
                    if marker.matches(name):
                        log.debug("Detected %s in %s (marker %s)", rule.name, directory, name)
                        return rule.name
        return ""


class ClassificationCache:
    """Per-scan memo of directory path -> language.

    Empty results are cached too, so a directory without markers is read
    only once. The first value stored for a path is final.
    """

    def __init__(self, classifier: LanguageClassifier) -> None:
        self._classifier = classifier
        self._results: dict[str, str] = {}

    def resolve(self, path: str) -> str:
        """Return the cached language for *path*, classifying it on first use."""
        try:
            return self._results[path]
        except KeyError:
            pass
        language = self._classifier.classify(path)
        self._results[path] = language
        return language

    def seed(self, path: str, language: str) -> None:
        """Record *language* for *path* without classifying it."""
        self._results.setdefault(path, language)

    def get(self, path: str, default: str = "") -> str:
        return self._results.get(path, default)

    def __contains__(self, path: str) -> bool:
        return path in self._results

    def __len__(self) -> int:
        return len(self._results)

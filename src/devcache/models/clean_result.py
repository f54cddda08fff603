"""Cleaning result dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class CleanResult:
    """Result of deleting cache directories."""

    requested: int = 0
    deleted: int = 0
    freed_bytes: int = 0
    errors: list[str] = field(default_factory=list)

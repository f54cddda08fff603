"""devcache data models."""

from devcache.models.language import DEFAULT_PRIORITY, LanguageRule, ScanConfig
from devcache.models.finding import NO_LANGUAGE, Finding, ScanResult
from devcache.models.report import ScanReport
from devcache.models.clean_result import CleanResult

__all__ = [
    "CleanResult",
    "DEFAULT_PRIORITY",
    "Finding",
    "LanguageRule",
    "NO_LANGUAGE",
    "ScanConfig",
    "ScanReport",
    "ScanResult",
]

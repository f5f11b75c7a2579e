"""
Exception hierarchy for aggregation and source failures.

Source failures propagate to the caller and abort the whole report; there is
no partial output mode. Malformed individual records are not represented
here because they are dropped where they are parsed.
"""

from typing import Optional


class FaithStatsError(Exception):
    """
    Base exception for faithstats errors.

    Provides consistent error handling with:
    - Error code for categorization
    - Optional details for debugging

    Example:
        raise FaithStatsError("Aggregation failed", details={"source": "anki"})
    """

    error_code: str = "faithstats_error"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}


class SourceUnavailableError(FaithStatsError):
    """
    Data source unavailable.

    Raised when a store cannot be opened or queried (missing database file,
    SQLite error, unreadable export directory).
    """

    error_code = "source_unavailable"

    def __init__(self, source: str, message: str, details: Optional[dict] = None):
        super().__init__(f"{source}: {message}", details={"source": source, **(details or {})})
        self.source = source


class GroupingKeyNotFoundError(FaithStatsError):
    """
    Referenced grouping key not found.

    Raised when an expected deck, note type or similar key is absent from a
    source, instead of silently returning empty results.
    """

    error_code = "grouping_key_not_found"

    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind} '{name}' not found", details={"kind": kind, "name": name})
        self.kind = kind
        self.name = name


class SeriesAlignmentError(FaithStatsError, AssertionError):
    """
    Dense series are not aligned to the same bucket period.

    A programming-contract failure: every merged series must be built from
    one BucketPeriod. Never caught inside the package.
    """

    error_code = "series_misaligned"

"""
Cross-Source Merge

Zips dense series that were built from the same BucketPeriod into one
composite record per bucket. Lengths and bucket keys are checked position by
position before zipping; a mismatch is a contract failure and raises
SeriesAlignmentError rather than truncating or padding.
"""

from operator import attrgetter
from typing import Any, Callable, List, Optional, Sequence, TypeVar

from ..exceptions import SeriesAlignmentError
from .periods import BucketPeriod

__all__ = ["merge_series", "check_alignment"]

M = TypeVar("M")

bucket_of = attrgetter("bucket")


def check_alignment(
    series: Sequence[Sequence[Any]],
    key: Callable[[Any], str] = bucket_of,
    period: Optional[BucketPeriod] = None,
) -> List[str]:
    """
    Verify that all series share length and bucket order.

    Args:
        series: Dense series to compare
        key: Extracts the bucket key from a record
        period: Reference period; defaults to the first series' keys

    Returns:
        The shared bucket keys

    Raises:
        SeriesAlignmentError: On any length or key mismatch
    """
    if period is not None:
        expected = list(period.bucket_keys)
    else:
        expected = [key(record) for record in series[0]]

    for index, records in enumerate(series):
        if len(records) != len(expected):
            raise SeriesAlignmentError(
                f"Series {index} has {len(records)} records, expected {len(expected)}",
                details={"series": index, "length": len(records), "expected": len(expected)},
            )
        for position, (record, bucket) in enumerate(zip(records, expected)):
            if key(record) != bucket:
                raise SeriesAlignmentError(
                    f"Series {index} position {position} has bucket {key(record)!r}, expected {bucket!r}",
                    details={"series": index, "position": position},
                )
    return expected


def merge_series(
    *series: Sequence[Any],
    combine: Callable[..., M],
    key: Callable[[Any], str] = bucket_of,
    period: Optional[BucketPeriod] = None,
) -> List[M]:
    """
    Merge aligned dense series into composite records.

    Args:
        *series: Two or more dense series from the same BucketPeriod
        combine: ``combine(bucket, *records)`` building the composite record
        key: Extracts the bucket key from a record
        period: Optional period to validate against

    Returns:
        One composite record per bucket, in bucket order

    Example:
        merged = merge_series(
            anki_days, reading_days, prayer_days,
            combine=FaithRecord.from_daily,
            period=period,
        )
    """
    if len(series) < 2:
        raise ValueError(f"merge_series needs at least two series, got {len(series)}")

    buckets = check_alignment(series, key=key, period=period)
    return [
        combine(bucket, *records)
        for bucket, records in zip(buckets, zip(*series))
    ]

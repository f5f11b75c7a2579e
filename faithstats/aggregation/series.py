"""
Dense Series Builder

Turns sparse per-bucket aggregates into dense series aligned to a
BucketPeriod. Iteration always follows the period's canonical key list, so
buckets without activity still surface with zero-filled metrics, and keys a
source returns outside the period are ignored.
"""

from itertools import accumulate
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, TypeVar

import structlog

from .periods import BucketPeriod

__all__ = [
    "iter_bucket_values",
    "build_dense_series",
    "fold_dense_series",
    "running_total",
]

logger = structlog.get_logger(__name__)

R = TypeVar("R")
C = TypeVar("C")


def _resolve_defaults(
    sparse_maps: Sequence[Mapping[str, Any]],
    defaults: Optional[Sequence[Any]],
) -> Tuple[Any, ...]:
    if defaults is None:
        return (0,) * len(sparse_maps)
    if len(defaults) != len(sparse_maps):
        raise ValueError(
            f"Expected {len(sparse_maps)} defaults, got {len(defaults)}"
        )
    return tuple(defaults)


def _log_foreign_keys(period: BucketPeriod, sparse_maps: Sequence[Mapping[str, Any]]) -> None:
    known = set(period.bucket_keys)
    for index, sparse in enumerate(sparse_maps):
        foreign = [key for key in sparse if key not in known]
        if foreign:
            logger.debug(
                "Ignoring keys outside bucket period",
                map_index=index,
                foreign_count=len(foreign),
                period_kind=period.kind,
            )


def iter_bucket_values(
    period: BucketPeriod,
    *sparse_maps: Mapping[str, Any],
    defaults: Optional[Sequence[Any]] = None,
) -> Iterator[Tuple[str, Tuple[Any, ...]]]:
    """
    Yield ``(bucket_key, values)`` for every bucket in chronological order.

    ``values`` holds one entry per sparse map, taken from that map or from
    the matching default (0 unless given) when the bucket is absent.
    """
    fill = _resolve_defaults(sparse_maps, defaults)
    _log_foreign_keys(period, sparse_maps)

    for key in period.bucket_keys:
        yield key, tuple(
            sparse.get(key, default) for sparse, default in zip(sparse_maps, fill)
        )


def build_dense_series(
    period: BucketPeriod,
    *sparse_maps: Mapping[str, Any],
    combine: Callable[..., R],
    defaults: Optional[Sequence[Any]] = None,
) -> List[R]:
    """
    Build one record per bucket from one or more sparse aggregates.

    Args:
        period: Canonical bucket period
        *sparse_maps: Mappings from bucket key to metric value(s)
        combine: ``combine(key, *values)`` returning the record for a bucket
        defaults: Zero value per sparse map (defaults to 0 for each)

    Returns:
        Exactly ``len(period)`` records in bucket order

    Example:
        series = build_dense_series(
            period, minutes_by_week,
            combine=lambda key, minutes: MinutesRecord(bucket=key, minutes=minutes),
            defaults=(0.0,),
        )
    """
    return [
        combine(key, *values)
        for key, values in iter_bucket_values(period, *sparse_maps, defaults=defaults)
    ]


def fold_dense_series(
    period: BucketPeriod,
    *sparse_maps: Mapping[str, Any],
    step: Callable[..., Tuple[R, C]],
    initial: C,
    defaults: Optional[Sequence[Any]] = None,
) -> List[R]:
    """
    Build a dense series while threading an accumulator through the buckets.

    ``step(carry, key, *values)`` returns ``(record, next_carry)`` and is
    called exactly once per bucket in chronological order, starting from
    ``initial``. Running totals such as cumulative matured passages are
    expressed as the carry, so they only reflect movement inside the window.
    """
    records: List[R] = []
    carry = initial
    for key, values in iter_bucket_values(period, *sparse_maps, defaults=defaults):
        record, carry = step(carry, key, *values)
        records.append(record)
    return records


def running_total(deltas: Iterable[int], initial: int = 0) -> List[int]:
    """Cumulative sums of ``deltas`` seeded at ``initial`` (which is not emitted)."""
    totals = accumulate(deltas, initial=initial)
    next(totals)
    return list(totals)

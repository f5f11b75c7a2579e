"""
Aggregation Engine Module
"""
from .classifier import (
    ClassificationUnit,
    ProgressState,
    QueueType,
    aggregate_by_group,
    classify,
    progress_state_expr,
)
from .merge import check_alignment, merge_series
from .periods import (
    BucketCalendar,
    BucketPeriod,
    day_key,
    generate_bucket_period,
    today_start_ms,
    week_start_key,
)
from .series import build_dense_series, fold_dense_series, iter_bucket_values, running_total

__all__ = [
    "BucketCalendar",
    "BucketPeriod",
    "generate_bucket_period",
    "week_start_key",
    "day_key",
    "today_start_ms",
    "iter_bucket_values",
    "build_dense_series",
    "fold_dense_series",
    "running_total",
    "QueueType",
    "ProgressState",
    "ClassificationUnit",
    "classify",
    "progress_state_expr",
    "aggregate_by_group",
    "check_alignment",
    "merge_series",
]

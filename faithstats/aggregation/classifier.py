"""
Progress State Classification

Classifies paired card progress into mutually exclusive states and
aggregates classified units by a grouping key.

Precedence (first match wins):
1. either card suspended      -> suspended
2. both cards new             -> unseen
3. both intervals >= 21 days  -> mature
4. both intervals >= 7 days   -> young
5. otherwise                  -> learning

Any suspended card suspends the whole unit while both cards must be new for
the unit to be unseen.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Dict, Iterable, Optional, Tuple

import polars as pl
import structlog

__all__ = [
    "QueueType",
    "ProgressState",
    "ProgressPair",
    "ClassificationUnit",
    "classify",
    "progress_state_expr",
    "aggregate_by_group",
    "MATURE_INTERVAL_DAYS",
    "YOUNG_INTERVAL_DAYS",
]

logger = structlog.get_logger(__name__)

MATURE_INTERVAL_DAYS = 21
YOUNG_INTERVAL_DAYS = 7


class QueueType(IntEnum):
    """Anki card queue values"""
    MANUALLY_BURIED = -3
    SIBLING_BURIED = -2
    SUSPENDED = -1
    NEW = 0
    LEARNING = 1
    REVIEW = 2
    DAY_LEARN_RELEARN = 3
    PREVIEW = 4


class ProgressState(str, Enum):
    """Unit progress state, declared in precedence order"""
    SUSPENDED = "suspended"
    UNSEEN = "unseen"
    MATURE = "mature"
    YOUNG = "young"
    LEARNING = "learning"


# (queue, interval_days)
ProgressPair = Tuple[int, int]


def classify(
    progress: Tuple[ProgressPair, ProgressPair],
    mature_days: int = MATURE_INTERVAL_DAYS,
    young_days: int = YOUNG_INTERVAL_DAYS,
) -> ProgressState:
    """
    Classify a pair of sub-unit progress descriptors.

    Args:
        progress: ``((queue, interval), (queue, interval))`` for both cards
        mature_days: Interval threshold for mature
        young_days: Interval threshold for young

    Returns:
        Exactly one ProgressState
    """
    (first_queue, first_ivl), (second_queue, second_ivl) = progress

    if QueueType.SUSPENDED in (first_queue, second_queue):
        return ProgressState.SUSPENDED
    if first_queue == QueueType.NEW and second_queue == QueueType.NEW:
        return ProgressState.UNSEEN
    if first_ivl >= mature_days and second_ivl >= mature_days:
        return ProgressState.MATURE
    if first_ivl >= young_days and second_ivl >= young_days:
        return ProgressState.YOUNG
    return ProgressState.LEARNING


def progress_state_expr(
    first_queue: str = "first_queue",
    first_interval: str = "first_interval",
    second_queue: str = "second_queue",
    second_interval: str = "second_interval",
    mature_days: int = MATURE_INTERVAL_DAYS,
    young_days: int = YOUNG_INTERVAL_DAYS,
) -> pl.Expr:
    """Vectorised equivalent of ``classify`` producing a ``state`` column."""
    q0, q1 = pl.col(first_queue), pl.col(second_queue)
    i0, i1 = pl.col(first_interval), pl.col(second_interval)

    return (
        pl.when((q0 == QueueType.SUSPENDED.value) | (q1 == QueueType.SUSPENDED.value))
        .then(pl.lit(ProgressState.SUSPENDED.value))
        .when((q0 == QueueType.NEW.value) & (q1 == QueueType.NEW.value))
        .then(pl.lit(ProgressState.UNSEEN.value))
        .when((i0 >= mature_days) & (i1 >= mature_days))
        .then(pl.lit(ProgressState.MATURE.value))
        .when((i0 >= young_days) & (i1 >= young_days))
        .then(pl.lit(ProgressState.YOUNG.value))
        .otherwise(pl.lit(ProgressState.LEARNING.value))
        .alias("state")
    )


@dataclass(frozen=True)
class ClassificationUnit:
    """One trackable item (a passage) with the progress of its two cards"""
    reference: str
    first: ProgressPair
    second: ProgressPair

    def classify(
        self,
        mature_days: int = MATURE_INTERVAL_DAYS,
        young_days: int = YOUNG_INTERVAL_DAYS,
    ) -> ProgressState:
        return classify((self.first, self.second), mature_days, young_days)


_UNIT_SCHEMA = {
    "reference": pl.Utf8,
    "first_queue": pl.Int64,
    "first_interval": pl.Int64,
    "second_queue": pl.Int64,
    "second_interval": pl.Int64,
}


def units_frame(units: Iterable[ClassificationUnit]) -> pl.DataFrame:
    """Flatten classification units into a polars frame."""
    rows = [
        (unit.reference, unit.first[0], unit.first[1], unit.second[0], unit.second[1])
        for unit in units
    ]
    return pl.DataFrame(rows, schema=_UNIT_SCHEMA, orient="row")


def aggregate_by_group(
    units: Iterable[ClassificationUnit],
    group_key: Callable[[str], Optional[str]],
    weight: Callable[[str], int],
    mature_days: int = MATURE_INTERVAL_DAYS,
    young_days: int = YOUNG_INTERVAL_DAYS,
) -> Dict[str, Dict[str, int]]:
    """
    Classify units and sum counts per group and state.

    Args:
        units: Units to aggregate
        group_key: Maps a reference to its group (e.g. book name), or None
        weight: Maps a reference to its sub-unit count (e.g. verses)
        mature_days: Interval threshold for mature
        young_days: Interval threshold for young

    Returns:
        ``{group: {"<state>_passages": n, "<state>_verses": n, ...}}`` with
        all ten counters present for every group. Units whose reference has
        no group are excluded.
    """
    frame = units_frame(units).with_columns(
        pl.col("reference").map_elements(group_key, return_dtype=pl.Utf8).alias("group"),
        pl.col("reference").map_elements(weight, return_dtype=pl.Int64).fill_null(0).alias("weight"),
        progress_state_expr(mature_days=mature_days, young_days=young_days),
    )

    ungrouped = frame.filter(pl.col("group").is_null()).height
    if ungrouped:
        logger.debug("Excluding units without a group", count=ungrouped)
    frame = frame.filter(pl.col("group").is_not_null())

    aggregations = []
    for state in ProgressState:
        is_state = pl.col("state") == state.value
        aggregations.append(
            is_state.sum().cast(pl.Int64).alias(f"{state.value}_passages")
        )
        aggregations.append(
            pl.when(is_state).then(pl.col("weight")).otherwise(0)
            .sum().cast(pl.Int64).alias(f"{state.value}_verses")
        )

    grouped = frame.group_by("group").agg(aggregations).sort("group")

    result: Dict[str, Dict[str, int]] = {}
    for row in grouped.iter_rows(named=True):
        result[row.pop("group")] = row
    return result

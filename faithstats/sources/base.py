"""
Shared source plumbing

SQLiteSource opens its store read-only with the bucket-key SQL functions of
its calendar. SessionLogSource covers stores whose rows are timed sessions
(start in unix seconds, duration in seconds) and derives the per-bucket
minutes operations from them.
"""

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import structlog
from sqlalchemy import func, select
from sqlalchemy.engine import Connection
from sqlalchemy.sql import ColumnElement, FromClause

from faithstats.aggregation.periods import BucketCalendar, BucketKind, BucketPeriod
from faithstats.aggregation.series import build_dense_series
from faithstats.config import get_settings
from faithstats.database.connection import open_database
from faithstats.models import MinutesRecord

logger = structlog.get_logger(__name__)

MS_PER_MINUTE = 60_000.0


def default_calendar() -> BucketCalendar:
    """Calendar built from the configured time settings."""
    return BucketCalendar.from_settings(get_settings().time)


def bucket_expr(kind: BucketKind, ms_column) -> ColumnElement:
    """SQL expression mapping a ms-since-epoch column to its bucket key."""
    if kind == "daily":
        return func.day_key(ms_column)
    if kind == "weekly":
        return func.week_key(ms_column)
    raise ValueError(f"Unknown window kind: {kind}")


class SQLiteSource:
    """Base class for sources backed by a SQLite file"""

    name = "sqlite"

    def __init__(self, db_path: Optional[str], calendar: Optional[BucketCalendar] = None):
        self.db_path = db_path
        self.calendar = calendar or default_calendar()

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        with open_database(self.db_path, self.name, self.calendar) as conn:
            yield conn


class SessionLogSource(SQLiteSource):
    """
    Source whose activity is a log of timed sessions.

    Subclasses provide ``sessions()`` returning the selectable, the start
    column (unix seconds), the duration column (seconds) and extra filters.
    """

    def sessions(self) -> Tuple[FromClause, ColumnElement, ColumnElement, Sequence[ColumnElement]]:
        raise NotImplementedError

    def _minutes(self, conn: Connection, period: BucketPeriod) -> Dict[str, float]:
        from_clause, start, duration, filters = self.sessions()
        start_ms = start * 1000
        bucket = bucket_expr(period.kind, start_ms)

        query = (
            select(bucket.label("bucket"), func.sum(duration).label("seconds"))
            .select_from(from_clause)
            .where(*filters, start_ms >= period.start_ms, start_ms < period.end_ms)
            .group_by(bucket)
        )
        rows = conn.execute(query).all()
        logger.debug("Session minutes queried", source=self.name, kind=period.kind, buckets=len(rows))
        return {row.bucket: (row.seconds or 0) / 60.0 for row in rows}

    def minutes(self, period: BucketPeriod) -> Dict[str, float]:
        """Sparse minutes per bucket key within ``period``."""
        with self.connect() as conn:
            return self._minutes(conn, period)

    def minutes_series(self, period: BucketPeriod) -> List[MinutesRecord]:
        """Dense minutes series, one record per bucket of ``period``."""
        return build_dense_series(
            period,
            self.minutes(period),
            combine=lambda key, minutes: MinutesRecord(bucket=key, minutes=minutes),
            defaults=(0.0,),
        )

    def today_minutes(self, now=None) -> float:
        """Minutes logged since the start of the current logical day."""
        from_clause, start, duration, filters = self.sessions()
        today_start = self.calendar.today_start_ms(now)

        query = (
            select(func.coalesce(func.sum(duration), 0))
            .select_from(from_clause)
            .where(*filters, start * 1000 >= today_start)
        )
        with self.connect() as conn:
            seconds = conn.execute(query).scalar_one()
        return seconds / 60.0

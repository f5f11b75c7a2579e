"""
KOReader reading log source.

Page reading sessions from KOReader's statistics database, restricted to
books whose title matches the configured pattern.
"""

from typing import Optional

from faithstats.aggregation.periods import BucketCalendar
from faithstats.config import get_settings
from faithstats.config.settings import ReadingSettings
from faithstats.database.models import Book, PageStat

from .base import SessionLogSource


class ReadingSource(SessionLogSource):
    """
    Bible reading time from KOReader.

    Example:
        source = ReadingSource(calendar=calendar)
        weeks = source.minutes_series(calendar.period("weekly"))
    """

    name = "koreader"

    def __init__(
        self,
        settings: Optional[ReadingSettings] = None,
        calendar: Optional[BucketCalendar] = None,
    ):
        self.settings = settings or get_settings().reading
        super().__init__(self.settings.db_path, calendar)

    def sessions(self):
        from_clause = PageStat.__table__.join(Book.__table__, Book.id == PageStat.id_book)
        filters = [Book.title.like(self.settings.title_pattern)]
        return from_clause, PageStat.start_time, PageStat.duration, filters

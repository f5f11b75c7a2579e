"""
Prayer log source.

Reads timed prayer sessions from a SQLite table whose table and column
names come from PrayerSettings.
"""

from typing import Optional

from faithstats.aggregation.periods import BucketCalendar
from faithstats.config import get_settings
from faithstats.config.settings import PrayerSettings
from faithstats.database.models import prayer_session_table

from .base import SessionLogSource


class PrayerSource(SessionLogSource):
    """Prayer time per bucket"""

    name = "prayer"

    def __init__(
        self,
        settings: Optional[PrayerSettings] = None,
        calendar: Optional[BucketCalendar] = None,
    ):
        self.settings = settings or get_settings().prayer
        super().__init__(self.settings.db_path, calendar)
        self.table = prayer_session_table(
            self.settings.table,
            self.settings.start_column,
            self.settings.duration_column,
        )

    def sessions(self):
        columns = self.table.c
        return (
            self.table,
            columns[self.settings.start_column],
            columns[self.settings.duration_column],
            [],
        )

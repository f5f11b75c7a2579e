"""
Reports

Entry points that compose the sources into finished reports. Every
windowed report builds exactly one BucketPeriod from one calendar and hands
that same period to each source, so merged series share bucket keys by
construction.
"""

from datetime import datetime
from typing import List, Optional

import structlog

from faithstats.aggregation.merge import merge_series
from faithstats.aggregation.periods import BucketCalendar, BucketKind, BucketPeriod
from faithstats.config import get_settings
from faithstats.config.settings import Settings
from faithstats.models import (
    AttendanceRecord,
    BibleStats,
    FaithRecord,
    FaithReport,
    FaithTodayStats,
    PlaceStats,
    StudyReport,
)
from faithstats.sources import AnkiSource, ArcSource, PrayerSource, ReadingSource

logger = structlog.get_logger(__name__)


def _calendar(settings: Settings) -> BucketCalendar:
    return BucketCalendar.from_settings(settings.time)


def _period(
    settings: Settings,
    calendar: BucketCalendar,
    kind: BucketKind,
    size: Optional[int],
    now: Optional[datetime],
) -> BucketPeriod:
    if size is None:
        size = settings.time.daily_window if kind == "daily" else settings.time.weekly_window
    return calendar.period(kind, size=size, now=now)


# =============================================================================
# ANKI
# =============================================================================

def get_bible_stats(settings: Optional[Settings] = None) -> BibleStats:
    """Per-book passage and verse counts for both testaments."""
    settings = settings or get_settings()
    return AnkiSource(settings.anki, _calendar(settings)).bible_stats()


def get_bible_references(settings: Optional[Settings] = None) -> List[str]:
    settings = settings or get_settings()
    return AnkiSource(settings.anki, _calendar(settings)).references()


def get_study_report(
    kind: BucketKind,
    size: Optional[int] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> StudyReport:
    """
    Anki study time and passage progress over a trailing window.

    Args:
        kind: "daily" or "weekly"
        size: Number of buckets (defaults from settings)
        now: Reference instant
        settings: Settings override

    Returns:
        StudyReport with one record per bucket and its summary
    """
    settings = settings or get_settings()
    calendar = _calendar(settings)
    period = _period(settings, calendar, kind, size, now)

    records = AnkiSource(settings.anki, calendar).progress_series(period)
    logger.info("Study report built", kind=kind, buckets=len(records))
    return StudyReport.build(kind, records)


def get_today_study_minutes(now: Optional[datetime] = None, settings: Optional[Settings] = None) -> float:
    settings = settings or get_settings()
    return AnkiSource(settings.anki, _calendar(settings)).today_minutes(now)


# =============================================================================
# FAITH (ALL SOURCES)
# =============================================================================

def get_faith_daily_stats(
    size: Optional[int] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> FaithReport:
    """
    Daily Anki, reading and prayer activity merged per day.

    Any source failure aborts the report.
    """
    settings = settings or get_settings()
    calendar = _calendar(settings)
    period = _period(settings, calendar, "daily", size, now)

    anki = AnkiSource(settings.anki, calendar).progress_series(period)
    reading = ReadingSource(settings.reading, calendar).minutes_series(period)
    prayer = PrayerSource(settings.prayer, calendar).minutes_series(period)

    records = merge_series(anki, reading, prayer, combine=FaithRecord.from_daily, period=period)
    logger.info("Faith daily report built", buckets=len(records))
    return FaithReport.build("daily", records)


def get_faith_weekly_stats(
    size: Optional[int] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> FaithReport:
    """
    Weekly Anki, reading, church attendance and prayer activity merged per
    week. Church minutes carry a Sunday-first per-day breakdown.

    Any source failure aborts the report.
    """
    settings = settings or get_settings()
    calendar = _calendar(settings)
    period = _period(settings, calendar, "weekly", size, now)

    anki = AnkiSource(settings.anki, calendar).progress_series(period)
    reading = ReadingSource(settings.reading, calendar).minutes_series(period)
    church = ArcSource(settings.arc, calendar).attendance(period)
    prayer = PrayerSource(settings.prayer, calendar).minutes_series(period)

    records = merge_series(
        anki, reading, church, prayer,
        combine=FaithRecord.from_weekly,
        period=period,
    )
    logger.info("Faith weekly report built", buckets=len(records))
    return FaithReport.build("weekly", records)


def get_faith_today_stats(
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> FaithTodayStats:
    """Minutes per source since the start of the current logical day."""
    settings = settings or get_settings()
    calendar = _calendar(settings)
    return FaithTodayStats(
        anki_minutes=AnkiSource(settings.anki, calendar).today_minutes(now),
        reading_minutes=ReadingSource(settings.reading, calendar).today_minutes(now),
        prayer_minutes=PrayerSource(settings.prayer, calendar).today_minutes(now),
    )


# =============================================================================
# ARC
# =============================================================================

def get_church_attendance(
    size: Optional[int] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> List[AttendanceRecord]:
    settings = settings or get_settings()
    calendar = _calendar(settings)
    period = _period(settings, calendar, "weekly", size, now)
    return ArcSource(settings.arc, calendar).attendance(period)


def get_top_places(
    limit: Optional[int] = None,
    days: Optional[int] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> List[PlaceStats]:
    """Places by hours over the trailing window, home excluded."""
    settings = settings or get_settings()
    return ArcSource(settings.arc, _calendar(settings)).top_places(limit=limit, days=days, now=now)

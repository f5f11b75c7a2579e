"""
Bucket Calendar and Period Generation

Computes the canonical, timezone-correct bucket keys for trailing day and week
windows and maps instants onto those keys.

A logical day starts at the rollover hour (04:00) in a fixed civil timezone,
so activity logged shortly after midnight counts toward the previous day.
Boundaries are localized per day, which keeps DST transition days at their
real 23 or 25 hour length.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Literal, Optional, Tuple

import pytz

__all__ = [
    "BucketKind",
    "BucketPeriod",
    "BucketCalendar",
    "DEFAULT_CALENDAR",
    "generate_bucket_period",
    "week_start_key",
    "day_key",
    "today_start_ms",
    "datetime_to_ms",
    "ms_to_datetime",
]

BucketKind = Literal["daily", "weekly"]

DEFAULT_TIMEZONE = "America/Chicago"
ROLLOVER_HOUR = 4
SUNDAY = 6  # datetime.weekday() numbering

DEFAULT_WINDOW_SIZES = {
    "daily": 30,
    "weekly": 12,
}

_EPOCH = datetime(1970, 1, 1, tzinfo=pytz.UTC)


def to_utc(instant: datetime) -> datetime:
    """Normalize an instant to UTC. Naive datetimes are taken to be UTC."""
    if instant.tzinfo is None:
        return pytz.UTC.localize(instant)
    return instant.astimezone(pytz.UTC)


def utcnow() -> datetime:
    return datetime.now(pytz.UTC)


def ms_to_datetime(ms: int) -> datetime:
    """Convert milliseconds since the epoch to an aware UTC datetime."""
    return _EPOCH + timedelta(milliseconds=ms)


def datetime_to_ms(instant: datetime) -> int:
    """Convert an instant to whole milliseconds since the epoch."""
    return (to_utc(instant) - _EPOCH) // timedelta(milliseconds=1)


@dataclass(frozen=True)
class BucketPeriod:
    """
    Ordered, fixed-length list of buckets covering a trailing window.

    Attributes:
        kind: "daily" or "weekly"
        start_ms: Window start, inclusive (ms since epoch)
        end_ms: Window end, exclusive (ms since epoch)
        bucket_keys: Chronological YYYY-MM-DD keys, one per bucket
    """
    kind: BucketKind
    start_ms: int
    end_ms: int
    bucket_keys: Tuple[str, ...]

    def __post_init__(self) -> None:
        keys = tuple(self.bucket_keys)
        object.__setattr__(self, "bucket_keys", keys)

        # ISO dates sort lexically in chronological order
        if any(earlier >= later for earlier, later in zip(keys, keys[1:])):
            raise ValueError("bucket_keys must be strictly increasing")
        if self.start_ms > self.end_ms:
            raise ValueError("start_ms must not be after end_ms")

    def __len__(self) -> int:
        return len(self.bucket_keys)

    def __contains__(self, key: object) -> bool:
        return key in self.bucket_keys

    @property
    def start(self) -> datetime:
        return ms_to_datetime(self.start_ms)

    @property
    def end(self) -> datetime:
        return ms_to_datetime(self.end_ms)


@dataclass(frozen=True)
class BucketCalendar:
    """
    Civil-time rules used to assign instants to buckets.

    Every period and every bucket key in one report must come from the same
    calendar, otherwise SQL-side keys and period keys stop matching.

    Example:
        calendar = BucketCalendar("America/Chicago", rollover_hour=4)
        period = calendar.period("weekly")
        key = calendar.week_start_key(visit.start_date)
    """
    timezone: str = DEFAULT_TIMEZONE
    rollover_hour: int = ROLLOVER_HOUR
    week_start_day: int = SUNDAY

    def __post_init__(self) -> None:
        if not 0 <= self.rollover_hour <= 23:
            raise ValueError(f"rollover_hour must be within 0-23, got {self.rollover_hour}")
        if not 0 <= self.week_start_day <= 6:
            raise ValueError(f"week_start_day must be within 0-6, got {self.week_start_day}")
        # Fail fast on unknown zone names
        pytz.timezone(self.timezone)

    @classmethod
    def from_settings(cls, time_settings) -> "BucketCalendar":
        """Build a calendar from TimeSettings."""
        return cls(
            timezone=time_settings.timezone,
            rollover_hour=time_settings.rollover_hour,
            week_start_day=time_settings.week_start_day,
        )

    @property
    def tz(self):
        return pytz.timezone(self.timezone)

    def logical_date(self, instant: datetime) -> date:
        """
        Local calendar date of an instant after applying the rollover rule.

        Args:
            instant: Any instant; naive values are read as UTC

        Returns:
            The local date, shifted back one day when the local hour is
            before the rollover hour
        """
        local = to_utc(instant).astimezone(self.tz)
        if local.hour < self.rollover_hour:
            local = local - timedelta(hours=24)
        return local.date()

    def week_start(self, day: date) -> date:
        """Most recent week-start date on or before ``day``."""
        days_since_start = (day.weekday() - self.week_start_day) % 7
        return day - timedelta(days=days_since_start)

    def day_key(self, instant: datetime) -> str:
        return self.logical_date(instant).isoformat()

    def week_start_key(self, instant: datetime) -> str:
        """
        Week bucket key for an instant.

        Converts to local time, applies the rollover, then steps back to the
        week start and formats as YYYY-MM-DD. Matches the keys produced by
        ``period("weekly")``.
        """
        return self.week_start(self.logical_date(instant)).isoformat()

    def weekday_offset(self, instant: datetime) -> int:
        """Days between the instant's week start and its logical date (0-6)."""
        return (self.logical_date(instant).weekday() - self.week_start_day) % 7

    def day_key_from_ms(self, ms: int) -> str:
        return self.day_key(ms_to_datetime(ms))

    def week_key_from_ms(self, ms: int) -> str:
        return self.week_start_key(ms_to_datetime(ms))

    def boundary(self, day: date) -> datetime:
        """UTC instant at which the logical ``day`` begins."""
        local = self.tz.localize(datetime.combine(day, time(hour=self.rollover_hour)))
        return local.astimezone(pytz.UTC)

    def boundary_ms(self, day: date) -> int:
        return datetime_to_ms(self.boundary(day))

    def today_start_ms(self, now: Optional[datetime] = None) -> int:
        """Start of the current logical day in ms since epoch."""
        return self.boundary_ms(self.logical_date(now or utcnow()))

    def period(
        self,
        kind: BucketKind,
        size: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> BucketPeriod:
        """
        Generate the bucket period for a trailing window.

        Daily windows cover ``[today - (size - 1) days, tomorrow)`` with the
        last bucket being logical today. Weekly windows cover ``size`` whole
        weeks, the last one containing logical today.

        Args:
            kind: "daily" or "weekly"
            size: Number of buckets (defaults: 30 daily, 12 weekly)
            now: Reference instant (defaults to the current time)

        Returns:
            BucketPeriod with half-open ms bounds and chronological keys

        Raises:
            ValueError: For an unknown kind or non-positive size
        """
        if kind not in DEFAULT_WINDOW_SIZES:
            raise ValueError(f"Unknown window kind: {kind}")
        if size is None:
            size = DEFAULT_WINDOW_SIZES[kind]
        if size <= 0:
            raise ValueError(f"Window size must be positive, got {size}")

        today = self.logical_date(now or utcnow())
        if kind == "daily":
            step = timedelta(days=1)
            last = today
        else:
            step = timedelta(weeks=1)
            last = self.week_start(today)

        first = last - step * (size - 1)
        starts = [first + step * i for i in range(size)]

        return BucketPeriod(
            kind=kind,
            start_ms=self.boundary_ms(first),
            end_ms=self.boundary_ms(last + step),
            bucket_keys=tuple(day.isoformat() for day in starts),
        )


DEFAULT_CALENDAR = BucketCalendar()


def generate_bucket_period(
    kind: BucketKind,
    size: Optional[int] = None,
    now: Optional[datetime] = None,
    calendar: Optional[BucketCalendar] = None,
) -> BucketPeriod:
    """Generate a trailing bucket period using ``calendar`` or the default one."""
    return (calendar or DEFAULT_CALENDAR).period(kind, size=size, now=now)


def week_start_key(instant: datetime, calendar: Optional[BucketCalendar] = None) -> str:
    """Week-start bucket key (Sunday, 04:00 rollover, America/Chicago by default)."""
    return (calendar or DEFAULT_CALENDAR).week_start_key(instant)


def day_key(instant: datetime, calendar: Optional[BucketCalendar] = None) -> str:
    return (calendar or DEFAULT_CALENDAR).day_key(instant)


def today_start_ms(now: Optional[datetime] = None, calendar: Optional[BucketCalendar] = None) -> int:
    return (calendar or DEFAULT_CALENDAR).today_start_ms(now)

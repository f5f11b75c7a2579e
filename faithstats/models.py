"""
Report Models

Serializable records produced by the aggregation engine:

Dense records (one per bucket):
- MinutesRecord: time spent per bucket (reading, prayer)
- ProgressRecord: study time plus matured/lost/cumulative passages (Anki)
- AttendanceRecord: time at a place with a per-weekday breakdown (Arc)

Composite records:
- FaithRecord: all sources merged for one bucket

Summaries and book statistics built on top of those records.
"""

from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel, Field, computed_field

from .aggregation.classifier import ProgressState

BucketKindField = Literal["daily", "weekly"]

COUNTER_FIELDS = tuple(
    f"{state.value}_{unit}" for unit in ("passages", "verses") for state in ProgressState
)


def _hours(minutes: float) -> float:
    return minutes / 60.0


def _average(total: float, count: int) -> float:
    return total / count if count else 0.0


# =============================================================================
# DENSE RECORDS
# =============================================================================

class MinutesRecord(BaseModel):
    """Minutes of activity in one bucket"""
    bucket: str
    minutes: float = 0.0


class ProgressRecord(MinutesRecord):
    """Study time and passage maturation in one bucket"""
    matured_passages: int = 0
    lost_passages: int = 0
    cumulative_passages: int = 0


class AttendanceRecord(MinutesRecord):
    """Minutes at a place in one week; ``daily_minutes`` starts at the week start"""
    daily_minutes: List[float] = Field(default_factory=lambda: [0.0] * 7)


# =============================================================================
# COMPOSITE RECORDS
# =============================================================================

class FaithRecord(BaseModel):
    """All activity sources merged for one bucket"""
    bucket: str

    # Anki Bible memorization
    anki_minutes: float = 0.0
    anki_matured_passages: int = 0
    anki_lost_passages: int = 0
    anki_cumulative_passages: int = 0

    # KOReader Bible reading
    reading_minutes: float = 0.0

    # Prayer log
    prayer_minutes: float = 0.0

    # Arc church attendance (weekly windows only)
    at_church_minutes: Optional[float] = None
    at_church_daily_minutes: Optional[List[float]] = None

    @computed_field
    @property
    def total_minutes(self) -> float:
        return (
            self.anki_minutes
            + self.reading_minutes
            + self.prayer_minutes
            + (self.at_church_minutes or 0.0)
        )

    @classmethod
    def from_daily(
        cls,
        bucket: str,
        anki: ProgressRecord,
        reading: MinutesRecord,
        prayer: MinutesRecord,
    ) -> "FaithRecord":
        return cls(
            bucket=bucket,
            anki_minutes=anki.minutes,
            anki_matured_passages=anki.matured_passages,
            anki_lost_passages=anki.lost_passages,
            anki_cumulative_passages=anki.cumulative_passages,
            reading_minutes=reading.minutes,
            prayer_minutes=prayer.minutes,
        )

    @classmethod
    def from_weekly(
        cls,
        bucket: str,
        anki: ProgressRecord,
        reading: MinutesRecord,
        church: AttendanceRecord,
        prayer: MinutesRecord,
    ) -> "FaithRecord":
        record = cls.from_daily(bucket, anki, reading, prayer)
        record.at_church_minutes = church.minutes
        record.at_church_daily_minutes = list(church.daily_minutes)
        return record


# =============================================================================
# SUMMARIES
# =============================================================================

class SourceSummary(BaseModel):
    """Time totals for one source over a window"""
    total_minutes: float
    total_hours: float
    average_minutes: float
    average_hours: float
    active_buckets: int

    @classmethod
    def from_minutes(cls, minutes: Sequence[float]) -> "SourceSummary":
        total = float(sum(minutes))
        average = _average(total, len(minutes))
        return cls(
            total_minutes=total,
            total_hours=_hours(total),
            average_minutes=average,
            average_hours=_hours(average),
            active_buckets=sum(1 for value in minutes if value > 0),
        )


class StudySummary(SourceSummary):
    """Study time and progress totals for Anki alone"""
    total_buckets: int
    total_matured_passages: int
    total_lost_passages: int
    net_progress: int

    @classmethod
    def from_records(cls, records: Sequence[ProgressRecord]) -> "StudySummary":
        base = SourceSummary.from_minutes([r.minutes for r in records])
        matured = sum(r.matured_passages for r in records)
        lost = sum(r.lost_passages for r in records)
        return cls(
            **base.model_dump(),
            total_buckets=len(records),
            total_matured_passages=matured,
            total_lost_passages=lost,
            net_progress=matured - lost,
        )


class StudyReport(BaseModel):
    """Anki study records for a window with summary"""
    kind: BucketKindField
    records: List[ProgressRecord]
    summary: StudySummary

    @classmethod
    def build(cls, kind: BucketKindField, records: List[ProgressRecord]) -> "StudyReport":
        return cls(kind=kind, records=records, summary=StudySummary.from_records(records))


class FaithSummary(BaseModel):
    """Per-source and combined totals over a window"""
    anki: SourceSummary
    reading: SourceSummary
    prayer: SourceSummary
    church: Optional[SourceSummary] = None

    anki_total_matured_passages: int
    anki_total_lost_passages: int
    anki_net_progress: int

    total_minutes: float
    total_hours: float
    average_minutes: float
    total_buckets: int
    buckets_with_any_activity: int

    @classmethod
    def from_records(cls, records: Sequence[FaithRecord]) -> "FaithSummary":
        has_church = any(r.at_church_minutes is not None for r in records)
        matured = sum(r.anki_matured_passages for r in records)
        lost = sum(r.anki_lost_passages for r in records)
        combined = float(sum(r.total_minutes for r in records))

        return cls(
            anki=SourceSummary.from_minutes([r.anki_minutes for r in records]),
            reading=SourceSummary.from_minutes([r.reading_minutes for r in records]),
            prayer=SourceSummary.from_minutes([r.prayer_minutes for r in records]),
            church=(
                SourceSummary.from_minutes([r.at_church_minutes or 0.0 for r in records])
                if has_church else None
            ),
            anki_total_matured_passages=matured,
            anki_total_lost_passages=lost,
            anki_net_progress=matured - lost,
            total_minutes=combined,
            total_hours=_hours(combined),
            average_minutes=_average(combined, len(records)),
            total_buckets=len(records),
            buckets_with_any_activity=sum(1 for r in records if r.total_minutes > 0),
        )


class FaithReport(BaseModel):
    """Merged faith activity for a window with summary"""
    kind: BucketKindField
    records: List[FaithRecord]
    summary: FaithSummary

    @classmethod
    def build(cls, kind: BucketKindField, records: List[FaithRecord]) -> "FaithReport":
        return cls(kind=kind, records=records, summary=FaithSummary.from_records(records))


class FaithTodayStats(BaseModel):
    """Combined minutes for the current logical day"""
    anki_minutes: float
    reading_minutes: float
    prayer_minutes: float

    @computed_field
    @property
    def total_minutes(self) -> float:
        return self.anki_minutes + self.reading_minutes + self.prayer_minutes

    @computed_field
    @property
    def total_hours(self) -> float:
        return _hours(self.total_minutes)


# =============================================================================
# BOOK STATISTICS
# =============================================================================

class StateCounts(BaseModel):
    """Passage and verse counts per progress state"""
    mature_passages: int = 0
    young_passages: int = 0
    learning_passages: int = 0
    unseen_passages: int = 0
    suspended_passages: int = 0
    mature_verses: int = 0
    young_verses: int = 0
    learning_verses: int = 0
    unseen_verses: int = 0
    suspended_verses: int = 0

    @computed_field
    @property
    def total_passages(self) -> int:
        return sum(getattr(self, f"{state.value}_passages") for state in ProgressState)

    @computed_field
    @property
    def total_verses(self) -> int:
        return sum(getattr(self, f"{state.value}_verses") for state in ProgressState)

    def add(self, other: "StateCounts") -> None:
        for name in COUNTER_FIELDS:
            setattr(self, name, getattr(self, name) + getattr(other, name))


class BookStats(StateCounts):
    """Counts for one book"""
    book: str


class AggregateStats(StateCounts):
    """Counts for a collection of books"""
    label: str
    book_stats: List[BookStats] = Field(default_factory=list)

    def add_book(self, stats: BookStats) -> None:
        self.add(stats)
        self.book_stats.append(stats)


class BibleStats(BaseModel):
    """Book statistics split by testament"""
    old_testament: AggregateStats = Field(
        default_factory=lambda: AggregateStats(label="Old Testament")
    )
    new_testament: AggregateStats = Field(
        default_factory=lambda: AggregateStats(label="New Testament")
    )

    @computed_field
    @property
    def grand_total(self) -> StateCounts:
        total = StateCounts()
        total.add(self.old_testament)
        total.add(self.new_testament)
        return total


class PlaceStats(BaseModel):
    """Time spent at a place"""
    place_name: str
    hours: float

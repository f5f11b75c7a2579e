"""
Arc Timeline Source

Models, loaders and statistics for Arc Timeline JSON exports.

Export layout:
    metadata.json           export summary
    places/<0-9A-F>.json    places sharded by the first hex character of id
    items/YYYY-MM.json      timeline items (visits and trips) per month

Each item is ``{"base": {...}, "visit": {...}}`` or ``{"base": {...},
"trip": {...}}``. Visits resolve to places through PlaceCache, which loads a
shard on the first lookup of an id it covers.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import polars as pl
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from faithstats.aggregation.periods import (
    BucketCalendar,
    BucketPeriod,
    datetime_to_ms,
    utcnow,
)
from faithstats.aggregation.series import build_dense_series
from faithstats.config import get_settings
from faithstats.config.settings import ArcSettings
from faithstats.exceptions import SourceUnavailableError
from faithstats.models import AttendanceRecord, PlaceStats

from .base import default_calendar

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]

PLACE_SHARDS = "0123456789ABCDEF"


# =============================================================================
# MODELS
# =============================================================================

class ArcModel(BaseModel):
    """camelCase JSON <-> snake_case attributes"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ExportStats(ArcModel):
    sample_count: int = 0
    item_count: int = 0
    place_count: int = 0


class Metadata(ArcModel):
    """Summary of an export session"""
    schema_version: str
    export_mode: Optional[str] = None
    export_type: Optional[str] = None
    session_start_date: Optional[datetime] = None
    session_finish_date: Optional[datetime] = None
    items_completed: bool = False
    places_completed: bool = False
    samples_completed: bool = False
    stats: ExportStats = Field(default_factory=ExportStats)


class Place(ArcModel):
    id: str
    name: str
    latitude: float = 0.0
    longitude: float = 0.0
    radius_mean: float = 0.0
    radius_sd: float = Field(default=0.0, alias="radiusSD")
    visit_count: int = 0
    visit_days: Optional[int] = None
    last_saved: Optional[datetime] = None
    is_stale: bool = False
    source: Optional[str] = None
    seconds_from_gmt: Optional[int] = Field(default=None, alias="secondsFromGMT")
    street_address: Optional[str] = None
    locality: Optional[str] = None
    country_code: Optional[str] = None
    last_visit_date: Optional[datetime] = None


class BaseItem(ArcModel):
    """Fields shared by visits and trips"""
    id: str
    start_date: datetime
    end_date: datetime
    is_visit: bool
    deleted: bool = False
    disabled: bool = False
    locked: bool = False
    last_saved: Optional[datetime] = None
    source: Optional[str] = None
    step_count: Optional[int] = None
    previous_item_id: Optional[str] = None
    next_item_id: Optional[str] = None


class VisitDetails(ArcModel):
    item_id: str
    place_id: Optional[str] = None
    latitude: float = 0.0
    longitude: float = 0.0
    radius_mean: float = 0.0
    radius_sd: float = Field(default=0.0, alias="radiusSD")
    confirmed_place: bool = False
    uncertain_place: bool = False
    street_address: Optional[str] = None


class TripDetails(ArcModel):
    item_id: str
    distance: float = 0.0
    speed: float = 0.0
    classified_activity_type: Optional[int] = None
    confirmed_activity_type: Optional[int] = None
    uncertain_activity_type: bool = False


class Item(ArcModel):
    """Timeline item: shared base plus exactly one of visit or trip"""
    base: BaseItem
    visit: Optional[VisitDetails] = None
    trip: Optional[TripDetails] = None

    @model_validator(mode="after")
    def check_variant(self) -> "Item":
        if (self.visit is None) == (self.trip is None):
            raise ValueError("item must have exactly one of 'visit' or 'trip'")
        return self

    @property
    def is_visit(self) -> bool:
        return self.visit is not None

    @property
    def is_trip(self) -> bool:
        return self.trip is not None

    @property
    def place_id(self) -> Optional[str]:
        return self.visit.place_id if self.visit else None

    @property
    def duration_seconds(self) -> float:
        return (self.base.end_date - self.base.start_date).total_seconds()


@dataclass
class ItemWithPlace:
    """Item with its resolved place (visits only)"""
    item: Item
    place: Optional[Place] = None


# =============================================================================
# LOADER
# =============================================================================

def _read_json(path: Path):
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise SourceUnavailableError("arc", f"cannot read {path}: {e}") from e


def _parse_entries(model, entries, path: Path) -> list:
    """Validate a list of JSON entries, skipping and logging malformed ones."""
    if not isinstance(entries, list):
        raise SourceUnavailableError("arc", f"{path} does not contain a JSON array")

    parsed = []
    for index, entry in enumerate(entries):
        try:
            parsed.append(model.model_validate(entry))
        except ValidationError as e:
            logger.warning(
                "Skipping malformed entry",
                file=path.name,
                index=index,
                errors=e.error_count(),
            )
    return parsed


def load_metadata(export_path: PathLike) -> Metadata:
    """Load ``metadata.json`` from an export directory."""
    path = Path(export_path) / "metadata.json"
    try:
        return Metadata.model_validate(_read_json(path))
    except ValidationError as e:
        raise SourceUnavailableError("arc", f"invalid metadata: {e}") from e


def load_places_file(export_path: PathLike, shard: str) -> List[Place]:
    """Load one place shard (0-9, A-F). A missing shard has no places."""
    path = Path(export_path) / "places" / f"{shard.upper()}.json"
    if not path.is_file():
        return []
    return _parse_entries(Place, _read_json(path), path)


def load_all_places(export_path: PathLike) -> List[Place]:
    places: List[Place] = []
    for shard in PLACE_SHARDS:
        places.extend(load_places_file(export_path, shard))
    return places


def load_items_for_month(export_path: PathLike, year_month: str) -> List[Item]:
    """Load items for one month ("2025-08"). A missing month has no items."""
    path = Path(export_path) / "items" / f"{year_month}.json"
    if not path.is_file():
        return []
    return _parse_entries(Item, _read_json(path), path)


def available_months(export_path: PathLike) -> List[str]:
    """Month keys of all item files, in chronological order."""
    items_dir = Path(export_path) / "items"
    if not items_dir.is_dir():
        return []
    return sorted(path.stem for path in items_dir.glob("*.json") if path.is_file())


def load_items(export_path: PathLike, months: Optional[Iterable[str]] = None) -> List[Item]:
    """
    Load items from every month file, or only from ``months``.

    Args:
        export_path: Export directory
        months: Optional month keys to restrict loading to

    Returns:
        Items in month order, file order within a month
    """
    available = available_months(export_path)
    if months is not None:
        wanted = set(months)
        available = [month for month in available if month in wanted]

    items: List[Item] = []
    for month in available:
        items.extend(load_items_for_month(export_path, month))
    logger.debug("Items loaded", months=len(available), items=len(items))
    return items


class PlaceCache:
    """
    Lazily loaded place lookup.

    The first lookup of an id loads the whole shard named by the id's first
    character, so later ids in that shard resolve without I/O and every item
    referencing a place shares one Place instance.
    """

    def __init__(self, export_path: PathLike):
        self.export_path = Path(export_path)
        self._places: Dict[str, Place] = {}
        self._loaded_shards = set()

    def get(self, place_id: str) -> Optional[Place]:
        if not place_id:
            return None
        if place_id not in self._places:
            shard = place_id[0].upper()
            if shard in self._loaded_shards:
                return None
            for place in load_places_file(self.export_path, shard):
                self._places.setdefault(place.id, place)
            self._loaded_shards.add(shard)
        place = self._places.get(place_id)
        if place is None:
            logger.debug("Place not found in export", place_id=place_id)
        return place

    def __len__(self) -> int:
        return len(self._places)


def load_items_with_places(
    export_path: PathLike,
    months: Optional[Iterable[str]] = None,
) -> List[ItemWithPlace]:
    """Load items and resolve the place of every visit."""
    cache = PlaceCache(export_path)
    return [
        ItemWithPlace(item=item, place=cache.get(item.place_id) if item.place_id else None)
        for item in load_items(export_path, months)
    ]


def months_between(start: datetime, end: datetime) -> List[str]:
    """Month keys from ``start`` to ``end`` inclusive, padded one month each side."""
    first = (start.replace(day=1) - timedelta(days=1)).replace(day=1)
    months = []
    current = first
    while current <= end + timedelta(days=31):
        months.append(current.strftime("%Y-%m"))
        current = (current.replace(day=1) + timedelta(days=32)).replace(day=1)
    return months


# =============================================================================
# STATISTICS
# =============================================================================

_VISIT_SCHEMA = {
    "place_name": pl.Utf8,
    "start_ms": pl.Int64,
    "bucket": pl.Utf8,
    "slot": pl.Int64,
    "minutes": pl.Float64,
}


class ArcSource:
    """
    Attendance and place statistics from an Arc export.

    Example:
        source = ArcSource(calendar=calendar)
        weeks = source.attendance(calendar.period("weekly"))
        top = source.top_places(limit=5)
    """

    name = "arc"

    def __init__(
        self,
        settings: Optional[ArcSettings] = None,
        calendar: Optional[BucketCalendar] = None,
    ):
        self.settings = settings or get_settings().arc
        self.calendar = calendar or default_calendar()

    @property
    def export_path(self) -> Path:
        if not self.settings.export_path:
            raise SourceUnavailableError(self.name, "export path is not configured")
        path = Path(self.settings.export_path).expanduser()
        if not path.is_dir():
            raise SourceUnavailableError(self.name, f"export directory not found: {path}")
        return path

    def visits(self, kind: str = "weekly", months: Optional[Iterable[str]] = None) -> pl.DataFrame:
        """
        Visits with a resolved place as a frame.

        Columns: place_name, start_ms, bucket (key of ``kind`` for the visit
        start), slot (weekday offset from the week start), minutes.
        """
        bucket_key = self.calendar.day_key if kind == "daily" else self.calendar.week_start_key
        rows = []
        for entry in load_items_with_places(self.export_path, months):
            if not entry.item.base.is_visit or entry.place is None:
                continue
            start = entry.item.base.start_date
            rows.append((
                entry.place.name,
                datetime_to_ms(start),
                bucket_key(start),
                self.calendar.weekday_offset(start),
                entry.item.duration_seconds / 60.0,
            ))
        return pl.DataFrame(rows, schema=_VISIT_SCHEMA, orient="row")

    def attendance(self, period: BucketPeriod, place_name: Optional[str] = None) -> List[AttendanceRecord]:
        """
        Dense attendance series for a place over ``period``.

        Args:
            period: Bucket period shared with the other sources
            place_name: Place to count (defaults to the configured church)

        Returns:
            One AttendanceRecord per bucket with total minutes and the
            per-weekday breakdown starting at the week start
        """
        place_name = place_name or self.settings.church_place_name
        months = months_between(period.start, period.end)
        frame = self.visits(period.kind, months).filter(pl.col("place_name") == place_name)

        per_slot = frame.group_by("bucket", "slot").agg(pl.col("minutes").sum())
        totals: Dict[str, float] = {}
        slots: Dict[str, List[float]] = {}
        for bucket, slot, minutes in per_slot.iter_rows():
            totals[bucket] = totals.get(bucket, 0.0) + minutes
            slots.setdefault(bucket, [0.0] * 7)[slot] += minutes

        logger.debug("Attendance computed", place=place_name, visits=frame.height, buckets=len(totals))
        return build_dense_series(
            period,
            totals,
            slots,
            combine=lambda key, minutes, daily: AttendanceRecord(
                bucket=key,
                minutes=minutes,
                daily_minutes=daily or [0.0] * 7,
            ),
            defaults=(0.0, None),
        )

    def top_places(
        self,
        limit: Optional[int] = None,
        days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[PlaceStats]:
        """
        Places ranked by hours spent over a trailing window.

        Args:
            limit: Maximum number of places (defaults to settings)
            days: Trailing window in days (defaults to 182)
            now: Reference instant

        Returns:
            PlaceStats sorted by hours descending, excluding the home place
        """
        if limit is None:
            limit = self.settings.top_places_limit
        if days is None:
            days = self.settings.top_places_days
        cutoff_ms = datetime_to_ms((now or utcnow()) - timedelta(days=days))

        ranked = (
            self.visits()
            .filter(
                (pl.col("start_ms") >= cutoff_ms)
                & (pl.col("place_name") != self.settings.home_place_name)
            )
            .group_by("place_name")
            .agg((pl.col("minutes").sum() / 60.0).alias("hours"))
            .sort(["hours", "place_name"], descending=[True, False])
            .head(limit)
        )
        return [PlaceStats(**row) for row in ranked.iter_rows(named=True)]

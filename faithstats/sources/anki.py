"""
Anki Source

Bible memorization statistics from an Anki collection:

- Book statistics: every passage note classified by the progress of its two
  cards and summed per book, laid over the Old/New Testament canon
- Study minutes per bucket from the review log
- Passage progress per bucket: reviews crossing the mature interval upwards
  (matured) or downwards (lost), with a running total over the window
"""

from datetime import datetime
from typing import Dict, List, Optional, Tuple

import structlog
from sqlalchemy import and_, case, func, select
from sqlalchemy.engine import Connection
from sqlalchemy.orm import aliased

from faithstats.aggregation.classifier import ClassificationUnit, QueueType, aggregate_by_group
from faithstats.aggregation.periods import BucketCalendar, BucketPeriod
from faithstats.aggregation.series import fold_dense_series
from faithstats.config import get_settings
from faithstats.config.settings import AnkiSettings
from faithstats.database.models import Card, Deck, Note, NoteType, Revlog
from faithstats.exceptions import GroupingKeyNotFoundError
from faithstats.models import BibleStats, BookStats, ProgressRecord

from .base import MS_PER_MINUTE, SQLiteSource, bucket_expr
from .bible import NEW_TESTAMENT, OLD_TESTAMENT
from .references import DEFAULT_PARSER, ReferenceParser

logger = structlog.get_logger(__name__)

UNIT_SEPARATOR = "\x1f"


class AnkiSource(SQLiteSource):
    """
    Anki collection reader for the configured deck and note type.

    Example:
        source = AnkiSource(calendar=calendar)
        stats = source.bible_stats()
        days = source.progress_series(calendar.period("daily"))
    """

    name = "anki"

    def __init__(
        self,
        settings: Optional[AnkiSettings] = None,
        calendar: Optional[BucketCalendar] = None,
        parser: Optional[ReferenceParser] = None,
    ):
        self.settings = settings or get_settings().anki
        super().__init__(self.settings.db_path, calendar)
        self.parser = parser or DEFAULT_PARSER

    # -------------------------------------------------------------------------
    # Grouping keys
    # -------------------------------------------------------------------------

    @property
    def deck_name(self) -> str:
        # "Bible::Verses" is accepted as the display form of nested decks
        return self.settings.deck_name.replace("::", UNIT_SEPARATOR)

    def deck_id(self, conn: Connection) -> int:
        """
        Look up the deck id by case-insensitive name.

        Raises:
            GroupingKeyNotFoundError: If the deck does not exist
        """
        deck_id = conn.execute(
            select(Deck.id).where(func.lower(Deck.name) == func.lower(self.deck_name))
        ).scalar()
        if deck_id is None:
            raise GroupingKeyNotFoundError("deck", self.deck_name.replace(UNIT_SEPARATOR, "::"))
        return deck_id

    def model_id(self, conn: Connection) -> int:
        """
        Look up the note type id by case-insensitive name.

        Raises:
            GroupingKeyNotFoundError: If the note type does not exist
        """
        model_id = conn.execute(
            select(NoteType.id).where(func.lower(NoteType.name) == func.lower(self.settings.note_type))
        ).scalar()
        if model_id is None:
            raise GroupingKeyNotFoundError("note type", self.settings.note_type)
        return model_id

    # -------------------------------------------------------------------------
    # Book statistics
    # -------------------------------------------------------------------------

    def _units(self, conn: Connection, deck_id: int, model_id: int) -> List[ClassificationUnit]:
        first, second = aliased(Card), aliased(Card)
        query = (
            select(Note.sfld, first.queue, first.ivl, second.queue, second.ivl)
            .select_from(Note)
            .join(first, and_(first.nid == Note.id, first.ord == 0, first.did == deck_id))
            .join(second, and_(second.nid == Note.id, second.ord == 1, second.did == deck_id))
            .where(Note.mid == model_id)
        )
        return [
            ClassificationUnit(reference=str(sfld), first=(q0, i0), second=(q1, i1))
            for sfld, q0, i0, q1, i1 in conn.execute(query)
        ]

    def book_stats(self) -> Dict[str, BookStats]:
        """
        Classify every passage and sum passages and verses per book.

        Returns:
            Mapping of canonical book name to its counts; books without
            passages are absent
        """
        with self.connect() as conn:
            units = self._units(conn, self.deck_id(conn), self.model_id(conn))

        grouped = aggregate_by_group(
            units,
            group_key=self.parser.book_name,
            weight=self.parser.verse_count,
            mature_days=self.settings.mature_interval_days,
            young_days=self.settings.young_interval_days,
        )
        logger.info("Book statistics computed", passages=len(units), books=len(grouped))
        return {book: BookStats(book=book, **counts) for book, counts in grouped.items()}

    def bible_stats(self) -> BibleStats:
        """Book statistics in canon order with zero-filled missing books."""
        books = self.book_stats()
        stats = BibleStats()
        for book in OLD_TESTAMENT:
            stats.old_testament.add_book(books.get(book) or BookStats(book=book))
        for book in NEW_TESTAMENT:
            stats.new_testament.add_book(books.get(book) or BookStats(book=book))
        return stats

    def references(self) -> List[str]:
        """Distinct passage references in the deck, sorted."""
        with self.connect() as conn:
            deck_id, model_id = self.deck_id(conn), self.model_id(conn)
            query = (
                select(Note.sfld)
                .distinct()
                .select_from(Note)
                .join(Card, Card.nid == Note.id)
                .where(Card.did == deck_id, Note.mid == model_id)
                .order_by(Note.sfld)
            )
            return [str(sfld) for sfld in conn.execute(query).scalars()]

    # -------------------------------------------------------------------------
    # Time series
    # -------------------------------------------------------------------------

    def _study_minutes(self, conn: Connection, period: BucketPeriod, deck_id: int) -> Dict[str, float]:
        bucket = bucket_expr(period.kind, Revlog.id)
        query = (
            select(bucket.label("bucket"), func.sum(Revlog.time).label("total_ms"))
            .select_from(Revlog)
            .join(Card, Card.id == Revlog.cid)
            .where(Card.did == deck_id, Revlog.id >= period.start_ms, Revlog.id < period.end_ms)
            .group_by(bucket)
        )
        return {row.bucket: (row.total_ms or 0) / MS_PER_MINUTE for row in conn.execute(query)}

    def _progress(
        self,
        conn: Connection,
        period: BucketPeriod,
        deck_id: int,
        model_id: int,
    ) -> Dict[str, Tuple[int, int]]:
        mature = self.settings.mature_interval_days
        bucket = bucket_expr(period.kind, Revlog.id)
        query = (
            select(
                bucket.label("bucket"),
                func.count(case((and_(Revlog.last_ivl < mature, Revlog.ivl >= mature), 1))).label("matured"),
                func.count(case((and_(Revlog.last_ivl >= mature, Revlog.ivl < mature), 1))).label("lost"),
            )
            .select_from(Revlog)
            .join(Card, Card.id == Revlog.cid)
            .join(Note, Note.id == Card.nid)
            .where(
                Card.did == deck_id,
                Note.mid == model_id,
                Card.ord == 0,
                Card.queue != QueueType.SUSPENDED.value,
                Revlog.id >= period.start_ms,
                Revlog.id < period.end_ms,
            )
            .group_by(bucket)
        )
        return {row.bucket: (row.matured, row.lost) for row in conn.execute(query)}

    def study_minutes(self, period: BucketPeriod) -> Dict[str, float]:
        """Sparse review minutes per bucket for cards in the deck."""
        with self.connect() as conn:
            return self._study_minutes(conn, period, self.deck_id(conn))

    def progress(self, period: BucketPeriod) -> Dict[str, Tuple[int, int]]:
        """Sparse ``(matured, lost)`` passage counts per bucket."""
        with self.connect() as conn:
            return self._progress(conn, period, self.deck_id(conn), self.model_id(conn))

    def progress_series(self, period: BucketPeriod) -> List[ProgressRecord]:
        """
        Dense study series over ``period``.

        ``cumulative_passages`` starts at zero at the first bucket and
        accumulates ``matured - lost``, so it describes movement inside the
        window rather than the collection's absolute mature count.
        """
        with self.connect() as conn:
            deck_id, model_id = self.deck_id(conn), self.model_id(conn)
            minutes = self._study_minutes(conn, period, deck_id)
            progress = self._progress(conn, period, deck_id, model_id)

        def step(cumulative: int, key: str, total_minutes: float, counts: Tuple[int, int]):
            matured, lost = counts
            cumulative += matured - lost
            record = ProgressRecord(
                bucket=key,
                minutes=total_minutes,
                matured_passages=matured,
                lost_passages=lost,
                cumulative_passages=cumulative,
            )
            return record, cumulative

        records = fold_dense_series(
            period, minutes, progress, step=step, initial=0, defaults=(0.0, (0, 0)),
        )
        logger.debug("Study series built", kind=period.kind, buckets=len(records))
        return records

    def today_minutes(self, now: Optional[datetime] = None) -> float:
        """Review minutes in the deck since the start of the logical day."""
        today_start = self.calendar.today_start_ms(now)
        with self.connect() as conn:
            deck_id = self.deck_id(conn)
            total_ms = conn.execute(
                select(func.coalesce(func.sum(Revlog.time), 0))
                .select_from(Revlog)
                .join(Card, Card.id == Revlog.cid)
                .where(Card.did == deck_id, Revlog.id >= today_start)
            ).scalar_one()
        return total_ms / MS_PER_MINUTE

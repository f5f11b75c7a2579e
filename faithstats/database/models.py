"""
Database Models - Activity Store Schemas

Read-side mappings of the external SQLite stores. Only the columns the
aggregations touch are mapped.

Anki collection (collection.anki2):
- Deck, NoteType: grouping keys looked up by name
- Note: one passage, ``sfld`` holds the reference ("John 3:16-18")
- Card: ord 0 and ord 1 cards of a note, with queue and interval
- Revlog: one review, ``id`` is the review time in ms since epoch

KOReader statistics (statistics.sqlite3):
- Book, PageStat: page reading sessions in seconds

Prayer log:
- Table and column names are configurable, see ``prayer_session_table``
"""

from typing import Optional

from sqlalchemy import Column, ForeignKey, Integer, MetaData, Table, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# =============================================================================
# ANKI
# =============================================================================

class AnkiBase(DeclarativeBase):
    """Base class for Anki collection tables"""
    pass


class Deck(AnkiBase):
    """Deck; nested deck names are joined with the unit separator (0x1f)"""

    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)


class NoteType(AnkiBase):
    """Note type (model)"""

    __tablename__ = "notetypes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)


class Note(AnkiBase):
    """Note; ``sfld`` is the sort field"""

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    mid: Mapped[int] = mapped_column(Integer, ForeignKey("notetypes.id"), index=True)
    sfld: Mapped[str] = mapped_column(Text, nullable=False)
    flds: Mapped[str] = mapped_column(Text, nullable=False, default="")


class Card(AnkiBase):
    """Card; ``ivl`` is the interval in days, ``queue`` a QueueType value"""

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    nid: Mapped[int] = mapped_column(Integer, ForeignKey("notes.id"), index=True)
    did: Mapped[int] = mapped_column(Integer, ForeignKey("decks.id"), index=True)
    ord: Mapped[int] = mapped_column(Integer, nullable=False)
    queue: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ivl: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Revlog(AnkiBase):
    """Review log entry; ``time`` is the answer time in ms"""

    __tablename__ = "revlog"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    cid: Mapped[int] = mapped_column(Integer, ForeignKey("cards.id"), index=True)
    ivl: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_ivl: Mapped[int] = mapped_column("lastIvl", Integer, nullable=False, default=0)
    time: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


# =============================================================================
# KOREADER
# =============================================================================

class KOReaderBase(DeclarativeBase):
    """Base class for KOReader statistics tables"""
    pass


class Book(KOReaderBase):
    __tablename__ = "book"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    authors: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class PageStat(KOReaderBase):
    """Time spent on one page; ``start_time`` is unix seconds"""

    __tablename__ = "page_stat_data"

    id_book: Mapped[int] = mapped_column(Integer, ForeignKey("book.id"), primary_key=True)
    page: Mapped[int] = mapped_column(Integer, primary_key=True)
    start_time: Mapped[int] = mapped_column(Integer, primary_key=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_pages: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


# =============================================================================
# PRAYER
# =============================================================================

def prayer_session_table(
    table: str = "prayer_session",
    start_column: str = "start_time",
    duration_column: str = "duration",
    metadata: Optional[MetaData] = None,
) -> Table:
    """
    Build the prayer session table for configured names.

    Both columns are exposed under their configured names and hold seconds.
    """
    return Table(
        table,
        metadata or MetaData(),
        Column("id", Integer, primary_key=True),
        Column(start_column, Integer, nullable=False),
        Column(duration_column, Integer, nullable=False, default=0),
    )

"""
Test Suite Configuration

Fixture stores are pinned to NOW (Wednesday 2025-10-22 13:00 America/Chicago,
18:00 UTC). The logical week starts Sunday 2025-10-19.
"""
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from faithstats.aggregation.periods import BucketCalendar, datetime_to_ms
from faithstats.config import Settings
from faithstats.config.settings import AnkiSettings, ArcSettings, PrayerSettings, ReadingSettings
from faithstats.database.models import (
    AnkiBase,
    Book,
    Card,
    Deck,
    KOReaderBase,
    Note,
    NoteType,
    PageStat,
    Revlog,
    prayer_session_table,
)

NOW = datetime(2025, 10, 22, 18, 0, tzinfo=timezone.utc)

BIBLE_DECK = 1
OTHER_DECK = 2
VERSE_MODEL = 10
BASIC_MODEL = 11


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def ms(*args) -> int:
    return datetime_to_ms(utc(*args))


def seconds(*args) -> int:
    return int(utc(*args).timestamp())


def _create(path: Path, base, rows) -> Path:
    engine = create_engine(f"sqlite:///{path}")
    base.metadata.create_all(engine)
    with Session(engine) as session:
        session.add_all(rows)
        session.commit()
    engine.dispose()
    return path


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def calendar() -> BucketCalendar:
    """Chicago, 04:00 rollover, Sunday week start"""
    return BucketCalendar()


@pytest.fixture
def anki_db(tmp_path) -> Path:
    """
    Anki collection with one passage per progress state.

    Reviews (logical Chicago days):
    - 2025-10-22: 2.5 minutes, one passage matured
    - 2025-10-20: 2.0 minutes, one passage lost
    """
    notes = [
        # (note id, reference, model, deck, (queue, ivl) ord 0, (queue, ivl) ord 1)
        (1, "John 3:16-18", VERSE_MODEL, BIBLE_DECK, (2, 30), (2, 25)),    # mature
        (2, "John 1:1", VERSE_MODEL, BIBLE_DECK, (2, 10), (2, 8)),         # young
        (3, "Genesis 1:1-3", VERSE_MODEL, BIBLE_DECK, (0, 0), (0, 0)),     # unseen
        (4, "Psalm 23", VERSE_MODEL, BIBLE_DECK, (-1, 30), (2, 30)),       # suspended
        (5, "Romans 8:28", VERSE_MODEL, BIBLE_DECK, (1, 1), (2, 30)),      # learning
        (6, "Unknown 1:1", VERSE_MODEL, BIBLE_DECK, (2, 30), (2, 30)),     # no book
        (7, "Acts 2:1", BASIC_MODEL, BIBLE_DECK, (2, 30), (2, 30)),        # other model
        (8, "Mark 1:1", VERSE_MODEL, OTHER_DECK, (2, 30), (2, 30)),        # other deck
    ]

    rows = [
        Deck(id=BIBLE_DECK, name="Bible\x1fVerses"),
        Deck(id=OTHER_DECK, name="Default"),
        NoteType(id=VERSE_MODEL, name="Bible Verse"),
        NoteType(id=BASIC_MODEL, name="Basic"),
    ]
    for nid, reference, mid, did, first, second in notes:
        rows.append(Note(id=nid, mid=mid, sfld=reference, flds=reference))
        rows.append(Card(id=nid * 10 + 1, nid=nid, did=did, ord=0, queue=first[0], ivl=first[1]))
        rows.append(Card(id=nid * 10 + 2, nid=nid, did=did, ord=1, queue=second[0], ivl=second[1]))

    rows += [
        # today 10:00 CDT, ord 0 crosses 21 upwards
        Revlog(id=ms(2025, 10, 22, 15, 0), cid=11, last_ivl=15, ivl=30, time=120_000),
        # today 11:00 CDT, ord 1 review only adds time
        Revlog(id=ms(2025, 10, 22, 16, 0), cid=12, last_ivl=10, ivl=25, time=30_000),
        # Tuesday 03:00 CDT rolls back to Monday 2025-10-20, crosses 21 downwards
        Revlog(id=ms(2025, 10, 21, 8, 0), cid=21, last_ivl=25, ivl=10, time=60_000),
        # Monday 10:00 CDT on a suspended card: time only
        Revlog(id=ms(2025, 10, 20, 15, 0), cid=41, last_ivl=10, ivl=30, time=60_000),
        # other deck, today
        Revlog(id=ms(2025, 10, 22, 15, 30), cid=81, last_ivl=10, ivl=30, time=600_000),
        # outside every window
        Revlog(id=ms(2024, 1, 1, 15, 0), cid=11, last_ivl=10, ivl=30, time=600_000),
    ]
    return _create(tmp_path / "collection.anki2", AnkiBase, rows)


@pytest.fixture
def koreader_db(tmp_path) -> Path:
    """
    KOReader statistics: 15 minutes of Bible reading today, 2 minutes on
    2025-10-20 and an unrelated book.
    """
    rows = [
        Book(id=1, title="The Holy Bible (ESV)"),
        Book(id=2, title="Dune"),
        PageStat(id_book=1, page=1, start_time=seconds(2025, 10, 22, 14, 0), duration=600, total_pages=1000),
        PageStat(id_book=1, page=2, start_time=seconds(2025, 10, 22, 14, 10), duration=300, total_pages=1000),
        PageStat(id_book=1, page=3, start_time=seconds(2025, 10, 21, 7, 30), duration=120, total_pages=1000),
        PageStat(id_book=2, page=1, start_time=seconds(2025, 10, 22, 15, 0), duration=900, total_pages=400),
    ]
    return _create(tmp_path / "statistics.sqlite3", KOReaderBase, rows)


@pytest.fixture
def prayer_db(tmp_path) -> Path:
    """
    Prayer log: 15 minutes today, 10 minutes Sunday 2025-10-19 morning and
    5 minutes at Sunday 03:30 CDT, which belongs to Saturday's week.
    """
    path = tmp_path / "prayer.sqlite3"
    table = prayer_session_table()
    engine = create_engine(f"sqlite:///{path}")
    table.metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(table.insert(), [
            {"id": 1, "start_time": seconds(2025, 10, 22, 12, 0), "duration": 900},
            {"id": 2, "start_time": seconds(2025, 10, 19, 13, 0), "duration": 600},
            {"id": 3, "start_time": seconds(2025, 10, 19, 8, 30), "duration": 300},
        ])
    engine.dispose()
    return path


CHURCH_ID = "C0FFEE00-0000-4000-8000-000000000001"
CAFE_ID = "CAFE0000-0000-4000-8000-000000000002"
HOME_ID = "1A2B3C4D-0000-4000-8000-000000000003"


def place(place_id: str, name: str) -> dict:
    return {
        "id": place_id,
        "name": name,
        "latitude": 38.6,
        "longitude": -90.2,
        "radiusMean": 20.0,
        "radiusSD": 5.0,
        "visitCount": 10,
        "lastSaved": "2025-10-20T00:00:00Z",
        "isStale": False,
        "source": "LocoKit2",
        "secondsFromGMT": -18000,
    }


def visit(item_id: str, place_id: str, start: str, end: str) -> dict:
    return {
        "base": {
            "id": item_id,
            "startDate": start,
            "endDate": end,
            "lastSaved": end,
            "source": "LocoKit2",
            "isVisit": True,
            "deleted": False,
            "disabled": False,
            "locked": False,
        },
        "visit": {
            "itemId": item_id,
            "placeId": place_id,
            "latitude": 38.6,
            "longitude": -90.2,
            "radiusMean": 20.0,
            "radiusSD": 5.0,
            "confirmedPlace": True,
            "uncertainPlace": False,
        },
    }


def trip(item_id: str, start: str, end: str) -> dict:
    return {
        "base": {
            "id": item_id,
            "startDate": start,
            "endDate": end,
            "isVisit": False,
        },
        "trip": {
            "itemId": item_id,
            "distance": 5200.0,
            "speed": 12.5,
            "uncertainActivityType": False,
        },
    }


@pytest.fixture
def arc_export(tmp_path) -> Path:
    """
    Arc export with church visits of 90 minutes on Sunday 2025-10-19 and
    Tuesday 2025-10-21, 90 minutes on Sunday 2025-10-12 and 60 minutes on
    Sunday 2025-09-28.
    """
    root = tmp_path / "arc"
    (root / "places").mkdir(parents=True)
    (root / "items").mkdir()

    (root / "metadata.json").write_text(json.dumps({
        "schemaVersion": "2.2.0",
        "exportMode": "full",
        "exportType": "json",
        "sessionStartDate": "2025-10-22T17:00:00Z",
        "sessionFinishDate": "2025-10-22T17:05:00Z",
        "itemsCompleted": True,
        "placesCompleted": True,
        "samplesCompleted": False,
        "stats": {"sampleCount": 0, "itemCount": 9, "placeCount": 3},
    }))
    (root / "places" / "C.json").write_text(json.dumps([
        place(CHURCH_ID, "Martin Luther Church"),
        place(CAFE_ID, "Coffee Shop"),
    ]))
    (root / "places" / "1.json").write_text(json.dumps([
        place(HOME_ID, "Home"),
        {"id": "1BAD0000", "latitude": "not a number"},
    ]))

    (root / "items" / "2025-10.json").write_text(json.dumps([
        visit("v1", CHURCH_ID, "2025-10-19T14:30:00Z", "2025-10-19T16:00:00Z"),
        visit("v2", CHURCH_ID, "2025-10-21T23:00:00Z", "2025-10-22T00:30:00Z"),
        visit("v3", CHURCH_ID, "2025-10-12T14:30:00Z", "2025-10-12T16:00:00Z"),
        visit("v4", HOME_ID, "2025-10-20T00:00:00Z", "2025-10-20T12:00:00Z"),
        visit("v5", CAFE_ID, "2025-10-15T14:00:00Z", "2025-10-15T16:00:00Z"),
        visit("v6", "FFFF0000-0000-4000-8000-000000000009", "2025-10-16T14:00:00Z", "2025-10-16T15:00:00Z"),
        trip("t1", "2025-10-19T14:00:00Z", "2025-10-19T14:30:00Z"),
        {"trip": {"itemId": "broken"}},
    ]))
    (root / "items" / "2025-09.json").write_text(json.dumps([
        visit("v7", CHURCH_ID, "2025-09-28T14:30:00Z", "2025-09-28T15:30:00Z"),
    ]))
    return root


@pytest.fixture
def test_settings(anki_db, koreader_db, prayer_db, arc_export) -> Settings:
    """Settings pointing every source at the fixture stores"""
    return Settings(
        anki=AnkiSettings(db_path=str(anki_db)),
        reading=ReadingSettings(db_path=str(koreader_db)),
        prayer=PrayerSettings(db_path=str(prayer_db)),
        arc=ArcSettings(export_path=str(arc_export)),
    )

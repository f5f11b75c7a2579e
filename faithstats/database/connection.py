"""
Database Connection Management

Read-only SQLite access with SQLAlchemy 2.0 for the activity stores.
Each connection gets the bucket-key SQL functions of the report's calendar
registered, so SQL-side grouping produces the same keys as BucketPeriod.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import structlog
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool

from faithstats.aggregation.periods import DEFAULT_CALENDAR, BucketCalendar
from faithstats.exceptions import SourceUnavailableError

logger = structlog.get_logger(__name__)


def _unicase(left: str, right: str) -> int:
    """Case-insensitive collation used by Anki's name columns."""
    a, b = left.casefold(), right.casefold()
    return (a > b) - (a < b)


def register_functions(dbapi_conn: sqlite3.Connection, calendar: BucketCalendar) -> None:
    """
    Register bucket-key functions and collations on a raw sqlite3 connection.

    SQL functions:
        day_key(ms)  -> logical day key (YYYY-MM-DD)
        week_key(ms) -> week-start key (YYYY-MM-DD)
    """
    def day_key(ms: Optional[int]) -> Optional[str]:
        return None if ms is None else calendar.day_key_from_ms(int(ms))

    def week_key(ms: Optional[int]) -> Optional[str]:
        return None if ms is None else calendar.week_key_from_ms(int(ms))

    dbapi_conn.create_function("day_key", 1, day_key, deterministic=True)
    dbapi_conn.create_function("week_key", 1, week_key, deterministic=True)
    dbapi_conn.create_collation("unicase", _unicase)


@contextmanager
def open_database(
    path: Optional[str],
    source: str,
    calendar: Optional[BucketCalendar] = None,
) -> Iterator[Connection]:
    """
    Open a SQLite database read-only.

    Args:
        path: Database file path
        source: Source name used in logs and errors
        calendar: Calendar backing the bucket-key SQL functions

    Yields:
        Connection: SQLAlchemy connection

    Raises:
        SourceUnavailableError: Missing file, or any SQLAlchemy error while
            connecting or querying

    Example:
        with open_database(settings.anki.db_path, "anki") as conn:
            rows = conn.execute(query).all()
    """
    if not path:
        raise SourceUnavailableError(source, "database path is not configured")

    db_file = Path(path).expanduser().resolve()
    if not db_file.is_file():
        raise SourceUnavailableError(source, f"database not found: {db_file}")

    calendar = calendar or DEFAULT_CALENDAR
    uri = f"{db_file.as_uri()}?mode=ro"

    def connect() -> sqlite3.Connection:
        return sqlite3.connect(uri, uri=True, check_same_thread=False)

    engine = create_engine("sqlite://", creator=connect, poolclass=NullPool)

    @event.listens_for(engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        register_functions(dbapi_conn, calendar)

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT count(*) FROM sqlite_master"))
            logger.debug("Database opened", source=source, path=str(db_file))
            yield conn
    except SQLAlchemyError as e:
        logger.error("Database error", source=source, error=str(e))
        raise SourceUnavailableError(source, str(getattr(e, "orig", None) or e)) from e
    finally:
        engine.dispose()
        logger.debug("Database closed", source=source)

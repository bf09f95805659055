"""Embedded single-file storage backed by SQLite.

Connections run in WAL mode with foreign keys enforced so that deleting a
search cascades to its awards. Timestamps are stored as ISO-8601 text, which
sorts and compares in time order.
"""

from collections.abc import Sequence
from pathlib import Path

from sqlalchemy import Select, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from flightpoints.core.time import Clock, utcnow
from flightpoints.db import common
from flightpoints.db.base import SqlAlchemyAdapter
from flightpoints.schemas.award import AwardRecord

MEMORY_PATH = ":memory:"
BUSY_TIMEOUT_SECONDS = 10.0


def _set_sqlite_pragmas(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_sqlite_engine(db_path: str) -> Engine:
    """Create an engine for ``db_path`` with the pragmas every connection needs."""
    if db_path == MEMORY_PATH:
        engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            f"sqlite:///{db_path}",
            connect_args={"check_same_thread": False, "timeout": BUSY_TIMEOUT_SECONDS},
        )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


class SqliteAdapter(SqlAlchemyAdapter):
    """Storage adapter for a local SQLite file (or ``:memory:``)."""

    backend_name = "SQLite"

    def __init__(self, db_path: str, cache_duration_days: int, clock: Clock = utcnow) -> None:
        super().__init__(cache_duration_days, clock)
        self.db_path = db_path

    def _create_engine(self) -> Engine:
        return create_sqlite_engine(self.db_path)

    def _location(self) -> str:
        return self.db_path

    def _cached_records(
        self, session: Session, query: Select, airlines: Sequence[str] | None
    ) -> list[AwardRecord]:
        results = common.to_cached_records(session.execute(query).all())
        if airlines:
            wanted = set(airlines)
            results = [award for award in results if award.airline in wanted]
        return results

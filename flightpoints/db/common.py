"""Query helpers shared by the storage adapters.

Every function takes an open ORM ``Session`` and leaves transaction control
to the caller, so the adapters decide where commits happen.
"""

import json
import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import Select, delete, inspect, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from flightpoints.core.exceptions import StorageError
from flightpoints.models import Award, Base, Search, SearchStatus
from flightpoints.schemas.award import AwardCreate, AwardRecord
from flightpoints.schemas.search import SearchRecord

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = (SearchStatus.COMPLETED, SearchStatus.FAILED)
DEFAULT_RECENT_LIMIT = 20


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise any SQLAlchemy error as a StorageError for ``operation``."""
    try:
        yield
    except SQLAlchemyError as exc:
        raise StorageError(operation, str(exc)) from exc


def create_schema(engine: Engine) -> None:
    """Create tables and indexes if absent.

    Two processes starting at once can both see a table missing and race on
    CREATE; the loser's error is ignored when the tables exist afterwards.
    """
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        existing = set(inspect(engine).get_table_names())
        if not set(Base.metadata.tables).issubset(existing):
            raise
        logger.info("Schema already created by another process")


def insert_search(
    session: Session,
    origin: str,
    destination: str,
    depart_date: str,
    cabin: str,
    airlines: Sequence[str],
    created_at: datetime,
) -> int:
    search = Search(
        origin=origin,
        destination=destination,
        depart_date=depart_date,
        cabin=cabin,
        airlines=json.dumps(list(airlines)),
        status=SearchStatus.PENDING.value,
        created_at=created_at,
    )
    session.add(search)
    session.flush()
    return search.id


def finish_search(session: Session, search_id: int, status: SearchStatus | str) -> bool:
    """Move a pending search to a terminal status.

    Returns False when no pending search with this id exists (missing id or
    already terminal); that case is not an error.
    """
    status = SearchStatus(status)
    if status not in TERMINAL_STATUSES:
        raise ValueError(f"Search status can only be set to completed or failed, not {status.value}")

    result = session.execute(
        update(Search)
        .where(Search.id == search_id, Search.status == SearchStatus.PENDING.value)
        .values(status=status.value)
    )
    if result.rowcount == 0:
        logger.warning("No pending search %s to mark %s", search_id, status.value)
        return False
    return True


def add_awards(session: Session, awards: Sequence[AwardCreate], created_at: datetime) -> None:
    session.add_all(Award(**award.model_dump(), created_at=created_at) for award in awards)
    session.flush()


def cached_awards_query(
    origin: str, destination: str, depart_date: str, cabin: str, cutoff: datetime
) -> Select:
    """Completed, fresh awards for a cache key, cheapest first."""
    return (
        select(Award, Search.created_at)
        .join(Search, Award.search_id == Search.id)
        .where(
            Award.origin == origin,
            Award.destination == destination,
            Award.depart_date == depart_date,
            Award.cabin == cabin,
            Search.status == SearchStatus.COMPLETED.value,
            Search.created_at > cutoff,
        )
        .order_by(Award.miles.asc(), Award.id.asc())
    )


def to_cached_records(rows: Sequence) -> list[AwardRecord]:
    records = []
    for award, search_created_at in rows:
        record = AwardRecord.model_validate(award)
        record.search_created_at = search_created_at
        records.append(record)
    return records


def recent_searches(session: Session, limit: int = DEFAULT_RECENT_LIMIT) -> list[SearchRecord]:
    searches = session.scalars(
        select(Search).order_by(Search.created_at.desc(), Search.id.desc()).limit(limit)
    )
    return [SearchRecord.model_validate(search) for search in searches]


def awards_for_search(session: Session, search_id: int) -> list[AwardRecord]:
    awards = session.scalars(
        select(Award)
        .where(Award.search_id == search_id)
        .order_by(Award.miles.asc(), Award.id.asc())
    )
    return [AwardRecord.model_validate(award) for award in awards]


def delete_searches_before(session: Session, cutoff: datetime) -> int:
    """Delete searches created strictly before ``cutoff``; awards go with them."""
    result = session.execute(
        delete(Search).where(Search.created_at < cutoff).execution_options(
            synchronize_session=False
        )
    )
    return result.rowcount or 0

"""Engine-independent half of the storage adapters.

Subclasses supply the engine and decide where the airline post-filter runs;
everything else (sessions, transactions, error wrapping) lives here.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

from sqlalchemy import Select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from flightpoints.core.exceptions import ConfigurationError
from flightpoints.core.time import Clock, retention_cutoff, utcnow
from flightpoints.db import common
from flightpoints.models.search import SearchStatus
from flightpoints.schemas.award import AwardCreate, AwardRecord
from flightpoints.schemas.search import SearchRecord

logger = logging.getLogger(__name__)


class SqlAlchemyAdapter(ABC):
    backend_name = "SQL"

    def __init__(self, cache_duration_days: int, clock: Clock = utcnow) -> None:
        self.cache_duration_days = cache_duration_days
        self.clock = clock
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @abstractmethod
    def _create_engine(self) -> Engine:
        """Build the engine; nothing is connected until the schema is created."""

    @abstractmethod
    def _location(self) -> str:
        """Where the data lives, safe to log."""

    @abstractmethod
    def _cached_records(
        self, session: Session, query: Select, airlines: Sequence[str] | None
    ) -> list[AwardRecord]:
        """Run the cache query for ``airlines``; an empty selection means all airlines."""

    def _session(self) -> Session:
        if self._session_factory is None:
            raise ConfigurationError("Database not initialized. Call initialize() first.")
        return self._session_factory()

    def initialize(self) -> None:
        if self._engine is not None:
            return

        with common.storage_errors("initialize"):
            engine = self._create_engine()
            try:
                common.create_schema(engine)
            except Exception:
                engine.dispose()
                raise

        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine, autoflush=False, expire_on_commit=False
        )
        logger.info("%s database initialized at %s", self.backend_name, self._location())

    def create_search(
        self,
        origin: str,
        destination: str,
        depart_date: str,
        cabin: str,
        airlines: Sequence[str],
    ) -> int:
        with common.storage_errors("create_search"), self._session() as session:
            with session.begin():
                return common.insert_search(
                    session, origin, destination, depart_date, cabin, airlines, self.clock()
                )

    def update_search_status(self, search_id: int, status: SearchStatus | str) -> bool:
        with common.storage_errors("update_search_status"), self._session() as session:
            with session.begin():
                return common.finish_search(session, search_id, status)

    def insert_awards(self, awards: Sequence[AwardCreate]) -> None:
        if not awards:
            return
        with common.storage_errors("insert_awards"), self._session() as session:
            # Rolled back as a whole if any row fails
            with session.begin():
                common.add_awards(session, awards, self.clock())

    def find_cached_results(
        self,
        origin: str,
        destination: str,
        depart_date: str,
        cabin: str,
        airlines: Sequence[str] | None = None,
    ) -> list[AwardRecord]:
        cutoff = retention_cutoff(self.clock(), self.cache_duration_days)
        query = common.cached_awards_query(origin, destination, depart_date, cabin, cutoff)
        with common.storage_errors("find_cached_results"), self._session() as session:
            return self._cached_records(session, query, airlines)

    def get_recent_searches(self, limit: int = common.DEFAULT_RECENT_LIMIT) -> list[SearchRecord]:
        with common.storage_errors("get_recent_searches"), self._session() as session:
            return common.recent_searches(session, limit)

    def get_awards_by_search_id(self, search_id: int) -> list[AwardRecord]:
        with common.storage_errors("get_awards_by_search_id"), self._session() as session:
            return common.awards_for_search(session, search_id)

    def cleanup_old_data(self) -> int:
        cutoff = retention_cutoff(self.clock(), self.cache_duration_days)
        with common.storage_errors("cleanup_old_data"), self._session() as session:
            with session.begin():
                deleted = common.delete_searches_before(session, cutoff)

        logger.info(
            "Cleaned up %d old search records (older than %d days)",
            deleted,
            self.cache_duration_days,
        )
        return deleted

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None

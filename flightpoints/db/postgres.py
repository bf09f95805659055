"""Client/server storage backed by PostgreSQL through psycopg."""

from collections.abc import Sequence

from sqlalchemy import Select, create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session

from flightpoints.core.time import Clock, utcnow
from flightpoints.db import common
from flightpoints.db.base import SqlAlchemyAdapter
from flightpoints.models import Award
from flightpoints.schemas.award import AwardRecord


class PostgresAdapter(SqlAlchemyAdapter):
    """Storage adapter for a PostgreSQL database.

    The airline post-filter is evaluated server-side; results are the same
    rows, in the same order, as the SQLite adapter returns.
    """

    backend_name = "PostgreSQL"

    def __init__(self, url: str, cache_duration_days: int, clock: Clock = utcnow) -> None:
        super().__init__(cache_duration_days, clock)
        self.url = url

    def _create_engine(self) -> Engine:
        return create_engine(self.url, pool_pre_ping=True)

    def _location(self) -> str:
        return make_url(self.url).render_as_string(hide_password=True)

    def _cached_records(
        self, session: Session, query: Select, airlines: Sequence[str] | None
    ) -> list[AwardRecord]:
        if airlines:
            query = query.where(Award.airline.in_(list(airlines)))
        return common.to_cached_records(session.execute(query).all())

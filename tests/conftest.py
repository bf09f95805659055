"""Pytest configuration and fixtures for flightpoints tests."""

import os
from collections.abc import Generator, Sequence
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from flightpoints.api.deps import get_fetcher
from flightpoints.db.adapter import StorageAdapter
from flightpoints.db.postgres import PostgresAdapter
from flightpoints.db.sqlite import SqliteAdapter
from flightpoints.main import create_app
from flightpoints.models import Base, SearchStatus
from flightpoints.schemas.award import AwardCreate
from flightpoints.schemas.search import AwardSearchResult

# PostgreSQL variants of the storage tests run only when this is set
TEST_POSTGRES_URL = os.environ.get("TEST_POSTGRES_URL", "")

START = datetime(2025, 5, 20, 12, 0, 0)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(START)


@pytest.fixture
def adapter(tmp_path, clock: FrozenClock) -> Generator[SqliteAdapter, None, None]:
    """An initialized SQLite adapter on a fresh file."""
    sqlite_adapter = SqliteAdapter(str(tmp_path / "flights.db"), cache_duration_days=5, clock=clock)
    sqlite_adapter.initialize()
    try:
        yield sqlite_adapter
    finally:
        sqlite_adapter.dispose()


@pytest.fixture(params=["sqlite", "postgres"])
def storage(request, tmp_path, clock: FrozenClock) -> Generator[StorageAdapter, None, None]:
    """Each storage backend in turn, initialized on an empty schema."""
    if request.param == "postgres":
        if not TEST_POSTGRES_URL:
            pytest.skip("TEST_POSTGRES_URL not set")
        backend = PostgresAdapter(TEST_POSTGRES_URL, cache_duration_days=5, clock=clock)
        backend.initialize()
        Base.metadata.drop_all(bind=backend._engine)
        Base.metadata.create_all(bind=backend._engine)
    else:
        backend = SqliteAdapter(str(tmp_path / "flights.db"), cache_duration_days=5, clock=clock)
        backend.initialize()
    try:
        yield backend
    finally:
        if request.param == "postgres":
            Base.metadata.drop_all(bind=backend._engine)
        backend.dispose()


def make_award(search_id: int, airline: str, miles: int, **overrides) -> AwardCreate:
    fields = {
        "search_id": search_id,
        "airline": airline,
        "flight_number": f"{airline.upper()}100",
        "origin": "JFK",
        "destination": "LHR",
        "depart_date": "2025-06-01",
        "depart_time": "18:30",
        "arrive_time": "06:45",
        "cabin": "business",
        "miles": miles,
        "taxes": 120.5,
        "available_seats": 2,
    }
    fields.update(overrides)
    return AwardCreate(**fields)


def completed_search(
    storage: StorageAdapter,
    awards: Sequence[tuple[str, int]],
    origin: str = "JFK",
    destination: str = "LHR",
    depart_date: str = "2025-06-01",
    cabin: str = "business",
) -> int:
    """Create a search, store ``(airline, miles)`` awards for it and complete it."""
    search_id = storage.create_search(
        origin, destination, depart_date, cabin, [airline for airline, _ in awards]
    )
    storage.insert_awards(
        [
            make_award(
                search_id,
                airline,
                miles,
                origin=origin,
                destination=destination,
                depart_date=depart_date,
                cabin=cabin,
            )
            for airline, miles in awards
        ]
    )
    storage.update_search_status(search_id, SearchStatus.COMPLETED)
    return search_id


class FakeFetcher:
    """Award fetcher returning canned results and recording its calls."""

    def __init__(self, miles_by_airline: dict[str, int] | None = None, error: Exception | None = None):
        self.miles_by_airline = miles_by_airline if miles_by_airline is not None else {"ba": 60000, "ac": 45000}
        self.error = error
        self.calls: list[tuple] = []

    async def __call__(self, origin, destination, depart_date, cabin, airlines):
        self.calls.append((origin, destination, depart_date, cabin, list(airlines)))
        if self.error is not None:
            raise self.error
        return [
            AwardSearchResult(
                airline=airline,
                flight_number=f"{airline.upper()}1",
                origin=origin,
                destination=destination,
                depart_date=depart_date,
                cabin=cabin,
                miles=miles,
            )
            for airline, miles in self.miles_by_airline.items()
            if airline in airlines
        ]


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def client(adapter: SqliteAdapter, fetcher: FakeFetcher) -> Generator[TestClient, None, None]:
    """API client backed by the test adapter and the fake fetcher."""
    app = create_app(adapter)
    app.dependency_overrides[get_fetcher] = lambda: fetcher
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(name="make_award")
def make_award_fixture():
    return make_award


@pytest.fixture(name="completed_search")
def completed_search_fixture():
    return completed_search


@pytest.fixture(name="fake_fetcher")
def fake_fetcher_factory():
    return FakeFetcher

"""Behaviour every storage backend must share."""

import json

import pytest

from flightpoints.core.exceptions import ConfigurationError, StorageError
from flightpoints.db.base import SqlAlchemyAdapter
from flightpoints.db.postgres import PostgresAdapter
from flightpoints.db.sqlite import SqliteAdapter
from flightpoints.models import SearchStatus


class TestSearchLifecycle:
    def test_create_search_starts_pending(self, storage):
        search_id = storage.create_search("JFK", "LHR", "2025-06-01", "business", ["ba", "ac"])

        [search] = storage.get_recent_searches()
        assert search.id == search_id
        assert search.status == SearchStatus.PENDING
        assert search.airlines == ["ba", "ac"]
        assert search.depart_date == "2025-06-01"

    def test_ids_are_unique_and_increasing(self, storage):
        first = storage.create_search("JFK", "LHR", "2025-06-01", "economy", ["ba"])
        second = storage.create_search("JFK", "LHR", "2025-06-01", "economy", ["ba"])
        assert second > first

    def test_complete_pending_search(self, storage):
        search_id = storage.create_search("JFK", "LHR", "2025-06-01", "economy", ["ba"])

        assert storage.update_search_status(search_id, SearchStatus.COMPLETED) is True
        assert storage.get_recent_searches()[0].status == SearchStatus.COMPLETED

    def test_accepts_plain_string_status(self, storage):
        search_id = storage.create_search("JFK", "LHR", "2025-06-01", "economy", ["ba"])

        assert storage.update_search_status(search_id, "failed") is True
        assert storage.get_recent_searches()[0].status == SearchStatus.FAILED

    def test_terminal_status_is_final(self, storage):
        search_id = storage.create_search("JFK", "LHR", "2025-06-01", "economy", ["ba"])
        storage.update_search_status(search_id, SearchStatus.FAILED)

        assert storage.update_search_status(search_id, SearchStatus.COMPLETED) is False
        assert storage.get_recent_searches()[0].status == SearchStatus.FAILED

    def test_missing_search_is_silent_noop(self, storage):
        assert storage.update_search_status(424242, SearchStatus.COMPLETED) is False

    def test_rejects_pending_as_target_status(self, storage):
        search_id = storage.create_search("JFK", "LHR", "2025-06-01", "economy", ["ba"])
        with pytest.raises(ValueError):
            storage.update_search_status(search_id, SearchStatus.PENDING)

    def test_recent_searches_newest_first_and_limited(self, storage, clock):
        ids = []
        for _ in range(4):
            ids.append(storage.create_search("JFK", "LHR", "2025-06-01", "economy", ["ba"]))
            clock.advance(minutes=1)

        recent = storage.get_recent_searches(limit=3)
        assert [s.id for s in recent] == list(reversed(ids))[:3]

    def test_recent_searches_default_limit(self, storage):
        for _ in range(25):
            storage.create_search("JFK", "LHR", "2025-06-01", "economy", ["ba"])
        assert len(storage.get_recent_searches()) == 20


class TestAwardWrites:
    def test_empty_batch_is_noop(self, storage):
        storage.insert_awards([])
        assert storage.get_recent_searches() == []

    def test_awards_by_search_sorted_by_miles(self, storage, make_award):
        search_id = storage.create_search("JFK", "LHR", "2025-06-01", "business", ["ba"])
        storage.insert_awards(
            [make_award(search_id, "ba", miles) for miles in (90000, 30000, 60000)]
        )

        awards = storage.get_awards_by_search_id(search_id)
        assert [a.miles for a in awards] == [30000, 60000, 90000]
        assert all(a.search_id == search_id for a in awards)

    def test_batch_is_atomic(self, storage, make_award):
        search_id = storage.create_search("JFK", "LHR", "2025-06-01", "business", ["ba"])
        batch = [
            make_award(search_id, "ba", 50000),
            make_award(search_id, "ac", 55000),
            # Unknown parent: violates the foreign key mid-batch
            make_award(999999, "cx", 60000),
        ]

        with pytest.raises(StorageError) as exc_info:
            storage.insert_awards(batch)

        assert exc_info.value.operation == "insert_awards"
        assert storage.get_awards_by_search_id(search_id) == []

    def test_unknown_seat_count_round_trips_as_none(self, storage, make_award):
        search_id = storage.create_search("JFK", "LHR", "2025-06-01", "business", ["ba"])
        storage.insert_awards(
            [
                make_award(search_id, "ba", 50000, available_seats=None),
                make_award(search_id, "ac", 60000, available_seats=0),
            ]
        )

        unknown, sold_out = storage.get_awards_by_search_id(search_id)
        assert unknown.available_seats is None
        assert sold_out.available_seats == 0


class TestCachedResults:
    def test_end_to_end_lookup(self, storage, make_award):
        search_id = storage.create_search("JFK", "LHR", "2025-06-01", "business", ["X", "Y"])
        storage.insert_awards(
            [make_award(search_id, "Y", 9000), make_award(search_id, "X", 5000)]
        )
        storage.update_search_status(search_id, SearchStatus.COMPLETED)

        results = storage.find_cached_results("JFK", "LHR", "2025-06-01", "business")
        assert [(r.airline, r.miles) for r in results] == [("X", 5000), ("Y", 9000)]

        filtered = storage.find_cached_results("JFK", "LHR", "2025-06-01", "business", ["Y"])
        assert [(r.airline, r.miles) for r in filtered] == [("Y", 9000)]

    def test_pending_search_never_served(self, storage, make_award):
        search_id = storage.create_search("JFK", "LHR", "2025-06-01", "business", ["ba"])
        storage.insert_awards([make_award(search_id, "ba", 50000)])

        assert storage.find_cached_results("JFK", "LHR", "2025-06-01", "business") == []

    def test_failed_search_never_served(self, storage, make_award):
        search_id = storage.create_search("JFK", "LHR", "2025-06-01", "business", ["ba"])
        storage.insert_awards([make_award(search_id, "ba", 50000)])
        storage.update_search_status(search_id, SearchStatus.FAILED)

        assert storage.find_cached_results("JFK", "LHR", "2025-06-01", "business") == []

    def test_sorted_across_searches(self, storage, completed_search):
        completed_search(storage, [("ba", 70000), ("ac", 20000)])
        completed_search(storage, [("cx", 45000), ("qf", 10000)])

        results = storage.find_cached_results("JFK", "LHR", "2025-06-01", "business")
        assert [r.miles for r in results] == [10000, 20000, 45000, 70000]

    def test_key_must_match_exactly(self, storage, completed_search):
        completed_search(storage, [("ba", 50000)])

        assert storage.find_cached_results("JFK", "LHR", "2025-06-02", "business") == []
        assert storage.find_cached_results("JFK", "LHR", "2025-06-01", "first") == []
        assert storage.find_cached_results("LHR", "JFK", "2025-06-01", "business") == []

    def test_airline_selection_is_not_part_of_key(self, storage, completed_search):
        completed_search(storage, [("ba", 50000), ("ac", 40000), ("cx", 60000)])

        everything = storage.find_cached_results("JFK", "LHR", "2025-06-01", "business")
        only_ba = storage.find_cached_results("JFK", "LHR", "2025-06-01", "business", ["ba"])
        ba_cx = storage.find_cached_results(
            "JFK", "LHR", "2025-06-01", "business", ["cx", "ba"]
        )

        assert [r.id for r in only_ba] == [r.id for r in everything if r.airline == "ba"]
        assert [r.id for r in ba_cx] == [r.id for r in everything if r.airline in ("ba", "cx")]

    def test_empty_airline_filter_means_all(self, storage, completed_search):
        completed_search(storage, [("ba", 50000), ("ac", 40000)])
        assert len(storage.find_cached_results("JFK", "LHR", "2025-06-01", "business", [])) == 2

    def test_results_carry_parent_creation_time(self, storage, completed_search, clock):
        completed_search(storage, [("ba", 50000)])

        [result] = storage.find_cached_results("JFK", "LHR", "2025-06-01", "business")
        assert result.search_created_at == clock.now


class TestRetentionWindow:
    def test_included_just_inside_window(self, storage, completed_search, clock):
        completed_search(storage, [("ba", 50000)])
        clock.advance(days=5, seconds=-1)

        assert len(storage.find_cached_results("JFK", "LHR", "2025-06-01", "business")) == 1

    def test_excluded_at_window_boundary(self, storage, completed_search, clock):
        completed_search(storage, [("ba", 50000)])
        clock.advance(days=5)

        assert storage.find_cached_results("JFK", "LHR", "2025-06-01", "business") == []

    def test_excluded_just_outside_window(self, storage, completed_search, clock):
        completed_search(storage, [("ba", 50000)])
        clock.advance(days=5, seconds=1)

        assert storage.find_cached_results("JFK", "LHR", "2025-06-01", "business") == []

    def test_window_change_applies_retroactively(self, storage, completed_search, clock):
        completed_search(storage, [("ba", 50000)])
        clock.advance(days=3)

        storage.cache_duration_days = 2
        assert storage.find_cached_results("JFK", "LHR", "2025-06-01", "business") == []

        storage.cache_duration_days = 7
        assert len(storage.find_cached_results("JFK", "LHR", "2025-06-01", "business")) == 1


class TestCleanup:
    def test_deletes_only_searches_older_than_window(self, storage, completed_search, clock):
        old_a = completed_search(storage, [("ba", 50000)])
        old_b = storage.create_search("JFK", "SYD", "2025-07-01", "first", ["qf"])
        clock.advance(days=2)
        fresh = completed_search(storage, [("ac", 40000)])
        clock.advance(days=3, seconds=1)

        assert storage.cleanup_old_data() == 2

        remaining = [s.id for s in storage.get_recent_searches()]
        assert remaining == [fresh]
        assert old_a not in remaining and old_b not in remaining

    def test_second_run_deletes_nothing(self, storage, completed_search, clock):
        completed_search(storage, [("ba", 50000)])
        clock.advance(days=6)

        assert storage.cleanup_old_data() == 1
        assert storage.cleanup_old_data() == 0

    def test_search_exactly_at_cutoff_is_kept(self, storage, completed_search, clock):
        completed_search(storage, [("ba", 50000)])
        clock.advance(days=5)

        assert storage.cleanup_old_data() == 0

    def test_cascade_is_isolated_per_search(self, storage, completed_search, clock):
        doomed = completed_search(storage, [("ba", 50000), ("ac", 40000)])
        clock.advance(days=1)
        survivor = completed_search(storage, [("cx", 30000), ("qf", 35000)])
        survivor_awards = storage.get_awards_by_search_id(survivor)
        clock.advance(days=4, seconds=1)

        assert storage.cleanup_old_data() == 1

        assert storage.get_awards_by_search_id(doomed) == []
        assert storage.get_awards_by_search_id(survivor) == survivor_awards


class TestSqliteEngine:
    def test_use_before_initialize_raises(self, tmp_path):
        adapter = SqliteAdapter(str(tmp_path / "flights.db"), cache_duration_days=5)
        with pytest.raises(ConfigurationError):
            adapter.get_recent_searches()

    def test_initialize_is_idempotent(self, adapter, completed_search):
        search_id = completed_search(adapter, [("ba", 50000)])
        adapter.initialize()
        assert adapter.get_awards_by_search_id(search_id)

    def test_second_adapter_on_same_file(self, adapter, completed_search, clock):
        search_id = completed_search(adapter, [("ba", 50000)])

        other = SqliteAdapter(adapter.db_path, cache_duration_days=5, clock=clock)
        other.initialize()
        try:
            assert [a.search_id for a in other.get_awards_by_search_id(search_id)] == [search_id]
        finally:
            other.dispose()

    def test_creates_parent_directory(self, tmp_path):
        db_path = tmp_path / "nested" / "data" / "flights.db"
        adapter = SqliteAdapter(str(db_path), cache_duration_days=5)
        adapter.initialize()
        try:
            assert db_path.exists()
        finally:
            adapter.dispose()

    def test_connections_use_wal_and_foreign_keys(self, adapter):
        with adapter._engine.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA journal_mode").scalar() == "wal"
            assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1

    def test_airlines_stored_as_json(self, adapter):
        search_id = adapter.create_search("JFK", "LHR", "2025-06-01", "economy", ["ba", "ac"])
        with adapter._engine.connect() as conn:
            raw = conn.exec_driver_sql(
                "SELECT airlines FROM searches WHERE id = ?", (search_id,)
            ).scalar()
        assert json.loads(raw) == ["ba", "ac"]

    def test_in_memory_database(self, clock, completed_search):
        adapter = SqliteAdapter(":memory:", cache_duration_days=5, clock=clock)
        adapter.initialize()
        try:
            completed_search(adapter, [("ba", 50000)])
            assert len(adapter.find_cached_results("JFK", "LHR", "2025-06-01", "business")) == 1
        finally:
            adapter.dispose()


class TestSharedImplementation:
    @pytest.mark.parametrize(
        "operation",
        [
            "initialize",
            "create_search",
            "update_search_status",
            "insert_awards",
            "find_cached_results",
            "get_recent_searches",
            "get_awards_by_search_id",
            "cleanup_old_data",
            "dispose",
        ],
    )
    def test_operations_come_from_one_place(self, operation):
        shared = getattr(SqlAlchemyAdapter, operation)
        assert getattr(SqliteAdapter, operation) is shared
        assert getattr(PostgresAdapter, operation) is shared

    def test_base_needs_an_engine(self):
        with pytest.raises(TypeError):
            SqlAlchemyAdapter(cache_duration_days=5)

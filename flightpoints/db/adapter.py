from collections.abc import Sequence
from typing import Protocol

from flightpoints.core.time import Clock
from flightpoints.models.search import SearchStatus
from flightpoints.schemas.award import AwardCreate, AwardRecord
from flightpoints.schemas.search import SearchRecord


class StorageAdapter(Protocol):
    """Engine-agnostic persistence contract for searches and their awards.

    Implementations must return identical results for identical data
    regardless of the engine underneath.
    """

    @property
    def cache_duration_days(self) -> int: ...

    @property
    def clock(self) -> Clock:
        """Source of the timestamps written and compared by this adapter."""
        ...

    def initialize(self) -> None:
        """Create tables and indexes if absent. Safe to call repeatedly."""
        ...

    def create_search(
        self,
        origin: str,
        destination: str,
        depart_date: str,
        cabin: str,
        airlines: Sequence[str],
    ) -> int:
        """Insert a pending search and return its id."""
        ...

    def update_search_status(self, search_id: int, status: SearchStatus | str) -> bool:
        """Mark a pending search completed or failed.

        Returns False if the id is unknown or the search is already terminal.
        """
        ...

    def insert_awards(self, awards: Sequence[AwardCreate]) -> None:
        """Insert all awards in one transaction; an empty batch does nothing."""
        ...

    def find_cached_results(
        self,
        origin: str,
        destination: str,
        depart_date: str,
        cabin: str,
        airlines: Sequence[str] | None = None,
    ) -> list[AwardRecord]:
        """Fresh awards of completed searches for the key, ordered by miles."""
        ...

    def get_recent_searches(self, limit: int = 20) -> list[SearchRecord]: ...

    def get_awards_by_search_id(self, search_id: int) -> list[AwardRecord]: ...

    def cleanup_old_data(self) -> int:
        """Delete searches older than the retention window; return how many."""
        ...

    def dispose(self) -> None: ...

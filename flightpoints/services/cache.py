"""Cache lookups over stored award results.

The cache key is ``(origin, destination, depart_date, cabin)``. Airline
selection only filters the rows found for a key, so queries that differ in
requested airlines share cached entries. Freshness is judged against the
adapter's current retention window, never the window in force at write time.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from flightpoints.core.time import Clock
from flightpoints.db.adapter import StorageAdapter
from flightpoints.schemas.award import AwardRecord

SECONDS_PER_HOUR = 3600


@dataclass
class CacheLookup:
    results: list[AwardRecord]
    cache_age: str


def format_cache_age(created_at: datetime | None, now: datetime) -> str:
    """Describe how long ago ``created_at`` was, in whole hours or days."""
    if created_at is None:
        return "unknown"
    hours = int((now - created_at).total_seconds() // SECONDS_PER_HOUR)
    if hours < 1:
        return "less than 1 hour"
    if hours < 24:
        return f"{hours} hours"
    return f"{hours // 24} days"


class CachePolicy:
    def __init__(self, adapter: StorageAdapter, clock: Clock | None = None) -> None:
        self.adapter = adapter
        self._clock = clock or adapter.clock

    def lookup(
        self,
        origin: str,
        destination: str,
        depart_date: str,
        cabin: str,
        airlines: Sequence[str] | None = None,
    ) -> CacheLookup | None:
        """Return fresh cached results for the key, or None on a miss."""
        results = self.adapter.find_cached_results(
            origin, destination, depart_date, cabin, airlines
        )
        if not results:
            return None

        stamps = [r.search_created_at for r in results if r.search_created_at is not None]
        oldest = min(stamps) if stamps else None
        return CacheLookup(results=results, cache_age=format_cache_age(oldest, self._clock()))

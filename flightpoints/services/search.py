"""Serve award searches from the cache, falling back to a live lookup.

Adapter calls are blocking, so they run in worker threads to keep the event
loop free while a slow lookup or cleanup is in progress.
"""

import asyncio
import logging
import re
from datetime import date

from flightpoints.core.exceptions import SearchFailedError, ValidationError
from flightpoints.core.time import Clock
from flightpoints.db.adapter import StorageAdapter
from flightpoints.models.search import CabinClass, SearchStatus
from flightpoints.schemas.award import AwardCreate
from flightpoints.schemas.search import AwardSearchResult, SearchOutcome, SearchRequest
from flightpoints.services.cache import CachePolicy
from flightpoints.services.scraper import AwardFetcher, get_airlines, search_awards

logger = logging.getLogger(__name__)

_AIRPORT_CODE = re.compile(r"^[A-Z]{3}$")


def validate_query(origin: str, destination: str, depart_date: str) -> None:
    """Reject a query before anything is persisted for it."""
    if not origin or not destination or not depart_date:
        raise ValidationError("Missing required fields: origin, destination, departDate")
    for code in (origin, destination):
        if not _AIRPORT_CODE.match(code):
            raise ValidationError(f"Invalid airport code: {code!r}")
    if origin == destination:
        raise ValidationError("Origin and destination must differ")
    try:
        if len(depart_date) != 10:
            raise ValueError
        date.fromisoformat(depart_date)
    except ValueError:
        raise ValidationError(f"Invalid departDate {depart_date!r}, expected YYYY-MM-DD") from None


def to_award(search_id: int, result: AwardSearchResult) -> AwardCreate:
    return AwardCreate(
        search_id=search_id,
        airline=result.airline,
        flight_number=result.flight_number or "",
        origin=result.origin,
        destination=result.destination,
        depart_date=result.depart_date,
        depart_time=result.depart_time or "",
        arrive_time=result.arrive_time or "",
        cabin=result.cabin,
        miles=result.miles,
        taxes=result.taxes or 0.0,
        available_seats=result.available_seats,
    )


class SearchOrchestrator:
    def __init__(
        self,
        adapter: StorageAdapter,
        fetcher: AwardFetcher = search_awards,
        clock: Clock | None = None,
    ) -> None:
        self.adapter = adapter
        self.fetcher = fetcher
        self.cache = CachePolicy(adapter, clock)

    def _mark_failed(self, search_id: int) -> None:
        """Best-effort move to failed; the error that got us here is what the caller sees."""
        try:
            self.adapter.update_search_status(search_id, SearchStatus.FAILED)
        except Exception:
            logger.exception("Could not mark search %s failed", search_id)

    async def search(self, params: SearchRequest) -> SearchOutcome:
        origin = params.origin.strip().upper()
        destination = params.destination.strip().upper()
        depart_date = params.depart_date.strip()
        validate_query(origin, destination, depart_date)

        cabin = CabinClass(params.cabin).value
        airlines = params.airlines or list(get_airlines())

        if not params.force_refresh:
            hit = await asyncio.to_thread(
                self.cache.lookup, origin, destination, depart_date, cabin, airlines
            )
            if hit is not None:
                return SearchOutcome(source="cache", results=hit.results, cache_age=hit.cache_age)

        search_id = await asyncio.to_thread(
            self.adapter.create_search, origin, destination, depart_date, cabin, airlines
        )

        try:
            results = await self.fetcher(origin, destination, depart_date, cabin, airlines)
            awards = [to_award(search_id, result) for result in results]
            await asyncio.to_thread(self.adapter.insert_awards, awards)
            await asyncio.to_thread(
                self.adapter.update_search_status, search_id, SearchStatus.COMPLETED
            )
        except Exception as exc:
            logger.error("Search %s failed: %s", search_id, exc)
            await asyncio.to_thread(self._mark_failed, search_id)
            raise SearchFailedError(search_id, exc) from exc
        except BaseException:
            # Cancelled mid-search: the failed update runs inline, without awaiting
            logger.warning("Search %s interrupted", search_id)
            self._mark_failed(search_id)
            raise

        stored = await asyncio.to_thread(self.adapter.get_awards_by_search_id, search_id)
        return SearchOutcome(source="live", search_id=search_id, results=stored)

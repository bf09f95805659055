from fastapi import Depends, Request

from flightpoints.db import get_adapter
from flightpoints.db.adapter import StorageAdapter
from flightpoints.services.scraper import AwardFetcher, search_awards
from flightpoints.services.search import SearchOrchestrator


def get_storage(request: Request) -> StorageAdapter:
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        return get_adapter()
    return storage


def get_fetcher() -> AwardFetcher:
    return search_awards


def get_orchestrator(
    storage: StorageAdapter = Depends(get_storage),
    fetcher: AwardFetcher = Depends(get_fetcher),
) -> SearchOrchestrator:
    return SearchOrchestrator(storage, fetcher)

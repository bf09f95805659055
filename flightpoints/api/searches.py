from fastapi import APIRouter, Depends, Query

from flightpoints.api.deps import get_storage
from flightpoints.db.adapter import StorageAdapter
from flightpoints.schemas.common import AwardsResponse, CleanupResponse, SearchesResponse

router = APIRouter()


@router.get("/searches", response_model=SearchesResponse)
def recent_searches(
    limit: int = Query(20, ge=1, le=100),
    storage: StorageAdapter = Depends(get_storage),
) -> SearchesResponse:
    return SearchesResponse(searches=storage.get_recent_searches(limit))


@router.get("/searches/{search_id}/awards", response_model=AwardsResponse)
def awards_for_search(
    search_id: int,
    storage: StorageAdapter = Depends(get_storage),
) -> AwardsResponse:
    return AwardsResponse(awards=storage.get_awards_by_search_id(search_id))


@router.delete("/cleanup", response_model=CleanupResponse)
def cleanup(storage: StorageAdapter = Depends(get_storage)) -> CleanupResponse:
    """Run retention cleanup now instead of waiting for the daily sweep."""
    deleted = storage.cleanup_old_data()
    return CleanupResponse(
        deleted=deleted,
        message=(
            f"Removed {deleted} search records older than "
            f"{storage.cache_duration_days} days"
        ),
    )

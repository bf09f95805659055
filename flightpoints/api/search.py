from fastapi import APIRouter, Depends, HTTPException, Query

from flightpoints.api.deps import get_orchestrator, get_storage
from flightpoints.core.exceptions import SearchFailedError, ValidationError
from flightpoints.db.adapter import StorageAdapter
from flightpoints.models.search import CabinClass
from flightpoints.schemas.common import ResultsResponse
from flightpoints.schemas.search import SearchOutcome, SearchRequest
from flightpoints.services.search import SearchOrchestrator

router = APIRouter()


@router.post("/search", response_model=SearchOutcome)
async def search(
    params: SearchRequest,
    orchestrator: SearchOrchestrator = Depends(get_orchestrator),
) -> SearchOutcome:
    """Return cached awards for the query, or run a live search on a miss."""
    try:
        return await orchestrator.search(params)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SearchFailedError as exc:
        raise HTTPException(
            status_code=502,
            detail={
                "error": "Search failed",
                "search_id": exc.search_id,
                "details": str(exc.cause),
            },
        ) from exc


@router.get("/results", response_model=ResultsResponse)
def cached_results(
    origin: str = Query(..., min_length=3, max_length=3),
    destination: str = Query(..., min_length=3, max_length=3),
    depart_date: str = Query(..., alias="departDate", pattern=r"^\d{4}-\d{2}-\d{2}$"),
    cabin: CabinClass = Query(CabinClass.ECONOMY),
    storage: StorageAdapter = Depends(get_storage),
) -> ResultsResponse:
    """Cached awards only; never triggers a live search."""
    results = storage.find_cached_results(
        origin.upper(), destination.upper(), depart_date, cabin.value
    )
    return ResultsResponse(results=results)

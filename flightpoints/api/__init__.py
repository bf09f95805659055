from fastapi import APIRouter

from flightpoints.api import airlines, search, searches
from flightpoints.core.time import utcnow
from flightpoints.schemas.common import HealthResponse

api_router = APIRouter()


@api_router.get("/health", tags=["health"], response_model=HealthResponse)
def api_health_check() -> HealthResponse:
    """Health check endpoint for monitoring and load balancers."""
    return HealthResponse(status="ok", timestamp=utcnow())


api_router.include_router(airlines.router, tags=["airlines"])
api_router.include_router(search.router, tags=["search"])
api_router.include_router(searches.router, tags=["searches"])

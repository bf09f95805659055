from fastapi import APIRouter, Depends

from flightpoints.api.deps import get_storage
from flightpoints.db.adapter import StorageAdapter
from flightpoints.schemas.common import AirlineInfo, AirlinesResponse, ConfigResponse
from flightpoints.services.scraper import get_airlines, get_supported_airlines

router = APIRouter()


@router.get("/airlines", response_model=AirlinesResponse)
def list_airlines() -> AirlinesResponse:
    return AirlinesResponse(
        airlines=[AirlineInfo(**airline) for airline in get_supported_airlines()]
    )


@router.get("/config", response_model=ConfigResponse)
def get_config(storage: StorageAdapter = Depends(get_storage)) -> ConfigResponse:
    return ConfigResponse(
        cache_duration_days=storage.cache_duration_days,
        supported_airlines=list(get_airlines()),
    )

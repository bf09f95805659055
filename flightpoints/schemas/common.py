"""Response envelopes for the JSON API."""

from datetime import datetime

from pydantic import BaseModel

from flightpoints.schemas.award import AwardRecord
from flightpoints.schemas.search import SearchRecord


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime | None = None


class AirlineInfo(BaseModel):
    code: str
    name: str


class AirlinesResponse(BaseModel):
    airlines: list[AirlineInfo]


class ConfigResponse(BaseModel):
    cache_duration_days: int
    supported_airlines: list[str]


class ResultsResponse(BaseModel):
    results: list[AwardRecord]


class SearchesResponse(BaseModel):
    searches: list[SearchRecord]


class AwardsResponse(BaseModel):
    awards: list[AwardRecord]


class CleanupResponse(BaseModel):
    deleted: int
    message: str

import json
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flightpoints.models.search import CabinClass, SearchStatus
from flightpoints.schemas.award import AwardRecord


class SearchRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    origin: str
    destination: str
    depart_date: str
    cabin: str
    airlines: list[str]
    status: SearchStatus
    created_at: datetime

    @field_validator("airlines", mode="before")
    @classmethod
    def decode_airlines(cls, value: str | list[str]) -> list[str]:
        # Stored as a JSON array in the airlines column
        if isinstance(value, str):
            return json.loads(value) if value else []
        return value


class SearchRequest(BaseModel):
    """Body of ``POST /api/search``."""

    model_config = ConfigDict(populate_by_name=True)

    origin: str
    destination: str
    depart_date: str = Field(..., alias="departDate")
    cabin: CabinClass = CabinClass.ECONOMY
    airlines: list[str] | None = None
    force_refresh: bool = Field(False, alias="forceRefresh")

    @field_validator("airlines")
    @classmethod
    def normalize_airlines(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [code.strip().lower() for code in value if code.strip()]


class AwardSearchResult(BaseModel):
    """One result record produced by the award fetcher."""

    airline: str
    airline_name: str = ""
    flight_number: str | None = None
    origin: str
    destination: str
    depart_date: str
    depart_time: str | None = None
    arrive_time: str | None = None
    cabin: str
    miles: int = Field(..., ge=0)
    taxes: float | None = Field(None, ge=0)
    available_seats: int | None = Field(None, ge=0)


class SearchOutcome(BaseModel):
    source: Literal["cache", "live"]
    search_id: int | None = None
    cache_age: str | None = None
    results: list[AwardRecord]

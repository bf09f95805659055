from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AwardCreate(BaseModel):
    search_id: int
    airline: str
    flight_number: str = ""
    origin: str
    destination: str
    depart_date: str
    depart_time: str = ""
    arrive_time: str = ""
    cabin: str
    miles: int = Field(..., ge=0)
    taxes: float = Field(0.0, ge=0)
    available_seats: int | None = Field(None, ge=0)  # None = unknown, 0 = sold out


class AwardRecord(AwardCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    # Creation time of the parent search; only populated by cache lookups
    search_created_at: datetime | None = None

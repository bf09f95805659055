from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flightpoints.core.time import utcnow
from flightpoints.models.base import Base


class SearchStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class CabinClass(str, Enum):
    ECONOMY = "economy"
    BUSINESS = "business"
    FIRST = "first"


class Search(Base):
    __tablename__ = "searches"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    origin: Mapped[str] = mapped_column(String(8))
    destination: Mapped[str] = mapped_column(String(8))
    # ISO calendar date (YYYY-MM-DD), kept as text so equality matches on both engines
    depart_date: Mapped[str] = mapped_column(String(10))
    cabin: Mapped[str] = mapped_column(String(20))
    # JSON-encoded list of airline codes
    airlines: Mapped[str] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), default=SearchStatus.PENDING.value)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, index=True
    )

    awards: Mapped[list["Award"]] = relationship(
        "Award",
        back_populates="search",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

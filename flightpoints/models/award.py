from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flightpoints.core.time import utcnow
from flightpoints.models.base import Base


class Award(Base):
    __tablename__ = "awards"
    __table_args__ = (
        Index("idx_awards_origin_dest", "origin", "destination"),
        CheckConstraint("miles >= 0", name="ck_awards_miles_non_negative"),
        CheckConstraint("taxes >= 0", name="ck_awards_taxes_non_negative"),
        CheckConstraint(
            "available_seats IS NULL OR available_seats >= 0",
            name="ck_awards_seats_non_negative",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    search_id: Mapped[int] = mapped_column(
        ForeignKey("searches.id", ondelete="CASCADE"), index=True
    )
    airline: Mapped[str] = mapped_column(String(8))
    flight_number: Mapped[str] = mapped_column(String(16), default="")
    origin: Mapped[str] = mapped_column(String(8))
    destination: Mapped[str] = mapped_column(String(8))
    depart_date: Mapped[str] = mapped_column(String(10), index=True)
    depart_time: Mapped[str] = mapped_column(String(5), default="")
    arrive_time: Mapped[str] = mapped_column(String(5), default="")
    cabin: Mapped[str] = mapped_column(String(20))
    miles: Mapped[int] = mapped_column(Integer)
    taxes: Mapped[float] = mapped_column(Float, default=0.0)
    # None = unknown, 0 = sold out
    available_seats: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    search: Mapped["Search"] = relationship("Search", back_populates="awards")

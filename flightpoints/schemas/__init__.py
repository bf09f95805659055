from flightpoints.schemas.award import AwardCreate, AwardRecord
from flightpoints.schemas.search import (
    AwardSearchResult,
    SearchOutcome,
    SearchRecord,
    SearchRequest,
)

__all__ = [
    "AwardCreate",
    "AwardRecord",
    "AwardSearchResult",
    "SearchOutcome",
    "SearchRecord",
    "SearchRequest",
]

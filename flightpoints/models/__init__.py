from flightpoints.models.award import Award
from flightpoints.models.base import Base
from flightpoints.models.search import CabinClass, Search, SearchStatus

__all__ = [
    "Base",
    "Search",
    "SearchStatus",
    "CabinClass",
    "Award",
]

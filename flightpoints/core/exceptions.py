"""Exceptions raised by the storage layer and the search orchestrator."""


class FlightPointsError(Exception):
    """Base class for all application errors."""


class ConfigurationError(FlightPointsError):
    """Raised when a storage adapter is used before it has been initialized."""


class StorageError(FlightPointsError):
    """Raised when the storage backend is unreachable or rejects a write."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


class ValidationError(FlightPointsError):
    """Raised when a search query is missing or has malformed required fields."""


class SearchFailedError(FlightPointsError):
    """Raised when a live search could not be completed.

    The search record has already been marked ``failed`` when this is raised.
    """

    def __init__(self, search_id: int, cause: BaseException) -> None:
        super().__init__(f"Search {search_id} failed: {cause}")
        self.search_id = search_id
        self.cause = cause

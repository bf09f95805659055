"""Storage adapter selection and the process-owned adapter instance."""

import logging

from flightpoints.core.config import Settings, get_settings
from flightpoints.core.exceptions import ConfigurationError
from flightpoints.db.adapter import StorageAdapter
from flightpoints.db.postgres import PostgresAdapter
from flightpoints.db.sqlite import SqliteAdapter

logger = logging.getLogger(__name__)

_adapter: StorageAdapter | None = None


def create_adapter(settings: Settings) -> StorageAdapter:
    """Build the adapter for the configured engine (not yet initialized)."""
    if settings.db_type == "postgres":
        return PostgresAdapter(settings.postgres_url, settings.cache_duration_days)
    return SqliteAdapter(settings.db_path, settings.cache_duration_days)


def init_adapter(settings: Settings | None = None) -> StorageAdapter:
    """Create and initialize the process adapter once; later calls return it."""
    global _adapter  # noqa: PLW0603
    if _adapter is not None:
        return _adapter

    adapter = create_adapter(settings or get_settings())
    adapter.initialize()
    _adapter = adapter
    return _adapter


def get_adapter() -> StorageAdapter:
    if _adapter is None:
        raise ConfigurationError("Database not initialized. Call init_adapter() first.")
    return _adapter


def close_adapter() -> None:
    """Dispose of the process adapter so the next init_adapter() starts fresh."""
    global _adapter  # noqa: PLW0603
    if _adapter is not None:
        _adapter.dispose()
        logger.info("Storage adapter closed")
    _adapter = None


def get_cache_duration_days() -> int:
    """Configured retention window in days."""
    return get_adapter().cache_duration_days


__all__ = [
    "StorageAdapter",
    "SqliteAdapter",
    "PostgresAdapter",
    "create_adapter",
    "init_adapter",
    "get_adapter",
    "close_adapter",
    "get_cache_duration_days",
]

"""UTC datetime utilities.

All timestamps written by the storage adapters are **naive** UTC datetimes
(no tzinfo). SQLite stores them as ISO-8601 strings, which compare
lexicographically in the same order as they compare in time; PostgreSQL
stores them as ``TIMESTAMP WITHOUT TIME ZONE``.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


def retention_cutoff(now: datetime, days: int) -> datetime:
    """Oldest creation time still inside a retention window of ``days``."""
    return now - timedelta(days=days)

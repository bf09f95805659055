"""Award availability lookup.

This is a stand-in for live airline queries: it waits like a network call
would and synthesizes plausible results for each requested airline.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Sequence

from flightpoints.schemas.search import AwardSearchResult

logger = logging.getLogger(__name__)

AIRLINES: dict[str, str] = {
    "ac": "Aeroplan (Air Canada)",
    "as": "Alaska Airlines",
    "ba": "British Airways",
    "cx": "AsiaMiles (Cathay Pacific)",
    "ke": "Korean Air SKYPASS",
    "nh": "ANA Mileage Club",
    "qf": "Qantas Frequent Flyer",
    "sq": "Singapore KrisFlyer",
}

MILES_BY_CABIN: dict[str, tuple[int, int]] = {
    "economy": (25_000, 60_000),
    "business": (50_000, 120_000),
    "first": (80_000, 200_000),
}

# Simulated network latency bounds, seconds
MIN_DELAY = 1.0
MAX_DELAY = 2.0

AwardFetcher = Callable[
    [str, str, str, str, Sequence[str]], Awaitable[list[AwardSearchResult]]
]


def get_airlines() -> dict[str, str]:
    return AIRLINES


def get_supported_airlines() -> list[dict[str, str]]:
    return [{"code": code, "name": name} for code, name in AIRLINES.items()]


def _miles_for_cabin(cabin: str) -> int:
    low, high = MILES_BY_CABIN.get(cabin, MILES_BY_CABIN["economy"])
    return random.randint(low, high - 1)  # nosec B311


def generate_mock_results(
    origin: str,
    destination: str,
    depart_date: str,
    cabin: str,
    airlines: Sequence[str],
) -> list[AwardSearchResult]:
    """Build one to three results per airline, cheapest first."""
    results = []
    for code in airlines:
        name = AIRLINES.get(code, code.upper())
        for _ in range(random.randint(1, 3)):  # nosec B311
            depart_hour = random.randint(6, 21)  # nosec B311
            duration = random.randint(8, 15)  # nosec B311
            results.append(
                AwardSearchResult(
                    airline=code,
                    airline_name=name,
                    flight_number=f"{code.upper()}{random.randint(100, 999)}",  # nosec B311
                    origin=origin,
                    destination=destination,
                    depart_date=depart_date,
                    depart_time=f"{depart_hour:02d}:{random.randint(0, 59):02d}",  # nosec B311
                    arrive_time=f"{(depart_hour + duration) % 24:02d}:{random.randint(0, 59):02d}",  # nosec B311
                    cabin=cabin,
                    miles=_miles_for_cabin(cabin),
                    taxes=float(random.randint(50, 249)),  # nosec B311
                    available_seats=random.randint(1, 4),  # nosec B311
                )
            )
    return sorted(results, key=lambda r: r.miles)


async def search_awards(
    origin: str,
    destination: str,
    depart_date: str,
    cabin: str,
    airlines: Sequence[str],
) -> list[AwardSearchResult]:
    """Look up award availability for a route, date and cabin."""
    logger.info(
        "Searching for awards: %s -> %s on %s (%s) airlines=%s",
        origin,
        destination,
        depart_date,
        cabin,
        ",".join(airlines),
    )
    await asyncio.sleep(random.uniform(MIN_DELAY, MAX_DELAY))  # nosec B311
    return generate_mock_results(origin, destination, depart_date, cabin, airlines)

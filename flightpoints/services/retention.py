"""Periodic retention cleanup.

The first sweep runs when the scheduler starts; a background task then
sleeps ``interval`` and sweeps again, for as long as the process lives. A
failed sweep is logged and the loop keeps going.
"""

import asyncio
import contextlib
import logging
from datetime import timedelta

from flightpoints.db.adapter import StorageAdapter

logger = logging.getLogger(__name__)

CLEANUP_INTERVAL = timedelta(hours=24)


class RetentionScheduler:
    def __init__(self, adapter: StorageAdapter, interval: timedelta = CLEANUP_INTERVAL) -> None:
        self.adapter = adapter
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int | None:
        """Run one cleanup sweep. Returns the deleted count, or None if it failed."""
        logger.info("Running scheduled cleanup...")
        try:
            # Off the event loop so request handling is never blocked
            return await asyncio.to_thread(self.adapter.cleanup_old_data)
        except Exception:
            logger.exception("Scheduled cleanup failed")
            return None

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval.total_seconds())
            await self.run_once()

    async def start(self) -> None:
        """Sweep once now, then keep sweeping every ``interval`` in the background."""
        if self.running:
            return
        await self.run_once()
        self._task = asyncio.create_task(self._loop(), name="retention-cleanup")

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

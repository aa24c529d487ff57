from __future__ import annotations
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from .cache import CacheController

logger = logging.getLogger(__name__)


@dataclass
class RefreshStats:
    runs: int = 0
    failures: int = 0
    last_ok_ts: float = 0.0  # epoch seconds of the last successful refresh


class RefreshScheduler:
    """Periodically rebuilds the dictionary cache from storage."""

    def __init__(self, cache: CacheController, interval: float):
        self.cache = cache
        self.interval = interval
        self.stats = RefreshStats()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.interval <= 0 or self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def refresh_now(self) -> bool:
        self.stats.runs += 1
        ok = await self.cache.refresh()
        if ok:
            self.stats.last_ok_ts = time.time()
        else:
            self.stats.failures += 1
        return ok

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            if not await self.refresh_now():
                logger.warning("Scheduled refresh failed (%d failures so far)", self.stats.failures)

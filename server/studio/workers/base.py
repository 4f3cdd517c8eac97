"""Periodic background worker."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

logger = logging.getLogger(__name__)


class BaseWorker(ABC):
    """Runs ``process`` every ``interval_seconds``; a failed run is logged and retried next interval."""

    def __init__(self, name: str, interval_seconds: int = 60):
        self.name = name
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @abstractmethod
    async def process(self) -> None:
        """Run one iteration."""

    async def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info("Worker started", extra={"worker": self.name, "interval_seconds": self.interval_seconds})

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Worker stopped", extra={"worker": self.name})

    async def _run(self) -> None:
        while True:
            try:
                await self.process()
            except Exception:
                logger.exception("Worker iteration failed", extra={"worker": self.name})
            await asyncio.sleep(self.interval_seconds)

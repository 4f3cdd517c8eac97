"""Lifecycle of the application's background workers."""

import asyncio
import logging
from typing import Dict

from ..core.config import settings
from .base import BaseWorker
from .class_completion_worker import ClassCompletionWorker

logger = logging.getLogger(__name__)


class WorkerManager:
    """Starts and stops the background workers with the application."""

    def __init__(self):
        self.workers: Dict[str, BaseWorker] = {
            "class_completion": ClassCompletionWorker(
                interval_seconds=settings.class_completion_interval_seconds
            ),
        }

    async def start_all(self) -> None:
        for worker in self.workers.values():
            await worker.start()
        logger.info(f"Started {len(self.workers)} workers")

    async def stop_all(self) -> None:
        results = await asyncio.gather(
            *(worker.stop() for worker in self.workers.values()),
            return_exceptions=True
        )
        for name, result in zip(self.workers.keys(), results):
            if isinstance(result, Exception):
                logger.error(f"Error stopping worker {name}: {result!s}")
        logger.info("All workers stopped")

    def get_worker_status(self) -> Dict[str, bool]:
        """Map worker names to their running status."""
        return {name: worker.is_running for name, worker in self.workers.items()}


worker_manager = WorkerManager()

"""Background worker that marks finished classes as completed."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..core.clock import Clock, system_clock
from ..core.database import async_session_factory
from ..core.observability import metrics_collector
from ..services.scheduled_class_service import ScheduledClassService
from .base import BaseWorker

logger = logging.getLogger(__name__)


class ClassCompletionWorker(BaseWorker):
    """
    Background worker that completes classes whose end time has passed.

    Completed classes can no longer be booked or waiting-listed.
    """

    def __init__(
        self,
        interval_seconds: int = 300,
        session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
        clock: Clock = system_clock,
    ):
        super().__init__(name="ClassCompletion", interval_seconds=interval_seconds)
        self.session_factory = session_factory
        self.clock = clock

    async def process(self) -> None:
        """Complete every finished class, one batch at a time."""
        now = self.clock.now()
        async with self.session_factory() as db:
            try:
                service = ScheduledClassService(db)
                completed = 0
                while True:
                    batch = await service.complete_finished_classes(now)
                    completed += batch
                    if batch == 0:
                        break
            except Exception as e:
                await db.rollback()
                logger.error(
                    f"Error completing classes: {e!s}",
                    exc_info=True,
                    extra={"worker": self.name}
                )
                raise

        if completed:
            metrics_collector.record_classes_completed(completed)
            logger.info(
                f"Completed {completed} classes",
                extra={"completed_count": completed, "timestamp": now.isoformat(), "worker": self.name}
            )

import asyncio
import logging
from datetime import datetime

from application.services.rate_service import RateService

logger = logging.getLogger(__name__)


class RateRefresherWorker:
    """
    Background task that periodically refreshes the latest rates of every source.

    Runs inside the API process so the cache and store stay warm regardless of
    request patterns.
    """

    def __init__(self, rate_service: RateService, update_interval: float = 3600):
        self.rate_service = rate_service
        self.update_interval = update_interval
        self.is_running = False
        self._task: asyncio.Task | None = None

    async def update_cycle(self) -> None:
        cycle_start = datetime.now()
        await self.rate_service.update_rates()
        cycle_duration = (datetime.now() - cycle_start).total_seconds()
        logger.info(f'Refresh cycle completed in {cycle_duration:.2f}s')

    async def run(self) -> None:
        """Main worker loop. Runs until stopped or cancelled."""
        self.is_running = True
        logger.info(f'Rate refresher started, interval {self.update_interval}s')

        while self.is_running:
            try:
                await self.update_cycle()
            except Exception as e:
                logger.error(f'Error in refresh cycle: {e}', exc_info=True)
            await asyncio.sleep(self.update_interval)

        logger.info('Rate refresher stopped')

    def start(self) -> asyncio.Task:
        self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        """Gracefully stop the worker"""
        self.is_running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

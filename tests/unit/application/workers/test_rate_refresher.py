# nosec B101


import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from application.workers.rate_refresher import RateRefresherWorker


@pytest.mark.asyncio
async def test_update_cycle_refreshes_rates():
    rate_service = MagicMock()
    rate_service.update_rates = AsyncMock()
    worker = RateRefresherWorker(rate_service, update_interval=60)

    await worker.update_cycle()

    rate_service.update_rates.assert_awaited_once()


@pytest.mark.asyncio
async def test_worker_survives_failed_cycle_and_stops():
    rate_service = MagicMock()
    rate_service.update_rates = AsyncMock(side_effect=[RuntimeError('boom')] + [None] * 1000)
    worker = RateRefresherWorker(rate_service, update_interval=0)

    worker.start()
    while rate_service.update_rates.await_count < 2:
        await asyncio.sleep(0)
    await worker.stop()

    assert worker.is_running is False
    assert rate_service.update_rates.await_count >= 2

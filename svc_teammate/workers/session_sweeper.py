from __future__ import annotations

import asyncio
import logging
import signal

from svc_teammate.config import settings
from svc_teammate.db import close_db_pool, get_pool, init_db_pool
from svc_teammate.logging import configure_logging
from svc_teammate.repos.analytics_repo import AnalyticsRepo
from svc_teammate.services.analytics_service import AnalyticsService

logger = logging.getLogger(__name__)

_stop = False


def _handle_stop(*_args):
    global _stop
    _stop = True


async def sweep_once(service: AnalyticsService) -> int:
    n = await service.sweep_inactive_sessions()
    if n:
        logger.info("Session sweep", extra={"deactivated": n})
    return n


async def sweep_forever(service: AnalyticsService, interval_seconds: float) -> None:
    """In-process loop; cancelled by the app on shutdown."""
    while not _stop:
        try:
            await sweep_once(service)
        except asyncio.CancelledError:
            raise
        except Exception:
            # Keep sweeping; DB may come back
            logger.exception("Session sweep failed")
        await asyncio.sleep(interval_seconds)


async def run():
    await init_db_pool(
        settings.DATABASE_URL,
        min_size=1,
        max_size=2,
        command_timeout=settings.DB_COMMAND_TIMEOUT,
    )
    service = AnalyticsService(settings, AnalyticsRepo(get_pool()))

    while not _stop and settings.SESSION_SWEEPER_ENABLED:
        try:
            await sweep_once(service)
        except Exception:
            logger.exception("Session sweep failed")
            await asyncio.sleep(1.5)
            continue
        await asyncio.sleep(settings.SESSION_SWEEP_INTERVAL_SECONDS)

    await close_db_pool()


def main():
    configure_logging()
    signal.signal(signal.SIGTERM, _handle_stop)
    signal.signal(signal.SIGINT, _handle_stop)
    asyncio.run(run())


if __name__ == "__main__":
    main()

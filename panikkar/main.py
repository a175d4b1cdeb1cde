"""panikkar - job verification workflow service runner."""

import asyncio
import logging
import signal
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from panikkar.core.config import settings
from panikkar.core.db_client import close_connection, init_db
from panikkar.core.logging import configure_logfire
from panikkar.core.scheduler import start_scheduler, stop_scheduler


logger = logging.getLogger(__name__)


def validate_startup_configuration() -> None:
    """Fail fast when required configuration is missing.

    Exits the process with status 1 on invalid configuration.
    """
    logger.info("startup_validation_begin")

    if settings.stale_application_hours <= 0:
        logger.error("startup_validation_failed", extra={"setting": "stale_application_hours"})
        print("\n❌ Startup validation failed: STALE_APPLICATION_HOURS must be positive\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    logger.info("startup_validation_complete", extra={"status": "ok"})


@asynccontextmanager
async def lifespan() -> AsyncIterator[None]:
    """Bring up logging, the database and the background jobs, and tear them down on exit."""
    # Configure logging first so validation logs are captured
    configure_logfire()
    validate_startup_configuration()

    await init_db()
    logger.info("Database initialized")

    start_scheduler()
    try:
        yield
    finally:
        stop_scheduler()
        await close_connection()


async def run() -> None:
    """Run the background jobs until SIGINT or SIGTERM."""
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    async with lifespan():
        logger.info("panikkar running")
        await stop.wait()

    logger.info("panikkar stopped")


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()

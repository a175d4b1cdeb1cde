"""Weekly earnings ledger.

Each completed job adds one ledger entry bucketed by the calendar week it
completed in. Weeks start on Monday 00:00 UTC. The weekly totals feed the
Top Earner badge.
"""

import logging
from datetime import datetime, timedelta

from panikkar.core import db_client
from panikkar.core.clock import Clock, isoformat, system_clock
from panikkar.core.config import constants
from panikkar.core.logging import span
from panikkar.domain.earning import WorkerEarning


logger = logging.getLogger(__name__)

COLLECTION = "worker_earnings"


def get_week_start_date(dt: datetime) -> datetime:
    """Get the start of the week (Monday 00:00) for a given datetime.

    Args:
        dt: Datetime to get week start for

    Returns:
        Datetime representing Monday 00:00 of the week, in dt's timezone
    """
    # Get days since Monday (0 = Monday, 6 = Sunday)
    days_since_monday = dt.weekday()

    monday = dt - timedelta(days=days_since_monday)
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


async def record_earning(
    *,
    worker_id: str,
    job_id: str,
    amount: float,
    clock: Clock = system_clock,
) -> WorkerEarning:
    """Add a completed job's pay to the worker's ledger for the current week.

    Raises:
        db_client.DuplicateRecordError: If this job was already recorded for the worker
    """
    with span("earnings_service.record_earning"):
        now = clock.now()
        record = await db_client.create_record(
            collection=COLLECTION,
            data={
                "worker_id": worker_id,
                "job_post_id": job_id,
                "amount": amount,
                "week_start": isoformat(get_week_start_date(now)),
                "earned_at": isoformat(now),
            },
        )
        logger.info("Recorded earning of %.2f for worker %s (job %s)", amount, worker_id, job_id)
        return WorkerEarning(**record)


async def get_weekly_earnings(
    *,
    worker_id: str,
    week_start: datetime | None = None,
    clock: Clock = system_clock,
) -> float:
    """Total the worker's earnings for one calendar week (defaults to the current week)."""
    with span("earnings_service.get_weekly_earnings"):
        start = get_week_start_date(week_start or clock.now())
        records = await db_client.list_records(
            collection=COLLECTION,
            filter_query=(
                f'worker_id = "{db_client.sanitize_param(worker_id)}" && week_start = "{isoformat(start)}"'
            ),
            per_page=constants.DEFAULT_PER_PAGE_LIMIT * 10,
        )
        return sum(float(record["amount"]) for record in records)

"""Worker profile collaborator: the fields the workflow reads and writes."""

import logging

from panikkar.core import db_client
from panikkar.core.clock import Clock, isoformat, system_clock
from panikkar.core.config import constants
from panikkar.core.errors import ConcurrentUpdateError
from panikkar.core.logging import span
from panikkar.domain.worker import JobWorker


logger = logging.getLogger(__name__)

COLLECTION = "job_workers"


async def get_worker(*, worker_id: str) -> JobWorker:
    """Fetch a worker profile.

    Raises:
        db_client.RecordNotFoundError: If the worker does not exist
    """
    record = await db_client.get_record(collection=COLLECTION, record_id=worker_id)
    return JobWorker(**record)


async def create_worker(
    *,
    name: str,
    latitude: float | None = None,
    longitude: float | None = None,
    is_verified: bool = False,
) -> JobWorker:
    """Register a worker with empty rating and job history."""
    with span("worker_service.create_worker"):
        record = await db_client.create_record(
            collection=COLLECTION,
            data={
                "name": name,
                "latitude": latitude,
                "longitude": longitude,
                "rating": 0.0,
                "rating_count": 0,
                "jobs_completed": 0,
                "total_earnings": 0.0,
                "is_verified": is_verified,
                "last_active_at": None,
            },
        )
        logger.info("Created worker %s", record["id"])
        return JobWorker(**record)


async def list_worker_ids(*, page: int = 1, per_page: int = constants.DEFAULT_PER_PAGE_LIMIT) -> list[str]:
    records = await db_client.list_records(collection=COLLECTION, page=page, per_page=per_page, sort="id")
    return [record["id"] for record in records]


async def touch_last_active(*, worker_id: str, clock: Clock = system_clock) -> None:
    """Record workflow activity for the worker."""
    await db_client.update_record(
        collection=COLLECTION,
        record_id=worker_id,
        data={"last_active_at": isoformat(clock.now())},
    )


async def record_completed_job(*, worker_id: str, amount: float) -> JobWorker:
    """Count a completed job and add its pay to the worker's lifetime earnings.

    Raises:
        ConcurrentUpdateError: If concurrent writers keep winning the race
    """
    with span("worker_service.record_completed_job"):
        for _ in range(constants.CAS_MAX_RETRIES):
            worker = await get_worker(worker_id=worker_id)
            updated = await db_client.update_record_if(
                collection=COLLECTION,
                record_id=worker_id,
                data={
                    "jobs_completed": worker.jobs_completed + 1,
                    "total_earnings": worker.total_earnings + amount,
                },
                expected={"jobs_completed": worker.jobs_completed},
            )
            if updated is not None:
                logger.info("Worker %s completed job #%d", worker_id, worker.jobs_completed + 1)
                return JobWorker(**updated)

        msg = f"Could not record completed job for worker {worker_id}"
        raise ConcurrentUpdateError(msg)

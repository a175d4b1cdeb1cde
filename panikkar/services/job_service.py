"""Job lifecycle collaborator: status transitions and applicant counters."""

import logging

from panikkar.core import db_client
from panikkar.core.clock import Clock, isoformat, system_clock
from panikkar.core.config import constants
from panikkar.core.errors import ConcurrentUpdateError
from panikkar.core.logging import span
from panikkar.domain.job import JobPost, JobStatus


logger = logging.getLogger(__name__)

COLLECTION = "job_posts"


async def get_job(*, job_id: str) -> JobPost:
    """Fetch a job post.

    Raises:
        db_client.RecordNotFoundError: If the job does not exist
    """
    record = await db_client.get_record(collection=COLLECTION, record_id=job_id)
    return JobPost(**record)


async def create_job(
    *,
    title: str,
    poster_user_id: str,
    category: str,
    pay_amount: float = 0.0,
    latitude: float | None = None,
    longitude: float | None = None,
) -> JobPost:
    """Create an open job post. Job posting itself lives outside this package; this is used to bootstrap data."""
    with span("job_service.create_job"):
        record = await db_client.create_record(
            collection=COLLECTION,
            data={
                "title": title,
                "poster_user_id": poster_user_id,
                "category": category,
                "status": JobStatus.OPEN,
                "pay_amount": pay_amount,
                "latitude": latitude,
                "longitude": longitude,
                "assigned_worker_id": None,
                "applications_count": 0,
                "assigned_at": None,
                "started_at": None,
                "completed_at": None,
            },
        )
        logger.info("Created job %s (%s)", record["id"], category)
        return JobPost(**record)


async def _transition(
    *,
    job_id: str,
    from_status: JobStatus,
    to_status: JobStatus,
    data: dict | None = None,
    expected: dict | None = None,
) -> bool:
    """Move a job between statuses with a single conditional write."""
    updated = await db_client.update_record_if(
        collection=COLLECTION,
        record_id=job_id,
        data={"status": to_status, **(data or {})},
        expected={"status": from_status, **(expected or {})},
    )
    if updated is None:
        logger.info("Job %s not moved to %s: not in %s", job_id, to_status, from_status)
        return False

    logger.info("Job %s moved %s -> %s", job_id, from_status, to_status)
    return True


async def assign_worker(*, job_id: str, worker_id: str, clock: Clock = system_clock) -> bool:
    """Assign a worker to an open job (open -> assigned). Returns False if the job is not open."""
    with span("job_service.assign_worker"):
        return await _transition(
            job_id=job_id,
            from_status=JobStatus.OPEN,
            to_status=JobStatus.ASSIGNED,
            data={"assigned_worker_id": worker_id, "assigned_at": isoformat(clock.now())},
        )


async def unassign_worker(*, job_id: str, worker_id: str) -> bool:
    """Reopen a job that was assigned to this worker (assigned -> open)."""
    with span("job_service.unassign_worker"):
        return await _transition(
            job_id=job_id,
            from_status=JobStatus.ASSIGNED,
            to_status=JobStatus.OPEN,
            data={"assigned_worker_id": None, "assigned_at": None},
            expected={"assigned_worker_id": worker_id},
        )


async def start_job(*, job_id: str, clock: Clock = system_clock) -> bool:
    """Start work on an assigned job (assigned -> in_progress)."""
    with span("job_service.start_job"):
        return await _transition(
            job_id=job_id,
            from_status=JobStatus.ASSIGNED,
            to_status=JobStatus.IN_PROGRESS,
            data={"started_at": isoformat(clock.now())},
        )


async def complete_job(*, job_id: str, clock: Clock = system_clock) -> bool:
    """Complete a job in progress (in_progress -> completed)."""
    with span("job_service.complete_job"):
        return await _transition(
            job_id=job_id,
            from_status=JobStatus.IN_PROGRESS,
            to_status=JobStatus.COMPLETED,
            data={"completed_at": isoformat(clock.now())},
        )


async def _adjust_applications_count(*, job_id: str, delta: int) -> int:
    for _ in range(constants.CAS_MAX_RETRIES):
        job = await db_client.get_record(collection=COLLECTION, record_id=job_id)
        current = int(job.get("applications_count") or 0)
        new_count = max(0, current + delta)
        if new_count == current:
            return current

        updated = await db_client.update_record_if(
            collection=COLLECTION,
            record_id=job_id,
            data={"applications_count": new_count},
            expected={"applications_count": current},
        )
        if updated is not None:
            return new_count

    msg = f"Could not update applications count for job {job_id}"
    raise ConcurrentUpdateError(msg)


async def increment_applications_count(*, job_id: str) -> int:
    """Add one to the job's applicant counter and return the new value."""
    with span("job_service.increment_applications_count"):
        return await _adjust_applications_count(job_id=job_id, delta=1)


async def decrement_applications_count(*, job_id: str) -> int:
    """Subtract one from the job's applicant counter (never below zero) and return the new value."""
    with span("job_service.decrement_applications_count"):
        return await _adjust_applications_count(job_id=job_id, delta=-1)


async def get_job_category(*, job_id: str) -> str:
    """Read the job's category fresh from storage."""
    job = await db_client.get_record(collection=COLLECTION, record_id=job_id)
    return job["category"]


async def get_pay_amount(*, job_id: str) -> float:
    job = await db_client.get_record(collection=COLLECTION, record_id=job_id)
    return float(job.get("pay_amount") or 0)

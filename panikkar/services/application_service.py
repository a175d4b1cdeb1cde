"""Job application intake and responses.

Applications start pending and make exactly one move to accepted, rejected
or withdrawn. Every move is a conditional write on status = pending, so a
response that loses a race simply returns False.
"""

import logging
from datetime import datetime, timedelta

from panikkar.core import db_client
from panikkar.core.clock import Clock, isoformat, system_clock
from panikkar.core.config import constants, settings
from panikkar.core.errors import DuplicateApplicationError
from panikkar.core.geo import distance_km as measure_distance
from panikkar.core.geo import round_km
from panikkar.core.logging import span
from panikkar.domain.application import JobApplication, JobApplicationStatus
from panikkar.domain.job import JobStatus
from panikkar.services import job_service, worker_service


logger = logging.getLogger(__name__)

COLLECTION = "job_applications"


async def get_application(*, application_id: str) -> JobApplication:
    """Fetch an application.

    Raises:
        db_client.RecordNotFoundError: If the application does not exist
    """
    record = await db_client.get_record(collection=COLLECTION, record_id=application_id)
    return JobApplication(**record)


async def get_worker_application(*, job_id: str, worker_id: str) -> JobApplication | None:
    record = await db_client.get_first_record(
        collection=COLLECTION,
        filter_query=(
            f'job_post_id = "{db_client.sanitize_param(job_id)}" && '
            f'worker_id = "{db_client.sanitize_param(worker_id)}"'
        ),
    )
    return JobApplication(**record) if record else None


async def get_applications_for_job(
    *,
    job_id: str,
    status: JobApplicationStatus | None = None,
) -> list[JobApplication]:
    """Applications for a job in the order they arrived, optionally filtered by status."""
    filter_query = f'job_post_id = "{db_client.sanitize_param(job_id)}"'
    if status is not None:
        filter_query += f' && status = "{status}"'

    records = await db_client.list_records(
        collection=COLLECTION,
        filter_query=filter_query,
        sort="applied_at",
        per_page=constants.DEFAULT_PER_PAGE_LIMIT,
    )
    return [JobApplication(**record) for record in records]


async def apply_to_job(
    *,
    job_id: str,
    worker_id: str,
    message: str = "",
    proposed_amount: float | None = None,
    applied_at: datetime | None = None,
    distance_km: float | None = None,
    clock: Clock = system_clock,
) -> JobApplication:
    """Create a pending application and bump the job's applicant counter.

    Distance is computed from the worker's and job's coordinates when not
    given, and left unknown (None) if either location is missing.

    Raises:
        DuplicateApplicationError: If the worker already applied to this job
        db_client.RecordNotFoundError: If the job or worker does not exist
    """
    with span("application_service.apply_to_job"):
        if await get_worker_application(job_id=job_id, worker_id=worker_id) is not None:
            msg = f"Worker {worker_id} has already applied to job {job_id}"
            raise DuplicateApplicationError(msg)

        if distance_km is None:
            job = await job_service.get_job(job_id=job_id)
            worker = await worker_service.get_worker(worker_id=worker_id)
            distance_km = measure_distance(worker.coordinates, job.coordinates)

        try:
            record = await db_client.create_record(
                collection=COLLECTION,
                data={
                    "job_post_id": job_id,
                    "worker_id": worker_id,
                    "message": message,
                    "proposed_amount": proposed_amount,
                    "status": JobApplicationStatus.PENDING,
                    "distance_km": round_km(distance_km),
                    "applied_at": isoformat(applied_at or clock.now()),
                    "responded_at": None,
                },
            )
        except db_client.DuplicateRecordError as e:
            msg = f"Worker {worker_id} has already applied to job {job_id}"
            raise DuplicateApplicationError(msg) from e

        await job_service.increment_applications_count(job_id=job_id)

        logger.info(
            "Worker %s applied to job %s (distance=%s km)",
            worker_id,
            job_id,
            record.get("distance_km"),
        )
        return JobApplication(**record)


async def _respond(
    *,
    application_id: str,
    status: JobApplicationStatus,
    clock: Clock,
) -> JobApplication | None:
    """Move a pending application to a final status. Returns None if it was not pending."""
    updated = await db_client.update_record_if(
        collection=COLLECTION,
        record_id=application_id,
        data={"status": status, "responded_at": isoformat(clock.now())},
        expected={"status": JobApplicationStatus.PENDING},
    )
    if updated is None:
        logger.info("Application %s not moved to %s: no longer pending", application_id, status)
        return None
    return JobApplication(**updated)


async def accept_application(*, application_id: str, clock: Clock = system_clock) -> bool:
    """Accept an application, assign its worker and reject the other pending applicants.

    Returns:
        False without changing anything if the application is not pending or
        the job is no longer open
    """
    with span("application_service.accept_application"):
        application = await get_application(application_id=application_id)
        if not application.is_pending:
            logger.info("Cannot accept application %s: status is %s", application_id, application.status)
            return False

        job = await job_service.get_job(job_id=application.job_post_id)
        if job.status != JobStatus.OPEN:
            logger.info("Cannot accept application %s: job %s is %s", application_id, job.id, job.status)
            return False

        # The job assignment is the single point that lets only one application win
        if not await job_service.assign_worker(job_id=job.id, worker_id=application.worker_id, clock=clock):
            return False

        if await _respond(application_id=application_id, status=JobApplicationStatus.ACCEPTED, clock=clock) is None:
            await job_service.unassign_worker(job_id=job.id, worker_id=application.worker_id)
            return False

        others = await get_applications_for_job(job_id=job.id, status=JobApplicationStatus.PENDING)
        for other in others:
            await _respond(application_id=other.id, status=JobApplicationStatus.REJECTED, clock=clock)

        logger.info(
            "Accepted application %s: worker %s assigned to job %s (%d others rejected)",
            application_id,
            application.worker_id,
            job.id,
            len(others),
        )
        return True


async def reject_application(*, application_id: str, clock: Clock = system_clock) -> bool:
    """Reject a pending application. Returns False if it was not pending."""
    with span("application_service.reject_application"):
        rejected = await _respond(application_id=application_id, status=JobApplicationStatus.REJECTED, clock=clock)
        return rejected is not None


async def withdraw_application(*, application_id: str, clock: Clock = system_clock) -> bool:
    """Withdraw a pending application and release its slot in the job's applicant counter."""
    with span("application_service.withdraw_application"):
        withdrawn = await _respond(application_id=application_id, status=JobApplicationStatus.WITHDRAWN, clock=clock)
        if withdrawn is None:
            return False

        await job_service.decrement_applications_count(job_id=withdrawn.job_post_id)
        return True


async def withdraw_stale_applications(
    *,
    hours_old: int | None = None,
    clock: Clock = system_clock,
) -> int:
    """Withdraw applications still pending after hours_old hours.

    Returns:
        Number of applications withdrawn
    """
    with span("application_service.withdraw_stale_applications"):
        hours = hours_old if hours_old is not None else settings.stale_application_hours
        cutoff = isoformat(clock.now() - timedelta(hours=hours))

        stale = await db_client.list_records(
            collection=COLLECTION,
            filter_query=f'status = "{JobApplicationStatus.PENDING}" && applied_at < "{cutoff}"',
            sort="applied_at",
            per_page=constants.STALE_APPLICATION_BATCH_SIZE,
        )

        withdrawn = 0
        for record in stale:
            if await withdraw_application(application_id=record["id"], clock=clock):
                withdrawn += 1

        if withdrawn:
            logger.info("Withdrew %d stale applications older than %d hours", withdrawn, hours)
        return withdrawn

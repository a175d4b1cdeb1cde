"""Job verification workflow.

Drives a job from the worker's arrival to payment and rating. Every
confirmation is a single-column conditional write that only stamps an unset
timestamp, so the two parties can confirm concurrently without losing each
other's flag and a repeated confirmation keeps its first timestamp.

Completing the underlying job is deferred to payment: confirm_payment
completes the job only when both completion flags are already set. A payment
recorded before mutual completion leaves the job in progress, and a later
completion confirmation does not complete it retroactively.
"""

import logging
from typing import Any

from panikkar.core import db_client
from panikkar.core.clock import Clock, isoformat, system_clock
from panikkar.core.errors import ConcurrentUpdateError, InvalidStateTransitionError
from panikkar.core.geo import Coordinates
from panikkar.core.logging import span
from panikkar.domain.job import JobStatus, is_handover_category
from panikkar.domain.verification import JobVerification, Party, PaymentMethod, RatingOutcome
from panikkar.services import badge_service, earnings_service, job_service, rating_service, worker_service


logger = logging.getLogger(__name__)

COLLECTION = "job_verifications"

_HANDOVER_FIELDS = {
    Party.WORKER: "handover_worker_confirmed_at",
    Party.POSTER: "handover_poster_confirmed_at",
}

_COMPLETION_FIELDS = {
    Party.WORKER: "worker_confirmed_at",
    Party.POSTER: "poster_confirmed_at",
}


async def get_verification(*, verification_id: str) -> JobVerification:
    """Fetch a verification record.

    Raises:
        db_client.RecordNotFoundError: If the record does not exist
    """
    record = await db_client.get_record(collection=COLLECTION, record_id=verification_id)
    return JobVerification(**record)


async def get_verification_for_job(*, job_id: str) -> JobVerification | None:
    record = await db_client.get_first_record(
        collection=COLLECTION,
        filter_query=f'job_post_id = "{db_client.sanitize_param(job_id)}"',
    )
    return JobVerification(**record) if record else None


async def _stamp_once(
    *,
    verification_id: str,
    field: str,
    clock: Clock,
    data: dict[str, Any] | None = None,
) -> tuple[JobVerification, bool]:
    """Set a timestamp field if it is still unset, writing data alongside it.

    Returns:
        Tuple of (current record, whether this call set the timestamp)
    """
    updated = await db_client.update_record_if(
        collection=COLLECTION,
        record_id=verification_id,
        data={field: isoformat(clock.now()), **(data or {})},
        expected={field: None},
    )
    if updated is None:
        logger.debug("Verification %s already has %s", verification_id, field)
        return await get_verification(verification_id=verification_id), False
    return JobVerification(**updated), True


def _require_arrival(verification: JobVerification, action: str) -> None:
    if not verification.is_arrived:
        msg = f"Cannot {action}: worker has not arrived for job {verification.job_post_id}"
        raise InvalidStateTransitionError(msg)


async def start_execution(*, job_id: str) -> JobVerification:
    """Get or create the verification record for an assigned job.

    Raises:
        InvalidStateTransitionError: If the job has no assigned worker or is not assigned/in progress
    """
    with span("verification_service.start_execution"):
        job = await job_service.get_job(job_id=job_id)
        if job.status not in {JobStatus.ASSIGNED, JobStatus.IN_PROGRESS} or not job.assigned_worker_id:
            msg = f"Cannot start execution: job {job_id} is {job.status} with no active assignment"
            raise InvalidStateTransitionError(msg)

        existing = await get_verification_for_job(job_id=job_id)
        if existing is not None:
            return existing

        try:
            record = await db_client.create_record(
                collection=COLLECTION,
                data={"job_post_id": job_id, "worker_id": job.assigned_worker_id, "has_dispute": False},
            )
        except db_client.DuplicateRecordError:
            # Another request created it first
            existing = await get_verification_for_job(job_id=job_id)
            if existing is None:
                raise
            return existing

        logger.info("Started execution for job %s (worker %s)", job_id, job.assigned_worker_id)
        return JobVerification(**record)


async def record_arrival(
    *,
    verification_id: str,
    photo_url: str | None = None,
    latitude: float | None = None,
    longitude: float | None = None,
    clock: Clock = system_clock,
) -> JobVerification:
    """Record that the worker arrived and move the job to in progress.

    The first call stamps the arrival time. Later calls refresh the photo and
    coordinates they are given but keep the original timestamp.
    """
    with span("verification_service.record_arrival"):
        if latitude is not None and longitude is not None:
            Coordinates(latitude=latitude, longitude=longitude)

        details = {
            key: value
            for key, value in {
                "arrival_photo_url": photo_url,
                "arrival_latitude": latitude,
                "arrival_longitude": longitude,
            }.items()
            if value is not None
        }

        verification, first_arrival = await _stamp_once(
            verification_id=verification_id,
            field="arrival_verified_at",
            clock=clock,
            data=details,
        )
        if not first_arrival and details:
            record = await db_client.update_record(collection=COLLECTION, record_id=verification_id, data=details)
            verification = JobVerification(**record)

        await job_service.start_job(job_id=verification.job_post_id, clock=clock)
        await worker_service.touch_last_active(worker_id=verification.worker_id, clock=clock)

        logger.info(
            "Worker %s arrived for job %s (first=%s)",
            verification.worker_id,
            verification.job_post_id,
            first_arrival,
        )
        return verification


async def confirm_arrival(*, verification_id: str, clock: Clock = system_clock) -> JobVerification:
    """Poster confirms the worker is on site.

    Raises:
        InvalidStateTransitionError: If the worker has not arrived yet
    """
    with span("verification_service.confirm_arrival"):
        verification = await get_verification(verification_id=verification_id)
        _require_arrival(verification, "confirm arrival")

        verification, _ = await _stamp_once(verification_id=verification_id, field="arrival_confirmed_at", clock=clock)
        return verification


async def confirm_handover(
    *,
    verification_id: str,
    confirmed_by: Party,
    clock: Clock = system_clock,
) -> JobVerification:
    """Confirm the queue/standing handover for one party.

    Does nothing for jobs outside the handover categories. The category is
    read from the job at call time.
    """
    with span("verification_service.confirm_handover"):
        verification = await get_verification(verification_id=verification_id)
        category = await job_service.get_job_category(job_id=verification.job_post_id)
        if not is_handover_category(category):
            logger.info("Ignoring handover for job %s: category %s has no handover", verification.job_post_id, category)
            return verification

        verification, _ = await _stamp_once(
            verification_id=verification_id,
            field=_HANDOVER_FIELDS[Party(confirmed_by)],
            clock=clock,
        )
        return verification


async def confirm_completion(
    *,
    verification_id: str,
    confirmed_by: Party,
    clock: Clock = system_clock,
) -> JobVerification:
    """Confirm the work is done for one party. Never completes the job itself."""
    with span("verification_service.confirm_completion"):
        verification, newly_set = await _stamp_once(
            verification_id=verification_id,
            field=_COMPLETION_FIELDS[Party(confirmed_by)],
            clock=clock,
        )
        if newly_set:
            logger.info("Job %s completion confirmed by %s", verification.job_post_id, confirmed_by)
        return verification


async def record_completion(
    *,
    verification_id: str,
    photo_url: str | None = None,
    clock: Clock = system_clock,
) -> JobVerification:
    """Attach completion evidence. Informational only."""
    with span("verification_service.record_completion"):
        details = {"completion_photo_url": photo_url} if photo_url is not None else {}
        verification, first = await _stamp_once(
            verification_id=verification_id,
            field="completion_verified_at",
            clock=clock,
            data=details,
        )
        if not first and details:
            record = await db_client.update_record(collection=COLLECTION, record_id=verification_id, data=details)
            verification = JobVerification(**record)
        return verification


async def _finish_job(*, verification: JobVerification, clock: Clock) -> bool:
    """Complete the job and book the worker's pay. Returns False if the job was not in progress."""
    completed = await job_service.complete_job(job_id=verification.job_post_id, clock=clock)
    if not completed:
        return False

    amount = await job_service.get_pay_amount(job_id=verification.job_post_id)
    await worker_service.record_completed_job(worker_id=verification.worker_id, amount=amount)
    await earnings_service.record_earning(
        worker_id=verification.worker_id,
        job_id=verification.job_post_id,
        amount=amount,
        clock=clock,
    )
    return True


async def confirm_payment(
    *,
    verification_id: str,
    method: PaymentMethod,
    reference: str | None = None,
    clock: Clock = system_clock,
) -> JobVerification:
    """Record the payment, completing the job if both parties already confirmed completion.

    Method and reference are overwritten on repeat calls; the confirmation
    time is kept from the first call.
    """
    with span("verification_service.confirm_payment"):
        method = PaymentMethod(method)
        if method.requires_reference and not reference:
            logger.warning("Payment for verification %s via %s has no reference", verification_id, method)

        details = {"payment_method": method, "payment_reference": reference}
        _, first = await _stamp_once(
            verification_id=verification_id,
            field="payment_confirmed_at",
            clock=clock,
            data=details,
        )
        if not first:
            await db_client.update_record(collection=COLLECTION, record_id=verification_id, data=details)

        # Completion flags must come from a fresh read, not the record returned above
        verification = await get_verification(verification_id=verification_id)
        if not verification.is_mutually_confirmed:
            logger.info(
                "Payment recorded for job %s before mutual completion; job stays in progress",
                verification.job_post_id,
            )
            return verification

        if await _finish_job(verification=verification, clock=clock):
            logger.info("Job %s completed on payment (%s)", verification.job_post_id, method)
        return verification


async def rate_worker(
    *,
    verification_id: str,
    rating: float,
    comment: str | None = None,
    clock: Clock = system_clock,
) -> RatingOutcome | None:
    """Poster rates the worker once, then the worker's average and milestones are updated.

    If the worker aggregate cannot be updated the rating is cleared again so
    the same rating can be resubmitted.

    Returns:
        The outcome, or None if this job was already rated

    Raises:
        InvalidStateTransitionError: If the worker has not arrived yet
        ConcurrentUpdateError: If the worker aggregate kept losing races
        db_client.RecordNotFoundError: If the worker does not exist
    """
    with span("verification_service.rate_worker"):
        verification = await get_verification(verification_id=verification_id)
        _require_arrival(verification, "rate worker")

        stars = rating_service.clamp_rating(rating)
        updated = await db_client.update_record_if(
            collection=COLLECTION,
            record_id=verification_id,
            data={"rating": stars, "rating_comment": comment, "rated_at": isoformat(clock.now())},
            expected={"rating": None},
        )
        if updated is None:
            logger.info("Verification %s already rated; ignoring new rating", verification_id)
            return None

        try:
            average, count = await rating_service.apply_rating(worker_id=verification.worker_id, rating=stars)
        except (ConcurrentUpdateError, db_client.RecordNotFoundError):
            logger.error(
                "Rating for verification %s not applied to worker %s; clearing it",
                verification_id,
                verification.worker_id,
            )
            await db_client.update_record(
                collection=COLLECTION,
                record_id=verification_id,
                data={"rating": None, "rating_comment": None, "rated_at": None},
            )
            raise

        badges = await badge_service.check_milestones(worker_id=verification.worker_id, clock=clock)

        return RatingOutcome(
            verification=JobVerification(**updated),
            average=average,
            rating_count=count,
            awarded_badges=badges,
        )


async def rate_poster(
    *,
    verification_id: str,
    rating: float,
    feedback: str | None = None,
) -> JobVerification | None:
    """Worker rates the poster once. Returns None if already rated.

    Raises:
        InvalidStateTransitionError: If the worker has not arrived yet
    """
    with span("verification_service.rate_poster"):
        verification = await get_verification(verification_id=verification_id)
        _require_arrival(verification, "rate poster")

        updated = await db_client.update_record_if(
            collection=COLLECTION,
            record_id=verification_id,
            data={"worker_rating": rating_service.clamp_rating(rating), "worker_feedback": feedback},
            expected={"worker_rating": None},
        )
        return JobVerification(**updated) if updated else None


async def raise_dispute(*, verification_id: str, reason: str, clock: Clock = system_clock) -> JobVerification:
    """Flag the job as disputed. Prior confirmations are untouched.

    A repeat call replaces the reason but keeps the original dispute time.

    Raises:
        InvalidStateTransitionError: If the worker has not arrived yet
    """
    with span("verification_service.raise_dispute"):
        verification = await get_verification(verification_id=verification_id)
        _require_arrival(verification, "raise dispute")

        verification, first = await _stamp_once(
            verification_id=verification_id,
            field="disputed_at",
            clock=clock,
            data={"has_dispute": True, "dispute_reason": reason},
        )
        if first:
            logger.warning("Dispute raised on job %s: %s", verification.job_post_id, reason)
        elif verification.dispute_reason != reason:
            record = await db_client.update_record(
                collection=COLLECTION, record_id=verification_id, data={"dispute_reason": reason}
            )
            verification = JobVerification(**record)
            logger.info("Dispute reason on job %s updated: %s", verification.job_post_id, reason)
        return verification


async def resolve_dispute(
    *,
    verification_id: str,
    resolution: str,
    clock: Clock = system_clock,
) -> JobVerification:
    """Record how a dispute was settled. The dispute flag stays set.

    Raises:
        InvalidStateTransitionError: If no dispute was raised
    """
    with span("verification_service.resolve_dispute"):
        verification = await get_verification(verification_id=verification_id)
        if not verification.has_dispute:
            msg = f"Cannot resolve dispute: no dispute raised on job {verification.job_post_id}"
            raise InvalidStateTransitionError(msg)

        verification, _ = await _stamp_once(
            verification_id=verification_id,
            field="resolved_at",
            clock=clock,
            data={"dispute_resolution": resolution},
        )
        logger.info("Dispute on job %s resolved", verification.job_post_id)
        return verification


async def _in_progress_verifications(*, poster_user_id: str) -> list[JobVerification]:
    jobs = await db_client.list_records(
        collection="job_posts",
        filter_query=(
            f'poster_user_id = "{db_client.sanitize_param(poster_user_id)}" && status = "{JobStatus.IN_PROGRESS}"'
        ),
        sort="id",
    )
    verifications = []
    for job in jobs:
        verification = await get_verification_for_job(job_id=job["id"])
        if verification is not None:
            verifications.append(verification)
    return verifications


async def get_jobs_pending_poster_confirmation(*, poster_user_id: str) -> list[JobVerification]:
    """Jobs the worker has marked done that still wait for the poster's confirmation."""
    with span("verification_service.get_jobs_pending_poster_confirmation"):
        verifications = await _in_progress_verifications(poster_user_id=poster_user_id)
        return [v for v in verifications if v.is_worker_confirmed and not v.is_poster_confirmed]


async def get_jobs_pending_payment(*, poster_user_id: str) -> list[JobVerification]:
    """Mutually confirmed jobs whose payment has not been confirmed."""
    with span("verification_service.get_jobs_pending_payment"):
        verifications = await _in_progress_verifications(poster_user_id=poster_user_id)
        return [v for v in verifications if v.is_mutually_confirmed and not v.is_payment_confirmed]


async def get_status_summary(*, verification_id: str, clock: Clock = system_clock) -> dict[str, Any]:
    verification = await get_verification(verification_id=verification_id)
    return verification.to_status_summary(clock.now())

"""Rolling worker rating aggregate."""

import logging
import math

from panikkar.core import db_client
from panikkar.core.config import constants
from panikkar.core.errors import ConcurrentUpdateError
from panikkar.core.logging import span


logger = logging.getLogger(__name__)

WORKERS_COLLECTION = "job_workers"


def clamp_rating(value: float) -> int:
    """Clamp a rating into the 1-5 range. Out-of-range input is never rejected.

    NaN counts as the lowest rating; infinities clamp to the nearest bound.
    """
    if math.isnan(value):
        return constants.MIN_RATING
    return round(max(constants.MIN_RATING, min(constants.MAX_RATING, value)))


def update_average(current_average: float, current_count: int, new_rating: float) -> tuple[float, int]:
    """Fold one rating into a rolling average.

    Args:
        current_average: The worker's average before this rating
        current_count: How many ratings make up current_average
        new_rating: Incoming rating, clamped to 1-5 before use

    Returns:
        Tuple of (new_average, new_count)
    """
    rating = clamp_rating(new_rating)
    new_count = current_count + 1
    new_average = (current_average * current_count + rating) / new_count
    return new_average, new_count


async def apply_rating(*, worker_id: str, rating: float) -> tuple[float, int]:
    """Persist a new rating into the worker's average and count together.

    Both fields are written in one conditional update keyed on the count the
    average was computed from; a concurrent rater forces a re-read and retry.

    Returns:
        Tuple of (new_average, new_count) as stored

    Raises:
        ConcurrentUpdateError: If retries are exhausted
        db_client.RecordNotFoundError: If the worker does not exist
    """
    with span("rating_service.apply_rating"):
        for attempt in range(1, constants.CAS_MAX_RETRIES + 1):
            worker = await db_client.get_record(collection=WORKERS_COLLECTION, record_id=worker_id)
            current_average = float(worker.get("rating") or 0.0)
            current_count = int(worker.get("rating_count") or 0)

            new_average, new_count = update_average(current_average, current_count, rating)

            updated = await db_client.update_record_if(
                collection=WORKERS_COLLECTION,
                record_id=worker_id,
                data={"rating": new_average, "rating_count": new_count},
                expected={"rating_count": current_count},
            )
            if updated is not None:
                logger.info(
                    "Worker %s rating now %.2f over %d ratings",
                    worker_id,
                    new_average,
                    new_count,
                )
                return new_average, new_count

            logger.debug("Rating update for worker %s lost a race (attempt %d)", worker_id, attempt)

        msg = f"Could not apply rating for worker {worker_id} after {constants.CAS_MAX_RETRIES} attempts"
        raise ConcurrentUpdateError(msg)

"""Badge evaluation and awarding.

Badges are evaluated against the requirement table in domain/badge.py and
awarded at most once per worker. The unique (worker_id, badge_type) index is
the final guard against concurrent awards. Badges are never revoked.
"""

import logging
from typing import Any

from panikkar.core import db_client
from panikkar.core.clock import Clock, isoformat, system_clock
from panikkar.core.config import constants
from panikkar.core.logging import log_with_context, span
from panikkar.domain.badge import (
    BADGE_REQUIREMENTS,
    MILESTONE_BADGES,
    PERFORMANCE_BADGES,
    RELIABILITY_BADGES,
    BadgeRequirement,
    BadgeType,
    RequirementKind,
    WorkerBadge,
)
from panikkar.domain.job import JobStatus
from panikkar.domain.worker import JobWorker
from panikkar.services import earnings_service, worker_service


logger = logging.getLogger(__name__)

COLLECTION = "worker_badges"


async def has_badge(*, worker_id: str, badge_type: BadgeType) -> bool:
    existing = await db_client.get_first_record(
        collection=COLLECTION,
        filter_query=f'worker_id = "{db_client.sanitize_param(worker_id)}" && badge_type = "{badge_type}"',
    )
    return existing is not None


async def _count_category_jobs(*, worker_id: str, category: str, limit: int) -> int:
    """Count completed jobs in a category, stopping once limit is reached."""
    records = await db_client.list_records(
        collection="job_posts",
        filter_query=(
            f'assigned_worker_id = "{db_client.sanitize_param(worker_id)}" && '
            f'status = "{JobStatus.COMPLETED}" && '
            f'category = "{db_client.sanitize_param(category)}"'
        ),
        per_page=limit,
    )
    return len(records)


async def _measure(
    *,
    worker: JobWorker,
    requirement: BadgeRequirement,
    clock: Clock,
) -> dict[str, Any] | None:
    """Return the qualifying metrics snapshot, or None if the requirement is not met."""
    match requirement.kind:
        case RequirementKind.TOTAL_JOBS:
            if worker.jobs_completed >= requirement.count:
                return {"jobs_completed": worker.jobs_completed}

        case RequirementKind.RATING_STREAK:
            if worker.rating_count >= requirement.count and worker.rating >= requirement.min_rating:
                return {"rating": worker.rating, "rating_count": worker.rating_count}

        case RequirementKind.WEEKLY_EARNINGS:
            now = clock.now()
            weekly = await earnings_service.get_weekly_earnings(worker_id=worker.id, week_start=now, clock=clock)
            if weekly >= requirement.amount:
                week_start = earnings_service.get_week_start_date(now)
                return {"weekly_earnings": weekly, "week_start": isoformat(week_start)}

        case RequirementKind.CATEGORY_JOBS:
            category = requirement.category or ""
            jobs = await _count_category_jobs(worker_id=worker.id, category=category, limit=requirement.count)
            if jobs >= requirement.count:
                return {"category": category, "category_jobs": jobs}

        case RequirementKind.VERIFIED_WITH_JOBS:
            if (
                worker.is_verified
                and worker.jobs_completed >= requirement.count
                and worker.rating >= requirement.min_rating
            ):
                return {"jobs_completed": worker.jobs_completed, "rating": worker.rating, "is_verified": True}

    return None


async def award_badge(
    *,
    worker_id: str,
    badge_type: BadgeType,
    achievement_data: dict[str, Any] | None = None,
    clock: Clock = system_clock,
) -> WorkerBadge | None:
    """Persist a badge grant. Returns None if the worker already holds it."""
    with span("badge_service.award_badge"):
        try:
            record = await db_client.create_record(
                collection=COLLECTION,
                data={
                    "worker_id": worker_id,
                    "badge_type": badge_type,
                    "badge_name": badge_type.label,
                    "badge_icon": badge_type.icon,
                    "achievement_data": achievement_data or {},
                    "earned_at": isoformat(clock.now()),
                },
            )
        except db_client.DuplicateRecordError:
            logger.info("Worker %s already holds badge %s", worker_id, badge_type)
            return None

        log_with_context(
            logger,
            "info",
            "Badge awarded",
            worker_id=worker_id,
            badge_type=str(badge_type),
            tier=badge_type.tier_label,
        )
        return WorkerBadge(**record)


async def evaluate(
    *,
    worker_id: str,
    badge_type: BadgeType,
    clock: Clock = system_clock,
) -> WorkerBadge | None:
    """Award badge_type if the worker qualifies and does not already hold it.

    Returns:
        The newly awarded badge, or None if it was already held, the worker
        does not qualify, or the badge has no automatic requirement
    """
    with span("badge_service.evaluate"):
        requirement = BADGE_REQUIREMENTS.get(badge_type)
        if requirement is None:
            logger.debug("Badge %s has no automatic requirement", badge_type)
            return None

        if await has_badge(worker_id=worker_id, badge_type=badge_type):
            return None

        worker = await worker_service.get_worker(worker_id=worker_id)
        snapshot = await _measure(worker=worker, requirement=requirement, clock=clock)
        if snapshot is None:
            return None

        return await award_badge(worker_id=worker_id, badge_type=badge_type, achievement_data=snapshot, clock=clock)


async def _evaluate_all(*, worker_id: str, badge_types: tuple[BadgeType, ...], clock: Clock) -> list[WorkerBadge]:
    awarded = []
    for badge_type in badge_types:
        badge = await evaluate(worker_id=worker_id, badge_type=badge_type, clock=clock)
        if badge is not None:
            awarded.append(badge)
    return awarded


async def check_milestones(*, worker_id: str, clock: Clock = system_clock) -> list[WorkerBadge]:
    """Evaluate the milestone badges in order and return every newly awarded one."""
    with span("badge_service.check_milestones"):
        return await _evaluate_all(worker_id=worker_id, badge_types=MILESTONE_BADGES, clock=clock)


async def check_all_badges(*, worker_id: str, clock: Clock = system_clock) -> list[WorkerBadge]:
    """Evaluate every automatically earned badge for one worker, milestones first."""
    with span("badge_service.check_all_badges"):
        awarded = await check_milestones(worker_id=worker_id, clock=clock)
        awarded += await _evaluate_all(worker_id=worker_id, badge_types=PERFORMANCE_BADGES, clock=clock)
        awarded += await _evaluate_all(worker_id=worker_id, badge_types=RELIABILITY_BADGES, clock=clock)
        return awarded


async def get_worker_badges(*, worker_id: str) -> list[WorkerBadge]:
    """All badges the worker holds, newest first."""
    records = await db_client.list_records(
        collection=COLLECTION,
        filter_query=f'worker_id = "{db_client.sanitize_param(worker_id)}"',
        sort="-earned_at",
        per_page=constants.DEFAULT_PER_PAGE_LIMIT,
    )
    return [WorkerBadge(**record) for record in records]

"""Unit tests for badge_service module."""

from datetime import timedelta

import pytest

from panikkar.core.db_client import RecordNotFoundError
from panikkar.domain.badge import BADGE_REQUIREMENTS, BadgeType
from panikkar.domain.job import JobCategory, JobStatus
from panikkar.services import badge_service, earnings_service
from tests.conftest import FixedClock


async def _set_worker_stats(db, worker_id: str, **fields) -> None:
    await db.update_record("job_workers", worker_id, fields)


@pytest.mark.unit
@pytest.mark.asyncio
class TestMilestones:
    """Tests for job-count milestones."""

    async def test_no_jobs_no_badge(self, worker, clock):
        assert await badge_service.check_milestones(worker_id=worker.id, clock=clock) == []

    async def test_first_job(self, patched_db, worker, clock):
        await _set_worker_stats(patched_db, worker.id, jobs_completed=1)

        awarded = await badge_service.check_milestones(worker_id=worker.id, clock=clock)

        assert [b.badge_type for b in awarded] == [BadgeType.FIRST_JOB]
        badge = awarded[0]
        assert badge.badge_name == "First Job"
        assert badge.achievement_data == {"jobs_completed": 1}
        assert badge.earned_at == clock.now().isoformat()

    async def test_catching_up_awards_every_threshold_crossed(self, patched_db, worker, clock):
        await _set_worker_stats(patched_db, worker.id, jobs_completed=12)

        awarded = await badge_service.check_milestones(worker_id=worker.id, clock=clock)

        assert [b.badge_type for b in awarded] == [BadgeType.FIRST_JOB, BadgeType.TEN_JOBS]

    async def test_badges_are_awarded_once(self, patched_db, worker, clock):
        await _set_worker_stats(patched_db, worker.id, jobs_completed=1)
        await badge_service.check_milestones(worker_id=worker.id, clock=clock)

        assert await badge_service.check_milestones(worker_id=worker.id, clock=clock) == []
        assert len(await badge_service.get_worker_badges(worker_id=worker.id)) == 1

    async def test_duplicate_award_returns_none(self, worker, clock):
        first = await badge_service.award_badge(worker_id=worker.id, badge_type=BadgeType.PUNCTUAL, clock=clock)
        second = await badge_service.award_badge(worker_id=worker.id, badge_type=BadgeType.PUNCTUAL, clock=clock)

        assert first is not None
        assert second is None


@pytest.mark.unit
@pytest.mark.asyncio
class TestPerformanceBadges:
    """Tests for rating, earnings and category badges."""

    async def test_five_star_needs_twenty_ratings(self, patched_db, worker, clock):
        await _set_worker_stats(patched_db, worker.id, rating=5.0, rating_count=19)
        assert await badge_service.evaluate(worker_id=worker.id, badge_type=BadgeType.FIVE_STAR, clock=clock) is None

        await _set_worker_stats(patched_db, worker.id, rating_count=20)
        badge = await badge_service.evaluate(worker_id=worker.id, badge_type=BadgeType.FIVE_STAR, clock=clock)

        assert badge is not None
        assert badge.achievement_data == {"rating": 5.0, "rating_count": 20}

    async def test_five_star_needs_perfect_average(self, patched_db, worker, clock):
        await _set_worker_stats(patched_db, worker.id, rating=4.95, rating_count=40)

        assert await badge_service.evaluate(worker_id=worker.id, badge_type=BadgeType.FIVE_STAR, clock=clock) is None

    async def test_top_earner_uses_current_week(self, worker, clock):
        last_week = clock.current - timedelta(days=7)
        await earnings_service.record_earning(worker_id=worker.id, job_id="1", amount=9000, clock=FixedClock(last_week))
        await earnings_service.record_earning(worker_id=worker.id, job_id="2", amount=6000, clock=clock)

        assert await badge_service.evaluate(worker_id=worker.id, badge_type=BadgeType.TOP_EARNER, clock=clock) is None

        await earnings_service.record_earning(worker_id=worker.id, job_id="3", amount=4000, clock=clock)
        badge = await badge_service.evaluate(worker_id=worker.id, badge_type=BadgeType.TOP_EARNER, clock=clock)

        assert badge is not None
        assert badge.achievement_data["weekly_earnings"] == 10000

    async def test_queue_master_counts_completed_queue_jobs(self, patched_db, job_factory, worker, clock):
        for index in range(10):
            job = await job_factory(title=f"Queue {index}", category=JobCategory.QUEUE_STANDING)
            await patched_db.update_record(
                "job_posts",
                job.id,
                {"status": JobStatus.COMPLETED, "assigned_worker_id": worker.id},
            )

        badge = await badge_service.evaluate(worker_id=worker.id, badge_type=BadgeType.QUEUE_MASTER, clock=clock)

        assert badge is not None
        assert badge.achievement_data == {"category": "queue_standing", "category_jobs": 10}

    async def test_queue_master_ignores_other_categories(self, patched_db, job_factory, worker, clock):
        for index in range(10):
            job = await job_factory(title=f"Parcel {index}")
            await patched_db.update_record(
                "job_posts",
                job.id,
                {"status": JobStatus.COMPLETED, "assigned_worker_id": worker.id},
            )

        assert await badge_service.evaluate(worker_id=worker.id, badge_type=BadgeType.QUEUE_MASTER, clock=clock) is None

    async def test_trusted_requires_verified_profile(self, patched_db, worker, clock):
        await _set_worker_stats(patched_db, worker.id, jobs_completed=50, rating=4.6)
        assert await badge_service.evaluate(worker_id=worker.id, badge_type=BadgeType.TRUSTED, clock=clock) is None

        await _set_worker_stats(patched_db, worker.id, is_verified=True)
        assert await badge_service.evaluate(worker_id=worker.id, badge_type=BadgeType.TRUSTED, clock=clock) is not None

    async def test_badge_without_requirement_is_never_automatic(self, patched_db, worker, clock):
        await _set_worker_stats(patched_db, worker.id, jobs_completed=500, rating=5.0, rating_count=500)

        assert BadgeType.SPEED_RUNNER not in BADGE_REQUIREMENTS
        assert await badge_service.evaluate(worker_id=worker.id, badge_type=BadgeType.SPEED_RUNNER, clock=clock) is None


@pytest.mark.unit
@pytest.mark.asyncio
class TestCheckAllBadges:
    """Tests for the full per-worker evaluation."""

    async def test_milestones_come_first(self, patched_db, worker, clock):
        await _set_worker_stats(patched_db, worker.id, jobs_completed=1, rating=5.0, rating_count=20)

        awarded = await badge_service.check_all_badges(worker_id=worker.id, clock=clock)

        assert [b.badge_type for b in awarded] == [BadgeType.FIRST_JOB, BadgeType.FIVE_STAR]

    async def test_worker_badges_listed_newest_first(self, patched_db, worker, clock):
        await badge_service.award_badge(worker_id=worker.id, badge_type=BadgeType.FIRST_JOB, clock=clock)
        clock.advance(days=3)
        await badge_service.award_badge(worker_id=worker.id, badge_type=BadgeType.PUNCTUAL, clock=clock)

        badges = await badge_service.get_worker_badges(worker_id=worker.id)

        assert [b.badge_type for b in badges] == [BadgeType.PUNCTUAL, BadgeType.FIRST_JOB]

    async def test_unknown_worker_is_not_found(self, patched_db, clock):
        with pytest.raises(RecordNotFoundError):
            await badge_service.check_all_badges(worker_id="404", clock=clock)

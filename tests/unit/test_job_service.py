"""Unit tests for the job and worker collaborators."""

import pytest

from panikkar.core.errors import ConcurrentUpdateError
from panikkar.domain.job import JobCategory, JobStatus
from panikkar.services import job_service, worker_service


@pytest.mark.unit
@pytest.mark.asyncio
class TestJobTransitions:
    """Tests for job status transitions."""

    async def test_new_job_is_open(self, job_factory):
        job = await job_factory()

        assert job.status == JobStatus.OPEN
        assert job.applications_count == 0
        assert job.is_handover is False

    async def test_full_lifecycle(self, job_factory, worker, clock):
        job = await job_factory()

        assert await job_service.assign_worker(job_id=job.id, worker_id=worker.id, clock=clock)
        assert await job_service.start_job(job_id=job.id, clock=clock)
        assert await job_service.complete_job(job_id=job.id, clock=clock)

        completed = await job_service.get_job(job_id=job.id)
        assert completed.status == JobStatus.COMPLETED
        assert completed.assigned_worker_id == worker.id
        assert completed.completed_at == clock.now().isoformat()

    async def test_cannot_skip_states(self, job_factory, clock):
        job = await job_factory()

        assert await job_service.start_job(job_id=job.id, clock=clock) is False
        assert await job_service.complete_job(job_id=job.id, clock=clock) is False
        assert (await job_service.get_job(job_id=job.id)).status == JobStatus.OPEN

    async def test_only_one_assignment_wins(self, job_factory, worker, clock):
        job = await job_factory()
        rival = await worker_service.create_worker(name="Lekha")

        assert await job_service.assign_worker(job_id=job.id, worker_id=worker.id, clock=clock)
        assert await job_service.assign_worker(job_id=job.id, worker_id=rival.id, clock=clock) is False

    async def test_unassign_requires_the_same_worker(self, job_factory, worker, clock):
        job = await job_factory()
        other = await worker_service.create_worker(name="Manu")
        await job_service.assign_worker(job_id=job.id, worker_id=worker.id, clock=clock)

        assert await job_service.unassign_worker(job_id=job.id, worker_id=other.id) is False
        assert await job_service.unassign_worker(job_id=job.id, worker_id=worker.id)

        reopened = await job_service.get_job(job_id=job.id)
        assert reopened.status == JobStatus.OPEN
        assert reopened.assigned_at is None

    async def test_category_read_fresh(self, patched_db, job_factory):
        job = await job_factory()
        await patched_db.update_record("job_posts", job.id, {"category": JobCategory.QUEUE_STANDING})

        assert await job_service.get_job_category(job_id=job.id) == "queue_standing"
        assert (await job_service.get_job(job_id=job.id)).is_handover


@pytest.mark.unit
@pytest.mark.asyncio
class TestApplicationsCount:
    """Tests for the applicant counter."""

    async def test_increment_and_decrement(self, job_factory):
        job = await job_factory()

        assert await job_service.increment_applications_count(job_id=job.id) == 1
        assert await job_service.increment_applications_count(job_id=job.id) == 2
        assert await job_service.decrement_applications_count(job_id=job.id) == 1

    async def test_never_goes_negative(self, job_factory):
        job = await job_factory()

        assert await job_service.decrement_applications_count(job_id=job.id) == 0
        assert (await job_service.get_job(job_id=job.id)).applications_count == 0

    async def test_gives_up_after_max_retries(self, job_factory, monkeypatch):
        job = await job_factory()

        async def always_lose(collection, record_id, data, expected):
            return None

        monkeypatch.setattr("panikkar.core.db_client.update_record_if", always_lose)

        with pytest.raises(ConcurrentUpdateError):
            await job_service.increment_applications_count(job_id=job.id)


@pytest.mark.unit
@pytest.mark.asyncio
class TestWorkerService:
    """Tests for worker profile updates."""

    async def test_new_worker_has_empty_history(self, worker):
        assert worker.rating == 0.0
        assert worker.rating_count == 0
        assert worker.jobs_completed == 0
        assert worker.coordinates is not None

    async def test_record_completed_job(self, worker):
        await worker_service.record_completed_job(worker_id=worker.id, amount=120.0)
        updated = await worker_service.record_completed_job(worker_id=worker.id, amount=80.0)

        assert updated.jobs_completed == 2
        assert updated.total_earnings == 200.0

    async def test_list_worker_ids_pages(self, worker):
        second = await worker_service.create_worker(name="Nisha")

        assert await worker_service.list_worker_ids(page=1, per_page=1) == [worker.id]
        assert await worker_service.list_worker_ids(page=2, per_page=1) == [second.id]
        assert await worker_service.list_worker_ids(page=3, per_page=1) == []

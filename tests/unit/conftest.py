"""Pytest configuration and fixtures for unit tests."""

from collections.abc import Awaitable, Callable
from typing import Any

import pytest

from panikkar.domain.job import JobCategory, JobPost
from panikkar.domain.verification import JobVerification
from panikkar.domain.worker import JobWorker
from panikkar.services import application_service, job_service, verification_service, worker_service
from tests.conftest import FixedClock
from tests.unit.mocks import InMemoryDBClient


@pytest.fixture
def in_memory_db():
    """Provides a fresh InMemoryDBClient for each test."""
    return InMemoryDBClient()


@pytest.fixture
def patched_db(monkeypatch, in_memory_db):
    """Patches panikkar.core.db_client functions to use InMemoryDBClient."""
    monkeypatch.setattr("panikkar.core.db_client.create_record", in_memory_db.create_record)
    monkeypatch.setattr("panikkar.core.db_client.get_record", in_memory_db.get_record)
    monkeypatch.setattr("panikkar.core.db_client.update_record", in_memory_db.update_record)
    monkeypatch.setattr("panikkar.core.db_client.update_record_if", in_memory_db.update_record_if)
    monkeypatch.setattr("panikkar.core.db_client.list_records", in_memory_db.list_records)
    monkeypatch.setattr("panikkar.core.db_client.get_first_record", in_memory_db.get_first_record)

    return in_memory_db


# Kochi, used as the default job location
JOB_LAT = 9.9312
JOB_LON = 76.2673


@pytest.fixture
async def worker(patched_db: InMemoryDBClient) -> JobWorker:
    """A worker about 3.2 km north of the default job location."""
    return await worker_service.create_worker(name="Anil", latitude=JOB_LAT + 0.02878, longitude=JOB_LON)


@pytest.fixture
def job_factory(patched_db: InMemoryDBClient) -> Callable[..., Awaitable[JobPost]]:
    """Factory for open jobs; override any create_job argument."""

    async def _create_job(**kwargs: Any) -> JobPost:
        defaults: dict[str, Any] = {
            "title": "Collect parcel from post office",
            "poster_user_id": "501",
            "category": JobCategory.PARCEL_DELIVERY,
            "pay_amount": 300.0,
            "latitude": JOB_LAT,
            "longitude": JOB_LON,
        }
        return await job_service.create_job(**{**defaults, **kwargs})

    return _create_job


@pytest.fixture
def started_job(
    job_factory: Callable[..., Awaitable[JobPost]],
    worker: JobWorker,
    clock: FixedClock,
) -> Callable[..., Awaitable[JobVerification]]:
    """Factory that runs a job through application and acceptance and returns its verification record."""

    async def _start(**job_kwargs: Any) -> JobVerification:
        job = await job_factory(**job_kwargs)
        application = await application_service.apply_to_job(job_id=job.id, worker_id=worker.id, clock=clock)
        assert await application_service.accept_application(application_id=application.id, clock=clock)
        return await verification_service.start_execution(job_id=job.id)

    return _start


@pytest.fixture
def arrived_job(
    started_job: Callable[..., Awaitable[JobVerification]],
    clock: FixedClock,
) -> Callable[..., Awaitable[JobVerification]]:
    """Factory for a verification where the worker has already arrived."""

    async def _arrive(**job_kwargs: Any) -> JobVerification:
        verification = await started_job(**job_kwargs)
        return await verification_service.record_arrival(
            verification_id=verification.id,
            photo_url="https://example.com/arrival.jpg",
            latitude=JOB_LAT,
            longitude=JOB_LON,
            clock=clock,
        )

    return _arrive

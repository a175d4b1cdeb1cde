"""Integration tests for the SQLite db_client against a real database file."""

import pytest

from panikkar.core import db_client
from panikkar.core.db_client import DatabaseError, DuplicateRecordError, RecordNotFoundError


async def _worker(name: str = "Ravi") -> dict:
    return await db_client.create_record(collection="job_workers", data={"name": name})


async def _job(poster_user_id: str = "501", **fields) -> dict:
    data = {"title": "Stand in queue", "poster_user_id": poster_user_id, "category": "queue_standing", **fields}
    return await db_client.create_record(collection="job_posts", data=data)


@pytest.mark.integration
class TestCrud:
    """Basic record lifecycle."""

    async def test_create_and_get(self, sqlite_db):
        created = await _worker()

        fetched = await db_client.get_record(collection="job_workers", record_id=created["id"])

        assert isinstance(created["id"], str)
        assert fetched["name"] == "Ravi"
        assert fetched["rating"] == 0
        assert fetched["is_verified"] == 0

    async def test_foreign_keys_come_back_as_strings(self, sqlite_db):
        worker = await _worker()
        job = await _job(assigned_worker_id=worker["id"])

        assert job["assigned_worker_id"] == worker["id"]
        assert job["poster_user_id"] == "501"

    async def test_update_record(self, sqlite_db):
        worker = await _worker()

        updated = await db_client.update_record(
            collection="job_workers", record_id=worker["id"], data={"jobs_completed": 3}
        )
        assert updated["jobs_completed"] == 3

        with pytest.raises(RecordNotFoundError):
            await db_client.update_record(collection="job_workers", record_id="9999", data={"jobs_completed": 1})

    async def test_invalid_collection_name(self, sqlite_db):
        with pytest.raises(DatabaseError):
            await db_client.list_records(collection="job_posts; DROP TABLE job_posts")

    async def test_check_constraint(self, sqlite_db):
        with pytest.raises(DatabaseError):
            await _job(status="paused")


@pytest.mark.integration
class TestUniqueConstraints:
    """Unique keys surface as DuplicateRecordError."""

    async def test_one_application_per_worker_and_job(self, sqlite_db):
        worker = await _worker()
        job = await _job()
        data = {"job_post_id": job["id"], "worker_id": worker["id"], "applied_at": "2026-01-21T10:00:00+00:00"}
        await db_client.create_record(collection="job_applications", data=data)

        with pytest.raises(DuplicateRecordError):
            await db_client.create_record(collection="job_applications", data=data)

    async def test_one_verification_per_job(self, sqlite_db):
        worker = await _worker()
        job = await _job()
        data = {"job_post_id": job["id"], "worker_id": worker["id"]}
        await db_client.create_record(collection="job_verifications", data=data)

        with pytest.raises(DuplicateRecordError):
            await db_client.create_record(collection="job_verifications", data=data)


@pytest.mark.integration
class TestConditionalUpdate:
    """update_record_if against SQLite."""

    async def test_matches_on_value(self, sqlite_db):
        job = await _job()

        moved = await db_client.update_record_if(
            collection="job_posts", record_id=job["id"], data={"status": "assigned"}, expected={"status": "open"}
        )
        again = await db_client.update_record_if(
            collection="job_posts", record_id=job["id"], data={"status": "assigned"}, expected={"status": "open"}
        )

        assert moved is not None
        assert moved["status"] == "assigned"
        assert again is None

    async def test_none_means_is_null(self, sqlite_db):
        worker = await _worker()
        job = await _job()
        verification = await db_client.create_record(
            collection="job_verifications", data={"job_post_id": job["id"], "worker_id": worker["id"]}
        )

        first = await db_client.update_record_if(
            collection="job_verifications",
            record_id=verification["id"],
            data={"arrival_verified_at": "t1"},
            expected={"arrival_verified_at": None},
        )
        second = await db_client.update_record_if(
            collection="job_verifications",
            record_id=verification["id"],
            data={"arrival_verified_at": "t2"},
            expected={"arrival_verified_at": None},
        )

        assert first is not None
        assert second is None
        stored = await db_client.get_record(collection="job_verifications", record_id=verification["id"])
        assert stored["arrival_verified_at"] == "t1"

    async def test_missing_record_raises(self, sqlite_db):
        with pytest.raises(RecordNotFoundError):
            await db_client.update_record_if(
                collection="job_posts", record_id="999", data={"status": "assigned"}, expected={"status": "open"}
            )


@pytest.mark.integration
class TestFilters:
    """Filter and sort translation to SQL."""

    async def test_and_filter_with_numeric_ids(self, sqlite_db):
        await _job(poster_user_id="501")
        mine = await _job(poster_user_id="777")

        records = await db_client.list_records(
            collection="job_posts", filter_query='poster_user_id = "777" && status = "open"'
        )

        assert [r["id"] for r in records] == [mine["id"]]

    async def test_null_filters(self, sqlite_db):
        worker = await _worker()
        assigned = await _job(assigned_worker_id=worker["id"])
        unassigned = await _job()

        with_worker = await db_client.list_records(collection="job_posts", filter_query="assigned_worker_id != null")
        without = await db_client.list_records(collection="job_posts", filter_query="assigned_worker_id = null")

        assert [r["id"] for r in with_worker] == [assigned["id"]]
        assert [r["id"] for r in without] == [unassigned["id"]]

    async def test_descending_sort_and_paging(self, sqlite_db):
        for pay in (100, 300, 200):
            await _job(pay_amount=pay)

        first_page = await db_client.list_records(collection="job_posts", sort="-pay_amount", per_page=2)
        second_page = await db_client.list_records(collection="job_posts", sort="-pay_amount", per_page=2, page=2)

        assert [r["pay_amount"] for r in first_page] == [300, 200]
        assert [r["pay_amount"] for r in second_page] == [100]

    def test_parse_filter_null_is_not_bound(self):
        where, params = db_client.parse_filter('rating = null && job_post_id = "5"')

        assert where == "rating IS NULL AND job_post_id = ?"
        assert params == [5]

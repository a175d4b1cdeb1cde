"""Tests for service startup and shutdown."""

import pytest

from panikkar import main
from panikkar.core import db_client
from panikkar.core.config import settings


def test_validate_startup_configuration_passes_with_defaults(monkeypatch):
    monkeypatch.setattr(settings, "stale_application_hours", 72)

    main.validate_startup_configuration()


def test_validate_startup_configuration_exits_on_bad_age(monkeypatch):
    """Test that a non-positive stale application age stops startup."""
    monkeypatch.setattr(settings, "stale_application_hours", 0)

    with pytest.raises(SystemExit) as exc_info:
        main.validate_startup_configuration()

    assert exc_info.value.code == 1


@pytest.mark.asyncio
async def test_lifespan_initializes_database_and_scheduler(tmp_path, monkeypatch):
    calls = []
    monkeypatch.setattr(settings, "sqlite_db_path", str(tmp_path / "startup.db"))
    monkeypatch.setattr(main, "configure_logfire", lambda: calls.append("logfire"))
    monkeypatch.setattr(main, "start_scheduler", lambda: calls.append("start"))
    monkeypatch.setattr(main, "stop_scheduler", lambda: calls.append("stop"))

    async with main.lifespan():
        assert calls == ["logfire", "start"]
        assert await db_client.list_records(collection="job_verifications") == []

    assert calls == ["logfire", "start", "stop"]
    assert (tmp_path / "startup.db").exists()

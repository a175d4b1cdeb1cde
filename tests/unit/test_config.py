"""Tests for configuration."""

import pytest

from panikkar.core.config import Settings, constants


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SQLITE_DB_PATH", "/tmp/jobs.db")
    monkeypatch.setenv("STALE_APPLICATION_HOURS", "48")
    monkeypatch.setenv("ENABLE_SCHEDULER", "false")

    settings = Settings()

    assert settings.sqlite_db_path == "/tmp/jobs.db"
    assert settings.stale_application_hours == 48
    assert settings.enable_scheduler is False


def test_default_stale_application_hours() -> None:
    assert Settings().stale_application_hours == 72


def test_progress_weights_sum_to_one_hundred() -> None:
    total = (
        constants.PROGRESS_ARRIVED
        + constants.PROGRESS_ARRIVAL_CONFIRMED
        + constants.PROGRESS_WORKER_CONFIRMED
        + constants.PROGRESS_POSTER_CONFIRMED
        + constants.PROGRESS_PAYMENT_CONFIRMED
        + constants.PROGRESS_RATED
    )
    assert total == 100

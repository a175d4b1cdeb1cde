"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from panikkar.core import db_client as db_module
from panikkar.core.config import settings


class FixedClock:
    """Clock that only moves when a test tells it to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 1, 21, 10, 0, 0, tzinfo=UTC)  # Wednesday

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> datetime:
        """Move forward by a timedelta(**kwargs) and return the new time."""
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock() -> FixedClock:
    """Provides a fresh FixedClock starting Wednesday 2026-01-21 10:00 UTC."""
    return FixedClock()


@pytest.fixture
async def sqlite_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Path]:
    """Points db_client at a fresh SQLite file with the schema applied."""
    db_path = tmp_path / "panikkar-test.db"
    monkeypatch.setattr(settings, "sqlite_db_path", str(db_path))

    await db_module.init_db()
    yield db_path
    await db_module.close_connection()

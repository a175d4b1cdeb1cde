"""Injectable clock so workflow timestamps can be controlled in tests."""

from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> datetime:
        """Return the current timezone-aware datetime."""
        ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)


system_clock = SystemClock()


def isoformat(moment: datetime) -> str:
    """Serialize a datetime the way records store it."""
    return moment.isoformat()


_TIME_UNITS = (
    ("year", 365 * 24 * 3600),
    ("month", 30 * 24 * 3600),
    ("week", 7 * 24 * 3600),
    ("day", 24 * 3600),
    ("hour", 3600),
    ("minute", 60),
)


def time_since(moment: datetime | None, now: datetime) -> str:
    """Human-readable elapsed time, e.g. "5 minutes ago" or "just now"."""
    if moment is None:
        return "just now"
    seconds = int((now - moment).total_seconds())
    for unit, unit_seconds in _TIME_UNITS:
        count = seconds // unit_seconds
        if count >= 1:
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
    return "just now"


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse a stored timestamp back into an aware datetime (naive values are taken as UTC)."""
    if value is None or value == "":
        return None
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed

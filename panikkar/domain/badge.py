"""Worker badge domain models, enums and the badge requirement table."""

import json
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class BadgeType(StrEnum):
    """Achievement badges a worker can earn."""

    # Performance
    QUEUE_MASTER = "queue_master"
    SPEED_RUNNER = "speed_runner"
    HELPFUL_HAND = "helpful_hand"
    EARLY_BIRD = "early_bird"
    FIVE_STAR = "five_star"
    TOP_EARNER = "top_earner"

    # Milestones
    FIRST_JOB = "first_job"
    TEN_JOBS = "ten_jobs"
    FIFTY_JOBS = "fifty_jobs"
    HUNDRED_JOBS = "hundred_jobs"

    # Reliability
    PUNCTUAL = "punctual"
    RELIABLE = "reliable"
    TRUSTED = "trusted"

    @property
    def label(self) -> str:
        return BADGE_LABELS[self]

    @property
    def icon(self) -> str:
        return BADGE_ICONS[self]

    @property
    def tier(self) -> int:
        return BADGE_TIERS[self]

    @property
    def tier_label(self) -> str:
        return TIER_LABELS[self.tier]

    def display(self) -> str:
        return f"{self.icon} {self.label}"


class RequirementKind(StrEnum):
    """How a badge's requirement is measured."""

    TOTAL_JOBS = "total_jobs"
    WEEKLY_EARNINGS = "weekly_earnings"
    RATING_STREAK = "rating_streak"
    CATEGORY_JOBS = "category_jobs"
    VERIFIED_WITH_JOBS = "verified_with_jobs"


class BadgeRequirement(BaseModel):
    """Threshold rule for one badge type."""

    kind: RequirementKind
    count: int = 0
    amount: float = 0.0
    min_rating: float = 0.0
    category: str | None = None


BADGE_LABELS: dict[BadgeType, str] = {
    BadgeType.QUEUE_MASTER: "Queue Master",
    BadgeType.SPEED_RUNNER: "Speed Runner",
    BadgeType.HELPFUL_HAND: "Helpful Hand",
    BadgeType.EARLY_BIRD: "Early Bird",
    BadgeType.FIVE_STAR: "Five Star Worker",
    BadgeType.TOP_EARNER: "Top Earner",
    BadgeType.FIRST_JOB: "First Job",
    BadgeType.TEN_JOBS: "10 Jobs Completed",
    BadgeType.FIFTY_JOBS: "50 Jobs Completed",
    BadgeType.HUNDRED_JOBS: "100 Jobs Completed",
    BadgeType.PUNCTUAL: "Always On Time",
    BadgeType.RELIABLE: "Super Reliable",
    BadgeType.TRUSTED: "Trusted Worker",
}

BADGE_ICONS: dict[BadgeType, str] = {
    BadgeType.QUEUE_MASTER: "🧍",
    BadgeType.SPEED_RUNNER: "⚡",
    BadgeType.HELPFUL_HAND: "🤝",
    BadgeType.EARLY_BIRD: "🐦",
    BadgeType.FIVE_STAR: "⭐",
    BadgeType.TOP_EARNER: "💰",
    BadgeType.FIRST_JOB: "🎉",
    BadgeType.TEN_JOBS: "🔟",
    BadgeType.FIFTY_JOBS: "🏅",
    BadgeType.HUNDRED_JOBS: "💯",
    BadgeType.PUNCTUAL: "⏰",
    BadgeType.RELIABLE: "💪",
    BadgeType.TRUSTED: "🛡️",
}

BADGE_TIERS: dict[BadgeType, int] = {
    BadgeType.FIRST_JOB: 1,
    BadgeType.TEN_JOBS: 2,
    BadgeType.EARLY_BIRD: 2,
    BadgeType.PUNCTUAL: 2,
    BadgeType.QUEUE_MASTER: 3,
    BadgeType.SPEED_RUNNER: 3,
    BadgeType.HELPFUL_HAND: 3,
    BadgeType.FIFTY_JOBS: 3,
    BadgeType.RELIABLE: 3,
    BadgeType.FIVE_STAR: 4,
    BadgeType.TOP_EARNER: 4,
    BadgeType.HUNDRED_JOBS: 4,
    BadgeType.TRUSTED: 4,
}

TIER_LABELS: dict[int, str] = {1: "Bronze", 2: "Silver", 3: "Gold", 4: "Platinum"}

# Badges without an entry here are not evaluated automatically
BADGE_REQUIREMENTS: dict[BadgeType, BadgeRequirement] = {
    BadgeType.FIRST_JOB: BadgeRequirement(kind=RequirementKind.TOTAL_JOBS, count=1),
    BadgeType.TEN_JOBS: BadgeRequirement(kind=RequirementKind.TOTAL_JOBS, count=10),
    BadgeType.FIFTY_JOBS: BadgeRequirement(kind=RequirementKind.TOTAL_JOBS, count=50),
    BadgeType.HUNDRED_JOBS: BadgeRequirement(kind=RequirementKind.TOTAL_JOBS, count=100),
    BadgeType.FIVE_STAR: BadgeRequirement(kind=RequirementKind.RATING_STREAK, min_rating=5.0, count=20),
    BadgeType.TOP_EARNER: BadgeRequirement(kind=RequirementKind.WEEKLY_EARNINGS, amount=10000),
    BadgeType.QUEUE_MASTER: BadgeRequirement(
        kind=RequirementKind.CATEGORY_JOBS, category="queue_standing", count=10
    ),
    BadgeType.TRUSTED: BadgeRequirement(kind=RequirementKind.VERIFIED_WITH_JOBS, count=50, min_rating=4.5),
}

MILESTONE_BADGES: tuple[BadgeType, ...] = (
    BadgeType.FIRST_JOB,
    BadgeType.TEN_JOBS,
    BadgeType.FIFTY_JOBS,
    BadgeType.HUNDRED_JOBS,
)

PERFORMANCE_BADGES: tuple[BadgeType, ...] = (
    BadgeType.FIVE_STAR,
    BadgeType.TOP_EARNER,
    BadgeType.QUEUE_MASTER,
)

RELIABILITY_BADGES: tuple[BadgeType, ...] = (BadgeType.TRUSTED,)


class WorkerBadge(BaseModel):
    """Awarded badge data transfer object."""

    id: str = Field(..., description="Unique badge grant ID from database")
    worker_id: str = Field(..., description="Worker who earned the badge")
    badge_type: BadgeType = Field(..., description="Which badge")
    badge_name: str = Field(..., description="Label at award time")
    badge_icon: str = Field(..., description="Icon at award time")
    achievement_data: dict[str, Any] = Field(default_factory=dict, description="Qualifying metrics snapshot")
    earned_at: str = Field(..., description="When the badge was awarded (ISO format)")

    @field_validator("achievement_data", mode="before")
    @classmethod
    def parse_achievement_data(cls, v: Any) -> Any:
        """SQLite stores the snapshot as JSON text."""
        if v is None or v == "":
            return {}
        if isinstance(v, str):
            return json.loads(v)
        return v

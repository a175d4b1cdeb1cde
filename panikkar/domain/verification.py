"""Job verification domain models and enums.

A verification record tracks one assigned job from the worker's arrival
through mutual completion, payment and rating. Every confirmation flag is
represented by its timestamp, so a flag is set exactly when its timestamp is.
"""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from panikkar.core.clock import parse_timestamp, time_since
from panikkar.core.config import constants
from panikkar.domain.badge import WorkerBadge


class PaymentMethod(StrEnum):
    """How the poster paid the worker."""

    CASH = "cash"
    UPI = "upi"
    OTHER = "other"

    @property
    def label(self) -> str:
        return PAYMENT_METHOD_LABELS[self]

    @property
    def requires_reference(self) -> bool:
        """UPI payments carry a transaction reference."""
        return self == PaymentMethod.UPI

    def display(self) -> str:
        return f"{PAYMENT_METHOD_ICONS[self]} {self.label}"


PAYMENT_METHOD_LABELS: dict[PaymentMethod, str] = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.UPI: "UPI",
    PaymentMethod.OTHER: "Other",
}

PAYMENT_METHOD_ICONS: dict[PaymentMethod, str] = {
    PaymentMethod.CASH: "💵",
    PaymentMethod.UPI: "📱",
    PaymentMethod.OTHER: "💳",
}


class Party(StrEnum):
    """Which side of the job is acting."""

    WORKER = "worker"
    POSTER = "poster"


class JobVerification(BaseModel):
    """Verification record data transfer object."""

    id: str = Field(..., description="Unique verification ID from database")
    job_post_id: str = Field(..., description="Job being verified (one record per job)")
    worker_id: str = Field(..., description="Worker doing the job")

    arrival_photo_url: str | None = Field(default=None, description="Photo taken on arrival")
    arrival_verified_at: str | None = Field(default=None, description="When the worker arrived (ISO format)")
    arrival_latitude: float | None = Field(default=None, description="Latitude reported on arrival")
    arrival_longitude: float | None = Field(default=None, description="Longitude reported on arrival")
    arrival_confirmed_at: str | None = Field(default=None, description="When the poster confirmed arrival")

    completion_photo_url: str | None = Field(default=None, description="Photo of the finished work")
    completion_verified_at: str | None = Field(default=None, description="When completion evidence was sent")

    handover_worker_confirmed_at: str | None = Field(default=None, description="Worker confirmed handover")
    handover_poster_confirmed_at: str | None = Field(default=None, description="Poster confirmed handover")

    worker_confirmed_at: str | None = Field(default=None, description="Worker confirmed the work is done")
    poster_confirmed_at: str | None = Field(default=None, description="Poster confirmed the work is done")

    payment_method: PaymentMethod | None = Field(default=None, description="How payment was made")
    payment_confirmed_at: str | None = Field(default=None, description="When payment was confirmed")
    payment_reference: str | None = Field(default=None, description="Transaction reference, if any")

    rating: int | None = Field(default=None, ge=1, le=5, description="Poster's rating of the worker")
    rating_comment: str | None = Field(default=None, description="Poster's comment on the worker")
    rated_at: str | None = Field(default=None, description="When the worker was rated")

    worker_rating: int | None = Field(default=None, ge=1, le=5, description="Worker's rating of the poster")
    worker_feedback: str | None = Field(default=None, description="Worker's comment on the poster")

    has_dispute: bool = Field(default=False, description="A dispute was raised (never cleared)")
    dispute_reason: str | None = Field(default=None, description="Why the dispute was raised")
    disputed_at: str | None = Field(default=None, description="When the dispute was raised")
    dispute_resolution: str | None = Field(default=None, description="How the dispute was resolved")
    resolved_at: str | None = Field(default=None, description="When the dispute was resolved")

    @property
    def is_arrived(self) -> bool:
        return self.arrival_verified_at is not None

    @property
    def is_arrival_confirmed(self) -> bool:
        return self.arrival_confirmed_at is not None

    @property
    def is_completion_verified(self) -> bool:
        return self.completion_verified_at is not None

    @property
    def is_handover_confirmed(self) -> bool:
        return self.handover_worker_confirmed_at is not None and self.handover_poster_confirmed_at is not None

    @property
    def is_worker_confirmed(self) -> bool:
        return self.worker_confirmed_at is not None

    @property
    def is_poster_confirmed(self) -> bool:
        return self.poster_confirmed_at is not None

    @property
    def is_mutually_confirmed(self) -> bool:
        return self.is_worker_confirmed and self.is_poster_confirmed

    @property
    def is_payment_confirmed(self) -> bool:
        return self.payment_confirmed_at is not None

    @property
    def is_fully_verified(self) -> bool:
        return self.is_mutually_confirmed and self.is_payment_confirmed

    @property
    def is_rated(self) -> bool:
        return self.rating is not None

    @property
    def is_dispute_resolved(self) -> bool:
        return self.resolved_at is not None

    @property
    def progress(self) -> int:
        """Informational 0-100 score; never used to gate a transition."""
        weighted = (
            (self.is_arrived, constants.PROGRESS_ARRIVED),
            (self.is_arrival_confirmed, constants.PROGRESS_ARRIVAL_CONFIRMED),
            (self.is_worker_confirmed, constants.PROGRESS_WORKER_CONFIRMED),
            (self.is_poster_confirmed, constants.PROGRESS_POSTER_CONFIRMED),
            (self.is_payment_confirmed, constants.PROGRESS_PAYMENT_CONFIRMED),
            (self.is_rated, constants.PROGRESS_RATED),
        )
        return sum(weight for done, weight in weighted if done)

    def rating_display(self) -> str | None:
        if self.rating is None:
            return None
        return f"{'⭐' * self.rating} ({self.rating}/5)"

    def to_status_summary(self, now: datetime) -> dict[str, Any]:
        """Read-only status view for either party."""

        def since(value: str | None) -> str | None:
            return time_since(parse_timestamp(value), now) if value else None

        return {
            "arrival_verified": self.is_arrived,
            "arrival_confirmed": self.is_arrival_confirmed,
            "completion_verified": self.is_completion_verified,
            "handover_confirmed": self.is_handover_confirmed,
            "worker_confirmed": self.is_worker_confirmed,
            "poster_confirmed": self.is_poster_confirmed,
            "payment_confirmed": self.is_payment_confirmed,
            "payment_method": self.payment_method.display() if self.payment_method else None,
            "fully_verified": self.is_fully_verified,
            "rating": self.rating,
            "rating_display": self.rating_display(),
            "has_dispute": self.has_dispute,
            "dispute_resolved": self.is_dispute_resolved,
            "progress": self.progress,
            "arrived_since": since(self.arrival_verified_at),
            "completed_since": since(self.poster_confirmed_at or self.worker_confirmed_at),
            "paid_since": since(self.payment_confirmed_at),
        }


class RatingOutcome(BaseModel):
    """Result of rating a worker."""

    verification: JobVerification
    average: float = Field(..., description="Worker's average after this rating")
    rating_count: int = Field(..., description="Number of ratings after this rating")
    awarded_badges: list[WorkerBadge] = Field(default_factory=list, description="Milestones newly earned")

"""Job application domain models and enums."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from panikkar.core.clock import parse_timestamp, time_since


class JobApplicationStatus(StrEnum):
    """Application lifecycle state. Only PENDING can transition."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

    @property
    def is_final(self) -> bool:
        return self != JobApplicationStatus.PENDING


def format_distance(distance_km: float | None) -> str:
    """Format a distance for display ("850m", "3.2km", or "N/A" when unknown)."""
    if distance_km is None:
        return "N/A"
    if distance_km < 1:
        return f"{round(distance_km * 1000)}m"
    return f"{round(distance_km, 1)}km"


class JobApplication(BaseModel):
    """Job application data transfer object."""

    id: str = Field(..., description="Unique application ID from database")
    job_post_id: str = Field(..., description="Job applied to")
    worker_id: str = Field(..., description="Applying worker")
    message: str = Field(default="", description="Optional note from the worker")
    proposed_amount: float | None = Field(default=None, ge=0, description="Counter-offer, if any")
    status: JobApplicationStatus = Field(default=JobApplicationStatus.PENDING, description="Current state")
    distance_km: float | None = Field(default=None, ge=0, description="Worker to job distance; None if unknown")
    applied_at: str = Field(..., description="When the application was made (ISO format)")
    responded_at: str | None = Field(default=None, description="When the status left pending (ISO format)")

    @property
    def is_pending(self) -> bool:
        return self.status == JobApplicationStatus.PENDING

    def effective_amount(self, job_pay_amount: float) -> float:
        """The proposed amount if the worker made one, otherwise the job's posted pay."""
        return self.proposed_amount if self.proposed_amount is not None else job_pay_amount

    def to_summary(self, now: datetime) -> dict[str, Any]:
        """Read-only view used by the poster when reviewing applicants."""
        return {
            "id": self.id,
            "worker_id": self.worker_id,
            "status": self.status.value,
            "message": self.message,
            "proposed_amount": self.proposed_amount,
            "distance_km": self.distance_km,
            "distance_display": format_distance(self.distance_km),
            "applied_at": self.applied_at,
            "time_since": time_since(parse_timestamp(self.applied_at), now),
        }

"""Job post domain models and enums."""

from enum import StrEnum

from pydantic import BaseModel, Field

from panikkar.core.config import constants
from panikkar.core.geo import Coordinates


class JobStatus(StrEnum):
    """Job post lifecycle state."""

    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class JobCategory(StrEnum):
    """Kinds of errand a job post can describe."""

    QUEUE_STANDING = "queue_standing"
    PARCEL_DELIVERY = "parcel_delivery"
    GROCERY_SHOPPING = "grocery_shopping"
    BILL_PAYMENT = "bill_payment"
    MOVING_HELP = "moving_help"
    EVENT_HELPER = "event_helper"
    PET_WALKING = "pet_walking"
    GARDEN_CLEANING = "garden_cleaning"
    HOUSE_CLEANING = "house_cleaning"
    ELDERLY_COMPANION = "elderly_companion"
    FOOD_DELIVERY = "food_delivery"
    DOCUMENT_WORK = "document_work"
    COMPUTER_TYPING = "computer_typing"
    TRANSLATION = "translation"
    PHOTOGRAPHY = "photography"
    VEHICLE_PICKUP = "vehicle_pickup"
    MEDICINE_PICKUP = "medicine_pickup"
    TUTORING = "tutoring"


def is_handover_category(category: str | None) -> bool:
    """Return True for queue/standing categories that need a handover step."""
    return category in constants.HANDOVER_CATEGORIES


class JobPost(BaseModel):
    """Job post data transfer object (the fields the workflow reads and writes)."""

    id: str = Field(..., description="Unique job ID from database")
    title: str = Field(..., description="Short job title")
    poster_user_id: str = Field(..., description="User who posted the job")
    category: str = Field(..., description="JobCategory value (free text for legacy categories)")
    status: JobStatus = Field(default=JobStatus.OPEN, description="Current lifecycle state")
    pay_amount: float = Field(default=0.0, ge=0, description="Offered pay")
    latitude: float | None = Field(default=None, description="Job location latitude")
    longitude: float | None = Field(default=None, description="Job location longitude")
    assigned_worker_id: str | None = Field(default=None, description="Worker assigned to the job")
    applications_count: int = Field(default=0, ge=0, description="Number of live applications")
    assigned_at: str | None = Field(default=None, description="When a worker was assigned (ISO format)")
    started_at: str | None = Field(default=None, description="When work started (ISO format)")
    completed_at: str | None = Field(default=None, description="When the job completed (ISO format)")

    @property
    def coordinates(self) -> Coordinates | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

    @property
    def is_handover(self) -> bool:
        return is_handover_category(self.category)

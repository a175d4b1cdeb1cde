"""Worker profile domain model."""

from pydantic import BaseModel, Field

from panikkar.core.geo import Coordinates


class JobWorker(BaseModel):
    """Worker data transfer object."""

    id: str = Field(..., description="Unique worker ID from database")
    name: str = Field(..., description="Display name of the worker")
    latitude: float | None = Field(default=None, description="Last known latitude")
    longitude: float | None = Field(default=None, description="Last known longitude")
    rating: float = Field(default=0.0, ge=0, le=5, description="Rolling average rating")
    rating_count: int = Field(default=0, ge=0, description="Number of ratings in the average")
    jobs_completed: int = Field(default=0, ge=0, description="Completed job count")
    total_earnings: float = Field(default=0.0, ge=0, description="Lifetime earnings")
    is_verified: bool = Field(default=False, description="Identity verified by an admin")
    last_active_at: str | None = Field(default=None, description="Last workflow activity (ISO format)")

    @property
    def coordinates(self) -> Coordinates | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

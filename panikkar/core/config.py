"""Configuration management for panikkar."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # SQLite Configuration
    sqlite_db_path: str = Field(default="./data/panikkar.db", description="Path to the SQLite database file")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="production", description="Deployment environment reported to Logfire")

    # Scheduler Configuration
    enable_scheduler: bool = Field(default=True, description="Enable/disable the background badge and cleanup jobs")
    stale_application_hours: int = Field(
        default=72, description="Pending applications older than this many hours are withdrawn automatically"
    )


# Application Constants
class Constants:
    """Application-wide constants."""

    # Geography
    EARTH_RADIUS_KM: float = 6371.0
    DISTANCE_DECIMALS: int = 2

    # Ratings
    MIN_RATING: int = 1
    MAX_RATING: int = 5
    CAS_MAX_RETRIES: int = 5  # Optimistic retries for counters and the rating aggregate

    # Verification progress weights (sum to 100)
    PROGRESS_ARRIVED: int = 20
    PROGRESS_ARRIVAL_CONFIRMED: int = 10
    PROGRESS_WORKER_CONFIRMED: int = 20
    PROGRESS_POSTER_CONFIRMED: int = 20
    PROGRESS_PAYMENT_CONFIRMED: int = 20
    PROGRESS_RATED: int = 10

    # Job categories that need a mutual handover step
    HANDOVER_CATEGORIES: tuple[str, ...] = ("queue_standing", "queue")

    # Applications
    STALE_APPLICATION_BATCH_SIZE: int = 100

    # Scheduler Configuration
    BADGE_SWEEP_HOUR: int = 2  # 2am
    STALE_APPLICATION_SWEEP_MINUTE: int = 15  # Every hour at :15

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 100


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()

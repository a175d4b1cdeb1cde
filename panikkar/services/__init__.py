from panikkar.services import (
    application_service,
    badge_service,
    earnings_service,
    job_service,
    rating_service,
    verification_service,
    worker_service,
)


__all__ = [
    "application_service",
    "badge_service",
    "earnings_service",
    "job_service",
    "rating_service",
    "verification_service",
    "worker_service",
]

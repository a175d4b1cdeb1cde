"""Domain models and DTOs."""

from panikkar.domain.application import JobApplication, JobApplicationStatus
from panikkar.domain.badge import BadgeRequirement, BadgeType, RequirementKind, WorkerBadge
from panikkar.domain.earning import WorkerEarning
from panikkar.domain.job import JobCategory, JobPost, JobStatus
from panikkar.domain.verification import JobVerification, Party, PaymentMethod
from panikkar.domain.worker import JobWorker


__all__ = [
    "BadgeRequirement",
    "BadgeType",
    "JobApplication",
    "JobApplicationStatus",
    "JobCategory",
    "JobPost",
    "JobStatus",
    "JobVerification",
    "JobWorker",
    "Party",
    "PaymentMethod",
    "RequirementKind",
    "WorkerBadge",
    "WorkerEarning",
]

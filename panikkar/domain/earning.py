"""Weekly earnings ledger entry."""

from pydantic import BaseModel, Field


class WorkerEarning(BaseModel):
    """One completed job's pay, bucketed by calendar week."""

    id: str = Field(..., description="Unique ledger entry ID from database")
    worker_id: str = Field(..., description="Worker who was paid")
    job_post_id: str = Field(..., description="Job the pay was for")
    amount: float = Field(..., ge=0, description="Amount earned")
    week_start: str = Field(..., description="Monday 00:00 of the earning's week (ISO format)")
    earned_at: str = Field(..., description="When the job completed (ISO format)")

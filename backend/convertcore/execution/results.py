"""
Batch result models.

Structured representation of a batch run: one outcome per job that was
looked at, plus the IDs of jobs never started because of cancellation.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..jobs.models import Job, JobFailure, JobStatus


class JobOutcome(BaseModel):
    """Snapshot of a job after the scheduler was done with it."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    job_id: str
    status: JobStatus
    progress: int
    result_id: Optional[str] = None
    result_path: Optional[str] = None
    error: Optional[JobFailure] = None
    skipped: bool = False
    """True when the job was already terminal (e.g. denied at admission)."""

    @classmethod
    def from_job(cls, job: Job, skipped: bool = False) -> "JobOutcome":
        return cls(
            job_id=job.id,
            status=job.status,
            progress=job.progress,
            result_id=job.result.id if job.result else None,
            result_path=job.result.path if job.result else None,
            error=job.error,
            skipped=skipped,
        )

    @property
    def succeeded(self) -> bool:
        return self.status == JobStatus.COMPLETED


class BatchResult(BaseModel):
    """
    Outcome of BatchScheduler.run_batch.

    all_succeeded is what a surrounding system uses to decide whether to
    offer a bulk download.
    """

    model_config = ConfigDict(extra="forbid")

    batch_id: Optional[str] = None
    outcomes: List[JobOutcome] = Field(default_factory=list)
    not_started: List[str] = Field(default_factory=list)
    cancelled: bool = False
    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def completed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == JobStatus.COMPLETED)

    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == JobStatus.FAILED)

    @property
    def all_succeeded(self) -> bool:
        return (
            bool(self.outcomes)
            and not self.not_started
            and all(o.succeeded for o in self.outcomes)
        )

    def outcome_for(self, job_id: str) -> Optional[JobOutcome]:
        for outcome in self.outcomes:
            if outcome.job_id == job_id:
                return outcome
        return None

    def summary(self) -> str:
        text = f"{self.completed_count} completed, {self.failed_count} failed"
        if self.not_started:
            text += f", {len(self.not_started)} not started"
        if self.cancelled:
            text += " (cancelled)"
        return text

"""
State transition validation for conversion jobs.

Job lifecycle: PENDING -> CONVERTING -> COMPLETED | FAILED
Admission denial: PENDING -> FAILED

INVARIANT: Terminal job states (COMPLETED, FAILED) are immutable.
INVARIANT: Progress never decreases and stays within 0-100. It reaches 100
only when the job completes.
"""

from datetime import datetime
from typing import FrozenSet, Optional, Set, Tuple

from .errors import InvalidStateTransitionError, ProgressRegressionError
from .models import FailureKind, Job, JobFailure, JobStatus


TERMINAL_JOB_STATES: FrozenSet[JobStatus] = frozenset({
    JobStatus.COMPLETED,
    JobStatus.FAILED,
})


def is_job_terminal(status: JobStatus) -> bool:
    """Check if a job status is terminal (immutable)."""
    return status in TERMINAL_JOB_STATES


_JOB_TRANSITIONS: Set[Tuple[JobStatus, JobStatus]] = {
    # Starting a job
    (JobStatus.PENDING, JobStatus.CONVERTING),

    # Admission denied before resolution
    (JobStatus.PENDING, JobStatus.FAILED),

    # Terminal states
    (JobStatus.CONVERTING, JobStatus.COMPLETED),
    (JobStatus.CONVERTING, JobStatus.FAILED),
}


def can_transition_job(from_status: JobStatus, to_status: JobStatus) -> bool:
    """
    Check if a job state transition is legal.

    Staying in the same non-terminal state is allowed (idempotent updates).
    """
    if is_job_terminal(from_status):
        return False
    if from_status == to_status:
        return True
    return (from_status, to_status) in _JOB_TRANSITIONS


def validate_job_transition(from_status: JobStatus, to_status: JobStatus) -> None:
    """
    Raises:
        InvalidStateTransitionError: If the transition is not allowed
    """
    if not can_transition_job(from_status, to_status):
        raise InvalidStateTransitionError("job", from_status.value, to_status.value)


def start_job(job: Job, now: Optional[datetime] = None) -> None:
    """
    PENDING -> CONVERTING with progress reset to 0.

    Unlike other updates this is not idempotent: a job already converting
    is owned by another worker.
    """
    if job.status != JobStatus.PENDING:
        raise InvalidStateTransitionError("job", job.status.value, JobStatus.CONVERTING.value)
    job.status = JobStatus.CONVERTING
    job.started_at = now or datetime.now()
    job.progress = 0


def advance_progress(job: Job, value: int) -> bool:
    """
    Move a converting job's progress forward.

    Values equal to the current progress are accepted and ignored.
    100 is reserved for completion.

    Returns:
        True if the progress changed

    Raises:
        ProgressRegressionError: If value is lower than current, or outside 0-99
        InvalidStateTransitionError: If the job is not converting
    """
    if job.status != JobStatus.CONVERTING:
        raise InvalidStateTransitionError("progress", job.status.value, f"{value}%")
    if value < job.progress or value < 0 or value >= 100:
        raise ProgressRegressionError(job.id, job.progress, value)
    if value == job.progress:
        return False
    job.progress = value
    return True


def complete_job(job: Job, result, now: Optional[datetime] = None) -> None:
    """CONVERTING -> COMPLETED, progress 100, result attached."""
    validate_job_transition(job.status, JobStatus.COMPLETED)
    job.status = JobStatus.COMPLETED
    job.progress = 100
    job.result = result
    job.error = None
    job.completed_at = now or datetime.now()


def fail_job(
    job: Job,
    kind: FailureKind,
    message: str,
    detail: Optional[str] = None,
    now: Optional[datetime] = None,
) -> None:
    """
    PENDING | CONVERTING -> FAILED.

    Progress is left where it was, so a failed job never reports 100.
    """
    validate_job_transition(job.status, JobStatus.FAILED)
    job.status = JobStatus.FAILED
    job.error = JobFailure(kind=kind, message=message, detail=detail)
    job.completed_at = now or datetime.now()

"""
Job-specific error types.

All errors inherit from JobError for easy catching.
Errors are explicit and provide actionable messages.
"""


class JobError(Exception):
    """Base exception for all job-related failures."""
    pass


class JobNotFoundError(JobError):
    """Raised when a job cannot be found in the registry."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class InvalidStateTransitionError(JobError):
    """Raised when attempting an illegal state transition."""

    def __init__(self, entity_type: str, current_state: str, target_state: str):
        self.entity_type = entity_type
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            f"Invalid {entity_type} state transition: "
            f"{current_state} -> {target_state}"
        )


class ProgressRegressionError(JobError):
    """Raised when a job's progress would move backwards or leave 0-100."""

    def __init__(self, job_id: str, current: int, requested: int):
        self.job_id = job_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Progress for job {job_id} cannot move from {current} to {requested}"
        )


class ArtifactNotReadyError(JobError):
    """Raised when a result is requested from a job that has none."""

    def __init__(self, job_id: str, status: str):
        self.job_id = job_id
        self.status = status
        super().__init__(f"Job {job_id} has no result to retrieve (status: {status})")

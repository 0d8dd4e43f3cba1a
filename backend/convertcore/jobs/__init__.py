"""
Conversion jobs: data model, lifecycle rules and registry.

This module does NOT execute conversions or call codec providers.
"""

from .errors import (
    JobError,
    JobNotFoundError,
    InvalidStateTransitionError,
    ProgressRegressionError,
    ArtifactNotReadyError,
)
from .models import (
    JobStatus,
    FailureKind,
    JobFailure,
    Job,
)
from .state import (
    TERMINAL_JOB_STATES,
    is_job_terminal,
    can_transition_job,
    validate_job_transition,
    start_job,
    advance_progress,
    complete_job,
    fail_job,
)
from .registry import JobRegistry

__all__ = [
    # Errors
    "JobError",
    "JobNotFoundError",
    "InvalidStateTransitionError",
    "ProgressRegressionError",
    "ArtifactNotReadyError",
    # Models
    "JobStatus",
    "FailureKind",
    "JobFailure",
    "Job",
    # State
    "TERMINAL_JOB_STATES",
    "is_job_terminal",
    "can_transition_job",
    "validate_job_transition",
    "start_job",
    "advance_progress",
    "complete_job",
    "fail_job",
    # Registry
    "JobRegistry",
]

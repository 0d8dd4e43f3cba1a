"""
Conversion Job data models.

A job is one source artifact, one target format and one option set.
Jobs in a batch are independent: one job failing never blocks the others.

All models use Pydantic for validation.
State transitions are validated externally (see state.py).
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..artifacts.models import Artifact


class JobStatus(str, Enum):
    """
    Job lifecycle status.

    pending -> converting -> completed | failed
    pending -> failed only when admission is denied.
    """

    PENDING = "pending"  # Created, not yet started
    CONVERTING = "converting"  # Owned by a batch worker
    COMPLETED = "completed"  # Result artifact attached
    FAILED = "failed"  # Error detail attached


class FailureKind(str, Enum):
    """
    Why a job failed.

    CIRCUIT_OPEN is a specialization of SECURITY_DENIED, surfaced separately
    so callers can say "temporarily disabled" instead of "rejected".
    """

    UNSUPPORTED_FORMAT = "unsupported_format"
    INVALID_OPTIONS = "invalid_options"
    PROVIDER_ERROR = "provider_error"
    SECURITY_DENIED = "security_denied"
    CIRCUIT_OPEN = "circuit_open"


class JobFailure(BaseModel):
    """Failure detail attached to a FAILED job."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: FailureKind
    message: str
    detail: Optional[str] = None  # Provider or gate specific sub-kind

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class Job(BaseModel):
    """
    A single conversion job.

    The source artifact is owned by the job until it is handed to a codec
    provider. Mutated only by the resolver and the batch scheduler.
    """

    model_config = ConfigDict(extra="forbid")

    # Identity
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    batch_id: Optional[str] = None
    origin_key: Optional[str] = None

    # What to convert
    source: Artifact
    target_format: str

    # Options attached to the step producing target_format
    options: Dict[str, Any] = Field(default_factory=dict)
    # Options attached to the intermediate hop of a two-step plan
    intermediate_options: Dict[str, Any] = Field(default_factory=dict)

    # State
    status: JobStatus = JobStatus.PENDING
    progress: int = Field(default=0, ge=0, le=100)

    # Outcome
    result: Optional[Artifact] = None
    error: Optional[JobFailure] = None
    retrieved: bool = False

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def source_format(self) -> str:
        return self.source.format

    @property
    def is_terminal(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED)

    def summary(self) -> str:
        """Human-readable one-line summary."""
        head = f"{self.source.filename} ({self.source_format} -> {self.target_format})"
        if self.status == JobStatus.COMPLETED and self.result is not None:
            return f"COMPLETED: {head} -> {self.result.filename}"
        if self.status == JobStatus.FAILED and self.error is not None:
            return f"FAILED: {head} - {self.error}"
        return f"{self.status.value.upper()} {self.progress}%: {head}"

"""
Progress events.

Events are observational: they report what the scheduler did, they never
steer it. An observer that raises is logged and ignored.

Ordering:
- every event for job N precedes every event for job N+1
- per job: converting(0), zero or more progress updates, then exactly one
  terminal event (completed at 100, or failed with error detail)
"""

from datetime import datetime
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..jobs.models import JobFailure, JobStatus


class ProgressEvent(BaseModel):
    """
    Single progress notification.

    Immutable once created.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    job_id: str
    status: JobStatus
    progress: int = Field(ge=0, le=100)
    error: Optional[JobFailure] = None
    timestamp: datetime = Field(default_factory=datetime.now)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def __str__(self) -> str:
        text = f"[{self.job_id[:8]}] {self.status.value} {self.progress}%"
        if self.error:
            text += f" - {self.error}"
        return text


Observer = Callable[[ProgressEvent], None]


class ProgressRecorder:
    """
    Observer that keeps every event in arrival order.

    Useful for tests and for UI layers that poll instead of subscribing.
    """

    def __init__(self):
        self._events: List[ProgressEvent] = []

    def __call__(self, event: ProgressEvent) -> None:
        self._events.append(event)

    @property
    def events(self) -> List[ProgressEvent]:
        return self._events.copy()

    def events_for(self, job_id: str) -> List[ProgressEvent]:
        return [e for e in self._events if e.job_id == job_id]

    def progress_for(self, job_id: str) -> List[int]:
        return [e.progress for e in self._events if e.job_id == job_id]

    def errors_for(self, job_id: str) -> List[ProgressEvent]:
        return [e for e in self._events if e.job_id == job_id and e.is_error]

    def job_order(self) -> List[str]:
        """Job IDs in order of their first event."""
        seen: List[str] = []
        for event in self._events:
            if event.job_id not in seen:
                seen.append(event.job_id)
        return seen

    def clear(self) -> None:
        """Clear all events (for testing only)."""
        self._events.clear()

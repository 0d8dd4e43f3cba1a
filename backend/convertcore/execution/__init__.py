"""
Execution: plan resolution and sequential batch scheduling.

The scheduler is the only component that invokes codec providers.
"""

from .errors import (
    ResolutionError,
    UnsupportedFormatError,
    InvalidOptionsError,
    ExecutionError,
    BatchInProgressError,
)
from .plan import PlanStep, ExecutionPlan
from .resolver import JobResolver
from .events import ProgressEvent, Observer, ProgressRecorder
from .results import JobOutcome, BatchResult
from .scheduler import BatchScheduler, run_batch
from .verification import RoundTripReport, verify_round_trip

__all__ = [
    # Errors
    "ResolutionError",
    "UnsupportedFormatError",
    "InvalidOptionsError",
    "ExecutionError",
    "BatchInProgressError",
    # Plans
    "PlanStep",
    "ExecutionPlan",
    "JobResolver",
    # Events
    "ProgressEvent",
    "Observer",
    "ProgressRecorder",
    # Results
    "JobOutcome",
    "BatchResult",
    # Scheduling
    "BatchScheduler",
    "run_batch",
    # Verification
    "RoundTripReport",
    "verify_round_trip",
]

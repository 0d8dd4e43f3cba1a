"""
Execution-specific error types.

Resolution errors are defined next to the capability graph and re-exported
here so callers of the resolver can catch them from one place.
"""

from ..capabilities.errors import (
    ResolutionError,
    UnsupportedFormatError,
    InvalidOptionsError,
)


class ExecutionError(Exception):
    """Base exception for batch execution failures outside a single job."""
    pass


class BatchInProgressError(ExecutionError):
    """Raised when run_batch is called on a scheduler that is already running one."""

    def __init__(self):
        super().__init__("A batch is already running on this scheduler")


__all__ = [
    "ResolutionError",
    "UnsupportedFormatError",
    "InvalidOptionsError",
    "ExecutionError",
    "BatchInProgressError",
]

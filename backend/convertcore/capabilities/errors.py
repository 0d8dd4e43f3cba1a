"""
Capability-specific error types.

UnsupportedFormatError and InvalidOptionsError are resolution errors:
they are local to one job and never abort a batch.
"""

from typing import Optional


class CapabilityError(Exception):
    """Base exception for capability graph and option failures."""
    pass


class CapabilityGraphError(CapabilityError):
    """Raised when the static capability table is internally inconsistent."""
    pass


class ResolutionError(CapabilityError):
    """
    Base exception for failures that prevent an execution plan from being built.

    Attributes:
        kind: Stable machine-readable failure kind
    """

    kind = "resolution_error"


class UnsupportedFormatError(ResolutionError):
    """Raised when a format is unknown or a (source, target) pair has no capability entry."""

    kind = "unsupported_format"

    def __init__(self, source_format: str, target_format: Optional[str] = None, reason: str = ""):
        self.source_format = source_format
        self.target_format = target_format
        if target_format is None:
            message = f"Unsupported format: {source_format}"
        else:
            message = f"Conversion from {source_format} to {target_format} is not supported"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class InvalidOptionsError(ResolutionError):
    """Raised when an option is unknown, invalid, or attached to the wrong plan step."""

    kind = "invalid_options"

    def __init__(self, step: str, message: str):
        self.step = step
        super().__init__(f"Invalid options for {step}: {message}")

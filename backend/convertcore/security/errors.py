"""
Security gate error types.

Admission results are normally returned as values (see Admission).
These errors exist for callers that prefer raising, such as the service
facade when it records a denial on a job.
"""

from typing import Optional


class SecurityError(Exception):
    """Base exception for all security gate failures."""
    pass


class SecurityDeniedError(SecurityError):
    """Raised when the gate rejects an upload."""

    def __init__(self, reason: str, kind: str):
        self.reason = reason
        self.kind = kind
        super().__init__(f"Upload rejected ({kind}): {reason}")


class CircuitOpenError(SecurityDeniedError):
    """Raised when the pathway's circuit breaker is open."""

    def __init__(self, pathway: str, reason: str, opened_at: Optional[float] = None):
        self.pathway = pathway
        self.opened_at = opened_at
        super().__init__(reason, "circuit_open")


class UnknownPathwayError(SecurityError):
    """Raised when a pathway has no configured policy."""

    def __init__(self, pathway: str):
        self.pathway = pathway
        super().__init__(f"No security policy configured for pathway '{pathway}'")

"""
Provider-specific errors.

A ProviderError fails exactly one job. The batch continues.
"""

from typing import Optional


class ProviderError(Exception):
    """
    Raised by a Codec Provider when a conversion fails.

    The message is reported to the caller verbatim.

    Attributes:
        kind: Provider-defined failure category ("tool_failed", "timeout", ...)
        message: Provider-supplied detail
    """

    def __init__(self, kind: str, message: str, exit_code: Optional[int] = None):
        self.kind = kind
        self.message = message
        self.exit_code = exit_code
        super().__init__(f"{kind}: {message}")


class ProviderNotAvailableError(Exception):
    """Raised when no provider is registered for a format family."""

    def __init__(self, family: str, reason: str = ""):
        self.family = family
        self.reason = reason
        message = f"No codec provider available for family '{family}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)

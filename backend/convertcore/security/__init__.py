"""
Security gate for security-sensitive conversion pathways.

Admission checks, incident recording and a persisted circuit breaker.
"""

from .errors import (
    SecurityError,
    SecurityDeniedError,
    CircuitOpenError,
    UnknownPathwayError,
)
from .models import (
    Severity,
    IncidentKind,
    DenialKind,
    CircuitStatus,
    Incident,
    CircuitState,
    Admission,
    OriginCounter,
    SecurityStatus,
)
from .settings import (
    SECURITY_CONFIG_ENV,
    DEFAULT_SUSPICIOUS_PATTERNS,
    PathwayPolicy,
    MonitoringPolicy,
    SecuritySettings,
    DEFAULT_SECURITY_SETTINGS,
    load_security_settings,
    save_security_settings,
)
from .gate import DEFAULT_PATHWAY, PathwayState, SecurityGate

__all__ = [
    # Errors
    "SecurityError",
    "SecurityDeniedError",
    "CircuitOpenError",
    "UnknownPathwayError",
    # Models
    "Severity",
    "IncidentKind",
    "DenialKind",
    "CircuitStatus",
    "Incident",
    "CircuitState",
    "Admission",
    "OriginCounter",
    "SecurityStatus",
    # Settings
    "SECURITY_CONFIG_ENV",
    "DEFAULT_SUSPICIOUS_PATTERNS",
    "PathwayPolicy",
    "MonitoringPolicy",
    "SecuritySettings",
    "DEFAULT_SECURITY_SETTINGS",
    "load_security_settings",
    "save_security_settings",
    # Gate
    "DEFAULT_PATHWAY",
    "PathwayState",
    "SecurityGate",
]

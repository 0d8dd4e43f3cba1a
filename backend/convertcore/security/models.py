"""
Security gate data models.

Incidents are in-memory records of abuse signals. Circuit state is the
per-pathway kill switch and is the only part that survives a restart.
"""

import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class IncidentKind(str, Enum):
    SUSPICIOUS_FILENAME = "suspicious_filename"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"


class DenialKind(str, Enum):
    """Why an upload was not admitted."""

    CIRCUIT_OPEN = "circuit_open"
    FILE_TOO_LARGE = "file_too_large"
    SUSPICIOUS_FILENAME = "suspicious_filename"
    RATE_LIMITED = "rate_limited"


class CircuitStatus(str, Enum):
    """
    closed -> open by incident escalation or administrative action.
    open -> closed only by administrative action.
    """

    CLOSED = "closed"
    OPEN = "open"


class Incident(BaseModel):
    """A single abuse signal attributed to an origin."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    origin_key: str
    kind: IncidentKind
    severity: Severity
    timestamp: float
    pathway: str
    details: Dict[str, Any] = Field(default_factory=dict)


class CircuitState(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    pathway: str
    status: CircuitStatus = CircuitStatus.CLOSED
    reason: Optional[str] = None
    opened_at: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return self.status == CircuitStatus.OPEN

    def to_record(self) -> Dict[str, Any]:
        """Row shape used by PersistenceManager."""
        return {
            "pathway": self.pathway,
            "state": self.status.value,
            "reason": self.reason,
            "opened_at": self.opened_at,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CircuitState":
        return cls(
            pathway=record["pathway"],
            status=CircuitStatus(record["state"]),
            reason=record.get("reason"),
            opened_at=record.get("opened_at"),
        )


class Admission(BaseModel):
    """
    Outcome of SecurityGate.admit.

    allowed=True carries no reason. A circuit denial also carries the
    time the circuit was opened.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    allowed: bool
    reason: Optional[str] = None
    kind: Optional[DenialKind] = None
    opened_at: Optional[float] = None

    @classmethod
    def allow(cls) -> "Admission":
        return cls(allowed=True)

    @classmethod
    def deny(cls, kind: DenialKind, reason: str, opened_at: Optional[float] = None) -> "Admission":
        return cls(allowed=False, kind=kind, reason=reason, opened_at=opened_at)


class OriginCounter(BaseModel):
    """Rate counter snapshot for one origin."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    origin_key: str
    count: int
    last_seen: float


class SecurityStatus(BaseModel):
    """Administrative snapshot of one pathway."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    pathway: str
    circuit: CircuitState
    recent_incidents: List[Incident] = Field(default_factory=list)
    counters: List[OriginCounter] = Field(default_factory=list)
    incident_count: int = 0

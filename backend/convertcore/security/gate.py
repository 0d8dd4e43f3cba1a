"""
Security Gate - admission control and circuit breaker per pathway.

Checks run in order and stop at the first failure:
1. The pathway circuit must be closed
2. File size within the pathway limit
3. Filename free of suspicious patterns (high severity incident)
4. Per-origin upload rate (medium severity incident)

Every incident is followed by escalation: when an origin accumulates
alert_threshold incidents within the cooldown window the pathway circuit
opens and is persisted. An open circuit never closes by itself.

All mutable state for a pathway lives in its PathwayState and is only
touched while holding that state's lock.
"""

import logging
import re
import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional, Pattern, Tuple

from ..persistence import PersistenceError, PersistenceManager
from .errors import CircuitOpenError, SecurityDeniedError, UnknownPathwayError
from .models import (
    Admission,
    CircuitState,
    CircuitStatus,
    DenialKind,
    Incident,
    IncidentKind,
    OriginCounter,
    SecurityStatus,
    Severity,
)
from .settings import DEFAULT_SECURITY_SETTINGS, PathwayPolicy, SecuritySettings

logger = logging.getLogger(__name__)

DEFAULT_PATHWAY = "spreadsheet"


@dataclass
class _RateCounter:
    count: int
    last_seen: float


class PathwayState:
    """Circuit, incident log and rate counters of one pathway."""

    def __init__(self, policy: PathwayPolicy, incident_capacity: int):
        self.policy = policy
        self.lock = threading.Lock()
        self.circuit = CircuitState(pathway=policy.name)
        self.incidents: Deque[Incident] = deque(maxlen=incident_capacity)
        self.counters: Dict[str, _RateCounter] = {}
        self.patterns: Tuple[Pattern, ...] = tuple(
            re.compile(p, re.IGNORECASE) for p in policy.suspicious_patterns
        )

    def matching_pattern(self, filename: str) -> Optional[str]:
        for pattern in self.patterns:
            if pattern.search(filename):
                return pattern.pattern
        return None


class SecurityGate:
    """
    Admission control for security-sensitive conversion pathways.

    Args:
        settings: Policies and monitoring thresholds
        persistence: Where circuit state survives restarts (optional)
        clock: Returns the current time in seconds; injectable for tests
    """

    def __init__(
        self,
        settings: SecuritySettings = DEFAULT_SECURITY_SETTINGS,
        persistence: Optional[PersistenceManager] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self._persistence = persistence
        self._clock = clock
        self._states: Dict[str, PathwayState] = {
            name: PathwayState(policy, settings.monitoring.incident_capacity)
            for name, policy in settings.pathways.items()
        }
        self._restore_circuits()

    def _restore_circuits(self) -> None:
        if self._persistence is None:
            return
        for record in self._persistence.load_all_circuit_states():
            state = self._states.get(record["pathway"])
            if state is None:
                logger.warning(
                    f"[SecurityGate] Ignoring persisted circuit for unconfigured pathway '{record['pathway']}'"
                )
                continue
            state.circuit = CircuitState.from_record(record)
            if state.circuit.is_open:
                logger.warning(
                    f"[SecurityGate] Pathway '{state.policy.name}' restored with OPEN circuit: "
                    f"{state.circuit.reason}"
                )

    def _state(self, pathway: str) -> PathwayState:
        state = self._states.get(pathway)
        if state is None:
            raise UnknownPathwayError(pathway)
        return state

    def pathways(self) -> List[str]:
        return sorted(self._states)

    # Admission

    def admit(
        self,
        origin_key: str,
        filename: str,
        size_bytes: int,
        pathway: str = DEFAULT_PATHWAY,
    ) -> Admission:
        """
        Decide whether an upload may enter the pathway.

        Raises:
            UnknownPathwayError: If the pathway has no policy
        """
        state = self._state(pathway)
        policy = state.policy
        monitoring = self.settings.monitoring

        with state.lock:
            now = self._clock()

            if state.circuit.is_open:
                logger.warning(
                    f"[SecurityGate] Rejected {filename!r} from {origin_key}: "
                    f"pathway '{pathway}' circuit is open"
                )
                return Admission.deny(
                    DenialKind.CIRCUIT_OPEN,
                    state.circuit.reason or f"Pathway '{pathway}' is disabled",
                    opened_at=state.circuit.opened_at,
                )

            if size_bytes > policy.max_file_size:
                logger.info(
                    f"[SecurityGate] Rejected {filename!r} from {origin_key}: "
                    f"{size_bytes} bytes exceeds {policy.max_file_size}"
                )
                return Admission.deny(
                    DenialKind.FILE_TOO_LARGE,
                    f"File size {size_bytes} bytes exceeds the limit of {policy.max_file_size} bytes",
                )

            matched = state.matching_pattern(filename)
            if matched is not None:
                self._record_incident(
                    state,
                    origin_key,
                    IncidentKind.SUSPICIOUS_FILENAME,
                    Severity.HIGH,
                    now,
                    {"filename": filename, "pattern": matched},
                )
                return Admission.deny(
                    DenialKind.SUSPICIOUS_FILENAME,
                    "Suspicious filename pattern detected",
                )

            self._prune_counters(state, now)
            counter = state.counters.get(origin_key)
            if counter is None:
                state.counters[origin_key] = _RateCounter(count=1, last_seen=now)
                return Admission.allow()

            if counter.count >= policy.max_uploads_per_window:
                self._record_incident(
                    state,
                    origin_key,
                    IncidentKind.RATE_LIMIT_EXCEEDED,
                    Severity.MEDIUM,
                    now,
                    {"filename": filename, "count": counter.count},
                )
                return Admission.deny(
                    DenialKind.RATE_LIMITED,
                    f"Upload limit of {policy.max_uploads_per_window} per "
                    f"{int(monitoring.cooldown_seconds)}s exceeded",
                )

            counter.count += 1
            counter.last_seen = now
            return Admission.allow()

    def _prune_counters(self, state: PathwayState, now: float) -> None:
        """Drop counters whose window has lapsed (caller holds state.lock)."""
        cooldown = self.settings.monitoring.cooldown_seconds
        expired = [key for key, c in state.counters.items() if now - c.last_seen >= cooldown]
        for key in expired:
            del state.counters[key]

    def require(
        self,
        origin_key: str,
        filename: str,
        size_bytes: int,
        pathway: str = DEFAULT_PATHWAY,
    ) -> None:
        """
        Same checks as admit(), raising on denial.

        Raises:
            CircuitOpenError: If the pathway circuit is open
            SecurityDeniedError: On any other denial
        """
        admission = self.admit(origin_key, filename, size_bytes, pathway)
        if admission.allowed:
            return
        if admission.kind == DenialKind.CIRCUIT_OPEN:
            raise CircuitOpenError(pathway, admission.reason, admission.opened_at)
        raise SecurityDeniedError(admission.reason, admission.kind.value)

    # Incidents and escalation (caller holds state.lock)

    def _record_incident(
        self,
        state: PathwayState,
        origin_key: str,
        kind: IncidentKind,
        severity: Severity,
        now: float,
        details: Dict,
    ) -> None:
        incident = Incident(
            origin_key=origin_key,
            kind=kind,
            severity=severity,
            timestamp=now,
            pathway=state.policy.name,
            details=details,
        )
        state.incidents.append(incident)
        logger.warning(
            f"[SecurityGate] Incident {kind.value} ({severity.value}) from {origin_key} "
            f"on '{state.policy.name}': {details}"
        )
        self._escalate(state, origin_key, now)

    def _escalate(self, state: PathwayState, origin_key: str, now: float) -> None:
        monitoring = self.settings.monitoring
        if not monitoring.enabled or state.circuit.is_open:
            return

        recent = sum(
            1 for i in state.incidents
            if i.origin_key == origin_key and now - i.timestamp < monitoring.cooldown_seconds
        )
        if recent >= monitoring.alert_threshold:
            reason = f"Multiple security incidents detected from origin: {origin_key}"
            self._open(state, reason, now)
            logger.error(
                f"[SecurityGate] Circuit OPEN for pathway '{state.policy.name}' "
                f"after {recent} incident(s): {reason}"
            )

    def _open(self, state: PathwayState, reason: str, now: float) -> None:
        state.circuit = CircuitState(
            pathway=state.policy.name,
            status=CircuitStatus.OPEN,
            reason=reason,
            opened_at=now,
        )
        self._persist(state.circuit)

    def _persist(self, circuit: CircuitState) -> None:
        if self._persistence is None:
            return
        try:
            self._persistence.save_circuit_state(circuit.to_record())
        except PersistenceError:
            # The in-memory circuit still holds; only the restart guarantee is lost.
            logger.exception(
                f"[SecurityGate] Failed to persist circuit state for '{circuit.pathway}'"
            )

    # Administrative operations

    def open_circuit(self, pathway: str, reason: str) -> CircuitState:
        """Manual kill switch."""
        state = self._state(pathway)
        with state.lock:
            self._open(state, reason, self._clock())
            logger.error(f"[SecurityGate] Circuit OPENED manually for '{pathway}': {reason}")
            return state.circuit

    def close_circuit(self, pathway: str, reason: Optional[str] = None) -> CircuitState:
        """
        Deliberately re-enable a pathway.

        Incidents and rate counters are kept; use reset_counters() to clear them.
        """
        state = self._state(pathway)
        with state.lock:
            state.circuit = CircuitState(pathway=pathway, status=CircuitStatus.CLOSED, reason=reason)
            self._persist(state.circuit)
            logger.info(f"[SecurityGate] Circuit CLOSED for '{pathway}'" + (f": {reason}" if reason else ""))
            return state.circuit

    def circuit_state(self, pathway: str = DEFAULT_PATHWAY) -> CircuitState:
        state = self._state(pathway)
        with state.lock:
            return state.circuit

    def incidents(self, pathway: str = DEFAULT_PATHWAY, limit: Optional[int] = None) -> List[Incident]:
        """Recorded incidents, oldest first; limit keeps the newest."""
        state = self._state(pathway)
        with state.lock:
            records = list(state.incidents)
        if limit is not None:
            records = records[-limit:] if limit > 0 else []
        return records

    def status(self, pathway: str = DEFAULT_PATHWAY, recent: int = 10) -> SecurityStatus:
        state = self._state(pathway)
        with state.lock:
            incidents = list(state.incidents)
            counters = [
                OriginCounter(origin_key=key, count=c.count, last_seen=c.last_seen)
                for key, c in sorted(state.counters.items())
            ]
            circuit = state.circuit
        return SecurityStatus(
            pathway=pathway,
            circuit=circuit,
            recent_incidents=incidents[-recent:] if recent > 0 else [],
            counters=counters,
            incident_count=len(incidents),
        )

    def reset_counters(self, pathway: str = DEFAULT_PATHWAY) -> None:
        """Clear the incident log and rate counters. The circuit is left as is."""
        state = self._state(pathway)
        with state.lock:
            state.incidents.clear()
            state.counters.clear()
        logger.info(f"[SecurityGate] Counters reset for '{pathway}'")

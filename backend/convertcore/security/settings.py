"""
SecuritySettings - admission policy per pathway plus incident monitoring.

Thresholds and cooldowns are configuration, never code constants in the
gate. Settings are immutable; load_security_settings() builds a new
instance from a JSON file merged over the defaults.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

SECURITY_CONFIG_ENV = "CONVERTCORE_SECURITY_CONFIG"

DEFAULT_SUSPICIOUS_PATTERNS: Tuple[str, ...] = (
    r"\.\./",  # Path traversal
    r"javascript:",
    r"data:text/html",
    r"vbscript:",
    r"on\w+\s*=",  # Inline event handlers
    r"<script",
    r"<iframe",
    r"<object",
    r"<embed",
)

MB = 1024 * 1024


@dataclass(frozen=True)
class PathwayPolicy:
    """Admission rules for one security-sensitive pathway."""

    name: str
    formats: Tuple[str, ...] = ()
    max_file_size: int = 50 * MB
    max_uploads_per_window: int = 5
    suspicious_patterns: Tuple[str, ...] = DEFAULT_SUSPICIOUS_PATTERNS

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "PathwayPolicy":
        return cls(
            name=name,
            formats=tuple(f.lower() for f in data.get("formats", ())),
            max_file_size=int(data.get("max_file_size", 50 * MB)),
            max_uploads_per_window=int(data.get("max_uploads_per_window", 5)),
            suspicious_patterns=tuple(data.get("suspicious_patterns", DEFAULT_SUSPICIOUS_PATTERNS)),
        )


@dataclass(frozen=True)
class MonitoringPolicy:
    """
    Incident escalation.

    cooldown_seconds is both the rate-limit window and the window in which
    an origin's incidents are counted towards alert_threshold.
    """

    enabled: bool = True
    alert_threshold: int = 3
    cooldown_seconds: float = 3600.0
    incident_capacity: int = 100

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MonitoringPolicy":
        return cls(
            enabled=bool(data.get("enabled", True)),
            alert_threshold=int(data.get("alert_threshold", 3)),
            cooldown_seconds=float(data.get("cooldown_seconds", 3600.0)),
            incident_capacity=int(data.get("incident_capacity", 100)),
        )


def _default_pathways() -> Dict[str, PathwayPolicy]:
    return {"spreadsheet": PathwayPolicy(name="spreadsheet", formats=("xls", "xlsx"))}


@dataclass(frozen=True)
class SecuritySettings:
    pathways: Dict[str, PathwayPolicy] = field(default_factory=_default_pathways)
    monitoring: MonitoringPolicy = field(default_factory=MonitoringPolicy)

    def __post_init__(self):
        if self.monitoring.alert_threshold < 1:
            raise ValueError("alert_threshold must be at least 1")
        if self.monitoring.incident_capacity < 1:
            raise ValueError("incident_capacity must be at least 1")
        if self.monitoring.cooldown_seconds <= 0:
            raise ValueError("cooldown_seconds must be positive")
        for name, policy in self.pathways.items():
            if policy.max_uploads_per_window < 1:
                raise ValueError(f"max_uploads_per_window for '{name}' must be at least 1")
            if policy.max_file_size < 0:
                raise ValueError(f"max_file_size for '{name}' must not be negative")

    def policy_for(self, pathway: str) -> Optional[PathwayPolicy]:
        return self.pathways.get(pathway)

    def pathway_for_format(self, fmt: str) -> Optional[str]:
        """Name of the pathway guarding a source format, if any."""
        fmt = fmt.lower()
        for name, policy in self.pathways.items():
            if fmt in policy.formats:
                return name
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pathways": {
                name: {
                    "formats": list(policy.formats),
                    "max_file_size": policy.max_file_size,
                    "max_uploads_per_window": policy.max_uploads_per_window,
                    "suspicious_patterns": list(policy.suspicious_patterns),
                }
                for name, policy in self.pathways.items()
            },
            "monitoring": asdict(self.monitoring),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SecuritySettings":
        """
        Deserialize from dictionary.

        Pathways named in data replace the default policy of the same name
        field by field; unnamed default pathways are kept.
        """
        if not data:
            return DEFAULT_SECURITY_SETTINGS

        defaults = DEFAULT_SECURITY_SETTINGS.to_dict()
        pathways: Dict[str, PathwayPolicy] = {}
        raw_pathways = dict(defaults["pathways"])
        for name, overrides in (data.get("pathways") or {}).items():
            merged = dict(raw_pathways.get(name, {}))
            merged.update(overrides or {})
            raw_pathways[name] = merged
        for name, raw in raw_pathways.items():
            pathways[name] = PathwayPolicy.from_dict(name, raw)

        monitoring_data = dict(defaults["monitoring"])
        monitoring_data.update(data.get("monitoring") or {})

        return cls(
            pathways=pathways,
            monitoring=MonitoringPolicy.from_dict(monitoring_data),
        )


DEFAULT_SECURITY_SETTINGS = SecuritySettings()


def load_security_settings(path: Optional[str] = None) -> SecuritySettings:
    """
    Load security settings from a JSON file.

    Args:
        path: JSON file to read. Falls back to $CONVERTCORE_SECURITY_CONFIG;
              with neither, defaults are returned.

    Raises:
        ValueError: If the file exists but is not valid JSON or holds invalid values
    """
    path = path or os.environ.get(SECURITY_CONFIG_ENV)
    if not path:
        return DEFAULT_SECURITY_SETTINGS

    config_path = Path(path)
    if not config_path.exists():
        logger.warning(f"[SecuritySettings] Config file {config_path} not found, using defaults")
        return DEFAULT_SECURITY_SETTINGS

    try:
        data = json.loads(config_path.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid security config {config_path}: {e}") from e

    settings = SecuritySettings.from_dict(data)
    logger.info(
        f"[SecuritySettings] Loaded {config_path}: "
        f"{len(settings.pathways)} pathway(s), alert threshold {settings.monitoring.alert_threshold}"
    )
    return settings


def save_security_settings(settings: SecuritySettings, path: str) -> None:
    Path(path).write_text(json.dumps(settings.to_dict(), indent=2))

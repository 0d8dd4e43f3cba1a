"""
ConverterSettings - runtime configuration of the conversion service.

Immutable. Built from defaults, a dict, or CONVERTCORE_* environment
variables.
"""

import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

ENV_WORK_DIR = "CONVERTCORE_WORK_DIR"
ENV_DB_PATH = "CONVERTCORE_DB_PATH"
ENV_RETENTION_SECONDS = "CONVERTCORE_RETENTION_SECONDS"
ENV_ROUND_TRIP_TOLERANCE = "CONVERTCORE_ROUND_TRIP_TOLERANCE"

DEFAULT_RETENTION_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class ConverterSettings:
    """
    Service-wide settings.

    work_dir holds uploads/, temp/ and converted/.
    db_path defaults to <work_dir>/convertcore.db when not given.
    """

    work_dir: str = "./convertcore-data"
    db_path: Optional[str] = None
    retention_seconds: int = DEFAULT_RETENTION_SECONDS
    round_trip_tolerance: float = 0.02

    def __post_init__(self):
        if self.retention_seconds <= 0:
            raise ValueError("retention_seconds must be positive")
        if not 0 <= self.round_trip_tolerance < 1:
            raise ValueError("round_trip_tolerance must be in [0, 1)")

    @property
    def resolved_db_path(self) -> str:
        if self.db_path:
            return self.db_path
        return str(Path(self.work_dir) / "convertcore.db")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConverterSettings":
        if not data:
            return cls()
        defaults = cls()
        return cls(
            work_dir=str(data.get("work_dir", defaults.work_dir)),
            db_path=data.get("db_path"),
            retention_seconds=int(data.get("retention_seconds", defaults.retention_seconds)),
            round_trip_tolerance=float(data.get("round_trip_tolerance", defaults.round_trip_tolerance)),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ConverterSettings":
        """
        Read CONVERTCORE_WORK_DIR, CONVERTCORE_DB_PATH,
        CONVERTCORE_RETENTION_SECONDS and CONVERTCORE_ROUND_TRIP_TOLERANCE.

        Raises:
            ValueError: If a numeric variable does not parse
        """
        env = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        if env.get(ENV_WORK_DIR):
            data["work_dir"] = env[ENV_WORK_DIR]
        if env.get(ENV_DB_PATH):
            data["db_path"] = env[ENV_DB_PATH]
        if env.get(ENV_RETENTION_SECONDS):
            data["retention_seconds"] = int(env[ENV_RETENTION_SECONDS])
        if env.get(ENV_ROUND_TRIP_TOLERANCE):
            data["round_trip_tolerance"] = float(env[ENV_ROUND_TRIP_TOLERANCE])
        return cls.from_dict(data)

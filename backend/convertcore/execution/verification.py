"""
Round-trip verification.

Converts A -> B -> A through two resolved plans and compares the size of the
final artifact with the original. Meant for lossless or near-lossless pairs
(csv <-> json, png <-> bmp, wav <-> flac) when qualifying a provider set.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..artifacts.models import Artifact
from ..artifacts.store import ArtifactStore
from ..jobs.models import Job, JobFailure, JobStatus
from .scheduler import BatchScheduler

logger = logging.getLogger(__name__)


class RoundTripReport(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    source_format: str
    via_format: str
    original_size: int
    round_trip_size: Optional[int] = None
    tolerance: float
    error: Optional[JobFailure] = None

    @property
    def deviation(self) -> Optional[float]:
        """Relative size difference, 0.0 when identical."""
        if self.round_trip_size is None:
            return None
        if self.original_size == 0:
            return 0.0 if self.round_trip_size == 0 else float("inf")
        return abs(self.round_trip_size - self.original_size) / self.original_size

    @property
    def within_tolerance(self) -> bool:
        deviation = self.deviation
        return deviation is not None and deviation <= self.tolerance


def verify_round_trip(
    scheduler: BatchScheduler,
    store: ArtifactStore,
    source: Artifact,
    via_format: str,
    tolerance: float = 0.02,
) -> RoundTripReport:
    """
    Run source -> via_format -> source format and measure the size drift.

    Both produced artifacts are released before returning; the source is
    left untouched.

    Args:
        scheduler: Scheduler used for both conversions
        store: Store holding the produced artifacts
        source: Original artifact
        via_format: Format to convert through
        tolerance: Allowed relative size difference
    """
    forward = Job(source=source, target_format=via_format)
    scheduler.run_batch([forward])
    report = dict(
        source_format=source.format,
        via_format=via_format,
        original_size=source.size_bytes,
        tolerance=tolerance,
    )
    if forward.status != JobStatus.COMPLETED:
        return RoundTripReport(error=forward.error, **report)

    backward = Job(source=forward.result, target_format=source.format)
    try:
        scheduler.run_batch([backward])
    finally:
        store.release(forward.result)

    if backward.status != JobStatus.COMPLETED:
        return RoundTripReport(error=backward.error, **report)

    result = RoundTripReport(round_trip_size=backward.result.size_bytes, **report)
    store.release(backward.result)
    logger.info(
        f"[Verification] {source.format} -> {via_format} -> {source.format}: "
        f"{result.original_size} -> {result.round_trip_size} bytes "
        f"({'ok' if result.within_tolerance else 'out of tolerance'})"
    )
    return result

"""
Conversion service - wires graph, gate, resolver, scheduler and registry.

Flow per submission:
1. Source format from the filename, default target when none is given
2. Security gate for formats that belong to a guarded pathway
   (a denial fails the job immediately: pending -> failed)
3. Job registered; run_batch() later resolves and converts it
4. Results are retrieved, discarded, or purged after the retention deadline
"""

import logging
import threading
import uuid
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .artifacts import Artifact, ArtifactStore
from .capabilities import (
    CapabilityGraph,
    UnsupportedFormatError,
    build_default_graph,
    format_from_filename,
    normalize_format,
)
from .execution import (
    BatchResult,
    BatchScheduler,
    JobResolver,
    Observer,
    RoundTripReport,
    verify_round_trip,
)
from .jobs import FailureKind, Job, JobRegistry, fail_job
from .persistence import PersistenceManager
from .providers import ProviderRegistry
from .security import (
    CircuitOpenError,
    SecurityDeniedError,
    SecurityGate,
    SecuritySettings,
    load_security_settings,
)
from .settings import ConverterSettings

logger = logging.getLogger(__name__)


class ConversionService:
    """
    Facade used by the surrounding upload/API layer.

    Thread-safe: batches may run concurrently on separate threads, each on
    its own BatchScheduler.
    """

    def __init__(
        self,
        graph: CapabilityGraph,
        gate: SecurityGate,
        providers: ProviderRegistry,
        store: ArtifactStore,
        registry: Optional[JobRegistry] = None,
        settings: Optional[ConverterSettings] = None,
    ):
        self.graph = graph
        self.gate = gate
        self.providers = providers
        self.store = store
        self.registry = registry or JobRegistry(store)
        self.settings = settings or ConverterSettings(work_dir=str(store.base_dir))
        self.resolver = JobResolver(graph)
        # batch_id -> scheduler running it
        self._active: Dict[str, BatchScheduler] = {}
        self._lock = threading.Lock()

    @classmethod
    def create(
        cls,
        settings: Optional[ConverterSettings] = None,
        providers: Optional[ProviderRegistry] = None,
        security_settings: Optional[SecuritySettings] = None,
    ) -> "ConversionService":
        """
        Build a service with the default capability graph and SQLite-backed
        circuit persistence.
        """
        settings = settings or ConverterSettings.from_env()
        store = ArtifactStore(settings.work_dir)
        persistence = PersistenceManager(settings.resolved_db_path)
        gate = SecurityGate(security_settings or load_security_settings(), persistence=persistence)
        return cls(
            graph=build_default_graph(),
            gate=gate,
            providers=providers or ProviderRegistry(),
            store=store,
            settings=settings,
        )

    # Submission

    def submit(
        self,
        origin_key: str,
        filename: str,
        source_path: str,
        target_format: Optional[str] = None,
        options: Optional[Mapping[str, Any]] = None,
        intermediate_options: Optional[Mapping[str, Any]] = None,
        batch_id: Optional[str] = None,
    ) -> Job:
        """
        Create a job for an uploaded file.

        The source file is handed over: it is released with the job.

        Args:
            origin_key: Opaque client identity used for rate limiting
            filename: Original client filename (format and pattern checks)
            source_path: Where the upload was stored
            target_format: Requested target, or None for the default target
            options: Options for the step producing the target
            intermediate_options: Options for the intermediate step of a two-step route
            batch_id: Batch to add the job to

        Returns:
            The registered job: pending, or failed if admission was denied

        Raises:
            UnsupportedFormatError: If no target was given and the source has no default
            FileNotFoundError: If source_path does not exist
        """
        source_format = format_from_filename(filename) or Path(filename).suffix.lstrip(".").lower()
        if target_format is None:
            target_format = self.graph.default_target(source_format)
            if target_format is None:
                raise UnsupportedFormatError(source_format or filename, reason="no default target")

        source = self.store.register(source_path, source_format)
        job = Job(
            batch_id=batch_id,
            origin_key=origin_key,
            source=source,
            target_format=normalize_format(target_format),
            options=dict(options or {}),
            intermediate_options=dict(intermediate_options or {}),
        )

        pathway = self._pathway_for(source_format)
        if pathway is not None:
            try:
                self.gate.require(origin_key, filename, source.size_bytes, pathway)
            except CircuitOpenError as e:
                fail_job(job, FailureKind.CIRCUIT_OPEN, e.reason, detail=e.kind)
            except SecurityDeniedError as e:
                fail_job(job, FailureKind.SECURITY_DENIED, e.reason, detail=e.kind)

        self.registry.add_job(job)
        logger.info(f"[Service] Submitted job {job.id}: {job.summary()}")
        return job

    def _pathway_for(self, source_format: str) -> Optional[str]:
        pathway = self.gate.settings.pathway_for_format(source_format) or self.graph.pathway_of(source_format)
        if pathway is not None and pathway not in self.gate.pathways():
            logger.warning(f"[Service] No security policy for pathway '{pathway}', admitting without checks")
            return None
        return pathway

    def new_batch_id(self) -> str:
        return str(uuid.uuid4())

    # Execution

    def run_batch(
        self,
        jobs: Optional[Sequence[Job]] = None,
        observer: Optional[Observer] = None,
        batch_id: Optional[str] = None,
    ) -> BatchResult:
        """
        Run a batch to completion.

        Args:
            jobs: Jobs to run in order; defaults to the registered jobs of batch_id
            observer: Progress observer
            batch_id: Batch identity, used by cancel_batch()
        """
        if jobs is None:
            if batch_id is None:
                raise ValueError("run_batch needs jobs or a batch_id")
            jobs = self.registry.list_jobs(batch_id)

        key = batch_id or self.new_batch_id()
        scheduler = BatchScheduler(self.resolver, self.providers, self.store)
        with self._lock:
            if key in self._active:
                raise ValueError(f"Batch '{key}' is already running")
            self._active[key] = scheduler
        try:
            return scheduler.run_batch(jobs, observer, batch_id=key)
        finally:
            with self._lock:
                self._active.pop(key, None)

    def cancel_batch(self, batch_id: str) -> bool:
        """
        Request cooperative cancellation of a running batch.

        Returns:
            False if no batch with that ID is running
        """
        with self._lock:
            scheduler = self._active.get(batch_id)
        if scheduler is None:
            return False
        scheduler.cancel()
        return True

    # Results

    def retrieve(self, job_id: str) -> Artifact:
        return self.registry.retrieve(job_id)

    def discard(self, job_id: str) -> None:
        self.registry.discard(job_id)

    def purge_expired(self) -> int:
        """
        Release jobs and files older than the retention deadline.

        Returns:
            Number of jobs and stray files removed
        """
        retention = self.settings.retention_seconds
        jobs = self.registry.purge_expired(timedelta(seconds=retention))
        files = self.store.purge_expired(retention)
        return len(jobs) + files

    # Queries

    def reachable_targets(self, filename: str) -> List[str]:
        source_format = format_from_filename(filename)
        if source_format is None:
            return []
        return sorted(self.graph.reachable_targets(source_format))

    def verify_round_trip(self, source: Artifact, via_format: str) -> RoundTripReport:
        scheduler = BatchScheduler(self.resolver, self.providers, self.store)
        return verify_round_trip(
            scheduler,
            self.store,
            source,
            normalize_format(via_format),
            tolerance=self.settings.round_trip_tolerance,
        )

"""
Batch scheduler - runs an ordered list of jobs to a terminal state.

Design rules:
- Strictly sequential: one job converting at a time per batch
- Job N reaches a terminal state before job N+1 starts
- One job failing never blocks the others
- Cancellation is cooperative and only checked between jobs
- Temporary artifacts are released on every exit path
- Observer failures are logged and never halt execution

Independent batches run on separate BatchScheduler instances and may run
concurrently on separate threads.
"""

import logging
import threading
from contextlib import ExitStack
from datetime import datetime
from typing import List, Optional, Sequence

from ..artifacts.models import Artifact
from ..artifacts.store import ArtifactStore
from ..capabilities.errors import ResolutionError
from ..jobs.models import FailureKind, Job, JobStatus
from ..jobs.state import advance_progress, complete_job, fail_job, start_job
from ..providers.errors import ProviderError, ProviderNotAvailableError
from ..providers.registry import ProviderRegistry
from .errors import BatchInProgressError
from .events import Observer, ProgressEvent
from .plan import ExecutionPlan
from .resolver import JobResolver
from .results import BatchResult, JobOutcome

logger = logging.getLogger(__name__)


class BatchScheduler:
    """
    Sequential batch executor.

    The only component that invokes codec providers and manages temporary
    artifacts.
    """

    def __init__(
        self,
        resolver: JobResolver,
        providers: ProviderRegistry,
        store: ArtifactStore,
    ):
        """
        Initialize scheduler.

        Args:
            resolver: Builds a plan per job
            providers: Codec provider per format family
            store: Where intermediate and result artifacts live
        """
        self._resolver = resolver
        self._providers = providers
        self._store = store
        self._cancel_requested = threading.Event()
        self._run_lock = threading.Lock()

    def cancel(self) -> None:
        """
        Request cancellation of the running batch.

        The job currently converting runs to a terminal state; jobs after it
        are left pending. A request made before run_batch() starts leaves
        every job of that batch pending.
        """
        self._cancel_requested.set()
        logger.info("[Scheduler] Cancellation requested")

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested.is_set()

    def run_batch(
        self,
        jobs: Sequence[Job],
        observer: Optional[Observer] = None,
        batch_id: Optional[str] = None,
    ) -> BatchResult:
        """
        Run jobs in order until each started job is terminal.

        Args:
            jobs: Jobs in submission order
            observer: Receives ProgressEvents (optional)
            batch_id: Reported on the result

        Returns:
            BatchResult with one outcome per job looked at

        Raises:
            BatchInProgressError: If this scheduler is already running a batch
        """
        if not self._run_lock.acquire(blocking=False):
            raise BatchInProgressError()
        try:
            return self._run(list(jobs), observer, batch_id)
        finally:
            # A cancel requested before the batch started applies to it
            self._cancel_requested.clear()
            self._run_lock.release()

    def _run(self, jobs: List[Job], observer: Optional[Observer], batch_id: Optional[str]) -> BatchResult:
        result = BatchResult(batch_id=batch_id)
        logger.info(f"[Scheduler] Batch {batch_id or '-'} started with {len(jobs)} job(s)")

        for index, job in enumerate(jobs):
            if self._cancel_requested.is_set():
                result.cancelled = True
                for remaining in jobs[index:]:
                    if remaining.is_terminal:
                        result.outcomes.append(JobOutcome.from_job(remaining, skipped=True))
                    else:
                        result.not_started.append(remaining.id)
                logger.info(
                    f"[Scheduler] Batch {batch_id or '-'} cancelled, "
                    f"{len(result.not_started)} job(s) not started"
                )
                break

            if job.is_terminal:
                logger.info(f"[Scheduler] Job {job.id} already {job.status.value}, skipping")
                result.outcomes.append(JobOutcome.from_job(job, skipped=True))
                continue

            if job.status != JobStatus.PENDING:
                logger.warning(f"[Scheduler] Job {job.id} is {job.status.value}, not pending; skipping")
                result.outcomes.append(JobOutcome.from_job(job, skipped=True))
                continue

            self._run_job(job, observer)
            result.outcomes.append(JobOutcome.from_job(job))

        result.completed_at = datetime.now()
        logger.info(f"[Scheduler] Batch {batch_id or '-'} finished: {result.summary()}")
        return result

    def _run_job(self, job: Job, observer: Optional[Observer]) -> None:
        start_job(job)
        logger.info(f"[Scheduler] Job {job.id} converting {job.source.filename} -> {job.target_format}")
        self._emit(observer, job)

        try:
            plan = self._resolver.resolve(job)
        except ResolutionError as e:
            logger.info(f"[Scheduler] Job {job.id} failed resolution: {e}")
            fail_job(job, FailureKind(e.kind), str(e))
            self._emit(observer, job)
            return

        candidates = (plan,) + plan.alternatives
        last_error: Optional[ProviderError] = None

        for attempt, candidate in enumerate(candidates):
            if attempt:
                logger.warning(
                    f"[Scheduler] Job {job.id}: {candidates[attempt - 1].describe()} failed "
                    f"({last_error}), falling back to {candidate.describe()}"
                )
            try:
                artifact = self._execute_plan(job, candidate, observer)
            except ProviderError as e:
                last_error = e
                continue

            complete_job(job, artifact)
            logger.info(f"[Scheduler] Job {job.id} completed: {artifact.filename}")
            self._emit(observer, job)
            return

        fail_job(job, FailureKind.PROVIDER_ERROR, last_error.message, detail=last_error.kind)
        logger.info(f"[Scheduler] Job {job.id} failed: {last_error}")
        self._emit(observer, job)

    def _execute_plan(self, job: Job, plan: ExecutionPlan, observer: Optional[Observer]) -> Artifact:
        """
        Run every step of one plan.

        Raises:
            ProviderError: If any step fails; temporaries are released first
        """
        if plan.is_copy:
            try:
                return self._store.copy(job.source)
            except OSError as e:
                raise ProviderError("copy_failed", f"Could not copy {job.source.filename}: {e}") from e

        total = plan.step_count
        current = job.source

        with ExitStack() as temporaries:
            for index, step in enumerate(plan.steps, start=1):
                output = self._invoke(step.family, current, step.target_format, step.options)
                try:
                    artifact = self._store.adopt(
                        output.path,
                        step.target_format,
                        temporary=step.temporary,
                        mime_type=output.mime_type,
                        size_bytes=output.size_bytes,
                    )
                except FileNotFoundError as e:
                    raise ProviderError("output_missing", str(e)) from e
                except OSError as e:
                    raise ProviderError("store_failed", f"Could not store {step.target_format} output: {e}") from e

                if step.temporary:
                    temporaries.callback(self._release_temporary, artifact)
                logger.debug(
                    f"[Scheduler] Job {job.id} step {index}/{total} {step.describe()} -> {artifact.filename}"
                )
                current = artifact

                if index < total:
                    self._advance(job, (100 * index) // total, observer)

        return current

    def _release_temporary(self, artifact: Artifact) -> None:
        try:
            self._store.release(artifact)
        except OSError:
            logger.exception(f"[Scheduler] Could not release temporary artifact {artifact.id}")

    def _invoke(self, family, artifact: Artifact, target_format: str, options):
        """Call the provider for one step, normalizing every failure to ProviderError."""
        try:
            provider = self._providers.get(family)
        except ProviderNotAvailableError as e:
            raise ProviderError("provider_unavailable", str(e)) from e

        try:
            return provider.convert(artifact, target_format, options)
        except ProviderError:
            raise
        except Exception as e:
            logger.exception(f"[Scheduler] Provider {provider.name} raised unexpectedly")
            raise ProviderError("unexpected", f"{type(e).__name__}: {e}") from e

    def _advance(self, job: Job, value: int, observer: Optional[Observer]) -> None:
        # Fallback plans restart their own step count; never move backwards
        if value <= job.progress:
            return
        if advance_progress(job, value):
            self._emit(observer, job)

    def _emit(self, observer: Optional[Observer], job: Job) -> None:
        if observer is None:
            return
        event = ProgressEvent(
            job_id=job.id,
            status=job.status,
            progress=job.progress,
            error=job.error,
        )
        try:
            observer(event)
        except Exception:
            logger.exception(f"[Scheduler] Observer failed on event {event}")


def run_batch(
    jobs: Sequence[Job],
    resolver: JobResolver,
    providers: ProviderRegistry,
    store: ArtifactStore,
    observer: Optional[Observer] = None,
) -> BatchResult:
    """Convenience wrapper: run one batch on a fresh scheduler."""
    return BatchScheduler(resolver, providers, store).run_batch(jobs, observer)

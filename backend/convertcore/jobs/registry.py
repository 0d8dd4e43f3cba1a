"""
Conversion jobs known to the service, keyed by ID.

Submitted jobs stay here until the client discards them or the retention
sweep releases their source and result artifacts.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from ..artifacts.models import Artifact
from ..artifacts.store import ArtifactStore
from .errors import ArtifactNotReadyError, JobNotFoundError
from .models import Job, JobStatus

logger = logging.getLogger(__name__)


class JobRegistry:
    """
    Thread-safe map of job ID to Job.

    Owns the lifetime of result artifacts: a result is released when the
    client discards it or when the retention deadline passes.
    """

    def __init__(self, store: ArtifactStore):
        """
        Args:
            store: Artifact store used to release sources and results
        """
        self._jobs: Dict[str, Job] = {}
        self._store = store
        self._lock = threading.Lock()

    def add_job(self, job: Job) -> None:
        """
        Track a newly submitted job.

        Raises:
            ValueError: If a job with the same ID already exists
        """
        with self._lock:
            if job.id in self._jobs:
                raise ValueError(f"Job with ID '{job.id}' already exists")
            self._jobs[job.id] = job

    def get_job(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def get_job_or_raise(self, job_id: str) -> Job:
        """
        Raises:
            JobNotFoundError: If the job does not exist
        """
        job = self.get_job(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def list_jobs(self, batch_id: Optional[str] = None) -> List[Job]:
        """
        List jobs, oldest first.

        Args:
            batch_id: Restrict to one batch if given
        """
        with self._lock:
            jobs = list(self._jobs.values())
        if batch_id is not None:
            jobs = [j for j in jobs if j.batch_id == batch_id]
        jobs.sort(key=lambda j: j.created_at)
        return jobs

    def retrieve(self, job_id: str) -> Artifact:
        """
        Hand out the result artifact of a completed job.

        Raises:
            JobNotFoundError: If the job does not exist
            ArtifactNotReadyError: If the job has no result
        """
        job = self.get_job_or_raise(job_id)
        if job.status != JobStatus.COMPLETED or job.result is None:
            raise ArtifactNotReadyError(job_id, job.status.value)
        job.retrieved = True
        return job.result

    def discard(self, job_id: str) -> None:
        """
        Destroy a job: release its artifacts and forget it.

        Raises:
            JobNotFoundError: If the job does not exist
        """
        with self._lock:
            job = self._jobs.pop(job_id, None)
        if job is None:
            raise JobNotFoundError(job_id)
        self._release_job_artifacts(job)
        logger.info(f"[JobRegistry] Discarded job {job_id}")

    def purge_expired(self, retention: timedelta, now: Optional[datetime] = None) -> List[str]:
        """
        Discard terminal jobs that finished before now - retention.

        Returns:
            IDs of the discarded jobs
        """
        now = now or datetime.now()
        deadline = now - retention
        with self._lock:
            expired = [
                job for job in self._jobs.values()
                if job.is_terminal and job.completed_at is not None and job.completed_at < deadline
            ]
            for job in expired:
                del self._jobs[job.id]
        for job in expired:
            self._release_job_artifacts(job)
        if expired:
            logger.info(f"[JobRegistry] Purged {len(expired)} expired job(s)")
        return [job.id for job in expired]

    def _release_job_artifacts(self, job: Job) -> None:
        if job.result is not None:
            self._store.release(job.result)
        if job.source.exists():
            self._store.release(job.source)

    def count(self) -> int:
        with self._lock:
            return len(self._jobs)

    def clear(self) -> None:
        """Forget all jobs without touching their artifacts (testing only)."""
        with self._lock:
            self._jobs.clear()

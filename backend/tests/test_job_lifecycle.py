"""
Tests for job lifecycle transitions and progress rules.

pending -> converting -> completed | failed, pending -> failed on denial.
Terminal states are immutable; progress never decreases.
"""

import pytest

from convertcore.artifacts import Artifact
from convertcore.jobs import (
    FailureKind,
    InvalidStateTransitionError,
    Job,
    JobStatus,
    ProgressRegressionError,
    advance_progress,
    can_transition_job,
    complete_job,
    fail_job,
    start_job,
    validate_job_transition,
)


@pytest.fixture
def job():
    return Job(
        source=Artifact(path="/uploads/a.png", format="png", size_bytes=3),
        target_format="jpg",
    )


@pytest.fixture
def result():
    return Artifact(path="/converted/a.jpg", format="jpg", size_bytes=3)


class TestTransitions:

    @pytest.mark.parametrize("from_status,to_status", [
        (JobStatus.PENDING, JobStatus.CONVERTING),
        (JobStatus.PENDING, JobStatus.FAILED),
        (JobStatus.CONVERTING, JobStatus.COMPLETED),
        (JobStatus.CONVERTING, JobStatus.FAILED),
    ])
    def test_legal(self, from_status, to_status):
        assert can_transition_job(from_status, to_status)

    @pytest.mark.parametrize("from_status,to_status", [
        (JobStatus.PENDING, JobStatus.COMPLETED),
        (JobStatus.COMPLETED, JobStatus.FAILED),
        (JobStatus.FAILED, JobStatus.CONVERTING),
        (JobStatus.COMPLETED, JobStatus.COMPLETED),
        (JobStatus.CONVERTING, JobStatus.PENDING),
    ])
    def test_illegal(self, from_status, to_status):
        assert not can_transition_job(from_status, to_status)
        with pytest.raises(InvalidStateTransitionError):
            validate_job_transition(from_status, to_status)


class TestLifecycleHelpers:

    def test_happy_path(self, job, result):
        start_job(job)
        assert job.status == JobStatus.CONVERTING
        assert job.started_at is not None
        assert job.progress == 0

        assert advance_progress(job, 50)
        complete_job(job, result)
        assert job.status == JobStatus.COMPLETED
        assert job.progress == 100
        assert job.result == result
        assert job.completed_at is not None
        assert job.is_terminal

    def test_start_twice_rejected(self, job):
        start_job(job)
        with pytest.raises(InvalidStateTransitionError):
            start_job(job)

    def test_pending_cannot_complete(self, job, result):
        with pytest.raises(InvalidStateTransitionError):
            complete_job(job, result)

    def test_denied_job_fails_from_pending(self, job):
        fail_job(job, FailureKind.SECURITY_DENIED, "Suspicious filename pattern detected")
        assert job.status == JobStatus.FAILED
        assert job.started_at is None
        assert job.error.kind == FailureKind.SECURITY_DENIED
        assert str(job.error) == "security_denied: Suspicious filename pattern detected"

    def test_failed_job_keeps_progress_below_100(self, job):
        start_job(job)
        advance_progress(job, 50)
        fail_job(job, FailureKind.PROVIDER_ERROR, "boom", detail="tool_failed")
        assert job.progress == 50
        assert job.error.detail == "tool_failed"

    def test_terminal_job_is_immutable(self, job, result):
        start_job(job)
        complete_job(job, result)
        with pytest.raises(InvalidStateTransitionError):
            fail_job(job, FailureKind.PROVIDER_ERROR, "late failure")
        assert job.status == JobStatus.COMPLETED


class TestProgress:

    def test_monotonic(self, job):
        start_job(job)
        advance_progress(job, 30)
        with pytest.raises(ProgressRegressionError):
            advance_progress(job, 20)
        assert job.progress == 30

    def test_same_value_is_noop(self, job):
        start_job(job)
        advance_progress(job, 30)
        assert advance_progress(job, 30) is False

    def test_100_reserved_for_completion(self, job):
        start_job(job)
        with pytest.raises(ProgressRegressionError):
            advance_progress(job, 100)

    def test_progress_requires_converting(self, job):
        with pytest.raises(InvalidStateTransitionError):
            advance_progress(job, 10)


class TestSummary:

    def test_pending_summary(self, job):
        assert job.summary() == "PENDING 0%: a.png (png -> jpg)"

    def test_failed_summary(self, job):
        fail_job(job, FailureKind.CIRCUIT_OPEN, "disabled")
        assert job.summary() == "FAILED: a.png (png -> jpg) - circuit_open: disabled"

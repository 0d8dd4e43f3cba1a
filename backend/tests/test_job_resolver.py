"""
Tests for the Job Resolver.

Verifies:
- Direct, via and copy plans
- Unsupported formats and pairs fail fast
- Options are attached to the step they belong to, misplaced ones rejected
- Resolution is pure and idempotent
- Alternate capability entries become fallback plans
"""

import pytest

from convertcore.artifacts import Artifact
from convertcore.capabilities import (
    CapabilityEntry,
    CapabilityGraph,
    FormatFamily,
    PathKind,
)
from convertcore.capabilities.formats import FORMAT_FAMILIES
from convertcore.capabilities.graph import DIRECT, via
from convertcore.capabilities.options import AnimatedImageOptions, DiskImageOptions, VideoOptions
from convertcore.execution import (
    InvalidOptionsError,
    JobResolver,
    UnsupportedFormatError,
)
from convertcore.jobs import Job, JobStatus


def make_job(source_format, target_format, options=None, intermediate_options=None):
    source = Artifact(path=f"/uploads/input.{source_format}", format=source_format, size_bytes=10)
    return Job(
        source=source,
        target_format=target_format,
        options=options or {},
        intermediate_options=intermediate_options or {},
    )


class TestPlanShapes:

    def test_direct_plan(self, resolver):
        plan = resolver.resolve(make_job("png", "jpg", {"quality": 80}))
        assert plan.path.kind == PathKind.DIRECT
        assert len(plan.steps) == 1
        step = plan.steps[0]
        assert step.family == FormatFamily.IMAGE
        assert (step.source_format, step.target_format) == ("png", "jpg")
        assert step.temporary is False
        assert step.options.quality == 80

    def test_iso_to_dmg_plan_via_bin(self, resolver):
        plan = resolver.resolve(make_job("iso", "dmg"))
        assert plan.is_via
        assert plan.path.intermediate == "bin"
        assert [(s.source_format, s.target_format) for s in plan.steps] == [
            ("iso", "bin"),
            ("bin", "dmg"),
        ]
        assert [s.temporary for s in plan.steps] == [True, False]
        assert all(isinstance(s.options, DiskImageOptions) for s in plan.steps)

    def test_copy_plan_for_identical_formats(self, resolver):
        plan = resolver.resolve(make_job("png", "png"))
        assert plan.is_copy
        assert plan.steps == ()

    def test_copy_plan_rejects_options(self, resolver):
        with pytest.raises(InvalidOptionsError, match="copied unchanged"):
            resolver.resolve(make_job("png", "png", {"quality": 50}))

    def test_resolution_does_not_touch_job(self, resolver):
        job = make_job("iso", "dmg")
        before = job.model_dump()
        resolver.resolve(job)
        assert job.model_dump() == before
        assert job.status == JobStatus.PENDING

    def test_resolution_is_idempotent(self, resolver):
        job = make_job("mkv", "gif", {"fps": 12}, {"quality": "medium"})
        assert resolver.resolve(job) == resolver.resolve(job)


class TestUnsupported:

    def test_unknown_source(self, resolver):
        with pytest.raises(UnsupportedFormatError, match="unknown source format"):
            resolver.resolve(make_job("xyz", "png"))

    def test_source_without_extension(self, resolver):
        job = Job(source=Artifact(path="/uploads/README", format="", size_bytes=10), target_format="iso")
        with pytest.raises(UnsupportedFormatError, match="README.*no file extension"):
            resolver.resolve(job)

    def test_unknown_target(self, resolver):
        with pytest.raises(UnsupportedFormatError, match="unknown target format"):
            resolver.resolve(make_job("png", "xyz"))

    def test_pair_without_entry(self, resolver):
        with pytest.raises(UnsupportedFormatError) as exc:
            resolver.resolve(make_job("mp3", "pdf"))
        assert exc.value.kind == "unsupported_format"
        assert "mp3 to pdf is not supported" in str(exc.value)


class TestOptionPlacement:
    """mkv -> gif runs mkv -> mp4 (decode) then mp4 -> gif (animate)."""

    def test_fps_on_final_step_accepted(self, resolver):
        plan = resolver.resolve(make_job("mkv", "gif", {"fps": 12}))
        decode, animate = plan.steps
        assert isinstance(decode.options, VideoOptions)
        assert isinstance(animate.options, AnimatedImageOptions)
        assert animate.options.fps == 12
        assert decode.options.fps is None

    def test_fps_on_decode_step_rejected(self, resolver):
        job = make_job("mkv", "gif", intermediate_options={"fps": 12})
        with pytest.raises(InvalidOptionsError) as exc:
            resolver.resolve(job)
        message = str(exc.value)
        assert exc.value.step == "step 1 of 2 (mkv -> mp4)"
        assert "'fps' applies to the step producing gif" in message
        assert "step 2 of 2 (mp4 -> gif)" in message

    def test_decode_only_option_on_final_step_rejected(self, resolver):
        job = make_job("mkv", "gif", {"bitrate": "4M"})
        with pytest.raises(InvalidOptionsError) as exc:
            resolver.resolve(job)
        assert exc.value.step == "step 2 of 2 (mp4 -> gif)"
        assert "attach it to step 1 of 2 (mkv -> mp4)" in str(exc.value)

    def test_decode_only_option_on_decode_step_accepted(self, resolver):
        plan = resolver.resolve(make_job("mkv", "gif", intermediate_options={"bitrate": "4M"}))
        assert plan.steps[0].options.bitrate == "4M"

    def test_intermediate_options_on_direct_plan_rejected(self, resolver):
        job = make_job("png", "jpg", intermediate_options={"quality": 50})
        with pytest.raises(InvalidOptionsError, match="no intermediate step"):
            resolver.resolve(job)

    def test_unknown_option_rejected(self, resolver):
        with pytest.raises(InvalidOptionsError, match="'bogus' is not recognized"):
            resolver.resolve(make_job("png", "jpg", {"bogus": 1}))


class TestAlternatives:

    def test_alternate_entries_become_fallback_plans(self, resolver):
        plan = resolver.resolve(make_job("iso", "dmg"))
        assert len(plan.alternatives) == 1
        fallback = plan.alternatives[0]
        assert fallback.path.intermediate == "img"
        assert fallback.preference == 1
        assert fallback.alternatives == ()

    def test_heic_to_jpg_direct_with_via_png_fallback(self, resolver):
        plan = resolver.resolve(make_job("heic", "jpg"))
        assert plan.path.kind == PathKind.DIRECT
        assert [a.describe() for a in plan.alternatives] == ["heic -> jpg via(png)"]

    def test_alternative_with_invalid_options_dropped(self):
        graph = CapabilityGraph(
            [
                CapabilityEntry("mp4", "gif", DIRECT, FormatFamily.VIDEO),
                CapabilityEntry("mp4", "png", DIRECT, FormatFamily.VIDEO),
                CapabilityEntry("png", "gif", DIRECT, FormatFamily.IMAGE),
                CapabilityEntry("mp4", "gif", via("png"), None, 1),
            ],
            FORMAT_FAMILIES,
            {},
        )
        plan = JobResolver(graph).resolve(make_job("mp4", "gif", {"fps": 20}))
        assert plan.steps[0].options.fps == 20
        assert plan.alternatives == ()

    def test_primary_plan_errors_are_authoritative(self):
        graph = CapabilityGraph(
            [
                CapabilityEntry("mp4", "png", DIRECT, FormatFamily.VIDEO),
                CapabilityEntry("png", "gif", DIRECT, FormatFamily.IMAGE),
                CapabilityEntry("mp4", "gif", via("png")),
                CapabilityEntry("mp4", "gif", DIRECT, FormatFamily.VIDEO, 1),
            ],
            FORMAT_FAMILIES,
            {},
        )
        with pytest.raises(InvalidOptionsError):
            JobResolver(graph).resolve(make_job("mp4", "gif", {"fps": 20}))

"""
Job Resolver - turns a job into an execution plan.

Pure planning: reads the capability graph and the job, writes nothing.
Resolving the same job twice yields equal plans.

Option placement:
- job.options attach to the final step (the step producing the target)
- job.intermediate_options attach to the first step of a via plan and are
  rejected for direct and copy plans
- an option recognized by the final step is target-specific and must not
  be attached to the intermediate step
- an option only the intermediate step recognizes must not be attached to
  the final step
Misplaced options fail with InvalidOptionsError naming the step where the
option belongs, instead of being dropped.
"""

import logging
from typing import Any, List, Mapping, Tuple

from ..capabilities.errors import InvalidOptionsError, ResolutionError, UnsupportedFormatError
from ..capabilities.formats import normalize_format
from ..capabilities.graph import COPY, CapabilityEntry, CapabilityGraph, PathKind
from ..capabilities.options import parse_options, recognizes
from ..jobs.models import Job
from .plan import ExecutionPlan, PlanStep

logger = logging.getLogger(__name__)


def _step_label(index: int, total: int, source: str, target: str) -> str:
    if total == 1:
        return f"{source} -> {target}"
    return f"step {index} of {total} ({source} -> {target})"


class JobResolver:
    """
    Builds execution plans from the capability graph.

    Stateless apart from the graph reference; safe to share across batches.
    """

    def __init__(self, graph: CapabilityGraph):
        self._graph = graph

    @property
    def graph(self) -> CapabilityGraph:
        return self._graph

    def resolve(self, job: Job) -> ExecutionPlan:
        """
        Build the execution plan for a job.

        Returns:
            The primary plan, with fallback plans in plan.alternatives

        Raises:
            UnsupportedFormatError: Unknown format or no capability entry
            InvalidOptionsError: Option unknown, invalid or on the wrong step
        """
        source = normalize_format(job.source_format)
        target = normalize_format(job.target_format)

        if not source:
            raise UnsupportedFormatError(job.source.filename, reason="source has no file extension")
        if not self._graph.is_known(source):
            raise UnsupportedFormatError(source, reason="unknown source format")
        if not self._graph.is_known(target):
            raise UnsupportedFormatError(target, reason="unknown target format")

        if source == target:
            if job.options or job.intermediate_options:
                raise InvalidOptionsError(
                    f"{source} -> {target}",
                    "source and target formats match, the file is copied unchanged and takes no options",
                )
            return ExecutionPlan(source_format=source, target_format=target, path=COPY)

        entries = self._graph.paths(source, target)
        if not entries:
            raise UnsupportedFormatError(source, target)

        primary = self._build_plan(entries[0], job.options, job.intermediate_options)

        alternatives: List[ExecutionPlan] = []
        for entry in entries[1:]:
            try:
                alternatives.append(
                    self._build_plan(entry, job.options, job.intermediate_options)
                )
            except ResolutionError as e:
                logger.debug(
                    f"[Resolver] Dropping alternative {source} -> {target} {entry.path} "
                    f"for job {job.id}: {e}"
                )

        plan = primary.model_copy(update={"alternatives": tuple(alternatives)})
        logger.debug(
            f"[Resolver] Job {job.id}: {plan.describe()} "
            f"({plan.step_count} step(s), {len(alternatives)} alternative(s))"
        )
        return plan

    def _build_plan(
        self,
        entry: CapabilityEntry,
        options: Mapping[str, Any],
        intermediate_options: Mapping[str, Any],
    ) -> ExecutionPlan:
        if entry.path.kind == PathKind.DIRECT:
            steps = (self._direct_step(entry, options, intermediate_options),)
        else:
            steps = self._via_steps(entry, options, intermediate_options)
        return ExecutionPlan(
            source_format=entry.source,
            target_format=entry.target,
            path=entry.path,
            steps=steps,
            preference=entry.preference,
        )

    def _direct_step(
        self,
        entry: CapabilityEntry,
        options: Mapping[str, Any],
        intermediate_options: Mapping[str, Any],
    ) -> PlanStep:
        label = _step_label(1, 1, entry.source, entry.target)
        if intermediate_options:
            keys = ", ".join(f"'{k}'" for k in sorted(intermediate_options))
            raise InvalidOptionsError(
                label,
                f"{keys} given as intermediate options, but this conversion has no intermediate step",
            )
        return PlanStep(
            family=entry.family,
            source_format=entry.source,
            target_format=entry.target,
            options=parse_options(entry.family, entry.target, options, label),
        )

    def _via_steps(
        self,
        entry: CapabilityEntry,
        options: Mapping[str, Any],
        intermediate_options: Mapping[str, Any],
    ) -> Tuple[PlanStep, PlanStep]:
        hop = entry.path.intermediate
        first = self._graph.direct_entry(entry.source, hop)
        second = self._graph.direct_entry(hop, entry.target)
        first_label = _step_label(1, 2, entry.source, hop)
        second_label = _step_label(2, 2, hop, entry.target)

        for key in intermediate_options:
            if recognizes(second.family, entry.target, key):
                raise InvalidOptionsError(
                    first_label,
                    f"'{key}' applies to the step producing {entry.target}; "
                    f"attach it to {second_label}",
                )
        for key in options:
            if not recognizes(second.family, entry.target, key) and recognizes(first.family, hop, key):
                raise InvalidOptionsError(
                    second_label,
                    f"'{key}' applies to the step producing {hop}; "
                    f"attach it to {first_label}",
                )

        return (
            PlanStep(
                family=first.family,
                source_format=entry.source,
                target_format=hop,
                temporary=True,
                options=parse_options(first.family, hop, intermediate_options, first_label),
            ),
            PlanStep(
                family=second.family,
                source_format=hop,
                target_format=entry.target,
                options=parse_options(second.family, entry.target, options, second_label),
            ),
        )


"""
Execution plan models.

A plan is the resolver's output and the scheduler's input:
- copy plan: zero steps, the source is copied unchanged
- direct plan: one step
- via plan: two steps, the first producing a temporary intermediate

Plans are immutable and compare by value, so resolving the same job twice
yields equal plans.
"""

from typing import Tuple

from pydantic import BaseModel, ConfigDict

from ..capabilities.formats import FormatFamily
from ..capabilities.graph import ConversionPath, PathKind
from ..capabilities.options import StepOptions


class PlanStep(BaseModel):
    """One provider invocation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    family: FormatFamily
    source_format: str
    target_format: str
    temporary: bool = False  # Output is an intermediate released after the plan
    options: StepOptions

    def describe(self) -> str:
        return f"{self.source_format} -> {self.target_format} [{self.family.value}]"


class ExecutionPlan(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    source_format: str
    target_format: str
    path: ConversionPath
    steps: Tuple[PlanStep, ...] = ()
    preference: int = 0

    # Fallback plans from lower-preference capability entries, in order.
    # Only the primary plan carries alternatives.
    alternatives: Tuple["ExecutionPlan", ...] = ()

    @property
    def is_copy(self) -> bool:
        return self.path.kind == PathKind.COPY

    @property
    def is_via(self) -> bool:
        return self.path.kind == PathKind.VIA

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def describe(self) -> str:
        """Human-readable route, e.g. 'iso -> dmg via(bin)'."""
        return f"{self.source_format} -> {self.target_format} {self.path}"


ExecutionPlan.model_rebuild()

"""In-memory execution state for an ``ExecutionPlan``.

Runtimes that execute a plan track step progress out of band; this
module models that progress without persisting it.  Step numbers are
1-based, matching ``ExecutionStep.number``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from apex_spec.errors import InternalError
from apex_spec.interpreter.plan import ExecutionPlan


class StepStatus(Enum):
    PENDING = auto()
    RUNNING = auto()
    COMPLETE = auto()
    FAILED = auto()
    SKIPPED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (StepStatus.COMPLETE, StepStatus.FAILED, StepStatus.SKIPPED)

    @property
    def can_resume(self) -> bool:
        return self in (StepStatus.PENDING, StepStatus.FAILED)


@dataclass
class ExecutionState:
    """Progress of a plan's steps.

    ``checkpoint`` is the number of the last completed step (0 when none
    has completed yet).
    """

    statuses: list[StepStatus] = field(default_factory=list)
    results: list[str | None] = field(default_factory=list)
    checkpoint: int = 0
    error: str | None = None

    @classmethod
    def for_plan(cls, plan: ExecutionPlan) -> "ExecutionState":
        count = len(plan.steps)
        return cls(statuses=[StepStatus.PENDING] * count, results=[None] * count)

    def status(self, number: int) -> StepStatus:
        return self.statuses[self._index(number)]

    def start_step(self, number: int) -> None:
        self.statuses[self._index(number)] = StepStatus.RUNNING

    def complete_step(self, number: int, result: str | None = None) -> None:
        index = self._index(number)
        self.statuses[index] = StepStatus.COMPLETE
        self.results[index] = result
        self.checkpoint = max(self.checkpoint, number)

    def fail_step(self, number: int, error: str) -> None:
        self.statuses[self._index(number)] = StepStatus.FAILED
        self.error = error

    def skip_step(self, number: int) -> None:
        self.statuses[self._index(number)] = StepStatus.SKIPPED

    @property
    def is_complete(self) -> bool:
        return all(status.is_terminal for status in self.statuses)

    @property
    def is_failed(self) -> bool:
        return any(status is StepStatus.FAILED for status in self.statuses)

    @property
    def next_step(self) -> int | None:
        """Return the first resumable step number, or ``None``."""
        for index, status in enumerate(self.statuses):
            if status.can_resume:
                return index + 1
        return None

    def _index(self, number: int) -> int:
        if not 1 <= number <= len(self.statuses):
            raise InternalError(
                f"Step {number} is out of range for a plan with {len(self.statuses)} step(s)"
            )
        return number - 1

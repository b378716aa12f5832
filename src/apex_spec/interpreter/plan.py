"""APEX Interpreter: builds an ``ExecutionPlan`` from a validated document.

Task, goals and validation conditions are copied from their views;
constraints are copied in canonical form (``apex_spec.semantics.normalize``)
in their original order.  Each PLAN line becomes one numbered
``ExecutionStep``.

Tool binding
------------
``BindingStrategy.AUTO`` (the default) binds positionally when PLAN and
TOOLS have the same number of lines, and by keyword otherwise.

Keyword binding splits text into words, i.e. maximal runs of ASCII
letters and digits compared in lowercase, so ``read_file`` yields
``read`` and ``file``.  Each tool scores the number of distinct words its
name and argument text share with the step.  The step is bound to the
single highest-scoring tool; a top score of zero, or a tie for the top
score, leaves it unbound.  A single tool may be bound to several steps.

For ``Read the main file`` against ``read_file(path)`` and
``edit_file(path, changes)`` the scores are 2 and 1, so ``read_file``
binds.

The interpreter performs syntactic binding only; it never consults a
tool registry (see ``apex_spec.registry``).
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from apex_spec.semantics.constraints import normalize
from apex_spec.validator.views import DEFAULT_VERSION, ToolDeclaration, ValidatedDocument

_WORD: Final[re.Pattern[str]] = re.compile(r"[a-z0-9]+")


class BindingStrategy(Enum):
    """How PLAN steps are paired with TOOLS entries."""

    AUTO = "auto"
    POSITIONAL = "positional"
    KEYWORD = "keyword"


@dataclass(frozen=True, slots=True)
class ToolInvocation:
    """A tool name plus its argument text, unparsed."""

    name: str
    raw_arguments: str = ""

    @classmethod
    def from_declaration(cls, declaration: ToolDeclaration) -> "ToolInvocation":
        return cls(name=declaration.name, raw_arguments=declaration.raw_arguments)

    def __str__(self) -> str:
        return f"{self.name} {self.raw_arguments}".rstrip()


@dataclass(frozen=True, slots=True)
class ExecutionStep:
    """One PLAN step; ``number`` starts at 1."""

    number: int
    description: str
    tool: ToolInvocation | None = None

    @property
    def is_bound(self) -> bool:
        return self.tool is not None


@dataclass(frozen=True)
class ExecutionPlan:
    """The terminal artifact of the pipeline.

    ``tools`` lists every TOOLS entry in order, whether or not a step is
    bound to it.
    """

    task: str
    goals: tuple[str, ...] = ()
    constraints: tuple[str, ...] = ()
    steps: tuple[ExecutionStep, ...] = ()
    validation: tuple[str, ...] = ()
    tools: tuple[ToolInvocation, ...] = ()
    version: str = DEFAULT_VERSION

    @property
    def is_empty(self) -> bool:
        return not self.steps

    @property
    def unbound_steps(self) -> list[ExecutionStep]:
        return [step for step in self.steps if step.tool is None]

    @property
    def unused_tools(self) -> list[ToolInvocation]:
        bound = {step.tool for step in self.steps if step.tool is not None}
        return [tool for tool in self.tools if tool not in bound]


def build_plan(
    validated: ValidatedDocument,
    strategy: BindingStrategy = BindingStrategy.AUTO,
) -> ExecutionPlan:
    """Interpret ``validated`` into an ``ExecutionPlan``.

    Parameters
    ----------
    validated:
        Output of the validator.
    strategy:
        Tool binding strategy; see the module docstring.

    Returns
    -------
    ExecutionPlan
        The plan.  A document without PLAN yields no steps.
    """
    tools = (
        tuple(ToolInvocation.from_declaration(d) for d in validated.tools.tools)
        if validated.tools is not None
        else ()
    )
    descriptions = validated.plan.steps if validated.plan is not None else ()

    return ExecutionPlan(
        task=validated.task.line,
        goals=validated.goals.goals if validated.goals is not None else (),
        constraints=(
            tuple(normalize(rule) for rule in validated.constraints.rules)
            if validated.constraints is not None
            else ()
        ),
        steps=_bind_steps(descriptions, tools, strategy),
        validation=validated.validation.conditions if validated.validation is not None else (),
        tools=tools,
        version=validated.version,
    )


# ---------------------------------------------------------------------------
# Binding
# ---------------------------------------------------------------------------


def _bind_steps(
    descriptions: tuple[str, ...],
    tools: tuple[ToolInvocation, ...],
    strategy: BindingStrategy,
) -> tuple[ExecutionStep, ...]:
    if strategy is BindingStrategy.AUTO:
        strategy = (
            BindingStrategy.POSITIONAL if len(descriptions) == len(tools) else BindingStrategy.KEYWORD
        )

    steps: list[ExecutionStep] = []
    for index, description in enumerate(descriptions):
        if strategy is BindingStrategy.POSITIONAL:
            tool = tools[index] if index < len(tools) else None
        else:
            tool = match_tool(description, tools)
        steps.append(ExecutionStep(number=index + 1, description=description, tool=tool))
    return tuple(steps)


def words(text: str) -> frozenset[str]:
    """Return the lowercase words of ``text``."""
    return frozenset(_WORD.findall(text.lower()))


def score_tool(description: str, tool: ToolInvocation) -> int:
    """Return how many words ``description`` shares with ``tool``'s name and arguments."""
    return len(words(description) & (words(tool.name) | words(tool.raw_arguments)))


def match_tool(description: str, tools: tuple[ToolInvocation, ...]) -> ToolInvocation | None:
    """Return the unique highest-scoring tool for ``description``, if any.

    A tool scoring zero never matches; a tie for the highest score
    leaves the step unbound.
    """
    best: list[ToolInvocation] = []
    best_score = 0
    for tool in tools:
        score = score_tool(description, tool)
        if score == 0 or score < best_score:
            continue
        if score > best_score:
            best, best_score = [], score
        best.append(tool)
    return best[0] if len(best) == 1 else None

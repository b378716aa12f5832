"""Typed views over the blocks of a validated APEX document.

Each view is a frozen projection of one ``Block``'s lines.  Views are
built by ``apex_spec.validator.validator``; they never hold raw blank
lines except where noted (``DiffView.payload``).
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from apex_spec.ast.nodes import ApexDocument
from apex_spec.grammar.tokens import ParseFix
from apex_spec.validator.diagnostics import Diagnostic

DEFAULT_VERSION = "1.0"


@dataclass(frozen=True)
class TaskView:
    line: str


@dataclass(frozen=True)
class GoalsView:
    goals: tuple[str, ...]


@dataclass(frozen=True)
class PlanView:
    """Ordered plan steps, one per non-blank PLAN line."""

    steps: tuple[str, ...]


@dataclass(frozen=True)
class ConstraintsView:
    """CONSTRAINTS lines as written; see ``apex_spec.semantics`` for canonical ids."""

    rules: tuple[str, ...]


@dataclass(frozen=True)
class ValidationView:
    conditions: tuple[str, ...]


@dataclass(frozen=True)
class ToolDeclaration:
    """One TOOLS line split into a tool name and opaque argument text.

    ``raw_arguments`` keeps quoting and parentheses exactly as written and
    is empty when the line holds only a name.
    """

    name: str
    raw_arguments: str
    raw: str
    line: int


@dataclass(frozen=True)
class ToolsView:
    tools: tuple[ToolDeclaration, ...]

    @property
    def names(self) -> list[str]:
        return [tool.name for tool in self.tools]


class DiffFormat(Enum):
    """Format marker on the first line of a DIFF block."""

    UNIFIED = "unified"
    RAW = "raw"


@dataclass(frozen=True)
class DiffView:
    """DIFF block: optional format marker plus verbatim payload lines."""

    format: DiffFormat | None
    payload: tuple[str, ...]


@dataclass(frozen=True)
class ContextView:
    lines: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class MetaEntry:
    """One META entry; ``line`` is the source line of the value kept."""

    key: str
    value: str
    line: int | None = None


@dataclass(frozen=True)
class MetaView:
    """META entries in order of first appearance (last duplicate wins)."""

    items: tuple[MetaEntry, ...] = ()

    @property
    def entries(self) -> Mapping[str, str]:
        """Read-only ``key -> value`` mapping."""
        return MappingProxyType({entry.key: entry.value for entry in self.items})

    @property
    def version(self) -> str | None:
        return self.get("version")

    def entry(self, key: str) -> MetaEntry | None:
        for item in self.items:
            if item.key == key:
                return item
        return None

    def get(self, key: str, default: str | None = None) -> str | None:
        item = self.entry(key)
        return item.value if item is not None else default


@dataclass(frozen=True)
class ValidatedDocument:
    """A document that passed validation, with a typed view per block kind.

    ``version`` is the effective version used for interpretation: the
    declared one, or ``"1.0"`` when META carries none or it is malformed.
    """

    doc: ApexDocument
    task: TaskView
    goals: GoalsView | None = None
    plan: PlanView | None = None
    constraints: ConstraintsView | None = None
    validation: ValidationView | None = None
    tools: ToolsView | None = None
    diff: DiffView | None = None
    context: ContextView | None = None
    meta: MetaView | None = None
    version: str = DEFAULT_VERSION
    fixes: tuple[ParseFix, ...] = ()
    warnings: tuple[Diagnostic, ...] = ()

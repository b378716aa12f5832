"""Constraint canonicalization, classification and block precedence.

Free-text CONSTRAINTS lines are mapped onto a closed vocabulary in two
steps:

1. ``normalize`` turns a raw line into a canonical identifier: strip,
   lowercase, collapse every run of characters that are not ASCII letters
   or digits into ``_``, and drop leading/trailing ``_``.  The function is
   total and idempotent.
2. ``classify`` maps a canonical identifier onto a ``Constraint``:

   ==============================================  ================
   canonical identifier                            constraint
   ==============================================  ================
   ``no_mocks``                                    ``NoMocks``
   ``real_dbs``, ``real_dbs_only``,
   ``real_databases``, ``real_databases_only``     ``RealDbsOnly``
   ``lt300loc``, ``lt_300_loc``, ``300_loc``       ``LtLoc(300)``
   ``safe_refactor``, ``safe_refactoring``         ``SafeRefactor``
   ``api_compat``, ``api_compatibility``,
   ``api_compatibility_required``                  ``ApiCompat``
   anything else                                   ``Other(id)``
   ==============================================  ================

A LOC limit above ``LOC_LIMIT_MAX`` (the 32-bit unsigned maximum) is not
a ``LtLoc`` and classifies as ``Other``.  Unknown constraints are never an
error here.

Precedence between blocks is a fixed total order::

    CONSTRAINTS > TASK > GOALS > PLAN > CONTEXT

It is exposed for callers resolving conflicts and is not applied
automatically.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING, Final, Union

from apex_spec.errors import ConstraintViolationError
from apex_spec.grammar.tokens import BlockKind

if TYPE_CHECKING:
    from apex_spec.validator.views import ValidatedDocument

LOC_LIMIT_MAX: Final[int] = 2**32 - 1
_COMPLEXITY_CEILINGS: Final[tuple[int, ...]] = (2, 5, 10, 20)

_SEPARATOR_RUN: Final[re.Pattern[str]] = re.compile(r"[^a-z0-9]+")
_LOC_LIMIT: Final[re.Pattern[str]] = re.compile(r"(?:lt_?)?([0-9]+)_?loc")

_REAL_DBS: Final[frozenset[str]] = frozenset(
    {"real_dbs", "real_dbs_only", "real_databases", "real_databases_only"}
)
_SAFE_REFACTOR: Final[frozenset[str]] = frozenset({"safe_refactor", "safe_refactoring"})
_API_COMPAT: Final[frozenset[str]] = frozenset(
    {"api_compat", "api_compatibility", "api_compatibility_required"}
)


# ---------------------------------------------------------------------------
# Canonicalization
# ---------------------------------------------------------------------------


def normalize(raw_line: str) -> str:
    """Return the canonical identifier for a constraint line.

    Example
    -------
    ::

        >>> normalize("No Mocks")
        'no_mocks'
        >>> normalize("< 300 LOC")
        '300_loc'
    """
    lowered = raw_line.strip().lower()
    return _SEPARATOR_RUN.sub("_", lowered).strip("_")


canonicalize = normalize


# ---------------------------------------------------------------------------
# Constraint vocabulary
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NoMocks:
    """No mock objects may be used."""

    @property
    def canonical(self) -> str:
        return "no_mocks"


@dataclass(frozen=True, slots=True)
class RealDbsOnly:
    """Only real databases may be used."""

    @property
    def canonical(self) -> str:
        return "real_dbs_only"


@dataclass(frozen=True, slots=True)
class LtLoc:
    """Changes must stay below ``limit`` lines of code."""

    limit: int

    @property
    def canonical(self) -> str:
        return f"lt_{self.limit}_loc"


@dataclass(frozen=True, slots=True)
class SafeRefactor:
    """Refactoring must not change behaviour."""

    @property
    def canonical(self) -> str:
        return "safe_refactor"


@dataclass(frozen=True, slots=True)
class ApiCompat:
    """The public API must stay compatible."""

    @property
    def canonical(self) -> str:
        return "api_compat"


@dataclass(frozen=True, slots=True)
class Other:
    """Any constraint outside the known vocabulary."""

    identifier: str

    @property
    def canonical(self) -> str:
        return self.identifier


Constraint = Union[NoMocks, RealDbsOnly, LtLoc, SafeRefactor, ApiCompat, Other]


def classify(canonical_id: str) -> Constraint:
    """Map a constraint identifier onto the closed ``Constraint`` vocabulary.

    The argument is normalized first, so raw text is accepted as well.
    """
    ident = normalize(canonical_id)
    if ident == "no_mocks":
        return NoMocks()
    if ident in _REAL_DBS:
        return RealDbsOnly()
    if ident in _SAFE_REFACTOR:
        return SafeRefactor()
    if ident in _API_COMPAT:
        return ApiCompat()
    match = _LOC_LIMIT.fullmatch(ident)
    if match is not None and int(match.group(1)) <= LOC_LIMIT_MAX:
        return LtLoc(limit=int(match.group(1)))
    return Other(identifier=ident)


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class Precedence(IntEnum):
    """Conflict-resolution rank of a block; higher wins."""

    CONTEXT = 1
    PLAN = 2
    GOALS = 3
    TASK = 4
    CONSTRAINTS = 5

    @classmethod
    def for_block(cls, kind: BlockKind) -> "Precedence":
        """Return the rank of ``kind``; kinds outside the order rank as CONTEXT."""
        return _BLOCK_PRECEDENCE.get(kind, cls.CONTEXT)


_BLOCK_PRECEDENCE: dict[BlockKind, Precedence] = {
    BlockKind.CONSTRAINTS: Precedence.CONSTRAINTS,
    BlockKind.TASK: Precedence.TASK,
    BlockKind.GOALS: Precedence.GOALS,
    BlockKind.PLAN: Precedence.PLAN,
    BlockKind.CONTEXT: Precedence.CONTEXT,
}


def compare_precedence(a: BlockKind | Precedence, b: BlockKind | Precedence) -> int:
    """Return ``1`` if ``a`` outranks ``b``, ``-1`` if ``b`` outranks ``a``, else ``0``."""
    rank_a = a if isinstance(a, Precedence) else Precedence.for_block(a)
    rank_b = b if isinstance(b, Precedence) else Precedence.for_block(b)
    return (rank_a > rank_b) - (rank_a < rank_b)


# ---------------------------------------------------------------------------
# Document-level summary
# ---------------------------------------------------------------------------


def grade_complexity(step_count: int) -> int:
    """Return 1-5 for a PLAN of ``step_count`` steps."""
    for grade, ceiling in enumerate(_COMPLEXITY_CEILINGS, start=1):
        if step_count <= ceiling:
            return grade
    return len(_COMPLEXITY_CEILINGS) + 1


@dataclass(frozen=True)
class Semantics:
    """Classified constraints of a validated document.

    ``complexity`` grades the PLAN length from 1 (up to 2 steps) to 5
    (more than 20 steps); a document without PLAN grades 1.
    ``requires_plan`` is set when GOALS lists more than one goal.
    """

    constraints: tuple[Constraint, ...] = ()
    complexity: int = 1
    requires_plan: bool = False

    @classmethod
    def from_validated(cls, document: "ValidatedDocument") -> "Semantics":
        rules = document.constraints.rules if document.constraints is not None else ()
        steps = len(document.plan.steps) if document.plan is not None else 0
        goals = len(document.goals.goals) if document.goals is not None else 0
        return cls(
            constraints=tuple(classify(rule) for rule in rules),
            complexity=grade_complexity(steps),
            requires_plan=goals > 1,
        )

    @property
    def forbids_mocks(self) -> bool:
        return any(isinstance(c, NoMocks) for c in self.constraints)

    @property
    def requires_real_dbs(self) -> bool:
        return any(isinstance(c, RealDbsOnly) for c in self.constraints)

    @property
    def requires_safe_refactor(self) -> bool:
        return any(isinstance(c, SafeRefactor) for c in self.constraints)

    @property
    def requires_api_compat(self) -> bool:
        return any(isinstance(c, ApiCompat) for c in self.constraints)

    @property
    def loc_limit(self) -> int | None:
        """Return the tightest LOC limit, or ``None`` if there is none."""
        limits = [c.limit for c in self.constraints if isinstance(c, LtLoc)]
        return min(limits) if limits else None

    @property
    def custom_constraints(self) -> list[str]:
        return [c.identifier for c in self.constraints if isinstance(c, Other)]

    def check_loc(self, lines_of_code: int) -> None:
        """Raise ``ConstraintViolationError`` if ``lines_of_code`` breaks the LOC limit."""
        limit = self.loc_limit
        if limit is not None and lines_of_code >= limit:
            raise ConstraintViolationError(
                LtLoc(limit).canonical,
                f"{lines_of_code} lines of code is not below the limit of {limit}",
            )

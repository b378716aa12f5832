"""APEX semantics: constraint normalization, classification and precedence."""
from __future__ import annotations

from apex_spec.semantics.constraints import (
    LOC_LIMIT_MAX,
    ApiCompat,
    Constraint,
    LtLoc,
    NoMocks,
    Other,
    Precedence,
    RealDbsOnly,
    SafeRefactor,
    Semantics,
    canonicalize,
    classify,
    compare_precedence,
    grade_complexity,
    normalize,
)

__all__ = [
    "normalize",
    "canonicalize",
    "classify",
    "Constraint",
    "NoMocks",
    "RealDbsOnly",
    "LtLoc",
    "SafeRefactor",
    "ApiCompat",
    "Other",
    "Precedence",
    "compare_precedence",
    "Semantics",
    "grade_complexity",
    "LOC_LIMIT_MAX",
]

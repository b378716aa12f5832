"""Error types shared by every stage of the APEX pipeline.

Each failure kind is a subclass of ``ApexError`` and carries the
``ApexErrorKind`` it represents, a human-readable message and, when it is
known, the 1-based source line.  Callers can catch ``ApexError`` to handle
every pipeline failure, or a specific subclass to handle one kind.

Kinds marked *reserved* are never raised by the parse/validate/interpret
pipeline itself:

    INVALID_TOOL_NAME     raised by ``ToolRegistry.check_plan``
    CONSTRAINT_VIOLATION  raised by ``Semantics.check_loc``
    VALIDATION_FAILURE    for post-execution checks performed by callers
"""
from __future__ import annotations

from enum import Enum


class ApexErrorKind(Enum):
    """Closed taxonomy of pipeline failures."""

    LEX_ERROR = "LexError"
    PARSE_ERROR = "ParseError"
    UNKNOWN_BLOCK = "UnknownBlock"
    MISSING_TASK = "MissingTask"
    MULTIPLE_TASKS = "MultipleTasks"
    EMPTY_REQUIRED_BLOCK = "EmptyRequiredBlock"
    INVALID_VERSION = "InvalidVersion"
    INVALID_TOOL_NAME = "InvalidToolName"
    CONSTRAINT_VIOLATION = "ConstraintViolation"
    VALIDATION_FAILURE = "ValidationFailure"
    INTERNAL_ERROR = "InternalError"


class ApexError(Exception):
    """Base class for all APEX pipeline errors.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    line:
        1-based line number where the problem was detected, if known.
    """

    kind: ApexErrorKind = ApexErrorKind.INTERNAL_ERROR

    def __init__(self, message: str, line: int | None = None) -> None:
        self.message = message
        self.line = line
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"[{self.kind.value}] {self.message}"
        if self.line is not None:
            text += f" (line {self.line})"
        return text


class LexError(ApexError):
    """A header line deviates from the grammar in strict mode."""

    kind = ApexErrorKind.LEX_ERROR


class ParseError(ApexError):
    """The token stream or a block body cannot be given a clean structure."""

    kind = ApexErrorKind.PARSE_ERROR


class UnknownBlockError(ApexError):
    """A header names no known block kind (strict mode only)."""

    kind = ApexErrorKind.UNKNOWN_BLOCK

    def __init__(self, name: str, line: int | None = None) -> None:
        self.block_name = name
        super().__init__(f"Unknown block identifier: {name}", line)


class MissingTaskError(ApexError):
    kind = ApexErrorKind.MISSING_TASK

    def __init__(self) -> None:
        super().__init__("APEX document must contain exactly one TASK block")


class MultipleTasksError(ApexError):
    kind = ApexErrorKind.MULTIPLE_TASKS

    def __init__(self, line: int) -> None:
        super().__init__("APEX document contains multiple TASK blocks", line)


class EmptyRequiredBlockError(ApexError):
    """A block other than CONTEXT or META has no non-blank lines."""

    kind = ApexErrorKind.EMPTY_REQUIRED_BLOCK

    def __init__(self, block_name: str, line: int | None = None) -> None:
        self.block_name = block_name
        super().__init__(f"{block_name} block cannot be empty", line)


class InvalidVersionError(ApexError):
    kind = ApexErrorKind.INVALID_VERSION

    def __init__(self, version: str, reason: str, line: int | None = None) -> None:
        self.version = version
        super().__init__(f"Invalid APEX version {version!r}: {reason}", line)


class InvalidToolNameError(ApexError):
    kind = ApexErrorKind.INVALID_TOOL_NAME

    def __init__(self, name: str, line: int | None = None) -> None:
        self.tool_name = name
        super().__init__(f"Unknown tool {name!r} not in registry", line)


class ConstraintViolationError(ApexError):
    kind = ApexErrorKind.CONSTRAINT_VIOLATION

    def __init__(self, constraint: str, reason: str) -> None:
        self.constraint = constraint
        super().__init__(f"Constraint {constraint!r} violated: {reason}")


class ValidationFailureError(ApexError):
    kind = ApexErrorKind.VALIDATION_FAILURE

    def __init__(self, condition: str) -> None:
        self.condition = condition
        super().__init__(f"Validation failed: {condition}")


class InternalError(ApexError):
    """An internal invariant was broken; indicates a bug."""

    kind = ApexErrorKind.INTERNAL_ERROR

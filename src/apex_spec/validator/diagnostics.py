"""Diagnostic types for the APEX validator.

A ``Diagnostic`` is a non-fatal finding attached to a source line.  Fatal
problems are raised as ``ApexError`` subclasses instead; diagnostics
record what the validator accepted but wants the caller to know about.

Codes:

    APX101  Unknown minor version within a supported major version
    APX102  Unsupported major version accepted in tolerant mode
    APX103  Malformed version accepted in tolerant mode
    APX201  Duplicate META key (last value wins)
    APX301  Repeated optional block (first occurrence is used)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostics, aligned with LSP conventions."""

    ERROR = auto()
    WARNING = auto()
    INFORMATION = auto()
    HINT = auto()


@dataclass(frozen=True)
class Diagnostic:
    """A single validation finding.

    Parameters
    ----------
    severity:
        How serious this finding is.
    code:
        A short machine-readable identifier, e.g. ``"APX101"``.
    message:
        Human-readable description of the problem.
    line:
        1-based source line, or ``None`` when no single line applies.
    suggestion:
        Optional human-readable fix suggestion.
    """

    severity: DiagnosticSeverity
    code: str
    message: str
    line: int | None = None
    suggestion: str | None = field(default=None)

    def __str__(self) -> str:
        loc = f" at line {self.line}" if self.line is not None else ""
        prefix = f"[{self.code}] {self.severity.name}"
        suggestion_part = f" (hint: {self.suggestion})" if self.suggestion else ""
        return f"{prefix}{loc}: {self.message}{suggestion_part}"

    @property
    def is_error(self) -> bool:
        return self.severity == DiagnosticSeverity.ERROR


def warning(code: str, message: str, line: int | None = None, suggestion: str | None = None) -> Diagnostic:
    return Diagnostic(
        severity=DiagnosticSeverity.WARNING,
        code=code,
        message=message,
        line=line,
        suggestion=suggestion,
    )

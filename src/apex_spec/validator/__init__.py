"""APEX Validator module.

Exports the ``Validator`` class, the ``validate`` convenience function,
the typed views and the ``Diagnostic`` types.
"""
from __future__ import annotations

from apex_spec.validator.diagnostics import Diagnostic, DiagnosticSeverity
from apex_spec.validator.validator import SUPPORTED_VERSIONS, Validator, validate
from apex_spec.validator.views import (
    DEFAULT_VERSION,
    ConstraintsView,
    ContextView,
    DiffFormat,
    DiffView,
    GoalsView,
    MetaEntry,
    MetaView,
    PlanView,
    TaskView,
    ToolDeclaration,
    ToolsView,
    ValidatedDocument,
    ValidationView,
)

__all__ = [
    "Validator",
    "validate",
    "SUPPORTED_VERSIONS",
    "DEFAULT_VERSION",
    "Diagnostic",
    "DiagnosticSeverity",
    "ValidatedDocument",
    "TaskView",
    "GoalsView",
    "PlanView",
    "ConstraintsView",
    "ValidationView",
    "ToolDeclaration",
    "ToolsView",
    "DiffFormat",
    "DiffView",
    "ContextView",
    "MetaEntry",
    "MetaView",
]

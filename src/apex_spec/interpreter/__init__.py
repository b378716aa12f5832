"""APEX Interpreter module.

Exports ``build_plan``, the execution-plan types and the in-memory
execution-state model.
"""
from __future__ import annotations

from apex_spec.interpreter.plan import (
    BindingStrategy,
    ExecutionPlan,
    ExecutionStep,
    ToolInvocation,
    build_plan,
    match_tool,
    score_tool,
)
from apex_spec.interpreter.state import ExecutionState, StepStatus

__all__ = [
    "build_plan",
    "match_tool",
    "score_tool",
    "BindingStrategy",
    "ExecutionPlan",
    "ExecutionStep",
    "ToolInvocation",
    "ExecutionState",
    "StepStatus",
]

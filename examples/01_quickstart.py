#!/usr/bin/env python3
"""Example: Quickstart - apex-spec

Minimal working example: parse an APEX document, validate it,
build its execution plan and check the plan's tools.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install apex-spec
"""
from __future__ import annotations

import apex_spec
from apex_spec.registry import ToolRegistry
from apex_spec.semantics import Semantics

APEX_SOURCE = """\
TASK
Fix the search ranking regression

GOALS
improve recall on long queries

PLAN
search for the ranking function
edit the scoring weights
run the relevance tests

CONSTRAINTS
No Mocks
< 200 LOC

TOOLS
code_search "rank_results"
code_edit(path=search/rank.py)
bash pytest tests/relevance

META
version=1.0
"""


def main() -> None:
    print(f"apex-spec version: {apex_spec.__version__}")

    # Step 1: Parse and validate
    validated = apex_spec.parse_and_validate(APEX_SOURCE)
    print(f"Task: {validated.task.line!r} (version {validated.version})")

    # Step 2: Build the execution plan
    plan = apex_spec.build_plan(validated)
    for step in plan.steps:
        tool = step.tool if step.tool is not None else "(unbound)"
        print(f"  {step.number}. {step.description:<35} -> {tool}")

    # Step 3: Inspect constraints
    semantics = Semantics.from_validated(validated)
    print(f"Constraints: {', '.join(plan.constraints)}")
    print(f"  forbids mocks: {semantics.forbids_mocks}, LOC limit: {semantics.loc_limit}")

    # Step 4: Check tools against the default registry
    unknown = ToolRegistry().unknown_tools(plan)
    print(f"Unknown tools: {unknown or 'none'}")


if __name__ == "__main__":
    main()

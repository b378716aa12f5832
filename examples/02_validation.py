#!/usr/bin/env python3
"""Example: Strict and tolerant parsing - apex-spec

Shows how strict mode rejects a sloppy document and how tolerant mode
repairs it, reporting every repair and warning.

Usage:
    python examples/02_validation.py

Requirements:
    pip install apex-spec
"""
from __future__ import annotations

import apex_spec
from apex_spec import ParseMode

SLOPPY_SOURCE = """\
pasted from the ticket

NOTES
ask the data team first

Task
Speed up the CSV importer

plan
profile the importer
rewrite the parsing loop

META
version=1.4
owner=data
owner=platform
"""


def main() -> None:
    try:
        apex_spec.parse_and_validate(SLOPPY_SOURCE)
    except apex_spec.ApexError as error:
        print(f"Strict mode: {error}")

    validated = apex_spec.parse_and_validate(SLOPPY_SOURCE, ParseMode.TOLERANT)
    print(f"\nTolerant mode: task {validated.task.line!r}")
    print(f"Fixes ({len(validated.fixes)}):")
    for fix in validated.fixes:
        print(f"  {fix}")
    print(f"Warnings ({len(validated.warnings)}):")
    for diagnostic in validated.warnings:
        print(f"  {diagnostic}")

    print("\nCanonical form:")
    print(apex_spec.format(validated.doc), end="")


if __name__ == "__main__":
    main()

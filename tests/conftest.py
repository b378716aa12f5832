"""Shared test fixtures for apex-spec.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.
"""
from __future__ import annotations

from pathlib import Path

import pytest

QUICKSTART_SOURCE = (
    "TASK\n"
    "fix search\n"
    "\n"
    "GOALS\n"
    "improve recall\n"
    "\n"
    "PLAN\n"
    "scan\n"
    "patch\n"
    "\n"
    "CONSTRAINTS\n"
    "no_mocks\n"
    "\n"
    "TOOLS\n"
    'code_search "x"\n'
    'patch_file "y"\n'
)

FULL_SOURCE = (
    "TASK\n"
    "Refactor the session cache\n"
    "\n"
    "GOALS\n"
    "lower p99 latency\n"
    "keep hit rate above 90%\n"
    "\n"
    "PLAN\n"
    "search for cache usages\n"
    "edit the eviction policy\n"
    "run the benchmark suite\n"
    "\n"
    "CONSTRAINTS\n"
    "No Mocks\n"
    "< 300 LOC\n"
    "API compatibility\n"
    "\n"
    "VALIDATION\n"
    "benchmarks pass\n"
    "\n"
    "TOOLS\n"
    'code_search "SessionCache"\n'
    "code_edit(path=cache.py)\n"
    "bash pytest benchmarks/\n"
    "\n"
    "DIFF\n"
    "unified\n"
    "--- a/cache.py\n"
    "+++ b/cache.py\n"
    "\n"
    "CONTEXT\n"
    "The cache lives in cache.py.\n"
    "\n"
    "META\n"
    "version=1.1\n"
    "owner=platform\n"
)


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "apex_spec"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def quickstart_source() -> str:
    """The minimal five-block document used throughout the docs."""
    return QUICKSTART_SOURCE


@pytest.fixture()
def full_source() -> str:
    """A document using all nine block kinds."""
    return FULL_SOURCE


@pytest.fixture()
def write_doc(tmp_path: Path):
    """Return a helper that writes text to a file under ``tmp_path``."""

    def _write(text: str, name: str = "task.apex") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write

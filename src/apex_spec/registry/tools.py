"""Tool-name registry for APEX execution plans.

The interpreter binds tools syntactically and never checks whether a name
refers to a tool the runtime can actually call.  ``ToolRegistry`` is the
boundary where a caller makes that check:

::

    registry = ToolRegistry.from_yaml("tools.yaml")
    registry.check_plan(plan)          # raises InvalidToolNameError

Any name beginning with ``mcp__`` (an MCP server tool) is accepted
regardless of registration.

Registry files are YAML mappings::

    tools:
      - patch_file
      - run_tests
    allow_unknown: false
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Final

import yaml

from apex_spec.errors import InvalidToolNameError
from apex_spec.interpreter.plan import ExecutionPlan

logger = logging.getLogger(__name__)

MCP_PREFIX: Final[str] = "mcp__"

DEFAULT_TOOLS: Final[frozenset[str]] = frozenset(
    {
        # code
        "code_search",
        "code_edit",
        "code_read",
        "code_write",
        # vector store
        "vector_search",
        "vector_store",
        "vector_delete",
        # graph store
        "graph_query",
        "graph_store",
        "graph_delete",
        # memory
        "memory.query",
        "memory.store",
        "memory.delete",
        "memory.consolidate",
        # shell
        "unix_action",
        "bash",
        "shell",
        # files
        "read_file",
        "write_file",
        "edit_file",
        "glob",
        "grep",
        # web
        "web_fetch",
        "web_search",
        "mcp_tool",
    }
)


class ToolRegistry:
    """A set of tool names a runtime is able to invoke.

    Parameters
    ----------
    tools:
        Names to register.  Defaults to ``DEFAULT_TOOLS``.
    allow_unknown:
        When ``True`` every name is considered valid; ``unknown_tools``
        always returns an empty list.
    """

    def __init__(
        self,
        tools: Iterable[str] | None = None,
        allow_unknown: bool = False,
    ) -> None:
        self._tools: set[str] = set(DEFAULT_TOOLS if tools is None else tools)
        self._allow_unknown = allow_unknown

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls) -> "ToolRegistry":
        """Return a registry that only accepts ``mcp__`` names."""
        return cls(tools=())

    @classmethod
    def permissive(cls) -> "ToolRegistry":
        """Return a registry that accepts every name."""
        return cls(allow_unknown=True)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "ToolRegistry":
        """Load a registry file, adding its ``tools`` to the defaults.

        Parameters
        ----------
        path:
            Path to a YAML mapping with an optional ``tools`` list and an
            optional ``allow_unknown`` flag.

        Returns
        -------
        ToolRegistry
            The default tools plus those listed in the file.

        Raises
        ------
        ValueError
            If the file is not valid YAML, is not a mapping, or has a
            ``tools`` entry that is not a list of strings or an
            ``allow_unknown`` entry that is not a boolean.
        OSError
            If the file cannot be read.
        """
        path = Path(path)
        try:
            data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ValueError(f"Tool registry {path} is not valid YAML: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Tool registry {path} must be a YAML mapping")

        names = data.get("tools", [])
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise ValueError(f"Tool registry {path}: 'tools' must be a list of strings")
        allow_unknown = data.get("allow_unknown", False)
        if not isinstance(allow_unknown, bool):
            raise ValueError(f"Tool registry {path}: 'allow_unknown' must be true or false")

        registry = cls(allow_unknown=allow_unknown)
        registry.add_tools(names)
        logger.debug("Loaded %d tool name(s) from %s", len(names), path)
        return registry

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add_tool(self, name: str) -> None:
        if name in self._tools:
            logger.debug("Tool %r already registered; skipping.", name)
            return
        self._tools.add(name)
        logger.debug("Registered tool %r", name)

    def add_tools(self, names: Iterable[str]) -> None:
        for name in names:
            self.add_tool(name)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def allow_unknown(self) -> bool:
        return self._allow_unknown

    def is_valid(self, name: str) -> bool:
        """Return ``True`` if ``name`` may be invoked."""
        return self._allow_unknown or name.startswith(MCP_PREFIX) or name in self._tools

    def list_tools(self) -> list[str]:
        """Return registered names in alphabetical order."""
        return sorted(self._tools)

    def unknown_tools(self, plan: ExecutionPlan) -> list[str]:
        """Return the plan's unregistered tool names, in TOOLS order, without repeats."""
        unknown: list[str] = []
        for tool in plan.tools:
            if not self.is_valid(tool.name) and tool.name not in unknown:
                unknown.append(tool.name)
        return unknown

    def check_plan(self, plan: ExecutionPlan) -> None:
        """Raise for the first unregistered tool in ``plan``.

        Raises
        ------
        InvalidToolNameError
            If any TOOLS entry names an unregistered tool.
        """
        unknown = self.unknown_tools(plan)
        if unknown:
            raise InvalidToolNameError(unknown[0])

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_valid(name)

    def __len__(self) -> int:
        return len(self._tools)

    def __repr__(self) -> str:
        return f"ToolRegistry(tools={len(self._tools)}, allow_unknown={self._allow_unknown})"

"""APEX tool registry.

Exports ``ToolRegistry`` and the built-in tool names.
"""
from __future__ import annotations

from apex_spec.registry.tools import DEFAULT_TOOLS, MCP_PREFIX, ToolRegistry

__all__ = ["ToolRegistry", "DEFAULT_TOOLS", "MCP_PREFIX"]

"""APEX AST module.

Exports the AST node types and the serializer for converting documents
to and from JSON/YAML.
"""
from __future__ import annotations

from apex_spec.ast.nodes import ApexDocument, Block, Span
from apex_spec.ast.serializer import AstSerializer

__all__ = [
    "Span",
    "Block",
    "ApexDocument",
    "AstSerializer",
]

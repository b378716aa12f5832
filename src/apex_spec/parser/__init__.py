"""APEX Parser module.

Exports the ``Parser`` block assembler, the ``parse`` and ``assemble``
convenience functions, and ``ParseResult``.
"""
from __future__ import annotations

from apex_spec.errors import ParseError, UnknownBlockError
from apex_spec.parser.parser import ParseResult, Parser, assemble, parse

__all__ = [
    "Parser",
    "ParseResult",
    "parse",
    "assemble",
    "ParseError",
    "UnknownBlockError",
]

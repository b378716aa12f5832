"""APEX Lexer module.

Exports the ``Lexer`` class and the ``tokenize`` convenience function.
"""
from __future__ import annotations

from apex_spec.errors import LexError
from apex_spec.lexer.lexer import Lexer, LexResult, tokenize

__all__ = ["Lexer", "LexResult", "tokenize", "LexError"]

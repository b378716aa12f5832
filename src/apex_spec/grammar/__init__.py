"""APEX grammar vocabulary: block kinds, parse modes and token types."""
from __future__ import annotations

from apex_spec.grammar.tokens import (
    BlankToken,
    BlockKind,
    ContentToken,
    HeaderToken,
    ParseFix,
    ParseMode,
    Token,
)

__all__ = [
    "BlockKind",
    "ParseMode",
    "ParseFix",
    "Token",
    "HeaderToken",
    "ContentToken",
    "BlankToken",
]

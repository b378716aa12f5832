"""APEX Lexer: converts raw document text into a flat list of line tokens.

The lexer is a single pass over the lines of the input.  Each line
becomes exactly one token:

- ``HeaderToken`` for a block identifier alone on its line
- ``BlankToken`` for a line with nothing but whitespace
- ``ContentToken`` for everything else

Header recognition
------------------
A header starts in column 1.  After removing one trailing run of
whitespace its text must equal one of the nine block identifiers.  An
exact uppercase match is a header in both modes; tolerant mode records a
``ParseFix`` when trailing whitespace had to be removed.  A match in the
wrong case is a ``LexError`` in strict mode; in tolerant mode the header
is accepted and a ``ParseFix`` describing the normalization is recorded.

Before the first known header no line can be block content, so an
uppercase identifier there (such as ``NOTES`` at the top of the document
or right after a blank line) is emitted as ``HeaderToken(kind=None)``.
The lexer never rejects it; the parser decides what to do.  Once a known
header has been seen, every non-header line is content, uppercase or not.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Final

from apex_spec.errors import LexError
from apex_spec.grammar.tokens import (
    BlankToken,
    BlockKind,
    ContentToken,
    HeaderToken,
    ParseFix,
    ParseMode,
    Token,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_UNKNOWN_HEADER: Final[re.Pattern[str]] = re.compile(r"[A-Z_]{3,}")
_TRAILING_WS: Final[re.Pattern[str]] = re.compile(r"\s+$")


@dataclass(frozen=True)
class LexResult:
    """Tokens produced by the lexer plus any tolerant-mode fixes."""

    tokens: tuple[Token, ...]
    fixes: tuple[ParseFix, ...] = field(default=())


class Lexer:
    """Line-oriented APEX lexer.

    Parameters
    ----------
    source:
        The complete APEX document text.
    mode:
        ``ParseMode.STRICT`` (default) or ``ParseMode.TOLERANT``.
    """

    __slots__ = ("_lines", "_mode", "_fixes")

    def __init__(self, source: str, mode: ParseMode = ParseMode.STRICT) -> None:
        self._lines: list[str] = _split_lines(source)
        self._mode: ParseMode = mode
        self._fixes: list[ParseFix] = []

    @property
    def mode(self) -> ParseMode:
        return self._mode

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def tokenize(self) -> LexResult:
        """Scan every line and return the token list with recorded fixes.

        Returns
        -------
        LexResult
            One token per source line, in line order.

        Raises
        ------
        LexError
            In strict mode, on a header in the wrong case.
        """
        self._fixes = []
        tokens: list[Token] = []
        previous_blank = True
        in_block = False
        for index, line in enumerate(self._lines):
            token = self._scan_line(line, index + 1, previous_blank and not in_block)
            if isinstance(token, HeaderToken) and token.kind is not None:
                in_block = True
            previous_blank = isinstance(token, BlankToken)
            tokens.append(token)
        return LexResult(tokens=tuple(tokens), fixes=tuple(self._fixes))

    # ------------------------------------------------------------------
    # Internal scanner
    # ------------------------------------------------------------------

    def _scan_line(self, line: str, line_no: int, may_be_unknown: bool) -> Token:
        if not line.strip():
            return BlankToken(line=line_no, text=line)

        header = self._scan_header(line, line_no)
        if header is not None:
            return header

        candidate = _TRAILING_WS.sub("", line)
        if may_be_unknown and _UNKNOWN_HEADER.fullmatch(candidate):
            return HeaderToken(kind=None, raw_text=line, line=line_no)

        return ContentToken(text=line, line=line_no)

    def _scan_header(self, line: str, line_no: int) -> HeaderToken | None:
        """Return a header token for ``line`` or ``None`` if it is not one."""
        if line[0].isspace():
            return None
        candidate = _TRAILING_WS.sub("", line)
        kind = BlockKind.lookup(candidate)
        if kind is None:
            return None
        if line == kind.value:
            return HeaderToken(kind=kind, raw_text=line, line=line_no)

        if self._mode is ParseMode.STRICT:
            if candidate == kind.value:
                return HeaderToken(kind=kind, raw_text=line, line=line_no)
            raise LexError(
                f"Malformed header {line!r}: headers must be the exact "
                f"uppercase identifier {kind.value!r}",
                line_no,
            )

        self._record_fix(line_no, _describe_normalization(line, candidate, kind))
        return HeaderToken(kind=kind, raw_text=line, line=line_no)

    def _record_fix(self, line_no: int, description: str) -> None:
        logger.debug("line %d: %s", line_no, description)
        self._fixes.append(ParseFix(line=line_no, description=description))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _split_lines(source: str) -> list[str]:
    """Split on ``\\n`` and drop a trailing ``\\r`` from each line.

    A terminating newline does not produce an extra empty line.
    """
    if not source:
        return []
    lines = source.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _describe_normalization(line: str, candidate: str, kind: BlockKind) -> str:
    changes: list[str] = []
    if candidate != kind.value:
        changes.append("case")
    if candidate != line:
        changes.append("trailing whitespace")
    return f"Normalized header {candidate!r} to {kind.value!r} ({' and '.join(changes)})"


# ---------------------------------------------------------------------------
# Module-level convenience function
# ---------------------------------------------------------------------------


def tokenize(source: str, mode: ParseMode = ParseMode.STRICT) -> LexResult:
    """Tokenize an APEX document.

    Parameters
    ----------
    source:
        APEX document text.
    mode:
        Parsing mode.

    Returns
    -------
    LexResult
        All line tokens and the fixes recorded in tolerant mode.

    Raises
    ------
    LexError
        If a header is in the wrong case in strict mode.

    Example
    -------
    ::

        from apex_spec.lexer import tokenize
        result = tokenize("TASK\\nfix search\\n")
    """
    return Lexer(source, mode).tokenize()

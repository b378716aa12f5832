"""Token definitions for APEX documents.

APEX is line-oriented: every source line becomes exactly one token.  A
line is either a block header, a content line, or a blank line.  The
nine block identifiers form the closed ``BlockKind`` enumeration.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Union


class BlockKind(Enum):
    """The nine block identifiers an APEX document may contain."""

    TASK = "TASK"
    GOALS = "GOALS"
    PLAN = "PLAN"
    CONSTRAINTS = "CONSTRAINTS"
    VALIDATION = "VALIDATION"
    TOOLS = "TOOLS"
    DIFF = "DIFF"
    CONTEXT = "CONTEXT"
    META = "META"

    @classmethod
    def lookup(cls, text: str) -> "BlockKind | None":
        """Return the kind whose identifier equals ``text`` ignoring case."""
        return _BY_NAME.get(text.upper())

    @property
    def allows_empty(self) -> bool:
        """Return True for the kinds that may appear without content."""
        return self in (BlockKind.CONTEXT, BlockKind.META)

    def __str__(self) -> str:
        return self.value


_BY_NAME: dict[str, BlockKind] = {kind.value: kind for kind in BlockKind}


class ParseMode(Enum):
    """Parsing mode, held constant through all pipeline stages.

    STRICT
        Headers must be exact uppercase identifiers; any deviation is an
        error.
    TOLERANT
        Header case and trailing whitespace, unknown headers, stray leading
        content and malformed META lines are repaired, and every repair is
        recorded as a ``ParseFix``.
    """

    STRICT = auto()
    TOLERANT = auto()


@dataclass(frozen=True, slots=True)
class ParseFix:
    """A single recovery action performed in tolerant mode."""

    line: int
    description: str

    def __str__(self) -> str:
        return f"line {self.line}: {self.description}"


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class HeaderToken:
    """A block header line.

    ``kind`` is ``None`` for an unknown header: an uppercase header-like
    line before the first known header that names no block kind.
    ``raw_text`` is the line as written.
    """

    kind: BlockKind | None
    raw_text: str
    line: int


@dataclass(frozen=True, slots=True)
class ContentToken:
    """A non-blank line that is not a header."""

    text: str
    line: int


@dataclass(frozen=True, slots=True)
class BlankToken:
    """A line containing nothing but whitespace."""

    line: int
    text: str = ""


Token = Union[HeaderToken, ContentToken, BlankToken]

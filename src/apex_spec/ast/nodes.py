"""AST node definitions for APEX documents.

The AST is deliberately flat: an ``ApexDocument`` is an ordered tuple of
``Block`` nodes, each holding the raw lines written under its header.
Nodes are frozen dataclasses so a parsed document is immutable and
hashable.  Typed, per-kind interpretations of the lines live in
``apex_spec.validator.views``.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from apex_spec.grammar.tokens import BlockKind


# ---------------------------------------------------------------------------
# Source location
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Span:
    """Inclusive 1-based line range ``[start_line, end_line]``.

    Parameters
    ----------
    start_line:
        Line of the block header.
    end_line:
        Last content line of the block, or the header line when the block
        has no lines.
    """

    start_line: int
    end_line: int

    def __repr__(self) -> str:
        return f"Span({self.start_line}-{self.end_line})"

    @classmethod
    def line(cls, line_no: int) -> "Span":
        """Return a span covering a single line."""
        return cls(start_line=line_no, end_line=line_no)

    def merge(self, other: "Span") -> "Span":
        """Return a span that covers both ``self`` and ``other``."""
        return Span(
            start_line=min(self.start_line, other.start_line),
            end_line=max(self.end_line, other.end_line),
        )


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Block:
    """One header-delimited section of an APEX document.

    ``lines`` holds every line after the header up to the next header,
    blank lines included, exactly as written.
    """

    kind: BlockKind
    lines: tuple[str, ...]
    span: Span

    def content_lines(self) -> list[str]:
        """Return the non-blank lines, stripped of surrounding whitespace."""
        return [line.strip() for line in self.lines if line.strip()]

    @property
    def is_empty(self) -> bool:
        """Return True if the block has no non-blank lines."""
        return not any(line.strip() for line in self.lines)

    def content(self) -> str:
        """Return the non-blank lines joined with newlines."""
        return "\n".join(self.content_lines())


@dataclass(frozen=True, slots=True)
class ApexDocument:
    """Root node: the ordered blocks of a parsed document."""

    blocks: tuple[Block, ...] = field(default=())

    def get_block(self, kind: BlockKind) -> Block | None:
        """Return the first block of ``kind``, if any."""
        for block in self.blocks:
            if block.kind is kind:
                return block
        return None

    def get_blocks(self, kind: BlockKind) -> list[Block]:
        """Return every block of ``kind`` in document order."""
        return [block for block in self.blocks if block.kind is kind]

    def count_blocks(self, kind: BlockKind) -> int:
        return sum(1 for block in self.blocks if block.kind is kind)

    @property
    def kinds(self) -> list[BlockKind]:
        return [block.kind for block in self.blocks]

    def task(self) -> Block | None:
        return self.get_block(BlockKind.TASK)

    def plan(self) -> Block | None:
        return self.get_block(BlockKind.PLAN)

    def tools(self) -> Block | None:
        return self.get_block(BlockKind.TOOLS)

"""APEX Block Assembler.

Groups the flat token list produced by the lexer into an ordered tuple
of ``Block`` nodes.  The assembler is purely structural: it does not
check TASK uniqueness or block emptiness (that is the validator's job)
and it is total over every token stream the lexer can produce.

Recovery
--------
Two situations depend on the parse mode:

- An unknown header (``HeaderToken`` with ``kind=None``) raises
  ``UnknownBlockError`` in strict mode.  In tolerant mode the header and
  every line under it are dropped and a ``ParseFix`` is recorded.
- Non-blank content before the first header raises ``ParseError`` in
  strict mode.  In tolerant mode it is dropped and a ``ParseFix`` is
  recorded.  Leading blank lines are always skipped.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from apex_spec.ast.nodes import ApexDocument, Block, Span
from apex_spec.errors import ParseError, UnknownBlockError
from apex_spec.grammar.tokens import (
    BlankToken,
    BlockKind,
    ContentToken,
    HeaderToken,
    ParseFix,
    ParseMode,
    Token,
)
from apex_spec.lexer.lexer import tokenize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseResult:
    """A parsed document together with every fix recorded while parsing."""

    document: ApexDocument
    fixes: tuple[ParseFix, ...] = field(default=())


@dataclass
class _OpenBlock:
    """A block whose lines are still being collected."""

    kind: BlockKind | None
    header: HeaderToken
    lines: list[str] = field(default_factory=list)
    end_line: int = 0


class Parser:
    """Assembles line tokens into an ``ApexDocument``.

    Parameters
    ----------
    tokens:
        Tokens in line order, as produced by the lexer.
    mode:
        ``ParseMode.STRICT`` (default) or ``ParseMode.TOLERANT``.
    """

    def __init__(self, tokens: Iterable[Token], mode: ParseMode = ParseMode.STRICT) -> None:
        self._tokens: tuple[Token, ...] = tuple(tokens)
        self._mode: ParseMode = mode
        self._fixes: list[ParseFix] = []

    def parse(self) -> ParseResult:
        """Assemble the blocks.

        Returns
        -------
        ParseResult
            The document and the fixes recorded by this stage.

        Raises
        ------
        UnknownBlockError
            In strict mode, on an unknown header.
        ParseError
            In strict mode, on content before the first header; in any mode,
            on an object that is not a token.
        """
        self._fixes = []
        blocks: list[Block] = []
        current: _OpenBlock | None = None
        stray: list[ContentToken] = []

        for token in self._tokens:
            if isinstance(token, HeaderToken):
                if current is None:
                    self._handle_leading_content(stray)
                else:
                    self._close(current, blocks)
                current = self._open(token)
            elif isinstance(token, (ContentToken, BlankToken)):
                if current is None:
                    if isinstance(token, ContentToken):
                        stray.append(token)
                    continue
                current.lines.append(token.text)
                current.end_line = token.line
            else:
                raise ParseError(f"Unexpected token {token!r}")

        if current is None:
            self._handle_leading_content(stray)
        else:
            self._close(current, blocks)

        return ParseResult(document=ApexDocument(blocks=tuple(blocks)), fixes=tuple(self._fixes))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _open(self, header: HeaderToken) -> _OpenBlock:
        if header.kind is None:
            name = header.raw_text.strip()
            if self._mode is ParseMode.STRICT:
                raise UnknownBlockError(name, header.line)
        return _OpenBlock(kind=header.kind, header=header, end_line=header.line)

    def _close(self, block: _OpenBlock, blocks: list[Block]) -> None:
        if block.kind is None:
            dropped = sum(1 for line in block.lines if line.strip())
            self._record_fix(
                block.header.line,
                f"Ignored unknown block {block.header.raw_text.strip()!r} "
                f"({dropped} content line(s) dropped)",
            )
            return
        blocks.append(
            Block(
                kind=block.kind,
                lines=tuple(block.lines),
                span=Span(start_line=block.header.line, end_line=block.end_line),
            )
        )

    def _handle_leading_content(self, stray: list[ContentToken]) -> None:
        if not stray:
            return
        first = stray[0]
        if self._mode is ParseMode.STRICT:
            raise ParseError(
                f"Content before the first block header: {first.text.strip()!r}",
                first.line,
            )
        self._record_fix(
            first.line,
            f"Discarded {len(stray)} line(s) of content before the first block header",
        )
        stray.clear()

    def _record_fix(self, line_no: int, description: str) -> None:
        logger.debug("line %d: %s", line_no, description)
        self._fixes.append(ParseFix(line=line_no, description=description))


# ---------------------------------------------------------------------------
# Module-level convenience functions
# ---------------------------------------------------------------------------


def assemble(tokens: Iterable[Token], mode: ParseMode = ParseMode.STRICT) -> ParseResult:
    """Assemble an already tokenized stream into an ``ApexDocument``."""
    return Parser(tokens, mode).parse()


def parse(source: str, mode: ParseMode = ParseMode.STRICT) -> ParseResult:
    """Tokenize and assemble an APEX document.

    Parameters
    ----------
    source:
        Complete APEX document text.
    mode:
        Parsing mode, used by both the lexer and the assembler.

    Returns
    -------
    ParseResult
        The document and every fix recorded, lexer fixes first.

    Raises
    ------
    LexError
        On a malformed header in strict mode.
    UnknownBlockError
        On an unknown header in strict mode.
    ParseError
        On content before the first header in strict mode.
    """
    lexed = tokenize(source, mode)
    assembled = assemble(lexed.tokens, mode)
    return ParseResult(document=assembled.document, fixes=lexed.fixes + assembled.fixes)

"""APEX formatter: AST -> APEX source text.

The ``DocumentFormatter`` renders an ``ApexDocument`` in one of two ways:

verbatim
    Each header followed by its lines exactly as stored.  Re-parsing the
    output yields blocks with the same kinds and lines.
canonical (default)
    - headers in uppercase
    - trailing whitespace removed from every line outside DIFF
    - trailing blank lines inside a block dropped
    - exactly one blank line between blocks

Text before the first header and blocks dropped in tolerant mode are not
part of the AST, so the formatter cannot reproduce them.

Usage
-----
::

    from apex_spec.formatter import DocumentFormatter
    from apex_spec.parser import parse

    result = parse(source, ParseMode.TOLERANT)
    canonical = DocumentFormatter().format(result.document)
"""
from __future__ import annotations

from apex_spec.ast.nodes import ApexDocument, Block
from apex_spec.grammar.tokens import BlockKind


class DocumentFormatter:
    """Produces APEX text from an ``ApexDocument``.

    Parameters
    ----------
    verbatim:
        When ``True`` lines are written exactly as stored.
    """

    def __init__(self, verbatim: bool = False) -> None:
        self._verbatim = verbatim

    def format(self, doc: ApexDocument) -> str:
        """Render ``doc`` as APEX source text.

        Returns
        -------
        str
            The document text, ending with a newline unless the document
            has no blocks.
        """
        if not doc.blocks:
            return ""
        if self._verbatim:
            lines: list[str] = []
            for block in doc.blocks:
                lines.append(str(block.kind))
                lines.extend(block.lines)
            return "\n".join(lines) + "\n"

        rendered = ["\n".join(self._format_block(block)) for block in doc.blocks]
        return "\n\n".join(rendered) + "\n"

    def _format_block(self, block: Block) -> list[str]:
        if block.kind is BlockKind.DIFF:
            body = list(block.lines)
        else:
            body = [line.rstrip() for line in block.lines]
        while body and not body[-1].strip():
            body.pop()
        return [str(block.kind), *body]


def format_document(doc: ApexDocument, verbatim: bool = False) -> str:
    """Convenience function: render ``doc`` as APEX text.

    Parameters
    ----------
    doc:
        The document to format.
    verbatim:
        Write lines exactly as stored instead of canonicalizing them.

    Returns
    -------
    str
        APEX source text.
    """
    return DocumentFormatter(verbatim=verbatim).format(doc)

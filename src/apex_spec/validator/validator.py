"""APEX Validator: document-level checks and typed views.

The ``Validator`` checks a parsed ``ApexDocument`` in a fixed order and
materializes one typed view per block kind:

0. block spans form a clean partition of the document
1. exactly one TASK block
2. no empty block other than CONTEXT and META
3. views, including META ``key=value`` (or ``key: value``) entries and
   the version check

Strict mode raises the first violation.  Tolerant mode recovers from
malformed META lines and version anomalies (recording a ``ParseFix`` or
warning ``Diagnostic``) but fails exactly like strict mode on steps 0-2.

Usage
-----
::

    from apex_spec.parser import parse
    from apex_spec.validator import Validator

    result = parse(source)
    validated = Validator().validate(result.document, fixes=result.fixes)
"""
from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from typing import Final, TypeVar

from apex_spec.ast.nodes import ApexDocument, Block
from apex_spec.errors import (
    EmptyRequiredBlockError,
    InternalError,
    InvalidVersionError,
    MissingTaskError,
    MultipleTasksError,
    ParseError,
)
from apex_spec.grammar.tokens import BlockKind, ParseFix, ParseMode
from apex_spec.validator.diagnostics import Diagnostic, warning
from apex_spec.validator.views import (
    DEFAULT_VERSION,
    ConstraintsView,
    ContextView,
    DiffFormat,
    DiffView,
    GoalsView,
    MetaEntry,
    MetaView,
    PlanView,
    TaskView,
    ToolDeclaration,
    ToolsView,
    ValidatedDocument,
    ValidationView,
)

logger = logging.getLogger(__name__)

_VERSION: Final[re.Pattern[str]] = re.compile(r"([0-9]+)\.([0-9]+)")
_TOOL_NAME: Final[re.Pattern[str]] = re.compile(r"[^\s(]*")

_V = TypeVar("_V")

SUPPORTED_VERSIONS: Final[dict[int, frozenset[int]]] = {1: frozenset({0, 1})}


class Validator:
    """Validator for parsed APEX documents.

    Parameters
    ----------
    mode:
        ``ParseMode.STRICT`` (default) or ``ParseMode.TOLERANT``.  Must be
        the mode the document was parsed with.
    """

    def __init__(self, mode: ParseMode = ParseMode.STRICT) -> None:
        self._mode: ParseMode = mode
        self._fixes: list[ParseFix] = []
        self._warnings: list[Diagnostic] = []

    @property
    def mode(self) -> ParseMode:
        return self._mode

    def validate(self, doc: ApexDocument, fixes: Iterable[ParseFix] = ()) -> ValidatedDocument:
        """Validate ``doc`` and build its typed views.

        Parameters
        ----------
        doc:
            The parsed document.
        fixes:
            Fixes recorded by the lexer and assembler; they are carried
            into the result ahead of any fix recorded here.

        Returns
        -------
        ValidatedDocument
            The document, its views, every fix and every warning.

        Raises
        ------
        ParseError
            On a broken block partition, a multi-line TASK, a TOOLS line
            without a name, or (strict mode) a malformed META line.
        MissingTaskError, MultipleTasksError
            When the document does not have exactly one TASK block.
        EmptyRequiredBlockError
            When a block other than CONTEXT or META has no content.
        InvalidVersionError
            In strict mode, on a malformed or unsupported META version.
        """
        self._fixes = list(fixes)
        self._warnings = []

        self._check_partition(doc)
        task_block = self._check_task_count(doc)
        self._check_empty_blocks(doc)
        self._check_repeated_blocks(doc)

        task = self._build_task(task_block)
        meta = self._optional(doc, BlockKind.META, self._build_meta)
        version = self._check_version(meta)

        return ValidatedDocument(
            doc=doc,
            task=task,
            goals=self._optional(doc, BlockKind.GOALS, lambda b: GoalsView(tuple(b.content_lines()))),
            plan=self._optional(doc, BlockKind.PLAN, lambda b: PlanView(tuple(b.content_lines()))),
            constraints=self._optional(
                doc, BlockKind.CONSTRAINTS, lambda b: ConstraintsView(tuple(b.content_lines()))
            ),
            validation=self._optional(
                doc, BlockKind.VALIDATION, lambda b: ValidationView(tuple(b.content_lines()))
            ),
            tools=self._optional(doc, BlockKind.TOOLS, self._build_tools),
            diff=self._optional(doc, BlockKind.DIFF, self._build_diff),
            context=self._optional(doc, BlockKind.CONTEXT, lambda b: ContextView(tuple(b.content_lines()))),
            meta=meta,
            version=version,
            fixes=tuple(self._fixes),
            warnings=tuple(self._warnings),
        )

    # ------------------------------------------------------------------
    # Document-level checks
    # ------------------------------------------------------------------

    def _check_partition(self, doc: ApexDocument) -> None:
        """Block spans must be ordered, disjoint and agree with line counts."""
        previous_end = 0
        for block in doc.blocks:
            span = block.span
            if span.start_line <= previous_end:
                raise ParseError(
                    f"{block.kind} block overlaps the previous block", span.start_line
                )
            if span.end_line - span.start_line != len(block.lines):
                raise ParseError(
                    f"{block.kind} block span {span.start_line}-{span.end_line} does not "
                    f"match its {len(block.lines)} line(s)",
                    span.start_line,
                )
            previous_end = span.end_line

    def _check_task_count(self, doc: ApexDocument) -> Block:
        tasks = doc.get_blocks(BlockKind.TASK)
        if not tasks:
            raise MissingTaskError()
        if len(tasks) > 1:
            raise MultipleTasksError(tasks[1].span.start_line)
        return tasks[0]

    def _check_empty_blocks(self, doc: ApexDocument) -> None:
        for block in doc.blocks:
            if block.is_empty and not block.kind.allows_empty:
                raise EmptyRequiredBlockError(str(block.kind), block.span.start_line)

    def _check_repeated_blocks(self, doc: ApexDocument) -> None:
        seen: set[BlockKind] = set()
        for block in doc.blocks:
            if block.kind is BlockKind.TASK:
                continue
            if block.kind in seen:
                self._warn(
                    "APX301",
                    f"Repeated {block.kind} block ignored; the first one is used",
                    block.span.start_line,
                    suggestion=f"Merge the {block.kind} blocks",
                )
            seen.add(block.kind)

    def _check_version(self, meta: MetaView | None) -> str:
        """Return the effective version, raising or warning per mode."""
        entry = meta.entry("version") if meta is not None else None
        if entry is None:
            return DEFAULT_VERSION
        declared = entry.value
        line = entry.line

        match = _VERSION.fullmatch(declared)
        if match is None:
            reason = "expected <major>.<minor>"
            if self._mode is ParseMode.STRICT:
                raise InvalidVersionError(declared, reason, line)
            self._warn("APX103", f"Malformed version {declared!r} ({reason}); using {DEFAULT_VERSION}", line)
            return DEFAULT_VERSION

        major, minor = int(match.group(1)), int(match.group(2))
        known_minors = SUPPORTED_VERSIONS.get(major)
        if known_minors is None:
            reason = f"major version {major} is not supported"
            if self._mode is ParseMode.STRICT:
                raise InvalidVersionError(declared, reason, line)
            self._warn("APX102", f"Version {declared!r}: {reason}", line)
        elif minor not in known_minors:
            self._warn("APX101", f"Version {declared!r}: unknown minor version {minor}", line)
        return declared

    # ------------------------------------------------------------------
    # View builders
    # ------------------------------------------------------------------

    def _optional(
        self, doc: ApexDocument, kind: BlockKind, build: Callable[[Block], _V]
    ) -> _V | None:
        block = doc.get_block(kind)
        return build(block) if block is not None else None

    def _build_task(self, block: Block) -> TaskView:
        lines = block.content_lines()
        if not lines:
            raise InternalError("TASK block passed the emptiness check without content")
        if len(lines) > 1:
            raise ParseError(
                f"TASK block must contain a single line, found {len(lines)}",
                _line_of_nth_content(block, 1),
            )
        return TaskView(line=lines[0])

    def _build_tools(self, block: Block) -> ToolsView:
        tools: list[ToolDeclaration] = []
        for offset, raw in enumerate(block.lines, start=1):
            text = raw.strip()
            if not text:
                continue
            line_no = block.span.start_line + offset
            name = _TOOL_NAME.match(text).group(0)  # type: ignore[union-attr]
            if not name:
                raise ParseError(f"TOOLS line has no tool name: {text!r}", line_no)
            tools.append(
                ToolDeclaration(
                    name=name,
                    raw_arguments=text[len(name):].strip(),
                    raw=raw,
                    line=line_no,
                )
            )
        return ToolsView(tools=tuple(tools))

    def _build_diff(self, block: Block) -> DiffView:
        lines = list(block.lines)
        while lines and not lines[-1].strip():
            lines.pop()
        while lines and not lines[0].strip():
            lines.pop(0)
        if not lines:
            return DiffView(format=None, payload=())

        marker = lines[0].strip().lower()
        if marker == DiffFormat.UNIFIED.value:
            return DiffView(format=DiffFormat.UNIFIED, payload=tuple(lines[1:]))
        if marker == DiffFormat.RAW.value:
            return DiffView(format=DiffFormat.RAW, payload=tuple(lines[1:]))
        return DiffView(format=None, payload=tuple(lines))

    def _build_meta(self, block: Block) -> MetaView:
        entries: dict[str, MetaEntry] = {}
        for offset, raw in enumerate(block.lines, start=1):
            text = raw.strip()
            if not text:
                continue
            line_no = block.span.start_line + offset
            key, sep, value = text.partition("=")
            if not sep:
                key, sep, value = text.partition(":")
            key = key.strip()
            if not sep or not key:
                if self._mode is ParseMode.STRICT:
                    raise ParseError(f"META line is not key=value or key: value: {text!r}", line_no)
                self._record_fix(line_no, f"Ignored malformed META line {text!r}")
                continue
            value = value.strip()
            if key in entries:
                self._warn(
                    "APX201",
                    f"Duplicate META key {key!r}; value {value!r} replaces {entries[key].value!r}",
                    line_no,
                )
            entries[key] = MetaEntry(key=key, value=value, line=line_no)
        return MetaView(items=tuple(entries.values()))

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def _record_fix(self, line_no: int, description: str) -> None:
        logger.debug("line %d: %s", line_no, description)
        self._fixes.append(ParseFix(line=line_no, description=description))

    def _warn(self, code: str, message: str, line: int | None, suggestion: str | None = None) -> None:
        logger.debug("%s: %s", code, message)
        self._warnings.append(warning(code, message, line, suggestion))


def _line_of_nth_content(block: Block, index: int) -> int:
    """Return the source line of the ``index``-th (0-based) non-blank line."""
    seen = 0
    for offset, raw in enumerate(block.lines, start=1):
        if raw.strip():
            if seen == index:
                return block.span.start_line + offset
            seen += 1
    return block.span.start_line


def validate(
    doc: ApexDocument,
    mode: ParseMode = ParseMode.STRICT,
    fixes: Iterable[ParseFix] = (),
) -> ValidatedDocument:
    """Convenience function: validate ``doc`` in ``mode``.

    Parameters
    ----------
    doc:
        The parsed ``ApexDocument``.
    mode:
        Parsing mode the document was produced with.
    fixes:
        Fixes recorded while parsing.

    Returns
    -------
    ValidatedDocument
        The validated document with typed views.
    """
    return Validator(mode=mode).validate(doc, fixes=fixes)

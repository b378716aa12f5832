"""apex-spec: parser, validator and plan builder for APEX agent-task documents.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
::

    import apex_spec

    plan = apex_spec.compile_plan('''
    TASK
    fix search

    PLAN
    scan
    patch

    TOOLS
    code_search "x"
    patch_file "y"
    ''')

    plan.task
    'fix search'
    [str(step.tool) for step in plan.steps]
    ['code_search "x"', 'patch_file "y"']

    apex_spec.__version__
    '0.1.0'
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from apex_spec.errors import (
    ApexError,
    ApexErrorKind,
    ConstraintViolationError,
    EmptyRequiredBlockError,
    InternalError,
    InvalidToolNameError,
    InvalidVersionError,
    LexError,
    MissingTaskError,
    MultipleTasksError,
    ParseError,
    UnknownBlockError,
    ValidationFailureError,
)
from apex_spec.grammar.tokens import BlockKind, ParseFix, ParseMode

__version__: str = "0.1.0"

if TYPE_CHECKING:
    from apex_spec.ast.nodes import ApexDocument
    from apex_spec.interpreter.plan import BindingStrategy, ExecutionPlan
    from apex_spec.parser.parser import ParseResult
    from apex_spec.validator.views import ValidatedDocument


def parse(source: str, mode: ParseMode = ParseMode.STRICT) -> "ParseResult":
    """Lex and assemble ``source`` into an ``ApexDocument``.

    Parameters
    ----------
    source:
        Complete APEX document text.
    mode:
        ``ParseMode.STRICT`` (default) or ``ParseMode.TOLERANT``.

    Returns
    -------
    ParseResult
        The document plus every fix recorded while lexing and assembling.

    Raises
    ------
    LexError
        In strict mode, on a header that is not exact uppercase.
    ParseError
        In strict mode, on content before the first header.
    UnknownBlockError
        In strict mode, on an unrecognized header.
    """
    from apex_spec.parser.parser import parse as _parse

    return _parse(source, mode)


def validate(
    doc: "ApexDocument",
    mode: ParseMode = ParseMode.STRICT,
    fixes: tuple[ParseFix, ...] = (),
) -> "ValidatedDocument":
    """Validate a parsed document and build its typed views.

    Parameters
    ----------
    doc:
        The parsed document.
    mode:
        Mode the document was parsed with.
    fixes:
        Fixes recorded while parsing, carried into the result.

    Returns
    -------
    ValidatedDocument
        The document with typed views, fixes and warnings.
    """
    from apex_spec.validator.validator import validate as _validate

    return _validate(doc, mode=mode, fixes=fixes)


def parse_and_validate(source: str, mode: ParseMode = ParseMode.STRICT) -> "ValidatedDocument":
    """Parse ``source`` and validate the result in one call."""
    result = parse(source, mode)
    return validate(result.document, mode=mode, fixes=result.fixes)


def build_plan(
    validated: "ValidatedDocument",
    strategy: "BindingStrategy | None" = None,
) -> "ExecutionPlan":
    """Interpret a validated document into an ``ExecutionPlan``.

    Parameters
    ----------
    validated:
        Output of ``validate`` or ``parse_and_validate``.
    strategy:
        Tool binding strategy.  ``None`` means ``BindingStrategy.AUTO``.

    Returns
    -------
    ExecutionPlan
        The plan with steps bound to tools.
    """
    from apex_spec.interpreter.plan import BindingStrategy
    from apex_spec.interpreter.plan import build_plan as _build_plan

    return _build_plan(validated, strategy if strategy is not None else BindingStrategy.AUTO)


def compile_plan(
    source: str,
    mode: ParseMode = ParseMode.STRICT,
    strategy: "BindingStrategy | None" = None,
) -> "ExecutionPlan":
    """Run the whole pipeline: text to ``ExecutionPlan``.

    Raises
    ------
    ApexError
        Whatever the first failing stage raises.
    """
    return build_plan(parse_and_validate(source, mode), strategy)


def format(doc: "ApexDocument", verbatim: bool = False) -> str:  # noqa: A001
    """Render ``doc`` as APEX text.

    Parameters
    ----------
    doc:
        The document to format.
    verbatim:
        Write block lines exactly as stored instead of canonicalizing.

    Returns
    -------
    str
        APEX source text ending with a newline.
    """
    from apex_spec.formatter.formatter import format_document

    return format_document(doc, verbatim=verbatim)


__all__ = [
    "__version__",
    "parse",
    "validate",
    "parse_and_validate",
    "build_plan",
    "compile_plan",
    "format",
    "BlockKind",
    "ParseFix",
    "ParseMode",
    "ApexError",
    "ApexErrorKind",
    "LexError",
    "ParseError",
    "UnknownBlockError",
    "MissingTaskError",
    "MultipleTasksError",
    "EmptyRequiredBlockError",
    "InvalidVersionError",
    "InvalidToolNameError",
    "ConstraintViolationError",
    "ValidationFailureError",
    "InternalError",
]

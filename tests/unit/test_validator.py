"""Unit tests for apex_spec.validator: document checks and typed views."""
from __future__ import annotations

import pytest

from apex_spec.ast.nodes import ApexDocument, Block, Span
from apex_spec.errors import (
    EmptyRequiredBlockError,
    InvalidVersionError,
    MissingTaskError,
    MultipleTasksError,
    ParseError,
)
from apex_spec.grammar.tokens import BlockKind, ParseFix, ParseMode
from apex_spec.parser import parse
from apex_spec.validator import (
    DEFAULT_VERSION,
    DiagnosticSeverity,
    DiffFormat,
    MetaEntry,
    ToolDeclaration,
    ValidatedDocument,
    Validator,
    validate,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def check(source: str, mode: ParseMode = ParseMode.STRICT) -> ValidatedDocument:
    result = parse(source, mode)
    return validate(result.document, mode=mode, fixes=result.fixes)


def codes(validated: ValidatedDocument) -> list[str]:
    return [d.code for d in validated.warnings]


BOTH_MODES = pytest.mark.parametrize("mode", [ParseMode.STRICT, ParseMode.TOLERANT])


# ---------------------------------------------------------------------------
# TASK count
# ---------------------------------------------------------------------------


class TestTaskCount:
    @BOTH_MODES
    def test_missing_task(self, mode: ParseMode) -> None:
        with pytest.raises(MissingTaskError):
            check("PLAN\nscan\n", mode)

    @BOTH_MODES
    def test_empty_document_has_no_task(self, mode: ParseMode) -> None:
        with pytest.raises(MissingTaskError):
            check("", mode)

    @BOTH_MODES
    def test_multiple_tasks(self, mode: ParseMode) -> None:
        with pytest.raises(MultipleTasksError) as exc_info:
            check("TASK\na\n\nTASK\nb\n", mode)
        assert exc_info.value.line == 4

    def test_task_line_is_stripped(self) -> None:
        assert check("TASK\n   fix search  \n").task.line == "fix search"

    @BOTH_MODES
    def test_multi_line_task_is_rejected(self, mode: ParseMode) -> None:
        with pytest.raises(ParseError) as exc_info:
            check("TASK\nfirst\n\nsecond\n", mode)
        assert exc_info.value.line == 4


# ---------------------------------------------------------------------------
# Empty blocks
# ---------------------------------------------------------------------------


class TestEmptyBlocks:
    @BOTH_MODES
    @pytest.mark.parametrize("kind", ["GOALS", "PLAN", "CONSTRAINTS", "VALIDATION", "TOOLS", "DIFF"])
    def test_required_block_cannot_be_empty(self, mode: ParseMode, kind: str) -> None:
        with pytest.raises(EmptyRequiredBlockError) as exc_info:
            check(f"TASK\nfix\n\n{kind}\n\n", mode)
        assert exc_info.value.block_name == kind
        assert exc_info.value.line == 4

    @BOTH_MODES
    def test_empty_task_is_rejected(self, mode: ParseMode) -> None:
        with pytest.raises(EmptyRequiredBlockError):
            check("TASK\n\nPLAN\nscan\n", mode)

    @pytest.mark.parametrize("kind", ["CONTEXT", "META"])
    def test_context_and_meta_may_be_empty(self, kind: str) -> None:
        validated = check(f"TASK\nfix\n\n{kind}\n")
        assert validated.warnings == ()

    def test_empty_context_gives_empty_view(self) -> None:
        assert check("TASK\nfix\nCONTEXT\n").context.lines == ()


# ---------------------------------------------------------------------------
# Partition check
# ---------------------------------------------------------------------------


class TestPartition:
    def test_overlapping_spans_rejected(self) -> None:
        doc = ApexDocument(
            blocks=(
                Block(BlockKind.TASK, ("fix", ""), Span(1, 3)),
                Block(BlockKind.PLAN, ("scan",), Span(3, 4)),
            )
        )
        with pytest.raises(ParseError):
            validate(doc)

    def test_span_must_match_line_count(self) -> None:
        doc = ApexDocument(blocks=(Block(BlockKind.TASK, ("fix",), Span(1, 5)),))
        with pytest.raises(ParseError):
            validate(doc, ParseMode.TOLERANT)

    def test_well_formed_hand_built_document(self) -> None:
        doc = ApexDocument(
            blocks=(
                Block(BlockKind.TASK, ("fix",), Span(1, 2)),
                Block(BlockKind.PLAN, ("scan",), Span(3, 4)),
            )
        )
        assert validate(doc).plan.steps == ("scan",)


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------


class TestViews:
    def test_full_document_views(self, full_source: str) -> None:
        validated = check(full_source)
        assert validated.task.line == "Refactor the session cache"
        assert validated.goals.goals == ("lower p99 latency", "keep hit rate above 90%")
        assert validated.plan.steps == (
            "search for cache usages",
            "edit the eviction policy",
            "run the benchmark suite",
        )
        assert validated.constraints.rules == ("No Mocks", "< 300 LOC", "API compatibility")
        assert validated.validation.conditions == ("benchmarks pass",)
        assert validated.context.lines == ("The cache lives in cache.py.",)
        assert validated.meta.entries == {"version": "1.1", "owner": "platform"}
        assert validated.version == "1.1"
        assert validated.fixes == ()
        assert validated.warnings == ()

    def test_plan_preserves_order_and_skips_blank_lines(self) -> None:
        validated = check("TASK\nfix\n\nPLAN\nthird\n\nfirst\nsecond\n")
        assert validated.plan.steps == ("third", "first", "second")

    def test_absent_optional_views_are_none(self) -> None:
        validated = check("TASK\nfix\n")
        assert validated.goals is None
        assert validated.plan is None
        assert validated.tools is None
        assert validated.diff is None
        assert validated.meta is None
        assert validated.version == DEFAULT_VERSION


class TestToolsView:
    def test_name_and_arguments(self) -> None:
        tools = check('TASK\nfix\n\nTOOLS\ncode_search "x"\n').tools
        assert tools.tools == (
            ToolDeclaration(name="code_search", raw_arguments='"x"', raw='code_search "x"', line=5),
        )

    def test_parenthesised_arguments(self) -> None:
        tool = check("TASK\nfix\n\nTOOLS\ncode_edit(path=a.py, line=3)\n").tools.tools[0]
        assert tool.name == "code_edit"
        assert tool.raw_arguments == "(path=a.py, line=3)"

    def test_bare_name(self) -> None:
        tool = check("TASK\nfix\n\nTOOLS\n  bash  \n").tools.tools[0]
        assert tool.name == "bash"
        assert tool.raw_arguments == ""
        assert tool.raw == "  bash  "

    def test_line_without_name_is_rejected(self) -> None:
        with pytest.raises(ParseError):
            check("TASK\nfix\n\nTOOLS\n(x)\n")

    def test_names_property(self) -> None:
        tools = check("TASK\nfix\n\nTOOLS\na 1\nb 2\n").tools
        assert tools.names == ["a", "b"]


class TestDiffView:
    def test_unified_marker(self) -> None:
        diff = check("TASK\nfix\n\nDIFF\nunified\n--- a\n+++ b\n").diff
        assert diff.format is DiffFormat.UNIFIED
        assert diff.payload == ("--- a", "+++ b")

    def test_marker_is_case_insensitive(self) -> None:
        assert check("TASK\nfix\n\nDIFF\n  RAW \nbytes\n").diff.format is DiffFormat.RAW

    def test_no_marker_keeps_first_line(self) -> None:
        diff = check("TASK\nfix\n\nDIFF\n--- a\n+++ b\n").diff
        assert diff.format is None
        assert diff.payload == ("--- a", "+++ b")

    def test_payload_is_verbatim_and_trimmed(self) -> None:
        diff = check("TASK\nfix\n\nDIFF\n\nunified\n  context line\n\n-old\n\n").diff
        assert diff.payload == ("  context line", "", "-old")


# ---------------------------------------------------------------------------
# META and version
# ---------------------------------------------------------------------------


class TestMeta:
    def test_duplicate_key_last_wins_with_warning(self) -> None:
        validated = check("TASK\nfix\n\nMETA\nowner=a\nowner=b\n")
        assert validated.meta.get("owner") == "b"
        assert codes(validated) == ["APX201"]
        assert validated.warnings[0].line == 6

    def test_value_may_contain_equals(self) -> None:
        validated = check("TASK\nfix\n\nMETA\nquery=a=b\n")
        assert validated.meta.get("query") == "a=b"

    def test_malformed_line_strict(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            check("TASK\nfix\n\nMETA\njust words\n")
        assert exc_info.value.line == 5

    def test_malformed_line_tolerant_records_fix(self) -> None:
        validated = check("TASK\nfix\n\nMETA\njust words\nowner=me\n", ParseMode.TOLERANT)
        assert validated.meta.entries == {"owner": "me"}
        assert len(validated.fixes) == 1
        assert validated.fixes[0] == ParseFix(line=5, description="Ignored malformed META line 'just words'")

    def test_empty_key_is_malformed(self) -> None:
        with pytest.raises(ParseError):
            check("TASK\nfix\n\nMETA\n=value\n")

    def test_get_default(self) -> None:
        assert check("TASK\nfix\n\nMETA\n").meta.get("missing", "x") == "x"

    def test_colon_form_is_accepted(self) -> None:
        validated = check("TASK\nfix\n\nMETA\nowner: platform\nversion: 1.1\n")
        assert validated.meta.entries == {"owner": "platform", "version": "1.1"}
        assert validated.version == "1.1"

    def test_equals_is_split_before_colon(self) -> None:
        validated = check("TASK\nfix\n\nMETA\nurl=http://example.com\n")
        assert validated.meta.get("url") == "http://example.com"

    def test_entry_keeps_its_line(self) -> None:
        validated = check("TASK\nfix\n\nMETA\nowner=a\n\nowner=b\n")
        assert validated.meta.entry("owner") == MetaEntry(key="owner", value="b", line=7)
        assert validated.meta.entry("missing") is None

    def test_entries_are_read_only(self) -> None:
        validated = check("TASK\nfix\n\nMETA\nowner=a\n")
        with pytest.raises(TypeError):
            validated.meta.entries["owner"] = "b"  # type: ignore[index]

    def test_validated_document_is_hashable(self, full_source: str) -> None:
        validated = check(full_source)
        assert hash(validated) == hash(check(full_source))


class TestVersion:
    @pytest.mark.parametrize("version", ["1.0", "1.1"])
    def test_supported_versions_have_no_warning(self, version: str) -> None:
        validated = check(f"TASK\nfix\n\nMETA\nversion={version}\n")
        assert validated.version == version
        assert validated.warnings == ()

    @BOTH_MODES
    def test_unknown_minor_warns(self, mode: ParseMode) -> None:
        validated = check("TASK\nfix\n\nMETA\nversion=1.7\n", mode)
        assert validated.version == "1.7"
        assert codes(validated) == ["APX101"]
        assert validated.warnings[0].severity is DiagnosticSeverity.WARNING

    def test_unsupported_major_strict(self) -> None:
        with pytest.raises(InvalidVersionError) as exc_info:
            check("TASK\nfix\n\nMETA\nversion=2.0\n")
        assert exc_info.value.version == "2.0"

    def test_unsupported_major_tolerant(self) -> None:
        validated = check("TASK\nfix\n\nMETA\nversion=2.0\n", ParseMode.TOLERANT)
        assert validated.version == "2.0"
        assert codes(validated) == ["APX102"]

    @pytest.mark.parametrize("version", ["one", "1", "1.0.0", "v1.0", ""])
    def test_malformed_version_strict(self, version: str) -> None:
        with pytest.raises(InvalidVersionError):
            check(f"TASK\nfix\n\nMETA\nversion={version}\n")

    def test_malformed_version_tolerant_falls_back(self) -> None:
        validated = check("TASK\nfix\n\nMETA\nversion=latest\n", ParseMode.TOLERANT)
        assert validated.version == DEFAULT_VERSION
        assert codes(validated) == ["APX103"]

    @pytest.mark.parametrize("mode, code", [(ParseMode.TOLERANT, "APX103"), (ParseMode.STRICT, "APX101")])
    def test_warning_reports_the_version_line(self, mode: ParseMode, code: str) -> None:
        version = "latest" if code == "APX103" else "1.7"
        validated = check(f"TASK\nfix\n\nMETA\nowner=me\n\nversion={version}\n", mode)
        assert codes(validated) == [code]
        assert validated.warnings[0].line == 7

    def test_error_reports_the_version_line(self) -> None:
        with pytest.raises(InvalidVersionError) as exc_info:
            check("TASK\nfix\n\nMETA\nowner=me\nversion=2.0\n")
        assert exc_info.value.line == 6


# ---------------------------------------------------------------------------
# Repeated optional blocks and fix carry-over
# ---------------------------------------------------------------------------


class TestRepeatedBlocks:
    def test_first_occurrence_is_used(self) -> None:
        validated = check("TASK\nfix\n\nPLAN\nfirst\n\nPLAN\nsecond\n")
        assert validated.plan.steps == ("first",)
        assert codes(validated) == ["APX301"]
        assert validated.warnings[0].line == 7


def test_parse_fixes_are_carried_first() -> None:
    validated = check("task\nfix\n\nMETA\nbroken\n", ParseMode.TOLERANT)
    assert [fix.line for fix in validated.fixes] == [1, 5]


def test_validator_reports_mode() -> None:
    assert Validator(ParseMode.TOLERANT).mode is ParseMode.TOLERANT


def test_validator_is_reusable() -> None:
    validator = Validator(ParseMode.TOLERANT)
    first = parse("TASK\nfix\n\nMETA\nbad\n", ParseMode.TOLERANT)
    validator.validate(first.document, fixes=first.fixes)
    second = parse("TASK\nfix\n", ParseMode.TOLERANT)
    assert validator.validate(second.document).fixes == ()

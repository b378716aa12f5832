"""Unit tests for apex_spec.lexer: line tokenization of APEX documents."""
from __future__ import annotations

import pytest

from apex_spec.grammar.tokens import (
    BlankToken,
    BlockKind,
    ContentToken,
    HeaderToken,
    ParseMode,
)
from apex_spec.lexer.lexer import LexError, Lexer, tokenize


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def kinds_of(source: str, mode: ParseMode = ParseMode.STRICT) -> list[str]:
    """Return a compact description of each token: header kind, 'content' or 'blank'."""
    out: list[str] = []
    for token in tokenize(source, mode).tokens:
        if isinstance(token, HeaderToken):
            out.append(str(token.kind) if token.kind is not None else "unknown")
        elif isinstance(token, ContentToken):
            out.append("content")
        else:
            out.append("blank")
    return out


# ---------------------------------------------------------------------------
# Empty inputs and line splitting
# ---------------------------------------------------------------------------


class TestLineSplitting:
    def test_empty_string_produces_no_tokens(self) -> None:
        assert tokenize("").tokens == ()

    def test_terminating_newline_adds_no_token(self) -> None:
        assert len(tokenize("TASK\nfix\n").tokens) == 2

    def test_missing_terminating_newline(self) -> None:
        assert len(tokenize("TASK\nfix").tokens) == 2

    def test_crlf_line_endings(self) -> None:
        tokens = tokenize("TASK\r\nfix search\r\n").tokens
        assert isinstance(tokens[0], HeaderToken)
        assert tokens[1] == ContentToken(text="fix search", line=2)

    def test_one_token_per_line(self) -> None:
        source = "TASK\nfix\n\n\nPLAN\nscan\n"
        assert len(tokenize(source).tokens) == 6

    def test_line_numbers_are_one_based(self) -> None:
        tokens = tokenize("TASK\nfix\n").tokens
        assert [t.line for t in tokens] == [1, 2]


# ---------------------------------------------------------------------------
# Header recognition
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("kind", list(BlockKind))
def test_every_identifier_is_a_header(kind: BlockKind) -> None:
    token = tokenize(kind.value).tokens[0]
    assert token == HeaderToken(kind=kind, raw_text=kind.value, line=1)


class TestHeaders:
    def test_indented_identifier_is_content(self) -> None:
        assert kinds_of("TASK\n  PLAN\n") == ["TASK", "content"]

    def test_identifier_with_trailing_text_is_content(self) -> None:
        assert kinds_of("TASK\nPLAN ahead\n") == ["TASK", "content"]

    def test_blank_line_keeps_its_text(self) -> None:
        token = tokenize("TASK\n   \n").tokens[1]
        assert token == BlankToken(line=2, text="   ")

    def test_identifier_inside_a_word_is_content(self) -> None:
        assert kinds_of("TASK\nTASKS\n") == ["TASK", "content"]


class TestStrictMode:
    def test_lowercase_header_raises(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize("task\nfix search\n")
        assert exc_info.value.line == 1

    def test_trailing_whitespace_after_exact_header_is_accepted(self) -> None:
        result = tokenize("TASK \nfix\n\nPLAN  \t\nscan\n")
        assert result.tokens[0] == HeaderToken(kind=BlockKind.TASK, raw_text="TASK ", line=1)
        assert result.tokens[3].kind is BlockKind.PLAN
        assert result.fixes == ()

    def test_wrong_case_with_trailing_whitespace_raises(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize("TASK\nfix\n\nPlan  \nscan\n")
        assert exc_info.value.line == 4

    def test_mixed_case_header_raises_with_line(self) -> None:
        with pytest.raises(LexError) as exc_info:
            tokenize("TASK\nfix\n\nGoals\nx\n")
        assert exc_info.value.line == 4

    def test_strict_mode_records_no_fixes(self) -> None:
        assert tokenize("TASK\nfix\n").fixes == ()


class TestTolerantMode:
    def test_lowercase_header_is_accepted_with_one_fix(self) -> None:
        result = tokenize("task\nfix search\n", ParseMode.TOLERANT)
        assert result.tokens[0] == HeaderToken(kind=BlockKind.TASK, raw_text="task", line=1)
        assert len(result.fixes) == 1
        assert result.fixes[0].line == 1
        assert "case" in result.fixes[0].description

    def test_trailing_whitespace_fix_description(self) -> None:
        result = tokenize("TASK \t\nfix\n", ParseMode.TOLERANT)
        assert result.tokens[0].kind is BlockKind.TASK
        assert "trailing whitespace" in result.fixes[0].description
        assert "case" not in result.fixes[0].description

    def test_case_and_whitespace_in_one_fix(self) -> None:
        result = tokenize("Plan  \n", ParseMode.TOLERANT)
        assert len(result.fixes) == 1
        assert "case and trailing whitespace" in result.fixes[0].description

    def test_exact_headers_record_no_fix(self) -> None:
        assert tokenize("TASK\nfix\n", ParseMode.TOLERANT).fixes == ()


# ---------------------------------------------------------------------------
# Unknown headers
# ---------------------------------------------------------------------------


class TestUnknownHeaders:
    def test_uppercase_word_at_document_start(self) -> None:
        token = tokenize("NOTES\nsomething\n").tokens[0]
        assert token == HeaderToken(kind=None, raw_text="NOTES", line=1)

    def test_uppercase_word_after_blank_line_before_first_header(self) -> None:
        assert kinds_of("stray\n\nNOTES\nx\n\nTASK\nfix\n") == [
            "content", "blank", "unknown", "content", "blank", "TASK", "content",
        ]

    def test_uppercase_word_after_blank_line_in_block_is_content(self) -> None:
        assert kinds_of("TASK\nfix\n\nNOTES\nx\n") == ["TASK", "content", "blank", "content", "content"]

    def test_uppercase_word_inside_block_is_content(self) -> None:
        assert kinds_of("TASK\nfix\nNOTES\n") == ["TASK", "content", "content"]

    def test_short_uppercase_word_is_content(self) -> None:
        assert kinds_of("OK\n") == ["content"]

    @pytest.mark.parametrize("mode", [ParseMode.STRICT, ParseMode.TOLERANT])
    def test_uppercase_constraint_lines_stay_content(self, mode: ParseMode) -> None:
        source = "TASK\nfix search\n\nCONSTRAINTS\nreal dbs only\n\nNO_MOCKS\nSAFE_REFACTOR\n"
        assert kinds_of(source, mode) == [
            "TASK", "content", "blank", "CONSTRAINTS", "content", "blank", "content", "content",
        ]

    def test_unknown_header_is_not_rejected_by_lexer(self) -> None:
        # Rejection is the assembler's decision, in both modes.
        assert tokenize("NOTES\nx\n\nTASK\n").fixes == ()


def test_lexer_class_matches_function() -> None:
    source = "TASK\nfix\n"
    assert Lexer(source).tokenize() == tokenize(source)
    assert Lexer(source, ParseMode.TOLERANT).mode is ParseMode.TOLERANT

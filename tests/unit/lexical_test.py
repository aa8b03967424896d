"""Tests for the comment, literal and whitespace scanner."""

import pytest

from ponyfmt.core.lexical import (
    Lexeme,
    LexemeKind,
    block_comment_end,
    find_unterminated,
    position_of,
    scan_gap,
)


class TestBlockCommentEnd:
    def test_simple_comment(self) -> None:
        source = b"/* a */ x"
        assert block_comment_end(source, 0, len(source)) == 7

    def test_nested_comment_closes_at_outer_end(self) -> None:
        source = b"/* a /* b */ c */ d"
        assert block_comment_end(source, 0, len(source)) == 17

    def test_unclosed_nested_comment(self) -> None:
        source = b"/* a /* b */ c"
        assert block_comment_end(source, 0, len(source)) is None


class TestFindUnterminated:
    @pytest.mark.parametrize(
        "source",
        [
            b'let s = "abc"',
            b'let s = "say \\"hi\\""',
            b'"""doc with "quotes" inside"""',
            b'""""quoted""""',
            b"let c = 'a'",
            b"let c = '\\''",
            b"let x' = x + 1",
            b"// an open \" in a comment",
            b"/* /* nested */ still closed */",
        ],
        ids=["string", "escaped", "triple", "triple-extra-quotes", "char", "escaped-char", "prime", "line", "nested"],
    )
    def test_balanced_input(self, source: bytes) -> None:
        assert find_unterminated(source) is None

    def test_unterminated_string(self) -> None:
        found = find_unterminated(b'let s = "abc')
        assert found is not None
        assert found.offset == 8
        assert found.message == "unterminated string literal"

    def test_unterminated_triple_string(self) -> None:
        found = find_unterminated(b'x """doc')
        assert found is not None
        assert found.offset == 2
        assert "triple-quoted" in found.message

    def test_char_literal_stops_at_newline(self) -> None:
        found = find_unterminated(b"let c = 'a\nlet d = 1")
        assert found is not None
        assert found.offset == 8
        assert found.message == "unterminated character literal"

    def test_unterminated_block_comment(self) -> None:
        found = find_unterminated(b"x /* /* */ y")
        assert found is not None
        assert found.offset == 2
        assert found.message == "unterminated block comment"


class TestScanGap:
    def test_splits_whitespace_and_comments(self) -> None:
        source = b"  // c\n  /* d */ "
        kinds = [lexeme.kind for lexeme in scan_gap(source, 0, len(source))]
        assert kinds == [
            LexemeKind.WHITESPACE,
            LexemeKind.LINE_COMMENT,
            LexemeKind.WHITESPACE,
            LexemeKind.BLOCK_COMMENT,
            LexemeKind.WHITESPACE,
        ]

    def test_line_comment_excludes_newline(self) -> None:
        source = b"// c\n"
        lexemes = scan_gap(source, 0, len(source))
        assert source[lexemes[0].start : lexemes[0].end] == b"// c"

    def test_leftover_text(self) -> None:
        source = b" @@ "
        lexemes = scan_gap(source, 0, len(source))
        assert lexemes[1].kind is LexemeKind.OTHER
        assert source[lexemes[1].start : lexemes[1].end] == b"@@"

    def test_respects_bounds(self) -> None:
        assert scan_gap(b"a  b", 1, 3) == [Lexeme(LexemeKind.WHITESPACE, 1, 3)]


class TestPositionOf:
    def test_first_line(self) -> None:
        assert position_of(b"abc", 2) == (0, 2)

    def test_after_newline(self) -> None:
        assert position_of(b"ab\ncd", 4) == (1, 1)

    def test_clamps_offset(self) -> None:
        assert position_of(b"ab\ncd", 99) == (1, 2)

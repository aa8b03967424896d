"""Pony-aware scanning of comments, literals and whitespace.

Works on UTF-8 bytes so every offset lines up with tree-sitter byte ranges.
"""

from enum import StrEnum
from typing import NamedTuple

_WHITESPACE = frozenset(b" \t\r\n\f\v")
_WORD = frozenset(b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")


class LexemeKind(StrEnum):
    WHITESPACE = "whitespace"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    OTHER = "other"


class Lexeme(NamedTuple):
    kind: LexemeKind
    start: int
    end: int


class Unterminated(NamedTuple):
    offset: int
    message: str


def line_comment_end(source: bytes, start: int, limit: int) -> int:
    newline = source.find(b"\n", start, limit)
    return limit if newline < 0 else newline


def block_comment_end(source: bytes, start: int, limit: int) -> int | None:
    """Return the offset just past the ``*/`` closing the comment at ``start``.

    Pony block comments nest. ``None`` means the comment is never closed.
    """
    depth = 0
    i = start
    while i < limit:
        if source.startswith(b"/*", i):
            depth += 1
            i += 2
        elif source.startswith(b"*/", i):
            depth -= 1
            i += 2
            if depth == 0:
                return i
        else:
            i += 1
    return None


def _quoted_end(source: bytes, start: int, limit: int, quote: int, stop_at_newline: bool = False) -> int | None:
    i = start + 1
    while i < limit:
        c = source[i]
        if c == 0x5C:  # backslash
            i += 2
            continue
        if c == quote:
            return i + 1
        if stop_at_newline and c == 0x0A:
            return None
        i += 1
    return None


def _triple_string_end(source: bytes, start: int, limit: int) -> int | None:
    close = source.find(b'"""', start + 3, limit)
    if close < 0:
        return None
    end = close + 3
    while end < limit and source[end] == 0x22:
        end += 1
    return end


def find_unterminated(source: bytes) -> Unterminated | None:
    """Find the first string, character literal or block comment that never closes."""
    limit = len(source)
    i = 0
    in_word = False
    while i < limit:
        c = source[i]
        if source.startswith(b"//", i):
            i = line_comment_end(source, i, limit)
            in_word = False
        elif source.startswith(b"/*", i):
            end = block_comment_end(source, i, limit)
            if end is None:
                return Unterminated(i, "unterminated block comment")
            i = end
            in_word = False
        elif source.startswith(b'"""', i):
            end = _triple_string_end(source, i, limit)
            if end is None:
                return Unterminated(i, "unterminated triple-quoted string literal")
            i = end
            in_word = False
        elif c == 0x22:
            end = _quoted_end(source, i, limit, 0x22)
            if end is None:
                return Unterminated(i, "unterminated string literal")
            i = end
            in_word = False
        elif c == 0x27:
            if in_word:
                # prime suffix of an identifier, e.g. x'
                i += 1
                continue
            end = _quoted_end(source, i, limit, 0x27, stop_at_newline=True)
            if end is None:
                return Unterminated(i, "unterminated character literal")
            i = end
            in_word = False
        else:
            in_word = c in _WORD
            i += 1
    return None


def scan_gap(source: bytes, start: int, end: int) -> list[Lexeme]:
    """Split the bytes between two tokens into whitespace, comments and leftovers."""
    lexemes: list[Lexeme] = []
    i = start
    while i < end:
        c = source[i]
        if c in _WHITESPACE:
            j = i
            while j < end and source[j] in _WHITESPACE:
                j += 1
            lexemes.append(Lexeme(LexemeKind.WHITESPACE, i, j))
            i = j
        elif source.startswith(b"//", i):
            j = line_comment_end(source, i, end)
            lexemes.append(Lexeme(LexemeKind.LINE_COMMENT, i, j))
            i = j
        elif source.startswith(b"/*", i):
            j = block_comment_end(source, i, end) or end
            lexemes.append(Lexeme(LexemeKind.BLOCK_COMMENT, i, j))
            i = j
        else:
            j = i
            while (
                j < end
                and source[j] not in _WHITESPACE
                and not source.startswith(b"//", j)
                and not source.startswith(b"/*", j)
            ):
                j += 1
            lexemes.append(Lexeme(LexemeKind.OTHER, i, j))
            i = j
    return lexemes


def position_of(source: bytes, offset: int) -> tuple[int, int]:
    """Return the zero-based ``(row, column)`` of a byte offset."""
    offset = max(0, min(offset, len(source)))
    row = source.count(b"\n", 0, offset)
    line_start = source.rfind(b"\n", 0, offset) + 1
    return row, offset - line_start

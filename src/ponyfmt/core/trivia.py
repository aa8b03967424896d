import logging
from collections.abc import Iterator

from ponyfmt.core.lexical import LexemeKind, scan_gap
from ponyfmt.core.rules import is_atomic_kind
from ponyfmt.models import SyntaxTree, Trivia, TriviaKind

logger = logging.getLogger(__name__)


class TriviaIndex:
    """Comments and blank-line runs, keyed by the offset of the token they precede."""

    def __init__(self, items: list[Trivia]) -> None:
        self._items = items
        self._by_anchor: dict[int, tuple[Trivia, ...]] = {}
        for item in items:
            self._by_anchor[item.anchor] = (*self._by_anchor.get(item.anchor, ()), item)
        self._anchors = sorted(self._by_anchor)

    def trivia_before(self, offset: int) -> tuple[Trivia, ...]:
        return self._by_anchor.get(offset, ())

    def anchors(self) -> list[int]:
        return list(self._anchors)

    def comments(self) -> list[Trivia]:
        return [item for item in self._items if item.is_comment]

    def __iter__(self) -> Iterator[Trivia]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)


def leaf_ranges(tree: SyntaxTree) -> list[tuple[int, int]]:
    """Byte ranges of the atomic tokens in source order.

    Atomic kinds and error nodes are single tokens even when the grammar
    gives them children, so their insides are never scanned for trivia.
    """
    ranges: list[tuple[int, int]] = []
    # an empty file still has a root node; only an error root is a token itself
    stack = [tree.root] if tree.root.is_error else list(reversed(tree.root.children))
    while stack:
        node = stack.pop()
        if not node.children or node.is_error or is_atomic_kind(node.kind):
            if node.end_byte > node.start_byte:
                ranges.append((node.start_byte, node.end_byte))
            continue
        stack.extend(reversed(node.children))
    return ranges


def build(tree: SyntaxTree) -> TriviaIndex:
    source = tree.source
    end_of_file = len(source)
    items: list[Trivia] = []
    previous_end = 0
    after_token = False
    for start, end in [*leaf_ranges(tree), (end_of_file, end_of_file)]:
        if start > previous_end:
            items.extend(_classify_gap(source, previous_end, start, after_token))
        previous_end = max(previous_end, end)
        after_token = True
    return TriviaIndex(items)


def _classify_gap(source: bytes, start: int, end: int, after_token: bool) -> list[Trivia]:
    lexemes = scan_gap(source, start, end)
    followed_by_token = end < len(source)
    items: list[Trivia] = []
    on_token_line = after_token
    for index, lexeme in enumerate(lexemes):
        is_last = index == len(lexemes) - 1
        if lexeme.kind is LexemeKind.WHITESPACE:
            newlines = source.count(b"\n", lexeme.start, lexeme.end)
            if newlines:
                on_token_line = False
            has_before = after_token or index > 0
            has_after = followed_by_token or not is_last
            if newlines >= 2 and has_before and has_after:
                items.append(
                    Trivia(
                        kind=TriviaKind.BLANK_RUN,
                        start_byte=lexeme.start,
                        end_byte=lexeme.end,
                        anchor=end,
                        blank_lines=newlines - 1,
                    )
                )
            continue

        if lexeme.kind is LexemeKind.LINE_COMMENT:
            kind = TriviaKind.LINE_COMMENT
            newline_after = True
        else:
            if lexeme.kind is LexemeKind.OTHER:
                logger.debug("Unclaimed text at bytes %d-%d kept as a comment", lexeme.start, lexeme.end)
            kind = TriviaKind.BLOCK_COMMENT
            following = lexemes[index + 1] if not is_last else None
            if following is None:
                newline_after = not followed_by_token
            else:
                newline_after = b"\n" in source[following.start : following.end]

        items.append(
            Trivia(
                kind=kind,
                start_byte=lexeme.start,
                end_byte=lexeme.end,
                anchor=end,
                text=source[lexeme.start : lexeme.end].decode("utf-8").rstrip(),
                trailing=on_token_line,
                newline_after=newline_after,
            )
        )
        on_token_line = True
    return items

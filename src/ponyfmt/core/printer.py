"""Tree-to-text renderer.

One depth-first walk over the syntax tree. The indentation level travels
down the recursion in an immutable ``Context``; everything that has to
survive across siblings (the output buffer, the pending line break, the
last written token and the trivia read position) lives in one ``Cursor``.
"""

import logging
from collections.abc import Sequence
from typing import NamedTuple

from ponyfmt.core.lexical import position_of
from ponyfmt.core.rules import (
    BODY_OPENERS,
    CAPABILITIES,
    COMPOUND_KINDS,
    ENTITY_KINDS,
    LINE_LEADING_KEYWORDS,
    MATCH_KINDS,
    MEMBER_KINDS,
    NodeRule,
    Spacing,
    Token,
    classify,
    is_atomic_kind,
    is_block_kind,
    spacing,
)
from ponyfmt.core.trivia import TriviaIndex
from ponyfmt.models import FormatOptions, SyntaxNode, SyntaxTree, Trivia, TriviaKind

logger = logging.getLogger(__name__)

_VERBATIM_RULES = frozenset({NodeRule.ATOMIC, NodeRule.ERROR, NodeRule.UNKNOWN})


class Context(NamedTuple):
    indent: int = 0

    def deeper(self) -> "Context":
        return Context(self.indent + 1)


class LineBreak(NamedTuple):
    indent: int
    blank: bool = False
    allow_blank: bool = True
    comment_indent: int | None = None


class Cursor:
    def __init__(self, tree: SyntaxTree, trivia: TriviaIndex, indent_width: int) -> None:
        self._source = tree.source
        self._end_of_file = len(tree.source)
        self._trivia = trivia
        self._anchors = trivia.anchors()
        self._next_anchor = 0
        self._indent_width = indent_width
        self._parts: list[str] = []
        self._line_has_content = False
        self._pending: LineBreak | None = None
        self._source_blank = False
        self._line_level = 0
        self.last: Token | None = None
        self.after_body = False

    def break_line(
        self,
        indent: int,
        *,
        blank: bool = False,
        allow_blank: bool = True,
        comment_indent: int | None = None,
    ) -> None:
        """Ask for the next token to start a fresh line at ``indent``."""
        if self._pending is not None:
            blank = blank or self._pending.blank
        self._pending = LineBreak(indent, blank, allow_blank, comment_indent)
        self.after_body = False

    def write(self, token: Token, start: int, ctx: Context) -> None:
        self._flush_trivia(start, ctx)
        self._place(token)
        self._append(token.text)
        self.last = token
        self.after_body = False

    def skip_trivia(self, end: int) -> None:
        """Drop trivia anchored inside a span that was copied verbatim."""
        while self._next_anchor < len(self._anchors) and self._anchors[self._next_anchor] < end:
            self._next_anchor += 1

    def finish(self) -> str:
        last_level = self._line_level
        self.break_line(0)
        self._flush_trivia(self._end_of_file, Context(), ceiling=last_level)
        self._pending = None
        text = "".join(self._parts)
        return f"{text}\n" if text else ""

    def _append(self, text: str) -> None:
        self._parts.append(text)
        self._line_has_content = True

    def _place(self, token: Token) -> None:
        if self._pending is not None:
            self._emit_break(self._pending)
        elif self._line_has_content and self.last is not None and spacing(self.last, token) is Spacing.SPACE:
            self._parts.append(" ")

    def _emit_break(self, line_break: LineBreak, indent: int | None = None) -> None:
        if self._parts:
            self._parts.append("\n")
            if line_break.blank or (line_break.allow_blank and self._source_blank):
                self._parts.append("\n")
        level = line_break.indent if indent is None else indent
        self._parts.append(" " * (level * self._indent_width))
        self._line_level = level
        self._line_has_content = False
        self._pending = None
        self._source_blank = False

    def _flush_trivia(self, offset: int, ctx: Context, ceiling: int | None = None) -> None:
        while self._next_anchor < len(self._anchors) and self._anchors[self._next_anchor] <= offset:
            anchor = self._anchors[self._next_anchor]
            self._next_anchor += 1
            for item in self._trivia.trivia_before(anchor):
                self._write_trivia(item, ctx, ceiling)

    def _source_level(self, item: Trivia) -> int:
        _, column = position_of(self._source, item.start_byte)
        return column // self._indent_width

    def _write_trivia(self, item: Trivia, ctx: Context, ceiling: int | None = None) -> None:
        """Place one comment or blank run ahead of the next token.

        ``ceiling`` is set only for trivia after the last token. An own-line
        comment there keeps its source depth, but never sits deeper than the
        last line written.
        """
        if item.kind is TriviaKind.BLANK_RUN:
            if self._pending is not None:
                self._source_blank = True
            return

        comment = Token(item.text, item.kind, False)
        if item.trailing and self._line_has_content:
            self._parts.append(" ")
            self._append(item.text)
            self.last = comment
            if item.newline_after and self._pending is None:
                self._pending = LineBreak(ctx.indent + 1)
            return

        resume = self._pending
        if resume is not None:
            level = resume.indent if resume.comment_indent is None else resume.comment_indent
            if ceiling is not None:
                level = min(ceiling, self._source_level(item))
            self._emit_break(resume, level)
        elif self._line_has_content:
            resume = LineBreak(ctx.indent + 1)
            self._emit_break(resume)
        self._append(item.text)
        self.last = comment
        if item.newline_after:
            self._pending = resume._replace(blank=False) if resume is not None else LineBreak(ctx.indent)


class Printer:
    def __init__(self, tree: SyntaxTree, trivia: TriviaIndex, options: FormatOptions) -> None:
        self._tree = tree
        self._cursor = Cursor(tree, trivia, options.indent_width)

    def render(self) -> str:
        self._node(self._tree.root, Context(), "")
        return self._cursor.finish()

    # -- dispatch -----------------------------------------------------------

    def _node(self, node: SyntaxNode, ctx: Context, parent_kind: str) -> None:
        rule = classify(node.kind, node.is_error)
        if rule is NodeRule.SOURCE_FILE:
            self._source_file(node, ctx)
        elif not node.children or rule in _VERBATIM_RULES:
            self._verbatim(node, ctx, parent_kind, rule)
        elif rule is NodeRule.ENTITY:
            self._entity(node, ctx)
        elif rule is NodeRule.MEMBERS:
            self._lines(node.children, ctx, node.kind)
        elif rule is NodeRule.METHOD:
            self._method(node, ctx)
        elif rule is NodeRule.CASE:
            self._case(node, ctx)
        else:
            self._inline(node, ctx)

    def _verbatim(self, node: SyntaxNode, ctx: Context, parent_kind: str, rule: NodeRule) -> None:
        text = self._tree.text(node)
        if rule is not NodeRule.ATOMIC and node.children:
            # unparsed spans keep their inner layout but not trailing whitespace
            text = text.rstrip()
            logger.debug("Copying %s at byte %d verbatim", node.kind, node.start_byte)
        if not text:
            return
        self._cursor.write(Token(text, node.kind, node.named, parent_kind), node.start_byte, ctx)
        self._cursor.skip_trivia(node.end_byte)

    # -- line-oriented containers -------------------------------------------

    def _source_file(self, node: SyntaxNode, ctx: Context) -> None:
        previous_item: SyntaxNode | None = None
        previous: SyntaxNode | None = None
        for child in self._fold_error_lines(node.children):
            if self._starts_line(previous, child):
                blank = previous_item is not None and (
                    previous_item.kind in ENTITY_KINDS or child.kind in ENTITY_KINDS
                )
                self._cursor.break_line(ctx.indent, blank=blank)
                previous_item = child
            self._node(child, ctx, node.kind)
            previous = child

    def _entity(self, node: SyntaxNode, ctx: Context) -> None:
        inner = ctx.deeper()
        has_members = False
        previous: SyntaxNode | None = None
        before_previous: SyntaxNode | None = None
        for child in self._fold_error_lines(node.children):
            rule = classify(child.kind, child.is_error)
            if rule is NodeRule.MEMBERS:
                self._lines(child.children, inner, child.kind, allow_first_blank=has_members)
                has_members = has_members or bool(child.named_children)
            elif child.kind in MEMBER_KINDS or self._is_docstring(child):
                self._cursor.break_line(inner.indent, allow_blank=has_members)
                self._node(child, inner, node.kind)
                has_members = True
            else:
                self._child(child, node, ctx, previous, before_previous)
            before_previous, previous = previous, child
        if has_members:
            self._cursor.after_body = True

    def _method(self, node: SyntaxNode, ctx: Context) -> None:
        arrow = self._find_token(node.children, "=>")
        header = self._fold_error_lines(node.children if arrow is None else node.children[: arrow + 1])
        previous: SyntaxNode | None = None
        before_previous: SyntaxNode | None = None
        for child in header:
            if self._is_docstring(child):
                self._cursor.break_line(ctx.indent + 1)
                self._node(child, ctx.deeper(), node.kind)
            else:
                self._child(child, node, ctx, previous, before_previous)
            before_previous, previous = previous, child
        if arrow is not None:
            self._body(node.children[arrow + 1 :], ctx.deeper(), node.kind)

    def _lines(
        self,
        children: Sequence[SyntaxNode],
        ctx: Context,
        parent_kind: str,
        allow_first_blank: bool = False,
    ) -> None:
        """Write each item on its own line; anonymous tokens stay with their neighbours."""
        first = True
        previous: SyntaxNode | None = None
        for child in self._fold_error_lines(children):
            if self._starts_line(previous, child):
                self._cursor.break_line(ctx.indent, allow_blank=allow_first_blank or not first)
                first = False
            self._node(child, ctx, parent_kind)
            previous = child

    def _body(self, nodes: Sequence[SyntaxNode], ctx: Context, parent_kind: str) -> None:
        statements: list[SyntaxNode] = []
        for node in nodes:
            target = self._unwrap_block(node)
            if is_block_kind(target.kind):
                statements.extend(target.children)
                parent_kind = target.kind
            else:
                statements.append(target)
        if not statements:
            return
        self._lines(statements, ctx, parent_kind)
        self._cursor.after_body = True

    # -- inline rendering ---------------------------------------------------

    def _inline(self, node: SyntaxNode, ctx: Context) -> None:
        previous: SyntaxNode | None = None
        before_previous: SyntaxNode | None = None
        for child in self._fold_error_lines(node.children):
            self._child(child, node, ctx, previous, before_previous)
            before_previous, previous = previous, child

    def _case(self, node: SyntaxNode, ctx: Context) -> None:
        children = self._fold_error_lines(node.children)
        arrow = self._find_token(children, "=>")
        previous: SyntaxNode | None = None
        before_previous: SyntaxNode | None = None
        for index, child in enumerate(children):
            if arrow is not None and index > arrow and child.named and not self._fits_on_case_line(child):
                self._body([child], ctx.deeper(), node.kind)
            else:
                self._child(child, node, ctx, previous, before_previous)
            before_previous, previous = previous, child

    def _child(
        self,
        child: SyntaxNode,
        parent: SyntaxNode,
        ctx: Context,
        previous: SyntaxNode | None,
        before_previous: SyntaxNode | None,
    ) -> None:
        cursor = self._cursor
        rule = classify(child.kind, child.is_error)
        token_text = self._token_text(child)

        if token_text in LINE_LEADING_KEYWORDS or cursor.after_body:
            cursor.break_line(ctx.indent, allow_blank=False, comment_indent=ctx.indent + 1)
        elif rule is NodeRule.CASE or (token_text == "|" and parent.kind in MATCH_KINDS):
            cursor.break_line(ctx.indent)
        elif (
            previous is not None
            and (previous.is_error or child.is_error or (previous.named and child.named))
            and self._split_in_source(previous, child)
        ):
            # juxtaposed expressions are only separated by the newline between them
            cursor.break_line(ctx.indent + 1)

        if child.named and self._opens_body(previous, before_previous, child):
            self._body([child], ctx.deeper(), parent.kind)
        elif rule is NodeRule.BLOCK and self._needs_lines(child):
            self._body([child], ctx.deeper(), parent.kind)
        else:
            self._node(child, ctx, parent.kind)

    # -- predicates ---------------------------------------------------------

    def _token_text(self, node: SyntaxNode) -> str | None:
        if node.named or node.children:
            return None
        return self._tree.text(node)

    def _find_token(self, children: Sequence[SyntaxNode], text: str) -> int | None:
        for index, child in enumerate(children):
            if self._token_text(child) == text:
                return index
        return None

    def _starts_line(self, previous: SyntaxNode | None, child: SyntaxNode) -> bool:
        if not child.named:
            return False
        if previous is None or previous.named:
            return True
        return self._token_text(previous) == ";"

    def _is_docstring(self, node: SyntaxNode) -> bool:
        return node.named and is_atomic_kind(node.kind) and "string" in node.kind

    def _is_capability(self, node: SyntaxNode) -> bool:
        return node.kind in ("capability", "annotation") or self._tree.text(node) in CAPABILITIES

    def _opens_body(self, previous: SyntaxNode | None, before_previous: SyntaxNode | None, child: SyntaxNode) -> bool:
        if previous is None or self._is_capability(child):
            return False
        opener = self._token_text(previous)
        if opener in BODY_OPENERS:
            return True
        # recover val ... end
        return (
            before_previous is not None
            and self._token_text(before_previous) == "recover"
            and self._tree.text(previous) in CAPABILITIES
        )

    def _unwrap_block(self, node: SyntaxNode) -> SyntaxNode:
        while (
            not is_block_kind(node.kind)
            and node.children
            and len(node.children) == 1
            and is_block_kind(node.children[0].kind)
        ):
            node = node.children[0]
        return node

    def _statements_of(self, node: SyntaxNode) -> list[SyntaxNode]:
        target = self._unwrap_block(node)
        if not is_block_kind(target.kind):
            return [target]
        statements: list[SyntaxNode] = []
        previous: SyntaxNode | None = None
        for child in target.children:
            if self._starts_line(previous, child):
                statements.append(child)
            previous = child
        return statements

    def _needs_lines(self, block: SyntaxNode) -> bool:
        """Two statements without a ``;`` between them cannot share a line."""
        previous: SyntaxNode | None = None
        for child in block.children:
            if previous is not None and previous.named and child.named:
                return True
            previous = child
        return False

    def _fits_on_case_line(self, body: SyntaxNode) -> bool:
        statements = self._statements_of(body)
        if len(statements) != 1:
            return False
        target = self._unwrap_block(body)
        if is_block_kind(target.kind) and self._needs_lines(target):
            return False
        return statements[0].kind not in COMPOUND_KINDS

    def _split_in_source(self, previous: SyntaxNode, child: SyntaxNode) -> bool:
        if classify(child.kind, child.is_error) is NodeRule.BLOCK:
            return False
        return self._newline_between(previous, child)

    def _newline_between(self, previous: SyntaxNode, child: SyntaxNode) -> bool:
        return b"\n" in self._tree.source[previous.end_byte : child.start_byte]

    def _fold_error_lines(self, children: Sequence[SyntaxNode]) -> list[SyntaxNode]:
        """Fold the siblings sharing a source line with an ``ERROR`` node into one verbatim span.

        Recovery regions keep their original text even where tree-sitter split
        them into several siblings.
        """
        if not any(child.is_error for child in children):
            return list(children)
        segments: list[list[SyntaxNode]] = []
        for child in children:
            if segments and not self._newline_between(segments[-1][-1], child):
                segments[-1].append(child)
            else:
                segments.append([child])
        folded: list[SyntaxNode] = []
        for segment in segments:
            if len(segment) > 1 and any(node.is_error for node in segment):
                folded.append(_error_span(segment))
            else:
                folded.extend(segment)
        return folded


def _error_span(nodes: Sequence[SyntaxNode]) -> SyntaxNode:
    first, last = nodes[0], nodes[-1]
    return SyntaxNode(
        kind="ERROR",
        start_byte=first.start_byte,
        end_byte=last.end_byte,
        start_point=first.start_point,
        end_point=last.end_point,
        is_error=True,
        children=list(nodes),
    )


def render(tree: SyntaxTree, trivia: TriviaIndex, options: FormatOptions) -> str:
    return Printer(tree, trivia, options).render()

"""Shared fixtures and helpers for tests."""

from pathlib import Path
from typing import NamedTuple

import pytest
from tree_sitter import Parser
from tree_sitter_language_pack import get_parser

from ponyfmt.core.lexical import position_of
from ponyfmt.models import Position, SyntaxNode, SyntaxTree

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# TreeBuilder: hand-built syntax trees with real byte ranges
# ---------------------------------------------------------------------------


class Leaf(NamedTuple):
    text: str
    kind: str | None = None


class Branch(NamedTuple):
    kind: str
    children: tuple["Leaf | Branch", ...]


class TreeBuilder:
    """Build a ``SyntaxTree`` whose leaves are located in ``source`` left to right.

    ``leaf("=>")`` is an anonymous token; ``leaf("Main", "identifier")`` is a
    named one. A branch kind of ``ERROR`` produces an error node.
    """

    @staticmethod
    def leaf(text: str, kind: str | None = None) -> Leaf:
        return Leaf(text, kind)

    @staticmethod
    def node(kind: str, *children: Leaf | Branch) -> Branch:
        return Branch(kind, children)

    def tree(self, source: str, *items: Leaf | Branch, root_kind: str = "source_file") -> SyntaxTree:
        data = source.encode("utf-8")
        cursor = 0

        def point(offset: int) -> Position:
            row, column = position_of(data, offset)
            return Position(row=row, column=column)

        def convert(item: Leaf | Branch) -> SyntaxNode:
            nonlocal cursor
            if isinstance(item, Leaf):
                text = item.text.encode("utf-8")
                start = data.index(text, cursor)
                cursor = start + len(text)
                return SyntaxNode(
                    kind=item.kind or item.text,
                    start_byte=start,
                    end_byte=cursor,
                    start_point=point(start),
                    end_point=point(cursor),
                    named=item.kind is not None,
                )
            children = [convert(child) for child in item.children]
            start = children[0].start_byte if children else cursor
            end = children[-1].end_byte if children else cursor
            return SyntaxNode(
                kind=item.kind,
                start_byte=start,
                end_byte=end,
                start_point=point(start),
                end_point=point(end),
                is_error=item.kind == "ERROR",
                children=children,
            )

        children = [convert(item) for item in items]
        root = SyntaxNode(
            kind=root_kind,
            start_byte=0,
            end_byte=len(data),
            start_point=point(0),
            end_point=point(len(data)),
            children=children,
        )
        return SyntaxTree(source=data, root=root)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def trees() -> TreeBuilder:
    return TreeBuilder()


@pytest.fixture
def pony_parser() -> Parser:
    """Return a tree-sitter parser for Pony."""
    return get_parser("pony")


@pytest.fixture
def hello_world() -> str:
    return 'actor Main\n  new create(env: Env) =>\n    env.out.print("Hello, World!")\n'

from typing import cast

from tree_sitter import Node
from tree_sitter_language_pack import SupportedLanguage, get_parser

from ponyfmt.core.lexical import find_unterminated, position_of
from ponyfmt.errors import PonySyntaxError
from ponyfmt.models import Position, SyntaxNode, SyntaxTree

LANGUAGE = "pony"


def _syntax_error(source: bytes, offset: int, message: str) -> PonySyntaxError:
    row, column = position_of(source, offset)
    return PonySyntaxError(message, offset, row + 1, column + 1)


def _is_comment(node: Node) -> bool:
    return "comment" in node.type


def _node_to_model(node: Node, source: bytes) -> SyntaxNode:
    if node.is_missing:
        raise _syntax_error(source, node.start_byte, f"missing {node.type}")

    children = [_node_to_model(child, source) for child in node.children if not _is_comment(child)]

    return SyntaxNode(
        kind=node.type,
        start_byte=node.start_byte,
        end_byte=node.end_byte,
        start_point=Position(row=node.start_point[0], column=node.start_point[1]),
        end_point=Position(row=node.end_point[0], column=node.end_point[1]),
        named=node.is_named,
        is_error=node.is_error,
        children=children,
    )


def parse(source: str) -> SyntaxTree:
    """Parse one Pony compilation unit.

    Raises ``PonySyntaxError`` for input that cannot be formatted safely:
    unterminated literals or block comments, and tokens the parser had to
    invent. Other grammar errors stay in the tree as ``ERROR`` nodes.
    """
    source_bytes = source.encode("utf-8")

    unterminated = find_unterminated(source_bytes)
    if unterminated is not None:
        raise _syntax_error(source_bytes, unterminated.offset, unterminated.message)

    parser = get_parser(cast(SupportedLanguage, LANGUAGE))
    tree = parser.parse(source_bytes)
    if tree is None:
        raise _syntax_error(source_bytes, 0, "failed to parse Pony source")

    return SyntaxTree(source=source_bytes, root=_node_to_model(tree.root_node, source_bytes))

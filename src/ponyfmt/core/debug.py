from ponyfmt.core import trivia as trivia_index
from ponyfmt.core.parser import parse
from ponyfmt.models import SyntaxNode, SyntaxTree


def _describe(tree: SyntaxTree, node: SyntaxNode) -> str:
    start, end = node.start_point, node.end_point
    span = f"{node.kind}@{start.row}:{start.column}-{end.row}:{end.column}"
    if node.children:
        return span
    text = tree.text(node)
    shown = repr(text) if "\n" in text else f"'{text}'"
    return f"{span} {shown}"


def dump_tree(source: str) -> str:
    """Render the parsed tree one node per line, indented by depth, followed by its trivia."""
    tree = parse(source)
    lines = [f"{'  ' * depth}{_describe(tree, node)}" for node, depth in tree.walk()]

    trivia = trivia_index.build(tree)
    if len(trivia):
        lines.append("trivia:")
        for item in trivia:
            detail = f"{item.blank_lines} blank line(s)" if not item.is_comment else repr(item.text)
            placement = " trailing" if item.trailing else ""
            lines.append(f"  {item.kind}@{item.start_byte}-{item.end_byte} before {item.anchor}{placement}: {detail}")
    return "\n".join(lines) + "\n"

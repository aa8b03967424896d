from collections.abc import Iterator
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, PositiveInt


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: int
    column: int


class SyntaxNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: str
    start_byte: int
    end_byte: int
    start_point: Position
    end_point: Position
    named: bool = True
    is_error: bool = False
    children: list["SyntaxNode"] = []

    @property
    def named_children(self) -> list["SyntaxNode"]:
        return [child for child in self.children if child.named]


SyntaxNode.model_rebuild()  # necessary for recursive types


class SyntaxTree(BaseModel):
    """A parsed compilation unit: the UTF-8 source and the root node over it."""

    model_config = ConfigDict(frozen=True)

    source: bytes
    root: SyntaxNode

    def text(self, node: SyntaxNode) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8")

    def slice(self, start: int, end: int) -> str:
        return self.source[start:end].decode("utf-8")

    def walk(self) -> Iterator[tuple[SyntaxNode, int]]:
        """Yield ``(node, depth)`` pairs in pre-order."""
        stack = [(self.root, 0)]
        while stack:
            node, depth = stack.pop()
            yield node, depth
            stack.extend((child, depth + 1) for child in reversed(node.children))

    def error_nodes(self) -> list[SyntaxNode]:
        errors: list[SyntaxNode] = []
        stack = [self.root]
        while stack:
            node = stack.pop()
            if node.is_error:
                errors.append(node)
                continue
            stack.extend(reversed(node.children))
        return errors


class TriviaKind(StrEnum):
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    BLANK_RUN = "blank_run"


class Trivia(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: TriviaKind
    start_byte: int
    end_byte: int
    anchor: int
    text: str = ""
    blank_lines: int = 0
    trailing: bool = False
    newline_after: bool = True

    @property
    def is_comment(self) -> bool:
        return self.kind is not TriviaKind.BLANK_RUN


class Mode(StrEnum):
    STDOUT = "stdout"
    WRITE = "write"
    CHECK = "check"


class FormatOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    indent_width: PositiveInt = 2
    mode: Mode = Mode.STDOUT


class ErrorSpan(BaseModel):
    """A recoverable grammar error copied through verbatim."""

    start_byte: int
    end_byte: int
    start_point: Position
    text: str

    def describe(self) -> str:
        return f"unparsed input at {self.start_point.row + 1}:{self.start_point.column + 1} passed through verbatim"


class FormatOutcome(BaseModel):
    text: str
    warnings: list[ErrorSpan] = []


class FileResult(BaseModel):
    path: Path
    changed: bool = False
    formatted: str | None = None
    error: str | None = None
    warnings: list[str] = []

    @property
    def ok(self) -> bool:
        return self.error is None


class RunSummary(BaseModel):
    mode: Mode
    results: list[FileResult] = []

    @property
    def changed(self) -> list[FileResult]:
        return [r for r in self.results if r.ok and r.changed]

    @property
    def failed(self) -> list[FileResult]:
        return [r for r in self.results if not r.ok]

    def exit_code(self) -> int:
        if self.failed:
            return 1
        if self.mode is Mode.CHECK and self.changed:
            return 1
        return 0

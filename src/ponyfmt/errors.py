class FormatError(Exception):
    """Base class for every failure the formatting core reports."""


class PonySyntaxError(FormatError):
    """Source that could not be parsed into a usable tree.

    ``line`` and ``column`` are one-based; ``offset`` is a byte offset into
    the UTF-8 encoded source.
    """

    def __init__(self, message: str, offset: int, line: int, column: int) -> None:
        super().__init__(f"{line}:{column}: syntax error: {message}")
        self.message = message
        self.offset = offset
        self.line = line
        self.column = column

import logging

from ponyfmt.core import trivia as trivia_index
from ponyfmt.core.parser import parse
from ponyfmt.core.printer import render
from ponyfmt.models import ErrorSpan, FormatOptions, FormatOutcome

logger = logging.getLogger(__name__)


def format_report(source: str, options: FormatOptions | None = None) -> FormatOutcome:
    """Format one Pony source unit and report the spans copied through unparsed.

    ``PonySyntaxError`` from the parser propagates unchanged; nothing is
    rendered in that case.
    """
    opts = options or FormatOptions()
    tree = parse(source)

    warnings = [
        ErrorSpan(
            start_byte=node.start_byte,
            end_byte=node.end_byte,
            start_point=node.start_point,
            text=tree.text(node),
        )
        for node in tree.error_nodes()
    ]
    for span in warnings:
        logger.warning("%s", span.describe())

    trivia = trivia_index.build(tree)
    logger.debug("Rendering %d bytes with %d trivia item(s)", len(tree.source), len(trivia))
    return FormatOutcome(text=render(tree, trivia, opts), warnings=warnings)


def format_source(source: str, options: FormatOptions | None = None) -> str:
    """Return ``source`` reformatted. ``options.mode`` never changes the result."""
    return format_report(source, options).text

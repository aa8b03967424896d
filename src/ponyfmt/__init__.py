from ponyfmt.core.debug import dump_tree
from ponyfmt.core.formatter import format_report, format_source
from ponyfmt.errors import FormatError, PonySyntaxError
from ponyfmt.models import FormatOptions, Mode

__version__ = "0.1.0"

__all__ = [
    "FormatError",
    "FormatOptions",
    "Mode",
    "PonySyntaxError",
    "__version__",
    "dump_tree",
    "format_report",
    "format_source",
]

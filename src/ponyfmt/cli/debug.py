from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from ponyfmt.core.debug import dump_tree
from ponyfmt.errors import FormatError

err_console = Console(stderr=True)


def debug(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="Pony file to inspect.")],
) -> None:
    """Print the syntax tree and trivia of a Pony file."""
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        err_console.print(f"[red]error[/red] {escape(f'{path}: cannot read: {exc}')}")
        raise typer.Exit(1) from exc

    try:
        dump = dump_tree(source)
    except FormatError as exc:
        err_console.print(f"[red]error[/red] {escape(f'{path}:{exc}')}")
        raise typer.Exit(1) from exc

    typer.echo(f"===== {path} =====")
    typer.echo(dump, nl=False)

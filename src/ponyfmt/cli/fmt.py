from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from ponyfmt.config import get_indent_width, get_worker_count
from ponyfmt.core.files import collect_pony_files
from ponyfmt.core.runner import run_files
from ponyfmt.models import FormatOptions, Mode, RunSummary

console = Console()
err_console = Console(stderr=True)


def _report(summary: RunSummary) -> None:
    for result in summary.results:
        for warning in result.warnings:
            err_console.print(f"[yellow]warning[/yellow] {escape(str(result.path))}: {escape(warning)}")
        if result.error is not None:
            err_console.print(f"[red]error[/red] {escape(result.error)}")
        elif summary.mode is Mode.STDOUT and result.formatted is not None:
            # Plain echo; formatted source must not be read as rich markup.
            typer.echo(f"===== {result.path} =====")
            typer.echo(result.formatted, nl=False)
        elif summary.mode is Mode.CHECK and result.changed:
            console.print(f"would reformat {escape(str(result.path))}")

    if summary.mode is Mode.CHECK and not summary.changed and not summary.failed:
        console.print(f"[green]{len(summary.results)} file(s) already formatted[/green]")


def fmt(
    paths: Annotated[list[str] | None, typer.Argument(help="Files or directories to format.")] = None,
    write: Annotated[bool, typer.Option("--write", "-w", help="Rewrite files in place.")] = False,
    check: Annotated[bool, typer.Option("--check", help="Exit non-zero if any file would change.")] = False,
    indent: Annotated[int | None, typer.Option(min=1, help="Spaces per indentation level.")] = None,
    workers: Annotated[int | None, typer.Option(min=1, help="Number of files formatted in parallel.")] = None,
) -> None:
    """Format Pony source files."""
    if write and check:
        err_console.print("[red]error[/red] --write and --check cannot be combined")
        raise typer.Exit(2)

    mode = Mode.WRITE if write else Mode.CHECK if check else Mode.STDOUT
    options = FormatOptions(indent_width=indent or get_indent_width(), mode=mode)

    files = collect_pony_files(paths or [])
    if not files:
        err_console.print("No .pony files found.")
        raise typer.Exit(0)

    summary = run_files(files, options, workers=workers or get_worker_count())
    _report(summary)
    raise typer.Exit(summary.exit_code())

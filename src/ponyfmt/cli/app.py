import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from ponyfmt import __version__
from ponyfmt.cli.debug import debug
from ponyfmt.cli.fmt import fmt
from ponyfmt.config import get_log_level

app = typer.Typer(
    name="ponyfmt",
    help="Pony source formatter.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version(value: bool) -> None:
    if value:
        typer.echo(f"ponyfmt {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else get_log_level(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug details to stderr.")] = False,
    version: Annotated[
        bool, typer.Option("--version", callback=_version, is_eager=True, help="Show the version and exit.")
    ] = False,
) -> None:
    configure_logging(verbose)


app.command("fmt")(fmt)
app.command("debug")(debug)


def main() -> None:
    app()

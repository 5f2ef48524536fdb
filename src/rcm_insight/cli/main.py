"""Root callback: global options shared by every subcommand."""

from pathlib import Path
from typing import Optional

import typer

from ..exceptions import RcmInsightError
from ..config import load_config
from ..logging_config import setup_logging
from . import app
from ._common import console, fail


@app.callback(invoke_without_command=True, no_args_is_help=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose (DEBUG) logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress all but ERROR logging",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path (TOML format)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write logs to this file",
        dir_okay=False,
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Build, filter, score and export a Risk-Control Matrix.

    [bold cyan]Examples:[/bold cyan]

      rcm-insight summary rcm.json

      rcm-insight tree rcm.json --search payroll --view subprocess

      rcm-insight export rcm.json --output-dir exports/
    """
    if version:
        from .. import __version__

        console.print(f"[bold cyan]RCM Insight[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config(config_file=config, verbose=verbose, quiet=quiet)
    except RcmInsightError as e:
        fail(e)

    setup_logging(ctx.obj["config"].verbosity, log_file=str(log_file) if log_file else None)

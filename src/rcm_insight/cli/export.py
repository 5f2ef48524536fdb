"""Export CLI command -- full-matrix CSV dump."""

from pathlib import Path
from typing import Optional

import typer

from ..formatters import write_export
from . import app
from ._common import SOURCE_ARGUMENT, console, get_config, load_view


@app.command()
def export(
    ctx: typer.Context,
    source: Path = SOURCE_ARGUMENT,
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Directory for rcm-export-<date>.csv (default from config)",
        file_okay=False,
    ),
):
    """
    Export every node of the matrix to CSV.

    Filters never apply to the export; it always contains the whole source.

    [bold cyan]Examples:[/bold cyan]

      rcm-insight export rcm.json

      rcm-insight export rcm.json -o exports/
    """
    config = get_config(ctx)
    view = load_view(ctx, source)
    directory = output_dir if output_dir is not None else config.export_path
    path = write_export(view.matrix, directory)
    console.print(f"[green]Exported {len(view.matrix.nodes)} rows to {path}[/green]")

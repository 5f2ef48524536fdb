"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ..api import MatrixView, build_view
from ..config import MatrixConfig, load_config
from ..exceptions import RcmInsightError
from ..matrix.filters import FilterCriteria
from ..matrix.models import RCMMatrix
from ..matrix.source import load_matrix

console = Console()

SOURCE_ARGUMENT = typer.Argument(
    ...,
    help="Graph source JSON file (nodes, relationships, statistics)",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
)


def get_config(ctx: typer.Context) -> MatrixConfig:
    """Config resolved by the root callback, or defaults when run standalone."""
    if ctx.obj and "config" in ctx.obj:
        return ctx.obj["config"]
    return load_config()


def fail(error: RcmInsightError) -> None:
    console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(1)


def load_view(
    ctx: typer.Context, source: Path, criteria: Optional[FilterCriteria] = None
) -> MatrixView:
    """Load ``source`` and build its view, turning domain errors into exit 1."""
    config = get_config(ctx)
    try:
        matrix: RCMMatrix = load_matrix(source)
        return build_view(matrix, criteria, config)
    except RcmInsightError as e:
        fail(e)

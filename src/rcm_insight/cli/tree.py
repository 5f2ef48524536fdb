"""Tree CLI command -- filtered hierarchy view."""

from pathlib import Path
from typing import List, Optional

import typer

from ..formatters import RichFormatter, get_formatter
from ..matrix.filters import FilterCriteria
from . import app
from ._common import SOURCE_ARGUMENT, console, get_config, load_view


@app.command()
def tree(
    ctx: typer.Context,
    source: Path = SOURCE_ARGUMENT,
    search: Optional[str] = typer.Option(
        None,
        "--search",
        "-s",
        help="Case-insensitive name search; matches keep their ancestors",
    ),
    effectiveness: str = typer.Option(
        "all",
        "--effectiveness",
        "-e",
        help="Controls only: effective, partially-effective, ineffective, not-tested, pending, all",
    ),
    risk_level: str = typer.Option(
        "all",
        "--risk-level",
        "-r",
        help="Risks only: impact level such as high, medium, low, all",
    ),
    uncovered: bool = typer.Option(
        False,
        "--uncovered",
        help="Show only risks without any control",
    ),
    view: Optional[str] = typer.Option(
        None,
        "--view",
        help="Depth: process, subprocess, full (default from config)",
    ),
    expand: Optional[List[str]] = typer.Option(
        None,
        "--expand",
        help="Node id to expand (repeatable); everything is expanded when omitted",
    ),
    fmt: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="Output format: rich (default), json, csv",
    ),
):
    """
    Show the matrix hierarchy with filters applied.

    [bold cyan]Examples:[/bold cyan]

      rcm-insight tree rcm.json --view subprocess

      rcm-insight tree rcm.json --risk-level high --uncovered

      rcm-insight tree rcm.json --search reconciliation --format json
    """
    config = get_config(ctx)
    try:
        criteria = FilterCriteria.from_options(
            search=search,
            effectiveness=effectiveness,
            risk_level=risk_level,
            uncovered_only=uncovered,
            view=view or config.default_view,
        )
        formatter = get_formatter(fmt)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    result = load_view(ctx, source, criteria)
    if isinstance(formatter, RichFormatter) and expand:
        formatter = RichFormatter(expanded=set(expand))
    formatter.render(result.matrix, result.filtered)

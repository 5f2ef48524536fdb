"""Validate CLI command -- integrity report for a graph source."""

from pathlib import Path

import typer

from ..exceptions import RcmInsightError
from ..matrix.source import load_matrix
from ..matrix.validation import check_integrity
from . import app
from ._common import SOURCE_ARGUMENT, console, fail


@app.command()
def validate(
    ctx: typer.Context,
    source: Path = SOURCE_ARGUMENT,
):
    """
    Check that nodes and relationships form a well-formed forest.

    Exits with code 1 when dangling edges, multiple parents, cycles or
    unreachable nodes are found. Hierarchy-order and parent-field mismatches
    are reported as warnings only.
    """
    try:
        matrix = load_matrix(source)
    except RcmInsightError as e:
        fail(e)

    report = check_integrity(matrix.nodes, matrix.relationships)
    for warning in report.warnings:
        console.print(f"[yellow]warning:[/yellow] {warning}")
    for issue in report.issues:
        console.print(f"[red]issue:[/red] {issue}")

    if not report.is_clean:
        raise typer.Exit(1)
    console.print(f"[green]OK[/green] {len(matrix.nodes)} nodes, {len(matrix.relationships)} relationships")

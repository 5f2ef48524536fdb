"""Summary CLI command -- statistics, health, coverage, distribution."""

import json
from pathlib import Path

import typer
from rich.table import Table

from ..matrix.models import EffectivenessLevel
from ..matrix.statistics import effectiveness_distribution, summarize_controls
from . import app
from ._common import SOURCE_ARGUMENT, console, get_config, load_view


@app.command()
def summary(
    ctx: typer.Context,
    source: Path = SOURCE_ARGUMENT,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Show matrix statistics, control health and risk coverage.

    All numbers are computed from the full source, never from a filtered view.

    [bold cyan]Examples:[/bold cyan]

      rcm-insight summary rcm.json

      rcm-insight summary rcm.json --json
    """
    config = get_config(ctx)
    view = load_view(ctx, source)
    controls = view.matrix.controls
    control_summary = summarize_controls(controls)
    distribution = effectiveness_distribution(controls)
    coverage = view.coverage

    if json_output:
        payload = {
            "statistics": view.statistics.to_dict(),
            "healthScore": view.health_score,
            "automationRate": control_summary.automation_rate,
            "keyControlsAtRisk": control_summary.key_controls_at_risk,
            "coverage": {
                "totalRisks": coverage.total_risks,
                "coveredRisks": coverage.covered_risks,
                "uncoveredRisks": coverage.uncovered_risks,
                "coveragePercentage": round(coverage.coverage_percentage, 1),
                "risksByControlCount": coverage.risks_by_control_count,
                "highRisksWithoutControls": [r.id for r in coverage.high_risks_without_controls],
            },
            "effectiveness": {
                level.value: count for level, count in distribution.by_level.items()
            },
            "effectivePercentage": distribution.effective_percentage,
        }
        print(json.dumps(payload, indent=2))
        return

    stats = view.statistics
    table = Table(title="Risk Control Matrix", show_header=True, header_style="bold cyan")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Total Controls", str(stats.total_controls))
    table.add_row("Key Controls", f"[yellow]{stats.key_controls}[/yellow]")
    table.add_row("Effective Controls", f"[green]{stats.effective_controls}[/green]")
    table.add_row("Risks Without Controls", f"[red]{stats.risks_without_controls}[/red]")
    table.add_row("Untested Controls", str(stats.controls_without_testing))
    table.add_row("Control Health Score", f"{view.health_score}%")
    table.add_row("Automation Rate", f"{control_summary.automation_rate}%")
    table.add_row("Key Controls at Risk", str(control_summary.key_controls_at_risk))
    table.add_row("Risk Coverage", f"{coverage.coverage_percentage:.1f}%")
    console.print(table)

    levels = Table(title="Effectiveness Distribution", header_style="bold cyan")
    levels.add_column("Level")
    levels.add_column("Controls", justify="right")
    levels.add_column("Key", justify="right")
    for level in EffectivenessLevel:
        levels.add_row(
            level.label,
            str(distribution.by_level[level]),
            str(distribution.key_by_level[level]),
        )
    console.print(levels)
    console.print(f"{distribution.effective_percentage}% effective")

    for alert in distribution.key_control_alerts:
        console.print(f"[red]Key Control Alert:[/red] {alert}")

    high_risks = coverage.high_risks_without_controls
    if high_risks:
        console.print("[red bold]High-Risk Alerts[/red bold] (no controls)")
        for risk in high_risks[: config.alert_limit]:
            console.print(
                f"  {risk.name}  Impact: {risk.meta('impact', '')} | "
                f"Likelihood: {risk.meta('likelihood', '')}"
            )
        if len(high_risks) > config.alert_limit:
            console.print(f"  +{len(high_risks) - config.alert_limit} more high-risk items")

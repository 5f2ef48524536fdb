"""Aggregate counters and coverage analytics over the full node set.

Nothing here is filter-sensitive: every function takes the raw node and
relationship lists and recomputes from scratch.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from ..logging_config import get_logger
from .builder import child_index, index_nodes
from .models import EffectivenessLevel, NodeType, RCMNode, Relationship, Statistics
from .scoring import canonicalize, score_health

logger = get_logger(__name__)

DEFAULT_HIGH_IMPACT = ("High", "Critical")


def _control_child_counts(
    nodes: Sequence[RCMNode], relationships: Optional[Iterable[Relationship]]
) -> dict[str, int]:
    """Risk id -> number of control-typed children, for every risk node."""
    index = index_nodes(nodes)
    kids = child_index(index, relationships)
    return {
        node_id: sum(1 for c in kids.get(node_id, ()) if index[c].type is NodeType.CONTROL)
        for node_id, node in index.items()
        if node.is_risk
    }


def compute_statistics(
    nodes: Optional[Iterable[RCMNode]], relationships: Optional[Iterable[Relationship]]
) -> Statistics:
    """Recompute the five summary counters from raw input."""
    node_list = list(index_nodes(nodes).values())
    total = key = effective = untested = 0
    for node in node_list:
        if not node.is_control:
            continue
        total += 1
        if node.is_key_control:
            key += 1
        level = canonicalize(node.effectiveness)
        if level is EffectivenessLevel.EFFECTIVE:
            effective += 1
        elif level is EffectivenessLevel.NOT_TESTED:
            untested += 1

    counts = _control_child_counts(node_list, relationships)
    uncovered = sum(1 for n in counts.values() if n == 0)

    return Statistics(
        total_controls=total,
        key_controls=key,
        effective_controls=effective,
        risks_without_controls=uncovered,
        controls_without_testing=untested,
    )


# ── Coverage ───────────────────────────────────────────────────────


@dataclass
class CoverageReport:
    total_risks: int = 0
    covered_risks: int = 0
    uncovered_risks: int = 0
    coverage_percentage: float = 0.0
    risks_by_control_count: dict[str, int] = field(
        default_factory=lambda: {"none": 0, "single": 0, "multiple": 0}
    )
    high_risks_without_controls: list[RCMNode] = field(default_factory=list)


def compute_coverage(
    nodes: Optional[Iterable[RCMNode]],
    relationships: Optional[Iterable[Relationship]],
    high_impact_levels: Sequence[str] = DEFAULT_HIGH_IMPACT,
) -> CoverageReport:
    """How many risks have at least one control, and which high risks do not."""
    node_list = list(nodes or ())
    counts = _control_child_counts(node_list, relationships)
    index = index_nodes(node_list)

    report = CoverageReport(total_risks=len(counts))
    for risk_id, count in counts.items():
        if count == 0:
            report.risks_by_control_count["none"] += 1
            if index[risk_id].metadata.get("impact") in high_impact_levels:
                report.high_risks_without_controls.append(index[risk_id])
        elif count == 1:
            report.risks_by_control_count["single"] += 1
        else:
            report.risks_by_control_count["multiple"] += 1

    report.uncovered_risks = report.risks_by_control_count["none"]
    report.covered_risks = report.total_risks - report.uncovered_risks
    if report.total_risks:
        report.coverage_percentage = report.covered_risks / report.total_risks * 100
    return report


# ── Effectiveness distribution ─────────────────────────────────────


@dataclass
class EffectivenessDistribution:
    by_level: dict[EffectivenessLevel, int]
    key_by_level: dict[EffectivenessLevel, int]
    total_controls: int = 0
    effective_percentage: int = 0

    @property
    def key_control_alerts(self) -> list[str]:
        """Human-readable warnings for ineffective or untested key controls."""
        alerts = []
        ineffective = self.key_by_level[EffectivenessLevel.INEFFECTIVE]
        untested = self.key_by_level[EffectivenessLevel.NOT_TESTED]
        if ineffective:
            verb = "are" if ineffective > 1 else "is"
            alerts.append(f"{ineffective} key control{'s' if ineffective > 1 else ''} {verb} ineffective")
        if untested:
            verb = "have" if untested > 1 else "has"
            alerts.append(f"{untested} key control{'s' if untested > 1 else ''} {verb} not been tested")
        return alerts


def effectiveness_distribution(controls: Iterable[RCMNode]) -> EffectivenessDistribution:
    by_level = {level: 0 for level in EffectivenessLevel}
    key_by_level = {level: 0 for level in EffectivenessLevel}
    total = 0
    for control in controls:
        if not control.is_control:
            continue
        total += 1
        level = canonicalize(control.effectiveness)
        by_level[level] += 1
        if control.is_key_control:
            key_by_level[level] += 1

    effective_pct = 0
    if total:
        effective_pct = int(np.floor(by_level[EffectivenessLevel.EFFECTIVE] / total * 100 + 0.5))
    return EffectivenessDistribution(
        by_level=by_level,
        key_by_level=key_by_level,
        total_controls=total,
        effective_percentage=effective_pct,
    )


# ── Control health summary ─────────────────────────────────────────


@dataclass(frozen=True)
class ControlSummary:
    total_controls: int
    key_controls: int
    automated_controls: int
    automation_rate: int
    key_controls_at_risk: int
    health_score: int


def summarize_controls(controls: Iterable[RCMNode]) -> ControlSummary:
    """Headline numbers for a set of controls, including the health score."""
    control_list = [c for c in controls if c.is_control]
    automated = sum(1 for c in control_list if c.metadata.get("automation") == "Automated")
    rate = 0
    if control_list:
        rate = int(np.floor(automated / len(control_list) * 100 + 0.5))
    return ControlSummary(
        total_controls=len(control_list),
        key_controls=sum(1 for c in control_list if c.is_key_control),
        automated_controls=automated,
        automation_rate=rate,
        key_controls_at_risk=sum(
            1 for c in control_list if c.is_key_control and c.status == "Retired"
        ),
        health_score=score_health(control_list),
    )


# ── Process summary ────────────────────────────────────────────────


@dataclass(frozen=True)
class ProcessSummary:
    process: RCMNode
    subprocess_count: int
    risk_count: int
    control_count: int
    key_control_count: int
    high_risk_count: int


def summarize_process(
    process_id: str,
    nodes: Optional[Iterable[RCMNode]],
    relationships: Optional[Iterable[Relationship]],
    high_impact_levels: Sequence[str] = DEFAULT_HIGH_IMPACT,
) -> Optional[ProcessSummary]:
    """Counts of everything under one process; ``None`` for an unknown id."""
    index = index_nodes(nodes)
    process = index.get(process_id)
    if process is None or process.type is not NodeType.PROCESS:
        return None

    kids = child_index(index, relationships)
    by_type: dict[NodeType, list[RCMNode]] = {t: [] for t in NodeType}
    visited = {process_id}
    frontier = list(kids.get(process_id, ()))
    while frontier:
        node_id = frontier.pop()
        if node_id in visited:
            continue
        visited.add(node_id)
        by_type[index[node_id].type].append(index[node_id])
        frontier.extend(kids.get(node_id, ()))

    risks = by_type[NodeType.RISK]
    controls = by_type[NodeType.CONTROL]
    return ProcessSummary(
        process=process,
        subprocess_count=len(by_type[NodeType.SUBPROCESS]),
        risk_count=len(risks),
        control_count=len(controls),
        key_control_count=sum(1 for c in controls if c.is_key_control),
        high_risk_count=sum(1 for r in risks if r.metadata.get("impact") in high_impact_levels),
    )

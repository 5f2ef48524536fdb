"""Public API for RCM Insight.

analyze() runs the whole pipeline on a graph source:

    GraphSource -> build_tree -> filter_tree
                -> compute_statistics / score_health / compute_coverage

Example:
    >>> from rcm_insight import analyze
    >>> view = analyze("rcm.json", search="payroll", view="subprocess")
    >>> view.statistics.total_controls
    12
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .config import MatrixConfig, load_config
from .logging_config import get_logger
from .matrix.builder import build_tree
from .matrix.filters import FilterCriteria, filter_tree
from .matrix.models import RCMMatrix, Statistics, TreeNode
from .matrix.source import load_matrix
from .matrix.statistics import CoverageReport, compute_coverage, compute_statistics
from .matrix.scoring import score_health
from .matrix.validation import IntegrityReport, check_integrity, enforce_integrity

logger = get_logger(__name__)


@dataclass
class MatrixView:
    """One full recomputation: unfiltered forest, filtered forest, aggregates."""

    matrix: RCMMatrix
    roots: list[TreeNode]
    filtered: list[TreeNode]
    criteria: FilterCriteria
    statistics: Statistics
    health_score: int
    coverage: CoverageReport
    integrity: IntegrityReport


def build_view(
    matrix: RCMMatrix,
    criteria: Optional[FilterCriteria] = None,
    config: Optional[MatrixConfig] = None,
) -> MatrixView:
    """Recompute everything for ``matrix`` under ``criteria``.

    Raises:
        GraphIntegrityError: If ``config.strict_integrity`` is set and the
            node/edge set is malformed
    """
    config = config or MatrixConfig()
    criteria = criteria or FilterCriteria.from_options(view=config.default_view)

    integrity = check_integrity(matrix.nodes, matrix.relationships)
    if config.strict_integrity:
        enforce_integrity(integrity)

    roots = build_tree(matrix.nodes, matrix.relationships)
    filtered = filter_tree(roots, criteria)
    statistics = compute_statistics(matrix.nodes, matrix.relationships)
    if statistics != matrix.statistics and matrix.statistics != Statistics():
        logger.info("Source statistics differ from recomputed values; using recomputed")

    return MatrixView(
        matrix=matrix,
        roots=roots,
        filtered=filtered,
        criteria=criteria,
        statistics=statistics,
        health_score=score_health(matrix.controls),
        coverage=compute_coverage(
            matrix.nodes, matrix.relationships, config.high_impact_levels
        ),
        integrity=integrity,
    )


def analyze(
    source: Union[str, Path, RCMMatrix],
    config_file: Optional[Path] = None,
    search: Optional[str] = None,
    effectiveness: Optional[str] = None,
    risk_level: Optional[str] = None,
    uncovered_only: bool = False,
    view: Optional[str] = None,
    **overrides,
) -> MatrixView:
    """Load a graph source and build its view.

    Args:
        source: Path to a JSON graph source, or an already loaded matrix
        config_file: Optional explicit config file path
        search, effectiveness, risk_level, uncovered_only, view: filters
        **overrides: Configuration overrides (e.g. strict_integrity=True)

    Raises:
        RcmInsightError: If configuration or source data is invalid
    """
    config = load_config(config_file=config_file, **overrides)
    matrix = source if isinstance(source, RCMMatrix) else load_matrix(source)
    criteria = FilterCriteria.from_options(
        search=search,
        effectiveness=effectiveness,
        risk_level=risk_level,
        uncovered_only=uncovered_only,
        view=view or config.default_view,
    )
    return build_view(matrix, criteria, config)

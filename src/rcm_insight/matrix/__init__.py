"""Risk-control matrix engine: tree building, scoring, filtering, statistics."""

from .builder import build_tree, child_index, count_nodes, index_nodes, walk
from .filters import FilterCriteria, ViewLevel, filter_tree
from .models import (
    EffectivenessLevel,
    EffectivenessScore,
    NodeType,
    RCMMatrix,
    RCMNode,
    Relationship,
    Statistics,
    TreeNode,
    TrendDirection,
)
from .scoring import (
    canonicalize,
    effectiveness_for,
    parse_level,
    rate_risk,
    score_control,
    score_health,
)
from .source import assemble_matrix, load_matrix, matrix_from_dict
from .statistics import (
    compute_coverage,
    compute_statistics,
    effectiveness_distribution,
    summarize_controls,
    summarize_process,
)
from .validation import IntegrityReport, check_integrity

__all__ = [
    "EffectivenessLevel",
    "EffectivenessScore",
    "FilterCriteria",
    "IntegrityReport",
    "NodeType",
    "RCMMatrix",
    "RCMNode",
    "Relationship",
    "Statistics",
    "TreeNode",
    "TrendDirection",
    "ViewLevel",
    "assemble_matrix",
    "build_tree",
    "canonicalize",
    "check_integrity",
    "child_index",
    "compute_coverage",
    "compute_statistics",
    "count_nodes",
    "effectiveness_distribution",
    "effectiveness_for",
    "filter_tree",
    "index_nodes",
    "load_matrix",
    "matrix_from_dict",
    "parse_level",
    "rate_risk",
    "score_control",
    "score_health",
    "summarize_controls",
    "summarize_process",
    "walk",
]

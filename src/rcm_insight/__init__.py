"""
RCM Insight - Risk-Control Matrix aggregation engine

Turns a flat graph of companies, processes, subprocesses, risks and controls
into a navigable hierarchy, scores control effectiveness, filters the
hierarchy without losing ancestor paths, and exports the full matrix as CSV.
"""

__version__ = "0.1.0"

from .api import MatrixView, analyze, build_view
from .matrix import (
    FilterCriteria,
    RCMMatrix,
    RCMNode,
    Relationship,
    TreeNode,
    build_tree,
    compute_statistics,
    filter_tree,
    load_matrix,
    score_control,
    score_health,
)
from .formatters.csv_formatter import export_rcm

__all__ = [
    "analyze",  # Main entry point
    "build_view",
    "MatrixView",
    "FilterCriteria",
    "RCMMatrix",
    "RCMNode",
    "Relationship",
    "TreeNode",
    "build_tree",
    "compute_statistics",
    "export_rcm",
    "filter_tree",
    "load_matrix",
    "score_control",
    "score_health",
]

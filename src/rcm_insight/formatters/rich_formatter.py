"""Rich terminal formatter for RCM Insight.

Expand/collapse state belongs to the caller: pass the set of expanded node
ids, or ``None`` to show every level. The formatter only reads it.
"""

from typing import AbstractSet, List, Optional

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from ..matrix.models import EffectivenessLevel, NodeType, RCMMatrix, RCMNode, TreeNode
from ..matrix.scoring import RiskRating, effectiveness_for, rate_risk
from .base import BaseFormatter

console = Console()

_LEVEL_STYLES = {
    EffectivenessLevel.EFFECTIVE: "green",
    EffectivenessLevel.PARTIALLY_EFFECTIVE: "yellow",
    EffectivenessLevel.INEFFECTIVE: "red",
    EffectivenessLevel.NOT_TESTED: "dim",
    EffectivenessLevel.PENDING: "blue",
}

_RATING_STYLES = {
    RiskRating.CRITICAL: "red bold",
    RiskRating.HIGH: "dark_orange",
    RiskRating.MEDIUM: "yellow",
    RiskRating.LOW: "green",
    RiskRating.UNRATED: "dim",
}

_TREND_MARKS = {"improving": "↑", "declining": "↓", "stable": "→"}


def node_label(node: RCMNode, collapsed: bool = False) -> Text:
    """One-line label: type badge, name, then type-specific details."""
    label = Text()
    if collapsed:
        label.append("▸ ", style="dim")
    label.append(f"[{node.type.value}] ", style="cyan")
    label.append(node.name, style="bold" if node.type is NodeType.COMPANY else "")

    if node.type is NodeType.RISK and node.metadata.get("impact"):
        impact = node.metadata.get("impact")
        likelihood = node.metadata.get("likelihood")
        rating = rate_risk(impact, likelihood)
        label.append(f"  {impact}/{likelihood or ''}", style=_RATING_STYLES[rating])

    score = effectiveness_for(node)
    if score is not None:
        if node.metadata.get("type"):
            label.append(f"  {node.metadata['type']}", style="magenta")
        label.append(f"  {score.level.label} ({score.score}%)", style=_LEVEL_STYLES[score.level])
        if score.trend is not None:
            label.append(f" {_TREND_MARKS[score.trend.value]}", style="dim")
        if node.metadata.get("frequency"):
            label.append(f"  {node.metadata['frequency']}", style="dim")
        if node.metadata.get("automation"):
            label.append(f"  {node.metadata['automation']}", style="dim")
        if node.is_key_control:
            label.append("  Key Control", style="yellow bold")

    if node.status == "Inactive":
        label.append("  Inactive", style="dim italic")
    return label


def build_rich_tree(
    roots: List[TreeNode],
    expanded: Optional[AbstractSet[str]] = None,
    title: str = "Risk Control Matrix",
) -> Tree:
    """Build a rich Tree; only ids in ``expanded`` show their children."""
    tree = Tree(Text(title, style="bold"))
    if not roots:
        tree.add(
            Text(
                "No RCM data available. Start by creating companies, processes, "
                "risks, and controls.",
                style="dim",
            )
        )
        return tree

    stack = [(root, tree, frozenset()) for root in reversed(roots)]
    while stack:
        tree_node, parent_branch, path = stack.pop()
        is_open = expanded is None or tree_node.id in expanded
        collapsed = bool(tree_node.children) and not is_open
        branch = parent_branch.add(node_label(tree_node.node, collapsed=collapsed))
        if not is_open:
            continue
        path = path | {tree_node.id}
        for child in reversed(tree_node.children):
            if child.id not in path:
                stack.append((child, branch, path))
    return tree


class RichFormatter(BaseFormatter):
    """Tree view of the visible forest."""

    def __init__(self, expanded: Optional[AbstractSet[str]] = None):
        self.expanded = expanded

    def render(self, matrix: RCMMatrix, roots: List[TreeNode]) -> None:
        console.print(build_rich_tree(roots, self.expanded))

    def format(self, matrix: RCMMatrix, roots: List[TreeNode]) -> str:
        capture_console = Console(width=120, color_system=None)
        with capture_console.capture() as capture:
            capture_console.print(build_rich_tree(roots, self.expanded))
        return capture.get()

"""JSON formatter for RCM Insight."""

import json
from typing import Any, Dict, FrozenSet, List

from ..matrix.models import RCMMatrix, TreeNode
from ..matrix.scoring import effectiveness_for
from .base import BaseFormatter


def tree_to_dict(tree_node: TreeNode, path: FrozenSet[str] = frozenset()) -> Dict[str, Any]:
    """Nested plain-dict form of a tree; children already on the path are skipped."""
    node = tree_node.node
    data: Dict[str, Any] = {"id": node.id, "type": node.type.value, "name": node.name}
    if node.status is not None:
        data["status"] = node.status
    score = effectiveness_for(node)
    if score is not None:
        data["effectiveness"] = {
            "level": score.level.value,
            "score": score.score,
            "trend": score.trend.value if score.trend else None,
            "lastTested": score.last_tested.isoformat() if score.last_tested else None,
            "testCount": score.test_count,
            "passRate": score.pass_rate,
        }
    if node.metadata:
        data["metadata"] = node.metadata
    path = path | {node.id}
    data["children"] = [
        tree_to_dict(child, path) for child in tree_node.children if child.id not in path
    ]
    return data


class JsonFormatter(BaseFormatter):
    """Render the visible forest as JSON."""

    def render(self, matrix: RCMMatrix, roots: List[TreeNode]) -> None:
        print(self.format(matrix, roots))

    def format(self, matrix: RCMMatrix, roots: List[TreeNode]) -> str:
        return json.dumps([tree_to_dict(root) for root in roots], indent=2, default=str)

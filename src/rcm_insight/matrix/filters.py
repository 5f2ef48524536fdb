"""Structure-preserving filters over RCM trees.

A node survives when it is inside the view depth and either passes its own
predicates or still has a surviving child, so a match deep in the tree
keeps the whole path to its root visible.

Predicates:
    search          every node, case-insensitive substring of the name
    effectiveness   control nodes only
    risk_level      risk nodes only, against metadata ``impact``
    uncovered_only  risk nodes only, structural "has a control child"
    view            hard cap on node type

A node that fails a type-scoped predicate passes that failure down to its
descendants in place of their exemption: a control under a filtered-out
risk cannot keep that risk alive on its own. Search is never inherited.

filter_tree never touches its input; every surviving node is a new
TreeNode sharing the immutable RCMNode record.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..logging_config import get_logger
from .models import EffectivenessLevel, NodeType, TreeNode
from .scoring import canonicalize, parse_level

logger = get_logger(__name__)


class ViewLevel(str, Enum):
    PROCESS = "process"
    SUBPROCESS = "subprocess"
    FULL = "full"

    @classmethod
    def parse(cls, value: Union[str, ViewLevel, None]) -> ViewLevel:
        """Accept enum values, names, and ``risk`` as an alias for full."""
        if isinstance(value, ViewLevel):
            return value
        if value is None:
            return cls.FULL
        key = value.strip().lower()
        if key == "risk":
            return cls.FULL
        try:
            return cls(key)
        except ValueError:
            raise ValueError(
                f"Unknown view level: {value!r}. Choose from: process, subprocess, full"
            )

    @property
    def allowed_types(self) -> frozenset[NodeType]:
        return _VIEW_TYPES[self]


_VIEW_TYPES = {
    ViewLevel.PROCESS: frozenset({NodeType.COMPANY, NodeType.PROCESS}),
    ViewLevel.SUBPROCESS: frozenset({NodeType.COMPANY, NodeType.PROCESS, NodeType.SUBPROCESS}),
    ViewLevel.FULL: frozenset(NodeType),
}

_EFFECTIVENESS = "effectiveness"
_RISK_LEVEL = "risk_level"
_UNCOVERED = "uncovered"


@dataclass(frozen=True)
class FilterCriteria:
    """Active predicate set. Defaults select everything.

    ``effectiveness`` and ``view`` also accept their string forms; unknown
    values raise ValueError.
    """

    search: str = ""
    effectiveness: Optional[EffectivenessLevel] = None
    risk_level: Optional[str] = None
    uncovered_only: bool = False
    view: ViewLevel = ViewLevel.FULL

    def __post_init__(self) -> None:
        if self.effectiveness is not None:
            object.__setattr__(self, "effectiveness", parse_level(self.effectiveness))
        object.__setattr__(self, "view", ViewLevel.parse(self.view))

    @classmethod
    def from_options(
        cls,
        search: Optional[str] = None,
        effectiveness: Optional[str] = None,
        risk_level: Optional[str] = None,
        uncovered_only: bool = False,
        view: Union[str, ViewLevel, None] = None,
    ) -> FilterCriteria:
        """Build criteria from loose option values; ``all`` disables a filter."""
        return cls(
            search=(search or "").strip(),
            effectiveness=None
            if not effectiveness or effectiveness.lower() == "all"
            else parse_level(effectiveness),
            risk_level=None if not risk_level or risk_level.lower() == "all" else risk_level,
            uncovered_only=uncovered_only,
            view=ViewLevel.parse(view),
        )

    @property
    def is_identity(self) -> bool:
        return (
            not self.search
            and self.effectiveness is None
            and self.risk_level is None
            and not self.uncovered_only
            and self.view is ViewLevel.FULL
        )


def filter_tree(
    roots: Iterable[TreeNode], criteria: Optional[FilterCriteria] = None
) -> list[TreeNode]:
    """Apply ``criteria`` to each root independently and keep the survivors."""
    criteria = criteria or FilterCriteria()
    result = []
    for root in roots:
        kept = _filter_node(root, criteria, frozenset(), frozenset())
        if kept is not None:
            result.append(kept)
    return result


def _filter_node(
    tree_node: TreeNode,
    criteria: FilterCriteria,
    inherited: frozenset[str],
    path: frozenset[str],
) -> Optional[TreeNode]:
    if tree_node.type not in criteria.view.allowed_types:
        return None

    failed = _failed_dimensions(tree_node, criteria, inherited)
    path = path | {tree_node.id}

    filtered_children = []
    for child in tree_node.children:
        if child.id in path:
            logger.warning("Cycle detected at %s -> %s; not descending", tree_node.id, child.id)
            continue
        kept = _filter_node(child, criteria, failed, path)
        if kept is not None:
            filtered_children.append(kept)

    matches_search = not criteria.search or criteria.search.lower() in tree_node.name.lower()
    if (matches_search and not failed) or filtered_children:
        return TreeNode(tree_node.node, filtered_children)
    return None


def _failed_dimensions(
    tree_node: TreeNode, criteria: FilterCriteria, inherited: frozenset[str]
) -> frozenset[str]:
    """Type-scoped predicates this node fails, own result first, else inherited."""
    node = tree_node.node
    failed = set()

    if criteria.effectiveness is not None:
        if node.is_control:
            if canonicalize(node.effectiveness) is not criteria.effectiveness:
                failed.add(_EFFECTIVENESS)
        elif _EFFECTIVENESS in inherited:
            failed.add(_EFFECTIVENESS)

    if criteria.risk_level is not None:
        if node.is_risk:
            impact = node.metadata.get("impact")
            if not isinstance(impact, str) or impact.lower() != criteria.risk_level.lower():
                failed.add(_RISK_LEVEL)
        elif _RISK_LEVEL in inherited:
            failed.add(_RISK_LEVEL)

    if criteria.uncovered_only:
        if node.is_risk:
            # Structural check on the unfiltered children
            if any(child.type is NodeType.CONTROL for child in tree_node.children):
                failed.add(_UNCOVERED)
        elif _UNCOVERED in inherited:
            failed.add(_UNCOVERED)

    return frozenset(failed)

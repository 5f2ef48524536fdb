"""Integrity checks for a node/relationship set.

The builder tolerates malformed input (dangling edges, multiple parents,
cycles, inconsistent ``parent`` fields). These checks report such problems
without changing any engine behavior; callers in strict mode escalate them
through enforce_integrity.

Checks are O(n + e).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from ..exceptions import GraphIntegrityError
from ..logging_config import get_logger
from .builder import child_index, index_nodes, parent_index
from .models import NodeType, RCMNode, Relationship

logger = get_logger(__name__)


@dataclass
class IntegrityReport:
    """Problems found in a node/edge set.

    ``issues`` break the forest shape (and fail strict mode); ``warnings``
    are tolerated inconsistencies.
    """

    dangling_edges: list[Relationship] = field(default_factory=list)
    multi_parent: dict[str, list[str]] = field(default_factory=dict)
    cycle_nodes: list[str] = field(default_factory=list)
    orphans: list[str] = field(default_factory=list)
    order_violations: list[tuple[str, str]] = field(default_factory=list)
    parent_mismatches: list[tuple[str, Optional[str], list[str]]] = field(default_factory=list)

    @property
    def issues(self) -> list[str]:
        messages = [
            f"edge {rel.from_id} -> {rel.to_id} references an unknown node"
            for rel in self.dangling_edges
        ]
        messages.extend(
            f"node {node_id} has {len(parents)} parents: {', '.join(parents)}"
            for node_id, parents in self.multi_parent.items()
        )
        if self.cycle_nodes:
            messages.append(f"cycle through nodes: {', '.join(self.cycle_nodes)}")
        messages.extend(f"node {node_id} is unreachable from any company" for node_id in self.orphans)
        return messages

    @property
    def warnings(self) -> list[str]:
        messages = [
            f"edge {parent} -> {child} steps backwards in the hierarchy"
            for parent, child in self.order_violations
        ]
        messages.extend(
            f"node {node_id} declares parent {declared!r} but edges give {', '.join(derived) or 'none'}"
            for node_id, declared, derived in self.parent_mismatches
        )
        return messages

    @property
    def is_clean(self) -> bool:
        return not self.issues


def check_integrity(
    nodes: Optional[Iterable[RCMNode]], relationships: Optional[Iterable[Relationship]]
) -> IntegrityReport:
    node_list = list(nodes or ())
    rel_list = list(relationships or ())
    index = index_nodes(node_list)
    kids = child_index(index, rel_list)
    parents = parent_index(index, rel_list)

    report = IntegrityReport()
    report.dangling_edges = [
        rel for rel in rel_list if rel.from_id not in index or rel.to_id not in index
    ]
    report.multi_parent = {k: v for k, v in parents.items() if len(v) > 1}
    report.cycle_nodes = _find_cycle_nodes(index, kids)

    for parent_id, child_ids in kids.items():
        for child_id in child_ids:
            if index[child_id].type.rank < index[parent_id].type.rank:
                report.order_violations.append((parent_id, child_id))

    reachable = _reachable_from_roots(index, kids)
    report.orphans = [
        node_id
        for node_id, node in index.items()
        if node.type is not NodeType.COMPANY and node_id not in reachable
    ]

    for node_id, node in index.items():
        derived = parents.get(node_id, [])
        if node.parent is None:
            continue
        if node.parent not in derived:
            report.parent_mismatches.append((node_id, node.parent, derived))

    for message in report.issues:
        logger.warning("Integrity: %s", message)
    for message in report.warnings:
        logger.debug("Integrity: %s", message)
    return report


def enforce_integrity(report: IntegrityReport) -> None:
    """Raise GraphIntegrityError if the report has any blocking issue."""
    if not report.is_clean:
        raise GraphIntegrityError(report.issues)


def _reachable_from_roots(index: dict[str, RCMNode], kids: dict[str, list[str]]) -> set[str]:
    seen: set[str] = set()
    frontier = [node_id for node_id, node in index.items() if node.type is NodeType.COMPANY]
    while frontier:
        node_id = frontier.pop()
        if node_id in seen:
            continue
        seen.add(node_id)
        frontier.extend(kids.get(node_id, ()))
    return seen


def _find_cycle_nodes(index: dict[str, RCMNode], kids: dict[str, list[str]]) -> list[str]:
    """Ids lying on at least one cycle, in discovery order.

    Iterative three-colour DFS; a back edge to a node on the current path
    marks the path segment from that node onward.
    """
    white, gray, black = 0, 1, 2
    colour = {node_id: white for node_id in index}
    on_cycle: dict[str, None] = {}

    for start in index:
        if colour[start] != white:
            continue
        path = [start]
        colour[start] = gray
        stack = [iter(kids.get(start, ()))]
        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                colour[path.pop()] = black
                continue
            if colour[child] == gray:
                for node_id in path[path.index(child):]:
                    on_cycle.setdefault(node_id)
            elif colour[child] == white:
                colour[child] = gray
                path.append(child)
                stack.append(iter(kids.get(child, ())))
    return list(on_cycle)

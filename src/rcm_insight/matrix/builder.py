"""Tree construction from the flat node/edge lists.

Two independent passes:
    1. index_nodes: id -> node
    2. child_index: parent id -> ordered child ids, dangling edges dropped

build_tree wires TreeNode objects from both and returns the company roots.
Shared TreeNode references are used for children, so a cyclic edge set
yields a cyclic structure; every walker here bounds itself by the ids on
the current root-to-node path.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Optional

from ..logging_config import get_logger
from .models import NodeType, RCMNode, Relationship, TreeNode

logger = get_logger(__name__)


def index_nodes(nodes: Optional[Iterable[RCMNode]]) -> dict[str, RCMNode]:
    """Index nodes by id in one pass. A repeated id keeps the last record."""
    index: dict[str, RCMNode] = {}
    for node in nodes or ():
        if node.id in index:
            logger.warning("Duplicate node id %r; keeping the last record", node.id)
        index[node.id] = node
    return index


def child_index(
    index: dict[str, RCMNode], relationships: Optional[Iterable[Relationship]]
) -> dict[str, list[str]]:
    """Map each parent id to its child ids in relationship order.

    Edges whose endpoints are not both in ``index`` are dropped silently
    (logged at DEBUG only).
    """
    children: dict[str, list[str]] = {}
    for rel in relationships or ():
        if rel.from_id not in index or rel.to_id not in index:
            logger.debug("Dropping edge %s -> %s: unknown endpoint", rel.from_id, rel.to_id)
            continue
        children.setdefault(rel.from_id, []).append(rel.to_id)
    return children


def parent_index(
    index: dict[str, RCMNode], relationships: Optional[Iterable[Relationship]]
) -> dict[str, list[str]]:
    """Reverse of child_index: child id -> parent ids in relationship order."""
    parents: dict[str, list[str]] = {}
    for parent_id, kids in child_index(index, relationships).items():
        for kid in kids:
            parents.setdefault(kid, []).append(parent_id)
    return parents


def build_tree(
    nodes: Optional[Iterable[RCMNode]], relationships: Optional[Iterable[Relationship]]
) -> list[TreeNode]:
    """Convert the flat node/edge lists into rooted trees.

    Roots are the company nodes in input order; with a repeated id the
    record that wins in index_nodes decides. Nodes not reachable from a
    company root are left out of the returned forest.
    """
    node_list = list(nodes or ())
    index = index_nodes(node_list)
    kids = child_index(index, relationships)

    tree_nodes = {node_id: TreeNode(node) for node_id, node in index.items()}
    for parent_id, child_ids in kids.items():
        tree_nodes[parent_id].children.extend(tree_nodes[c] for c in child_ids)

    roots: list[TreeNode] = []
    seen: set[str] = set()
    for node in node_list:
        if index[node.id].type is NodeType.COMPANY and node.id not in seen:
            seen.add(node.id)
            roots.append(tree_nodes[node.id])

    logger.debug(
        "Built %d root(s) from %d node(s), %d parent(s) with children",
        len(roots),
        len(index),
        len(kids),
    )
    return roots


def walk(roots: Iterable[TreeNode]) -> Iterator[tuple[TreeNode, int]]:
    """Depth-first pre-order walk yielding ``(tree_node, depth)``.

    A child whose id is already on the current path is skipped, so cycles
    terminate. Shared children are yielded once per parent.
    """
    for root in roots:
        stack: list[tuple[TreeNode, int, frozenset[str]]] = [(root, 0, frozenset())]
        while stack:
            current, depth, path = stack.pop()
            yield current, depth
            path = path | {current.id}
            for child in reversed(current.children):
                if child.id in path:
                    logger.warning("Cycle detected at %s -> %s; not descending", current.id, child.id)
                    continue
                stack.append((child, depth + 1, path))


def count_nodes(roots: Iterable[TreeNode]) -> int:
    return sum(1 for _ in walk(roots))

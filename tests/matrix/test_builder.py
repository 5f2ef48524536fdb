"""Tests for matrix/builder.py - indexing, tree wiring and walking."""

from rcm_insight.matrix.builder import (
    build_tree,
    child_index,
    count_nodes,
    index_nodes,
    parent_index,
    walk,
)
from rcm_insight.matrix.models import NodeType, RCMNode, Relationship


def _node(node_id, node_type, name=None, parent=None):
    return RCMNode(id=node_id, type=NodeType(node_type), name=name or node_id, parent=parent)


class TestIndexes:
    def test_index_by_id(self, sample_nodes):
        index = index_nodes(sample_nodes)
        assert len(index) == 11
        assert index["k1"].name == "Payroll change approval"

    def test_duplicate_id_keeps_last(self):
        index = index_nodes([_node("x", "company", "First"), _node("x", "company", "Second")])
        assert index["x"].name == "Second"

    def test_duplicate_id_with_different_type(self):
        nodes = [_node("x", "company", "Acme"), _node("x", "process", "Finance")]
        assert build_tree(nodes, []) == []

    def test_duplicate_id_resolves_to_company(self):
        nodes = [_node("x", "process", "Finance"), _node("x", "company", "Acme")]
        roots = build_tree(nodes, [])
        assert [(r.id, r.type) for r in roots] == [("x", NodeType.COMPANY)]

    def test_none_input(self):
        assert index_nodes(None) == {}

    def test_child_order_follows_relationships(self, sample_nodes, sample_relationships):
        kids = child_index(index_nodes(sample_nodes), sample_relationships)
        assert kids["c1"] == ["p1", "p2"]
        assert kids["s1"] == ["r1", "r3"]

    def test_dangling_edges_dropped(self):
        index = index_nodes([_node("c1", "company")])
        kids = child_index(index, [Relationship("c1", "ghost"), Relationship("ghost", "c1")])
        assert kids == {}

    def test_parent_index(self, sample_nodes, sample_relationships):
        parents = parent_index(index_nodes(sample_nodes), sample_relationships)
        assert parents["k3"] == ["r2"]
        assert "c1" not in parents


class TestBuildTree:
    def test_single_company_with_process(self):
        nodes = [_node("c1", "company", "Acme"), _node("p1", "process", "Finance")]
        roots = build_tree(nodes, [Relationship("c1", "p1")])

        assert len(roots) == 1
        assert roots[0].id == "c1"
        assert [child.id for child in roots[0].children] == ["p1"]

    def test_full_sample_shape(self, sample_nodes, sample_relationships):
        roots = build_tree(sample_nodes, sample_relationships)
        assert [r.id for r in roots] == ["c1"]
        finance = roots[0].children[0]
        payroll = finance.children[0]
        assert [r.name for r in payroll.children] == [
            "Unauthorized payroll changes",
            "Late period close",
        ]
        assert count_nodes(roots) == 11

    def test_roots_in_input_order(self):
        nodes = [_node("c2", "company"), _node("p1", "process"), _node("c1", "company")]
        roots = build_tree(nodes, [])
        assert [r.id for r in roots] == ["c2", "c1"]

    def test_orphans_excluded(self):
        nodes = [_node("c1", "company"), _node("p1", "process"), _node("r9", "risk")]
        roots = build_tree(nodes, [Relationship("c1", "p1")])
        assert count_nodes(roots) == 2

    def test_dangling_edge_ignored(self):
        nodes = [_node("c1", "company")]
        roots = build_tree(nodes, [Relationship("c1", "missing")])
        assert roots[0].children == []

    def test_empty_input(self):
        assert build_tree(None, None) == []
        assert build_tree([], []) == []

    def test_no_company_means_no_roots(self):
        nodes = [_node("p1", "process"), _node("s1", "subprocess")]
        assert build_tree(nodes, [Relationship("p1", "s1")]) == []

    def test_shared_child_under_two_parents(self):
        nodes = [
            _node("c1", "company"),
            _node("p1", "process"),
            _node("p2", "process"),
            _node("s1", "subprocess"),
        ]
        rels = [
            Relationship("c1", "p1"),
            Relationship("c1", "p2"),
            Relationship("p1", "s1"),
            Relationship("p2", "s1"),
        ]
        roots = build_tree(nodes, rels)
        ids = [tree_node.id for tree_node, _ in walk(roots)]
        assert ids.count("s1") == 2


class TestWalk:
    def test_preorder_with_depth(self, sample_nodes, sample_relationships):
        roots = build_tree(sample_nodes, sample_relationships)
        visited = [(tree_node.id, depth) for tree_node, depth in walk(roots)]
        assert visited[:5] == [("c1", 0), ("p1", 1), ("s1", 2), ("r1", 3), ("k1", 4)]

    def test_cycle_terminates(self):
        nodes = [_node("c1", "company"), _node("p1", "process"), _node("s1", "subprocess")]
        rels = [
            Relationship("c1", "p1"),
            Relationship("p1", "s1"),
            Relationship("s1", "p1"),
        ]
        roots = build_tree(nodes, rels)
        ids = [tree_node.id for tree_node, _ in walk(roots)]
        assert ids == ["c1", "p1", "s1"]

    def test_self_loop_terminates(self):
        nodes = [_node("c1", "company")]
        roots = build_tree(nodes, [Relationship("c1", "c1")])
        assert count_nodes(roots) == 1

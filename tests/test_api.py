"""Tests for the public API: analyze() and build_view()."""

import json

import pytest

import rcm_insight
from rcm_insight import FilterCriteria, analyze, build_view
from rcm_insight.config import MatrixConfig
from rcm_insight.exceptions import GraphIntegrityError, GraphSourceError
from rcm_insight.matrix.builder import walk
from rcm_insight.matrix.models import RCMMatrix, Relationship, Statistics
from rcm_insight.matrix.source import matrix_to_dict


def _ids(roots):
    return [tree_node.id for tree_node, _ in walk(roots)]


class TestBuildView:
    def test_identity_view(self, sample_matrix):
        view = build_view(sample_matrix)
        assert _ids(view.filtered) == _ids(view.roots)
        assert view.criteria.is_identity
        assert view.health_score == 57
        assert view.statistics.total_controls == 3
        assert view.coverage.uncovered_risks == 1
        assert view.integrity.is_clean

    def test_aggregates_ignore_filters(self, sample_matrix):
        view = build_view(sample_matrix, FilterCriteria(search="vendor"))
        assert _ids(view.filtered) == ["c1", "p2", "s2", "r2", "k3"]
        assert view.statistics.total_controls == 3
        assert view.health_score == 57

    def test_default_view_from_config(self, sample_matrix):
        view = build_view(sample_matrix, config=MatrixConfig(default_view="process"))
        assert _ids(view.filtered) == ["c1", "p1", "p2"]

    def test_recomputes_statistics(self, sample_nodes, sample_relationships):
        stale = RCMMatrix(sample_nodes, sample_relationships, Statistics(total_controls=99))
        assert build_view(stale).statistics.total_controls == 3

    def test_empty_matrix(self):
        view = build_view(RCMMatrix())
        assert view.roots == []
        assert view.filtered == []
        assert view.health_score == 0

    def test_strict_mode_raises(self, sample_nodes, sample_relationships):
        broken = RCMMatrix(sample_nodes, sample_relationships + [Relationship("k1", "ghost")])
        with pytest.raises(GraphIntegrityError):
            build_view(broken, config=MatrixConfig(strict_integrity=True))

    def test_lenient_mode_tolerates(self, sample_nodes, sample_relationships):
        broken = RCMMatrix(sample_nodes, sample_relationships + [Relationship("k1", "ghost")])
        view = build_view(broken)
        assert not view.integrity.is_clean
        assert len(_ids(view.roots)) == 11


class TestAnalyze:
    def test_path_source(self, sample_source):
        view = analyze(sample_source, risk_level="high")
        ids = _ids(view.filtered)
        assert "r1" in ids
        assert "r2" not in ids

    def test_matrix_source(self, sample_matrix):
        view = analyze(sample_matrix, view="subprocess")
        assert _ids(view.filtered) == ["c1", "p1", "s1", "p2", "s2"]

    def test_overrides(self, tmp_path, sample_matrix):
        data = matrix_to_dict(sample_matrix)
        data["relationships"].append({"from": "r3", "to": "nowhere"})
        path = tmp_path / "rcm.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        with pytest.raises(GraphIntegrityError):
            analyze(path, strict_integrity=True)

    def test_missing_source(self, tmp_path):
        with pytest.raises(GraphSourceError):
            analyze(tmp_path / "missing.json")

    def test_package_exports(self):
        assert rcm_insight.__version__
        for name in ("analyze", "build_tree", "filter_tree", "score_control", "export_rcm"):
            assert hasattr(rcm_insight, name)

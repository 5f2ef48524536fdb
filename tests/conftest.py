"""Shared test fixtures for RCM Insight tests."""

import json
import os

import pytest

from rcm_insight.matrix.models import NodeType, RCMMatrix, RCMNode, Relationship
from rcm_insight.matrix.source import matrix_to_dict
from rcm_insight.matrix.statistics import compute_statistics


def make_node(node_id, node_type, name, parent=None, **fields):
    """Build an RCMNode with keyword metadata collected into ``metadata``."""
    status = fields.pop("status", None)
    effectiveness = fields.pop("effectiveness", None)
    return RCMNode(
        id=node_id,
        type=NodeType(node_type),
        name=name,
        parent=parent,
        status=status,
        effectiveness=effectiveness,
        metadata=fields,
    )


def edges(*pairs):
    return [Relationship(a, b) for a, b in pairs]


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep user/project TOML files and RCM_* variables out of every test."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(home)
    for key in [k for k in os.environ if k.startswith("RCM_")]:
        monkeypatch.delenv(key)


@pytest.fixture
def sample_nodes():
    """One company, two processes, three risks, three controls.

    Acme Corp
      Finance
        Payroll
          Unauthorized payroll changes (High/Likely)
            Payroll change approval      Effective, key, Manual
            Payroll reconciliation       Partially Effective, Automated
          Late period close (Critical/Possible)       no controls
      Procurement
        Accounts Payable
          Duplicate vendor payments (Low/Possible)
            Vendor master review         untested, key
    """
    return [
        make_node("c1", "company", "Acme Corp", status="Active"),
        make_node("p1", "process", "Finance", parent="c1", status="Active"),
        make_node("p2", "process", "Procurement", parent="c1", status="Active"),
        make_node("s1", "subprocess", "Payroll", parent="p1"),
        make_node("s2", "subprocess", "Accounts Payable", parent="p2"),
        make_node(
            "r1", "risk", "Unauthorized payroll changes", parent="s1",
            impact="High", likelihood="Likely", assertions=["Existence", "Accuracy"],
        ),
        make_node(
            "r3", "risk", "Late period close", parent="s1",
            impact="Critical", likelihood="Possible",
        ),
        make_node(
            "r2", "risk", "Duplicate vendor payments", parent="s2",
            impact="Low", likelihood="Possible",
        ),
        make_node(
            "k1", "control", "Payroll change approval", parent="r1",
            status="Active", effectiveness="Effective",
            type="Preventive", frequency="Monthly", automation="Manual", keyControl=True,
            trend="improving", lastTested="2024-05-01", testCount=4, passRate=100,
        ),
        make_node(
            "k2", "control", "Payroll reconciliation", parent="r1",
            status="Active", effectiveness="Partially Effective",
            type="Detective", frequency="Monthly", automation="Automated", keyControl=False,
        ),
        make_node(
            "k3", "control", "Vendor master review", parent="r2",
            status="Draft",
            type="Detective", frequency="Quarterly", automation="Manual", keyControl=True,
        ),
    ]


@pytest.fixture
def sample_relationships():
    return edges(
        ("c1", "p1"),
        ("c1", "p2"),
        ("p1", "s1"),
        ("p2", "s2"),
        ("s1", "r1"),
        ("s1", "r3"),
        ("s2", "r2"),
        ("r1", "k1"),
        ("r1", "k2"),
        ("r2", "k3"),
    )


@pytest.fixture
def sample_matrix(sample_nodes, sample_relationships):
    return RCMMatrix(
        nodes=sample_nodes,
        relationships=sample_relationships,
        statistics=compute_statistics(sample_nodes, sample_relationships),
    )


@pytest.fixture
def sample_source(tmp_path, sample_matrix):
    """The sample matrix written as a graph-source JSON file."""
    path = tmp_path / "rcm.json"
    path.write_text(json.dumps(matrix_to_dict(sample_matrix), indent=2), encoding="utf-8")
    return path

"""Graph source adapters: JSON documents and flat entity records.

Input contract (camelCase, as served by the backend):

    {
      "nodes": [{"id", "type", "name", "parent"?, "status"?,
                 "effectiveness"?, "metadata"?}],
      "relationships": [{"from", "to", "type"?, "strength"?}],
      "statistics": {"totalControls", "keyControls", "effectiveControls",
                     "risksWithoutControls", "controlsWithoutTesting"}
    }

Missing data is an empty graph, not an error.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional, Union

from ..exceptions import GraphSourceError, InvalidNodeError
from ..logging_config import get_logger
from .models import NodeType, RCMMatrix, RCMNode, Relationship, Statistics
from .statistics import compute_statistics

logger = get_logger(__name__)


def matrix_from_dict(data: Optional[Mapping[str, Any]]) -> RCMMatrix:
    """Parse a graph-source document; ``None`` gives an empty matrix."""
    if not data:
        return RCMMatrix()

    nodes = [node_from_dict(record) for record in data.get("nodes") or ()]
    relationships = []
    for record in data.get("relationships") or ():
        rel = relationship_from_dict(record)
        if rel is not None:
            relationships.append(rel)

    raw_stats = data.get("statistics")
    statistics = (
        Statistics.from_dict(raw_stats)
        if isinstance(raw_stats, Mapping)
        else compute_statistics(nodes, relationships)
    )
    return RCMMatrix(nodes=nodes, relationships=relationships, statistics=statistics)


def node_from_dict(record: Mapping[str, Any]) -> RCMNode:
    if not isinstance(record, Mapping):
        raise InvalidNodeError(None, f"expected an object, got {type(record).__name__}")

    node_id = record.get("id")
    if node_id is None or node_id == "":
        raise InvalidNodeError(None, "missing id")
    node_id = str(node_id)

    raw_type = record.get("type")
    try:
        node_type = NodeType(str(raw_type).lower())
    except ValueError:
        raise InvalidNodeError(node_id, f"unknown type {raw_type!r}")

    name = record.get("name")
    if name is None:
        raise InvalidNodeError(node_id, "missing name")

    metadata = record.get("metadata") or {}
    if not isinstance(metadata, Mapping):
        raise InvalidNodeError(node_id, "metadata must be an object")

    parent = record.get("parent")
    return RCMNode(
        id=node_id,
        type=node_type,
        name=str(name),
        parent=str(parent) if parent not in (None, "") else None,
        status=record.get("status"),
        effectiveness=record.get("effectiveness"),
        metadata=dict(metadata),
    )


def relationship_from_dict(record: Mapping[str, Any]) -> Optional[Relationship]:
    """Parse one edge; records without both endpoints are dropped."""
    if not isinstance(record, Mapping):
        logger.debug("Skipping non-object relationship record %r", record)
        return None
    from_id, to_id = record.get("from"), record.get("to")
    if from_id in (None, "") or to_id in (None, ""):
        logger.debug("Skipping relationship without both endpoints: %r", record)
        return None
    return Relationship(
        from_id=str(from_id),
        to_id=str(to_id),
        type=record.get("type"),
        strength=record.get("strength"),
    )


def matrix_to_dict(matrix: RCMMatrix) -> dict[str, Any]:
    """Inverse of matrix_from_dict, using the same camelCase contract."""
    nodes = []
    for node in matrix.nodes:
        record: dict[str, Any] = {"id": node.id, "type": node.type.value, "name": node.name}
        if node.parent is not None:
            record["parent"] = node.parent
        if node.status is not None:
            record["status"] = node.status
        if node.effectiveness is not None:
            record["effectiveness"] = node.effectiveness
        if node.metadata:
            record["metadata"] = dict(node.metadata)
        nodes.append(record)

    relationships = []
    for rel in matrix.relationships:
        record = {"from": rel.from_id, "to": rel.to_id}
        if rel.type is not None:
            record["type"] = rel.type
        if rel.strength is not None:
            record["strength"] = rel.strength
        relationships.append(record)

    return {
        "nodes": nodes,
        "relationships": relationships,
        "statistics": matrix.statistics.to_dict(),
    }


def load_matrix(path: Union[str, Path]) -> RCMMatrix:
    """Read a graph-source JSON file.

    Raises:
        GraphSourceError: If the file is unreadable or not valid JSON
        InvalidNodeError: If a node record violates the contract
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise GraphSourceError(str(path), e.strerror or str(e))

    if not text.strip():
        logger.info("Graph source %s is empty", path)
        return RCMMatrix()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise GraphSourceError(str(path), f"invalid JSON: {e.msg} at line {e.lineno}")

    if data is not None and not isinstance(data, Mapping):
        raise GraphSourceError(str(path), "top-level JSON value must be an object")

    matrix = matrix_from_dict(data)
    logger.debug(
        "Loaded %d node(s), %d relationship(s) from %s",
        len(matrix.nodes),
        len(matrix.relationships),
        path,
    )
    return matrix


# ── Assembly from entity records ───────────────────────────────────


def assemble_matrix(
    companies: Optional[Iterable[Mapping[str, Any]]] = None,
    processes: Optional[Iterable[Mapping[str, Any]]] = None,
    subprocesses: Optional[Iterable[Mapping[str, Any]]] = None,
    risks: Optional[Iterable[Mapping[str, Any]]] = None,
    controls: Optional[Iterable[Mapping[str, Any]]] = None,
    company_id: Optional[str] = None,
) -> RCMMatrix:
    """Build the node/edge graph from flat CRUD records.

    Each level is restricted to children of the previous level's surviving
    ids, so ``company_id`` narrows the whole hierarchy to one company.
    """
    kept_companies = [
        c for c in companies or () if company_id is None or c.get("id") == company_id
    ]
    company_ids = {c.get("id") for c in kept_companies}
    kept_processes = [p for p in processes or () if p.get("company_id") in company_ids]
    process_ids = {p.get("id") for p in kept_processes}
    kept_subprocesses = [s for s in subprocesses or () if s.get("process_id") in process_ids]
    subprocess_ids = {s.get("id") for s in kept_subprocesses}
    kept_risks = [r for r in risks or () if r.get("subprocess_id") in subprocess_ids]
    risk_ids = {r.get("id") for r in kept_risks}
    kept_controls = [c for c in controls or () if c.get("risk_id") in risk_ids]

    nodes: list[RCMNode] = []
    relationships: list[Relationship] = []

    for company in kept_companies:
        nodes.append(
            RCMNode(
                id=str(company["id"]),
                type=NodeType.COMPANY,
                name=str(company.get("company_name", "")),
                status=company.get("status"),
            )
        )

    for process in kept_processes:
        nodes.append(
            RCMNode(
                id=str(process["id"]),
                type=NodeType.PROCESS,
                name=str(process.get("process_name", "")),
                parent=str(process["company_id"]),
                status=process.get("status"),
            )
        )
        relationships.append(Relationship(str(process["company_id"]), str(process["id"]), "owns"))

    for subprocess in kept_subprocesses:
        nodes.append(
            RCMNode(
                id=str(subprocess["id"]),
                type=NodeType.SUBPROCESS,
                name=str(subprocess.get("subprocess_name", "")),
                parent=str(subprocess["process_id"]),
                status=subprocess.get("status"),
            )
        )
        relationships.append(
            Relationship(str(subprocess["process_id"]), str(subprocess["id"]), "contains")
        )

    for risk in kept_risks:
        nodes.append(
            RCMNode(
                id=str(risk["id"]),
                type=NodeType.RISK,
                name=str(risk.get("risk_name", "")),
                parent=str(risk["subprocess_id"]),
                status=risk.get("status"),
                metadata={
                    "impact": risk.get("impact"),
                    "likelihood": risk.get("likelihood"),
                    "category": risk.get("risk_category"),
                    "assertions": risk.get("assertions"),
                },
            )
        )
        relationships.append(Relationship(str(risk["subprocess_id"]), str(risk["id"]), "contains"))

    for control in kept_controls:
        effectiveness = control.get("effectiveness")
        if effectiveness is None:
            effectiveness = "Effective" if control.get("status") == "Active" else "Not Tested"
        key_control = control.get("key_control") is True
        nodes.append(
            RCMNode(
                id=str(control["id"]),
                type=NodeType.CONTROL,
                name=str(control.get("control_name", "")),
                parent=str(control["risk_id"]),
                status=control.get("status"),
                effectiveness=effectiveness,
                metadata={
                    "type": control.get("control_type"),
                    "frequency": control.get("frequency"),
                    "automation": control.get("automation"),
                    "keyControl": key_control,
                    "owner": control.get("owner"),
                },
            )
        )
        relationships.append(
            Relationship(
                str(control["risk_id"]),
                str(control["id"]),
                "mitigates",
                "primary" if key_control else "secondary",
            )
        )

    return RCMMatrix(
        nodes=nodes,
        relationships=relationships,
        statistics=compute_statistics(nodes, relationships),
    )

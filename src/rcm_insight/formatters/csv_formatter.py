"""CSV export of the full risk-control matrix.

Export always covers every node of the source, whatever filters are active
in the view. Every data cell is double-quoted with embedded quotes doubled;
rows are joined by newlines with no trailing newline.
"""

import csv
import io
from collections.abc import Iterable, Mapping
from datetime import date
from pathlib import Path
from typing import List, Optional, Union

from ..logging_config import get_logger
from ..matrix.builder import index_nodes, parent_index
from ..matrix.models import NodeType, RCMMatrix, RCMNode, Relationship, TreeNode
from .base import BaseFormatter

logger = get_logger(__name__)

EXPORT_HEADERS = [
    "Type",
    "Name",
    "Parent",
    "Status",
    "Effectiveness",
    "Risk Level",
    "Control Type",
    "Frequency",
    "Automation",
    "Key Control",
]


def resolve_parent_names(
    nodes: Iterable[RCMNode], relationships: Optional[Iterable[Relationship]]
) -> dict[str, str]:
    """Parent display name per node id.

    The first relationship edge wins; without one, the node's own ``parent``
    field is resolved to a name when it points at a known node, otherwise it
    is used verbatim.
    """
    index = index_nodes(nodes)
    parents = parent_index(index, relationships)
    names: dict[str, str] = {}
    for node_id, node in index.items():
        if node_id in parents:
            names[node_id] = index[parents[node_id][0]].name
        elif node.parent is not None:
            referenced = index.get(node.parent)
            names[node_id] = referenced.name if referenced is not None else node.parent
    return names


def _text(value) -> str:
    return "" if value is None or value is False else str(value)


def export_row(node: RCMNode, parent_name: str = "") -> List[str]:
    is_risk = node.type is NodeType.RISK
    is_control = node.type is NodeType.CONTROL
    meta = node.metadata
    return [
        node.type.value,
        node.name,
        parent_name,
        _text(node.status),
        _text(node.effectiveness),
        f"{_text(meta.get('impact'))}/{_text(meta.get('likelihood'))}" if is_risk else "",
        _text(meta.get("type")) if is_control else "",
        _text(meta.get("frequency")) if is_control else "",
        _text(meta.get("automation")) if is_control else "",
        "Yes" if is_control and meta.get("keyControl") else "",
    ]


def export_rcm(
    nodes: Iterable[RCMNode], parent_names: Optional[Mapping[str, str]] = None
) -> str:
    """Flatten ``nodes`` into CSV text, one row per node in input order.

    Without ``parent_names`` the Parent column falls back to each node's
    raw ``parent`` field.
    """
    output = io.StringIO()
    csv.writer(output, lineterminator="\n").writerow(EXPORT_HEADERS)
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for node in nodes:
        if parent_names is not None:
            parent = parent_names.get(node.id, "")
        else:
            parent = node.parent or ""
        writer.writerow(export_row(node, parent))
    text = output.getvalue()
    return text[:-1] if text.endswith("\n") else text


def export_filename(on: Optional[date] = None) -> str:
    """``rcm-export-YYYY-MM-DD.csv`` for the export date (today by default)."""
    return f"rcm-export-{(on or date.today()).isoformat()}.csv"


def write_export(
    matrix: RCMMatrix, directory: Union[str, Path] = ".", on: Optional[date] = None
) -> Path:
    """Write the full-matrix CSV into ``directory`` and return the file path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(on)
    content = CsvFormatter().format(matrix, [])
    path.write_text(content, encoding="utf-8")
    logger.info("Exported %d row(s) to %s", len(matrix.nodes), path)
    return path


class CsvFormatter(BaseFormatter):
    """Render the whole matrix as CSV; ``roots`` are ignored."""

    def render(self, matrix: RCMMatrix, roots: List[TreeNode]) -> None:
        print(self.format(matrix, roots))

    def format(self, matrix: RCMMatrix, roots: List[TreeNode]) -> str:
        names = resolve_parent_names(matrix.nodes, matrix.relationships)
        return export_rcm(matrix.nodes, names)

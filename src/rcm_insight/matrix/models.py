"""Data models for the risk-control matrix.

Hierarchy levels (outermost first):
  company ⊃ process ⊃ subprocess ⊃ risk ⊃ control

Raw input arrives as a flat list of RCMNode records plus parent→child
Relationship edges. TreeNode wraps a node with an ordered list of children;
trees are rebuilt on every recomputation, never mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

from ..logging_config import get_logger

logger = get_logger(__name__)


class NodeType(str, Enum):
    """Entity kinds, declared in hierarchy order."""

    COMPANY = "company"
    PROCESS = "process"
    SUBPROCESS = "subprocess"
    RISK = "risk"
    CONTROL = "control"

    @property
    def rank(self) -> int:
        """Position in the company→process→subprocess→risk→control order."""
        return _TYPE_ORDER.index(self)


_TYPE_ORDER = list(NodeType)


class EffectivenessLevel(str, Enum):
    """Canonical operating-effectiveness classification of a control."""

    EFFECTIVE = "effective"
    PARTIALLY_EFFECTIVE = "partially-effective"
    INEFFECTIVE = "ineffective"
    NOT_TESTED = "not-tested"
    PENDING = "pending"

    @property
    def label(self) -> str:
        return _LEVEL_LABELS[self]


_LEVEL_LABELS = {
    EffectivenessLevel.EFFECTIVE: "Effective",
    EffectivenessLevel.PARTIALLY_EFFECTIVE: "Partially Effective",
    EffectivenessLevel.INEFFECTIVE: "Ineffective",
    EffectivenessLevel.NOT_TESTED: "Not Tested",
    EffectivenessLevel.PENDING: "Test Pending",
}


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


@dataclass(frozen=True)
class RCMNode:
    """One entity in the compliance hierarchy.

    ``parent`` is informational (used by export); tree structure comes
    from Relationship edges only.
    """

    id: str
    type: NodeType
    name: str
    parent: Optional[str] = None
    status: Optional[str] = None
    effectiveness: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def meta(self, key: str, default: Any = None) -> Any:
        value = self.metadata.get(key)
        return default if value is None else value

    @property
    def is_control(self) -> bool:
        return self.type is NodeType.CONTROL

    @property
    def is_risk(self) -> bool:
        return self.type is NodeType.RISK

    @property
    def is_key_control(self) -> bool:
        return self.is_control and bool(self.metadata.get("keyControl"))


@dataclass(frozen=True)
class Relationship:
    """Directed edge: ``to_id`` is a child of ``from_id``."""

    from_id: str
    to_id: str
    type: Optional[str] = None  # owns | contains | mitigates
    strength: Optional[str] = None  # primary | secondary


@dataclass
class TreeNode:
    """An RCMNode plus its owned, ordered children."""

    node: RCMNode
    children: list[TreeNode] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def type(self) -> NodeType:
        return self.node.type

    @property
    def name(self) -> str:
        return self.node.name


@dataclass(frozen=True)
class EffectivenessScore:
    """Derived per-control effectiveness; never stored on the node."""

    level: EffectivenessLevel
    score: int  # 0-100
    trend: Optional[TrendDirection] = None
    last_tested: Optional[date] = None
    test_count: Optional[int] = None
    pass_rate: Optional[float] = None


@dataclass(frozen=True)
class Statistics:
    """Aggregate counters over the full, unfiltered node set."""

    total_controls: int = 0
    key_controls: int = 0
    effective_controls: int = 0
    risks_without_controls: int = 0
    controls_without_testing: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "totalControls": self.total_controls,
            "keyControls": self.key_controls,
            "effectiveControls": self.effective_controls,
            "risksWithoutControls": self.risks_without_controls,
            "controlsWithoutTesting": self.controls_without_testing,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> Statistics:
        """Read camelCase counters; null or non-integer values count as 0."""
        data = data or {}
        return cls(
            total_controls=_counter(data, "totalControls"),
            key_controls=_counter(data, "keyControls"),
            effective_controls=_counter(data, "effectiveControls"),
            risks_without_controls=_counter(data, "risksWithoutControls"),
            controls_without_testing=_counter(data, "controlsWithoutTesting"),
        )


def _counter(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool):
        logger.debug("Ignoring boolean statistics counter %s=%r", key, value)
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring non-integer statistics counter %s=%r", key, value)
        return 0


@dataclass
class RCMMatrix:
    """Everything a graph source supplies: nodes, edges, summary counters."""

    nodes: list[RCMNode] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)
    statistics: Statistics = field(default_factory=Statistics)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def controls(self) -> list[RCMNode]:
        return [n for n in self.nodes if n.is_control]

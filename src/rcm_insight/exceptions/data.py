"""Matrix data exceptions: unreadable sources, malformed nodes, integrity."""

from typing import List, Optional

from .base import RcmInsightError


class MatrixDataError(RcmInsightError):
    """Base class for errors in risk-control matrix input data."""

    pass


class GraphSourceError(MatrixDataError):
    """Raised when a graph source cannot be read or decoded."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"Cannot load graph source: {source}",
            details={"source": source, "reason": reason},
        )
        self.source = source
        self.reason = reason


class InvalidNodeError(MatrixDataError):
    """Raised when a node record violates the input contract."""

    def __init__(self, node_id: Optional[str], reason: str):
        super().__init__(
            f"Invalid node: {node_id if node_id is not None else '<missing id>'}",
            details={"node_id": str(node_id), "reason": reason},
        )
        self.node_id = node_id
        self.reason = reason


class GraphIntegrityError(MatrixDataError):
    """Raised in strict mode when the node/edge set is not a well-formed forest."""

    def __init__(self, issues: List[str]):
        super().__init__(
            f"Graph integrity check failed with {len(issues)} issue(s)",
            details={"first_issue": issues[0]} if issues else None,
        )
        self.issues = issues

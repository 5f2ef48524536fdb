"""Exception hierarchy for RCM Insight."""

from .base import RcmInsightError
from .config import ConfigurationError, InvalidConfigError
from .data import (
    GraphIntegrityError,
    GraphSourceError,
    InvalidNodeError,
    MatrixDataError,
)

__all__ = [
    "RcmInsightError",
    "ConfigurationError",
    "InvalidConfigError",
    "MatrixDataError",
    "GraphSourceError",
    "InvalidNodeError",
    "GraphIntegrityError",
]

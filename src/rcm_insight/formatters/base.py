"""Base formatter interface for RCM Insight output rendering."""

from abc import ABC, abstractmethod
from typing import List

from ..matrix.models import RCMMatrix, TreeNode


class BaseFormatter(ABC):
    """Abstract base class for output formatters.

    ``matrix`` is the full unfiltered source; ``roots`` is the (possibly
    filtered) forest the user is looking at.
    """

    @abstractmethod
    def render(self, matrix: RCMMatrix, roots: List[TreeNode]) -> None:
        """Render output to stdout."""

    @abstractmethod
    def format(self, matrix: RCMMatrix, roots: List[TreeNode]) -> str:
        """Return formatted string representation."""

"""Mathematical utilities for contribution scoring."""

from .gini import Gini
from .statistics import Statistics

__all__ = [
    "Gini",
    "Statistics",
]

"""Dispersion statistics for activity distributions."""

from typing import Sequence

import numpy as np


class Statistics:
    """Statistical helpers. Every degenerate input returns 0.0."""

    @staticmethod
    def coefficient_of_variation(values: Sequence[float]) -> float:
        """Population CV = std / mean.

        Returns 0.0 for empty input, a single value, or a zero mean.
        """
        if len(values) < 2:
            return 0.0
        arr = np.asarray(values, dtype=float)
        mean = float(arr.mean())
        if mean == 0:
            return 0.0
        return float(arr.std()) / mean

    @staticmethod
    def top_share(values: Sequence[float]) -> float:
        """Largest value's share of the total, 0.0 if the total is zero."""
        if len(values) == 0:
            return 0.0
        total = float(sum(values))
        if total <= 0:
            return 0.0
        return max(values) / total

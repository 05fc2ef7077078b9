"""Gini coefficient for inequality measurement.

Applied to per-member effort or lines changed, the Gini coefficient tells
how evenly a team shared the work.

    G = 0: perfect equality (every member contributed the same)
    G = 1: perfect inequality (one member did everything)

Reference: Gini (1912) - Variabilita e Mutabilita

Mean absolute difference form:
    G = sum_i sum_j |x_i - x_j| / (2 * n * sum(x))

which for sorted values x_1 <= x_2 <= ... <= x_n equals:
    G = (2 * sum(i * x_i)) / (n * sum(x_i)) - (n + 1) / n
"""

from typing import List, Union

import numpy as np


class Gini:
    """Gini coefficient calculations for inequality measurement."""

    @staticmethod
    def gini_coefficient(
        values: Union[List[float], List[int]],
        bias_correction: bool = False,
    ) -> float:
        """Compute Gini coefficient.

        Args:
            values: List of non-negative values. Must not be empty.
            bias_correction: If True, apply n/(n-1) correction for sample data.
                Team members are a full population, so scoring leaves it off.

        Returns:
            Gini coefficient in [0, 1]. A single value or an all-zero list
            has no inequality and returns 0.0.

        Raises:
            ValueError: If values is empty or contains negative values.

        Examples:
            [50, 50] -> 0.0
            [90, 10] -> 0.4
        """
        if not values:
            raise ValueError("Cannot compute Gini for empty list")

        if len(values) == 1:
            return 0.0

        arr = np.asarray(values, dtype=float)
        if np.any(arr < 0):
            raise ValueError("Gini requires non-negative values")

        total = float(arr.sum())
        if total == 0:
            return 0.0

        sorted_vals = np.sort(arr)
        n = len(sorted_vals)

        # i is 1-indexed
        weighted_sum = float(np.dot(np.arange(1, n + 1), sorted_vals))
        gini = (2.0 * weighted_sum) / (n * total) - (n + 1.0) / n

        if bias_correction:
            gini *= n / (n - 1)

        return max(0.0, min(1.0, gini))

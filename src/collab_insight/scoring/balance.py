"""Balance and spread components of the CQI.

All four scores are independent and return a documented constant instead
of raising on degenerate input:

    effort / LoC balance: fewer than two members or an all-zero total -> 0.0
    temporal spread:      no effort at all -> 0.0; a window under a week -> 100.0
    ownership spread:     no significant files -> 0.0
"""

from __future__ import annotations

import math
from typing import Mapping, Optional, Sequence

import numpy as np

from ..math.gini import Gini
from ..math.statistics import Statistics
from .effort import TimelineEntry

SECONDS_PER_WEEK = 7 * 24 * 3600


class BalanceScorer:
    """Gini-based balance plus temporal and ownership spread."""

    @staticmethod
    def balance(values: Sequence[float]) -> float:
        """100 x (1 - Gini(values))."""
        if len(values) < 2 or sum(values) <= 0:
            return 0.0
        return 100.0 * (1.0 - Gini.gini_coefficient(list(values)))

    effort_balance = balance
    loc_balance = balance

    @staticmethod
    def temporal_spread(
        timeline: Sequence[TimelineEntry],
        window: Optional[tuple[int, int]] = None,
    ) -> float:
        """How evenly weighted effort is spread over 7-day buckets.

        score = 100 x (1 - min(CV / 2, 1)), CV over per-bucket effort.

        Args:
            timeline: Weighted effort per chunk
            window: (start, end) unix seconds of the project. Defaults to the
                first and last timeline entry.
        """
        total = sum(e.weighted_effort for e in timeline)
        if not timeline or total <= 0:
            return 0.0

        if window is None:
            start = min(e.timestamp for e in timeline)
            end = max(e.timestamp for e in timeline)
        else:
            start, end = window

        span = max(0, end - start)
        num_buckets = max(1, math.ceil(span / SECONDS_PER_WEEK))
        if num_buckets == 1:
            return 100.0

        buckets = np.zeros(num_buckets)
        for entry in timeline:
            index = int((entry.timestamp - start) // SECONDS_PER_WEEK)
            buckets[min(max(index, 0), num_buckets - 1)] += entry.weighted_effort

        cv = Statistics.coefficient_of_variation(buckets.tolist())
        return 100.0 * (1.0 - min(cv / 2.0, 1.0))

    @staticmethod
    def ownership_spread(
        file_touches: Mapping[str, Mapping[str, set]],
        team_size: int,
        min_commits: int = 3,
        author_cap: int = 4,
    ) -> float:
        """Share of significant files worked on by several members.

        A file is significant when at least ``min_commits`` distinct commits
        touch it. Each contributes min(authors, cap) with
        cap = min(team_size, author_cap).
        """
        cap = min(team_size, author_cap)
        if cap < 1:
            return 0.0

        capped_total = 0
        significant = 0
        for path in sorted(file_touches):
            by_member = file_touches[path]
            commits = set().union(*by_member.values()) if by_member else set()
            if len(commits) < min_commits:
                continue
            significant += 1
            authors = sum(1 for shas in by_member.values() if shas)
            capped_total += min(authors, cap)

        if significant == 0:
            return 0.0
        return 100.0 * capped_total / (significant * cap)

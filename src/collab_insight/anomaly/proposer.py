"""Heuristic anomaly proposer.

Works on day-granular histograms only, so its ratios are estimates. Any
flag whose estimate reaches ``threshold * suspicion_margin`` is proposed;
the verifier decides what is actually reported.
"""

from __future__ import annotations

import math
from collections import Counter
from typing import Optional, Protocol

from ..config import AnomalyConfig
from .models import ActivityEvidence, AnomalyKind, CandidateFlag

SECONDS_PER_DAY = 86400


class AnomalyProposer(Protocol):
    def propose(self, evidence: ActivityEvidence) -> list[CandidateFlag]: ...


class HeuristicProposer:
    def __init__(self, config: Optional[AnomalyConfig] = None):
        self.config = config or AnomalyConfig()

    def propose(self, evidence: ActivityEvidence) -> list[CandidateFlag]:
        bounds = evidence.bounds()
        if not evidence.events or bounds is None:
            return []

        cfg = self.config
        start_day = bounds[0] // SECONDS_PER_DAY
        num_days = max(1, bounds[1] // SECONDS_PER_DAY - start_day + 1)
        day_counts = Counter(ts // SECONDS_PER_DAY - start_day for ts in evidence.timestamps)
        total = len(evidence.events)
        candidates: list[CandidateFlag] = []

        def _suspicious(estimate: float, threshold: float) -> bool:
            return estimate >= threshold * cfg.suspicion_margin

        if num_days > 1:
            late_from = math.floor(num_days * (1 - cfg.late_window_fraction))
            late = sum(n for day, n in day_counts.items() if day >= late_from)
            if _suspicious(late / total, cfg.late_dump_ratio):
                candidates.append(CandidateFlag(AnomalyKind.LATE_DUMP, late / total))

            active = sorted(d for d in day_counts if 0 <= d < num_days)
            gaps = [b - a for a, b in zip(active, active[1:])]
            if gaps:
                gap_ratio = max(gaps) / num_days
                if _suspicious(gap_ratio, cfg.inactive_gap_ratio):
                    candidates.append(CandidateFlag(AnomalyKind.INACTIVE_PERIOD, gap_ratio))

        # Days led by each member, as a cheap stand-in for commit share
        per_day: dict[int, Counter] = {}
        for member, ts in evidence.events:
            per_day.setdefault(ts // SECONDS_PER_DAY, Counter())[member] += 1
        leaders = Counter(min(c, key=lambda m: (-c[m], m)) for c in per_day.values())
        top_member = min(leaders, key=lambda m: (-leaders[m], m))
        lead_ratio = leaders[top_member] / len(per_day)
        if _suspicious(lead_ratio, cfg.solo_ratio):
            candidates.append(CandidateFlag(AnomalyKind.SOLO_DEVELOPMENT, lead_ratio, top_member))

        if num_days >= cfg.burst_min_days:
            busiest = math.ceil(num_days * cfg.burst_day_fraction)
            burst = sum(n for _, n in day_counts.most_common(busiest))
            if _suspicious(burst / total, cfg.burst_ratio):
                candidates.append(CandidateFlag(AnomalyKind.UNEVEN_DISTRIBUTION, burst / total))

        return candidates

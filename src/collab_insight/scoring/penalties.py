"""Multiplicative penalties.

Each rule is a pure predicate over a team's aggregate that returns a
Penalty or None. Applied penalties are folded by multiplication, so their
order does not change the result. The solo and severe-imbalance tiers are
one ranked rule and never both apply.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from ..config import PenaltyConfig
from ..filtering.models import FilterSummary
from .effort import TeamAggregate
from .models import Penalty


@dataclass(frozen=True)
class PenaltyInputs:
    aggregate: TeamAggregate
    filter_summary: FilterSummary = field(default_factory=FilterSummary)
    window: Optional[tuple[int, int]] = None  # project (start, end), unix seconds


class PenaltyRule(Protocol):
    code: str

    def evaluate(self, inputs: PenaltyInputs) -> Optional[Penalty]: ...


class ImbalanceRule:
    """Top contributor's effort share: solo tier first, else severe imbalance."""

    code = "IMBALANCE"

    def __init__(self, config: PenaltyConfig):
        self.config = config

    def evaluate(self, inputs: PenaltyInputs) -> Optional[Penalty]:
        share = inputs.aggregate.top_effort_share()
        if share > self.config.solo_threshold:
            return Penalty(
                "SOLO_DEVELOPMENT",
                self.config.solo_multiplier,
                f"Top contributor has {share:.0%} of weighted effort",
            )
        if share > self.config.imbalance_threshold:
            return Penalty(
                "SEVERE_IMBALANCE",
                self.config.imbalance_multiplier,
                f"Top contributor has {share:.0%} of weighted effort",
            )
        return None


class TrivialRatioRule:
    code = "HIGH_TRIVIAL_RATIO"

    def __init__(self, config: PenaltyConfig):
        self.config = config

    def evaluate(self, inputs: PenaltyInputs) -> Optional[Penalty]:
        ratio = inputs.filter_summary.excluded_ratio
        if ratio > self.config.trivial_ratio_threshold:
            return Penalty(
                self.code,
                self.config.trivial_multiplier,
                f"{ratio:.0%} of commits were filtered as trivial",
            )
        return None


class LowConfidenceRule:
    """Share of ratings below the confidence threshold. Failed ratings count as low."""

    code = "LOW_CONFIDENCE"

    def __init__(self, config: PenaltyConfig):
        self.config = config

    def evaluate(self, inputs: PenaltyInputs) -> Optional[Penalty]:
        ratings = inputs.aggregate.ratings
        if not ratings:
            return None
        low = sum(1 for r in ratings if r.confidence < self.config.confidence_threshold)
        ratio = low / len(ratings)
        if ratio > self.config.low_confidence_ratio:
            return Penalty(
                self.code,
                self.config.low_confidence_multiplier,
                f"{ratio:.0%} of ratings have low confidence",
            )
        return None


class LateWorkRule:
    """Share of weighted effort in the final part of the project window."""

    code = "LATE_WORK"

    def __init__(self, config: PenaltyConfig):
        self.config = config

    def evaluate(self, inputs: PenaltyInputs) -> Optional[Penalty]:
        ratio = late_effort_ratio(inputs, self.config.late_window_fraction)
        if ratio > self.config.late_work_ratio:
            return Penalty(
                self.code,
                self.config.late_work_multiplier,
                f"{ratio:.0%} of effort in the final "
                f"{self.config.late_window_fraction:.0%} of the project",
            )
        return None


def late_effort_ratio(inputs: PenaltyInputs, fraction: float) -> float:
    """Weighted effort at or after ``end - fraction * duration`` over total effort.

    0.0 when there is no effort or the window has zero length.
    """
    timeline = inputs.aggregate.timeline
    total = sum(e.weighted_effort for e in timeline)
    if not timeline or total <= 0:
        return 0.0

    if inputs.window is not None:
        start, end = inputs.window
    else:
        start = min(e.timestamp for e in timeline)
        end = max(e.timestamp for e in timeline)
    duration = end - start
    if duration <= 0:
        return 0.0

    cutoff = end - fraction * duration
    late = sum(e.weighted_effort for e in timeline if e.timestamp >= cutoff)
    return late / total


class PenaltyEngine:
    def __init__(
        self,
        config: Optional[PenaltyConfig] = None,
        rules: Optional[Sequence[PenaltyRule]] = None,
    ):
        self.config = config or PenaltyConfig()
        if rules is None:
            rules = (
                ImbalanceRule(self.config),
                TrivialRatioRule(self.config),
                LowConfidenceRule(self.config),
                LateWorkRule(self.config),
            )
        self.rules = tuple(rules)

    def apply(self, inputs: PenaltyInputs) -> tuple[float, tuple[Penalty, ...]]:
        """Return (product of multipliers, applied penalties in rule order)."""
        applied = []
        multiplier = 1.0
        for rule in self.rules:
            penalty = rule.evaluate(inputs)
            if penalty is not None:
                applied.append(penalty)
                multiplier *= penalty.multiplier
        return multiplier, tuple(applied)

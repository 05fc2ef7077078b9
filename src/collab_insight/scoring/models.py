"""Score data models."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional

from ..filtering.models import FilterSummary


class ScoreOutcome(Enum):
    """How the final value was produced.

    Everything except SCORED bypasses the weighted formula.
    """

    SCORED = "scored"
    SINGLE_CONTRIBUTOR = "single_contributor"
    NO_PRODUCTIVE_WORK = "no_productive_work"
    DEGRADED = "degraded"

    @property
    def label(self) -> str:
        return _OUTCOME_LABELS[self]


_OUTCOME_LABELS = {
    ScoreOutcome.SCORED: "scored",
    ScoreOutcome.SINGLE_CONTRIBUTOR: "no collaboration possible",
    ScoreOutcome.NO_PRODUCTIVE_WORK: "nothing to score",
    ScoreOutcome.DEGRADED: "degraded analysis",
}


@dataclass(frozen=True)
class ScoreComponents:
    """Component scores, each 0-100 or None when not applicable."""

    effort_balance: Optional[float] = None
    loc_balance: Optional[float] = None
    temporal_spread: Optional[float] = None
    ownership_spread: Optional[float] = None
    pair_programming: Optional[float] = None

    def as_dict(self) -> dict[str, Optional[float]]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Penalty:
    code: str
    multiplier: float
    reason: str


@dataclass(frozen=True)
class CompositeScore:
    value: float
    base_score: float
    penalty_multiplier: float = 1.0
    penalties: tuple[Penalty, ...] = ()
    components: ScoreComponents = field(default_factory=ScoreComponents)
    filter_summary: FilterSummary = field(default_factory=FilterSummary)
    outcome: ScoreOutcome = ScoreOutcome.SCORED
    weights: dict[str, float] = field(default_factory=dict)  # normalized, active only

    @property
    def marker(self) -> str:
        return self.outcome.label

    @property
    def is_terminal(self) -> bool:
        return self.outcome in (ScoreOutcome.SINGLE_CONTRIBUTOR, ScoreOutcome.NO_PRODUCTIVE_WORK)

"""Composite CQI scoring.

    base = sum(w_i * component_i) over active components, weights renormalized
    CQI  = clamp(base * product(penalty multipliers), 0, 100)

Terminal outcomes bypass the formula, checked in this order:

    team of one member              -> 0, single contributor
    no productive chunks            -> 0, nothing to score
    one member with productive work -> 0, single contributor
    rater unavailable or all failed -> LoC balance alone, degraded
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..config import ScoringConfig, WeightConfig
from ..filtering.chunker import CommitChunk
from ..filtering.models import FilterSummary
from ..logging_config import get_logger
from ..rating.models import Rating
from .balance import BalanceScorer
from .effort import EffortAggregator, TeamAggregate
from .models import CompositeScore, ScoreComponents, ScoreOutcome
from .pairing import PairProgrammingVerifier, TeamAttendance
from .penalties import PenaltyEngine, PenaltyInputs

logger = get_logger(__name__)

# component field -> WeightConfig field
COMPONENT_WEIGHTS = {
    "effort_balance": "effort",
    "loc_balance": "loc",
    "temporal_spread": "temporal",
    "ownership_spread": "ownership",
    "pair_programming": "pair_programming",
}


def normalize_weights(components: ScoreComponents, weights: WeightConfig) -> dict[str, float]:
    """Weights of the non-None components, rescaled to sum to 1.0."""
    active = {
        name: getattr(weights, key)
        for name, key in COMPONENT_WEIGHTS.items()
        if getattr(components, name) is not None
    }
    if not active:
        return {}
    total = sum(active.values())
    if total <= 0:
        return {name: 1.0 / len(active) for name in active}
    return {name: w / total for name, w in active.items()}


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


class CompositeScorer:
    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config or ScoringConfig()
        self.penalties = PenaltyEngine(self.config.penalties)
        self.pairing = PairProgrammingVerifier(self.config.pairing.mandatory_sessions)

    def components(
        self,
        aggregate: TeamAggregate,
        attendance: Optional[TeamAttendance] = None,
        window: Optional[tuple[int, int]] = None,
    ) -> ScoreComponents:
        members = aggregate.member_ids
        return ScoreComponents(
            effort_balance=BalanceScorer.effort_balance([aggregate.effort[m] for m in members]),
            loc_balance=BalanceScorer.loc_balance([aggregate.lines[m] for m in members]),
            temporal_spread=BalanceScorer.temporal_spread(aggregate.timeline, window),
            ownership_spread=BalanceScorer.ownership_spread(
                aggregate.file_touches,
                aggregate.team_size,
                min_commits=self.config.significant_file_commits,
                author_cap=self.config.ownership_author_cap,
            ),
            pair_programming=self.pairing.verify(members, attendance, aggregate.commit_times),
        )

    def score(
        self,
        aggregate: TeamAggregate,
        filter_summary: Optional[FilterSummary] = None,
        attendance: Optional[TeamAttendance] = None,
        window: Optional[tuple[int, int]] = None,
        rating_available: bool = True,
    ) -> CompositeScore:
        """Compute the team's CQI.

        Args:
            aggregate: Output of EffortAggregator for the whole roster
            filter_summary: Pre-filter summary over the team's raw commits
            attendance: Paired-session schedule, if imported
            window: Project (start, end) in unix seconds; defaults to the
                span of the team's productive chunks
            rating_available: False when the rater could not be reached
        """
        summary = filter_summary or FilterSummary()

        if aggregate.team_size <= 1:
            return self._terminal(ScoreOutcome.SINGLE_CONTRIBUTOR, summary)
        if not aggregate.timeline:
            return self._terminal(ScoreOutcome.NO_PRODUCTIVE_WORK, summary)
        if len(aggregate.contributors()) <= 1:
            return self._terminal(ScoreOutcome.SINGLE_CONTRIBUTOR, summary)

        all_failed = bool(aggregate.ratings) and all(r.is_error for r in aggregate.ratings)
        if not rating_available or all_failed or not aggregate.ratings:
            loc = BalanceScorer.loc_balance([aggregate.lines[m] for m in aggregate.member_ids])
            logger.warning("Rating unavailable, scoring LoC balance only")
            return CompositeScore(
                value=clamp(loc),
                base_score=loc,
                components=ScoreComponents(loc_balance=loc),
                filter_summary=summary,
                outcome=ScoreOutcome.DEGRADED,
                weights={"loc_balance": 1.0},
            )

        components = self.components(aggregate, attendance, window)
        weights = normalize_weights(components, self.config.weights)
        base = sum(w * getattr(components, name) for name, w in weights.items())

        multiplier, applied = self.penalties.apply(
            PenaltyInputs(aggregate=aggregate, filter_summary=summary, window=window)
        )
        value = clamp(base * multiplier)

        logger.debug(
            "CQI %.1f = base %.1f x %.3f (%s)",
            value,
            base,
            multiplier,
            ", ".join(p.code for p in applied) or "no penalties",
        )
        return CompositeScore(
            value=value,
            base_score=base,
            penalty_multiplier=multiplier,
            penalties=applied,
            components=components,
            filter_summary=summary,
            outcome=ScoreOutcome.SCORED,
            weights=weights,
        )

    @staticmethod
    def _terminal(outcome: ScoreOutcome, summary: FilterSummary) -> CompositeScore:
        logger.info("CQI 0: %s", outcome.label)
        return CompositeScore(value=0.0, base_score=0.0, filter_summary=summary, outcome=outcome)


def compute_cqi(
    member_ids: Iterable[str],
    rated: Sequence[tuple[CommitChunk, Optional[Rating]]],
    filter_summary: Optional[FilterSummary] = None,
    attendance: Optional[TeamAttendance] = None,
    window: Optional[tuple[int, int]] = None,
    rating_available: bool = True,
    config: Optional[ScoringConfig] = None,
) -> CompositeScore:
    """Aggregate rated chunks and score them in one call."""
    aggregate = EffortAggregator().aggregate(member_ids, rated)
    return CompositeScorer(config).score(
        aggregate,
        filter_summary=filter_summary,
        attendance=attendance,
        window=window,
        rating_available=rating_available,
    )

"""Effort aggregation, component scores, penalties and the composite CQI."""

from .balance import BalanceScorer
from .composite import CompositeScorer, compute_cqi, normalize_weights
from .effort import EffortAggregator, TeamAggregate, TimelineEntry
from .models import CompositeScore, Penalty, ScoreComponents, ScoreOutcome
from .pairing import PairProgrammingVerifier, Session, TeamAttendance
from .penalties import PenaltyEngine, PenaltyInputs

__all__ = [
    "BalanceScorer",
    "CompositeScorer",
    "CompositeScore",
    "compute_cqi",
    "normalize_weights",
    "EffortAggregator",
    "TeamAggregate",
    "TimelineEntry",
    "Penalty",
    "PenaltyEngine",
    "PenaltyInputs",
    "ScoreComponents",
    "ScoreOutcome",
    "PairProgrammingVerifier",
    "Session",
    "TeamAttendance",
]

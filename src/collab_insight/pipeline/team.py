"""Single-team analysis: history -> attribution -> filter -> rate -> score."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Sequence

from ..anomaly import ActivityEvidence, AnomalyFinding, detect
from ..attribution import AttributionMap, TeamMember, attribute_commits
from ..attribution.identity import normalize_email
from ..config import ScoringConfig
from ..exceptions import RepositoryError
from ..filtering import CommitChunk, CommitChunker, CommitPreFilter, FilterDecision, FilterSummary
from ..history import CommitRecord, GitExtractor, PushAnchor
from ..logging_config import get_logger, team_context
from ..rating import ChunkRater, Rating, rate_chunks
from ..scoring import (
    CompositeScore,
    CompositeScorer,
    EffortAggregator,
    ScoreOutcome,
    TeamAttendance,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class TeamInput:
    """Everything needed to analyze one team.

    Exactly one of ``commits`` and ``repo_path`` should be given. When
    ``commits`` is None the history is read from ``repo_path`` with git.
    """

    team_id: str
    members: tuple[TeamMember, ...]
    anchors: tuple[PushAnchor, ...] = ()
    commits: Optional[tuple[CommitRecord, ...]] = None
    repo_path: Optional[str] = None
    overrides: Mapping[str, str] = field(default_factory=dict)  # email -> member id
    attendance: Optional[TeamAttendance] = None
    window: Optional[tuple[int, int]] = None  # project (start, end), unix seconds

    @property
    def member_ids(self) -> tuple[str, ...]:
        return tuple(m.member_id for m in self.members)

    def registered_emails(self) -> dict[str, str]:
        return {normalize_email(m.email): m.member_id for m in self.members if m.email}


class TeamState(Enum):
    DONE = "done"
    ERROR = "error"


@dataclass
class TeamResult:
    team_id: str
    state: TeamState = TeamState.DONE
    attribution: Optional[AttributionMap] = None
    decisions: list[FilterDecision] = field(default_factory=list)
    filter_summary: FilterSummary = field(default_factory=FilterSummary)
    chunks: list[CommitChunk] = field(default_factory=list)
    ratings: list[tuple[CommitChunk, Optional[Rating]]] = field(default_factory=list)
    score: Optional[CompositeScore] = None
    anomalies: list[AnomalyFinding] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is TeamState.DONE

    @classmethod
    def failed(cls, team_id: str, message: str) -> TeamResult:
        return cls(team_id=team_id, state=TeamState.ERROR, error=message)


def _load_commits(team: TeamInput, config: ScoringConfig) -> Sequence[CommitRecord]:
    if team.commits is not None:
        return team.commits
    if team.repo_path is None:
        return ()
    history = GitExtractor(team.repo_path, max_commits=config.run.git_max_commits).extract()
    return history.commits


def root_emails(team: TeamInput) -> set[str]:
    """Root-commit author emails of one team's history, lowercased.

    Raises:
        RepositoryError: If the team's repository cannot be read.
    """
    if team.commits is not None:
        return {normalize_email(c.email) for c in team.commits if c.is_root}
    if team.repo_path is None:
        return set()
    return GitExtractor(team.repo_path).root_emails()


def analyze_team(
    team: TeamInput,
    rater: Optional[ChunkRater] = None,
    config: Optional[ScoringConfig] = None,
    rating_limiter: Optional[threading.Semaphore] = None,
    template_email: Optional[str] = None,
) -> TeamResult:
    """Run the full pipeline for one team.

    Args:
        team: Roster, anchors and history source
        rater: Rating collaborator. Without one the team is scored degraded.
        config: Scoring configuration
        rating_limiter: Semaphore shared across teams of a run
        template_email: Template author detected across the course. The
            configured ``run.template_author_email`` takes precedence.

    Returns:
        TeamResult. Repository errors produce an ERROR result instead of
        raising, so a batch can carry on with the other teams.
    """
    with team_context(team.team_id):
        return _run_team(team, rater, config or ScoringConfig(), rating_limiter, template_email)


def _run_team(
    team: TeamInput,
    rater: Optional[ChunkRater],
    config: ScoringConfig,
    rating_limiter: Optional[threading.Semaphore],
    template_email: Optional[str],
) -> TeamResult:
    try:
        commits = _load_commits(team, config)
    except RepositoryError as e:
        logger.error("Could not read history: %s", e)
        return TeamResult.failed(team.team_id, str(e))

    attribution = attribute_commits(
        team.anchors,
        team.registered_emails(),
        commits,
        overrides=team.overrides,
        template_email=config.run.template_author_email or template_email,
        members=team.member_ids,
    )
    counts = attribution.outcome_counts()
    logger.info(
        "%d commits (%d member, %d orphan, %d template)",
        len(attribution),
        counts["member"],
        counts["orphan"],
        counts["template"],
    )

    prefiltered = CommitPreFilter(config.filters).run(attribution.member_commits())
    chunks = CommitChunker(config.chunking).build(prefiltered.kept)

    rated: list[tuple[CommitChunk, Optional[Rating]]]
    rating_available = rater is not None
    if rater is None:
        logger.warning("No rater configured, scoring without ratings")
        rated = [(chunk, None) for chunk in chunks]
    else:
        outcome = rate_chunks(
            rater,
            chunks,
            concurrency=config.run.rating_concurrency,
            timeout=config.run.rating_timeout_seconds,
            limiter=rating_limiter,
        )
        if outcome.unavailable:
            rating_available = False
            rated = [(chunk, None) for chunk in chunks]
        else:
            rated = list(outcome.rated)

    aggregate = EffortAggregator().aggregate(team.member_ids, rated)
    score = CompositeScorer(config).score(
        aggregate,
        filter_summary=prefiltered.summary,
        attendance=team.attendance,
        window=team.window,
        rating_available=rating_available,
    )
    anomalies = detect(ActivityEvidence.from_attribution(attribution, team.window), config.anomaly)

    logger.info(
        "CQI %.1f%s",
        score.value,
        "" if score.outcome is ScoreOutcome.SCORED else f" ({score.outcome.label})",
    )
    return TeamResult(
        team_id=team.team_id,
        attribution=attribution,
        decisions=prefiltered.decisions,
        filter_summary=prefiltered.summary,
        chunks=chunks,
        ratings=rated,
        score=score,
        anomalies=anomalies,
    )

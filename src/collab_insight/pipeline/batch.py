"""Course-wide analysis over many teams.

Teams are analyzed on a bounded worker pool. A failure in one team is
recorded and the batch carries on. Cancellation is checked before each
team starts, and results of teams that already finished are kept. An
interrupt cancels the teams still queued and leaves the run CANCELLED.

Runs share one process-wide RunStateStore unless given their own, so a
second run of an exercise that is still active fails fast.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Sequence

from ..attribution import detect_template_author
from ..config import ScoringConfig
from ..exceptions import RepositoryError, RunStateError
from ..logging_config import get_logger
from ..rating import ChunkRater
from .state import RunStateStore, RunStatus, default_store
from .team import TeamInput, TeamResult, analyze_team, root_emails

logger = get_logger(__name__)

TeamCallback = Callable[[TeamResult], None]


class CourseRun:
    """One analysis run over every team of an exercise.

    Example:
        >>> run = CourseRun("ex-1", teams, rater=StaticRater.from_file("ratings.json"))
        >>> results = run.run()
    """

    def __init__(
        self,
        exercise_id: str,
        teams: Sequence[TeamInput],
        rater: Optional[ChunkRater] = None,
        config: Optional[ScoringConfig] = None,
        store: Optional[RunStateStore] = None,
    ):
        self.exercise_id = exercise_id
        self.teams = list(teams)
        self.rater = rater
        self.config = config or ScoringConfig()
        self.store = store or default_store()
        self._cancel = threading.Event()
        limit = self.config.run.run_rating_limit
        self._rating_limiter = threading.BoundedSemaphore(limit) if limit else None

    @property
    def status(self) -> RunStatus:
        return self.store.get(self.exercise_id)

    def cancel(self) -> None:
        """Stop scheduling new teams. Teams already in progress finish."""
        self._cancel.set()
        self.store.cancel(self.exercise_id)

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def run(self, on_team_done: Optional[TeamCallback] = None) -> list[TeamResult]:
        """Analyze all teams.

        Args:
            on_team_done: Called with each result as soon as it is ready

        Returns:
            Results of every team that was analyzed, in input order.

        Raises:
            RunAlreadyActiveError: If this exercise is already running.
        """
        self.store.start(self.exercise_id, len(self.teams))
        results: dict[str, TeamResult] = {}

        executor = ThreadPoolExecutor(
            max_workers=max(1, self.config.run.workers), thread_name_prefix="team"
        )
        try:
            template_email = self.config.run.template_author_email or self._detect_template()
            futures = [executor.submit(self._analyze, team, template_email) for team in self.teams]
            for future in as_completed(futures):
                result = future.result()
                if result is None:
                    continue
                results[result.team_id] = result
                if not self._record(result):
                    continue
                if on_team_done is not None:
                    on_team_done(result)
        except Exception as e:
            self._cancel.set()
            self.store.fail(self.exercise_id, str(e))
            raise
        except BaseException:
            logger.warning("Run %s interrupted", self.exercise_id)
            self.cancel()
            raise
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

        if not self._cancel.is_set():
            self.store.complete(self.exercise_id)
        return [results[t.team_id] for t in self.teams if t.team_id in results]

    def _detect_template(self) -> Optional[str]:
        """Template author shared by the root commits of several teams."""
        per_team = []
        for team in self.teams:
            try:
                per_team.append(root_emails(team))
            except RepositoryError as e:
                logger.debug("Team %s skipped for template detection: %s", team.team_id, e)
        author = detect_template_author(per_team)
        if author is not None:
            logger.info("Exercise %s: template author %s", self.exercise_id, author)
        return author

    def _analyze(self, team: TeamInput, template_email: Optional[str]) -> Optional[TeamResult]:
        if self._cancel.is_set():
            logger.debug("Skipping team %s: run cancelled", team.team_id)
            return None
        try:
            self.store.team_started(self.exercise_id, team.team_id)
        except RunStateError:
            logger.debug("Skipping team %s: run no longer active", team.team_id)
            return None
        try:
            return analyze_team(
                team,
                rater=self.rater,
                config=self.config,
                rating_limiter=self._rating_limiter,
                template_email=template_email,
            )
        except Exception as e:
            logger.exception("Analysis of team %s failed", team.team_id)
            return TeamResult.failed(team.team_id, f"{type(e).__name__}: {e}")

    def _record(self, result: TeamResult) -> bool:
        """Count a finished team. False once the run is no longer active."""
        if self._cancel.is_set():
            return False
        try:
            self.store.team_finished(self.exercise_id, result.team_id, failed=not result.ok)
        except RunStateError:
            return False
        return True

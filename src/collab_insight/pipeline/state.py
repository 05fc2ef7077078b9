"""Thread-safe run status for course-wide analyses.

One RunStatus per course exercise. Every mutation goes through the store's
lock, and a second start for an exercise that is still RUNNING fails
immediately.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ..exceptions import RunAlreadyActiveError, RunStateError
from ..logging_config import get_logger

logger = get_logger(__name__)


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class RunStatus:
    exercise_id: str
    state: RunState = RunState.IDLE
    total_teams: int = 0
    processed_teams: int = 0
    failed_teams: int = 0
    current_team: Optional[str] = None
    started_at: Optional[float] = None
    updated_at: Optional[float] = None
    error_message: Optional[str] = None

    @property
    def is_running(self) -> bool:
        return self.state is RunState.RUNNING


class RunStateStore:
    """Holds the status of every exercise's latest run.

    Statuses are immutable snapshots, so readers never see a half-written
    record.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._runs: dict[str, RunStatus] = {}

    def get(self, exercise_id: str) -> RunStatus:
        with self._lock:
            return self._runs.get(exercise_id) or RunStatus(exercise_id)

    def start(self, exercise_id: str, total_teams: int) -> RunStatus:
        """Begin a fresh run.

        Raises:
            RunAlreadyActiveError: If the exercise already has a RUNNING run.
        """
        with self._lock:
            current = self._runs.get(exercise_id)
            if current is not None and current.is_running:
                raise RunAlreadyActiveError(exercise_id)
            now = time.time()
            status = RunStatus(
                exercise_id=exercise_id,
                state=RunState.RUNNING,
                total_teams=total_teams,
                started_at=now,
                updated_at=now,
            )
            self._runs[exercise_id] = status
        logger.info("Started analysis for exercise %s with %d teams", exercise_id, total_teams)
        return status

    def team_started(self, exercise_id: str, team_id: str) -> RunStatus:
        return self._update(exercise_id, current_team=team_id)

    def team_finished(self, exercise_id: str, team_id: str, failed: bool = False) -> RunStatus:
        with self._lock:
            status = self._running(exercise_id)
            updated = replace(
                status,
                processed_teams=status.processed_teams + 1,
                failed_teams=status.failed_teams + (1 if failed else 0),
                current_team=None if status.current_team == team_id else status.current_team,
                updated_at=time.time(),
            )
            self._runs[exercise_id] = updated
            return updated

    def complete(self, exercise_id: str) -> RunStatus:
        status = self._finish(exercise_id, RunState.DONE)
        logger.info(
            "Completed analysis for exercise %s (%d/%d teams, %d failed)",
            exercise_id,
            status.processed_teams,
            status.total_teams,
            status.failed_teams,
        )
        return status

    def fail(self, exercise_id: str, message: str) -> RunStatus:
        logger.error("Analysis failed for exercise %s: %s", exercise_id, message)
        return self._finish(exercise_id, RunState.ERROR, error_message=message)

    def cancel(self, exercise_id: str) -> RunStatus:
        """Mark a RUNNING run cancelled. Other states are returned unchanged."""
        with self._lock:
            status = self.get(exercise_id)
            if not status.is_running:
                return status
            updated = replace(
                status, state=RunState.CANCELLED, current_team=None, updated_at=time.time()
            )
            self._runs[exercise_id] = updated
        logger.info(
            "Cancelled analysis for exercise %s (processed: %d/%d)",
            exercise_id,
            updated.processed_teams,
            updated.total_teams,
        )
        return updated

    def recover_stale(self) -> list[str]:
        """Mark every RUNNING run cancelled, e.g. after a restart. Returns their ids."""
        with self._lock:
            stale = sorted(e for e, s in self._runs.items() if s.is_running)
            for exercise_id in stale:
                self._runs[exercise_id] = replace(
                    self._runs[exercise_id],
                    state=RunState.CANCELLED,
                    current_team=None,
                    updated_at=time.time(),
                )
        if stale:
            logger.info("Found %d orphaned RUNNING analyses, set to CANCELLED", len(stale))
        return stale

    def reset(self, exercise_id: str) -> RunStatus:
        with self._lock:
            current = self._runs.get(exercise_id)
            if current is not None and current.is_running:
                raise RunAlreadyActiveError(exercise_id)
            self._runs.pop(exercise_id, None)
            return RunStatus(exercise_id)

    def _running(self, exercise_id: str) -> RunStatus:
        status = self._runs.get(exercise_id)
        if status is None or not status.is_running:
            raise RunStateError(
                f"Analysis is not running for exercise {exercise_id}",
                details={"exercise_id": exercise_id},
            )
        return status

    def _update(self, exercise_id: str, **changes) -> RunStatus:
        with self._lock:
            status = self._running(exercise_id)
            updated = replace(status, updated_at=time.time(), **changes)
            self._runs[exercise_id] = updated
            return updated

    def _finish(
        self, exercise_id: str, state: RunState, error_message: Optional[str] = None
    ) -> RunStatus:
        with self._lock:
            status = self.get(exercise_id)
            updated = replace(
                status,
                state=state,
                current_team=None,
                updated_at=time.time(),
                error_message=error_message,
            )
            self._runs[exercise_id] = updated
            return updated


_default_store = RunStateStore()


def default_store() -> RunStateStore:
    """The store shared by every run in this process."""
    return _default_store

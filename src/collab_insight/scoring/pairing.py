"""Pair-programming verification for two-member teams.

Each paired session date earns full credit when both members committed
that calendar day (UTC), half credit when only one did:

    score = min(100, 100 x credit / mandatory_sessions)

The component is None (not applicable) unless the team has exactly two
members and at least one paired session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Iterable, Mapping, Optional, Sequence

from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Session:
    day: date
    attended: Mapping[str, bool] = field(default_factory=dict)  # member id -> present


@dataclass(frozen=True)
class TeamAttendance:
    """Scheduled sessions of one team with per-member attendance."""

    sessions: tuple[Session, ...] = ()

    @classmethod
    def from_dates(cls, days: Iterable[date]) -> TeamAttendance:
        return cls(sessions=tuple(Session(day=d) for d in days))

    def paired_sessions(self, member_ids: Sequence[str]) -> list[date]:
        """Dates every member attended, sorted.

        A session without any attendance record counts as attended.
        """
        days = set()
        for session in self.sessions:
            if not session.attended or all(session.attended.get(m, False) for m in member_ids):
                days.add(session.day)
        return sorted(days)


def utc_day(timestamp: int) -> date:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date()


class PairProgrammingVerifier:
    def __init__(self, mandatory_sessions: int = 5):
        self.mandatory_sessions = mandatory_sessions

    def verify(
        self,
        member_ids: Sequence[str],
        attendance: Optional[TeamAttendance],
        commit_times: Mapping[str, Sequence[int]],
    ) -> Optional[float]:
        """Score commit activity on paired session dates.

        Args:
            member_ids: Team roster
            attendance: Scheduled sessions, or None if none were imported
            commit_times: Member id -> timestamps of that member's productive commits

        Returns:
            Score in [0, 100], or None when the metric does not apply.
        """
        if len(member_ids) != 2:
            logger.debug("Pair programming not applicable: team size %d", len(member_ids))
            return None

        sessions = attendance.paired_sessions(member_ids) if attendance else []
        if not sessions:
            logger.debug("Pair programming not applicable: no paired sessions")
            return None

        committers = sorted(m for m, times in commit_times.items() if times)
        if len(committers) > 2:
            logger.debug("Pair programming not applicable: %d committers in a pair", len(committers))
            return None
        if len(committers) < 2:
            return 0.0

        days_by_member = {m: {utc_day(ts) for ts in commit_times[m]} for m in committers}

        credit = 0.0
        for day in sessions:
            present = sum(1 for m in committers if day in days_by_member[m])
            if present == 2:
                credit += 1.0
            elif present == 1:
                credit += 0.5

        score = min(100.0, 100.0 * credit / self.mandatory_sessions)
        logger.debug(
            "Pair programming: %.1f credit over %d sessions (%d mandatory) -> %.1f",
            credit,
            len(sessions),
            self.mandatory_sessions,
            score,
        )
        return score

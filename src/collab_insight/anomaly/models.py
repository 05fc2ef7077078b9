"""Anomaly flag models. Display only, never part of the CQI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from ..attribution.models import AttributionMap


class AnomalyKind(Enum):
    LATE_DUMP = "late_dump"
    SOLO_DEVELOPMENT = "solo_development"
    INACTIVE_PERIOD = "inactive_period"
    UNEVEN_DISTRIBUTION = "uneven_distribution"


@dataclass(frozen=True)
class ActivityEvidence:
    """Member commit events of one team, sorted by (timestamp, member)."""

    events: tuple[tuple[str, int], ...]
    window: Optional[tuple[int, int]] = None  # project (start, end), unix seconds

    @classmethod
    def from_events(
        cls, events: Iterable[tuple[str, int]], window: Optional[tuple[int, int]] = None
    ) -> ActivityEvidence:
        return cls(events=tuple(sorted(events, key=lambda e: (e[1], e[0]))), window=window)

    @classmethod
    def from_attribution(
        cls, attribution: AttributionMap, window: Optional[tuple[int, int]] = None
    ) -> ActivityEvidence:
        return cls.from_events(
            ((a.member_id, a.timestamp) for a in attribution.member_commits()), window
        )

    @property
    def timestamps(self) -> list[int]:
        return [ts for _, ts in self.events]

    def bounds(self) -> Optional[tuple[int, int]]:
        if self.window is not None:
            return self.window
        if not self.events:
            return None
        return self.events[0][1], self.events[-1][1]


@dataclass(frozen=True)
class CandidateFlag:
    """A heuristic suspicion. Its ratio is an estimate and must be verified."""

    kind: AnomalyKind
    claimed_ratio: float
    member_id: Optional[str] = None


@dataclass(frozen=True)
class AnomalyFinding:
    kind: AnomalyKind
    ratio: float  # exact, recomputed from commit counts
    threshold: float
    message: str
    member_id: Optional[str] = None
    corrected: bool = False  # the heuristic's claim differed from the exact ratio

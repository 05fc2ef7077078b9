"""Per-member effort aggregation over rated chunks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from ..filtering.chunker import CommitChunk
from ..math.statistics import Statistics
from ..rating.models import Rating


@dataclass(frozen=True)
class TimelineEntry:
    member_id: str
    timestamp: int
    weighted_effort: float
    weighted_lines: float


@dataclass
class TeamAggregate:
    """Everything the scorers and penalties read, for one team.

    ``effort`` and ``lines`` hold an entry for every team member, zero for
    members without productive chunks.
    """

    member_ids: tuple[str, ...]
    effort: dict[str, float] = field(default_factory=dict)
    lines: dict[str, float] = field(default_factory=dict)
    timeline: list[TimelineEntry] = field(default_factory=list)
    file_touches: dict[str, dict[str, set[str]]] = field(default_factory=dict)  # path -> member -> shas
    commit_times: dict[str, list[int]] = field(default_factory=dict)
    ratings: list[Rating] = field(default_factory=list)

    @property
    def team_size(self) -> int:
        return len(self.member_ids)

    @property
    def total_effort(self) -> float:
        return sum(self.effort.values())

    def top_effort_share(self) -> float:
        return Statistics.top_share([self.effort[m] for m in self.member_ids])

    def contributors(self) -> list[str]:
        """Members with at least one productive chunk, in roster order."""
        return [m for m in self.member_ids if self.commit_times.get(m)]


class EffortAggregator:
    """Folds rated chunks into per-member totals.

    weighted effort = effort x qualityMultiplier x filterWeight
    lines changed   = (added + deleted) x filterWeight
    """

    def aggregate(
        self,
        member_ids: Iterable[str],
        rated: Sequence[tuple[CommitChunk, Optional[Rating]]],
    ) -> TeamAggregate:
        """Aggregate a team's chunks.

        Args:
            member_ids: Full team roster
            rated: (chunk, rating) pairs. A None rating means the chunk was not
                rated at all (degraded run) and adds lines but no effort.
        """
        members = tuple(dict.fromkeys(member_ids))
        aggregate = TeamAggregate(
            member_ids=members,
            effort={m: 0.0 for m in members},
            lines={m: 0.0 for m in members},
            commit_times={m: [] for m in members},
        )

        for chunk, rating in rated:
            member = chunk.member_id
            if member not in aggregate.effort:
                # Chunk from someone outside the roster; scoring only covers members
                continue

            effort = rating.weighted_effort * chunk.weight if rating is not None else 0.0
            lines = chunk.weighted_lines

            aggregate.effort[member] += effort
            aggregate.lines[member] += lines
            aggregate.commit_times[member].extend(chunk.timestamps)
            aggregate.timeline.append(
                TimelineEntry(
                    member_id=member,
                    timestamp=chunk.timestamp,
                    weighted_effort=effort,
                    weighted_lines=lines,
                )
            )
            for path, sha in chunk.file_touches():
                aggregate.file_touches.setdefault(path, {}).setdefault(member, set()).add(sha)
            if rating is not None:
                aggregate.ratings.append(rating)

        aggregate.timeline.sort(key=lambda e: (e.timestamp, e.member_id))
        return aggregate

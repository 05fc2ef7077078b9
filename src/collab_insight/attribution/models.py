"""Attribution data models: team members, outcomes, and the attribution map."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from ..history.models import CommitRecord


class Outcome(Enum):
    """Where a commit ended up. Every commit gets exactly one."""

    MEMBER = "member"
    ORPHAN = "orphan"
    TEMPLATE = "template"


class ResolutionSource(Enum):
    """Which evidence decided a commit's outcome."""

    ANCHOR = "anchor"
    REGISTERED = "registered"
    OVERRIDE = "override"
    LEARNED = "learned"
    TEMPLATE = "template"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class TeamMember:
    member_id: str
    email: str = ""
    name: str = ""


@dataclass(frozen=True)
class AttributedCommit:
    commit: CommitRecord
    outcome: Outcome
    source: ResolutionSource
    member_id: Optional[str] = None

    @property
    def sha(self) -> str:
        return self.commit.sha

    @property
    def timestamp(self) -> int:
        return self.commit.timestamp


@dataclass
class AttributionMap:
    """Total map sha -> AttributedCommit for one repository.

    Entries are kept in (timestamp, sha) order so iteration and
    serialization are reproducible.
    """

    entries: dict[str, AttributedCommit] = field(default_factory=dict)
    learned: dict[str, tuple[str, ...]] = field(default_factory=dict)  # raw email -> member ids
    template_author: Optional[str] = None
    ignored_anchors: tuple[str, ...] = ()  # anchor shas missing from history

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, sha: object) -> bool:
        return sha in self.entries

    def __getitem__(self, sha: str) -> AttributedCommit:
        return self.entries[sha]

    def __iter__(self) -> Iterator[AttributedCommit]:
        return iter(self.entries.values())

    def with_outcome(self, outcome: Outcome) -> list[AttributedCommit]:
        return [a for a in self.entries.values() if a.outcome is outcome]

    def member_commits(self) -> list[AttributedCommit]:
        return self.with_outcome(Outcome.MEMBER)

    def orphans(self) -> list[AttributedCommit]:
        return self.with_outcome(Outcome.ORPHAN)

    def template_commits(self) -> list[AttributedCommit]:
        return self.with_outcome(Outcome.TEMPLATE)

    def commits_for(self, member_id: str) -> list[AttributedCommit]:
        return [a for a in self.entries.values() if a.member_id == member_id]

    def outcome_counts(self) -> dict[str, int]:
        counts = {o.value: 0 for o in Outcome}
        for a in self.entries.values():
            counts[a.outcome.value] += 1
        return counts

    def as_rows(self) -> list[tuple[str, str, str, str]]:
        """(sha, outcome, member_id or "", source) rows for export or comparison."""
        return [
            (a.sha, a.outcome.value, a.member_id or "", a.source.value)
            for a in self.entries.values()
        ]

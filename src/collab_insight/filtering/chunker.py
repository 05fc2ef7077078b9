"""Group kept commits into rating chunks.

Small consecutive commits by the same member are bundled so a burst of
"fix", "fix again" commits is rated once as a whole. Very large commits are
split by file so every chunk stays within what a rater can read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..attribution.models import AttributedCommit
from ..config import ChunkConfig
from ..history.models import FileChange
from ..logging_config import get_logger
from . import patterns
from .models import FilterDecision, FilterReason

logger = get_logger(__name__)


@dataclass(frozen=True)
class CommitChunk:
    """One unit submitted for rating."""

    chunk_id: str
    member_id: str
    shas: tuple[str, ...]
    timestamps: tuple[int, ...]  # one per constituent commit
    files: tuple[str, ...]
    lines_added: int
    lines_deleted: int
    subject: str = ""
    weight: float = 1.0
    touches: tuple[tuple[str, str], ...] = ()  # (path, sha) per file per commit

    @property
    def timestamp(self) -> int:
        return min(self.timestamps)

    @property
    def lines_changed(self) -> int:
        return self.lines_added + self.lines_deleted

    @property
    def weighted_lines(self) -> float:
        return self.lines_changed * self.weight

    @property
    def is_bundle(self) -> bool:
        return len(self.shas) > 1

    def file_touches(self) -> tuple[tuple[str, str], ...]:
        if self.touches:
            return self.touches
        return tuple((path, sha) for sha in self.shas for path in self.files)


class CommitChunker:
    def __init__(self, config: Optional[ChunkConfig] = None):
        self.config = config or ChunkConfig()

    def build(self, kept: Sequence[tuple[AttributedCommit, FilterDecision]]) -> list[CommitChunk]:
        """Turn pre-filtered member commits into chunks, ordered by (timestamp, id)."""
        by_member: dict[str, list[tuple[AttributedCommit, FilterDecision]]] = {}
        for attributed, decision in kept:
            if attributed.member_id is None:
                continue
            by_member.setdefault(attributed.member_id, []).append((attributed, decision))

        chunks: list[CommitChunk] = []
        for member_id in sorted(by_member):
            items = sorted(by_member[member_id], key=lambda p: (p[0].timestamp, p[0].sha))
            for group in self._bundle(items):
                if len(group) > 1:
                    chunks.append(self._bundle_chunk(member_id, group))
                else:
                    chunks.extend(self._split(member_id, *group[0]))

        chunks.sort(key=lambda c: (c.timestamp, c.chunk_id))
        logger.debug("Built %d chunks from %d commits", len(chunks), len(kept))
        return chunks

    def _is_small(self, attributed: AttributedCommit, decision: FilterDecision) -> bool:
        return (
            decision.weight == 1.0
            and attributed.commit.lines_changed <= self.config.bundle_max_lines
        )

    def _bundle(
        self, items: Sequence[tuple[AttributedCommit, FilterDecision]]
    ) -> Iterable[list[tuple[AttributedCommit, FilterDecision]]]:
        window = self.config.bundle_window_minutes * 60
        current: list[tuple[AttributedCommit, FilterDecision]] = []

        for item in items:
            if not self._is_small(*item):
                if current:
                    yield current
                    current = []
                yield [item]
                continue
            if current and item[0].timestamp - current[0][0].timestamp > window:
                yield current
                current = []
            current.append(item)

        if current:
            yield current

    @staticmethod
    def _bundle_chunk(
        member_id: str, group: Sequence[tuple[AttributedCommit, FilterDecision]]
    ) -> CommitChunk:
        files: list[str] = []
        for attributed, _ in group:
            for path in attributed.commit.files:
                if path not in files:
                    files.append(path)
        commits = [a.commit for a, _ in group]
        return CommitChunk(
            chunk_id=commits[0].sha,
            member_id=member_id,
            shas=tuple(c.sha for c in commits),
            timestamps=tuple(c.timestamp for c in commits),
            files=tuple(files),
            lines_added=sum(c.lines_added for c in commits),
            lines_deleted=sum(c.lines_deleted for c in commits),
            subject="\n".join(c.subject for c in commits),
            touches=tuple((path, c.sha) for c in commits for path in c.files),
        )

    def _split(
        self, member_id: str, attributed: AttributedCommit, decision: FilterDecision
    ) -> list[CommitChunk]:
        commit = attributed.commit
        limit = self.config.split_max_lines
        if commit.lines_changed <= limit or len(commit.file_changes) < 2:
            return [
                CommitChunk(
                    chunk_id=commit.sha,
                    member_id=member_id,
                    shas=(commit.sha,),
                    timestamps=(commit.timestamp,),
                    files=commit.files,
                    lines_added=commit.lines_added,
                    lines_deleted=commit.lines_deleted,
                    subject=commit.subject,
                    weight=decision.weight,
                )
            ]

        partial = decision.reason is FilterReason.PARTIAL_GENERATED
        changes = list(commit.file_changes)
        if partial:
            # real files first so generated ones end up in slices of their own
            changes.sort(key=lambda c: patterns.is_generated_path(c.path))

        slices: list[list[FileChange]] = [[]]
        size = 0
        for change in changes:
            if slices[-1] and size + change.lines_changed > limit:
                slices.append([])
                size = 0
            slices[-1].append(change)
            size += change.lines_changed

        logger.debug(
            "Split %s (%d lines) into %d chunks", commit.sha[:8], commit.lines_changed, len(slices)
        )
        weighted = [
            (part, _slice_weight(part) if partial else decision.weight) for part in slices
        ]
        weighted = [(part, weight) for part, weight in weighted if weight > 0.0]
        return [
            CommitChunk(
                chunk_id=f"{commit.sha}:{i}",
                member_id=member_id,
                shas=(commit.sha,),
                timestamps=(commit.timestamp,),
                files=tuple(c.path for c in part),
                lines_added=sum(c.added for c in part),
                lines_deleted=sum(c.deleted for c in part),
                subject=commit.subject,
                weight=weight,
            )
            for i, (part, weight) in enumerate(weighted)
        ]


def _slice_weight(part: Sequence[FileChange]) -> float:
    """Share of a slice's changed lines outside generated files."""
    total = sum(c.lines_changed for c in part)
    if total == 0:
        return 0.0 if all(patterns.is_generated_path(c.path) for c in part) else 1.0
    real = sum(c.lines_changed for c in part if not patterns.is_generated_path(c.path))
    return real / total

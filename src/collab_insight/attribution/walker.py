"""Commit graph walk that attributes every commit in a repository.

Push anchors only record the last commit of each push. Everything in
between is recovered by walking parent edges backward and resolving each
commit's raw author email:

    1. the commit is an anchor        -> the anchor's member
    2. email registered or overridden -> that member
    3. email learned from an anchor   -> that member
    4. otherwise                      -> orphan

Orphans at the start of history that share a root-commit author are then
reclassified as template. The result is a total, deterministic map.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable, Mapping, Optional

from ..history.models import CommitRecord, PushAnchor
from ..logging_config import get_logger
from .identity import IdentityResolver
from .models import AttributedCommit, AttributionMap, Outcome, ResolutionSource
from .template import mark_template

logger = get_logger(__name__)


class CommitGraphWalker:
    """Attributes a commit DAG using one IdentityResolver.

    Args:
        resolver: Fresh resolver for this walk; it accumulates learned mappings
        template_email: Known template author email, if configured
    """

    def __init__(self, resolver: IdentityResolver, template_email: Optional[str] = None):
        self.resolver = resolver
        self.template_email = template_email

    def walk(
        self, commits: Iterable[CommitRecord], anchors: Iterable[PushAnchor]
    ) -> AttributionMap:
        by_sha: dict[str, CommitRecord] = {}
        for commit in commits:
            by_sha.setdefault(commit.sha, commit)

        anchors = list(anchors)
        ignored = sorted({a.sha for a in anchors if a.sha not in by_sha})
        if ignored:
            logger.warning("Ignoring %d push anchors not found in history", len(ignored))

        ordered_anchors = sorted(
            (a for a in anchors if a.sha in by_sha),
            key=lambda a: (-by_sha[a.sha].timestamp, a.sha, a.pushed_at or 0, a.member_id),
        )

        anchor_members = self._resolve_anchor_members(ordered_anchors, by_sha)
        for sha, member_id in anchor_members.items():
            if self.resolver.is_member(member_id):
                self.resolver.learn(by_sha[sha].email, member_id)

        nearest = self._nearest_anchor(anchor_members, ordered_anchors, by_sha)
        order = self._traversal_order(ordered_anchors, by_sha)

        resolved: dict[str, AttributedCommit] = {}
        for sha in order:
            resolved[sha] = self._attribute(by_sha[sha], anchor_members, nearest)

        ordered = sorted(resolved.values(), key=lambda a: (a.timestamp, a.sha))
        ordered, template_author = mark_template(ordered, self.template_email)

        result = AttributionMap(
            entries={a.sha: a for a in ordered},
            learned=self.resolver.learned_mappings(),
            template_author=template_author,
            ignored_anchors=tuple(ignored),
        )
        counts = result.outcome_counts()
        logger.debug(
            "Attributed %d commits: %d member, %d orphan, %d template",
            len(result),
            counts["member"],
            counts["orphan"],
            counts["template"],
        )
        if counts["orphan"]:
            logger.info("%d orphan commits need manual reconciliation", counts["orphan"])
        return result

    def _resolve_anchor_members(
        self, ordered_anchors: list[PushAnchor], by_sha: Mapping[str, CommitRecord]
    ) -> dict[str, str]:
        """Pick one member per anchored sha.

        Several pushes can name the same commit (force pushes, pushes of the
        same branch by both members). The member whose known email matches the
        commit's raw email wins; otherwise the first anchor in walk order.
        """
        grouped: dict[str, list[str]] = {}
        for anchor in ordered_anchors:
            members = grouped.setdefault(anchor.sha, [])
            if anchor.member_id not in members:
                members.append(anchor.member_id)

        chosen: dict[str, str] = {}
        for sha, members in grouped.items():
            if len(members) == 1:
                chosen[sha] = members[0]
                continue
            email = by_sha[sha].email
            matching = [m for m in members if self.resolver.claims(email, m)]
            chosen[sha] = matching[0] if matching else members[0]
            logger.debug(
                "Commit %s anchored by %d members, using %s", sha[:8], len(members), chosen[sha]
            )
        return chosen

    @staticmethod
    def _nearest_anchor(
        anchor_members: Mapping[str, str],
        ordered_anchors: list[PushAnchor],
        by_sha: Mapping[str, CommitRecord],
    ) -> dict[str, str]:
        """Member of the closest descendant anchor, for every commit below an anchor.

        Multi-source BFS over parent edges. Sources are enqueued in walk
        order, so equal distances resolve to the earlier anchor.
        """
        nearest: dict[str, str] = {}
        queue: deque[str] = deque()
        for anchor in ordered_anchors:
            if anchor.sha not in nearest:
                nearest[anchor.sha] = anchor_members[anchor.sha]
                queue.append(anchor.sha)

        while queue:
            sha = queue.popleft()
            for parent in by_sha[sha].parents:
                if parent in by_sha and parent not in nearest:
                    nearest[parent] = nearest[sha]
                    queue.append(parent)
        return nearest

    @staticmethod
    def _traversal_order(
        ordered_anchors: list[PushAnchor], by_sha: Mapping[str, CommitRecord]
    ) -> list[str]:
        """Every commit reachable from an anchor or a branch head, each once."""
        has_child = {p for c in by_sha.values() for p in c.parents}
        heads = sorted(
            (c for c in by_sha.values() if c.sha not in has_child),
            key=lambda c: (-c.timestamp, c.sha),
        )
        starts = [a.sha for a in ordered_anchors] + [c.sha for c in heads]

        seen: set[str] = set()
        order: list[str] = []
        for start in starts:
            if start in seen:
                continue
            stack = [start]
            while stack:
                sha = stack.pop()
                if sha in seen:
                    continue
                seen.add(sha)
                order.append(sha)
                for parent in reversed(by_sha[sha].parents):
                    if parent in by_sha and parent not in seen:
                        stack.append(parent)
                    elif parent not in by_sha:
                        logger.debug("Parent %s of %s missing from history", parent[:8], sha[:8])

        # Cycles cannot occur in git, but a hand-built DAG may contain them
        if len(order) != len(by_sha):
            order.extend(sorted(set(by_sha) - seen))
        return order

    def _attribute(
        self,
        commit: CommitRecord,
        anchor_members: Mapping[str, str],
        nearest: Mapping[str, str],
    ) -> AttributedCommit:
        member_id = anchor_members.get(commit.sha)
        if member_id is not None:
            if self.resolver.is_member(member_id):
                return AttributedCommit(commit, Outcome.MEMBER, ResolutionSource.ANCHOR, member_id)
            logger.debug("Anchor %s names non-member %s", commit.sha[:8], member_id)
            return AttributedCommit(commit, Outcome.ORPHAN, ResolutionSource.ANCHOR)

        hit = self.resolver.resolve(commit.email, nearest.get(commit.sha))
        if hit is not None:
            member_id, source = hit
            return AttributedCommit(commit, Outcome.MEMBER, source, member_id)
        return AttributedCommit(commit, Outcome.ORPHAN, ResolutionSource.UNRESOLVED)


def attribute_commits(
    anchors: Iterable[PushAnchor],
    registered_emails: Mapping[str, str],
    commits: Iterable[CommitRecord],
    overrides: Optional[Mapping[str, str]] = None,
    template_email: Optional[str] = None,
    members: Optional[Iterable[str]] = None,
) -> AttributionMap:
    """Attribute every commit of one repository.

    Pure function: a new resolver is built for each call, so identical inputs
    always produce identical maps.

    Args:
        anchors: Push anchors (member id, last pushed sha)
        registered_emails: Registered member email -> member id
        commits: Full commit history, any order
        overrides: Manually curated email -> member id, wins over registered
        template_email: Known template author email
        members: Team roster. Anchors naming anyone else resolve to orphan.
            When omitted, every anchored member is accepted.

    Returns:
        AttributionMap covering every commit exactly once.
    """
    resolver = IdentityResolver(registered_emails, overrides, members)
    return CommitGraphWalker(resolver, template_email).walk(commits, anchors)

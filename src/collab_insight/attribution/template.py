"""Template (scaffold) commit detection.

Student repositories usually start from starter code pushed by course staff.
Those commits resolve to no team member, but they are not orphans either:
they are tracked as template so they never count for or against a student.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Optional

from ..logging_config import get_logger
from .identity import normalize_email
from .models import AttributedCommit, Outcome, ResolutionSource

logger = get_logger(__name__)


def _as_template(entry: AttributedCommit) -> AttributedCommit:
    return AttributedCommit(
        commit=entry.commit, outcome=Outcome.TEMPLATE, source=ResolutionSource.TEMPLATE
    )


def mark_template(
    ordered: list[AttributedCommit], template_email: Optional[str] = None
) -> tuple[list[AttributedCommit], Optional[str]]:
    """Reclassify orphan commits that belong to the template.

    Args:
        ordered: Attributed commits in (timestamp, sha) order
        template_email: Known template author. When set, every orphan commit
            by that email is template. When unset, orphan root commits are
            template, and so is the contiguous run of orphan commits by a
            root author at the start of history.

    Returns:
        (updated commits in the same order, template author email or None)
    """
    if template_email:
        key = normalize_email(template_email)
        updated = [
            _as_template(a)
            if a.outcome is Outcome.ORPHAN and normalize_email(a.commit.email) == key
            else a
            for a in ordered
        ]
        return updated, key

    root_emails = {
        normalize_email(a.commit.email)
        for a in ordered
        if a.outcome is Outcome.ORPHAN and a.commit.is_root
    }
    if not root_emails:
        return ordered, None

    template_shas = set()
    for a in ordered:
        if a.outcome is not Outcome.ORPHAN:
            break
        if normalize_email(a.commit.email) not in root_emails:
            break
        template_shas.add(a.sha)
    for a in ordered:
        if a.outcome is Outcome.ORPHAN and a.commit.is_root:
            template_shas.add(a.sha)

    updated = [_as_template(a) if a.sha in template_shas else a for a in ordered]

    counts = Counter(
        normalize_email(a.commit.email) for a in updated if a.outcome is Outcome.TEMPLATE
    )
    author = min(counts, key=lambda e: (-counts[e], e)) if counts else None
    logger.debug("Detected %d template commits (author %s)", len(template_shas), author)
    return updated, author


def detect_template_author(
    root_emails_per_repo: Iterable[Iterable[str]], min_repositories: int = 2
) -> Optional[str]:
    """Find the email that authored root commits across many team repositories.

    Every team's repository is seeded from the same starter code, so the
    email behind the most repositories' root commits is the template author.

    Args:
        root_emails_per_repo: Root-commit author emails of each repository
        min_repositories: Minimum repositories the email must appear in

    Returns:
        The lowercased email, or None if no email reaches min_repositories.
        Ties resolve to the alphabetically first email.
    """
    counts: Counter[str] = Counter()
    for emails in root_emails_per_repo:
        counts.update({normalize_email(e) for e in emails if e})

    eligible = [e for e, n in counts.items() if n >= min_repositories]
    if not eligible:
        return None
    return min(eligible, key=lambda e: (-counts[e], e))

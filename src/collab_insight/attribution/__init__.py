"""Commit attribution: push anchors + identity resolution over the commit DAG."""

from .identity import IdentityResolver, normalize_email
from .models import (
    AttributedCommit,
    AttributionMap,
    Outcome,
    ResolutionSource,
    TeamMember,
)
from .template import detect_template_author, mark_template
from .walker import CommitGraphWalker, attribute_commits

__all__ = [
    "attribute_commits",
    "CommitGraphWalker",
    "IdentityResolver",
    "normalize_email",
    "AttributionMap",
    "AttributedCommit",
    "Outcome",
    "ResolutionSource",
    "TeamMember",
    "detect_template_author",
    "mark_template",
]

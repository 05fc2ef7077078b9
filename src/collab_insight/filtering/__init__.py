"""Commit pre-filtering and chunking ahead of rating."""

from .chunker import CommitChunk, CommitChunker
from .models import FilterDecision, FilterReason, FilterStatus, FilterSummary
from .prefilter import CommitPreFilter, PreFilterResult

__all__ = [
    "CommitPreFilter",
    "PreFilterResult",
    "FilterDecision",
    "FilterReason",
    "FilterStatus",
    "FilterSummary",
    "CommitChunk",
    "CommitChunker",
]

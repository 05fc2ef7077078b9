"""Rating collaborator contract and the bounded rating runner."""

from .models import CommitLabel, Rating
from .protocols import ChunkRater
from .runner import RatingOutcome, rate_chunks
from .static import StaticRater

__all__ = [
    "ChunkRater",
    "CommitLabel",
    "Rating",
    "RatingOutcome",
    "rate_chunks",
    "StaticRater",
]

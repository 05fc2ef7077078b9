"""Protocol for the external rating collaborator."""

from typing import Protocol

from ..filtering.chunker import CommitChunk
from .models import Rating


class ChunkRater(Protocol):
    """Rates one chunk.

    Implementations raise ``RatingError`` (or any exception) when a single
    chunk cannot be rated, and ``RaterUnavailableError`` when the service
    itself is unreachable.
    """

    def rate(self, chunk: CommitChunk) -> Rating: ...

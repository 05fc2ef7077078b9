"""Analysis-related exceptions: repository access and rating."""

from pathlib import Path
from typing import Optional

from .base import CollabInsightError


class AnalysisError(CollabInsightError):
    """Base class for analysis-related errors."""
    pass


class RepositoryError(AnalysisError):
    """Raised when a team's local repository copy is missing or unreadable."""

    def __init__(self, repo_path: Path, reason: str):
        super().__init__(
            f"Cannot read repository: {repo_path}",
            details={"repo_path": str(repo_path), "reason": reason},
        )
        self.repo_path = repo_path
        self.reason = reason


class RatingError(AnalysisError):
    """Raised by a rater when a single chunk cannot be rated."""

    def __init__(self, reason: str, chunk_id: Optional[str] = None):
        details = {"reason": reason}
        if chunk_id:
            details["chunk_id"] = chunk_id
        super().__init__(f"Rating failed: {reason}", details=details)
        self.reason = reason
        self.chunk_id = chunk_id


class RaterUnavailableError(RatingError):
    """Raised when the rating collaborator cannot be reached at all.

    Unlike a plain ``RatingError`` this aborts rating for the whole team and
    switches its score to the degraded LoC-only outcome.
    """

    def __init__(self, reason: str):
        AnalysisError.__init__(
            self, f"Rater unavailable: {reason}", details={"reason": reason}
        )
        self.reason = reason
        self.chunk_id = None

"""Exception hierarchy for Collab Insight."""

from .analysis import (
    AnalysisError,
    RaterUnavailableError,
    RatingError,
    RepositoryError,
)
from .base import CollabInsightError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    RunAlreadyActiveError,
    RunStateError,
)

__all__ = [
    "CollabInsightError",
    "AnalysisError",
    "RepositoryError",
    "RatingError",
    "RaterUnavailableError",
    "ConfigurationError",
    "InvalidConfigError",
    "RunStateError",
    "RunAlreadyActiveError",
]

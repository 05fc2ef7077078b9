"""Ratings returned by the external rating collaborator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CommitLabel(Enum):
    FEATURE = "feature"
    BUG_FIX = "bug_fix"
    TEST = "test"
    REFACTOR = "refactor"
    TRIVIAL = "trivial"


@dataclass(frozen=True)
class Rating:
    """Quality rating of one chunk.

    effort, complexity and novelty are on a 1-10 scale, confidence on 0-1.
    A failed rating has every number at 0 and ``is_error`` set; it counts as
    zero effort.
    """

    effort: float
    complexity: float
    novelty: float
    confidence: float
    label: CommitLabel = CommitLabel.TRIVIAL
    reasoning: str = ""
    is_error: bool = False
    error_message: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("effort", "complexity", "novelty"):
            if not 0.0 <= getattr(self, name) <= 10.0:
                raise ValueError(f"{name} must be between 0 and 10")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be between 0.0 and 1.0")

    @classmethod
    def error(cls, message: str) -> Rating:
        return cls(
            effort=0.0,
            complexity=0.0,
            novelty=0.0,
            confidence=0.0,
            label=CommitLabel.TRIVIAL,
            reasoning=f"Rating failed: {message}",
            is_error=True,
            error_message=message,
        )

    @classmethod
    def from_dict(cls, data: dict) -> Rating:
        label = data.get("label", CommitLabel.TRIVIAL.value)
        return cls(
            effort=float(data["effort"]),
            complexity=float(data["complexity"]),
            novelty=float(data["novelty"]),
            confidence=float(data["confidence"]),
            label=CommitLabel(str(label).lower()),
            reasoning=str(data.get("reasoning", "")),
        )

    @property
    def quality_multiplier(self) -> float:
        """0.5 + 0.3 * complexity/10 + 0.2 * novelty/10, in [0.5, 1.0]."""
        return 0.5 + 0.3 * (self.complexity / 10.0) + 0.2 * (self.novelty / 10.0)

    @property
    def weighted_effort(self) -> float:
        if self.is_error:
            return 0.0
        return self.effort * self.quality_multiplier

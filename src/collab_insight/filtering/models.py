"""Pre-filter decisions and summaries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class FilterReason(Enum):
    """Why a commit was excluded or down-weighted.

    Listed in precedence order: when several rules match, the first listed
    becomes the decision's primary reason.
    """

    EMPTY = "empty"
    MERGE_COMMIT = "merge_commit"
    REVERT_COMMIT = "revert_commit"
    RENAME_ONLY = "rename_only"
    FORMAT_ONLY = "format_only"
    MASS_REFORMAT = "mass_reformat"
    GENERATED_FILES = "generated_files"
    TRIVIAL_MESSAGE = "trivial_message"
    PARTIAL_GENERATED = "partial_generated"


class FilterStatus(Enum):
    KEPT = "kept"
    REDUCED = "reduced"
    EXCLUDED = "excluded"


@dataclass(frozen=True)
class FilterDecision:
    sha: str
    status: FilterStatus
    weight: float = 1.0  # multiplier applied to effort and lines
    reason: Optional[FilterReason] = None
    matched: tuple[FilterReason, ...] = ()
    details: str = ""

    @property
    def is_excluded(self) -> bool:
        return self.status is FilterStatus.EXCLUDED


@dataclass(frozen=True)
class FilterSummary:
    total: int = 0
    kept: int = 0
    reduced: int = 0
    excluded: int = 0
    by_reason: dict[str, int] = field(default_factory=dict)

    @property
    def productive(self) -> int:
        """Commits that go on to rating, at full or reduced weight."""
        return self.kept + self.reduced

    @property
    def excluded_ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return self.excluded / self.total

    def to_summary(self) -> str:
        parts = [f"{count} {reason}" for reason, count in self.by_reason.items() if count]
        detail = f" ({', '.join(parts)})" if parts else ""
        return f"{self.productive}/{self.total} commits kept{detail}"

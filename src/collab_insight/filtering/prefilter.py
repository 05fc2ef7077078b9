"""Classify commits before rating.

Every rule is a plain predicate over one CommitRecord. All rules run, their
matches are combined by OR, and the first match in FilterReason order is the
primary reason. Excluded commits are never rated and never counted.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..attribution.models import AttributedCommit
from ..config import FilterConfig
from ..history.models import CommitRecord
from ..logging_config import get_logger
from . import patterns
from .models import FilterDecision, FilterReason, FilterStatus, FilterSummary

logger = get_logger(__name__)

# Commits at or below this size may be called renames by message alone
SMALL_COMMIT_LINES = 5


@dataclass
class PreFilterResult:
    kept: list[tuple[AttributedCommit, FilterDecision]] = field(default_factory=list)
    decisions: list[FilterDecision] = field(default_factory=list)
    summary: FilterSummary = field(default_factory=FilterSummary)


class CommitPreFilter:
    """Rule-based commit classifier."""

    def __init__(self, config: Optional[FilterConfig] = None):
        self.config = config or FilterConfig()

    def classify(self, commit: CommitRecord) -> FilterDecision:
        matched: list[tuple[FilterReason, str]] = []
        subject = commit.subject or ""

        if commit.lines_changed == 0:
            matched.append((FilterReason.EMPTY, "No code changes"))

        if commit.is_merge:
            matched.append((FilterReason.MERGE_COMMIT, f"{len(commit.parents)} parents"))
        elif patterns.first_match(patterns.MERGE_PATTERNS, subject):
            matched.append((FilterReason.MERGE_COMMIT, "Merge message"))

        if patterns.first_match(patterns.REVERT_PATTERNS, subject):
            matched.append((FilterReason.REVERT_COMMIT, "Revert message"))

        if self._is_rename_only(commit):
            matched.append(
                (FilterReason.RENAME_ONLY, f"Rename-only: {len(commit.files)} files renamed")
            )

        if commit.semantic_lines == 0 and commit.lines_changed > 0:
            matched.append((FilterReason.FORMAT_ONLY, "No change when whitespace is ignored"))

        if self._is_mass_reformat(commit):
            matched.append(
                (
                    FilterReason.MASS_REFORMAT,
                    f"Mass reformat: {len(commit.files)} files with avg "
                    f"{self._avg_lines_per_file(commit):.1f} lines each",
                )
            )

        generated = [f for f in commit.files if patterns.is_generated_path(f)]
        if commit.files and len(generated) == len(commit.files):
            matched.append(
                (FilterReason.GENERATED_FILES, "Only generated files: " + ", ".join(commit.files))
            )

        trivial = patterns.first_match(patterns.TRIVIAL_MESSAGE_PATTERNS, subject)
        if trivial is not None:
            matched.append((FilterReason.TRIVIAL_MESSAGE, f"Trivial message: {subject.strip()}"))
        elif patterns.BOT_AUTHOR_RE.search(f"{commit.email} {commit.author_name}"):
            matched.append((FilterReason.TRIVIAL_MESSAGE, f"Bot author: {commit.email}"))

        if matched:
            reasons = tuple(sorted({r for r, _ in matched}, key=_REASON_ORDER.index))
            primary = reasons[0]
            details = next(d for r, d in matched if r is primary)
            return FilterDecision(
                sha=commit.sha,
                status=FilterStatus.EXCLUDED,
                weight=0.0,
                reason=primary,
                matched=reasons,
                details=details,
            )

        if generated:
            weight = self._real_line_share(commit)
            if weight == 0.0:
                return FilterDecision(
                    sha=commit.sha,
                    status=FilterStatus.EXCLUDED,
                    weight=0.0,
                    reason=FilterReason.GENERATED_FILES,
                    matched=(FilterReason.GENERATED_FILES,),
                    details="All changed lines are in generated files",
                )
            if weight is not None and weight < 1.0:
                return FilterDecision(
                    sha=commit.sha,
                    status=FilterStatus.REDUCED,
                    weight=weight,
                    reason=FilterReason.PARTIAL_GENERATED,
                    matched=(FilterReason.PARTIAL_GENERATED,),
                    details=f"{len(generated)} of {len(commit.files)} files generated",
                )

        return FilterDecision(sha=commit.sha, status=FilterStatus.KEPT)

    def run(self, commits: Sequence[AttributedCommit]) -> PreFilterResult:
        """Classify a team's member commits and summarize the outcome."""
        result = PreFilterResult()
        reasons: Counter[str] = Counter()

        for attributed in commits:
            decision = self.classify(attributed.commit)
            result.decisions.append(decision)
            if decision.reason is not None:
                reasons[decision.reason.value] += 1
            if not decision.is_excluded:
                result.kept.append((attributed, decision))

        statuses = Counter(d.status for d in result.decisions)
        result.summary = FilterSummary(
            total=len(result.decisions),
            kept=statuses[FilterStatus.KEPT],
            reduced=statuses[FilterStatus.REDUCED],
            excluded=statuses[FilterStatus.EXCLUDED],
            by_reason={r.value: reasons[r.value] for r in FilterReason},
        )
        logger.info("Pre-filter: %s", result.summary.to_summary())
        return result

    def _is_rename_only(self, commit: CommitRecord) -> bool:
        if commit.lines_changed == 0:
            return False
        if commit.rename_detected:
            return commit.lines_changed <= self.config.rename_max_lines
        return (
            bool(patterns.RENAME_MESSAGE_RE.search(commit.subject or ""))
            and commit.lines_changed <= SMALL_COMMIT_LINES
        )

    def _is_mass_reformat(self, commit: CommitRecord) -> bool:
        if len(commit.files) < self.config.mass_reformat_min_files:
            return False
        if self._avg_lines_per_file(commit) >= self.config.mass_reformat_max_avg_lines:
            return False
        return patterns.first_match(patterns.FORMAT_MESSAGE_PATTERNS, commit.subject or "") is not None

    @staticmethod
    def _avg_lines_per_file(commit: CommitRecord) -> float:
        if not commit.files:
            return 0.0
        return commit.lines_changed / len(commit.files)

    @staticmethod
    def _real_line_share(commit: CommitRecord) -> Optional[float]:
        """Share of changed lines outside generated files, None without per-file stats."""
        if not commit.file_changes or commit.lines_changed == 0:
            return None
        real = sum(
            c.lines_changed for c in commit.file_changes if not patterns.is_generated_path(c.path)
        )
        return real / commit.lines_changed


_REASON_ORDER = list(FilterReason)

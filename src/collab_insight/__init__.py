"""
Collab Insight - Commit Attribution and Collaboration-Quality Scoring

Reconstructs who wrote every commit in a student team's repository from
incomplete push records, filters out noise, and folds externally rated
effort into a bounded 0-100 Collaboration Quality Index (CQI).
"""

__version__ = "0.1.0"

from .attribution import AttributionMap, attribute_commits
from .pipeline import CourseRun, TeamInput, analyze_team
from .scoring import CompositeScore, compute_cqi

__all__ = [
    "attribute_commits",  # Pure attribution entry point
    "AttributionMap",
    "analyze_team",  # Full single-team pipeline
    "TeamInput",
    "CourseRun",
    "CompositeScore",
    "compute_cqi",
]

"""Team and course-wide analysis pipeline."""

from .batch import CourseRun
from .loader import load_course, load_team, parse_team
from .state import RunState, RunStateStore, RunStatus, default_store
from .team import TeamInput, TeamResult, TeamState, analyze_team

__all__ = [
    "analyze_team",
    "TeamInput",
    "TeamResult",
    "TeamState",
    "CourseRun",
    "load_team",
    "load_course",
    "parse_team",
    "RunState",
    "RunStateStore",
    "RunStatus",
    "default_store",
]

"""Team and course descriptions read from JSON.

A team file looks like::

    {
      "team_id": "team-07",
      "repo_path": "repos/team-07",
      "members": [{"id": "s1", "email": "ann@uni.edu", "name": "Ann"}],
      "anchors": [{"member": "s1", "sha": "3f2a...", "pushed_at": 1700000000}],
      "overrides": {"ann@laptop.local": "s1"},
      "sessions": [{"date": "2024-03-04", "attended": {"s1": true}}],
      "window": [1700000000, 1702000000]
    }

A course file holds ``exercise_id`` and a ``teams`` list of the same
objects. Relative ``repo_path`` values resolve against the file's folder.
"""

import json
from datetime import date
from pathlib import Path
from typing import Any, Optional, Union

from ..attribution import TeamMember, normalize_email
from ..exceptions import ConfigurationError
from ..history import PushAnchor
from ..scoring import Session, TeamAttendance
from .team import TeamInput


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read '{path}': {e}")


def _parse_attendance(raw: Any) -> Optional[TeamAttendance]:
    if not raw:
        return None
    sessions = []
    for item in raw:
        if isinstance(item, str):
            sessions.append(Session(day=date.fromisoformat(item)))
        else:
            sessions.append(
                Session(
                    day=date.fromisoformat(item["date"]),
                    attended={str(k): bool(v) for k, v in item.get("attended", {}).items()},
                )
            )
    return TeamAttendance(sessions=tuple(sessions))


def parse_team(
    raw: dict, base_dir: Optional[Path] = None, repo_path: Optional[str] = None
) -> TeamInput:
    """Build a TeamInput from its JSON object.

    Raises:
        ConfigurationError: On missing keys or malformed values.
    """
    try:
        members = tuple(
            TeamMember(member_id=str(m["id"]), email=m.get("email", ""), name=m.get("name", ""))
            for m in raw["members"]
        )
        anchors = tuple(
            PushAnchor(member_id=str(a["member"]), sha=a["sha"], pushed_at=a.get("pushed_at"))
            for a in raw.get("anchors", [])
        )
        overrides = {normalize_email(e): str(m) for e, m in raw.get("overrides", {}).items()}
        window = tuple(raw["window"]) if raw.get("window") else None
        attendance = _parse_attendance(raw.get("sessions"))

        path = repo_path or raw.get("repo_path")
        if path is not None and base_dir is not None and not Path(path).is_absolute():
            path = str(base_dir / path)

        return TeamInput(
            team_id=str(raw.get("team_id", "team")),
            members=members,
            anchors=anchors,
            repo_path=path,
            overrides=overrides,
            attendance=attendance,
            window=window,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid team description: {e}")


def load_team(path: Union[str, Path], repo_path: Optional[str] = None) -> TeamInput:
    path = Path(path)
    raw = _read_json(path)
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Team file '{path}' must contain a JSON object")
    return parse_team(raw, base_dir=path.parent, repo_path=repo_path)


def load_course(path: Union[str, Path]) -> tuple[str, list[TeamInput]]:
    """Return (exercise id, teams) from a course file."""
    path = Path(path)
    raw = _read_json(path)
    if not isinstance(raw, dict) or not isinstance(raw.get("teams"), list):
        raise ConfigurationError(f"Course file '{path}' must contain a 'teams' list")

    teams = [parse_team(t, base_dir=path.parent) for t in raw["teams"]]
    seen = set()
    for team in teams:
        if team.team_id in seen:
            raise ConfigurationError(f"Duplicate team id '{team.team_id}' in '{path}'")
        seen.add(team.team_id)
    return str(raw.get("exercise_id", path.stem)), teams

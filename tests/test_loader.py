"""Tests for team and course description files."""

import json
from datetime import date

import pytest

from collab_insight.exceptions import ConfigurationError
from collab_insight.pipeline import load_course, load_team

TEAM = {
    "team_id": "team-07",
    "repo_path": "repos/team-07",
    "members": [
        {"id": "s1", "email": "Ann@Uni.edu", "name": "Ann"},
        {"id": "s2", "email": "bob@uni.edu"},
    ],
    "anchors": [{"member": "s1", "sha": "abc123", "pushed_at": 1700000000}],
    "overrides": {"Ann@Laptop.local": "s1"},
    "sessions": ["2024-03-04", {"date": "2024-03-11", "attended": {"s1": True, "s2": False}}],
    "window": [1700000000, 1702000000],
}


def write(path, data):
    path.write_text(json.dumps(data))
    return path


class TestLoadTeam:
    def test_full_description(self, tmp_path):
        team = load_team(write(tmp_path / "team.json", TEAM))
        assert team.team_id == "team-07"
        assert team.member_ids == ("s1", "s2")
        assert team.registered_emails() == {"ann@uni.edu": "s1", "bob@uni.edu": "s2"}
        assert team.anchors[0].sha == "abc123"
        assert team.overrides == {"ann@laptop.local": "s1"}
        assert team.window == (1700000000, 1702000000)
        assert team.repo_path == str(tmp_path / "repos/team-07")
        assert team.attendance.paired_sessions(["s1", "s2"]) == [date(2024, 3, 4)]

    def test_repo_path_argument_wins(self, tmp_path):
        team = load_team(write(tmp_path / "team.json", TEAM), repo_path="/srv/repo")
        assert team.repo_path == "/srv/repo"

    def test_missing_members(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Invalid team"):
            load_team(write(tmp_path / "team.json", {"team_id": "x"}))

    def test_bad_date(self, tmp_path):
        data = {**TEAM, "sessions": ["04/03/2024"]}
        with pytest.raises(ConfigurationError):
            load_team(write(tmp_path / "team.json", data))

    def test_not_json(self, tmp_path):
        path = tmp_path / "team.json"
        path.write_text("{")
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_team(path)


class TestLoadCourse:
    def test_teams(self, tmp_path):
        data = {
            "exercise_id": "ex-3",
            "teams": [TEAM, {**TEAM, "team_id": "team-08"}],
        }
        exercise_id, teams = load_course(write(tmp_path / "course.json", data))
        assert exercise_id == "ex-3"
        assert [t.team_id for t in teams] == ["team-07", "team-08"]

    def test_duplicate_team_ids(self, tmp_path):
        data = {"teams": [TEAM, TEAM]}
        with pytest.raises(ConfigurationError, match="Duplicate"):
            load_course(write(tmp_path / "course.json", data))

    def test_teams_required(self, tmp_path):
        with pytest.raises(ConfigurationError, match="teams"):
            load_course(write(tmp_path / "course.json", {"exercise_id": "x"}))

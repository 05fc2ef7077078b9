"""Tests for the rule-based commit pre-filter."""

import pytest

from collab_insight.filtering import CommitPreFilter, FilterReason, FilterStatus
from collab_insight.filtering.patterns import is_generated_path
from collab_insight.history import FileChange

from conftest import make_commit, member_commit


@pytest.fixture
def prefilter():
    return CommitPreFilter()


class TestGeneratedPaths:
    @pytest.mark.parametrize(
        "path",
        ["package-lock.json", "web/yarn.lock", "node_modules/x/index.js", "app/build/out.class"],
    )
    def test_generated(self, path):
        assert is_generated_path(path)

    @pytest.mark.parametrize("path", ["src/app.py", "builder.py", "docs/distance.md"])
    def test_not_generated(self, path):
        assert not is_generated_path(path)


class TestClassify:
    def test_productive_commit_kept(self, prefilter):
        decision = prefilter.classify(make_commit("a", subject="Add login form", added=40))
        assert decision.status is FilterStatus.KEPT
        assert decision.weight == 1.0
        assert decision.reason is None

    def test_empty_commit(self, prefilter):
        decision = prefilter.classify(make_commit("a", added=0, deleted=0))
        assert decision.is_excluded
        assert decision.reason is FilterReason.EMPTY

    def test_lock_file_only(self, prefilter):
        commit = make_commit("a", files=("package-lock.json",), added=500)
        decision = prefilter.classify(commit)
        assert decision.reason is FilterReason.GENERATED_FILES
        assert decision.weight == 0.0

    def test_wip_message(self, prefilter):
        decision = prefilter.classify(make_commit("a", subject="wip", added=120))
        assert decision.reason is FilterReason.TRIVIAL_MESSAGE

    def test_merge_detected_by_parents(self, prefilter):
        commit = make_commit("a", parents=("p1", "p2"), subject="Combine work", added=30)
        assert prefilter.classify(commit).reason is FilterReason.MERGE_COMMIT

    def test_merge_detected_by_message(self, prefilter):
        commit = make_commit("a", parents=("p1",), subject="Merge branch 'dev' into main")
        assert prefilter.classify(commit).reason is FilterReason.MERGE_COMMIT

    def test_revert(self, prefilter):
        commit = make_commit("a", subject='Revert "Add login form"', added=40)
        assert prefilter.classify(commit).reason is FilterReason.REVERT_COMMIT

    def test_all_matches_recorded_primary_first(self, prefilter):
        commit = make_commit("a", parents=("p1", "p2"), subject="wip", added=0)
        decision = prefilter.classify(commit)
        assert decision.reason is FilterReason.EMPTY
        assert decision.matched == (
            FilterReason.EMPTY,
            FilterReason.MERGE_COMMIT,
            FilterReason.TRIVIAL_MESSAGE,
        )

    def test_rename_detected_by_git(self, prefilter):
        commit = make_commit("a", subject="Tidy", added=1, deleted=1, rename_detected=True)
        assert prefilter.classify(commit).reason is FilterReason.RENAME_ONLY

    def test_rename_by_message_needs_small_diff(self, prefilter):
        small = make_commit("a", subject="Rename helpers module", added=2, deleted=1)
        large = make_commit("b", subject="Rename helpers module", added=40, deleted=10)
        assert prefilter.classify(small).reason is FilterReason.RENAME_ONLY
        assert prefilter.classify(large).status is FilterStatus.KEPT

    def test_whitespace_only(self, prefilter):
        commit = make_commit("a", subject="Tidy parser", added=30, deleted=30, semantic_lines=0)
        assert prefilter.classify(commit).reason is FilterReason.FORMAT_ONLY

    def test_mass_reformat(self, prefilter):
        files = tuple(f"src/m{i}.py" for i in range(12))
        commit = make_commit("a", files=files, added=12, deleted=12, subject="Reformat code")
        assert prefilter.classify(commit).reason is FilterReason.MASS_REFORMAT

    def test_bot_author(self, prefilter):
        commit = make_commit(
            "a",
            email="49699333+dependabot[bot]@users.noreply.github.com",
            subject="Bump lodash from 4.17.20 to 4.17.21",
            added=8,
        )
        assert prefilter.classify(commit).reason is FilterReason.TRIVIAL_MESSAGE

    def test_partially_generated_reduced(self, prefilter):
        commit = make_commit(
            "a",
            files=("src/app.py", "package-lock.json"),
            added=100,
            file_changes=(
                FileChange("src/app.py", 30, 0),
                FileChange("package-lock.json", 70, 0),
            ),
        )
        decision = prefilter.classify(commit)
        assert decision.status is FilterStatus.REDUCED
        assert decision.reason is FilterReason.PARTIAL_GENERATED
        assert decision.weight == pytest.approx(0.3)


class TestRun:
    def test_summary(self, prefilter):
        commits = [
            member_commit(make_commit("a", subject="Add login form"), "s1"),
            member_commit(make_commit("b", subject="wip"), "s1"),
            member_commit(make_commit("c", added=0), "s2"),
            member_commit(make_commit("d", subject="Add tests"), "s2"),
        ]
        result = prefilter.run(commits)
        assert [a.sha for a, _ in result.kept] == ["a", "d"]
        assert result.summary.total == 4
        assert result.summary.kept == 2
        assert result.summary.excluded == 2
        assert result.summary.excluded_ratio == 0.5
        assert result.summary.by_reason["trivial_message"] == 1
        assert result.summary.by_reason["empty"] == 1
        decisions = {d.sha: d for d in result.decisions}
        assert decisions["b"].reason is FilterReason.TRIVIAL_MESSAGE
        assert len(decisions) == 4

    def test_empty_input(self, prefilter):
        result = prefilter.run([])
        assert result.kept == []
        assert result.summary.total == 0
        assert result.summary.excluded_ratio == 0.0

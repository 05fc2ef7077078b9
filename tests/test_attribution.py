"""Tests for commit attribution: identity resolution, graph walk, template detection."""

import random

import pytest

from collab_insight.attribution import (
    IdentityResolver,
    Outcome,
    ResolutionSource,
    attribute_commits,
    detect_template_author,
)
from collab_insight.history import PushAnchor

from conftest import T0, make_chain, make_commit

REGISTERED = {"ann@uni.edu": "s1", "bob@uni.edu": "s2"}
MEMBERS = ("s1", "s2")


@pytest.fixture
def history():
    """ann, ann from her laptop, bob, ann's laptop again, a stranger."""
    return make_chain(
        [
            ("c1", "ann@uni.edu"),
            ("c2", "ann@laptop.local"),
            ("c3", "bob@uni.edu"),
            ("c4", "ann@laptop.local"),
            ("c5", "someone@else.org"),
        ]
    )


class TestIdentityResolver:
    def test_registered_case_insensitive(self):
        resolver = IdentityResolver(REGISTERED)
        assert resolver.direct("  Ann@Uni.EDU ") == ("s1", ResolutionSource.REGISTERED)

    def test_override_wins_over_registered(self):
        resolver = IdentityResolver(REGISTERED, overrides={"ann@uni.edu": "s2"})
        assert resolver.direct("ann@uni.edu") == ("s2", ResolutionSource.OVERRIDE)

    def test_learned_only_for_unknown_emails(self):
        resolver = IdentityResolver(REGISTERED)
        assert resolver.learn("ann@laptop.local", "s1") is True
        assert resolver.learn("ann@laptop.local", "s1") is False
        assert resolver.learn("bob@uni.edu", "s1") is False
        assert resolver.resolve("ann@laptop.local") == ("s1", ResolutionSource.LEARNED)

    def test_learned_tie_broken_by_nearest_member(self):
        resolver = IdentityResolver(REGISTERED)
        resolver.learn("shared@lab.pc", "s1")
        resolver.learn("shared@lab.pc", "s2")
        assert resolver.resolve("shared@lab.pc", nearest_member="s2")[0] == "s2"
        assert resolver.resolve("shared@lab.pc", nearest_member="s9")[0] == "s1"

    def test_roster_membership(self):
        assert IdentityResolver(REGISTERED, members=MEMBERS).is_member("s3") is False
        assert IdentityResolver(REGISTERED).is_member("s3") is True


class TestAttributeCommits:
    def test_every_commit_attributed_once(self, history):
        result = attribute_commits([PushAnchor("s1", "c2")], REGISTERED, history, members=MEMBERS)
        assert len(result) == len(history)
        assert sum(result.outcome_counts().values()) == len(history)
        assert {a.sha for a in result} == {c.sha for c in history}

    def test_anchor_and_learned_resolution(self, history):
        result = attribute_commits([PushAnchor("s1", "c2")], REGISTERED, history, members=MEMBERS)
        assert result["c1"].member_id == "s1"
        assert result["c1"].source is ResolutionSource.REGISTERED
        assert result["c2"].source is ResolutionSource.ANCHOR
        assert result["c3"].member_id == "s2"
        assert result["c4"].member_id == "s1"
        assert result["c4"].source is ResolutionSource.LEARNED
        assert result.learned == {"ann@laptop.local": ("s1",)}

    def test_unknown_email_is_orphan(self, history):
        result = attribute_commits([PushAnchor("s1", "c2")], REGISTERED, history, members=MEMBERS)
        assert result["c5"].outcome is Outcome.ORPHAN
        assert result["c5"].member_id is None
        assert [a.sha for a in result.orphans()] == ["c5"]

    def test_zero_anchors_uses_registered_emails(self, history):
        result = attribute_commits([], REGISTERED, history, members=MEMBERS)
        assert result["c1"].member_id == "s1"
        assert result["c3"].member_id == "s2"
        assert result["c2"].outcome is Outcome.ORPHAN
        assert result["c4"].outcome is Outcome.ORPHAN

    def test_deterministic_regardless_of_input_order(self, history):
        anchors = [PushAnchor("s1", "c2"), PushAnchor("s2", "c3")]
        expected = attribute_commits(anchors, REGISTERED, history, members=MEMBERS).as_rows()
        shuffled = list(history)
        random.Random(7).shuffle(shuffled)
        again = attribute_commits(list(reversed(anchors)), REGISTERED, shuffled, members=MEMBERS)
        assert again.as_rows() == expected

    def test_learning_does_not_depend_on_walk_order(self, history):
        # The learned email resolves even for commits older than its anchor
        commits = make_chain(
            [("a1", "ann@laptop.local"), ("a2", "bob@uni.edu"), ("a3", "ann@laptop.local")]
        )
        result = attribute_commits([PushAnchor("s1", "a3")], REGISTERED, commits, members=MEMBERS)
        assert result["a1"].member_id == "s1"

    def test_anchor_naming_non_member_is_orphan(self, history):
        result = attribute_commits([PushAnchor("s9", "c5")], REGISTERED, history, members=MEMBERS)
        assert result["c5"].outcome is Outcome.ORPHAN
        assert result.learned == {}

    def test_missing_anchor_ignored(self, history):
        result = attribute_commits(
            [PushAnchor("s1", "deadbeef")], REGISTERED, history, members=MEMBERS
        )
        assert result.ignored_anchors == ("deadbeef",)
        assert len(result) == len(history)

    def test_same_sha_anchored_by_both_members(self, history):
        anchors = [PushAnchor("s1", "c3", pushed_at=1), PushAnchor("s2", "c3", pushed_at=2)]
        result = attribute_commits(anchors, REGISTERED, history, members=MEMBERS)
        # bob's registered email claims the commit
        assert result["c3"].member_id == "s2"

    def test_override_reassigns(self, history):
        result = attribute_commits(
            [], REGISTERED, history, overrides={"someone@else.org": "s2"}, members=MEMBERS
        )
        assert result["c5"].member_id == "s2"
        assert result["c5"].source is ResolutionSource.OVERRIDE

    def test_branches_and_merges(self):
        base = make_commit("b0", email="ann@uni.edu", timestamp=T0)
        left = make_commit("b1", email="ann@uni.edu", timestamp=T0 + 10, parents=("b0",))
        right = make_commit("b2", email="bob@uni.edu", timestamp=T0 + 20, parents=("b0",))
        merge = make_commit(
            "b3", email="bob@uni.edu", timestamp=T0 + 30, parents=("b1", "b2"), added=0
        )
        dangling = make_commit("b4", email="ann@uni.edu", timestamp=T0 + 40, parents=("b1",))
        result = attribute_commits(
            [PushAnchor("s2", "b3")], REGISTERED, [merge, dangling, right, left, base]
        )
        assert len(result) == 5
        assert [a.sha for a in result] == ["b0", "b1", "b2", "b3", "b4"]

    def test_commits_for_member(self, history):
        result = attribute_commits([PushAnchor("s1", "c2")], REGISTERED, history, members=MEMBERS)
        assert [a.sha for a in result.commits_for("s1")] == ["c1", "c2", "c4"]


class TestTemplateDetection:
    @pytest.fixture
    def seeded(self):
        return make_chain(
            [
                ("t1", "staff@uni.edu"),
                ("t2", "staff@uni.edu"),
                ("m1", "ann@uni.edu"),
                ("t3", "staff@uni.edu"),
            ]
        )

    def test_root_author_prefix_is_template(self, seeded):
        result = attribute_commits([], REGISTERED, seeded, members=MEMBERS)
        assert result["t1"].outcome is Outcome.TEMPLATE
        assert result["t2"].outcome is Outcome.TEMPLATE
        assert result["t3"].outcome is Outcome.ORPHAN
        assert result.template_author == "staff@uni.edu"

    def test_configured_template_email(self, seeded):
        result = attribute_commits(
            [], REGISTERED, seeded, template_email="Staff@uni.edu", members=MEMBERS
        )
        assert [a.sha for a in result.template_commits()] == ["t1", "t2", "t3"]

    def test_member_root_is_not_template(self):
        commits = make_chain([("r1", "ann@uni.edu"), ("r2", "bob@uni.edu")])
        result = attribute_commits([], REGISTERED, commits, members=MEMBERS)
        assert result.template_commits() == []
        assert result.template_author is None

    def test_author_across_repositories(self):
        repos = [{"staff@uni.edu"}, {"Staff@uni.edu", "ann@uni.edu"}, {"bob@uni.edu"}]
        assert detect_template_author(repos) == "staff@uni.edu"
        assert detect_template_author(repos, min_repositories=3) is None

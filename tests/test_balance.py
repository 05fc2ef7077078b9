"""Tests for balance, temporal spread and ownership spread components."""

import pytest

from collab_insight.scoring import BalanceScorer, TimelineEntry

from conftest import DAY, T0, WEEK


def entry(ts, effort=1.0, member="s1"):
    return TimelineEntry(member_id=member, timestamp=ts, weighted_effort=effort, weighted_lines=10)


class TestBalance:
    def test_equal_split(self):
        assert BalanceScorer.effort_balance([50, 50]) == pytest.approx(100.0)

    def test_ninety_ten(self):
        assert BalanceScorer.loc_balance([90, 10]) == pytest.approx(60.0)

    def test_one_member_did_nothing(self):
        assert BalanceScorer.balance([100, 0]) == pytest.approx(50.0)

    def test_degenerate_inputs(self):
        assert BalanceScorer.balance([10]) == 0.0
        assert BalanceScorer.balance([0, 0]) == 0.0
        assert BalanceScorer.balance([]) == 0.0


class TestTemporalSpread:
    def test_even_weeks(self):
        timeline = [entry(T0 + w * WEEK + DAY) for w in range(4)]
        assert BalanceScorer.temporal_spread(timeline, (T0, T0 + 4 * WEEK)) == pytest.approx(100.0)

    def test_all_in_one_of_four_weeks(self):
        # buckets [4, 0, 0, 0]: CV = sqrt(3) -> 100 * (1 - sqrt(3) / 2)
        timeline = [entry(T0 + DAY * i) for i in range(4)]
        score = BalanceScorer.temporal_spread(timeline, (T0, T0 + 4 * WEEK))
        assert score == pytest.approx(100 * (1 - 3 ** 0.5 / 2))

    def test_cv_capped(self):
        # buckets [1, 0, ..., 0] over 10 weeks: CV = 3 -> capped at 2
        timeline = [entry(T0)]
        assert BalanceScorer.temporal_spread(timeline, (T0, T0 + 10 * WEEK)) == 0.0

    def test_short_window_is_one_bucket(self):
        timeline = [entry(T0), entry(T0 + 2 * DAY, effort=9)]
        assert BalanceScorer.temporal_spread(timeline) == 100.0

    def test_window_defaults_to_timeline_span(self):
        timeline = [entry(T0), entry(T0 + 3 * WEEK)]
        # span of exactly 3 weeks -> 3 buckets [1, 0, 1]
        expected_cv = (2 / 9) ** 0.5 / (2 / 3)
        assert BalanceScorer.temporal_spread(timeline) == pytest.approx(
            100 * (1 - expected_cv / 2)
        )

    def test_no_effort(self):
        assert BalanceScorer.temporal_spread([]) == 0.0
        assert BalanceScorer.temporal_spread([entry(T0, effort=0.0)]) == 0.0


class TestOwnershipSpread:
    def test_shared_files(self):
        touches = {
            "a.py": {"s1": {"1", "2"}, "s2": {"3"}},
            "b.py": {"s1": {"4", "5", "6"}},
        }
        # a.py counts 2 of cap 2, b.py 1 of 2
        assert BalanceScorer.ownership_spread(touches, team_size=2) == pytest.approx(75.0)

    def test_insignificant_files_ignored(self):
        touches = {
            "a.py": {"s1": {"1", "2", "3"}, "s2": {"4"}},
            "notes.md": {"s1": {"5"}},
        }
        assert BalanceScorer.ownership_spread(touches, team_size=2) == pytest.approx(100.0)

    def test_shared_sha_counted_once(self):
        touches = {"a.py": {"s1": {"1", "2"}, "s2": {"2"}}}
        assert BalanceScorer.ownership_spread(touches, team_size=2) == 0.0

    def test_author_cap(self):
        touches = {"a.py": {f"s{i}": {str(i)} for i in range(6)}}
        assert BalanceScorer.ownership_spread(touches, team_size=6) == pytest.approx(100.0)

    def test_no_significant_files(self):
        assert BalanceScorer.ownership_spread({"a.py": {"s1": {"1"}}}, team_size=2) == 0.0
        assert BalanceScorer.ownership_spread({}, team_size=2) == 0.0

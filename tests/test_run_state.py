"""Tests for the course-run status store."""

import threading

import pytest

from collab_insight.exceptions import RunAlreadyActiveError, RunStateError
from collab_insight.pipeline import RunState, RunStateStore


@pytest.fixture
def store():
    return RunStateStore()


class TestLifecycle:
    def test_idle_by_default(self, store):
        status = store.get("ex1")
        assert status.state is RunState.IDLE
        assert status.processed_teams == 0

    def test_start_progress_complete(self, store):
        store.start("ex1", total_teams=2)
        store.team_started("ex1", "t1")
        assert store.get("ex1").current_team == "t1"
        store.team_finished("ex1", "t1")
        store.team_finished("ex1", "t2", failed=True)
        status = store.complete("ex1")
        assert status.state is RunState.DONE
        assert status.processed_teams == 2
        assert status.failed_teams == 1
        assert status.current_team is None

    def test_second_start_rejected_while_running(self, store):
        store.start("ex1", 3)
        with pytest.raises(RunAlreadyActiveError):
            store.start("ex1", 3)

    def test_restart_after_finish_resets_counts(self, store):
        store.start("ex1", 1)
        store.team_finished("ex1", "t1")
        store.complete("ex1")
        status = store.start("ex1", 4)
        assert status.processed_teams == 0
        assert status.total_teams == 4

    def test_exercises_are_independent(self, store):
        store.start("ex1", 1)
        store.start("ex2", 1)
        assert store.get("ex1").is_running
        assert store.get("ex2").is_running

    def test_progress_requires_running(self, store):
        with pytest.raises(RunStateError):
            store.team_finished("ex1", "t1")

    def test_fail(self, store):
        store.start("ex1", 1)
        status = store.fail("ex1", "disk full")
        assert status.state is RunState.ERROR
        assert status.error_message == "disk full"


class TestCancel:
    def test_cancel_running(self, store):
        store.start("ex1", 5)
        store.team_finished("ex1", "t1")
        status = store.cancel("ex1")
        assert status.state is RunState.CANCELLED
        assert status.processed_teams == 1

    def test_cancel_finished_run_is_noop(self, store):
        store.start("ex1", 1)
        store.complete("ex1")
        assert store.cancel("ex1").state is RunState.DONE

    def test_recover_stale(self, store):
        store.start("ex1", 1)
        store.start("ex2", 1)
        store.complete("ex2")
        assert store.recover_stale() == ["ex1"]
        assert store.get("ex1").state is RunState.CANCELLED
        assert store.get("ex2").state is RunState.DONE

    def test_reset(self, store):
        store.start("ex1", 1)
        with pytest.raises(RunAlreadyActiveError):
            store.reset("ex1")
        store.cancel("ex1")
        assert store.reset("ex1").state is RunState.IDLE


def test_concurrent_progress_counts_every_team(store):
    store.start("ex1", 200)

    def finish(i):
        store.team_finished("ex1", f"t{i}")

    threads = [threading.Thread(target=finish, args=(i,)) for i in range(200)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert store.get("ex1").processed_teams == 200

"""Shared test fixtures and builders for Collab Insight tests."""

import pytest

from collab_insight.attribution import AttributedCommit, Outcome, ResolutionSource
from collab_insight.filtering import CommitChunk
from collab_insight.history import CommitRecord, FileChange
from collab_insight.rating import CommitLabel, Rating

DAY = 86400
WEEK = 7 * DAY
T0 = 1_700_000_000  # 2023-11-14 22:13:20 UTC


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def make_commit(
    sha,
    email="ann@uni.edu",
    timestamp=T0,
    parents=(),
    files=("src/app.py",),
    added=10,
    deleted=0,
    subject="Add feature",
    **kwargs,
):
    """CommitRecord with per-file stats split evenly across ``files``."""
    files = tuple(files)
    if "file_changes" not in kwargs and files:
        per_file = [(added // len(files), deleted // len(files)) for _ in files]
        per_file[0] = (
            added - sum(a for a, _ in per_file[1:]),
            deleted - sum(d for _, d in per_file[1:]),
        )
        kwargs["file_changes"] = tuple(
            FileChange(path, a, d) for path, (a, d) in zip(files, per_file)
        )
    return CommitRecord(
        sha=sha,
        email=email,
        timestamp=timestamp,
        files=files,
        lines_added=added,
        lines_deleted=deleted,
        parents=tuple(parents),
        subject=subject,
        **kwargs,
    )


def make_chain(specs, start=T0, step=3600):
    """Linear history from (sha, email) pairs, oldest first, each child of the previous."""
    commits = []
    parent = None
    for i, (sha, email) in enumerate(specs):
        commits.append(
            make_commit(
                sha,
                email=email,
                timestamp=start + i * step,
                parents=(parent,) if parent else (),
                subject=f"Implement part {i}",
            )
        )
        parent = sha
    return commits


def member_commit(commit, member_id):
    return AttributedCommit(commit, Outcome.MEMBER, ResolutionSource.REGISTERED, member_id)


def make_chunk(chunk_id, member_id, timestamp=T0, added=40, files=("src/app.py",), weight=1.0):
    return CommitChunk(
        chunk_id=chunk_id,
        member_id=member_id,
        shas=(chunk_id,),
        timestamps=(timestamp,),
        files=tuple(files),
        lines_added=added,
        lines_deleted=0,
        weight=weight,
    )


def make_rating(effort=5.0, complexity=5.0, novelty=5.0, confidence=0.9):
    return Rating(
        effort=effort,
        complexity=complexity,
        novelty=novelty,
        confidence=confidence,
        label=CommitLabel.FEATURE,
    )


@pytest.fixture
def rating():
    return make_rating()


@pytest.fixture
def balanced_pair():
    """Two members alternating equal work over four weeks."""
    rated = []
    for week in range(4):
        for i, member in enumerate(("s1", "s2")):
            for j in range(2):
                ts = T0 + week * WEEK + (i * 2 + j) * DAY
                chunk = make_chunk(
                    f"c{week}{i}{j}",
                    member,
                    timestamp=ts,
                    files=(f"src/shared_{j}.py",),
                )
                rated.append((chunk, make_rating()))
    return ("s1", "s2"), rated

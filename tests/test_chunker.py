"""Tests for bundling and splitting commits into rating chunks."""

import pytest

from collab_insight.config import ChunkConfig
from collab_insight.filtering import CommitChunker, FilterDecision, FilterReason, FilterStatus
from collab_insight.history import FileChange

from conftest import T0, make_commit, member_commit


def kept(commit, member="s1", weight=1.0):
    status = FilterStatus.KEPT if weight == 1.0 else FilterStatus.REDUCED
    return member_commit(commit, member), FilterDecision(commit.sha, status, weight=weight)


@pytest.fixture
def chunker():
    return CommitChunker()


class TestBundling:
    def test_small_commits_in_window_bundled(self, chunker):
        items = [
            kept(make_commit("a", timestamp=T0, added=5, files=("x.py",))),
            kept(make_commit("b", timestamp=T0 + 600, added=5, files=("y.py",))),
            kept(make_commit("c", timestamp=T0 + 1200, added=5, files=("x.py",))),
        ]
        chunks = chunker.build(items)
        assert len(chunks) == 1
        chunk = chunks[0]
        assert chunk.chunk_id == "a"
        assert chunk.shas == ("a", "b", "c")
        assert chunk.files == ("x.py", "y.py")
        assert chunk.lines_changed == 15
        assert chunk.is_bundle
        assert chunk.file_touches() == (("x.py", "a"), ("y.py", "b"), ("x.py", "c"))

    def test_window_measured_from_first_commit(self, chunker):
        items = [
            kept(make_commit("a", timestamp=T0, added=5)),
            kept(make_commit("b", timestamp=T0 + 50 * 60, added=5)),
            kept(make_commit("c", timestamp=T0 + 70 * 60, added=5)),
        ]
        assert [c.shas for c in chunker.build(items)] == [("a", "b"), ("c",)]

    def test_members_never_bundled_together(self, chunker):
        items = [
            kept(make_commit("a", timestamp=T0, added=5), member="s1"),
            kept(make_commit("b", timestamp=T0 + 60, added=5), member="s2"),
        ]
        chunks = chunker.build(items)
        assert [(c.member_id, c.shas) for c in chunks] == [("s1", ("a",)), ("s2", ("b",))]

    def test_large_commit_breaks_bundle(self, chunker):
        items = [
            kept(make_commit("a", timestamp=T0, added=5)),
            kept(make_commit("b", timestamp=T0 + 60, added=200)),
            kept(make_commit("c", timestamp=T0 + 120, added=5)),
        ]
        assert [c.shas for c in chunker.build(items)] == [("a",), ("b",), ("c",)]

    def test_reduced_commit_keeps_weight(self, chunker):
        items = [
            kept(make_commit("a", timestamp=T0, added=5), weight=0.4),
            kept(make_commit("b", timestamp=T0 + 60, added=5)),
        ]
        chunks = chunker.build(items)
        assert [c.weight for c in chunks] == [0.4, 1.0]
        assert chunks[0].weighted_lines == pytest.approx(2.0)


class TestSplitting:
    def test_large_commit_split_by_file(self, chunker):
        commit = make_commit("big", added=600, files=("a.py", "b.py", "c.py"))
        chunks = chunker.build([kept(commit)])
        assert [c.chunk_id for c in chunks] == ["big:0", "big:1"]
        assert [c.files for c in chunks] == [("a.py", "b.py"), ("c.py",)]
        assert sum(c.lines_changed for c in chunks) == 600
        assert all(c.shas == ("big",) for c in chunks)

    def test_single_file_never_split(self, chunker):
        chunks = chunker.build([kept(make_commit("big", added=900, files=("a.py",)))])
        assert [c.chunk_id for c in chunks] == ["big"]

    def test_custom_limit(self):
        chunker = CommitChunker(ChunkConfig(split_max_lines=100))
        commit = make_commit("big", added=300, files=("a.py", "b.py", "c.py"))
        assert len(chunker.build([kept(commit)])) == 3


class TestPartiallyGeneratedSplit:
    @staticmethod
    def partial(commit, weight):
        decision = FilterDecision(
            commit.sha,
            FilterStatus.REDUCED,
            weight=weight,
            reason=FilterReason.PARTIAL_GENERATED,
            matched=(FilterReason.PARTIAL_GENERATED,),
        )
        return member_commit(commit, "s1"), decision

    def test_generated_slice_dropped(self, chunker):
        files = ("package-lock.json", "src/app.py", "src/lib.py")
        commit = make_commit("big", added=1200, files=files)
        chunks = chunker.build([self.partial(commit, weight=800 / 1200)])
        assert [c.files for c in chunks] == [("src/app.py",), ("src/lib.py",)]
        assert [c.weight for c in chunks] == [1.0, 1.0]
        assert sum(c.weighted_lines for c in chunks) == pytest.approx(800.0)

    def test_mixed_slice_weighted_by_own_lines(self, chunker):
        changes = (
            FileChange("src/app.py", 300, 0),
            FileChange("package-lock.json", 100, 0),
            FileChange("src/lib.py", 300, 0),
        )
        commit = make_commit(
            "big", added=700, files=[c.path for c in changes], file_changes=changes
        )
        chunks = chunker.build([self.partial(commit, weight=600 / 700)])
        assert [c.files for c in chunks] == [("src/app.py",), ("src/lib.py", "package-lock.json")]
        assert [c.weight for c in chunks] == pytest.approx([1.0, 0.75])
        assert sum(c.weighted_lines for c in chunks) == pytest.approx(600.0)


def test_chunks_ordered_by_time(chunker):
    items = [
        kept(make_commit("late", timestamp=T0 + 9000, added=50), member="s1"),
        kept(make_commit("early", timestamp=T0, added=50), member="s2"),
    ]
    assert [c.chunk_id for c in chunker.build(items)] == ["early", "late"]

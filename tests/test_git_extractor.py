"""Tests for reading commit history with git."""

import os
import shutil
import subprocess

import pytest

from collab_insight.exceptions import RepositoryError
from collab_insight.history import GitExtractor
from collab_insight.history.git_extractor import _split_rename

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


class GitRepo:
    def __init__(self, path):
        self.path = path
        self.clock = 1_700_000_000
        self.git("init", "-q")

    def git(self, *args, email="ann@uni.edu", name="Ann"):
        env = {
            **os.environ,
            "GIT_AUTHOR_NAME": name,
            "GIT_AUTHOR_EMAIL": email,
            "GIT_COMMITTER_NAME": name,
            "GIT_COMMITTER_EMAIL": email,
            "GIT_AUTHOR_DATE": f"{self.clock} +0000",
            "GIT_COMMITTER_DATE": f"{self.clock} +0000",
        }
        return subprocess.run(
            ["git", "-c", "commit.gpgsign=false", *args],
            cwd=self.path,
            env=env,
            check=True,
            capture_output=True,
            text=True,
        ).stdout

    def commit(self, files, message, email="ann@uni.edu"):
        self.clock += 3600
        for rel, content in files.items():
            target = self.path / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        self.git("add", "-A", email=email)
        self.git("commit", "-q", "-m", message, email=email)
        return self.git("rev-parse", "HEAD").strip()


@pytest.fixture
def repo(tmp_path):
    return GitRepo(tmp_path)


@requires_git
class TestGitExtractor:
    def test_reads_commits_newest_first(self, repo):
        first = repo.commit({"src/app.py": "a\nb\nc\n"}, "Add app")
        second = repo.commit(
            {"src/app.py": "a\nb\nc\nd\n", "README.md": "x\n"}, "Extend", email="bob@uni.edu"
        )

        history = GitExtractor(str(repo.path)).extract()
        assert [c.sha for c in history.commits] == [second, first]

        newest = history.commits[0]
        assert newest.email == "bob@uni.edu"
        assert newest.parents == (first,)
        assert newest.subject == "Extend"
        assert newest.timestamp == repo.clock
        assert sorted(newest.files) == ["README.md", "src/app.py"]
        assert newest.lines_added == 2
        assert history.commits[1].is_root
        assert GitExtractor(str(repo.path)).root_emails() == {"ann@uni.edu"}

    def test_whitespace_only_change(self, repo):
        repo.commit({"app.py": "def f():\n    return 1\n"}, "Add f")
        repo.commit({"app.py": "def f():\n        return 1\n"}, "Indent")
        newest = GitExtractor(str(repo.path)).extract().commits[0]
        assert newest.lines_changed == 2
        assert newest.semantic_lines == 0

    def test_rename_detected(self, repo):
        repo.commit({"old_name.py": "".join(f"line {i}\n" for i in range(20))}, "Add module")
        repo.clock += 3600
        repo.git("mv", "old_name.py", "new_name.py")
        repo.git("commit", "-q", "-m", "Move module")
        newest = GitExtractor(str(repo.path)).extract().commits[0]
        assert newest.rename_detected
        assert newest.file_changes[0].renamed_from == "old_name.py"
        assert newest.files == ("new_name.py",)

    def test_max_commits(self, repo):
        for i in range(3):
            repo.commit({"f.txt": f"{i}\n"}, f"Step {i}")
        history = GitExtractor(str(repo.path), max_commits=2).extract()
        assert history.total_commits == 2
        assert history.truncated

    def test_empty_repository(self, repo):
        assert GitExtractor(str(repo.path)).extract().commits == []

    def test_not_a_repository(self, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(RepositoryError, match="not a git repository"):
            GitExtractor(str(plain)).extract()


def test_missing_directory(tmp_path):
    with pytest.raises(RepositoryError, match="does not exist"):
        GitExtractor(str(tmp_path / "missing")).extract()


class TestSplitRename:
    def test_brace_notation(self):
        assert _split_rename("src/{a.py => b.py}") == ("src/b.py", "src/a.py")

    def test_brace_with_empty_side(self):
        assert _split_rename("src/{ => util}/x.py") == ("src/util/x.py", "src/x.py")

    def test_plain_arrow(self):
        assert _split_rename("a.py => b.py") == ("b.py", "a.py")

    def test_no_rename(self):
        assert _split_rename("src/a.py") == ("src/a.py", None)

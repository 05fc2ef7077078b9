"""Read a repository's full commit DAG via the git subprocess."""

import re
import subprocess
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..exceptions import RepositoryError
from ..logging_config import get_logger
from .models import CommitRecord, FileChange, RepositoryHistory

logger = get_logger(__name__)

# Record and field separators for --format; neither occurs in emails or subjects
_RS = "\x1e"
_FS = "\x1f"


class GitExtractor:
    """Parse ``git log --numstat`` over all refs into a RepositoryHistory.

    Two passes are made: the first reads headers, parents and per-file line
    counts with rename detection, the second repeats the numstat with
    whitespace ignored so formatting-only commits can be recognised.
    """

    def __init__(self, repo_path: str, max_commits: int = 0, timeout: float = 120.0):
        self.repo_path = str(Path(repo_path).resolve())
        self.max_commits = max_commits
        self.timeout = timeout

    def extract(self) -> RepositoryHistory:
        """Read the history.

        Raises:
            RepositoryError: If the path is missing, is not a git repository,
                or git fails while reading it.
        """
        if not Path(self.repo_path).is_dir():
            raise RepositoryError(Path(self.repo_path), "directory does not exist")
        if not self._is_git_repo():
            raise RepositoryError(Path(self.repo_path), "not a git repository")

        raw = self._run_git_log(["-M"])
        commits = self._parse_log(raw)

        if commits:
            semantic = self._parse_semantic(self._run_git_log(["-w"]))
            commits = [self._with_semantic(c, semantic.get(c.sha)) for c in commits]

        truncated = bool(self.max_commits) and len(commits) >= self.max_commits
        if truncated:
            logger.warning(
                "History of %s truncated at %d commits", self.repo_path, self.max_commits
            )
        logger.debug("Read %d commits from %s", len(commits), self.repo_path)

        return RepositoryHistory(commits=commits, repo_path=self.repo_path, truncated=truncated)

    def _is_git_repo(self) -> bool:
        try:
            result = subprocess.run(
                ["git", "-C", self.repo_path, "rev-parse", "--git-dir"],
                capture_output=True,
                text=True,
                timeout=5,
            )
            return result.returncode == 0
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False

    def root_emails(self) -> set[str]:
        """Lowercased author emails of every parentless commit on any ref.

        Raises:
            RepositoryError: If the path is missing or git fails.
        """
        if not Path(self.repo_path).is_dir():
            raise RepositoryError(Path(self.repo_path), "directory does not exist")
        raw = self._run_git(["log", "--all", "--max-parents=0", "--format=%ae"])
        return {line.strip().lower() for line in raw.splitlines() if line.strip()}

    def _run_git_log(self, diff_options: list[str]) -> str:
        args = [
            "log",
            "--all",
            f"--format={_RS}%H{_FS}%P{_FS}%at{_FS}%ae{_FS}%an{_FS}%s",
            "--numstat",
            *diff_options,
        ]
        if self.max_commits:
            args.append(f"-n{self.max_commits}")
        return self._run_git(args)

    def _run_git(self, args: list[str]) -> str:
        try:
            result = subprocess.run(
                ["git", "-C", self.repo_path, *args],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise RepositoryError(Path(self.repo_path), "git executable not found")
        except subprocess.TimeoutExpired:
            raise RepositoryError(Path(self.repo_path), f"git log timed out after {self.timeout}s")

        if result.returncode != 0:
            stderr = result.stderr.strip()
            # An empty repository has no refs to log
            if "does not have any commits" in stderr or "bad default revision" in stderr:
                return ""
            raise RepositoryError(Path(self.repo_path), stderr or "git log failed")
        return result.stdout

    # Matches numstat rows: added, deleted ("-" for binary), path
    _NUMSTAT_RE = re.compile(r"^(\d+|-)\t(\d+|-)\t(.+)$")

    def _parse_log(self, raw: str) -> list[CommitRecord]:
        commits = []
        for record in raw.split(_RS):
            if not record.strip():
                continue
            lines = record.split("\n")
            parts = lines[0].split(_FS, 5)
            if len(parts) < 6:
                logger.debug("Skipping malformed git log header: %r", lines[0])
                continue
            sha, parents, ts, email, name, subject = parts
            try:
                timestamp = int(ts)
            except ValueError:
                logger.debug("Skipping commit %s with bad timestamp %r", sha, ts)
                continue

            changes = [c for c in (self._parse_numstat(line) for line in lines[1:]) if c]
            commits.append(
                CommitRecord(
                    sha=sha,
                    email=email,
                    timestamp=timestamp,
                    files=tuple(c.path for c in changes),
                    lines_added=sum(c.added for c in changes),
                    lines_deleted=sum(c.deleted for c in changes),
                    parents=tuple(parents.split()),
                    subject=subject,
                    author_name=name,
                    file_changes=tuple(changes),
                    rename_detected=any(c.renamed_from for c in changes),
                )
            )
        return commits

    def _parse_numstat(self, line: str) -> Optional[FileChange]:
        match = self._NUMSTAT_RE.match(line.strip("\r"))
        if not match:
            return None
        added = 0 if match.group(1) == "-" else int(match.group(1))
        deleted = 0 if match.group(2) == "-" else int(match.group(2))
        path, renamed_from = _split_rename(match.group(3))
        return FileChange(path=path, added=added, deleted=deleted, renamed_from=renamed_from)

    def _parse_semantic(self, raw: str) -> dict[str, int]:
        """Map sha -> lines changed when whitespace is ignored."""
        result: dict[str, int] = {}
        for record in raw.split(_RS):
            if not record.strip():
                continue
            lines = record.split("\n")
            sha = lines[0].split(_FS, 1)[0]
            total = 0
            for line in lines[1:]:
                change = self._parse_numstat(line)
                if change:
                    total += change.lines_changed
            result[sha] = total
        return result

    @staticmethod
    def _with_semantic(commit: CommitRecord, semantic_lines: Optional[int]) -> CommitRecord:
        if semantic_lines is None:
            return commit
        return replace(commit, semantic_lines=semantic_lines)


_BRACE_RENAME_RE = re.compile(r"^(.*)\{(.*) => (.*)\}(.*)$")


def _split_rename(path: str) -> tuple[str, Optional[str]]:
    """Resolve numstat rename notation to (new_path, old_path).

    git prints ``dir/{old.py => new.py}`` or ``old.py => new.py``.
    """
    match = _BRACE_RENAME_RE.match(path)
    if match:
        prefix, old, new, suffix = match.groups()
        old_path = (prefix + old + suffix).replace("//", "/")
        new_path = (prefix + new + suffix).replace("//", "/")
        return new_path, old_path
    if " => " in path:
        old_path, new_path = path.split(" => ", 1)
        return new_path, old_path
    return path, None

"""Data models for commit history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FileChange:
    path: str
    added: int
    deleted: int
    renamed_from: Optional[str] = None

    @property
    def lines_changed(self) -> int:
        return self.added + self.deleted


@dataclass(frozen=True)
class CommitRecord:
    """One commit as read from history. Never mutated after reading."""

    sha: str
    email: str  # raw author email, as recorded in the commit
    timestamp: int  # unix seconds
    files: tuple[str, ...] = ()
    lines_added: int = 0
    lines_deleted: int = 0
    parents: tuple[str, ...] = ()
    subject: str = ""
    author_name: str = ""
    file_changes: tuple[FileChange, ...] = ()
    semantic_lines: Optional[int] = None  # lines changed ignoring whitespace, None = unknown
    rename_detected: bool = False

    @property
    def lines_changed(self) -> int:
        return self.lines_added + self.lines_deleted

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def is_root(self) -> bool:
        return not self.parents


@dataclass(frozen=True)
class PushAnchor:
    """The last commit of one push, bound to the member who pushed it."""

    member_id: str
    sha: str
    pushed_at: Optional[int] = None


@dataclass
class RepositoryHistory:
    commits: list[CommitRecord]  # newest first, as git reports them
    repo_path: str = ""
    truncated: bool = False

    @property
    def total_commits(self) -> int:
        return len(self.commits)

"""Commit history: immutable commit records and the git reader."""

from .git_extractor import GitExtractor
from .models import CommitRecord, FileChange, PushAnchor, RepositoryHistory

__all__ = [
    "CommitRecord",
    "FileChange",
    "PushAnchor",
    "RepositoryHistory",
    "GitExtractor",
]

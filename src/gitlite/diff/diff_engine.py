"""Commit diff engine.

Compares every path recorded in a commit with the same path in its parent
commit, producing both a line diff and a character diff for each path that
exists on both sides.
"""

from typing import Any, Dict, List, Optional

from gitlite.diff.text_diff import DiffSegment, diff_chars, diff_lines
from gitlite.storage import Commit, CommitBuilder, ObjectStore

NEW_FILE = "new"
MODIFIED = "modified"


class NoParentError(Exception):
    """Raised when the diff target is a root commit."""


class FileDiff:
    """Diff of a single path between a commit and its parent.

    Attributes:
        path: Workspace-relative path
        status: "new" if the parent has no entry for the path, else "modified"
        old_hash: Blob digest on the parent side (None for new files)
        new_hash: Blob digest on the commit side
        line_diff: Line-granularity segments (empty for new files)
        char_diff: Character-granularity segments (empty for new files)
    """

    def __init__(
        self,
        path: str,
        status: str,
        new_hash: str,
        old_hash: Optional[str] = None,
        line_diff: Optional[List[DiffSegment]] = None,
        char_diff: Optional[List[DiffSegment]] = None,
    ):
        self.path = path
        self.status = status
        self.new_hash = new_hash
        self.old_hash = old_hash
        self.line_diff = line_diff or []
        self.char_diff = char_diff or []

    def __repr__(self) -> str:
        return f"FileDiff({self.path}: {self.status})"

    @property
    def is_new(self) -> bool:
        return self.status == NEW_FILE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "path": self.path,
            "status": self.status,
            "old_hash": self.old_hash,
            "new_hash": self.new_hash,
            "line_diff": [segment.to_dict() for segment in self.line_diff],
            "char_diff": [segment.to_dict() for segment in self.char_diff],
        }


class CommitDiff:
    """Per-file diff report for one commit against its parent."""

    def __init__(self, commit: Commit, parent: Commit, files: List[FileDiff]):
        self.commit = commit
        self.parent = parent
        self.files = files

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "commit": self.commit.hash,
            "parent": self.parent.hash,
            "files": [file_diff.to_dict() for file_diff in self.files],
        }


class DiffEngine:
    """Computes diffs between a commit and its parent.

    Attributes:
        object_store: ObjectStore holding blob content
        commit_builder: CommitBuilder used to read commit records
    """

    def __init__(
        self,
        object_store: ObjectStore,
        commit_builder: Optional[CommitBuilder] = None,
    ):
        self.object_store = object_store
        self.commit_builder = commit_builder or CommitBuilder(object_store)

    def diff_commit(self, commit_hash: str) -> CommitDiff:
        """Diff a commit against its parent.

        Paths are reported in the commit's staging order. When the parent
        recorded a path more than once, the first entry is used.

        Args:
            commit_hash: Full digest of the commit to inspect

        Returns:
            CommitDiff with one FileDiff per entry in the commit

        Raises:
            NoParentError: If the commit is a root commit
            ObjectNotFoundError: If the commit, its parent or a blob is missing
            ObjectCorruptedError: If a blob no longer matches its digest
        """
        commit = self.commit_builder.read_commit(commit_hash)
        if commit.is_root:
            raise NoParentError(f"Commit {commit_hash} has no parent commit")

        parent = self.commit_builder.read_commit(commit.parent)

        files = []
        for change in commit.changes:
            parent_change = parent.find_change(change.path)
            if parent_change is None:
                files.append(FileDiff(change.path, NEW_FILE, new_hash=change.hash))
                continue

            old_text = self._read_text(parent_change.hash)
            new_text = self._read_text(change.hash)
            files.append(
                FileDiff(
                    change.path,
                    MODIFIED,
                    new_hash=change.hash,
                    old_hash=parent_change.hash,
                    line_diff=diff_lines(old_text, new_text),
                    char_diff=diff_chars(old_text, new_text),
                )
            )

        return CommitDiff(commit, parent, files)

    def _read_text(self, digest: str) -> str:
        content = self.object_store.get(digest, verify=True)
        return content.decode("utf-8", errors="replace")

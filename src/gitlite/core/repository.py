"""Repository handle for GitLite.

A Repository is built from the on-disk layout at the start of a command and
dropped when the command ends. It wires the object store, staging area,
commit chain and diff engine together and owns the HEAD pointer.

On-disk layout:
    .gitLite/objects/<digest>   # blobs and commit records
    .gitLite/index              # staged entries (JSON list)
    .gitLite/HEAD               # digest of the latest commit, or empty
"""

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape

from gitlite.constants import (
    GITLITE_DIR,
    HEAD_FILE,
    INDEX_FILE,
    OBJECTS_DIR,
)
from gitlite.core.ignore import IgnoreRules
from gitlite.core.staging import StagingArea
from gitlite.diff import CommitDiff, DiffEngine
from gitlite.storage import Commit, CommitBuilder, ObjectStore, StagedEntry, is_valid_digest

console = Console(stderr=True)


class NotARepositoryError(Exception):
    """Raised when no .gitLite directory exists in the workspace."""


class Repository:
    """Scoped view of one GitLite repository.

    Attributes:
        workspace_root: Root directory of the workspace
        gitlite_dir: Path to the .gitLite directory
        object_store: Object store for blobs and commits
        staging: Staging area
        commits: Commit builder / walker
        diff_engine: Commit diff engine
    """

    def __init__(self, workspace_root: Path) -> None:
        """Open an existing repository.

        Raises:
            NotARepositoryError: If the workspace has no .gitLite directory
        """
        self.workspace_root = Path(os.path.abspath(workspace_root))
        self.gitlite_dir = self.workspace_root / GITLITE_DIR
        self.head_path = self.gitlite_dir / HEAD_FILE

        if not self.gitlite_dir.is_dir():
            raise NotARepositoryError(
                f"Not a GitLite repository (no {GITLITE_DIR}/ found in {self.workspace_root})"
            )

        self.object_store = ObjectStore(self.gitlite_dir)
        self.staging = StagingArea(self.workspace_root, self.object_store)
        self.commits = CommitBuilder(self.object_store)
        self.diff_engine = DiffEngine(self.object_store, self.commits)

    @classmethod
    def init(cls, workspace_root: Path) -> Tuple["Repository", bool]:
        """Create the repository layout if it doesn't exist yet.

        Existing objects, index and HEAD are left untouched.

        Returns:
            Tuple of (repository, created) where created is False if the
            repository was already initialized
        """
        gitlite_dir = Path(workspace_root) / GITLITE_DIR
        index_path = gitlite_dir / INDEX_FILE
        head_path = gitlite_dir / HEAD_FILE

        created = not index_path.exists()

        (gitlite_dir / OBJECTS_DIR).mkdir(parents=True, exist_ok=True)
        if not index_path.exists():
            index_path.write_text("[]", encoding="utf-8")
        if not head_path.exists():
            head_path.write_text("", encoding="utf-8")

        return cls(workspace_root), created

    def read_head(self) -> Optional[str]:
        """Read the HEAD pointer.

        A missing, unreadable or malformed HEAD is treated as "no commits".

        Returns:
            Digest of the latest commit, or None
        """
        if not self.head_path.exists():
            return None

        try:
            content = self.head_path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as e:
            console.print(
                f"[yellow]Warning:[/yellow] Failed to read HEAD ({escape(str(e))}). "
                "Assuming no commits."
            )
            return None

        if not content:
            return None

        if not is_valid_digest(content):
            console.print(
                f"[yellow]Warning:[/yellow] Malformed HEAD ({escape(content[:50])}). "
                "Assuming no commits."
            )
            return None

        return content

    def add(self, paths: Sequence[str]) -> Dict[str, List[Any]]:
        """Stage files, honouring the workspace ignore rules.

        See StagingArea.add for the report format.
        """
        ignore_rules = IgnoreRules.from_workspace(self.workspace_root)
        return self.staging.add(paths, ignore_rules)

    def staged_entries(self) -> List[StagedEntry]:
        """Return the staged entries in staging order."""
        return self.staging.load()

    def commit(self, message: str) -> Commit:
        """Commit the staging area.

        The effects happen in a fixed order: the commit object is written,
        then HEAD is moved to it, then the staging area is cleared. A crash
        in between leaves a committed but still-staged index, never a
        cleared index without its commit.

        Raises:
            NothingToCommitError: If the staging area is empty
        """
        entries = self.staging.load()
        parent = self.read_head()

        commit = self.commits.create_commit(message, entries, parent)
        self._write_head(commit.hash)
        self.staging.clear()

        return commit

    def log(self, limit: Optional[int] = None) -> Iterator[Commit]:
        """Walk history from HEAD, newest first.

        Raises:
            ObjectNotFoundError: If a commit in the chain is missing
        """
        return self.commits.walk(self.read_head(), limit=limit)

    def resolve_commit(self, revision: str) -> str:
        """Expand a full or abbreviated commit digest."""
        return self.object_store.resolve(revision)

    def diff(self, revision: str) -> CommitDiff:
        """Diff a commit against its parent.

        Raises:
            NoParentError: If the commit is a root commit
            ObjectNotFoundError: If the commit cannot be found
        """
        return self.diff_engine.diff_commit(self.resolve_commit(revision))

    def _write_head(self, commit_hash: str) -> None:
        """Point HEAD at a commit (atomic replace)."""
        fd, tmp_path = tempfile.mkstemp(
            dir=self.gitlite_dir,
            prefix=".tmp_head_",
        )

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(commit_hash)
                f.flush()
                os.fsync(f.fileno())

            os.replace(tmp_path, self.head_path)

        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

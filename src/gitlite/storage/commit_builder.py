"""Commit records and the linear commit chain.

A commit snapshots the staging area: its message, the ordered staged
entries, the parent commit's digest and a timestamp. The serialized record
is stored in the object store under the digest of its own bytes, so commits
form a singly-linked list that can be walked back from HEAD.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Sequence

from gitlite.storage.object_store import ObjectStore


class CommitFormatError(Exception):
    """Raised when a stored object is not a valid commit record."""


class NothingToCommitError(Exception):
    """Raised when a commit is requested with an empty staging area."""


class StagedEntry:
    """A path staged with content matching a stored blob.

    Attributes:
        path: Path relative to the workspace root
        hash: Digest of the blob holding the file content
    """

    def __init__(self, path: str, hash: str):  # noqa: A002
        self.path = path
        self.hash = hash

    def __repr__(self) -> str:
        return f"StagedEntry({self.path}: {self.hash[:8]})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StagedEntry):
            return NotImplemented
        return self.path == other.path and self.hash == other.hash

    def to_dict(self) -> Dict[str, str]:
        """Convert to the on-disk representation."""
        return {"path": self.path, "hash": self.hash}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StagedEntry":
        """Build an entry from its on-disk representation.

        Raises:
            ValueError: If path or hash is missing or not a string
        """
        path = data.get("path")
        digest = data.get("hash")
        if not isinstance(path, str) or not isinstance(digest, str):
            raise ValueError(f"Invalid staged entry: {data!r}")
        return cls(path, digest)


class Commit:
    """An immutable commit record.

    Attributes:
        hash: Digest of the serialized record
        message: Commit message
        changes: Ordered staged entries captured by this commit
        parent: Digest of the parent commit, or None for the root commit
        time: ISO-8601 UTC timestamp
    """

    def __init__(
        self,
        hash: str,  # noqa: A002
        message: str,
        changes: List[StagedEntry],
        parent: Optional[str],
        time: str,
    ):
        self.hash = hash
        self.message = message
        self.changes = changes
        self.parent = parent
        self.time = time

    def __repr__(self) -> str:
        return f"Commit({self.hash[:7]}: {self.message!r})"

    @property
    def is_root(self) -> bool:
        """Whether this commit has no parent."""
        return self.parent is None

    def find_change(self, path: str) -> Optional[StagedEntry]:
        """Return the first entry recorded for ``path``, if any."""
        return next((entry for entry in self.changes if entry.path == path), None)

    def content(self) -> Dict[str, Any]:
        """Fields covered by the commit digest, in serialization order."""
        return {
            "message": self.message,
            "changes": [entry.to_dict() for entry in self.changes],
            "parent": self.parent,
            "time": self.time,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation including the hash."""
        data = {"hash": self.hash}
        data.update(self.content())
        return data


class CommitBuilder:
    """Builder for creating, reading and walking commit records.

    Commits are stored as compact JSON objects in the object store. The keys
    are written in the order message, changes, parent, time, and the commit
    hash is the digest of exactly those bytes.

    Attributes:
        object_store: ObjectStore holding blobs and commit records
    """

    def __init__(self, object_store: ObjectStore):
        self.object_store = object_store

    def create_commit(
        self,
        message: str,
        entries: Sequence[StagedEntry],
        parent_hash: Optional[str] = None,
    ) -> Commit:
        """Create and store a new commit record.

        Only the object write happens here. Pointing HEAD at the new commit
        and clearing the staging area is up to the caller, in that order.

        Args:
            message: Commit message
            entries: Staged entries, in staging order
            parent_hash: Digest of the current HEAD commit, or None/"" for
                the first commit

        Returns:
            The stored Commit with its hash set

        Raises:
            NothingToCommitError: If entries is empty
        """
        if not entries:
            raise NothingToCommitError("Nothing to commit (staging area is empty)")

        commit = Commit(
            hash="",
            message=message,
            changes=list(entries),
            parent=parent_hash or None,
            time=self._now(),
        )
        commit.hash = self.object_store.put(self._serialize(commit.content()))
        return commit

    def read_commit(self, commit_hash: str) -> Commit:
        """Read a commit record from the object store.

        Args:
            commit_hash: Full commit digest

        Returns:
            Commit object

        Raises:
            ObjectNotFoundError: If no object has this digest
            CommitFormatError: If the object is not a commit record
        """
        raw = self.object_store.get(commit_hash)

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CommitFormatError(f"Object {commit_hash} is not a commit: {e}") from e

        if not isinstance(data, dict) or not {"message", "changes", "time"} <= set(data):
            raise CommitFormatError(f"Object {commit_hash} is not a commit record")

        changes = data["changes"]
        if not isinstance(changes, list):
            raise CommitFormatError(f"Commit {commit_hash} has malformed changes")

        try:
            entries = [StagedEntry.from_dict(item) for item in changes]
        except (AttributeError, ValueError) as e:
            raise CommitFormatError(f"Commit {commit_hash} has malformed changes: {e}") from e

        return Commit(
            hash=commit_hash,
            message=str(data["message"]),
            changes=entries,
            # Root commits written with an empty HEAD carry "" as parent
            parent=data.get("parent") or None,
            time=str(data["time"]),
        )

    def walk(self, head: Optional[str], limit: Optional[int] = None) -> Iterator[Commit]:
        """Yield commits from ``head`` back to the root commit.

        A missing commit anywhere in the chain raises ObjectNotFoundError
        instead of ending the walk early.

        Args:
            head: Digest to start from; None or "" yields nothing
            limit: Maximum number of commits to yield
        """
        commit_hash = head or None
        count = 0

        while commit_hash is not None:
            if limit is not None and count >= limit:
                return
            commit = self.read_commit(commit_hash)
            yield commit
            count += 1
            commit_hash = commit.parent

    def _serialize(self, content: Dict[str, Any]) -> bytes:
        """Serialize commit content as compact JSON, preserving key order."""
        return json.dumps(
            content,
            separators=(",", ":"),
            ensure_ascii=False,
        ).encode("utf-8")

    @staticmethod
    def _now() -> str:
        """Current UTC time, ISO-8601 with milliseconds and a Z suffix."""
        stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        return stamp.replace("+00:00", "Z")

"""Storage layer for GitLite.

This module provides the content-addressable object store and the commit
records built on top of it.
"""

from gitlite.storage.commit_builder import (
    Commit,
    CommitBuilder,
    CommitFormatError,
    NothingToCommitError,
    StagedEntry,
)
from gitlite.storage.object_store import (
    AmbiguousObjectError,
    ObjectCorruptedError,
    ObjectNotFoundError,
    ObjectStore,
    compute_digest,
    is_valid_digest,
)

__all__ = [
    "ObjectStore",
    "ObjectNotFoundError",
    "ObjectCorruptedError",
    "AmbiguousObjectError",
    "compute_digest",
    "is_valid_digest",
    "Commit",
    "CommitBuilder",
    "CommitFormatError",
    "NothingToCommitError",
    "StagedEntry",
]

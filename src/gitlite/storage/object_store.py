"""Content-addressable object storage for GitLite.

This module implements a write-once object store keyed by the SHA-1 digest
of each object's bytes. File blobs and serialized commit records live side
by side in .gitLite/objects/ with automatic deduplication.
"""

import hashlib
import os
import tempfile
from pathlib import Path
from typing import List

from gitlite.constants import (
    HASH_ALGORITHM,
    HASH_LENGTH,
    MIN_PREFIX_LENGTH,
    OBJECTS_DIR,
)

_HEX_DIGITS = frozenset("0123456789abcdef")


class ObjectNotFoundError(Exception):
    """Raised when a digest is absent from the object store."""

    pass


class ObjectCorruptedError(Exception):
    """Raised when an object's digest doesn't match its content."""

    pass


class AmbiguousObjectError(Exception):
    """Raised when an abbreviated digest matches more than one object."""

    pass


def compute_digest(content: bytes) -> str:
    """Compute the hex digest used as an object key.

    Args:
        content: Binary data to hash

    Returns:
        Hex string of hash (40 characters for SHA-1)
    """
    hasher = hashlib.new(HASH_ALGORITHM)
    hasher.update(content)
    return hasher.hexdigest()


def is_valid_digest(value: object) -> bool:
    """Check that a value is a full-length lowercase hex digest."""
    return (
        isinstance(value, str)
        and len(value) == HASH_LENGTH
        and all(c in _HEX_DIGITS for c in value)
    )


class ObjectStore:
    """Content-addressable storage for blobs and commit records.

    Objects are identified by the SHA-1 digest of their bytes. There is no
    update or delete: an object, once written, keeps its key forever.

    Storage layout:
        .gitLite/objects/<digest>

    Attributes:
        objects_dir: Path to the objects directory

    Example:
        >>> store = ObjectStore(Path(".gitLite"))
        >>> digest = store.put(b"hello")
        >>> store.get(digest)
        b'hello'
    """

    def __init__(self, gitlite_dir: Path) -> None:
        """Initialize the object store.

        Args:
            gitlite_dir: Path to .gitLite directory

        Raises:
            ValueError: If gitlite_dir doesn't exist
        """
        self.gitlite_dir = Path(gitlite_dir)
        self.objects_dir = self.gitlite_dir / OBJECTS_DIR

        if not self.gitlite_dir.exists():
            raise ValueError(f"GitLite directory not found: {gitlite_dir}")

    def put(self, content: bytes) -> str:
        """Store content under its digest.

        If an object with the same digest already exists the call is a
        no-op and only the digest is returned. Uses atomic write (tmp file +
        rename) so a partially written object never appears under its key.

        Args:
            content: Binary content to store

        Returns:
            SHA-1 digest of the content (40 hex characters)

        Raises:
            OSError: If write fails (permissions, disk full, etc.)
        """
        digest = compute_digest(content)

        if self.exists(digest):
            return digest

        self.objects_dir.mkdir(parents=True, exist_ok=True)
        object_path = self._get_object_path(digest)

        tmp_fd, tmp_path = tempfile.mkstemp(
            dir=self.objects_dir,
            prefix=".tmp_",
            suffix=".obj",
        )
        try:
            with os.fdopen(tmp_fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())

            os.replace(tmp_path, object_path)
            return digest

        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, digest: str, verify: bool = False) -> bytes:
        """Read an object's content.

        Args:
            digest: SHA-1 digest of the object (40 hex characters)
            verify: Recompute the digest and compare it with the key

        Returns:
            Binary content of the object

        Raises:
            ObjectNotFoundError: If no object has this digest
            ObjectCorruptedError: If verification fails
            ValueError: If digest is not a well-formed digest
        """
        self._validate_digest(digest)

        object_path = self._get_object_path(digest)
        if not object_path.is_file():
            raise ObjectNotFoundError(f"Object not found: {digest}")

        content = object_path.read_bytes()

        if verify:
            actual = compute_digest(content)
            if actual != digest:
                raise ObjectCorruptedError(
                    f"Object corrupted: expected {digest}, got {actual}"
                )

        return content

    def exists(self, digest: str) -> bool:
        """Check if an object exists in the store.

        Malformed digests are reported as absent rather than raising.
        """
        if not is_valid_digest(digest):
            return False

        return self._get_object_path(digest).is_file()

    def resolve(self, prefix: str) -> str:
        """Expand an abbreviated digest to the full digest of one object.

        Args:
            prefix: Leading hex characters of a digest (at least 4)

        Returns:
            The unique full digest starting with ``prefix``

        Raises:
            ValueError: If prefix is too short or not hexadecimal
            ObjectNotFoundError: If no object matches
            AmbiguousObjectError: If more than one object matches
        """
        prefix = prefix.strip().lower()

        if len(prefix) == HASH_LENGTH:
            self._validate_digest(prefix)
            if not self.exists(prefix):
                raise ObjectNotFoundError(f"Object not found: {prefix}")
            return prefix

        if len(prefix) < MIN_PREFIX_LENGTH or len(prefix) > HASH_LENGTH:
            raise ValueError(
                f"Digest prefix must be {MIN_PREFIX_LENGTH}-{HASH_LENGTH} "
                f"characters, got {len(prefix)}"
            )
        self._check_hex(prefix)

        matches = [d for d in self.list_objects() if d.startswith(prefix)]
        if not matches:
            raise ObjectNotFoundError(f"Object not found: {prefix}")
        if len(matches) > 1:
            raise AmbiguousObjectError(
                f"Digest prefix {prefix} is ambiguous ({len(matches)} objects match)"
            )
        return matches[0]

    def list_objects(self) -> List[str]:
        """List the digests of all stored objects, sorted."""
        if not self.objects_dir.exists():
            return []

        digests = []
        for item in self.objects_dir.iterdir():
            if item.is_file() and len(item.name) == HASH_LENGTH:
                digests.append(item.name)
        return sorted(digests)

    def _get_object_path(self, digest: str) -> Path:
        """Get the filesystem path for an object."""
        return self.objects_dir / digest

    def _validate_digest(self, digest: str) -> None:
        """Validate that a digest string is properly formatted.

        Raises:
            ValueError: If digest is invalid format
        """
        if not isinstance(digest, str):
            raise ValueError(f"Digest must be string, got {type(digest)}")

        if len(digest) != HASH_LENGTH:
            raise ValueError(
                f"Digest must be {HASH_LENGTH} characters, got {len(digest)}"
            )

        self._check_hex(digest)

    @staticmethod
    def _check_hex(value: str) -> None:
        if not all(c in _HEX_DIGITS for c in value):
            raise ValueError(f"Digest must be lowercase hexadecimal: {value!r}")

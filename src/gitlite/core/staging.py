"""Staging area management for GitLite.

The staging area (index) is an ordered list of (path, hash) entries waiting
for the next commit. Index format (JSON):
[
    {"path": "relative/path/to/file", "hash": "sha1..."},
    ...
]

Staging deduplicates by content, not by path: content whose blob is already
in the object store is reported as a duplicate and not staged again, even
under a different path. The same path may be staged more than once with
different content.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape

from gitlite.constants import GITLITE_DIR, INDEX_FILE
from gitlite.core.ignore import IgnoreRules
from gitlite.core.workspace import is_repository_path, list_files
from gitlite.storage import ObjectStore, StagedEntry, compute_digest

console = Console(stderr=True)


class StagingError(Exception):
    """Exception raised during staging operations."""


class StagingArea:
    """Manager for the staging area (index).

    Attributes:
        workspace_root: Root directory of the workspace
        index_path: Path to the index file (.gitLite/index)
        object_store: ObjectStore instance for blob storage
        entries: In-memory staged entries, in staging order
    """

    def __init__(self, workspace_root: Path, object_store: ObjectStore):
        """Initialize StagingArea.

        Args:
            workspace_root: Root directory of workspace
            object_store: ObjectStore for blob management

        Raises:
            StagingError: If the workspace has no .gitLite directory
        """
        self.workspace_root = Path(os.path.abspath(workspace_root))
        self.gitlite_dir = self.workspace_root / GITLITE_DIR
        self.index_path = self.gitlite_dir / INDEX_FILE
        self.object_store = object_store
        self.entries: Optional[List[StagedEntry]] = None

        if not self.gitlite_dir.exists():
            raise StagingError(
                f"Not a GitLite repository (no {GITLITE_DIR}/ found in {workspace_root})"
            )

    def load(self) -> List[StagedEntry]:
        """Read the persisted staging area.

        A missing, unreadable or malformed index is reported and treated as
        an empty staging area.

        Returns:
            Staged entries, in staging order
        """
        self.entries = self._read_index()
        return list(self.entries)

    def stage(self, path: str, content: bytes) -> Tuple[str, bool]:
        """Store content and append a staged entry for it.

        Content whose blob already exists in the object store is skipped.

        Args:
            path: Workspace-relative path
            content: File content

        Returns:
            Tuple of (digest, staged) where staged is False for duplicates
        """
        if self.entries is None:
            self.load()

        digest = compute_digest(content)
        if self.object_store.exists(digest):
            return digest, False

        self.object_store.put(content)
        self.entries.append(StagedEntry(path, digest))
        return digest, True

    def save(self, entries: Optional[Sequence[StagedEntry]] = None) -> None:
        """Persist the full ordered sequence, overwriting prior state.

        Args:
            entries: Entries to persist (default: the in-memory entries)
        """
        if entries is not None:
            self.entries = list(entries)
        elif self.entries is None:
            self.entries = []

        self._write_index([entry.to_dict() for entry in self.entries])

    def clear(self) -> None:
        """Clear all staged entries."""
        self.save([])

    def add(
        self,
        paths: Sequence[str],
        ignore_rules: Optional[IgnoreRules] = None,
    ) -> Dict[str, List[Any]]:
        """Add files to the staging area.

        ``"."`` stands for every file in the workspace; directories expand
        to the files beneath them. Each candidate is checked for existence,
        then against the ignore rules, then for duplicate content.

        Args:
            paths: Paths (relative to the workspace root, or absolute)
            ignore_rules: Rules excluding paths (default: none)

        Returns:
            Dictionary with statistics:
            {
                "added": [(path, digest), ...],
                "duplicates": [(path, digest), ...],
                "ignored": [path, ...],
                "missing": [path, ...]
            }
        """
        ignore_rules = ignore_rules or IgnoreRules()
        self.load()

        stats: Dict[str, List[Any]] = {
            "added": [],
            "duplicates": [],
            "ignored": [],
            "missing": [],
        }

        try:
            for rel_path in self._expand(paths, stats):
                abs_path = self.workspace_root / rel_path

                if not abs_path.is_file():
                    stats["missing"].append(rel_path)
                    continue

                if ignore_rules.is_ignored(rel_path):
                    stats["ignored"].append(rel_path)
                    continue

                try:
                    content = abs_path.read_bytes()
                except FileNotFoundError:
                    stats["missing"].append(rel_path)
                    continue

                digest, staged = self.stage(rel_path, content)
                if staged:
                    stats["added"].append((rel_path, digest))
                else:
                    stats["duplicates"].append((rel_path, digest))
        finally:
            # Blobs written so far must stay reachable from the index
            self.save()

        return stats

    def _expand(self, paths: Sequence[str], stats: Dict[str, List[Any]]) -> Iterator[str]:
        """Turn user-supplied paths into workspace-relative file paths."""
        if "." in paths:
            yield from list_files(self.workspace_root)
            return

        for path in paths:
            abs_path = Path(os.path.normpath(self.workspace_root / path))

            try:
                rel_path = abs_path.relative_to(self.workspace_root)
            except ValueError:
                stats["missing"].append(str(path))
                continue

            if is_repository_path(self.workspace_root, abs_path):
                continue

            if abs_path.is_dir():
                yield from list_files(self.workspace_root, abs_path)
            else:
                yield str(rel_path)

    def _read_index(self) -> List[StagedEntry]:
        """Load index from disk."""
        if not self.index_path.exists():
            return []

        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                raw = f.read()
        except (OSError, UnicodeDecodeError) as e:
            console.print(
                f"[yellow]Warning:[/yellow] Failed to read index file ({escape(str(e))}). "
                "Assuming empty staging area."
            )
            return []

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError("index is not a list")
            return [StagedEntry.from_dict(item) for item in data]
        except (AttributeError, ValueError) as e:
            console.print(
                f"[yellow]Warning:[/yellow] Corrupted index file ({escape(str(e))}). "
                "Assuming empty staging area."
            )
            return []

    def _write_index(self, data: List[Dict[str, str]]) -> None:
        """Save index to disk."""
        fd, tmp_path = tempfile.mkstemp(
            dir=self.gitlite_dir,
            prefix=".tmp_index_",
            suffix=".json",
        )

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())

            os.replace(tmp_path, self.index_path)

        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

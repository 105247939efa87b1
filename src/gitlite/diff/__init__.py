"""Diff engine for GitLite.

This module provides line- and character-granularity text diffs and the
per-commit diff report built from them.
"""

from gitlite.diff.diff_engine import CommitDiff, DiffEngine, FileDiff, NoParentError
from gitlite.diff.text_diff import (
    DiffSegment,
    diff_chars,
    diff_lines,
    reconstruct,
    summarize,
)

__all__ = [
    "CommitDiff",
    "DiffEngine",
    "DiffSegment",
    "FileDiff",
    "NoParentError",
    "diff_chars",
    "diff_lines",
    "reconstruct",
    "summarize",
]

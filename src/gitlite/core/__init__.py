"""Core engine layer for GitLite.

This module provides the business logic for version control operations:
ignore rules, staging, and the repository handle that ties them to the
storage layer.
"""

from gitlite.core.ignore import IgnoreRules
from gitlite.core.repository import NotARepositoryError, Repository
from gitlite.core.staging import StagingArea, StagingError

__all__ = [
    "IgnoreRules",
    "NotARepositoryError",
    "Repository",
    "StagingArea",
    "StagingError",
]

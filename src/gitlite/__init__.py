"""GitLite - a minimal local version-control engine.

GitLite tracks file snapshots in a content-addressed object store, stages
pending changes, builds a linear commit history and computes line- and
character-level differences between adjacent commits.
"""

__version__ = "0.1.0"
__author__ = "GitLite Contributors"

__all__ = ["__version__", "__author__"]

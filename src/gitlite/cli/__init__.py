"""Command-line interface for GitLite."""

"""Ignore rules for bulk staging.

Each non-blank line of the workspace's .gitignore is compiled as a regular
expression (not a glob) and searched for in candidate relative paths.
Forward slashes in a pattern are rewritten to the host path separator.
"""

import os
import re
from pathlib import Path
from typing import List, Optional, Pattern

from rich.console import Console
from rich.markup import escape

from gitlite.constants import IGNORE_FILE

console = Console(stderr=True)


class IgnoreRules:
    """Ordered set of compiled ignore patterns.

    Attributes:
        patterns: Pattern strings as read from the ignore file
    """

    def __init__(self, patterns: Optional[List[str]] = None) -> None:
        self.patterns: List[str] = []
        self._compiled: List[Pattern[str]] = []

        for pattern in patterns or []:
            self.add_pattern(pattern)

    @classmethod
    def from_workspace(cls, workspace_root: Path) -> "IgnoreRules":
        """Load rules from ``<workspace_root>/.gitignore``.

        A missing ignore file yields an empty rule set.
        """
        ignore_file = Path(workspace_root) / IGNORE_FILE
        if not ignore_file.is_file():
            return cls()

        try:
            content = ignore_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            console.print(
                f"[yellow]Warning:[/yellow] Could not read {IGNORE_FILE}: {escape(str(e))}"
            )
            return cls()

        return cls(content.splitlines())

    def add_pattern(self, pattern: str) -> bool:
        """Compile and append a pattern.

        Blank patterns are skipped. Patterns that are not valid regular
        expressions are reported and skipped.

        Returns:
            True if the pattern was added
        """
        if pattern.strip() == "":
            return False

        source = pattern.replace("/", re.escape(os.sep))
        try:
            compiled = re.compile(source)
        except re.error as e:
            console.print(
                f"[yellow]Warning:[/yellow] Skipping invalid ignore pattern "
                f"{escape(repr(pattern))}: {escape(str(e))}"
            )
            return False

        self.patterns.append(pattern)
        self._compiled.append(compiled)
        return True

    def is_ignored(self, rel_path: str) -> bool:
        """Check whether a workspace-relative path matches any rule."""
        return any(regex.search(rel_path) for regex in self._compiled)

"""Line- and character-granularity text diffs.

Both diffs are built on difflib.SequenceMatcher and return an ordered list
of segments marked added, removed or unchanged. Joining the unchanged and
removed segments gives back the old text; joining the unchanged and added
segments gives back the new text.
"""

from difflib import SequenceMatcher
from typing import Dict, List, Optional, Sequence

ADDED = "added"
REMOVED = "removed"
UNCHANGED = "unchanged"

OLD = "old"
NEW = "new"

# Largest replaced block (old length * new length) diffed per character
CHAR_DIFF_LIMIT = 4_000_000


class DiffSegment:
    """A run of text with a single diff status.

    Attributes:
        status: One of "added", "removed", "unchanged"
        text: The text of the run
    """

    def __init__(self, status: str, text: str):
        if status not in (ADDED, REMOVED, UNCHANGED):
            raise ValueError(f"Unknown segment status: {status}")
        self.status = status
        self.text = text

    def __repr__(self) -> str:
        return f"DiffSegment({self.status}: {self.text!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DiffSegment):
            return NotImplemented
        return self.status == other.status and self.text == other.text

    @property
    def added(self) -> bool:
        return self.status == ADDED

    @property
    def removed(self) -> bool:
        return self.status == REMOVED

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary representation."""
        return {"status": self.status, "text": self.text}


def _append(segments: List[DiffSegment], status: str, text: str) -> None:
    if not text:
        return
    if segments and segments[-1].status == status:
        segments[-1].text += text
    else:
        segments.append(DiffSegment(status, text))


def _diff_sequences(
    old: Sequence[str],
    new: Sequence[str],
    segments: Optional[List[DiffSegment]] = None,
) -> List[DiffSegment]:
    if segments is None:
        segments = []
    matcher = SequenceMatcher(None, old, new, autojunk=False)

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            _append(segments, UNCHANGED, "".join(old[i1:i2]))
        else:
            # Removed text always precedes its replacement
            _append(segments, REMOVED, "".join(old[i1:i2]))
            _append(segments, ADDED, "".join(new[j1:j2]))

    return segments


def diff_lines(old: str, new: str) -> List[DiffSegment]:
    """Diff two texts line by line.

    Lines keep their terminators, so a line that only gained or lost its
    trailing newline counts as changed.
    """
    return _diff_sequences(old.splitlines(keepends=True), new.splitlines(keepends=True))


def diff_chars(old: str, new: str) -> List[DiffSegment]:
    """Diff two texts character by character.

    Lines are matched first. Only blocks of lines that were replaced are
    compared character by character, so the cost follows the size of the
    edit rather than the size of the file. A replaced block larger than
    CHAR_DIFF_LIMIT (product of both sides' lengths) is reported as removed
    then added without a finer comparison.
    """
    old_lines = old.splitlines(keepends=True)
    new_lines = new.splitlines(keepends=True)
    matcher = SequenceMatcher(None, old_lines, new_lines, autojunk=False)
    segments: List[DiffSegment] = []

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        old_block = "".join(old_lines[i1:i2])
        new_block = "".join(new_lines[j1:j2])

        if tag == "equal":
            _append(segments, UNCHANGED, old_block)
        elif tag == "replace" and len(old_block) * len(new_block) <= CHAR_DIFF_LIMIT:
            _diff_sequences(list(old_block), list(new_block), segments)
        else:
            _append(segments, REMOVED, old_block)
            _append(segments, ADDED, new_block)

    return segments


def reconstruct(segments: Sequence[DiffSegment], side: str) -> str:
    """Rebuild one side of a diff from its segments.

    Args:
        segments: Output of diff_lines or diff_chars
        side: "old" (unchanged + removed) or "new" (unchanged + added)
    """
    if side == OLD:
        keep = (UNCHANGED, REMOVED)
    elif side == NEW:
        keep = (UNCHANGED, ADDED)
    else:
        raise ValueError(f"side must be '{OLD}' or '{NEW}', got {side!r}")

    return "".join(segment.text for segment in segments if segment.status in keep)


def summarize(segments: Sequence[DiffSegment]) -> Dict[str, int]:
    """Count lines by status.

    Returns:
        Dictionary with "added", "removed" and "unchanged" line counts
    """
    counts = {ADDED: 0, REMOVED: 0, UNCHANGED: 0}
    for segment in segments:
        counts[segment.status] += len(segment.text.splitlines())
    return counts

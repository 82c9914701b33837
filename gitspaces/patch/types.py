"""Types for unified diff patch representation.

DiffHunk and PatchFile mirror the text of a unified diff. RawHunk is the
line-addressed region derived from a DiffHunk that the reconciler tracks.
"""

from dataclasses import dataclass, field
from typing import Protocol

from gitspaces.core.types import ChangeStatus


@dataclass
class DiffHunk:
    """A single hunk in a unified diff.

    Attributes:
        old_start: Line number in original file (1-indexed)
        old_count: Number of lines from original (context + removed)
        new_start: Line number in new file (1-indexed)
        new_count: Number of lines in new version (context + added)
        lines: List of (prefix, content) tuples where prefix is:
            ' ' = context line (unchanged)
            '-' = line removed from original
            '+' = line added in new version
        context: Optional function/class context from @@ line
        old_missing_newline: Original side ends without a trailing newline
        new_missing_newline: New side ends without a trailing newline
    """

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: list[tuple[str, str]] = field(default_factory=list)
    context: str = ""
    old_missing_newline: bool = False
    new_missing_newline: bool = False

    def count_removals(self) -> int:
        """Count lines being removed (- prefix)."""
        return sum(1 for prefix, _ in self.lines if prefix == "-")

    def count_additions(self) -> int:
        """Count lines being added (+ prefix)."""
        return sum(1 for prefix, _ in self.lines if prefix == "+")

    def count_context(self) -> int:
        """Count context lines (space prefix)."""
        return sum(1 for prefix, _ in self.lines if prefix == " ")

    def compute_counts(self) -> tuple[int, int]:
        """Compute actual (old_count, new_count) from line prefixes."""
        context = self.count_context()
        return (context + self.count_removals(), context + self.count_additions())


@dataclass
class PatchFile:
    """A patch for a single file.

    Attributes:
        old_path: Path to original file (from --- line, without a/ prefix)
        new_path: Path to new file (from +++ line, without b/ prefix)
        hunks: List of DiffHunk objects representing changes
        is_new_file: True if this is a new file (old_path is /dev/null)
        is_deleted: True if file is being deleted (new_path is /dev/null)
    """

    old_path: str
    new_path: str
    hunks: list[DiffHunk] = field(default_factory=list)
    is_new_file: bool = False
    is_deleted: bool = False

    @property
    def path(self) -> str:
        """Effective file path (new_path for edits/creates, old_path for deletes)."""
        if self.is_deleted:
            return self.old_path
        return self.new_path


@dataclass(frozen=True)
class RawHunk:
    """A parsed change region of one file, before identity is assigned.

    Attributes:
        file_path: Absolute path of the owning file
        start_line: First line of the region in the working-tree file (1-indexed)
        end_line: Line counter after the region's last post-change line
        content: Post-change text of the region (context + added lines)
        original_content: Pre-change text of the region (context + removed lines)
        missing_newline: The post-change side ends at EOF without a final newline
        original_missing_newline: The pre-change side ends at EOF without a
            final newline
    """

    file_path: str
    start_line: int
    end_line: int
    content: str
    original_content: str
    missing_newline: bool = False
    original_missing_newline: bool = False


class PatchableHunk(Protocol):
    """Anything the synthesizer can turn into a patch hunk."""

    file_path: str
    start_line: int
    content: str
    original_content: str
    status: ChangeStatus
    whole_file: bool
    missing_newline: bool
    original_missing_newline: bool

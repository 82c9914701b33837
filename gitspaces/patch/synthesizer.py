"""Synthesizer for unified diff patches.

Turns tracked hunks back into patch text that `git apply` accepts. Each
input hunk becomes exactly one patch hunk; hunks are never merged or
renumbered, so callers pass each file's hunks in ascending start_line order.
"""

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from gitspaces.core.types import ChangeStatus
from gitspaces.patch.parser import DEV_NULL, NO_NEWLINE_MARKER
from gitspaces.patch.types import PatchableHunk

DEFAULT_FILE_MODE = "100644"


@dataclass(frozen=True)
class _Side:
    """One side (pre- or post-change) of a hunk ready for emission."""

    lines: list[str]
    missing_newline: bool = False

    @property
    def count(self) -> int:
        return len(self.lines)


def _region_side(text: str, missing_newline: bool = False) -> _Side:
    """Lines of a parsed region ("\\n"-joined, "" is zero lines)."""
    if not text:
        return _Side([])
    return _Side(text.split("\n"), missing_newline=missing_newline)


def _file_side(text: str) -> _Side:
    """Lines of whole-file text, tracking a missing final newline."""
    if not text:
        return _Side([])
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
        return _Side(lines)
    return _Side(lines, missing_newline=True)


def _relative(file_path: str, root: str | Path | None) -> str:
    """Repository-relative, forward-slash path for patch headers."""
    if root is not None and os.path.isabs(file_path):
        file_path = os.path.relpath(file_path, root)
    return file_path.replace(os.sep, "/")


def _lifecycle(hunk: PatchableHunk, reverse: bool) -> tuple[bool, bool]:
    """Whether applying the hunk creates or deletes its file.

    Returns:
        (creates_file, deletes_file)
    """
    if not hunk.whole_file:
        return False, False
    if hunk.status == ChangeStatus.ADDED:
        return (not reverse, reverse)
    if hunk.status == ChangeStatus.DELETED:
        return (reverse, not reverse)
    return False, False


def _emit_side(out: list[str], prefix: str, side: _Side) -> None:
    for line in side.lines:
        out.append(f"{prefix}{line}\n")
    if side.missing_newline and side.lines:
        out.append(f"{NO_NEWLINE_MARKER}\n")


def _emit_hunk(out: list[str], hunk: PatchableHunk, reverse: bool) -> None:
    before_text, after_text = hunk.original_content, hunk.content
    before_eof, after_eof = hunk.original_missing_newline, hunk.missing_newline
    if reverse:
        before_text, after_text = after_text, before_text
        before_eof, after_eof = after_eof, before_eof

    if hunk.whole_file:
        before = _file_side(before_text)
        after = _file_side(after_text)
    else:
        before = _region_side(before_text, before_eof)
        after = _region_side(after_text, after_eof)

    # An empty side of a file creation/deletion starts at 0
    old_start = hunk.start_line if before.count else 0
    new_start = hunk.start_line if after.count else 0
    if not hunk.whole_file:
        old_start = new_start = hunk.start_line

    out.append(f"@@ -{old_start},{before.count} +{new_start},{after.count} @@\n")
    _emit_side(out, "-", before)
    _emit_side(out, "+", after)


def _group_by_file(hunks: Iterable[PatchableHunk]) -> dict[str, list[PatchableHunk]]:
    """Group hunks per file, keeping first-seen file order."""
    by_file: dict[str, list[PatchableHunk]] = {}
    for hunk in hunks:
        by_file.setdefault(hunk.file_path, []).append(hunk)
    return by_file


def synthesize_patch(
    hunks: Iterable[PatchableHunk],
    reverse: bool = False,
    root: str | Path | None = None,
) -> str:
    """Synthesize patch text for a set of hunks.

    Each file block starts with the standard header (diff --git, ---, +++),
    plus a mode line when the patch creates or deletes the file, followed
    by one hunk block per input hunk. Old/new counts are recomputed from
    the line counts of original_content and content.

    Args:
        hunks: Hunks to emit, ascending start_line within each file.
        reverse: Swap content and original_content, producing a patch that
            undoes the forward change.
        root: Repository root; absolute file paths are made relative to it.

    Returns:
        Patch text, or "" when there are no hunks.

    Example:
        >>> from types import SimpleNamespace
        >>> h = SimpleNamespace(file_path="/r/a.txt", start_line=3, content="new",
        ...                     original_content="old", status=ChangeStatus.MODIFIED,
        ...                     whole_file=False, missing_newline=False,
        ...                     original_missing_newline=False)
        >>> print(synthesize_patch([h], root="/r"), end="")
        diff --git a/a.txt b/a.txt
        --- a/a.txt
        +++ b/a.txt
        @@ -3,1 +3,1 @@
        -old
        +new
    """
    out: list[str] = []

    for file_path, file_hunks in _group_by_file(hunks).items():
        rel = _relative(file_path, root)
        creates = any(_lifecycle(h, reverse)[0] for h in file_hunks)
        deletes = any(_lifecycle(h, reverse)[1] for h in file_hunks)

        out.append(f"diff --git a/{rel} b/{rel}\n")
        if creates:
            out.append(f"new file mode {DEFAULT_FILE_MODE}\n")
        elif deletes:
            out.append(f"deleted file mode {DEFAULT_FILE_MODE}\n")
        out.append(f"--- {DEV_NULL if creates else 'a/' + rel}\n")
        out.append(f"+++ {DEV_NULL if deletes else 'b/' + rel}\n")

        for hunk in file_hunks:
            _emit_hunk(out, hunk, reverse)

    return "".join(out)

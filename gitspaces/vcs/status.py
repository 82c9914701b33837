"""Parsing of `git status --porcelain=v1 -z` output."""

from __future__ import annotations

import os

from gitspaces.core.types import ChangeStatus

# Index/worktree letters that mark an unmerged path
_UNMERGED = frozenset({"DD", "AU", "UD", "UA", "DU", "AA", "UU"})


def classify(x: str, y: str) -> ChangeStatus | None:
    """Map a porcelain XY pair to a ChangeStatus.

    Args:
        x: Index status letter.
        y: Working-tree status letter.

    Returns:
        The file's status, or None for ignored/clean entries.
    """
    if x == "?" and y == "?":
        return ChangeStatus.ADDED
    if x == "!":
        return None
    if x + y in _UNMERGED:
        return ChangeStatus.MODIFIED
    if y == "D":
        return ChangeStatus.DELETED
    if y in "MT":
        return ChangeStatus.MODIFIED
    if y == " " and x in "MADRCT":
        return ChangeStatus.STAGED
    return None


def parse_porcelain(output: str, root: str) -> dict[str, ChangeStatus]:
    """Parse NUL-separated porcelain v1 output.

    Rename and copy entries carry a second NUL-terminated field with the
    source path; only the destination is reported.

    Args:
        output: Raw stdout of `git status --porcelain=v1 -z`.
        root: Repository root the paths are relative to.

    Returns:
        Changed files keyed by absolute, normalized path, in git's order.
    """
    result: dict[str, ChangeStatus] = {}
    entries = output.split("\0")
    idx = 0

    while idx < len(entries):
        entry = entries[idx]
        idx += 1
        if len(entry) < 4:
            continue

        x, y, path = entry[0], entry[1], entry[3:]
        if x in "RC":
            # Skip the source path of a rename/copy
            idx += 1

        status = classify(x, y)
        if status is None:
            continue

        result[os.path.normpath(os.path.join(root, path))] = status

    return result

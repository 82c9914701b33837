"""Hunk reconciler: carries hunk identity across rescans.

Each rescan derives every changed file's regions afresh and matches them
against the hunks already tracked for that file, so ids and group
assignments survive while content and line ranges follow the working tree.

Matching rules per file status:
    added     one whole-file hunk; an existing whole-file hunk keeps its id
              and group with content refreshed
    deleted   one whole-file hunk whose original text comes from the diff
    staged    nothing new; previously tracked hunks are kept as they are
    modified  regions keyed by (file_path, start_line); matches keep id and
              group, the rest are new and unassigned, stale ones are dropped

Shelved hunks (taken out of the tree by a group switch) are carried through
untouched, since the working tree no longer shows them.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable

from gitspaces.core.errors import SpacesError
from gitspaces.core.interfaces import VcsBackend
from gitspaces.core.types import ChangeStatus
from gitspaces.core.utils import new_id
from gitspaces.patch.parser import parse_hunks, removed_text
from gitspaces.patch.types import RawHunk
from gitspaces.spaces.types import Hunk

logger = logging.getLogger(__name__)


def file_line_count(text: str) -> int:
    """Number of lines in whole-file text (a final newline ends the last line)."""
    if not text:
        return 0
    return text.count("\n") + (0 if text.endswith("\n") else 1)


class HunkReconciler:
    """Turns `git status` + per-file diffs into the next hunk table."""

    def __init__(self, vcs: VcsBackend, deleted_placeholder: str) -> None:
        self._vcs = vcs
        self._deleted_placeholder = deleted_placeholder

    async def reconcile(
        self,
        changed: dict[str, ChangeStatus],
        tracked: Iterable[Hunk],
    ) -> list[Hunk]:
        """Compute the full hunk table after a rescan.

        Live hunks of files missing from `changed` are dropped. A file whose
        reconciliation fails keeps its previous hunks and the error is
        logged; the rest of the rescan carries on.

        Args:
            changed: Changed files keyed by absolute path.
            tracked: Every currently tracked hunk.

        Returns:
            The reconciled hunks, shelved ones included.
        """
        live_by_file: dict[str, list[Hunk]] = defaultdict(list)
        result: list[Hunk] = []
        for hunk in tracked:
            if hunk.shelved:
                result.append(hunk)
            else:
                live_by_file[hunk.file_path].append(hunk)

        for file_path, status in changed.items():
            existing = live_by_file.get(file_path, [])
            try:
                result.extend(await self.reconcile_file(file_path, status, existing))
            except (SpacesError, ValueError, UnicodeError) as e:
                logger.warning("Could not reconcile %s, keeping previous hunks: %s", file_path, e)
                result.extend(existing)

        dropped = [p for p in live_by_file if p not in changed]
        if dropped:
            logger.debug("Dropping hunks of %d files no longer changed", len(dropped))

        return result

    async def reconcile_file(
        self,
        file_path: str,
        status: ChangeStatus,
        existing: list[Hunk],
    ) -> list[Hunk]:
        """Reconcile one changed file against its live tracked hunks."""
        if status == ChangeStatus.STAGED:
            return list(existing)

        if status == ChangeStatus.ADDED:
            text = await self._vcs.read_file(file_path)
            return [self._whole_file(file_path, status, text, "", existing)]

        diff_text = await self._vcs.diff(file_path, status)

        if status == ChangeStatus.DELETED:
            original = removed_text(diff_text)
            if original is None:
                logger.debug("No prior content recoverable for %s", file_path)
                original = self._deleted_placeholder
            return [self._whole_file(file_path, status, "", original, existing)]

        regions = parse_hunks(diff_text, file_path)
        if not regions:
            # Mode-only change or similar: track the file as a whole
            text = await self._vcs.read_file(file_path)
            return [self._whole_file(file_path, status, text, text, existing)]

        return self._match_regions(regions, status, existing)

    def _whole_file(
        self,
        file_path: str,
        status: ChangeStatus,
        content: str,
        original: str,
        existing: list[Hunk],
    ) -> Hunk:
        end_line = 1 + file_line_count(content)
        for hunk in existing:
            if hunk.whole_file and hunk.status == status:
                # Content is refreshed so an unapply patch matches the tree
                if hunk.content != content or hunk.original_content != original:
                    hunk.content = content
                    hunk.original_content = original
                    hunk.touch()
                hunk.start_line = 1
                hunk.end_line = end_line
                return hunk

        return Hunk(
            id=new_id(),
            file_path=file_path,
            start_line=1,
            end_line=end_line,
            content=content,
            original_content=original,
            status=status,
            whole_file=True,
        )

    def _match_regions(
        self,
        regions: list[RawHunk],
        status: ChangeStatus,
        existing: list[Hunk],
    ) -> list[Hunk]:
        by_start = {h.start_line: h for h in existing if not h.whole_file}
        reconciled: list[Hunk] = []

        for region in regions:
            hunk = by_start.pop(region.start_line, None)
            if hunk is None:
                reconciled.append(
                    Hunk(
                        id=new_id(),
                        file_path=region.file_path,
                        start_line=region.start_line,
                        end_line=region.end_line,
                        content=region.content,
                        original_content=region.original_content,
                        status=status,
                        missing_newline=region.missing_newline,
                        original_missing_newline=region.original_missing_newline,
                    )
                )
                continue

            if (
                hunk.content != region.content
                or hunk.original_content != region.original_content
                or hunk.end_line != region.end_line
                or hunk.status != status
                or hunk.missing_newline != region.missing_newline
                or hunk.original_missing_newline != region.original_missing_newline
            ):
                hunk.content = region.content
                hunk.original_content = region.original_content
                hunk.end_line = region.end_line
                hunk.status = status
                hunk.missing_newline = region.missing_newline
                hunk.original_missing_newline = region.original_missing_newline
                hunk.touch()
            reconciled.append(hunk)

        return reconciled

"""Change registry: the authoritative table of tracked hunks.

Hunks live in an arena keyed by id with per-file and per-group indices.
Every mutating operation updates memory, rewrites the hunk document and
then publishes exactly one event on the "hunks" topic.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from gitspaces.core.errors import InvariantViolation, NotFoundError
from gitspaces.spaces.events import HUNKS_TOPIC, EventHub
from gitspaces.spaces.storage import SpacesStorage
from gitspaces.spaces.types import Hunk

logger = logging.getLogger(__name__)

# Working-tree side effect run before a hunk is forgotten
Revert = Callable[[Hunk], Awaitable[None]]


def _ordered(hunks: Iterable[Hunk]) -> list[Hunk]:
    return sorted(hunks, key=lambda h: (h.file_path, h.start_line))


class ChangeRegistry:
    """In-memory hunk table backed by SpacesStorage."""

    def __init__(
        self,
        storage: SpacesStorage,
        events: EventHub,
        hunks: Iterable[Hunk] = (),
    ) -> None:
        self._storage = storage
        self._events = events
        self._hunks: dict[str, Hunk] = {}
        self._by_file: dict[str, set[str]] = defaultdict(set)
        self._by_group: dict[str | None, set[str]] = defaultdict(set)
        for hunk in hunks:
            self._index(hunk)

    # --- Index maintenance ---

    def _index(self, hunk: Hunk) -> None:
        self._hunks[hunk.id] = hunk
        self._by_file[hunk.file_path].add(hunk.id)
        self._by_group[hunk.group_id].add(hunk.id)

    def _unindex(self, hunk: Hunk) -> None:
        self._hunks.pop(hunk.id, None)
        for index, key in ((self._by_file, hunk.file_path), (self._by_group, hunk.group_id)):
            ids = index.get(key)
            if ids is None:
                continue
            ids.discard(hunk.id)
            if not ids:
                del index[key]

    def _move(self, hunk: Hunk, group_id: str | None) -> None:
        self._unindex(hunk)
        hunk.group_id = group_id
        hunk.touch()
        self._index(hunk)

    async def _commit(self, event: dict[str, Any]) -> None:
        """Persist the table, then notify."""
        await asyncio.to_thread(self._storage.save_hunks, self.all())
        await self._events.publish(HUNKS_TOPIC, event)

    # --- Queries ---

    def __len__(self) -> int:
        return len(self._hunks)

    def __contains__(self, hunk_id: object) -> bool:
        return hunk_id in self._hunks

    def get(self, hunk_id: str) -> Hunk:
        """Return a hunk by id.

        Raises:
            NotFoundError: If no hunk has this id.
        """
        hunk = self._hunks.get(hunk_id)
        if hunk is None:
            raise NotFoundError("hunk", hunk_id)
        return hunk

    def resolve(self, ref: str) -> Hunk:
        """Return a hunk by id or unique id prefix.

        Raises:
            NotFoundError: If nothing matches.
            InvariantViolation: If the prefix is ambiguous.
        """
        if ref in self._hunks:
            return self._hunks[ref]
        matches = [h for hid, h in self._hunks.items() if hid.startswith(ref)] if ref else []
        if not matches:
            raise NotFoundError("hunk", ref)
        if len(matches) > 1:
            raise InvariantViolation(
                f"Hunk id prefix {ref!r} is ambiguous ({len(matches)} matches)"
            )
        return matches[0]

    def all(self) -> list[Hunk]:
        """Every hunk, ordered by file then start line."""
        return _ordered(self._hunks.values())

    def by_file(self, file_path: str) -> list[Hunk]:
        return _ordered(self._hunks[i] for i in self._by_file.get(file_path, ()))

    def by_group(self, group_id: str | None) -> list[Hunk]:
        """Hunks owned by a group; None selects the unassigned hunks."""
        return _ordered(self._hunks[i] for i in self._by_group.get(group_id, ()))

    def unassigned(self) -> list[Hunk]:
        return self.by_group(None)

    def count_for_group(self, group_id: str | None) -> int:
        return len(self._by_group.get(group_id, ()))

    def files(self) -> list[str]:
        return sorted(self._by_file)

    # --- Mutations ---

    async def assign(self, hunk_id: str, group_id: str | None) -> Hunk:
        """Move one hunk into a group (None = unassigned)."""
        hunk = self.get(hunk_id)
        previous = hunk.group_id
        self._move(hunk, group_id)
        logger.debug("Assigned hunk %s: %s -> %s", hunk.id, previous, group_id)
        await self._commit(
            {"type": "assign", "hunk_id": hunk.id, "from": previous, "to": group_id}
        )
        return hunk

    async def bulk_reassign(self, from_group: str | None, to_group: str | None) -> int:
        """Move every hunk of one group into another.

        Returns:
            Number of hunks moved.
        """
        moved = self.by_group(from_group)
        if from_group == to_group:
            return 0
        for hunk in moved:
            self._move(hunk, to_group)
        logger.debug("Reassigned %d hunks: %s -> %s", len(moved), from_group, to_group)
        await self._commit(
            {"type": "bulk_reassign", "from": from_group, "to": to_group, "count": len(moved)}
        )
        return len(moved)

    async def delete_for_group(self, group_id: str) -> int:
        """Forget every hunk a group owns, without touching the working tree."""
        doomed = self.by_group(group_id)
        for hunk in doomed:
            self._unindex(hunk)
        await self._commit(
            {"type": "delete_group_hunks", "group_id": group_id, "count": len(doomed)}
        )
        return len(doomed)

    async def remove(self, hunk_id: str, revert: Revert | None = None) -> Hunk:
        """Remove one hunk, optionally reverting it in the working tree first.

        The hunk is only forgotten once revert has succeeded; if revert
        raises, the registry is left untouched.
        """
        hunk = self.get(hunk_id)
        if revert is not None:
            await revert(hunk)
        self._unindex(hunk)
        await self._commit(
            {
                "type": "remove",
                "hunk_id": hunk.id,
                "file_path": hunk.file_path,
                "discarded": revert is not None,
            }
        )
        return hunk

    async def set_shelved(self, hunk_ids: Iterable[str], shelved: bool) -> int:
        """Flag hunks as removed from (or restored to) the working tree.

        The flags are restored if the table cannot be saved.
        """
        hunks = [self.get(i) for i in hunk_ids]
        previous = [(h.shelved, h.timestamp) for h in hunks]
        for hunk in hunks:
            hunk.shelved = shelved
            hunk.touch()
        try:
            await asyncio.to_thread(self._storage.save_hunks, self.all())
        except BaseException:
            for hunk, (was_shelved, timestamp) in zip(hunks, previous):
                hunk.shelved = was_shelved
                hunk.timestamp = timestamp
            raise
        await self._events.publish(
            HUNKS_TOPIC,
            {"type": "shelve" if shelved else "unshelve", "hunk_ids": [h.id for h in hunks]},
        )
        return len(hunks)

    async def replace_all(self, hunks: Iterable[Hunk], reason: str = "rescan") -> None:
        """Replace the whole table, as a rescan does."""
        self._hunks.clear()
        self._by_file.clear()
        self._by_group.clear()
        for hunk in hunks:
            self._index(hunk)
        await self._commit({"type": reason, "count": len(self._hunks), "files": len(self._by_file)})

"""Group registry: the authoritative table of spaces.

Holds group metadata, branch linkage and the active group id. The
"Unassigned" pseudo-group is synthesized on read and never stored.
Branch creation in git is the caller's job; the registry only records the
linkage and enforces that a branch is claimed by at most one group.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from gitspaces.core.constants import UNASSIGNED_GROUP_ID
from gitspaces.core.errors import InvariantViolation, NotFoundError
from gitspaces.core.types import GroupType
from gitspaces.core.utils import new_id
from gitspaces.spaces.events import GROUPS_TOPIC, EventHub
from gitspaces.spaces.storage import SpacesStorage
from gitspaces.spaces.types import Group, unassigned_group

logger = logging.getLogger(__name__)


def _clean_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise InvariantViolation("Group name cannot be empty")
    return name


class GroupRegistry:
    """In-memory group table backed by SpacesStorage."""

    def __init__(
        self,
        storage: SpacesStorage,
        events: EventHub,
        groups: Iterable[Group] = (),
        active_id: str | None = None,
    ) -> None:
        self._storage = storage
        self._events = events
        self._groups: dict[str, Group] = {g.id: g for g in groups}
        self._active_id = active_id if active_id in self._groups else None

    async def _commit(self, event: dict[str, Any]) -> None:
        """Persist the table, then notify."""
        await asyncio.to_thread(self._storage.save_groups, self.all(), self._active_id)
        await self._events.publish(GROUPS_TOPIC, event)

    def _stored(self, group_id: str) -> Group:
        """Return a persisted group, rejecting the pseudo-group."""
        if group_id == UNASSIGNED_GROUP_ID:
            raise InvariantViolation("The Unassigned group cannot be modified")
        group = self._groups.get(group_id)
        if group is None:
            raise NotFoundError("group", group_id)
        return group

    def _with_active(self, group: Group) -> Group:
        group.is_active = group.id == self._active_id
        return group

    # --- Queries ---

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, group_id: object) -> bool:
        return group_id in self._groups

    @property
    def active_id(self) -> str | None:
        return self._active_id

    @property
    def active(self) -> Group | None:
        if self._active_id is None:
            return None
        return self._with_active(self._groups[self._active_id])

    def get(self, group_id: str) -> Group:
        """Return a group by id; the unassigned id yields the pseudo-group.

        Raises:
            NotFoundError: If no group has this id.
        """
        if group_id == UNASSIGNED_GROUP_ID:
            return unassigned_group()
        group = self._groups.get(group_id)
        if group is None:
            raise NotFoundError("group", group_id)
        return self._with_active(group)

    def resolve(self, ref: str) -> Group:
        """Return a group by id or unique name.

        Raises:
            NotFoundError: If nothing matches.
            InvariantViolation: If several groups share the name.
        """
        if ref == UNASSIGNED_GROUP_ID or ref in self._groups:
            return self.get(ref)
        matches = [g for g in self._groups.values() if g.name == ref]
        if not matches:
            raise NotFoundError("group", ref)
        if len(matches) > 1:
            raise InvariantViolation(f"Group name {ref!r} is ambiguous, use the group id")
        return self._with_active(matches[0])

    def all(self, include_unassigned: bool = False) -> list[Group]:
        """Groups in creation order, optionally led by the pseudo-group."""
        groups = sorted(self._groups.values(), key=lambda g: g.created_at)
        result = [self._with_active(g) for g in groups]
        if include_unassigned:
            result.insert(0, unassigned_group())
        return result

    def find_by_branch(self, branch_name: str) -> Group | None:
        for group in self._groups.values():
            if group.branch_name == branch_name:
                return self._with_active(group)
        return None

    def ensure_branch_available(self, branch_name: str, exclude_id: str | None = None) -> None:
        """Reject a branch already claimed by another group."""
        if not branch_name.strip():
            raise InvariantViolation("Branch name cannot be empty")
        owner = self.find_by_branch(branch_name)
        if owner is not None and owner.id != exclude_id:
            raise InvariantViolation(
                f"Branch {branch_name!r} is already linked to group {owner.name!r}"
            )

    # --- Mutations ---

    async def ensure_default(self, name: str, goal: str) -> Group | None:
        """Create and activate the default group if no groups exist.

        Returns:
            The created group, or None when groups already exist. An active
            id pointing nowhere is repaired to the first group.
        """
        if self._groups:
            if self._active_id is None:
                self._active_id = self.all()[0].id
                await self._commit({"type": "activate", "group_id": self._active_id})
            return None

        group = Group(id=new_id(), name=name, goal=goal)
        self._groups[group.id] = group
        self._active_id = group.id
        logger.info("Created default group %r", name)
        await self._commit({"type": "create", "group_id": group.id, "default": True})
        return self._with_active(group)

    async def create(
        self,
        name: str,
        goal: str | None = None,
        branch_name: str | None = None,
    ) -> Group:
        """Create a group; a branch name makes it a branch group named after the branch."""
        if branch_name is not None:
            self.ensure_branch_available(branch_name)
            name = branch_name
            group_type = GroupType.BRANCH
        else:
            group_type = GroupType.TEMPORARY
        name = _clean_name(name)

        group = Group(
            id=new_id(),
            name=name,
            goal=goal.strip() if goal and goal.strip() else name,
            type=group_type,
            branch_name=branch_name,
        )
        self._groups[group.id] = group
        logger.info("Created %s group %r (%s)", group_type.value, name, group.id)
        await self._commit({"type": "create", "group_id": group.id})
        return self._with_active(group)

    async def rename(self, group_id: str, name: str) -> Group:
        """Rename a temporary group. Branch groups are named by their branch."""
        group = self._stored(group_id)
        if group.is_branch:
            raise InvariantViolation(
                f"Group {group.name!r} is linked to branch {group.branch_name!r}; "
                "retype it to temporary before renaming"
            )
        group.name = _clean_name(name)
        group.touch()
        await self._commit({"type": "rename", "group_id": group.id, "name": group.name})
        return self._with_active(group)

    async def update_goal(self, group_id: str, goal: str) -> Group:
        group = self._stored(group_id)
        group.goal = goal.strip() or group.name
        group.touch()
        await self._commit({"type": "update_goal", "group_id": group.id})
        return self._with_active(group)

    async def retype(self, group_id: str, branch_name: str | None) -> Group:
        """Link a group to a branch, or unlink it when branch_name is None."""
        group = self._stored(group_id)
        if branch_name is None:
            group.type = GroupType.TEMPORARY
            group.branch_name = None
        else:
            self.ensure_branch_available(branch_name, exclude_id=group.id)
            group.type = GroupType.BRANCH
            group.branch_name = branch_name
            group.name = branch_name
        group.touch()
        await self._commit(
            {"type": "retype", "group_id": group.id, "group_type": group.type.value}
        )
        return self._with_active(group)

    async def set_active(self, group_id: str) -> Group:
        group = self._stored(group_id)
        previous = self._active_id
        self._active_id = group.id
        try:
            await asyncio.to_thread(self._storage.save_groups, self.all(), self._active_id)
        except BaseException:
            self._active_id = previous
            raise
        await self._events.publish(GROUPS_TOPIC, {"type": "activate", "group_id": group.id})
        return self._with_active(group)

    async def delete(self, group_id: str, default_name: str, default_goal: str) -> Group:
        """Delete a group record.

        Ownership of hunks is checked by the caller. Deleting the active group
        activates the first remaining group; deleting the last group
        recreates the default one.
        """
        group = self._stored(group_id)
        del self._groups[group.id]

        recreated: Group | None = None
        if not self._groups:
            recreated = Group(id=new_id(), name=default_name, goal=default_goal)
            self._groups[recreated.id] = recreated
            logger.info("Last group deleted, recreated default group %r", default_name)

        if self._active_id == group.id or self._active_id not in self._groups:
            self._active_id = self.all()[0].id

        group.is_active = False
        await self._commit(
            {
                "type": "delete",
                "group_id": group.id,
                "active_group_id": self._active_id,
                "recreated_default": recreated.id if recreated else None,
            }
        )
        return group

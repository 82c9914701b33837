"""Workspace: the entry point presentation layers talk to.

Wires the registries, reconciler and switch coordinator to one repository
and exposes every workflow (rescan, group management, hunk assignment,
discard, stage, commit). A single asyncio.Lock serializes all mutating
workflows, so at most one is in flight at a time; queries never wait.

Example:
    ws = await Workspace.open(Path.cwd())
    await ws.rescan()
    group = await ws.create_group("Refactor", assign_unassigned=True)
    await ws.switch_group(group.id)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from gitspaces.config.loader import load_config
from gitspaces.config.schema import Config
from gitspaces.core.constants import UNASSIGNED_GROUP_ID
from gitspaces.core.errors import ExternalToolFailure, InvariantViolation, NotARepositoryError
from gitspaces.core.interfaces import VcsBackend
from gitspaces.spaces.changes import ChangeRegistry
from gitspaces.spaces.coordinator import SwitchCoordinator, SwitchResult, revert_hunk
from gitspaces.spaces.events import EventHub
from gitspaces.spaces.groups import GroupRegistry
from gitspaces.spaces.reconciler import HunkReconciler
from gitspaces.spaces.storage import SpacesStorage
from gitspaces.spaces.tree import GroupNode, build_tree
from gitspaces.spaces.types import Disposition, Group, Hunk
from gitspaces.vcs.git import GitRepository

logger = logging.getLogger(__name__)


@dataclass
class RescanResult:
    """Summary of one rescan."""

    files: int
    hunks: int
    created: int
    dropped: int


def storage_dir(config: Config, root: Path) -> Path:
    """Resolve the configured storage directory against the repository root."""
    directory = Path(config.storage.directory).expanduser()
    if not directory.is_absolute():
        directory = root / directory
    return directory


class Workspace:
    """All change groups of one working tree."""

    def __init__(
        self,
        vcs: VcsBackend,
        config: Config,
        storage: SpacesStorage,
        changes: ChangeRegistry,
        groups: GroupRegistry,
        events: EventHub,
    ) -> None:
        self.vcs = vcs
        self.config = config
        self.storage = storage
        self.changes = changes
        self.groups = groups
        self.events = events
        self.reconciler = HunkReconciler(vcs, config.spaces.deleted_placeholder)
        self.coordinator = SwitchCoordinator(vcs, changes, groups)
        self._lock = asyncio.Lock()

    @classmethod
    async def open(
        cls,
        root: Path,
        config: Config | None = None,
        vcs: VcsBackend | None = None,
        events: EventHub | None = None,
    ) -> Workspace:
        """Open the workspace of the repository containing root.

        Loads persisted hunks and groups and creates the default group when
        none exist.

        Raises:
            NotARepositoryError: If root is not inside a git work tree.
            ConfigError: If configuration is invalid.
            LoadError: If a storage document is malformed.
        """
        if config is None:
            config = load_config(root=root)

        if vcs is None:
            try:
                vcs = await GitRepository.discover(
                    root,
                    executable=config.git.executable,
                    apply_whitespace=config.git.apply_whitespace,
                )
            except ExternalToolFailure as e:
                raise NotARepositoryError(str(root)) from e

        if not await vcs.is_repository():
            raise NotARepositoryError(str(root))

        storage = SpacesStorage(
            storage_dir(config, vcs.root),
            hunks_file=config.storage.hunks_file,
            groups_file=config.storage.groups_file,
        )
        hunks = await asyncio.to_thread(storage.load_hunks)
        group_list, active_id = await asyncio.to_thread(storage.load_groups)

        events = events or EventHub()
        workspace = cls(
            vcs,
            config,
            storage,
            ChangeRegistry(storage, events, hunks),
            GroupRegistry(storage, events, group_list, active_id),
            events,
        )
        await workspace.groups.ensure_default(
            config.spaces.default_group_name, config.spaces.default_group_goal
        )
        logger.debug(
            "Opened workspace at %s (%d groups, %d hunks)",
            vcs.root,
            len(workspace.groups),
            len(workspace.changes),
        )
        return workspace

    @property
    def root(self) -> Path:
        return self.vcs.root

    # --- Reference resolution ---

    def resolve_group(self, ref: str | None) -> Group:
        """Group by id or unique name; None or "-" is the unassigned pseudo-group."""
        if ref is None or ref == "-":
            return self.groups.get(UNASSIGNED_GROUP_ID)
        return self.groups.resolve(ref)

    def resolve_hunk(self, ref: str) -> Hunk:
        return self.changes.resolve(ref)

    @staticmethod
    def _owner_id(group: Group) -> str | None:
        """Registry key for a group's hunks (None for the pseudo-group)."""
        return None if group.is_unassigned else group.id

    def _real_group(self, ref: str) -> Group:
        group = self.resolve_group(ref)
        if group.is_unassigned:
            raise InvariantViolation("This operation is not available for the Unassigned group")
        return group

    # --- Queries ---

    def list_groups(self, include_unassigned: bool = False) -> list[Group]:
        return self.groups.all(include_unassigned=include_unassigned)

    def list_hunks(self, group_ref: str | None = None) -> list[Hunk]:
        """Hunks of one group, or all hunks when no group is given."""
        if group_ref is None:
            return self.changes.all()
        return self.changes.by_group(self._owner_id(self.resolve_group(group_ref)))

    def unassigned_hunks(self) -> list[Hunk]:
        return self.changes.unassigned()

    def hunks_for_file(self, file_path: str) -> list[Hunk]:
        return self.changes.by_file(file_path)

    def tree(self) -> list[GroupNode]:
        return build_tree(self.groups.all(), self.changes.all(), self.groups.active_id)

    # --- Workflows ---

    async def rescan(self) -> RescanResult:
        """Re-derive every hunk from the working tree and persist the result."""
        async with self._lock:
            changed = await self.vcs.status()
            before = {h.id for h in self.changes.all()}
            hunks = await self.reconciler.reconcile(changed, self.changes.all())
            await self.changes.replace_all(hunks)

            after = {h.id for h in hunks}
            result = RescanResult(
                files=len(changed),
                hunks=len(hunks),
                created=len(after - before),
                dropped=len(before - after),
            )
            logger.info(
                "Rescan: %d changed files, %d hunks (%d new, %d dropped)",
                result.files,
                result.hunks,
                result.created,
                result.dropped,
            )
            return result

    async def create_group(
        self,
        name: str,
        goal: str | None = None,
        branch_name: str | None = None,
        assign_unassigned: bool = False,
    ) -> Group:
        """Create a group, optionally linked to a (possibly new) branch.

        The branch is created at HEAD without being checked out. With
        assign_unassigned every unassigned hunk moves into the new group.
        """
        async with self._lock:
            if branch_name is not None:
                self.groups.ensure_branch_available(branch_name)
                if not await self.vcs.branch_exists(branch_name):
                    await self.vcs.create_branch(branch_name)
            group = await self.groups.create(name, goal=goal, branch_name=branch_name)
            if assign_unassigned:
                await self.changes.bulk_reassign(None, group.id)
            return group

    async def create_and_assign(self, hunk_ref: str, name: str, goal: str | None = None) -> Group:
        """Create a temporary group and move one hunk into it."""
        async with self._lock:
            hunk = self.resolve_hunk(hunk_ref)
            group = await self.groups.create(name, goal=goal)
            await self.changes.assign(hunk.id, group.id)
            return group

    async def switch_group(self, ref: str) -> SwitchResult:
        async with self._lock:
            group = self._real_group(ref)
            return await self.coordinator.switch(group.id)

    async def delete_group(
        self,
        ref: str,
        disposition: Disposition | None = None,
        move_to: str | None = None,
    ) -> Group:
        """Delete a group.

        Args:
            ref: Group id or name.
            disposition: Required when the group owns hunks. DISCARD reverts
                each hunk in the working tree (stopping at the first failure,
                group kept); MOVE reassigns them to move_to.
            move_to: Target group for MOVE; None or "-" means unassigned.

        Raises:
            InvariantViolation: If the group owns hunks and no disposition is
                given, or the move target is the group itself.
        """
        async with self._lock:
            group = self._real_group(ref)
            owned = self.changes.by_group(group.id)

            if owned and disposition is None:
                raise InvariantViolation(
                    f"Group {group.name!r} owns {len(owned)} hunk(s); "
                    "discard them or move them to another group first"
                )

            if owned and disposition == Disposition.MOVE:
                target = self.resolve_group(move_to)
                if target.id == group.id:
                    raise InvariantViolation("Cannot move hunks into the group being deleted")
                await self.changes.bulk_reassign(group.id, self._owner_id(target))
            elif owned and disposition == Disposition.DISCARD:
                for hunk in owned:
                    await self.changes.remove(hunk.id, revert=self._revert)

            spaces = self.config.spaces
            return await self.groups.delete(
                group.id, spaces.default_group_name, spaces.default_group_goal
            )

    async def rename_group(self, ref: str, name: str) -> Group:
        async with self._lock:
            return await self.groups.rename(self._real_group(ref).id, name)

    async def update_goal(self, ref: str, goal: str) -> Group:
        async with self._lock:
            return await self.groups.update_goal(self._real_group(ref).id, goal)

    async def retype_group(self, ref: str, branch_name: str | None) -> Group:
        """Link a group to branch_name (creating the branch if needed), or unlink it.

        Unlinking leaves the git branch alone.
        """
        async with self._lock:
            group = self._real_group(ref)
            if branch_name is not None:
                self.groups.ensure_branch_available(branch_name, exclude_id=group.id)
                if not await self.vcs.branch_exists(branch_name):
                    await self.vcs.create_branch(branch_name)
            return await self.groups.retype(group.id, branch_name)

    async def assign_hunk(self, hunk_ref: str, group_ref: str | None) -> Hunk:
        """Assign a hunk to a group; None or "-" unassigns it."""
        async with self._lock:
            hunk = self.resolve_hunk(hunk_ref)
            group = self.resolve_group(group_ref)
            return await self.changes.assign(hunk.id, self._owner_id(group))

    async def bulk_reassign(self, from_ref: str | None, to_ref: str | None) -> int:
        """Move every hunk of one group to another; either side may be unassigned."""
        async with self._lock:
            source = self.resolve_group(from_ref)
            target = self.resolve_group(to_ref)
            return await self.changes.bulk_reassign(
                self._owner_id(source), self._owner_id(target)
            )

    async def discard_hunk(self, hunk_ref: str) -> Hunk:
        """Revert a hunk in the working tree, then forget it.

        On failure the hunk stays tracked and the error propagates.
        """
        async with self._lock:
            hunk = self.resolve_hunk(hunk_ref)
            return await self.changes.remove(hunk.id, revert=self._revert)

    async def _revert(self, hunk: Hunk) -> None:
        await revert_hunk(self.vcs, hunk)

    def _live_files(self, group: Group) -> list[str]:
        files = {h.file_path for h in self.changes.by_group(group.id) if h.is_live}
        return sorted(files)

    async def stage_group(self, ref: str) -> list[str]:
        """Stage every file holding a live hunk of the group.

        Returns:
            The staged files; empty when the group had nothing to stage.
        """
        async with self._lock:
            group = self._real_group(ref)
            files = self._live_files(group)
            if not files:
                logger.info("Group %r has nothing to stage", group.name)
                return []
            await self.vcs.stage_files(files)
            return files

    async def commit_group(self, ref: str, message: str) -> list[str]:
        """Stage the group's files and commit them.

        Raises:
            InvariantViolation: If the message is empty or the group has no
                live hunks.
        """
        async with self._lock:
            if not message.strip():
                raise InvariantViolation("Commit message cannot be empty")
            group = self._real_group(ref)
            files = self._live_files(group)
            if not files:
                raise InvariantViolation(f"Group {group.name!r} has nothing to commit")
            await self.vcs.stage_files(files)
            await self.vcs.commit(message)
            logger.info("Committed %d file(s) of group %r", len(files), group.name)
            return files

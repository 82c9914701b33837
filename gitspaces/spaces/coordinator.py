"""Group switch coordinator and hunk discard.

A switch moves the working tree from one group to another in three steps:

    Idle -> Unapplying        reverse-apply the active group's live hunks
         -> SwitchingBranch   check out the target's branch (branch groups)
         -> Applying          forward-apply the target's shelved hunks
         -> Idle              mark the target active

A failed unapply aborts with the active group unchanged. A failed checkout
leaves the tree unapplied and the coordinator Failed until the next switch.
A failed forward apply is logged and the switch completes anyway: the last
applied group wins and its hunks stay shelved.
Any other error part way through leaves the coordinator Failed as well.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from gitspaces.core.constants import UNASSIGNED_GROUP_ID
from gitspaces.core.errors import ExternalToolFailure, InvariantViolation
from gitspaces.core.interfaces import VcsBackend
from gitspaces.core.types import ChangeStatus
from gitspaces.patch.synthesizer import synthesize_patch
from gitspaces.spaces.changes import ChangeRegistry
from gitspaces.spaces.groups import GroupRegistry
from gitspaces.spaces.types import Group, Hunk

logger = logging.getLogger(__name__)


class SwitchState(str, Enum):
    IDLE = "idle"
    UNAPPLYING = "unapplying"
    SWITCHING_BRANCH = "switching_branch"
    APPLYING = "applying"
    FAILED = "failed"


@dataclass
class SwitchResult:
    """Outcome of a completed switch.

    Attributes:
        group_id: The group that is now active.
        unapplied: Hunks taken out of the working tree.
        applied: Hunks put back into the working tree.
        apply_error: Message of a forward apply that failed, if any.
    """

    group_id: str
    unapplied: int = 0
    applied: int = 0
    apply_error: str | None = None

    @property
    def clean(self) -> bool:
        return self.apply_error is None


def is_patchable(hunk: Hunk) -> bool:
    """Whether a switch can move this hunk with a patch.

    Whole-file fallback hunks of modified files carry no region diff.
    """
    return not (hunk.whole_file and hunk.status not in (ChangeStatus.ADDED, ChangeStatus.DELETED))


async def revert_hunk(vcs: VcsBackend, hunk: Hunk) -> None:
    """Undo a live hunk in the working tree.

    Added files are deleted, deleted files and whole-file hunks are restored
    from HEAD, regions are reverted with a single-hunk reverse patch. A
    shelved hunk is not in the tree, so there is nothing to do.

    Raises:
        ExternalToolFailure: If the working tree could not be changed.
    """
    if hunk.shelved:
        return
    if hunk.status == ChangeStatus.ADDED:
        await vcs.remove_file(hunk.file_path)
    elif hunk.status == ChangeStatus.DELETED or hunk.whole_file:
        await vcs.restore_file(hunk.file_path)
    else:
        await vcs.apply_patch(synthesize_patch([hunk], reverse=True, root=vcs.root))
    logger.debug("Reverted hunk %s in %s", hunk.id, hunk.file_path)


class SwitchCoordinator:
    """Drives the unapply / checkout / apply sequence of a group switch."""

    def __init__(
        self,
        vcs: VcsBackend,
        changes: ChangeRegistry,
        groups: GroupRegistry,
    ) -> None:
        self._vcs = vcs
        self._changes = changes
        self._groups = groups
        self._state = SwitchState.IDLE

    @property
    def state(self) -> SwitchState:
        return self._state

    def _set_state(self, state: SwitchState) -> None:
        logger.debug("Switch state: %s -> %s", self._state.value, state.value)
        self._state = state

    def _patch(self, hunks: list[Hunk], reverse: bool) -> str:
        return synthesize_patch(hunks, reverse=reverse, root=self._vcs.root)

    async def _reapply(self, hunks: list[Hunk]) -> None:
        """Put unapplied hunks back after their shelving could not be saved."""
        try:
            await self._vcs.apply_patch(self._patch(hunks, reverse=False))
        except ExternalToolFailure as e:
            logger.error("Could not restore %d unapplied hunks: %s", len(hunks), e.message)

    async def switch(self, target_id: str) -> SwitchResult:
        """Make target_id the active group, moving hunks in the working tree.

        Raises:
            InvariantViolation: If a switch is already in flight or the
                target is the unassigned pseudo-group.
            NotFoundError: If the target does not exist.
            ExternalToolFailure: If unapply or checkout fails.
            OSError: If the hunk or group tables cannot be saved.
        """
        if self._state not in (SwitchState.IDLE, SwitchState.FAILED):
            raise InvariantViolation(f"A group switch is already in progress ({self._state.value})")
        if target_id == UNASSIGNED_GROUP_ID:
            raise InvariantViolation("Cannot switch to the Unassigned group")

        target = self._groups.get(target_id)
        current = self._groups.active
        if current is not None and current.id == target.id and self._state == SwitchState.IDLE:
            logger.debug("Group %r is already active", target.name)
            return SwitchResult(group_id=target.id)

        logger.info(
            "Switching group: %s -> %s", current.name if current else None, target.name
        )
        try:
            return await self._run(current, target)
        except BaseException:
            if self._state not in (SwitchState.IDLE, SwitchState.FAILED):
                self._set_state(SwitchState.FAILED)
            raise

    async def _run(self, current: Group | None, target: Group) -> SwitchResult:
        result = SwitchResult(group_id=target.id)

        # Unapply
        self._set_state(SwitchState.UNAPPLYING)
        outgoing: list[Hunk] = []
        if current is not None and current.id != target.id:
            outgoing = [
                h for h in self._changes.by_group(current.id) if h.is_live and is_patchable(h)
            ]
        if outgoing:
            try:
                await self._vcs.apply_patch(self._patch(outgoing, reverse=True))
            except ExternalToolFailure:
                self._set_state(SwitchState.IDLE)
                raise
            try:
                await self._changes.set_shelved([h.id for h in outgoing], True)
            except Exception:
                await self._reapply(outgoing)
                raise
        result.unapplied = len(outgoing)

        # Branch checkout
        self._set_state(SwitchState.SWITCHING_BRANCH)
        if target.is_branch and target.branch_name:
            try:
                await self._vcs.checkout_branch(target.branch_name)
            except ExternalToolFailure:
                self._set_state(SwitchState.FAILED)
                raise

        # Apply
        self._set_state(SwitchState.APPLYING)
        incoming = [h for h in self._changes.by_group(target.id) if h.shelved and is_patchable(h)]
        if incoming:
            try:
                await self._vcs.apply_patch(self._patch(incoming, reverse=False))
            except ExternalToolFailure as e:
                # Last applied wins: the target still becomes active
                logger.warning("Could not re-apply hunks of %r: %s", target.name, e.message)
                result.apply_error = e.message
            else:
                await self._changes.set_shelved([h.id for h in incoming], False)
                result.applied = len(incoming)

        await self._groups.set_active(target.id)
        self._set_state(SwitchState.IDLE)
        return result

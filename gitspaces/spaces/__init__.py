"""Change groups over one working tree.

The Workspace facade is the usual entry point; the registries, reconciler
and switch coordinator are exported for callers that wire them directly.
"""

from gitspaces.spaces.changes import ChangeRegistry
from gitspaces.spaces.coordinator import SwitchCoordinator, SwitchResult, SwitchState, revert_hunk
from gitspaces.spaces.events import GROUPS_TOPIC, HUNKS_TOPIC, EventHub
from gitspaces.spaces.groups import GroupRegistry
from gitspaces.spaces.reconciler import HunkReconciler
from gitspaces.spaces.storage import SpacesStorage
from gitspaces.spaces.tree import FileNode, GroupNode, HunkNode, TreeNode, build_tree
from gitspaces.spaces.types import Disposition, Group, Hunk, unassigned_group
from gitspaces.spaces.workspace import RescanResult, Workspace

__all__ = [
    "ChangeRegistry",
    "Disposition",
    "EventHub",
    "FileNode",
    "GROUPS_TOPIC",
    "Group",
    "GroupNode",
    "GroupRegistry",
    "HUNKS_TOPIC",
    "Hunk",
    "HunkNode",
    "HunkReconciler",
    "RescanResult",
    "SpacesStorage",
    "SwitchCoordinator",
    "SwitchResult",
    "SwitchState",
    "TreeNode",
    "Workspace",
    "build_tree",
    "revert_hunk",
    "unassigned_group",
]

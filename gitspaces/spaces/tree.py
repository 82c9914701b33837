"""Presentation tree: groups containing files containing hunks.

Node kinds are separate classes fixed at construction; consumers dispatch
on the class (or `kind`), never on which fields happen to be set.
"""

from __future__ import annotations

import os
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from gitspaces.core.types import ChangeStatus
from gitspaces.spaces.types import Group, Hunk, unassigned_group


@dataclass(frozen=True)
class HunkNode:
    hunk: Hunk
    kind: Literal["hunk"] = "hunk"

    @property
    def label(self) -> str:
        last = max(self.hunk.start_line, self.hunk.end_line - 1)
        label = f"L{self.hunk.start_line}-{last}"
        if self.hunk.shelved:
            label += " (shelved)"
        return label


@dataclass(frozen=True)
class FileNode:
    file_path: str
    status: ChangeStatus
    children: list[HunkNode] = field(default_factory=list)
    kind: Literal["file"] = "file"

    @property
    def label(self) -> str:
        return os.path.basename(self.file_path)

    @property
    def hunk_count(self) -> int:
        return len(self.children)


@dataclass(frozen=True)
class GroupNode:
    group: Group
    children: list[FileNode] = field(default_factory=list)
    kind: Literal["group"] = "group"

    @property
    def label(self) -> str:
        return self.group.name

    @property
    def hunk_count(self) -> int:
        return sum(f.hunk_count for f in self.children)


TreeNode = GroupNode | FileNode | HunkNode


def _file_nodes(hunks: Iterable[Hunk]) -> list[FileNode]:
    by_file: dict[str, list[Hunk]] = defaultdict(list)
    for hunk in hunks:
        by_file[hunk.file_path].append(hunk)

    nodes = []
    for file_path in sorted(by_file):
        file_hunks = sorted(by_file[file_path], key=lambda h: h.start_line)
        nodes.append(
            FileNode(
                file_path=file_path,
                status=file_hunks[0].status,
                children=[HunkNode(h) for h in file_hunks],
            )
        )
    return nodes


def build_tree(
    groups: Iterable[Group],
    hunks: Iterable[Hunk],
    active_id: str | None = None,
) -> list[GroupNode]:
    """Build the group/file/hunk tree.

    The unassigned pseudo-group comes first, then groups in creation order.
    Hunks that reference an unknown group are shown as unassigned.

    Args:
        groups: Persisted groups.
        hunks: Every tracked hunk.
        active_id: Id of the active group, reflected in Group.is_active.
    """
    ordered = sorted(groups, key=lambda g: g.created_at)
    known = {g.id for g in ordered}

    by_group: dict[str | None, list[Hunk]] = defaultdict(list)
    for hunk in hunks:
        by_group[hunk.group_id if hunk.group_id in known else None].append(hunk)

    nodes = [GroupNode(unassigned_group(), _file_nodes(by_group.get(None, ())))]
    for group in ordered:
        if active_id is not None:
            group.is_active = group.id == active_id
        nodes.append(GroupNode(group, _file_nodes(by_group.get(group.id, ()))))
    return nodes

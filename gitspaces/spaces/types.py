"""Domain records: hunks, groups and group deletion dispositions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from gitspaces.core.constants import UNASSIGNED_GROUP_ID, UNASSIGNED_GROUP_NAME
from gitspaces.core.types import ChangeStatus, GroupType
from gitspaces.core.utils import now_ms


@dataclass
class Hunk:
    """A tracked change region.

    Attributes:
        id: Opaque identifier, assigned once at first detection.
        file_path: Absolute path of the owning file.
        start_line: First line in the working-tree file (1-indexed).
        end_line: Line counter after the region's last line.
        content: Post-change text of the region.
        original_content: Pre-change (HEAD) text of the region.
        status: Status of the owning file at detection time.
        group_id: Owning group id, None when unassigned.
        timestamp: Last mutation time in ms.
        shelved: Removed from the working tree by a group switch and waiting
            to be re-applied.
        whole_file: content/original_content hold entire file texts.
        missing_newline: The region ends at EOF without a final newline.
        original_missing_newline: Same for the pre-change side.
    """

    id: str
    file_path: str
    start_line: int
    end_line: int
    content: str
    original_content: str
    status: ChangeStatus
    group_id: str | None = None
    timestamp: int = field(default_factory=now_ms)
    shelved: bool = False
    whole_file: bool = False
    missing_newline: bool = False
    original_missing_newline: bool = False

    @property
    def is_unassigned(self) -> bool:
        return self.group_id is None

    @property
    def is_live(self) -> bool:
        """True if the change is currently present in the working tree."""
        return not self.shelved

    def touch(self) -> None:
        self.timestamp = now_ms()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "file_path": self.file_path,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "content": self.content,
            "original_content": self.original_content,
            "status": self.status.value,
            # The persisted document spells "unassigned" as ""
            "group_id": self.group_id or "",
            "timestamp": self.timestamp,
            "shelved": self.shelved,
            "whole_file": self.whole_file,
            "missing_newline": self.missing_newline,
            "original_missing_newline": self.original_missing_newline,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Hunk:
        """Create from dictionary."""
        status = ChangeStatus(data["status"])
        return cls(
            id=data["id"],
            file_path=data["file_path"],
            start_line=int(data["start_line"]),
            end_line=int(data["end_line"]),
            content=data.get("content", ""),
            original_content=data.get("original_content", ""),
            status=status,
            group_id=data.get("group_id") or None,
            timestamp=int(data.get("timestamp", 0)),
            shelved=bool(data.get("shelved", False)),
            whole_file=bool(
                data.get("whole_file", status in (ChangeStatus.ADDED, ChangeStatus.DELETED))
            ),
            missing_newline=bool(data.get("missing_newline", False)),
            original_missing_newline=bool(data.get("original_missing_newline", False)),
        )


@dataclass
class Group:
    """A change group (space).

    Attributes:
        id: Opaque identifier.
        name: Display name; equals branch_name for branch groups.
        goal: Free-text purpose, defaults to the name.
        type: Temporary or branch-linked.
        branch_name: Linked branch, set iff type is BRANCH.
        created_at: Creation time in ms.
        last_modified: Last metadata change in ms.
        is_active: Reported on read; the active id is stored with the document.
    """

    id: str
    name: str
    goal: str
    type: GroupType = GroupType.TEMPORARY
    branch_name: str | None = None
    created_at: int = field(default_factory=now_ms)
    last_modified: int = field(default_factory=now_ms)
    is_active: bool = False

    @property
    def is_branch(self) -> bool:
        return self.type == GroupType.BRANCH

    @property
    def is_unassigned(self) -> bool:
        return self.id == UNASSIGNED_GROUP_ID

    def touch(self) -> None:
        self.last_modified = now_ms()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization (is_active excluded)."""
        return {
            "id": self.id,
            "name": self.name,
            "goal": self.goal,
            "type": self.type.value,
            "branch_name": self.branch_name,
            "created_at": self.created_at,
            "last_modified": self.last_modified,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Group:
        """Create from dictionary."""
        group_type = GroupType(data.get("type", GroupType.TEMPORARY.value))
        return cls(
            id=data["id"],
            name=data["name"],
            goal=data.get("goal") or data["name"],
            type=group_type,
            branch_name=data.get("branch_name") if group_type == GroupType.BRANCH else None,
            created_at=int(data.get("created_at", 0)),
            last_modified=int(data.get("last_modified", 0)),
        )


def unassigned_group() -> Group:
    """The synthesized pseudo-group holding unassigned hunks."""
    return Group(
        id=UNASSIGNED_GROUP_ID,
        name=UNASSIGNED_GROUP_NAME,
        goal="Changes not yet assigned to a space",
        created_at=0,
        last_modified=0,
    )


class Disposition(str, Enum):
    """What happens to a deleted group's hunks."""

    DISCARD = "discard"  # Revert every owned hunk in the working tree
    MOVE = "move"  # Reassign every owned hunk to another group

"""Core value types shared across git-spaces."""

from enum import Enum


class ChangeStatus(str, Enum):
    """Working-tree status of a changed file.

    A hunk inherits the status of its file at detection time.
    """

    ADDED = "added"  # Untracked file
    DELETED = "deleted"  # Removed from the working tree
    MODIFIED = "modified"  # Working tree differs from HEAD
    STAGED = "staged"  # Change lives only in the index


class GroupType(str, Enum):
    """Kind of change group."""

    TEMPORARY = "temporary"  # Just for organizing changes
    BRANCH = "branch"  # Linked to a git branch

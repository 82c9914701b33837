"""Core interfaces (protocols) for git-spaces.

The engine never talks to git directly; it goes through a VcsBackend. The
production implementation is gitspaces.vcs.GitRepository, tests use an
in-memory fake. Every method is a suspension point and may raise
ExternalToolFailure.
"""

from pathlib import Path
from typing import Protocol

from gitspaces.core.types import ChangeStatus


class VcsBackend(Protocol):
    """Protocol for the external version-control collaborator."""

    @property
    def root(self) -> Path:
        """Absolute path of the working tree root."""
        ...

    async def is_repository(self) -> bool:
        """Return True if root is inside a git work tree."""
        ...

    async def current_branch(self) -> str:
        """Name of the checked-out branch ("HEAD" when detached)."""
        ...

    async def branch_exists(self, name: str) -> bool:
        """Return True if a local branch with this name exists."""
        ...

    async def create_branch(self, name: str) -> None:
        """Create a local branch at HEAD without checking it out."""
        ...

    async def checkout_branch(self, name: str) -> None:
        """Check out an existing branch."""
        ...

    async def status(self) -> dict[str, ChangeStatus]:
        """Changed files keyed by absolute path."""
        ...

    async def diff(self, path: str, status: ChangeStatus) -> str:
        """Unified diff of one file against HEAD.

        For ADDED files the diff shows the full file as added, for DELETED
        files it shows the full prior content as removed.
        """
        ...

    async def read_file(self, path: str) -> str:
        """Current working-tree content of a file."""
        ...

    async def apply_patch(self, patch: str) -> None:
        """Apply patch text to the working tree.

        Raises:
            PatchApplyConflict: If the patch does not apply cleanly.
        """
        ...

    async def restore_file(self, path: str) -> None:
        """Restore a file in the working tree from HEAD."""
        ...

    async def remove_file(self, path: str) -> None:
        """Delete an untracked file from disk."""
        ...

    async def stage_files(self, paths: list[str]) -> None:
        """Stage an explicit list of files."""
        ...

    async def stage_all(self) -> None:
        """Stage every change in the working tree."""
        ...

    async def commit(self, message: str) -> None:
        """Commit the index with a message."""
        ...

"""Core constants and paths for git-spaces.

Single source of truth for global paths. Modules import from here instead
of hardcoding paths like `Path.home() / ".gitspaces"`.
"""

from pathlib import Path

GITSPACES_DIR_NAME = ".gitspaces"

# Default storage location, relative to the repository root
DEFAULT_STORAGE_DIR = ".git/git-spaces"

# Reserved id of the synthesized "Unassigned" pseudo-group
UNASSIGNED_GROUP_ID = "__unassigned__"
UNASSIGNED_GROUP_NAME = "Unassigned"


def get_gitspaces_dir() -> Path:
    """Get ~/.gitspaces (global config directory)."""
    return Path.home() / GITSPACES_DIR_NAME


def get_default_config_path() -> Path:
    """Get global config file path."""
    return get_gitspaces_dir() / "config.json"


def get_local_config_path(root: Path) -> Path:
    """Get repository-local config file path."""
    return root / GITSPACES_DIR_NAME / "config.json"

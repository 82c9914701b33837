"""Core types, errors and interfaces."""

from gitspaces.core.errors import (
    ConfigError,
    ExternalToolFailure,
    InvariantViolation,
    LoadError,
    NotARepositoryError,
    NotFoundError,
    PatchApplyConflict,
    SpacesError,
)
from gitspaces.core.interfaces import VcsBackend
from gitspaces.core.types import ChangeStatus, GroupType

__all__ = [
    "SpacesError",
    "ConfigError",
    "LoadError",
    "NotARepositoryError",
    "ExternalToolFailure",
    "PatchApplyConflict",
    "NotFoundError",
    "InvariantViolation",
    "VcsBackend",
    "ChangeStatus",
    "GroupType",
]

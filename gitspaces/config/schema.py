"""Pydantic models for git-spaces configuration validation."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gitspaces.core.constants import DEFAULT_STORAGE_DIR

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

WhitespaceAction = Literal["nowarn", "warn", "fix", "error", "error-all"]


class StorageConfig(BaseModel):
    """Where the hunk and group documents live.

    Example in config.json:
        "storage": {"directory": ".git/git-spaces"}
    """

    model_config = ConfigDict(extra="forbid")

    directory: str = DEFAULT_STORAGE_DIR
    """Storage directory. Relative paths resolve against the repository root."""

    hunks_file: str = "hunks.json"
    """File name of the hunk document."""

    groups_file: str = "spaces.json"
    """File name of the group document."""

    @field_validator("hunks_file", "groups_file")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """Document names are plain file names, not paths."""
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"must be a plain file name, got {v!r}")
        return v


class SpacesConfig(BaseModel):
    """Behaviour of the group registry and reconciler."""

    model_config = ConfigDict(extra="forbid")

    default_group_name: str = Field(default="Main", min_length=1)
    """Name of the group created when no groups exist."""

    default_group_goal: str = "Default workspace"
    """Goal of the default group."""

    deleted_placeholder: str = "[deleted file content unavailable]"
    """Original content recorded for a deleted file whose prior text cannot be recovered."""


class GitConfig(BaseModel):
    """How the git executable is invoked."""

    model_config = ConfigDict(extra="forbid")

    executable: str = Field(default="git", min_length=1)
    """Git executable name or path."""

    apply_whitespace: WhitespaceAction = "nowarn"
    """Value passed to `git apply --whitespace=`."""


class LoggingConfig(BaseModel):
    """Logging levels for the CLI bootstrap."""

    model_config = ConfigDict(extra="forbid")

    level: LogLevel = "INFO"
    """Level of the rotating log file."""

    console_level: LogLevel = "WARNING"
    """Level of stderr output."""

    file: bool = True
    """Write <storage dir>/logs/gitspaces.log."""


class Config(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    storage: StorageConfig = StorageConfig()
    spaces: SpacesConfig = SpacesConfig()
    git: GitConfig = GitConfig()
    logging: LoggingConfig = LoggingConfig()

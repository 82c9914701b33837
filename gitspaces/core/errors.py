"""Typed exception hierarchy for git-spaces."""

from __future__ import annotations

from collections.abc import Sequence


class SpacesError(Exception):
    """Base class for all git-spaces errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(SpacesError):
    """Raised for configuration issues (invalid JSON, validation failure)."""


class LoadError(SpacesError):
    """Raised when a JSON document (config or storage) cannot be loaded."""


class NotARepositoryError(SpacesError):
    """Raised when the workspace root is not inside a git work tree."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class ExternalToolFailure(SpacesError):
    """Raised when a git invocation fails.

    The command and git's stderr are kept verbatim so callers can surface
    them unchanged.
    """

    def __init__(
        self,
        command: Sequence[str],
        returncode: int | None,
        stderr: str = "",
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        rendered = " ".join(self.command)
        if returncode is None:
            message = f"{rendered}: {stderr}"
        else:
            message = f"{rendered} failed (exit {returncode}): {stderr.strip()}"
        super().__init__(message)


class PatchApplyConflict(ExternalToolFailure):
    """Raised when `git apply` rejects a synthesized patch."""


class NotFoundError(SpacesError):
    """Raised when a referenced hunk or group does not exist."""

    def __init__(self, kind: str, ident: str) -> None:
        self.kind = kind
        self.ident = ident
        super().__init__(f"{kind.capitalize()} not found: {ident}")


class InvariantViolation(SpacesError):
    """Raised when an operation is rejected before any mutation happens."""

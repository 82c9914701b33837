"""Git collaborator: status parsing and the subprocess-backed client."""

from gitspaces.vcs.git import GitRepository
from gitspaces.vcs.status import classify, parse_porcelain

__all__ = ["GitRepository", "classify", "parse_porcelain"]

"""Command-line interface for git-spaces."""

from gitspaces.cli.main import main

__all__ = ["main"]

"""Shared pytest fixtures and configuration for pytest."""

import shutil

import pytest


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "requires_git: mark test that runs the git executable")


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Auto-skip tests whose external tools are missing."""
    if shutil.which("git") is not None:
        return
    skip_git = pytest.mark.skip(reason="git is not installed")
    for item in items:
        if "requires_git" in item.keywords:
            item.add_marker(skip_git)

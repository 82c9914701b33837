"""Fixtures for the spaces tests: an in-memory VcsBackend and wired registries."""

from pathlib import Path
from typing import Any

import pytest

from gitspaces.config.schema import Config
from gitspaces.core.errors import ExternalToolFailure, PatchApplyConflict
from gitspaces.core.types import ChangeStatus
from gitspaces.spaces.changes import ChangeRegistry
from gitspaces.spaces.events import EventHub
from gitspaces.spaces.groups import GroupRegistry
from gitspaces.spaces.storage import SpacesStorage
from gitspaces.spaces.types import Hunk
from gitspaces.spaces.workspace import Workspace


class FakeVcs:
    """VcsBackend that serves canned data and records every call in order.

    Attributes:
        changed: What status() reports.
        diffs: Diff text per absolute path.
        files: Working-tree content per absolute path.
        branches: Existing local branches.
        apply_errors: Outcomes of successive apply_patch calls; None means
            success, an exception is raised. Empty means success.
        failures: Method name -> exception raised on every call.
        calls: (method, *args) tuples in call order.
    """

    def __init__(self, root: Path) -> None:
        self._root = root
        self.changed: dict[str, ChangeStatus] = {}
        self.diffs: dict[str, str] = {}
        self.files: dict[str, str] = {}
        self.branches: set[str] = {"main"}
        self.branch = "main"
        self.apply_errors: list[Exception | None] = []
        self.failures: dict[str, Exception] = {}
        self.calls: list[tuple[Any, ...]] = []

    @property
    def root(self) -> Path:
        return self._root

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        if name in self.failures:
            raise self.failures[name]

    def calls_to(self, *names: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] in names]

    async def is_repository(self) -> bool:
        self._record("is_repository")
        return True

    async def current_branch(self) -> str:
        self._record("current_branch")
        return self.branch

    async def branch_exists(self, name: str) -> bool:
        self._record("branch_exists", name)
        return name in self.branches

    async def create_branch(self, name: str) -> None:
        self._record("create_branch", name)
        self.branches.add(name)

    async def checkout_branch(self, name: str) -> None:
        self._record("checkout_branch", name)
        self.branch = name

    async def status(self) -> dict[str, ChangeStatus]:
        self._record("status")
        return dict(self.changed)

    async def diff(self, path: str, status: ChangeStatus) -> str:
        self._record("diff", path, status)
        return self.diffs.get(path, "")

    async def read_file(self, path: str) -> str:
        self._record("read_file", path)
        if path not in self.files:
            raise ExternalToolFailure(["read", path], None, "No such file")
        return self.files[path]

    async def apply_patch(self, patch: str) -> None:
        self._record("apply_patch", patch)
        if self.apply_errors:
            error = self.apply_errors.pop(0)
            if error is not None:
                raise error

    async def restore_file(self, path: str) -> None:
        self._record("restore_file", path)

    async def remove_file(self, path: str) -> None:
        self._record("remove_file", path)
        self.files.pop(path, None)

    async def stage_files(self, paths: list[str]) -> None:
        self._record("stage_files", list(paths))

    async def stage_all(self) -> None:
        self._record("stage_all")

    async def commit(self, message: str) -> None:
        self._record("commit", message)


def conflict(stderr: str = "error: patch failed") -> PatchApplyConflict:
    return PatchApplyConflict(["git", "apply", "-"], 1, stderr)


def make_hunk(
    hunk_id: str,
    file_path: str,
    start_line: int = 1,
    group_id: str | None = None,
    content: str = "new",
    original_content: str = "old",
    status: ChangeStatus = ChangeStatus.MODIFIED,
    shelved: bool = False,
    whole_file: bool = False,
) -> Hunk:
    return Hunk(
        id=hunk_id,
        file_path=file_path,
        start_line=start_line,
        end_line=start_line + len(content.split("\n")),
        content=content,
        original_content=original_content,
        status=status,
        group_id=group_id,
        shelved=shelved,
        whole_file=whole_file,
    )


@pytest.fixture
def vcs(tmp_path: Path) -> FakeVcs:
    root = tmp_path / "repo"
    root.mkdir()
    return FakeVcs(root)


@pytest.fixture
def storage(tmp_path: Path) -> SpacesStorage:
    return SpacesStorage(tmp_path / "store")


@pytest.fixture
def events() -> EventHub:
    return EventHub()


@pytest.fixture
def changes(storage: SpacesStorage, events: EventHub) -> ChangeRegistry:
    return ChangeRegistry(storage, events)


@pytest.fixture
def groups(storage: SpacesStorage, events: EventHub) -> GroupRegistry:
    return GroupRegistry(storage, events)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config.model_validate({"storage": {"directory": str(tmp_path / "store")}})


async def open_workspace(
    vcs: FakeVcs, config: Config, events: EventHub | None = None
) -> Workspace:
    """Open a Workspace over the fake backend."""
    return await Workspace.open(vcs.root, config=config, vcs=vcs, events=events)

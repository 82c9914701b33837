"""Tests for CLI command handlers and the run_command wrapper."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from gitspaces.cli.arg_parser import parse_args
from gitspaces.cli.commands import COMMANDS, run_command
from gitspaces.cli.main import main
from gitspaces.config.schema import Config
from gitspaces.core.types import ChangeStatus
from gitspaces.spaces.workspace import Workspace

from ..spaces.conftest import FakeVcs, conflict, make_hunk, open_workspace


@pytest.fixture
def vcs(tmp_path: Path) -> FakeVcs:
    root = tmp_path / "repo"
    root.mkdir()
    return FakeVcs(root)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config.model_validate(
        {"storage": {"directory": str(tmp_path / "store")}, "logging": {"file": False}}
    )


async def seeded(vcs: FakeVcs, config: Config) -> Workspace:
    ws = await open_workspace(vcs, config)
    work = await ws.create_group("Work")
    await ws.changes.replace_all(
        [
            make_hunk("abcdef123456", str(vcs.root / "a.py"), start_line=2, group_id=work.id,
                      shelved=True),
            make_hunk("fedcba654321", str(vcs.root / "b.py"), start_line=9),
        ]
    )
    return ws


async def run(ws: Workspace, *argv: str) -> int:
    args = parse_args(list(argv))
    return await COMMANDS[args.command](ws, args)


class TestHandlers:
    """Tests for individual command handlers."""

    @pytest.mark.asyncio
    async def test_status_cached_prints_tree(
        self, vcs: FakeVcs, config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        ws = await seeded(vcs, config)

        assert await run(ws, "status", "--cached") == 0

        out = capsys.readouterr().out
        assert "Unassigned" in out
        assert "Work" in out
        assert "a.py" in out
        assert "(shelved)" in out
        assert vcs.calls_to("status") == []

    @pytest.mark.asyncio
    async def test_status_rescans(self, vcs: FakeVcs, config: Config) -> None:
        ws = await open_workspace(vcs, config)

        await run(ws, "status")

        assert vcs.calls_to("status") == [("status",)]

    @pytest.mark.asyncio
    async def test_rescan_summary(
        self, vcs: FakeVcs, config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        ws = await open_workspace(vcs, config)
        path = str(vcs.root / "new.txt")
        vcs.changed = {path: ChangeStatus.ADDED}
        vcs.files[path] = "x\n"

        await run(ws, "rescan")

        assert "1 changed file(s), 1 hunk(s) (1 new, 0 dropped)" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_create_and_assign(
        self, vcs: FakeVcs, config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        ws = await seeded(vcs, config)

        await run(ws, "create", "Bugs", "--assign-unassigned")
        await run(ws, "assign", "fedcba", "Work")

        out = capsys.readouterr().out
        assert "Created group Bugs" in out
        assert "Assigned fedcba65 to Work" in out

    @pytest.mark.asyncio
    async def test_switch_reports_apply_failure(
        self, vcs: FakeVcs, config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        ws = await seeded(vcs, config)
        vcs.apply_errors = [conflict("error: a.py: patch does not apply")]

        assert await run(ws, "switch", "Work") == 0

        out = capsys.readouterr().out
        assert "could not be re-applied" in out
        assert "Switched to Work" in out

    @pytest.mark.asyncio
    async def test_delete_moving_hunks(
        self, vcs: FakeVcs, config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        ws = await seeded(vcs, config)

        await run(ws, "delete", "Work", "--move-to", "-")

        assert "Deleted group Work" in capsys.readouterr().out
        assert len(ws.unassigned_hunks()) == 2

    @pytest.mark.asyncio
    async def test_stage_nothing(
        self, vcs: FakeVcs, config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        ws = await seeded(vcs, config)

        assert await run(ws, "stage", "Work") == 0

        assert "Nothing to stage" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_retype_messages(
        self, vcs: FakeVcs, config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        ws = await seeded(vcs, config)

        await run(ws, "retype", "Work", "--branch", "feat/work")
        await run(ws, "retype", "feat/work")

        out = capsys.readouterr().out
        assert "linked to branch feat/work" in out
        assert "is now temporary" in out


class TestRunCommand:
    """Tests for run_command()."""

    @pytest.mark.asyncio
    async def test_rescans_before_touching_the_tree(
        self, vcs: FakeVcs, config: Config
    ) -> None:
        ws = await seeded(vcs, config)
        args = parse_args(["--root", str(vcs.root), "discard", "fedcba"])
        vcs.changed = {str(vcs.root / "b.py"): ChangeStatus.MODIFIED}
        vcs.diffs[str(vcs.root / "b.py")] = "@@ -9,1 +9,1 @@\n-old\n+new\n"

        with (
            patch("gitspaces.cli.commands.load_config", return_value=config),
            patch("gitspaces.cli.commands.Workspace.open", AsyncMock(return_value=ws)),
        ):
            assert await run_command(args) == 0

        names = [c[0] for c in vcs.calls_to("status", "apply_patch")]
        assert names == ["status", "apply_patch"]
        assert ws.list_hunks() == [ws.resolve_hunk("abcdef")]

    @pytest.mark.asyncio
    async def test_spaces_error_exits_1(
        self, vcs: FakeVcs, config: Config, capsys: pytest.CaptureFixture[str]
    ) -> None:
        ws = await seeded(vcs, config)
        args = parse_args(["--root", str(vcs.root), "rename", "Nope", "Other"])

        with (
            patch("gitspaces.cli.commands.load_config", return_value=config),
            patch("gitspaces.cli.commands.Workspace.open", AsyncMock(return_value=ws)),
        ):
            assert await run_command(args) == 1

        assert "Error: Group not found: Nope" in capsys.readouterr().out


class TestMain:
    """Tests for the console script entry point."""

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 1
        assert "usage: gitspaces" in capsys.readouterr().out

    def test_exit_code_from_command(self) -> None:
        with patch("gitspaces.cli.main.run_command", AsyncMock(return_value=1)) as run_mock:
            with pytest.raises(SystemExit) as exc_info:
                main(["rescan"])

        assert exc_info.value.code == 1
        assert run_mock.await_args.args[0].command == "rescan"

    def test_keyboard_interrupt(self) -> None:
        with patch("gitspaces.cli.main.run_command", AsyncMock(side_effect=KeyboardInterrupt)):
            with pytest.raises(SystemExit) as exc_info:
                main(["status"])

        assert exc_info.value.code == 130

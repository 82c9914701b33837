"""Async client for the git executable.

Every operation runs `git` in a worker thread and either returns its
output or raises ExternalToolFailure with the command and stderr verbatim.
There is no internal timeout: the engine relies on git's own failure
behaviour.
"""

from __future__ import annotations

import asyncio
import logging
import os
import subprocess
from collections.abc import Sequence
from pathlib import Path

from gitspaces.core.errors import ExternalToolFailure, PatchApplyConflict
from gitspaces.core.types import ChangeStatus
from gitspaces.vcs.status import parse_porcelain

logger = logging.getLogger(__name__)


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


async def _run_git(
    executable: str,
    args: Sequence[str],
    cwd: Path,
    input_text: str | None = None,
    ok_codes: tuple[int, ...] = (0,),
) -> subprocess.CompletedProcess[str]:
    """Run git and return the completed process with decoded output.

    Output is captured as bytes and decoded here: text mode would fold the
    CR of CRLF content lines into plain newlines.

    Raises:
        ExternalToolFailure: If git cannot be started or exits with a code
            outside ok_codes.
    """
    cmd = [executable, *args]
    logger.debug("Running: %s (cwd=%s)", " ".join(cmd), cwd)

    def run() -> subprocess.CompletedProcess[bytes]:
        return subprocess.run(
            cmd,
            cwd=str(cwd),
            input=input_text.encode("utf-8") if input_text is not None else None,
            capture_output=True,
        )

    try:
        raw = await asyncio.to_thread(run)
    except FileNotFoundError as e:
        raise ExternalToolFailure(cmd, None, f"git is not installed or not in PATH: {e}") from e
    except OSError as e:
        raise ExternalToolFailure(cmd, None, str(e)) from e

    result = subprocess.CompletedProcess(
        cmd, raw.returncode, _decode(raw.stdout), _decode(raw.stderr)
    )
    if result.returncode not in ok_codes:
        logger.debug("git exited %d: %s", result.returncode, result.stderr.strip())
        raise ExternalToolFailure(cmd, result.returncode, result.stderr or result.stdout)

    return result


class GitRepository:
    """VcsBackend backed by the git executable.

    Example:
        repo = await GitRepository.discover(Path.cwd())
        changed = await repo.status()
    """

    def __init__(
        self,
        root: Path,
        executable: str = "git",
        apply_whitespace: str = "nowarn",
    ) -> None:
        """Initialize the client.

        Args:
            root: Working tree root (the repository toplevel).
            executable: Git executable name or path.
            apply_whitespace: Value for `git apply --whitespace=`.
        """
        self._root = root.resolve()
        self._executable = executable
        self._apply_whitespace = apply_whitespace

    @classmethod
    async def discover(
        cls,
        path: Path,
        executable: str = "git",
        apply_whitespace: str = "nowarn",
    ) -> GitRepository:
        """Create a client rooted at the toplevel of the repository containing path.

        Raises:
            ExternalToolFailure: If path is not inside a git work tree.
        """
        result = await _run_git(executable, ["rev-parse", "--show-toplevel"], path)
        return cls(Path(result.stdout.strip()), executable, apply_whitespace)

    @property
    def root(self) -> Path:
        return self._root

    def _relative(self, path: str) -> str:
        if os.path.isabs(path):
            path = os.path.relpath(path, self._root)
        return path.replace(os.sep, "/")

    async def _git(
        self,
        *args: str,
        input_text: str | None = None,
        ok_codes: tuple[int, ...] = (0,),
    ) -> str:
        result = await _run_git(
            self._executable, args, self._root, input_text=input_text, ok_codes=ok_codes
        )
        return result.stdout

    # --- Repository queries ---

    async def is_repository(self) -> bool:
        try:
            out = await self._git("rev-parse", "--is-inside-work-tree")
        except ExternalToolFailure:
            return False
        return out.strip() == "true"

    async def current_branch(self) -> str:
        try:
            out = await self._git("symbolic-ref", "--quiet", "--short", "HEAD")
        except ExternalToolFailure:
            # Detached HEAD
            return "HEAD"
        return out.strip() or "HEAD"

    async def branch_exists(self, name: str) -> bool:
        result = await _run_git(
            self._executable,
            ["rev-parse", "--verify", "--quiet", f"refs/heads/{name}"],
            self._root,
            ok_codes=(0, 1),
        )
        return result.returncode == 0

    async def status(self) -> dict[str, ChangeStatus]:
        out = await self._git("status", "--porcelain=v1", "-z", "--untracked-files=all")
        return parse_porcelain(out, str(self._root))

    async def diff(self, path: str, status: ChangeStatus) -> str:
        rel = self._relative(path)
        if status == ChangeStatus.ADDED:
            # Untracked: diff against nothing, exit code 1 means "differences"
            return await self._git(
                "diff", "--no-color", "--no-ext-diff", "--no-index", "--", os.devnull, rel,
                ok_codes=(0, 1),
            )
        return await self._git("diff", "--no-color", "--no-ext-diff", "HEAD", "--", rel)

    async def read_file(self, path: str) -> str:
        def read() -> str:
            # newline="" keeps CRLF so synthesized patches match the tree
            with open(path, encoding="utf-8", errors="replace", newline="") as f:
                return f.read()

        try:
            return await asyncio.to_thread(read)
        except OSError as e:
            raise ExternalToolFailure(["read", path], None, str(e)) from e

    # --- Branches ---

    async def create_branch(self, name: str) -> None:
        await self._git("branch", name)

    async def checkout_branch(self, name: str) -> None:
        await self._git("checkout", name, "--")

    # --- Working tree mutation ---

    async def apply_patch(self, patch: str) -> None:
        try:
            # Synthesized hunks carry no context lines
            await self._git(
                "apply",
                "--unidiff-zero",
                f"--whitespace={self._apply_whitespace}",
                "-",
                input_text=patch,
            )
        except ExternalToolFailure as e:
            raise PatchApplyConflict(e.command, e.returncode, e.stderr) from e

    async def restore_file(self, path: str) -> None:
        await self._git("restore", "--source=HEAD", "--worktree", "--", self._relative(path))

    async def remove_file(self, path: str) -> None:
        try:
            await asyncio.to_thread(os.unlink, path)
        except OSError as e:
            raise ExternalToolFailure(["rm", path], None, str(e)) from e

    # --- Index and commits ---

    async def stage_files(self, paths: list[str]) -> None:
        if not paths:
            return
        await self._git("add", "--", *(self._relative(p) for p in paths))

    async def stage_all(self) -> None:
        await self._git("add", "-A")

    async def commit(self, message: str) -> None:
        await self._git("commit", "-m", message)

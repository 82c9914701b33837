"""Command handlers for the gitspaces CLI.

Each handler takes the opened Workspace and the parsed arguments, prints
its outcome and returns an exit code. run_command() wires configuration,
logging and the workspace together and turns SpacesError into exit code 1.
"""

import argparse
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from gitspaces.cli.bootstrap import configure_logging
from gitspaces.cli.output import (
    console,
    print_error,
    print_info,
    print_success,
    print_tree,
    print_warning,
)
from gitspaces.config.loader import load_config
from gitspaces.core.errors import SpacesError
from gitspaces.spaces.types import Disposition
from gitspaces.spaces.workspace import Workspace

logger = logging.getLogger(__name__)

Handler = Callable[[Workspace, argparse.Namespace], Awaitable[int]]

# Commands that touch the working tree start from a fresh view of it
RESCAN_FIRST = frozenset({"switch", "delete", "discard", "stage", "commit"})


async def cmd_status(ws: Workspace, args: argparse.Namespace) -> int:
    if not args.cached:
        await ws.rescan()
    print_tree(ws.tree(), ws.root)
    return 0


async def cmd_rescan(ws: Workspace, args: argparse.Namespace) -> int:
    result = await ws.rescan()
    print_info(
        f"{result.files} changed file(s), {result.hunks} hunk(s) "
        f"({result.created} new, {result.dropped} dropped)"
    )
    return 0


async def cmd_create(ws: Workspace, args: argparse.Namespace) -> int:
    group = await ws.create_group(
        args.name,
        goal=args.goal,
        branch_name=args.branch,
        assign_unassigned=args.assign_unassigned,
    )
    print_success(f"Created group {group.name} ({group.id})")
    return 0


async def cmd_switch(ws: Workspace, args: argparse.Namespace) -> int:
    result = await ws.switch_group(args.group)
    group = ws.groups.get(result.group_id)
    if result.apply_error is not None:
        print_warning(f"Some hunks of {group.name} could not be re-applied: {result.apply_error}")
    print_success(
        f"Switched to {group.name} "
        f"({result.unapplied} hunk(s) shelved, {result.applied} re-applied)"
    )
    return 0


async def cmd_delete(ws: Workspace, args: argparse.Namespace) -> int:
    disposition = None
    if args.discard:
        disposition = Disposition.DISCARD
    elif args.move_to is not None:
        disposition = Disposition.MOVE
    group = await ws.delete_group(args.group, disposition=disposition, move_to=args.move_to)
    print_success(f"Deleted group {group.name}")
    return 0


async def cmd_rename(ws: Workspace, args: argparse.Namespace) -> int:
    group = await ws.rename_group(args.group, args.name)
    print_success(f"Renamed group to {group.name}")
    return 0


async def cmd_goal(ws: Workspace, args: argparse.Namespace) -> int:
    group = await ws.update_goal(args.group, args.goal)
    print_success(f"Goal of {group.name}: {group.goal}")
    return 0


async def cmd_retype(ws: Workspace, args: argparse.Namespace) -> int:
    group = await ws.retype_group(args.group, args.branch)
    if group.branch_name:
        print_success(f"Group {group.name} is linked to branch {group.branch_name}")
    else:
        print_success(f"Group {group.name} is now temporary")
    return 0


async def cmd_assign(ws: Workspace, args: argparse.Namespace) -> int:
    hunk = await ws.assign_hunk(args.hunk, args.group)
    target = ws.resolve_group(hunk.group_id)
    print_success(f"Assigned {hunk.id[:8]} to {target.name}")
    return 0


async def cmd_reassign(ws: Workspace, args: argparse.Namespace) -> int:
    moved = await ws.bulk_reassign(args.source, args.target)
    print_success(f"Moved {moved} hunk(s)")
    return 0


async def cmd_discard(ws: Workspace, args: argparse.Namespace) -> int:
    hunk = await ws.discard_hunk(args.hunk)
    print_success(f"Discarded {hunk.id[:8]} in {hunk.file_path}")
    return 0


async def cmd_stage(ws: Workspace, args: argparse.Namespace) -> int:
    files = await ws.stage_group(args.group)
    if not files:
        print_info("Nothing to stage")
        return 0
    for path in files:
        console.print(f"  staged {path}", highlight=False)
    return 0


async def cmd_commit(ws: Workspace, args: argparse.Namespace) -> int:
    files = await ws.commit_group(args.group, args.message)
    print_success(f"Committed {len(files)} file(s)")
    return 0


COMMANDS: dict[str, Handler] = {
    "status": cmd_status,
    "rescan": cmd_rescan,
    "create": cmd_create,
    "switch": cmd_switch,
    "delete": cmd_delete,
    "rename": cmd_rename,
    "goal": cmd_goal,
    "retype": cmd_retype,
    "assign": cmd_assign,
    "reassign": cmd_reassign,
    "discard": cmd_discard,
    "stage": cmd_stage,
    "commit": cmd_commit,
}


async def run_command(args: argparse.Namespace) -> int:
    """Open the workspace and run the selected command.

    Returns:
        0 on success, 1 if a SpacesError was raised.
    """
    root = (args.root or Path.cwd()).resolve()
    console_level = "DEBUG" if args.verbose else "WARNING"
    configure_logging(None, console_level=console_level)

    try:
        config = load_config(path=args.config, root=root)
        if not args.verbose:
            console_level = config.logging.console_level
        configure_logging(None, console_level=console_level)

        ws = await Workspace.open(root, config=config)
        if config.logging.file:
            configure_logging(
                ws.storage.directory / "logs",
                level=config.logging.level,
                console_level=console_level,
            )

        handler = COMMANDS[args.command]
        if args.command in RESCAN_FIRST:
            await ws.rescan()
        logger.debug("Running command %s", args.command)
        return await handler(ws, args)
    except SpacesError as e:
        logger.debug("Command %s failed: %s", args.command, e.message)
        print_error(e.message)
        return 1

"""Argument parsing for the gitspaces CLI."""

import argparse
from pathlib import Path


def add_group_arg(
    parser: argparse.ArgumentParser,
    dest: str = "group",
    help_text: str = "",
) -> None:
    """Add a positional group reference (id or unique name)."""
    parser.add_argument(dest, metavar="GROUP", help=help_text or "Group id or name")


def build_parser() -> argparse.ArgumentParser:
    """Build the gitspaces argument parser."""
    parser = argparse.ArgumentParser(
        prog="gitspaces",
        description="Organize uncommitted changes into independent change groups",
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=None,
        help="Repository path (default: current directory)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Config file to use instead of the layered defaults",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output to stderr",
    )

    subparsers = parser.add_subparsers(dest="command")

    status_parser = subparsers.add_parser(
        "status",
        help="Show groups, files and hunks",
    )
    status_parser.add_argument(
        "--cached",
        action="store_true",
        help="Show the stored state without rescanning the working tree",
    )

    subparsers.add_parser("rescan", help="Re-derive hunks from the working tree")

    create_parser = subparsers.add_parser("create", help="Create a group")
    create_parser.add_argument("name", help="Group name (ignored with --branch)")
    create_parser.add_argument("--goal", help="What the group is for (default: its name)")
    create_parser.add_argument(
        "--branch",
        metavar="BRANCH",
        help="Link the group to this branch, creating it if needed",
    )
    create_parser.add_argument(
        "--assign-unassigned",
        action="store_true",
        dest="assign_unassigned",
        help="Move every unassigned hunk into the new group",
    )

    switch_parser = subparsers.add_parser("switch", help="Make a group the active one")
    add_group_arg(switch_parser)

    delete_parser = subparsers.add_parser("delete", help="Delete a group")
    add_group_arg(delete_parser)
    disposition = delete_parser.add_mutually_exclusive_group()
    disposition.add_argument(
        "--discard",
        action="store_true",
        help="Discard the group's hunks from the working tree",
    )
    disposition.add_argument(
        "--move-to",
        metavar="GROUP",
        dest="move_to",
        help="Move the group's hunks to another group ('-' for unassigned)",
    )

    rename_parser = subparsers.add_parser("rename", help="Rename a temporary group")
    add_group_arg(rename_parser)
    rename_parser.add_argument("name", help="New name")

    goal_parser = subparsers.add_parser("goal", help="Change a group's goal")
    add_group_arg(goal_parser)
    goal_parser.add_argument("goal", help="New goal")

    retype_parser = subparsers.add_parser(
        "retype",
        help="Link a group to a branch, or unlink it (no --branch)",
    )
    add_group_arg(retype_parser)
    retype_parser.add_argument("--branch", metavar="BRANCH", help="Branch to link")

    assign_parser = subparsers.add_parser("assign", help="Assign a hunk to a group")
    assign_parser.add_argument("hunk", metavar="HUNK", help="Hunk id or unique id prefix")
    add_group_arg(assign_parser, help_text="Group id or name, '-' to unassign")

    reassign_parser = subparsers.add_parser(
        "reassign",
        help="Move every hunk of one group to another",
    )
    add_group_arg(reassign_parser, "source", "Source group ('-' for unassigned)")
    add_group_arg(reassign_parser, "target", "Target group ('-' for unassigned)")

    discard_parser = subparsers.add_parser("discard", help="Revert a hunk and forget it")
    discard_parser.add_argument("hunk", metavar="HUNK", help="Hunk id or unique id prefix")

    stage_parser = subparsers.add_parser("stage", help="Stage every file of a group")
    add_group_arg(stage_parser)

    commit_parser = subparsers.add_parser("commit", help="Stage and commit a group")
    add_group_arg(commit_parser)
    commit_parser.add_argument("--message", "-m", required=True, help="Commit message")

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)

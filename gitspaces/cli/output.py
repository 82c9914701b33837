"""Rich-based output utilities for the gitspaces CLI."""

import os
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from gitspaces.core.types import ChangeStatus
from gitspaces.spaces.tree import FileNode, GroupNode, HunkNode

# Shared console instance
console = Console()

_STATUS_STYLE = {
    ChangeStatus.ADDED: "green",
    ChangeStatus.DELETED: "red",
    ChangeStatus.MODIFIED: "yellow",
    ChangeStatus.STAGED: "cyan",
}


def print_error(message: str) -> None:
    """Print an error message in red.

    Args:
        message: The error message to display.
    """
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def print_info(message: str) -> None:
    """Print an informational message.

    Args:
        message: The info message to display.
    """
    console.print(f"[dim]{escape(message)}[/dim]")


def print_success(message: str) -> None:
    console.print(f"[green]{escape(message)}[/green]")


def print_warning(message: str) -> None:
    console.print(f"[yellow]Warning:[/yellow] {escape(message)}")


def _group_label(node: GroupNode) -> str:
    group = node.group
    label = f"[bold]{escape(node.label)}[/bold]"
    if group.is_active:
        label += " [green](active)[/green]"
    if group.branch_name:
        label += f" [magenta]\\[{escape(group.branch_name)}][/magenta]"
    label += f" [dim]{node.hunk_count} hunk(s)"
    if not group.is_unassigned:
        label += f" · {escape(group.id[:8])}"
    return label + "[/dim]"


def _file_label(node: FileNode, root: Path | None) -> str:
    path = node.file_path
    if root is not None:
        path = os.path.relpath(path, root)
    style = _STATUS_STYLE.get(node.status, "white")
    return f"[{style}]{escape(path)}[/{style}] [dim]{node.status.value}[/dim]"


def _hunk_label(node: HunkNode) -> str:
    first_line = node.hunk.content.split("\n", 1)[0].strip()
    if len(first_line) > 60:
        first_line = first_line[:57] + "..."
    return (
        f"[cyan]{escape(node.hunk.id[:8])}[/cyan] {escape(node.label)} "
        f"[dim]{escape(first_line)}[/dim]"
    )


def render_tree(nodes: list[GroupNode], root: Path | None = None) -> Tree:
    """Build a rich Tree for the group/file/hunk hierarchy."""
    tree = Tree("[bold]Spaces[/bold]", guide_style="dim")
    for group_node in nodes:
        branch = tree.add(_group_label(group_node))
        for file_node in group_node.children:
            file_branch = branch.add(_file_label(file_node, root))
            for hunk_node in file_node.children:
                file_branch.add(_hunk_label(hunk_node))
    return tree


def print_tree(nodes: list[GroupNode], root: Path | None = None) -> None:
    console.print(render_tree(nodes, root))

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import GitStatus

NAME_WIDTH = 30
BRANCH_WIDTH = 30
STATUS_LINE_LIMIT = 20


def _fit(text: str, width: int) -> str:
    if len(text) > width:
        if width <= 3:
            return text[:width]
        return f"{text[: width - 3]}..."
    return text


def format_upstream(status: GitStatus) -> str:
    counts = status.diff_commit_count
    if not counts.has_upstream:
        return ""
    return f"↑{counts.ahead} ↓{counts.behind}"


def format_changes(status: GitStatus) -> str:
    modified = status.modified_count
    if not modified.files:
        return ""
    unit = "file" if modified.files == 1 else "files"
    return f"{modified.files} {unit} +{modified.insertions} -{modified.deletions}"


def format_flags(status: GitStatus) -> str:
    flags: list[str] = []
    if status.is_dirty:
        flags.append("dirty")
    if status.has_unmerged_commits:
        flags.append("unmerged")
    elif status.has_unsynced_commits:
        flags.append("unsynced")
    if status.too_many_changes:
        flags.append("too-many-changes")
    return " ".join(flags)


def _row_style(status: GitStatus) -> str:
    if status.has_unsaved_changes:
        return "yellow"
    if status.has_unsynced_commits:
        return "cyan"
    return ""


def build_table(statuses: Iterable[GitStatus]) -> Table:
    table = Table(box=None, header_style="bold", pad_edge=False)
    table.add_column("REPO", no_wrap=True)
    table.add_column("BRANCH", no_wrap=True)
    table.add_column("UPSTREAM", no_wrap=True)
    table.add_column("CHANGES", no_wrap=True)
    table.add_column("FLAGS")
    for status in statuses:
        table.add_row(
            _fit(status.name, NAME_WIDTH),
            _fit(status.branch, BRANCH_WIDTH),
            format_upstream(status),
            format_changes(status),
            format_flags(status),
            style=_row_style(status),
        )
    return table


def render_table(statuses: Iterable[GitStatus], console: Console | None = None) -> None:
    (console or Console()).print(build_table(statuses))


def render_status_lines(
    status: GitStatus, default_branch: str = "", console: Console | None = None
) -> None:
    """Print the short status lines of one repository."""
    console = console or Console()
    console.print(Text(f"{status.name} ({status.branch})", style="bold"))
    if default_branch:
        console.print(Text(f"default branch: {default_branch}", style="dim"))
    if status.too_many_changes:
        console.print(Text("too many changes to list", style="dim"))
        return
    lines = status.status.splitlines()
    for line in lines[:STATUS_LINE_LIMIT]:
        console.print(Text(line))
    if len(lines) > STATUS_LINE_LIMIT:
        console.print(Text(f"... {len(lines) - STATUS_LINE_LIMIT} more", style="dim"))

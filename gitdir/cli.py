import asyncio
import json
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import click
from loguru import logger

from gitdir import git_ops, services
from gitdir.git_ops import CommandError
from gitdir.models import GitStatus
from gitdir.ui import render_status_lines, render_table

_PATH = click.Path(exists=True, file_okay=False, path_type=Path)


def _package_version() -> str:
    try:
        return version("gitdir")
    except PackageNotFoundError:
        return "0.0.0"


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING", format="{level}: {message}")


def _collect(root: Path) -> list[GitStatus]:
    try:
        git_ops.ensure_git()
        return asyncio.run(services.get_status_for_root(root.resolve()))
    except CommandError as exc:
        raise click.ClickException(str(exc)) from exc


def _list(root: Path, as_json: bool, unsaved: bool) -> None:
    statuses = _collect(root)
    if unsaved:
        statuses = [s for s in statuses if s.has_unsaved_changes]
    if as_json:
        click.echo(json.dumps([s.to_dict() for s in statuses], indent=2))
        return
    if not statuses:
        click.echo(f"gitdir: no git repositories found in {root}", err=True)
        return
    render_table(statuses)


@click.group(context_settings={"help_option_names": ["-h", "--help"]}, invoke_without_command=True)
@click.option("-v", "--verbose", is_flag=True, envvar="GITDIR_VERBOSE", help="Log every git command.")
@click.version_option(_package_version(), prog_name="gitdir")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """gitdir: status of every git repository in a directory."""
    _configure_logging(verbose)
    if ctx.invoked_subcommand is not None:
        return
    _list(Path.cwd(), as_json=False, unsaved=False)


@main.command("list")
@click.argument("path", type=_PATH, default=".")
@click.option("--json", "as_json", is_flag=True, envvar="GITDIR_JSON", help="Print records as JSON.")
@click.option("--unsaved", is_flag=True, help="Only show repositories with unsaved changes.")
def list_command(path: Path, as_json: bool, unsaved: bool) -> None:
    """List the git repositories in PATH (or PATH itself if it is one)."""
    _list(path, as_json=as_json, unsaved=unsaved)


@main.command("status")
@click.argument("path", type=_PATH, default=".")
def status_command(path: Path) -> None:
    """Show the changed files of the repository at PATH."""
    root = path.resolve()
    try:
        git_ops.ensure_git()
        if not asyncio.run(git_ops.is_working_tree(root)):
            raise click.ClickException(f"not a git repository: {root}")
        status = asyncio.run(services.get_status(root))
        default_branch = asyncio.run(services.get_default_branch(root))
    except CommandError as exc:
        raise click.ClickException(str(exc)) from exc
    render_status_lines(status, default_branch=default_branch)


if __name__ == "__main__":
    main()

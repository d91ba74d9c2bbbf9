"""Remote management commands: add-remote, list-remotes, remove-remote."""

from typing import Optional

import typer

from ..dotfiles import BareGitRepo
from ..dotfiles.operations import add_remote as add_git_remote
from ..dotfiles.operations import list_remotes as list_git_remotes
from ..dotfiles.operations import remove_remote as remove_git_remote
from ..errors import DotfailesError
from .helpers import fail, get_config, get_resolver
from .output import info, plain, success


def register(app: typer.Typer) -> None:
    """Register remote commands with the app."""
    app.command(name="add-remote")(add_remote)
    app.command(name="list-remotes")(list_remotes)
    app.command(name="remove-remote")(remove_remote)


def _repo_for(setup_name: Optional[str]):
    setup = get_resolver(get_config()).find(setup_name)
    return setup, BareGitRepo(setup.repo)


def add_remote(
    setup_name: str = typer.Argument(..., help="Setup name"),
    remote_name: str = typer.Argument(..., help="Remote name, e.g. origin"),
    remote_url: str = typer.Argument(..., help="Remote URL"),
):
    """Add a remote to a setup (or change its URL if it exists)."""
    try:
        setup, git = _repo_for(setup_name)
        added = add_git_remote(git, remote_name, remote_url)
    except DotfailesError as e:
        fail(e)

    if added:
        success(f"Remote '{remote_name}' added to setup '{setup.name}'")
    else:
        success(f"Remote '{remote_name}' of setup '{setup.name}' now points to {remote_url}")


def list_remotes(
    setup_name: Optional[str] = typer.Argument(None, help="Setup name (default: first setup)"),
):
    """List remotes for a setup."""
    try:
        setup, git = _repo_for(setup_name)
        output = list_git_remotes(git)
    except DotfailesError as e:
        fail(e)

    info(f"Remotes for setup '{setup.name}':")
    if output.strip():
        plain(output.rstrip())
    else:
        plain("  (none)")


def remove_remote(
    setup_name: str = typer.Argument(..., help="Setup name"),
    remote_name: str = typer.Argument(..., help="Remote to remove"),
):
    """Remove a remote from a setup."""
    try:
        setup, git = _repo_for(setup_name)
        remove_git_remote(git, remote_name)
    except DotfailesError as e:
        fail(e)

    success(f"Remote '{remote_name}' removed from setup '{setup.name}'")

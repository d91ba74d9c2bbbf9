"""Sync, merge, status and branch commands."""

from typing import Optional

import typer

from ..errors import DotfailesError
from .helpers import fail, get_config, get_manager
from .output import info, plain, success, warning


def register(app: typer.Typer) -> None:
    """Register sync commands with the app."""
    app.command()(sync)
    app.command()(merge)
    app.command()(status)
    app.command(name="branch-ensure")(branch_ensure)
    app.command(name="ensure-remote-branch")(ensure_remote_branch)


def sync(
    setup_name: Optional[str] = typer.Argument(None, help="Setup name (default: first setup)"),
    remote_name: Optional[str] = typer.Argument(None, help="Remote (default: origin)"),
    branch: Optional[str] = typer.Argument(None, help="Branch (default: setup branch)"),
):
    """Sync with remote (pull, then push).

    Without an explicit branch the setup branch is used, falling back to
    main when the remote doesn't have it yet.

    Like git pull, the remote branch is merged into the branch that is
    currently checked out (main after a merge), while the push always
    sends the setup branch. Check out the setup branch first if you want
    the merged result pushed.

    Examples:
        dotfailes sync my-laptop origin
    """
    config = get_config()
    try:
        manager = get_manager(config, setup_name)
        remote = remote_name or config.default_remote
        info(f"Syncing setup '{manager.resolved.name}' with remote '{remote}'...")
        result = manager.sync(remote, branch)
    except DotfailesError as e:
        fail(e)

    if result.pulled and result.pushed:
        success("Sync completed")
    else:
        warning(
            f"Sync finished with problems "
            f"(pulled: {'yes' if result.pulled else 'no'}, "
            f"pushed: {'yes' if result.pushed else 'no'})"
        )


def merge(
    source: Optional[str] = typer.Argument(None, help="Branch to merge (default: setup branch)"),
    setup_name: Optional[str] = typer.Option(None, "--setup", "-s", help="Setup name (default: first setup)"),
    target: Optional[str] = typer.Option(None, "--target", "-t", help="Branch to merge into (default: main)"),
    remote_name: Optional[str] = typer.Option(None, "--remote", "-r", help="Remote (default: origin)"),
):
    """Merge a setup branch from the remote into the target branch and push it.

    The target branch is checked out with --force: local modifications in
    the work tree are discarded. On conflicts nothing is pushed and the
    work tree is left for manual resolution.

    Examples:
        dotfailes merge laptop-MacOS --target main
    """
    config = get_config()
    try:
        manager = get_manager(config, setup_name)
        result = manager.merge_into_target(source, target, remote_name)
    except DotfailesError as e:
        fail(e)

    if result.changed:
        success(f"Merged {result.source} into {result.target} and pushed to {result.remote}")
    else:
        success(f"{result.target} already contains {result.source}; pushed to {result.remote}")


def status(
    setup_name: Optional[str] = typer.Argument(None, help="Setup name (default: first setup)"),
):
    """Show git status for a setup."""
    config = get_config()
    try:
        manager = get_manager(config, setup_name)
        output = manager.status()
    except DotfailesError as e:
        fail(e)

    info(f"Status for setup '{manager.resolved.name}':")
    plain(output.rstrip())


def branch_ensure(
    setup_name: Optional[str] = typer.Argument(None, help="Setup name (default: first setup)"),
    remote_name: Optional[str] = typer.Argument(None, help="Remote (default: origin)"),
):
    """Ensure the setup branch exists locally and is pushed to the remote."""
    config = get_config()
    try:
        manager = get_manager(config, setup_name)
        remote = remote_name or config.default_remote
        manager.ensure_branch_pushed(remote)
    except DotfailesError as e:
        fail(e)

    success(
        f"Branch '{manager.resolved.branch}' is set for setup "
        f"'{manager.resolved.name}' on {remote}"
    )


def ensure_remote_branch(
    setup_name: Optional[str] = typer.Argument(None, help="Setup name (default: first setup)"),
    remote_name: Optional[str] = typer.Argument(None, help="Remote (default: origin)"),
):
    """Create and push the setup branch only if the remote lacks it."""
    config = get_config()
    try:
        manager = get_manager(config, setup_name)
        remote = remote_name or config.default_remote
        pushed = manager.ensure_remote_branch(remote)
    except DotfailesError as e:
        fail(e)

    branch = manager.resolved.branch
    if pushed:
        success(f"Branch '{branch}' created on {remote}")
    else:
        success(f"Branch '{branch}' already exists on {remote}")

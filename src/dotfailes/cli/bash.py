"""Bash file commands: bash:init, bash:reload, bash:list."""

from typing import Optional

import typer

from ..errors import DotfailesError
from .helpers import fail, get_config, get_manager
from .output import info, plain, success


def register(app: typer.Typer) -> None:
    """Register bash commands with the app."""
    app.command(name="bash:init")(bash_init)
    app.command(name="bash:reload")(bash_reload)
    app.command(name="bash:list")(bash_list)


def bash_init(
    setup_name: Optional[str] = typer.Argument(None, help="Setup name (default: first setup)"),
    remote_name: Optional[str] = typer.Option(None, "--remote", "-r", help="Remote (default: origin)"),
):
    """Initialize bash files from the remote for a setup.

    Existing bash files are backed up before they are overwritten.
    """
    config = get_config()
    try:
        manager = get_manager(config, setup_name)
        result = manager.init_bash_files(remote_name)
    except DotfailesError as e:
        fail(e)

    if result.backup_dir:
        success(f"Backed up bash files to {result.backup_dir}")
    success(
        f"Bash files initialized in {manager.resolved.work_tree} "
        f"from {result.ref}: {', '.join(result.files)}"
    )


def bash_reload(
    setup_name: Optional[str] = typer.Argument(None, help="Setup name (default: first setup)"),
):
    """Print the command that reloads the setup's .bashrc.

    A child process can't change the calling shell, so evaluate the output:

        eval "$(dotfailes bash:reload)"
    """
    config = get_config()
    try:
        manager = get_manager(config, setup_name)
    except DotfailesError as e:
        fail(e)

    if not manager.bashrc_path().exists():
        fail(DotfailesError(f"{manager.bashrc_path()} does not exist"))
    typer.echo(manager.reload_snippet())


def bash_list(
    setup_name: Optional[str] = typer.Argument(None, help="Setup name (default: first setup)"),
    remote_name: Optional[str] = typer.Option(None, "--remote", "-r", help="Remote (default: origin)"),
):
    """List the bash files a setup tracks and whether they exist locally."""
    config = get_config()
    try:
        manager = get_manager(config, setup_name)
        statuses = manager.list_bash_files(remote_name)
    except DotfailesError as e:
        fail(e)

    info(f"Bash files for setup '{manager.resolved.name}':")
    for status in statuses:
        tracked = "tracked" if status.tracked else "not tracked"
        present = "present" if status.present else "missing"
        plain(f"  {status.name:<15} {tracked:<12} {present}")

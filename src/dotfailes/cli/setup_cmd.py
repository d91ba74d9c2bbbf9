"""Setup registry commands: init, clone, list, setup:show."""

from pathlib import Path
from typing import Optional

import typer

from ..dotfiles.operations import alias_line, clone_setup, init_setup
from ..errors import DotfailesError
from .helpers import fail, get_config, get_env, get_resolver, get_store
from .output import info, muted, plain, success, warning


def register(app: typer.Typer) -> None:
    """Register setup commands with the app."""
    app.command()(init)
    app.command()(clone)
    app.command(name="list")(list_setups)
    app.command(name="setup:show")(setup_show)


def _show_alias(setup) -> None:
    info("To use this dotfile repository, add this alias to your shell config:")
    plain("")
    plain(f"    {alias_line(setup)}")
    plain("")


def init(
    repo_path: Path = typer.Argument(..., help="Where to create the bare repository"),
    setup_name: Optional[str] = typer.Argument(None, help="Setup name (default: <hostname>-<OS>)"),
    folder: Optional[Path] = typer.Argument(None, help="Work tree (default: home directory)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask when the repository path exists"),
):
    """Initialize a new bare git repository and register a setup for it.

    Examples:
        dotfailes init ~/.dotfiles my-laptop ~/
    """
    env = get_env()
    config = get_config(env)

    repo_path = repo_path.expanduser()
    if repo_path.is_dir() and not yes:
        warning(f"Repository path already exists: {repo_path}")
        if not typer.confirm("Do you want to continue?", default=False):
            fail(DotfailesError("Initialization cancelled"))

    try:
        setup = init_setup(get_store(config), env, repo_path, setup_name, folder)
    except DotfailesError as e:
        fail(e)

    success(f"Bare git repository initialized at {setup.repo}")
    success(
        f"Setup '{setup.name}' registered "
        f"(OS: {setup.os.value}, Folder: {setup.folder})"
    )
    _show_alias(setup)


def clone(
    remote_url: str = typer.Argument(..., help="Repository to clone"),
    repo_path: Path = typer.Argument(..., help="Where to put the bare clone"),
    setup_name: Optional[str] = typer.Argument(None, help="Setup name (default: <hostname>-<OS>)"),
    folder: Optional[Path] = typer.Argument(None, help="Work tree (default: home directory)"),
):
    """Clone an existing dotfile repository as a bare repository.

    Examples:
        dotfailes clone https://github.com/user/dotfiles.git ~/.dotfiles
    """
    env = get_env()
    config = get_config(env)

    try:
        setup = clone_setup(
            get_store(config), env, remote_url, repo_path.expanduser(),
            setup_name, folder,
        )
    except DotfailesError as e:
        fail(e)

    success(f"Repository cloned to {setup.repo}")
    success(f"Setup '{setup.name}' registered")
    _show_alias(setup)


def list_setups():
    """List all configured setups."""
    config = get_config()
    try:
        setups = get_store(config).list_setups()
    except DotfailesError as e:
        fail(e)

    if not setups:
        warning("No setups configured yet")
        return

    info("Configured setups:")
    plain("")
    for setup in setups:
        plain(f"  • {setup.name}")
        plain(f"    OS: {setup.os.value}")
        plain(f"    Folder: {setup.folder}")
        plain(f"    Repo: {setup.repo}")
        plain(f"    Branch: {setup.branch or '(default: ' + setup.name + ')'}")
        plain("")


def setup_show(
    setup_name: Optional[str] = typer.Argument(None, help="Setup name (default: first setup)"),
):
    """Show the resolved repository, work tree and branch of a setup."""
    config = get_config()
    try:
        resolved = get_resolver(config).resolve_and_persist_default_branch(
            setup_name
        )
    except DotfailesError as e:
        fail(e)

    info(f"Setup '{resolved.name}':")
    plain(f"  OS        : {resolved.os.value}")
    plain(f"  Repository: {resolved.repo}")
    plain(f"  Work tree : {resolved.work_tree}")
    plain(f"  Branch    : {resolved.branch}")
    if not resolved.repo.is_dir():
        warning(f"Repository {resolved.repo} does not exist")
    muted(f"  Store     : {config.store_path}")

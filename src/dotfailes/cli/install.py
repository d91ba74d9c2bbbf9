"""Interactive installation command."""

from pathlib import Path

import typer

from .. import installer
from ..errors import DotfailesError
from .helpers import fail, get_config, get_env, get_store
from .output import header, info, plain, success


def register(app: typer.Typer) -> None:
    """Register the install command with the app."""
    app.command()(install)


def install(
    rollback: bool = typer.Option(False, "--rollback", help="Remove the shell alias added by a previous install"),
):
    """Set up dotfailes for this machine.

    Asks where to keep the repository, what to call the setup and which
    folder holds the dotfiles, then creates the setup and optionally adds
    a 'dotfiles' alias to your shell config. Every step is written to the
    install log.
    """
    env = get_env()
    config = get_config(env)
    shell_config = env.shell_config()

    if rollback:
        removed = installer.rollback(config, env, shell_config)
        if removed:
            success(f"Removed dotfiles alias from {shell_config}")
        else:
            info(f"No dotfailes alias found in {shell_config}")
        plain(f"Log: {config.install_log_path}")
        return

    header("dotfailes installation")
    info(f"Detected OS: {env.os.value}")

    repo_path = typer.prompt(
        "Where would you like to store your dotfiles repository?",
        default=str(env.home / ".dotfiles"),
    )
    setup_name = typer.prompt(
        "What would you like to name this setup?",
        default=env.default_setup_name(),
    )
    folder = typer.prompt(
        "Which directory contains your dotfiles?", default=str(env.home)
    )
    add_alias = typer.confirm(
        f"Add the dotfiles alias to {shell_config}?", default=True
    )

    try:
        setup = installer.install(
            config,
            get_store(config),
            env,
            Path(repo_path).expanduser(),
            setup_name,
            Path(folder).expanduser(),
            alias=add_alias,
            shell_config=shell_config,
        )
    except DotfailesError as e:
        plain(f"Log: {config.install_log_path}")
        fail(e)

    success(f"Setup '{setup.name}' is ready")
    plain("")
    plain("Next steps:")
    plain(f"  1. Source your shell config: source {shell_config}")
    plain("  2. Add your first dotfiles: dotfiles add ~/.bashrc")
    plain("  3. Commit: dotfiles commit -m 'Initial commit'")
    plain(f"  4. (Optional) Add remote: dotfailes add-remote {setup.name} origin <url>")
    plain(f"  5. Push the setup branch: dotfailes branch-ensure {setup.name}")
    plain("")
    plain(f"Log: {config.install_log_path}")

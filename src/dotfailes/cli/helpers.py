"""Shared helper functions for CLI commands."""

import logging
from typing import NoReturn, Optional

import typer

from ..config import Config
from ..dotfiles import DotfilesManager
from ..errors import DotfailesError, MergeConflict
from ..setups import SetupResolver, SetupStore, open_store
from ..system import Environment
from .output import error, plain

logger = logging.getLogger(__name__)


def get_env() -> Environment:
    return Environment()


def get_config(env: Optional[Environment] = None) -> Config:
    """Load settings from the dotfiles directory."""
    return Config(env=env or get_env())


def get_store(config: Config) -> SetupStore:
    return open_store(config.store_path, config.store_format)


def get_resolver(config: Config) -> SetupResolver:
    return SetupResolver(get_store(config))


def get_manager(config: Config, setup_name: Optional[str]) -> DotfilesManager:
    """Resolve a setup (persisting its default branch) and wrap it."""
    resolved = get_resolver(config).resolve_and_persist_default_branch(
        setup_name
    )
    return DotfilesManager(resolved, config)


def fail(e: DotfailesError) -> NoReturn:
    """Print a fatal error and exit with status 1.

    Raises:
        typer.Exit(1): Always.
    """
    error(str(e))
    if isinstance(e, MergeConflict):
        plain("Conflicted files:")
        for path in e.files:
            plain(f"    - {path}")
        plain("")
        plain("Resolve the conflicts in the work tree, then run:")
        plain("    dotfiles add <files>")
        plain("    dotfiles commit --no-edit")
        plain(f"    dotfiles push <remote> {e.target}")
        plain("Or abandon the merge with: dotfiles merge --abort")
    raise typer.Exit(1)

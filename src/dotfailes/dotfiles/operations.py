"""Setup creation and remote management."""

import logging
import subprocess
from pathlib import Path
from typing import Optional

from ..errors import DuplicateSetup, GitCommandFailure, RemoteNotConfigured
from ..setups.store import SetupStore
from ..setups.types import ResolvedSetup, Setup
from ..system import Environment
from .repo import BareGitRepo

logger = logging.getLogger(__name__)


def register_setup(store: SetupStore, setup: Setup) -> None:
    """Append ``setup`` to the store, refusing duplicate names."""
    if store.find_setup(setup.name) is not None:
        raise DuplicateSetup(setup.name)
    store.append_setup(setup)
    logger.info(
        f"Setup '{setup.name}' registered "
        f"(OS: {setup.os.value}, Folder: {setup.folder})"
    )


def _new_setup(
    env: Environment,
    repo_path: Path,
    name: Optional[str],
    folder: Optional[Path],
) -> Setup:
    name = name or env.default_setup_name()
    return Setup(
        name=name,
        os=env.os,
        folder=str(Path(folder or env.home).expanduser().absolute()),
        repo=str(Path(repo_path).expanduser().absolute()),
        branch=name,
    )


def init_setup(
    store: SetupStore,
    env: Environment,
    repo_path: Path,
    name: Optional[str] = None,
    folder: Optional[Path] = None,
) -> Setup:
    """Create a bare repository and register a setup for it.

    Args:
        store: Setup store to register in
        env: Current environment (default name, OS, home)
        repo_path: Where to create the bare repository
        name: Setup name (defaults to ``<hostname>-<OS>``)
        folder: Work tree (defaults to the home directory)

    Raises:
        DuplicateSetup: A setup with that name already exists.
        GitCommandFailure: ``git init --bare`` failed.
    """
    setup = _new_setup(env, repo_path, name, folder)
    if store.find_setup(setup.name) is not None:
        raise DuplicateSetup(setup.name)

    git = BareGitRepo(Path(setup.repo))
    git.git_dir.mkdir(parents=True, exist_ok=True)
    try:
        git.init_bare()
        # Only tracked files matter when the work tree is $HOME
        git.set_config_value("status.showUntrackedFiles", "no")
    except subprocess.CalledProcessError as e:
        raise GitCommandFailure("git init --bare", e.stderr)
    logger.info(f"Bare git repository initialized at {setup.repo}")

    store.ensure_initialized()
    register_setup(store, setup)
    return setup


def clone_setup(
    store: SetupStore,
    env: Environment,
    remote_url: str,
    repo_path: Path,
    name: Optional[str] = None,
    folder: Optional[Path] = None,
) -> Setup:
    """Clone ``remote_url`` as a bare repository and register a setup."""
    setup = _new_setup(env, repo_path, name, folder)
    if store.find_setup(setup.name) is not None:
        raise DuplicateSetup(setup.name)

    git = BareGitRepo(Path(setup.repo))
    try:
        git.clone_bare(remote_url)
        git.set_config_value("status.showUntrackedFiles", "no")
    except subprocess.CalledProcessError as e:
        raise GitCommandFailure("git clone --bare", e.stderr)
    git.ensure_fetch_refspec("origin")
    logger.info(f"Repository cloned to {setup.repo}")

    store.ensure_initialized()
    register_setup(store, setup)
    return setup


def add_remote(git: BareGitRepo, name: str, url: str) -> bool:
    """Add a remote, or point an existing one at ``url``.

    Returns:
        True if the remote was added, False if an existing one was updated.
    """
    try:
        if git.remote_url(name) is None:
            git.add_remote(name, url)
            git.ensure_fetch_refspec(name)
            return True
        git.set_remote_url(name, url)
        return False
    except subprocess.CalledProcessError as e:
        raise GitCommandFailure(f"Adding remote '{name}'", e.stderr)


def remove_remote(git: BareGitRepo, name: str) -> None:
    if git.remote_url(name) is None:
        raise RemoteNotConfigured(name)
    try:
        git.remove_remote(name)
    except subprocess.CalledProcessError as e:
        raise GitCommandFailure(f"Removing remote '{name}'", e.stderr)


def list_remotes(git: BareGitRepo) -> str:
    try:
        return git.list_remotes()
    except subprocess.CalledProcessError as e:
        raise GitCommandFailure("Listing remotes", e.stderr)


def alias_line(setup) -> str:
    """The shell alias that runs git against this setup."""
    if isinstance(setup, ResolvedSetup):
        repo, folder = setup.repo, setup.work_tree
    else:
        repo, folder = setup.repo, setup.folder
    return f"alias dotfiles='git --git-dir={repo} --work-tree={folder}'"

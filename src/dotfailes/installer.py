"""First-time installation: create a setup and wire up the shell alias.

Each step is appended to an audit log so a failed or unwanted install can
be traced and rolled back.
"""

import logging
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import Config
from .dotfiles.operations import alias_line, init_setup
from .errors import DotfailesError
from .setups.store import SetupStore
from .setups.types import Setup
from .system import Environment

logger = logging.getLogger(__name__)

ALIAS_MARKER = "# dotfailes alias"
AUDIT_FORMAT = "%(asctime)s %(levelname)s %(message)s"


class GitNotInstalled(DotfailesError):
    def __init__(self):
        super().__init__("git is not installed. Please install git first.")


@contextmanager
def audit_log(path: Path) -> Iterator[logging.Logger]:
    """Copy dotfailes log records to ``path`` while the block runs.

    The handler sits on the package logger so git and store messages from
    other modules land in the audit log too.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(AUDIT_FORMAT))

    package_logger = logging.getLogger("dotfailes")
    previous_level = package_logger.level
    package_logger.setLevel(min(package_logger.getEffectiveLevel(), logging.INFO))
    package_logger.addHandler(handler)
    try:
        yield logger
    finally:
        package_logger.removeHandler(handler)
        package_logger.setLevel(previous_level)
        handler.close()


def check_git() -> None:
    if shutil.which("git") is None:
        raise GitNotInstalled()


def has_alias(shell_config: Path) -> bool:
    if not shell_config.exists():
        return False
    return any(
        line.lstrip().startswith("alias dotfiles=")
        for line in shell_config.read_text().splitlines()
    )


def add_alias(shell_config: Path, setup: Setup) -> bool:
    """Append the alias block to ``shell_config``.

    Returns:
        False if a dotfiles alias was already there, True if one was added.
    """
    if has_alias(shell_config):
        logger.warning(f"Dotfiles alias already exists in {shell_config}")
        return False

    with open(shell_config, "a") as f:
        f.write(f"\n{ALIAS_MARKER}\n{alias_line(setup)}\n")
    logger.info(f"Added dotfiles alias to {shell_config}")
    return True


def remove_alias(shell_config: Path) -> bool:
    """Remove the marked alias block written by ``add_alias``."""
    if not shell_config.exists():
        return False

    lines = shell_config.read_text().splitlines(keepends=True)
    kept = []
    removed = False
    skip_alias = False
    for line in lines:
        if line.strip() == ALIAS_MARKER:
            removed = True
            skip_alias = True
            # Drop the blank line add_alias put in front of the marker
            if kept and not kept[-1].strip():
                kept.pop()
            continue
        if skip_alias and line.lstrip().startswith("alias dotfiles="):
            skip_alias = False
            continue
        skip_alias = False
        kept.append(line)

    if removed:
        shell_config.write_text("".join(kept))
        logger.info(f"Removed dotfiles alias from {shell_config}")
    return removed


def install(
    config: Config,
    store: SetupStore,
    env: Environment,
    repo_path: Path,
    name: Optional[str] = None,
    folder: Optional[Path] = None,
    alias: bool = True,
    shell_config: Optional[Path] = None,
) -> Setup:
    """Run the installation and record every step in the audit log."""
    shell_config = shell_config or env.shell_config()
    with audit_log(config.install_log_path) as log:
        log.info(f"Install started (OS: {env.os.value}, user: {env.user})")
        try:
            check_git()
            log.info("Prerequisites OK: git found")
            setup = init_setup(store, env, repo_path, name, folder)
            log.info(
                f"Initialized setup '{setup.name}' "
                f"(repo: {setup.repo}, folder: {setup.folder})"
            )
            if alias:
                add_alias(shell_config, setup)
        except DotfailesError as e:
            log.error(f"Install failed: {e}")
            raise
        log.info("Install complete")
    return setup


def rollback(config: Config, env: Environment, shell_config: Optional[Path] = None) -> bool:
    """Undo the shell changes made by ``install``.

    The setup record and bare repository are left in place; remove them by
    hand if they are no longer wanted.
    """
    shell_config = shell_config or env.shell_config()
    with audit_log(config.install_log_path) as log:
        log.info("Rollback started")
        removed = remove_alias(shell_config)
        if not removed:
            log.info(f"No dotfailes alias found in {shell_config}")
        log.info("Rollback complete")
    return removed

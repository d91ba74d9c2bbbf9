"""Turn a setup name (or nothing) into a usable setup."""

import logging
from pathlib import Path
from typing import Optional

from ..errors import MissingWorkTree, NoSetupsConfigured, SetupNotFound
from .store import SetupStore
from .types import ResolvedSetup, Setup

logger = logging.getLogger(__name__)


class SetupResolver:
    """Applies the lookup and defaulting rules shared by every command.

    - no name: the first configured setup
    - setups without a repository are treated as missing
    - setups without a branch get their own name as branch, and that
      default is written back to the store
    """

    def __init__(self, store: SetupStore):
        self.store = store

    def find(self, name: Optional[str] = None) -> Setup:
        """Look up a setup that has a repository. Never writes."""
        if not name:
            setups = self.store.list_setups()
            if not setups:
                raise NoSetupsConfigured()
            setup = setups[0]
            logger.debug(f"No setup given, using '{setup.name}'")
        else:
            setup = self.store.find_setup(name)
            if setup is None:
                raise SetupNotFound(name)

        if not setup.repo:
            raise SetupNotFound(setup.name)
        return setup

    def resolve_and_persist_default_branch(
        self, name: Optional[str] = None
    ) -> ResolvedSetup:
        """Resolve a setup for git operations.

        If the stored branch is empty it becomes the setup name and the
        store is updated, so this lookup can write to disk.

        Raises:
            NoSetupsConfigured: No name given and the store is empty.
            SetupNotFound: Unknown name, or the setup has no repository.
            MissingWorkTree: The setup has no folder.
        """
        setup = self.find(name)

        if not setup.folder:
            raise MissingWorkTree(setup.name)

        branch = setup.branch
        if not branch:
            branch = setup.name
            self.store.update_branch(setup.name, branch)
            logger.info(
                f"Setup '{setup.name}' had no branch; defaulted to '{branch}'"
            )

        return ResolvedSetup(
            name=setup.name,
            os=setup.os,
            repo=Path(setup.repo).expanduser(),
            work_tree=Path(setup.folder).expanduser(),
            branch=branch,
        )

    # Same operation under its short name; it writes the defaulted branch too.
    resolve = resolve_and_persist_default_branch

"""Branch-aware git operations for a resolved setup."""

import logging
import shlex
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ..config import Config
from ..errors import (
    GitCommandFailure,
    MergeConflict,
    MissingGitIdentity,
    RemoteNotConfigured,
)
from ..setups.types import ResolvedSetup
from .repo import BareGitRepo
from .types import BashFileStatus, BashInitResult, MergeResult, SyncResult

logger = logging.getLogger(__name__)


class DotfilesManager:
    """Manages one setup's dotfiles: a bare repository plus a work tree.

    Failure policy: fetches and pulls only warn, because remotes may be
    offline or simply lack a ref. Checkouts, commits, branch creation and
    the push after a merge raise ``GitCommandFailure``.
    """

    def __init__(
        self,
        resolved: ResolvedSetup,
        config: Config,
        git: Optional[BareGitRepo] = None,
    ):
        self.resolved = resolved
        self.config = config
        self.git = git or BareGitRepo(resolved.repo, resolved.work_tree)

    def _git_or_fail(self, action: str, *args):
        result = self.git.run(*args, check=False)
        if result.returncode != 0:
            raise GitCommandFailure(
                action, result.stderr or result.stdout, result.returncode
            )
        return result

    def _require_remote(self, remote: str):
        if self.git.remote_url(remote) is None:
            raise RemoteNotConfigured(remote, self.resolved.name)

    def remote_branch_for_fetch(self, remote: Optional[str] = None) -> str:
        """Fetch the setup branch from ``remote`` and return its ref.

        Setups are usually named per machine, and a fresh remote may only
        have ``main``. When the setup branch is missing on the remote the
        fallback branch is fetched instead and a warning is logged.

        Returns:
            ``<remote>/<branch>`` for the branch that was fetched.

        Raises:
            RemoteNotConfigured: ``remote`` doesn't exist.
        """
        remote = remote or self.config.default_remote
        self._require_remote(remote)
        branch = self.resolved.branch

        if self.git.remote_has_branch(remote, branch):
            fetch_branch = branch
        else:
            fetch_branch = self.config.fallback_branch
            logger.warning(
                f"Branch '{branch}' not found on {remote}. "
                f"Falling back to {remote}/{fetch_branch}."
            )

        logger.info(f"Fetching latest from {remote} {fetch_branch}...")
        if not self.git.fetch(remote, fetch_branch):
            logger.warning("Fetch failed or no changes")

        return f"{remote}/{fetch_branch}"

    def ensure_branch_pushed(self, remote: Optional[str] = None):
        """Check out the setup branch and push it with upstream tracking.

        An empty repository gets an empty initial commit first, which needs
        a git identity.

        Raises:
            RemoteNotConfigured: ``remote`` doesn't exist.
            MissingGitIdentity: No commits and user.name/user.email unset.
            GitCommandFailure: Checkout, commit or push failed.
        """
        remote = remote or self.config.default_remote
        self._require_remote(remote)
        branch = self.resolved.branch

        logger.info(
            f"Ensuring branch '{branch}' for setup '{self.resolved.name}'"
        )
        if self.git.local_branch_exists(branch):
            self._git_or_fail("Branch checkout", "checkout", branch)
        else:
            self._git_or_fail("Branch checkout", "checkout", "-b", branch)

        if not self.git.has_commits():
            user_name = self.git.get_config_value("user.name")
            user_email = self.git.get_config_value("user.email")
            if not user_name or not user_email:
                raise MissingGitIdentity()

            logger.info("No commits found. Creating an empty commit.")
            self._git_or_fail(
                "Empty commit",
                "commit",
                "--allow-empty",
                "-m",
                f"Initialize setup branch {branch}",
            )

        self._git_or_fail("Push", "push", "-u", remote, branch)
        logger.info(f"Pushed {branch} to {remote} with upstream tracking")

    def ensure_remote_branch(self, remote: Optional[str] = None) -> bool:
        """Make sure the setup branch exists on ``remote``.

        Returns:
            True if the branch had to be created and pushed, False if the
            remote already had it.
        """
        remote = remote or self.config.default_remote
        self._require_remote(remote)
        if self.git.remote_has_branch(remote, self.resolved.branch):
            logger.info(
                f"Branch '{self.resolved.branch}' already exists on {remote}"
            )
            return False
        self.ensure_branch_pushed(remote)
        return True

    def sync(
        self,
        remote: Optional[str] = None,
        branch_override: Optional[str] = None,
    ) -> SyncResult:
        """Pull the remote branch into the work tree, then push.

        Like ``git pull``, the remote ref is merged into whatever branch is
        checked out, which is ``main`` after a ``merge``. The push always
        sends the setup branch (or ``branch_override``), so commits merged
        into another checked-out branch are not pushed by it.

        Pull and push problems are reported as warnings; the sync keeps
        going.
        """
        remote = remote or self.config.default_remote
        self._require_remote(remote)

        if branch_override:
            push_branch = branch_override
            if not self.git.fetch(remote, branch_override):
                logger.warning("Fetch failed or no changes")
            ref = f"{remote}/{branch_override}"
        else:
            push_branch = self.resolved.branch
            ref = self.remote_branch_for_fetch(remote)

        result = SyncResult(ref=ref)

        logger.info(f"Pulling changes from {ref}...")
        if not self.git.ref_exists(f"refs/remotes/{ref}"):
            logger.warning(f"Pull failed or no changes: {ref} not available")
        else:
            merge = self.git.run("merge", "--no-edit", ref, check=False)
            if merge.returncode != 0:
                logger.warning(
                    "Pull failed or no changes: "
                    f"{(merge.stderr or merge.stdout).strip()}"
                )
            else:
                result.pulled = True

        logger.info(f"Pushing changes to {remote}/{push_branch}...")
        push = self.git.run("push", remote, push_branch, check=False)
        if push.returncode != 0:
            logger.warning(f"Push failed or no changes: {push.stderr.strip()}")
        else:
            result.pushed = True

        return result

    def merge_into_target(
        self,
        source: Optional[str] = None,
        target: Optional[str] = None,
        remote: Optional[str] = None,
    ) -> MergeResult:
        """Merge ``remote/source`` into ``target`` and push ``target``.

        The target branch is checked out with ``--force`` and, when the
        remote has it, reset to ``remote/target``, so local modifications
        and unpushed local commits on the target are discarded. The source
        branch is never pushed or changed. On conflicts the work tree is left
        in the conflicted state for manual resolution and nothing is pushed.

        Args:
            source: Branch to merge (defaults to the setup branch)
            target: Branch to merge into (defaults to ``merge.target``)
            remote: Remote to fetch from and push to

        Raises:
            MergeConflict: The merge stopped with conflicts.
            GitCommandFailure: Checkout, merge or push failed.
        """
        remote = remote or self.config.default_remote
        target = target or self.config.merge_target
        source = source or self.resolved.branch
        self._require_remote(remote)

        logger.info(f"Fetching from {remote}...")
        if not self.git.fetch(remote):
            logger.warning("Fetch failed; merging with refs already present")

        # The local target is reset to the fetched remote branch; a bare
        # clone never moves refs/heads/<target> on fetch.
        if self.git.ref_exists(f"refs/remotes/{remote}/{target}"):
            self._git_or_fail(
                f"Checkout of '{target}'",
                "checkout",
                "-f",
                "-B",
                target,
                f"{remote}/{target}",
            )
        elif self.git.local_branch_exists(target):
            self._git_or_fail(
                f"Checkout of '{target}'", "checkout", "-f", target
            )
        else:
            raise GitCommandFailure(
                f"Checkout of '{target}'",
                f"branch '{target}' exists neither locally nor on {remote}",
            )

        source_ref = f"{remote}/{source}"
        if not self.git.ref_exists(f"refs/remotes/{source_ref}"):
            raise GitCommandFailure("Merge", f"'{source_ref}' not found")

        before = self.git.rev_parse("HEAD")
        logger.info(f"Merging {source_ref} into {target}...")
        merge = self.git.run(
            "merge",
            "--allow-unrelated-histories",
            "--no-edit",
            source_ref,
            check=False,
        )
        if merge.returncode != 0:
            conflicts = self.git.conflicted_files()
            if conflicts:
                raise MergeConflict(source_ref, target, conflicts)
            raise GitCommandFailure(
                "Merge", merge.stderr or merge.stdout, merge.returncode
            )

        self._git_or_fail(f"Push of '{target}'", "push", remote, target)
        after = self.git.rev_parse("HEAD")
        logger.info(f"Pushed {target} to {remote}")

        return MergeResult(
            source=source_ref,
            target=target,
            remote=remote,
            commit=after,
            changed=before != after,
        )

    def status(self) -> str:
        """Output of ``git status`` for the setup."""
        return self._git_or_fail("Status", "status").stdout

    def _backup_bash_files(self) -> Optional[Path]:
        """Copy existing bash files to a timestamped backup directory."""
        work_tree = self.resolved.work_tree
        existing = [
            name for name in self.config.bash_files
            if (work_tree / name).exists()
        ]
        if not existing:
            return None

        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        backup_dir = (
            work_tree / self.config.bash_backup_dir / f"bash-init-{stamp}"
        )
        backup_dir.mkdir(parents=True, exist_ok=True)

        for name in existing:
            src = work_tree / name
            dst = backup_dir / name
            try:
                if src.is_dir() and not src.is_symlink():
                    shutil.copytree(src, dst, symlinks=True)
                else:
                    shutil.copy2(src, dst, follow_symlinks=False)
            except OSError as e:
                logger.warning(f"Failed to back up {name}: {e}")

        logger.info(f"Backed up bash files to {backup_dir}")
        return backup_dir

    def init_bash_files(self, remote: Optional[str] = None) -> BashInitResult:
        """Back up local bash files and check them out from the remote.

        Only the bash files the fetched ref actually tracks are checked out.

        Raises:
            RemoteNotConfigured: ``remote`` doesn't exist.
            GitCommandFailure: The ref tracks no bash files, or checkout
                failed.
        """
        remote = remote or self.config.default_remote
        self._require_remote(remote)

        backup_dir = self._backup_bash_files()
        ref = self.remote_branch_for_fetch(remote)

        tracked = set(self.git.list_tree(ref))
        files = [name for name in self.config.bash_files if name in tracked]
        if not files:
            raise GitCommandFailure("Checkout", f"no bash files tracked in {ref}")

        logger.info(f"Checking out bash files from {ref}")
        self._git_or_fail("Checkout", "checkout", ref, "--", *files)
        return BashInitResult(ref=ref, files=files, backup_dir=backup_dir)

    def _bash_ref(self, remote: str) -> Optional[str]:
        """Best ref to inspect without touching the network."""
        candidates = [
            (f"refs/remotes/{remote}/{self.resolved.branch}",
             f"{remote}/{self.resolved.branch}"),
            (f"refs/remotes/{remote}/{self.config.fallback_branch}",
             f"{remote}/{self.config.fallback_branch}"),
            (f"refs/heads/{self.resolved.branch}", self.resolved.branch),
        ]
        for full_ref, short in candidates:
            if self.git.ref_exists(full_ref):
                return short
        return None

    def list_bash_files(self, remote: Optional[str] = None) -> List[BashFileStatus]:
        """Which bash files the setup's ref tracks and which exist locally."""
        remote = remote or self.config.default_remote
        ref = self._bash_ref(remote)
        tracked = set(self.git.list_tree(ref)) if ref else set()
        return [
            BashFileStatus(
                name=name,
                tracked=name in tracked,
                present=(self.resolved.work_tree / name).exists(),
            )
            for name in self.config.bash_files
        ]

    def bashrc_path(self) -> Path:
        return self.resolved.work_tree / ".bashrc"

    def reload_snippet(self) -> str:
        """Shell line that re-sources the setup's .bashrc."""
        return f"source {shlex.quote(str(self.bashrc_path()))}"

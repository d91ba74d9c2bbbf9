"""Thin wrapper around the git executable for a bare repo + work tree."""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


class BareGitRepo:
    """Runs git against a bare repository with an explicit work tree.

    Nothing here touches repository internals; every operation is a
    ``git`` subprocess. Network commands get no timeout unless the caller
    passes one.
    """

    def __init__(self, git_dir: Path, work_tree: Optional[Path] = None):
        # Absolute, since run() changes cwd to the work tree
        self.git_dir = Path(git_dir).expanduser().absolute()
        self.work_tree = (
            Path(work_tree).expanduser().absolute() if work_tree else None
        )

    def run(
        self, *args, check: bool = True, timeout: Optional[int] = None
    ) -> subprocess.CompletedProcess:
        """Run a git command with --git-dir and --work-tree set.

        Args:
            *args: Git command arguments (e.g., "status", "--porcelain")
            check: If True, raise on non-zero exit code
            timeout: Command timeout in seconds (None waits forever)

        Returns:
            CompletedProcess with stdout/stderr captured as text
        """
        if self.work_tree is None:
            return self.run_bare(*args, check=check, timeout=timeout)

        cmd = [
            "git",
            "--git-dir",
            str(self.git_dir),
            "--work-tree",
            str(self.work_tree),
        ] + list(args)
        logger.debug(f"Running: {' '.join(cmd)}")
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=check,
            # Run from work_tree so relative paths resolve against it
            cwd=str(self.work_tree),
        )

    def run_bare(
        self, *args, check: bool = True, timeout: Optional[int] = None
    ) -> subprocess.CompletedProcess:
        """Run a git command with just --git-dir (no work tree)."""
        cmd = ["git", "--git-dir", str(self.git_dir)] + list(args)
        logger.debug(f"Running: {' '.join(cmd)}")
        return subprocess.run(
            cmd, capture_output=True, text=True, timeout=timeout, check=check
        )

    def init_bare(self, initial_branch: Optional[str] = None):
        """Create the bare repository."""
        cmd = ["git", "init", "--bare"]
        if initial_branch:
            cmd.append(f"--initial-branch={initial_branch}")
        cmd.append(str(self.git_dir))
        logger.info(f"Creating bare repository at {self.git_dir}")
        subprocess.run(cmd, check=True, capture_output=True, text=True)

    def clone_bare(self, url: str):
        """Clone ``url`` as a bare repository into git_dir."""
        logger.info(f"Cloning bare repo from {url} to {self.git_dir}")
        subprocess.run(
            ["git", "clone", "--bare", url, str(self.git_dir)],
            check=True,
            capture_output=True,
            text=True,
        )

    def ensure_fetch_refspec(self, remote: str = "origin"):
        """Ensure the remote has a fetch refspec for remote-tracking refs.

        ``git clone --bare`` does not configure one, which prevents
        ``origin/<branch>`` refs from being created on fetch.
        """
        try:
            result = self.run_bare(
                "config", "--get-all", f"remote.{remote}.fetch", check=False
            )
            expected = f"+refs/heads/*:refs/remotes/{remote}/*"

            if expected not in result.stdout:
                logger.info(f"Configuring fetch refspec for {remote}")
                self.run_bare(
                    "config", "--add", f"remote.{remote}.fetch", expected
                )
        except subprocess.CalledProcessError as e:
            logger.debug(f"Could not configure fetch refspec: {e.stderr}")

    def fetch(self, remote: str = "origin", branch: Optional[str] = None) -> bool:
        """Fetch from a remote. Returns True on success, False otherwise."""
        self.ensure_fetch_refspec(remote)

        args = ["fetch", remote]
        if branch:
            args.append(branch)
        try:
            self.run_bare(*args)
            return True
        except subprocess.TimeoutExpired:
            logger.warning("Fetch timed out")
            return False
        except subprocess.CalledProcessError as e:
            logger.warning(f"Fetch failed: {e.stderr.strip()}")
            return False

    def remote_has_branch(self, remote: str, branch: str) -> bool:
        """Ask the remote whether it has ``refs/heads/<branch>``."""
        result = self.run_bare(
            "ls-remote", "--heads", remote, branch, check=False
        )
        if result.returncode != 0:
            logger.debug(f"ls-remote {remote} failed: {result.stderr.strip()}")
            return False
        return any(
            line.split("\t", 1)[-1].strip() == f"refs/heads/{branch}"
            for line in result.stdout.splitlines()
        )

    def ref_exists(self, ref: str) -> bool:
        result = self.run_bare("show-ref", "--verify", "--quiet", ref, check=False)
        return result.returncode == 0

    def local_branch_exists(self, branch: str) -> bool:
        return self.ref_exists(f"refs/heads/{branch}")

    def has_commits(self) -> bool:
        result = self.run_bare("rev-parse", "--verify", "--quiet", "HEAD", check=False)
        return result.returncode == 0

    def current_branch(self) -> Optional[str]:
        """Get the current HEAD branch name (also works on unborn HEAD)."""
        result = self.run_bare("symbolic-ref", "--short", "HEAD", check=False)
        if result.returncode == 0:
            return result.stdout.strip()
        return None

    def get_config_value(self, key: str) -> Optional[str]:
        """Read a git config value (repo, global and system scopes)."""
        result = self.run_bare("config", key, check=False)
        value = result.stdout.strip()
        return value or None

    def set_config_value(self, key: str, value: str):
        self.run_bare("config", "--local", key, value)

    def remote_url(self, remote: str) -> Optional[str]:
        """URL of ``remote``, or None if it isn't configured."""
        result = self.run_bare("remote", "get-url", remote, check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def list_remotes(self) -> str:
        return self.run_bare("remote", "-v").stdout

    def add_remote(self, name: str, url: str):
        self.run_bare("remote", "add", name, url)

    def set_remote_url(self, name: str, url: str):
        self.run_bare("remote", "set-url", name, url)

    def remove_remote(self, name: str):
        self.run_bare("remote", "remove", name)

    def list_tree(self, ref: str) -> List[str]:
        """Top-level entry names tracked in ``ref`` (empty if unknown)."""
        result = self.run_bare("ls-tree", "--name-only", ref, check=False)
        if result.returncode != 0:
            return []
        return [f.strip() for f in result.stdout.splitlines() if f.strip()]

    def conflicted_files(self) -> List[str]:
        """Paths with unresolved merge conflicts in the index."""
        result = self.run(
            "diff", "--name-only", "--diff-filter=U", check=False
        )
        return [f.strip() for f in result.stdout.splitlines() if f.strip()]

    def rev_parse(self, ref: str) -> Optional[str]:
        result = self.run_bare("rev-parse", "--verify", "--quiet", ref, check=False)
        if result.returncode == 0:
            return result.stdout.strip()
        return None

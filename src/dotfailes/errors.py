"""Errors raised by dotfailes operations.

Every fatal condition is a ``DotfailesError`` subclass. The CLI catches the
base class, prints the message and exits with status 1.
"""

from typing import List, Optional


class DotfailesError(Exception):
    """Base class for all dotfailes errors."""


class NoSetupsConfigured(DotfailesError):
    def __init__(self):
        super().__init__(
            "No setups configured yet. Run 'dotfailes init' or "
            "'dotfailes clone' first."
        )


class SetupNotFound(DotfailesError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Setup '{name}' not found")


class MissingWorkTree(DotfailesError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Setup '{name}' has no work tree configured")


class DuplicateSetup(DotfailesError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Setup '{name}' already exists")


class StoreCorrupt(DotfailesError):
    def __init__(self, path, reason: str):
        self.path = path
        super().__init__(f"Cannot read setup store {path}: {reason}")


class RemoteNotConfigured(DotfailesError):
    def __init__(self, remote: str, setup: Optional[str] = None):
        self.remote = remote
        self.setup = setup
        where = f" for setup '{setup}'" if setup else ""
        super().__init__(f"Remote '{remote}' not configured{where}")


class GitCommandFailure(DotfailesError):
    """A git subprocess exited non-zero where that is fatal."""

    def __init__(self, action: str, stderr: str = "", returncode: int = 1):
        self.action = action
        self.stderr = stderr.strip() if stderr else ""
        self.returncode = returncode
        message = f"{action} failed"
        if self.stderr:
            message += f": {self.stderr}"
        super().__init__(message)


class MergeConflict(DotfailesError):
    def __init__(self, source: str, target: str, files: List[str]):
        self.source = source
        self.target = target
        self.files = files
        super().__init__(
            f"Merge of '{source}' into '{target}' has conflicts"
        )


class MissingGitIdentity(DotfailesError):
    def __init__(self):
        super().__init__(
            "No commits exist and git user.name/user.email are not set. "
            "Configure them or create a commit before pushing."
        )

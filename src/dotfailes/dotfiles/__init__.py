"""Dotfiles management package."""

from .manager import DotfilesManager
from .repo import BareGitRepo
from .types import BashFileStatus, BashInitResult, MergeResult, SyncResult

__all__ = [
    "BareGitRepo",
    "BashFileStatus",
    "BashInitResult",
    "DotfilesManager",
    "MergeResult",
    "SyncResult",
]

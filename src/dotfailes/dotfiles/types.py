"""Result types returned by DotfilesManager operations."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class SyncResult:
    ref: str
    pulled: bool = False
    pushed: bool = False


@dataclass
class MergeResult:
    source: str
    target: str
    remote: str
    commit: Optional[str] = None
    changed: bool = False


@dataclass
class BashInitResult:
    ref: str
    files: List[str] = field(default_factory=list)
    backup_dir: Optional[Path] = None


@dataclass
class BashFileStatus:
    name: str
    tracked: bool
    present: bool

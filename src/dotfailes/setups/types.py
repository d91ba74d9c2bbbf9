"""Setup records and their resolved form."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from ..system import OS

FIELDS = ("name", "os", "folder", "repo", "branch")


@dataclass
class Setup:
    """One machine/environment's dotfiles configuration as stored."""

    name: str
    os: OS = OS.UNKNOWN
    folder: str = ""
    repo: str = ""
    branch: str = ""

    def __post_init__(self):
        if not isinstance(self.os, OS):
            self.os = OS(self.os)

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "os": self.os.value,
            "folder": self.folder,
            "repo": self.repo,
            "branch": self.branch,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Setup":
        """Build a Setup from a stored record.

        Missing or null fields become empty strings; unknown keys are
        ignored.
        """
        def text(key: str) -> str:
            value = data.get(key)
            return "" if value is None else str(value)

        return cls(
            name=text("name"),
            os=OS(data.get("os")),
            folder=text("folder"),
            repo=text("repo"),
            branch=text("branch"),
        )


@dataclass(frozen=True)
class ResolvedSetup:
    """A setup with every field the git operations need filled in."""

    name: str
    os: OS
    repo: Path
    work_tree: Path
    branch: str

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import yaml

if TYPE_CHECKING:
    from .system import Environment

# Supported settings filenames (in order of preference)
SETTINGS_FILENAMES: List[str] = ["settings.yaml", "settings.yml"]
DEFAULT_DIRNAME = ".dotfailes"


def get_dotfiles_dir(home: Optional[Path] = None) -> Path:
    """Directory holding the setup store and settings.

    ``$DOTFILES_DIR`` wins; otherwise ``~/.dotfailes``.
    """
    override = os.environ.get("DOTFILES_DIR")
    if override:
        return Path(override).expanduser()
    return (home or Path.home()) / DEFAULT_DIRNAME


class Config:
    """User settings for dotfailes.

    Loaded from ``settings.yaml`` in the dotfiles directory and deep-merged
    over ``DEFAULT_CONFIG``. A missing file just means defaults.
    """

    DEFAULT_CONFIG = {
        "store": {"file": "config.json", "format": None},
        "remote": "origin",
        "fallback_branch": "main",
        "merge": {"target": "main"},
        "bash": {
            "files": [".bashrc", ".bash_profile", ".bash_aliases", ".bashrc.d"],
            "backup_dir": ".dotfailes-backups",
        },
        "install": {"log_file": "install.log"},
    }

    def __init__(
        self,
        dotfiles_dir: Optional[Path] = None,
        env: Optional[Environment] = None,
    ):
        # Use deepcopy to avoid mutating the class-level DEFAULT_CONFIG
        self.data = copy.deepcopy(self.DEFAULT_CONFIG)
        self.env = env
        home = env.home if env else None
        self.dotfiles_dir = Path(dotfiles_dir or get_dotfiles_dir(home))
        self.settings_path = self._find_settings_path()

        if self.settings_path.exists():
            with open(self.settings_path, "r") as f:
                user_config = yaml.safe_load(f)
            if user_config:
                if not isinstance(user_config, dict):
                    raise ValueError(
                        f"{self.settings_path} must contain a mapping"
                    )
                self._deep_update(self.data, user_config)

    def _find_settings_path(self) -> Path:
        for filename in SETTINGS_FILENAMES:
            path = self.dotfiles_dir / filename
            if path.exists():
                return path
        return self.dotfiles_dir / SETTINGS_FILENAMES[0]

    def _deep_update(self, base: Dict, update: Dict):
        for k, v in update.items():
            if isinstance(v, dict) and k in base and isinstance(base[k], dict):
                self._deep_update(base[k], v)
            else:
                base[k] = v

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get a config value by dot-separated path."""
        keys = key_path.split(".")
        value = self.data
        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    @property
    def store_path(self) -> Path:
        path = Path(str(self.get("store.file", "config.json"))).expanduser()
        if not path.is_absolute():
            path = self.dotfiles_dir / path
        return path

    @property
    def store_format(self) -> Optional[str]:
        return self.get("store.format")

    @property
    def default_remote(self) -> str:
        return self.get("remote") or "origin"

    @property
    def fallback_branch(self) -> str:
        return self.get("fallback_branch") or "main"

    @property
    def merge_target(self) -> str:
        return self.get("merge.target") or "main"

    @property
    def bash_files(self) -> List[str]:
        return list(self.get("bash.files") or [])

    @property
    def bash_backup_dir(self) -> str:
        return self.get("bash.backup_dir") or ".dotfailes-backups"

    @property
    def install_log_path(self) -> Path:
        path = Path(str(self.get("install.log_file", "install.log")))
        if not path.is_absolute():
            path = self.dotfiles_dir / path
        return path

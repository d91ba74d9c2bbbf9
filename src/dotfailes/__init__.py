"""dotfailes - Dotfile management using bare git repositories."""

from .cli import main
from .config import Config
from .dotfiles import BareGitRepo, DotfilesManager
from .setups import ResolvedSetup, Setup, SetupResolver, open_store
from .system import OS, Environment
from .utils import get_version

__all__ = [
    "BareGitRepo",
    "Config",
    "DotfilesManager",
    "Environment",
    "OS",
    "ResolvedSetup",
    "Setup",
    "SetupResolver",
    "get_version",
    "main",
    "open_store",
]

import logging
import os
import platform
import socket
from enum import Enum
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class OS(Enum):
    LINUX = "Linux"
    MACOS = "MacOS"
    WINDOWS = "Windows"
    UNKNOWN = "Unknown"

    @classmethod
    def _missing_(cls, value):
        # Accept case variations; anything else is Unknown.
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return cls.UNKNOWN


def detect_os(system: Optional[str] = None) -> OS:
    """Map ``platform.system()`` (or ``uname -s`` output) to an OS."""
    system = (system if system is not None else platform.system()).lower()
    if system.startswith("linux"):
        return OS.LINUX
    if system.startswith("darwin"):
        return OS.MACOS
    if system.startswith(("windows", "cygwin", "mingw", "msys")):
        return OS.WINDOWS
    return OS.UNKNOWN


class Environment:
    """Detects and provides info about the current system environment."""

    def __init__(self, home: Optional[Path] = None):
        self.os = detect_os()
        self.home = Path(home) if home else Path.home()
        self.user = (
            os.environ.get("USER")
            or os.environ.get("LOGNAME")
            or self.home.name
        )
        self.hostname = socket.gethostname().split(".")[0] or "localhost"

    def default_setup_name(self) -> str:
        """Setup name used when none is given: ``<hostname>-<OS>``."""
        return f"{self.hostname}-{self.os.value}"

    def shell_config(self) -> Path:
        """The rc file the installer writes the alias to."""
        if self.is_macos():
            return self.home / ".zshrc"
        return self.home / ".bashrc"

    def is_linux(self) -> bool:
        return self.os == OS.LINUX

    def is_macos(self) -> bool:
        return self.os == OS.MACOS

    def is_windows(self) -> bool:
        return self.os == OS.WINDOWS

    def __repr__(self) -> str:
        return (
            f"Environment(os={self.os.value}, "
            f"home={self.home}, user={self.user})"
        )

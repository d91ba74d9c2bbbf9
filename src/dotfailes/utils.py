import logging
import sys
from importlib.metadata import PackageNotFoundError, version

LOG_FORMAT = "%(levelname)s: %(message)s"


def setup_logging(verbose: bool = False):
    """Configure root logging for the CLI.

    Warnings are always shown on stderr; ``verbose`` adds info and debug
    messages, including every git command that is run.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = logging.StreamHandler(sys.stderr)
    # Level on the handler too, so the installer's audit log can lower
    # logger levels without flooding the terminal.
    handler.setLevel(level)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[handler],
        force=True,
    )


def get_version() -> str:
    try:
        return version("dotfailes")
    except PackageNotFoundError:
        return "unknown"

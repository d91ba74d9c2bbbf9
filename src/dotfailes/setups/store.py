"""Durable storage for the list of setups.

The whole store is loaded into memory, changed, and written back through a
temporary file plus ``os.replace`` so a crash never leaves a half-written
file. There is no lock: two dotfailes processes mutating the store at the
same time can lose an update (last writer wins). An advisory lock around
the load and save cycle would prevent that.
"""

import csv
import io
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from ..errors import SetupNotFound, StoreCorrupt
from .types import FIELDS, Setup

logger = logging.getLogger(__name__)


class SetupStore(ABC):
    """Base class for setup stores backed by a single file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @abstractmethod
    def _serialize(self, setups: List[Setup]) -> str:
        """Render the full store as text."""

    @abstractmethod
    def _deserialize(self, text: str) -> List[Setup]:
        """Parse the full store; raise StoreCorrupt on malformed input."""

    def ensure_initialized(self) -> None:
        """Create an empty store (and its directory) if it doesn't exist."""
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._save([])
        logger.info(f"Created setup store at {self.path}")

    def _load(self) -> List[Setup]:
        self.ensure_initialized()
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                text = f.read()
        except UnicodeDecodeError as e:
            raise StoreCorrupt(self.path, str(e))
        return self._deserialize(text)

    def _save(self, setups: List[Setup]) -> None:
        text = self._serialize(setups)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def list_setups(self) -> List[Setup]:
        """All setups in insertion order."""
        return self._load()

    def find_setup(self, name: str) -> Optional[Setup]:
        """Return the first setup named ``name``, or None."""
        for setup in self._load():
            if setup.name == name:
                return setup
        return None

    def append_setup(self, setup: Setup) -> None:
        """Add a setup. Name uniqueness is the caller's job."""
        setups = self._load()
        setups.append(setup)
        self._save(setups)

    def update_branch(self, name: str, branch: str) -> None:
        """Rewrite the branch of the setup named ``name``."""
        setups = self._load()
        for setup in setups:
            if setup.name == name:
                setup.branch = branch
                break
        else:
            raise SetupNotFound(name)
        self._save(setups)
        logger.debug(f"Set branch of setup '{name}' to '{branch}'")


class JsonSetupStore(SetupStore):
    """``{"setups": [{name, os, folder, repo, branch}, ...]}``"""

    def _serialize(self, setups: List[Setup]) -> str:
        data = {"setups": [s.to_dict() for s in setups]}
        return json.dumps(data, indent=2) + "\n"

    def _deserialize(self, text: str) -> List[Setup]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StoreCorrupt(self.path, str(e))

        if not isinstance(data, dict) or not isinstance(
            data.get("setups"), list
        ):
            raise StoreCorrupt(self.path, "expected an object with a 'setups' list")

        setups = []
        for record in data["setups"]:
            if not isinstance(record, dict):
                raise StoreCorrupt(self.path, f"invalid setup record: {record!r}")
            setups.append(Setup.from_dict(record))
        return setups


class CsvSetupStore(SetupStore):
    """One setup per row under a ``name,os,folder,repo,branch`` header."""

    def _serialize(self, setups: List[Setup]) -> str:
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=FIELDS, lineterminator="\n")
        writer.writeheader()
        for setup in setups:
            writer.writerow(setup.to_dict())
        return buf.getvalue()

    def _deserialize(self, text: str) -> List[Setup]:
        reader = csv.DictReader(io.StringIO(text))
        if reader.fieldnames is None:
            # Empty file: treat as an empty store
            return []
        if "name" not in reader.fieldnames:
            raise StoreCorrupt(self.path, "missing 'name' column")
        try:
            return [Setup.from_dict(row) for row in reader]
        except csv.Error as e:
            raise StoreCorrupt(self.path, str(e))


def open_store(path: Path, fmt: Optional[str] = None) -> SetupStore:
    """Pick a store backend from ``fmt`` or the file suffix."""
    path = Path(path)
    fmt = (fmt or path.suffix.lstrip(".") or "json").lower()
    if fmt == "csv":
        return CsvSetupStore(path)
    if fmt != "json":
        logger.debug(f"Unknown store format '{fmt}', using JSON")
    return JsonSetupStore(path)

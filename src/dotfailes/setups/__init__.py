"""Setup registry: records, storage and resolution."""

from .resolver import SetupResolver
from .store import CsvSetupStore, JsonSetupStore, SetupStore, open_store
from .types import ResolvedSetup, Setup

__all__ = [
    "CsvSetupStore",
    "JsonSetupStore",
    "ResolvedSetup",
    "Setup",
    "SetupResolver",
    "SetupStore",
    "open_store",
]

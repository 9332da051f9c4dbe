"""Persistence for progression targets."""

from progression_engine.storage.backend import FileBackend, KeyValueBackend, MemoryBackend
from progression_engine.storage.legacy import LegacyTargetStore
from progression_engine.storage.once import AsyncOnce
from progression_engine.storage.target_store import TargetStore

__all__ = [
    "AsyncOnce",
    "FileBackend",
    "KeyValueBackend",
    "LegacyTargetStore",
    "MemoryBackend",
    "TargetStore",
]

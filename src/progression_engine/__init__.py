"""Workout progression decision engine.

Decides, per exercise at the end of a session, whether the next session
should add load, add reps, hold or regress, and persists that decision so the
next session can pre-fill its targets.
"""

from progression_engine.catalog.catalog import RuleCatalog
from progression_engine.engine import ProgressionEngine, decide_session
from progression_engine.history.reader import HistoryReader, InMemorySetLog
from progression_engine.models.enums import ProgressionAction, WeightUnit
from progression_engine.models.progress import ProgressInput, ProgressOutput
from progression_engine.models.target import RepRange, StoredTarget
from progression_engine.normalizer import normalize
from progression_engine.storage.backend import FileBackend, MemoryBackend
from progression_engine.storage.target_store import TargetStore

__all__ = [
    "FileBackend",
    "HistoryReader",
    "InMemorySetLog",
    "MemoryBackend",
    "ProgressInput",
    "ProgressOutput",
    "ProgressionAction",
    "ProgressionEngine",
    "RepRange",
    "RuleCatalog",
    "StoredTarget",
    "TargetStore",
    "WeightUnit",
    "decide_session",
    "normalize",
]

"""Shared test fixtures: catalogs, in-memory stores, set logs and engines."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable
from uuid import UUID

import pytest

from progression_engine.catalog.catalog import RuleCatalog, parse_rule_records
from progression_engine.engine import ProgressionEngine
from progression_engine.history.reader import HistoryReader, InMemorySetLog
from progression_engine.models.enums import WeightUnit
from progression_engine.models.progress import ProgressInput
from progression_engine.models.set_log import SetLogEntry
from progression_engine.models.target import RepRange
from progression_engine.storage.backend import MemoryBackend
from progression_engine.storage.target_store import TargetStore

FIXED_NOW = datetime(2025, 9, 23, 18, 4, 11, tzinfo=timezone.utc)

# A small rule file covering each equipment family the engine treats differently
RULE_RECORDS: dict[str, dict] = {
    "Barbell Back Squat": {"progression": "weight", "weightIncrement": 5, "type": "barbell"},
    "Leg Press": {"progression": "weight", "weightIncrement": 10, "type": "machine"},
    "Assisted Pull-Up": {
        "progression": "weight",
        "weightIncrement": 5,
        "progressDirection": "decrease",
        "type": "machineAssistance",
        "minAssistance": 0,
        "maxAssistance": 120,
        "assistanceStep": 5,
    },
    "Cable Lateral Raise": {"progression": "reps", "repIncrement": 1, "type": "cable"},
    "Dumbbell Bicep Curl": {"progression": "reps", "repIncrement": 2, "type": "dumbbell"},
}


@pytest.fixture
def mesocycle_id() -> UUID:
    return UUID("6f1c2b9e-3d4a-4c5b-9e8f-0a1b2c3d4e5f")


@pytest.fixture
def catalog() -> RuleCatalog:
    return RuleCatalog(parse_rule_records(RULE_RECORDS))


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def set_log() -> InMemorySetLog:
    return InMemorySetLog()


@pytest.fixture
def make_engine(
    catalog: RuleCatalog, backend: MemoryBackend, set_log: InMemorySetLog
) -> Callable[..., ProgressionEngine]:
    """Factory so async tests build the store inside the running loop."""

    def _make(unit: WeightUnit = WeightUnit.LB, store: TargetStore | None = None) -> ProgressionEngine:
        return ProgressionEngine(
            catalog,
            store or TargetStore(backend),
            HistoryReader(set_log),
            weight_unit=unit,
            clock=lambda: FIXED_NOW,
        )

    return _make


@pytest.fixture
def make_input(mesocycle_id: UUID) -> Callable[..., ProgressInput]:
    def _make(
        name: str,
        weight: float | None = None,
        reps: int | None = None,
        lower: int = 8,
        upper: int = 10,
    ) -> ProgressInput:
        return ProgressInput(
            mesocycle_id=mesocycle_id,
            exercise_name=name,
            target_reps=RepRange(lower, upper),
            target_rir=2,
            last_top_set_weight=weight,
            last_top_set_reps=reps,
        )

    return _make


@pytest.fixture
def make_set(mesocycle_id: UUID) -> Callable[..., SetLogEntry]:
    def _make(
        week: int,
        day_ix: int,
        set_index: int,
        weight: float | None,
        reps: int | None,
        done: bool = True,
        exercise_key: str = "barbell back squat",
    ) -> SetLogEntry:
        return SetLogEntry(
            mesocycle_id=mesocycle_id,
            week=week,
            day_ix=day_ix,
            exercise_key=exercise_key,
            set_index=set_index,
            weight=weight,
            reps=reps,
            done=done,
        )

    return _make

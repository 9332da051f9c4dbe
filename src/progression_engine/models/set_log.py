"""Read-only view of logged sets, as supplied by the workout log store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from progression_engine.models.enums import WeightUnit


@dataclass(frozen=True)
class SetLogEntry:
    """One logged set: (mesocycle, week, day index, exercise key, set index)."""

    mesocycle_id: UUID
    week: int
    day_ix: int
    exercise_key: str
    set_index: int
    weight: float | None = None
    reps: int | None = None
    done: bool = False
    unit: WeightUnit = WeightUnit.LB
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def session(self) -> tuple[int, int]:
        """(week, day index) ordering key; week major, day minor."""
        return (self.week, self.day_ix)


@dataclass(frozen=True)
class TopSet:
    """Heaviest (weight, reps) pair of a session."""

    weight: float
    reps: int
    session: tuple[int, int] | None = field(default=None, compare=False)

"""Persisted per-exercise decision state."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from progression_engine.models.enums import LastAction


@dataclass(frozen=True)
class RepRange:
    """Closed integer rep window, e.g. ``RepRange(8, 10)`` for 8-10 reps."""

    lower: int
    upper: int

    def __post_init__(self) -> None:
        if self.lower > self.upper:
            raise ValueError(f"Rep range lower bound {self.lower} exceeds upper bound {self.upper}")

    def __contains__(self, reps: object) -> bool:
        if not isinstance(reps, int):
            return False
        return self.lower <= reps <= self.upper

    def shifted(self, by: int) -> "RepRange":
        """Move both bounds by *by* reps."""
        return RepRange(self.lower + by, self.upper + by)

    def __str__(self) -> str:
        return f"{self.lower}-{self.upper}"


@dataclass(frozen=True)
class StoredTarget:
    """Last decision for one (mesocycle, exercise) key.

    A fresh entry (no decision yet) has every optional field unset and a
    zero miss streak.
    """

    next_weight: float | None = None
    next_rep_range: RepRange | None = None
    miss_streak: int = 0
    last_action: LastAction | None = None
    last_updated_at: datetime | None = None


@dataclass(frozen=True)
class LegacyTarget:
    """A row of the pre-miss-streak (v1) target cache."""

    mesocycle_id: str
    exercise_name: str
    next_weight: float | None = None
    next_rep_lower: int | None = None
    next_rep_upper: int | None = None

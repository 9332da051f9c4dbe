"""Decision engine input and output."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from progression_engine.models.enums import ProgressionAction
from progression_engine.models.target import RepRange


@dataclass(frozen=True)
class ProgressInput:
    """What the session-finish flow knows about one exercise.

    ``last_top_set_weight``/``last_top_set_reps`` describe the heaviest
    completed set of the session just finished; either may be missing when
    nothing was logged.
    """

    mesocycle_id: UUID
    exercise_name: str
    target_reps: RepRange
    target_rir: int
    is_compound: bool = False
    last_top_set_weight: float | None = None
    last_top_set_reps: int | None = None
    achieved_rir: int | None = None


@dataclass(frozen=True)
class ProgressOutput:
    """The decision for the next session."""

    action: ProgressionAction
    next_weight: float | None = None
    next_rep_range: RepRange | None = None
    next_assistance: float | None = None

"""Decision trace: audit record of how the engine reached one decision."""

from __future__ import annotations

from dataclasses import dataclass

from progression_engine.models.enums import ProgressionKind
from progression_engine.models.progress import ProgressOutput
from progression_engine.models.rule import ProgressionRule
from progression_engine.models.set_log import TopSet
from progression_engine.models.target import StoredTarget


@dataclass(frozen=True)
class DecisionTrace:
    """Everything ``ProgressionEngine.evaluate`` looked at and produced.

    ``stored`` is exactly what was written to the target store.
    """

    exercise_key: str
    rule: ProgressionRule
    kind: ProgressionKind
    met_target: bool
    output: ProgressOutput
    stored: StoredTarget
    previous: StoredTarget | None = None
    prior_top_set: TopSet | None = None
    explanation: str = ""

"""Prior-session baselines read from the workout log."""

from progression_engine.history.reader import (
    HistoryReader,
    InMemorySetLog,
    SetLogSource,
    carry_over_reps,
    top_set,
)

__all__ = ["HistoryReader", "InMemorySetLog", "SetLogSource", "carry_over_reps", "top_set"]

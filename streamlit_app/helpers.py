"""Utility helpers bridging the Streamlit UI and the progression engine.

Pure functions for formatting, building the catalog and stored-target tables,
and running a throwaway decision for the what-if panel.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from uuid import UUID, uuid4

import pandas as pd

from progression_engine.catalog.catalog import RuleCatalog
from progression_engine.catalog.validator import CatalogWarning
from progression_engine.engine import ProgressionEngine, resolve_kind
from progression_engine.history.reader import HistoryReader, InMemorySetLog
from progression_engine.models.decision_trace import DecisionTrace
from progression_engine.models.enums import (
    KEY_SEPARATOR,
    LastAction,
    ProgressDirection,
    ProgressionAction,
    WeightUnit,
)
from progression_engine.models.progress import ProgressInput
from progression_engine.models.rule import ProgressionRule
from progression_engine.models.target import RepRange, StoredTarget
from progression_engine.storage.backend import FileBackend, MemoryBackend
from progression_engine.storage.target_store import TargetStore

# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_weight(value: float | None, unit: WeightUnit = WeightUnit.LB) -> str:
    """e.g. 140.0 -> '140 lb', 182.5 -> '182.5 lb'."""
    if value is None:
        return "--"
    return f"{value:g} {unit.value}"


def format_rep_range(rep_range: RepRange | None) -> str:
    if rep_range is None:
        return "--"
    return str(rep_range)


def format_increment(rule: ProgressionRule, unit: WeightUnit = WeightUnit.LB) -> str:
    """Human summary of one progression step, e.g. '+5 lb' or '+1 rep'."""
    if rule.weight_increment is not None:
        sign = "-" if rule.direction is ProgressDirection.DECREASE else "+"
        return f"{sign}{rule.weight_increment:g} {unit.value}"
    reps = "rep" if rule.rep_increment == 1 else "reps"
    return f"+{rule.rep_increment} {reps}"


# ---------------------------------------------------------------------------
# Color maps
# ---------------------------------------------------------------------------

ACTION_COLORS: dict[ProgressionAction, str] = {
    ProgressionAction.PROGRESS: "#4CAF50",
    ProgressionAction.HOLD: "#FFC107",
    ProgressionAction.REGRESS: "#F44336",
}

LAST_ACTION_ICONS: dict[LastAction, str] = {
    LastAction.PROGRESSED: "🟢",
    LastAction.HELD: "🟠",
    LastAction.REGRESSED: "🔴",
}

# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def rules_frame(catalog: RuleCatalog) -> pd.DataFrame:
    """One row per explicit catalog entry."""
    rows = [
        {
            "exercise": name,
            "mode": rule.progression_mode.value,
            "equipment": rule.equipment_class.value,
            "direction": rule.direction.value,
            "step": format_increment(rule),
            "kind": resolve_kind(rule, name).name.lower(),
        }
        for name, rule in catalog.items()
    ]
    return pd.DataFrame(rows, columns=["exercise", "mode", "equipment", "direction", "step", "kind"])


def warnings_frame(warnings: list[CatalogWarning]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"exercise": w.exercise, "problem": w.message} for w in warnings],
        columns=["exercise", "problem"],
    )


def split_store_key(key: str) -> tuple[str, str]:
    """'<mesocycle>::<exercise>' -> (mesocycle, exercise); keys without a separator keep an empty mesocycle."""
    mesocycle, sep, exercise = key.partition(KEY_SEPARATOR)
    if not sep:
        return "", key
    return mesocycle, exercise


def targets_frame(snapshot: dict[str, StoredTarget], unit: WeightUnit = WeightUnit.LB) -> pd.DataFrame:
    """Stored targets as a table, most recently updated first."""
    columns = ["mesocycle", "exercise", "next weight", "next reps", "miss streak", "last action", "updated"]
    rows = []
    for key, target in snapshot.items():
        mesocycle, exercise = split_store_key(key)
        action = target.last_action
        rows.append(
            {
                "mesocycle": mesocycle,
                "exercise": exercise,
                "next weight": format_weight(target.next_weight, unit),
                "next reps": format_rep_range(target.next_rep_range),
                "miss streak": target.miss_streak,
                "last action": f"{LAST_ACTION_ICONS[action]} {action.value}" if action else "--",
                "updated": target.last_updated_at,
            }
        )
    frame = pd.DataFrame(rows, columns=columns)
    if frame.empty:
        return frame
    frame["updated"] = pd.to_datetime(frame["updated"], utc=True)
    return frame.sort_values("updated", ascending=False, na_position="last").reset_index(drop=True)


# ---------------------------------------------------------------------------
# Engine access
# ---------------------------------------------------------------------------


async def _read_snapshot(store_dir: Path) -> dict[str, StoredTarget]:
    store = await TargetStore.open(FileBackend(store_dir))
    return await store.snapshot()


def load_stored_targets(store_dir: Path | str) -> dict[str, StoredTarget]:
    """Read the persisted target cache; an unreadable cache reads as empty."""
    return asyncio.run(_read_snapshot(Path(store_dir)))


async def _preview(
    catalog: RuleCatalog,
    progress_input: ProgressInput,
    previous: StoredTarget | None,
    unit: WeightUnit,
) -> DecisionTrace:
    store = TargetStore(MemoryBackend())
    if previous is not None:
        await store.update(progress_input.mesocycle_id, progress_input.exercise_name, lambda _t: previous)
    engine = ProgressionEngine(catalog, store, HistoryReader(InMemorySetLog()), weight_unit=unit)
    trace = await engine.evaluate(progress_input, current_week=1, current_day_ix=0)
    await store.flush()
    return trace


def preview_decision(
    catalog: RuleCatalog,
    exercise_name: str,
    weight: float | None,
    reps: int | None,
    rep_range: RepRange,
    unit: WeightUnit = WeightUnit.LB,
    miss_streak: int = 0,
    mesocycle_id: UUID | None = None,
) -> DecisionTrace:
    """Run one decision against a throwaway in-memory store.

    *miss_streak* seeds the previous stored state so the hold/regress path
    can be explored without touching the real cache.
    """
    progress_input = ProgressInput(
        mesocycle_id=mesocycle_id or uuid4(),
        exercise_name=exercise_name,
        target_reps=rep_range,
        target_rir=2,
        last_top_set_weight=weight,
        last_top_set_reps=reps,
    )
    previous = StoredTarget(miss_streak=miss_streak) if miss_streak else None
    return asyncio.run(_preview(catalog, progress_input, previous, unit))

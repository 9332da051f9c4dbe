"""ProgressionEngine: decides progress / hold / regress for each exercise after a session."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from progression_engine.catalog.catalog import RuleCatalog
from progression_engine.catalog.heuristics import classify_kind
from progression_engine.history.reader import HistoryReader
from progression_engine.math.rounding import (
    apply_direction,
    next_assistance,
    progressed_load,
    rounded,
    step_for,
)
from progression_engine.models.decision_trace import DecisionTrace
from progression_engine.models.enums import (
    DEFAULT_MIN_ASSISTANCE,
    REGRESSION_MISS_STREAK,
    LastAction,
    ProgressionAction,
    ProgressionKind,
    ProgressionMode,
    WeightUnit,
)
from progression_engine.models.progress import ProgressInput, ProgressOutput
from progression_engine.models.rule import ProgressionRule
from progression_engine.models.set_log import TopSet
from progression_engine.models.target import RepRange, StoredTarget
from progression_engine.normalizer import make_store_key, normalize
from progression_engine.storage.target_store import TargetStore

logger = logging.getLogger(__name__)


def resolve_kind(rule: ProgressionRule, exercise_name: str) -> ProgressionKind:
    """Pick the decision branch for an exercise.

    Assisted machines are always weight-based. Otherwise the rule's mode
    decides, and an UNKNOWN mode falls back to the compound/isolation
    keyword classification of the name.
    """
    if rule.is_assisted or rule.progression_mode is ProgressionMode.WEIGHT_BASED:
        return ProgressionKind.COMPOUND
    if rule.progression_mode is ProgressionMode.REP_BASED:
        return ProgressionKind.ISOLATION
    return classify_kind(exercise_name)


@dataclass(frozen=True)
class _Decision:
    """Branch result before it is merged with the carried-forward state."""

    output: ProgressOutput
    miss_streak: int
    explanation: str


class ProgressionEngine:
    """Turns a finished session into next-session targets.

    For each exercise it resolves the progression rule, reads the last stored
    decision and (when the session itself has no top set) the prior
    session's top set, runs the weight-based or rep-based branch, and writes
    the result back to the target store.

    Weight-based branch: meeting the rep window adds one rounding step in the
    rule's direction; the first miss holds; the second consecutive miss moves
    one weight increment the other way and resets the streak. Rep-based
    branch: meeting the window shifts it up by the rep increment; misses hold
    indefinitely.

    Usage:
        engine = ProgressionEngine(catalog, store, HistoryReader(log))
        output = await engine.decide_next(progress_input, current_week=2, current_day_ix=0)
    """

    def __init__(
        self,
        catalog: RuleCatalog,
        store: TargetStore,
        history: HistoryReader,
        weight_unit: WeightUnit = WeightUnit.LB,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.catalog = catalog
        self.store = store
        self.history = history
        self.weight_unit = weight_unit
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def decide_next(
        self,
        progress_input: ProgressInput,
        current_week: int,
        current_day_ix: int,
        weight_unit: WeightUnit | None = None,
        now: datetime | None = None,
    ) -> ProgressOutput:
        """Decide and persist the next targets for one exercise.

        Args:
            progress_input: The finished session's data for the exercise.
            current_week: Week of the session being finished.
            current_day_ix: Day index of the session being finished.
            weight_unit: Unit for rounding; defaults to the engine's unit.
            now: Timestamp recorded on the stored target.

        Returns:
            The ProgressOutput for the next session.
        """
        trace = await self.evaluate(
            progress_input,
            current_week=current_week,
            current_day_ix=current_day_ix,
            weight_unit=weight_unit,
            now=now,
        )
        return trace.output

    async def evaluate(
        self,
        progress_input: ProgressInput,
        current_week: int,
        current_day_ix: int,
        weight_unit: WeightUnit | None = None,
        now: datetime | None = None,
    ) -> DecisionTrace:
        """Same as :meth:`decide_next` but returns the full DecisionTrace."""
        unit = weight_unit or self.weight_unit
        timestamp = now or self._clock()
        name = progress_input.exercise_name
        mesocycle_id = progress_input.mesocycle_id
        key = normalize(name)

        rule = self.catalog.rule_for(name)
        kind = resolve_kind(rule, name)

        async with self.store.lock_for(mesocycle_id, name):
            previous = await self.store.get(mesocycle_id, name)

            prior: TopSet | None = None
            if progress_input.last_top_set_weight is None or progress_input.last_top_set_reps is None:
                prior = await self.history.prior_top_set(
                    mesocycle_id, name, current_week, current_day_ix
                )

            window = _stored_window(previous) or progress_input.target_reps
            reps = progress_input.last_top_set_reps
            if reps is None and prior is not None:
                reps = prior.reps
            met_target = reps is not None and reps in window

            if kind is ProgressionKind.COMPOUND:
                last_weight = _first_present(
                    progress_input.last_top_set_weight,
                    previous.next_weight if previous else None,
                    prior.weight if prior else None,
                )
                decision = self._decide_weight(rule, unit, last_weight, met_target, previous)
            else:
                decision = self._decide_reps(rule, window, met_target, previous)

            stored = StoredTarget(
                next_weight=_first_present(
                    decision.output.next_weight,
                    previous.next_weight if previous else None,
                    progress_input.last_top_set_weight,
                ),
                next_rep_range=decision.output.next_rep_range or window,
                miss_streak=decision.miss_streak,
                last_action=LastAction.from_action(decision.output.action),
                last_updated_at=timestamp,
            )
            await self.store.update(mesocycle_id, name, lambda _current: stored)

        logger.debug(
            "Decision name=%s mode=%s equip=%s unit=%s lastW=%s lastReps=%s "
            "nextW=%s nextReps=%s assist=%s action=%s streak=%d",
            key,
            rule.progression_mode.value,
            rule.equipment_class.value,
            unit.value,
            progress_input.last_top_set_weight,
            reps,
            decision.output.next_weight,
            decision.output.next_rep_range,
            decision.output.next_assistance,
            decision.output.action.value,
            decision.miss_streak,
        )

        return DecisionTrace(
            exercise_key=key,
            rule=rule,
            kind=kind,
            met_target=met_target,
            output=decision.output,
            stored=stored,
            previous=previous,
            prior_top_set=prior,
            explanation=decision.explanation,
        )

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def _decide_weight(
        self,
        rule: ProgressionRule,
        unit: WeightUnit,
        last_weight: float | None,
        met_target: bool,
        previous: StoredTarget | None,
    ) -> _Decision:
        equipment = rule.equipment_class

        if last_weight is None:
            return _Decision(
                output=ProgressOutput(action=ProgressionAction.HOLD),
                miss_streak=0,
                explanation="No baseline weight yet; holding until a top set is logged.",
            )

        if met_target:
            next_weight = progressed_load(
                last_weight, step_for(unit, equipment), rule.direction, unit, equipment
            )

            assistance = None
            if rule.is_assisted:
                assistance_step = rule.assistance_step or rule.weight_increment or unit.default_weight_increment
                minimum = rule.min_assistance if rule.min_assistance is not None else DEFAULT_MIN_ASSISTANCE
                assistance = next_assistance(last_weight, assistance_step, unit, minimum)

            return _Decision(
                output=ProgressOutput(
                    action=ProgressionAction.PROGRESS,
                    next_weight=next_weight,
                    next_assistance=assistance,
                ),
                miss_streak=0,
                explanation=f"Rep target met; load {last_weight:g} -> {next_weight:g} {unit.value}.",
            )

        miss_streak = (previous.miss_streak if previous else 0) + 1
        if miss_streak < REGRESSION_MISS_STREAK:
            held = rounded(last_weight, unit, equipment)
            return _Decision(
                output=ProgressOutput(action=ProgressionAction.HOLD, next_weight=held),
                miss_streak=miss_streak,
                explanation=f"Rep target missed once; holding at {held:g} {unit.value}.",
            )

        increment = rule.weight_increment or unit.default_weight_increment
        regressed = rounded(
            apply_direction(last_weight, increment, rule.direction, invert=True),
            unit,
            equipment,
        )
        return _Decision(
            output=ProgressOutput(action=ProgressionAction.REGRESS, next_weight=regressed),
            miss_streak=0,
            explanation=(
                f"Rep target missed {miss_streak} sessions running; "
                f"load {last_weight:g} -> {regressed:g} {unit.value}."
            ),
        )

    def _decide_reps(
        self,
        rule: ProgressionRule,
        window: RepRange,
        met_target: bool,
        previous: StoredTarget | None,
    ) -> _Decision:
        if met_target:
            next_range = window.shifted(rule.rep_increment)
            return _Decision(
                output=ProgressOutput(action=ProgressionAction.PROGRESS, next_rep_range=next_range),
                miss_streak=0,
                explanation=f"Rep target met; window {window} -> {next_range}.",
            )

        # Rep-based exercises never regress; the streak only records misses
        miss_streak = (previous.miss_streak if previous else 0) + 1
        return _Decision(
            output=ProgressOutput(action=ProgressionAction.HOLD, next_rep_range=window),
            miss_streak=miss_streak,
            explanation=f"Rep target missed ({miss_streak} running); holding window {window}.",
        )


def _stored_window(previous: StoredTarget | None) -> RepRange | None:
    return previous.next_rep_range if previous is not None else None


def _first_present(*values: float | None) -> float | None:
    for value in values:
        if value is not None:
            return value
    return None


async def decide_session(
    engine: ProgressionEngine,
    inputs: list[ProgressInput],
    current_week: int,
    current_day_ix: int,
    weight_unit: WeightUnit | None = None,
) -> dict[str, ProgressOutput]:
    """Run ``decide_next`` for every exercise of a finished session, concurrently.

    Returns outputs keyed by ``"<mesocycle id>::<normalized exercise key>"``.
    """
    outputs = await asyncio.gather(
        *(
            engine.decide_next(item, current_week, current_day_ix, weight_unit=weight_unit)
            for item in inputs
        )
    )
    return {
        make_store_key(item.mesocycle_id, item.exercise_name): output
        for item, output in zip(inputs, outputs)
    }

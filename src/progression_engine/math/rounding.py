"""Equipment-aware load rounding and directional increments.

Loads are quantized to the nearest multiple of a step that depends on the
weight unit and on whether the equipment moves in fine (pin/stack) or coarse
(plate) steps. Ties round half away from zero, so 1.25 lb on a 2.5 lb step
becomes 2.5 and -1.25 becomes -2.5.
"""

from __future__ import annotations

import numpy as np

from progression_engine.models.enums import (
    DEFAULT_MIN_ASSISTANCE,
    EquipmentClass,
    ProgressDirection,
    WeightUnit,
)


def step_for(unit: WeightUnit, equipment: EquipmentClass) -> float:
    """Return the rounding step for *equipment* in *unit*.

    Machines, cables, Smith machines and assist stacks use the fine step
    (2.5 lb / 1.0 kg); everything else uses the coarse step (5.0 lb / 2.5 kg).
    """
    return unit.fine_step if equipment.uses_fine_steps else unit.coarse_step


def round_to_step(raw: float, step: float) -> float:
    """Round *raw* to the nearest multiple of *step*, ties away from zero."""
    if step <= 0:
        return float(raw)
    quotient = np.abs(raw) / step
    return float(np.sign(raw) * np.floor(quotient + 0.5) * step)


def rounded(raw: float, unit: WeightUnit, equipment: EquipmentClass) -> float:
    """Quantize a raw load for the given unit and equipment class.

    Idempotent: ``rounded(rounded(w)) == rounded(w)``.

    Args:
        raw: Unrounded load.
        unit: Measurement unit.
        equipment: Equipment class; selects the fine or coarse step.

    Returns:
        The nearest valid load.
    """
    return round_to_step(raw, step_for(unit, equipment))


def apply_direction(
    base: float,
    delta: float,
    direction: ProgressDirection,
    invert: bool = False,
) -> float:
    """Move *base* by *delta* in the progression direction.

    ``INCREASE`` adds and ``DECREASE`` subtracts; ``invert=True`` flips the
    sign, which is how a regression moves one increment the opposite way.
    Every directional computation in the engine goes through here.
    """
    moves_up = (direction is ProgressDirection.INCREASE) != invert
    return base + delta if moves_up else base - delta


def progressed_load(
    last: float,
    step: float,
    direction: ProgressDirection,
    unit: WeightUnit,
    equipment: EquipmentClass,
) -> float:
    """Load after one successful session: *last* moved one *step*, then rounded.

    If rounding lands back on *last*, one more step is applied. The engine
    steps by the rounding grid itself, where that cannot happen; smaller
    steps can collapse.
    """
    raw = apply_direction(last, step, direction)
    result = rounded(raw, unit, equipment)
    if result == last:
        result = rounded(apply_direction(raw, step, direction), unit, equipment)
    return result


def next_assistance(
    current: float,
    step: float,
    unit: WeightUnit,
    minimum: float | None = DEFAULT_MIN_ASSISTANCE,
) -> float:
    """Next assist-stack value after a successful session.

    Assistance drops by *step*, never below *minimum*, then rounds on the
    fine step.

    >>> next_assistance(12, 2, WeightUnit.LB)
    10.0
    """
    floor = DEFAULT_MIN_ASSISTANCE if minimum is None else minimum
    raw = max(floor, apply_direction(current, step, ProgressDirection.DECREASE))
    return rounded(raw, unit, EquipmentClass.MACHINE_ASSISTANCE)

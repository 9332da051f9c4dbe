"""Tests for equipment-aware load rounding (math/rounding.py)."""

from __future__ import annotations

import numpy as np
import pytest

from progression_engine.math.rounding import (
    apply_direction,
    next_assistance,
    progressed_load,
    round_to_step,
    rounded,
    step_for,
)
from progression_engine.models.enums import EquipmentClass, ProgressDirection, WeightUnit


class TestStepFor:
    def test_fine_and_coarse_steps(self):
        assert step_for(WeightUnit.LB, EquipmentClass.MACHINE) == 2.5
        assert step_for(WeightUnit.LB, EquipmentClass.BARBELL) == 5.0
        assert step_for(WeightUnit.KG, EquipmentClass.CABLE) == 1.0
        assert step_for(WeightUnit.KG, EquipmentClass.DUMBBELL) == 2.5

    def test_unknown_equipment_is_coarse(self):
        assert step_for(WeightUnit.LB, EquipmentClass.UNKNOWN) == 5.0


class TestRounded:
    def test_fine_step_granularity(self):
        assert rounded(183, WeightUnit.LB, EquipmentClass.MACHINE) == 182.5

    def test_coarse_step_granularity(self):
        assert rounded(183, WeightUnit.LB, EquipmentClass.BARBELL) == 185.0
        assert rounded(61.2, WeightUnit.KG, EquipmentClass.BARBELL) == 60.0
        assert rounded(61.6, WeightUnit.KG, EquipmentClass.MACHINE) == 62.0

    def test_ties_round_half_away_from_zero(self):
        assert round_to_step(1.25, 2.5) == 2.5
        assert round_to_step(-1.25, 2.5) == -2.5
        assert round_to_step(137.5, 5.0) == 140.0
        assert round_to_step(0.5, 1.0) == 1.0

    def test_zero_stays_zero(self):
        assert rounded(0.0, WeightUnit.LB, EquipmentClass.MACHINE_ASSISTANCE) == 0.0

    def test_non_positive_step_passes_through(self):
        assert round_to_step(12.3, 0) == 12.3

    @pytest.mark.parametrize("unit", list(WeightUnit))
    @pytest.mark.parametrize("equipment", [EquipmentClass.MACHINE, EquipmentClass.BARBELL])
    def test_idempotent(self, unit: WeightUnit, equipment: EquipmentClass):
        for raw in np.linspace(-20.0, 400.0, 337):
            once = rounded(float(raw), unit, equipment)
            assert rounded(once, unit, equipment) == once


class TestApplyDirection:
    def test_increase(self):
        assert apply_direction(100.0, 5.0, ProgressDirection.INCREASE) == 105.0
        assert apply_direction(100.0, 5.0, ProgressDirection.INCREASE, invert=True) == 95.0

    def test_decrease(self):
        assert apply_direction(100.0, 5.0, ProgressDirection.DECREASE) == 95.0
        assert apply_direction(100.0, 5.0, ProgressDirection.DECREASE, invert=True) == 105.0


class TestProgressedLoad:
    def test_grid_step_moves_one_step(self):
        assert progressed_load(135.0, 5.0, ProgressDirection.INCREASE, WeightUnit.LB, EquipmentClass.BARBELL) == 140.0
        assert progressed_load(183.0, 2.5, ProgressDirection.INCREASE, WeightUnit.LB, EquipmentClass.MACHINE) == 185.0

    def test_rounding_back_to_last_bumps_again(self):
        # 137 rounds back to 135 on the 5 lb grid; 139 rounds to 140
        assert progressed_load(135.0, 2.0, ProgressDirection.INCREASE, WeightUnit.LB, EquipmentClass.BARBELL) == 140.0
        assert progressed_load(50.0, 2.0, ProgressDirection.DECREASE, WeightUnit.LB, EquipmentClass.BARBELL) == 45.0


class TestNextAssistance:
    def test_drops_by_step(self):
        assert next_assistance(12, 2, WeightUnit.LB, minimum=0) == 10.0

    def test_never_below_minimum(self):
        assert next_assistance(3, 5, WeightUnit.LB, minimum=0) == 0.0
        assert next_assistance(22.5, 5, WeightUnit.LB, minimum=20) == 20.0

    def test_none_minimum_means_zero(self):
        assert next_assistance(2.5, 5, WeightUnit.LB, minimum=None) == 0.0

    def test_rounds_on_fine_step(self):
        assert next_assistance(30, 4, WeightUnit.KG, minimum=0) == 26.0
        assert next_assistance(30, 3.3, WeightUnit.LB, minimum=0) == 27.5

"""Tests for the ordered name-heuristic tables."""

from __future__ import annotations

import pytest

from progression_engine.catalog.heuristics import (
    REP_FALLBACK_RULE,
    RULE_HEURISTICS,
    classify_kind,
    derive_rule,
    heuristic_for,
)
from progression_engine.models.enums import ProgressDirection, ProgressionKind, ProgressionMode


class TestDeriveRule:
    def test_table_order(self):
        labels = [h.label for h in RULE_HEURISTICS]
        assert labels == ["assisted", "barbell compound", "weighted bodyweight", "dumbbell press/row"]

    def test_assisted_decreases(self):
        rule = derive_rule("Assisted Dip")
        assert rule.progression_mode is ProgressionMode.WEIGHT_BASED
        assert rule.direction is ProgressDirection.DECREASE
        assert rule.weight_increment == 5.0

    def test_assisted_checked_before_barbell(self):
        # Contains "bench press" too; assisted wins because it is checked first
        assert heuristic_for("Assisted Bench Press").label == "assisted"

    @pytest.mark.parametrize(
        "name",
        ["Barbell Curl", "Bench Press", "Back Squat", "Front Squat", "Romanian Deadlift", "OHP", "Pendlay Row", "Hip Thrust"],
    )
    def test_barbell_keywords(self, name: str):
        rule = derive_rule(name)
        assert rule.weight_increment == 5.0
        assert rule.direction is ProgressDirection.INCREASE

    def test_barbell_checked_before_dumbbell(self):
        assert heuristic_for("Dumbbell Bench Press").label == "barbell compound"

    @pytest.mark.parametrize("name", ["Weighted Pull-Up", "Weight Belt Squat Hold", "Plate Dip"])
    def test_weighted_bodyweight(self, name: str):
        assert derive_rule(name).weight_increment == 2.5

    @pytest.mark.parametrize("name", ["Dumbbell Shoulder Press", "DB Row", "Incline DB Press"])
    def test_dumbbell_press_or_row(self, name: str):
        rule = derive_rule(name)
        assert rule.progression_mode is ProgressionMode.WEIGHT_BASED
        assert rule.weight_increment == 2.5

    @pytest.mark.parametrize("name", ["Dumbbell Fly", "Leg Extension", "Cable Crunch", "Squat"])
    def test_rep_fallback(self, name: str):
        assert derive_rule(name) == REP_FALLBACK_RULE
        assert REP_FALLBACK_RULE.rep_increment == 1

    def test_heuristic_rules_have_no_equipment_class(self):
        assert not derive_rule("Assisted Pull-Up").is_assisted


class TestClassifyKind:
    @pytest.mark.parametrize(
        "name",
        ["Goblet Squat", "Lat Pulldown", "Chin-Up", "Chinup", "Pullup", "Parallel Dip", "Seated Row", "RDL"],
    )
    def test_compound(self, name: str):
        assert classify_kind(name) is ProgressionKind.COMPOUND

    @pytest.mark.parametrize("name", ["Bicep Curl", "Lateral Raise", "Leg Extension", "Calf Raise"])
    def test_isolation(self, name: str):
        assert classify_kind(name) is ProgressionKind.ISOLATION

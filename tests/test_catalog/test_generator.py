"""Tests for generating a rule file from an exercise seed list."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from progression_engine.catalog.catalog import RuleCatalog
from progression_engine.catalog.generator import (
    generate_rules,
    generate_rules_file,
    load_seeds,
    rule_for_seed,
)
from progression_engine.exceptions import CatalogLoadError
from progression_engine.models.enums import EquipmentClass, ProgressDirection, ProgressionMode

SEEDS = [
    {"name": "Assisted Pull-Up", "muscleGroup": "Back", "type": "machineAssistance"},
    {"name": "Barbell Back Squat", "muscleGroup": "Quads", "type": "barbell"},
    {"name": "Weighted Dip", "muscleGroup": "Chest", "type": "bodyweightLoadable"},
    {"name": "Dumbbell Row", "muscleGroup": "Back", "type": "dumbbell"},
    {"name": "Dumbbell Curl", "muscleGroup": "Biceps", "type": "dumbbell"},
    {"name": "Leg Extension", "muscleGroup": "Quads", "type": "machine"},
]


class TestRuleForSeed:
    def test_machine_assistance(self):
        rule = rule_for_seed("Assisted Pull-Up", "machineAssistance")
        assert rule.direction is ProgressDirection.DECREASE
        assert rule.weight_increment == 5.0
        assert rule.equipment_class is EquipmentClass.MACHINE_ASSISTANCE

    def test_barbell(self):
        assert rule_for_seed("Barbell Back Squat", "barbell").weight_increment == 5.0

    def test_bodyweight_loadable(self):
        rule = rule_for_seed("Weighted Dip", "bodyweightLoadable")
        assert rule.weight_increment == 2.5
        assert rule.equipment_class is EquipmentClass.BODYWEIGHT_LOADABLE

    def test_dumbbell_press_or_row_only(self):
        assert rule_for_seed("Dumbbell Row", "dumbbell").progression_mode is ProgressionMode.WEIGHT_BASED
        assert rule_for_seed("Dumbbell Curl", "dumbbell").progression_mode is ProgressionMode.REP_BASED

    def test_other_types_are_rep_based_with_type_kept(self):
        rule = rule_for_seed("Leg Extension", "machine")
        assert rule.progression_mode is ProgressionMode.REP_BASED
        assert rule.rep_increment == 1
        assert rule.equipment_class is EquipmentClass.MACHINE

    def test_rule_usable_without_round_trip(self):
        assisted = rule_for_seed("Assisted Pull-Up", "machineAssistance")
        assert assisted.is_assisted
        assert assisted.equipment_class.uses_fine_steps
        assert rule_for_seed("Barbell Back Squat", "barbell").equipment_class is EquipmentClass.BARBELL
        assert rule_for_seed("Mystery", "sled").equipment_class is EquipmentClass.UNKNOWN


class TestGenerateRules:
    def test_one_record_per_seed(self):
        exercises = generate_rules(SEEDS)
        assert set(exercises) == {seed["name"] for seed in SEEDS}
        assert exercises["Assisted Pull-Up"]["type"] == "machineAssistance"
        assert exercises["Assisted Pull-Up"]["progressDirection"] == "decrease"

    def test_seeds_without_name_or_type_skipped(self):
        exercises = generate_rules([{"name": "Plank"}, {"type": "barbell"}, {"name": "Dip", "type": "bodyweightOnly"}])
        assert list(exercises) == ["Dip"]

    def test_generated_file_loads_into_catalog(self, tmp_path: Path):
        seed_path = tmp_path / "seeds.json"
        seed_path.write_text(json.dumps(SEEDS), encoding="utf-8")
        out = generate_rules_file(seed_path, tmp_path / "out" / "ProgressionRules.json")

        assert not out.with_suffix(".json.tmp").exists()
        catalog = RuleCatalog.from_paths([out])
        assert len(catalog) == len(SEEDS)
        assert catalog.rule_for("assisted pull-up").is_assisted
        assert catalog.rule_for("Leg Extension").equipment_class is EquipmentClass.MACHINE


class TestLoadSeeds:
    def test_rejects_non_array(self, tmp_path: Path):
        path = tmp_path / "seeds.json"
        path.write_text(json.dumps({"name": "Dip"}), encoding="utf-8")
        with pytest.raises(CatalogLoadError):
            load_seeds(path)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(CatalogLoadError):
            load_seeds(tmp_path / "absent.json")

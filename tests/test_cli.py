"""Tests for the progression-engine command line."""

from __future__ import annotations

import json
from pathlib import Path
from uuid import UUID

import pytest

from progression_engine import cli
from progression_engine.catalog import catalog as catalog_module
from progression_engine.models.enums import MIGRATED_FLAG_KEY
from progression_engine.storage.backend import FileBackend
from progression_engine.storage.legacy import LegacyTargetStore

MESO = UUID("6f1c2b9e-3d4a-4c5b-9e8f-0a1b2c3d4e5f")


@pytest.fixture(autouse=True)
def no_generated_rules(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point the generated rule file somewhere empty so the bundled file is used."""
    absent = tmp_path / "no-such-rules.json"
    monkeypatch.setattr(catalog_module, "GENERATED_RULES_PATH", absent)
    monkeypatch.setattr(cli, "GENERATED_RULES_PATH", absent)


class TestRuleCommand:
    def test_explicit_rule(self, capsys):
        assert cli.main(["rule", "assisted pull-up"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["source"].endswith("progression_rules.json")
        assert payload["kind"] == "compound"
        assert payload["rule"]["type"] == "machineAssistance"

    def test_heuristic_rule(self, capsys):
        assert cli.main(["rule", "Hammer Curl"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["source"] == "name heuristics"
        assert payload["kind"] == "isolation"
        assert payload["rule"]["progression"] == "reps"


class TestValidateCommand:
    def test_clean_bundled_file(self):
        assert cli.main(["validate-catalog"]) == 0

    def test_warnings_exit_one(self, tmp_path: Path, capsys):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"exercises": {"Leg Press": {"progression": "weight"}}}), encoding="utf-8")
        assert cli.main(["validate-catalog", "--path", str(path)]) == 1
        assert "weightIncrement" in capsys.readouterr().out

    def test_unreadable_file_exit_two(self, tmp_path: Path):
        path = tmp_path / "rules.json"
        path.write_text("nope", encoding="utf-8")
        assert cli.main(["validate-catalog", "--path", str(path)]) == 2


class TestGenerateCommand:
    def test_writes_rule_file(self, tmp_path: Path):
        seeds = tmp_path / "seeds.json"
        seeds.write_text(json.dumps([{"name": "Back Squat", "type": "barbell"}]), encoding="utf-8")
        out = tmp_path / "ProgressionRules.json"
        assert cli.main(["generate-rules", str(seeds), str(out)]) == 0
        assert json.loads(out.read_text(encoding="utf-8"))["exercises"]["Back Squat"]["weightIncrement"] == 5.0

    def test_bad_seed_file(self, tmp_path: Path):
        assert cli.main(["generate-rules", str(tmp_path / "absent.json"), str(tmp_path / "out.json")]) == 2


class TestStoreCommands:
    def test_migrate_then_list_targets(self, tmp_path: Path, capsys):
        store_dir = tmp_path / "store"
        LegacyTargetStore(FileBackend(store_dir)).put(MESO, "Bench Press", 135.0, 6, 8)

        assert cli.main(["migrate", "--store-dir", str(store_dir)]) == 0
        assert "Migrated 1" in capsys.readouterr().out
        assert FileBackend(store_dir).read_flag(MIGRATED_FLAG_KEY)

        assert cli.main(["targets", "--store-dir", str(store_dir), "--mesocycle", str(MESO)]) == 0
        targets = json.loads(capsys.readouterr().out)
        assert targets == {
            f"{MESO}::bench press": {
                "nextWeight": 135.0,
                "nextRepTargetLower": 6,
                "nextRepTargetUpper": 8,
                "missStreak": 0,
                "lastAction": "held",
                "lastUpdatedAt": None,
            }
        }

    def test_targets_filtered_by_mesocycle(self, tmp_path: Path, capsys):
        store_dir = tmp_path / "store"
        LegacyTargetStore(FileBackend(store_dir)).put(MESO, "Bench Press", 135.0, 6, 8)
        cli.main(["migrate", "--store-dir", str(store_dir)])
        capsys.readouterr()

        assert cli.main(["targets", "--store-dir", str(store_dir), "--mesocycle", "other"]) == 0
        assert json.loads(capsys.readouterr().out) == {}

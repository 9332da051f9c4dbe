"""Generate a rule file from an exercise seed list.

The seed list is the exercise library (``[{"name", "muscleGroup", "type",
...}]``). Each exercise gets a rule chosen from its equipment type, with the
type carried into the rule so the equipment class survives.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Iterable, Mapping

from progression_engine.exceptions import CatalogLoadError
from progression_engine.models.enums import EquipmentClass, ProgressDirection, ProgressionMode
from progression_engine.models.rule import ProgressionRule

logger = logging.getLogger(__name__)


def rule_for_seed(name: str, equipment_type: str) -> ProgressionRule:
    """Pick a rule for one seed exercise from its equipment type.

    machineassistance: weight, decreasing by 5. barbell: +5.
    bodyweightloadable: +2.5. dumbbell presses and rows: +2.5.
    Anything else adds one rep.
    """
    kind = equipment_type.strip().lower()
    lower = name.lower()

    if kind == "machineassistance":
        return _weight_rule(5.0, equipment_type, ProgressDirection.DECREASE)
    if kind == "barbell":
        return _weight_rule(5.0, equipment_type)
    if kind == "bodyweightloadable":
        return _weight_rule(2.5, equipment_type)
    if kind == "dumbbell" and ("press" in lower or "row" in lower):
        return _weight_rule(2.5, equipment_type)
    return ProgressionRule(
        progression_mode=ProgressionMode.REP_BASED,
        rep_increment=1,
        equipment_class=EquipmentClass.parse(equipment_type),
        raw_equipment=equipment_type,
    )


def _weight_rule(
    increment: float,
    equipment_type: str,
    direction: ProgressDirection = ProgressDirection.INCREASE,
) -> ProgressionRule:
    return ProgressionRule(
        progression_mode=ProgressionMode.WEIGHT_BASED,
        weight_increment=increment,
        direction=direction,
        equipment_class=EquipmentClass.parse(equipment_type),
        raw_equipment=equipment_type,
    )


def generate_rules(seeds: Iterable[Mapping[str, Any]]) -> dict[str, dict[str, Any]]:
    """Build the ``exercises`` mapping for a rule file.

    Seeds without a string ``name`` and ``type`` are skipped.
    """
    exercises: dict[str, dict[str, Any]] = {}
    for seed in seeds:
        name = seed.get("name")
        equipment_type = seed.get("type")
        if not isinstance(name, str) or not isinstance(equipment_type, str):
            logger.warning("Skipping seed without name/type: %r", seed)
            continue
        exercises[name] = rule_for_seed(name, equipment_type).to_record()
    return exercises


def load_seeds(path: Path | str) -> list[dict[str, Any]]:
    """Read an exercise seed list (a JSON array of objects).

    Raises:
        CatalogLoadError: if the file is unreadable or not a JSON array.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogLoadError(f"Cannot read seed file {path}: {exc}", path=str(path)) from exc
    if not isinstance(raw, list):
        raise CatalogLoadError(f"Seed file {path} is not a JSON array", path=str(path))
    return [item for item in raw if isinstance(item, dict)]


def write_rules_file(exercises: Mapping[str, Mapping[str, Any]], path: Path | str) -> Path:
    """Write ``{"exercises": ...}`` atomically (temp file, then rename)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump({"exercises": exercises}, f, indent=2, sort_keys=True, ensure_ascii=False)
    os.replace(tmp_path, path)
    logger.info("Wrote %d rules to %s", len(exercises), path)
    return path


def generate_rules_file(seed_path: Path | str, out_path: Path | str) -> Path:
    """Read a seed list and write the generated rule file."""
    return write_rules_file(generate_rules(load_seeds(seed_path)), out_path)

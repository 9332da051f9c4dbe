"""Per-exercise progression rule, as loaded from a rule file or derived heuristically."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from progression_engine.models.enums import (
    DEFAULT_REP_INCREMENT,
    EquipmentClass,
    ProgressDirection,
    ProgressionMode,
)


@dataclass(frozen=True)
class ProgressionRule:
    """How one exercise progresses.

    ``progression_mode`` picks the decision branch: weight-based rules move
    the load, rep-based rules move the rep window. Assistance bounds only
    mean something for ``EquipmentClass.MACHINE_ASSISTANCE``.
    """

    progression_mode: ProgressionMode
    weight_increment: float | None = None
    rep_increment: int = DEFAULT_REP_INCREMENT
    direction: ProgressDirection = ProgressDirection.INCREASE
    equipment_class: EquipmentClass = EquipmentClass.UNKNOWN
    min_assistance: float | None = None
    max_assistance: float | None = None
    assistance_step: float | None = None

    # Raw equipment string from the rule file, kept for validator messages
    raw_equipment: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ProgressionRule":
        """Build a rule from a rule-file record.

        Field names follow the file format: ``progression``,
        ``weightIncrement``, ``repIncrement``, ``progressDirection``,
        ``type``, ``minAssistance``, ``maxAssistance``, ``assistanceStep``.

        Raises:
            ValueError: if a numeric field holds a non-numeric value.
        """
        rep_increment = record.get("repIncrement")
        raw_type = record.get("type")
        return cls(
            progression_mode=ProgressionMode.parse(record.get("progression")),
            weight_increment=_optional_float(record, "weightIncrement"),
            rep_increment=int(rep_increment) if rep_increment is not None else DEFAULT_REP_INCREMENT,
            direction=ProgressDirection.parse(record.get("progressDirection")),
            equipment_class=EquipmentClass.parse(raw_type),
            min_assistance=_optional_float(record, "minAssistance"),
            max_assistance=_optional_float(record, "maxAssistance"),
            assistance_step=_optional_float(record, "assistanceStep"),
            raw_equipment=raw_type if isinstance(raw_type, str) else None,
        )

    def to_record(self) -> dict[str, Any]:
        """Serialize back to the rule-file record layout, omitting unset fields."""
        record: dict[str, Any] = {
            "progression": self.progression_mode.value,
            "progressDirection": self.direction.value,
        }
        if self.weight_increment is not None:
            record["weightIncrement"] = self.weight_increment
        if self.progression_mode is ProgressionMode.REP_BASED or self.rep_increment != DEFAULT_REP_INCREMENT:
            record["repIncrement"] = self.rep_increment
        if self.raw_equipment is not None:
            record["type"] = self.raw_equipment
        elif self.equipment_class is not EquipmentClass.UNKNOWN:
            record["type"] = self.equipment_class.value
        for key, value in (
            ("minAssistance", self.min_assistance),
            ("maxAssistance", self.max_assistance),
            ("assistanceStep", self.assistance_step),
        ):
            if value is not None:
                record[key] = value
        return record

    @property
    def is_assisted(self) -> bool:
        return self.equipment_class is EquipmentClass.MACHINE_ASSISTANCE


def _optional_float(record: Mapping[str, Any], key: str) -> float | None:
    value = record.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"{key} must be a number, got {value!r}")
    return float(value)

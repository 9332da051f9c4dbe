"""Catalog validator: actionable warnings about malformed rule entries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from progression_engine.models.enums import EquipmentClass, ProgressionMode
from progression_engine.models.rule import ProgressionRule
from progression_engine.normalizer import normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogWarning:
    """A single validation finding for one exercise."""

    exercise: str
    message: str

    def __str__(self) -> str:
        return f"{self.exercise}: {self.message}"


def validate_records(records: Mapping[str, Any]) -> list[CatalogWarning]:
    """Check raw rule records (display name -> record) for problems.

    Reports unknown equipment types, weight-based rules without a
    ``weightIncrement``, assisted rules missing ``minAssistance`` or
    ``assistanceStep``, inverted assistance bounds, unparseable records and
    names that collide after normalization.
    """
    warnings: list[CatalogWarning] = []
    seen: dict[str, str] = {}

    for name, record in records.items():
        key = normalize(name)
        if key in seen:
            warnings.append(CatalogWarning(name, f"duplicate of {seen[key]!r} after normalization"))
        else:
            seen[key] = name

        if not isinstance(record, Mapping):
            warnings.append(CatalogWarning(name, "record is not an object"))
            continue
        try:
            rule = ProgressionRule.from_record(record)
        except (TypeError, ValueError) as exc:
            warnings.append(CatalogWarning(name, f"unparseable record: {exc}"))
            continue

        warnings.extend(validate_rule(name, rule))

    for warning in warnings:
        logger.debug("Catalog warning: %s", warning)
    return warnings


def validate_rule(name: str, rule: ProgressionRule) -> list[CatalogWarning]:
    """Per-rule checks; see :func:`validate_records`."""
    warnings: list[CatalogWarning] = []

    if rule.equipment_class is EquipmentClass.UNKNOWN:
        detail = f" {rule.raw_equipment!r}" if rule.raw_equipment else ""
        warnings.append(CatalogWarning(name, f"unknown equipment type{detail}"))

    if rule.progression_mode is ProgressionMode.WEIGHT_BASED and rule.weight_increment is None:
        warnings.append(CatalogWarning(name, "weight progression without weightIncrement"))

    if rule.is_assisted:
        if rule.min_assistance is None or rule.assistance_step is None:
            warnings.append(CatalogWarning(name, "assisted rule missing minAssistance or assistanceStep"))
        if (
            rule.min_assistance is not None
            and rule.max_assistance is not None
            and rule.min_assistance > rule.max_assistance
        ):
            warnings.append(CatalogWarning(name, "minAssistance exceeds maxAssistance"))

    return warnings

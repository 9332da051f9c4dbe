"""Data models for the progression engine."""

from progression_engine.models.decision_trace import DecisionTrace
from progression_engine.models.enums import (
    EquipmentClass,
    LastAction,
    ProgressDirection,
    ProgressionAction,
    ProgressionKind,
    ProgressionMode,
    WeightUnit,
)
from progression_engine.models.progress import ProgressInput, ProgressOutput
from progression_engine.models.rule import ProgressionRule
from progression_engine.models.set_log import SetLogEntry, TopSet
from progression_engine.models.target import LegacyTarget, RepRange, StoredTarget

__all__ = [
    "DecisionTrace",
    "EquipmentClass",
    "LastAction",
    "LegacyTarget",
    "ProgressDirection",
    "ProgressInput",
    "ProgressOutput",
    "ProgressionAction",
    "ProgressionKind",
    "ProgressionMode",
    "ProgressionRule",
    "RepRange",
    "SetLogEntry",
    "StoredTarget",
    "TopSet",
    "WeightUnit",
]

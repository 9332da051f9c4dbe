"""Progression rule catalog: rule files, name heuristics, generation and validation."""

from progression_engine.catalog.catalog import RuleCatalog, load_rules_file
from progression_engine.catalog.heuristics import classify_kind, derive_rule
from progression_engine.catalog.validator import CatalogWarning, validate_records

__all__ = [
    "CatalogWarning",
    "RuleCatalog",
    "classify_kind",
    "derive_rule",
    "load_rules_file",
    "validate_records",
]

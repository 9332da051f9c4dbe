"""Rule catalog: per-exercise progression rules from a rule file, with heuristic fallback."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from progression_engine.catalog.heuristics import derive_rule
from progression_engine.config import BUNDLED_RULES_PATH, GENERATED_RULES_PATH
from progression_engine.exceptions import CatalogLoadError
from progression_engine.models.rule import ProgressionRule
from progression_engine.normalizer import normalize

logger = logging.getLogger(__name__)


def read_rule_records(path: Path | str) -> dict[str, Any]:
    """Read the raw ``exercises`` mapping (display name -> record) of a rule file.

    The file layout is ``{"exercises": {"<display name>": {rule record}}}``.

    Raises:
        CatalogLoadError: if the file cannot be read, is not valid JSON, or
            has no ``exercises`` object.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise CatalogLoadError(f"Cannot read rule file {path}: {exc}", path=str(path)) from exc

    exercises = raw.get("exercises") if isinstance(raw, dict) else None
    if not isinstance(exercises, dict):
        raise CatalogLoadError(f"Rule file {path} has no 'exercises' mapping", path=str(path))
    return exercises


def load_rules_file(path: Path | str) -> dict[str, ProgressionRule]:
    """Parse a rule file into a mapping of normalized name -> rule.

    Raises:
        CatalogLoadError: if the file is unreadable or an entry is malformed.
    """
    return parse_rule_records(read_rule_records(path), source=str(path))


def parse_rule_records(records: Mapping[str, Any], source: str = "<memory>") -> dict[str, ProgressionRule]:
    """Convert display-name keyed records into normalized-name keyed rules.

    Raises:
        CatalogLoadError: if any record is not a mapping or has bad field types.
    """
    rules: dict[str, ProgressionRule] = {}
    for name, record in records.items():
        if not isinstance(record, Mapping):
            raise CatalogLoadError(f"Rule for {name!r} in {source} is not an object", path=source)
        try:
            rules[normalize(name)] = ProgressionRule.from_record(record)
        except (TypeError, ValueError) as exc:
            raise CatalogLoadError(f"Bad rule for {name!r} in {source}: {exc}", path=source) from exc
    return rules


class RuleCatalog:
    """Resolves a ProgressionRule for any exercise name.

    Explicit entries come from the first readable rule file among
    *search_paths* (a generated file, then the bundled one). Missing or
    unreadable files are skipped with a warning; when none loads, every
    lookup falls through to the name heuristics. ``rule_for`` never fails.

    Usage:
        catalog = RuleCatalog.from_paths([generated_path, bundled_path])
        rule = catalog.rule_for("Barbell Back Squat")
    """

    def __init__(self, rules: Mapping[str, ProgressionRule] | None = None) -> None:
        self._rules: dict[str, ProgressionRule] = dict(rules or {})
        self.source: str | None = None

    @classmethod
    def from_paths(cls, search_paths: Iterable[Path | str]) -> "RuleCatalog":
        """Load the first rule file that exists and parses; empty catalog otherwise."""
        for path in search_paths:
            path = Path(path)
            if not path.exists():
                logger.debug("No rule file at %s", path)
                continue
            try:
                rules = load_rules_file(path)
            except CatalogLoadError as exc:
                logger.warning("Ignoring rule file: %s", exc)
                continue
            catalog = cls(rules)
            catalog.source = str(path)
            logger.info("Loaded %d progression rules from %s", len(rules), path)
            return catalog

        logger.info("No rule file loaded; using name heuristics only")
        return cls()

    @classmethod
    def from_config(cls) -> "RuleCatalog":
        """Load using the configured generated and bundled rule paths."""
        return cls.from_paths([GENERATED_RULES_PATH, BUNDLED_RULES_PATH])

    def explicit_rule(self, exercise_name: str) -> ProgressionRule | None:
        """Rule-file entry for the exercise, without heuristic fallback."""
        return self._rules.get(normalize(exercise_name))

    def rule_for(self, exercise_name: str) -> ProgressionRule:
        """Resolve the exercise's rule: explicit entry first, then name heuristics."""
        explicit = self.explicit_rule(exercise_name)
        if explicit is not None:
            return explicit
        return derive_rule(exercise_name)

    def items(self) -> list[tuple[str, ProgressionRule]]:
        """All explicit (normalized name, rule) pairs, sorted by name."""
        return sorted(self._rules.items())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, exercise_name: object) -> bool:
        return isinstance(exercise_name, str) and normalize(exercise_name) in self._rules

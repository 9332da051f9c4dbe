"""Name-based fallback policies.

Two ordered tables of (predicate, result) pairs, evaluated first match wins:

* ``RULE_HEURISTICS`` derives a ProgressionRule for exercises the rule file
  does not list.
* ``COMPOUND_KEYWORDS`` classifies an exercise as compound (weight-based) or
  isolation (rep-based) when its rule does not say.

Predicates receive the lowercased raw display name, not the normalized key.
The order of entries is the policy; do not sort them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from progression_engine.models.enums import (
    ProgressDirection,
    ProgressionKind,
    ProgressionMode,
)
from progression_engine.models.rule import ProgressionRule


@dataclass(frozen=True)
class Heuristic:
    """One row of a fallback table."""

    label: str
    matches: Callable[[str], bool]
    rule: ProgressionRule


def contains_any(*needles: str) -> Callable[[str], bool]:
    """Predicate: the name contains at least one of *needles*."""
    return lambda name: any(needle in name for needle in needles)


def contains_all_groups(*groups: tuple[str, ...]) -> Callable[[str], bool]:
    """Predicate: for every group, the name contains one of its needles."""
    return lambda name: all(any(needle in name for needle in group) for group in groups)


# Heavy barbell lifts; "ohp" and "pendlay" catch common shorthand
_BARBELL_KEYWORDS = (
    "barbell",
    "bench press",
    "back squat",
    "front squat",
    "deadlift",
    "overhead press",
    "ohp",
    "barbell row",
    "pendlay",
    "hip thrust",
)

# Bodyweight movements loaded with a belt or plate
_WEIGHTED_BODYWEIGHT_KEYWORDS = (
    "weighted ",
    "weight belt",
    "plate dip",
    "plate pull-up",
)

REP_FALLBACK_RULE = ProgressionRule(
    progression_mode=ProgressionMode.REP_BASED,
    rep_increment=1,
    direction=ProgressDirection.INCREASE,
)

RULE_HEURISTICS: tuple[Heuristic, ...] = (
    Heuristic(
        label="assisted",
        matches=contains_any("assisted"),
        rule=ProgressionRule(
            progression_mode=ProgressionMode.WEIGHT_BASED,
            weight_increment=5.0,
            direction=ProgressDirection.DECREASE,
        ),
    ),
    Heuristic(
        label="barbell compound",
        matches=contains_any(*_BARBELL_KEYWORDS),
        rule=ProgressionRule(
            progression_mode=ProgressionMode.WEIGHT_BASED,
            weight_increment=5.0,
        ),
    ),
    Heuristic(
        label="weighted bodyweight",
        matches=contains_any(*_WEIGHTED_BODYWEIGHT_KEYWORDS),
        rule=ProgressionRule(
            progression_mode=ProgressionMode.WEIGHT_BASED,
            weight_increment=2.5,
        ),
    ),
    Heuristic(
        label="dumbbell press/row",
        matches=contains_all_groups(("dumbbell", "db"), ("press", "row")),
        rule=ProgressionRule(
            progression_mode=ProgressionMode.WEIGHT_BASED,
            weight_increment=2.5,
        ),
    ),
)

COMPOUND_KEYWORDS: tuple[str, ...] = (
    "squat",
    "deadlift",
    "bench",
    "overhead",
    "ohp",
    "row",
    "press",
    "pull-up",
    "pulldown",
    "dip",
    "hip thrust",
    "rdl",
    "barbell",
    "front squat",
    "incline bench",
    "pendlay",
    "pullup",
    "chin-up",
    "chinup",
)


def heuristic_for(name: str) -> Heuristic | None:
    """Return the first matching rule heuristic for a display name, if any."""
    lower = name.lower()
    for heuristic in RULE_HEURISTICS:
        if heuristic.matches(lower):
            return heuristic
    return None


def derive_rule(name: str) -> ProgressionRule:
    """Derive a rule from the display name; rep-based +1 when nothing matches."""
    heuristic = heuristic_for(name)
    return heuristic.rule if heuristic is not None else REP_FALLBACK_RULE


def classify_kind(name: str) -> ProgressionKind:
    """Compound if the name mentions any compound keyword, else isolation."""
    lower = name.lower()
    if contains_any(*COMPOUND_KEYWORDS)(lower):
        return ProgressionKind.COMPOUND
    return ProgressionKind.ISOLATION

"""Enumerations and named constants for the progression engine.

String-valued enums are the ones that cross a file boundary (rule files and
the persisted target cache); their values are the exact strings written there.
"""

from enum import Enum, IntEnum, auto


class ProgressionMode(Enum):
    """How an exercise progresses, as declared by its rule."""

    WEIGHT_BASED = "weight"
    REP_BASED = "reps"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: str | None) -> "ProgressionMode":
        """Map a rule-file ``progression`` string; anything unrecognised is UNKNOWN."""
        if not isinstance(raw, str):
            return cls.UNKNOWN
        lowered = raw.strip().lower()
        for member in cls:
            if member.value == lowered:
                return member
        return cls.UNKNOWN


class ProgressDirection(Enum):
    """Which way the load moves when the trainee progresses."""

    INCREASE = "increase"
    DECREASE = "decrease"

    @classmethod
    def parse(cls, raw: str | None) -> "ProgressDirection":
        if isinstance(raw, str) and raw.strip().lower() == cls.DECREASE.value:
            return cls.DECREASE
        return cls.INCREASE


class EquipmentClass(Enum):
    """Equipment type; selects the rounding granularity."""

    BARBELL = "barbell"
    DUMBBELL = "dumbbell"
    MACHINE = "machine"
    CABLE = "cable"
    SMITH_MACHINE = "smithmachine"
    MACHINE_ASSISTANCE = "machineassistance"
    BODYWEIGHT_ONLY = "bodyweightonly"
    BODYWEIGHT_LOADABLE = "bodyweightloadable"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: str | None) -> "EquipmentClass":
        """Map a rule-file ``type`` string (case-insensitive); unknown strings map to UNKNOWN."""
        if not isinstance(raw, str):
            return cls.UNKNOWN
        lowered = raw.strip().lower()
        for member in cls:
            if member.value == lowered:
                return member
        return cls.UNKNOWN

    @property
    def uses_fine_steps(self) -> bool:
        return self in FINE_STEP_EQUIPMENT


class WeightUnit(Enum):
    """Measurement unit for loads."""

    LB = "lb"
    KG = "kg"

    @property
    def coarse_step(self) -> float:
        return UNIT_STEPS[self][0]

    @property
    def fine_step(self) -> float:
        return UNIT_STEPS[self][1]

    @property
    def default_weight_increment(self) -> float:
        """Increment used when a rule does not name one."""
        return DEFAULT_WEIGHT_INCREMENT[self]


class ProgressionAction(Enum):
    """The decision returned to the caller."""

    PROGRESS = "progress"
    HOLD = "hold"
    REGRESS = "regress"


class LastAction(Enum):
    """The decision as persisted in a StoredTarget."""

    PROGRESSED = "progressed"
    HELD = "held"
    REGRESSED = "regressed"

    @classmethod
    def from_action(cls, action: ProgressionAction) -> "LastAction":
        return _ACTION_TO_LAST[action]


class ProgressionKind(IntEnum):
    """Which decision branch applies to an exercise."""

    COMPOUND = auto()  # weight-based
    ISOLATION = auto()  # rep-based


_ACTION_TO_LAST = {
    ProgressionAction.PROGRESS: LastAction.PROGRESSED,
    ProgressionAction.HOLD: LastAction.HELD,
    ProgressionAction.REGRESS: LastAction.REGRESSED,
}


# ---------------------------------------------------------------------------
# Load granularity
# ---------------------------------------------------------------------------
# (coarse, fine) plate/pin steps per unit
UNIT_STEPS = {
    WeightUnit.LB: (5.0, 2.5),
    WeightUnit.KG: (2.5, 1.0),
}

# Machines, cables and assist stacks move in pin-sized steps
FINE_STEP_EQUIPMENT = frozenset({
    EquipmentClass.MACHINE,
    EquipmentClass.CABLE,
    EquipmentClass.SMITH_MACHINE,
    EquipmentClass.MACHINE_ASSISTANCE,
})

DEFAULT_WEIGHT_INCREMENT = {
    WeightUnit.LB: 5.0,
    WeightUnit.KG: 2.5,
}

DEFAULT_REP_INCREMENT = 1
DEFAULT_MIN_ASSISTANCE = 0.0

# ---------------------------------------------------------------------------
# Hysteresis
# ---------------------------------------------------------------------------
# Consecutive misses on a weight-based exercise before the load regresses
REGRESSION_MISS_STREAK = 2

# ---------------------------------------------------------------------------
# Persisted store keys
# ---------------------------------------------------------------------------
TARGETS_STORE_KEY = "progression.nextTargets.v2"
LEGACY_TARGETS_STORE_KEY = "progression.nextTargets.v1"
MIGRATED_FLAG_KEY = "progression.migratedToV2"
KEY_SEPARATOR = "::"

"""Environment-variable-based configuration."""

from __future__ import annotations

import os
from pathlib import Path

_PACKAGE_DATA = Path(__file__).parent / "data"

GENERATED_RULES_PATH: Path = Path(
    os.environ.get("PROGRESSION_RULES_PATH", "~/.progression_engine/ProgressionRules.json")
).expanduser()
BUNDLED_RULES_PATH: Path = Path(
    os.environ.get("PROGRESSION_BUNDLED_RULES_PATH", str(_PACKAGE_DATA / "progression_rules.json"))
)
STORE_DIR: Path = Path(
    os.environ.get("PROGRESSION_STORE_DIR", "~/.progression_engine/store")
).expanduser()
DEFAULT_WEIGHT_UNIT: str = os.environ.get("PROGRESSION_WEIGHT_UNIT", "lb")
LOG_LEVEL: str = os.environ.get("PROGRESSION_LOG_LEVEL", "INFO")

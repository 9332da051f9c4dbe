"""Exercise-name normalization.

Every key into the rule catalog, the target store and the set log goes
through :func:`normalize`; display names are never used as keys directly.
"""

from __future__ import annotations

import re
from uuid import UUID

from progression_engine.models.enums import KEY_SEPARATOR

# Characters stripped from both ends of a name, along with any whitespace
EDGE_PUNCTUATION = "-_/()[]{}·•—–"

_SPACE_RUN = re.compile(r"[ \t]{2,}|\t")
_EDGES = re.compile(
    r"^[\s{chars}]+|[\s{chars}]+$".format(chars=re.escape(EDGE_PUNCTUATION))
)


def normalize(raw: str) -> str:
    """Canonicalize an exercise display name into a stable lookup key.

    Trims, lowercases, collapses runs of spaces/tabs to one space and strips
    edge punctuation together with surrounding whitespace. Internal
    punctuation is kept. Idempotent: ``normalize(normalize(x)) == normalize(x)``.

    >>> normalize("  Bench  Press (Incline) ")
    'bench press (incline'
    """
    s = raw.strip().lower()
    s = _SPACE_RUN.sub(" ", s)
    s = _EDGES.sub("", s)
    return _SPACE_RUN.sub(" ", s)


def make_store_key(mesocycle_id: UUID | str, exercise_name: str) -> str:
    """Build a ``"<mesocycle>::<normalized name>"`` target-store key."""
    return f"{mesocycle_id}{KEY_SEPARATOR}{normalize(exercise_name)}"

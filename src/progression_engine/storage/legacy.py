"""Legacy (v1) target cache, read for one-time migration.

The v1 cache predates miss streaks: each ``"<uuid>::<lowercased name>"`` key
holds only the next weight and rep window.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from uuid import UUID

from progression_engine.exceptions import LegacyEntryError
from progression_engine.models.enums import KEY_SEPARATOR, LEGACY_TARGETS_STORE_KEY
from progression_engine.models.target import LegacyTarget
from progression_engine.storage.backend import KeyValueBackend
from progression_engine.storage.codec import decode_legacy_blob, decode_legacy_entry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LegacyLoad:
    """Result of reading the v1 cache: converted rows plus the rows that failed."""

    entries: tuple[LegacyTarget, ...] = ()
    skipped: tuple[LegacyEntryError, ...] = ()


class LegacyTargetStore:
    """Synchronous access to the v1 blob in a KeyValueBackend."""

    def __init__(self, backend: KeyValueBackend, key: str = LEGACY_TARGETS_STORE_KEY) -> None:
        self._backend = backend
        self._key = key

    def load(self) -> LegacyLoad:
        """Read and convert every v1 row.

        Raises:
            StorageReadError, StorageDecodeError: if the blob as a whole
                cannot be read or is not a JSON object.
        """
        data = self._backend.read(self._key)
        if data is None:
            return LegacyLoad()

        entries: list[LegacyTarget] = []
        skipped: list[LegacyEntryError] = []
        for key, record in decode_legacy_blob(data).items():
            try:
                entries.append(decode_legacy_entry(key, record))
            except LegacyEntryError as exc:
                skipped.append(exc)
        return LegacyLoad(entries=tuple(entries), skipped=tuple(skipped))

    def put(
        self,
        mesocycle_id: UUID,
        exercise_name: str,
        next_weight: float | None = None,
        next_rep_lower: int | None = None,
        next_rep_upper: int | None = None,
    ) -> None:
        """Write one v1 row, keyed the way the v1 cache keyed them (lowercased name)."""
        data = self._backend.read(self._key)
        raw = decode_legacy_blob(data) if data is not None else {}
        raw[f"{mesocycle_id}{KEY_SEPARATOR}{exercise_name.lower()}"] = {
            "nextWeight": next_weight,
            "nextRepTargetLower": next_rep_lower,
            "nextRepTargetUpper": next_rep_upper,
        }
        self._backend.write(self._key, json.dumps(raw, sort_keys=True).encode("utf-8"))
        logger.debug("Wrote legacy target for %s", exercise_name)

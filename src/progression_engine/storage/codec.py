"""JSON codecs for the persisted target caches.

Current schema, one object per ``"<mesocycle>::<exercise key>"``::

    {"nextWeight": 140.0, "nextRepTargetLower": 8, "nextRepTargetUpper": 10,
     "missStreak": 0, "lastAction": "progressed",
     "lastUpdatedAt": "2025-09-23T18:04:11+00:00"}

The legacy (v1) schema has only the first three fields. Decoding failures
raise ``StorageDecodeError`` / ``LegacyEntryError``.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Mapping
from uuid import UUID

from progression_engine.exceptions import LegacyEntryError, StorageDecodeError
from progression_engine.models.enums import KEY_SEPARATOR, LastAction
from progression_engine.models.target import LegacyTarget, RepRange, StoredTarget


def encode_target(target: StoredTarget) -> dict[str, Any]:
    return {
        "nextWeight": target.next_weight,
        "nextRepTargetLower": target.next_rep_range.lower if target.next_rep_range else None,
        "nextRepTargetUpper": target.next_rep_range.upper if target.next_rep_range else None,
        "missStreak": target.miss_streak,
        "lastAction": target.last_action.value if target.last_action else None,
        "lastUpdatedAt": target.last_updated_at.isoformat() if target.last_updated_at else None,
    }


def decode_target(record: Mapping[str, Any]) -> StoredTarget:
    """Decode one stored-target object.

    Raises:
        ValueError, TypeError, KeyError: on a malformed record.
    """
    miss_streak = record.get("missStreak", 0)
    if isinstance(miss_streak, bool) or not isinstance(miss_streak, int) or miss_streak < 0:
        raise ValueError(f"missStreak must be a non-negative integer, got {miss_streak!r}")

    last_action = record.get("lastAction")
    updated_at = record.get("lastUpdatedAt")
    return StoredTarget(
        next_weight=_optional_number(record.get("nextWeight")),
        next_rep_range=_rep_range(record.get("nextRepTargetLower"), record.get("nextRepTargetUpper")),
        miss_streak=miss_streak,
        last_action=LastAction(last_action) if last_action is not None else None,
        last_updated_at=datetime.fromisoformat(updated_at) if updated_at is not None else None,
    )


def encode_cache(cache: Mapping[str, StoredTarget]) -> bytes:
    """Serialize the whole key -> target mapping."""
    payload = {key: encode_target(target) for key, target in cache.items()}
    return json.dumps(payload, sort_keys=True).encode("utf-8")


def decode_cache(data: bytes) -> dict[str, StoredTarget]:
    """Deserialize a cache blob written by :func:`encode_cache`.

    Raises:
        StorageDecodeError: if the blob or any entry does not decode.
    """
    raw = _load_object(data)
    cache: dict[str, StoredTarget] = {}
    for key, record in raw.items():
        if not isinstance(record, dict):
            raise StorageDecodeError(f"Entry {key!r} is not an object", key=key)
        try:
            cache[key] = decode_target(record)
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageDecodeError(f"Entry {key!r} does not decode: {exc}", key=key) from exc
    return cache


def decode_legacy_blob(data: bytes) -> dict[str, Any]:
    """Split a legacy blob into raw per-key records; entries are converted separately.

    Raises:
        StorageDecodeError: if the blob is not a JSON object.
    """
    return _load_object(data)


def decode_legacy_entry(key: str, record: Any) -> LegacyTarget:
    """Convert one legacy row keyed ``"<uuid>::<lowercased name>"``.

    Raises:
        LegacyEntryError: if the key or record is malformed.
    """
    mesocycle_part, sep, name = key.partition(KEY_SEPARATOR)
    if not sep:
        raise LegacyEntryError(f"Legacy key {key!r} has no {KEY_SEPARATOR!r} separator")
    try:
        mesocycle_id = UUID(mesocycle_part)
    except ValueError as exc:
        raise LegacyEntryError(f"Legacy key {key!r} does not start with a UUID") from exc
    if not isinstance(record, dict):
        raise LegacyEntryError(f"Legacy entry {key!r} is not an object")

    try:
        lower = _optional_int(record.get("nextRepTargetLower"))
        upper = _optional_int(record.get("nextRepTargetUpper"))
        weight = _optional_number(record.get("nextWeight"))
    except (TypeError, ValueError) as exc:
        raise LegacyEntryError(f"Legacy entry {key!r} has bad fields: {exc}") from exc

    return LegacyTarget(
        mesocycle_id=str(mesocycle_id),
        exercise_name=name,
        next_weight=weight,
        next_rep_lower=lower,
        next_rep_upper=upper,
    )


def _load_object(data: bytes) -> dict[str, Any]:
    try:
        raw = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise StorageDecodeError(f"Blob is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise StorageDecodeError(f"Blob is a JSON {type(raw).__name__}, expected an object")
    return raw


def _rep_range(lower: Any, upper: Any) -> RepRange | None:
    lower = _optional_int(lower)
    upper = _optional_int(upper)
    if lower is None or upper is None:
        return None
    return RepRange(lower, upper)


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {value!r}")
    return value


def _optional_number(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)

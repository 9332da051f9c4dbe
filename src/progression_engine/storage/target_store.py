"""Target store: cached, asynchronously persisted last-decision state per exercise.

The whole cache is one blob in a KeyValueBackend. It is loaded at most once
per store instance, on first use or after ``start_hydration()``. Every
``update`` writes the full snapshot back in the background.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import Callable
from uuid import UUID

from progression_engine.exceptions import StorageError
from progression_engine.models.enums import (
    LastAction,
    MIGRATED_FLAG_KEY,
    TARGETS_STORE_KEY,
)
from progression_engine.models.target import LegacyTarget, RepRange, StoredTarget
from progression_engine.normalizer import make_store_key
from progression_engine.storage.backend import KeyValueBackend
from progression_engine.storage.codec import decode_cache, encode_cache
from progression_engine.storage.legacy import LegacyTargetStore
from progression_engine.storage.once import AsyncOnce

logger = logging.getLogger(__name__)

Mutator = Callable[[StoredTarget], StoredTarget]


class TargetStore:
    """Key-value repository mapping (mesocycle, exercise) to a StoredTarget.

    Keys are ``"<mesocycle id>::<normalized exercise key>"``. Reads and
    writes of the in-memory cache are visible immediately; durable writes
    happen in background tasks, in update order, and ``flush()`` waits for
    them. A persisted blob that cannot be read or decoded is logged and
    treated as an empty cache.

    Usage:
        store = await TargetStore.open(FileBackend(STORE_DIR))
        async with store.lock_for(mesocycle_id, "Bench Press"):
            current = await store.get(mesocycle_id, "Bench Press")
            await store.update(mesocycle_id, "Bench Press", lambda t: ...)
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        legacy: LegacyTargetStore | None = None,
        key: str = TARGETS_STORE_KEY,
        migrated_flag_key: str = MIGRATED_FLAG_KEY,
    ) -> None:
        self._backend = backend
        self._legacy = legacy if legacy is not None else LegacyTargetStore(backend)
        self._key = key
        self._migrated_flag_key = migrated_flag_key

        self._cache: dict[str, StoredTarget] = {}
        self._hydration: AsyncOnce[None] = AsyncOnce(self._hydrate)
        self._cache_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()
        self._migration_lock = asyncio.Lock()
        self._key_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()
        self._pending_writes: set[asyncio.Task[None]] = set()
        self._migrated = False

    @classmethod
    async def open(cls, backend: KeyValueBackend, **kwargs) -> "TargetStore":
        """Construct a store and schedule (not await) its hydration."""
        store = cls(backend, **kwargs)
        store.start_hydration()
        return store

    # ------------------------------------------------------------------
    # Hydration
    # ------------------------------------------------------------------

    def start_hydration(self) -> None:
        """Begin loading the persisted cache in the background."""
        self._hydration.start()

    @property
    def hydrated(self) -> bool:
        return self._hydration.done

    async def _hydrate(self) -> None:
        try:
            loaded = await asyncio.to_thread(self._read_snapshot)
        except StorageError as exc:
            logger.warning("Discarding persisted progression targets: %s", exc)
            loaded = {}
        self._cache = loaded
        logger.debug("Hydrated %d progression targets", len(loaded))

    def _read_snapshot(self) -> dict[str, StoredTarget]:
        data = self._backend.read(self._key)
        if data is None:
            return {}
        return decode_cache(data)

    async def _ensure_hydrated(self) -> None:
        if not self._hydration.done:
            await self._hydration.get()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def lock_for(self, mesocycle_id: UUID | str, exercise_name: str) -> asyncio.Lock:
        """Per-key lock for callers doing a read-modify-write across awaits.

        A key's lock lives only while someone holds or awaits it.
        """
        key = make_store_key(mesocycle_id, exercise_name)
        lock = self._key_locks.get(key)
        if lock is None:
            lock = self._key_locks[key] = asyncio.Lock()
        return lock

    async def get(self, mesocycle_id: UUID | str, exercise_name: str) -> StoredTarget | None:
        await self._ensure_hydrated()
        return self._cache.get(make_store_key(mesocycle_id, exercise_name))

    async def update(
        self,
        mesocycle_id: UUID | str,
        exercise_name: str,
        mutator: Mutator,
    ) -> StoredTarget:
        """Replace the entry with ``mutator(existing or fresh entry)``.

        The new value is readable as soon as this returns; the durable write
        is scheduled and not awaited.
        """
        await self._ensure_hydrated()
        key = make_store_key(mesocycle_id, exercise_name)
        async with self._cache_lock:
            updated = mutator(self._cache.get(key, StoredTarget()))
            self._cache[key] = updated
            snapshot = dict(self._cache)
        self._schedule_persist(snapshot)
        return updated

    async def snapshot(self) -> dict[str, StoredTarget]:
        """Copy of every cached entry, keyed by store key."""
        await self._ensure_hydrated()
        async with self._cache_lock:
            return dict(self._cache)

    async def flush(self) -> None:
        """Wait until every scheduled write has reached the backend."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _schedule_persist(self, snapshot: dict[str, StoredTarget]) -> None:
        task = asyncio.get_running_loop().create_task(self._persist(snapshot))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _persist(self, snapshot: dict[str, StoredTarget]) -> None:
        # Lock waiters are FIFO, so snapshots land in the order they were taken
        async with self._write_lock:
            data = encode_cache(snapshot)
            try:
                await asyncio.to_thread(self._backend.write, self._key, data)
            except StorageError as exc:
                logger.warning("Failed to persist %d progression targets: %s", len(snapshot), exc)

    # ------------------------------------------------------------------
    # Legacy migration
    # ------------------------------------------------------------------

    async def migrate_legacy_if_needed(self) -> int:
        """Import the v1 cache once; returns how many entries were migrated.

        Guarded by a persisted flag: after the first run (successful or not)
        later calls do nothing. Rows that fail to convert are skipped.
        A legacy row replaces any current entry stored under the same key.
        """
        await self._ensure_hydrated()
        async with self._migration_lock:
            if self._migrated or await self._read_flag():
                self._migrated = True
                return 0

            try:
                load = await asyncio.to_thread(self._legacy.load)
                legacy_entries = load.entries
                for error in load.skipped:
                    logger.warning("Skipping legacy progression target: %s", error)
            except StorageError as exc:
                logger.warning("Legacy progression targets unreadable, nothing migrated: %s", exc)
                legacy_entries = ()

            migrated = 0
            async with self._cache_lock:
                for entry in legacy_entries:
                    try:
                        target = _from_legacy(entry)
                    except ValueError as exc:
                        logger.warning(
                            "Skipping legacy target %s::%s: %s",
                            entry.mesocycle_id,
                            entry.exercise_name,
                            exc,
                        )
                        continue
                    key = make_store_key(entry.mesocycle_id, entry.exercise_name)
                    self._cache[key] = target
                    migrated += 1
                snapshot = dict(self._cache)

            self._migrated = True
            self._schedule_persist(snapshot)
            await self._write_flag()
            logger.info("Migrated %d legacy progression targets", migrated)
            return migrated

    async def _read_flag(self) -> bool:
        try:
            return await asyncio.to_thread(self._backend.read_flag, self._migrated_flag_key)
        except StorageError as exc:
            logger.warning("Cannot read migration flag, assuming not migrated: %s", exc)
            return False

    async def _write_flag(self) -> None:
        try:
            await asyncio.to_thread(self._backend.write_flag, self._migrated_flag_key, True)
        except StorageError as exc:
            logger.warning("Cannot persist migration flag: %s", exc)


def _from_legacy(entry: LegacyTarget) -> StoredTarget:
    """Current-schema entry for a v1 row: zero miss streak, last action held."""
    rep_range = None
    if entry.next_rep_lower is not None and entry.next_rep_upper is not None:
        rep_range = RepRange(entry.next_rep_lower, entry.next_rep_upper)
    return StoredTarget(
        next_weight=entry.next_weight,
        next_rep_range=rep_range,
        miss_streak=0,
        last_action=LastAction.HELD,
        last_updated_at=None,
    )

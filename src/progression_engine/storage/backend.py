"""Key-value backends for persisted progression state.

A backend stores opaque byte blobs and boolean flags under string keys, the
way a platform preferences store does. Backends raise ``StorageError``
subclasses; deciding what a failure means is left to the caller.
"""

from __future__ import annotations

import json
import logging
import os
import re
import threading
from pathlib import Path
from typing import Protocol

from progression_engine.exceptions import StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class KeyValueBackend(Protocol):
    """Blob and flag storage keyed by string."""

    def read(self, key: str) -> bytes | None:
        """Return the blob under *key*, or None if nothing is stored."""
        ...

    def write(self, key: str, data: bytes) -> None:
        ...

    def read_flag(self, key: str) -> bool:
        """Return the flag under *key*; unset flags read as False."""
        ...

    def write_flag(self, key: str, value: bool) -> None:
        ...


class MemoryBackend:
    """Process-local backend; the default for tests."""

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}
        self._flags: dict[str, bool] = {}
        self._lock = threading.Lock()
        self.write_count = 0

    def read(self, key: str) -> bytes | None:
        with self._lock:
            return self._blobs.get(key)

    def write(self, key: str, data: bytes) -> None:
        with self._lock:
            self._blobs[key] = bytes(data)
            self.write_count += 1

    def read_flag(self, key: str) -> bool:
        with self._lock:
            return self._flags.get(key, False)

    def write_flag(self, key: str, value: bool) -> None:
        with self._lock:
            self._flags[key] = value


class FileBackend:
    """One file per key in a directory.

    Blobs are written atomically through a temp file and ``os.replace``;
    flags are stored as JSON booleans in ``<key>.flag`` files.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)
        self._lock = threading.Lock()

    def _path(self, key: str, suffix: str) -> Path:
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}{suffix}"

    def read(self, key: str) -> bytes | None:
        path = self._path(key, ".json")
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageReadError(f"Cannot read {path}: {exc}", key=key) from exc

    def write(self, key: str, data: bytes) -> None:
        path = self._path(key, ".json")
        tmp_path = path.with_suffix(".json.tmp")
        with self._lock:
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                tmp_path.write_bytes(data)
                os.replace(tmp_path, path)
            except OSError as exc:
                raise StorageWriteError(f"Cannot write {path}: {exc}", key=key) from exc
        logger.debug("Wrote %d bytes to %s", len(data), path)

    def read_flag(self, key: str) -> bool:
        path = self._path(key, ".flag")
        try:
            return json.loads(path.read_text(encoding="utf-8")) is True
        except FileNotFoundError:
            return False
        except (OSError, ValueError) as exc:
            raise StorageReadError(f"Cannot read flag {path}: {exc}", key=key) from exc

    def write_flag(self, key: str, value: bool) -> None:
        path = self._path(key, ".flag")
        with self._lock:
            try:
                self.directory.mkdir(parents=True, exist_ok=True)
                path.write_text(json.dumps(bool(value)), encoding="utf-8")
            except OSError as exc:
                raise StorageWriteError(f"Cannot write flag {path}: {exc}", key=key) from exc

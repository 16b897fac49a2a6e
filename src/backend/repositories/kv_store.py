"""
Key/value persistence adapters.

The election core only needs a very small storage contract:

- get(key) -> serialized value or None
- set(key, value)
- remove(key)
- list_keys(prefix)
- lock() -> context manager guarding a read-modify-write cycle

Two backends are provided:
- InMemoryKeyValueStore: process-local dict (tests, single-process dev)
- JsonFileKeyValueStore: one JSON file on disk, re-read on every access so
  separate processes see each other's committed writes. Its lock() is an OS
  file lock on a sidecar ``.lock`` file, so it also serializes processes.
"""

import json
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import ContextManager, Iterator, Optional, Protocol, runtime_checkable

import structlog
from filelock import FileLock

from core.config import settings

logger = structlog.get_logger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol defining the persistence adapter contract."""

    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...
    def list_keys(self, prefix: str = "") -> list[str]: ...
    def lock(self) -> ContextManager: ...


class InMemoryKeyValueStore:
    """Dictionary-backed store."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def list_keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in list(self._data) if k.startswith(prefix))

    def lock(self) -> ContextManager:
        return self._lock


class JsonFileKeyValueStore:
    """
    Store backed by a single JSON object on disk.

    Writes go through a temporary file and os.replace so a reader never sees
    a partially written file. Every write, and every read-modify-write done
    under lock(), holds both a thread lock and an inter-process file lock.
    """

    def __init__(self, path: str | Path, lock_timeout: float | None = None) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._file_lock = FileLock(
            str(self.path.with_name(self.path.name + ".lock")),
            timeout=settings.STORAGE_LOCK_TIMEOUT_SECONDS if lock_timeout is None else lock_timeout,
        )

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("kv_file_unreadable", path=str(self.path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("kv_file_malformed", path=str(self.path))
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".kv-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        with self.lock():
            data = self._read()
            data[key] = value
            self._write(data)

    def remove(self, key: str) -> None:
        with self.lock():
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)

    def list_keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._read() if k.startswith(prefix))

    @contextmanager
    def lock(self) -> Iterator[None]:
        with self._lock, self._file_lock:
            yield


# =============================================================================
# Store Factory
# =============================================================================

_store: Optional[KeyValueStore] = None


def create_store(backend: str | None = None, path: str | None = None) -> KeyValueStore:
    """Create a store for the configured backend."""
    backend = (backend or settings.STORAGE_BACKEND).lower()
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "file":
        return JsonFileKeyValueStore(path or settings.STORAGE_PATH)
    raise ValueError(f"Unknown STORAGE_BACKEND '{backend}' (expected 'memory' or 'file')")


def get_store() -> KeyValueStore:
    """Get the process-wide store, creating it on first use."""
    global _store
    if _store is None:
        _store = create_store()
        logger.info("kv_store_initialized", backend=settings.STORAGE_BACKEND)
    return _store


def reset_store() -> None:
    """Drop the process-wide store (used by tests)."""
    global _store
    _store = None

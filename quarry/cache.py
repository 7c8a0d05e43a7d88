"""Cache collaborators used to store materialized SELECT results.

A cache maps a string key to a picklable value. Reading an entry older than
the requested lifetime deletes it and reports a miss, so a lifetime of 0
always evicts.
"""

import hashlib
import logging
import os
import pickle
import threading
import time
from pathlib import Path
from typing import Any, Optional, Protocol

from .settings import get_settings

logger = logging.getLogger("quarry")


class Cache(Protocol):
    """Interface expected by Query.execute()."""

    def get(self, key: str, lifetime: int) -> Optional[Any]:
        ...  # pylint: disable=unnecessary-ellipsis

    def set(self, key: str, value: Any, lifetime: int) -> bool:
        ...  # pylint: disable=unnecessary-ellipsis


class MemoryCache:
    """In-process cache; values are stored pickled so callers never share them."""

    def __init__(self):
        self._entries: dict[str, tuple[float, bytes]] = {}
        self._lock = threading.Lock()

    def get(self, key: str, lifetime: int) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, payload = entry
            if time.time() - stored_at >= lifetime:
                del self._entries[key]
                return None
        return pickle.loads(payload)

    def set(self, key: str, value: Any, lifetime: int) -> bool:
        payload = pickle.dumps(value)
        with self._lock:
            self._entries[key] = (time.time(), payload)
        return True

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class FileCache:
    """Cache stored as one pickle file per key.

    File names are the sha1 of the key, sharded into sub-directories named
    after the first two hex characters. Expiry is based on file age.
    """

    def __init__(self, directory: Optional[str | Path] = None):
        self.directory = Path(directory or get_settings().cache_dir)

    def _path(self, key: str) -> Path:
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()
        return self.directory / digest[:2] / f"{digest}.txt"

    def get(self, key: str, lifetime: int) -> Optional[Any]:
        path = self._path(key)
        try:
            age = time.time() - path.stat().st_mtime
        except FileNotFoundError:
            return None
        if age >= lifetime:
            # expired, somebody else may have removed it already
            path.unlink(missing_ok=True)
            return None
        try:
            with path.open("rb") as file:
                return pickle.load(file)
        except (OSError, pickle.UnpicklingError, EOFError) as error:
            logger.warning("Ignoring corrupt cache file %s: %s", path, error)
            return None

    def set(self, key: str, value: Any, lifetime: int) -> bool:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temporary = path.with_suffix(f".{os.getpid()}.tmp")
            with temporary.open("wb") as file:
                pickle.dump(value, file)
            temporary.replace(path)
        except OSError as error:
            logger.warning("Cannot write cache file %s: %s", path, error)
            return False
        return True

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


_cache: Optional[Cache] = None


def get_cache() -> Cache:
    """Return the active cache collaborator (an in-memory cache unless one was set)."""
    global _cache
    if _cache is None:
        _cache = MemoryCache()
    return _cache


def set_cache(cache: Optional[Cache]) -> None:
    """Install the cache collaborator used by Query.execute(); None restores the default."""
    global _cache
    _cache = cache

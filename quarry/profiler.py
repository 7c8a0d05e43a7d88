"""Optional profiler collaborator bracketing each executed statement."""

import itertools
import logging
import threading
import time
from typing import Optional, Protocol

from .settings import get_settings

logger = logging.getLogger("quarry")


class ProfilerProtocol(Protocol):
    def start(self, group: str, name: str) -> object:
        ...  # pylint: disable=unnecessary-ellipsis

    def stop(self, token: object) -> None:
        ...  # pylint: disable=unnecessary-ellipsis

    def delete(self, token: object) -> None:
        ...  # pylint: disable=unnecessary-ellipsis


class Profiler:
    """Collects wall-clock timings of named spans, grouped by category."""

    def __init__(self):
        self._counter = itertools.count(1)
        self._marks: dict[int, dict] = {}
        self._lock = threading.Lock()

    def start(self, group: str, name: str) -> int:
        token = next(self._counter)
        with self._lock:
            self._marks[token] = {
                "group": group,
                "name": name,
                "start": time.perf_counter(),
                "stop": None,
            }
        return token

    def stop(self, token: int) -> None:
        with self._lock:
            self._marks[token]["stop"] = time.perf_counter()

    def delete(self, token: int) -> None:
        with self._lock:
            self._marks.pop(token, None)

    def groups(self) -> dict[str, dict[str, list[float]]]:
        """Return finished span durations as ``{group: {name: [seconds, ...]}}``."""
        result: dict[str, dict[str, list[float]]] = {}
        with self._lock:
            marks = list(self._marks.values())
        for mark in marks:
            if mark["stop"] is None:
                continue
            durations = result.setdefault(mark["group"], {}).setdefault(mark["name"], [])
            durations.append(mark["stop"] - mark["start"])
        return result

    def stats(self, group: str) -> dict[str, dict[str, float]]:
        """Return count/total/min/max/average seconds per span name in a group."""
        stats = {}
        for name, durations in self.groups().get(group, {}).items():
            stats[name] = {
                "count": len(durations),
                "total": sum(durations),
                "min": min(durations),
                "max": max(durations),
                "average": sum(durations) / len(durations),
            }
        return stats


_profiler: Optional[ProfilerProtocol] = None


def set_profiler(profiler: Optional[ProfilerProtocol]) -> None:
    """Install (or remove, with None) the profiler collaborator."""
    global _profiler
    _profiler = profiler


def get_profiler() -> Optional[ProfilerProtocol]:
    """Return the profiler to use, or None when profiling is disabled."""
    if _profiler is None or not get_settings().profiling:
        return None
    return _profiler

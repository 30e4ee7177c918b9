"""Counter store shared by every context in one call tree."""

from __future__ import annotations

import threading


class Stats:
    """Thread-safe ``str -> int`` counters.

    Absent keys read as 0. Keys keep first-increment order, which is the
    order prefix limits scan them in.
    """

    def __init__(self) -> None:
        self._counters: dict[str, int] = {}
        self._lock = threading.Lock()

    def incr(self, key: str, delta: int = 1) -> int:
        if delta < 0:
            raise ValueError(f"counter delta must be >= 0, got {delta}")
        with self._lock:
            value = self._counters.get(key, 0) + delta
            self._counters[key] = value
            return value

    def reset(self, key: str) -> None:
        with self._lock:
            if key in self._counters:
                self._counters[key] = 0

    def get(self, key: str) -> int:
        with self._lock:
            return self._counters.get(key, 0)

    def matching(self, prefix: str) -> dict[str, int]:
        with self._lock:
            return {k: v for k, v in self._counters.items() if k.startswith(prefix)}

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counters)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._counters

    def __repr__(self) -> str:
        return f"Stats({self.snapshot()!r})"

"""
Purpose: Storage boundary for per-driver zone containment.
What it does:
Remembers which zones contained each driver's last location update, so
entry detection stays debounced across processes and restarts when backed
by shared storage.

swap(driver_id, zone_ids) stores the new set and returns the previous one
as a single step; two updates for the same driver never both see the old set.
"""
from __future__ import annotations

import threading
from typing import Dict, Iterable, Protocol, Set


class ZoneStateStore(Protocol):
    def swap(self, driver_id: str, zone_ids: Iterable[str]) -> Set[str]:
        ...

    def get(self, driver_id: str) -> Set[str]:
        ...

    def clear(self, driver_id: str) -> None:
        ...


class InMemoryZoneStateStore:

    def __init__(self):
        self._inside: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def swap(self, driver_id: str, zone_ids: Iterable[str]) -> Set[str]:
        with self._lock:
            previous = self._inside.get(driver_id, set())
            self._inside[driver_id] = set(zone_ids)
        return set(previous)

    def get(self, driver_id: str) -> Set[str]:
        with self._lock:
            return set(self._inside.get(driver_id, set()))

    def clear(self, driver_id: str) -> None:
        with self._lock:
            self._inside.pop(driver_id, None)

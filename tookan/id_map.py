"""
Purpose: Bidirectional ID table between internal string IDs ("D001",
"ORD001", uuids) and Tookan's integer fleet_id / job_id / team_id.

External IDs are allocated on first use and never reused or derived from the
internal ID's characters. Each kind has its own numbering.
"""
from __future__ import annotations

import threading
from enum import Enum
from typing import Dict, Optional, Protocol, Tuple


class IdKind(str, Enum):
    ORDER = "order"      # Tookan job_id
    DRIVER = "driver"    # Tookan fleet_id
    TEAM = "team"        # Tookan team_id


class TookanIdMap(Protocol):
    def external_id(self, kind: IdKind, internal_id: str) -> int:
        """Return the Tookan integer for `internal_id`, allocating one if needed."""
        ...

    def internal_id(self, kind: IdKind, external_id: int) -> Optional[str]:
        """Resolve a Tookan integer back, or None when it was never issued."""
        ...


class InMemoryTookanIdMap:

    def __init__(self):
        self._to_external: Dict[Tuple[IdKind, str], int] = {}
        self._to_internal: Dict[Tuple[IdKind, int], str] = {}
        self._next: Dict[IdKind, int] = {}
        self._lock = threading.Lock()

    def external_id(self, kind: IdKind, internal_id: str) -> int:
        kind = IdKind(kind)
        with self._lock:
            existing = self._to_external.get((kind, internal_id))
            if existing is not None:
                return existing

            allocated = self._next.get(kind, 1)
            self._next[kind] = allocated + 1
            self._to_external[(kind, internal_id)] = allocated
            self._to_internal[(kind, allocated)] = internal_id
            return allocated

    def internal_id(self, kind: IdKind, external_id: int) -> Optional[str]:
        try:
            external_id = int(external_id)
        except (TypeError, ValueError):
            return None
        with self._lock:
            return self._to_internal.get((IdKind(kind), external_id))

    def register(self, kind: IdKind, internal_id: str, external_id: int) -> None:
        """
        Seed a known pairing (e.g. agents that already exist in Tookan).
        """
        kind = IdKind(kind)
        with self._lock:
            self._to_external[(kind, internal_id)] = external_id
            self._to_internal[(kind, external_id)] = internal_id
            self._next[kind] = max(self._next.get(kind, 1), external_id + 1)

"""
Purpose: Storage boundaries for drivers and the records around them.
What it does:
- DriverRepository / TeamRepository / StoreLookup / ZoneRepository interfaces
- In-memory implementations used by tests, scripts and local runs

StoreLookup.find_nearest picks the store with the smallest great-circle
distance to a point; ties go to the store registered first.
"""

from __future__ import annotations

from dataclasses import replace
import threading
from typing import Dict, Iterable, List, Optional, Protocol

from common.errors import NotFound
from common.geo import PointLike, haversine_km
from geofencing.models import ExclusionZone, Geofence
from .models import Driver, Store, Team


class DriverRepository(Protocol):
    def get(self, driver_id: str) -> Optional[Driver]:
        ...

    def put(self, driver: Driver) -> Driver:
        ...

    def list(self) -> List[Driver]:
        ...

    def add(self, driver: Driver) -> Driver:
        """
        Store a brand new driver under a freshly allocated id (`driver.id` is
        ignored). Allocation and insert happen as one step, so concurrent adds
        never share an id.
        """
        ...


class TeamRepository(Protocol):
    def get(self, team_id: str) -> Optional[Team]:
        ...

    def list(self) -> List[Team]:
        ...


class StoreLookup(Protocol):
    def get(self, store_id: str) -> Optional[Store]:
        ...

    def list(self) -> List[Store]:
        ...

    def find_nearest(self, point: PointLike) -> Optional[Store]:
        ...


class ZoneRepository(Protocol):
    def exclusion_zones(self) -> List[ExclusionZone]:
        ...

    def geofences(self) -> List[Geofence]:
        ...


def nearest_store(stores: Iterable[Store], point: PointLike) -> Optional[Store]:
    best: Optional[Store] = None
    best_distance = float("inf")
    for store in stores:
        distance = haversine_km(store.location, point)
        if distance < best_distance:
            best, best_distance = store, distance
    return best


class InMemoryDriverRepository:

    def __init__(self, drivers: Iterable[Driver] = (), id_prefix: str = "D"):
        self._drivers: Dict[str, Driver] = {driver.id: driver for driver in drivers}
        self._id_prefix = id_prefix
        self._lock = threading.Lock()

    def get(self, driver_id: str) -> Optional[Driver]:
        with self._lock:
            return self._drivers.get(driver_id)

    def require(self, driver_id: str) -> Driver:
        driver = self.get(driver_id)
        if driver is None:
            raise NotFound(f"Driver {driver_id} not found")
        return driver

    def put(self, driver: Driver) -> Driver:
        # Driver is frozen, storing the instance itself is safe.
        with self._lock:
            self._drivers[driver.id] = driver
        return driver

    def list(self) -> List[Driver]:
        with self._lock:
            return list(self._drivers.values())

    def add(self, driver: Driver) -> Driver:
        with self._lock:
            number = len(self._drivers) + 1
            while f"{self._id_prefix}{number:03d}" in self._drivers:
                number += 1
            stored = replace(driver, id=f"{self._id_prefix}{number:03d}")
            self._drivers[stored.id] = stored
        return stored


class InMemoryTeamRepository:

    def __init__(self, teams: Iterable[Team] = ()):
        self._teams: Dict[str, Team] = {team.id: team for team in teams}

    def get(self, team_id: str) -> Optional[Team]:
        return self._teams.get(team_id)

    def list(self) -> List[Team]:
        return list(self._teams.values())


class InMemoryStoreLookup:

    def __init__(self, stores: Iterable[Store] = ()):
        self._stores: Dict[str, Store] = {store.id: store for store in stores}

    def get(self, store_id: str) -> Optional[Store]:
        return self._stores.get(store_id)

    def list(self) -> List[Store]:
        return list(self._stores.values())

    def find_nearest(self, point: PointLike) -> Optional[Store]:
        return nearest_store(self._stores.values(), point)


class InMemoryZoneRepository:

    def __init__(self, exclusion_zones: Iterable[ExclusionZone] = (), geofences: Iterable[Geofence] = ()):
        self._exclusion_zones = list(exclusion_zones)
        self._geofences = list(geofences)

    def exclusion_zones(self) -> List[ExclusionZone]:
        return list(self._exclusion_zones)

    def geofences(self) -> List[Geofence]:
        return list(self._geofences)

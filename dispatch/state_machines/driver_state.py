from dataclasses import dataclass, field, replace
import logging
from typing import List

from common.errors import NotFound, ValidationError
from common.geo import Location
from drivers.models import Driver, DriverStatus
from drivers.repository import DriverRepository, ZoneRepository
from geofencing.models import ExclusionZone
from geofencing.tracker import ZoneEntryTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationUpdateResult:
    driver: Driver
    entered_zones: List[ExclusionZone] = field(default_factory=list)


class DriverLocationService:
    """
    The driver location-update path. Updates position and status without
    touching any order, and runs exclusion-zone entry detection on every move.
    """

    def __init__(self, drivers: DriverRepository, zones: ZoneRepository, tracker: ZoneEntryTracker):
        self.drivers = drivers
        self.zones = zones
        self.tracker = tracker

    def update_location(self, driver_id: str, location: Location) -> LocationUpdateResult:
        driver = self._require(driver_id)

        # Driver is frozen
        moved = self.drivers.put(replace(driver, location=location))

        entered = self.tracker.observe(
            moved.id,
            moved.location,
            self.zones.exclusion_zones(),
            driver_name=moved.name,
        )
        return LocationUpdateResult(driver=moved, entered_zones=entered)

    def update_status(self, driver_id: str, status) -> Driver:
        driver = self._require(driver_id)
        try:
            status = DriverStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown driver status: {status!r}")

        if status == driver.status:
            return driver

        logger.info("Driver %s status %s -> %s", driver.id, driver.status.value, status.value)
        if status == DriverStatus.OFFLINE:
            # an offline driver re-enters every zone fresh when back online
            self.tracker.forget(driver.id)
        return self.drivers.put(replace(driver, status=status))

    def _require(self, driver_id: str) -> Driver:
        driver = self.drivers.get(driver_id)
        if driver is None:
            raise NotFound(f"Driver {driver_id} not found")
        return driver

"""
Purpose: Debounced exclusion-zone entry detection for moving drivers.
What it does:
Remembers, per driver and through a ZoneStateStore, which zones contained the
previous location update.
An "Entered Exclusion Zone" alert is emitted only on the transition from
outside to inside a given zone; staying inside is silent, and leaving re-arms
the zone for that driver.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Set

from alerts import Alert, AlertEmitter, AlertPriority, AlertType, RelatedEntityType
from common.geo import PointLike
from .engine import check_point
from .models import ExclusionZone, ZoneType
from .state import InMemoryZoneStateStore, ZoneStateStore

logger = logging.getLogger(__name__)


class ZoneEntryTracker:

    def __init__(self, emitter: AlertEmitter, state: Optional[ZoneStateStore] = None):
        self.emitter = emitter
        self.state = state if state is not None else InMemoryZoneStateStore()

    def observe(
        self,
        driver_id: str,
        point: PointLike,
        zones: Sequence[ExclusionZone],
        *,
        driver_name: Optional[str] = None,
    ) -> List[ExclusionZone]:
        """
        Classify one location update and return the zones newly entered.
        """
        result = check_point(point, zones)
        previous = self.state.swap(driver_id, [zone.id for zone in result.matches])

        entered = [zone for zone in result.matches if zone.id not in previous]
        for zone in entered:
            logger.info("Driver %s entered %s zone %s", driver_id, zone.zone_type.value, zone.name)
            self.emitter.emit(self._entry_alert(driver_id, driver_name or driver_id, zone))

        return entered

    def zones_containing(self, driver_id: str) -> Set[str]:
        return self.state.get(driver_id)

    def forget(self, driver_id: str) -> None:
        self.state.clear(driver_id)

    @staticmethod
    def _entry_alert(driver_id: str, driver_name: str, zone: ExclusionZone) -> Alert:
        priority = AlertPriority.HIGH if zone.zone_type == ZoneType.NO_GO else AlertPriority.MEDIUM
        return Alert(
            type=AlertType.ENTERED_EXCLUSION_ZONE,
            message=f"Driver {driver_name} entered zone '{zone.name}'.",
            priority=priority,
            related_entity_type=RelatedEntityType.DRIVER,
            related_entity_id=driver_id,
        )

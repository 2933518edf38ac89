"""
Zones package (geofences and exclusion zones).

Public API:
- Domain models: Geofence, ExclusionZone, ZoneType
- Containment: contains, check_point, ZoneCheckResult
- Driver entry detection: ZoneEntryTracker, ZoneStateStore
"""
from .models import Zone, Geofence, ExclusionZone, ZoneType
from .engine import (
    ZoneCheckResult,
    check_point,
    contains,
    drivers_inside_zones,
    polygon_area_km2,
)
from .state import InMemoryZoneStateStore, ZoneStateStore
from .tracker import ZoneEntryTracker

__all__ = [
    "Zone",
    "Geofence",
    "ExclusionZone",
    "ZoneType",
    "ZoneCheckResult",
    "check_point",
    "contains",
    "drivers_inside_zones",
    "polygon_area_km2",
    "ZoneEntryTracker",
    "ZoneStateStore",
    "InMemoryZoneStateStore",
]

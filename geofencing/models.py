"""
Purpose: Domain models for the zones capability.
What it does:
- Geofence (inclusion region tied to hubs, has a display color)
- ExclusionZone (No-go / Slow-down region for drivers)

Both are named polygons of at least 3 vertices. Polygons are assumed to be
simple (non self-intersecting); that is not validated.

Rule: No containment math here. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence, Tuple

from common.errors import ValidationError
from common.geo import LatLng, as_point

MIN_VERTICES = 3


class ZoneType(str, Enum):
    NO_GO = "No-go"
    SLOW_DOWN = "Slow-down"


def _normalize_vertices(vertices: Sequence[Any]) -> Tuple[LatLng, ...]:
    points = []
    for vertex in vertices:
        if isinstance(vertex, Mapping):
            if vertex.get("lat") is None or vertex.get("lng") is None:
                raise ValidationError("Each coordinate must have lat and lng properties")
            points.append((float(vertex["lat"]), float(vertex["lng"])))
        else:
            points.append(as_point(vertex))

    if len(points) < MIN_VERTICES:
        raise ValidationError(f"A zone must have at least {MIN_VERTICES} coordinates")
    return tuple(points)


@dataclass(frozen=True)
class Zone:
    """
    A named polygon. `vertices` is an ordered tuple of (lat, lng).
    """
    id: str
    name: str
    vertices: Tuple[LatLng, ...]

    def __post_init__(self):
        # frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "vertices", _normalize_vertices(self.vertices))

    def coordinates(self) -> list:
        return [{"lat": lat, "lng": lng} for lat, lng in self.vertices]


@dataclass(frozen=True)
class Geofence(Zone):
    color: str = "#3B82F6"


@dataclass(frozen=True)
class ExclusionZone(Zone):
    zone_type: ZoneType = ZoneType.SLOW_DOWN

    def __post_init__(self):
        super().__post_init__()
        if not isinstance(self.zone_type, ZoneType):
            try:
                object.__setattr__(self, "zone_type", ZoneType(self.zone_type))
            except ValueError:
                raise ValidationError(f"Unknown exclusion zone type: {self.zone_type}")

"""
Purpose: Polygon containment engine for geofences and exclusion zones.
What it does:
- contains(polygon, point): even-odd ray casting, latitude/longitude treated
  as planar coordinates (lng is x, lat is y)
- check_point(point, zones): every zone that contains the point, overlaps included
- drivers_inside_zones(drivers, zones): (driver, zone) pairs for the dashboard
- polygon_area_km2(polygon): approximate area for display

Boundary behavior (implementation-defined):
An edge counts as crossed when exactly one of its endpoints lies strictly
above the test point's latitude ("half-open" rule), and the crossing is taken
only when it lies strictly east of the point. For an axis-aligned rectangle
this classifies points on the south and west edges as inside and points on
the north and east edges as outside. Self-intersecting polygons get the raw
even-odd answer. Neither case is relied on anywhere.

Everything here is pure and stateless, safe to call from any thread.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from common.geo import EARTH_RADIUS_KM, LatLng, PointLike, as_point
from .models import ExclusionZone, Zone, ZoneType

Polygon = Sequence[PointLike]


@dataclass(frozen=True)
class ZoneCheckResult:
    """
    Output of a point check. `matches` keeps the order of the input zones.
    """
    is_inside: bool
    matches: List[Zone] = field(default_factory=list)


def contains(polygon: Polygon, point: PointLike) -> bool:
    """
    Even-odd point-in-polygon test. O(number of vertices).
    """
    vertices = [as_point(vertex) for vertex in polygon]
    if len(vertices) < 3:
        return False

    y, x = as_point(point)
    inside = False

    j = len(vertices) - 1
    for i in range(len(vertices)):
        yi, xi = vertices[i]
        yj, xj = vertices[j]

        # edge straddles the horizontal ray through the point
        if (yi > y) != (yj > y):
            x_cross = xi + (y - yi) * (xj - xi) / (yj - yi)
            if x < x_cross:
                inside = not inside
        j = i

    return inside


def check_point(
    point: PointLike,
    zones: Iterable[Zone],
    zone_type: Optional[ZoneType] = None,
) -> ZoneCheckResult:
    """
    Evaluate every zone (optionally only exclusion zones of one type) and
    return all the ones containing the point. No short-circuit on first match.
    """
    matches: List[Zone] = []
    for zone in zones:
        if zone_type is not None:
            if not isinstance(zone, ExclusionZone) or zone.zone_type != zone_type:
                continue
        if contains(zone.vertices, point):
            matches.append(zone)

    return ZoneCheckResult(is_inside=bool(matches), matches=matches)


def drivers_inside_zones(drivers: Iterable, zones: Sequence[Zone]) -> List[Tuple[object, Zone]]:
    """
    Pair every driver with each zone its current location falls into.
    Drivers are anything with a `.location` (Location or (lat, lng)).
    """
    pairs = []
    for driver in drivers:
        result = check_point(driver.location, zones)
        for zone in result.matches:
            pairs.append((driver, zone))
    return pairs


def polygon_area_km2(polygon: Polygon) -> float:
    """
    Shoelace area on an equirectangular projection around the polygon's
    mean latitude. Good enough for city-sized zones.
    """
    vertices: List[LatLng] = [as_point(vertex) for vertex in polygon]
    if len(vertices) < 3:
        return 0.0

    mean_lat = math.radians(sum(lat for lat, _ in vertices) / len(vertices))
    km_per_deg = math.pi * EARTH_RADIUS_KM / 180.0

    projected = [
        (lng * km_per_deg * math.cos(mean_lat), lat * km_per_deg)
        for lat, lng in vertices
    ]

    twice_area = 0.0
    for (x1, y1), (x2, y2) in zip(projected, projected[1:] + projected[:1]):
        twice_area += x1 * y2 - x2 * y1

    return abs(twice_area) / 2.0

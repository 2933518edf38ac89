"""
Purpose: Coordinate types and distance helpers.

Internal coordinate order is always (lat, lng).
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Tuple, Union

LatLng = Tuple[float, float]

EARTH_RADIUS_KM = 6371.0088


@dataclass(frozen=True)
class Location:
    """
    A point on the map with an optional human readable address.
    """
    lat: float
    lng: float
    address: str = ""

    @property
    def point(self) -> LatLng:
        return (self.lat, self.lng)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Location:
        # Admin UI sends either {lat, lng} or {latitude, longitude}
        lat = data.get("lat", data.get("latitude", 0)) or 0
        lng = data.get("lng", data.get("longitude", 0)) or 0
        return cls(lat=float(lat), lng=float(lng), address=data.get("address") or "")

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng, "address": self.address}


PointLike = Union[Location, LatLng]


def as_point(value: PointLike) -> LatLng:
    """Normalize a Location or a (lat, lng) pair into a plain tuple."""
    if isinstance(value, Location):
        return value.point
    lat, lng = value
    return (float(lat), float(lng))


def haversine_km(a: PointLike, b: PointLike) -> float:
    """
    Great-circle distance between two points in kilometres.
    """
    lat1, lng1 = as_point(a)
    lat2, lng2 = as_point(b)
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))

"""
Shared building blocks used by every capability package:
error taxonomy, settings and coordinate helpers.

No business logic.
"""
from .errors import FleetError, ValidationError, NotFound, Conflict
from .geo import Location, LatLng

__all__ = [
    "FleetError",
    "ValidationError",
    "NotFound",
    "Conflict",
    "Location",
    "LatLng",
]

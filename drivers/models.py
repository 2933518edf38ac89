"""
Purpose: Core data models for the drivers domain.
What it does:
Defines Driver, the organisational records dispatch needs to decide
eligibility (Team, Hub, Store) and Vehicle, without relying on Django ORM
constraints.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from common.geo import Location


class DriverStatus(str, Enum):
    ON_DUTY = "On Duty"
    AVAILABLE = "Available"
    OFFLINE = "Offline"
    MAINTENANCE = "Maintenance"


class VehicleType(str, Enum):
    CAR = "Car"
    MOTOR_CYCLE = "Motor Cycle"
    BICYCLE = "Bicycle"
    SCOOTER = "Scooter"
    FOOT = "Foot"
    TRUCK = "Truck"


class StoreStatus(str, Enum):
    ONLINE = "ONLINE"
    OFFLINE = "OFFLINE"


@dataclass(frozen=True)
class Driver:
    """
    A stateless representation of a Driver at a specific point in time.
    Location and status change independently of any order.
    """
    id: str
    name: str
    phone: str
    email: str
    location: Location
    status: DriverStatus = DriverStatus.AVAILABLE

    vehicle_id: Optional[str] = None
    team_id: Optional[str] = None

    points: int = 0
    rank: int = 0

    # Fields carried for dispatch-API interoperability.
    vehicle_type: VehicleType = VehicleType.CAR
    vehicle_description: str = ""
    license: str = ""

    @classmethod
    def new(
        cls,
        driver_id: str,
        name: str,
        lat: float = 0.0,
        lng: float = 0.0,
        *,
        phone: str = "",
        email: str = "",
        status: str | DriverStatus = DriverStatus.AVAILABLE,
        **extra,
    ) -> Driver:
        if isinstance(status, str):
            status = DriverStatus(status)

        return cls(
            id=driver_id,
            name=name,
            phone=phone,
            email=email,
            location=Location(lat=lat, lng=lng),
            status=status,
            **extra,
        )


@dataclass(frozen=True)
class Team:
    id: str
    name: str
    hub_id: Optional[str]
    team_lead_id: Optional[str] = None


@dataclass(frozen=True)
class Hub:
    id: str
    name: str
    location: Location
    geofence_id: Optional[str] = None


@dataclass(frozen=True)
class Store:
    id: str
    name: str
    location: Location
    hub_id: Optional[str]
    manager: str = ""
    status: StoreStatus = StoreStatus.ONLINE


@dataclass(frozen=True)
class Vehicle:
    id: str
    name: str
    type: VehicleType = VehicleType.CAR
    license_plate: str = ""
    status: str = "Active"

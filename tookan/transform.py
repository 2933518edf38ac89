"""
Tookan wire format <-> internal Order / Driver.

Pure field translation. Integer IDs on the wire are passed through untouched
here; resolving them against the ID table is the adapter's job.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from common.geo import Location
from drivers.models import Driver
from orders.models import Order, OrderPriority, OrderStatus, OrderType
from .codes import (
    FLEET_TYPE_CAPTIVE,
    layout_type_to_order_type,
    status_to_code,
    transport_type_to_vehicle,
    vehicle_to_transport_type,
)


def _float_or_zero(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no")
    return bool(value)


@dataclass(frozen=True)
class TaskFields:
    """
    An inbound task translated into Order terms, before ID resolution.
    """
    title: str
    description: str
    customer_name: str
    customer_phone: str
    customer_email: str
    origin: Location
    destination: Location
    order_type: OrderType
    status: OrderStatus
    priority: OrderPriority
    fleet_id: Optional[Any]
    team_id: Optional[Any]

    def order_kwargs(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "customer_email": self.customer_email,
            "origin": self.origin,
            "destination": self.destination,
            "order_type": self.order_type,
            "status": self.status,
            "priority": self.priority,
        }


def task_to_order_fields(payload: Mapping[str, Any]) -> TaskFields:
    return TaskFields(
        title=payload.get("order_id") or f"Order-{int(time.time() * 1000)}",
        description=payload.get("job_description") or "",
        customer_name=payload.get("customer_name") or payload.get("job_pickup_name") or "",
        customer_phone=payload.get("job_delivery_phone") or payload.get("job_pickup_phone") or "",
        customer_email=payload.get("customer_email") or "",
        origin=Location(
            lat=_float_or_zero(payload.get("job_pickup_latitude")),
            lng=_float_or_zero(payload.get("job_pickup_longitude")),
            address=payload.get("job_pickup_address") or "",
        ),
        destination=Location(
            lat=_float_or_zero(payload.get("job_delivery_latitude")),
            lng=_float_or_zero(payload.get("job_delivery_longitude")),
            address=payload.get("job_delivery_address") or "",
        ),
        order_type=layout_type_to_order_type(payload.get("layout_type")),
        status=OrderStatus.ASSIGNED if _truthy(payload.get("auto_assignment")) else OrderStatus.UNASSIGNED,
        priority=OrderPriority.MEDIUM,
        fleet_id=payload.get("fleet_id") or None,
        team_id=payload.get("team_id") or None,
    )


def order_to_task(
    order: Order,
    *,
    job_id: int,
    fleet_id: Optional[int],
    team_id: Optional[int],
    tracking_link: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "job_id": job_id,
        "job_token": order.id,
        "order_id": order.title,
        "tracking_link": tracking_link,
        "fleet_id": fleet_id,
        "team_id": team_id,
        "job_status": status_to_code(order.status),
    }


def order_to_task_payload(order: Order, *, fleet_id: Optional[int], team_id: Optional[int]) -> Dict[str, Any]:
    """
    Outbound create_task body for an internal order (the reverse of
    task_to_order_fields).
    """
    return {
        "order_id": order.title,
        "job_description": order.description,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "job_pickup_phone": order.customer_phone,
        "job_pickup_address": order.origin.address,
        "job_pickup_latitude": order.origin.lat,
        "job_pickup_longitude": order.origin.lng,
        "job_delivery_phone": order.customer_phone,
        "job_delivery_address": order.destination.address,
        "job_delivery_latitude": order.destination.lat,
        "job_delivery_longitude": order.destination.lng,
        "layout_type": 0 if order.order_type == OrderType.PICKUP else 1,
        "fleet_id": fleet_id,
        "team_id": team_id,
        "auto_assignment": 1 if order.status != OrderStatus.UNASSIGNED else 0,
    }


def agent_to_driver_fields(payload: Mapping[str, Any], *, partial: bool = False) -> Dict[str, Any]:
    """
    Inbound agent fields in Driver terms. `team_id` holds the raw first entry
    of `team_ids`. With partial=True only fields present in the payload are
    returned (used for edits).
    """
    fields: Dict[str, Any] = {}

    if not partial or "first_name" in payload or "last_name" in payload or "username" in payload:
        name = f"{payload.get('first_name') or ''} {payload.get('last_name') or ''}".strip()
        fields["name"] = name or payload.get("username") or ""
    if not partial or "email" in payload:
        fields["email"] = payload.get("email") or ""
    if not partial or "phone" in payload:
        fields["phone"] = payload.get("phone") or ""
    if not partial or "transport_type" in payload:
        fields["vehicle_type"] = transport_type_to_vehicle(payload.get("transport_type"))
    if not partial or "transport_desc" in payload:
        fields["vehicle_description"] = payload.get("transport_desc") or ""
    if not partial or "license" in payload:
        fields["license"] = payload.get("license") or ""
    if not partial or "team_ids" in payload:
        team_ids = str(payload.get("team_ids") or "")
        first = team_ids.split(",")[0].strip()
        fields["team_id"] = first or None

    return fields


def driver_to_agent(driver: Driver, *, fleet_id: int, team_id: Optional[int]) -> Dict[str, Any]:
    first_name, _, last_name = driver.name.partition(" ")
    return {
        "fleet_id": fleet_id,
        "username": driver.email.split("@")[0] if driver.email else "",
        "email": driver.email,
        "phone": driver.phone,
        "first_name": first_name,
        "last_name": last_name,
        "fleet_type": FLEET_TYPE_CAPTIVE,
        "transport_type": vehicle_to_transport_type(driver.vehicle_type),
        "team_id": team_id,
    }

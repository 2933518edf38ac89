"""
Purpose: Closed code tables of the Tookan wire format.

Job status codes 5, 7 and 8 are intentionally unused by Tookan; the gaps are
kept as they are.
"""
from typing import Any, Dict

from drivers.models import VehicleType
from orders.models import OrderStatus, OrderType

STATUS_TO_CODE: Dict[OrderStatus, int] = {
    OrderStatus.UNASSIGNED: 0,
    OrderStatus.ASSIGNED: 1,
    OrderStatus.AT_STORE: 2,
    OrderStatus.PICKED_UP: 3,
    OrderStatus.IN_PROGRESS: 4,
    OrderStatus.SUCCESSFUL: 6,
    OrderStatus.FAILED: 9,
    OrderStatus.CANCELLED: 10,
}

CODE_TO_STATUS: Dict[int, OrderStatus] = {code: status for status, code in STATUS_TO_CODE.items()}

TRANSPORT_TYPE_TO_VEHICLE: Dict[int, VehicleType] = {
    1: VehicleType.CAR,
    2: VehicleType.MOTOR_CYCLE,
    3: VehicleType.BICYCLE,
    4: VehicleType.SCOOTER,
    5: VehicleType.FOOT,
    6: VehicleType.TRUCK,
}

VEHICLE_TO_TRANSPORT_TYPE: Dict[VehicleType, int] = {
    vehicle: code for code, vehicle in TRANSPORT_TYPE_TO_VEHICLE.items()
}

# layout_type 2 is "pickup and delivery", which this system models as a delivery
LAYOUT_TYPE_TO_ORDER_TYPE: Dict[int, OrderType] = {
    0: OrderType.PICKUP,
    1: OrderType.DELIVERY,
    2: OrderType.DELIVERY,
}

# Tookan "captive" agent
FLEET_TYPE_CAPTIVE = 1


def as_int(value: Any):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def status_to_code(status) -> int:
    """
    Internal status to Tookan job_status. Unknown statuses map to 0.
    """
    try:
        return STATUS_TO_CODE[OrderStatus(status)]
    except ValueError:
        return 0


def code_to_status(code) -> OrderStatus:
    """
    Tookan job_status to internal status. Unknown codes map to Unassigned.
    """
    return CODE_TO_STATUS.get(as_int(code), OrderStatus.UNASSIGNED)


def transport_type_to_vehicle(code) -> VehicleType:
    return TRANSPORT_TYPE_TO_VEHICLE.get(as_int(code), VehicleType.CAR)


def vehicle_to_transport_type(vehicle_type) -> int:
    if vehicle_type == "Motorcycle":
        vehicle_type = VehicleType.MOTOR_CYCLE
    try:
        return VEHICLE_TO_TRANSPORT_TYPE[VehicleType(vehicle_type)]
    except ValueError:
        return 1


def layout_type_to_order_type(layout_type) -> OrderType:
    return LAYOUT_TYPE_TO_ORDER_TYPE.get(as_int(layout_type), OrderType.DELIVERY)

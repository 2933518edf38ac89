"""
Purpose: Order lifecycle state machine.
What it does:
Owns every mutation of an Order's status, assignment and activity log:

Unassigned -> Assigned -> At Store -> Picked Up -> In Progress -> Successful | Failed

The forward path is the normal flow but it is not enforced: an admin may set
any status directly. Each effective change appends one activity-log entry,
commits through the repository's version check and then emits alerts
fire-and-forget. A failed commit raises and leaves nothing applied; a failed
alert is only logged.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from alerts import Alert, AlertEmitter, AlertPriority, AlertType, RelatedEntityType
from common.errors import NotFound, ValidationError
from drivers.repository import DriverRepository
from orders.models import ActivityLogEntry, Order, OrderPriority, OrderStatus, utcnow
from orders.repository import OrderRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def coerce_status(value) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(f"Unknown order status: {value!r}")


class OrderStateMachine:

    def __init__(
        self,
        orders: OrderRepository,
        drivers: DriverRepository,
        emitter: AlertEmitter,
        clock: Clock = utcnow,
    ):
        self.orders = orders
        self.drivers = drivers
        self.emitter = emitter
        self.clock = clock

    # --- Public API ---

    def create(self, order: Order) -> Order:
        """
        Persist a brand new order built with Order.new.
        """
        if not order.activity_log or order.activity_log[-1].status != order.status:
            raise ValidationError("A new order must carry its initial status in the activity log")

        saved = self.orders.put(order, expected_version=None)
        logger.info("Order %s created with status %s", saved.id, saved.status.value)

        if saved.driver_id:
            self._emit(self._order_alert(saved, f"New order {saved.title} assigned to driver."))
        return saved

    def set_status(self, order: Order, new_status) -> Order:
        """
        Move `order` to `new_status`. Setting the current status is a no-op.
        `order` is the caller's last-known snapshot; its version guards the commit.
        """
        new_status = coerce_status(new_status)
        current = self._current(order)

        if current.status == new_status:
            return current

        updated = copy.deepcopy(current)
        self._append_status(updated, new_status)

        saved = self.orders.put(updated, expected_version=order.version)
        logger.info("Order %s status %s -> %s", saved.id, current.status.value, new_status.value)

        for alert in self._status_alerts(saved):
            self._emit(alert)
        return saved

    def assign_driver(
        self,
        order: Order,
        driver_id: str,
        vehicle_id: Optional[str] = None,
        *,
        status=None,
    ) -> Order:
        """
        Put a driver (and vehicle, defaulting to the driver's own) on an order.
        An Unassigned order also becomes Assigned in the same commit; orders
        further along keep their status. `status`, when given, is applied
        afterwards in that same commit.
        """
        driver = self.drivers.get(driver_id)
        if driver is None:
            raise NotFound(f"Driver {driver_id} not found")

        vehicle_id = vehicle_id or driver.vehicle_id
        follow_up = coerce_status(status) if status is not None else None

        current = self._current(order)
        updated, assignment_changed = self._plan_assignment(current, driver_id, vehicle_id)
        implicit_status = updated.status
        if follow_up is not None and updated.status != follow_up:
            self._append_status(updated, follow_up)

        if not assignment_changed and updated.status == current.status:
            # identical replay
            return current

        saved = self.orders.put(updated, expected_version=order.version)
        logger.info(
            "Order %s assigned to driver %s (vehicle %s), status %s",
            saved.id, driver_id, vehicle_id, saved.status.value,
        )

        alerts: List[Alert] = []
        if assignment_changed:
            alerts.append(self._order_alert(saved, f"Order {saved.title} assigned to driver {driver.name}."))
        elif implicit_status != current.status:
            alerts.append(self._order_alert(saved, f"Order {saved.title} status changed to {implicit_status.value}."))
        if saved.status != implicit_status:
            alerts.extend(self._status_alerts(saved))
        for alert in alerts:
            self._emit(alert)
        return saved

    # --- Helpers ---

    def _current(self, order: Order) -> Order:
        current = self.orders.get(order.id)
        if current is None:
            raise NotFound(f"Order {order.id} not found")
        return current

    def _plan_assignment(self, current: Order, driver_id: str, vehicle_id: Optional[str]) -> Tuple[Order, bool]:
        updated = copy.deepcopy(current)
        changed = updated.driver_id != driver_id or updated.vehicle_id != vehicle_id

        updated.driver_id = driver_id
        updated.vehicle_id = vehicle_id
        if updated.status == OrderStatus.UNASSIGNED:
            self._append_status(updated, OrderStatus.ASSIGNED)
        return updated, changed

    def _append_status(self, order: Order, status: OrderStatus) -> None:
        now = self.clock()
        last = order.last_activity
        # Keep the log non-decreasing even if the clock steps backwards.
        if last is not None and now < last.timestamp:
            now = last.timestamp
        order.status = status
        order.activity_log.append(ActivityLogEntry(status=status, timestamp=now))

    def _status_alerts(self, order: Order) -> List[Alert]:
        alerts = [self._order_alert(order, f"Order {order.title} status changed to {order.status.value}.")]
        if order.status == OrderStatus.FAILED:
            alerts.append(
                Alert(
                    type=AlertType.ORDER_FAILED,
                    message=f"Order {order.title} has failed.",
                    priority=AlertPriority.HIGH,
                    related_entity_type=RelatedEntityType.ORDER,
                    related_entity_id=order.id,
                )
            )
        return alerts

    @staticmethod
    def _order_alert(order: Order, message: str) -> Alert:
        return Alert(
            type=AlertType.ORDER_STATUS_UPDATED,
            message=message,
            priority=AlertPriority.HIGH if order.priority == OrderPriority.URGENT else AlertPriority.MEDIUM,
            related_entity_type=RelatedEntityType.ORDER,
            related_entity_id=order.id,
        )

    def _emit(self, alert: Alert) -> None:
        self.emitter.emit(alert)

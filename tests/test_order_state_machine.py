from datetime import datetime, timedelta, timezone

import pytest

from alerts import AlertEmitter, AlertPriority, AlertType
from common.errors import Conflict, NotFound, ValidationError
from dispatch import OrderStateMachine
from orders.models import Order, OrderPriority, OrderStatus


def statuses(order):
    return [entry.status for entry in order.activity_log]


def test_new_order_starts_unassigned(make_order):
    order = make_order()

    assert order.status == OrderStatus.UNASSIGNED
    assert statuses(order) == [OrderStatus.UNASSIGNED]
    assert order.version == 1


def test_set_status_appends_log_and_alerts(services, make_order, alert_sink):
    order = make_order()

    updated = services.state_machine.set_status(order, OrderStatus.AT_STORE)

    assert updated.status == OrderStatus.AT_STORE
    assert statuses(updated) == [OrderStatus.UNASSIGNED, OrderStatus.AT_STORE]
    assert updated.version == order.version + 1

    alerts = alert_sink.alerts
    assert len(alerts) == 1
    assert alerts[0].type == AlertType.ORDER_STATUS_UPDATED
    assert alerts[0].message == "Order ORD-1001 status changed to At Store."
    assert alerts[0].related_entity_id == order.id


def test_set_status_accepts_string_values(services, make_order):
    order = make_order()
    assert services.state_machine.set_status(order, "Picked Up").status == OrderStatus.PICKED_UP


def test_set_same_status_is_noop(services, make_order, alert_sink):
    """
    Setting the current status writes nothing and emits nothing.
    """
    order = make_order()

    same = services.state_machine.set_status(order, OrderStatus.UNASSIGNED)

    assert same.version == order.version
    assert statuses(same) == [OrderStatus.UNASSIGNED]
    assert alert_sink.alerts == []


def test_failed_emits_two_alerts(services, make_order, alert_sink):
    order = make_order()

    services.state_machine.set_status(order, OrderStatus.FAILED)

    types = [alert.type for alert in alert_sink.alerts]
    assert types == [AlertType.ORDER_STATUS_UPDATED, AlertType.ORDER_FAILED]
    assert alert_sink.alerts[1].priority == AlertPriority.HIGH


def test_forward_path_is_not_enforced(services, make_order):
    """
    Admin override: a terminal order can be moved anywhere.
    """
    order = make_order()
    done = services.state_machine.set_status(order, OrderStatus.SUCCESSFUL)
    reopened = services.state_machine.set_status(done, OrderStatus.ASSIGNED)

    assert reopened.status == OrderStatus.ASSIGNED
    assert statuses(reopened)[-1] == OrderStatus.ASSIGNED


def test_urgent_orders_raise_high_priority_alerts(services, make_order, alert_sink):
    order = make_order(priority=OrderPriority.URGENT)

    services.state_machine.set_status(order, OrderStatus.IN_PROGRESS)

    assert alert_sink.alerts[0].priority == AlertPriority.HIGH


def test_unknown_status_is_rejected(services, make_order):
    with pytest.raises(ValidationError):
        services.state_machine.set_status(make_order(), "Teleported")


def test_stale_snapshot_conflicts(services, make_order):
    """
    Two writers starting from the same snapshot: the second one loses.
    """
    order = make_order()
    services.state_machine.set_status(order, OrderStatus.AT_STORE)

    with pytest.raises(Conflict):
        services.state_machine.set_status(order, OrderStatus.FAILED)

    stored = services.orders.get(order.id)
    assert stored.status == OrderStatus.AT_STORE
    assert statuses(stored) == [OrderStatus.UNASSIGNED, OrderStatus.AT_STORE]


def test_assign_with_stale_snapshot_conflicts(services, make_order, alert_sink):
    """
    An assignment built on an outdated snapshot loses to the status change
    that committed first, and leaves the stored order untouched.
    """
    order = make_order()
    services.state_machine.set_status(order, OrderStatus.AT_STORE)
    alerts_before = len(alert_sink.alerts)

    with pytest.raises(Conflict):
        services.state_machine.assign_driver(order, "D001")

    stored = services.orders.get(order.id)
    assert stored.driver_id is None
    assert stored.vehicle_id is None
    assert statuses(stored) == [OrderStatus.UNASSIGNED, OrderStatus.AT_STORE]
    assert len(alert_sink.alerts) == alerts_before

    with pytest.raises(Conflict):
        services.dispatch.assign(order, "D001")
    assert services.orders.get(order.id).driver_id is None


def test_assign_unassigned_order(services, make_order, alert_sink):
    order = make_order()

    assigned = services.state_machine.assign_driver(order, "D001")

    assert assigned.driver_id == "D001"
    assert assigned.vehicle_id == "V001"
    assert assigned.status == OrderStatus.ASSIGNED
    assert statuses(assigned) == [OrderStatus.UNASSIGNED, OrderStatus.ASSIGNED]
    assert [alert.message for alert in alert_sink.alerts] == [
        "Order ORD-1001 assigned to driver Thabo Nkosi."
    ]


def test_assign_is_idempotent(services, make_order, alert_sink):
    order = make_order()
    first = services.state_machine.assign_driver(order, "D001")
    second = services.state_machine.assign_driver(first, "D001")
    replay = services.state_machine.assign_driver(order, "D001")

    assert second.version == first.version
    assert replay.version == first.version
    assert statuses(second) == [OrderStatus.UNASSIGNED, OrderStatus.ASSIGNED]
    assert len(alert_sink.alerts) == 1


def test_reassign_keeps_status_of_order_in_progress(services, make_order):
    order = services.state_machine.assign_driver(make_order(), "D001")
    picked_up = services.state_machine.set_status(order, OrderStatus.PICKED_UP)

    reassigned = services.state_machine.assign_driver(picked_up, "D003", "V009")

    assert reassigned.driver_id == "D003"
    assert reassigned.vehicle_id == "V009"
    assert reassigned.status == OrderStatus.PICKED_UP
    assert len(reassigned.activity_log) == len(picked_up.activity_log)


def test_assign_with_follow_up_status(services, make_order, alert_sink):
    order = make_order()

    saved = services.state_machine.assign_driver(order, "D001", status=OrderStatus.AT_STORE)

    assert saved.version == order.version + 1
    assert statuses(saved) == [OrderStatus.UNASSIGNED, OrderStatus.ASSIGNED, OrderStatus.AT_STORE]
    assert [alert.message for alert in alert_sink.alerts] == [
        "Order ORD-1001 assigned to driver Thabo Nkosi.",
        "Order ORD-1001 status changed to At Store.",
    ]


def test_assign_unknown_driver(services, make_order):
    order = make_order()

    with pytest.raises(NotFound):
        services.state_machine.assign_driver(order, "D999")

    assert services.orders.get(order.id).driver_id is None


def test_unknown_order_is_not_found(services, stores):
    # never persisted
    ghost = Order.new(
        title="ghost",
        customer_name="",
        customer_phone="",
        origin=stores[0].location,
        destination=stores[1].location,
        store_id="S001",
    )
    with pytest.raises(NotFound):
        services.state_machine.set_status(ghost, OrderStatus.ASSIGNED)


def test_activity_log_never_goes_backwards(services):
    """
    A clock that steps backwards still yields a non-decreasing log.
    """
    start = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    ticks = iter([start - timedelta(minutes=5), start - timedelta(minutes=10)])
    machine = OrderStateMachine(services.orders, services.drivers, services.emitter, clock=lambda: next(ticks))

    order = machine.create(
        Order.new(
            title="ORD-2002",
            customer_name="Naledi Khumalo",
            customer_phone="+27831234567",
            origin=services.stores.get("S001").location,
            destination=services.stores.get("S002").location,
            store_id="S001",
            now=start,
        )
    )
    order = machine.set_status(order, OrderStatus.ASSIGNED)
    order = machine.set_status(order, OrderStatus.AT_STORE)

    timestamps = [entry.timestamp for entry in order.activity_log]
    assert timestamps == sorted(timestamps)
    assert order.last_activity.status == order.status


def test_create_rejects_order_without_seeded_log(services, make_order):
    order = make_order(title="ORD-3003")
    broken = Order(
        id="broken",
        title="broken",
        customer_name="",
        customer_phone="",
        origin=order.origin,
        destination=order.destination,
        store_id="S001",
    )
    with pytest.raises(ValidationError):
        services.state_machine.create(broken)


class ExplodingSink:
    def create(self, alert):
        raise RuntimeError("alert store is down")


def test_alert_failure_does_not_roll_back(services, make_order, caplog):
    machine = OrderStateMachine(
        services.orders,
        services.drivers,
        AlertEmitter(ExplodingSink(), asynchronous=False),
    )
    order = make_order()

    updated = machine.set_status(order, OrderStatus.FAILED)

    assert updated.status == OrderStatus.FAILED
    assert services.orders.get(order.id).status == OrderStatus.FAILED
    assert "Failed to store alert" in caplog.text


def test_async_emitter_delivers_after_drain(services, make_order, alert_sink):
    emitter = AlertEmitter(alert_sink, max_workers=2)
    machine = OrderStateMachine(services.orders, services.drivers, emitter)

    machine.set_status(make_order(), OrderStatus.FAILED)
    emitter.drain(timeout=5)
    emitter.close()

    assert len(alert_sink.alerts) == 2

"""
Purpose: Django ORM implementations of the core storage interfaces.
What it does:
- DjangoOrderRepository: OrderRepository with the optimistic version check done
  as a conditional UPDATE ... WHERE version = expected
- DjangoDriverRepository / DjangoTeamRepository / DjangoStoreLookup / DjangoZoneRepository
- DjangoAlertSink: AlertSink writing Alert rows
- DjangoTookanIdMap: TookanIdMap backed by TookanIdMapping rows
- DjangoZoneStateStore: ZoneStateStore backed by DriverZoneState rows

Rows never leave this module: callers only ever see the core dataclasses.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Set

from django.db import IntegrityError, transaction
from django.db.models import F

from alerts.models import Alert
from common.errors import Conflict, NotFound, ValidationError
from common.geo import Location, PointLike
from drivers.models import Driver, DriverStatus, Store, StoreStatus, Team, VehicleType
from drivers.repository import nearest_store
from geofencing.models import ExclusionZone, Geofence
from orders.models import ActivityLogEntry, Order, OrderItem, OrderPriority, OrderStatus, OrderType, utcnow
from tookan.id_map import IdKind
from . import models

logger = logging.getLogger(__name__)


# --- Row <-> core conversions ---

def order_from_row(row: models.Order) -> Order:
    return Order(
        id=row.id,
        title=row.title,
        description=row.description,
        customer_name=row.customer_name,
        customer_phone=row.customer_phone,
        customer_email=row.customer_email,
        origin=Location(row.origin_lat, row.origin_lng, row.origin_address),
        destination=Location(row.destination_lat, row.destination_lng, row.destination_address),
        store_id=row.store_id,
        status=OrderStatus(row.status),
        priority=OrderPriority(row.priority),
        order_type=OrderType(row.order_type),
        driver_id=row.driver_id,
        vehicle_id=row.vehicle_id,
        team_id=row.team_id,
        order_items=[OrderItem(name=item.name, quantity=item.quantity, id=item.id) for item in row.items.all()],
        activity_log=[ActivityLogEntry(OrderStatus(entry.status), entry.timestamp) for entry in row.activity.all()],
        created_at=row.created_at,
        updated_at=row.updated_at,
        version=row.version,
    )


def _order_columns(order: Order) -> dict:
    return {
        "title": order.title,
        "description": order.description,
        "customer_name": order.customer_name,
        "customer_phone": order.customer_phone,
        "customer_email": order.customer_email,
        "origin_lat": order.origin.lat,
        "origin_lng": order.origin.lng,
        "origin_address": order.origin.address,
        "destination_lat": order.destination.lat,
        "destination_lng": order.destination.lng,
        "destination_address": order.destination.address,
        "status": OrderStatus(order.status).value,
        "priority": OrderPriority(order.priority).value,
        "order_type": OrderType(order.order_type).value,
        "store_id": order.store_id,
        "driver_id": order.driver_id,
        "vehicle_id": order.vehicle_id,
        "team_id": order.team_id,
    }


def driver_from_row(row: models.Driver) -> Driver:
    return Driver(
        id=row.id,
        name=row.name,
        phone=row.phone,
        email=row.email,
        location=Location(row.lat, row.lng, row.address),
        status=DriverStatus(row.status),
        vehicle_id=row.vehicle_id,
        team_id=row.team_id,
        points=row.points,
        rank=row.rank,
        vehicle_type=VehicleType(row.vehicle_type),
        vehicle_description=row.vehicle_description,
        license=row.license,
    )


def _driver_columns(driver: Driver) -> dict:
    return {
        "name": driver.name,
        "phone": driver.phone,
        "email": driver.email,
        "lat": driver.location.lat,
        "lng": driver.location.lng,
        "address": driver.location.address,
        "status": DriverStatus(driver.status).value,
        "vehicle_id": driver.vehicle_id,
        "team_id": driver.team_id,
        "points": driver.points,
        "rank": driver.rank,
        "vehicle_type": VehicleType(driver.vehicle_type).value,
        "vehicle_description": driver.vehicle_description,
        "license": driver.license,
    }


def store_from_row(row: models.Store) -> Store:
    return Store(
        id=row.id,
        name=row.name,
        location=Location(row.lat, row.lng, row.address),
        hub_id=row.hub_id,
        manager=row.manager,
        status=StoreStatus(row.status),
    )


def team_from_row(row: models.Team) -> Team:
    return Team(id=row.id, name=row.name, hub_id=row.hub_id, team_lead_id=row.team_lead_id)


def _require_reference(model, pk: Optional[str], label: str) -> None:
    if pk is not None and not model.objects.filter(pk=pk).exists():
        raise ValidationError(f"Unknown {label}: {pk}")


# --- Repositories ---

class DjangoOrderRepository:

    def _queryset(self):
        return models.Order.objects.prefetch_related("items", "activity")

    def get(self, order_id: str) -> Optional[Order]:
        row = self._queryset().filter(pk=order_id).first()
        return order_from_row(row) if row else None

    def put(self, order: Order, expected_version: Optional[int]) -> Order:
        _require_reference(models.Store, order.store_id, "store")
        _require_reference(models.Driver, order.driver_id, "driver")
        _require_reference(models.Vehicle, order.vehicle_id, "vehicle")
        _require_reference(models.Team, order.team_id, "team")

        columns = _order_columns(order)
        now = utcnow()

        with transaction.atomic():
            if expected_version is None:
                if models.Order.objects.filter(pk=order.id).exists():
                    raise Conflict(f"Order {order.id} already exists")
                try:
                    # a concurrent create can still win between the check and the insert
                    with transaction.atomic():
                        models.Order.objects.create(
                            id=order.id, version=1, created_at=order.created_at, updated_at=now, **columns
                        )
                except IntegrityError:
                    raise Conflict(f"Order {order.id} already exists")
            else:
                # compare-and-set: only the writer holding the current version wins
                updated = models.Order.objects.filter(pk=order.id, version=expected_version).update(
                    version=F("version") + 1, updated_at=now, **columns
                )
                if not updated:
                    if not models.Order.objects.filter(pk=order.id).exists():
                        raise NotFound(f"Order {order.id} not found")
                    raise Conflict(f"Order {order.id} was modified concurrently (expected version {expected_version})")

            self._append_activity(order)
            self._replace_items(order)

        return self.get(order.id)

    def list(self, *, status: Optional[OrderStatus] = None) -> List[Order]:
        queryset = self._queryset()
        if status is not None:
            queryset = queryset.filter(status=OrderStatus(status).value)
        return [order_from_row(row) for row in queryset]

    @staticmethod
    def _append_activity(order: Order) -> None:
        stored = models.ActivityLogEntry.objects.filter(order_id=order.id).count()
        models.ActivityLogEntry.objects.bulk_create([
            models.ActivityLogEntry(
                order_id=order.id,
                position=position,
                status=OrderStatus(entry.status).value,
                timestamp=entry.timestamp,
            )
            for position, entry in enumerate(order.activity_log)
            if position >= stored
        ])

    @staticmethod
    def _replace_items(order: Order) -> None:
        models.OrderItem.objects.filter(order_id=order.id).delete()
        models.OrderItem.objects.bulk_create([
            models.OrderItem(id=item.id, order_id=order.id, name=item.name, quantity=item.quantity)
            for item in order.order_items
        ])


class DjangoDriverRepository:

    # concurrent adds racing for the same id retry with the next free one
    MAX_ADD_ATTEMPTS = 5

    def __init__(self, id_prefix: str = "D"):
        self._id_prefix = id_prefix

    def get(self, driver_id: str) -> Optional[Driver]:
        row = models.Driver.objects.filter(pk=driver_id).first()
        return driver_from_row(row) if row else None

    def put(self, driver: Driver) -> Driver:
        _require_reference(models.Team, driver.team_id, "team")
        _require_reference(models.Vehicle, driver.vehicle_id, "vehicle")

        models.Driver.objects.update_or_create(id=driver.id, defaults=_driver_columns(driver))
        return driver

    def add(self, driver: Driver) -> Driver:
        _require_reference(models.Team, driver.team_id, "team")
        _require_reference(models.Vehicle, driver.vehicle_id, "vehicle")

        for _ in range(self.MAX_ADD_ATTEMPTS):
            candidate = replace(driver, id=self._next_id())
            try:
                with transaction.atomic():
                    models.Driver.objects.create(id=candidate.id, **_driver_columns(candidate))
            except IntegrityError:
                logger.info("Driver id %s was taken concurrently, retrying", candidate.id)
                continue
            return candidate

        raise Conflict("Could not allocate a driver id, try again")

    def list(self) -> List[Driver]:
        return [driver_from_row(row) for row in models.Driver.objects.order_by("id")]

    def _next_id(self) -> str:
        number = models.Driver.objects.count() + 1
        while models.Driver.objects.filter(pk=f"{self._id_prefix}{number:03d}").exists():
            number += 1
        return f"{self._id_prefix}{number:03d}"


class DjangoTeamRepository:

    def get(self, team_id: str) -> Optional[Team]:
        row = models.Team.objects.filter(pk=team_id).first()
        return team_from_row(row) if row else None

    def list(self) -> List[Team]:
        return [team_from_row(row) for row in models.Team.objects.order_by("id")]


class DjangoStoreLookup:

    def get(self, store_id: str) -> Optional[Store]:
        row = models.Store.objects.filter(pk=store_id).first()
        return store_from_row(row) if row else None

    def list(self) -> List[Store]:
        return [store_from_row(row) for row in models.Store.objects.order_by("id")]

    def find_nearest(self, point: PointLike) -> Optional[Store]:
        return nearest_store(self.list(), point)


class DjangoZoneRepository:

    def exclusion_zones(self) -> List[ExclusionZone]:
        return [
            ExclusionZone(row.id, row.name, row.coordinates, zone_type=row.type)
            for row in models.ExclusionZone.objects.order_by("id")
        ]

    def geofences(self) -> List[Geofence]:
        return [
            Geofence(row.id, row.name, row.coordinates, color=row.color)
            for row in models.Geofence.objects.order_by("id")
        ]


class DjangoAlertSink:
    """
    Called from the alert worker pool; each worker thread gets its own connection.
    """

    def create(self, alert: Alert) -> None:
        models.Alert.objects.create(
            id=alert.id,
            type=alert.type.value,
            message=alert.message,
            priority=alert.priority.value,
            related_entity_type=alert.related_entity_type.value if alert.related_entity_type else None,
            related_entity_id=alert.related_entity_id,
            timestamp=alert.timestamp,
            is_read=alert.is_read,
        )


class DjangoTookanIdMap:

    def external_id(self, kind: IdKind, internal_id: str) -> int:
        mapping, created = models.TookanIdMapping.objects.get_or_create(
            kind=IdKind(kind).value, internal_id=internal_id
        )
        if created:
            logger.debug("Allocated Tookan %s id %s for %s", mapping.kind, mapping.pk, internal_id)
        return mapping.pk

    def internal_id(self, kind: IdKind, external_id: int) -> Optional[str]:
        try:
            external_id = int(external_id)
        except (TypeError, ValueError):
            return None
        return (
            models.TookanIdMapping.objects.filter(pk=external_id, kind=IdKind(kind).value)
            .values_list("internal_id", flat=True)
            .first()
        )

    def register(self, kind: IdKind, internal_id: str, external_id: int) -> None:
        models.TookanIdMapping.objects.update_or_create(
            pk=external_id, defaults={"kind": IdKind(kind).value, "internal_id": internal_id}
        )


class DjangoZoneStateStore:
    """
    ZoneStateStore on DriverZoneState rows. The row is locked for the swap so
    two workers handling the same driver serialize.
    """

    def swap(self, driver_id: str, zone_ids: Iterable[str]) -> Set[str]:
        with transaction.atomic():
            row, _ = models.DriverZoneState.objects.select_for_update().get_or_create(
                driver_id=driver_id, defaults={"zone_ids": []}
            )
            previous = set(row.zone_ids)
            row.zone_ids = sorted(zone_ids)
            row.save(update_fields=["zone_ids", "updated_at"])
        return previous

    def get(self, driver_id: str) -> Set[str]:
        zone_ids = (
            models.DriverZoneState.objects.filter(driver_id=driver_id)
            .values_list("zone_ids", flat=True)
            .first()
        )
        return set(zone_ids or [])

    def clear(self, driver_id: str) -> None:
        models.DriverZoneState.objects.filter(driver_id=driver_id).delete()

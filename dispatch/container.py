"""
Purpose: Wire the core components together once, at process start.
What it does:
Takes exactly one concrete implementation of each repository interface and
builds the state machine, assignment service, location service and Tookan
adapter on top of them. Nothing is looked up globally afterwards; callers
hold on to the returned FleetServices.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from alerts import AlertEmitter, AlertSink, InMemoryAlertSink
from common.config import FleetSettings
from drivers.models import Driver, Store, Team
from drivers.repository import (
    DriverRepository,
    InMemoryDriverRepository,
    InMemoryStoreLookup,
    InMemoryTeamRepository,
    InMemoryZoneRepository,
    StoreLookup,
    TeamRepository,
    ZoneRepository,
)
from geofencing.models import ExclusionZone, Geofence
from geofencing.state import InMemoryZoneStateStore, ZoneStateStore
from geofencing.tracker import ZoneEntryTracker
from orders.repository import InMemoryOrderRepository, OrderRepository
from tookan.adapter import TookanAdapter, UnitOfWork
from tookan.id_map import InMemoryTookanIdMap, TookanIdMap
from .assignment import DispatchAssignment
from .policy import AssignmentPolicy
from .state_machines.driver_state import DriverLocationService
from .state_machines.order_state import OrderStateMachine


@dataclass
class FleetServices:
    orders: OrderRepository
    drivers: DriverRepository
    teams: TeamRepository
    stores: StoreLookup
    zones: ZoneRepository
    id_map: TookanIdMap
    emitter: AlertEmitter
    state_machine: OrderStateMachine
    dispatch: DispatchAssignment
    locations: DriverLocationService
    tracker: ZoneEntryTracker
    tookan: TookanAdapter

    def close(self) -> None:
        self.emitter.close()


def build_services(
    *,
    orders: OrderRepository,
    drivers: DriverRepository,
    teams: TeamRepository,
    stores: StoreLookup,
    zones: ZoneRepository,
    alert_sink: AlertSink,
    id_map: TookanIdMap,
    zone_state: Optional[ZoneStateStore] = None,
    unit_of_work: Optional[UnitOfWork] = None,
    settings: Optional[FleetSettings] = None,
    policy: Optional[AssignmentPolicy] = None,
    alerts_async: bool = True,
) -> FleetServices:
    """
    `unit_of_work` is a factory of context managers that each Tookan call runs
    inside (e.g. django.db.transaction.atomic); without one nothing is rolled back.
    """
    settings = settings or FleetSettings()

    emitter = AlertEmitter(alert_sink, max_workers=settings.alert_workers, asynchronous=alerts_async)
    state_machine = OrderStateMachine(orders, drivers, emitter)
    dispatch = DispatchAssignment(state_machine, drivers, teams, stores, zones=zones, policy=policy)
    tracker = ZoneEntryTracker(emitter, zone_state if zone_state is not None else InMemoryZoneStateStore())

    return FleetServices(
        orders=orders,
        drivers=drivers,
        teams=teams,
        stores=stores,
        zones=zones,
        id_map=id_map,
        emitter=emitter,
        state_machine=state_machine,
        dispatch=dispatch,
        locations=DriverLocationService(drivers, zones, tracker),
        tracker=tracker,
        tookan=TookanAdapter(
            orders=orders,
            drivers=drivers,
            stores=stores,
            id_map=id_map,
            state_machine=state_machine,
            dispatch=dispatch,
            tracking_base_url=settings.tracking_base_url,
            api_key=settings.tookan_inbound_api_key,
            unit_of_work=unit_of_work,
        ),
    )


def build_in_memory_services(
    *,
    drivers: Iterable[Driver] = (),
    teams: Iterable[Team] = (),
    stores: Iterable[Store] = (),
    exclusion_zones: Iterable[ExclusionZone] = (),
    geofences: Iterable[Geofence] = (),
    alert_sink: Optional[AlertSink] = None,
    zone_state: Optional[ZoneStateStore] = None,
    settings: Optional[FleetSettings] = None,
    policy: Optional[AssignmentPolicy] = None,
    alerts_async: bool = True,
) -> FleetServices:
    """
    Everything in memory. Used by tests, scripts and local experiments.
    """
    return build_services(
        orders=InMemoryOrderRepository(),
        drivers=InMemoryDriverRepository(drivers),
        teams=InMemoryTeamRepository(teams),
        stores=InMemoryStoreLookup(stores),
        zones=InMemoryZoneRepository(exclusion_zones, geofences),
        alert_sink=alert_sink if alert_sink is not None else InMemoryAlertSink(),
        id_map=InMemoryTookanIdMap(),
        zone_state=zone_state,
        settings=settings,
        policy=policy,
        alerts_async=alerts_async,
    )

"""
Purpose: The Django-backed service container.
Built once by FleetConfig.ready(); views reach it through fleet_services().
"""
from typing import Optional

from django.apps import apps
from django.db import transaction

from common.config import FleetSettings, load_settings
from dispatch.container import FleetServices, build_services
from .repositories import (
    DjangoAlertSink,
    DjangoDriverRepository,
    DjangoOrderRepository,
    DjangoStoreLookup,
    DjangoTeamRepository,
    DjangoTookanIdMap,
    DjangoZoneRepository,
    DjangoZoneStateStore,
)


def build_django_services(*, settings: Optional[FleetSettings] = None, alerts_async: bool = True) -> FleetServices:
    return build_services(
        orders=DjangoOrderRepository(),
        drivers=DjangoDriverRepository(),
        teams=DjangoTeamRepository(),
        stores=DjangoStoreLookup(),
        zones=DjangoZoneRepository(),
        alert_sink=DjangoAlertSink(),
        id_map=DjangoTookanIdMap(),
        zone_state=DjangoZoneStateStore(),
        unit_of_work=transaction.atomic,
        settings=settings or load_settings(),
        alerts_async=alerts_async,
    )


def fleet_services() -> FleetServices:
    return apps.get_app_config("fleet").services

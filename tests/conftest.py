import pytest

from alerts import InMemoryAlertSink
from common.geo import Location
from dispatch.container import build_in_memory_services
from drivers.models import Driver, Store, Team
from geofencing.models import ExclusionZone, ZoneType
from orders.models import Order, OrderPriority

SANDTON_CBD = [(-26.09, 28.04), (-26.09, 28.07), (-26.12, 28.07), (-26.12, 28.04)]


@pytest.fixture
def sandton_cbd():
    return list(SANDTON_CBD)


@pytest.fixture
def stores():
    return [
        Store("S001", "Sandton City", Location(-26.1076, 28.0567, "83 Rivonia Rd, Sandton"), hub_id="H001"),
        Store("S002", "Maponya Mall", Location(-26.2485, 27.8540, "2127 Chris Hani Rd, Soweto"), hub_id="H002"),
    ]


@pytest.fixture
def teams():
    return [
        Team("T001", "Sandton Riders", hub_id="H001"),
        Team("T002", "Soweto Riders", hub_id="H002"),
    ]


@pytest.fixture
def drivers():
    return [
        Driver.new("D001", "Thabo Nkosi", -26.100, 28.050, phone="+27820000001",
                   email="thabo@example.com", team_id="T001", vehicle_id="V001"),
        Driver.new("D002", "Lerato Dlamini", -26.240, 27.860, phone="+27820000002",
                   email="lerato@example.com", team_id="T002", vehicle_id="V002"),
        Driver.new("D003", "Sipho Mokoena", -26.105, 28.052, phone="+27820000003",
                   email="sipho@example.com", team_id="T001"),
    ]


@pytest.fixture
def exclusion_zones(sandton_cbd):
    return [
        ExclusionZone("Z001", "Sandton CBD", sandton_cbd, zone_type=ZoneType.NO_GO),
        ExclusionZone(
            "Z002",
            "M1 Highway Construction",
            [(-26.10, 28.045), (-26.10, 28.06), (-26.11, 28.06), (-26.11, 28.045)],
            zone_type=ZoneType.SLOW_DOWN,
        ),
    ]


@pytest.fixture
def alert_sink():
    return InMemoryAlertSink()


@pytest.fixture
def services(drivers, teams, stores, exclusion_zones, alert_sink):
    """
    In-memory core with inline alert delivery so assertions can run immediately.
    """
    built = build_in_memory_services(
        drivers=drivers,
        teams=teams,
        stores=stores,
        exclusion_zones=exclusion_zones,
        alert_sink=alert_sink,
        alerts_async=False,
    )
    yield built
    built.close()


@pytest.fixture
def make_order(services):
    def _make(store_id="S001", priority=OrderPriority.MEDIUM, **extra):
        order = Order.new(
            title=extra.pop("title", "ORD-1001"),
            customer_name="Naledi Khumalo",
            customer_phone="+27831234567",
            origin=Location(-26.1076, 28.0567, "Sandton City"),
            destination=Location(-26.1450, 28.0410, "Rosebank"),
            store_id=store_id,
            priority=priority,
            **extra,
        )
        return services.state_machine.create(order)
    return _make

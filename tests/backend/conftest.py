import pytest
from django.apps import apps
from rest_framework.test import APIClient

from common.config import FleetSettings
from fleet import models
from fleet.services import build_django_services

SANDTON_CBD = [
    {"lat": -26.09, "lng": 28.04},
    {"lat": -26.09, "lng": 28.07},
    {"lat": -26.12, "lng": 28.07},
    {"lat": -26.12, "lng": 28.04},
]


@pytest.fixture(autouse=True)
def fleet(db):
    """
    Swap the process-wide services for ones that deliver alerts inline:
    the test database is a single connection inside one transaction.
    """
    config = apps.get_app_config("fleet")
    original = config.services
    config.services = build_django_services(settings=FleetSettings(), alerts_async=False)
    yield config.services
    config.services.close()
    config.services = original


@pytest.fixture
def api():
    return APIClient()


@pytest.fixture
def seeded(db):
    sandton = models.Hub.objects.create(id="H001", name="Sandton Hub", lat=-26.1076, lng=28.0567)
    soweto = models.Hub.objects.create(id="H002", name="Soweto Hub", lat=-26.2485, lng=27.8540)

    models.Store.objects.create(id="S001", name="Sandton City", lat=-26.1076, lng=28.0567, hub=sandton)
    models.Store.objects.create(id="S002", name="Maponya Mall", lat=-26.2485, lng=27.8540, hub=soweto)

    t1 = models.Team.objects.create(id="T001", name="Sandton Riders", hub=sandton)
    t2 = models.Team.objects.create(id="T002", name="Soweto Riders", hub=soweto)

    v1 = models.Vehicle.objects.create(id="V001", name="Polo", license_plate="GP 123-456")
    v2 = models.Vehicle.objects.create(id="V002", name="Honda", type="Motor Cycle", license_plate="GP 987-654")

    models.Driver.objects.create(id="D001", name="Thabo Nkosi", lat=-26.10, lng=28.05, team=t1, vehicle=v1)
    models.Driver.objects.create(id="D002", name="Lerato Dlamini", lat=-26.24, lng=27.86, team=t2, vehicle=v2)
    models.Driver.objects.create(id="D003", name="Sipho Mokoena", lat=-26.13, lng=28.06, team=t1)

    models.ExclusionZone.objects.create(id="Z001", name="Sandton CBD", coordinates=SANDTON_CBD, type="No-go")
    models.Geofence.objects.create(id="G001", name="Sandton", coordinates=SANDTON_CBD)


@pytest.fixture
def order_payload():
    return {
        "title": "ORD-1001",
        "customer_name": "Naledi Khumalo",
        "customer_phone": "+27831234567",
        "origin": {"lat": -26.1076, "lng": 28.0567, "address": "Sandton City"},
        "destination": {"lat": -26.1450, "lng": 28.0410, "address": "Rosebank"},
        "store_id": "S001",
        "priority": "High",
        "order_items": [{"name": "Pizza", "quantity": 2}],
    }


@pytest.fixture
def create_order(api, seeded, order_payload):
    def _create(**overrides):
        response = api.post("/api/v1/orders/", {**order_payload, **overrides}, format="json")
        assert response.status_code == 201, response.data
        return response.data
    return _create

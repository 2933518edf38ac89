import pytest

from fleet import models

TASK = {
    "api_key": "tookan-key",
    "order_id": "TK-1",
    "customer_name": "Naledi Khumalo",
    "job_pickup_address": "Sandton City",
    "job_pickup_latitude": -26.1070,
    "job_pickup_longitude": 28.0560,
    "job_delivery_phone": "+27831234567",
    "job_delivery_address": "Rosebank",
    "job_delivery_latitude": -26.1450,
    "job_delivery_longitude": 28.0410,
    "layout_type": 2,
}


@pytest.fixture
def known_agent(fleet, seeded):
    return fleet.id_map.external_id("driver", "D001")


def test_create_task_and_fetch_details(api, seeded):
    response = api.post("/api/v1/tookan/v2/create_task", TASK, format="json")

    assert response.status_code == 200
    assert response.data["status"] == 200
    job_id = response.data["data"]["job_id"]

    order = models.Order.objects.get(pk=response.data["data"]["job_token"])
    assert order.store_id == "S001"
    assert order.order_type == "DELIVERY"
    assert models.TookanIdMapping.objects.get(pk=job_id).internal_id == order.pk

    details = api.post("/api/v1/tookan/get_job_details", {"api_key": "tookan-key", "job_id": job_id}, format="json")
    assert details.status_code == 200
    assert details.data["data"]["job_delivery_address"] == "Rosebank"


def test_assign_agent_over_http(api, known_agent):
    created = api.post("/api/v1/tookan/v2/create_task", TASK, format="json").data["data"]

    response = api.post("/api/v1/tookan/assign_agent", {
        "api_key": "tookan-key",
        "job_id": created["job_id"],
        "fleet_id": known_agent,
        "job_status": 6,
    }, format="json")

    assert response.status_code == 200
    assert response.data["data"]["job_status"] == 6
    order = models.Order.objects.get(pk=created["job_token"])
    assert order.status == "Successful"
    assert order.driver_id == "D001"


def test_add_and_edit_agent(api, seeded, fleet):
    team_id = fleet.id_map.external_id("team", "T002")

    added = api.post("/api/v1/tookan/add_agent", {
        "api_key": "tookan-key",
        "email": "bongani@example.com",
        "phone": "+27820000004",
        "username": "bongani",
        "first_name": "Bongani",
        "transport_type": 5,
        "team_ids": str(team_id),
    }, format="json")
    assert added.status_code == 200
    fleet_id = added.data["data"]["fleet_id"]

    edited = api.post("/api/v1/tookan/edit_agent", {
        "api_key": "tookan-key",
        "fleet_id": fleet_id,
        "last_name": "Zulu",
        "first_name": "Bongani",
    }, format="json")
    assert edited.status_code == 200

    driver = models.Driver.objects.get(pk="D004")
    assert driver.name == "Bongani Zulu"
    assert driver.vehicle_type == "Foot"
    assert driver.team_id == "T002"


def test_error_envelopes(api, seeded):
    missing_key = api.post("/api/v1/tookan/v2/create_task", {**TASK, "api_key": ""}, format="json")
    assert missing_key.status_code == 400
    assert missing_key.data == {"status": 400, "message": "API key is required", "data": None}

    unknown_task = api.post("/api/v1/tookan/get_job_details", {"api_key": "k", "job_id": 999}, format="json")
    assert unknown_task.status_code == 404
    assert unknown_task.data["message"] == "Task not found"

    unknown_op = api.post("/api/v1/tookan/delete_task", {"api_key": "k"}, format="json")
    assert unknown_op.status_code == 404


def test_failed_fleet_id_allocation_rolls_back_the_agent(api, seeded, fleet, monkeypatch):
    def broken(kind, internal_id):
        raise RuntimeError("id table unavailable")

    monkeypatch.setattr(fleet.id_map, "external_id", broken)

    response = api.post("/api/v1/tookan/add_agent", {
        "api_key": "tookan-key",
        "email": "bongani@example.com",
        "phone": "+27820000004",
        "username": "bongani",
    }, format="json")

    assert response.status_code == 500
    assert not models.Driver.objects.filter(email="bongani@example.com").exists()
    assert models.Driver.objects.count() == 3

import pytest
import requests

from common.config import FleetSettings
from common.geo import Location
from drivers.models import Driver, VehicleType
from orders.models import Order
from tookan import TookanClient, TookanClientError


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self._body = body

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSession:
    """
    Replays a scripted list of responses (or exceptions) and records every call.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        step = self.script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step


def ok(data):
    return FakeResponse(200, {"status": 200, "message": "Success", "data": data})


@pytest.fixture
def settings():
    return FleetSettings(
        tookan_base_url="https://api.tookan.test/",
        tookan_api_key="secret",
        tookan_timeout_seconds=2.0,
        tookan_max_retries=3,
        tookan_backoff_seconds=0.5,
    )


@pytest.fixture
def sleeps():
    return []


def make_client(settings, sleeps, *script):
    session = FakeSession(*script)
    return TookanClient(settings=settings, session=session, sleep=sleeps.append), session


def test_create_task_posts_translated_order(settings, sleeps):
    client, session = make_client(settings, sleeps, ok({"job_id": 71}))
    order = Order.new(
        title="ORD-1",
        customer_name="Naledi",
        customer_phone="+27831234567",
        origin=Location(-26.1, 28.05, "Sandton"),
        destination=Location(-26.14, 28.04, "Rosebank"),
        store_id="S001",
    )

    data = client.create_task(order, fleet_id=101, team_id=11)

    assert data == {"job_id": 71}
    call = session.calls[0]
    assert call["url"] == "https://api.tookan.test/v2/create_task"
    assert call["timeout"] == 2.0
    assert call["json"]["api_key"] == "secret"
    assert call["json"]["order_id"] == "ORD-1"
    assert call["json"]["fleet_id"] == 101
    assert sleeps == []


def test_add_agent_body(settings, sleeps):
    client, session = make_client(settings, sleeps, ok({"fleet_id": 5}))
    driver = Driver.new("D001", "Thabo Nkosi", phone="+27820000001", email="thabo@example.com",
                        vehicle_type=VehicleType.SCOOTER)

    client.add_agent(driver, username="thabo", team_id=11)

    body = session.calls[0]["json"]
    assert body["first_name"] == "Thabo"
    assert body["last_name"] == "Nkosi"
    assert body["transport_type"] == 4
    assert body["team_ids"] == "11"


def test_assign_agent_only_sends_status_when_given(settings, sleeps):
    client, session = make_client(settings, sleeps, ok({}), ok({}))

    client.assign_agent(7, 101)
    client.assign_agent(7, 101, job_status=3)

    assert "job_status" not in session.calls[0]["json"]
    assert session.calls[1]["json"]["job_status"] == 3
    assert session.calls[1]["url"].endswith("/v2/assign_task")


def test_retries_transport_errors_with_backoff(settings, sleeps):
    client, session = make_client(
        settings,
        sleeps,
        requests.ConnectionError("reset"),
        FakeResponse(503, {"status": 503, "message": "busy"}),
        ok({"job_id": 1}),
    )

    assert client.get_job_details(1) == {"job_id": 1}
    assert len(session.calls) == 3
    assert sleeps == [0.5, 1.0]


def test_gives_up_after_max_retries(settings, sleeps):
    client, session = make_client(
        settings,
        sleeps,
        requests.Timeout("slow"),
        requests.Timeout("slow"),
        requests.Timeout("slow"),
    )

    with pytest.raises(TookanClientError, match="unreachable"):
        client.get_job_details(1)
    assert len(session.calls) == 3
    assert sleeps == [0.5, 1.0]


def test_last_5xx_is_reported(settings, sleeps):
    busy = FakeResponse(502, {"status": 502, "message": "Bad gateway"})
    client, _ = make_client(settings, sleeps, busy, busy, busy)

    with pytest.raises(TookanClientError) as excinfo:
        client.get_job_details(1)
    assert excinfo.value.status_code == 502


def test_client_errors_are_not_retried(settings, sleeps):
    client, session = make_client(settings, sleeps, FakeResponse(200, {"status": 101, "message": "Invalid Key"}))

    with pytest.raises(TookanClientError, match="Invalid Key") as excinfo:
        client.edit_agent(101, phone="+27820000000")
    assert excinfo.value.status_code == 101
    assert len(session.calls) == 1
    assert session.calls[0]["json"]["fleet_id"] == 101


def test_non_json_body(settings, sleeps):
    client, _ = make_client(settings, sleeps, FakeResponse(200, ValueError("no json")))

    with pytest.raises(TookanClientError, match="non-JSON"):
        client.get_job_details(1)


def test_missing_configuration():
    with pytest.raises(ValueError):
        TookanClient(settings=FleetSettings(tookan_api_key="secret"), session=FakeSession())
    with pytest.raises(ValueError):
        TookanClient(settings=FleetSettings(tookan_base_url="https://api.tookan.test"), session=FakeSession())

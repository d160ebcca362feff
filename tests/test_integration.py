"""End-to-end tests through the FastAPI app with stubbed upstream services."""

import time

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import CUSTOMER, DRIVER, RESTAURANT, FakeStatusSource, OSRMStub, snapshot
from src.tracking.main import create_app
from src.tracking.services.routing.osrm_client import OSRMClient
from src.tracking.services.tracking.registry import TrackingRegistry
from src.tracking.services.tracking.session import TrackingSession


class DummySessionFactory:
    def __init__(self, responses):
        self.responses = responses
        self.osrm = OSRMStub()
        self.sources: dict[str, FakeStatusSource] = {}

    def __call__(self, order_id, restaurant_name=None):
        source = FakeStatusSource(list(self.responses))
        self.sources[order_id] = source
        client = OSRMClient(base_url="http://osrm.test", max_retries=0, transport=httpx.MockTransport(self.osrm))
        return TrackingSession(
            order_id,
            status_source=source,
            route_provider=client,
            interval=0.01,
            restaurant_name=restaurant_name,
        )


@pytest.fixture
def factory():
    located = dict(restaurant_location=RESTAURANT, customer_location=CUSTOMER, driver_location=DRIVER)
    return DummySessionFactory([snapshot("picked_up", **located)])


@pytest.fixture
def client(factory):
    app = create_app(registry=TrackingRegistry(factory))
    with TestClient(app) as test_client:
        yield test_client


def _wait_for(client, path, predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while True:
        body = client.get(path).json()
        if predicate(body) or time.monotonic() > deadline:
            return body
        time.sleep(0.01)


def test_root_describes_service(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_health_reports_active_sessions(client):
    assert client.get("/api/health").json()["active_sessions"] == 0

    client.post("/api/tracking/order-1")

    body = client.get("/api/health").json()
    assert body["status"] == "ok"
    assert body["active_sessions"] == 1


def test_start_then_poll_tracking_view(client, factory):
    response = client.post("/api/tracking/order-1", json={"restaurant_name": "Spice Garden"})
    assert response.status_code == 200
    assert response.json()["is_running"] is True

    body = _wait_for(client, "/api/tracking/order-1", lambda b: b["map"]["polylines"])

    assert body["status"] == "picked_up"
    assert body["ordinal"] == 2
    assert body["title"] == "Order Picked Up"
    assert [step["active"] for step in body["progress"]] == [False, False, True, False, False]
    markers = body["map"]["markers"]
    assert [m["id"] for m in markers] == ["restaurant", "customer", "driver"]
    assert markers[0]["title"] == "Spice Garden"
    polyline = body["map"]["polylines"][0]
    assert polyline["strokeColor"] == "#10B981"
    assert polyline["coordinates"][0] == {"latitude": DRIVER.latitude, "longitude": DRIVER.longitude}
    assert body["map"]["bounds"]["action"] == "fitToCoordinates"
    assert body["map"]["bounds"]["edgePadding"]["top"] == 60
    assert factory.osrm.count == 1


def test_starting_twice_reuses_running_session(client, factory):
    client.post("/api/tracking/order-1")
    first_source = factory.sources["order-1"]

    client.post("/api/tracking/order-1")

    assert factory.sources["order-1"] is first_source


def test_stop_tracking(client):
    client.post("/api/tracking/order-1")

    response = client.delete("/api/tracking/order-1")

    assert response.status_code == 200
    assert response.json() == {"order_id": "order-1", "stopped": True}
    assert client.get("/api/tracking/order-1").status_code == 404


def test_unknown_order_returns_404(client):
    assert client.get("/api/tracking/missing").status_code == 404
    assert client.delete("/api/tracking/missing").status_code == 404


def test_unconfigured_status_api_returns_503(monkeypatch):
    from src.tracking.services.tracking import status_client

    monkeypatch.setattr(status_client.settings, "api_base_url", None)
    app = create_app()

    with TestClient(app) as test_client:
        response = test_client.post("/api/tracking/order-1")

    assert response.status_code == 503

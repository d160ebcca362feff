from __future__ import annotations

import asyncio
from typing import Callable

import httpx
import pytest

from src.tracking.models.domain import DeliverySnapshot, GeoPoint, OrderStatus
from src.tracking.services.routing.osrm_client import OSRMClient
from src.tracking.services.routing.polyline import encode_polyline
from src.tracking.services.tracking.status_client import StatusFetchError

RESTAURANT = GeoPoint(6.9271, 79.8612)
CUSTOMER = GeoPoint(6.9020, 79.8700)
DRIVER = GeoPoint(6.9150, 79.8650)


def snapshot(status: str | None = None, **fields) -> DeliverySnapshot:
    return DeliverySnapshot(status=OrderStatus.parse(status), raw_status=status, **fields)


class FakeStatusSource:
    """Replays queued snapshots/exceptions; optionally blocks each fetch on a gate."""

    def __init__(self, responses=None, gate: asyncio.Event | None = None) -> None:
        self.responses = list(responses or [])
        self.gate = gate
        self.calls = 0
        self.order_ids: list[str] = []

    def push(self, item) -> None:
        self.responses.append(item)

    async def fetch(self, order_id: str) -> DeliverySnapshot:
        self.calls += 1
        self.order_ids.append(order_id)
        if self.gate is not None:
            await self.gate.wait()
        if not self.responses:
            raise StatusFetchError("no response queued")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class OSRMStub:
    """httpx handler that answers /route requests with a road-like three point path."""

    def __init__(self, status_code: int = 200, duration: float = 600.0, distance: float = 4200.0) -> None:
        self.status_code = status_code
        self.duration = duration
        self.distance = distance
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"code": "Error", "message": "boom"})
        coords = request.url.path.split("/")[-1]
        (lon_a, lat_a), (lon_b, lat_b) = (tuple(map(float, pair.split(","))) for pair in coords.split(";"))
        middle = ((lat_a + lat_b) / 2 + 0.001, (lon_a + lon_b) / 2)
        geometry = encode_polyline([(lat_a, lon_a), middle, (lat_b, lon_b)])
        return httpx.Response(
            200,
            json={
                "code": "Ok",
                "routes": [{"geometry": geometry, "duration": self.duration, "distance": self.distance}],
            },
        )

    @property
    def count(self) -> int:
        return len(self.requests)


@pytest.fixture
def osrm_stub() -> OSRMStub:
    return OSRMStub()


@pytest.fixture
def make_osrm_client() -> Callable[[OSRMStub], OSRMClient]:
    def factory(stub: OSRMStub) -> OSRMClient:
        return OSRMClient(
            base_url="http://osrm.test",
            max_retries=0,
            backoff_seconds=0.0,
            transport=httpx.MockTransport(stub),
        )

    return factory

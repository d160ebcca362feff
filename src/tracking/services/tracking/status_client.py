"""Client for the marketplace delivery status endpoint."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

import httpx
from pydantic import ValidationError

from ...config import settings
from ...models.domain import DeliverySnapshot, DriverInfo, Eta, GeoPoint, OrderStatus
from ...schemas.delivery import DeliveryStatusPayload, DriverPayload, EtaWindowPayload, LocationPayload

logger = logging.getLogger(__name__)


class StatusFetchError(Exception):
    """A poll failed: network error, non-2xx response or unparseable body."""


class StatusSource(Protocol):
    async def fetch(self, order_id: str) -> DeliverySnapshot: ...


class DeliveryStatusClient:
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        token_provider: Callable[[], Optional[str]] | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.api_base_url
        if not self.base_url:
            raise ValueError("Delivery status API base URL is not configured.")
        self.base_url = self.base_url.rstrip("/")
        self.token = token if token is not None else settings.api_token
        self.token_provider = token_provider
        self.timeout = timeout if timeout is not None else settings.status_timeout_seconds
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        token = self.token_provider() if self.token_provider else self.token
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def fetch(self, order_id: str) -> DeliverySnapshot:
        url = f"{self.base_url}/orders/{order_id}/delivery-status"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, headers=self._headers())
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            raise StatusFetchError(f"Status endpoint returned {e.response.status_code} for order {order_id}") from e
        except httpx.HTTPError as e:
            raise StatusFetchError(f"Status request for order {order_id} failed: {e}") from e
        except ValueError as e:
            raise StatusFetchError(f"Status body for order {order_id} is not JSON: {e}") from e

        if not isinstance(body, dict):
            raise StatusFetchError(f"Status body for order {order_id} is not an object.")
        return parse_delivery_status(body)


def parse_delivery_status(body: dict, received_at: datetime | None = None) -> DeliverySnapshot:
    """Convert a delivery-status body into a snapshot; raises StatusFetchError when malformed."""
    try:
        payload = DeliveryStatusPayload.model_validate(body)
    except ValidationError as e:
        raise StatusFetchError(f"Malformed delivery status body: {e.error_count()} error(s)") from e

    customer = payload.customer_location
    return DeliverySnapshot(
        status=OrderStatus.parse(payload.status),
        raw_status=payload.status,
        driver=_driver(payload.driver),
        driver_location=_point(payload.driver_location),
        customer_location=_point(customer),
        customer_address=customer.address if customer and customer.address else None,
        restaurant_location=_point(payload.restaurant_location),
        eta=_eta(payload),
        received_at=received_at or datetime.now(timezone.utc),
    )


def _point(location: LocationPayload | None) -> Optional[GeoPoint]:
    if location is None or location.latitude is None or location.longitude is None:
        return None
    lat, lon = location.latitude, location.longitude
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        logger.debug(f"Ignoring out-of-range location ({lat}, {lon})")
        return None
    return GeoPoint(lat, lon)


def _driver(driver: DriverPayload | None) -> Optional[DriverInfo]:
    if driver is None:
        return None
    return DriverInfo(
        full_name=driver.full_name,
        phone=driver.phone,
        photo_url=driver.photo_url,
        vehicle_type=driver.vehicle_type,
        vehicle_number=driver.vehicle_number,
        rating=driver.rating,
    )


def _eta(payload: DeliveryStatusPayload) -> Optional[Eta]:
    eta = payload.eta
    if isinstance(eta, EtaWindowPayload) and eta.eta_range_min is not None and eta.eta_range_max is not None:
        return Eta(
            min_minutes=eta.eta_range_min,
            max_minutes=eta.eta_range_max,
            driver_status=eta.driver_status,
        )
    duration = eta if isinstance(eta, float) else payload.estimated_duration
    if duration:
        return Eta(min_minutes=duration, max_minutes=duration, en_route=True)
    return None

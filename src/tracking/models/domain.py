"""Domain models for order tracking: statuses, locations, snapshots and routes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    """Closed set of delivery statuses reported by the backend."""

    PLACED = "placed"
    PENDING = "pending"
    RECEIVED = "received"
    ACCEPTED = "accepted"
    PICKED_UP = "picked_up"
    ON_THE_WAY = "on_the_way"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: object) -> Optional["OrderStatus"]:
        """Return the matching status, or None for anything outside the closed set."""
        if isinstance(value, OrderStatus):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @property
    def ordinal(self) -> Optional[int]:
        return STATUS_ORDINALS.get(self)

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def shows_map(self) -> bool:
        return self in MAP_STATUSES

    @property
    def driver_leg(self) -> bool:
        """True once the driver carries the order, so routes start at the driver."""
        return self in (OrderStatus.PICKED_UP, OrderStatus.ON_THE_WAY)


# placed is display-only; pending and received share the first progress step.
STATUS_ORDINALS: dict[OrderStatus, int] = {
    OrderStatus.PLACED: -1,
    OrderStatus.PENDING: 0,
    OrderStatus.RECEIVED: 0,
    OrderStatus.ACCEPTED: 1,
    OrderStatus.PICKED_UP: 2,
    OrderStatus.ON_THE_WAY: 3,
    OrderStatus.DELIVERED: 4,
}

PROGRESS_STEPS: tuple[OrderStatus, ...] = (
    OrderStatus.RECEIVED,
    OrderStatus.ACCEPTED,
    OrderStatus.PICKED_UP,
    OrderStatus.ON_THE_WAY,
    OrderStatus.DELIVERED,
)

TERMINAL_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.REJECTED})

MAP_STATUSES = frozenset(
    {
        OrderStatus.PENDING,
        OrderStatus.RECEIVED,
        OrderStatus.ACCEPTED,
        OrderStatus.PICKED_UP,
        OrderStatus.ON_THE_WAY,
    }
)

EN_ROUTE_DRIVER_STATUSES = frozenset({"on_the_way", "at_customer"})


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A WGS84 coordinate in degrees."""

    latitude: float
    longitude: float

    def rounded(self, precision: int = 4) -> tuple[float, float]:
        return (round(self.latitude, precision), round(self.longitude, precision))

    def key(self, precision: int = 4) -> str:
        return f"{self.latitude:.{precision}f},{self.longitude:.{precision}f}"

    def as_lat_lon(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


@dataclass(frozen=True, slots=True)
class DriverInfo:
    full_name: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    vehicle_type: Optional[str] = None
    vehicle_number: Optional[str] = None
    rating: Optional[float] = None


@dataclass(frozen=True, slots=True)
class Eta:
    """Arrival estimate in minutes from now, either a window or a single duration."""

    min_minutes: float
    max_minutes: float
    driver_status: Optional[str] = None
    en_route: bool = False

    @property
    def is_on_the_way(self) -> bool:
        return self.en_route or (self.driver_status or "").lower() in EN_ROUTE_DRIVER_STATUSES


@dataclass(frozen=True, slots=True)
class DeliverySnapshot:
    """Point-in-time state returned by one poll of the delivery status endpoint."""

    status: Optional[OrderStatus] = None
    raw_status: Optional[str] = None
    driver: Optional[DriverInfo] = None
    driver_location: Optional[GeoPoint] = None
    customer_location: Optional[GeoPoint] = None
    customer_address: Optional[str] = None
    restaurant_location: Optional[GeoPoint] = None
    eta: Optional[Eta] = None
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def merged_onto(self, previous: Optional["DeliverySnapshot"]) -> "DeliverySnapshot":
        """Replace field by field: values present here win, absent ones keep the previous value."""
        if previous is None:
            return self
        return replace(
            self,
            driver=self.driver if self.driver is not None else previous.driver,
            driver_location=self.driver_location if self.driver_location is not None else previous.driver_location,
            customer_location=(
                self.customer_location if self.customer_location is not None else previous.customer_location
            ),
            customer_address=(
                self.customer_address if self.customer_address is not None else previous.customer_address
            ),
            restaurant_location=(
                self.restaurant_location if self.restaurant_location is not None else previous.restaurant_location
            ),
            eta=self.eta if self.eta is not None else previous.eta,
        )


@dataclass(frozen=True, slots=True)
class RouteContext:
    """Inputs needed to pick route endpoints for the current status."""

    status: Optional[OrderStatus]
    driver_location: Optional[GeoPoint] = None
    customer_location: Optional[GeoPoint] = None
    restaurant_location: Optional[GeoPoint] = None

    @classmethod
    def from_snapshot(cls, snapshot: DeliverySnapshot) -> "RouteContext":
        return cls(
            status=snapshot.status,
            driver_location=snapshot.driver_location,
            customer_location=snapshot.customer_location,
            restaurant_location=snapshot.restaurant_location,
        )

    def endpoints(self) -> Optional[tuple[GeoPoint, GeoPoint]]:
        if self.status is not None and self.status.driver_leg:
            origin = self.driver_location
        else:
            origin = self.restaurant_location
        destination = self.customer_location
        if origin is None or destination is None:
            return None
        return origin, destination


def build_cache_key(origin: GeoPoint, destination: GeoPoint, precision: int = 4) -> str:
    return f"{origin.key(precision)}-{destination.key(precision)}"


@dataclass(frozen=True, slots=True)
class Route:
    origin: GeoPoint
    destination: GeoPoint
    coordinates: tuple[GeoPoint, ...]
    duration_seconds: Optional[float] = None
    distance_meters: Optional[float] = None
    is_fallback: bool = False

    def __post_init__(self) -> None:
        if len(self.coordinates) < 2:
            raise ValueError("A route needs at least two coordinates.")

    @classmethod
    def straight_line(cls, origin: GeoPoint, destination: GeoPoint) -> "Route":
        return cls(origin=origin, destination=destination, coordinates=(origin, destination), is_fallback=True)

"""One tracked order: tracker events feeding route resolution, map view and ETA text."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ...models.domain import DeliverySnapshot, DriverInfo, OrderStatus, Route, RouteContext
from ..eta import ETACalculator, format_minutes, format_window
from ..geospatial import path_length_km
from ..map_view import MapView, build_map_view
from ..routing.resolver import RouteProvider, RouteResolver
from .events import LocationUpdated, StatusChanged
from .status_client import StatusSource
from .tracker import StatusTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StatusCopy:
    title: str
    subtitle: str
    message: str


STATUS_COPY: dict[Optional[OrderStatus], StatusCopy] = {
    None: StatusCopy("Tracking", "", ""),
    OrderStatus.PLACED: StatusCopy(
        "Order Placed!",
        "We've received your order",
        "Your order has been placed successfully. We're notifying the restaurant.",
    ),
    OrderStatus.PENDING: StatusCopy(
        "Preparing Your Order",
        "The restaurant is cooking your meal",
        "Your meal is being prepared.",
    ),
    OrderStatus.RECEIVED: StatusCopy(
        "Preparing Your Order",
        "The restaurant is cooking your meal",
        "Your meal is being prepared.",
    ),
    OrderStatus.ACCEPTED: StatusCopy(
        "Driver Accepted",
        "A driver has accepted your order",
        "Your driver is on the way to pick up your order.",
    ),
    OrderStatus.PICKED_UP: StatusCopy(
        "Order Picked Up",
        "Driver has picked up your order",
        "Your order is now with the driver and on the way.",
    ),
    OrderStatus.ON_THE_WAY: StatusCopy("On The Way", "Your driver is heading to your location", ""),
    OrderStatus.DELIVERED: StatusCopy("Order Delivered!", "Enjoy your meal!", ""),
    OrderStatus.CANCELLED: StatusCopy("Order Cancelled", "This order was cancelled", ""),
    OrderStatus.REJECTED: StatusCopy("Order Rejected", "The restaurant could not accept this order", ""),
}

_NO_ETA_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REJECTED})


@dataclass(frozen=True, slots=True)
class TrackingView:
    order_id: str
    status: Optional[OrderStatus]
    ordinal: Optional[int]
    copy: StatusCopy
    eta_text: Optional[str]
    eta_window_text: Optional[str]
    route_duration_text: Optional[str]
    route_distance_km: Optional[float]
    driver: Optional[DriverInfo]
    customer_address: Optional[str]
    map: MapView
    is_running: bool
    updated_at: Optional[datetime]


class TrackingSession:
    def __init__(
        self,
        order_id: str,
        *,
        status_source: StatusSource,
        route_provider: RouteProvider,
        interval: float | None = None,
        eta_calculator: ETACalculator | None = None,
        resolver: RouteResolver | None = None,
        restaurant_name: str | None = None,
    ) -> None:
        self.order_id = order_id
        self.tracker = StatusTracker(status_source, interval=interval)
        self.resolver = resolver or RouteResolver(route_provider)
        self.eta = eta_calculator or ETACalculator()
        self.restaurant_name = restaurant_name
        self.route: Optional[Route] = None
        self.transitions: list[StatusChanged] = []
        self._alive = False
        self._route_tasks: set[asyncio.Task] = set()
        self._unsubscribers: list[Callable[[], None]] = []

    @property
    def is_running(self) -> bool:
        return self._alive

    def start(self, *, autopoll: bool = True) -> None:
        if not self._unsubscribers:
            self._unsubscribers = [
                self.tracker.subscribe(StatusChanged, self._on_status_changed),
                self.tracker.subscribe(LocationUpdated, self._on_location_updated),
            ]
        self._alive = True
        self.tracker.start(self.order_id, autopoll=autopoll)

    async def refresh(self) -> bool:
        """Poll once out of band and wait for any route work it triggers."""
        applied = await self.tracker.poll_once()
        await self.settle()
        return applied

    async def settle(self) -> None:
        while self._route_tasks:
            await asyncio.gather(*list(self._route_tasks), return_exceptions=True)

    def stop(self) -> None:
        self._alive = False
        self.tracker.stop()
        for task in list(self._route_tasks):
            task.cancel()
        self._route_tasks.clear()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self.resolver.clear()
        self.route = None

    def _on_status_changed(self, event: StatusChanged) -> None:
        self.transitions.append(event)

    def _on_location_updated(self, event: LocationUpdated) -> None:
        if not self._alive:
            return
        snapshot = event.snapshot
        if snapshot.status is None or not snapshot.status.shows_map:
            return
        task = asyncio.get_running_loop().create_task(self._resolve(RouteContext.from_snapshot(snapshot)))
        self._route_tasks.add(task)
        task.add_done_callback(self._route_tasks.discard)

    async def _resolve(self, context: RouteContext) -> None:
        try:
            route = await self.resolver.resolve(context)
        except Exception:
            logger.exception(f"Route resolution failed for order {self.order_id}")
            return
        if route is not None and self._alive:
            self.route = route

    @property
    def view(self) -> TrackingView:
        snapshot = self.tracker.snapshot
        status = self.tracker.status
        return TrackingView(
            order_id=self.order_id,
            status=status,
            ordinal=self.tracker.ordinal,
            copy=STATUS_COPY.get(status, STATUS_COPY[None]),
            eta_text=self._eta_text(snapshot, status),
            eta_window_text=self._eta_window_text(snapshot, status),
            route_duration_text=self._route_duration_text(),
            route_distance_km=self._route_distance_km(),
            driver=snapshot.driver if snapshot else None,
            customer_address=snapshot.customer_address if snapshot else None,
            map=build_map_view(snapshot, self.route, restaurant_name=self.restaurant_name),
            is_running=self._alive,
            updated_at=snapshot.received_at if snapshot else None,
        )

    def _eta_text(self, snapshot: Optional[DeliverySnapshot], status: Optional[OrderStatus]) -> Optional[str]:
        if status in _NO_ETA_STATUSES:
            return None
        if snapshot is not None and snapshot.eta is not None:
            eta = snapshot.eta
            return self.eta.format(eta.min_minutes, eta.max_minutes, is_on_the_way=eta.is_on_the_way)
        if self.route is not None and self.route.duration_seconds:
            return self.eta.format_duration(
                self.route.duration_seconds,
                is_on_the_way=status == OrderStatus.ON_THE_WAY,
            )
        return self.eta.placeholder

    def _eta_window_text(self, snapshot: Optional[DeliverySnapshot], status: Optional[OrderStatus]) -> Optional[str]:
        if status in _NO_ETA_STATUSES or snapshot is None or snapshot.eta is None:
            return None
        eta = snapshot.eta
        if eta.min_minutes <= 0 or eta.max_minutes <= 0:
            return None
        return format_window(eta.min_minutes, eta.max_minutes)

    def _route_duration_text(self) -> Optional[str]:
        if self.route is None or not self.route.duration_seconds:
            return None
        return format_minutes(self.route.duration_seconds / 60)

    def _route_distance_km(self) -> Optional[float]:
        if self.route is None:
            return None
        if self.route.distance_meters is not None:
            return round(self.route.distance_meters / 1000, 1)
        return round(path_length_km(self.route.coordinates), 1)

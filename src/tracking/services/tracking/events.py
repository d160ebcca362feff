"""Typed events published by the status tracker."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from ...models.domain import DeliverySnapshot, OrderStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StatusChanged:
    order_id: str
    previous: Optional[OrderStatus]
    current: OrderStatus

    @property
    def ordinal(self) -> Optional[int]:
        return self.current.ordinal


@dataclass(frozen=True, slots=True)
class LocationUpdated:
    order_id: str
    snapshot: DeliverySnapshot


TrackingEvent = StatusChanged | LocationUpdated
E = TypeVar("E", StatusChanged, LocationUpdated)


class EventBus:
    """Synchronous publish/subscribe keyed by event type."""

    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> Callable[[], None]:
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)

        return unsubscribe

    def publish(self, event: TrackingEvent) -> None:
        for handler in list(self._handlers[type(event)]):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Subscriber {handler!r} failed on {type(event).__name__}")

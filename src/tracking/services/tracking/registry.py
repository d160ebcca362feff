"""Keeps one tracking session per order for the API layer."""

from __future__ import annotations

import logging
from typing import Callable, Iterator, Optional

from ..routing.osrm_client import OSRMClient
from .session import TrackingSession
from .status_client import DeliveryStatusClient

logger = logging.getLogger(__name__)

SessionFactory = Callable[[str, Optional[str]], TrackingSession]


def default_session_factory(order_id: str, restaurant_name: Optional[str] = None) -> TrackingSession:
    return TrackingSession(
        order_id,
        status_source=DeliveryStatusClient(),
        route_provider=OSRMClient(),
        restaurant_name=restaurant_name,
    )


class TrackingRegistry:
    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self._factory = session_factory or default_session_factory
        self._sessions: dict[str, TrackingSession] = {}

    def start(self, order_id: str, restaurant_name: Optional[str] = None) -> TrackingSession:
        """Start tracking ``order_id``; an already running session is returned as is."""
        session = self._sessions.get(order_id)
        if session is not None and session.is_running:
            return session
        session = self._factory(order_id, restaurant_name)
        session.start()
        self._sessions[order_id] = session
        logger.info(f"Started tracking session for order {order_id} ({len(self._sessions)} active)")
        return session

    def get(self, order_id: str) -> TrackingSession:
        return self._sessions[order_id]

    def stop(self, order_id: str) -> None:
        session = self._sessions.pop(order_id)
        session.stop()

    def stop_all(self) -> None:
        for order_id in list(self._sessions):
            self.stop(order_id)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._sessions

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._sessions))

    def __len__(self) -> int:
        return len(self._sessions)

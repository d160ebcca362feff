"""Order tracking services."""

from .events import EventBus, LocationUpdated, StatusChanged
from .registry import TrackingRegistry
from .session import TrackingSession, TrackingView
from .status_client import DeliveryStatusClient, StatusFetchError
from .tracker import StatusTracker

__all__ = [
    "EventBus",
    "LocationUpdated",
    "StatusChanged",
    "StatusTracker",
    "DeliveryStatusClient",
    "StatusFetchError",
    "TrackingSession",
    "TrackingView",
    "TrackingRegistry",
]
